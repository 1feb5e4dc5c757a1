"""GitHub release source module."""

from testbed_report.sources.github_release.config import GitHubReleaseConfig
from testbed_report.sources.github_release.manifest import github_release_manifest
from testbed_report.sources.github_release.source import GitHubReleaseSource

__all__ = ["GitHubReleaseConfig", "GitHubReleaseSource", "github_release_manifest"]
