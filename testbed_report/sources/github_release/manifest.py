"""GitHub release source manifest."""

from testbed_report.sources.github_release.config import GitHubReleaseConfig
from testbed_report.sources.github_release.source import GitHubReleaseSource
from testbed_report.sources.manifest import SourceManifest

github_release_manifest = SourceManifest(
    config_cls=GitHubReleaseConfig,
    source_factory=GitHubReleaseSource.from_config,
)
