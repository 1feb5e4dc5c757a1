"""Configuration for the GitHub release source."""

from pydantic import BaseModel, SecretStr


class GitHubReleaseConfig(BaseModel):
    """Configuration for the GitHub release source."""

    repo: str = "runtimed/kernel-testbed"
    # None reads the latest release
    tag: str | None = None
    token: SecretStr | None = None
    api_base_url: str = "https://api.github.com"
    asset_name: str = "conformance-matrix.json"
