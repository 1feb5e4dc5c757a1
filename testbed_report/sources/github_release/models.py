"""Pydantic models for GitHub releases API responses."""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel


class ReleaseAsset(BaseModel):
    """A file attached to a release."""

    id: int
    name: str
    browser_download_url: str
    size: int


class Release(BaseModel):
    """A release from the GitHub releases API."""

    id: int
    tag_name: str
    name: str | None = None
    published_at: datetime | None = None
    html_url: str
    assets: Sequence[ReleaseAsset] = ()

    def find_asset(self, asset_name: str) -> ReleaseAsset | None:
        """Return the asset with the given file name, if attached."""
        for asset in self.assets:
            if asset.name == asset_name:
                return asset
        return None


class ReleaseInfo(BaseModel):
    """Summary of a release for history listings."""

    id: int
    tag: str
    name: str | None
    published_at: datetime | None
    url: str
    has_conformance_data: bool
