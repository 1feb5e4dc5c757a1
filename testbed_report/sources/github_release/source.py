"""GitHub release source implementation."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from urllib.parse import quote

import aiohttp
from pydantic import TypeAdapter, ValidationError

from testbed_report.document_loader import parse_document
from testbed_report.models.report import ResultDocument
from testbed_report.sources.base import DocumentFetchError, DocumentSource
from testbed_report.sources.github_release.config import GitHubReleaseConfig
from testbed_report.sources.github_release.models import Release, ReleaseInfo

log = logging.getLogger(__name__)

RELEASE_LIST = TypeAdapter(list[Release])


@contextmanager
def transport_errors() -> Iterator[None]:
    """Raise connection failures and timeouts as DocumentFetchError."""
    try:
        yield
    except aiohttp.ClientError as e:
        raise DocumentFetchError(f"Failed to reach GitHub: {e}") from e
    except asyncio.TimeoutError as e:
        raise DocumentFetchError("Timed out waiting for GitHub") from e


@dataclass(frozen=True, kw_only=True)
class GitHubReleaseSource(DocumentSource):
    """Reads the result document attached to a GitHub release."""

    config: GitHubReleaseConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubReleaseConfig
    ) -> AsyncGenerator["GitHubReleaseSource", None]:
        """Create source with managed session lifecycle."""
        headers = {"Accept": "application/vnd.github+json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers=headers,
        ) as session:
            yield cls(config=config, session=session)

    async def fetch(self) -> ResultDocument:
        """Download and validate the result document of the configured release."""
        release = await self.get_release()
        asset = release.find_asset(self.config.asset_name)
        if asset is None:
            raise DocumentFetchError(
                f"No {self.config.asset_name} found in release "
                f"{release.tag_name}. The release may have been created "
                "before reports were published."
            )

        log.info("Downloading %s from release %s", asset.name, release.tag_name)
        url = f"/repos/{self.config.repo}/releases/assets/{asset.id}"
        headers = {"Accept": "application/octet-stream"}
        with transport_errors():
            async with self.session.get(url, headers=headers) as response:
                if response.status != 200:
                    text = await response.text()
                    raise DocumentFetchError(
                        f"Failed to fetch conformance data: {response.status} {text}"
                    )
                content = await response.read()

        return parse_document(content)

    async def get_release(self) -> Release:
        """Fetch the configured release, or the latest one when no tag is set."""
        repo = self.config.repo
        if self.config.tag is None:
            url = f"/repos/{repo}/releases/latest"
        else:
            url = f"/repos/{repo}/releases/tags/{quote(self.config.tag, safe='')}"

        log.info("Fetching release: repo=%s, tag=%s", repo, self.config.tag or "latest")

        with transport_errors():
            async with self.session.get(url) as response:
                if response.status == 404:
                    if self.config.tag is None:
                        raise DocumentFetchError(
                            "No releases found. Conformance reports have not been "
                            "published yet."
                        )
                    raise DocumentFetchError(f"Release {self.config.tag} not found")
                if response.status != 200:
                    text = await response.text()
                    raise DocumentFetchError(
                        f"Failed to fetch release: {response.status} {text}"
                    )
                data = await response.json()

        try:
            return Release.model_validate(data)
        except ValidationError as e:
            raise DocumentFetchError(f"Unexpected release payload: {e}") from e

    async def release_history(self, limit: int = 10) -> Sequence[ReleaseInfo]:
        """List recent releases, flagging those that carry a result document."""
        url = f"/repos/{self.config.repo}/releases"
        params = {"per_page": str(limit)}

        with transport_errors():
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    text = await response.text()
                    raise DocumentFetchError(
                        f"Failed to fetch releases: {response.status} {text}"
                    )
                data = await response.json()

        try:
            releases = RELEASE_LIST.validate_python(data)
        except ValidationError as e:
            raise DocumentFetchError(f"Unexpected release list payload: {e}") from e

        return [
            ReleaseInfo(
                id=release.id,
                tag=release.tag_name,
                name=release.name,
                published_at=release.published_at,
                url=release.html_url,
                has_conformance_data=release.find_asset(self.config.asset_name)
                is not None,
            )
            for release in releases
        ]
