"""Integration tests for the GitHub release source."""

import asyncio
import re
from collections.abc import AsyncGenerator

import aiohttp
import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from testbed_report.document_loader import DocumentValidationError
from testbed_report.sources.base import DocumentFetchError
from testbed_report.sources.github_release import (
    GitHubReleaseConfig,
    GitHubReleaseSource,
)
from testbed_report.store import DocumentStore
from testbed_report.testing.factories import (
    KernelReportFactory,
    ResultDocumentFactory,
    TestRecordFactory,
)
from testbed_report.testing.github.payloads import release, release_asset

API_BASE_URL = "http://github.test"
LATEST_URL = f"{API_BASE_URL}/repos/runtimed/kernel-testbed/releases/latest"
ASSET_URL = f"{API_BASE_URL}/repos/runtimed/kernel-testbed/releases/assets/1001"
RELEASES_URL = f"{API_BASE_URL}/repos/runtimed/kernel-testbed/releases"


@pytest.fixture
def config() -> GitHubReleaseConfig:
    """Create test configuration."""
    return GitHubReleaseConfig(api_base_url=API_BASE_URL)


@pytest.fixture
async def source(
    config: GitHubReleaseConfig, aioresponses: aioresponses_cls
) -> AsyncGenerator[GitHubReleaseSource, None]:
    """Create source with managed session."""
    async with GitHubReleaseSource.from_config(config) as impl:
        yield impl


@pytest.fixture
def document_json() -> str:
    """Serialized result document with one kernel."""
    document = ResultDocumentFactory.build(
        reports=[
            KernelReportFactory.build(
                kernel_name="python3",
                results=[TestRecordFactory.build(name="heartbeat")],
            )
        ],
        commit_sha="abc123",
    )
    return document.model_dump_json()


class TestFetch:
    """Tests for fetch."""

    async def test_fetches_latest_release_document(
        self,
        source: GitHubReleaseSource,
        aioresponses: aioresponses_cls,
        document_json: str,
    ) -> None:
        """Downloads the result document attached to the latest release."""
        aioresponses.get(LATEST_URL, payload=release())
        aioresponses.get(ASSET_URL, body=document_json)

        document = await source.fetch()

        assert document.commit_sha == "abc123"
        assert [report.kernel_name for report in document.reports] == ["python3"]
        call = aioresponses.requests[("GET", URL(ASSET_URL))][0]
        assert call.kwargs["headers"]["Accept"] == "application/octet-stream"

    async def test_fetches_tagged_release(
        self,
        aioresponses: aioresponses_cls,
        document_json: str,
    ) -> None:
        """Reads the release of the configured tag."""
        config = GitHubReleaseConfig(api_base_url=API_BASE_URL, tag="v1.2.0")
        aioresponses.get(
            f"{API_BASE_URL}/repos/runtimed/kernel-testbed/releases/tags/v1.2.0",
            payload=release(tag_name="v1.2.0"),
        )
        aioresponses.get(ASSET_URL, body=document_json)

        async with GitHubReleaseSource.from_config(config) as source:
            document = await source.fetch()

        assert document.commit_sha == "abc123"

    async def test_sends_token(
        self,
        aioresponses: aioresponses_cls,
        document_json: str,
    ) -> None:
        """Authenticates with the configured token."""
        config = GitHubReleaseConfig(
            api_base_url=API_BASE_URL, token=SecretStr("test-token")
        )
        aioresponses.get(LATEST_URL, payload=release())
        aioresponses.get(ASSET_URL, body=document_json)

        async with GitHubReleaseSource.from_config(config) as source:
            await source.fetch()
            assert source.session.headers["Authorization"] == "Bearer test-token"

    async def test_no_releases(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Reports that nothing was published yet."""
        aioresponses.get(LATEST_URL, status=404, body="Not Found")

        with pytest.raises(DocumentFetchError, match="No releases found"):
            await source.fetch()

    async def test_unknown_tag(self, aioresponses: aioresponses_cls) -> None:
        """Reports a missing tag."""
        config = GitHubReleaseConfig(api_base_url=API_BASE_URL, tag="v9")
        aioresponses.get(
            f"{API_BASE_URL}/repos/runtimed/kernel-testbed/releases/tags/v9",
            status=404,
        )

        async with GitHubReleaseSource.from_config(config) as source:
            with pytest.raises(DocumentFetchError, match="Release v9 not found"):
                await source.fetch()

    async def test_release_error(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Reports unexpected API statuses."""
        aioresponses.get(LATEST_URL, status=500, body="Server Error")

        with pytest.raises(DocumentFetchError, match="Failed to fetch release: 500"):
            await source.fetch()

    async def test_missing_asset_names_release(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Names the release that lacks the result document."""
        aioresponses.get(
            LATEST_URL,
            payload=release(tag_name="v7", assets=[release_asset(name="other.zip")]),
        )

        with pytest.raises(
            DocumentFetchError, match="No conformance-matrix.json found in release v7"
        ):
            await source.fetch()

    async def test_download_error(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Reports a failed asset download."""
        aioresponses.get(LATEST_URL, payload=release())
        aioresponses.get(ASSET_URL, status=403, body="Forbidden")

        with pytest.raises(
            DocumentFetchError, match="Failed to fetch conformance data: 403"
        ):
            await source.fetch()

    async def test_invalid_document(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Rejects a malformed result document."""
        aioresponses.get(LATEST_URL, payload=release())
        aioresponses.get(ASSET_URL, body='{"reports": []}')

        with pytest.raises(DocumentValidationError, match="generated_at"):
            await source.fetch()

    async def test_connection_error(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Wraps connection failures."""
        aioresponses.get(LATEST_URL, exception=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(DocumentFetchError, match="Failed to reach GitHub"):
            await source.fetch()

    async def test_unexpected_release_payload(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Rejects a release response that is not a release."""
        aioresponses.get(LATEST_URL, payload={})

        with pytest.raises(DocumentFetchError, match="Unexpected release payload"):
            await source.fetch()

    async def test_release_timeout(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Wraps a timed out release request."""
        aioresponses.get(LATEST_URL, exception=asyncio.TimeoutError())

        with pytest.raises(DocumentFetchError, match="Timed out waiting for GitHub"):
            await source.fetch()

    async def test_download_timeout(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Wraps a timed out asset download."""
        aioresponses.get(LATEST_URL, payload=release())
        aioresponses.get(ASSET_URL, exception=asyncio.TimeoutError())

        with pytest.raises(DocumentFetchError, match="Timed out waiting for GitHub"):
            await source.fetch()


class TestReleaseHistory:
    """Tests for release_history."""

    async def test_lists_releases(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Flags releases that carry a result document."""
        aioresponses.get(
            re.compile(rf"^{re.escape(RELEASES_URL)}\?.*$"),
            payload=[
                release(release_id=2, tag_name="v2"),
                release(release_id=1, tag_name="v1", assets=[]),
            ],
        )

        history = await source.release_history(limit=5)

        assert [(info.tag, info.has_conformance_data) for info in history] == [
            ("v2", True),
            ("v1", False),
        ]
        assert history[0].url.endswith("/releases/tag/v2")

    async def test_passes_limit(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Requests the given number of releases."""
        url = f"{RELEASES_URL}?per_page=3"
        aioresponses.get(url, payload=[])

        history = await source.release_history(limit=3)

        assert history == []
        aioresponses.assert_called_once()  # type: ignore[no-untyped-call]

    async def test_raises_on_error(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Raises DocumentFetchError on API failure."""
        aioresponses.get(
            f"{RELEASES_URL}?per_page=10",
            status=502,
            body="Bad Gateway",
        )

        with pytest.raises(DocumentFetchError, match="Failed to fetch releases: 502"):
            await source.release_history()

    async def test_unexpected_payload(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Rejects a response that is not a list of releases."""
        aioresponses.get(f"{RELEASES_URL}?per_page=10", payload={"message": "oops"})

        with pytest.raises(
            DocumentFetchError, match="Unexpected release list payload"
        ):
            await source.release_history()

    async def test_timeout(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Wraps a timed out request."""
        aioresponses.get(
            f"{RELEASES_URL}?per_page=10", exception=asyncio.TimeoutError()
        )

        with pytest.raises(DocumentFetchError, match="Timed out waiting for GitHub"):
            await source.release_history()

    async def test_connection_error(
        self, source: GitHubReleaseSource, aioresponses: aioresponses_cls
    ) -> None:
        """Wraps connection failures."""
        aioresponses.get(
            f"{RELEASES_URL}?per_page=10",
            exception=aiohttp.ClientConnectionError("refused"),
        )

        with pytest.raises(DocumentFetchError, match="Failed to reach GitHub"):
            await source.release_history()


async def test_store_records_unexpected_release_payload(
    source: GitHubReleaseSource, aioresponses: aioresponses_cls
) -> None:
    """Keeps the store usable when GitHub answers with a non-release body."""
    aioresponses.get(LATEST_URL, payload={})
    store = DocumentStore(source=source)

    result = await store.refresh()

    assert result is None
    assert isinstance(store.error, DocumentFetchError)
    assert not store.loading
