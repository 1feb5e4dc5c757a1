"""Local file source implementation."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from testbed_report.document_loader import load_document
from testbed_report.models.report import ResultDocument
from testbed_report.sources.base import DocumentFetchError, DocumentSource
from testbed_report.sources.local_file.config import FileSourceConfig


@dataclass(frozen=True, kw_only=True)
class LocalFileSource(DocumentSource):
    """Reads a result document from a JSON file on disk."""

    config: FileSourceConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: FileSourceConfig
    ) -> AsyncGenerator["LocalFileSource", None]:
        yield cls(config=config)

    async def fetch(self) -> ResultDocument:
        try:
            return await load_document(self.config.path)
        except (FileNotFoundError, PermissionError) as e:
            raise DocumentFetchError(str(e)) from e
