"""Holder of the current result document and its load status."""

import logging
from dataclasses import dataclass, field

from testbed_report.document_loader import DocumentValidationError
from testbed_report.models.report import ResultDocument
from testbed_report.sources.base import DocumentFetchError, DocumentSource

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class DocumentStore:
    """Keeps the last successfully loaded document.

    Refreshes may overlap. Each one that completes successfully replaces the
    document, so the most recently completed fetch wins. A failed fetch
    records its error and leaves the previous document in place. Nothing
    derived from the document is stored here.
    """

    source: DocumentSource
    _document: ResultDocument | None = field(default=None, init=False)
    _error: Exception | None = field(default=None, init=False)
    _in_flight: int = field(default=0, init=False)

    @property
    def document(self) -> ResultDocument | None:
        return self._document

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    async def refresh(self) -> ResultDocument | None:
        """Fetch the document from the source.

        Returns:
            The current document after the fetch, which is the previous one
            when the fetch failed

        """
        self._in_flight += 1
        try:
            document = await self.source.fetch()
        except (DocumentFetchError, DocumentValidationError) as e:
            log.error("Failed to load result document: %s", e)
            self._error = e
        else:
            log.info("Loaded result document with %d report(s)", len(document.reports))
            self._document = document
            self._error = None
        finally:
            self._in_flight -= 1

        return self._document
