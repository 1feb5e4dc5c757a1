"""Abstract base class for result document sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from testbed_report.models.report import ResultDocument


class DocumentFetchError(Exception):
    """Raised when a result document cannot be retrieved."""


@dataclass(frozen=True, kw_only=True)
class DocumentSource(ABC):
    """Abstract base for places a published result document is read from."""

    @abstractmethod
    async def fetch(self) -> ResultDocument:
        """Retrieve and validate the result document.

        Returns:
            The validated document

        Raises:
            DocumentFetchError: If the document is unavailable
            DocumentValidationError: If the retrieved document is malformed

        """
