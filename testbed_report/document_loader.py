"""Loading and validation of conformance result documents."""

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from testbed_report.models.report import ResultDocument

log = logging.getLogger(__name__)


class DocumentValidationError(ValueError):
    """Raised when a result document is malformed."""


def parse_document(payload: str | bytes | Mapping[str, Any]) -> ResultDocument:
    """Validate a result document.

    Args:
        payload: Raw JSON text, or an already-decoded JSON object

    Returns:
        The validated, immutable document

    Raises:
        DocumentValidationError: If the JSON or its structure is invalid

    """
    if isinstance(payload, (str, bytes)):
        if not payload.strip():
            raise DocumentValidationError("Empty result document")
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise DocumentValidationError(f"Invalid JSON in result document: {e}") from e
    else:
        data = payload

    if not isinstance(data, Mapping):
        raise DocumentValidationError(
            f"Invalid result document schema: expected an object, got {type(data).__name__}"
        )

    try:
        return ResultDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentValidationError(f"Invalid result document schema: {e}") from e


async def load_document(path: Path) -> ResultDocument:
    """Load and validate a result document from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        DocumentValidationError: If the file is empty or malformed

    """
    if not path.exists():
        raise FileNotFoundError(f"Result document not found: {path}")

    content = await asyncio.to_thread(path.read_bytes)
    if not content.strip():
        raise DocumentValidationError(f"Empty result document: {path}")

    document = parse_document(content)
    log.info("Loaded %d kernel report(s) from %s", len(document.reports), path)
    return document
