"""Lookup of result document sources registered by installed packages.

Sources are plugins: each package advertises a ``SourceManifest`` under the
``testbed_report.sources`` entry point group, keyed by the name passed to
``--source``.
"""

from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from testbed_report.sources.manifest import SourceManifest

ENTRY_POINT_GROUP = "testbed_report.sources"


class SourceNotFoundError(LookupError):
    """No installed package registers a document source under the key."""


def registered_sources() -> Sequence[str]:
    """Keys of every installed document source, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_source_manifest(key: str) -> SourceManifest[Any]:
    """Resolve the manifest of the document source registered under ``key``.

    Raises:
        SourceNotFoundError: If no installed package registers ``key``

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        registered = ", ".join(registered_sources()) or "none"
        raise SourceNotFoundError(
            f"No document source registered under '{key}'. "
            f"Registered sources: {registered}"
        )

    manifest: SourceManifest[Any] = next(iter(matches)).load()
    return manifest
