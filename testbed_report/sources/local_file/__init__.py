"""Local file source module."""

from testbed_report.sources.local_file.config import FileSourceConfig
from testbed_report.sources.local_file.manifest import local_file_manifest
from testbed_report.sources.local_file.source import LocalFileSource

__all__ = ["FileSourceConfig", "LocalFileSource", "local_file_manifest"]
