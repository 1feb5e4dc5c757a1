"""Local file source manifest."""

from testbed_report.sources.local_file.config import FileSourceConfig
from testbed_report.sources.local_file.source import LocalFileSource
from testbed_report.sources.manifest import SourceManifest

local_file_manifest = SourceManifest(
    config_cls=FileSourceConfig,
    source_factory=LocalFileSource.from_config,
)
