"""CLI entry point for exporting kernel conformance reports."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from testbed_report import derivation
from testbed_report.config import ExportSettings
from testbed_report.exporter import export_site
from testbed_report.models.metadata import KernelMetadataMap, load_kernel_metadata
from testbed_report.sources.loading import load_source_manifest, registered_sources
from testbed_report.store import DocumentStore


def build_settings(site_url: str | None, base_path: str | None) -> ExportSettings:
    """Apply command line overrides to the default export settings."""
    overrides: dict[str, Any] = {}
    if site_url is not None:
        overrides["site_url"] = site_url
    if base_path is not None:
        overrides["base_path"] = base_path
    return ExportSettings(**overrides)


async def run(
    source_key: str,
    source_config_json: str,
    output_dir: Path,
    metadata_path: Path | None = None,
    site_url: str | None = None,
    base_path: str | None = None,
) -> int:
    """Fetch the result document, export it and return exit code."""
    log = logging.getLogger("testbed_report")

    log.info("Loading source: %s", source_key)
    manifest = load_source_manifest(source_key)

    config_dict = json.loads(source_config_json)
    config = manifest.config_cls(**config_dict)

    metadata: KernelMetadataMap | None = None
    if metadata_path is not None:
        try:
            metadata = load_kernel_metadata(metadata_path)
        except (FileNotFoundError, ValueError) as e:
            log.error("Failed to load kernel metadata: %s", e)
            return 1

    async with manifest.source_factory(config) as source:
        store = DocumentStore(source=source)
        document = await store.refresh()

    if document is None:
        log.error("No result document available: %s", store.error)
        return 1

    settings = build_settings(site_url, base_path)
    paths = await asyncio.to_thread(
        export_site, document, output_dir, metadata, settings
    )

    passed, total = derivation.document_pass_totals(document)
    output = {
        "kernels": len(document.reports),
        "passed": passed,
        "total": total,
        "files": [str(path) for path in paths],
    }
    print(json.dumps(output, indent=2))
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Export Jupyter kernel conformance reports as static files"
    )
    parser.add_argument(
        "--source",
        required=True,
        help=f"Source key ({', '.join(registered_sources())})",
    )
    parser.add_argument(
        "--source-config",
        default="{}",
        help="JSON configuration for the source",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Directory to write the exported files to",
    )
    parser.add_argument(
        "--metadata",
        type=Path,
        default=None,
        help="Path to a kernels.json file with curated kernel metadata",
    )
    parser.add_argument(
        "--site-url",
        default=None,
        help="Public URL of the published site",
    )
    parser.add_argument(
        "--base-path",
        default=None,
        help="Path prefix the site is served under",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            source_key=args.source,
            source_config_json=args.source_config,
            output_dir=args.output_dir,
            metadata_path=args.metadata,
            site_url=args.site_url,
            base_path=args.base_path,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
