"""Static export of a result document as markdown, text and image files."""

import logging
from collections.abc import Sequence
from pathlib import Path

from testbed_report.config import ExportSettings
from testbed_report.models.metadata import KernelMetadataMap
from testbed_report.models.report import ResultDocument
from testbed_report.renderers import image, markdown
from testbed_report.router import KERNEL_SEGMENT, encode_kernel_name

log = logging.getLogger(__name__)

IMAGE_FILE_NAME = "opengraph-image.png"


def write_text(path: Path, content: str) -> Path:
    """Write a text file, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if not content.endswith("\n"):
        content += "\n"
    path.write_text(content, encoding="utf-8")
    log.info("Wrote %s", path)
    return path


def write_image(path: Path, summary: image.ImageSummary) -> Path:
    """Render a preview image into a file, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image.render_png(summary, path)
    return path


def export_site(
    document: ResultDocument,
    out_dir: Path,
    metadata: KernelMetadataMap | None = None,
    settings: ExportSettings | None = None,
) -> Sequence[Path]:
    """Write every static export of a document below ``out_dir``.

    Args:
        document: The validated result document
        out_dir: Directory receiving the files
        metadata: Optional curated kernel metadata
        settings: Titles and links for text exports

    Returns:
        Paths of the written files, in write order

    """
    settings = settings or ExportSettings()
    kernel_dir = out_dir / KERNEL_SEGMENT

    log.info("Exporting %d kernel report(s) to %s", len(document.reports), out_dir)

    written = [
        write_text(
            out_dir / "index.md",
            markdown.render_summary_markdown(document, metadata, settings),
        ),
        write_text(out_dir / "matrix.md", markdown.render_matrix_markdown(document)),
        write_text(
            out_dir / "llms.txt",
            markdown.render_llms_txt(document, metadata, settings),
        ),
        write_text(
            out_dir / "llms-full.txt",
            markdown.render_llms_full_txt(document, metadata, settings),
        ),
        write_image(out_dir / IMAGE_FILE_NAME, image.summarize_document(document)),
    ]

    for report in document.reports:
        name = report.kernel_name
        written.append(
            write_text(
                kernel_dir / markdown.kernel_file_name(name),
                markdown.render_kernel_markdown(document, name, metadata),
            )
        )
        written.append(
            write_image(
                kernel_dir / encode_kernel_name(name) / IMAGE_FILE_NAME,
                image.summarize_kernel(document, name),
            )
        )

    log.info("Exported %d file(s)", len(written))
    return written
