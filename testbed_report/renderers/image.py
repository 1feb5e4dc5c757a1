"""Fixed-size social preview images summarizing a document or a kernel."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from testbed_report import derivation
from testbed_report.derivation import ScoreBand
from testbed_report.models.report import KernelReport, ResultDocument

log = logging.getLogger(__name__)

WIDTH = 1200
HEIGHT = 630
# Chosen so WIDTH / DPI and HEIGHT / DPI are exact inch sizes.
DPI = 30

COLORS = {
    "base": "#1e1e2e",
    "surface0": "#313244",
    "text": "#cdd6f4",
    "subtext0": "#a6adc8",
    "overlay0": "#6c7086",
    "mauve": "#cba6f7",
    "red": "#f38ba8",
}

BAND_COLORS: Mapping[ScoreBand, str] = {
    "excellent": "#a6e3a1",
    "good": "#f9e2af",
    "fair": "#fab387",
    "poor": "#f38ba8",
}

DISPLAY_NAME_OVERRIDES: Mapping[str, str] = {
    "ipython": "IPython",
    "ipykernel": "IPython",
    "xpython": "Xeus Python",
    "xeus-python": "Xeus Python",
    "ark": "Ark",
    "xr": "Xeus R",
    "xeus-r": "Xeus R",
    "irkernel": "IRkernel",
    "xcpp": "Xeus C++",
    "xcpp17": "Xeus C++17",
    "xcpp20": "Xeus C++20",
    "xeus-cling": "Xeus C++",
    "xhaskell": "Xeus Haskell",
    "xlua": "Xeus Lua",
    "xsql": "Xeus SQL",
    "xsqlite": "Xeus SQLite",
    "xoctave": "Xeus Octave",
    "gonb": "GoNB",
    "gophernotes": "Gophernotes",
    "ijulia": "IJulia",
    "julia-1.11": "IJulia",
    "irust": "IRust",
    "rust": "Evcxr",
    "evcxr": "Evcxr",
    "deno": "Deno",
    "scala": "Almond",
    "ocaml-jupyter": "OCaml Jupyter",
    "ocaml": "OCaml Jupyter",
}


@dataclass(frozen=True, kw_only=True)
class DocumentImageSummary:
    """Aggregate digest of a whole document."""

    kernel_count: int
    passed: int
    total: int
    pass_rate: int


@dataclass(frozen=True, kw_only=True)
class KernelImageSummary:
    """Digest of a single kernel."""

    kernel_name: str
    display_name: str
    language: str
    protocol_version: str
    passed: int
    failed: int
    total: int
    percent: int
    band: ScoreBand
    startup_error: bool


@dataclass(frozen=True, kw_only=True)
class KernelNotFoundImage:
    """Placeholder digest for a kernel that is not in the document."""

    kernel_name: str
    message: str = "Kernel not found"


type ImageSummary = DocumentImageSummary | KernelImageSummary | KernelNotFoundImage


def title_case(value: str) -> str:
    """Capitalize each word, treating spaces, underscores and dashes as breaks."""
    words = value.replace("_", " ").replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def display_name(report: KernelReport) -> str:
    """Human-friendly kernel name, preferring known implementation names."""
    impl = report.implementation.lower()
    name = report.kernel_name.lower()

    if impl in DISPLAY_NAME_OVERRIDES:
        return DISPLAY_NAME_OVERRIDES[impl]
    if name in DISPLAY_NAME_OVERRIDES:
        return DISPLAY_NAME_OVERRIDES[name]
    if impl and impl != "unknown":
        return title_case(report.implementation)
    return title_case(report.kernel_name)


def summarize_document(document: ResultDocument) -> DocumentImageSummary:
    """Digest a document into kernel count and aggregate pass rate."""
    passed, total = derivation.document_pass_totals(document)
    return DocumentImageSummary(
        kernel_count=len(document.reports),
        passed=passed,
        total=total,
        pass_rate=derivation.percentage(passed, total),
    )


def summarize_kernel(
    document: ResultDocument, kernel_name: str
) -> KernelImageSummary | KernelNotFoundImage:
    """Digest one kernel, or a placeholder when it is not in the document."""
    report = derivation.find_report(document, kernel_name)
    if report is None:
        return KernelNotFoundImage(kernel_name=kernel_name)

    passed = derivation.passed_count(report)
    total = derivation.total_count(report)
    percent = derivation.score_percentage(report)
    return KernelImageSummary(
        kernel_name=report.kernel_name,
        display_name=display_name(report),
        language=report.language,
        protocol_version=report.protocol_version,
        passed=passed,
        failed=total - passed,
        total=total,
        percent=percent,
        band=derivation.score_band(percent),
        startup_error=derivation.has_startup_error(report),
    )


def _text(
    figure: Figure,
    x: float,
    y: float,
    value: str,
    *,
    size: float,
    color: str,
    **kwargs: str,
) -> None:
    """Place text with its size given in pixels."""
    figure.text(x, y, value, fontsize=size * 72 / DPI, color=color, **kwargs)


def _draw_document(figure: Figure, summary: DocumentImageSummary) -> None:
    rate_color = BAND_COLORS[derivation.score_band(summary.pass_rate)]
    text, mauve = COLORS["text"], COLORS["mauve"]

    _text(figure, 0.07, 0.78, "PROTOCOL COMPLIANCE TESTING", size=18, color=COLORS["overlay0"])
    _text(figure, 0.07, 0.62, "Jupyter Kernel", size=64, color=text, weight="bold")
    _text(figure, 0.07, 0.50, "Conformance", size=64, color=mauve, weight="bold")

    count = str(summary.kernel_count)
    rate = f"{summary.pass_rate}%"
    _text(figure, 0.07, 0.22, count, size=96, color=mauve, weight="bold")
    _text(figure, 0.07, 0.14, "kernels tested", size=24, color=COLORS["subtext0"])
    _text(figure, 0.45, 0.22, rate, size=96, color=rate_color, weight="bold")
    _text(figure, 0.45, 0.14, "average pass rate", size=24, color=COLORS["subtext0"])


def _draw_kernel(figure: Figure, summary: KernelImageSummary) -> None:
    if summary.startup_error:
        score_color = COLORS["red"]
    else:
        score_color = BAND_COLORS[summary.band]
    subtitle = f"{summary.language} | Protocol {summary.protocol_version}"
    name = summary.display_name

    _text(figure, 0.07, 0.86, "Jupyter Kernel Conformance", size=24, color=COLORS["overlay0"])
    _text(figure, 0.07, 0.58, name, size=80, color=COLORS["text"], weight="bold")
    _text(figure, 0.07, 0.46, subtitle, size=28, color=COLORS["subtext0"])

    right = {"ha": "right"}
    if summary.startup_error:
        _text(figure, 0.93, 0.50, "Startup failed", size=56, color=score_color, **right)
        return

    percent = f"{summary.percent}%"
    passing = f"{summary.passed}/{summary.total} tests passing"
    _text(figure, 0.93, 0.50, percent, size=120, color=score_color, weight="bold", **right)
    _text(figure, 0.93, 0.38, passing, size=28, color=COLORS["subtext0"], **right)
    if summary.failed:
        failing = f"{summary.failed} failing"
        _text(figure, 0.93, 0.31, failing, size=24, color=COLORS["red"], **right)


def _draw_not_found(figure: Figure, summary: KernelNotFoundImage) -> None:
    centered = {"ha": "center", "va": "center"}
    _text(figure, 0.5, 0.5, summary.message, size=48, color=COLORS["text"], **centered)


def render_png(summary: ImageSummary, target: Path | BinaryIO) -> None:
    """Draw a summary as a WIDTH x HEIGHT PNG.

    Output is byte-for-byte reproducible for the same summary and matplotlib
    version.
    """
    figure = Figure(figsize=(WIDTH / DPI, HEIGHT / DPI), dpi=DPI)
    FigureCanvasAgg(figure)
    figure.patch.set_facecolor(COLORS["base"])

    if isinstance(summary, DocumentImageSummary):
        _draw_document(figure, summary)
    elif isinstance(summary, KernelImageSummary):
        _draw_kernel(figure, summary)
    else:
        _draw_not_found(figure, summary)

    figure.savefig(
        target,
        format="png",
        dpi=DPI,
        facecolor=COLORS["base"],
        metadata={"Software": None},
    )
    if isinstance(target, Path):
        log.info("Wrote image %s", target)
