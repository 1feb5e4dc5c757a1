"""Markdown and plain-text renderers for result documents.

These mirror the interactive views section for section, reading every number
from the derivation functions.
"""

from collections.abc import Sequence
from datetime import timezone

from testbed_report import derivation
from testbed_report.config import ExportSettings
from testbed_report.models.metadata import KernelMetadataMap
from testbed_report.models.report import (
    FailOutcome,
    KernelReport,
    PartialPassOutcome,
    ResultDocument,
    TestStatus,
)
from testbed_report.renderers.view_model import FAILURE_EXAMPLES, implementation_name
from testbed_report.router import encode_kernel_name

STATUS_EMOJI: dict[TestStatus, str] = {
    "pass": "✅",
    "fail": "❌",
    "unsupported": "⏭️",
    "timeout": "⏱️",
    "partial_pass": "⚠️",
}

SECTION_DELIMITER = "---"


def kernel_file_name(kernel_name: str) -> str:
    """Deterministic markdown file name for a kernel."""
    return f"{encode_kernel_name(kernel_name)}.md"


def render_score(passed: int, total: int) -> str:
    """Render ``passed/total (pct%)``, with a check mark for a perfect score."""
    perfect = " ✅" if derivation.is_perfect(passed, total) else ""
    return f"{passed}/{total} ({derivation.percentage(passed, total)}%){perfect}"


def generated_line(document: ResultDocument) -> str:
    generated_at = document.generated_at
    if generated_at.tzinfo is not None:
        generated_at = generated_at.astimezone(timezone.utc)
    return f"_Generated: {generated_at.date().isoformat()}_"


def render_startup_error_markdown(report: KernelReport) -> str:
    """Render the startup failure that replaces all per-test detail."""
    return "\n".join(
        [
            "### ⚠️ Kernel Failed During Startup",
            "",
            "The kernel could not complete initialization. No tests were run.",
            "",
            "```",
            report.startup_error or "",
            "```",
            "",
            "This usually indicates a fundamental protocol compatibility issue.",
        ]
    )


def render_failure_summary_markdown(report: KernelReport) -> str:
    """Render failing tests grouped by reason."""
    if derivation.has_startup_error(report):
        return render_startup_error_markdown(report)

    passed = derivation.passed_count(report)
    total = derivation.total_count(report)
    failed = total - passed

    if failed == 0:
        return f"### ✅ All Tests Passing\n\n{render_score(passed, total)}"

    lines = [
        f"### {failed} Test{'s' if failed != 1 else ''} Failing",
        "",
        f"{passed}/{total} passing ({derivation.percentage(passed, total)}%)",
        "",
    ]

    for group in derivation.failure_groups(report):
        lines.append(f"- **{group.key}** ({group.size})")
        names = [record.name for record in group.records[:FAILURE_EXAMPLES]]
        if group.size > FAILURE_EXAMPLES:
            names.append(f"+{group.size - FAILURE_EXAMPLES} more")
        lines.append(f"  - {', '.join(names)}")

    return "\n".join(lines)


def render_tier_breakdown_markdown(report: KernelReport) -> str:
    """Render per-tier test lists, skipping empty tiers."""
    lines = ["### Test Results by Tier", ""]

    for tier in derivation.TIERS:
        results = derivation.tier_results(report, tier)
        if not results:
            continue

        passed, total = derivation.tier_score(report, tier)
        lines.append(f"#### {derivation.TIER_DESCRIPTIONS[tier]} ({passed}/{total})")
        lines.append("")

        for record in results:
            outcome = record.result
            emoji = STATUS_EMOJI[outcome.status]
            lines.append(f"{emoji} **{record.name}** - {record.description}")
            if isinstance(outcome, FailOutcome) and outcome.reason:
                lines.append(f"   _{outcome.reason}_")
            elif isinstance(outcome, PartialPassOutcome):
                partial = derivation.fraction_percentage(outcome.score)
                lines.append(f"   _Partial ({partial}%): {outcome.notes}_")
        lines.append("")

    return "\n".join(lines)


def render_kernel_detail_markdown(
    report: KernelReport, metadata: KernelMetadataMap | None = None
) -> str:
    """Render the full detail page of one kernel."""
    entry = metadata.get(report.kernel_name) if metadata is not None else None
    impl = implementation_name(report, metadata)

    lines = [
        f"# {report.kernel_name} - Protocol Conformance",
        "",
        f"**{impl}** ({report.language}) | Protocol {report.protocol_version}",
        "",
    ]

    if entry is not None and entry.repository:
        lines.extend([f"Repository: {entry.repository}", ""])
    if entry is not None and entry.description:
        lines.extend([f"> {entry.description}", ""])

    if derivation.has_startup_error(report):
        lines.append(render_startup_error_markdown(report))
        lines.append("")
        return "\n".join(lines)

    passed = derivation.passed_count(report)
    total = derivation.total_count(report)
    lines.extend(
        [
            f"**Overall Score: {render_score(passed, total)}**",
            "",
            render_failure_summary_markdown(report),
            "",
            render_tier_breakdown_markdown(report),
        ]
    )
    return "\n".join(lines)


def render_not_found_markdown(kernel_name: str) -> str:
    """Render the placeholder for a kernel absent from the document."""
    return f"# Kernel Not Found\n\nNo conformance report for `{kernel_name}`.\n"


def render_tier_columns(report: KernelReport) -> Sequence[str]:
    cells = []
    for tier in derivation.TIERS:
        passed, total = derivation.tier_score(report, tier)
        cells.append(f"{passed}/{total}" if total else "-")
    return cells


def render_summary_markdown(
    document: ResultDocument,
    metadata: KernelMetadataMap | None = None,
    settings: ExportSettings | None = None,
) -> str:
    """Render the index document with the summary table."""
    settings = settings or ExportSettings()
    lines = [
        f"# {settings.title}",
        "",
        f"Testing {len(document.reports)} kernels against the {settings.protocol_name}.",
        "",
        "| Kernel | Implementation | Score | Tier 1 | Tier 2 | Tier 3 | Tier 4 |",
        "|--------|---------------|-------|--------|--------|--------|--------|",
    ]

    for report in derivation.sort_reports(document.reports):
        impl = implementation_name(report, metadata) or "-"
        tiers = " | ".join(render_tier_columns(report))
        lines.append(
            f"| {report.kernel_name} | {impl} | "
            f"{derivation.score_percentage(report)}% | {tiers} |"
        )

    lines.extend(["", generated_line(document)])
    return "\n".join(lines)


def render_matrix_markdown(document: ResultDocument) -> str:
    """Render every test against every kernel."""
    if not document.reports:
        return "No reports in matrix."

    reports = derivation.sort_reports(document.reports)
    lines = [
        "# Kernel Conformance Matrix",
        "",
        "| Test | " + " | ".join(report.kernel_name for report in reports) + " |",
        "|------|" + "------|" * len(reports),
    ]

    for tier, names in derivation.tests_by_tier(document).items():
        if not names:
            continue
        lines.append(
            f"| **{derivation.TIER_DESCRIPTIONS[tier]}** |" + " |" * len(reports)
        )
        for name in names:
            cells = []
            for report in reports:
                record = derivation.find_record(report, name)
                cells.append(STATUS_EMOJI[record.result.status] if record else "-")
            lines.append(f"| {name} | " + " | ".join(cells) + " |")

    scores = [
        f"{derivation.passed_count(report)}/{derivation.total_count(report)}"
        for report in reports
    ]
    lines.append("| **Score** | " + " | ".join(scores) + " |")
    lines.extend(["", generated_line(document)])
    return "\n".join(lines)


def render_llms_txt(
    document: ResultDocument,
    metadata: KernelMetadataMap | None = None,
    settings: ExportSettings | None = None,
) -> str:
    """Render the short link index for text-oriented clients."""
    settings = settings or ExportSettings()
    base = settings.base_path.rstrip("/")
    lines = [
        f"# {settings.title} Testbed",
        "",
        "Automated protocol compliance testing for Jupyter kernels against the",
        f"{settings.protocol_name} specification.",
        "",
        settings.site_url,
        "",
        f"## Tested Kernels ({len(document.reports)})",
        "",
        "| Kernel | Implementation | Language | Score |",
        "|--------|---------------|----------|-------|",
    ]

    for report in derivation.sort_reports(document.reports):
        impl = implementation_name(report, metadata) or "-"
        passed = derivation.passed_count(report)
        total = derivation.total_count(report)
        perfect = " ✅" if derivation.is_perfect(passed, total) else ""
        lines.append(
            f"| {report.kernel_name} | {impl} | {report.language} | "
            f"{derivation.score_percentage(report)}%{perfect} |"
        )

    lines.extend(
        [
            "",
            "## Links",
            "",
            f"- Full results: {base}/llms-full.txt",
            f"- Summary matrix: {base}/index.md",
            f"- Per-kernel reports: {base}/kernel/{{name}}.md",
            "",
            generated_line(document),
        ]
    )
    return "\n".join(lines)


def render_llms_full_txt(
    document: ResultDocument,
    metadata: KernelMetadataMap | None = None,
    settings: ExportSettings | None = None,
) -> str:
    """Render every kernel's detail section, separated by delimiters."""
    settings = settings or ExportSettings()
    lines = [
        f"# {settings.title} - Full Results",
        "",
        f"Testing {len(document.reports)} kernels against the {settings.protocol_name}.",
        "",
        SECTION_DELIMITER,
        "",
    ]

    for report in derivation.sort_reports(document.reports):
        lines.extend(
            [
                render_kernel_detail_markdown(report, metadata),
                "",
                SECTION_DELIMITER,
                "",
            ]
        )

    lines.append(generated_line(document))
    return "\n".join(lines)


def render_kernel_markdown(
    document: ResultDocument,
    kernel_name: str,
    metadata: KernelMetadataMap | None = None,
) -> str:
    """Render a kernel's detail page by name, or the not-found placeholder."""
    report = derivation.find_report(document, kernel_name)
    if report is None:
        return render_not_found_markdown(kernel_name)
    return render_kernel_detail_markdown(report, metadata)
