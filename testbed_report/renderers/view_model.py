"""View models backing the interactive summary, matrix, cards and detail views."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from testbed_report import derivation
from testbed_report.derivation import ScoreBand
from testbed_report.models.metadata import KernelMetadataMap
from testbed_report.models.report import (
    FailOutcome,
    FailureKind,
    KernelReport,
    PartialPassOutcome,
    ResultDocument,
    TestOutcome,
    TestRecord,
    TestStatus,
    Tier,
)
from testbed_report.router import ViewState

STATUS_LABELS: Mapping[TestStatus, str] = {
    "pass": "Pass",
    "fail": "Fail",
    "unsupported": "Skip",
    "timeout": "Timeout",
    "partial_pass": "Partial",
}

FAILURE_HINTS: Mapping[FailureKind, str] = {
    "timeout": "Kernel may be slow to start or not responding. Try increasing timeout.",
    "protocol_error": "Message parsing failed. Check runtimed protocol crate for compatibility.",
    "unexpected_message_type": "Kernel sent wrong message type. Check kernel implementation.",
    "unexpected_content": "Response format differs from the protocol. Check kernel implementation.",
    "kernel_error": "Kernel reported an error. Check kernel logs for details.",
    "harness_error": "Test harness issue. Check test setup and dependencies.",
}

FAILURE_SOURCES: Mapping[FailureKind, str] = {
    "timeout": "kernel",
    "protocol_error": "runtimed",
    "unexpected_message_type": "kernel",
    "unexpected_content": "kernel",
    "kernel_error": "kernel",
    "harness_error": "testbed",
}

# Names listed per failure group before collapsing into "+N more".
FAILURE_EXAMPLES = 3


@dataclass(frozen=True, kw_only=True)
class TestRow:
    """A single test line in a tier section."""

    __test__ = False

    name: str
    description: str
    message_type: str
    duration_ms: int
    status: TestStatus
    label: str
    detail: str | None = None
    partial_percent: int | None = None
    failure_source: str | None = None
    failure_hint: str | None = None


@dataclass(frozen=True, kw_only=True)
class TierSection:
    """Accordion section for one non-empty tier."""

    tier: Tier
    title: str
    passed: int
    total: int
    tests: Sequence[TestRow]


@dataclass(frozen=True, kw_only=True)
class FailureGroupSummary:
    """Collapsed view of one failure group."""

    reason: str
    count: int
    examples: Sequence[str]
    more: int


@dataclass(frozen=True, kw_only=True)
class FailureSummary:
    """Headline of a kernel's failing tests."""

    passed: int
    total: int
    failed: int
    percent: int
    critical: bool
    groups: Sequence[FailureGroupSummary]
    show_timeout_hint: bool

    @property
    def all_passing(self) -> bool:
        return self.failed == 0


@dataclass(frozen=True, kw_only=True)
class KernelDetailView:
    """Detail view of one kernel.

    When ``startup_error`` is set, ``failure_summary`` is None and ``tiers`` is
    empty: the startup error is the only content.
    """

    kernel_name: str
    implementation: str
    language: str
    protocol_version: str
    repository: str | None
    description: str | None
    passed: int
    total: int
    percent: int
    band: ScoreBand
    startup_error: str | None
    failure_summary: FailureSummary | None
    tiers: Sequence[TierSection]


@dataclass(frozen=True, kw_only=True)
class NotFoundView:
    """Placeholder for a kernel that is not in the document."""

    kernel_name: str
    message: str = "Kernel not found"


@dataclass(frozen=True, kw_only=True)
class TierCell:
    """Tier score inside a summary row or card."""

    tier: Tier
    passed: int
    total: int
    percent: int
    band: ScoreBand


@dataclass(frozen=True, kw_only=True)
class SummaryRow:
    """One kernel in the summary table."""

    kernel_name: str
    implementation: str
    language: str
    protocol_version: str
    tiers: Sequence[TierCell]
    passed: int
    total: int
    percent: int
    band: ScoreBand


@dataclass(frozen=True, kw_only=True)
class SummaryView:
    """Summary table of every kernel."""

    generated_at: datetime
    commit_sha: str | None
    rows: Sequence[SummaryRow]


@dataclass(frozen=True, kw_only=True)
class MatrixRow:
    """A test and its status label per kernel column, None where not run."""

    test_name: str
    cells: Sequence[str | None]


@dataclass(frozen=True, kw_only=True)
class MatrixSection:
    """Rows of one tier in the detailed matrix."""

    tier: Tier
    title: str
    rows: Sequence[MatrixRow]


@dataclass(frozen=True, kw_only=True)
class MatrixView:
    """Detailed test-by-kernel matrix."""

    kernels: Sequence[str]
    sections: Sequence[MatrixSection]


@dataclass(frozen=True, kw_only=True)
class KernelCard:
    """Compact card for one kernel."""

    kernel_name: str
    implementation: str
    language: str
    passed: int
    total: int
    percent: int
    band: ScoreBand
    perfect: bool
    startup_error: bool
    tiers: Sequence[TierCell]


@dataclass(frozen=True, kw_only=True)
class CardsView:
    """Grid of kernel cards."""

    cards: Sequence[KernelCard]


def status_label(outcome: TestOutcome) -> str:
    """Map an outcome to its fixed status label."""
    return STATUS_LABELS[outcome.status]


def implementation_name(
    report: KernelReport, metadata: KernelMetadataMap | None = None
) -> str:
    """Implementation name, preferring curated metadata."""
    entry = metadata.get(report.kernel_name) if metadata is not None else None
    if entry is not None and entry.implementation:
        return entry.implementation
    return report.implementation or report.language


def build_test_row(record: TestRecord) -> TestRow:
    """Build the row for one test record."""
    outcome = record.result
    detail: str | None = None
    partial_percent: int | None = None
    failure_source: str | None = None
    failure_hint: str | None = None

    if isinstance(outcome, FailOutcome):
        detail = outcome.reason
        if outcome.kind is not None:
            failure_source = FAILURE_SOURCES[outcome.kind]
            failure_hint = FAILURE_HINTS[outcome.kind]
    elif isinstance(outcome, PartialPassOutcome):
        detail = outcome.notes
        partial_percent = derivation.fraction_percentage(outcome.score)

    return TestRow(
        name=record.name,
        description=record.description,
        message_type=record.message_type,
        duration_ms=record.duration,
        status=outcome.status,
        label=status_label(outcome),
        detail=detail,
        partial_percent=partial_percent,
        failure_source=failure_source,
        failure_hint=failure_hint,
    )


def tier_sections(report: KernelReport) -> Sequence[TierSection]:
    """Tier sections of a report, omitting tiers without tests."""
    sections: list[TierSection] = []
    for tier in derivation.TIERS:
        results = derivation.tier_results(report, tier)
        if not results:
            continue
        passed, total = derivation.tier_score(report, tier)
        sections.append(
            TierSection(
                tier=tier,
                title=derivation.TIER_DESCRIPTIONS[tier],
                passed=passed,
                total=total,
                tests=[build_test_row(record) for record in results],
            )
        )
    return sections


def failure_summary(report: KernelReport) -> FailureSummary:
    """Summarize failing tests grouped by reason."""
    passed = derivation.passed_count(report)
    total = derivation.total_count(report)
    percent = derivation.percentage(passed, total)
    groups = derivation.failure_groups(report)

    return FailureSummary(
        passed=passed,
        total=total,
        failed=total - passed,
        percent=percent,
        critical=percent < 50,
        groups=[
            FailureGroupSummary(
                reason=group.key,
                count=group.size,
                examples=[record.name for record in group.records[:FAILURE_EXAMPLES]],
                more=max(group.size - FAILURE_EXAMPLES, 0),
            )
            for group in groups
        ],
        show_timeout_hint=any(
            group.key == derivation.TIMEOUT_GROUP_KEY for group in groups
        ),
    )


def kernel_detail_view(
    document: ResultDocument,
    kernel_name: str,
    metadata: KernelMetadataMap | None = None,
) -> KernelDetailView | NotFoundView:
    """Build the detail view of a kernel, or a not-found placeholder."""
    report = derivation.find_report(document, kernel_name)
    if report is None:
        return NotFoundView(kernel_name=kernel_name)

    entry = metadata.get(report.kernel_name) if metadata is not None else None
    startup_failed = derivation.has_startup_error(report)
    percent = derivation.score_percentage(report)

    return KernelDetailView(
        kernel_name=report.kernel_name,
        implementation=implementation_name(report, metadata),
        language=report.language,
        protocol_version=report.protocol_version,
        repository=entry.repository if entry else None,
        description=entry.description if entry else None,
        passed=derivation.passed_count(report),
        total=derivation.total_count(report),
        percent=percent,
        band=derivation.score_band(percent),
        startup_error=report.startup_error if startup_failed else None,
        failure_summary=None if startup_failed else failure_summary(report),
        tiers=[] if startup_failed else tier_sections(report),
    )


def tier_cells(report: KernelReport) -> Sequence[TierCell]:
    """Score cells for all four tiers, empty tiers included."""
    cells: list[TierCell] = []
    for tier in derivation.TIERS:
        passed, total = derivation.tier_score(report, tier)
        percent = derivation.percentage(passed, total)
        cells.append(
            TierCell(
                tier=tier,
                passed=passed,
                total=total,
                percent=percent,
                band=derivation.score_band(percent),
            )
        )
    return cells


def summary_view(
    document: ResultDocument, metadata: KernelMetadataMap | None = None
) -> SummaryView:
    """Build the summary table, best scores first."""
    rows: list[SummaryRow] = []
    for report in derivation.sort_reports(document.reports):
        percent = derivation.score_percentage(report)
        rows.append(
            SummaryRow(
                kernel_name=report.kernel_name,
                implementation=implementation_name(report, metadata),
                language=report.language,
                protocol_version=report.protocol_version,
                tiers=tier_cells(report),
                passed=derivation.passed_count(report),
                total=derivation.total_count(report),
                percent=percent,
                band=derivation.score_band(percent),
            )
        )
    return SummaryView(
        generated_at=document.generated_at,
        commit_sha=document.commit_sha,
        rows=rows,
    )


def matrix_view(document: ResultDocument) -> MatrixView:
    """Build the detailed matrix, tests grouped by tier."""
    reports = derivation.sort_reports(document.reports)
    sections: list[MatrixSection] = []

    for tier, names in derivation.tests_by_tier(document).items():
        if not names:
            continue
        rows = []
        for name in names:
            cells: list[str | None] = []
            for report in reports:
                record = derivation.find_record(report, name)
                cells.append(status_label(record.result) if record else None)
            rows.append(MatrixRow(test_name=name, cells=cells))
        sections.append(
            MatrixSection(tier=tier, title=derivation.TIER_DESCRIPTIONS[tier], rows=rows)
        )

    return MatrixView(
        kernels=[report.kernel_name for report in reports],
        sections=sections,
    )


def cards_view(
    document: ResultDocument, metadata: KernelMetadataMap | None = None
) -> CardsView:
    """Build kernel cards, best scores first."""
    cards: list[KernelCard] = []
    for report in derivation.sort_reports(document.reports):
        passed = derivation.passed_count(report)
        total = derivation.total_count(report)
        percent = derivation.percentage(passed, total)
        cards.append(
            KernelCard(
                kernel_name=report.kernel_name,
                implementation=implementation_name(report, metadata),
                language=report.language,
                passed=passed,
                total=total,
                percent=percent,
                band=derivation.score_band(percent),
                perfect=derivation.is_perfect(passed, total),
                startup_error=derivation.has_startup_error(report),
                tiers=[cell for cell in tier_cells(report) if cell.total > 0],
            )
        )
    return CardsView(cards=cards)


type View = SummaryView | MatrixView | CardsView | KernelDetailView | NotFoundView


def view_for_state(
    state: ViewState,
    document: ResultDocument,
    metadata: KernelMetadataMap | None = None,
) -> View:
    """Build the view a router state points at."""
    if state.kernel is not None:
        return kernel_detail_view(document, state.kernel, metadata)
    if state.mode == "matrix":
        return matrix_view(document)
    if state.mode == "cards":
        return cards_view(document, metadata)
    return summary_view(document, metadata)
