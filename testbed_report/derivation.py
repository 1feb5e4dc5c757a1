"""Scores, tier breakdowns and failure groupings derived from result documents.

Every renderer goes through these functions for numbers, orderings and
groupings, so that the interactive views, markdown exports and images always
agree. Nothing here caches: values are recomputed from the document on each
call.

``partial_pass`` counts as a full pass in every aggregate; its fractional
score is informational only. A report with a startup error contributes no
results at all, even when the producer left some in the document.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from testbed_report.models.report import (
    FailOutcome,
    KernelReport,
    ResultDocument,
    TestOutcome,
    TestRecord,
    Tier,
)

TIERS: Sequence[Tier] = (
    "tier1_basic",
    "tier2_interactive",
    "tier3_rich_output",
    "tier4_advanced",
)

TIER_DESCRIPTIONS: Mapping[Tier, str] = {
    "tier1_basic": "Basic Protocol",
    "tier2_interactive": "Interactive Features",
    "tier3_rich_output": "Rich Output",
    "tier4_advanced": "Advanced Features",
}

TIER_NUMBERS: Mapping[Tier, int] = {
    "tier1_basic": 1,
    "tier2_interactive": 2,
    "tier3_rich_output": 3,
    "tier4_advanced": 4,
}

PASSING_STATUSES = frozenset({"pass", "partial_pass"})

# The producer embeds "Timeout" in reasons for every timed-out wait.
TIMEOUT_GROUP_KEY = "Timeout"
UNKNOWN_REASON = "Unknown error"

type ScoreBand = Literal["excellent", "good", "fair", "poor"]


@dataclass(frozen=True, kw_only=True)
class FailureGroup:
    """Failing tests sharing a normalized reason."""

    key: str
    records: Sequence[TestRecord]

    @property
    def size(self) -> int:
        return len(self.records)


def is_passing(outcome: TestOutcome) -> bool:
    """Check if an outcome counts toward the passed total."""
    return outcome.status in PASSING_STATUSES


def effective_results(report: KernelReport) -> Sequence[TestRecord]:
    """Results that count toward every view; none after a startup failure."""
    if has_startup_error(report):
        return ()
    return report.results


def passed_count(report: KernelReport) -> int:
    """Count tests whose outcome is pass or partial_pass."""
    return sum(
        1 for record in effective_results(report) if is_passing(record.result)
    )


def total_count(report: KernelReport) -> int:
    """Count all tests in a report."""
    return len(effective_results(report))


def score(report: KernelReport) -> float:
    """Fraction of passed tests, 0.0 for a report without tests."""
    total = total_count(report)
    if total == 0:
        return 0.0
    return passed_count(report) / total


def tier_results(report: KernelReport, tier: Tier) -> Sequence[TestRecord]:
    """Tests of a single tier, in report order."""
    return [
        record for record in effective_results(report) if record.category == tier
    ]


def tier_score(report: KernelReport, tier: Tier) -> tuple[int, int]:
    """Passed and total counts for a single tier."""
    results = tier_results(report, tier)
    passed = sum(1 for record in results if is_passing(record.result))
    return passed, len(results)


def all_test_names(document: ResultDocument) -> Sequence[str]:
    """Distinct test names across every report, sorted lexicographically."""
    return sorted(
        {
            record.name
            for report in document.reports
            for record in effective_results(report)
        }
    )


def failure_group_key(reason: str) -> str:
    """Normalize a failure reason into its group key."""
    if not reason:
        return UNKNOWN_REASON
    if TIMEOUT_GROUP_KEY in reason:
        return TIMEOUT_GROUP_KEY
    return reason


def failure_groups(report: KernelReport) -> Sequence[FailureGroup]:
    """Partition failing tests by normalized reason.

    Groups are ordered by descending size; groups of equal size keep the
    order in which their first member appears in the report.
    """
    groups: dict[str, list[TestRecord]] = {}
    for record in effective_results(report):
        if not isinstance(record.result, FailOutcome):
            continue
        key = failure_group_key(record.result.reason)
        groups.setdefault(key, []).append(record)

    ordered = sorted(groups.items(), key=lambda item: len(item[1]), reverse=True)
    return [FailureGroup(key=key, records=records) for key, records in ordered]


def has_startup_error(report: KernelReport) -> bool:
    """Check if the kernel failed before any test could run."""
    return bool(report.startup_error)


def fraction_percentage(value: float) -> int:
    """Convert a fraction to a whole-number percentage, rounding halves up."""
    return math.floor(value * 100 + 0.5)


def percentage(passed: int, total: int) -> int:
    """Whole-number percentage of passed tests; 0 when there are no tests."""
    if total == 0:
        return 0
    return fraction_percentage(passed / total)


def score_percentage(report: KernelReport) -> int:
    """Overall score of a report as a whole-number percentage."""
    return fraction_percentage(score(report))


def is_perfect(passed: int, total: int) -> bool:
    """Check if every test of a non-empty set passed."""
    return total > 0 and passed == total


def score_band(percent: int) -> ScoreBand:
    """Classify a percentage for presentation."""
    if percent >= 90:
        return "excellent"
    if percent >= 70:
        return "good"
    if percent >= 50:
        return "fair"
    return "poor"


def sort_reports(reports: Sequence[KernelReport]) -> Sequence[KernelReport]:
    """Order reports by descending score, keeping document order for ties."""
    return sorted(reports, key=score, reverse=True)


def find_report(document: ResultDocument, kernel_name: str) -> KernelReport | None:
    """Look up a report by kernel name."""
    for report in document.reports:
        if report.kernel_name == kernel_name:
            return report
    return None


def document_pass_totals(document: ResultDocument) -> tuple[int, int]:
    """Passed and total counts summed across every report."""
    passed = sum(passed_count(report) for report in document.reports)
    total = sum(total_count(report) for report in document.reports)
    return passed, total


def tests_by_tier(document: ResultDocument) -> Mapping[Tier, Sequence[str]]:
    """Assign every test name to a tier for matrix layouts.

    A test's tier is taken from the first report that contains it. Tiers come
    back in tier order and names within a tier in sorted order.
    """
    grouped: dict[Tier, list[str]] = {tier: [] for tier in TIERS}
    for name in all_test_names(document):
        for report in document.reports:
            record = find_record(report, name)
            if record is not None:
                grouped[record.category].append(name)
                break
    return grouped


def find_record(report: KernelReport, test_name: str) -> TestRecord | None:
    """Look up a test record by name."""
    for record in effective_results(report):
        if record.name == test_name:
            return record
    return None
