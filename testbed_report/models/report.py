"""Models for the conformance result document produced by the test executor."""

from collections.abc import Sequence
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator, model_validator

from testbed_report.models.base import Model

type Tier = Literal[
    "tier1_basic",
    "tier2_interactive",
    "tier3_rich_output",
    "tier4_advanced",
]

type FailureKind = Literal[
    "timeout",
    "protocol_error",
    "unexpected_message_type",
    "unexpected_content",
    "kernel_error",
    "harness_error",
]

# Payload fields of every outcome variant, used to reject outcomes that mix variants.
VARIANT_PAYLOAD_FIELDS = frozenset({"reason", "kind", "score", "notes"})


class Outcome(Model):
    """Common base of the outcome variants."""

    @model_validator(mode="before")
    @classmethod
    def reject_foreign_payload(cls, data: Any) -> Any:
        """Refuse payload fields that belong to a different variant."""
        if isinstance(data, dict):
            foreign = sorted(
                key
                for key in data
                if key in VARIANT_PAYLOAD_FIELDS and key not in cls.model_fields
            )
            if foreign:
                raise ValueError(
                    f"Outcome '{data.get('status')}' carries fields of another "
                    f"variant: {', '.join(foreign)}"
                )
        return data


class PassOutcome(Outcome):
    """Test passed completely."""

    status: Literal["pass"] = "pass"


class FailOutcome(Outcome):
    """Test failed with a reason."""

    status: Literal["fail"] = "fail"
    reason: str = Field(..., description="Free-text failure reason")
    kind: FailureKind | None = Field(
        default=None, description="Classification of the failure, when known"
    )


class UnsupportedOutcome(Outcome):
    """Kernel does not support the feature; the test was skipped."""

    status: Literal["unsupported"] = "unsupported"


class TimeoutOutcome(Outcome):
    """Kernel did not respond within the timeout."""

    status: Literal["timeout"] = "timeout"


class PartialPassOutcome(Outcome):
    """Partial success with notes."""

    status: Literal["partial_pass"] = "partial_pass"
    score: float = Field(..., ge=0.0, le=1.0, description="Fractional score")
    notes: str = Field(..., description="Free-text notes")


TestOutcome = Annotated[
    PassOutcome
    | FailOutcome
    | UnsupportedOutcome
    | TimeoutOutcome
    | PartialPassOutcome,
    Field(discriminator="status"),
]

type TestStatus = Literal["pass", "fail", "unsupported", "timeout", "partial_pass"]


class TestRecord(Model):
    """Record of a single test execution."""

    __test__ = False

    name: str = Field(..., description="Test name, unique within a report")
    category: Tier = Field(..., description="Tier the test belongs to")
    description: str = Field(..., description="Human-readable description")
    message_type: str = Field(..., description="Protocol message type under test")
    result: TestOutcome = Field(..., description="Outcome of the test")
    duration: int = Field(..., ge=0, description="Test duration in milliseconds")


class KernelReport(Model):
    """Report for a single kernel's conformance test run."""

    kernel_name: str = Field(..., description="Stable kernel identifier")
    language: str = Field(..., description="Language the kernel executes")
    implementation: str = Field(..., description="Implementation name")
    protocol_version: str = Field(..., description="Protocol version reported")
    results: Sequence[TestRecord] = Field(..., description="Individual results")
    timestamp: datetime = Field(..., description="When the test run started")
    total_duration: int = Field(
        ..., ge=0, description="Total duration of the run in milliseconds"
    )
    startup_error: str | None = Field(
        default=None, description="Set when the kernel never reached a testable state"
    )

    @field_validator("results")
    @classmethod
    def unique_test_names(cls, results: Sequence[TestRecord]) -> Sequence[TestRecord]:
        """Test names must be unique within a report."""
        seen: set[str] = set()
        for record in results:
            if record.name in seen:
                raise ValueError(f"Duplicate test name: {record.name}")
            seen.add(record.name)
        return results


class ResultDocument(Model):
    """Matrix of conformance results across multiple kernels."""

    reports: Sequence[KernelReport] = Field(..., description="One report per kernel")
    generated_at: datetime = Field(..., description="When the matrix was generated")
    commit_sha: str | None = Field(
        default=None, description="Revision the run was built from"
    )

    @field_validator("reports")
    @classmethod
    def unique_kernel_names(
        cls, reports: Sequence[KernelReport]
    ) -> Sequence[KernelReport]:
        """Kernel names must be unique within a document."""
        seen: set[str] = set()
        for report in reports:
            if report.kernel_name in seen:
                raise ValueError(f"Duplicate kernel name: {report.kernel_name}")
            seen.add(report.kernel_name)
        return reports
