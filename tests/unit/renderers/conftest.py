"""Fixtures for renderer tests."""

from datetime import datetime, timezone

import pytest

from testbed_report.models.metadata import KernelMetadata, KernelMetadataMap
from testbed_report.models.report import (
    FailOutcome,
    PartialPassOutcome,
    ResultDocument,
    TimeoutOutcome,
    UnsupportedOutcome,
)
from testbed_report.testing.factories import (
    KernelReportFactory,
    ResultDocumentFactory,
    TestRecordFactory,
)


@pytest.fixture
def document() -> ResultDocument:
    """Three kernels: a partial one, a perfect one and one that failed to start."""
    partial = KernelReportFactory.build(
        kernel_name="python3",
        language="python",
        implementation="ipykernel",
        protocol_version="5.3",
        results=[
            TestRecordFactory.build(
                name="heartbeat", category="tier1_basic", description="Heartbeat"
            ),
            TestRecordFactory.build(
                name="kernel_info",
                category="tier1_basic",
                description="Kernel info",
                result=FailOutcome(reason="Timeout waiting for reply", kind="timeout"),
            ),
            TestRecordFactory.build(
                name="comms",
                category="tier2_interactive",
                description="Comm messages",
                result=FailOutcome(reason="Bad reply", kind="unexpected_content"),
            ),
            TestRecordFactory.build(
                name="display_data",
                category="tier3_rich_output",
                description="Display data",
                result=PartialPassOutcome(score=0.5, notes="missing metadata"),
            ),
            TestRecordFactory.build(
                name="debug",
                category="tier3_rich_output",
                description="Debugger",
                result=UnsupportedOutcome(),
            ),
            TestRecordFactory.build(
                name="history",
                category="tier3_rich_output",
                description="History",
                result=TimeoutOutcome(),
            ),
        ],
    )
    perfect = KernelReportFactory.build(
        kernel_name="ir",
        language="R",
        implementation="IRkernel",
        protocol_version="5.0",
        results=[
            TestRecordFactory.build(
                name="heartbeat", category="tier1_basic", description="Heartbeat"
            ),
        ],
    )
    broken = KernelReportFactory.build(
        kernel_name="broken kernel",
        language="lua",
        implementation="xlua",
        protocol_version="5.3",
        results=[],
        startup_error="Kernel exited with code 1",
    )
    return ResultDocumentFactory.build(
        reports=[partial, perfect, broken],
        generated_at=datetime(2025, 1, 15, 10, 5, tzinfo=timezone.utc),
        commit_sha="abc123",
    )


@pytest.fixture
def metadata() -> KernelMetadataMap:
    """Curated metadata for the python3 kernel."""
    return KernelMetadataMap(
        kernels={
            "python3": KernelMetadata(
                implementation="IPython",
                repository="https://github.com/ipython/ipykernel",
                description="The reference Python kernel",
            )
        }
    )


@pytest.fixture
def leftover_document() -> ResultDocument:
    """A startup failure that still lists results, next to a healthy kernel."""
    return ResultDocumentFactory.build(
        reports=[
            KernelReportFactory.build(
                kernel_name="broken",
                implementation="xlua",
                startup_error="boom",
                results=[
                    TestRecordFactory.build(name="a", category="tier1_basic"),
                ],
            ),
            KernelReportFactory.build(
                kernel_name="healthy",
                implementation="ipykernel",
                results=[
                    TestRecordFactory.build(name="b", category="tier1_basic"),
                    TestRecordFactory.build(
                        name="c",
                        category="tier1_basic",
                        result=TimeoutOutcome(),
                    ),
                ],
            ),
        ],
        generated_at=datetime(2025, 1, 15, 10, 5, tzinfo=timezone.utc),
    )
