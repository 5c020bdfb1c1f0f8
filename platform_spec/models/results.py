"""Test result data models."""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple


class Status(str, Enum):
    """Outcome of a single test."""

    PASS = "passed"
    FAIL = "failed"
    SKIP = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class Result:
    """Result of a single executed test."""

    name: str
    status: Status
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    duration: float = 0.0


class Summary(NamedTuple):
    """Aggregate counts for a run."""

    total: int
    passed: int
    failed: int
    skipped: int
    errors: int


@dataclass
class TestSuiteRun:
    """Ordered results of running one spec against one target.

    Created empty, appended to while tests run, then frozen.
    """

    __test__ = False  # not a pytest class

    spec_name: str
    target: str = ""
    started_at: datetime = field(default_factory=datetime.now)
    duration: float = 0.0
    short_circuited: bool = False
    results: list[Result] | tuple[Result, ...] = field(default_factory=list)
    _started: float = field(default_factory=time.monotonic, init=False, repr=False)

    @property
    def frozen(self) -> bool:
        """Check if the run has completed."""
        return isinstance(self.results, tuple)

    def append(self, result: Result) -> None:
        """Record a result.

        Raises:
            RuntimeError: If the run is already frozen
        """
        if isinstance(self.results, tuple):
            raise RuntimeError(f"Test run {self.spec_name!r} is frozen")
        self.results.append(result)

    def freeze(self) -> None:
        """Mark the run complete and stamp its duration."""
        if isinstance(self.results, tuple):
            return
        self.results = tuple(self.results)
        self.duration = time.monotonic() - self._started

    def summary(self) -> Summary:
        """Count results by status."""
        counts = {status: 0 for status in Status}
        for result in self.results:
            counts[result.status] += 1
        return Summary(
            total=len(self.results),
            passed=counts[Status.PASS],
            failed=counts[Status.FAIL],
            skipped=counts[Status.SKIP],
            errors=counts[Status.ERROR],
        )

    @property
    def success(self) -> bool:
        """True if nothing failed or errored."""
        summary = self.summary()
        return summary.failed == 0 and summary.errors == 0


@dataclass
class HostResults:
    """Outcome of testing one host in a multi-host run."""

    target: str
    connected: bool = False
    connection_error: Exception | None = None
    suites: list[TestSuiteRun] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """True if the host was reached and every suite succeeded."""
        return self.connected and all(suite.success for suite in self.suites)
