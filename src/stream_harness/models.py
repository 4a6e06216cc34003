"""Result models shared by the cases and the driver."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from stream_harness.errors import FailureKind


@dataclass
class CaseResult:
    """Outcome of a single acceptance case."""

    name: str
    passed: bool
    failure: Optional[FailureKind] = None
    message: str = ""
    duration_seconds: float = 0.0

    @property
    def score(self) -> int:
        return 1 if self.passed else 0


@dataclass
class RunSummary:
    """Pass/total counters for one harness invocation."""

    total_tests: int = 0
    passed_tests: int = 0
    results: List[CaseResult] = field(default_factory=list)

    def record(self, result: CaseResult) -> None:
        self.total_tests += 1
        self.passed_tests += result.score
        self.results.append(result)

    @property
    def failed(self) -> List[CaseResult]:
        return [r for r in self.results if not r.passed]

    @property
    def success_rate(self) -> float:
        if self.total_tests == 0:
            return 0.0
        return self.passed_tests / self.total_tests * 100

    @property
    def exit_code(self) -> int:
        return 0 if self.passed_tests == self.total_tests else 1

    @property
    def rounded_success_rate(self) -> int:
        """Success rate rounded half up, so 12.5 displays as 13."""
        return math.floor(self.success_rate + 0.5)

    def summary_line(self) -> str:
        return f"{self.passed_tests}/{self.total_tests} passed ({self.rounded_success_rate}%)"
