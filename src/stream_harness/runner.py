"""Sequential driver that runs the cases and reports the outcome."""

from __future__ import annotations

from typing import Iterable

from stream_harness.cases import AcceptanceCase
from stream_harness.errors import FailureKind, classify
from stream_harness.models import CaseResult, RunSummary
from stream_harness.observability import get_logger

logger = get_logger("stream_harness.runner")


class HarnessRunner:
    """Runs acceptance cases one after another and tallies the results.

    A failing case never stops the sequence; the driver only ever sees a
    ``CaseResult``.
    """

    def __init__(self, cases: Iterable[AcceptanceCase]) -> None:
        self.cases = list(cases)
        self.summary = RunSummary()

    def run(self) -> RunSummary:
        for case in self.cases:
            logger.info(case.name)
            result = self._run_case(case)
            self.summary.record(result)
            if not result.passed:
                logger.error(
                    f"{result.name}: {result.message}",
                    case=result.name,
                    kind=(result.failure or FailureKind.UNEXPECTED).value,
                )

        logger.info(
            self.summary.summary_line(),
            passed=self.summary.passed_tests,
            total=self.summary.total_tests,
        )
        return self.summary

    def _run_case(self, case: AcceptanceCase) -> CaseResult:
        try:
            return case.run()
        except Exception as e:
            # run() already isolates failures; this only guards custom cases
            logger.exception("Case escaped its boundary", case=case.name)
            return CaseResult(name=case.name, passed=False, failure=classify(e), message=str(e))


def run_harness(cases: Iterable[AcceptanceCase]) -> int:
    """Run ``cases`` and return the process exit code."""
    return HarnessRunner(cases).run().exit_code
