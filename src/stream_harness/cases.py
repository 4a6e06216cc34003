"""Acceptance cases exercised against the streaming client."""

from __future__ import annotations

import time
from typing import Dict, List, Optional, Sequence, Type

from stream_harness.errors import AssertionFailure, classify
from stream_harness.models import CaseResult
from stream_harness.observability import get_logger, time_operation
from stream_harness.process import ProcessController, ProcessResult
from stream_harness.readiness import wait_for_server
from stream_harness.settings import HarnessSettings

logger = get_logger("stream_harness.cases")


class AcceptanceCase:
    """A named check run exactly once per harness invocation.

    Subclasses implement ``execute()`` and raise on failure. ``run()`` is the
    isolation boundary: every exception is converted into a failed
    ``CaseResult`` carrying its failure kind.
    """

    __test__ = False  # not a pytest class
    name = "case"

    def __init__(self, settings: HarnessSettings, controller: ProcessController) -> None:
        self.settings = settings
        self.controller = controller

    def execute(self) -> None:
        raise NotImplementedError

    def run(self) -> CaseResult:
        with time_operation(self.name) as timer:
            try:
                self.execute()
            except Exception as e:
                kind = classify(e)
                logger.debug("Case raised", case=self.name, kind=kind.value, exc_info=True)
                failure = (kind, str(e) or type(e).__name__)
            else:
                failure = None

        if failure is None:
            return CaseResult(name=self.name, passed=True, duration_seconds=timer.duration)
        kind, message = failure
        return CaseResult(
            name=self.name,
            passed=False,
            failure=kind,
            message=message,
            duration_seconds=timer.duration,
        )

    def run_client(self, args: Sequence[str]) -> ProcessResult:
        """Run the client to completion with ``args``."""
        with self.controller.spawn(self.settings.client_path, args, name="client") as client:
            return client.wait(timeout=self.settings.process_timeout)


def expect_exit_status(result: ProcessResult, expected: int = 0) -> None:
    if result.returncode != expected:
        raise AssertionFailure("exit_status", expected, result.returncode)


class HelpCheck(AcceptanceCase):
    """The client prints its help and exits cleanly."""

    name = "help"

    def execute(self) -> None:
        result = self.run_client([self.settings.help_flag])
        expect_exit_status(result, 0)


class VersionCheck(AcceptanceCase):
    """The client reports a version string and exits cleanly."""

    name = "version"

    def execute(self) -> None:
        result = self.run_client([self.settings.version_flag])
        expect_exit_status(result, 0)
        lines = result.stdout.strip().splitlines()
        if not lines:
            raise AssertionFailure("version output", "non-empty", "empty")
        logger.info("Client version", case=self.name, version=lines[0])


class UsageCheck(AcceptanceCase):
    """Without arguments the client refuses to run and prints its usage."""

    name = "usage"
    usage_exit_status = 2

    def execute(self) -> None:
        result = self.run_client([])
        expect_exit_status(result, self.usage_exit_status)
        if "usage" not in result.stderr.lower():
            raise AssertionFailure("usage text on stderr", "present", "missing")


class StreamCheck(AcceptanceCase):
    """The client streams into a freshly started server without error.

    The server must be accepting connections before the client starts and
    must outlive the client's session. It is always stopped and reaped
    before the case returns.
    """

    name = "stream"

    def client_args(self) -> List[str]:
        return ["-v"] * self.settings.client_verbosity + ["-c", self.settings.client_config]

    def execute(self) -> None:
        settings = self.settings
        exit_status = 0

        logger.info("Streaming session", case=self.name, url=settings.stream_url)
        with self.controller.spawn(
            settings.server_path, ["-c", settings.server_config], name="server", spool=True
        ) as server:
            if settings.warmup_delay:
                time.sleep(settings.warmup_delay)
            wait_for_server(
                settings.server_url,
                timeout=settings.ready_timeout,
                poll_interval=settings.ready_poll_interval,
                process=server,
            )

            with self.controller.spawn(settings.client_path, self.client_args(), name="client") as client:
                try:
                    exit_status += client.wait(timeout=settings.process_timeout).returncode
                finally:
                    self._log_client_stderr(client.result)

            time.sleep(settings.settle_delay)
            server_result = server.stop(settings.shutdown_timeout)
            logger.debug(
                "Server stopped",
                case=self.name,
                returncode=server_result.returncode,
                stderr=server_result.stderr,
            )

        if exit_status != 0:
            raise AssertionFailure("exit_status", 0, exit_status)

    def _log_client_stderr(self, result: Optional[ProcessResult]) -> None:
        if result is None:
            return
        for line in result.stderr_lines:
            logger.info(line, case=self.name, source="client", stream="stderr")


CASES: Dict[str, Type[AcceptanceCase]] = {
    case.name: case for case in (HelpCheck, StreamCheck, VersionCheck, UsageCheck)
}

DEFAULT_CASES = ("help", "stream")


def build_cases(
    names: Sequence[str],
    settings: HarnessSettings,
    controller: ProcessController,
) -> List[AcceptanceCase]:
    """Instantiate the named cases in the given order."""
    cases = []
    seen = set()
    for name in names:
        if name not in CASES:
            raise ValueError(f"Case '{name}' not found")
        if name in seen:
            raise ValueError(f"Case '{name}' selected twice")
        seen.add(name)
        cases.append(CASES[name](settings, controller))
    return cases
