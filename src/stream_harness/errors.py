"""Failure kinds and the exceptions that carry them."""

from enum import Enum


class FailureKind(str, Enum):
    LAUNCH = "launch"
    ASSERTION = "assertion"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


class HarnessError(Exception):
    """Base class for failures raised inside an acceptance case."""

    kind = FailureKind.UNEXPECTED


class LaunchError(HarnessError):
    """Raised when an executable cannot be started."""

    kind = FailureKind.LAUNCH


class AssertionFailure(HarnessError):
    """Raised when an observed value differs from the expected one."""

    kind = FailureKind.ASSERTION

    def __init__(self, label: str, expected, actual):
        self.label = label
        self.expected = expected
        self.actual = actual
        super().__init__(f"{label}: {expected} != {actual}")


class ProcessTimeout(HarnessError):
    """Raised when a child process misses its deadline."""

    kind = FailureKind.TIMEOUT

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(f"{name} did not exit within {timeout:g}s")


class ServerNotReady(HarnessError):
    """Raised when the server never answers within the readiness deadline."""

    kind = FailureKind.TIMEOUT


def classify(exc: BaseException) -> FailureKind:
    """Map an exception caught at a case boundary to its failure kind."""
    if isinstance(exc, HarnessError):
        return exc.kind
    return FailureKind.UNEXPECTED
