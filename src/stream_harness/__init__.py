"""Acceptance-test harness for a streaming-source client and its media server."""

from .cases import AcceptanceCase, HelpCheck, StreamCheck, UsageCheck, VersionCheck
from .models import CaseResult, RunSummary
from .process import ProcessController, ProcessHandle, ProcessResult
from .runner import HarnessRunner, run_harness

__version__ = "0.1.0"

__all__ = [
    "AcceptanceCase",
    "CaseResult",
    "HarnessRunner",
    "HelpCheck",
    "ProcessController",
    "ProcessHandle",
    "ProcessResult",
    "RunSummary",
    "StreamCheck",
    "UsageCheck",
    "VersionCheck",
    "run_harness",
]
