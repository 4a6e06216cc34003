"""Child process control for acceptance cases.

A ``ProcessHandle`` owns exactly one child. It is a context manager: leaving
the ``with`` block signals the child (if it is still running) and reaps it,
so no case can leave an orphan behind regardless of how it exits.
"""

from __future__ import annotations

import signal as signals
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List, Optional, Sequence

from stream_harness.errors import LaunchError, ProcessTimeout
from stream_harness.observability import get_logger

logger = get_logger("stream_harness.process")


@dataclass
class ProcessResult:
    """Exit status and captured output of a finished child."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def stderr_lines(self) -> List[str]:
        return self.stderr.splitlines()


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ProcessHandle:
    """A spawned child process and its output streams."""

    def __init__(
        self,
        name: str,
        argv: Sequence[str],
        popen: subprocess.Popen,
        spool: Optional[tuple] = None,
        shutdown_timeout: float = 5.0,
    ) -> None:
        self.name = name
        self.argv = list(argv)
        self._popen = popen
        self._spool = spool
        self._shutdown_timeout = shutdown_timeout
        self._result: Optional[ProcessResult] = None

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._popen.returncode

    @property
    def stdout(self) -> Optional[IO[bytes]]:
        return self._spool[0] if self._spool else self._popen.stdout

    @property
    def stderr(self) -> Optional[IO[bytes]]:
        return self._spool[1] if self._spool else self._popen.stderr

    @property
    def running(self) -> bool:
        return self._popen.poll() is None

    @property
    def result(self) -> Optional[ProcessResult]:
        """The collected result, once the child has been reaped."""
        return self._result

    def wait(self, timeout: Optional[float] = None) -> ProcessResult:
        """Block until the child exits, draining its output.

        Raises ProcessTimeout after killing the child if it is still running
        when ``timeout`` expires.
        """
        if self._result is not None:
            return self._result
        try:
            return self._collect(timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Process missed its deadline, killing", process=self.name, pid=self.pid, timeout=timeout)
            self._kill()
            raise ProcessTimeout(self.name, timeout)

    def signal(self, sig: int = signals.SIGTERM) -> None:
        """Request termination. Best effort; a no-op once the child has exited."""
        if not self.running:
            return
        logger.debug("Signalling process", process=self.name, pid=self.pid, signal=int(sig))
        try:
            self._popen.send_signal(sig)
        except ProcessLookupError:
            # Exited between poll() and send_signal()
            pass

    def stop(self, grace: Optional[float] = None) -> ProcessResult:
        """Signal the child and reap it, escalating to SIGKILL after ``grace``."""
        if self._result is not None:
            return self._result
        grace = self._shutdown_timeout if grace is None else grace
        self.signal(signals.SIGTERM)
        try:
            return self._collect(grace)
        except subprocess.TimeoutExpired:
            logger.warning("Process ignored SIGTERM, killing", process=self.name, pid=self.pid, grace=grace)
            return self._kill()

    def __enter__(self) -> "ProcessHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
        self._close_spool()

    def _collect(self, timeout: Optional[float]) -> ProcessResult:
        if self._spool:
            returncode = self._popen.wait(timeout=timeout)
            out, err = (self._read_spool(f) for f in self._spool)
        else:
            out_bytes, err_bytes = self._popen.communicate(timeout=timeout)
            returncode = self._popen.returncode
            out, err = _decode(out_bytes), _decode(err_bytes)
        self._result = ProcessResult(returncode=returncode, stdout=out, stderr=err)
        logger.debug("Process exited", process=self.name, pid=self.pid, returncode=returncode)
        return self._result

    def _kill(self) -> ProcessResult:
        self._popen.kill()
        return self._collect(None)

    @staticmethod
    def _read_spool(spool_file: IO[bytes]) -> str:
        spool_file.seek(0)
        return _decode(spool_file.read())

    def _close_spool(self) -> None:
        if self._spool:
            for spool_file in self._spool:
                spool_file.close()


class ProcessController:
    """Launches collaborators as child processes."""

    def __init__(self, cwd: Optional[Path] = None, shutdown_timeout: float = 5.0) -> None:
        self.cwd = cwd
        self.shutdown_timeout = shutdown_timeout

    def spawn(
        self,
        executable: str,
        args: Sequence[str] = (),
        *,
        name: Optional[str] = None,
        spool: bool = False,
    ) -> ProcessHandle:
        """Start ``executable`` with ``args``.

        With ``spool`` the child's output goes to temporary files rather than
        pipes, which suits long-lived children whose output is only read after
        they stop.

        Raises LaunchError if the executable cannot be started.
        """
        argv = [executable, *args]
        name = name or Path(executable).name
        spool_files = (tempfile.TemporaryFile(), tempfile.TemporaryFile()) if spool else None
        stdout = spool_files[0] if spool_files else subprocess.PIPE
        stderr = spool_files[1] if spool_files else subprocess.PIPE

        kwargs = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

        try:
            popen = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=stderr,
                cwd=self.cwd,
                **kwargs,
            )
        except OSError as e:
            if spool_files:
                for spool_file in spool_files:
                    spool_file.close()
            raise LaunchError(f"cannot launch {executable}: {e.strerror or e}") from e

        logger.info("Started process", process=name, pid=popen.pid, argv=argv)
        return ProcessHandle(
            name=name,
            argv=argv,
            popen=popen,
            spool=spool_files,
            shutdown_timeout=self.shutdown_timeout,
        )
