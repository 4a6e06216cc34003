"""Server readiness probing."""

import time
from typing import Optional

import httpx

from stream_harness.errors import LaunchError, ServerNotReady
from stream_harness.observability import get_logger
from stream_harness.process import ProcessHandle

logger = get_logger("stream_harness.readiness")


def wait_for_server(
    url: str,
    timeout: float = 10.0,
    poll_interval: float = 0.25,
    process: Optional[ProcessHandle] = None,
) -> int:
    """Poll ``url`` until the server answers with any HTTP response.

    A 404 still proves the server is accepting connections, so the status
    code is not checked. Returns the number of attempts made.

    Raises LaunchError if ``process`` exits while being probed and
    ServerNotReady once ``timeout`` elapses.
    """
    deadline = time.monotonic() + timeout
    attempt = 0

    # Local child process; ignore proxy settings
    with httpx.Client(timeout=min(2.0, timeout), trust_env=False) as client:
        while True:
            attempt += 1
            if process is not None and not process.running:
                raise LaunchError(
                    f"{process.name} exited with status {process.returncode} before accepting connections"
                )
            try:
                response = client.get(url)
            except httpx.TransportError as e:
                logger.debug("Server not ready yet", url=url, attempt=attempt, error=str(e) or type(e).__name__)
            else:
                logger.info("Server is ready", url=url, attempt=attempt, status_code=response.status_code)
                return attempt

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ServerNotReady(f"server at {url} not ready after {timeout:g}s ({attempt} attempts)")
            time.sleep(min(poll_interval, remaining))
