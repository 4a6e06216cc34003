"""Pytest configuration and shared fixtures.

The client and server collaborators are replaced by small executable Python
scripts written into the test's temporary directory. Their behavior is
steered through environment variables, which spawned children inherit.
"""

import json
import logging
import socket
import stat
import sys
import textwrap
from pathlib import Path

import pytest
import structlog

from stream_harness.process import ProcessController
from stream_harness.settings import HarnessSettings



FAKE_CLIENT = '''
import os
import sys
import time

args = sys.argv[1:]
marker = os.environ.get("FAKE_CLIENT_MARKER")
if marker:
    with open(marker, "a") as f:
        f.write(" ".join(args) + "\\n")

if args == ["-h"]:
    sys.stderr.write("usage: ezstream [-hqrVv] -c cfgfile\\n")
    sys.exit(int(os.environ.get("FAKE_CLIENT_HELP_STATUS", "0")))
if args == ["-V"]:
    if not os.environ.get("FAKE_CLIENT_NO_VERSION"):
        print("ezstream version 1.0.2")
    sys.exit(0)
if not args:
    sys.stderr.write("either -c or -s must be provided\\n")
    sys.stderr.write("usage: ezstream [-hqrVv] -c cfgfile\\n")
    sys.exit(2)

sys.stderr.write("ezstream: connecting to server\\n")
sys.stderr.write("ezstream: streaming test1.ogg\\n")
time.sleep(float(os.environ.get("FAKE_CLIENT_SLEEP", "0")))
sys.stderr.write("ezstream: exiting\\n")
exit_marker = os.environ.get("FAKE_CLIENT_EXIT_TIME")
if exit_marker:
    with open(exit_marker, "w") as f:
        f.write(repr(time.time()))
sys.exit(int(os.environ.get("FAKE_CLIENT_STATUS", "0")))
'''


FAKE_SERVER = '''
import http.server
import json
import os
import signal
import sys
import time

config = json.load(open(sys.argv[sys.argv.index("-c") + 1]))

if os.environ.get("FAKE_SERVER_EXIT"):
    sys.exit(int(os.environ["FAKE_SERVER_EXIT"]))

time.sleep(float(os.environ.get("FAKE_SERVER_DELAY", "0")))


class Handler(http.server.BaseHTTPRequestHandler):
    def do_GET(self):
        self.send_response(404)
        self.end_headers()

    def log_message(self, *args):
        pass


def on_term(signum, frame):
    with open(config["marker"] + ".time", "w") as f:
        f.write(repr(time.time()))
    with open(config["marker"], "w") as f:
        f.write("terminated")
    sys.exit(0)


signal.signal(signal.SIGTERM, on_term)
server = http.server.HTTPServer(("127.0.0.1", config["port"]), Handler)
sys.stderr.write("server listening\\n")
sys.stderr.flush()
server.serve_forever()
'''


def write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() so they don't leak between tests."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) not in (logging.StreamHandler, logging.FileHandler):
            continue
        root.removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


@pytest.fixture
def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def fake_client(tmp_path) -> Path:
    return write_script(tmp_path / "fake-ezstream", FAKE_CLIENT)


@pytest.fixture
def fake_server(tmp_path) -> Path:
    return write_script(tmp_path / "fake-icecast", FAKE_SERVER)


@pytest.fixture
def termination_marker(tmp_path) -> Path:
    return tmp_path / "server.terminated"


@pytest.fixture
def server_config(tmp_path, free_port, termination_marker) -> Path:
    path = tmp_path / "icecast.json"
    path.write_text(json.dumps({"port": free_port, "marker": str(termination_marker)}))
    return path


@pytest.fixture
def settings(fake_client, fake_server, server_config, free_port) -> HarnessSettings:
    """Settings pointing at the fake collaborators with short timings."""
    return HarnessSettings(
        client_path=str(fake_client),
        server_path=str(fake_server),
        server_config=str(server_config),
        client_config="ezcfg-test1.xml",
        server_port=free_port,
        settle_delay=0.0,
        ready_timeout=10.0,
        ready_poll_interval=0.05,
        process_timeout=10.0,
        shutdown_timeout=2.0,
    )


@pytest.fixture
def controller(tmp_path) -> ProcessController:
    return ProcessController(cwd=tmp_path, shutdown_timeout=2.0)
