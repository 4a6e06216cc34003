"""Command-line interface for the stream harness."""

import sys
from pathlib import Path

import click

from stream_harness.cases import CASES, DEFAULT_CASES, build_cases
from stream_harness.observability import bind_harness_identity, get_logger, setup_logging
from stream_harness.process import ProcessController
from stream_harness.runner import run_harness
from stream_harness.settings import get_settings


@click.command()
@click.option("--client", "client_path", default=None, help="Streaming client executable")
@click.option("--server", "server_path", default=None, help="Media server executable")
@click.option("--server-config", default=None, help="Configuration file passed to the server")
@click.option("--client-config", default=None, help="Stream configuration file passed to the client")
@click.option("--work-dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Working directory for child processes")
@click.option("--server-host", default=None, help="Address the server listens on")
@click.option("--server-port", default=None, type=int, help="Port the server listens on")
@click.option(
    "--case",
    "cases",
    multiple=True,
    type=click.Choice(sorted(CASES)),
    help=f"Case to run, repeatable (default: {', '.join(DEFAULT_CASES)})",
)
@click.option("--warmup-delay", default=None, type=float, help="Fixed pause after starting the server")
@click.option("--settle-delay", default=None, type=float, help="Pause between client exit and server stop")
@click.option("--ready-timeout", default=None, type=float, help="Deadline for server readiness in seconds")
@click.option("--process-timeout", default=None, type=float, help="Deadline for each client run in seconds")
@click.option("--log-level", default=None, type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False), help="Log level")
@click.option("--log-format", default=None, type=click.Choice(["console", "json"]), help="Log output format")
@click.option("--log-dir", default=None, type=click.Path(file_okay=False, path_type=Path), help="Also write logs to this directory")
def main(cases, **options):
    """Acceptance tests for a streaming-source client.

    Runs the client's help check, then starts the media server, streams into
    it with the client and stops the server again. Exits 0 only if every case
    passed.
    """
    overrides = {key: value for key, value in options.items() if value is not None}
    if cases:
        overrides["cases"] = list(cases)
    settings = get_settings(**overrides)

    setup_logging(settings.log_level, settings.log_format, settings.log_dir)
    bind_harness_identity(Path(sys.argv[0]).stem)
    logger = get_logger("stream_harness.cli")
    logger.debug("Effective configuration", **settings.model_dump(mode="json"))

    try:
        selected = build_cases(settings.cases, settings, ProcessController(
            cwd=settings.work_dir,
            shutdown_timeout=settings.shutdown_timeout,
        ))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="cases")

    sys.exit(run_harness(selected))


if __name__ == "__main__":
    main()
