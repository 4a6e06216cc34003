"""Harness settings and configuration."""

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


class HarnessSettings(BaseSettings):
    """Harness settings with environment variable support."""

    # Collaborators
    client_path: str = Field(default="ezstream", description="Streaming client executable")
    server_path: str = Field(default="icecast2", description="Media server executable")
    server_config: str = Field(default="icecast.xml", description="Server configuration file")
    client_config: str = Field(default="ezcfg-test1.xml", description="Client stream configuration file")
    work_dir: Optional[Path] = Field(default=None, description="Working directory for child processes")

    # Client flags
    help_flag: str = Field(default="-h", description="Flag that prints client help")
    version_flag: str = Field(default="-V", description="Flag that prints client version")
    client_verbosity: int = Field(default=3, ge=0, description="Number of -v flags for streaming")

    # Server endpoint
    server_host: str = Field(default="127.0.0.1", description="Server listen address")
    server_port: int = Field(default=34533, description="Server listen port")
    mount: str = Field(default="/test1.ogg", description="Mount point the client streams to")

    # Timing
    warmup_delay: float = Field(default=0.0, ge=0, description="Fixed pause before readiness probing")
    settle_delay: float = Field(default=1.0, ge=0, description="Pause between client exit and server stop")
    ready_timeout: float = Field(default=10.0, gt=0, description="Deadline for server readiness")
    ready_poll_interval: float = Field(default=0.25, gt=0, description="Delay between readiness attempts")
    process_timeout: float = Field(default=120.0, gt=0, description="Deadline for client processes")
    shutdown_timeout: float = Field(default=5.0, gt=0, description="Grace period before SIGKILL")

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer (console or json)")
    log_dir: Optional[Path] = Field(default=None, description="Directory for a log file copy")

    # Selection
    cases: List[str] = Field(default=["help", "stream"], description="Cases to run, in order")

    model_config = ConfigDict(
        env_prefix="STREAM_HARNESS_",
        case_sensitive=False,
    )

    @property
    def server_url(self) -> str:
        return f"http://{self.server_host}:{self.server_port}"

    @property
    def stream_url(self) -> str:
        return f"{self.server_url}{self.mount}"


def get_settings(**overrides) -> HarnessSettings:
    """Get harness settings, with explicit overrides taking precedence."""
    return HarnessSettings(**overrides)
