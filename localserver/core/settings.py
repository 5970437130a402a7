"""Server settings model for localserver."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

PACKAGE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_HOST = "localhost"
DEFAULT_BIND_ADDRESS = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_CERTIFICATE_PATH = PACKAGE_DIR / "assets" / "certificates" / "localhost.crt"
CERTIFICATE_DOWNLOAD_NAME = "localhost.crt"


class ServerSettings(BaseModel):
    """Immutable runtime settings for the embedded control server.

    ``port`` may be 0 to let the OS pick a free port; the lifecycle manager
    reads the effective port back from the bound socket.
    """

    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    bind_address: str = DEFAULT_BIND_ADDRESS
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)

    health_check_interval: float = Field(default=10.0, gt=0)
    health_check_timeout: float = Field(default=5.0, gt=0)
    restart_delay: float = Field(default=0.5, ge=0)

    certificate_path: Path = DEFAULT_CERTIFICATE_PATH
    event_buffer_size: int = Field(default=100, ge=1)
    debug_logging: bool = False

    session_timeout: timedelta = timedelta(hours=24)
    session_save_interval: float = Field(default=300.0, gt=0)

    @field_validator("host", "bind_address")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value
