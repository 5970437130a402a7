"""Configuration management for the localserver control plane."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .settings import ServerSettings

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs from the .env file.
        Empty dict if file doesn't exist or cannot be read.

    Note:
        - Skips empty lines and comments (lines starting with #)
        - Strips quotes (both single and double) from values
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError:
        logger.debug("Failed to read .env file (continuing): %s", path, exc_info=True)
        return {}

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        if key:
            result[key] = val.strip().strip('"').strip("'")

    return result


class ConfigManager:
    """Builds ``ServerSettings`` from environment variables and an optional .env file."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file into the process environment.

        Variables already present in the environment are left untouched.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_overrides_from_env(self) -> dict[str, Any]:
        """Collect settings overrides from environment variables.

        Recognizes:
        - LOCALSERVER_HOST -> 'host'
        - LOCALSERVER_BIND -> 'bind_address'
        - LOCALSERVER_PORT -> 'port' (int)
        - LOCALSERVER_HEALTH_INTERVAL -> 'health_check_interval' (float seconds)
        - LOCALSERVER_HEALTH_TIMEOUT -> 'health_check_timeout' (float seconds)
        - LOCALSERVER_RESTART_DELAY -> 'restart_delay' (float seconds)
        - LOCALSERVER_CERT_PATH -> 'certificate_path'
        - LOCALSERVER_DEBUG -> 'debug_logging' (1/true/yes/on)

        Returns:
            Dictionary of field overrides; malformed numbers are skipped
        """
        cfg: dict[str, Any] = {}

        host = os.environ.get("LOCALSERVER_HOST")
        if host:
            cfg["host"] = host

        bind = os.environ.get("LOCALSERVER_BIND")
        if bind:
            cfg["bind_address"] = bind

        numeric = (
            ("LOCALSERVER_PORT", "port", int),
            ("LOCALSERVER_HEALTH_INTERVAL", "health_check_interval", float),
            ("LOCALSERVER_HEALTH_TIMEOUT", "health_check_timeout", float),
            ("LOCALSERVER_RESTART_DELAY", "restart_delay", float),
        )
        for env_name, field_name, convert in numeric:
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                cfg[field_name] = convert(raw)
            except ValueError:
                logger.warning("Invalid %s=%r; ignoring", env_name, raw)

        cert_path = os.environ.get("LOCALSERVER_CERT_PATH")
        if cert_path:
            cfg["certificate_path"] = Path(cert_path).expanduser()

        debug = os.environ.get("LOCALSERVER_DEBUG")
        if debug:
            cfg["debug_logging"] = debug.strip().lower() in _TRUTHY

        return cfg

    def load_settings(self, **overrides: Any) -> ServerSettings:
        """Load .env file and build settings from environment.

        Explicit keyword overrides (e.g. from the CLI) win over the environment.
        Fields that fail validation fall back to their defaults, whether they
        came from the environment or from an override.

        Returns:
            Validated ServerSettings
        """
        self.load_env_file()

        cfg = self.build_overrides_from_env()
        cfg.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return ServerSettings(**cfg)
        except ValidationError as e:
            invalid = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
            logger.warning(
                "Invalid server configuration for %s, falling back to defaults: %s",
                ", ".join(sorted(invalid)) or "settings",
                e,
            )

        try:
            return ServerSettings(**{k: v for k, v in cfg.items() if k not in invalid})
        except ValidationError:
            logger.warning("Server configuration still invalid, using defaults", exc_info=True)
            return ServerSettings()
