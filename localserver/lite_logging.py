"""
Central logging configuration for localserver.

Keeps localserver's own diagnostics visible while suppressing verbose debug
output from aiohttp, httpx and asyncio.
"""

import logging
import os
from typing import Optional

from .api.middleware import get_request_id

_SUPPRESSED_LOGGERS = (
    "aiohttp.access",
    "aiohttp.server",
    "aiohttp.web_log",
    "httpx",
    "httpcore",
    "asyncio",
)


class RequestIdFilter(logging.Filter):
    """Add the current request id to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def configure_lite_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for localserver.

    Args:
        debug_mode: Whether to enable debug logging for localserver modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        LOCALSERVER_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        LOCALSERVER_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("LOCALSERVER_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("LOCALSERVER_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    # Don't use basicConfig(force=True): it would replace the colorlog handler
    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    request_filter = RequestIdFilter()

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(request_id)s] %(levelname)s - %(name)s - %(message)s")
        )
        handler.addFilter(request_filter)
        root_logger.addHandler(handler)
    else:
        for existing_handler in root_logger.handlers:
            if not any(isinstance(f, RequestIdFilter) for f in existing_handler.filters):
                existing_handler.addFilter(request_filter)

    logger_config: dict[str, int] = {name: logging.WARNING for name in _SUPPRESSED_LOGGERS}
    logger_config["aiohttp.web"] = logging.INFO
    logger_config["localserver"] = logging.DEBUG if final_debug else logging.INFO

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)

    if final_debug:
        root_logger.info("Debug logging enabled for localserver modules")
    else:
        root_logger.debug("Production logging configuration applied")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ("localserver", "aiohttp.access", "aiohttp.server", "httpx", "asyncio"):
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
