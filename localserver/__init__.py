"""localserver - embedded local HTTP control server with lifecycle supervision.

Imports are kept light so the package can be inspected without starting the
event loop; the runtime pieces are imported inside ``run_server()``.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console with colorlog.

    Honors LOCALSERVER_DEBUG (truthy values: "1", "true", "yes", "on"), which
    forces DEBUG verbosity regardless of ``level_name``.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("LOCALSERVER_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none is present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message (only the level is colorized)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def run_server(args: Optional[object] = None) -> int:
    """Start the local control server and run until interrupted.

    Args:
        args: Optional command line namespace with --host, --port, --bind and --debug

    Returns:
        Process exit code
    """
    import asyncio
    import logging
    import os

    _init_logging(os.environ.get("LOCALSERVER_LOG_LEVEL"))

    from .core.config_manager import ConfigManager
    from .lite_logging import configure_lite_logging
    from .runner import serve

    logger = logging.getLogger(__name__)

    settings = ConfigManager().load_settings(
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        bind_address=getattr(args, "bind", None),
        debug_logging=True if getattr(args, "debug", False) else None,
    )
    configure_lite_logging(debug_mode=settings.debug_logging)

    try:
        return asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
