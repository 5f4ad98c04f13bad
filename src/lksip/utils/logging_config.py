"""
Centralized logging configuration for lksip.
Logs go to stderr so that command output on stdout stays machine-readable.
"""

import logging
import os
import sys

APP_LOGGERS = ["lksip", "__main__"]


def configure_logging(verbose: bool = False):
    """
    Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logs for application modules.
                 If False, use INFO level and suppress noisy libraries.
    """
    env_level = os.getenv("LOG_LEVEL", "").upper()
    if env_level == "DEBUG":
        verbose = True

    # Root stays at WARNING to silence libraries (aiohttp, livekit) unless verbose.
    root_level = logging.INFO if verbose else logging.WARNING

    logging.basicConfig(
        level=root_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    app_level = logging.DEBUG if verbose else logging.INFO

    for logger_name in APP_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(app_level)
        logger.propagate = True

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # LiveKit DEBUG is extremely verbose
    if verbose:
        logging.getLogger("livekit").setLevel(logging.INFO)
        logging.getLogger("aiohttp").setLevel(logging.INFO)

    logging.getLogger("lksip.utils.logging_config").debug(f"Logging configured. Level: {logging.getLevelName(app_level)} (Verbose: {verbose})")
