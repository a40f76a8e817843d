"""
Logging for the finance_tracker package.

Modules log through get_logger() and stay silent until the CLI calls
configure_logging() once at startup.
"""
import logging
import os
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "finance_tracker"
LEVEL_ENV_VAR = "FINANCE_TRACKER_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def resolve_level(level: Optional[Union[int, str]] = None) -> int:
    """
    Turn a level name or number into a logging level.

    Falls back to FINANCE_TRACKER_LOG_LEVEL, then WARNING. Unknown names
    are treated as missing.
    """
    if level is None or level == "":
        level = os.getenv(LEVEL_ENV_VAR) or logging.WARNING
    if isinstance(level, int):
        return level

    name = str(level).strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """Send package logs to stderr. Later calls are ignored."""
    global _configured
    if _configured:
        return

    root = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(root.handlers):
        if isinstance(handler, logging.NullHandler):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(resolve_level(level))
    root.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
