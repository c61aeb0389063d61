"""
utils.logger – logging setup for the CLI and long-running hosts.

Call setup_logging() once at startup.  Library modules never configure
handlers; they only call logging.getLogger(__name__).

Provider requests run on worker threads, so the thread name is part of
every line.  stdout is left alone for --json output.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)-12s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP plumbing underneath the provider clients
_QUIET_LOGGERS = ("urllib3", "requests", "concurrent.futures")


def resolve_level(level: Union[str, int, None]) -> int:
    """'debug' → logging.DEBUG.  Unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    if not level:
        return logging.INFO
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: Union[str, int] = "INFO",
    log_file: Optional[str] = None,
    provider_level: Optional[Union[str, int]] = None,
) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level          : root level, name or number
    log_file       : optional path, appended to in addition to stderr
    provider_level : level for the weather provider clients; defaults to
                     `level`.  Set to "DEBUG" to trace fusion decisions
                     while keeping the rest of the output at INFO.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    root_level = resolve_level(level)
    logging.basicConfig(
        level=root_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    providers = logging.getLogger("weather_intel.data.weather")
    providers.setLevel(resolve_level(provider_level) if provider_level else root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_level))
