"""agtx logging configuration.

agtx logs through loguru. Modules bind their own component name:

    logger = get_logger(__name__)

`setup_logging()` is called once by the embedding front end. Without it, loguru's
default stderr sink stays active. Log file output is opt-in via `AGTX_LOG_FILE`.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | {message}"


def get_logger(name: str) -> "Logger":
    """Return the shared loguru logger bound to a component name."""
    return logger.bind(component=name)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure agtx logging sinks.

    Args:
        level: Optional override for `AGTX_LOG_LEVEL`.
    """
    if level:
        os.environ["AGTX_LOG_LEVEL"] = level
    resolved_level = os.getenv("AGTX_LOG_LEVEL", "INFO").upper()

    logger.remove()
    logger.configure(extra={"component": "agtx"})
    logger.add(sys.stderr, level=resolved_level, format=_LOG_FORMAT)

    log_file = os.getenv("AGTX_LOG_FILE")
    if log_file:
        logger.add(
            os.path.expanduser(log_file),
            level=resolved_level,
            format=_LOG_FORMAT,
            rotation="10 MB",
            retention=5,
        )
