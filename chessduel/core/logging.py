"""loguru sinks for the CLI: a short colored line on stderr and, optionally, a rotating log file."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
)
# the file also keeps the bound model / attempt of the move adapter
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message} | {extra}"


def setup_logging(level: str = "INFO", log_file: Optional[str | Path] = None) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level=level, format=FILE_FORMAT, rotation="10 MB", retention=3)

    logger.debug("Logging at {} (file: {})", level, log_file or "-")
