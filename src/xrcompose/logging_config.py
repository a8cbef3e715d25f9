"""Logging setup for processes embedding the composer."""

import logging
import sys

from xrcompose.config import LogLevel


def setup_logging(level: LogLevel) -> None:
    """Configure root logging for xrcompose."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    # The kubernetes client logs every request body at DEBUG
    if level != LogLevel.DEBUG:
        logging.getLogger("kubernetes").setLevel(logging.WARNING)
