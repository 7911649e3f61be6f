"""Logging setup for the command-line tool."""

import logging
import sys
from typing import Optional

from .errors import IOFailureError


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure the 'stl_to_pins' logger: stderr always, a file optionally.

    Console output goes to stderr so G-code written to stdout stays clean.
    """
    logger = logging.getLogger("stl_to_pins")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        except OSError as exc:
            raise IOFailureError(f"Could not open log file {log_file}: {exc}") from exc
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
