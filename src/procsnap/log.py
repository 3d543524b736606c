"""Logging setup for the procsnap front ends."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING", log_file: str | None = None) -> None:
    """
    Configure the root logger for a procsnap front end.

    Records go to stderr, so snapshot output on stdout stays clean, and
    additionally to ``log_file`` when given. Unknown level names fall back
    to WARNING.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
