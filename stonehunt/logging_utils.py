import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(
    level: int = logging.WARNING,
    *,
    log_file: Optional[str] = None,
    stream: Optional[object] = None,
) -> logging.Logger:
    """
    Configure the `stonehunt` logger tree:
    - stream handler on stderr by default (stdout carries the judge protocol)
    - optional append-mode file handler

    Safe to call repeatedly; handlers are reused, not stacked.
    """
    if stream is None:
        stream = sys.stderr

    fmt = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger("stonehunt")
    root.setLevel(level)
    root.propagate = False

    have_stream = False
    for h in root.handlers:
        h.setLevel(level)
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            have_stream = True

    if not have_stream:
        stream_handler = logging.StreamHandler(stream=stream)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(fmt)
        root.addHandler(stream_handler)

    if log_file:
        log_file = os.path.abspath(log_file)
        for h in root.handlers:
            if isinstance(h, logging.FileHandler) and os.path.abspath(getattr(h, "baseFilename", "")) == log_file:
                return root
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(level)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    return root
