"""Logging setup shared by all circaevum modules."""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
if LOG_LEVEL not in VALID_LOG_LEVELS:
    LOG_LEVEL = "WARNING"

_ROOT_NAME = "circaevum"
_root = logging.getLogger(_ROOT_NAME)
if not _root.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    )
    _root.addHandler(_handler)
    _root.setLevel(getattr(logging, LOG_LEVEL, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the circaevum hierarchy for the given module."""
    return logging.getLogger(f"{_ROOT_NAME}.{name.split('.')[-1]}")
