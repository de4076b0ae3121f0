"""
Settings read from the environment, and logging setup.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DB_PATH = os.environ.get("COURTSIDE_DB_PATH", str(PROJECT_ROOT / "data" / "courtside.db"))
ROSTER_PATH = os.environ.get("COURTSIDE_ROSTER_PATH")  # optional roster JSON for the player directory
LOG_LEVEL = os.environ.get("COURTSIDE_LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get(
        "COURTSIDE_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if o.strip()
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_logging_configured = False


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger. Safe to call repeatedly."""
    global _logging_configured
    pkg_logger = logging.getLogger("courtside")
    lvl = level if level is not None else LOG_LEVEL
    if isinstance(lvl, str):
        lvl = logging.getLevelName(lvl.upper())
        if not isinstance(lvl, int):
            lvl = logging.INFO
    pkg_logger.setLevel(lvl)
    if not _logging_configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        pkg_logger.addHandler(handler)
        _logging_configured = True
    return pkg_logger
