"""Logging setup for the job board.

Everything goes to stderr so ``list`` output on stdout stays pipeable, plus a
dated debug file under ``logs/``. Per-logger levels come from ``LOG_LEVELS``,
e.g. ``LOG_LEVELS="jobboard.scrape=DEBUG,urllib3=INFO"``.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_LOG_DIR = Path(os.environ.get("JOBBOARD_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# urllib3 logs every request URL at DEBUG, Airtable formulas included.
DEFAULT_LEVELS: dict[str, int] = {
    "urllib3": logging.WARNING,
}

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _level(name: str, default: int) -> int:
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else default


def parse_levels(text: str | None) -> dict[str, int]:
    """Read ``name=LEVEL`` pairs separated by commas; bad entries are skipped."""
    levels: dict[str, int] = {}
    for item in (text or "").split(","):
        name, sep, level_name = item.partition("=")
        if not sep or not name.strip():
            continue
        value = getattr(logging, level_name.strip().upper(), None)
        if isinstance(value, int):
            levels[name.strip()] = value
    return levels


def apply_levels(levels: dict[str, int]) -> None:
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def _file_logging_enabled() -> bool:
    return os.environ.get("JOBBOARD_LOG_FILE", "1").lower() not in ("0", "false", "no")


def _configure() -> None:
    level = _level(os.environ.get("LOG_LEVEL", "INFO"), logging.INFO)

    root = logging.getLogger()
    root.setLevel(min(level, logging.DEBUG) if _file_logging_enabled() else level)
    apply_levels({**DEFAULT_LEVELS, **parse_levels(os.environ.get("LOG_LEVELS"))})

    if root.handlers:
        return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    root.addHandler(console)

    if not _file_logging_enabled():
        return
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(_LOG_DIR / f"jobboard_{datetime.now():%Y-%m-%d}.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        root.addHandler(fh)
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled: %s", exc)
