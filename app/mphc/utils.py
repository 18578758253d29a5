from __future__ import annotations

import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from urllib.parse import urlsplit

from . import config

LOGGER = logging.getLogger("mphc")
_LOGGER_INITIALISED = False
_CURRENT_LOG_FILE: Path = config.LOG_FILE

# Characters Windows (and most shells) refuse in a file name.
_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


def _configure_logger(log_path: Path) -> None:
    """Configure the shared application logger to write to ``log_path``."""

    global _LOGGER_INITIALISED, _CURRENT_LOG_FILE

    log_path.parent.mkdir(parents=True, exist_ok=True)

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)

    LOGGER.setLevel(logging.INFO)
    LOGGER.addHandler(stream_handler)
    LOGGER.addHandler(file_handler)
    LOGGER.propagate = False

    _CURRENT_LOG_FILE = log_path
    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    """Initialise the logger lazily using the default log file."""

    if _LOGGER_INITIALISED:
        return

    _configure_logger(config.LOG_FILE)


def setup_run_logger(log_dir: Path | None = None) -> Path:
    """Rotate to a fresh timestamped log file for the current run."""

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = (log_dir or config.LOG_DIR) / f"mphc_{timestamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def get_current_log_path() -> Path:
    """Return the path to the log file currently receiving log lines."""

    _ensure_logger()
    return _CURRENT_LOG_FILE


def log_line(message: str, level: int = logging.INFO) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.log(level, message)


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing; safe to call repeatedly."""

    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    """Replace each of ``< > : " / \\ | ? *`` in *name* with ``_``.

    Every other character is kept as-is, so the transform is idempotent and
    makes no assumption about an extension being present.
    """

    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def file_name_from_url(url: str, fallback: str | None = None) -> str:
    """Return the raw file name for ``url``: the last ``/`` segment of its path.

    The query string and fragment are not part of the name, so
    ``.../Order123.pdf?x=1`` yields ``Order123.pdf``. When the path ends in a
    slash the trimmed ``fallback`` (usually the link label) is used instead,
    then ``"document"``.
    """

    path = urlsplit(url).path
    name = path.rsplit("/", 1)[-1]
    if name:
        return name
    fallback = (fallback or "").strip()
    return fallback or "document"


__all__ = [
    "LOGGER",
    "setup_run_logger",
    "get_current_log_path",
    "log_line",
    "ensure_dir",
    "sanitize_filename",
    "file_name_from_url",
]
