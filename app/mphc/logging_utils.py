from __future__ import annotations

import logging
from typing import Any

from .utils import log_line

# Event labels that describe something going wrong are logged as warnings.
_WARNING_LABELS = {"error"}


def _scraper_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Log ``[SCRAPER][LABEL] key=value, ...`` for one pipeline event.

    ``phase`` stands in for the label when none is given; otherwise it is kept
    as a payload field.
    """

    try:
        event_label = label or (phase or "")
        if phase and label:
            fields.setdefault("phase", phase)
        payload = ", ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))
        line = f"[SCRAPER][{event_label.upper()}] {payload}"
        if event_label.lower() in _WARNING_LABELS:
            log_line(line, level=logging.WARNING)
        else:
            log_line(line)
    except Exception:
        # Logging must never break a download run.
        return


__all__ = ["_scraper_event"]
