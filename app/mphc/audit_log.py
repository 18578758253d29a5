"""Append-only CSV trail of downloaded files."""
from __future__ import annotations

import csv
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from .utils import log_line

HEADER = ("Downloaded date", "File Name")


class AuditLog:
    """Append ``"<YYYY-MM-DD>","<file name>"`` rows, writing the header once.

    No locking: only one sequential pipeline writes to the file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _append(self, row: tuple[str, str]) -> None:
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow(row)

    def record(self, file_name: str, *, today: Optional[date] = None) -> None:
        day = today or datetime.now(timezone.utc).date()
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._append(HEADER)
            log_line(f"[AUDIT] Created {self.path}")
        self._append((day.strftime("%Y-%m-%d"), file_name))


__all__ = ["AuditLog", "HEADER"]
