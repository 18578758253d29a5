"""Signals telling the run that the search results are on screen.

The results only appear after a person solves the captcha and submits the
search form, so every signal is bounded by a timeout: an unattended run must
still terminate.
"""
from __future__ import annotations

import queue
import threading
from typing import Callable, Optional, Protocol

from playwright.sync_api import Error as PWError, Page, TimeoutError as PWTimeout

from .logging_utils import _scraper_event
from .utils import log_line

OPERATOR_INSTRUCTIONS = (
    "Please manually select the category, input captcha, select date range, and hit submit."
)


class ResultSignal(Protocol):
    def wait(self, page: Page, timeout_ms: int) -> bool:
        """Return ``True`` once results are visible, ``False`` on timeout."""


def _wait_visible(page: Page, selector: str, timeout_ms: int) -> bool:
    try:
        page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        return True
    except PWTimeout:
        return False
    except PWError as exc:
        log_line(f"[WAIT] Selector wait for {selector!r} failed: {exc}")
        return False


class VisibleResultsSignal:
    """Wait for the results container itself to become visible."""

    def __init__(self, selector: str) -> None:
        self.selector = selector

    def wait(self, page: Page, timeout_ms: int) -> bool:
        log_line(OPERATOR_INSTRUCTIONS)
        log_line("Waiting for the results table to load...")
        _scraper_event("wait", mode="visible", selector=self.selector, timeout_ms=timeout_ms)
        return _wait_visible(page, self.selector, timeout_ms)


class OperatorPromptSignal:
    """Wait for the operator to press Enter, then confirm the results are visible.

    The terminal is read on a daemon thread feeding a queue, so the wait is
    bounded by ``timeout_ms`` rather than blocking on stdin.
    """

    def __init__(
        self,
        selector: str,
        *,
        confirm_timeout_ms: int = 5_000,
        input_fn: Callable[[], str] = input,
    ) -> None:
        self.selector = selector
        self.confirm_timeout_ms = confirm_timeout_ms
        self._input_fn = input_fn
        self._lines: "queue.Queue[Optional[str]]" = queue.Queue()
        self._reader: Optional[threading.Thread] = None

    def _read_lines(self) -> None:
        while True:
            try:
                line = self._input_fn()
            except EOFError:
                self._lines.put(None)
                return
            self._lines.put(line)

    def _ensure_reader(self) -> None:
        if self._reader is None:
            self._reader = threading.Thread(
                target=self._read_lines, name="operator-prompt", daemon=True
            )
            self._reader.start()

    def wait(self, page: Page, timeout_ms: int) -> bool:
        log_line(OPERATOR_INSTRUCTIONS)
        log_line("Press Enter in the terminal once the results are loaded in the table.")
        _scraper_event("wait", mode="enter", selector=self.selector, timeout_ms=timeout_ms)
        self._ensure_reader()
        try:
            line = self._lines.get(timeout=timeout_ms / 1000)
        except queue.Empty:
            log_line("[WAIT] No confirmation from the operator before the timeout.")
            return False
        if line is None:
            self._lines.put(None)
            log_line("[WAIT] Terminal input closed; cannot wait for the operator.")
            return False
        return _wait_visible(page, self.selector, self.confirm_timeout_ms)


__all__ = [
    "ResultSignal",
    "VisibleResultsSignal",
    "OperatorPromptSignal",
    "OPERATOR_INSTRUCTIONS",
]
