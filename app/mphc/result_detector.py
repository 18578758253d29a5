"""Wait for a populated results table, reloading the page between attempts."""
from __future__ import annotations

from typing import Callable, List, Protocol

from playwright.sync_api import Error as PWError, Page

from .config import ScraperConfig
from .error_codes import ErrorCode
from .link_extractor import LinkRecord, extract_links_from_page
from .logging_utils import _scraper_event
from .retry_policy import decide_retry
from .signals import ResultSignal
from .utils import log_line

REASON_NO_CONTAINER = "no results container appeared"
REASON_NO_LINKS = "no links found after container appeared"
REASON_PAGE_ERROR = "page error while reading results"

Extractor = Callable[[Page, ScraperConfig], List[LinkRecord]]


class ReloadablePage(Protocol):
    page: Page | None

    def reload(self) -> None: ...


class NoLinksError(Exception):
    """The results container is visible but holds no links."""


class ResultsUnavailableError(Exception):
    """Every attempt to obtain results failed; the run cannot continue."""

    def __init__(self, attempts: int, reason: str) -> None:
        super().__init__(f"Max retries reached after {attempts} attempt(s): {reason}")
        self.attempts = attempts
        self.reason = reason


def await_results(
    session: ReloadablePage,
    signal: ResultSignal,
    *,
    cfg: ScraperConfig,
    extractor: Extractor = extract_links_from_page,
) -> List[LinkRecord]:
    """Return the result links, retrying with a reload up to ``cfg.max_retries`` times.

    A timeout, an empty table and a Playwright error while reading the page
    all count the same towards the limit. Raises
    ``ResultsUnavailableError`` once the limit is reached; the page is not
    reloaded after the final attempt.
    """

    attempt = 0
    while True:
        attempt += 1
        page = session.page
        if page is None:
            raise RuntimeError("await_results() needs an opened browser session")

        _scraper_event("wait", step="attempt", attempt=attempt, max_attempts=cfg.max_retries)
        try:
            if not signal.wait(page, cfg.result_timeout_ms):
                error_code, reason = ErrorCode.RESULTS_TIMEOUT, REASON_NO_CONTAINER
            else:
                links = extractor(page, cfg)
                if not links:
                    raise NoLinksError("No PDF links found. Possibly due to invalid captcha.")
                _scraper_event("wait", step="results_ready", attempt=attempt, links=len(links))
                return links
        except NoLinksError:
            error_code, reason = ErrorCode.NO_LINKS, REASON_NO_LINKS
        except PWError as exc:
            # Typically the page is still navigating after the search was submitted.
            error_code, reason = ErrorCode.NAVIGATION, REASON_PAGE_ERROR
            log_line(f"Attempt {attempt}: {type(exc).__name__}: {exc}")

        log_line(f"Attempt {attempt} failed: {reason}")
        _scraper_event(
            "error",
            phase="wait",
            attempt=attempt,
            max_attempts=cfg.max_retries,
            error_code=error_code,
            reason=reason,
        )
        if not decide_retry(attempt, cfg.max_retries, error_code=error_code):
            log_line(f"Max retries reached ({attempt}/{cfg.max_retries}). Giving up: {reason}")
            raise ResultsUnavailableError(attempt, reason)

        log_line("Reloading the page for another attempt...")
        session.reload()


__all__ = [
    "await_results",
    "NoLinksError",
    "ResultsUnavailableError",
    "REASON_NO_CONTAINER",
    "REASON_NO_LINKS",
    "REASON_PAGE_ERROR",
]
