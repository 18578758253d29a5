"""Playwright browser session bound to the court search page."""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PWError,
    Page,
    Playwright,
    TimeoutError as PWTimeout,
    sync_playwright,
)

from . import config
from .config import ScraperConfig
from .logging_utils import _scraper_event
from .utils import log_line


class BrowserSession:
    """One browser, one context, one page for the whole run.

    Use as a context manager so the browser is released on every exit path::

        with BrowserSession(cfg) as session:
            page = session.open(cfg.target_url)
    """

    def __init__(
        self,
        cfg: ScraperConfig,
        *,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        self.cfg = cfg
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._closed = False

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        self.close()
        return False

    def _launch(self) -> Page:
        self._playwright = self._playwright_factory().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.cfg.headless,
            args=list(config.BROWSER_ARGS),
        )
        self._context = self._browser.new_context(user_agent=self.cfg.user_agent, locale="en-US")
        self.page = self._context.new_page()
        return self.page

    def _wait_until_settled(self, label: str) -> None:
        assert self.page is not None
        try:
            self.page.wait_for_load_state("networkidle", timeout=self.cfg.nav_timeout_ms)
        except PWTimeout:
            log_line(f"[NAV] networkidle timeout after {label}; continuing.")
            _scraper_event("nav", step="settle_timeout", label=label)

    def open(self, url: str) -> Page:
        """Launch the browser, navigate to ``url`` and wait for the page to settle."""

        page = self.page or self._launch()
        _scraper_event("nav", step="goto", url=url, headless=self.cfg.headless)
        log_line(f"Opening {url}")
        page.goto(url, wait_until="domcontentloaded", timeout=self.cfg.nav_timeout_ms)
        self._wait_until_settled("goto")
        return page

    def reload(self) -> None:
        """Reload the current page, re-issuing the settle wait."""

        if self.page is None:
            raise RuntimeError("BrowserSession.reload() called before open()")
        _scraper_event("nav", step="reload", url=self.page.url)
        try:
            self.page.reload(wait_until="domcontentloaded", timeout=self.cfg.nav_timeout_ms)
        except PWTimeout:
            log_line("[NAV] Reload timed out; the next wait decides whether the page is usable.")
            return
        self._wait_until_settled("reload")

    def cookies(self) -> Dict[str, str]:
        """Return the context cookies as a ``name -> value`` mapping."""

        if self._context is None:
            return {}
        return {cookie["name"]: cookie["value"] for cookie in self._context.cookies()}

    def close(self) -> None:
        """Release page, context, browser and Playwright; safe to call twice."""

        if self._closed:
            return
        self._closed = True
        for resource in (self._context, self._browser):
            if resource is None:
                continue
            try:
                resource.close()
            except PWError as exc:
                log_line(f"[NAV] Ignoring error while closing browser resource: {exc}")
        if self._playwright is not None:
            self._playwright.stop()
        self.page = None
        _scraper_event("nav", step="closed")
        log_line("Browser closed.")


__all__ = ["BrowserSession"]
