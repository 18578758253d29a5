"""Download judgment/order PDFs from the MPHC search page.

Workflow:

- Open https://mphc.gov.in/judgement-orders in a visible Chromium window.
- Wait (bounded) for the operator to pick the category, solve the captcha,
  choose the date range and submit; the results land in
  ``div#get_Judge_Case_Afr``.
- Collect the anchors of the results table, reloading and retrying up to
  ``max_retries`` times when nothing shows up.
- Fetch every link with requests, save it under the download folder and append
  a row to ``Downloaded Report.csv``, pausing between items.
"""

from __future__ import annotations

import argparse
import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import requests

from . import config
from .audit_log import AuditLog
from .browser_session import BrowserSession
from .config import ScraperConfig, is_enter_mode
from .config_validation import validate_config
from .downloader import DownloadResult, DownloadStatus, download_all
from .http_client import build_http_session
from .logging_utils import _scraper_event
from .rate_limit import IntervalGate
from .result_detector import ResultsUnavailableError, await_results
from .signals import OperatorPromptSignal, ResultSignal, VisibleResultsSignal
from .utils import ensure_dir, log_line, setup_run_logger


@dataclass
class RunSummary:
    found: int
    saved: int
    skipped: int
    failed: int
    results: List[DownloadResult]


def build_signal(cfg: ScraperConfig) -> ResultSignal:
    """Return the result signal matching ``cfg.wait_mode``."""

    if is_enter_mode(cfg.wait_mode):
        return OperatorPromptSignal(cfg.results_selector, confirm_timeout_ms=cfg.confirm_timeout_ms)
    return VisibleResultsSignal(cfg.results_selector)


def _summarise(results: List[DownloadResult]) -> RunSummary:
    def count(status: DownloadStatus) -> int:
        return sum(1 for result in results if result.status == status)

    return RunSummary(
        found=len(results),
        saved=count(DownloadStatus.SAVED),
        skipped=count(DownloadStatus.SKIPPED),
        failed=count(DownloadStatus.FAILED),
        results=results,
    )


def run_download(
    cfg: Optional[ScraperConfig] = None,
    *,
    session_factory: Callable[[ScraperConfig], BrowserSession] = BrowserSession,
    signal: Optional[ResultSignal] = None,
    http_factory: Callable[..., requests.Session] = build_http_session,
    limiter: Optional[IntervalGate] = None,
) -> RunSummary:
    """Execute one run end to end.

    Raises ``ResultsUnavailableError`` when no results were obtained; the
    browser is closed before the exception leaves this function.
    """

    cfg = cfg or ScraperConfig.from_env()
    signal = signal or build_signal(cfg)
    limiter = limiter or IntervalGate(cfg.inter_item_delay_ms)
    audit = AuditLog(cfg.audit_log_path)

    ensure_dir(cfg.download_dir)
    _scraper_event("run", step="start", target_url=cfg.target_url, wait_mode=cfg.wait_mode)

    with session_factory(cfg) as session:
        session.open(cfg.target_url)
        links = await_results(session, signal, cfg=cfg)
        http = http_factory(cfg, cookies=session.cookies(), referer=cfg.target_url)
        try:
            results = download_all(links, http=http, cfg=cfg, audit=audit, limiter=limiter)
        finally:
            http.close()

    summary = _summarise(results)
    _scraper_event(
        "run",
        step="finished",
        found=summary.found,
        saved=summary.saved,
        skipped=summary.skipped,
        failed=summary.failed,
    )
    return summary


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Download judgment/order PDFs from the MPHC search results table.",
    )
    parser.add_argument(
        "--wait-mode",
        choices=list(config.WAIT_MODES),
        default=config.WAIT_MODE,
        help="'visible' waits for the results table; 'enter' waits for Enter in the terminal.",
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=config.HEADLESS,
        help="Run Chromium without a window (--no-headless overrides MPHC_HEADLESS).",
    )
    parser.add_argument("--download-dir", type=Path, default=config.DOWNLOAD_DIR)
    parser.add_argument("--audit-log", type=Path, default=config.AUDIT_LOG_FILE)
    parser.add_argument("--delay-ms", type=int, default=config.INTER_ITEM_DELAY_MS)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point; returns the process exit status."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    cfg = dataclasses.replace(
        ScraperConfig.from_env(),
        wait_mode=args.wait_mode,
        headless=args.headless,
        download_dir=args.download_dir,
        audit_log_path=args.audit_log,
        inter_item_delay_ms=args.delay_ms,
    )

    setup_run_logger()
    try:
        validate_config(cfg, "cli")
    except ValueError as exc:
        parser.error(str(exc))

    try:
        summary = run_download(cfg)
    except ResultsUnavailableError as exc:
        log_line(f"[RUN] {exc}")
        _scraper_event("error", context="run", error="results_unavailable", attempts=exc.attempts)
        return 1
    except Exception as exc:  # noqa: BLE001
        log_line(f"[RUN] An error occurred during execution: {type(exc).__name__}: {exc}")
        _scraper_event("error", context="run", error="unexpected_exception")
        return 1

    log_line(
        f"[RUN] Done: found={summary.found} saved={summary.saved} "
        f"skipped={summary.skipped} failed={summary.failed}"
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

__all__ = ["run_download", "RunSummary", "build_signal", "main"]
