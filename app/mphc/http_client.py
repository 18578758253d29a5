from __future__ import annotations

import time
import urllib.parse
from dataclasses import dataclass
from typing import Mapping, Optional

import requests

from . import config
from .config import ScraperConfig
from .error_codes import ErrorCode
from .logging_utils import _scraper_event
from .retry_policy import compute_backoff_seconds, decide_retry
from .utils import log_line


@dataclass
class FetchResult:
    status_code: int
    content: bytes
    final_url: str


def _redact_url(url: str) -> str:
    try:
        parsed = urllib.parse.urlparse(url)
        return urllib.parse.urlunparse(parsed._replace(query=""))
    except Exception:
        return url


def build_http_session(
    cfg: ScraperConfig,
    cookies: Optional[Mapping[str, str]] = None,
    referer: Optional[str] = None,
) -> requests.Session:
    """Build a requests session that looks like the browser that ran the search.

    Args:
        cfg: Run configuration (user agent, redirect bound).
        cookies: Cookies captured from the Playwright context.
        referer: Optional referer header to attach to the session.

    Returns:
        Configured requests session instance.
    """
    session = requests.Session()
    session.headers.update(config.COMMON_HEADERS)
    session.headers["User-Agent"] = cfg.user_agent
    session.max_redirects = cfg.max_redirects
    if referer:
        session.headers["Referer"] = referer
    for name, value in (cookies or {}).items():
        session.cookies.set(name, value)
    return session


def fetch_document(
    session: requests.Session,
    url: str,
    *,
    timeout: int,
    max_attempts: int = 1,
    sleep=time.sleep,
) -> FetchResult:
    """GET ``url`` and return the status and raw body.

    Any status is returned to the caller; only transport failures
    (timeouts, dropped connections) are retried, and only when
    ``max_attempts`` allows it. The last transport error is re-raised.
    """

    safe_url = _redact_url(url)
    for attempt in range(1, max_attempts + 1):
        try:
            response = session.get(url, timeout=timeout, allow_redirects=True)
            _scraper_event(
                "http",
                phase="download",
                url=safe_url,
                http_status=response.status_code,
                bytes=len(response.content),
                redirects=len(response.history),
            )
            return FetchResult(response.status_code, response.content, response.url or url)
        except (requests.Timeout, requests.ConnectionError) as exc:
            should_retry = decide_retry(
                attempt_index=attempt,
                max_attempts=max_attempts,
                error=exc,
                error_code=ErrorCode.NETWORK,
            )
            log_line(f"[HTTP] Attempt {attempt}/{max_attempts} for {safe_url} failed: {exc}")
            if not should_retry:
                raise
            backoff = compute_backoff_seconds(attempt)
            _scraper_event(
                "state",
                phase="download_retry",
                url=safe_url,
                attempt=attempt,
                backoff_seconds=backoff,
            )
            sleep(backoff)

    raise RuntimeError("fetch_document exhausted without a response")


__all__ = ["FetchResult", "build_http_session", "fetch_document"]
