"""Configuration constants for the MPHC judgment/order downloader."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

TARGET_URL: str = os.getenv("MPHC_TARGET_URL", "https://mphc.gov.in/judgement-orders")
BASE_ORIGIN: str = os.getenv("MPHC_BASE_ORIGIN", "https://mphc.gov.in")

# Results table rendered by the site once a search (captcha included) succeeds.
RESULTS_SELECTOR: str = "div#get_Judge_Case_Afr table"
LINK_SELECTOR: str = "div#get_Judge_Case_Afr table a"

DOWNLOAD_DIR: Path = Path(os.getenv("MPHC_DOWNLOAD_DIR", "downloads"))
AUDIT_LOG_FILE: Path = Path(os.getenv("MPHC_AUDIT_LOG", "Downloaded Report.csv"))
LOG_DIR: Path = Path(os.getenv("MPHC_LOG_DIR", "logs"))
LOG_FILE: Path = LOG_DIR / "latest.log"

WAIT_MODE_VISIBLE = "visible"
WAIT_MODE_ENTER = "enter"
WAIT_MODES = (WAIT_MODE_VISIBLE, WAIT_MODE_ENTER)


def _parse_int(env_var: str, default: int) -> int:
    """Parse an integer from the environment, falling back to ``default``."""

    try:
        return int(os.getenv(env_var, str(default)))
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", ""}


RESULT_TIMEOUT_MS: int = _parse_int("MPHC_RESULT_TIMEOUT_MS", 60_000)
MAX_RETRIES: int = _parse_int("MPHC_MAX_RETRIES", 3)
INTER_ITEM_DELAY_MS: int = _parse_int("MPHC_INTER_ITEM_DELAY_MS", 5_000)
MAX_REDIRECTS: int = _parse_int("MPHC_MAX_REDIRECTS", 5)
HTTP_TIMEOUT_S: int = _parse_int("MPHC_HTTP_TIMEOUT_S", 120)
# 1 keeps the historical behaviour: a failed fetch is logged and skipped.
DOWNLOAD_ATTEMPTS: int = _parse_int("MPHC_DOWNLOAD_ATTEMPTS", 1)
# Page settle (networkidle) wait after goto/reload.
NAV_TIMEOUT_MS: int = _parse_int("MPHC_NAV_TIMEOUT_MS", 30_000)
# Visibility confirmation after the operator presses Enter.
CONFIRM_TIMEOUT_MS: int = _parse_int("MPHC_CONFIRM_TIMEOUT_MS", 5_000)

HEADLESS: bool = _parse_bool("MPHC_HEADLESS", False)
WAIT_MODE: str = (os.getenv("MPHC_WAIT_MODE", WAIT_MODE_VISIBLE).strip().lower() or WAIT_MODE_VISIBLE)

USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

COMMON_HEADERS: dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": "application/pdf",
    "Accept-Encoding": "gzip, deflate, br",
}

BROWSER_ARGS: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")


@dataclass(frozen=True)
class ScraperConfig:
    """Everything a run needs, passed explicitly through the pipeline."""

    target_url: str = TARGET_URL
    base_origin: str = BASE_ORIGIN
    download_dir: Path = DOWNLOAD_DIR
    audit_log_path: Path = AUDIT_LOG_FILE
    result_timeout_ms: int = RESULT_TIMEOUT_MS
    max_retries: int = MAX_RETRIES
    inter_item_delay_ms: int = INTER_ITEM_DELAY_MS
    max_redirects: int = MAX_REDIRECTS
    http_timeout_s: int = HTTP_TIMEOUT_S
    download_attempts: int = DOWNLOAD_ATTEMPTS
    nav_timeout_ms: int = NAV_TIMEOUT_MS
    confirm_timeout_ms: int = CONFIRM_TIMEOUT_MS
    results_selector: str = RESULTS_SELECTOR
    link_selector: str = LINK_SELECTOR
    headless: bool = HEADLESS
    wait_mode: str = WAIT_MODE
    user_agent: str = USER_AGENT

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """Return a config built from the module constants (env-aware)."""

        return cls()


def is_enter_mode(mode: str) -> bool:
    """Return ``True`` when ``mode`` asks the operator to confirm with Enter."""

    return str(mode).strip().lower() == WAIT_MODE_ENTER


__all__ = [
    "ScraperConfig",
    "is_enter_mode",
    "COMMON_HEADERS",
    "WAIT_MODES",
]
