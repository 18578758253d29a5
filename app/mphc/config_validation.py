from __future__ import annotations

from typing import Literal

from . import config
from .config import ScraperConfig
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_config(cfg: ScraperConfig, entrypoint: Entrypoint = "cli") -> None:
    """Validate ``cfg`` before a browser is launched.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    """

    if not cfg.target_url.lower().startswith(("http://", "https://")):
        _raise_config_error(
            f"target_url must be an http(s) URL, got {cfg.target_url!r}.",
            entrypoint=entrypoint,
            error="invalid_target_url",
        )

    if not cfg.base_origin.lower().startswith(("http://", "https://")) or cfg.base_origin.endswith("/"):
        _raise_config_error(
            f"base_origin must be an http(s) origin without a trailing slash, got {cfg.base_origin!r}.",
            entrypoint=entrypoint,
            error="invalid_base_origin",
        )

    if cfg.wait_mode not in config.WAIT_MODES:
        _raise_config_error(
            f"wait_mode must be one of {', '.join(config.WAIT_MODES)}, got {cfg.wait_mode!r}.",
            entrypoint=entrypoint,
            error="invalid_wait_mode",
        )

    positive_fields = [
        ("result_timeout_ms", cfg.result_timeout_ms),
        ("max_retries", cfg.max_retries),
        ("http_timeout_s", cfg.http_timeout_s),
        ("download_attempts", cfg.download_attempts),
        ("nav_timeout_ms", cfg.nav_timeout_ms),
        ("confirm_timeout_ms", cfg.confirm_timeout_ms),
    ]
    for field_name, value in positive_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_bound",
            )

    for field_name, value in (
        ("inter_item_delay_ms", cfg.inter_item_delay_ms),
        ("max_redirects", cfg.max_redirects),
    ):
        if value < 0:
            _raise_config_error(
                f"{field_name} must be non-negative.",
                entrypoint=entrypoint,
                error="invalid_bound",
            )


__all__ = ["validate_config", "Entrypoint"]
