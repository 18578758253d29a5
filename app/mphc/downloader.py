"""Sequential download of the extracted result links."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import requests

from .audit_log import AuditLog
from .config import ScraperConfig
from .error_codes import ErrorCode
from .http_client import fetch_document
from .link_extractor import LinkRecord
from .logging_utils import _scraper_event
from .rate_limit import IntervalGate
from .utils import file_name_from_url, log_line, sanitize_filename


class DownloadStatus(str, Enum):
    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DownloadResult:
    href: str
    file_name: str
    status: DownloadStatus
    http_status: Optional[int] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None


def target_file_name(link: LinkRecord) -> str:
    """Return the sanitized local file name for ``link``."""

    return sanitize_filename(file_name_from_url(link.href, fallback=link.label))


def download_link(
    http: requests.Session,
    link: LinkRecord,
    *,
    index: int,
    total: int,
    cfg: ScraperConfig,
    audit: AuditLog,
) -> DownloadResult:
    """Fetch one link and save it; never raises for a per-item failure."""

    log_line(f"Processing {index}/{total}: {link.href}")
    file_name = target_file_name(link)

    try:
        fetched = fetch_document(
            http,
            link.href,
            timeout=cfg.http_timeout_s,
            max_attempts=cfg.download_attempts,
        )
        if fetched.status_code != 200:
            log_line(
                f"Skipped {link.href}: Status {fetched.status_code}",
                level=logging.WARNING,
            )
            _scraper_event(
                "download",
                status="skipped",
                index=index,
                href=link.href,
                http_status=fetched.status_code,
            )
            return DownloadResult(
                link.href,
                file_name,
                DownloadStatus.SKIPPED,
                http_status=fetched.status_code,
                error_code=ErrorCode.HTTP_STATUS,
                error_message=f"HTTP {fetched.status_code}",
            )

        if not fetched.content.startswith(b"%PDF"):
            log_line(
                f"[DOWNLOAD] {file_name} does not start with %PDF; saving the body as served.",
                level=logging.WARNING,
            )

        out_path = cfg.download_dir / file_name
        out_path.write_bytes(fetched.content)
        log_line(f"Saved: {out_path}")
        audit_error: Optional[str] = None
        try:
            audit.record(file_name)
        except OSError as exc:
            # The file is on disk; report it as saved and flag the missing row.
            audit_error = str(exc)
            log_line(
                f"[AUDIT] Could not record {file_name} in {audit.path}: {exc}",
                level=logging.WARNING,
            )
        _scraper_event(
            "download",
            status="saved",
            index=index,
            href=link.href,
            file_name=file_name,
            bytes=len(fetched.content),
            audited=audit_error is None,
        )
        return DownloadResult(
            link.href,
            file_name,
            DownloadStatus.SAVED,
            http_status=200,
            error_code=ErrorCode.WRITE_FAILED if audit_error else None,
            error_message=f"audit log: {audit_error}" if audit_error else None,
        )

    except requests.RequestException as exc:
        error_code = ErrorCode.NETWORK
        message = str(exc)
    except OSError as exc:
        error_code = ErrorCode.WRITE_FAILED
        message = str(exc)
    except Exception as exc:  # noqa: BLE001
        error_code = ErrorCode.INTERNAL
        message = f"{type(exc).__name__}: {exc}"

    log_line(f"Error downloading {link.href}: {message}", level=logging.ERROR)
    _scraper_event(
        "download",
        status="failed",
        index=index,
        href=link.href,
        error_code=error_code,
        error=message,
    )
    return DownloadResult(
        link.href,
        file_name,
        DownloadStatus.FAILED,
        error_code=error_code,
        error_message=message,
    )


def download_all(
    links: Iterable[LinkRecord],
    *,
    http: requests.Session,
    cfg: ScraperConfig,
    audit: AuditLog,
    limiter: IntervalGate,
) -> List[DownloadResult]:
    """Download every link in order, pausing on ``limiter`` after each one."""

    items = list(links)
    total = len(items)
    results: List[DownloadResult] = []
    for index, link in enumerate(items, start=1):
        results.append(
            download_link(http, link, index=index, total=total, cfg=cfg, audit=audit)
        )
        limiter.wait()

    counts = {status: 0 for status in DownloadStatus}
    for result in results:
        counts[result.status] += 1
    log_line(
        "All PDFs have been processed: "
        f"saved={counts[DownloadStatus.SAVED]}, "
        f"skipped={counts[DownloadStatus.SKIPPED]}, "
        f"failed={counts[DownloadStatus.FAILED]}"
    )
    return results


__all__ = [
    "DownloadStatus",
    "DownloadResult",
    "target_file_name",
    "download_link",
    "download_all",
]
