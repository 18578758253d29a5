from __future__ import annotations

import logging
from pathlib import Path

import pytest
import requests

from app.mphc import downloader, http_client
from app.mphc.audit_log import AuditLog
from app.mphc.downloader import DownloadStatus, download_all, download_link, target_file_name
from app.mphc.error_codes import ErrorCode
from app.mphc.link_extractor import LinkRecord
from app.mphc.rate_limit import IntervalGate
from tests.fakes import FakeHttpSession, FakeResponse, pdf_bytes


@pytest.fixture
def messages(monkeypatch: pytest.MonkeyPatch) -> list[tuple[int, str]]:
    recorded: list[tuple[int, str]] = []

    def _log(msg: str, level: int = logging.INFO) -> None:
        recorded.append((level, str(msg)))

    monkeypatch.setattr(downloader, "log_line", _log)
    monkeypatch.setattr(downloader, "_scraper_event", lambda *_, **__: None)
    monkeypatch.setattr(http_client, "_scraper_event", lambda *_, **__: None)
    return recorded


def _links(count: int) -> list[LinkRecord]:
    return [
        LinkRecord(f"https://mphc.gov.in/upload/WP_{i}_2024.pdf", f"WP {i}/2024")
        for i in range(1, count + 1)
    ]


def _prepare(cfg) -> AuditLog:
    cfg.download_dir.mkdir(parents=True, exist_ok=True)
    return AuditLog(cfg.audit_log_path)


def test_target_file_name_is_sanitized() -> None:
    link = LinkRecord('https://mphc.gov.in/x/Order"A".pdf?x=1', "Order")
    assert target_file_name(link) == "Order_A_.pdf"


def test_one_404_does_not_stop_the_batch(cfg, messages) -> None:
    links = _links(5)
    responses = {link.href: FakeResponse(200, pdf_bytes(link.label), link.href) for link in links}
    responses[links[2].href] = FakeResponse(404, b"", links[2].href)
    fake = FakeHttpSession(responses)
    audit = _prepare(cfg)
    sleeps: list[float] = []

    results = download_all(
        links, http=fake, cfg=cfg, audit=audit, limiter=IntervalGate(10, sleep=sleeps.append)
    )

    assert fake.calls == [link.href for link in links]
    assert [r.status for r in results] == [
        DownloadStatus.SAVED,
        DownloadStatus.SAVED,
        DownloadStatus.SKIPPED,
        DownloadStatus.SAVED,
        DownloadStatus.SAVED,
    ]
    assert results[2].http_status == 404
    assert results[2].error_code == ErrorCode.HTTP_STATUS
    assert sorted(p.name for p in cfg.download_dir.iterdir()) == [
        "WP_1_2024.pdf",
        "WP_2_2024.pdf",
        "WP_4_2024.pdf",
        "WP_5_2024.pdf",
    ]
    rows = cfg.audit_log_path.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 1 + 4
    assert not any("WP_3_2024.pdf" in row for row in rows)
    assert len(sleeps) == 5
    assert [m for lvl, m in messages if lvl == logging.WARNING] == [
        f"Skipped {links[2].href}: Status 404"
    ]


def test_transport_error_is_logged_and_skipped(cfg, messages) -> None:
    links = _links(2)
    fake = FakeHttpSession(
        {
            links[0].href: requests.ConnectionError("connection reset"),
            links[1].href: FakeResponse(200, pdf_bytes(), links[1].href),
        }
    )
    audit = _prepare(cfg)

    results = download_all(links, http=fake, cfg=cfg, audit=audit, limiter=IntervalGate(0))

    assert results[0].status is DownloadStatus.FAILED
    assert results[0].error_code == ErrorCode.NETWORK
    assert "connection reset" in (results[0].error_message or "")
    assert results[1].status is DownloadStatus.SAVED
    assert any(
        lvl == logging.ERROR and links[0].href in m and "connection reset" in m
        for lvl, m in messages
    )


def test_write_failure_is_contained(cfg, messages) -> None:
    link = _links(1)[0]
    fake = FakeHttpSession({link.href: FakeResponse(200, pdf_bytes(), link.href)})
    audit = AuditLog(cfg.audit_log_path)
    # download_dir deliberately not created.

    result = download_link(fake, link, index=1, total=1, cfg=cfg, audit=audit)

    assert result.status is DownloadStatus.FAILED
    assert result.error_code == ErrorCode.WRITE_FAILED
    assert not cfg.audit_log_path.exists()


def test_same_name_overwrites_previous_file(cfg, messages) -> None:
    first = LinkRecord("https://mphc.gov.in/a/Order.pdf", "first")
    second = LinkRecord("https://mphc.gov.in/b/Order.pdf", "second")
    fake = FakeHttpSession(
        {
            first.href: FakeResponse(200, pdf_bytes("first"), first.href),
            second.href: FakeResponse(200, pdf_bytes("second"), second.href),
        }
    )
    audit = _prepare(cfg)

    download_all([first, second], http=fake, cfg=cfg, audit=audit, limiter=IntervalGate(0))

    assert [p.name for p in cfg.download_dir.iterdir()] == ["Order.pdf"]
    assert (cfg.download_dir / "Order.pdf").read_bytes() == pdf_bytes("second")
    assert len(cfg.audit_log_path.read_text(encoding="utf-8").splitlines()) == 3


def test_non_pdf_body_is_saved_with_warning(cfg, messages) -> None:
    link = _links(1)[0]
    fake = FakeHttpSession({link.href: FakeResponse(200, b"<html>login</html>", link.href)})
    audit = _prepare(cfg)

    result = download_link(fake, link, index=1, total=1, cfg=cfg, audit=audit)

    assert result.status is DownloadStatus.SAVED
    assert (cfg.download_dir / result.file_name).read_bytes() == b"<html>login</html>"
    assert any(lvl == logging.WARNING and "%PDF" in m for lvl, m in messages)


def test_empty_batch_logs_summary(cfg, messages) -> None:
    results = download_all([], http=FakeHttpSession({}), cfg=cfg, audit=_prepare(cfg), limiter=IntervalGate(0))

    assert results == []
    assert any("saved=0, skipped=0, failed=0" in m for _, m in messages)


def test_audit_failure_keeps_saved_file_and_warns(cfg, messages, monkeypatch: pytest.MonkeyPatch) -> None:
    link = _links(1)[0]
    fake = FakeHttpSession({link.href: FakeResponse(200, pdf_bytes(), link.href)})
    audit = _prepare(cfg)

    def _fail(file_name: str, **_: object) -> None:
        raise PermissionError(13, "Permission denied", str(cfg.audit_log_path))

    monkeypatch.setattr(audit, "record", _fail)

    result = download_link(fake, link, index=1, total=1, cfg=cfg, audit=audit)

    assert result.status is DownloadStatus.SAVED
    assert result.error_code == ErrorCode.WRITE_FAILED
    assert "Permission denied" in (result.error_message or "")
    assert (cfg.download_dir / result.file_name).read_bytes() == pdf_bytes()
    assert any(
        lvl == logging.WARNING and "[AUDIT]" in m and result.file_name in m for lvl, m in messages
    )
    assert not any(lvl == logging.ERROR for lvl, _ in messages)
