from __future__ import annotations

from pathlib import Path

import pytest

from app.mphc import utils
from app.mphc.config import ScraperConfig


@pytest.fixture(autouse=True)
def _log_to_tmp(tmp_path: Path) -> None:
    utils._configure_logger(tmp_path / "logs" / "test.log")


@pytest.fixture
def cfg(tmp_path: Path) -> ScraperConfig:
    return ScraperConfig(
        download_dir=tmp_path / "downloads",
        audit_log_path=tmp_path / "Downloaded Report.csv",
        result_timeout_ms=50,
        inter_item_delay_ms=5_000,
    )
