from __future__ import annotations

import pytest

from app.mphc import retry_policy
from app.mphc.error_codes import ErrorCode


@pytest.fixture
def event_recorder(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict]]:
    events: list[tuple[str, dict]] = []

    def _record(event_phase: str, **fields: object) -> None:
        events.append((event_phase, fields))

    monkeypatch.setattr(retry_policy, "_scraper_event", _record)
    return events


@pytest.mark.parametrize(
    "attempt, expected, kind",
    [
        (1, True, "retryable"),
        (2, True, "retryable"),
        (3, False, "capped"),
        (5, False, "capped"),
    ],
)
def test_results_timeout_retry_limits(
    attempt: int, expected: bool, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    result = retry_policy.decide_retry(attempt, 3, error_code=ErrorCode.RESULTS_TIMEOUT)
    assert result is expected
    assert len(event_recorder) == 1
    phase, fields = event_recorder[0]
    assert phase == "state"
    assert fields["phase"] == "retry_decision"
    assert fields["attempt"] == attempt
    assert fields["max_attempts"] == 3
    assert fields["will_retry"] is expected
    assert fields["kind"] == kind


@pytest.mark.parametrize(
    "error_code",
    [ErrorCode.HTTP_STATUS, ErrorCode.WRITE_FAILED, ErrorCode.INTERNAL],
)
def test_non_retryable_error_codes(error_code: str, event_recorder: list[tuple[str, dict]]) -> None:
    assert error_code in retry_policy.NON_RETRYABLE_ERROR_CODES
    assert retry_policy.decide_retry(1, 3, error_code=error_code) is False
    _, fields = event_recorder[0]
    assert fields["kind"] == "non_retryable"


@pytest.mark.parametrize(
    "error_code",
    [ErrorCode.NO_LINKS, ErrorCode.NAVIGATION, ErrorCode.NETWORK],
)
def test_result_phase_and_transport_codes_are_retryable(
    error_code: str, event_recorder: list[tuple[str, dict]]
) -> None:
    assert error_code in retry_policy.RETRYABLE_ERROR_CODES
    assert retry_policy.decide_retry(1, 3, error_code=error_code) is True
    _, fields = event_recorder[0]
    assert fields["kind"] == "retryable"


@pytest.mark.parametrize(
    "error_code, expected_kind",
    [("", "missing_error_code"), (None, "missing_error_code"), ("unexpected_code", "unknown")],
)
def test_missing_or_unknown_error_codes(
    error_code: str | None, expected_kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    assert retry_policy.decide_retry(1, 3, error_code=error_code) is False
    _, fields = event_recorder[0]
    assert fields["kind"] == expected_kind


def test_backoff_is_exponential_and_capped() -> None:
    assert [retry_policy.compute_backoff_seconds(i) for i in (1, 2, 3, 6, 10)] == [
        1.0,
        2.0,
        4.0,
        30.0,
        30.0,
    ]
