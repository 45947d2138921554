"""Shared builders for history tests."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from history_sync.domain.models import CheckInCategory, Submission

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def wire_submission(
    submission_id: int,
    checkin_type: str = "DAILY",
    hours_ago: float = 0,
    **overrides: Any,
) -> dict[str, Any]:
    """A submission as the backend sends it (snake_case, string timestamps)."""
    submitted = (BASE_TIME - timedelta(hours=hours_ago)).isoformat().replace("+00:00", "Z")
    payload: dict[str, Any] = {
        "id": submission_id,
        "user_id": 42,
        "questionnaire_id": 7,
        "checkin_type": checkin_type,
        "answers_json": {"1": "good", "2": True, "3": 4, "4": 36.6},
        "status": "completed",
        "submitted_at": submitted,
        "created_at": submitted,
        "updated_at": submitted,
        "alert_level": "none",
        "disease_id": 3,
        "disease_name": "COPD",
        "reviewed_by_nurse_id": None,
        "reviewed_by_nurse": None,
        "reviewed_at": None,
        "nurse_comments": None,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_submission() -> Callable[..., Submission]:
    def _make(
        submission_id: int,
        category: CheckInCategory = CheckInCategory.DAILY,
        hours_ago: float = 0,
    ) -> Submission:
        return Submission(
            id=submission_id,
            user_id=42,
            questionnaire_id=7,
            checkin_type=category,
            submitted_at=BASE_TIME - timedelta(hours=hours_ago),
        )

    return _make


@pytest.fixture
def make_wire_submission() -> Callable[..., dict[str, Any]]:
    return wire_submission
