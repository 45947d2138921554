"""
Synthetic history shown when the backend cannot be reached.

The dataset is deterministic for a given ``now`` so the screen never renders
empty after a failed fetch.
"""

from datetime import UTC, datetime, timedelta

from history_sync.domain.models import (
    AnswerValue,
    CheckInCategory,
    Submission,
    SubmissionStatus,
)

FALLBACK_USER_ID = 0

# (id, category, age, status, answers)
_FALLBACK_ROWS: list[tuple[int, CheckInCategory, timedelta, SubmissionStatus, dict]] = [
    (
        -1,
        CheckInCategory.DAILY,
        timedelta(hours=1),
        SubmissionStatus.COMPLETED,
        {"1": "good", "2": True},
    ),
    (
        -2,
        CheckInCategory.DAILY,
        timedelta(hours=26),
        SubmissionStatus.COMPLETED,
        {"1": "tired", "2": False},
    ),
    (
        -3,
        CheckInCategory.WEEKLY,
        timedelta(days=2),
        SubmissionStatus.PENDING,
        {"1": 7, "2": "walking"},
    ),
    (
        -4,
        CheckInCategory.WEEKLY,
        timedelta(days=9),
        SubmissionStatus.COMPLETED,
        {"1": 6},
    ),
    (
        -5,
        CheckInCategory.MONTHLY,
        timedelta(days=14),
        SubmissionStatus.COMPLETED,
        {"1": 72.5, "2": "no changes"},
    ),
    (
        -6,
        CheckInCategory.ONE_TIME,
        timedelta(days=30),
        SubmissionStatus.COMPLETED,
        {"1": "initial health profile"},
    ),
]


def build_fallback_submissions(now: datetime | None = None) -> list[Submission]:
    """Build the fallback dataset, newest first. Ids are negative so they never clash with real ones."""
    now = now or datetime.now(UTC)
    submissions = []
    for submission_id, category, age, status, answers in _FALLBACK_ROWS:
        submitted_at = now - age
        submissions.append(
            Submission(
                id=submission_id,
                user_id=FALLBACK_USER_ID,
                questionnaire_id=0,
                checkin_type=category,
                answers={key: AnswerValue.from_json(value) for key, value in answers.items()},
                status=status,
                submitted_at=submitted_at,
                created_at=submitted_at,
                updated_at=submitted_at,
            )
        )
    return submissions
