"""
Domain models for questionnaire check-in history.

These models mirror the backend's submission records and the view-level
records built from them. They use Pydantic for validation; wire payloads
use snake_case keys (e.g. ``checkin_type``, ``submitted_at``, ``answers_json``).
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger(__name__)


class CheckInCategory(str, Enum):
    """Periodicity tag of a questionnaire submission."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"

    @classmethod
    def parse(cls, raw: str) -> "CheckInCategory":
        """Backend sends upper-case tags (``DAILY``, ``ONE_TIME``); unknown tags are one-time."""
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ONE_TIME

    @property
    def display_name(self) -> str:
        return {
            CheckInCategory.DAILY: "Daily",
            CheckInCategory.WEEKLY: "Weekly",
            CheckInCategory.MONTHLY: "Monthly",
            CheckInCategory.ONE_TIME: "One-time",
        }[self]


class SubmissionStatus(str, Enum):
    """Lifecycle status of a submission."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, raw: str) -> "SubmissionStatus":
        return _STATUS_ALIASES.get(raw.strip().lower(), cls.COMPLETED)


_STATUS_ALIASES: dict[str, SubmissionStatus] = {
    "completed": SubmissionStatus.COMPLETED,
    "submitted": SubmissionStatus.COMPLETED,
    "pending": SubmissionStatus.PENDING,
    "pending_review": SubmissionStatus.PENDING,
    "in_progress": SubmissionStatus.IN_PROGRESS,
    "in progress": SubmissionStatus.IN_PROGRESS,
    "failed": SubmissionStatus.FAILED,
    "error": SubmissionStatus.FAILED,
}


class SortSelection(str, Enum):
    """Orderings the history list can be shown in."""

    NEWEST_FIRST = "newest_first"
    OLDEST_FIRST = "oldest_first"
    CATEGORY_ASCENDING = "category_ascending"
    CATEGORY_DESCENDING = "category_descending"


class FilterSelection(str, Enum):
    """Client-side category filter."""

    ALL = "all"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ONE_TIME = "one_time"

    def matches(self, category: CheckInCategory) -> bool:
        if self is FilterSelection.ALL:
            return True
        return self.value == category.value


AnswerKind = Literal["boolean", "integer", "float", "string"]


class AnswerValue(BaseModel):
    """One heterogeneous answer scalar, tagged with the type it was decoded as."""

    model_config = ConfigDict(frozen=True)

    kind: AnswerKind
    value: bool | int | float | str

    @classmethod
    def from_json(cls, raw: Any) -> "AnswerValue":
        """
        Decode a JSON scalar by probing types in a fixed order.

        ``bool`` is probed before ``int`` because Python booleans are integers.
        """
        if isinstance(raw, bool):
            return cls(kind="boolean", value=raw)
        if isinstance(raw, int):
            return cls(kind="integer", value=raw)
        if isinstance(raw, float):
            return cls(kind="float", value=raw)
        if isinstance(raw, str):
            return cls(kind="string", value=raw)
        raise ValueError(f"Unsupported answer value type: {type(raw).__name__}")

    def as_text(self) -> str:
        if self.kind == "boolean":
            return "Yes" if self.value else "No"
        return str(self.value)


def parse_timestamp(raw: Any) -> datetime:
    """Parse an ISO-8601 timestamp; unparseable input degrades to "now"."""
    if isinstance(raw, datetime):
        parsed = raw
    else:
        try:
            parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("timestamp_unparseable", raw=str(raw))
            return datetime.now(UTC)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Submission(BaseModel):
    """Immutable record of one questionnaire response as sent by the backend."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    user_id: int
    questionnaire_id: int
    checkin_type: CheckInCategory
    answers: dict[str, AnswerValue] = Field(default_factory=dict, alias="answers_json")
    status: SubmissionStatus = SubmissionStatus.COMPLETED
    submitted_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None
    alert_level: str | None = None
    disease_id: int | None = None
    disease_name: str | None = None

    # Review metadata is only present once a nurse has looked at the submission
    reviewed_by_nurse_id: int | None = None
    reviewed_by_nurse: str | None = None
    reviewed_at: datetime | None = None
    nurse_comments: str | None = None

    @field_validator("checkin_type", mode="before")
    @classmethod
    def _parse_category(cls, v: Any) -> CheckInCategory:
        if isinstance(v, CheckInCategory):
            return v
        return CheckInCategory.parse(str(v))

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> SubmissionStatus:
        if isinstance(v, SubmissionStatus):
            return v
        return SubmissionStatus.parse(str(v))

    @field_validator("answers", mode="before")
    @classmethod
    def _parse_answers(cls, v: Any) -> dict[str, AnswerValue]:
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("answers_json must be an object")
        return {
            str(key): raw if isinstance(raw, AnswerValue) else AnswerValue.from_json(raw)
            for key, raw in v.items()
        }

    @field_validator("submitted_at", mode="before")
    @classmethod
    def _parse_submitted_at(cls, v: Any) -> datetime:
        return parse_timestamp(v)

    @field_validator("created_at", "updated_at", "reviewed_at", mode="before")
    @classmethod
    def _parse_optional_timestamp(cls, v: Any) -> datetime | None:
        if v is None:
            return None
        return parse_timestamp(v)


class CheckInRecord(BaseModel):
    """Domain-normalized view of a submission for the history list."""

    model_config = ConfigDict(frozen=True)

    id: int
    category: CheckInCategory
    submitted_at: datetime
    status: SubmissionStatus
    responses: dict[str, AnswerValue] = Field(default_factory=dict)
    alert_level: str | None = None
    is_reviewed: bool = False

    @classmethod
    def from_submission(cls, submission: Submission) -> "CheckInRecord":
        return cls(
            id=submission.id,
            category=submission.checkin_type,
            submitted_at=submission.submitted_at,
            status=submission.status,
            responses=submission.answers,
            alert_level=submission.alert_level,
            is_reviewed=submission.reviewed_at is not None,
        )


class HistoryItem(BaseModel):
    """A history list row: the normalized record paired with its source submission."""

    model_config = ConfigDict(frozen=True)

    id: int
    record: CheckInRecord
    submission: Submission

    @classmethod
    def from_submission(cls, submission: Submission) -> "HistoryItem":
        return cls(
            id=submission.id,
            record=CheckInRecord.from_submission(submission),
            submission=submission,
        )


class QuestionnaireOption(BaseModel):
    id: int
    label: str
    value: str


class QuestionnaireQuestion(BaseModel):
    """A question definition; answers are keyed by its id (or, failing that, its key)."""

    id: int
    title: str
    subtitle: str | None = None
    question_type: str
    options: list[QuestionnaireOption] = Field(default_factory=list)
    is_required: bool = False
    key: str
    sequence: int = 0


class Questionnaire(BaseModel):
    id: int
    title: str
    description: str = ""
    questions: list[QuestionnaireQuestion] = Field(default_factory=list)


class QuestionAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: int
    question_title: str
    question_subtitle: str | None = None
    answer: str
    question_type: str


class HistoryDetail(BaseModel):
    """Answers of one submission rendered against its questionnaire."""

    model_config = ConfigDict(frozen=True)

    submission_id: int
    checkin_type: CheckInCategory
    submitted_at: datetime
    status: SubmissionStatus
    nurse_comments: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    answers: list[QuestionAnswer] = Field(default_factory=list)
