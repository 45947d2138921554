"""
Tests for the history domain models.

Covers wire decoding (snake_case keys, aliases), tolerant enum parsing,
the tagged answer values and timestamp degradation.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from history_sync.domain.models import (
    AnswerValue,
    CheckInCategory,
    CheckInRecord,
    FilterSelection,
    HistoryItem,
    Submission,
    SubmissionStatus,
)


class TestCheckInCategory:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("DAILY", CheckInCategory.DAILY),
            ("weekly", CheckInCategory.WEEKLY),
            (" Monthly ", CheckInCategory.MONTHLY),
            ("ONE_TIME", CheckInCategory.ONE_TIME),
            ("quarterly", CheckInCategory.ONE_TIME),
        ],
    )
    def test_parse_is_case_insensitive_with_one_time_default(
        self, raw: str, expected: CheckInCategory
    ) -> None:
        assert CheckInCategory.parse(raw) is expected

    def test_display_names(self) -> None:
        assert CheckInCategory.ONE_TIME.display_name == "One-time"
        assert CheckInCategory.DAILY.display_name == "Daily"


class TestSubmissionStatus:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("submitted", SubmissionStatus.COMPLETED),
            ("pending_review", SubmissionStatus.PENDING),
            ("In Progress", SubmissionStatus.IN_PROGRESS),
            ("error", SubmissionStatus.FAILED),
            ("something-new", SubmissionStatus.COMPLETED),
        ],
    )
    def test_aliases(self, raw: str, expected: SubmissionStatus) -> None:
        assert SubmissionStatus.parse(raw) is expected


class TestAnswerValue:
    def test_bool_is_probed_before_int(self) -> None:
        assert AnswerValue.from_json(True).kind == "boolean"
        assert AnswerValue.from_json(1).kind == "integer"

    @pytest.mark.parametrize(
        "raw,kind",
        [("yes", "string"), (False, "boolean"), (12, "integer"), (36.6, "float")],
    )
    def test_probe_order(self, raw: Any, kind: str) -> None:
        value = AnswerValue.from_json(raw)
        assert value.kind == kind
        assert value.value == raw

    @pytest.mark.parametrize("raw", [None, [1, 2], {"a": 1}])
    def test_non_scalars_are_rejected(self, raw: Any) -> None:
        with pytest.raises(ValueError, match="Unsupported answer value type"):
            AnswerValue.from_json(raw)

    def test_as_text(self) -> None:
        assert AnswerValue.from_json(True).as_text() == "Yes"
        assert AnswerValue.from_json(False).as_text() == "No"
        assert AnswerValue.from_json(4).as_text() == "4"

    @given(value=st.one_of(st.booleans(), st.integers(), st.text()))
    def test_decoded_value_keeps_python_type(self, value: bool | int | str) -> None:
        decoded = AnswerValue.from_json(value)
        assert type(decoded.value) is type(value)


class TestSubmissionDecoding:
    def test_wire_payload_decodes(
        self, make_wire_submission: Callable[..., dict[str, Any]]
    ) -> None:
        submission = Submission.model_validate(make_wire_submission(1, "WEEKLY", hours_ago=2))

        assert submission.checkin_type is CheckInCategory.WEEKLY
        assert submission.status is SubmissionStatus.COMPLETED
        assert submission.submitted_at == datetime(2025, 3, 1, 10, 0, tzinfo=UTC)
        assert submission.answers["2"] == AnswerValue(kind="boolean", value=True)
        assert submission.answers["4"].kind == "float"
        assert submission.reviewed_at is None

    def test_optional_fields_may_be_missing(self) -> None:
        submission = Submission.model_validate(
            {
                "id": 5,
                "user_id": 1,
                "questionnaire_id": 2,
                "checkin_type": "MONTHLY",
                "submitted_at": "2025-01-01T00:00:00Z",
            }
        )
        assert submission.answers == {}
        assert submission.nurse_comments is None
        assert submission.created_at is None

    def test_unparseable_timestamp_degrades_to_now(
        self, make_wire_submission: Callable[..., dict[str, Any]]
    ) -> None:
        before = datetime.now(UTC)
        submission = Submission.model_validate(make_wire_submission(1, submitted_at="yesterday"))
        after = datetime.now(UTC)

        assert before <= submission.submitted_at <= after

    def test_naive_timestamp_is_taken_as_utc(
        self, make_wire_submission: Callable[..., dict[str, Any]]
    ) -> None:
        submission = Submission.model_validate(
            make_wire_submission(1, submitted_at="2025-02-01T08:30:00")
        )
        assert submission.submitted_at.tzinfo is not None
        assert submission.submitted_at.utcoffset() == timedelta(0)

    def test_nested_answer_values_fail_decoding(
        self, make_wire_submission: Callable[..., dict[str, Any]]
    ) -> None:
        with pytest.raises(ValidationError):
            Submission.model_validate(make_wire_submission(1, answers_json={"1": [1, 2]}))

    def test_submission_is_immutable(
        self, make_submission: Callable[..., Submission]
    ) -> None:
        submission = make_submission(1)
        with pytest.raises(ValueError, match="frozen"):
            submission.id = 2  # type: ignore


class TestHistoryItem:
    def test_item_is_keyed_by_submission_id(
        self, make_wire_submission: Callable[..., dict[str, Any]]
    ) -> None:
        submission = Submission.model_validate(
            make_wire_submission(9, "ONE_TIME", reviewed_at="2025-03-02T09:00:00Z")
        )
        item = HistoryItem.from_submission(submission)

        assert item.id == 9
        assert item.submission is submission
        assert item.record == CheckInRecord.from_submission(submission)
        assert item.record.category is CheckInCategory.ONE_TIME
        assert item.record.is_reviewed is True


class TestFilterSelection:
    def test_all_matches_every_category(self) -> None:
        assert all(FilterSelection.ALL.matches(c) for c in CheckInCategory)

    def test_single_category(self) -> None:
        assert FilterSelection.WEEKLY.matches(CheckInCategory.WEEKLY)
        assert not FilterSelection.WEEKLY.matches(CheckInCategory.DAILY)
        assert FilterSelection.ONE_TIME.matches(CheckInCategory.ONE_TIME)
