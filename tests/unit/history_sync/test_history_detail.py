"""Tests for rendering a submission's answers against its questionnaire."""

from collections.abc import Callable
from typing import Any

from history_sync.domain.models import (
    CheckInCategory,
    Questionnaire,
    QuestionnaireQuestion,
    Submission,
    SubmissionStatus,
)
from history_sync.services.errors import HistoryFetchError, ServerError
from history_sync.services.history_detail import HistoryDetailLoader, build_history_detail
from history_sync.services.result import Result


def question(question_id: int, key: str, title: str = "Question") -> QuestionnaireQuestion:
    return QuestionnaireQuestion(
        id=question_id, title=f"{title} {question_id}", question_type="text", key=key
    )


class StubSource:
    """Implements just enough of SubmissionsSource for the detail loader."""

    def __init__(self, result: Result[Questionnaire, HistoryFetchError]) -> None:
        self.result = result
        self.requested: list[tuple[int, CheckInCategory]] = []

    async def fetch_questionnaire(
        self, questionnaire_id: int, checkin_type: CheckInCategory
    ) -> Result[Questionnaire, HistoryFetchError]:
        self.requested.append((questionnaire_id, checkin_type))
        return self.result


def test_answers_match_by_id_then_key(
    make_wire_submission: Callable[..., dict[str, Any]],
) -> None:
    submission = Submission.model_validate(
        make_wire_submission(
            5,
            "WEEKLY",
            answers_json={"3": "tired", "sleep_hours": 6, "1": True},
            status="pending_review",
            nurse_comments="Call on Monday",
            reviewed_by_nurse="Nurse Joy",
            reviewed_at="2025-03-02T10:00:00Z",
        )
    )
    questions = [question(3, "energy"), question(2, "sleep_hours"), question(1, "pain")]

    detail = build_history_detail(submission, questions)

    assert [a.question_id for a in detail.answers] == [1, 2, 3]
    assert [a.answer for a in detail.answers] == ["Yes", "6", "tired"]
    assert detail.status is SubmissionStatus.PENDING
    assert detail.nurse_comments == "Call on Monday"
    assert detail.reviewed_by == "Nurse Joy"
    assert detail.reviewed_at is not None


def test_unanswered_questions_are_skipped(
    make_wire_submission: Callable[..., dict[str, Any]],
) -> None:
    submission = Submission.model_validate(make_wire_submission(5, answers_json={"1": "ok"}))

    detail = build_history_detail(submission, [question(1, "a"), question(2, "b")])

    assert [a.question_id for a in detail.answers] == [1]


async def test_loader_fetches_questionnaire_for_submission(
    make_wire_submission: Callable[..., dict[str, Any]],
) -> None:
    submission = Submission.model_validate(
        make_wire_submission(5, "MONTHLY", questionnaire_id=11, answers_json={"1": 72.5})
    )
    source = StubSource(
        Result.ok(Questionnaire(id=11, title="Monthly", questions=[question(1, "weight")]))
    )

    result = await HistoryDetailLoader(source).load(submission)  # type: ignore[arg-type]

    assert source.requested == [(11, CheckInCategory.MONTHLY)]
    assert result.unwrap().answers[0].answer == "72.5"


async def test_loader_propagates_fetch_error(
    make_wire_submission: Callable[..., dict[str, Any]],
) -> None:
    submission = Submission.model_validate(make_wire_submission(5))
    source = StubSource(Result.err(ServerError(404, "Questionnaire not found")))

    result = await HistoryDetailLoader(source).load(submission)  # type: ignore[arg-type]

    assert result.is_err()
    assert result.unwrap_err().user_message == "Questionnaire not found"
