"""
Submission detail: pair a submission's raw answers with its questionnaire.
"""

from collections.abc import Iterable

import structlog

from history_sync.domain.models import (
    HistoryDetail,
    QuestionAnswer,
    QuestionnaireQuestion,
    Submission,
)
from history_sync.services.errors import HistoryFetchError
from history_sync.services.result import Result
from history_sync.services.submissions_client import SubmissionsSource

logger = structlog.get_logger(__name__)


def build_history_detail(
    submission: Submission, questions: Iterable[QuestionnaireQuestion]
) -> HistoryDetail:
    """
    Match answers to questions.

    Answers are keyed by the question id as a string; older submissions
    use the question ``key`` instead. Unanswered questions are skipped and
    the result is ordered by question id.
    """
    answers: list[QuestionAnswer] = []
    for question in questions:
        value = submission.answers.get(str(question.id))
        if value is None:
            value = submission.answers.get(question.key)
        if value is None:
            continue
        answers.append(
            QuestionAnswer(
                question_id=question.id,
                question_title=question.title,
                question_subtitle=question.subtitle,
                answer=value.as_text(),
                question_type=question.question_type,
            )
        )
    answers.sort(key=lambda a: a.question_id)

    return HistoryDetail(
        submission_id=submission.id,
        checkin_type=submission.checkin_type,
        submitted_at=submission.submitted_at,
        status=submission.status,
        nurse_comments=submission.nurse_comments,
        reviewed_by=submission.reviewed_by_nurse,
        reviewed_at=submission.reviewed_at,
        answers=answers,
    )


class HistoryDetailLoader:
    """Fetches the questionnaire behind a submission and renders its answers."""

    def __init__(self, source: SubmissionsSource) -> None:
        self.source = source
        self.logger = logger.bind(component="history_detail")

    async def load(self, submission: Submission) -> Result[HistoryDetail, HistoryFetchError]:
        result = await self.source.fetch_questionnaire(
            submission.questionnaire_id, submission.checkin_type
        )
        if result.is_err():
            self.logger.warning(
                "history_detail_load_failed",
                submission_id=submission.id,
                error=str(result.unwrap_err()),
            )
            return Result.err(result.unwrap_err())

        detail = build_history_detail(submission, result.unwrap().questions)
        self.logger.info(
            "history_detail_loaded",
            submission_id=submission.id,
            questionnaire_id=submission.questionnaire_id,
            answer_count=len(detail.answers),
        )
        return Result.ok(detail)
