"""Quiz submission.

The remote API scores attempts; the portal only checks that every question
has an answer before posting, and shapes the scored result for display.
"""

from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from pydantic import BaseModel, Field

from portal.api.client import ApiClient
from portal.courses.models import RemoteModel


logger = structlog.get_logger(__name__)

INCOMPLETE_QUIZ_MESSAGE = "Por favor, responda todas as questões"


class IncompleteQuizError(Exception):
    """Some questions have no selected answer."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(INCOMPLETE_QUIZ_MESSAGE)


class QuizAnswers(BaseModel):
    """Viewer's selection: question ID -> answer ID."""

    question_ids: list[str] = Field(..., min_length=1)
    answers: dict[str, str] = Field(default_factory=dict)


class QuizResult(RemoteModel):
    """Scored attempt returned by ``POST /quizzes/{id}/submit``."""

    score: int
    passed: bool
    correct_count: int
    total_questions: int

    @property
    def caption(self) -> str:
        return f"{self.correct_count} de {self.total_questions} questões corretas"

    @property
    def title(self) -> str:
        return "Aprovado no Módulo!" if self.passed else "Reprovado no Módulo"


def build_submission(
    question_ids: Sequence[str],
    answers: Mapping[str, str],
) -> list[dict[str, str]]:
    """Responses payload, in question order.

    Raises:
        IncompleteQuizError: If any question has no answer.
    """
    missing = [qid for qid in question_ids if not answers.get(qid)]
    if missing:
        raise IncompleteQuizError(missing)
    return [{"questionId": qid, "answerId": answers[qid]} for qid in question_ids]


async def submit_quiz(
    client: ApiClient,
    quiz_id: str,
    question_ids: Sequence[str],
    answers: Mapping[str, str],
) -> QuizResult:
    """Validate and submit an attempt.

    Raises:
        IncompleteQuizError: Before any request when an answer is missing.
        ApiError: When the remote API rejects the attempt.
    """
    responses = build_submission(question_ids, answers)
    payload: dict[str, Any] = await client.quizzes.submit(quiz_id, responses)
    result = QuizResult.model_validate(payload)

    logger.info(
        "quiz_submitted",
        quiz_id=quiz_id,
        score=result.score,
        passed=result.passed,
    )
    return result
