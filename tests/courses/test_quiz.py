"""Tests for quiz submission."""

import pytest

from portal.api.errors import ApiError
from portal.courses.quiz import (
    INCOMPLETE_QUIZ_MESSAGE,
    IncompleteQuizError,
    QuizResult,
    build_submission,
    submit_quiz,
)


class TestBuildSubmission:
    """Tests for build_submission."""

    def test_responses_in_question_order(self) -> None:
        responses = build_submission(["q2", "q1"], {"q1": "a1", "q2": "a2"})
        assert responses == [
            {"questionId": "q2", "answerId": "a2"},
            {"questionId": "q1", "answerId": "a1"},
        ]

    def test_missing_answer_raises(self) -> None:
        with pytest.raises(IncompleteQuizError) as exc_info:
            build_submission(["q1", "q2", "q3"], {"q2": "a2", "q3": ""})

        assert exc_info.value.missing == ["q1", "q3"]
        assert str(exc_info.value) == INCOMPLETE_QUIZ_MESSAGE

    def test_extra_answers_ignored(self) -> None:
        responses = build_submission(["q1"], {"q1": "a1", "stale": "x"})
        assert responses == [{"questionId": "q1", "answerId": "a1"}]


class TestQuizResult:
    """Tests for QuizResult captions."""

    def test_passed(self) -> None:
        result = QuizResult.model_validate(
            {"score": 80, "passed": True, "correctCount": 4, "totalQuestions": 5}
        )
        assert result.title == "Aprovado no Módulo!"
        assert result.caption == "4 de 5 questões corretas"

    def test_failed(self) -> None:
        result = QuizResult(score=20, passed=False, correct_count=1, total_questions=5)
        assert result.title == "Reprovado no Módulo"


class TestSubmitQuiz:
    """Tests for submit_quiz."""

    @pytest.mark.asyncio
    async def test_submits_and_parses(self, remote, make_api) -> None:
        remote.on(
            "POST",
            "/quizzes/qz1/submit",
            {"score": 100, "passed": True, "correctCount": 2, "totalQuestions": 2},
        )

        async with make_api("tok") as api:
            result = await submit_quiz(api, "qz1", ["q1", "q2"], {"q1": "a", "q2": "b"})

        assert result.passed is True
        body = remote.body(remote.calls("POST", "/quizzes/qz1/submit")[0])
        assert body == {
            "responses": [
                {"questionId": "q1", "answerId": "a"},
                {"questionId": "q2", "answerId": "b"},
            ]
        }

    @pytest.mark.asyncio
    async def test_incomplete_sends_nothing(self, remote, make_api) -> None:
        async with make_api("tok") as api:
            with pytest.raises(IncompleteQuizError):
                await submit_quiz(api, "qz1", ["q1", "q2"], {"q1": "a"})

        assert remote.requests == []

    @pytest.mark.asyncio
    async def test_remote_rejection(self, remote, make_api) -> None:
        remote.on(
            "POST", "/quizzes/qz1/submit", {"error": "Quiz encerrado"}, status_code=400
        )

        async with make_api("tok") as api:
            with pytest.raises(ApiError, match="Quiz encerrado"):
                await submit_quiz(api, "qz1", ["q1"], {"q1": "a"})
