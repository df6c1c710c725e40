"""Course content and viewer progress as read from the remote API.

The remote API answers in camelCase; older endpoints answer in snake_case.
Every model accepts both.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class RemoteModel(BaseModel):
    """Base for payloads coming from the remote API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ==============================================================================
# Quiz references
# ==============================================================================
#
# Module and lesson payloads carry their quizzes as a ``quizzes`` array
# rather than ``hasQuiz``/``quizId`` flags. The helpers below derive the
# flags from that array when the flags themselves are absent.


def _has_any(data: Mapping[str, Any], *keys: str) -> bool:
    return any(key in data for key in keys)


def _is_final_exam(quiz: Mapping[str, Any]) -> bool:
    return bool(quiz.get("isFinalExam", quiz.get("is_final_exam")))


def _quiz_lesson_id(quiz: Mapping[str, Any]) -> str | None:
    return quiz.get("lessonId") or quiz.get("lesson_id")


def _gating_quizzes(data: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Quizzes of a payload that can gate progress (final exams excluded)."""
    return [
        quiz
        for quiz in data.get("quizzes") or []
        if isinstance(quiz, Mapping) and not _is_final_exam(quiz)
    ]


def _attach_lesson_quiz(lesson: Any, quiz_ids: Mapping[str, str]) -> Any:
    if not isinstance(lesson, Mapping) or _has_any(
        lesson, "quizId", "quiz_id", "hasQuiz", "has_quiz"
    ):
        return lesson
    quiz_id = quiz_ids.get(lesson.get("id"))
    if quiz_id is None:
        return lesson
    return {**lesson, "quizId": quiz_id, "hasQuiz": True}


# ==============================================================================
# Content
# ==============================================================================


class Lesson(RemoteModel):
    """One lesson of a module."""

    id: str
    title: str
    youtube_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "youtubeUrl", "youtube_url", "videoUrl", "video_url"
        ),
        description="Media reference (YouTube, Google Drive or direct URL)",
    )
    duration_minutes: int = 0
    order_index: int = 0
    module_id: str | None = None
    quiz_id: str | None = None
    has_quiz: bool = False

    @model_validator(mode="before")
    @classmethod
    def _quiz_from_quizzes(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        quizzes = _gating_quizzes(data)
        if not quizzes:
            return data
        data = dict(data)
        if not _has_any(data, "quizId", "quiz_id"):
            data["quizId"] = quizzes[0].get("id")
        if not _has_any(data, "hasQuiz", "has_quiz"):
            data["hasQuiz"] = True
        return data

    @field_validator("youtube_url", mode="before")
    @classmethod
    def _none_media_is_empty(cls, value: str | None) -> str:
        return value or ""

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _none_duration_is_zero(cls, value: int | None) -> int:
        return value or 0


class Module(RemoteModel):
    """A module: an ordered sequence of lessons, optionally ending in a quiz."""

    id: str
    title: str
    description: str | None = None
    order_index: int = 0
    lessons: list[Lesson] = Field(default_factory=list)
    has_quiz: bool = False

    @model_validator(mode="before")
    @classmethod
    def _quiz_from_quizzes(cls, data: Any) -> Any:
        """Module quiz flag and per-lesson quiz IDs from the ``quizzes`` array.

        A quiz tied to a lesson gates that lesson; any other non-final quiz is
        the module quiz.
        """
        if not isinstance(data, Mapping):
            return data
        quizzes = _gating_quizzes(data)
        if not quizzes:
            return data

        data = dict(data)
        if not _has_any(data, "hasQuiz", "has_quiz"):
            data["hasQuiz"] = any(not _quiz_lesson_id(quiz) for quiz in quizzes)

        lesson_quizzes = {
            lesson_id: quiz.get("id")
            for quiz in quizzes
            if (lesson_id := _quiz_lesson_id(quiz))
        }
        if lesson_quizzes and data.get("lessons"):
            data["lessons"] = [
                _attach_lesson_quiz(lesson, lesson_quizzes)
                for lesson in data["lessons"]
            ]
        return data

    @model_validator(mode="after")
    def _order_lessons(self) -> Self:
        positions = [lesson.order_index for lesson in self.lessons]
        if len(positions) != len(set(positions)):
            msg = f"Duplicate lesson position in module {self.id}"
            raise ValueError(msg)
        self.lessons.sort(key=lambda lesson: lesson.order_index)
        return self


class Course(RemoteModel):
    id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    modules: list[Module] = Field(default_factory=list)

    @property
    def lessons(self) -> list[Lesson]:
        return [lesson for module in self.modules for lesson in module.lessons]

    @property
    def total_duration(self) -> int:
        return sum(lesson.duration_minutes for lesson in self.lessons)


# ==============================================================================
# Progress
# ==============================================================================


class ProgressEntry(RemoteModel):
    lesson_id: str
    completed: bool = False
    completed_at: datetime | None = None


class CourseProgress(RemoteModel):
    """Answer of ``GET /progress/course/{id}``."""

    progress: list[ProgressEntry] = Field(default_factory=list)
    completed_count: int = 0
    total_lessons: int = 0
    percentage: int = 0


class QuizAttempt(RemoteModel):
    id: str | None = None
    quiz_id: str
    score: int = 0
    passed: bool = False


class Enrollment(RemoteModel):
    id: str | None = None
    course_id: str
    course: Course | None = None


# ==============================================================================
# Certificates
# ==============================================================================


class CertificateCourse(RemoteModel):
    id: str | None = None
    title: str


class Certificate(RemoteModel):
    id: str
    certificate_number: str
    issued_at: datetime
    course_id: str | None = None
    course: CertificateCourse | None = None

    @property
    def course_title(self) -> str:
        return self.course.title if self.course else ""


class VerifiedCertificate(RemoteModel):
    certificate_number: str
    course_name: str
    student_name: str | None = None
    issued_at: datetime


class CertificateVerification(RemoteModel):
    """Answer of ``GET /certificates/verify/{number}``."""

    valid: bool
    certificate: VerifiedCertificate | None = None


# ==============================================================================
# Set helpers
# ==============================================================================


def completed_lesson_ids(entries: Iterable[ProgressEntry]) -> frozenset[str]:
    """Snapshot of the lessons the viewer has finished."""
    return frozenset(entry.lesson_id for entry in entries if entry.completed)


def passed_quiz_ids(attempts: Iterable[QuizAttempt]) -> frozenset[str]:
    """Snapshot of the quizzes the viewer has passed at least once."""
    return frozenset(attempt.quiz_id for attempt in attempts if attempt.passed)
