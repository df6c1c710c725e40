"""Page loaders for course views.

Each loader fans out its independent reads through the API client, settles
them, and assembles display models. A failed read is logged and replaced by
empty data so that one missing piece never fails the whole page.
"""

import asyncio
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from portal.api.client import ApiClient
from portal.core.result import settle, unwrap_or
from portal.courses.models import (
    Certificate,
    Course,
    CourseProgress,
    Enrollment,
    Lesson,
    Module,
    QuizAttempt,
    completed_lesson_ids,
    passed_quiz_ids,
)
from portal.courses.presentation import (
    CertificateCard,
    CourseCard,
    OverallProgress,
    VideoEmbed,
)
from portal.courses.unlock import ModuleOutline, build_course_outline, is_unlocked


logger = structlog.get_logger(__name__)


def parse_many(model: type[BaseModel], payload: Any) -> list[Any]:
    """Validate a list payload item by item, dropping malformed items."""
    items = []
    for raw in payload or []:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "payload_item_skipped", model=model.__name__, errors=e.error_count()
            )
    return items


def parse_one(model: type[BaseModel], payload: Any) -> Any:
    """Validate a single payload; malformed or empty payloads become None."""
    if not payload:
        return None
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "payload_skipped", model=model.__name__, errors=e.error_count()
        )
        return None


def group_modules(modules: Iterable[Module], lessons: Iterable[Lesson]) -> list[Module]:
    """Attach lessons to their modules when the module payloads came bare."""
    by_module: dict[str, list[Lesson]] = defaultdict(list)
    for lesson in lessons:
        if lesson.module_id:
            by_module[lesson.module_id].append(lesson)

    grouped = []
    for module in modules:
        if not module.lessons and by_module.get(module.id):
            module = Module(
                id=module.id,
                title=module.title,
                description=module.description,
                order_index=module.order_index,
                has_quiz=module.has_quiz,
                lessons=by_module[module.id],
            )
        grouped.append(module)
    return sorted(grouped, key=lambda m: m.order_index)


def _progress_of(result: Any) -> CourseProgress:
    return parse_one(CourseProgress, unwrap_or(result, None)) or CourseProgress()


# ==============================================================================
# Page models
# ==============================================================================


class CoursePage(BaseModel):
    course: Course | None
    progress: CourseProgress
    modules: list[ModuleOutline]
    current_lesson_id: str | None = None
    video: VideoEmbed | None = None


class DashboardPage(BaseModel):
    courses: list[CourseCard]
    overall: OverallProgress


class CertificatesPage(BaseModel):
    certificates: list[CertificateCard]


# ==============================================================================
# Loaders
# ==============================================================================


async def load_passed_quizzes(
    client: ApiClient, quiz_ids: Iterable[str]
) -> frozenset[str]:
    """Quizzes among ``quiz_ids`` the viewer has passed."""
    quiz_ids = sorted(set(quiz_ids))
    results = await asyncio.gather(
        *(
            settle(client.quizzes.get_attempts(qid), event="quiz_attempts_failed")
            for qid in quiz_ids
        )
    )
    attempts: list[QuizAttempt] = []
    for result in results:
        attempts.extend(parse_many(QuizAttempt, unwrap_or(result, [])))
    return passed_quiz_ids(attempts)


async def load_course_page(
    client: ApiClient,
    course_id: str,
    current_lesson_id: str | None = None,
) -> CoursePage:
    """Course header, module accordion with unlock state, and current video."""
    course_res, modules_res, lessons_res, progress_res = await asyncio.gather(
        settle(client.courses.get_by_id(course_id), event="course_load_failed"),
        settle(client.modules.get_by_course(course_id), event="modules_load_failed"),
        settle(client.lessons.get_by_course(course_id), event="lessons_load_failed"),
        settle(client.progress.by_course(course_id), event="progress_load_failed"),
    )

    course = parse_one(Course, unwrap_or(course_res, None))
    modules = group_modules(
        parse_many(Module, unwrap_or(modules_res, [])),
        parse_many(Lesson, unwrap_or(lessons_res, [])),
    )
    progress = _progress_of(progress_res)

    completed = completed_lesson_ids(progress.progress)
    quiz_ids = [
        lesson.quiz_id
        for module in modules
        for lesson in module.lessons
        if lesson.has_quiz and lesson.quiz_id
    ]
    passed = await load_passed_quizzes(client, quiz_ids)

    current = _pick_current_lesson(modules, completed, passed, current_lesson_id)
    return CoursePage(
        course=course,
        progress=progress,
        modules=build_course_outline(
            modules, completed, passed, current.id if current else None
        ),
        current_lesson_id=current.id if current else None,
        video=VideoEmbed.from_url(current.youtube_url, current.title)
        if current
        else None,
    )


def _pick_current_lesson(
    modules: list[Module],
    completed: frozenset[str],
    passed: frozenset[str],
    requested_id: str | None,
) -> Lesson | None:
    """The requested lesson when it is unlocked, else the first lesson."""
    first: Lesson | None = None
    for module in modules:
        for index, lesson in enumerate(module.lessons):
            if first is None:
                first = lesson
            if lesson.id == requested_id and is_unlocked(
                lesson, index, module.lessons, completed, passed
            ):
                return lesson
    if requested_id is not None:
        logger.info("locked_lesson_requested", lesson_id=requested_id)
    return first


async def load_catalog(client: ApiClient) -> list[CourseCard]:
    result = await settle(client.courses.get_all(), event="catalog_load_failed")
    courses = parse_many(Course, unwrap_or(result, []))
    return [CourseCard.from_course(course) for course in courses]


async def load_dashboard(client: ApiClient) -> DashboardPage:
    """Enrolled course cards and overall progress."""
    enrollments_res, certificates_res = await asyncio.gather(
        settle(client.enrollments.me(), event="enrollments_load_failed"),
        settle(client.certificates.me(), event="certificates_load_failed"),
    )
    enrollments: list[Enrollment] = parse_many(
        Enrollment, unwrap_or(enrollments_res, [])
    )
    certificates = parse_many(Certificate, unwrap_or(certificates_res, []))

    progress_results = await asyncio.gather(
        *(
            settle(client.progress.by_course(e.course_id), event="progress_load_failed")
            for e in enrollments
        )
    )

    cards = []
    total_lessons = completed_lessons = completed_courses = 0
    for enrollment, progress_res in zip(enrollments, progress_results, strict=True):
        progress = _progress_of(progress_res)
        course = enrollment.course or Course(id=enrollment.course_id, title="")
        cards.append(CourseCard.from_course(course, progress))

        total_lessons += progress.total_lessons
        completed_lessons += progress.completed_count
        if progress.total_lessons and progress.completed_count >= progress.total_lessons:
            completed_courses += 1

    return DashboardPage(
        courses=cards,
        overall=OverallProgress.build(
            total_courses=len(enrollments),
            completed_courses=completed_courses,
            total_lessons=total_lessons,
            completed_lessons=completed_lessons,
            certificates=len(certificates),
        ),
    )


async def load_certificates(client: ApiClient) -> CertificatesPage:
    certificates_res, profile_res = await asyncio.gather(
        settle(client.certificates.me(), event="certificates_load_failed"),
        settle(client.profiles.me(), event="profile_load_failed"),
    )
    profile = unwrap_or(profile_res, None) or {}
    student_name = profile.get("fullName") or profile.get("full_name") or ""
    return CertificatesPage(
        certificates=[
            CertificateCard.from_certificate(cert, student_name)
            for cert in parse_many(Certificate, unwrap_or(certificates_res, []))
        ]
    )
