"""Course, certificate and FAQ views."""

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from portal.api.errors import ApiError
from portal.auth.dependencies import Client
from portal.core.result import Failed, settle, unwrap_or
from portal.courses.models import CertificateVerification
from portal.courses.presentation import CourseCard
from portal.courses.quiz import IncompleteQuizError, QuizAnswers, QuizResult, submit_quiz
from portal.courses.service import (
    CertificatesPage,
    CoursePage,
    DashboardPage,
    load_catalog,
    load_certificates,
    load_course_page,
    load_dashboard,
)


logger = structlog.get_logger(__name__)

router = APIRouter(tags=["courses"])


@router.get("/dashboard")
async def dashboard(client: Client) -> DashboardPage:
    """Enrolled courses and overall progress."""
    return await load_dashboard(client)


@router.get("/courses")
async def catalog(client: Client) -> list[CourseCard]:
    """Course catalog."""
    return await load_catalog(client)


@router.get("/course/{course_id}")
async def course_detail(
    course_id: str,
    client: Client,
    lesson: str | None = None,
) -> CoursePage:
    """Course page: module accordion with unlock state and the current video."""
    return await load_course_page(client, course_id, current_lesson_id=lesson)


@router.post("/course/{course_id}/quizzes/{quiz_id}/submit")
async def submit_course_quiz(
    course_id: str,
    quiz_id: str,
    data: QuizAnswers,
    client: Client,
) -> QuizResult:
    """Submit a lesson or module quiz attempt."""
    try:
        return await submit_quiz(client, quiz_id, data.question_ids, data.answers)
    except IncompleteQuizError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
    except ApiError as e:
        logger.warning(
            "quiz_submit_failed", course_id=course_id, quiz_id=quiz_id, error=e.message
        )
        raise HTTPException(
            status_code=e.status_code or status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        ) from e


class CompleteLessonRequest(BaseModel):
    lesson_id: str


@router.post("/course/{course_id}/complete")
async def complete_lesson(
    course_id: str,
    data: CompleteLessonRequest,
    client: Client,
) -> dict[str, Any]:
    """Mark a lesson complete, then ask the remote API to issue a certificate."""
    result = await settle(
        client.progress.complete(data.lesson_id), event="lesson_complete_failed"
    )
    if isinstance(result, Failed):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message
        )

    certificate = await settle(
        client.certificates.check_and_issue(course_id), event="certificate_issue_failed"
    )
    return {"progress": result.value, "certificate": unwrap_or(certificate, None)}


@router.get("/certificates")
async def certificates(client: Client) -> CertificatesPage:
    """Viewer's certificates."""
    return await load_certificates(client)


@router.get("/certificates/verify/{certificate_number}")
async def verify_certificate(
    certificate_number: str, client: Client
) -> CertificateVerification:
    """Public certificate verification."""
    try:
        payload = await client.certificates.verify(certificate_number)
    except ApiError as e:
        if e.is_not_found:
            return CertificateVerification(valid=False)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message
        ) from e
    return CertificateVerification.model_validate(payload)


@router.get("/faq")
async def faq(client: Client, audience: str | None = None) -> list[dict[str, Any]]:
    """Knowledge base entries, optionally for one audience."""
    result = await settle(client.faqs.get_all(audience), event="faq_load_failed")
    return unwrap_or(result, None) or []
