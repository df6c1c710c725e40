"""Stateless display models: course card, certificate card, video embed.

Each model is built from data already fetched through the API client and
holds exactly what the page needs to draw. Malformed input never fails the
view: an unusable media reference becomes an ``invalid`` embed.
"""

import re
from datetime import datetime
from enum import Enum
from urllib.parse import urlparse

from pydantic import BaseModel

from portal.courses.models import Certificate, Course, CourseProgress


# ==============================================================================
# Video embed
# ==============================================================================


class VideoKind(str, Enum):
    YOUTUBE = "youtube"
    DRIVE = "drive"
    DIRECT = "direct"
    INVALID = "invalid"


INVALID_VIDEO_MESSAGE = "URL de vídeo inválida"

YOUTUBE_PATTERN = re.compile(
    r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*"
)
DRIVE_PATTERN = re.compile(r"drive\.google\.com/(?:file/d/|open\?id=)([a-zA-Z0-9_-]+)")
YOUTUBE_ID_LENGTH = 11

EMBED_ALLOW = (
    "accelerometer; autoplay; clipboard-write; encrypted-media; "
    "gyroscope; picture-in-picture"
)


def youtube_id(url: str) -> str | None:
    """Extract an 11-character YouTube video ID, if the URL has one."""
    match = YOUTUBE_PATTERN.match(url)
    if match and len(match.group(2)) == YOUTUBE_ID_LENGTH:
        return match.group(2)
    return None


def drive_id(url: str) -> str | None:
    """Extract a Google Drive file ID, if the URL has one."""
    match = DRIVE_PATTERN.search(url)
    return match.group(1) if match else None


class VideoEmbed(BaseModel):
    """Iframe description for a lesson video."""

    kind: VideoKind
    title: str
    src: str | None = None
    video_id: str | None = None
    allow: str = EMBED_ALLOW
    message: str | None = None

    @classmethod
    def from_url(cls, url: str | None, title: str) -> "VideoEmbed":
        """Classify ``url``; unusable references yield an ``invalid`` embed."""
        url = (url or "").strip()
        if not url:
            return cls.invalid(title)

        if vid := youtube_id(url):
            return cls(
                kind=VideoKind.YOUTUBE,
                title=title,
                video_id=vid,
                src=f"https://www.youtube.com/embed/{vid}?enablejsapi=1",
            )

        if fid := drive_id(url):
            return cls(
                kind=VideoKind.DRIVE,
                title=title,
                video_id=fid,
                src=f"https://drive.google.com/file/d/{fid}/preview",
            )

        parsed = urlparse(url)
        if parsed.scheme in ("http", "https") and parsed.netloc:
            return cls(kind=VideoKind.DIRECT, title=title, src=url)

        return cls.invalid(title)

    @classmethod
    def invalid(cls, title: str) -> "VideoEmbed":
        return cls(kind=VideoKind.INVALID, title=title, message=INVALID_VIDEO_MESSAGE)


# ==============================================================================
# Cards
# ==============================================================================


PT_BR_MONTHS = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def format_date_pt_br(value: datetime) -> str:
    """Format as ``dd de <mês> de yyyy``, e.g. ``05 de março de 2024``."""
    return f"{value.day:02d} de {PT_BR_MONTHS[value.month - 1]} de {value.year}"


class CourseCard(BaseModel):
    id: str
    title: str
    description: str
    thumbnail_url: str | None = None
    link: str
    progress: float
    progress_label: str
    total_lessons: int
    completed_lessons: int
    lessons_caption: str
    total_duration: int
    duration_caption: str

    @classmethod
    def from_course(
        cls, course: Course, progress: CourseProgress | None = None
    ) -> "CourseCard":
        total = progress.total_lessons if progress else len(course.lessons)
        completed = progress.completed_count if progress else 0
        percent = float(progress.percentage) if progress else 0.0
        duration = course.total_duration
        return cls(
            id=course.id,
            title=course.title,
            description=course.description or "",
            thumbnail_url=course.thumbnail_url,
            link=f"/course/{course.id}",
            progress=percent,
            progress_label=f"{round(percent)}%",
            total_lessons=total,
            completed_lessons=completed,
            lessons_caption=f"{completed}/{total} aulas",
            total_duration=duration,
            duration_caption=f"{duration}min",
        )


class CertificateCard(BaseModel):
    id: str
    course_title: str
    certificate_number: str
    issued_at: datetime
    issued_caption: str
    student_caption: str

    @classmethod
    def from_certificate(
        cls, certificate: Certificate, student_name: str
    ) -> "CertificateCard":
        return cls(
            id=certificate.id,
            course_title=certificate.course_title,
            certificate_number=certificate.certificate_number,
            issued_at=certificate.issued_at,
            issued_caption=format_date_pt_br(certificate.issued_at),
            student_caption=f"Certificado para {student_name}",
        )


class OverallProgress(BaseModel):
    total_courses: int
    completed_courses: int
    total_lessons: int
    completed_lessons: int
    certificates: int
    percent: float
    percent_label: str

    @classmethod
    def build(
        cls,
        total_courses: int,
        completed_courses: int,
        total_lessons: int,
        completed_lessons: int,
        certificates: int,
    ) -> "OverallProgress":
        percent = completed_lessons / total_lessons * 100 if total_lessons > 0 else 0.0
        return cls(
            total_courses=total_courses,
            completed_courses=completed_courses,
            total_lessons=total_lessons,
            completed_lessons=completed_lessons,
            certificates=certificates,
            percent=percent,
            percent_label=f"{round(percent)}%",
        )
