"""Lesson unlock sequencing for the module accordion.

A lesson opens when the lesson immediately before it has cleared its own gate:

- the first lesson of a module is always open
- a predecessor with a quiz is cleared by passing that quiz
- any other predecessor is cleared by completing it

Only the immediate predecessor is inspected. An earlier incomplete lesson does
not block a later one once the predecessor's gate is satisfied.

Everything here is pure: the completion and pass sets are read-only snapshots
and nothing is written back.
"""

from collections.abc import Collection, Sequence

from pydantic import BaseModel

from portal.courses.models import Lesson, Module


MODULE_QUIZ_TITLE = "Prova do Módulo"
MODULE_QUIZ_CAPTION = "Complete para avançar"
LOCKED_CAPTION = "Bloqueada"


def is_unlocked(
    lesson: Lesson,
    lesson_index: int,
    module_lessons: Sequence[Lesson],
    completed_lessons: Collection[str],
    passed_quizzes: Collection[str],
) -> bool:
    """Whether ``lesson`` at ``lesson_index`` of ``module_lessons`` may be opened.

    Args:
        lesson: The lesson being checked.
        lesson_index: Its position in ``module_lessons``.
        module_lessons: The module's lessons in order.
        completed_lessons: IDs of lessons the viewer has finished.
        passed_quizzes: IDs of quizzes the viewer has passed.
    """
    if lesson_index == 0:
        return True

    previous = module_lessons[lesson_index - 1]
    if previous.has_quiz and previous.quiz_id is not None:
        return previous.quiz_id in passed_quizzes
    return previous.id in completed_lessons


def unlocked_flags(
    module_lessons: Sequence[Lesson],
    completed_lessons: Collection[str],
    passed_quizzes: Collection[str],
) -> list[bool]:
    """``is_unlocked`` for every lesson of a module, in order."""
    return [
        is_unlocked(lesson, index, module_lessons, completed_lessons, passed_quizzes)
        for index, lesson in enumerate(module_lessons)
    ]


# ==============================================================================
# Accordion view model
# ==============================================================================


class LessonItem(BaseModel):
    lesson_id: str
    title: str
    duration_caption: str
    completed: bool
    current: bool
    unlocked: bool
    icon: str
    caption: str | None = None


class ModuleQuizItem(BaseModel):
    module_id: str
    title: str = MODULE_QUIZ_TITLE
    caption: str = MODULE_QUIZ_CAPTION
    icon: str = "file-check"
    clickable: bool = True


class ModuleOutline(BaseModel):
    module_id: str
    title: str
    description: str | None = None
    completed_count: int
    total: int
    percent: int
    complete: bool
    progress_caption: str
    icon: str
    lessons: list[LessonItem]
    quiz: ModuleQuizItem | None = None


def _lesson_icon(completed: bool, unlocked: bool) -> str:
    if completed:
        return "check-circle"
    if not unlocked:
        return "lock"
    return "circle"


def build_module_outline(
    module: Module,
    completed_lessons: Collection[str],
    passed_quizzes: Collection[str],
    current_lesson_id: str | None = None,
) -> ModuleOutline:
    """Accordion entry for one module.

    The module quiz entry is always clickable here; whether the quiz itself
    may be taken is decided elsewhere.
    """
    lessons = module.lessons
    flags = unlocked_flags(lessons, completed_lessons, passed_quizzes)

    items = []
    for lesson, unlocked in zip(lessons, flags, strict=True):
        completed = lesson.id in completed_lessons
        items.append(
            LessonItem(
                lesson_id=lesson.id,
                title=lesson.title,
                duration_caption=f"{lesson.duration_minutes} min",
                completed=completed,
                current=lesson.id == current_lesson_id,
                unlocked=unlocked,
                icon=_lesson_icon(completed, unlocked),
                caption=None if unlocked else LOCKED_CAPTION,
            )
        )

    total = len(lessons)
    completed_count = sum(1 for item in items if item.completed)
    percent = round(completed_count / total * 100) if total else 0
    complete = total > 0 and completed_count == total

    return ModuleOutline(
        module_id=module.id,
        title=module.title,
        description=module.description,
        completed_count=completed_count,
        total=total,
        percent=percent,
        complete=complete,
        progress_caption=f"{completed_count} de {total} aulas concluídas",
        icon="check-circle" if complete else "book-open",
        lessons=items,
        quiz=ModuleQuizItem(module_id=module.id) if module.has_quiz else None,
    )


def build_course_outline(
    modules: Sequence[Module],
    completed_lessons: Collection[str],
    passed_quizzes: Collection[str],
    current_lesson_id: str | None = None,
) -> list[ModuleOutline]:
    """Accordion entries for all modules, ordered by position."""
    return [
        build_module_outline(module, completed_lessons, passed_quizzes, current_lesson_id)
        for module in sorted(modules, key=lambda m: m.order_index)
    ]
