"""Tests for lesson unlock sequencing and the module accordion."""

import pytest

from portal.courses.models import Lesson, Module
from portal.courses.unlock import (
    LOCKED_CAPTION,
    MODULE_QUIZ_TITLE,
    build_course_outline,
    build_module_outline,
    is_unlocked,
    unlocked_flags,
)


def lesson(
    lesson_id: str,
    position: int,
    quiz_id: str | None = None,
    has_quiz: bool | None = None,
) -> Lesson:
    return Lesson(
        id=lesson_id,
        title=f"Aula {lesson_id}",
        youtube_url="https://youtu.be/dQw4w9WgXcQ",
        duration_minutes=10,
        order_index=position,
        quiz_id=quiz_id,
        has_quiz=quiz_id is not None if has_quiz is None else has_quiz,
    )


@pytest.fixture
def plain_lessons() -> list[Lesson]:
    """Three lessons, none with a quiz."""
    return [lesson("l1", 1), lesson("l2", 2), lesson("l3", 3)]


@pytest.fixture
def quizzed_lessons() -> list[Lesson]:
    """Lesson 2 carries quiz q1."""
    return [lesson("l1", 1), lesson("l2", 2, quiz_id="q1"), lesson("l3", 3)]


class TestIsUnlocked:
    """Tests for is_unlocked."""

    def test_first_lesson_always_unlocked(self, plain_lessons) -> None:
        """The module entry point opens with empty sets."""
        assert is_unlocked(plain_lessons[0], 0, plain_lessons, set(), set()) is True

    def test_first_lesson_unlocked_even_with_quiz(self) -> None:
        """A quiz on the first lesson does not gate the first lesson itself."""
        lessons = [lesson("l1", 1, quiz_id="q1"), lesson("l2", 2)]
        assert is_unlocked(lessons[0], 0, lessons, set(), set()) is True

    def test_locked_until_predecessor_completed(self, plain_lessons) -> None:
        """Without a quiz, the predecessor's completion is the gate."""
        assert is_unlocked(plain_lessons[1], 1, plain_lessons, set(), set()) is False
        assert is_unlocked(plain_lessons[1], 1, plain_lessons, {"l1"}, set()) is True

    def test_quiz_gate_ignores_completion(self, quizzed_lessons) -> None:
        """With a quiz on the predecessor, only the pass counts."""
        lessons = quizzed_lessons
        assert is_unlocked(lessons[2], 2, lessons, {"l1", "l2"}, set()) is False
        assert is_unlocked(lessons[2], 2, lessons, set(), {"q1"}) is True

    def test_has_quiz_without_id_falls_back_to_completion(self) -> None:
        """A quiz flag with no quiz ID gates on completion."""
        lessons = [lesson("l1", 1, has_quiz=True), lesson("l2", 2)]
        assert is_unlocked(lessons[1], 1, lessons, set(), set()) is False
        assert is_unlocked(lessons[1], 1, lessons, {"l1"}, set()) is True

    def test_quiz_id_without_flag_falls_back_to_completion(self) -> None:
        """A quiz ID without the flag is not a quiz gate."""
        lessons = [lesson("l1", 1, quiz_id="q1", has_quiz=False), lesson("l2", 2)]
        assert is_unlocked(lessons[1], 1, lessons, set(), {"q1"}) is False
        assert is_unlocked(lessons[1], 1, lessons, {"l1"}, set()) is True

    def test_only_immediate_predecessor_counts(self) -> None:
        """A incomplete, Qb passed: C opens because B's gate alone governs it."""
        lessons = [lesson("A", 1), lesson("B", 2, quiz_id="Qb"), lesson("C", 3)]
        assert is_unlocked(lessons[1], 1, lessons, set(), {"Qb"}) is False
        assert is_unlocked(lessons[2], 2, lessons, set(), {"Qb"}) is True

    def test_unrelated_ids_do_not_unlock(self, plain_lessons) -> None:
        """Completion of a later lesson does not open an earlier one."""
        assert is_unlocked(plain_lessons[1], 1, plain_lessons, {"l3"}, set()) is False


class TestUnlockedFlags:
    """Scenario tables over a three-lesson module."""

    def test_nothing_completed(self, plain_lessons) -> None:
        assert unlocked_flags(plain_lessons, set(), set()) == [True, False, False]

    def test_first_completed(self, plain_lessons) -> None:
        assert unlocked_flags(plain_lessons, {"l1"}, set()) == [True, True, False]

    def test_all_completed(self, plain_lessons) -> None:
        assert unlocked_flags(plain_lessons, {"l1", "l2", "l3"}, set()) == [
            True,
            True,
            True,
        ]

    @pytest.mark.parametrize(
        "completed,expected_second",
        [
            (set(), False),
            ({"l1"}, True),
        ],
    )
    def test_passed_quiz_opens_third_only(
        self, quizzed_lessons, completed: set[str], expected_second: bool
    ) -> None:
        """q1 passed opens lesson 3; lesson 2 still follows lesson 1's completion."""
        flags = unlocked_flags(quizzed_lessons, completed, {"q1"})
        assert flags == [True, expected_second, True]

    def test_empty_module(self) -> None:
        assert unlocked_flags([], set(), set()) == []

    def test_sets_are_not_modified(self, quizzed_lessons) -> None:
        completed = frozenset({"l1"})
        passed = frozenset({"q1"})
        unlocked_flags(quizzed_lessons, completed, passed)
        assert completed == {"l1"}
        assert passed == {"q1"}


class TestBuildModuleOutline:
    """Tests for the accordion view model."""

    @pytest.fixture
    def module(self, quizzed_lessons) -> Module:
        return Module(
            id="m1",
            title="Módulo 1",
            description="Introdução",
            order_index=1,
            lessons=quizzed_lessons,
            has_quiz=True,
        )

    def test_lesson_items(self, module) -> None:
        """Locked lessons get the lock icon and caption."""
        outline = build_module_outline(module, {"l1"}, set(), current_lesson_id="l2")

        first, second, third = outline.lessons
        assert first.completed is True
        assert first.icon == "check-circle"
        assert second.unlocked is True
        assert second.current is True
        assert second.icon == "circle"
        assert second.caption is None
        assert third.unlocked is False
        assert third.icon == "lock"
        assert third.caption == LOCKED_CAPTION
        assert first.duration_caption == "10 min"

    def test_progress(self, module) -> None:
        outline = build_module_outline(module, {"l1"}, set())

        assert outline.completed_count == 1
        assert outline.total == 3
        assert outline.percent == 33
        assert outline.complete is False
        assert outline.progress_caption == "1 de 3 aulas concluídas"
        assert outline.icon == "book-open"

    def test_complete_module(self, module) -> None:
        outline = build_module_outline(module, {"l1", "l2", "l3"}, set())
        assert outline.complete is True
        assert outline.percent == 100
        assert outline.icon == "check-circle"

    def test_module_quiz_always_clickable(self, module) -> None:
        """The module quiz entry is offered even with nothing completed."""
        outline = build_module_outline(module, set(), set())
        assert outline.quiz is not None
        assert outline.quiz.title == MODULE_QUIZ_TITLE
        assert outline.quiz.clickable is True

    def test_no_module_quiz(self, plain_lessons) -> None:
        module = Module(id="m2", title="Módulo 2", lessons=plain_lessons)
        assert build_module_outline(module, set(), set()).quiz is None

    def test_empty_module_progress(self) -> None:
        outline = build_module_outline(Module(id="m3", title="Vazio"), set(), set())
        assert outline.percent == 0
        assert outline.complete is False

    def test_course_outline_orders_modules(self, plain_lessons) -> None:
        modules = [
            Module(id="b", title="B", order_index=2),
            Module(id="a", title="A", order_index=1, lessons=plain_lessons),
        ]
        outline = build_course_outline(modules, set(), set())
        assert [m.module_id for m in outline] == ["a", "b"]
