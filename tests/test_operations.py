"""Tests for task operations on a full dataset."""

from datetime import datetime, timezone

import pytest

from upnext.core.operations import (
    CELEBRATION_MESSAGES,
    add_todo,
    bump_todo,
    celebration_message,
    complete_todo,
    drop_todo,
    is_milestone,
    uncomplete_todo,
)
from upnext.core.todos import Dataset, Priority, Stats


def positions(data: Dataset) -> list[int]:
    return [t.position for t in data.items]


def texts(data: Dataset) -> list[str]:
    return [t.text for t in data.items]


def assert_dense(data: Dataset) -> None:
    assert positions(data) == list(range(len(data.items)))


@pytest.fixture
def data():
    return Dataset()


@pytest.fixture
def three(data):
    """Dataset with c, b, a (c added last, so first)."""
    for text in ["a", "b", "c"]:
        add_todo(data, text)
    return data


class TestAddTodo:
    def test_new_task_goes_first(self, three):
        todo = add_todo(three, "x", "details", Priority.HIGH, "/proj")
        assert texts(three) == ["x", "c", "b", "a"]
        assert three.items[0] is todo
        assert todo.position == 0
        assert todo.description == "details"
        assert todo.priority is Priority.HIGH
        assert todo.context == "/proj"
        assert_dense(three)

    def test_shifts_existing_positions(self, three):
        before = {t.id: t.position for t in three.items}
        add_todo(three, "x")
        for todo in three.items[1:]:
            assert todo.position == before[todo.id] + 1

    def test_empty_text_is_rejected(self, three):
        assert add_todo(three, "") is None
        assert add_todo(three, "   ") is None
        assert texts(three) == ["c", "b", "a"]

    def test_sets_created(self, data):
        now = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)
        todo = add_todo(data, "x", now=now)
        assert todo.created == now
        assert todo.id == "20250115090000.000000000"

    def test_id_agrees_with_created(self, data):
        todo = add_todo(data, "x")
        assert todo.id.startswith(todo.created.strftime("%Y%m%d%H%M%S."))
        assert todo.id.split(".")[1][:6] == f"{todo.created.microsecond:06d}"

    def test_ids_are_unique(self, data):
        ids = {add_todo(data, f"task {i}").id for i in range(20)}
        assert len(ids) == 20


class TestCompleteTodo:
    def test_moves_to_archive(self, three):
        target = three.items[1]
        archived = complete_todo(three, target.id)

        assert texts(three) == ["c", "a"]
        assert three.archive == [archived]
        assert archived.id == target.id
        assert archived.text == "b"
        assert archived.completed is not None
        assert three.stats.total_completed == 1
        assert_dense(three)

    def test_archive_keeps_completion_order(self, three):
        complete_todo(three, three.items[2].id)
        complete_todo(three, three.items[0].id)
        assert [t.text for t in three.archive] == ["a", "c"]

    def test_unknown_id_is_noop(self, three):
        assert complete_todo(three, "nope") is None
        assert complete_todo(three, None) is None
        assert three.stats.total_completed == 0
        assert three.archive == []

    def test_empty_list_is_noop(self, data):
        assert complete_todo(data, "anything") is None


class TestUncompleteTodo:
    def test_round_trip_restores_task(self, three):
        target = three.items[2]
        snapshot = (target.id, target.text, target.description, target.priority, target.context, target.created)

        complete_todo(three, target.id)
        total_after_complete = three.stats.total_completed
        restored = uncomplete_todo(three, target.id)

        assert restored is three.items[0]
        assert (
            restored.id,
            restored.text,
            restored.description,
            restored.priority,
            restored.context,
            restored.created,
        ) == snapshot
        assert restored.position == 0
        assert three.archive == []
        assert three.stats.total_completed == total_after_complete
        assert_dense(three)

    def test_unknown_id_is_noop(self, three):
        assert uncomplete_todo(three, "nope") is None
        assert texts(three) == ["c", "b", "a"]


class TestDropTodo:
    def test_drop_active(self, three):
        assert drop_todo(three, three.items[1].id) is True
        assert texts(three) == ["c", "a"]
        assert three.archive == []
        assert three.stats.total_completed == 0
        assert_dense(three)

    def test_drop_archived(self, three):
        archived = complete_todo(three, three.items[0].id)
        assert drop_todo(three, archived.id, from_archive=True) is True
        assert three.archive == []
        assert three.stats.total_completed == 1

    def test_drop_unknown_is_idempotent(self, three):
        before = three.to_dict()
        assert drop_todo(three, "nope") is False
        assert drop_todo(three, "nope", from_archive=True) is False
        assert three.to_dict() == before

    def test_active_id_not_dropped_from_archive(self, three):
        assert drop_todo(three, three.items[0].id, from_archive=True) is False
        assert len(three.items) == 3


class TestBumpTodo:
    def test_moves_to_front(self, three):
        target = three.items[2]
        assert bump_todo(three, target.id) is True
        assert texts(three) == ["a", "c", "b"]
        assert three.items[0].id == target.id
        assert_dense(three)

    def test_already_first_is_noop(self, three):
        assert bump_todo(three, three.items[0].id) is False
        assert texts(three) == ["c", "b", "a"]

    def test_single_item_is_noop(self, data):
        todo = add_todo(data, "only")
        assert bump_todo(data, todo.id) is False

    def test_unknown_id_is_noop(self, three):
        assert bump_todo(three, "nope") is False
        assert texts(three) == ["c", "b", "a"]

    def test_does_not_touch_archive(self, three):
        complete_todo(three, three.items[0].id)
        bump_todo(three, three.items[1].id)
        assert [t.text for t in three.archive] == ["c"]


class TestPositionDensity:
    def test_dense_after_mixed_operations(self, data):
        for i in range(6):
            add_todo(data, f"t{i}")
        complete_todo(data, data.items[3].id)
        bump_todo(data, data.items[4].id)
        uncomplete_todo(data, data.archive[0].id)
        drop_todo(data, data.items[2].id)
        complete_todo(data, data.items[0].id)
        add_todo(data, "late")
        bump_todo(data, data.items[-1].id)
        assert_dense(data)


class TestScenario:
    def test_two_adds_then_complete_first(self, data):
        add_todo(data, "first")
        add_todo(data, "second")
        assert texts(data) == ["second", "first"]
        assert positions(data) == [0, 1]

        complete_todo(data, data.items[0].id)
        assert texts(data) == ["first"]
        assert positions(data) == [0]
        assert [t.text for t in data.archive] == ["second"]
        assert data.stats.total_completed == 1


class TestMilestones:
    @pytest.mark.parametrize(
        "total,expected",
        [(0, False), (1, False), (9, False), (10, True), (11, False), (20, True), (100, True)],
    )
    def test_is_milestone(self, total, expected):
        assert is_milestone(Dataset(stats=Stats(total_completed=total))) is expected

    def test_messages_cycle(self):
        assert celebration_message(10) == CELEBRATION_MESSAGES[0]
        assert celebration_message(20) == CELEBRATION_MESSAGES[1]
        assert celebration_message(50) == CELEBRATION_MESSAGES[4]
        assert celebration_message(60) == CELEBRATION_MESSAGES[0]
