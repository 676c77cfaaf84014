"""Tests for the todo model and context relevance."""

from datetime import datetime, timedelta, timezone

import pytest

from upnext.core.todos import (
    ArchivedTodo,
    Dataset,
    Priority,
    Stats,
    Todo,
    display_context,
    filter_archive,
    filter_items,
    generate_id,
    is_relevant,
    new_stamp,
    parse_instant,
)


@pytest.fixture
def created():
    return datetime(2025, 1, 15, 9, 30, tzinfo=timezone(timedelta(hours=-5)))


class TestPriority:
    def test_labels_and_icons(self):
        assert Priority.LOW.label == "Low"
        assert Priority.MEDIUM.label == "Medium"
        assert Priority.HIGH.label == "High"
        assert Priority.LOW.icon == "!"
        assert Priority.HIGH.icon == "!!!"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("high", Priority.HIGH),
            ("H", Priority.HIGH),
            ("medium", Priority.MEDIUM),
            ("m", Priority.MEDIUM),
            (" low ", Priority.LOW),
            ("l", Priority.LOW),
        ],
    )
    def test_parse(self, value, expected):
        assert Priority.parse(value) == expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Priority.parse("urgent")


class TestGenerateId:
    def test_format(self):
        todo_id = generate_id(datetime(2025, 1, 15, 9, 30, 5, 123456))
        assert todo_id == "20250115093005.123456000"

    def test_sorts_by_creation_time(self):
        earlier = generate_id(datetime(2025, 1, 15, 9, 30, 5))
        later = generate_id(datetime(2025, 1, 15, 9, 30, 6))
        assert earlier < later

    def test_default_uses_now(self):
        todo_id = generate_id()
        stamp, _, nanos = todo_id.partition(".")
        assert len(stamp) == 14
        assert len(nanos) == 9

    def test_default_ids_strictly_increase(self):
        ids = [generate_id() for _ in range(50)]
        assert ids == sorted(set(ids))


class TestNewStamp:
    def test_id_matches_created(self):
        todo_id, created = new_stamp()
        assert created.tzinfo is not None
        assert todo_id.startswith(created.strftime("%Y%m%d%H%M%S"))
        assert todo_id.split(".")[1][:6] == f"{created.microsecond:06d}"

    def test_strictly_increasing(self):
        first, _ = new_stamp()
        second, _ = new_stamp()
        assert first < second


class TestParseInstant:
    def test_round_trips_isoformat(self, created):
        assert parse_instant(created.isoformat()) == created

    def test_accepts_z_suffix(self):
        assert parse_instant("2025-01-15T09:30:00Z") == datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "fraction,microsecond",
        [
            ("1", 100000),
            ("12", 120000),
            ("1234", 123400),
            ("12345", 123450),
            ("123456", 123456),
            ("123456789", 123456),
        ],
    )
    def test_any_fraction_length(self, fraction, microsecond):
        parsed = parse_instant(f"2025-01-15T09:30:00.{fraction}-05:00")
        assert parsed.microsecond == microsecond
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_no_fraction(self):
        assert parse_instant("2025-01-15T09:30:00+00:00").microsecond == 0


class TestSerialization:
    def test_todo_omits_empty_optional_fields(self, created):
        todo = Todo(id="1", text="Write tests", created=created)
        data = todo.to_dict()
        assert "description" not in data
        assert "context" not in data
        assert data["priority"] == 1
        assert data["position"] == 0

    def test_todo_from_dict(self, created):
        todo = Todo.from_dict(
            {
                "id": "1",
                "text": "Write tests",
                "description": "all of them",
                "priority": 2,
                "created": created.isoformat(),
                "position": 3,
                "context": "/home/me/project",
            }
        )
        assert todo.priority is Priority.HIGH
        assert todo.description == "all of them"
        assert todo.position == 3
        assert todo.context == "/home/me/project"
        assert todo.created == created

    def test_dataset_round_trip(self, created):
        data = Dataset(
            items=[Todo(id="1", text="a", created=created, context="/x")],
            archive=[
                ArchivedTodo(
                    id="2",
                    text="b",
                    priority=Priority.LOW,
                    created=created,
                    completed=created + timedelta(hours=1),
                )
            ],
            stats=Stats(total_completed=4, streak_days=2),
        )
        assert Dataset.from_dict(data.to_dict()) == data

    def test_missing_sections_load_empty(self):
        data = Dataset.from_dict({"version": 1})
        assert data.items == []
        assert data.archive == []
        assert data.stats == Stats()

    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            Dataset.from_dict([])

    def test_archived_round_trip_through_todo(self, created):
        todo = Todo(id="1", text="a", description="d", priority=Priority.HIGH, created=created, position=4, context="/x")
        archived = ArchivedTodo.from_todo(todo, completed=created)
        restored = archived.to_todo()
        assert restored.id == todo.id
        assert restored.text == todo.text
        assert restored.description == todo.description
        assert restored.priority == todo.priority
        assert restored.created == todo.created
        assert restored.context == todo.context
        assert restored.position == 0


class TestIsRelevant:
    def test_global_task_always_relevant(self):
        assert is_relevant("", "/anywhere") is True
        assert is_relevant("", "") is True

    def test_exact_match(self):
        assert is_relevant("/a/b", "/a/b") is True

    def test_trailing_separator_and_dots_normalized(self):
        assert is_relevant("/a/b/", "/a/b") is True
        assert is_relevant("/a/x/../b", "/a/b/.") is True

    def test_parent_context_applies_to_subdirectories(self):
        assert is_relevant("/a/b", "/a/b/c") is True
        assert is_relevant("/a", "/a/b/c/d") is True

    def test_subdirectory_context_visible_from_parent(self):
        assert is_relevant("/a/b/c", "/a/b") is True

    def test_sibling_prefix_is_not_relevant(self):
        assert is_relevant("/a/b", "/a/bc") is False
        assert is_relevant("/a/bc", "/a/b") is False

    def test_unrelated_paths(self):
        assert is_relevant("/a/b", "/x/y") is False

    def test_root_context(self):
        assert is_relevant("/", "/a/b") is True

    def test_contextual_task_with_empty_cwd(self):
        assert is_relevant("/a/b", "") is False


class TestDisplayContext:
    def test_global(self):
        assert display_context("", "/a") == "global"

    def test_same_directory(self):
        assert display_context("/a/b/", "/a/b") == "."

    def test_child(self):
        assert display_context("/a/b/c", "/a/b") == "c"

    def test_parent(self):
        assert display_context("/a", "/a/b/c") == "../.."

    def test_no_cwd_shows_absolute_path(self):
        assert display_context("/a/b", "") == "/a/b"


class TestFilters:
    @pytest.fixture
    def data(self, created):
        return Dataset(
            items=[
                Todo(id="1", text="global", created=created, position=0),
                Todo(id="2", text="project", created=created, position=1, context="/work/project"),
                Todo(id="3", text="other", created=created, position=2, context="/work/other"),
                Todo(id="4", text="nested", created=created, position=3, context="/work/project/api"),
            ],
            archive=[
                ArchivedTodo(id="5", text="done here", priority=Priority.LOW, created=created, completed=created, context="/work/project"),
                ArchivedTodo(id="6", text="done there", priority=Priority.LOW, created=created, completed=created, context="/elsewhere"),
            ],
        )

    def test_filter_items_keeps_order(self, data):
        visible = filter_items(data, "/work/project")
        assert [t.text for t in visible] == ["global", "project", "nested"]

    def test_filter_archive(self, data):
        visible = filter_archive(data, "/work/project")
        assert [t.text for t in visible] == ["done here"]
