"""Pure todo domain model and context relevance - no I/O dependencies."""

import os
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum

DATA_VERSION = 1

# Any fraction of a second is padded or cut to exactly six digits on parse
_FRACTION_RE = re.compile(r"\.(\d+)")


class Priority(IntEnum):
    """Task priority, persisted as its integer value."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def icon(self) -> str:
        return "!" * (self.value + 1)

    @classmethod
    def parse(cls, value: str) -> "Priority":
        """Parse a CLI/config spelling: high/h, medium/m, low/l."""
        match value.strip().lower():
            case "high" | "h":
                return cls.HIGH
            case "medium" | "m":
                return cls.MEDIUM
            case "low" | "l":
                return cls.LOW
        raise ValueError(f"Unknown priority: {value!r}")


_last_ns = 0


def _next_ns() -> int:
    """Wall clock in nanoseconds, strictly increasing even when the clock is coarse."""
    global _last_ns
    _last_ns = max(time.time_ns(), _last_ns + 1)
    return _last_ns


def _format_id(now: datetime, nanos: int) -> str:
    return f"{now.strftime('%Y%m%d%H%M%S')}.{nanos:09d}"


def generate_id(now: datetime | None = None) -> str:
    """
    Timestamp identifier that sorts lexicographically by creation time.

    Without an instant the clock is read and ids never repeat within a
    process. An explicit instant is taken as given.
    """
    if now is not None:
        return _format_id(now, now.microsecond * 1000)
    return new_stamp()[0]


def new_stamp() -> tuple[str, datetime]:
    """A fresh id and the local creation time, taken from one clock reading."""
    ns = _next_ns()
    seconds, nanos = divmod(ns, 1_000_000_000)
    created = datetime.fromtimestamp(seconds).replace(microsecond=nanos // 1000).astimezone()
    return _format_id(created, nanos), created


def now_local() -> datetime:
    """Current time with the local UTC offset attached."""
    return datetime.now().astimezone()


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp written by this or an older version."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(_FRACTION_RE.sub(_microseconds, value, count=1))


def _microseconds(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


@dataclass
class Todo:
    """An active task in the ordered list."""

    id: str
    text: str
    priority: Priority = Priority.MEDIUM
    created: datetime = field(default_factory=now_local)
    position: int = 0
    description: str = ""
    context: str = ""

    @property
    def is_global(self) -> bool:
        return not self.context

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "priority": int(self.priority),
            "created": self.created.isoformat(),
            "position": self.position,
            "context": self.context,
        }
        return _omit_empty(data, "description", "context")

    @classmethod
    def from_dict(cls, data: dict) -> "Todo":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            description=data.get("description") or "",
            priority=Priority(data.get("priority", Priority.MEDIUM)),
            created=parse_instant(data["created"]),
            position=int(data.get("position", 0)),
            context=data.get("context") or "",
        )


@dataclass
class ArchivedTodo:
    """A completed task. Keeps the id of the Todo it came from."""

    id: str
    text: str
    priority: Priority
    created: datetime
    completed: datetime
    description: str = ""
    context: str = ""

    @classmethod
    def from_todo(cls, todo: Todo, completed: datetime | None = None) -> "ArchivedTodo":
        return cls(
            id=todo.id,
            text=todo.text,
            description=todo.description,
            priority=todo.priority,
            created=todo.created,
            completed=completed or now_local(),
            context=todo.context,
        )

    def to_todo(self, position: int = 0) -> Todo:
        return Todo(
            id=self.id,
            text=self.text,
            description=self.description,
            priority=self.priority,
            created=self.created,
            position=position,
            context=self.context,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "priority": int(self.priority),
            "created": self.created.isoformat(),
            "completed": self.completed.isoformat(),
            "context": self.context,
        }
        return _omit_empty(data, "description", "context")

    @classmethod
    def from_dict(cls, data: dict) -> "ArchivedTodo":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            description=data.get("description") or "",
            priority=Priority(data.get("priority", Priority.MEDIUM)),
            created=parse_instant(data["created"]),
            completed=parse_instant(data["completed"]),
            context=data.get("context") or "",
        )


@dataclass
class Stats:
    """Completion counters. total_completed only ever grows."""

    total_completed: int = 0
    streak_days: int = 0

    def to_dict(self) -> dict:
        return {"total_completed": self.total_completed, "streak_days": self.streak_days}

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        return cls(
            total_completed=int(data.get("total_completed", 0)),
            streak_days=int(data.get("streak_days", 0)),
        )


@dataclass
class Dataset:
    """Root persisted document: active items, archive (oldest first), stats."""

    version: int = DATA_VERSION
    items: list[Todo] = field(default_factory=list)
    archive: list[ArchivedTodo] = field(default_factory=list)
    stats: Stats = field(default_factory=Stats)

    def find_item(self, todo_id: str | None) -> int | None:
        """Index of the active item with this id, or None."""
        for i, item in enumerate(self.items):
            if item.id == todo_id:
                return i
        return None

    def find_archived(self, todo_id: str | None) -> int | None:
        """Index of the archived item with this id, or None."""
        for i, item in enumerate(self.archive):
            if item.id == todo_id:
                return i
        return None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "items": [t.to_dict() for t in self.items],
            "archive": [t.to_dict() for t in self.archive],
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Dataset":
        """Build from a parsed document. Raises KeyError/TypeError/ValueError on bad shape."""
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
        return cls(
            version=int(data.get("version", DATA_VERSION)),
            items=[Todo.from_dict(t) for t in data.get("items") or []],
            archive=[ArchivedTodo.from_dict(t) for t in data.get("archive") or []],
            stats=Stats.from_dict(data.get("stats") or {}),
        )


def _omit_empty(data: dict, *keys: str) -> dict:
    for key in keys:
        if not data[key]:
            del data[key]
    return data


# ============== Context Relevance ==============


def _normalize(path: str) -> str:
    return os.path.normpath(path)


def is_relevant(task_context: str, cwd: str) -> bool:
    """
    Whether a task created in task_context should be visible from cwd.

    Global tasks (no context) are always relevant. Otherwise the paths must be
    equal, or one must be an ancestor of the other. Containment is tested on
    whole path segments, so /a/b never matches /a/bc.
    """
    if not task_context:
        return True

    task_context = _normalize(task_context)
    cwd = _normalize(cwd) if cwd else ""

    if task_context == cwd:
        return True

    # Task from a parent directory applies to subdirectories
    if cwd.startswith(_with_sep(task_context)):
        return True

    # Task from a subdirectory stays visible from the parent
    if cwd and task_context.startswith(_with_sep(cwd)):
        return True

    return False


def _with_sep(path: str) -> str:
    return path if path.endswith(os.sep) else path + os.sep


def display_context(task_context: str, cwd: str) -> str:
    """Short label for a task's context as seen from cwd."""
    if not task_context:
        return "global"

    task_context = _normalize(task_context)
    if not cwd:
        return task_context
    cwd = _normalize(cwd)

    if task_context == cwd:
        return "."

    try:
        return os.path.relpath(task_context, cwd)
    except ValueError:
        # No relative path between them (e.g. different drives)
        return task_context


def filter_items(data: Dataset, cwd: str) -> list[Todo]:
    """Active items relevant to cwd, in list order."""
    return [t for t in data.items if is_relevant(t.context, cwd)]


def filter_archive(data: Dataset, cwd: str) -> list[ArchivedTodo]:
    """Archived items relevant to cwd, oldest first."""
    return [t for t in data.archive if is_relevant(t.context, cwd)]
