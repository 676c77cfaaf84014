"""Task operations on a full Dataset.

Every mutation resolves its target by identifier against the authoritative
lists, never by index into a filtered view. After each call the active
items' positions are the dense range 0..N-1 in list order.
"""

import logging
from datetime import datetime

from .todos import ArchivedTodo, Dataset, Priority, Todo, generate_id, new_stamp, now_local

logger = logging.getLogger(__name__)

MILESTONE_EVERY = 10

CELEBRATION_MESSAGES = [
    "Amazing! You're on fire!",
    "Incredible progress!",
    "You're crushing it!",
    "Productivity champion!",
    "Keep up the great work!",
]


def _reindex(items: list[Todo]) -> None:
    for i, item in enumerate(items):
        item.position = i


def _prepend(data: Dataset, todo: Todo) -> None:
    for item in data.items:
        item.position += 1
    todo.position = 0
    data.items.insert(0, todo)


def add_todo(
    data: Dataset,
    text: str,
    description: str = "",
    priority: Priority = Priority.MEDIUM,
    context: str = "",
    now: datetime | None = None,
) -> Todo | None:
    """
    Add a new task at the top of the list.

    Empty text is rejected silently: nothing changes and None is returned.
    The id and the created time are derived from the same instant.
    """
    if not text or not text.strip():
        logger.debug("Ignoring add with empty text")
        return None

    if now is None:
        todo_id, created = new_stamp()
    else:
        todo_id, created = generate_id(now), now
    todo = Todo(
        id=todo_id,
        text=text,
        description=description,
        priority=priority,
        created=created,
        context=context,
    )
    _prepend(data, todo)
    logger.info(f"Added todo {todo.id} (context={context or 'global'})")
    return todo


def complete_todo(
    data: Dataset, todo_id: str | None, now: datetime | None = None
) -> ArchivedTodo | None:
    """Move an active task to the archive and count the completion."""
    if todo_id is None or not data.items:
        return None

    index = data.find_item(todo_id)
    if index is None:
        logger.debug(f"complete: no active todo {todo_id}")
        return None

    todo = data.items.pop(index)
    archived = ArchivedTodo.from_todo(todo, completed=now or now_local())
    data.archive.append(archived)
    data.stats.total_completed += 1
    _reindex(data.items)
    logger.info(f"Completed todo {todo_id} (total={data.stats.total_completed})")
    return archived


def uncomplete_todo(data: Dataset, todo_id: str | None) -> Todo | None:
    """
    Restore an archived task to the top of the active list.

    total_completed is left as is: milestones track lifetime completions.
    """
    if todo_id is None:
        return None

    index = data.find_archived(todo_id)
    if index is None:
        logger.debug(f"uncomplete: no archived todo {todo_id}")
        return None

    archived = data.archive.pop(index)
    todo = archived.to_todo()
    _prepend(data, todo)
    logger.info(f"Restored todo {todo_id}")
    return todo


def drop_todo(data: Dataset, todo_id: str | None, from_archive: bool = False) -> bool:
    """Permanently delete a task. Unknown ids are a no-op."""
    if todo_id is None:
        return False

    if from_archive:
        index = data.find_archived(todo_id)
        if index is None:
            return False
        del data.archive[index]
    else:
        index = data.find_item(todo_id)
        if index is None:
            return False
        del data.items[index]
        _reindex(data.items)

    logger.info(f"Dropped todo {todo_id} (archive={from_archive})")
    return True


def bump_todo(data: Dataset, todo_id: str | None) -> bool:
    """Move an active task to position 0."""
    if todo_id is None or len(data.items) <= 1:
        return False

    index = data.find_item(todo_id)
    if not index:  # unknown, or already first
        return False

    data.items.insert(0, data.items.pop(index))
    _reindex(data.items)
    logger.info(f"Bumped todo {todo_id}")
    return True


def is_milestone(data: Dataset) -> bool:
    """Every tenth lifetime completion is worth celebrating."""
    total = data.stats.total_completed
    return total > 0 and total % MILESTONE_EVERY == 0


def celebration_message(total_completed: int) -> str:
    index = (total_completed // MILESTONE_EVERY - 1) % len(CELEBRATION_MESSAGES)
    return CELEBRATION_MESSAGES[index]
