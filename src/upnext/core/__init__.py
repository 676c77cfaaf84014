"""Functional core - pure business logic with no I/O."""

from .todos import (
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
)
from .operations import (
    add_todo,
    bump_todo,
    celebration_message,
    complete_todo,
    drop_todo,
    is_milestone,
    uncomplete_todo,
)
from .format import format_age, render_json, render_plain, truncate

__all__ = [
    # Model
    "ArchivedTodo",
    "Dataset",
    "Priority",
    "Stats",
    "Todo",
    "generate_id",
    # Context
    "display_context",
    "filter_archive",
    "filter_items",
    "is_relevant",
    # Operations
    "add_todo",
    "bump_todo",
    "celebration_message",
    "complete_todo",
    "drop_todo",
    "is_milestone",
    "uncomplete_todo",
    # Formatting
    "format_age",
    "render_json",
    "render_plain",
    "truncate",
]
