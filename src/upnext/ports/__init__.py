"""Ports - interfaces/protocols for external dependencies."""

from .todo_store import StorageCorrupt, StorageError, StorageUnavailable, TodoStore

__all__ = [
    "TodoStore",
    "StorageError",
    "StorageUnavailable",
    "StorageCorrupt",
]
