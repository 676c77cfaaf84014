"""Adapters - I/O implementations of ports."""

from .json_store import JSONTodoStore

__all__ = [
    "JSONTodoStore",
]
