"""Shared fixtures."""

import copy

import pytest

from upnext.core.todos import Dataset
from upnext.ports.todo_store import StorageError


class MemoryTodoStore:
    """TodoStore kept in memory, with a switch to make saves fail."""

    def __init__(self, data: Dataset | None = None):
        # Deep copies, so later in-place mutations don't leak into "storage"
        self.saved = copy.deepcopy(data) if data is not None else None
        self.save_count = 0
        self.fail_saves = False

    def load(self) -> Dataset:
        if self.saved is None:
            return Dataset()
        return copy.deepcopy(self.saved)

    def save(self, data: Dataset) -> None:
        if self.fail_saves:
            raise StorageError("save failed (simulated)")
        self.saved = copy.deepcopy(data)
        self.save_count += 1


@pytest.fixture
def make_store():
    """Factory for in-memory stores, optionally pre-loaded with a dataset."""
    return MemoryTodoStore
