"""Todo store interface."""

from typing import Protocol

from upnext.core.todos import Dataset


class StorageError(Exception):
    """Raised when the todo store cannot be read or written."""

    pass


class StorageUnavailable(StorageError):
    """Raised when the data directory cannot be resolved or created."""

    pass


class StorageCorrupt(StorageError):
    """Raised when the persisted document cannot be parsed."""

    pass


class TodoStore(Protocol):
    """Interface for loading and saving the whole todo dataset."""

    def load(self) -> Dataset:
        """Load the dataset. Returns an empty one if nothing was saved yet."""
        ...

    def save(self, data: Dataset) -> None:
        """Persist the complete dataset atomically."""
        ...
