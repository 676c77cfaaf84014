"""JSON file store adapter."""

import json
import logging
import os
from pathlib import Path

from upnext.core.todos import Dataset
from upnext.ports.todo_store import StorageCorrupt, StorageError, StorageUnavailable

logger = logging.getLogger(__name__)


class JSONTodoStore:
    """
    File-based todo storage.

    Implements TodoStore protocol. The whole dataset lives in one JSON file,
    replaced atomically on every save so a reader never sees a partial write.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    @property
    def _temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def load(self) -> Dataset:
        """Load the dataset. Returns an empty one if the file doesn't exist."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No data file at {self.path}, starting empty")
            return Dataset()
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            data = Dataset.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StorageCorrupt(f"Cannot parse {self.path}: {e}") from e

        logger.debug(f"Loaded {len(data.items)} items, {len(data.archive)} archived from {self.path}")
        return data

    def save(self, data: Dataset) -> None:
        """Write to a temp file, then rename it over the data file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create {self.path.parent}: {e}") from e

        payload = json.dumps(data.to_dict(), indent=2)
        temp_path = self._temp_path
        try:
            temp_path.write_text(payload, encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

        logger.debug(f"Saved {len(data.items)} items to {self.path}")
