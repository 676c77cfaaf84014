"""Interactive session state machine.

The session owns the live Dataset for the duration of an interactive run.
Each key event is handled to completion by ``Session.handle_key``; the
presentation layer only reads the session and feeds it events. Modes are
explicit types, each carrying only the data it needs.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from .core.operations import (
    add_todo,
    bump_todo,
    celebration_message,
    complete_todo,
    drop_todo,
    is_milestone,
    uncomplete_todo,
)
from .core.todos import ArchivedTodo, Dataset, Priority, Todo, filter_archive, filter_items
from .ports.todo_store import StorageError, TodoStore

logger = logging.getLogger(__name__)

TITLE_LIMIT = 100
DESCRIPTION_LIMIT = 200
FIELD_COUNT = 3  # title, description, priority
PRIORITY_FIELD = 2


class Tab(Enum):
    ACTIVE = auto()
    COMPLETED = auto()


class Outcome(Enum):
    """What the event loop should do after a key has been handled."""

    CONTINUE = auto()
    QUIT = auto()
    START_CELEBRATION_TIMER = auto()


@dataclass(frozen=True)
class KeyMap:
    """Key names, in prompt_toolkit spelling, bound to each action."""

    quit: tuple[str, ...] = ("q", "escape")
    switch_tab: tuple[str, ...] = ("tab", "s-tab")
    active_tab: tuple[str, ...] = ("1",)
    completed_tab: tuple[str, ...] = ("2",)
    toggle_all: tuple[str, ...] = ("A",)
    done: tuple[str, ...] = ("enter", "d")
    uncomplete: tuple[str, ...] = ("u",)
    add: tuple[str, ...] = ("a",)
    drop: tuple[str, ...] = ("x",)
    bump: tuple[str, ...] = ("b",)
    help: tuple[str, ...] = ("?",)
    confirm: tuple[str, ...] = ("enter",)
    cancel: tuple[str, ...] = ("escape",)
    next_field: tuple[str, ...] = ("tab",)
    prev_field: tuple[str, ...] = ("s-tab",)
    left: tuple[str, ...] = ("left", "h")
    right: tuple[str, ...] = ("right", "l")
    up: tuple[str, ...] = ("up", "k")
    down: tuple[str, ...] = ("down", "j")
    page_up: tuple[str, ...] = ("pageup", "c-u")
    page_down: tuple[str, ...] = ("pagedown", "c-d")
    top: tuple[str, ...] = ("home", "g")
    bottom: tuple[str, ...] = ("end", "G")


DEFAULT_KEYS = KeyMap()


@dataclass
class TextField:
    """Single-line text editor with a cursor and a character limit."""

    limit: int
    value: str = ""
    cursor: int = 0

    def handle_key(self, key: str) -> bool:
        """Apply an editing key. Returns False if the key means nothing here."""
        match key:
            case "backspace":
                if self.cursor > 0:
                    self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
                    self.cursor -= 1
            case "delete":
                self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]
            case "left":
                self.cursor = max(0, self.cursor - 1)
            case "right":
                self.cursor = min(len(self.value), self.cursor + 1)
            case "home" | "c-a":
                self.cursor = 0
            case "end" | "c-e":
                self.cursor = len(self.value)
            case _ if len(key) == 1 and key.isprintable():
                self.insert(key)
            case _:
                return False
        return True

    def insert(self, text: str) -> None:
        """Insert text at the cursor. Line breaks become spaces; overflow past the limit is dropped."""
        text = "".join(ch for ch in " ".join(text.splitlines()) if ch.isprintable())
        text = text[: max(0, self.limit - len(self.value))]
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)


@dataclass
class NormalMode:
    pass


@dataclass
class InputMode:
    """Add-task form: focused field index plus the three draft values."""

    focus: int = 0
    title: TextField = field(default_factory=lambda: TextField(TITLE_LIMIT))
    description: TextField = field(default_factory=lambda: TextField(DESCRIPTION_LIMIT))
    priority: Priority = Priority.MEDIUM

    @property
    def focused_text(self) -> TextField | None:
        match self.focus:
            case 0:
                return self.title
            case 1:
                return self.description
        return None


@dataclass
class HelpMode:
    pass


@dataclass
class CelebrationMode:
    message: str
    serial: int = 0


@dataclass
class ConfirmMode:
    """Reserved for confirmation prompts; no transition enters it yet."""

    prompt: str = ""


Mode = NormalMode | InputMode | HelpMode | CelebrationMode | ConfirmMode


class Session:
    """Interactive session over one exclusively owned Dataset."""

    def __init__(
        self,
        store: TodoStore,
        data: Dataset,
        cwd: str = "",
        show_all: bool = False,
        page_size: int = 10,
        default_priority: Priority = Priority.MEDIUM,
        keys: KeyMap = DEFAULT_KEYS,
    ):
        self.store = store
        self.data = data
        self.cwd = cwd
        self.show_all = show_all
        self.page_size = page_size
        self.default_priority = default_priority
        self.keys = keys
        self.mode: Mode = NormalMode()
        self.tab = Tab.ACTIVE
        self.cursor = 0
        self.error: str | None = None
        self.visible_items: list[Todo] = []
        self.visible_archive: list[ArchivedTodo] = []
        self._celebrations = 0
        self.refresh()

    @classmethod
    def start(cls, store: TodoStore, cwd: str = "", **kwargs) -> "Session":
        """Load the dataset and open a session on it. Load errors propagate."""
        return cls(store, store.load(), cwd=cwd, **kwargs)

    # ============== Views ==============

    @property
    def filtering(self) -> bool:
        return not self.show_all and bool(self.cwd)

    def refresh(self) -> None:
        """Recompute the displayed lists and clamp the cursor."""
        if self.filtering:
            self.visible_items = filter_items(self.data, self.cwd)
            archive = filter_archive(self.data, self.cwd)
        else:
            self.visible_items = list(self.data.items)
            archive = list(self.data.archive)
        # Most recently completed first
        self.visible_archive = archive[::-1]
        self._clamp_cursor()

    @property
    def view(self) -> list[Todo] | list[ArchivedTodo]:
        return self.visible_items if self.tab is Tab.ACTIVE else self.visible_archive

    @property
    def selected(self) -> Todo | ArchivedTodo | None:
        view = self.view
        if not view or not 0 <= self.cursor < len(view):
            return None
        return view[self.cursor]

    def _selected_id(self) -> str | None:
        item = self.selected
        return item.id if item else None

    def _clamp_cursor(self) -> None:
        count = len(self.view)
        self.cursor = 0 if count == 0 else min(max(self.cursor, 0), count - 1)

    def _move_cursor(self, delta: int) -> None:
        self.cursor += delta
        self._clamp_cursor()

    # ============== Persistence ==============

    def save(self) -> bool:
        """Persist the dataset. Failures are kept in ``error``, not raised."""
        try:
            self.store.save(self.data)
        except StorageError as e:
            logger.warning(f"Save failed, changes kept in memory: {e}")
            self.error = str(e)
            return False
        self.error = None
        return True

    # ============== Events ==============

    def handle_key(self, key: str) -> Outcome:
        """Handle one key event to completion."""
        match self.mode:
            case CelebrationMode():
                self.mode = NormalMode()
                return Outcome.CONTINUE
            case HelpMode():
                return self._handle_help_key(key)
            case InputMode() as form:
                return self._handle_input_key(form, key)
            case ConfirmMode():
                if key in self.keys.cancel or key in self.keys.quit:
                    self.mode = NormalMode()
                return Outcome.CONTINUE
            case _:
                return self._handle_normal_key(key)

    def paste(self, text: str) -> Outcome:
        """Handle pasted text. Only the focused field of the add form accepts it."""
        match self.mode:
            case CelebrationMode():
                self.mode = NormalMode()
            case InputMode(focused_text=TextField() as text_field):
                text_field.insert(text)
        return Outcome.CONTINUE

    def celebration_timeout(self, serial: int | None = None) -> None:
        """Scheduled end of a celebration. Stale timeouts are ignored."""
        match self.mode:
            case CelebrationMode(serial=current) if serial is None or serial == current:
                self.mode = NormalMode()

    def _handle_help_key(self, key: str) -> Outcome:
        if key in self.keys.help or key in self.keys.quit or key in self.keys.confirm:
            self.mode = NormalMode()
        return Outcome.CONTINUE

    def _handle_normal_key(self, key: str) -> Outcome:
        keys = self.keys

        if key in keys.quit:
            return Outcome.QUIT

        if key in keys.switch_tab:
            self._set_tab(Tab.COMPLETED if self.tab is Tab.ACTIVE else Tab.ACTIVE)
        elif key in keys.active_tab:
            self._set_tab(Tab.ACTIVE)
        elif key in keys.completed_tab:
            self._set_tab(Tab.COMPLETED)
        elif key in keys.toggle_all:
            self.show_all = not self.show_all
            self.refresh()
        elif key in keys.done:
            if self.tab is Tab.ACTIVE:
                return self._complete_selected()
        elif key in keys.uncomplete:
            if self.tab is Tab.COMPLETED:
                self._uncomplete_selected()
        elif key in keys.add:
            if self.tab is Tab.ACTIVE:
                self.mode = InputMode(priority=self.default_priority)
        elif key in keys.drop:
            drop_todo(self.data, self._selected_id(), from_archive=self.tab is Tab.COMPLETED)
            self.refresh()
            self.save()
        elif key in keys.bump:
            if self.tab is Tab.ACTIVE:
                bump_todo(self.data, self._selected_id())
                self.refresh()
                self.save()
                self.cursor = 0
        elif key in keys.help:
            self.mode = HelpMode()
        else:
            self._navigate(key)

        return Outcome.CONTINUE

    def _set_tab(self, tab: Tab) -> None:
        self.tab = tab
        self.cursor = 0
        self.refresh()

    def _navigate(self, key: str) -> None:
        keys = self.keys
        if key in keys.up:
            self._move_cursor(-1)
        elif key in keys.down:
            self._move_cursor(1)
        elif key in keys.page_up:
            self._move_cursor(-self.page_size)
        elif key in keys.page_down:
            self._move_cursor(self.page_size)
        elif key in keys.top:
            self.cursor = 0
        elif key in keys.bottom:
            self.cursor = len(self.view) - 1
            self._clamp_cursor()

    def _complete_selected(self) -> Outcome:
        if complete_todo(self.data, self._selected_id()) is None:
            return Outcome.CONTINUE
        self.refresh()
        self.save()

        if is_milestone(self.data):
            self._celebrations += 1
            total = self.data.stats.total_completed
            self.mode = CelebrationMode(celebration_message(total), serial=self._celebrations)
            logger.info(f"Milestone reached: {total} completed")
            return Outcome.START_CELEBRATION_TIMER
        return Outcome.CONTINUE

    def _uncomplete_selected(self) -> None:
        if uncomplete_todo(self.data, self._selected_id()) is None:
            return
        self.refresh()
        self.save()

    def _handle_input_key(self, form: InputMode, key: str) -> Outcome:
        keys = self.keys

        if key in keys.cancel:
            self.mode = NormalMode()
        elif key in keys.confirm:
            if form.focus < FIELD_COUNT - 1:
                form.focus += 1
            else:
                self._submit(form)
        elif key in keys.next_field:
            form.focus = (form.focus + 1) % FIELD_COUNT
        elif key in keys.prev_field:
            form.focus = (form.focus - 1) % FIELD_COUNT
        elif form.focus == PRIORITY_FIELD:
            if key in keys.left:
                form.priority = Priority((form.priority - 1) % len(Priority))
            elif key in keys.right:
                form.priority = Priority((form.priority + 1) % len(Priority))
        elif form.focused_text is not None:
            form.focused_text.handle_key(key)

        return Outcome.CONTINUE

    def _submit(self, form: InputMode) -> None:
        todo = add_todo(
            self.data,
            form.title.value,
            form.description.value,
            form.priority,
            context=self.cwd,
        )
        self.mode = NormalMode()
        if todo is None:
            return
        self.refresh()
        self.cursor = 0
        self.save()
