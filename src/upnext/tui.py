"""Full-screen terminal UI - renders a Session and feeds it key events."""

import asyncio
import logging
import os
from datetime import datetime

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style

from .core.format import format_age, truncate
from .core.todos import ArchivedTodo, Priority, Todo, display_context, now_local
from .session import (
    CelebrationMode,
    HelpMode,
    InputMode,
    Outcome,
    PRIORITY_FIELD,
    Session,
    Tab,
    TextField,
)

logger = logging.getLogger(__name__)

# Catppuccin Mocha
STYLE = Style.from_dict(
    {
        "header": "bold #cba6f7",
        "subtitle": "italic #a6adc8",
        "tab.active": "bold #1e1e2e bg:#cba6f7",
        "tab.inactive": "#a6adc8 bg:#313244",
        "context": "#94e2d5",
        "table.header": "bold #cba6f7 underline",
        "row": "#cdd6f4",
        "row.selected": "bold #89b4fa bg:#313244",
        "priority.high": "bold #f38ba8",
        "priority.medium": "#fab387",
        "priority.low": "#a6e3a1",
        "check": "#a6e3a1",
        "dim": "#6c7086",
        "label": "#bac2de",
        "label.focused": "bold #89b4fa",
        "input": "#cdd6f4 bg:#313244",
        "input.cursor": "reverse",
        "button": "#cdd6f4 bg:#45475a",
        "button.active": "bold #1e1e2e bg:#89b4fa",
        "help.key": "bold #89b4fa",
        "help.desc": "#a6adc8",
        "celebration": "bold #f9e2af",
        "error": "bold #f38ba8",
        "status": "#bac2de bg:#181825",
    }
)

ICON_UNCHECKED = "○"
ICON_CHECKED = "✓"

PRIORITY_STYLES = {
    Priority.HIGH: "class:priority.high",
    Priority.MEDIUM: "class:priority.medium",
    Priority.LOW: "class:priority.low",
}

HELP_ITEMS = [
    ("↑/k, ↓/j", "Navigate tasks"),
    ("pgup/^u, pgdn/^d", "Page up/down"),
    ("g/G", "Go to top/bottom"),
    ("tab, 1/2", "Switch to Active/Completed tab"),
    ("enter/d", "Complete task (Active tab)"),
    ("u", "Uncomplete task (Completed tab)"),
    ("a", "Add new task"),
    ("x", "Drop (delete) task"),
    ("b", "Bump task to top"),
    ("A", "Toggle show all tasks"),
    ("?", "Toggle help"),
    ("q/esc", "Quit"),
]

SHORT_HELP = "↑/k up • ↓/j down • enter/d complete • a add • tab switch • ? help • q quit"

# Rows taken by everything except the task table
CHROME_HEIGHT = 14

# prompt_toolkit aliases several keys to control codes; map them to the names Session uses
KEY_NAMES = {
    Keys.ControlM: "enter",
    Keys.ControlJ: "enter",
    Keys.ControlI: "tab",
    Keys.BackTab: "s-tab",
    Keys.ControlH: "backspace",
    Keys.Escape: "escape",
}


def normalize_key(key_press: KeyPress) -> str:
    """Turn a prompt_toolkit key press into a Session key name."""
    key = key_press.key
    if isinstance(key, Keys):
        return KEY_NAMES.get(key, key.value)
    return key


def dispatch(session: Session, key_press: KeyPress) -> Outcome:
    """Feed one prompt_toolkit key press to the session."""
    if key_press.key == Keys.BracketedPaste:
        return session.paste(key_press.data)
    return session.handle_key(normalize_key(key_press))


def table_height(height: int) -> int:
    return max(5, height - CHROME_HEIGHT)


# ============== Rendering ==============


def render(session: Session, width: int, height: int, now: datetime | None = None) -> StyleAndTextTuples:
    """Render the whole screen as prompt_toolkit formatted text."""
    now = now or now_local()
    lines: list[StyleAndTextTuples] = []

    lines.append([("class:header", "⚡ upnext"), ("class:subtitle", " - what's next?")])
    lines.append([])
    lines.append(_render_tabs(session))
    lines.append([])

    match session.mode:
        case CelebrationMode(message=message):
            lines.extend(_render_celebration(message, width))
        case HelpMode():
            lines.extend(_render_help())
        case InputMode() as form:
            lines.extend(_render_table(session, width, height, now))
            lines.append([])
            lines.extend(_render_form(form))
        case _:
            if not session.view:
                lines.extend(_render_empty(session))
            else:
                lines.extend(_render_table(session, width, height, now))
                lines.append([])
                lines.extend(_render_details(session, now))

    # Push the status bar to the bottom
    footer = 2 + (1 if session.error else 0)
    while len(lines) < height - footer:
        lines.append([])

    if not isinstance(session.mode, (HelpMode, InputMode)):
        lines.append([("class:dim", SHORT_HELP)])
    else:
        lines.append([])
    if session.error:
        lines.append([("class:error", f"Save failed: {session.error}")])
    lines.append(_render_status(session, width))

    result: StyleAndTextTuples = []
    for i, line in enumerate(lines):
        if i:
            result.append(("", "\n"))
        result.extend(line)
    return result


def _render_tabs(session: Session) -> StyleAndTextTuples:
    active = f" Active ({len(session.visible_items)}) "
    completed = f" Completed ({len(session.visible_archive)}) "
    on, off = "class:tab.active", "class:tab.inactive"
    is_active = session.tab is Tab.ACTIVE

    line: StyleAndTextTuples = [
        (on if is_active else off, active),
        ("", " "),
        (off if is_active else on, completed),
    ]
    if session.show_all:
        line.append(("class:context", "  🌐 showing all tasks"))
    elif session.cwd:
        line.append(("class:context", f"  📁 {os.path.basename(session.cwd) or session.cwd}"))
    return line


def _column_widths(width: int) -> tuple[int, int, int]:
    """Task, description and context column widths."""
    available = width - 35
    if available > 60:
        return available * 45 // 100, available * 30 // 100, available * 25 // 100
    return 28, 18, 13


def _render_table(session: Session, width: int, height: int, now: datetime) -> list[StyleAndTextTuples]:
    task_w, desc_w, ctx_w = _column_widths(width)
    rows = table_height(height)
    view = session.view
    offset = max(0, session.cursor - rows + 1)
    stamp = "Age" if session.tab is Tab.ACTIVE else "Done"

    lines: list[StyleAndTextTuples] = [
        [("class:table.header", f"  {'':2} {'Pri':4} {'Task':{task_w}} {'Description':{desc_w}} {'Context':{ctx_w}} {stamp:10}")]
    ]
    for index in range(offset, min(len(view), offset + rows)):
        item = view[index]
        selected = index == session.cursor
        row_style = "class:row.selected" if selected else "class:row"
        if isinstance(item, ArchivedTodo):
            icon, when = ICON_CHECKED, item.completed
        else:
            icon, when = ICON_UNCHECKED, item.created
        desc = item.description or "-"
        ctx = display_context(item.context, session.cwd)
        lines.append(
            [
                (row_style, f"{'›' if selected else ' '} {icon:2} "),
                (PRIORITY_STYLES[item.priority] + (" bg:#313244" if selected else ""), f"{item.priority.icon:4}"),
                (
                    row_style,
                    f" {truncate(item.text, task_w):{task_w}} {truncate(desc, desc_w):{desc_w}}"
                    f" {truncate(ctx, ctx_w):{ctx_w}} {format_age(when, now):10}",
                ),
            ]
        )
    return lines


def _render_details(session: Session, now: datetime) -> list[StyleAndTextTuples]:
    item = session.selected
    if item is None:
        return []

    count = len(session.view)
    if isinstance(item, Todo):
        header = f"Task {session.cursor + 1} of {count}"
        title: StyleAndTextTuples = [("bold", item.text)]
    else:
        header = f"Completed task {session.cursor + 1} of {count}"
        title = [("class:check", f"{ICON_CHECKED} "), ("bold", item.text)]

    lines: list[StyleAndTextTuples] = [[("class:dim", header)], [], title]
    if item.description:
        lines.append([])
        lines.append([("class:label", "Description:")])
        lines.append([("class:subtitle", item.description)])
    lines.append([])

    sep = ("class:dim", "  •  ")
    ctx = ("class:context", display_context(item.context, session.cwd))
    if isinstance(item, Todo):
        lines.append(
            [
                (PRIORITY_STYLES[item.priority], f"{item.priority.icon} {item.priority.label} priority"),
                sep,
                ("class:dim", f"Created: {format_age(item.created, now)}"),
                sep,
                ctx,
            ]
        )
    else:
        lines.append(
            [
                ("class:check", f"Completed: {format_age(item.completed, now)}"),
                sep,
                ("class:dim", f"Created: {format_age(item.created, now)}"),
                sep,
                ctx,
            ]
        )
        lines.append([])
        lines.append([("class:dim", "Press 'u' to move back to active tasks")])
    return lines


def _render_empty(session: Session) -> list[StyleAndTextTuples]:
    if session.tab is Tab.ACTIVE:
        message = "Nothing to do! Press 'a' to add a task."
    else:
        message = "No completed tasks yet. Complete some tasks to see them here!"
    return [
        [("class:dim", "      ✦  ·  ✦     ·    ✦")],
        [("class:dim", "    ·    ✦    ·  ✦   ·")],
        [],
        [("class:subtitle", f"  {message}")],
    ]


def _render_field(field: TextField, focused: bool, placeholder: str) -> StyleAndTextTuples:
    if not field.value and not focused:
        return [("class:dim", placeholder)]
    before, after = field.value[: field.cursor], field.value[field.cursor :]
    if not focused:
        return [("class:input", field.value)]
    return [
        ("class:input", before),
        ("class:input.cursor", after[:1] or " "),
        ("class:input", after[1:]),
    ]


def _render_form(form: InputMode) -> list[StyleAndTextTuples]:
    def label(text: str, index: int) -> tuple[str, str]:
        style = "class:label.focused" if form.focus == index else "class:label"
        return style, f"{text:13}"

    priorities: StyleAndTextTuples = []
    for p in Priority:
        if p == form.priority:
            style = "class:button.active" if form.focus == PRIORITY_FIELD else "class:button"
        else:
            style = PRIORITY_STYLES[p]
        priorities.append((style, f" {p.label} "))
        priorities.append(("", " "))

    return [
        [("class:header", "✨ Add New Task")],
        [],
        [label("Task:", 0), *_render_field(form.title, form.focus == 0, "What needs to be done?")],
        [],
        [label("Description:", 1), *_render_field(form.description, form.focus == 1, "Optional description...")],
        [],
        [label("Priority:", PRIORITY_FIELD), *priorities],
        [],
        [("class:dim", "tab: next field • enter: next/submit • ←/→: priority • esc: cancel")],
    ]


def _render_help() -> list[StyleAndTextTuples]:
    lines: list[StyleAndTextTuples] = [[("class:header", "⌨  Keyboard Shortcuts")], []]
    for key, desc in HELP_ITEMS:
        lines.append([("class:help.key", f"{key:>18}"), ("class:help.desc", f"  {desc}")])
    lines.append([])
    lines.append([("class:dim", "Press ?, q or enter to close")])
    return lines


def _render_celebration(message: str, width: int) -> list[StyleAndTextTuples]:
    block = [
        "✨ ⭐ ✨ ⭐ ✨ ⭐ ✨",
        "",
        "🎉 MILESTONE! 🎉",
        "",
        message,
        "",
        "✨ ⭐ ✨ ⭐ ✨ ⭐ ✨",
    ]
    return [[("class:celebration", text.center(width).rstrip())] for text in block]


def _render_status(session: Session, width: int) -> StyleAndTextTuples:
    if session.tab is Tab.ACTIVE:
        count, noun = len(session.visible_items), "active task"
    else:
        count, noun = len(session.visible_archive), "completed task"
    left = f"{count} {noun}" + ("" if count == 1 else "s")
    right = f"🏆 {session.data.stats.total_completed} total completed"
    padding = max(1, width - len(left) - len(right) - 4)
    return [("class:status", f" {left}{' ' * padding}{right} ")]


# ============== Application ==============


class UpnextApp:
    """prompt_toolkit application driving a Session."""

    def __init__(self, session: Session, celebration_seconds: float = 3.0):
        self.session = session
        self.celebration_seconds = celebration_seconds

        kb = KeyBindings()

        @kb.add(Keys.Any)
        def _(event):
            self._dispatch(event)

        @kb.add("c-c")
        def _(event):
            event.app.exit()

        self.app: Application = Application(
            layout=Layout(Window(FormattedTextControl(self._render, show_cursor=False))),
            key_bindings=kb,
            style=STYLE,
            full_screen=True,
        )

    def _size(self) -> tuple[int, int]:
        size = self.app.output.get_size()
        return size.columns, size.rows

    def _render(self) -> StyleAndTextTuples:
        width, height = self._size()
        return render(self.session, width, height)

    def _dispatch(self, event) -> None:
        key_press = event.key_sequence[0]
        outcome = dispatch(self.session, key_press)
        logger.debug(f"key {key_press.key!r} -> {outcome.name}")
        if outcome is Outcome.QUIT:
            event.app.exit()
        elif outcome is Outcome.START_CELEBRATION_TIMER and isinstance(self.session.mode, CelebrationMode):
            serial = self.session.mode.serial
            event.app.create_background_task(self._end_celebration(serial))

    async def _end_celebration(self, serial: int) -> None:
        await asyncio.sleep(self.celebration_seconds)
        self.session.celebration_timeout(serial)
        self.app.invalidate()

    def run(self) -> None:
        self.app.run()
