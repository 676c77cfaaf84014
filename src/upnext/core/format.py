"""Pure text formatting for todos - no I/O dependencies."""

import json
from datetime import datetime

from .todos import Dataset, now_local

RULE = "-" * 50
EMPTY_PLAIN = 'No tasks. Add one with: upnext add "your task"'


def render_plain(data: Dataset) -> str:
    """Plain-text listing of every active task."""
    if not data.items:
        return EMPTY_PLAIN

    lines = ["Tasks:", RULE]
    for i, item in enumerate(data.items, start=1):
        lines.append(f"{i}. [{item.priority.icon}] {item.text}")
        if item.description:
            lines.append(f"      {item.description}")
    lines.append(RULE)
    lines.append(f"{len(data.items)} items | {data.stats.total_completed} completed total")
    return "\n".join(lines)


def render_json(data: Dataset) -> str:
    """JSON listing of active tasks and stats for scripting."""
    items = []
    for item in data.items:
        entry = {
            "id": item.id,
            "text": item.text,
            "description": item.description,
            "priority": item.priority.label,
            "created": item.created.isoformat(timespec="seconds"),
            "position": item.position,
        }
        if not entry["description"]:
            del entry["description"]
        items.append(entry)

    output = {
        # null, not [], when there are no items
        "items": items or None,
        "stats": data.stats.to_dict(),
    }
    return json.dumps(output, indent=2)


def format_age(instant: datetime, now: datetime | None = None) -> str:
    """Coarse relative age: just now, 5m ago, 3h ago, 2d ago, 4w ago."""
    now = now or now_local()
    if instant.tzinfo is None and now.tzinfo is not None:
        instant = instant.replace(tzinfo=now.tzinfo)
    seconds = (now - instant).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    if seconds < 7 * 86400:
        return f"{int(seconds // 86400)}d ago"
    return f"{int(seconds // (7 * 86400))}w ago"


def truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    if width <= 1:
        return text[:width]
    return text[: width - 1] + "…"
