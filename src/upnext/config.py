"""Configuration management for upnext."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .core.todos import Priority
from .ports.todo_store import StorageUnavailable

logger = logging.getLogger(__name__)

APP_NAME = "upnext"
CONFIG_NAME = "upnext.conf"
DATA_NAME = "todos.json"
LOG_NAME = "upnext.log"


@dataclass
class Config:
    """upnext configuration."""

    data_file: str = ""
    log_file: str = ""
    celebration_seconds: float = 3.0
    page_size: int = 10
    show_all: bool = False
    default_priority: Priority = Priority.MEDIUM


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise StorageUnavailable(f"Cannot resolve home directory: {e}") from e


def upnext_home() -> Path | None:
    """UPNEXT_HOME overrides both config and data locations when set."""
    value = os.environ.get("UPNEXT_HOME")
    return Path(value).expanduser() if value else None


def config_file() -> Path:
    """Location of upnext.conf."""
    home = upnext_home()
    if home:
        return home / CONFIG_NAME
    base = os.environ.get("XDG_CONFIG_HOME")
    base_dir = Path(base) if base else _home() / ".config"
    return base_dir / APP_NAME / CONFIG_NAME


def default_data_dir() -> Path:
    """Platform data directory (XDG on Linux/macOS, LOCALAPPDATA on Windows)."""
    home = upnext_home()
    if home:
        return home

    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA")
        base_dir = Path(base) if base else _home() / "AppData" / "Local"
    else:
        # macOS uses ~/.local/share too, for consistency with Linux
        base = os.environ.get("XDG_DATA_HOME")
        base_dir = Path(base) if base else _home() / ".local" / "share"
    return base_dir / APP_NAME


def data_file(config: Config | None = None) -> Path:
    """Resolve the todo data file."""
    if config and config.data_file:
        return Path(config.data_file).expanduser()
    return default_data_dir() / DATA_NAME


def log_file(config: Config | None = None) -> Path:
    """Resolve the debug log file (beside the data file by default)."""
    if config and config.log_file:
        return Path(config.log_file).expanduser()
    return data_file(config).parent / LOG_NAME


def _parse_bool(value: str) -> bool:
    match value.strip().lower():
        case "1" | "true" | "yes" | "on":
            return True
        case "0" | "false" | "no" | "off" | "":
            return False
    raise ValueError(f"not a boolean: {value!r}")


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from upnext.conf."""
    config = Config()
    path = path or config_file()

    if not path.exists():
        return config

    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        try:
            match key:
                case "data_file":
                    config.data_file = value
                case "log_file":
                    config.log_file = value
                case "celebration_seconds":
                    config.celebration_seconds = max(0.0, float(value))
                case "page_size":
                    config.page_size = max(1, int(value))
                case "show_all":
                    config.show_all = _parse_bool(value)
                case "default_priority":
                    config.default_priority = Priority.parse(value)
                case _:
                    logger.warning(f"Unknown config key in {path}: {key}")
        except ValueError as e:
            logger.warning(f"Ignoring invalid {key.upper()} in {path}: {e}")

    return config
