"""upnext CLI - context-aware terminal todo list."""

import logging
import os
import sys

import click

from .adapters.json_store import JSONTodoStore
from .config import Config, data_file, load_config, log_file
from .core.format import render_json, render_plain
from .core.operations import add_todo
from .core.todos import Priority
from .ports.todo_store import StorageError
from .session import Session

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _current_dir() -> str:
    """Working directory used as task context; empty if it can't be determined."""
    try:
        return os.getcwd()
    except OSError:
        return ""


def _setup_logging(debug: bool, config: Config, interactive: bool) -> None:
    """Configure logging. The full-screen UI owns the terminal, so it logs to a file."""
    if interactive and not debug:
        # Errors are shown in the UI; keep stray records off the screen
        logging.getLogger("upnext").addHandler(logging.NullHandler())
        return
    if not debug:
        return

    if interactive:
        path = log_file(config)
        path.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(filename=str(path), format=LOG_FORMAT, level=logging.DEBUG)
    else:
        logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--plain", is_flag=True, help="Output in plain text format")
@click.option("--json", "as_json", is_flag=True, help="Output in JSON format")
@click.option("--all", "show_all", is_flag=True, help="Show all tasks regardless of context")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="upnext")
@click.pass_context
def main(ctx, plain: bool, as_json: bool, show_all: bool, debug: bool):
    """upnext - a minimal, context-aware todo list for the terminal.

    Run without a command to open the interactive view. Tasks are scoped to
    the directory they were added in; --all shows everything.
    """
    interactive = ctx.invoked_subcommand is None and not (plain or as_json)

    try:
        config = load_config()
        _setup_logging(debug, config, interactive)
        store = JSONTodoStore(data_file(config))
    except (StorageError, OSError) as e:
        _fail(str(e))
    except UnicodeDecodeError as e:
        _fail(f"config file is not valid UTF-8: {e}")

    ctx.obj = {"config": config, "store": store}
    if ctx.invoked_subcommand is not None:
        return

    if plain or as_json:
        try:
            data = store.load()
        except StorageError as e:
            _fail(f"failed to load data: {e}")
        click.echo(render_json(data) if as_json else render_plain(data))
        return

    _run_interactive(store, config, show_all or config.show_all)


def _run_interactive(store: JSONTodoStore, config: Config, show_all: bool) -> None:
    from .tui import UpnextApp

    try:
        session = Session.start(
            store,
            cwd=_current_dir(),
            show_all=show_all,
            page_size=config.page_size,
            default_priority=config.default_priority,
        )
    except StorageError as e:
        _fail(f"failed to load data: {e}")

    UpnextApp(session, celebration_seconds=config.celebration_seconds).run()

    if session.error:
        click.echo(f"Warning: last save failed, recent changes may be lost: {session.error}", err=True)
        sys.exit(1)


@main.command()
@click.argument("text")
@click.option("--global", "-g", "is_global", is_flag=True, help="Create a global task (visible from anywhere)")
@click.option("--priority", "-p", default=None, help="Priority: high, medium, or low")
@click.option("--desc", "-d", default="", help="Task description")
@click.pass_context
def add(ctx, text: str, is_global: bool, priority: str | None, desc: str):
    """Add a new task (scoped to the current directory unless --global)."""
    config: Config = ctx.obj["config"]
    store: JSONTodoStore = ctx.obj["store"]

    if priority is None:
        level = config.default_priority
    else:
        try:
            level = Priority.parse(priority)
        except ValueError:
            level = Priority.MEDIUM

    try:
        data = store.load()
    except StorageError as e:
        _fail(f"failed to load data: {e}")

    context = "" if is_global else _current_dir()
    todo = add_todo(data, text, desc, level, context)
    if todo is None:
        click.echo("Nothing added: task text is empty.", err=True)
        return

    try:
        store.save(data)
    except StorageError as e:
        _fail(f"failed to save data: {e}")

    location = "globally" if is_global else "here"
    click.echo(f"Added {location}: {text}")


if __name__ == "__main__":
    main()
