"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Optional

import typer
from PySide6.QtCore import QCoreApplication
from rich import print
from rich.console import Console

from .application.interfaces import CredentialContext
from .application.services.dispatch import ImmediateDispatcher
from .config import (
    CELL_SPACING,
    CHROME_HEIGHT,
    CHROME_WIDTH,
    DEFAULT_CELL_HEIGHT,
    DEFAULT_PAGE_SIZE,
    MAX_CELL_WIDTH,
    MAX_PAGE_SIZE,
    MIN_CELL_WIDTH,
)
from .domain.models import LayoutConstraints
from .domain.services.detail import format_detail_value
from .domain.services.layout import compute_grid_shape
from .errors import FetchError, FixtureFormatError, SecretGridError, SettingsError
from .events.bus import EventBus
from .gui.keys import KeyMap, parse_key_sequence
from .gui.ui.console_view import render
from .gui.ui.status_timer import StatusClearTimer
from .gui.ui.tasks.page_fetch_worker import QtFetchDispatcher
from .gui.viewmodels import intents
from .gui.viewmodels.grid_browser_viewmodel import GridBrowserViewModel
from .infrastructure.sources.json_source import JsonFileSource
from .settings.manager import SettingsManager
from .utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

app = typer.Typer(help="Browse token-paged secret lists in a terminal-sized grid")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (FixtureFormatError, FetchError, SettingsError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except SecretGridError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
) -> None:
    """Configure logging for every command."""

    configure_logging(verbose)


@app.command()
@_handle_errors
def layout(
    width: int = typer.Argument(..., help="Viewport width in columns"),
    height: int = typer.Argument(..., help="Viewport height in lines"),
    min_cell_width: int = typer.Option(MIN_CELL_WIDTH, help="Narrowest allowed cell"),
    max_cell_width: int = typer.Option(MAX_CELL_WIDTH, help="Widest allowed cell"),
    cell_height: int = typer.Option(DEFAULT_CELL_HEIGHT, help="Lines per cell"),
    spacing: int = typer.Option(CELL_SPACING, help="Columns between cells"),
) -> None:
    """Print the grid shape computed for a viewport."""

    shape = compute_grid_shape(width, height, min_cell_width, max_cell_width, cell_height, spacing)
    print(
        f"columns={shape.columns} rows={shape.rows} "
        f"cell_width={shape.cell_width} capacity={shape.capacity}"
    )


@app.command()
@_handle_errors
def browse(
    fixture: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file of secrets"),
    width: int = typer.Option(80, help="Terminal width"),
    height: int = typer.Option(30, help="Terminal height"),
    page_size: Optional[int] = typer.Option(
        None, min=1, max=MAX_PAGE_SIZE, help="Secrets per remote page"
    ),
    keys: str = typer.Option("", help="Space separated key presses to replay, e.g. 'j l / d enter'"),
    settings: Optional[Path] = typer.Option(None, help="Settings file for layout and page size"),
    profile: Optional[str] = typer.Option(None, help="Profile to browse; remembered in --settings"),
    region: Optional[str] = typer.Option(None, help="Region to browse; remembered in --settings"),
    threaded: bool = typer.Option(
        False, "--threaded", help="Fetch on a Qt thread pool and clear status lines on a timer"
    ),
) -> None:
    """Replay key presses against a fixture and print the resulting screen."""

    source = JsonFileSource(fixture)
    constraints = LayoutConstraints()
    chrome = (CHROME_WIDTH, CHROME_HEIGHT)
    context = CredentialContext(profile=profile, region=region)
    size = page_size or DEFAULT_PAGE_SIZE
    manager: Optional[SettingsManager] = None
    if settings is not None:
        manager = SettingsManager(settings)
        manager.load()
        constraints = manager.layout_constraints()
        chrome = manager.chrome_margins()
        stored = manager.credential_context()
        context = CredentialContext(
            profile=profile or stored.profile,
            region=region or stored.region,
        )
        size = page_size or manager.get("page_size", DEFAULT_PAGE_SIZE)

    qt_app = None
    qt_dispatcher: Optional[QtFetchDispatcher] = None
    if threaded:
        qt_app = QCoreApplication.instance() or QCoreApplication([])
        qt_dispatcher = QtFetchDispatcher()

    viewmodel = GridBrowserViewModel(
        lambda _context: source,
        qt_dispatcher if qt_dispatcher is not None else ImmediateDispatcher(),
        EventBus(),
        context=context,
        constraints=constraints,
        page_size=size,
        chrome=chrome,
    )
    if manager is not None:
        viewmodel.context_changed.connect(manager.remember_context)
    status_timer = StatusClearTimer(viewmodel) if qt_app is not None else None

    def settle() -> None:
        if qt_dispatcher is not None:
            qt_dispatcher.drain()

    viewmodel.handle(intents.Resize(width, height))
    viewmodel.start()
    settle()

    keymap = KeyMap()
    for key in parse_key_sequence(keys):
        intent = keymap.resolve(key, viewmodel.screen.value, viewmodel.is_filtering())
        if intent is None:
            LOGGER.debug("Key %r is not bound on the %s screen", key, viewmodel.screen.value.value)
            continue
        viewmodel.handle(intent)
        settle()

    console = Console(width=width)
    console.print(render(viewmodel, keymap))
    if status_timer is not None:
        status_timer.timer.stop()
    viewmodel.dispose()


@app.command()
@_handle_errors
def show(
    fixture: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file of secrets"),
    name: str = typer.Argument(..., help="Secret name or ARN"),
    as_json: bool = typer.Option(False, "--json", help="Pretty-print the value when it is JSON"),
) -> None:
    """Print the value stored for one secret."""

    source = JsonFileSource(fixture)
    item = next((item for item in source.items if name in (item.name, item.id)), None)
    if item is None:
        raise FetchError(f"secret {name!r} not found in {fixture}")
    typer.echo(format_detail_value(source.get_item_detail(item.id), as_json=as_json))


if __name__ == "__main__":
    app()
