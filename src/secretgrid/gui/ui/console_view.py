"""Render the grid browser state as ``rich`` renderables."""

from __future__ import annotations

import textwrap
from datetime import datetime
from typing import List, Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from ...domain.models import Item
from ...domain.services.detail import format_detail_value
from ..keys import KeyMap
from ..viewmodels.grid_browser_viewmodel import GridBrowserViewModel, Screen

TITLE = "secretgrid"


def format_cell_date(value: Optional[datetime]) -> str:
    if value is None:
        return "Unknown"
    return f"{value:%b} {value.day}, {value.year}"


def cell_name_lines(name: str, width: int) -> List[str]:
    """Wrap *name* into at most two lines of *width*, ending in ``...`` if cut."""

    lines = textwrap.wrap(name, max(1, width), break_long_words=True) or ["(unnamed)"]
    if len(lines) > 2:
        lines = lines[:2]
        if len(lines[1]) > 3:
            lines[1] = lines[1][:-3] + "..."
    return lines


def render_cell(item: Item, width: int, selected: bool) -> Text:
    text = Text(no_wrap=True, overflow="ellipsis")
    name_style = "bold magenta" if selected else "bold"
    marker = "> " if selected else "  "
    for index, line in enumerate(cell_name_lines(item.name, width - 2)):
        text.append(marker if index == 0 else "  ", style=name_style)
        text.append(line + "\n", style=name_style)
    text.append("  " + format_cell_date(item.last_modified), style="dim")
    return text


def render_grid(viewmodel: GridBrowserViewModel) -> RenderableType:
    visible = viewmodel.visible_items()
    if not visible:
        query = viewmodel.filter_query()
        if query:
            return Text(f"No secrets match '{query}'", style="dim")
        return Text("No secrets found", style="dim")

    shape = viewmodel.shape
    navigation = viewmodel.navigation
    table = Table.grid(padding=(0, viewmodel.constraints.spacing))
    for _ in range(shape.columns):
        table.add_column(width=shape.cell_width, no_wrap=True)
    for row in range(shape.rows):
        start = row * shape.columns
        cells = visible[start:start + shape.columns]
        if not cells:
            break
        rendered = [
            render_cell(
                item,
                shape.cell_width,
                selected=(row == navigation.cursor_row and col == navigation.cursor_col),
            )
            for col, item in enumerate(cells)
        ]
        table.add_row(*rendered)
    return table


def render_detail(viewmodel: GridBrowserViewModel) -> RenderableType:
    item = viewmodel.detail_item
    if item is None:
        return Text("No secret selected")

    body = Text()
    body.append("Name: ", style="bold cyan")
    body.append(item.name + "\n")
    body.append("ARN: ", style="bold cyan")
    body.append(item.id + "\n")
    if item.description:
        body.append("Description: ", style="bold cyan")
        body.append(item.description + "\n")
    if item.last_modified is not None:
        body.append("Last Modified: ", style="bold cyan")
        body.append(item.last_modified.strftime("%a, %d %b %Y %H:%M:%S %Z") + "\n")
    if item.tags:
        body.append("\nTags:\n", style="bold cyan")
        for key, value in item.tags.items():
            body.append(f"  {key}: {value}\n")

    parts: List[RenderableType] = [Panel(body, title="Secret Details"), Rule()]
    value = viewmodel.detail_value.value
    if value is None:
        parts.append(Text("Press 'v' to view the secret value", style="dim"))
    else:
        parts.append(Panel(Text(format_detail_value(value, as_json=True)), title="Secret Value"))
    return Group(*parts)


def render_footer(viewmodel: GridBrowserViewModel, keymap: KeyMap) -> RenderableType:
    lines: List[RenderableType] = []
    if viewmodel.screen.value is Screen.LIST:
        screen_page, screen_total = viewmodel.page_indicator()
        remote_page, remote_total = viewmodel.remote_page_indicator()
        indicator = f"Screen {screen_page}/{screen_total} | Remote page {remote_page}/{remote_total}"
        if viewmodel.has_more():
            indicator += " (more available)"
        lines.append(Text(indicator, style="dim"))
        if viewmodel.is_filtering() or viewmodel.filter_query():
            lines.append(Text(f"Filter: /{viewmodel.filter_query()}", style="yellow"))
    if viewmodel.error_message.value:
        lines.append(Text(f"Error: {viewmodel.error_message.value}", style="bold red"))
    if viewmodel.status_message.value:
        lines.append(Text(viewmodel.status_message.value, style="green"))
    if viewmodel.loading.value:
        lines.append(Text("Loading..."))
    entries = keymap.help_entries(viewmodel.screen.value, viewmodel.is_filtering())
    lines.append(Text(" | ".join(f"{key}: {text}" for key, text in entries), style="dim"))
    return Group(*lines)


def render(viewmodel: GridBrowserViewModel, keymap: Optional[KeyMap] = None) -> RenderableType:
    """Compose header, body and footer for the current screen."""

    keymap = keymap or KeyMap()
    context = viewmodel.context
    header = Text.assemble(
        (TITLE, "bold magenta"),
        "\n",
        (f"Profile: {context.profile or 'default'} | Region: {context.region or 'default'}", "dim"),
    )
    if viewmodel.screen.value is Screen.DETAIL:
        body = render_detail(viewmodel)
    else:
        body = render_grid(viewmodel)
    return Group(header, Rule(), body, Rule(), render_footer(viewmodel, keymap))


__all__ = [
    "cell_name_lines",
    "format_cell_date",
    "render",
    "render_cell",
    "render_detail",
    "render_footer",
    "render_grid",
]
