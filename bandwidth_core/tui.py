"""Terminal rendering (rich) and the key loop (readchar)."""
from __future__ import annotations
import logging
from typing import Iterable, Optional

import readchar
from rich import box
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.table import Table
from rich.text import Text

from .aggregator import ExtensionAggregate, TypeGroup
from .config import SortField, ViewMode
from .context import ExplorerContext
from .formatting import format_bytes, format_count, format_extension
from .view_controller import (
    DisplayRow,
    KEY_DOWN,
    KEY_END,
    KEY_ENTER,
    KEY_ESC,
    KEY_HOME,
    KEY_LEFT,
    KEY_PAGE_DOWN,
    KEY_PAGE_UP,
    KEY_RIGHT,
    KEY_TAB,
    KEY_UP,
    ViewController,
)

logger = logging.getLogger(__name__)

TITLE = "Sanity Log Explorer"
HELP = (
    "Keys: q quit | up/down or j/k move | left/right or h/l tabs | enter open | "
    "tab view | d id | e ext | r requests | s avg size | b bandwidth | repeat toggles asc/desc"
)

# title, footer (summary, notice, help) and table chrome (borders, header, divider, total)
RESERVED_LINES = 1 + 3 + 5

COLUMNS = [
    ("ID", SortField.ID),
    ("Ext", SortField.EXT),
    ("Requests", SortField.REQUESTS),
    ("Size (Avg)", SortField.AVG_SIZE),
    ("Bandwidth", SortField.BANDWIDTH),
]

KEY_NAMES = {
    readchar.key.UP: KEY_UP,
    readchar.key.DOWN: KEY_DOWN,
    readchar.key.LEFT: KEY_LEFT,
    readchar.key.RIGHT: KEY_RIGHT,
    readchar.key.TAB: KEY_TAB,
    readchar.key.ENTER: KEY_ENTER,
    "\r": KEY_ENTER,
    "\n": KEY_ENTER,
    readchar.key.ESC: KEY_ESC,
    readchar.key.PAGE_UP: KEY_PAGE_UP,
    readchar.key.PAGE_DOWN: KEY_PAGE_DOWN,
    readchar.key.HOME: KEY_HOME,
    readchar.key.END: KEY_END,
}


def translate_key(raw: str) -> str:
    """Map a raw readchar key sequence to a controller key name."""
    return KEY_NAMES.get(raw, raw)


def header_text(label: str, field: SortField, controller: Optional[ViewController]) -> Text:
    """Column label with its shortcut letter underlined and the sort arrow if active."""
    text = Text()
    underlined = False
    for ch in label:
        if not underlined and ch.lower() == field.shortcut:
            text.append(ch, style="underline")
            underlined = True
        else:
            text.append(ch)
    if controller is not None and controller.sort.field is field:
        text.append(f" {controller.sort.arrow}")
    return text


def row_cells(row: DisplayRow) -> list:
    kind = row.kind
    if isinstance(row, TypeGroup):
        label, ext = row.label, ""
    elif isinstance(row, ExtensionAggregate):
        assets = f"{row.distinct_asset_count} asset" + ("" if row.distinct_asset_count == 1 else "s")
        label, ext = f"  {assets}", format_extension(row.extension) or "(none)"
    else:
        label, ext = row.label, format_extension(row.extension)
    # labels come from the log, never parse them as markup
    return [
        Text(kind.label, style=kind.color),
        Text(label),
        Text(ext),
        format_count(row.request_count),
        format_bytes(row.average_size),
        format_bytes(row.total_bandwidth),
    ]


def build_table(
    controller: ViewController,
    rows: Iterable[DisplayRow],
    selected: Optional[DisplayRow] = None,
) -> Table:
    table = Table(box=box.SQUARE, expand=True, show_lines=False, header_style="bold")
    table.add_column("T", width=2, no_wrap=True)
    for label, field in COLUMNS:
        header = header_text(label, field, controller)
        if field is SortField.ID:
            table.add_column(header, ratio=1, no_wrap=True, overflow="ellipsis", min_width=10)
        elif field is SortField.EXT:
            table.add_column(header, width=8, no_wrap=True)
        else:
            table.add_column(header, justify="right", no_wrap=True, min_width=10)

    rows = list(rows)
    for index, row in enumerate(rows):
        style = []
        if isinstance(row, TypeGroup):
            style.append("bold")
        if selected is not None and row is selected:
            style.append("reverse")
        table.add_row(*row_cells(row), style=" ".join(style) or None, end_section=index == len(rows) - 1)

    tables = controller.context.tables
    table.add_row(
        "",
        "TOTAL",
        "",
        format_count(tables.total_requests),
        format_bytes(tables.total_average_size),
        format_bytes(tables.total_bandwidth),
        style="bold",
    )
    return table


def render_header(controller: ViewController) -> Table:
    grid = Table.grid(expand=True)
    grid.add_column(no_wrap=True)
    grid.add_column(no_wrap=True)
    grid.add_column(justify="right", no_wrap=True)
    tabs = Text()
    for mode in ViewMode:
        tabs.append(f" {mode.title} ", style="reverse" if mode is controller.view_mode else "")
        tabs.append(" ")
    grid.add_row(Text(TITLE, style="bold"), tabs, Text("←→ switch tabs", style="bright_black"))
    return grid


def status_text(context: ExplorerContext) -> Text:
    summary = context.summary
    return Text(
        f"{summary.lines_read} lines processed, {summary.skipped} lines skipped"
        f" ({summary.malformed_json} malformed JSON, {summary.missing_url} missing url)",
        style="bright_black",
    )


def render_footer(controller: ViewController) -> Group:
    status = status_text(controller.context)
    notice = controller.notice
    if notice is None:
        notice_line = Text("")
    else:
        notice_line = Text(notice.message, style="bold red" if notice.is_error else "green")
    return Group(status, notice_line, Text(HELP, style="bright_black"))


def render(controller: ViewController, height: int) -> RenderableType:
    """Full screen for the current controller state."""
    capacity = max(1, height - RESERVED_LINES)
    controller.page_size = capacity
    start, end = controller.visible_range(capacity)
    table = build_table(controller, controller.rows[start:end], controller.selected_row())
    return Group(render_header(controller), table, render_footer(controller))


def run(controller: ViewController, console: Optional[Console] = None) -> None:
    """Interactive loop: draw, read one key, apply it, until quit."""
    console = console or Console(stderr=True)
    with Live(console=console, screen=True, auto_refresh=False, transient=True) as live:
        while True:
            live.update(render(controller, console.size.height), refresh=True)
            if controller.handle_key(translate_key(readchar.readkey())):
                break


def print_tables(context: ExplorerContext, console: Optional[Console] = None) -> None:
    """Print both tabs once, without interaction."""
    console = console or Console()
    controller = ViewController(context)
    for mode in ViewMode:
        if controller.view_mode is not mode:
            controller.toggle_view()
        console.print(Text(mode.title, style="bold"))
        console.print(build_table(controller, controller.rows))
    console.print(status_text(context))
