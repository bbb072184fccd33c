"""Interactive view state: tabs, sort column/direction, selection and notices."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from .aggregator import AggregateTables, AssetAggregate, ExtensionAggregate, TypeGroup
from .config import SortField, ViewMode
from .context import ExplorerContext
from .exceptions import OpenUrlError
from .opener import BrowserOpener
from .path_classifier import resolve_url
from .sorting import sort_rows

logger = logging.getLogger(__name__)

DisplayRow = Union[AssetAggregate, ExtensionAggregate, TypeGroup]

# Canonical key names produced by the input layer
KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_TAB = "tab"
KEY_ENTER = "enter"
KEY_ESC = "esc"
KEY_PAGE_UP = "pageup"
KEY_PAGE_DOWN = "pagedown"
KEY_HOME = "home"
KEY_END = "end"


@dataclass
class SortState:
    """Active sort column and direction.

    Selecting the active column again flips the direction; a new column
    starts descending for numbers and ascending for text.
    """
    field: SortField = SortField.BANDWIDTH
    descending: bool = True

    def select(self, field: SortField) -> None:
        if field is self.field:
            self.descending = not self.descending
        else:
            self.field = field
            self.descending = field.is_numeric

    @property
    def arrow(self) -> str:
        return "↓" if self.descending else "↑"


@dataclass
class Notice:
    message: str
    is_error: bool = True


def build_rows(tables: AggregateTables, view_mode: ViewMode, sort: SortState) -> List[DisplayRow]:
    """Ordered rows for a tab.

    The by-type tab lists kind groups in sort order, each image/file group
    followed by its own extension rows, also in sort order.
    """
    if view_mode is ViewMode.ASSET:
        return sort_rows(tables.asset_rows(), sort.field, sort.descending)

    rows: List[DisplayRow] = []
    for group in sort_rows(tables.type_groups(), sort.field, sort.descending):
        rows.append(group)
        if group.kind.has_extensions:
            rows.extend(sort_rows(tables.extension_rows(group.kind), sort.field, sort.descending))
    return rows


class ViewController:
    """Owns UI state and turns key presses into state transitions."""

    def __init__(self, context: ExplorerContext, opener: Optional[Callable[[str], None]] = None):
        self.context = context
        self.opener = opener if opener is not None else BrowserOpener()
        self.sort = SortState(context.settings.sort_field, context.settings.descending)
        self.view_mode = context.settings.view_mode
        self.rows: List[DisplayRow] = []
        self.selected: Optional[int] = None
        self.notice: Optional[Notice] = None
        self.page_size = 10
        self.rebuild()
        if self.rows:
            self.selected = 0

    # -- rows ---------------------------------------------------------------

    def rebuild(self) -> None:
        self.rows = build_rows(self.context.tables, self.view_mode, self.sort)
        self.clamp_selection()

    def clamp_selection(self) -> None:
        if not self.rows:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected, len(self.rows) - 1)

    def selected_row(self) -> Optional[DisplayRow]:
        if self.selected is None or not self.rows:
            return None
        return self.rows[self.selected]

    def selected_url(self) -> Optional[str]:
        row = self.selected_row()
        if row is None or not row.sample_url:
            return None
        return resolve_url(row.sample_url, self.context.settings.base_url)

    def visible_range(self, capacity: int) -> Tuple[int, int]:
        """Slice [start, end) of rows to draw so the selection stays visible."""
        if not self.rows or capacity <= 0:
            return (0, 0)
        selected = min(self.selected or 0, len(self.rows) - 1)
        start = max(0, selected - capacity + 1)
        return (start, min(start + capacity, len(self.rows)))

    # -- state transitions --------------------------------------------------

    def set_sort(self, field: SortField) -> None:
        self.sort.select(field)
        self.rebuild()

    def toggle_view(self) -> None:
        self.view_mode = ViewMode.TYPE if self.view_mode is ViewMode.ASSET else ViewMode.ASSET
        self.rebuild()

    def next_view(self) -> None:
        if self.view_mode is ViewMode.ASSET:
            self.toggle_view()

    def previous_view(self) -> None:
        if self.view_mode is ViewMode.TYPE:
            self.toggle_view()

    def move(self, delta: int) -> None:
        if not self.rows:
            return
        current = self.selected or 0
        self.selected = max(0, min(len(self.rows) - 1, current + delta))

    def move_to(self, index: int) -> None:
        if self.rows:
            self.selected = max(0, min(len(self.rows) - 1, index))

    def open_selected(self) -> bool:
        """Open the selected row's URL; failures become an error notice."""
        url = self.selected_url()
        if not url:
            return False
        try:
            self.opener(url)
        except OpenUrlError as e:
            logger.info(f"Open failed for {url}: {e}")
            self.notice = Notice(f"Could not open URL: {e}")
            return False
        self.notice = Notice(f"Opened {url}", is_error=False)
        return True

    def dismiss_notice(self) -> None:
        self.notice = None

    def handle_key(self, key: str) -> bool:
        """Apply one key press. Returns True when the app should quit."""
        if self.notice is not None:
            self.dismiss_notice()
            if key == KEY_ESC:
                return False

        if key in ("q", KEY_ESC):
            return True
        if key in (KEY_UP, "k"):
            self.move(-1)
        elif key in (KEY_DOWN, "j"):
            self.move(1)
        elif key == KEY_PAGE_UP:
            self.move(-self.page_size)
        elif key == KEY_PAGE_DOWN:
            self.move(self.page_size)
        elif key == KEY_HOME:
            self.move_to(0)
        elif key == KEY_END:
            self.move_to(len(self.rows) - 1)
        elif key in (KEY_LEFT, "h"):
            self.previous_view()
        elif key in (KEY_RIGHT, "l"):
            self.next_view()
        elif key == KEY_TAB:
            self.toggle_view()
        elif key == KEY_ENTER:
            self.open_selected()
        else:
            field = SortField.from_shortcut(key)
            if field is not None:
                self.set_sort(field)
        return False
