"""Cursor and screen-page bookkeeping for the secret grid.

The grid shows one *screen page* of the filtered items at a time.  A screen
page holds at most ``shape.capacity`` items laid out row-major, so the item
under the cursor is ``visible_items()[cursor_row * columns + cursor_col]``.
Only the last screen page may be ragged.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from secretgrid.domain.models import GridShape, Item


class NavigationState:
    """Mutable cursor over a grid of items.

    Movement methods return ``True`` when the cursor or the screen page
    changed.  Crossing down into a shorter final page keeps the column even
    when that column has no item on the new page; :meth:`selected_item` then
    returns ``None`` until the user moves left or up into bounds.
    """

    def __init__(self, shape: Optional[GridShape] = None, items: Sequence[Item] = ()) -> None:
        self._shape = shape or GridShape()
        self._items: Tuple[Item, ...] = tuple(items)
        self._cursor_row = 0
        self._cursor_col = 0
        self._screen_page_index = 0
        self._total_screen_pages = 1
        self._recompute_totals()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def shape(self) -> GridShape:
        return self._shape

    @property
    def items(self) -> Tuple[Item, ...]:
        return self._items

    @property
    def cursor_row(self) -> int:
        return self._cursor_row

    @property
    def cursor_col(self) -> int:
        return self._cursor_col

    @property
    def screen_page_index(self) -> int:
        return self._screen_page_index

    @property
    def total_screen_pages(self) -> int:
        return self._total_screen_pages

    @property
    def flat_index(self) -> int:
        return self._cursor_row * self._shape.columns + self._cursor_col

    @property
    def position(self) -> Tuple[int, int, int]:
        """``(cursor_row, cursor_col, screen_page_index)``."""
        return (self._cursor_row, self._cursor_col, self._screen_page_index)

    def visible_items(self) -> Tuple[Item, ...]:
        capacity = self._shape.capacity
        start = self._screen_page_index * capacity
        if start >= len(self._items):
            return ()
        return self._items[start:start + capacity]

    def selected_item(self) -> Optional[Item]:
        visible = self.visible_items()
        index = self.flat_index
        if 0 <= index < len(visible):
            return visible[index]
        return None

    def page_indicator(self) -> Tuple[int, int]:
        return (self._screen_page_index + 1, self._total_screen_pages)

    # ------------------------------------------------------------------
    # Inputs that replace the underlying data
    # ------------------------------------------------------------------

    def set_items(self, items: Sequence[Item]) -> None:
        """Swap in a new (filtered) item set and return to the origin."""
        self._items = tuple(items)
        self.reset()

    def set_shape(self, shape: GridShape) -> None:
        """Apply a new grid shape, keeping the screen page where possible.

        The page index is clamped when the page count shrinks below it.  The
        cursor goes back to ``(0, 0)`` when its cell no longer exists in the
        new shape or no longer holds an item.
        """
        self._shape = shape
        self._recompute_totals()
        out_of_grid = self._cursor_row >= shape.rows or self._cursor_col >= shape.columns
        if out_of_grid or self.flat_index >= len(self.visible_items()):
            self._cursor_row = 0
            self._cursor_col = 0

    def reset(self) -> None:
        self._cursor_row = 0
        self._cursor_col = 0
        self._screen_page_index = 0
        self._recompute_totals()

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move_down(self) -> bool:
        new_row = self._cursor_row + 1
        if new_row < self._shape.rows:
            index = new_row * self._shape.columns + self._cursor_col
            if index < len(self.visible_items()):
                self._cursor_row = new_row
                return True

        if self._screen_page_index + 1 < self._total_screen_pages:
            self._screen_page_index += 1
            self._cursor_row = 0
            return True
        return False

    def move_up(self) -> bool:
        if self._cursor_row > 0:
            self._cursor_row -= 1
            self._clamp_row()
            return True
        if self._screen_page_index > 0:
            self._screen_page_index -= 1
            self._cursor_row = self._shape.rows - 1
            self._clamp_row()
            return True
        return False

    def move_left(self) -> bool:
        if self._cursor_col > 0:
            self._cursor_col -= 1
            return True
        return False

    def move_right(self) -> bool:
        new_col = self._cursor_col + 1
        if new_col >= self._shape.columns:
            return False
        index = self._cursor_row * self._shape.columns + new_col
        if index >= len(self.visible_items()):
            return False
        self._cursor_col = new_col
        return True

    def next_screen_page(self) -> bool:
        if self._screen_page_index + 1 >= self._total_screen_pages:
            return False
        self._screen_page_index += 1
        self._cursor_row = 0
        self._cursor_col = 0
        return True

    def prev_screen_page(self) -> bool:
        if self._screen_page_index <= 0:
            return False
        self._screen_page_index -= 1
        self._cursor_row = 0
        self._cursor_col = 0
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _recompute_totals(self) -> None:
        capacity = max(1, self._shape.capacity)
        count = len(self._items)
        self._total_screen_pages = max(1, (count + capacity - 1) // capacity)
        if self._screen_page_index >= self._total_screen_pages:
            self._screen_page_index = self._total_screen_pages - 1

    def _clamp_row(self) -> None:
        # Walk up until the cursor sits on an item of a ragged page.
        visible = len(self.visible_items())
        while self._cursor_row > 0 and self.flat_index >= visible:
            self._cursor_row -= 1


__all__ = ["NavigationState"]
