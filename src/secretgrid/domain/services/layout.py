"""Reflow a viewport into a grid of fixed-height, bounded-width cells."""

from __future__ import annotations

from secretgrid.domain.models import GridShape, LayoutConstraints


def compute_grid_shape(
    viewport_width: int,
    viewport_height: int,
    min_cell_width: int,
    max_cell_width: int,
    cell_height: int,
    spacing: int,
) -> GridShape:
    """Return the densest grid whose cells stay within the width bounds.

    Column counts are tried from the most that could fit at
    ``min_cell_width`` down to one, and the first count whose per-cell width
    lands inside ``[min_cell_width, max_cell_width]`` wins.  When nothing
    fits (a viewport narrower than one cell, or too wide for one cell yet too
    narrow for two) the grid collapses to a single ``min_cell_width`` column.

    Every row consumes ``cell_height + 1`` lines; at least one row is always
    returned so the result is navigable even for a zero-sized viewport.
    """

    rows = max(1, viewport_height // (cell_height + 1)) if viewport_height > 0 else 1

    stride = min_cell_width + spacing
    max_columns = viewport_width // stride if stride > 0 else 0
    for columns in range(max(1, max_columns), 0, -1):
        per_cell = (viewport_width - (columns - 1) * spacing) // columns
        if min_cell_width <= per_cell <= max_cell_width:
            return GridShape(columns=columns, rows=rows, cell_width=per_cell)

    return GridShape(columns=1, rows=rows, cell_width=min_cell_width)


def compute_for(
    viewport_width: int,
    viewport_height: int,
    constraints: LayoutConstraints | None = None,
) -> GridShape:
    constraints = constraints or LayoutConstraints()
    return compute_grid_shape(
        viewport_width,
        viewport_height,
        constraints.min_cell_width,
        constraints.max_cell_width,
        constraints.cell_height,
        constraints.spacing,
    )


__all__ = ["compute_for", "compute_grid_shape"]
