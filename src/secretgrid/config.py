"""Default configuration values for secretgrid."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Grid layout
# ---------------------------------------------------------------------------

# Cells never shrink below ``MIN_CELL_WIDTH`` columns of text; when the
# viewport is wider than the densest layout needs, extra space goes to the
# cells until they reach ``MAX_CELL_WIDTH``.
MIN_CELL_WIDTH: Final[int] = 35
MAX_CELL_WIDTH: Final[int] = 60
DEFAULT_CELL_HEIGHT: Final[int] = 4
CELL_SPACING: Final[int] = 2

# Size assumed before the first resize event arrives.
INITIAL_VIEWPORT: Final[tuple[int, int]] = (80, 20)

# The list screen draws a border, a header and a footer around the grid.
# These margins are subtracted from the terminal size on every resize.
CHROME_WIDTH: Final[int] = 6
CHROME_HEIGHT: Final[int] = 10

# ---------------------------------------------------------------------------
# Remote paging
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE: Final[int] = 50
MAX_PAGE_SIZE: Final[int] = 100

# ---------------------------------------------------------------------------
# UI feedback
# ---------------------------------------------------------------------------

STATUS_CLEAR_DELAY_MS: Final[int] = 2000
FETCH_TIMEOUT_MS: Final[int] = 30_000
BINARY_DETAIL_PLACEHOLDER: Final[str] = "[Binary secret - not displayable as text]"

SETTINGS_DIR_NAME: Final[str] = "secretgrid"
SETTINGS_FILE_NAME: Final[str] = "settings.json"
