"""JSON schema and defaults for ``settings.json``."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from ..config import (
    CELL_SPACING,
    CHROME_HEIGHT,
    CHROME_WIDTH,
    DEFAULT_CELL_HEIGHT,
    DEFAULT_PAGE_SIZE,
    MAX_CELL_WIDTH,
    MAX_PAGE_SIZE,
    MIN_CELL_WIDTH,
)

SCHEMA_TAG = "secretgrid/settings@1"


def _int_block(**minimums: int) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {name: {"type": "integer", "minimum": low} for name, low in minimums.items()},
        "additionalProperties": False,
    }


SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "secretgrid/settings.schema.json",
    "type": "object",
    "required": ["schema", "page_size", "layout", "chrome"],
    "properties": {
        "schema": {"const": SCHEMA_TAG},
        "last_profile": {"type": ["string", "null"]},
        "last_region": {"type": ["string", "null"]},
        "page_size": {"type": "integer", "minimum": 1, "maximum": MAX_PAGE_SIZE},
        "layout": _int_block(min_cell_width=1, max_cell_width=1, cell_height=1, spacing=0),
        "chrome": _int_block(width=0, height=0),
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SCHEMA_TAG,
    "last_profile": None,
    "last_region": None,
    "page_size": DEFAULT_PAGE_SIZE,
    "layout": {
        "min_cell_width": MIN_CELL_WIDTH,
        "max_cell_width": MAX_CELL_WIDTH,
        "cell_height": DEFAULT_CELL_HEIGHT,
        "spacing": CELL_SPACING,
    },
    "chrome": {"width": CHROME_WIDTH, "height": CHROME_HEIGHT},
}

_VALIDATOR = Draft202012Validator(SETTINGS_SCHEMA)

# Blank strings written by older front ends mean "no selection".
_NULLABLE_TEXT = frozenset({"last_profile", "last_region"})


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Overlay *data* on :data:`DEFAULT_SETTINGS` and validate the result.

    Nested blocks are merged key by key so a file that only sets
    ``chrome.height`` keeps the default ``chrome.width``.  Raises
    :class:`jsonschema.ValidationError` when the merged document is invalid.
    """

    result = deepcopy(DEFAULT_SETTINGS)
    for key, value in (data or {}).items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            current.update(deepcopy(dict(value)))
        elif key in _NULLABLE_TEXT and value == "":
            result[key] = None
        else:
            result[key] = deepcopy(value)
    _VALIDATOR.validate(result)
    return result


def validate_settings(data: Mapping[str, Any]) -> None:
    _VALIDATOR.validate(dict(data))


__all__ = ["DEFAULT_SETTINGS", "SCHEMA_TAG", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
