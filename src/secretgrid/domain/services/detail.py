from __future__ import annotations

import json


def format_detail_value(value: str, as_json: bool = False) -> str:
    """Return *value* ready for display or copying.

    With *as_json* the value is re-indented when it parses as JSON; anything
    else is returned unchanged.
    """
    if not as_json:
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return value
    return json.dumps(parsed, indent=2, ensure_ascii=False)


__all__ = ["format_detail_value"]
