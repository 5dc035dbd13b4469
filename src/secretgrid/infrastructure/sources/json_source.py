"""Source that serves secrets described in a JSON fixture file.

The file holds either a list of secret objects or ``{"secrets": [...]}``.
Each object needs a ``name``; ``arn``, ``description``, ``last_changed``
(ISO-8601), ``tags`` and ``value`` are optional.  Naive timestamps are
read as UTC.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dateutil.parser import isoparse

from secretgrid.application.interfaces import CredentialContext
from secretgrid.config import BINARY_DETAIL_PLACEHOLDER
from secretgrid.domain.models import Item
from secretgrid.errors import FixtureFormatError
from secretgrid.infrastructure.sources.memory_source import InMemorySource
from secretgrid.utils.jsonio import read_json


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = isoparse(value)
    except (ValueError, TypeError) as exc:
        raise FixtureFormatError(f"invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_entry(entry: Any, position: int) -> Tuple[Item, Optional[str]]:
    if not isinstance(entry, dict):
        raise FixtureFormatError(f"entry {position} is not an object")
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise FixtureFormatError(f"entry {position} has no name")
    tags = entry.get("tags") or {}
    if not isinstance(tags, dict):
        raise FixtureFormatError(f"entry {position} has malformed tags")

    item = Item(
        id=str(entry.get("arn") or name),
        name=name,
        description=entry.get("description"),
        last_modified=_parse_timestamp(entry.get("last_changed")),
        tags={str(k): str(v) for k, v in tags.items()},
    )

    value = entry.get("value")
    if value is not None and not isinstance(value, str):
        value = BINARY_DETAIL_PLACEHOLDER if entry.get("binary") else json.dumps(value)
    elif value is None and entry.get("binary"):
        value = BINARY_DETAIL_PLACEHOLDER
    return item, value


def load_fixture(path: Path) -> Tuple[List[Item], Dict[str, str]]:
    try:
        payload = read_json(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise FixtureFormatError(f"cannot read {path}: {exc}") from exc

    entries = payload.get("secrets") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise FixtureFormatError(f"{path} holds no list of secrets")

    items: List[Item] = []
    details: Dict[str, str] = {}
    for position, entry in enumerate(entries):
        item, value = _parse_entry(entry, position)
        items.append(item)
        if value is not None:
            details[item.id] = value
    return items, details


class JsonFileSource(InMemorySource):
    def __init__(self, path: Path, context: Optional[CredentialContext] = None) -> None:
        items, details = load_fixture(path)
        super().__init__(items, details, context=context)
        self.path = path
