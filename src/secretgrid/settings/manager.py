"""Persisted user preferences for the secret browser.

Settings are a single JSON document validated against
:data:`~secretgrid.settings.schema.SETTINGS_SCHEMA`.  Keys are addressed with
dotted paths (``"layout.min_cell_width"``).  Every successful ``set`` is
written through to disk before ``settingsChanged`` fires.
"""

from __future__ import annotations

import json
import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError
from PySide6.QtCore import QObject, Signal

from ..application.interfaces import CredentialContext
from ..config import SETTINGS_DIR_NAME, SETTINGS_FILE_NAME
from ..domain.models import LayoutConstraints
from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def _config_root() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def default_settings_path() -> Path:
    """Return the per-user settings.json location for the current platform."""

    return _config_root() / SETTINGS_DIR_NAME / SETTINGS_FILE_NAME


def _assign_dotted(document: dict[str, Any], key: str, value: Any) -> None:
    *parents, leaf = key.split(".")
    node = document
    for name in parents:
        child = node.get(name)
        if not isinstance(child, dict):
            child = node[name] = {}
        node = child
    node[leaf] = value


def _validated(document: Any) -> dict[str, Any]:
    try:
        return merge_with_defaults(document)
    except ValidationError as exc:
        raise SettingsValidationError(exc.message) from exc


class SettingsManager(QObject):
    """Owns the settings document and tells listeners when a key changes."""

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._location = path
        self._values: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        if self._location is None:
            self._location = default_settings_path()
        return self._location

    def load(self) -> None:
        """Read the file (if any), fill in defaults and write the result back."""

        raw: Any = None
        if self.path.exists():
            try:
                raw = read_json(self.path)
            except (OSError, json.JSONDecodeError) as exc:
                raise SettingsLoadError(f"cannot read {self.path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise SettingsLoadError(f"{self.path} does not contain a JSON object")
        self._values = _validated(raw)
        self.save()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        write_json(self.path, self._values)

    def get(self, key: str, default: Any | None = None) -> Any:
        node: Any = self._values
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Update *key*; the stored document is untouched if validation fails."""

        candidate = deepcopy(self._values)
        _assign_dotted(candidate, key, value)
        self._values = _validated(candidate)
        self.save()
        self.settingsChanged.emit(key, value)

    # Typed views used by the CLI and the controller.

    def layout_constraints(self) -> LayoutConstraints:
        return LayoutConstraints(**self._values["layout"])

    def chrome_margins(self) -> tuple[int, int]:
        chrome = self._values["chrome"]
        return (chrome["width"], chrome["height"])

    def credential_context(self) -> CredentialContext:
        return CredentialContext(
            profile=self._values.get("last_profile"),
            region=self._values.get("last_region"),
        )

    def remember_context(self, context: CredentialContext) -> None:
        """Store *context* so the next session starts where this one ended."""

        self.set("last_profile", context.profile)
        self.set("last_region", context.region)


__all__ = ["SettingsManager", "default_settings_path"]
