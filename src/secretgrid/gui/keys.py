"""Key bindings that turn terminal key names into grid intents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .viewmodels import intents
from .viewmodels.grid_browser_viewmodel import Screen

# Terminal key names that stand for a single character.
_KEY_ALIASES: Dict[str, str] = {"space": " "}


@dataclass(frozen=True)
class KeyBinding:
    keys: Tuple[str, ...]
    help_key: str
    help_text: str
    intent: Callable[[], intents.GridIntent]


LIST_BINDINGS: Tuple[KeyBinding, ...] = (
    KeyBinding(("up", "k"), "↑/k", "move up", intents.MoveUp),
    KeyBinding(("down", "j"), "↓/j", "move down", intents.MoveDown),
    KeyBinding(("left", "h"), "←/h", "move left", intents.MoveLeft),
    KeyBinding(("right", "l"), "→/l", "move right", intents.MoveRight),
    KeyBinding((" ", "pgdown"), "space/pgdn", "next screen", intents.NextScreenPage),
    KeyBinding(("pgup",), "pgup", "prev screen", intents.PrevScreenPage),
    KeyBinding(("/",), "/", "filter", intents.EnterFilterMode),
    KeyBinding(("n",), "n", "next remote page", intents.NextRemotePage),
    KeyBinding(("b",), "b", "prev remote page", intents.PrevRemotePage),
    KeyBinding(("r",), "r", "refresh", intents.Refresh),
    KeyBinding(("enter",), "enter", "select", intents.OpenDetail),
)

DETAIL_BINDINGS: Tuple[KeyBinding, ...] = (
    KeyBinding(("esc", "q"), "esc/q", "back", intents.CloseDetail),
    KeyBinding(("v",), "v", "view secret", intents.LoadDetail),
)

FILTER_BINDINGS: Tuple[KeyBinding, ...] = (
    KeyBinding(("esc",), "esc", "clear filter", intents.ExitFilterMode),
    KeyBinding(("enter",), "enter", "apply filter", intents.AcceptFilter),
    KeyBinding(("backspace",), "backspace", "delete char", intents.FilterBackspace),
)


def normalise_key(key: str) -> str:
    return _KEY_ALIASES.get(key, key)


class KeyMap:
    """Resolve a key press against the bindings active for the current mode.

    In filter mode every printable single character is captured as filter
    input, so list bindings such as ``j`` or ``n`` do not fire while typing.
    """

    def __init__(
        self,
        list_bindings: Tuple[KeyBinding, ...] = LIST_BINDINGS,
        detail_bindings: Tuple[KeyBinding, ...] = DETAIL_BINDINGS,
        filter_bindings: Tuple[KeyBinding, ...] = FILTER_BINDINGS,
    ) -> None:
        self._tables = {
            "list": self._index(list_bindings),
            "detail": self._index(detail_bindings),
            "filter": self._index(filter_bindings),
        }
        self._bindings = {
            "list": list_bindings,
            "detail": detail_bindings,
            "filter": filter_bindings,
        }

    def resolve(self, key: str, screen: Screen, filtering: bool = False) -> Optional[intents.GridIntent]:
        key = normalise_key(key)
        mode = self._mode(screen, filtering)
        binding = self._tables[mode].get(key)
        if binding is not None:
            return binding.intent()
        if mode == "filter" and len(key) == 1 and key.isprintable():
            return intents.FilterChar(key)
        return None

    def help_entries(self, screen: Screen, filtering: bool = False) -> List[Tuple[str, str]]:
        mode = self._mode(screen, filtering)
        return [(binding.help_key, binding.help_text) for binding in self._bindings[mode]]

    @staticmethod
    def _mode(screen: Screen, filtering: bool) -> str:
        if screen is Screen.DETAIL:
            return "detail"
        return "filter" if filtering else "list"

    @staticmethod
    def _index(bindings: Tuple[KeyBinding, ...]) -> Dict[str, KeyBinding]:
        table: Dict[str, KeyBinding] = {}
        for binding in bindings:
            for key in binding.keys:
                table[key] = binding
        return table


def parse_key_sequence(text: str) -> List[str]:
    """Split a whitespace separated key script such as ``"j j / d b enter"``."""
    return [normalise_key(token) for token in text.split()]


__all__ = [
    "DETAIL_BINDINGS",
    "FILTER_BINDINGS",
    "KeyBinding",
    "KeyMap",
    "LIST_BINDINGS",
    "normalise_key",
    "parse_key_sequence",
]
