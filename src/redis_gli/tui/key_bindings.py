"""Key binding registry: logical actions ↔ physical key codes.

All global keyboard input routes through RedisGliApp.on_key, which resolves
the Textual key name here. Textual BINDINGS are not used for these actions.

// [LAW:one-source-of-truth] DEFAULT_BINDINGS is the canonical action→keys map.
// [LAW:single-enforcer] Code aliasing is rejected at construction, so resolve()
//   never has to pick between two actions.
"""

from collections.abc import Mapping, Sequence

# Action names
SEARCH = "search"
KEYS = "keys"
KEY_LIST_VALUE = "key_list_value"
KEY_STRING_VALUE = "key_string_value"
KEY_HASH = "key_hash"
OUTPUT = "output"
COMMAND = "command"
COMMAND_FOCUS = "command_focus"
COMMAND_RESULT = "command_result"
QUIT = "quit"
SWITCH_FOCUS = "switch_focus"

DEFAULT_BINDINGS: dict[str, tuple[str, ...]] = {
    SEARCH: ("f2", "ctrl+s"),
    KEYS: ("f3", "ctrl+k"),
    KEY_LIST_VALUE: ("f6", "ctrl+y"),
    KEY_STRING_VALUE: ("f7", "ctrl+a"),
    KEY_HASH: ("f8", "ctrl+g"),
    OUTPUT: ("f9", "ctrl+o"),
    COMMAND: ("f1", "ctrl+n"),
    COMMAND_FOCUS: ("f4", "ctrl+f"),
    COMMAND_RESULT: ("f5", "ctrl+r"),
    QUIT: ("escape", "ctrl+q"),
    SWITCH_FOCUS: ("tab",),
}

_PART_LABELS = {
    "ctrl": "Ctrl",
    "shift": "Shift",
    "alt": "Alt",
    "escape": "Esc",
    "tab": "Tab",
    "enter": "Enter",
    "space": "Space",
}


def key_label(code: str) -> str:
    """Human-readable label for a Textual key name: 'ctrl+s' → 'Ctrl+S'."""
    return "+".join(_PART_LABELS.get(part, part.upper()) for part in code.split("+"))


class KeyBindingRegistry:
    """Read-only mapping between action names and key codes."""

    def __init__(self, bindings: Mapping[str, Sequence[str]] | None = None):
        source = DEFAULT_BINDINGS if bindings is None else bindings
        self._bindings: dict[str, tuple[str, ...]] = {}
        self._by_code: dict[str, str] = {}
        for action, codes in source.items():
            codes = tuple(codes)
            if not codes:
                raise ValueError(f"action {action!r} has no key codes")
            for code in codes:
                owner = self._by_code.get(code)
                if owner is not None and owner != action:
                    raise ValueError(
                        f"key {code!r} is bound to both {owner!r} and {action!r}"
                    )
                self._by_code[code] = action
            self._bindings[action] = codes

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, Sequence[str]] | None) -> "KeyBindingRegistry":
        """Defaults with per-action replacements (e.g. from the settings file)."""
        merged = dict(DEFAULT_BINDINGS)
        for action, codes in (overrides or {}).items():
            if action not in DEFAULT_BINDINGS:
                raise ValueError(f"unknown action {action!r} in key bindings")
            if isinstance(codes, str):
                codes = [codes]
            merged[action] = tuple(codes)
        return cls(merged)

    def resolve(self, code: str) -> str | None:
        return self._by_code.get(code)

    def codes_for(self, action: str) -> tuple[str, ...]:
        return self._bindings.get(action, ())

    def display_label(self, action: str) -> str:
        return ", ".join(key_label(code) for code in self.codes_for(action))

    def actions(self) -> list[str]:
        return list(self._bindings)

    def help_text(self) -> str:
        return " ❈ {} - open command panel, {} - switch focus, {} - quit".format(
            self.display_label(COMMAND),
            self.display_label(SWITCH_FOCUS),
            self.display_label(QUIT),
        )
