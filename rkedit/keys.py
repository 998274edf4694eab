"""Normalized keyboard and mouse events.

Both input backends (the raw byte decoder and curtsies key tokens) produce
these types, so everything downstream of the decoder is backend-agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, Flag
from typing import Optional


class KeyCode(Enum):
    """The key that was pressed, independent of modifiers."""
    CHAR = "char"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "pageup"
    PAGE_DOWN = "pagedown"
    BACKSPACE = "backspace"
    DELETE = "delete"
    INSERT = "insert"
    ENTER = "enter"
    TAB = "tab"
    BACKTAB = "backtab"
    ESC = "esc"
    F = "f"  # Function key; the number lives in KeyEvent.number
    NONE = "null"  # No key: timeout or an unrecognized sequence


class Modifier(Flag):
    """Modifier keys held while the key was pressed."""
    NONE = 0
    CONTROL = 1
    ALT = 2
    SHIFT = 4


_CATEGORIES = {
    KeyCode.CHAR: "character",
    KeyCode.UP: "directional",
    KeyCode.DOWN: "directional",
    KeyCode.LEFT: "directional",
    KeyCode.RIGHT: "directional",
    KeyCode.HOME: "navigation",
    KeyCode.END: "navigation",
    KeyCode.PAGE_UP: "navigation",
    KeyCode.PAGE_DOWN: "navigation",
    KeyCode.F: "function",
    KeyCode.NONE: "none",
}


@dataclass(frozen=True)
class KeyEvent:
    """Represents a decoded keyboard event."""
    code: KeyCode
    char: str = ""  # The character for KeyCode.CHAR
    modifiers: Modifier = Modifier.NONE
    number: int = 0  # Function key number for KeyCode.F
    raw: bytes = field(default=b"", compare=False)  # Input that produced it

    @property
    def is_ctrl(self) -> bool:
        return bool(self.modifiers & Modifier.CONTROL)

    @property
    def is_alt(self) -> bool:
        return bool(self.modifiers & Modifier.ALT)

    @property
    def is_shift(self) -> bool:
        return bool(self.modifiers & Modifier.SHIFT)

    @property
    def category(self) -> str:
        """One of character, directional, navigation, editing, function, none."""
        return _CATEGORIES.get(self.code, "editing")

    def with_modifiers(self, modifiers: Modifier) -> "KeyEvent":
        return replace(self, modifiers=modifiers)


@dataclass(frozen=True)
class MouseEvent:
    """A mouse report in 0-based screen coordinates."""
    x: int
    y: int
    button: int = 0  # 0 left, 1 middle, 2 right, 64/65 wheel
    pressed: bool = True
    drag: bool = False
    raw: bytes = field(default=b"", compare=False)


NO_KEY = KeyEvent(KeyCode.NONE)


# --- Key specs: "C-q", "c-a-x", "S-up", "f5", "enter" ---

_SPEC_MODIFIERS = {
    "c": Modifier.CONTROL,
    "s": Modifier.SHIFT,
    "m": Modifier.ALT,
    "a": Modifier.ALT,
}

_SPEC_NAMES = {code.value: code for code in KeyCode if code not in (KeyCode.CHAR, KeyCode.F, KeyCode.NONE)}


def _parse_code(name: str) -> Optional[KeyEvent]:
    if not name:
        return None
    if len(name) == 1:
        return KeyEvent(KeyCode.CHAR, char=name)
    lower = name.lower()
    if lower in _SPEC_NAMES:
        return KeyEvent(_SPEC_NAMES[lower])
    if lower[0] == "f" and lower[1:].isdigit():
        number = int(lower[1:])
        if number <= 255:
            return KeyEvent(KeyCode.F, number=number)
    return None


def parse_key_spec(spec: str) -> Optional[KeyEvent]:
    """Parse a key spec such as ``"C-q"`` or ``"a-C"`` into a KeyEvent.

    Modifier prefixes are separated by ``-`` and recognized by their first
    letter: ``c`` control, ``s`` shift, ``m``/``a`` alt. Unknown modifier
    prefixes are ignored. Returns None when the key name is not recognized.
    """
    parts = spec.split("-")
    modifiers = Modifier.NONE
    for prefix in parts[:-1]:
        if prefix:
            modifiers |= _SPEC_MODIFIERS.get(prefix[0].lower(), Modifier.NONE)
    event = _parse_code(parts[-1])
    if event is None:
        return None
    return event.with_modifiers(modifiers)


def must_parse_key_spec(spec: str) -> KeyEvent:
    event = parse_key_spec(spec)
    if event is None:
        raise ValueError(f"Cannot parse key spec: {spec!r}")
    return event


def describe_key(event: KeyEvent) -> str:
    """Render a KeyEvent back into key spec form, e.g. ``"C-A-x"``."""
    prefix = ""
    if event.is_ctrl:
        prefix += "C-"
    if event.is_alt:
        prefix += "A-"
    if event.is_shift:
        prefix += "S-"
    if event.code is KeyCode.CHAR:
        name = event.char
    elif event.code is KeyCode.F:
        name = f"f{event.number}"
    else:
        name = event.code.value
    return prefix + name


def escape_bytes(data: bytes) -> str:
    """Return a printable representation of raw input bytes."""
    return data.decode('latin-1').encode('unicode_escape').decode('ascii')
