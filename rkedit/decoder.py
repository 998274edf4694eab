"""Decoding of raw terminal input into KeyEvents.

Two variants live here:

* ``KeyDecoder`` reads a byte stream one byte at a time and runs an explicit
  state machine over ANSI escape sequences. New sequences are supported by
  extending ``FINAL_KEYS`` or ``NUMBERED_KEYS`` rather than adding branches.
* ``parse_token`` maps curtsies-style key names (``'<Ctrl-q>'``, ``'<UP>'``)
  for terminals where the platform layer already parses escapes.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Optional, Union

from .constants import EditorConstants
from .keys import KeyCode, KeyEvent, Modifier, MouseEvent, NO_KEY

logger = logging.getLogger(__name__)

ESC = 0x1B
DEL = 0x7F

# Reads at most one byte; returns b"" when the timeout expires.
ByteReader = Callable[[Optional[float]], bytes]

InputEvent = Union[KeyEvent, MouseEvent]


class DecoderState(Enum):
    START = "start"
    SAW_ESC = "saw_esc"
    SAW_CSI = "saw_csi"
    SAW_CSI_DIGITS = "saw_csi_digits"
    SAW_MOUSE = "saw_mouse"


def _key(code: KeyCode, modifiers: Modifier = Modifier.NONE, number: int = 0) -> KeyEvent:
    return KeyEvent(code, modifiers=modifiers, number=number)


# (introducer, final byte) -> key, for ESC [ x and ESC O x
FINAL_KEYS = {
    ("[", "A"): _key(KeyCode.UP),
    ("[", "B"): _key(KeyCode.DOWN),
    ("[", "C"): _key(KeyCode.RIGHT),
    ("[", "D"): _key(KeyCode.LEFT),
    ("[", "H"): _key(KeyCode.HOME),
    ("[", "F"): _key(KeyCode.END),
    ("[", "Z"): _key(KeyCode.BACKTAB),
    # rxvt shifted arrows
    ("[", "a"): _key(KeyCode.UP, Modifier.SHIFT),
    ("[", "b"): _key(KeyCode.DOWN, Modifier.SHIFT),
    ("[", "c"): _key(KeyCode.RIGHT, Modifier.SHIFT),
    ("[", "d"): _key(KeyCode.LEFT, Modifier.SHIFT),
    # SS3 (application cursor mode)
    ("O", "A"): _key(KeyCode.UP),
    ("O", "B"): _key(KeyCode.DOWN),
    ("O", "C"): _key(KeyCode.RIGHT),
    ("O", "D"): _key(KeyCode.LEFT),
    ("O", "H"): _key(KeyCode.HOME),
    ("O", "F"): _key(KeyCode.END),
    ("O", "P"): _key(KeyCode.F, number=1),
    ("O", "Q"): _key(KeyCode.F, number=2),
    ("O", "R"): _key(KeyCode.F, number=3),
    ("O", "S"): _key(KeyCode.F, number=4),
}

# Digit string of ESC [ <digits> <terminator> -> key
NUMBERED_KEYS = {
    "1": _key(KeyCode.HOME),
    "2": _key(KeyCode.INSERT),
    "3": _key(KeyCode.DELETE),
    "4": _key(KeyCode.END),
    "5": _key(KeyCode.PAGE_UP),
    "6": _key(KeyCode.PAGE_DOWN),
    "7": _key(KeyCode.HOME),
    "8": _key(KeyCode.END),
    "11": _key(KeyCode.F, number=1),
    "12": _key(KeyCode.F, number=2),
    "13": _key(KeyCode.F, number=3),
    "14": _key(KeyCode.F, number=4),
    "15": _key(KeyCode.F, number=5),
    "17": _key(KeyCode.F, number=6),
    "18": _key(KeyCode.F, number=7),
    "19": _key(KeyCode.F, number=8),
    "20": _key(KeyCode.F, number=9),
    "21": _key(KeyCode.F, number=10),
    "23": _key(KeyCode.F, number=11),
    "24": _key(KeyCode.F, number=12),
}

# rxvt encodes modifiers in the terminator of numbered keys
TERMINATOR_MODIFIERS = {
    "~": Modifier.NONE,
    "^": Modifier.CONTROL,
    "$": Modifier.SHIFT,
    "@": Modifier.CONTROL | Modifier.SHIFT,
}

_MOUSE_REPORT = re.compile(r"^<(\d+);(\d+);(\d+)$")


def _xterm_modifiers(param: str) -> Optional[Modifier]:
    """Decode the xterm modifier parameter (``5`` in ``ESC [ 1 ; 5 A``)."""
    if not param:
        return Modifier.NONE
    if not param.isdigit() or int(param) < 1:
        return None
    bits = int(param) - 1
    modifiers = Modifier.NONE
    if bits & 1:
        modifiers |= Modifier.SHIFT
    if bits & (2 | 8):  # alt, meta
        modifiers |= Modifier.ALT
    if bits & 4:
        modifiers |= Modifier.CONTROL
    return modifiers


class KeyDecoder:
    """Turns a raw byte stream into one event per call to ``decode``.

    ``read`` is called with a timeout and must return a single byte, or
    ``b""`` when nothing arrived in time. Any ``OSError`` it raises is
    propagated untouched: a failed read is an I/O failure, not bad input.
    """

    def __init__(self, read: ByteReader,
                 escape_timeout: float = EditorConstants.ESCAPE_SEQUENCE_TIMEOUT,
                 max_length: int = EditorConstants.MAX_SEQUENCE_LENGTH):
        self._read = read
        self.escape_timeout = escape_timeout
        self.max_length = max_length
        self._raw = bytearray()
        self._steps = {
            DecoderState.START: self._start,
            DecoderState.SAW_ESC: self._saw_esc,
            DecoderState.SAW_CSI: self._saw_csi,
            DecoderState.SAW_CSI_DIGITS: self._saw_csi_digits,
            DecoderState.SAW_MOUSE: self._saw_mouse,
        }

    def decode(self, timeout: Optional[float] = None) -> InputEvent:
        """Decode the next event, waiting up to ``timeout`` for its first byte."""
        first = self._read(timeout)
        if not first:
            return NO_KEY
        self._raw = bytearray(first)
        state = DecoderState.START
        while True:
            outcome = self._steps[state]()
            if isinstance(outcome, DecoderState):
                state = outcome
                continue
            if isinstance(outcome, KeyEvent):
                outcome = KeyEvent(outcome.code, outcome.char, outcome.modifiers,
                                   outcome.number, bytes(self._raw))
                if outcome.code is KeyCode.NONE:
                    logger.debug(f"Discarding unrecognized input {outcome.raw!r}")
            return outcome

    # --- helpers ---

    def _next(self) -> Optional[int]:
        """Read one more byte of the current sequence, or None on timeout."""
        data = self._read(self.escape_timeout)
        if not data:
            return None
        self._raw += data
        return data[0]

    def _single(self, byte: int) -> KeyEvent:
        """Decode a byte that does not start an escape sequence."""
        if byte == DEL:
            return _key(KeyCode.BACKSPACE)
        if byte == ESC:
            return _key(KeyCode.ESC)
        if byte < 0x20:
            # Control chords clear bits 0x60 of the letter
            return KeyEvent(KeyCode.CHAR, char=chr(byte + 0x60), modifiers=Modifier.CONTROL)
        if byte < 0x80:
            return KeyEvent(KeyCode.CHAR, char=chr(byte))
        return self._utf8(byte)

    def _utf8(self, lead: int) -> KeyEvent:
        if 0xC0 <= lead < 0xE0:
            remaining = 1
        elif 0xE0 <= lead < 0xF0:
            remaining = 2
        elif 0xF0 <= lead < 0xF8:
            remaining = 3
        else:
            return NO_KEY
        data = bytearray([lead])
        for _ in range(remaining):
            byte = self._next()
            if byte is None:
                return NO_KEY
            data.append(byte)
        try:
            char = data.decode("utf-8")
        except UnicodeDecodeError:
            return NO_KEY
        return KeyEvent(KeyCode.CHAR, char=char)

    # --- states ---

    def _start(self):
        if self._raw[0] == ESC:
            return DecoderState.SAW_ESC
        return self._single(self._raw[0])

    def _saw_esc(self):
        byte = self._next()
        if byte is None:
            return _key(KeyCode.ESC)
        if byte in b"[O":
            return DecoderState.SAW_CSI
        event = self._single(byte)
        if event.code is KeyCode.NONE:
            return event
        return event.with_modifiers(event.modifiers | Modifier.ALT)

    def _saw_csi(self):
        byte = self._next()
        if byte is None:
            return NO_KEY
        introducer = chr(self._raw[1])
        if introducer == "[":
            if 0x30 <= byte <= 0x39:
                return DecoderState.SAW_CSI_DIGITS
            if byte == ord("<"):
                return DecoderState.SAW_MOUSE
        return FINAL_KEYS.get((introducer, chr(byte)), NO_KEY)

    def _saw_csi_digits(self):
        # Parameter bytes (digits, ';') until a final byte in 0x40..0x7E
        while True:
            if len(self._raw) >= self.max_length:
                return NO_KEY
            byte = self._next()
            if byte is None:
                return NO_KEY
            if 0x30 <= byte <= 0x3F:
                continue
            if 0x40 <= byte <= 0x7E:
                return self._resolve_numbered()
            return NO_KEY

    def _resolve_numbered(self) -> KeyEvent:
        params = self._raw[2:-1].decode("ascii")
        final = chr(self._raw[-1])
        base, _, param = params.partition(";")
        modifiers = _xterm_modifiers(param)
        if modifiers is None:
            return NO_KEY
        if final in TERMINATOR_MODIFIERS:
            template = NUMBERED_KEYS.get(base)
            modifiers |= TERMINATOR_MODIFIERS[final]
        elif base == "1":
            template = FINAL_KEYS.get(("[", final))
        else:
            template = None
        if template is None:
            return NO_KEY
        return template.with_modifiers(template.modifiers | modifiers)

    def _saw_mouse(self):
        while True:
            if len(self._raw) >= self.max_length:
                return NO_KEY
            byte = self._next()
            if byte is None:
                return NO_KEY
            if byte in b"Mm":
                break
        match = _MOUSE_REPORT.match(self._raw[2:-1].decode("ascii", "replace"))
        if not match:
            return NO_KEY
        code, x, y = (int(group) for group in match.groups())
        return MouseEvent(
            x=max(0, x - 1),
            y=max(0, y - 1),
            button=code & ~(32 | 4 | 8 | 16),
            pressed=self._raw[-1] == ord("M"),
            drag=bool(code & 32),
            raw=bytes(self._raw),
        )


# --- Platform-event variant: curtsies key names ---

_TOKEN_NAMES = {
    "up": KeyCode.UP,
    "down": KeyCode.DOWN,
    "left": KeyCode.LEFT,
    "right": KeyCode.RIGHT,
    "home": KeyCode.HOME,
    "end": KeyCode.END,
    "pageup": KeyCode.PAGE_UP,
    "page_up": KeyCode.PAGE_UP,
    "pagedown": KeyCode.PAGE_DOWN,
    "page_down": KeyCode.PAGE_DOWN,
    "backspace": KeyCode.BACKSPACE,
    "delete": KeyCode.DELETE,
    "insert": KeyCode.INSERT,
    "enter": KeyCode.ENTER,
    "return": KeyCode.ENTER,
    "tab": KeyCode.TAB,
    "esc": KeyCode.ESC,
    "escape": KeyCode.ESC,
}

_TOKEN_MODIFIERS = {
    "ctrl": Modifier.CONTROL,
    "alt": Modifier.ALT,
    "meta": Modifier.ALT,
    "esc": Modifier.ALT,  # '<Esc+a>' is how curtsies reports Alt-a
    "shift": Modifier.SHIFT,
}


def parse_token(token: str) -> KeyEvent:
    """Map a curtsies key token to a KeyEvent.

    Tokens are either a single character (``'a'``, ``'\\x11'``) or a bracketed
    name such as ``'<UP>'``, ``'<Ctrl-q>'``, ``'<Esc+b>'`` or ``'<F5>'``.
    Unknown names map to the "none" key.
    """
    raw = token.encode("utf-8", "surrogateescape")
    if len(token) > 2 and token.startswith("<") and token.endswith(">"):
        name = token[1:-1].replace("+", "-")
        parts = name.split("-")
        base = parts[-1]
        modifiers = Modifier.NONE
        for part in parts[:-1]:
            modifiers |= _TOKEN_MODIFIERS.get(part.lower(), Modifier.NONE)
        lower = base.lower()
        if lower in ("space", "spacebar", "spc"):
            event = KeyEvent(KeyCode.CHAR, char=" ")
        elif lower in _TOKEN_NAMES:
            event = KeyEvent(_TOKEN_NAMES[lower])
        elif lower[:1] == "f" and lower[1:].isdigit():
            event = KeyEvent(KeyCode.F, number=int(lower[1:]))
        elif len(base) == 1:
            event = KeyEvent(KeyCode.CHAR, char=base)
        else:
            return KeyEvent(KeyCode.NONE, raw=raw)
        return KeyEvent(event.code, event.char, modifiers, event.number, raw)

    if len(token) == 1:
        code = ord(token)
        if code == DEL:
            return KeyEvent(KeyCode.BACKSPACE, raw=raw)
        if code == ESC:
            return KeyEvent(KeyCode.ESC, raw=raw)
        if code < 0x20:
            return KeyEvent(KeyCode.CHAR, char=chr(code + 0x60), modifiers=Modifier.CONTROL, raw=raw)
        return KeyEvent(KeyCode.CHAR, char=token, raw=raw)

    return KeyEvent(KeyCode.NONE, raw=raw)
