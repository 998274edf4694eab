"""The edit buffer: document lines plus the cursor."""

from enum import Enum
from typing import Iterable, Optional

from .errors import LoadError


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


def uslice(text: str, start: int, end: int) -> str:
    """Return code points [start, end) of text.

    Out-of-range bounds are clamped, so this never raises and never splits a
    character: ``uslice("καλημέρα", 4, 8) == "μέρα"``.
    """
    start = max(0, start)
    end = max(start, end)
    return text[start:end]


class EditBuffer:
    """Lines of text and a cursor addressed by code point.

    Invariants, re-established by every operation:
    ``lines`` is never empty, ``0 <= cy < len(lines)`` and
    ``0 <= cx <= len(lines[cy])`` (``cx`` may sit one past the last
    character, the append position).
    """

    lines: list[str]
    cx: int
    cy: int

    def __init__(self, lines: Optional[Iterable[str]] = None):
        self.lines = list(lines) if lines is not None else []
        if not self.lines:
            self.lines = [""]
        self.cx = 0
        self.cy = 0

    @property
    def line(self) -> str:
        """The line under the cursor."""
        return self.lines[self.cy]

    def load(self, path: str) -> None:
        """Replace the buffer contents with the UTF-8 text at path.

        A trailing newline does not start an extra empty line, and CRLF line
        endings are accepted.
        """
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
        except OSError as e:
            raise LoadError(path, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise LoadError(path, "not valid UTF-8") from e

        lines = content.split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        self.lines = [line[:-1] if line.endswith("\r") else line for line in lines]
        self.cx = 0
        self.cy = 0

    def _clamp(self) -> None:
        self.cy = min(max(self.cy, 0), len(self.lines) - 1)
        self.cx = min(max(self.cx, 0), len(self.lines[self.cy]))

    # --- movement ---

    def move(self, direction: Direction) -> None:
        """Move one step; left/up stop at zero, right/down clamp."""
        if direction is Direction.LEFT:
            if self.cx > 0:
                self.cx -= 1
        elif direction is Direction.RIGHT:
            self.cx += 1
        elif direction is Direction.UP:
            if self.cy > 0:
                self.cy -= 1
        elif direction is Direction.DOWN:
            self.cy += 1
        self._clamp()

    def move_to(self, x: int, y: int) -> None:
        self.cy = y
        self.cx = x
        self._clamp()

    def line_home(self) -> None:
        self.cx = 0

    def line_end(self) -> None:
        self.cx = len(self.line)

    def page_up(self, rows: int) -> None:
        self.move_to(0, self.cy - max(1, rows))

    def page_down(self, rows: int) -> None:
        self.move_to(0, self.cy + max(1, rows))

    # --- editing ---

    def insert_char(self, ch: str) -> None:
        """Insert one code point at the cursor; a newline splits the line."""
        if len(ch) != 1:
            raise ValueError(f"Expected a single character, got {ch!r}")
        line = self.line
        if ch == "\n":
            self.lines[self.cy] = line[:self.cx]
            self.lines.insert(self.cy + 1, line[self.cx:])
            self.cy += 1
            self.cx = 0
            return
        self.lines[self.cy] = line[:self.cx] + ch + line[self.cx:]
        self.cx += 1

    def erase(self, direction: Direction) -> None:
        """Erase backward (LEFT); other directions are no-ops.

        Backspace at column 0 joins the line onto the previous one.
        """
        if direction is not Direction.LEFT:
            return
        if self.cx > 0:
            line = self.line
            self.lines[self.cy] = line[:self.cx - 1] + line[self.cx:]
            self.cx -= 1
        elif self.cy > 0:
            tail = self.lines.pop(self.cy)
            self.cy -= 1
            self.cx = len(self.lines[self.cy])
            self.lines[self.cy] += tail
