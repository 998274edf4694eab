"""Viewport scrolling and frame rendering."""

from typing import TYPE_CHECKING

from .constants import EditorConstants
from .model import EditBuffer, uslice

if TYPE_CHECKING:
    import blessed
    from .terminal import TerminalInterface


class Viewport:
    """Top-left document cell (ox, oy) shown in the terminal window.

    After ``scroll_to_cursor`` with a non-empty window the cursor is
    visible: ``oy <= cy < oy + height`` and ``ox <= cx < ox + width``.
    """

    def __init__(self, ox: int = 0, oy: int = 0):
        self.ox = ox
        self.oy = oy

    def scroll_to_cursor(self, cx: int, cy: int, width: int, height: int) -> None:
        """Recompute the offsets for a cursor and a window of width x height text cells."""
        if width <= 0 or height <= 0:
            return
        self.repage_horizontal(cx, width)
        self.scroll_vertical(cy, height)
        self.clamp_horizontal(cx, width)

    def repage_horizontal(self, cx: int, width: int) -> None:
        """Scroll sideways in pages rather than column by column.

        Starting from column 0, advance by 85% of the width while the cursor
        sits at or beyond 90% of it. Both products truncate toward zero.
        """
        trigger = max(1, int(width * EditorConstants.HSCROLL_TRIGGER_FRACTION))
        page = max(1, int(width * EditorConstants.HSCROLL_PAGE_FRACTION))
        self.ox = 0
        while cx - self.ox >= trigger:
            self.ox += page

    def scroll_vertical(self, cy: int, height: int) -> None:
        """Minimal vertical scroll that brings row cy into view."""
        if cy < self.oy:
            self.oy = cy
        if cy >= self.oy + height:
            self.oy = cy - height + 1

    def clamp_horizontal(self, cx: int, width: int) -> None:
        if cx < self.ox:
            self.ox = cx
        if cx >= self.ox + width:
            self.ox = cx - width + 1


# C0 controls and DEL would move the terminal cursor
_CONTROL_GLYPHS = {code: EditorConstants.CONTROL_GLYPH for code in [*range(0x20), 0x7F]}


def visible_text(text: str) -> str:
    """Replace control characters so every code point takes one cell."""
    return text.translate(_CONTROL_GLYPHS)


def status_line(name: str, cx: int, cy: int, message: str, width: int) -> str:
    """Format the status row, cut or padded to exactly width cells."""
    status = visible_text(f"? {name} {cy + 1}:{cx} -- {message}")
    return uslice(status, 0, width).ljust(max(0, width))


class Renderer:
    """Composes one frame from the buffer and viewport.

    Every row of the frame is built into a single string so that the
    terminal is written and flushed once per frame.
    """

    def __init__(self, term: "blessed.Terminal"):
        self.term = term

    def compose(self, buffer: EditBuffer, viewport: Viewport, width: int, height: int,
                name: str, message: str) -> str:
        term = self.term
        out = [term.hide_cursor, term.home]
        for row in range(max(0, height - 1)):
            filerow = viewport.oy + row
            out.append(term.clear_eol)
            if filerow < len(buffer.lines):
                text = uslice(buffer.lines[filerow], viewport.ox, viewport.ox + width)
                out.append(visible_text(text))
            else:
                out.append(EditorConstants.FILLER_GLYPH)
            out.append("\r\n")
        out.append(status_line(name, buffer.cx, buffer.cy, message, width))
        out.append(term.move_yx(buffer.cy - viewport.oy, buffer.cx - viewport.ox))
        out.append(term.normal_cursor)
        return "".join(out)

    def draw(self, terminal: "TerminalInterface", buffer: EditBuffer, viewport: Viewport,
             width: int, height: int, name: str, message: str) -> None:
        """Write one frame and flush it."""
        terminal.write(self.compose(buffer, viewport, width, height, name, message))
        terminal.flush()
