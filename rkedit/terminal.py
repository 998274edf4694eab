"""Terminal interface using Blessed for output and termios for raw input."""

import logging
import os
import select
import sys
import termios
from typing import Optional, Tuple

import blessed

from .constants import EditorConstants
from .errors import NotATerminalError, TerminalStateError, WindowSizeError

logger = logging.getLogger(__name__)

# Indexes into the termios attribute list
IFLAG, OFLAG, CFLAG, LFLAG, ISPEED, OSPEED, CC = range(7)


class RawMode:
    """Scoped raw mode for a terminal descriptor.

    Entering captures the original attributes and installs raw ones;
    exiting restores the originals exactly once, whether the body
    finished normally or raised.
    """

    def __init__(self, fd: int):
        self.fd = fd
        self.original: Optional[list] = None

    @property
    def active(self) -> bool:
        return self.original is not None

    def __enter__(self) -> "RawMode":
        try:
            original = termios.tcgetattr(self.fd)
        except termios.error as e:
            raise TerminalStateError(f"Cannot read terminal attributes: {e}") from e

        mode = list(original)
        mode[CC] = list(original[CC])
        mode[IFLAG] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        mode[OFLAG] &= ~termios.OPOST
        mode[CFLAG] |= termios.CS8
        mode[LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        # Reads return after at most a tenth of a second
        mode[CC][termios.VMIN] = 0
        mode[CC][termios.VTIME] = 1

        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)
        except termios.error as e:
            raise TerminalStateError(f"Cannot set terminal attributes: {e}") from e
        self.original = original
        logger.debug("Entered raw mode")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def restore(self) -> None:
        """Reinstall the original attributes if raw mode is active."""
        if self.original is None:
            return
        original, self.original = self.original, None
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, original)
        except termios.error as e:
            raise TerminalStateError(f"Cannot restore terminal attributes: {e}") from e
        logger.debug("Restored terminal attributes")


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None, in_fd: Optional[int] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.in_fd = sys.stdin.fileno() if in_fd is None else in_fd
        self._pending = bytearray()  # Input read by blessed on our behalf

    def require_tty(self) -> None:
        """Fail unless both input and output are interactive terminals."""
        if not os.isatty(self.in_fd):
            raise NotATerminalError("Standard input is not a TTY.")
        if not self.term.is_a_tty:
            raise NotATerminalError("Standard output is not a TTY.")

    def raw_mode(self) -> RawMode:
        """Return a context manager that holds the terminal in raw mode."""
        return RawMode(self.in_fd)

    # --- output ---

    def write(self, text: str) -> None:
        self.term.stream.write(text)

    def flush(self) -> None:
        self.term.stream.flush()

    def clear_screen(self) -> None:
        """Clear the entire screen."""
        self.write(self.term.home + self.term.clear)

    def move_cursor_topleft(self) -> None:
        self.write(self.term.home)

    def enable_mouse(self) -> None:
        """Ask the terminal for SGR mouse press and drag reports."""
        self.write(EditorConstants.MOUSE_ENABLE)

    def disable_mouse(self) -> None:
        self.write(EditorConstants.MOUSE_DISABLE)

    # --- input ---

    def read_byte(self, timeout: Optional[float] = None) -> bytes:
        """Read one byte from the input descriptor.

        Args:
            timeout: Seconds to wait (None blocks, 0 polls)

        Returns:
            The byte read, or b"" if nothing arrived in time.
        """
        if self._pending:
            byte = bytes(self._pending[:1])
            del self._pending[:1]
            return byte
        ready, _, _ = select.select([self.in_fd], [], [], timeout)
        if not ready:
            return b""
        return os.read(self.in_fd, 1)

    # --- window size ---

    def window_size(self) -> Tuple[int, int]:
        """Return (width, height) of the terminal in cells.

        Queries the descriptor directly and falls back to a cursor position
        report when that is unavailable.
        """
        try:
            size = os.get_terminal_size(self.in_fd)
            if size.columns > 0 and size.lines > 0:
                return size.columns, size.lines
            logger.warning("Direct window size query returned an empty size")
        except OSError as e:
            logger.warning(f"Direct window size query failed ({e}), using status report")
        return self._window_size_from_report()

    def _window_size_from_report(self) -> Tuple[int, int]:
        """Park the cursor in the far corner and ask where it ended up."""
        self.write(self.term.move_right(999) + self.term.move_down(999))
        self.flush()
        row, col = self.term.get_location(timeout=EditorConstants.DSR_TIMEOUT)
        self._reclaim_keystrokes()
        if row < 0 or col < 0:
            raise WindowSizeError("Cannot determine the terminal window size.")
        return col + 1, row + 1

    def _reclaim_keystrokes(self) -> None:
        """Queue keys typed during the report round trip for ``read_byte``.

        ``get_location`` reads through blessed's own keyboard buffer, which
        keeps any keystrokes that arrived around the reply.
        """
        while True:
            keystroke = self.term.inkey(timeout=0)
            if not keystroke:
                return
            self._pending += str(keystroke).encode("utf-8", "surrogateescape")
