"""Main editor loop and terminal lifecycle."""

import logging
import os
from typing import Optional

from .commands import Command, KeyMap, MoveTo, Nothing
from .constants import EditorConstants
from .decoder import InputEvent
from .keyboard import KeyboardHandler
from .keys import KeyCode, MouseEvent, escape_bytes
from .model import EditBuffer
from .settings import Settings
from .terminal import TerminalInterface
from .version import get_version
from .view import Renderer, Viewport

logger = logging.getLogger(__name__)


class Session:
    """Owns the terminal, the buffer and the viewport for one editing run.

    ``run`` holds the terminal in raw mode for the whole loop and restores
    it on every way out, including exceptions raised by the loop.
    """

    def __init__(self, terminal: Optional[TerminalInterface] = None,
                 settings: Optional[Settings] = None,
                 keyboard: Optional[KeyboardHandler] = None):
        """Initialize the editor components."""
        self.settings = settings or Settings()
        self.terminal = terminal or TerminalInterface()
        self.keyboard = keyboard or KeyboardHandler(
            self.terminal,
            backend=self.settings.input_backend,
            escape_timeout=self.settings.escape_timeout,
        )
        self.keymap = KeyMap.from_bindings(self.settings.keybindings)
        self.buffer = EditBuffer()
        self.viewport = Viewport()
        self.renderer = Renderer(self.terminal.term)
        self.name = EditorConstants.SCRATCH_BUFFER_NAME
        self.status_message = EditorConstants.VERSION_MESSAGE.format(get_version())
        self.running = False
        self.width = 0
        self.height = 0

    @property
    def text_rows(self) -> int:
        """Rows available for document text (the last row is the status line)."""
        return max(0, self.height - 1)

    def load_file(self, path: str) -> None:
        """Load a file into the buffer before the first frame.

        Raises:
            LoadError: the file is missing, unreadable or not UTF-8.
        """
        self.buffer.load(path)
        self.name = os.path.basename(path) or path
        logger.info(f"Loaded {path} ({len(self.buffer.lines)} lines)")

    def run(self) -> None:
        """Run the main editor loop until an Exit command."""
        self.terminal.require_tty()
        with self.terminal.raw_mode():
            try:
                self._init()
                while self.running:
                    self.update()
            finally:
                self._deinit()
        logger.info("Session ended")

    def _init(self) -> None:
        logger.info(f"Session started on {self.name}")
        self.keyboard.setup()
        if self.settings.mouse:
            self.terminal.enable_mouse()
        self.refresh_window_size()
        self.terminal.clear_screen()
        self.running = True
        self.scroll_to_cursor()
        self.draw()

    def _deinit(self) -> None:
        self.running = False
        try:
            self.keyboard.cleanup()
        finally:
            if self.settings.mouse:
                self.terminal.disable_mouse()
            self.terminal.move_cursor_topleft()
            self.terminal.flush()

    def refresh_window_size(self) -> None:
        """Re-query the window size; a change forces a full clear."""
        size = self.terminal.window_size()
        if size == (self.width, self.height):
            return
        if self.width or self.height:
            logger.debug(f"Window resized to {size[0]}x{size[1]}")
            self.terminal.clear_screen()
        self.width, self.height = size

    def update(self) -> None:
        """One loop iteration: poll input, apply it, redraw."""
        self.refresh_window_size()
        event = self.keyboard.get_event(timeout=self.settings.poll_timeout)
        command = self.translate(event)
        command.execute(self)
        self.scroll_to_cursor()
        self.draw()

    def translate(self, event: InputEvent) -> Command:
        """Turn an input event into a command, updating the status message."""
        if isinstance(event, MouseEvent):
            return self._translate_mouse(event)
        if event.code is KeyCode.NONE:
            if event.raw:
                self.status_message = EditorConstants.UNRECOGNIZED_INPUT_MESSAGE.format(escape_bytes(event.raw))
            return Nothing()
        # Clear the status message on any real keypress
        self.status_message = ""
        return self.keymap.lookup(event)

    def _translate_mouse(self, event: MouseEvent) -> Command:
        """Left press or drag on the text area moves the cursor there."""
        if event.button != 0 or not event.pressed or event.y >= self.text_rows:
            return Nothing()
        return MoveTo(event.x + self.viewport.ox, event.y + self.viewport.oy)

    def scroll_to_cursor(self) -> None:
        self.viewport.scroll_to_cursor(self.buffer.cx, self.buffer.cy, self.width, self.text_rows)

    def draw(self) -> None:
        """Draw the current editor state to the terminal."""
        self.renderer.draw(self.terminal, self.buffer, self.viewport,
                           self.width, self.height, self.name, self.status_message)
