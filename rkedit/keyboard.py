"""Keyboard input handling: raw bytes or curtsies-style tokens."""

from collections import deque
from typing import Deque, Optional

from curtsies import Input
from curtsies.events import PasteEvent

from .constants import EditorConstants
from .decoder import InputEvent, KeyDecoder, parse_token
from .keys import NO_KEY

BACKENDS = ("bytes", "curtsies")


class KeyboardHandler:
    """Produces one input event per poll, with a bounded wait.

    The ``bytes`` backend reads the terminal descriptor directly and runs
    the escape-sequence decoder. The ``curtsies`` backend lets curtsies
    parse escapes and maps its key names.
    """

    def __init__(self, terminal_interface, backend: str = "bytes",
                 escape_timeout: float = EditorConstants.ESCAPE_SEQUENCE_TIMEOUT):
        """Initialize with a terminal interface."""
        if backend not in BACKENDS:
            raise ValueError(f"Unknown input backend: {backend!r}")
        self.terminal = terminal_interface
        self.backend = backend
        self.decoder = KeyDecoder(terminal_interface.read_byte, escape_timeout=escape_timeout)
        self._curtsies_input: Optional[Input] = None
        self._pending: Deque[InputEvent] = deque()

    def setup(self) -> None:
        """Start the curtsies input stream when that backend is selected."""
        if self.backend == "curtsies" and self._curtsies_input is None:
            self._curtsies_input = Input(keynames="curtsies")
            self._curtsies_input.__enter__()

    def cleanup(self) -> None:
        """Stop the curtsies input stream, if any."""
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)
            finally:
                self._curtsies_input = None
        self._pending.clear()

    def get_event(self, timeout: Optional[float] = None) -> InputEvent:
        """Return the next event, or the "none" key if nothing arrived in time."""
        if self._pending:
            return self._pending.popleft()
        if self._curtsies_input is None:
            return self.decoder.decode(timeout)

        event = self._curtsies_input.send(timeout)
        if event is None:
            return NO_KEY
        if isinstance(event, PasteEvent):
            # Replay pasted keys one per poll
            self._pending.extend(parse_token(token) for token in event.events)
            return self._pending.popleft() if self._pending else NO_KEY
        if isinstance(event, str):
            return parse_token(event)
        return NO_KEY
