"""Exceptions raised by rkedit.

Environment and load errors are fatal and reported by the CLI. Decode
problems are never raised; they surface as a "none" key instead.
"""


class EditorError(Exception):
    """Base class for all rkedit errors."""


class TerminalError(EditorError):
    """The terminal environment cannot be used."""


class NotATerminalError(TerminalError):
    """Standard input or output is not attached to a terminal."""


class TerminalStateError(TerminalError):
    """Reading or setting terminal attributes failed."""


class WindowSizeError(TerminalError):
    """Neither the direct query nor the status report gave a window size."""


class LoadError(EditorError):
    """A file could not be loaded into the buffer."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot open {path}: {reason}")
        self.path = path
        self.reason = reason
