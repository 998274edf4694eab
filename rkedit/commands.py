"""Command pattern implementation for editor actions."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from .constants import EditorConstants
from .keys import KeyCode, KeyEvent, Modifier, describe_key, must_parse_key_spec
from .model import Direction

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)


class Command(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, session: 'Session') -> None:
        """Apply the command to the session."""


@dataclass(frozen=True)
class Nothing(Command):
    def execute(self, session):
        pass


@dataclass(frozen=True)
class InsertChar(Command):
    char: str

    def execute(self, session):
        session.buffer.insert_char(self.char)


@dataclass(frozen=True)
class Move(Command):
    direction: Direction

    def execute(self, session):
        session.buffer.move(self.direction)


@dataclass(frozen=True)
class MoveTo(Command):
    x: int
    y: int

    def execute(self, session):
        session.buffer.move_to(self.x, self.y)


@dataclass(frozen=True)
class PageUp(Command):
    def execute(self, session):
        session.buffer.page_up(session.text_rows)


@dataclass(frozen=True)
class PageDown(Command):
    def execute(self, session):
        session.buffer.page_down(session.text_rows)


@dataclass(frozen=True)
class LineHome(Command):
    def execute(self, session):
        session.buffer.line_home()


@dataclass(frozen=True)
class LineEnd(Command):
    def execute(self, session):
        session.buffer.line_end()


@dataclass(frozen=True)
class Erase(Command):
    direction: Direction

    def execute(self, session):
        session.buffer.erase(self.direction)


@dataclass(frozen=True)
class Exit(Command):
    def execute(self, session):
        session.running = False


@dataclass(frozen=True)
class Unbound(Command):
    """Input with no binding; reported on the status line."""
    event: KeyEvent

    def execute(self, session):
        description = describe_key(self.event)
        logger.debug(f"Key not bound: {description}")
        session.status_message = EditorConstants.KEY_NOT_BOUND_MESSAGE.format(description)


# Names usable in the "keybindings" setting
COMMAND_NAMES: Dict[str, Command] = {
    "nothing": Nothing(),
    "exit": Exit(),
    "move_up": Move(Direction.UP),
    "move_down": Move(Direction.DOWN),
    "move_left": Move(Direction.LEFT),
    "move_right": Move(Direction.RIGHT),
    "page_up": PageUp(),
    "page_down": PageDown(),
    "line_home": LineHome(),
    "line_end": LineEnd(),
    "erase_backward": Erase(Direction.LEFT),
    "erase_forward": Erase(Direction.RIGHT),
    "newline": InsertChar("\n"),
}


class KeyMap:
    """Registry mapping key events to commands.

    ``lookup`` is total: every event yields a command, with unmapped keys
    becoming ``Unbound`` so the caller decides how to surface them.
    """

    def __init__(self):
        self._commands: Dict[KeyEvent, Command] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default key bindings."""
        self.bind("C-q", Exit())

        # Movement; shifted variants fall back to these
        for direction in Direction:
            self.bind(direction.value, Move(direction))
        self.bind("C-up", PageUp())
        self.bind("C-down", PageDown())
        self.bind("C-left", LineHome())
        self.bind("C-right", LineEnd())
        self.bind("pageup", PageUp())
        self.bind("pagedown", PageDown())
        self.bind("home", LineHome())
        self.bind("end", LineEnd())

        # Editing
        self.bind("C-m", InsertChar("\n"))
        self.bind("C-j", InsertChar("\n"))
        self.bind("enter", InsertChar("\n"))
        self.bind("backspace", Erase(Direction.LEFT))
        self.bind("delete", Erase(Direction.RIGHT))

    @classmethod
    def from_bindings(cls, bindings: Mapping[str, str]) -> "KeyMap":
        """Build the default map, then apply ``{key spec: command name}`` overrides."""
        keymap = cls()
        for spec, name in bindings.items():
            try:
                keymap.bind_name(spec, name)
            except ValueError as e:
                logger.warning(f"Ignoring key binding {spec!r}: {e}")
        return keymap

    def register(self, event: KeyEvent, command: Command) -> None:
        """Register a command for a key event."""
        self._commands[event] = command

    def bind(self, spec: str, command: Command) -> None:
        """Register a command for a key spec such as ``"C-q"``."""
        self.register(must_parse_key_spec(spec), command)

    def bind_name(self, spec: str, name: str) -> None:
        command = COMMAND_NAMES.get(name)
        if command is None:
            raise ValueError(f"Unknown command name: {name!r}")
        self.bind(spec, command)

    def get_command(self, event: KeyEvent) -> Optional[Command]:
        """Get the bound command, trying the unshifted key second."""
        command = self._commands.get(event)
        if command is None and event.is_shift:
            command = self._commands.get(event.with_modifiers(event.modifiers & ~Modifier.SHIFT))
        return command

    def lookup(self, event: KeyEvent) -> Command:
        if event.code is KeyCode.NONE:
            return Nothing()
        command = self.get_command(event)
        if command is not None:
            return command
        # Regular text input
        if event.code is KeyCode.CHAR and not (event.is_ctrl or event.is_alt):
            return InsertChar(event.char)
        return Unbound(event)
