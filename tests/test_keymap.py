"""Test key bindings and command execution."""

from types import SimpleNamespace

from rkedit.commands import (COMMAND_NAMES, Erase, Exit, InsertChar, KeyMap, LineEnd,
                             LineHome, Move, MoveTo, Nothing, PageDown, PageUp, Unbound)
from rkedit.keys import KeyCode, KeyEvent, Modifier, must_parse_key_spec
from rkedit.model import Direction, EditBuffer


def key(spec):
    return must_parse_key_spec(spec)


def create_test_session(lines, text_rows=10):
    """Create the parts of a session that commands touch."""
    return SimpleNamespace(buffer=EditBuffer(lines), text_rows=text_rows,
                           running=True, status_message="")


def test_default_bindings():
    """Test the default key table."""
    keymap = KeyMap()
    assert keymap.lookup(key("C-q")) == Exit()
    assert keymap.lookup(key("up")) == Move(Direction.UP)
    assert keymap.lookup(key("down")) == Move(Direction.DOWN)
    assert keymap.lookup(key("left")) == Move(Direction.LEFT)
    assert keymap.lookup(key("right")) == Move(Direction.RIGHT)
    assert keymap.lookup(key("C-up")) == PageUp()
    assert keymap.lookup(key("C-down")) == PageDown()
    assert keymap.lookup(key("C-left")) == LineHome()
    assert keymap.lookup(key("C-right")) == LineEnd()
    assert keymap.lookup(key("pageup")) == PageUp()
    assert keymap.lookup(key("pagedown")) == PageDown()
    assert keymap.lookup(key("home")) == LineHome()
    assert keymap.lookup(key("end")) == LineEnd()
    assert keymap.lookup(key("backspace")) == Erase(Direction.LEFT)
    assert keymap.lookup(key("delete")) == Erase(Direction.RIGHT)


def test_newline_keys():
    """Test Enter, C-m and C-j insert a newline."""
    keymap = KeyMap()
    for spec in ("enter", "C-m", "C-j"):
        assert keymap.lookup(key(spec)) == InsertChar("\n")


def test_tab_is_not_bound():
    """Test Tab (C-i from the byte decoder) is reported, not inserted."""
    keymap = KeyMap()
    for spec in ("tab", "C-i"):
        event = key(spec)
        assert keymap.lookup(event) == Unbound(event)
    assert "tab" not in COMMAND_NAMES


def test_plain_characters_insert():
    """Test unbound plain characters insert themselves."""
    keymap = KeyMap()
    assert keymap.lookup(key("a")) == InsertChar("a")
    assert keymap.lookup(key("A")) == InsertChar("A")
    assert keymap.lookup(KeyEvent(KeyCode.CHAR, char="μ")) == InsertChar("μ")


def test_shifted_keys_fall_back():
    """Test shifted keys use the unshifted binding."""
    keymap = KeyMap()
    assert keymap.lookup(key("S-up")) == Move(Direction.UP)
    assert keymap.lookup(key("S-C-left")) == LineHome()


def test_unbound_keys():
    """Test chords and keys without a binding are reported, not inserted."""
    keymap = KeyMap()
    for spec in ("C-x", "A-x", "f5", "esc", "insert"):
        event = key(spec)
        assert keymap.lookup(event) == Unbound(event)


def test_none_key_does_nothing():
    """Test the "none" key maps to Nothing."""
    assert KeyMap().lookup(KeyEvent(KeyCode.NONE)) == Nothing()


def test_binding_overrides():
    """Test bindings from settings replace defaults."""
    keymap = KeyMap.from_bindings({"C-x": "exit", "C-q": "nothing", "f2": "line_end"})
    assert keymap.lookup(key("C-x")) == Exit()
    assert keymap.lookup(key("C-q")) == Nothing()
    assert keymap.lookup(key("f2")) == LineEnd()


def test_invalid_bindings_are_skipped(caplog):
    """Test bad specs or command names are logged and ignored."""
    keymap = KeyMap.from_bindings({"nosuchkey": "exit", "C-x": "frobnicate"})
    assert keymap.lookup(key("C-q")) == Exit()
    assert keymap.lookup(key("C-x")) == Unbound(key("C-x"))
    assert "Ignoring key binding" in caplog.text


def test_exit_command():
    """Test Exit stops the session loop."""
    session = create_test_session(["hello"])
    Exit().execute(session)
    assert session.running is False


def test_unbound_sets_status():
    """Test Unbound reports the key on the status line."""
    session = create_test_session(["hello"])
    Unbound(key("C-x")).execute(session)
    assert session.status_message == "key not bound: C-x"


def test_editing_commands():
    """Test commands act on the buffer."""
    session = create_test_session(["hello", "world"])
    buffer = session.buffer

    InsertChar("X").execute(session)
    assert buffer.lines[0] == "Xhello"
    LineEnd().execute(session)
    assert buffer.cx == 6
    Erase(Direction.LEFT).execute(session)
    assert buffer.lines[0] == "Xhell"
    # Forward erase is not implemented
    LineHome().execute(session)
    Erase(Direction.RIGHT).execute(session)
    assert buffer.lines[0] == "Xhell"
    MoveTo(3, 1).execute(session)
    assert (buffer.cx, buffer.cy) == (3, 1)
    Nothing().execute(session)
    assert (buffer.cx, buffer.cy) == (3, 1)


def test_page_commands_use_text_rows():
    """Test paging moves by the number of text rows to column 0."""
    session = create_test_session([f"line {i}" for i in range(50)], text_rows=20)
    buffer = session.buffer
    buffer.move_to(3, 5)

    PageDown().execute(session)
    assert (buffer.cx, buffer.cy) == (0, 25)
    PageDown().execute(session)
    PageDown().execute(session)
    assert buffer.cy == 49
    PageUp().execute(session)
    assert buffer.cy == 29
    PageUp().execute(session)
    PageUp().execute(session)
    assert buffer.cy == 0


def test_modifier_helpers():
    """Test modifier flags are exposed as properties."""
    event = KeyEvent(KeyCode.CHAR, char="x", modifiers=Modifier.CONTROL | Modifier.SHIFT)
    assert event.is_ctrl
    assert event.is_shift
    assert not event.is_alt
