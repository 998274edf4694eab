"""Test the command line entry point."""

import json
import logging

import pytest
from unittest.mock import patch

from fake_terminal import FakeTerminal
from rkedit import version
from rkedit.__main__ import _configure_logging, main
from rkedit.errors import NotATerminalError


@pytest.fixture
def no_config(tmp_path):
    """Point the settings loader at an empty config directory."""
    with patch("rkedit.settings.default_settings_path", return_value=tmp_path / "settings.json"):
        yield


def test_version(capsys):
    """Test --version prints the version and exits normally."""
    with patch("rkedit.__main__.get_version_string", return_value="0.1.0 (abc1234)"):
        main(["--version"])
    assert capsys.readouterr().out.strip() == "0.1.0 (abc1234)"


def test_help(capsys):
    main(["--help"])
    assert capsys.readouterr().out.startswith("usage: rkedit")


def test_too_many_paths(capsys):
    """Test more than one file is a usage error."""
    with pytest.raises(SystemExit) as excinfo:
        main(["one.txt", "two.txt"])
    assert excinfo.value.code == 2
    assert "usage" in capsys.readouterr().err


def test_option_needs_value(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--log"])
    assert excinfo.value.code == 2
    assert "--log needs a value" in capsys.readouterr().err


def test_missing_file_is_fatal(tmp_path, capsys, no_config):
    """Test a missing file is reported before raw mode is entered."""
    terminal = FakeTerminal(b"\x11")
    with patch("rkedit.session.TerminalInterface", return_value=terminal):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing.txt")])

    assert excinfo.value.code == 1
    assert "rkedit: cannot open" in capsys.readouterr().err
    assert terminal.raw.entered == 0


def test_not_a_terminal(capsys, no_config):
    """Test running without a terminal exits with an error."""
    terminal = FakeTerminal()
    with patch.object(terminal, "require_tty",
                      side_effect=NotATerminalError("Standard input is not a TTY.")):
        with patch("rkedit.session.TerminalInterface", return_value=terminal):
            with pytest.raises(SystemExit) as excinfo:
                main([])

    assert excinfo.value.code == 1
    assert "not a TTY" in capsys.readouterr().err


def test_edit_and_quit(tmp_path, no_config):
    """Test a full run on a file ends normally."""
    path = tmp_path / "note.txt"
    path.write_text("hello\n", encoding="utf-8")
    terminal = FakeTerminal(b"\x1b[C\x11")

    with patch("rkedit.session.TerminalInterface", return_value=terminal):
        main([str(path)])

    assert terminal.raw.entered == 1
    assert terminal.raw.restored == 1
    assert "? note.txt 1:1" in terminal.last_frame
    # The file itself is never written
    assert path.read_text(encoding="utf-8") == "hello\n"


@pytest.fixture
def package_logger():
    """Yield the rkedit logger and undo any file logging set up by a test."""
    logger = logging.getLogger("rkedit")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)


def test_configure_logging(tmp_path, monkeypatch, package_logger):
    """Test records from the package go to the given file at the configured level."""
    monkeypatch.setenv("RKEDIT_LOG_LEVEL", "debug")
    log_file = tmp_path / "rkedit.log"

    assert _configure_logging(None) is None
    handler = _configure_logging(str(log_file))
    assert handler in package_logger.handlers
    assert package_logger.level == logging.DEBUG

    logging.getLogger("rkedit.session").debug("hello from the session")
    handler.flush()
    assert "rkedit.session DEBUG hello from the session" in log_file.read_text(encoding="utf-8")


def test_settings_warnings_reach_log_file(tmp_path, monkeypatch, package_logger):
    """Test problems in the config file are written to the --log file."""
    monkeypatch.delenv("RKEDIT_LOG_LEVEL", raising=False)
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"mouse": "yes"}), encoding="utf-8")
    log_file = tmp_path / "rkedit.log"
    terminal = FakeTerminal(b"\x11")

    with patch("rkedit.session.TerminalInterface", return_value=terminal):
        main(["--log", str(log_file), "--config", str(config)])

    text = log_file.read_text(encoding="utf-8")
    assert "Invalid value for setting 'mouse'" in text


def test_settings_log_file_used_without_option(tmp_path, monkeypatch, package_logger):
    """Test log_file from the settings applies when no log option is given."""
    monkeypatch.delenv("RKEDIT_LOG", raising=False)
    monkeypatch.delenv("RKEDIT_LOG_LEVEL", raising=False)
    log_file = tmp_path / "from-settings.log"
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"log_file": str(log_file)}), encoding="utf-8")
    terminal = FakeTerminal(b"\x11")

    with patch("rkedit.session.TerminalInterface", return_value=terminal):
        main(["--config", str(config)])

    assert "Session ended" in log_file.read_text(encoding="utf-8")


def test_unwritable_log_file(tmp_path, capsys, no_config):
    """Test a log file that cannot be opened is reported."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--log", str(tmp_path / "missing" / "rkedit.log")])
    assert excinfo.value.code == 1
    assert "cannot open log file" in capsys.readouterr().err


def test_version_string():
    """Test the version string carries the commit when one is known."""
    with patch("rkedit.version.get_version", return_value="0.1.0"):
        with patch("rkedit.version._git_commit", return_value="abc1234"):
            assert version.get_version_string() == "0.1.0 (abc1234)"
        with patch("rkedit.version._git_commit", return_value=None):
            assert version.get_version_string() == "0.1.0"
    assert version.__doc__
