"""rkedit CLI entry point.

Allows running via `python -m rkedit` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from .errors import EditorError
from .version import get_version_string

USAGE = "usage: rkedit [--version] [--keytest] [--log FILE] [--config FILE] [PATH]"


def _configure_logging(log_file: Optional[str]) -> Optional[logging.Handler]:
    """Send rkedit's log records to a file; the terminal itself belongs to the editor.

    Returns:
        The handler attached to the ``rkedit`` logger, or None without a file.

    Raises:
        OSError: the log file cannot be opened.
    """
    if not log_file:
        return None
    level = os.environ.get("RKEDIT_LOG_LEVEL", "INFO").upper()
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    package_logger = logging.getLogger("rkedit")
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.INFO))
    return handler


def _start_logging(log_file: Optional[str]) -> None:
    try:
        _configure_logging(log_file)
    except OSError as e:
        print(f"rkedit: cannot open log file {log_file}: {e.strerror or e}", file=sys.stderr)
        sys.exit(1)


def run_keyboard_test(settings) -> None:
    """Print each decoded input event until ESC is pressed.

    Uses the same TerminalInterface + KeyboardHandler stack as the editor,
    so what is printed is exactly what the key map will see.
    """
    from .keyboard import KeyboardHandler
    from .keys import KeyCode, KeyEvent, describe_key, escape_bytes
    from .terminal import TerminalInterface

    terminal = TerminalInterface()
    terminal.require_tty()
    keyboard = KeyboardHandler(terminal, backend=settings.input_backend,
                               escape_timeout=settings.escape_timeout)

    print("Keyboard test mode - press keys to see decoded events.")
    print("Quit with ESC.")

    # Output post-processing is off in raw mode, so lines end with \r\n
    with terminal.raw_mode():
        keyboard.setup()
        try:
            while True:
                event = keyboard.get_event(timeout=None)
                if not isinstance(event, KeyEvent):
                    print(f"{event}\r")
                    continue
                if event.code is KeyCode.NONE and not event.raw:
                    continue
                if event.code is KeyCode.ESC and not event.modifiers:
                    print("Exiting keyboard test.\r")
                    break
                print(f"key={describe_key(event)} category={event.category} "
                      f"raw='{escape_bytes(event.raw)}'\r")
        finally:
            keyboard.cleanup()


def main(argv: Optional[list[str]] = None) -> None:
    # Very small arg parsing: flags, then at most one path
    args = sys.argv[1:] if argv is None else list(argv)
    keytest = False
    log_file = None
    config_file = None
    paths = []
    while args:
        arg = args.pop(0)
        if arg in ("--version", "-V"):
            print(get_version_string())
            return
        if arg in ("--help", "-h"):
            print(USAGE)
            return
        if arg in ("--keytest", "--keyboard-test"):
            keytest = True
        elif arg in ("--log", "--config"):
            if not args:
                print(f"rkedit: {arg} needs a value\n{USAGE}", file=sys.stderr)
                sys.exit(2)
            if arg == "--log":
                log_file = args.pop(0)
            else:
                config_file = args.pop(0)
        else:
            paths.append(arg)
    if len(paths) > 1:
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    # Lazy import to avoid importing UI deps for --version
    from .session import Session
    from .settings import load_settings

    # A log file named outside the settings is opened before they are loaded
    early_log_file = log_file or os.environ.get("RKEDIT_LOG")
    _start_logging(early_log_file)
    settings = load_settings(config_file)
    if not early_log_file:
        _start_logging(settings.log_file)

    try:
        if keytest:
            run_keyboard_test(settings)
            return
        session = Session(settings=settings)
        session.terminal.require_tty()
        if paths:
            session.load_file(paths[0])
        session.run()
    except EditorError as e:
        logging.getLogger(__name__).error(str(e))
        print(f"rkedit: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
