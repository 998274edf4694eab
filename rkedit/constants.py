"""Constants and configuration defaults for the rkedit editor."""


class EditorConstants:
    """Central configuration constants for the editor."""

    # Buffer
    SCRATCH_BUFFER_NAME = "*scratch*"  # Name shown when no file was given
    FILLER_GLYPH = "~"  # Drawn on rows past the end of the document
    CONTROL_GLYPH = "?"  # Drawn in place of control characters in a line

    # Keyboard timing
    ESCAPE_SEQUENCE_TIMEOUT = 0.01  # Timeout for the byte following ESC (seconds)
    INPUT_POLL_TIMEOUT = 0.1  # Bounded wait for the next key (seconds)
    MAX_SEQUENCE_LENGTH = 32  # Longest escape sequence accepted before discarding

    # Horizontal scrolling: repage once the cursor passes TRIGGER of the
    # width, by PAGE of the width. Both products are truncated to int.
    HSCROLL_TRIGGER_FRACTION = 0.90
    HSCROLL_PAGE_FRACTION = 0.85

    # Terminal
    DSR_TIMEOUT = 1.0  # Wait for the cursor position report (seconds)
    MOUSE_ENABLE = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
    MOUSE_DISABLE = "\x1b[?1006l\x1b[?1002l\x1b[?1000l"

    # Status messages
    UNRECOGNIZED_INPUT_MESSAGE = "unrecognized input: {}"
    KEY_NOT_BOUND_MESSAGE = "key not bound: {}"
    VERSION_MESSAGE = "rkedit v{}"
