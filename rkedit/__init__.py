"""rkedit - a small raw-terminal text editor."""

import logging

from .keys import KeyCode, KeyEvent, Modifier, MouseEvent
from .model import Direction, EditBuffer, uslice
from .view import Renderer, Viewport

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'KeyCode',
    'KeyEvent',
    'Modifier',
    'MouseEvent',
    'Direction',
    'EditBuffer',
    'uslice',
    'Renderer',
    'Viewport',
]
