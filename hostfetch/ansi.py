"""Visible width of text carrying terminal styling sequences."""

from __future__ import annotations

import re

from rich.color import ColorSystem
from rich.style import Style

# ESC [ <digits and semicolons> <letter>; compiled once, never mutated
ANSI_ESCAPE = re.compile(r'\x1b\[[0-9;]*[A-Za-z]')


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE.sub('', text)


def ansi_width(text: str) -> int:
    """Number of code points left once styling sequences are removed.

    A partial sequence that does not match the pattern is counted as
    ordinary characters.
    """
    return len(strip_ansi(text))


def pad_visible(text: str, width: int) -> str:
    return text + ' ' * max(width - ansi_width(text), 0)


def paint(text: str, style: Style | None, color: bool = True) -> str:
    if style is None or not color:
        return text
    return style.render(text, color_system=ColorSystem.TRUECOLOR)
