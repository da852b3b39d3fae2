"""Rounded box-drawing frames around styled lines."""

from __future__ import annotations

from typing import Sequence

from rich.style import Style

from .ansi import ansi_width, pad_visible, paint

TOP_LEFT = '╭'
TOP_RIGHT = '╮'
BOTTOM_LEFT = '╰'
BOTTOM_RIGHT = '╯'
HORIZONTAL = '─'
VERTICAL = '│'


def content_width(lines: Sequence[str]) -> int:
    return max((ansi_width(line) for line in lines), default=0)


def frame_block(
    lines: Sequence[str],
    width: int | None = None,
    border_style: Style | None = None,
    color: bool = True,
) -> list[str]:
    """Frame ``lines`` so every row is ``W + 4`` columns wide.

    ``W`` is the widest visible line, raised to ``width`` when given.
    Nothing is drawn for an empty sequence.
    """
    if not lines:
        return []
    inner = max(content_width(lines), width or 0)
    rule = HORIZONTAL * (inner + 2)
    left = paint(VERTICAL + ' ', border_style, color)
    right = paint(' ' + VERTICAL, border_style, color)

    rows = [paint(TOP_LEFT + rule + TOP_RIGHT, border_style, color)]
    rows.extend(left + pad_visible(line, inner) + right for line in lines)
    rows.append(paint(BOTTOM_LEFT + rule + BOTTOM_RIGHT, border_style, color))
    return rows


def frame_centered(
    text: str,
    width: int,
    border_style: Style | None = None,
    color: bool = True,
) -> list[str]:
    visible = ansi_width(text)
    target = max(width, visible)
    left = (target - visible) // 2
    right = target - visible - left
    return frame_block([' ' * left + text + ' ' * right], width=target, border_style=border_style, color=color)
