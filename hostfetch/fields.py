from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from rich.style import Style

from .ansi import ansi_width, pad_visible, paint
from .schemas import FIELD_CATEGORIES, HostfetchConfig
from .services.monitor import MemoryUsage
from .services.system_info import Facts

FIELD_LABELS = {
    'os': 'OS',
    'host': 'Host',
    'terminal': 'Terminal',
    'shell': 'Shell',
    'kernel': 'Kernel',
    'uptime': 'Uptime',
    'load_average': 'Load',
    'ram': 'RAM',
    'swap': 'Swap',
    'locale': 'Locale',
}

# Nerd Font glyphs
FIELD_ICONS = {
    'os': '\uf17c',
    'host': '\uf109',
    'terminal': '\uf120',
    'shell': '\uf489',
    'kernel': '\uf013',
    'uptime': '\uf017',
    'load_average': '\uf0e4',
    'ram': '\uf2db',
    'swap': '\uf1c0',
    'locale': '\uf1ab',
}


@dataclass(frozen=True)
class DisplayLine:
    order: int
    text: str


def assemble_fields(entries: Mapping[str, tuple[int, str]]) -> list[str]:
    """Visible lines, ascending by order.

    Order 0 hides a field. ``sorted`` is stable, so equal orders keep the
    mapping's insertion order.
    """
    lines = [DisplayLine(order, text) for order, text in entries.values() if order > 0]
    return [line.text for line in sorted(lines, key=lambda line: line.order)]


def _usage_value(usage: MemoryUsage | None, config: HostfetchConfig, color: bool) -> str:
    if usage is None:
        return paint('Disabled', config.main_style(), color)
    percent = usage.percent
    if percent < 50:
        tint = 'bold green'
    elif percent < 75:
        tint = 'bold yellow'
    else:
        tint = 'bold red'
    return (
        paint(usage.formatted_usage() + ' (', config.main_style(), color)
        + paint(usage.formatted_percent(), Style.parse(tint), color)
        + paint(')', config.main_style(), color)
    )


def fact_values(facts: Facts) -> dict[str, str | MemoryUsage | None]:
    return {
        'os': facts.os,
        'host': facts.device,
        'terminal': facts.terminal,
        'shell': facts.shell,
        'kernel': facts.kernel,
        'uptime': facts.uptime,
        'load_average': facts.load_average,
        'ram': facts.memory,
        'swap': facts.swap,
        'locale': facts.locale,
    }


def build_entries(
    facts: Facts,
    config: HostfetchConfig,
    color: bool = True,
    icons: bool | None = None,
) -> dict[str, tuple[int, str]]:
    orders = config.field_orders()
    show_icons = config.icons.enabled if icons is None else icons
    shown = [category for category in FIELD_CATEGORIES if orders[category] > 0]
    label_width = max((ansi_width(FIELD_LABELS[category]) for category in shown), default=0)
    values = fact_values(facts)

    entries: dict[str, tuple[int, str]] = {}
    for category in FIELD_CATEGORIES:
        parts = []
        if show_icons:
            parts.append(paint(FIELD_ICONS[category], config.icon_style(), color))
        if config.info.show_names:
            label = paint(FIELD_LABELS[category], config.secondary_style(), color)
            parts.append(pad_visible(label, label_width))
        value = values[category]
        if category in ('ram', 'swap'):
            parts.append(_usage_value(value, config, color))
        else:
            parts.append(paint(str(value), config.main_style(), color))
        entries[category] = (orders[category], ' '.join(parts))
    return entries
