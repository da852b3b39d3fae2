from __future__ import annotations

import time
from dataclasses import dataclass

import psutil

from ..exceptions import SourceUnavailable

_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def format_size(num_bytes: int) -> str:
    size = float(num_bytes)
    unit = 0
    while size >= 1024.0 and unit < len(_UNITS) - 1:
        size /= 1024.0
        unit += 1
    if unit == 0 or size.is_integer():
        return f'{size:.0f}{_UNITS[unit]}'
    return f'{size:.1f}{_UNITS[unit]}'


@dataclass(frozen=True)
class MemoryUsage:
    used: int
    total: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.used / self.total * 100.0

    def formatted_usage(self) -> str:
        return f'{format_size(self.used)} / {format_size(self.total)}'

    def formatted_percent(self) -> str:
        return f'{self.percent:.0f}%'


def read_memory() -> MemoryUsage:
    vm = psutil.virtual_memory()
    return MemoryUsage(used=vm.used, total=vm.total)


def read_swap() -> MemoryUsage | None:
    sw = psutil.swap_memory()
    if sw.total == 0:
        return None
    return MemoryUsage(used=sw.total - sw.free, total=sw.total)


def format_uptime(seconds: float) -> str:
    """Same shape as ``uptime -p``: ``up 1 day, 3 hours, 5 minutes``."""
    minutes_total = int(seconds // 60)
    days, rest = divmod(minutes_total, 24 * 60)
    hours, minutes = divmod(rest, 60)
    parts = []
    for value, unit in ((days, 'day'), (hours, 'hour'), (minutes, 'minute')):
        if value:
            parts.append(f'{value} {unit}' + ('' if value == 1 else 's'))
    if not parts:
        parts.append('0 minutes')
    return 'up ' + ', '.join(parts)


def boot_uptime() -> str:
    try:
        booted = psutil.boot_time()
    except psutil.Error as exc:
        raise SourceUnavailable(f'boot time unavailable: {exc}') from exc
    return format_uptime(time.time() - booted)
