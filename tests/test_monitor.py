from __future__ import annotations

from types import SimpleNamespace

import psutil
import pytest

from hostfetch.exceptions import SourceUnavailable
from hostfetch.services import monitor
from hostfetch.services.monitor import MemoryUsage, format_size, format_uptime


def test_format_size_units():
    assert format_size(512) == '512B'
    assert format_size(1024) == '1KB'
    assert format_size(1536) == '1.5KB'
    assert format_size(8 * 1024**3) == '8GB'
    assert format_size(3 * 1024**5) == '3072TB'


def test_memory_usage_formatting():
    usage = MemoryUsage(used=3 * 1024**3, total=12 * 1024**3)

    assert usage.formatted_usage() == '3GB / 12GB'
    assert usage.formatted_percent() == '25%'
    assert MemoryUsage(used=0, total=0).percent == 0.0


def test_read_memory_uses_psutil(monkeypatch):
    monkeypatch.setattr(monitor.psutil, 'virtual_memory', lambda: SimpleNamespace(used=100, total=400))

    assert monitor.read_memory() == MemoryUsage(used=100, total=400)


def test_read_swap_disabled_when_total_is_zero(monkeypatch):
    monkeypatch.setattr(monitor.psutil, 'swap_memory', lambda: SimpleNamespace(total=0, free=0))

    assert monitor.read_swap() is None


def test_read_swap_used_is_total_minus_free(monkeypatch):
    monkeypatch.setattr(monitor.psutil, 'swap_memory', lambda: SimpleNamespace(total=1000, free=250))

    assert monitor.read_swap() == MemoryUsage(used=750, total=1000)


def test_format_uptime_like_uptime_p():
    assert format_uptime(30) == 'up 0 minutes'
    assert format_uptime(60) == 'up 1 minute'
    assert format_uptime(2 * 3600 + 5 * 60) == 'up 2 hours, 5 minutes'
    assert format_uptime(86400 + 3600) == 'up 1 day, 1 hour'


def test_boot_uptime(monkeypatch):
    monkeypatch.setattr(monitor.psutil, 'boot_time', lambda: 1000.0)
    monkeypatch.setattr(monitor.time, 'time', lambda: 1000.0 + 3 * 86400 + 120)

    assert monitor.boot_uptime() == 'up 3 days, 2 minutes'


def test_boot_uptime_psutil_failure_is_unavailable(monkeypatch):
    def _denied():
        raise psutil.AccessDenied()

    monkeypatch.setattr(monitor.psutil, 'boot_time', _denied)

    with pytest.raises(SourceUnavailable):
        monitor.boot_uptime()
