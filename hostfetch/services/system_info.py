from __future__ import annotations

import asyncio
import logging
import os
import platform
import pwd
from dataclasses import dataclass
from pathlib import Path

import psutil

from ..exceptions import HostnameNotFound
from .device import DeviceIdentity
from .hostname import HostnameResolver
from .monitor import MemoryUsage, boot_uptime, read_memory, read_swap
from .os_release import OsIdentity
from .probe import CallableDetector, CommandDetector, EnvDetector, FactProbe, FileDetector
from .system_cmd import CommandRunner, RealCommandRunner

logger = logging.getLogger(__name__)

TERMINAL_MARKERS = (
    ('KONSOLE_VERSION', 'Konsole'),
    ('VTE_VERSION', 'GNOME Terminal'),
    ('ALACRITTY_LOG', 'Alacritty'),
    ('KITTY_PID', 'Kitty'),
    ('TERMUX_VERSION', 'Termux'),
    ('WEZTERM_EXECUTABLE', 'WezTerm'),
)

KNOWN_TERMINALS = (
    ('gnome-terminal', 'GNOME Terminal'),
    ('xfce4-terminal', 'XFCE Terminal'),
    ('lxterminal', 'LXTerminal'),
    ('terminator', 'Terminator'),
    ('alacritty', 'Alacritty'),
    ('wezterm', 'WezTerm'),
    ('konsole', 'Konsole'),
    ('termux', 'Termux'),
    ('xterm', 'XTerm'),
    ('tilix', 'Tilix'),
    ('urxvt', 'URxvt'),
    ('kitty', 'Kitty'),
    ('st', 'ST'),
)

_runner = RealCommandRunner()


def _marker_terminal() -> str | None:
    for var, label in TERMINAL_MARKERS:
        if var in os.environ:
            return label
    return None


def match_terminal(process_name: str) -> str | None:
    name = process_name.strip().lower()
    for pattern, label in KNOWN_TERMINALS:
        # 'st' is too short for a substring match
        if name == pattern or (len(pattern) > 2 and pattern in name):
            return label
    return None


def _ancestor_terminal() -> str | None:
    try:
        ancestors = psutil.Process().parents()
        for proc in ancestors:
            label = match_terminal(proc.name())
            if label:
                return label
    except psutil.Error as exc:
        logger.debug('cannot inspect parent processes: %s', exc)
    return None


def _login_name() -> str | None:
    try:
        return pwd.getpwuid(os.getuid()).pw_name
    except KeyError:
        return None


def _loadavg() -> str:
    one, five, fifteen = os.getloadavg()
    return f'{one:.2f}, {five:.2f}, {fifteen:.2f}'


def parse_proc_loadavg(text: str) -> str | None:
    parts = text.split()[:3]
    if len(parts) < 3:
        return None
    return ', '.join(f'{float(part):.2f}' for part in parts)


def shell_name(value: str) -> str:
    return value.rstrip('/').rsplit('/', 1)[-1]


def kernel_probe(root: Path, runner: CommandRunner) -> FactProbe:
    return FactProbe(
        'kernel',
        [
            FileDetector(root / 'proc' / 'sys' / 'kernel' / 'osrelease'),
            CallableDetector(platform.release),
            CommandDetector(('uname', '-r'), runner),
        ],
        default='Unknown',
    )


def uptime_probe(runner: CommandRunner) -> FactProbe:
    return FactProbe(
        'uptime',
        [
            CommandDetector(('uptime', '-p'), runner),
            CallableDetector(boot_uptime),
        ],
        default='Unknown',
    )


def load_average_probe(root: Path) -> FactProbe:
    return FactProbe(
        'load average',
        [
            CallableDetector(_loadavg, 'getloadavg'),
            FileDetector(root / 'proc' / 'loadavg', parse_proc_loadavg),
        ],
        default='N/A',
    )


def terminal_probe() -> FactProbe:
    return FactProbe(
        'terminal',
        [
            CallableDetector(_marker_terminal, 'terminal markers'),
            EnvDetector(('TERM_PROGRAM',)),
            CallableDetector(_ancestor_terminal, 'parent processes'),
            EnvDetector(('TERM',)),
        ],
        default='unknown',
    )


def shell_probe() -> FactProbe:
    return FactProbe('shell', [EnvDetector(('SHELL',), shell_name)], default='unknown')


def locale_probe() -> FactProbe:
    return FactProbe('locale', [EnvDetector(('LC_ALL', 'LANG'))], default='unknown')


def username_probe() -> FactProbe:
    return FactProbe(
        'user',
        [
            CallableDetector(_login_name, 'passwd'),
            EnvDetector(('USER', 'LOGNAME')),
        ],
        default='unknown',
    )


@dataclass(frozen=True)
class Facts:
    username: str
    hostname: str | None
    device: str
    os: str
    kernel: str
    uptime: str
    load_average: str
    memory: MemoryUsage
    swap: MemoryUsage | None
    terminal: str
    shell: str
    locale: str
    hostname_error: str | None = None


async def _hostname(root: Path, runner: CommandRunner) -> tuple[str | None, str | None]:
    try:
        return await HostnameResolver(root, runner).resolve(), None
    except HostnameNotFound as exc:
        return None, str(exc)


async def collect_facts(root: Path = Path('/'), runner: CommandRunner | None = None) -> Facts:
    runner = runner or _runner
    (
        username,
        (hostname, hostname_error),
        device,
        os_name,
        kernel,
        uptime,
        load_average,
        terminal,
        shell,
        locale,
    ) = await asyncio.gather(
        username_probe().resolve(),
        _hostname(root, runner),
        DeviceIdentity(root, runner).resolve(),
        OsIdentity(root, runner).resolve(),
        kernel_probe(root, runner).resolve(),
        uptime_probe(runner).resolve(),
        load_average_probe(root).resolve(),
        terminal_probe().resolve(),
        shell_probe().resolve(),
        locale_probe().resolve(),
    )
    return Facts(
        username=username,
        hostname=hostname,
        device=device,
        os=os_name,
        kernel=kernel,
        uptime=uptime,
        load_average=load_average,
        memory=read_memory(),
        swap=read_swap(),
        terminal=terminal,
        shell=shell,
        locale=locale,
        hostname_error=hostname_error,
    )
