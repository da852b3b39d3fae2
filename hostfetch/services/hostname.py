from __future__ import annotations

import socket
from pathlib import Path

from ..exceptions import CategoryUnresolved, HostnameNotFound
from .probe import CallableDetector, CommandDetector, EnvDetector, FactProbe, FileDetector
from .system_cmd import CommandRunner, RealCommandRunner

HOSTNAME_ENV_VARS = ('HOSTNAME', 'DHCP_HOSTNAME')

_runner = RealCommandRunner()


def _strip_newline(text: str) -> str:
    return text.rstrip('\n')


def _until_nul(text: str) -> str:
    return text.split('\x00', 1)[0]


def system_hostname() -> str:
    return _strip_newline(_until_nul(socket.gethostname()))


class HostnameResolver(FactProbe):
    def __init__(self, root: Path = Path('/'), runner: CommandRunner | None = None):
        super().__init__(
            'hostname',
            [
                CallableDetector(system_hostname, 'gethostname'),
                FileDetector(root / 'proc' / 'sys' / 'kernel' / 'hostname', _strip_newline),
                CommandDetector(('hostname',), runner or _runner, _strip_newline),
                EnvDetector(HOSTNAME_ENV_VARS),
            ],
        )

    async def resolve(self) -> str:
        try:
            return await super().resolve()
        except CategoryUnresolved as exc:
            raise HostnameNotFound() from exc


async def get_hostname(root: Path = Path('/'), runner: CommandRunner | None = None) -> str:
    return await HostnameResolver(root, runner).resolve()
