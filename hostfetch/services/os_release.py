"""Operating system identity.

Android is recognized first through its property store. Everywhere else
the release files are read in order of how much they can be trusted:
``os-release`` first, then the distribution specific legacy files, then
the bare ``debian_version``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..exceptions import InvalidValue
from .probe import FactProbe, FileDetector, first_valid, is_android
from .system_cmd import CommandRunner, RealCommandRunner

UNKNOWN_LINUX = 'Unknown Linux'

ANDROID_VERSION_KEYS = (
    'ro.build.version.release',
    'ro.build.version.release_or_codename',
    'ro.system.build.version.release',
)

LSB_FIELD_MAP = {
    'DISTRIB_DESCRIPTION': 'PRETTY_NAME',
    'DISTRIB_ID': 'NAME',
    'DISTRIB_RELEASE': 'VERSION_ID',
}

_runner = RealCommandRunner()


def clean_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        value = value[1:-1]
    return value.replace('\\n', ' ').replace('\\"', '"').replace("\\'", "'").strip()


def parse_key_values(text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        key, sep, value = line.partition('=')
        if not sep:
            continue
        fields[key.strip()] = clean_value(value)
    return fields


def pretty_name(fields: dict[str, str]) -> str:
    pretty = first_valid([fields.get('PRETTY_NAME')])
    if pretty:
        return pretty
    name = first_valid([fields.get('NAME')])
    version = first_valid([fields.get('VERSION_ID')])
    if name and version:
        return f'{name} {version}'
    if name:
        return name
    if version:
        return f'Unknown OS {version}'
    raise InvalidValue('no PRETTY_NAME, NAME or VERSION_ID')


def parse_os_release(text: str) -> str:
    return pretty_name(parse_key_values(text))


def parse_lsb_release(text: str) -> str:
    fields = parse_key_values(text)
    return pretty_name({LSB_FIELD_MAP[key]: value for key, value in fields.items() if key in LSB_FIELD_MAP})


def parse_free_text(text: str) -> str | None:
    return first_valid(text.splitlines())


def single_field(prefix: str) -> Callable[[str], str | None]:
    def parse(text: str) -> str | None:
        version = first_valid(text.split())
        return f'{prefix} {version}' if version else None

    return parse


@dataclass(frozen=True)
class AndroidDetector:
    root: Path
    runner: CommandRunner

    @property
    def name(self) -> str:
        return 'android'

    async def probe(self) -> str | None:
        if not is_android(self.root):
            return None
        for key in ANDROID_VERSION_KEYS:
            result = await self.runner.run(['getprop', key])
            if not result.success:
                continue
            version = first_valid([result.stdout])
            if version:
                return f'Android {version}'
        return 'Android'


class OsIdentity(FactProbe):
    def __init__(self, root: Path = Path('/'), runner: CommandRunner | None = None):
        super().__init__(
            'OS',
            [
                AndroidDetector(root, runner or _runner),
                FileDetector(root / 'etc' / 'os-release', parse_os_release),
                FileDetector(root / 'usr' / 'lib' / 'os-release', parse_os_release),
                FileDetector(root / 'etc' / 'lsb-release', parse_lsb_release),
                FileDetector(root / 'etc' / 'redhat-release', parse_free_text),
                FileDetector(root / 'etc' / 'SuSE-release', parse_free_text),
                FileDetector(root / 'etc' / 'alpine-release', single_field('Alpine Linux')),
                FileDetector(root / 'etc' / 'debian_version', single_field('Debian')),
            ],
            default=UNKNOWN_LINUX,
        )


async def get_os_info(root: Path = Path('/'), runner: CommandRunner | None = None) -> str:
    return await OsIdentity(root, runner).resolve()
