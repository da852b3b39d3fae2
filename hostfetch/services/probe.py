"""Ordered fallback over fallible fact sources.

A :class:`FactProbe` owns a list of detectors for one category (OS,
device, hostname ...). Detectors are awaited strictly in order; the first
candidate that survives :func:`normalize_candidate` wins and the rest are
never touched. Individual source failures stay inside the probe.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Protocol

from ..exceptions import CategoryUnresolved, InvalidValue, SourceUnavailable
from .system_cmd import CommandRunner

logger = logging.getLogger(__name__)

SENTINEL_VALUES = frozenset(
    value.casefold()
    for value in (
        'Not Specified',
        'Default string',
        'To be filled by O.E.M.',
        'System Product Name',
        'System manufacturer',
        'System Version',
        'Not Applicable',
        'None',
        'O.E.M.',
        'Type1ProductConfigId',
    )
)

ANDROID_MARKER = Path('system/build.prop')


def normalize_candidate(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.replace('\x00', '').replace('\\n', '').strip()
    if not value or value.casefold() in SENTINEL_VALUES:
        return None
    return value


def first_valid(candidates: Iterable[str | None]) -> str | None:
    for candidate in candidates:
        value = normalize_candidate(candidate)
        if value is not None:
            return value
    return None


def read_source(path: Path) -> str | None:
    try:
        raw = path.read_bytes()
    except (FileNotFoundError, NotADirectoryError):
        return None
    return raw.decode(errors='ignore')


def is_android(root: Path) -> bool:
    if sys.platform == 'android':
        return True
    return (root / ANDROID_MARKER).exists()


class Detector(Protocol):
    name: str

    async def probe(self) -> str | None:
        ...


@dataclass(frozen=True)
class FileDetector:
    path: Path
    parse: Callable[[str], str | None] | None = None

    @property
    def name(self) -> str:
        return str(self.path)

    async def probe(self) -> str | None:
        text = read_source(self.path)
        if text is None or self.parse is None:
            return text
        return self.parse(text)


@dataclass(frozen=True)
class EnvDetector:
    names: tuple[str, ...]
    parse: Callable[[str], str | None] | None = None

    @property
    def name(self) -> str:
        return 'env:' + ','.join(self.names)

    async def probe(self) -> str | None:
        for var in self.names:
            value = normalize_candidate(os.environ.get(var))
            if value is None:
                continue
            if self.parse is not None:
                value = normalize_candidate(self.parse(value))
                if value is None:
                    continue
            return value
        return None


@dataclass(frozen=True)
class CommandDetector:
    cmd: tuple[str, ...]
    runner: CommandRunner
    parse: Callable[[str], str | None] | None = None

    @property
    def name(self) -> str:
        return ' '.join(self.cmd)

    async def probe(self) -> str | None:
        result = await self.runner.run(list(self.cmd))
        if not result.success:
            raise SourceUnavailable(f'{self.name} exited with {result.exit_code}: {result.stderr}')
        if self.parse is None:
            return result.stdout
        return self.parse(result.stdout)


@dataclass(frozen=True)
class PropertyDetector:
    """Android system properties, read through ``getprop``.

    Keys are tried in order and each value is normalized on its own, so a
    placeholder under the first key does not hide a real value under the
    next one. Off Android the detector reports nothing without spawning
    anything.
    """

    keys: tuple[str, ...]
    runner: CommandRunner
    root: Path = Path('/')

    @property
    def name(self) -> str:
        return 'getprop:' + ','.join(self.keys)

    async def probe(self) -> str | None:
        if not is_android(self.root):
            return None
        for key in self.keys:
            result = await self.runner.run(['getprop', key])
            if not result.success:
                continue
            value = normalize_candidate(result.stdout)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class CallableDetector:
    func: Callable[[], str | None]
    label: str = ''

    @property
    def name(self) -> str:
        return self.label or getattr(self.func, '__name__', repr(self.func))

    async def probe(self) -> str | None:
        return self.func()


class FactProbe:
    def __init__(self, category: str, detectors: Iterable[Detector] = (), default: str | None = None):
        if default is not None and not default.strip():
            raise ValueError(f'{category}: placeholder default must not be empty')
        self.category = category
        self.default = default
        self._detectors: list[Detector] = list(detectors)

    @property
    def detectors(self) -> list[Detector]:
        return list(self._detectors)

    def add_detector(self, detector: Detector) -> None:
        self._detectors.append(detector)

    async def probe(self) -> str | None:
        """First valid candidate, or ``None`` when every detector fails."""
        for detector in self._detectors:
            try:
                raw = await detector.probe()
            except (SourceUnavailable, InvalidValue, OSError, ValueError) as exc:
                logger.debug('%s: %s unavailable (%s)', self.category, detector.name, exc)
                continue
            value = normalize_candidate(raw)
            if value is None:
                logger.debug('%s: %s gave no usable value', self.category, detector.name)
                continue
            logger.debug('%s resolved by %s', self.category, detector.name)
            return value
        return None

    async def resolve(self) -> str:
        value = await self.probe()
        if value is not None:
            return value
        if self.default is None:
            raise CategoryUnresolved(self.category)
        logger.debug('%s: all sources failed, using %r', self.category, self.default)
        return self.default
