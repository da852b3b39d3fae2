from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .probe import FactProbe, PropertyDetector, first_valid, read_source
from .system_cmd import CommandRunner, RealCommandRunner

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE = 'Unknown Device'

MARKETING_NAME_KEYS = (
    'ro.product.marketname',
    'ro.vendor.product.marketname',
    'ro.product.vendor.marketname',
    'ro.config.marketing_name',
)
MODEL_KEYS = (
    'ro.product.model',
    'ro.product.vendor.model',
    'ro.product.system.model',
)
BRAND_KEYS = (
    'ro.product.brand',
    'ro.product.manufacturer',
    'ro.product.vendor.brand',
)

DMI_DIRS = ('sys/class/dmi/id', 'sys/devices/virtual/dmi/id')
DEVICE_TREE_MODELS = ('proc/device-tree/model', 'sys/firmware/devicetree/base/model')

_REDUNDANT_BRAND = 'Raspberry Pi'

_runner = RealCommandRunner()


def split_vendor_model(text: str) -> tuple[str | None, str]:
    """Split a device-tree model string into ``(vendor, model)``.

    ``Raspberry Pi`` is kept whole as the vendor; anything else splits on
    the first space. Multi-word vendors come out wrong, e.g.
    ``Pine64 RockPro64`` works but ``Hardkernel Co Ltd ODROID`` does not.
    """
    text = text.strip()
    if text.startswith(_REDUNDANT_BRAND + ' '):
        return _REDUNDANT_BRAND, text[len(_REDUNDANT_BRAND):].strip()
    vendor, sep, model = text.partition(' ')
    if not sep or not model.strip():
        return None, text
    return vendor, model.strip()


def compose_device_name(vendor: str | None, model: str | None) -> str:
    if vendor and model:
        if model.casefold().startswith(vendor.casefold()):
            return model
        return f'{vendor} {model}'
    return model or vendor or UNKNOWN_DEVICE


def _read_candidate(path: Path) -> str | None:
    # denied paths count as missing
    try:
        return first_valid([read_source(path)])
    except OSError as exc:
        logger.debug('%s unreadable (%s)', path, exc)
        return None


def parse_cpuinfo(text: str) -> str | None:
    fields: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition(':')
        if not sep:
            continue
        key = key.strip().lower()
        if key in ('hardware', 'model name') and key not in fields:
            fields[key] = value.strip()
    return first_valid((fields.get('hardware'), fields.get('model name')))


@dataclass(frozen=True)
class DmiDetector:
    root: Path
    fields: tuple[str, ...]

    @property
    def name(self) -> str:
        return 'dmi:' + ','.join(self.fields)

    async def probe(self) -> str | None:
        for field in self.fields:
            for directory in DMI_DIRS:
                value = _read_candidate(self.root / directory / field)
                if value is not None:
                    return value
        return None


@dataclass(frozen=True)
class DeviceTreeDetector:
    root: Path
    part: str = 'model'

    @property
    def name(self) -> str:
        return f'device-tree:{self.part}'

    async def probe(self) -> str | None:
        for rel in DEVICE_TREE_MODELS:
            combined = _read_candidate(self.root / rel)
            if combined is None:
                continue
            vendor, model = split_vendor_model(combined)
            return vendor if self.part == 'vendor' else model
        return None


@dataclass(frozen=True)
class CpuInfoDetector:
    path: Path

    @property
    def name(self) -> str:
        return str(self.path)

    async def probe(self) -> str | None:
        text = read_source(self.path)
        if text is None:
            return None
        return parse_cpuinfo(text)


class DeviceIdentity:
    """Marketing name of the machine, e.g. ``LENOVO ThinkPad X1 Carbon``."""

    def __init__(self, root: Path = Path('/'), runner: CommandRunner | None = None):
        runner = runner or _runner
        self.model_probe = FactProbe(
            'device model',
            [
                PropertyDetector(MARKETING_NAME_KEYS, runner, root),
                DmiDetector(root, ('product_name', 'product_version')),
                DeviceTreeDetector(root, 'model'),
                PropertyDetector(MODEL_KEYS, runner, root),
                DmiDetector(root, ('board_name',)),
                CpuInfoDetector(root / 'proc' / 'cpuinfo'),
            ],
        )
        self.vendor_probe = FactProbe(
            'device vendor',
            [
                PropertyDetector(BRAND_KEYS, runner, root),
                DmiDetector(root, ('sys_vendor', 'board_vendor')),
                DeviceTreeDetector(root, 'vendor'),
            ],
        )

    async def resolve(self) -> str:
        model = await self.model_probe.probe()
        vendor = await self.vendor_probe.probe()
        return compose_device_name(vendor, model)


async def get_device_name(root: Path = Path('/'), runner: CommandRunner | None = None) -> str:
    return await DeviceIdentity(root, runner).resolve()
