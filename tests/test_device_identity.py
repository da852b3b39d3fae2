from __future__ import annotations

from pathlib import Path

import pytest

from hostfetch.services import device
from hostfetch.services.device import DeviceIdentity, compose_device_name, parse_cpuinfo, split_vendor_model
from hostfetch.services.system_cmd import CommandResult, MockCommandRunner


def _write(root: Path, rel: str, content: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def _android(root: Path) -> None:
    _write(root, 'system/build.prop', '')


@pytest.mark.asyncio
async def test_dmi_product_name_with_vendor(tmp_path):
    _write(tmp_path, 'sys/class/dmi/id/product_name', '20XW0055GE\n')
    _write(tmp_path, 'sys/class/dmi/id/sys_vendor', 'LENOVO\n')

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'LENOVO 20XW0055GE'


@pytest.mark.asyncio
async def test_dmi_placeholder_falls_back_to_product_version(tmp_path):
    _write(tmp_path, 'sys/class/dmi/id/product_name', 'System Product Name\n')
    _write(tmp_path, 'sys/class/dmi/id/product_version', 'ThinkPad X1 Carbon Gen 9\n')
    _write(tmp_path, 'sys/class/dmi/id/sys_vendor', 'To be filled by O.E.M.\n')
    _write(tmp_path, 'sys/class/dmi/id/board_vendor', 'LENOVO\n')

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'LENOVO ThinkPad X1 Carbon Gen 9'


@pytest.mark.asyncio
async def test_device_tree_raspberry_pi_is_not_duplicated(tmp_path):
    _write(tmp_path, 'proc/device-tree/model', 'Raspberry Pi 4 Model B Rev 1.4\x00')

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'Raspberry Pi 4 Model B Rev 1.4'


@pytest.mark.asyncio
async def test_device_tree_second_path(tmp_path):
    _write(tmp_path, 'sys/firmware/devicetree/base/model', 'Radxa CM5 IO\x00')

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'Radxa CM5 IO'


@pytest.mark.asyncio
async def test_cpuinfo_is_last_resort_without_duplicate_vendor(tmp_path):
    _write(
        tmp_path,
        'proc/cpuinfo',
        'processor\t: 0\nBogoMIPS\t: 108.00\n\nHardware\t: Raspberry Pi 4 Model B\nRevision\t: c03114\n',
    )

    name = await DeviceIdentity(tmp_path, MockCommandRunner()).resolve()

    assert name == 'Raspberry Pi 4 Model B'
    assert name.count('Raspberry') == 1


@pytest.mark.asyncio
async def test_board_name_used_before_cpuinfo(tmp_path):
    _write(tmp_path, 'sys/class/dmi/id/product_name', 'Default string\n')
    _write(tmp_path, 'sys/class/dmi/id/board_name', 'PRIME B450M-A\n')
    _write(tmp_path, 'sys/class/dmi/id/board_vendor', 'ASUSTeK COMPUTER INC.\n')
    _write(tmp_path, 'proc/cpuinfo', 'model name\t: AMD Ryzen 5 3600\n')

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'ASUSTeK COMPUTER INC. PRIME B450M-A'


@pytest.mark.asyncio
async def test_nothing_resolves_to_unknown_device(tmp_path):
    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'Unknown Device'


@pytest.mark.asyncio
async def test_android_marketing_name_and_brand(tmp_path):
    _android(tmp_path)

    async def _props(cmd, timeout=None):
        values = {
            'ro.product.marketname': 'Galaxy S23',
            'ro.product.brand': 'samsung',
        }
        value = values.get(cmd[1], '')
        return CommandResult(True, value, '', 0, 0.0)

    runner = MockCommandRunner()
    runner.run = _props

    assert await DeviceIdentity(tmp_path, runner).resolve() == 'samsung Galaxy S23'


@pytest.mark.asyncio
async def test_android_generic_model_wins_over_cpuinfo(tmp_path):
    _android(tmp_path)
    _write(tmp_path, 'proc/cpuinfo', 'Hardware\t: Qualcomm Technologies, Inc SM8550\n')
    asked: list[str] = []

    async def _props(cmd, timeout=None):
        asked.append(cmd[1])
        values = {
            'ro.product.marketname': '',
            'ro.vendor.product.marketname': 'Default string',
            'ro.product.model': 'SM-S911B',
            'ro.product.brand': 'samsung',
        }
        return CommandResult(True, values.get(cmd[1], ''), '', 0, 0.0)

    runner = MockCommandRunner()
    runner.run = _props

    assert await DeviceIdentity(tmp_path, runner).resolve() == 'samsung SM-S911B'
    assert asked.index('ro.config.marketing_name') < asked.index('ro.product.model')


@pytest.mark.asyncio
async def test_denied_dmi_field_falls_through_to_next_candidate(tmp_path, monkeypatch):
    _write(tmp_path, 'sys/class/dmi/id/product_name', 'hidden\n')
    _write(tmp_path, 'sys/class/dmi/id/product_version', 'ThinkPad X1\n')
    _write(tmp_path, 'sys/class/dmi/id/sys_vendor', 'LENOVO\n')
    _write(tmp_path, 'proc/cpuinfo', 'model name\t: Intel Core i7\n')
    real_read = device.read_source

    def _read(path):
        if path.name == 'product_name':
            raise PermissionError(13, 'Permission denied', str(path))
        return real_read(path)

    monkeypatch.setattr(device, 'read_source', _read)

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'LENOVO ThinkPad X1'


@pytest.mark.asyncio
async def test_denied_device_tree_path_tries_second_path(tmp_path, monkeypatch):
    _write(tmp_path, 'proc/device-tree/model', 'Pine64 Pinebook Pro\x00')
    _write(tmp_path, 'sys/firmware/devicetree/base/model', 'Pine64 Pinebook Pro\x00')
    real_read = device.read_source

    def _read(path):
        if 'proc' in path.parts:
            raise PermissionError(13, 'Permission denied', str(path))
        return real_read(path)

    monkeypatch.setattr(device, 'read_source', _read)

    assert await DeviceIdentity(tmp_path, MockCommandRunner()).resolve() == 'Pine64 Pinebook Pro'


@pytest.mark.asyncio
async def test_uses_module_runner_by_default(tmp_path, monkeypatch):
    _android(tmp_path)
    runner = MockCommandRunner(CommandResult(True, 'Pixel 8', '', 0, 0.0))
    monkeypatch.setattr(device, '_runner', runner)

    assert await device.get_device_name(tmp_path) == 'Pixel 8'
    assert runner.calls[0]['cmd'] == ['getprop', 'ro.product.marketname']


def test_split_vendor_model():
    assert split_vendor_model('Raspberry Pi 3 Model B Plus') == ('Raspberry Pi', '3 Model B Plus')
    assert split_vendor_model('Pine64 RockPro64') == ('Pine64', 'RockPro64')
    assert split_vendor_model('Pinebook') == (None, 'Pinebook')


def test_compose_device_name():
    assert compose_device_name('Dell', 'XPS 13') == 'Dell XPS 13'
    assert compose_device_name('Dell', 'Dell XPS 13') == 'Dell XPS 13'
    assert compose_device_name(None, 'XPS 13') == 'XPS 13'
    assert compose_device_name('Dell', None) == 'Dell'
    assert compose_device_name(None, None) == 'Unknown Device'


def test_parse_cpuinfo_prefers_hardware_line():
    text = 'model name\t: ARMv7 Processor rev 4 (v7l)\nHardware\t: BCM2835\n'

    assert parse_cpuinfo(text) == 'BCM2835'
    assert parse_cpuinfo('model name\t: Intel(R) Core(TM) i7\n') == 'Intel(R) Core(TM) i7'
    assert parse_cpuinfo('flags\t: fpu\n') is None
