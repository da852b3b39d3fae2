from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource

from .exceptions import ConfigError
from .schemas import HostfetchConfig

logger = logging.getLogger(__name__)


def _default_config_file() -> Path:
    return Path.home() / '.config' / 'hostfetch' / 'config.toml'


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='HOSTFETCH_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    config_file: Path = Field(default_factory=_default_config_file)
    log_level: Literal['debug', 'info', 'warning', 'error'] = 'warning'
    command_timeout_sec: int = Field(default=2, ge=1, le=60)


settings = Settings()


DEFAULT_CONFIG_TOML = '''\
[host]
color = "magenta"
styles = ["bold"]

[position]
# set 0 to hide element
os_order = 1
host_order = 2
terminal_order = 3
shell_order = 4
kernel_order = 5
uptime_order = 6
load_average_order = 7
ram_order = 8
swap_order = 9
locale_order = 10

[info]
main_color = "white"
main_styles = ["italic"]
secondary_color = "blue"
secondary_styles = ["bold"]
border_color = "blue"
show_names = true

[icons]
enabled = true
color = "green"
'''


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=str(path.parent))
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


def ensure_config_file(path: Path | None = None) -> Path:
    config_path = Path(path or settings.config_file).expanduser()
    if not config_path.exists():
        logger.info('writing default configuration to %s', config_path)
        _atomic_write_text(config_path, DEFAULT_CONFIG_TOML)
    return config_path


def load_or_create(path: Path | None = None) -> HostfetchConfig:
    try:
        config_path = ensure_config_file(path)
        data = TomlConfigSettingsSource(HostfetchConfig, toml_file=config_path)()
        return HostfetchConfig(**data)
    except OSError as exc:
        raise ConfigError(f'Cannot access configuration file: {exc}') from exc
    except ValueError as exc:
        # TOMLDecodeError and pydantic.ValidationError are both ValueErrors
        raise ConfigError(f'Invalid configuration file: {exc}') from exc
