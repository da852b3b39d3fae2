from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
from rich.color import Color, ColorParseError
from rich.style import Style

logger = logging.getLogger(__name__)

FIELD_CATEGORIES = (
    'os',
    'host',
    'terminal',
    'shell',
    'kernel',
    'uptime',
    'load_average',
    'ram',
    'swap',
    'locale',
)

_STYLE_FLAGS = {
    'bold': 'bold',
    'italic': 'italic',
    'underline': 'underline',
    'dimmed': 'dim',
    'blink': 'blink',
    'reverse': 'reverse',
}

_FALLBACK_COLOR = Color.parse('white')


def parse_hex(value: str) -> tuple[int, int, int] | None:
    digits = value.strip().lstrip('#')
    try:
        if len(digits) == 3:
            r, g, b = (int(ch, 16) * 17 for ch in digits)
            return r, g, b
        if len(digits) == 6:
            return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return None
    return None


def parse_color(value: str) -> Color:
    """Named color (``red``, ``bright_blue`` ...) or ``#rgb``/``#rrggbb``.

    Anything else falls back to white.
    """
    if value.strip().startswith('#'):
        rgb = parse_hex(value)
        if rgb is not None:
            return Color.from_rgb(*rgb)
    try:
        return Color.parse(value.strip().lower())
    except ColorParseError:
        logger.warning('unknown color %r, using white', value)
        return _FALLBACK_COLOR


def build_style(color: str, styles: list[str] | None = None) -> Style:
    flags: dict[str, Any] = {}
    for name in styles or []:
        flag = _STYLE_FLAGS.get(name.lower())
        if flag is None:
            logger.debug('ignoring unknown style %r', name)
            continue
        flags[flag] = True
    return Style(color=parse_color(color), **flags)


class HostStyle(BaseModel):
    color: str = 'magenta'
    styles: list[str] = Field(default_factory=lambda: ['bold'])


class Position(BaseModel):
    os_order: int = Field(default=1, ge=0, le=255)
    host_order: int = Field(default=2, ge=0, le=255)
    terminal_order: int = Field(default=3, ge=0, le=255)
    shell_order: int = Field(default=4, ge=0, le=255)
    kernel_order: int = Field(default=5, ge=0, le=255)
    uptime_order: int = Field(default=6, ge=0, le=255)
    load_average_order: int = Field(default=7, ge=0, le=255)
    ram_order: int = Field(default=8, ge=0, le=255)
    swap_order: int = Field(default=9, ge=0, le=255)
    locale_order: int = Field(default=10, ge=0, le=255)


class InfoStyle(BaseModel):
    main_color: str = 'white'
    main_styles: list[str] = Field(default_factory=lambda: ['italic'])
    secondary_color: str = 'blue'
    secondary_styles: list[str] = Field(default_factory=lambda: ['bold'])
    border_color: str = 'blue'
    show_names: bool = True


class IconStyle(BaseModel):
    enabled: bool = True
    color: str = 'green'


class HostfetchConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='HOSTFETCH_',
        env_nested_delimiter='__',
        extra='ignore',
    )

    host: HostStyle = Field(default_factory=HostStyle)
    position: Position = Field(default_factory=Position)
    info: InfoStyle = Field(default_factory=InfoStyle)
    icons: IconStyle = Field(default_factory=IconStyle)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # file values arrive as init kwargs; environment overrides them
        return env_settings, init_settings

    def field_orders(self) -> dict[str, int]:
        return {category: getattr(self.position, f'{category}_order') for category in FIELD_CATEGORIES}

    def host_style(self) -> Style:
        return build_style(self.host.color, self.host.styles)

    def main_style(self) -> Style:
        return build_style(self.info.main_color, self.info.main_styles)

    def secondary_style(self) -> Style:
        return build_style(self.info.secondary_color, self.info.secondary_styles)

    def border_style(self) -> Style:
        return build_style(self.info.border_color)

    def icon_style(self) -> Style:
        return build_style(self.icons.color)
