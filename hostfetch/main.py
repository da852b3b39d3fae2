from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TextIO

from .ansi import paint
from .border import content_width, frame_block, frame_centered
from .config import load_or_create, settings
from .exceptions import ConfigError
from .fields import assemble_fields, build_entries
from .schemas import HostfetchConfig
from .services.system_cmd import RealCommandRunner
from .services.system_info import Facts, collect_facts

logger = logging.getLogger(__name__)

__version__ = '0.3.0'


TIMEOUT_RANGE = (1, 60)


def _timeout_seconds(value: str) -> int:
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'invalid int value: {value!r}') from None
    low, high = TIMEOUT_RANGE
    if not low <= seconds <= high:
        raise argparse.ArgumentTypeError(f'must be between {low} and {high} seconds, got {seconds}')
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='hostfetch', description='Print a framed summary of this machine')
    parser.add_argument('--config', type=Path, default=None, help='Path to config.toml (created when missing)')
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=settings.log_level.upper(),
        help='Set the logging level',
    )
    parser.add_argument('--no-color', action='store_true', help='Print without terminal styling')
    parser.add_argument('--no-icons', action='store_true', help='Hide field icons')
    parser.add_argument(
        '--timeout',
        type=_timeout_seconds,
        default=settings.command_timeout_sec,
        help='Seconds to wait for each helper program',
    )
    parser.add_argument('--root', type=Path, default=Path('/'), help=argparse.SUPPRESS)
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def render_report(facts: Facts, config: HostfetchConfig, color: bool = True, icons: bool | None = None) -> str:
    lines = assemble_fields(build_entries(facts, config, color=color, icons=icons))
    border = config.border_style()

    header = None
    if facts.hostname is not None:
        host_style = config.host_style()
        header = paint(facts.username, host_style, color) + paint('@', border, color) + paint(facts.hostname, host_style, color)

    width = content_width(lines)
    if header is not None:
        width = max(width, content_width([header]))

    rows: list[str] = []
    if header is not None:
        rows.extend(frame_centered(header, width, border_style=border, color=color))
    rows.extend(frame_block(lines, width=width, border_style=border, color=color))
    return '\n'.join(rows)


def run(argv: list[str] | None = None, out: TextIO | None = None, err: TextIO | None = None) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=err,
    )

    try:
        config = load_or_create(args.config)
    except ConfigError as exc:
        print(f'hostfetch: {exc}', file=err)
        return 1

    runner = RealCommandRunner(timeout=args.timeout)
    facts = asyncio.run(collect_facts(args.root, runner))
    logger.debug('collected %s', facts)
    if facts.hostname_error:
        print(f'Error getting hostname: {facts.hostname_error}', file=err)

    report = render_report(facts, config, color=not args.no_color, icons=False if args.no_icons else None)
    if report:
        print(report, file=out)
    return 0


def main() -> None:
    raise SystemExit(run())
