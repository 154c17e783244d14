"""Command-line and config-file settings."""

from __future__ import annotations

import argparse
import os
import re
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_PATH = "~/.sharptask/config.toml"
DEFAULT_TASK_PATH = "~/.task"

_ENV_VAR = re.compile(r"\$(?:\{(?P<braced>[^}]*)\}|(?P<plain>[A-Za-z0-9_]+))")


class Direction(Enum):
    MD_TO_TC = "md-to-tc"
    TC_TO_MD = "tc-to-md"


def _is_zone(name: str) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def local_timezone_name() -> str:
    """Name of the local timezone, or "UTC" when it cannot be determined."""
    candidates = []
    env_tz = os.environ.get("TZ")
    if env_tz:
        candidates.append(env_tz.lstrip(":"))
    try:
        candidates.append(Path("/etc/timezone").read_text(encoding="utf-8").strip())
    except OSError:
        pass
    try:
        target = str(Path("/etc/localtime").resolve())
        _, sep, name = target.partition("zoneinfo/")
        if sep:
            candidates.append(name)
    except OSError:
        pass
    for name in candidates:
        if _is_zone(name):
            return name
    return "UTC"


@dataclass
class ConfigFile:
    vault_path: Path | None = None
    task_path: Path | None = field(default_factory=lambda: Path(DEFAULT_TASK_PATH))
    timezone: str | None = field(default_factory=local_timezone_name)


@dataclass
class Config:
    vault_path: Path | None
    file_path: Path | None
    task_path: Path
    direction: Direction
    tz: ZoneInfo


def _expand_full(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group("braced") if match.group("braced") is not None else match.group("plain")
        value = os.environ.get(name)
        if value is None:
            raise ValueError(f"Unable to expand environment in path: {name} is not set")
        return value

    return os.path.expanduser(_ENV_VAR.sub(replace, text))


def parse_config_file(config_path: str | os.PathLike[str]) -> ConfigFile:
    """Read a TOML config file; '~' and environment variables in the path are expanded."""
    path = _expand_full(os.fspath(config_path))
    try:
        contents = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise OSError(f"Cannot read config file: {exc}") from exc
    try:
        raw = tomllib.loads(contents)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError("Cannot parse TOML") from exc

    values = {}
    for key in ("vault_path", "task_path", "timezone"):
        if key not in raw:
            continue
        value = raw[key]
        if not isinstance(value, str):
            raise ValueError("Cannot parse TOML")
        values[key] = value if key == "timezone" else Path(value)
    return ConfigFile(**values)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharptask", description="Sync obsidian tasks plugin with taskwarrior"
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("-v", "--vault", type=Path)
    target.add_argument("-f", "--file", type=Path)
    parser.add_argument("-t", "--task-db", type=Path)
    parser.add_argument("-c", "--config", type=Path)
    parser.add_argument("--tz", dest="timezone")
    subcommands = parser.add_subparsers(dest="direction", required=True)
    for direction in Direction:
        subcommands.add_parser(direction.value)
    return parser


def _expand_tilde(path: Path) -> Path:
    return Path(os.path.expanduser(str(path)))


def load(argv: list[str] | None = None) -> Config:
    """Combine command-line flags with the config file; flags take precedence."""
    args = build_parser().parse_args(argv)

    try:
        parsed = parse_config_file(args.config if args.config is not None else DEFAULT_PATH)
    except (OSError, ValueError):
        parsed = ConfigFile()

    vault = args.vault if args.vault is not None else parsed.vault_path
    vault_path = _expand_tilde(vault) if vault is not None else None

    task_db = args.task_db if args.task_db is not None else parsed.task_path
    if task_db is None:
        raise ValueError("Task DB path must be provided via --task-db or config")
    task_path = _expand_tilde(task_db)

    tz_name = args.timezone if args.timezone is not None else parsed.timezone
    if tz_name is None:
        tz_name = local_timezone_name()
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"Unable to parse TZ: {tz_name}") from exc

    return Config(
        vault_path=vault_path,
        file_path=args.file,
        task_path=task_path,
        direction=Direction(args.direction),
        tz=tz,
    )