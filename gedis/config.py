"""Server configuration loaded from a YAML file."""

from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field
from typing import Any, Union

import yaml

DEFAULT_PATH = "conf.yaml"


@dataclass
class TcpConfig:
    """Network settings."""

    addr: str = ""


@dataclass
class DatabaseConfig:
    """Storage settings; a count of 0 means the default number of databases."""

    count: int = 0
    append_only: bool = False
    aof_filename: str = ""


@dataclass
class Config:
    """The whole server configuration."""

    tcp: TcpConfig = field(default_factory=TcpConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"config section {name!r} must be a mapping")
    return section


def _typed(section: dict, key: str, kind: type, default: Any) -> Any:
    value = section.get(key, default)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise ValueError(f"config value {key!r} must be an integer")
    if not isinstance(value, kind):
        raise ValueError(f"config value {key!r} must be of type {kind.__name__}")
    return value


def load_config(path: Union[str, "os.PathLike[str]"]) -> Config:
    """Read a configuration file; unknown keys are ignored."""
    with open(path, "rb") as stream:
        try:
            raw = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid configuration: {exc}") from exc
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValueError("configuration must be a mapping")
    tcp = _section(raw, "tcp")
    database = _section(raw, "database")
    return Config(
        tcp=TcpConfig(addr=_typed(tcp, "addr", str, "")),
        database=DatabaseConfig(
            count=_typed(database, "count", int, 0),
            append_only=_typed(database, "append_only", bool, False),
            aof_filename=_typed(database, "aof_filename", str, ""),
        ),
    )


@functools.lru_cache(maxsize=None)
def get_config() -> Config:
    """Load ``conf.yaml`` from the working directory once and reuse it."""
    return load_config(DEFAULT_PATH)