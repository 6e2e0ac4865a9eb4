from __future__ import annotations

import os
import tomllib
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias

from tupledict.algorithms import resolve_algorithm

DEFAULT_CONFIG_NAME = "tupledict.toml"
DEFAULT_HASH_ALGORITHM = "sha256"
HASH_ALGORITHM_ENV = "TUPLEDICT_HASH_ALGORITHM"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError):
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def dictionary_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("dictionary", {})
    return section if isinstance(section, dict) else {}


def env_text(name: str, *, default: str = "") -> str:
    return os.getenv(name, default).strip()


def configured_hash_algorithm(
    root: Path | None = None, config_path: Path | None = None
) -> str:
    """Resolve the digest algorithm: environment, then config file, then default.

    An unknown name from either source raises ``UnsupportedAlgorithm``.
    """
    from_env = env_text(HASH_ALGORITHM_ENV)
    if from_env:
        return resolve_algorithm(from_env)
    section = dictionary_defaults(root=root, config_path=config_path)
    configured = section.get("hash_algorithm")
    if configured is None:
        return DEFAULT_HASH_ALGORITHM
    return resolve_algorithm(configured)
