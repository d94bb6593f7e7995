# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""Raw configuration sources: the user TOML file, explicit TOML files and
``GITMETA_<SECTION>__<KEY>`` environment variables.

Everything here works on plain dictionaries. Validation happens once the
sources are merged, in ``GitMetaConfig.from_dict``.
"""

import os
import tomllib
from pathlib import Path
from typing import Any, Final

import platformdirs

from gitmeta.exceptions import ConfigLoadError

ENV_PREFIX: Final = "GITMETA_"
_ENV_SEPARATOR: Final = "__"

type RawConfig = dict[str, Any]  # pyright: ignore[reportExplicitAny]


def get_user_config_path() -> Path:
    r"""Locate the per-user config file.

    ``~/.config/gitmeta/config.toml`` on Linux (respecting XDG_CONFIG_HOME),
    ``~/Library/Application Support/gitmeta/config.toml`` on macOS and
    ``%APPDATA%\gitmeta\config.toml`` on Windows. The file may not exist.
    """
    return platformdirs.user_config_path("gitmeta") / "config.toml"


def read_toml_file(path: Path) -> RawConfig:
    """Parse a TOML config file into a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file is not valid TOML. The error carries the
            line and column tomllib reported.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigLoadError(msg, path=path, line=e.lineno, column=e.colno) from e


def deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    """Layer ``override`` on top of ``base`` without modifying either.

    Tables merge key by key; any other value in ``override`` wins.

    Example:
        >>> deep_merge({"clone": {"origin": "origin", "git_executable": "git"}},
        ...            {"clone": {"origin": "upstream"}})
        {'clone': {'origin': 'upstream', 'git_executable': 'git'}}
    """
    merged: RawConfig = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def set_nested_key(d: RawConfig, key_path: str, value: object) -> None:
    """Store ``value`` under a dotted path such as ``clone.origin``.

    Missing tables are created; a scalar in the way is replaced by a table.
    """
    *tables, leaf = key_path.split(".")
    current = d
    for table in tables:
        child = current.get(table)
        if not isinstance(child, dict):
            child = {}
            current[table] = child
        current = child
    current[leaf] = value


def parse_env_vars(prefix: str = ENV_PREFIX) -> RawConfig:
    """Collect ``<prefix><SECTION>__<KEY>`` variables into nested tables.

    ``GITMETA_CLONE__TIMEOUT_SECONDS=30`` becomes
    ``{"clone": {"timeout_seconds": 30}}``. Variables without a ``__``
    separator (``GITMETA_DEBUG``, ``GITMETA_LOG_LEVEL``) are read by the
    logger, not here.
    """
    values: RawConfig = {}
    for name, raw in os.environ.items():
        if not name.startswith(prefix):
            continue
        key = name.removeprefix(prefix)
        if _ENV_SEPARATOR not in key:
            continue
        set_nested_key(values, key.lower().replace(_ENV_SEPARATOR, "."), _parse_env_value(raw))
    return values


def _parse_env_value(value: str) -> bool | int | float | str:
    """Infer a scalar from an environment string: bool, int, float, else str."""
    lowered = value.strip().lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    if "." in value:
        try:
            return float(value)
        except ValueError:
            pass
    return value
