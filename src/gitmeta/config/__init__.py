"""git-meta configuration.

Loading, validation and typed access to configuration values.

Example:
    >>> from gitmeta.config import load_config
    >>> config = load_config()
    >>> config.clone.origin
    'origin'
"""

from gitmeta.config._load import load_config, safe_load_config
from gitmeta.config._loader import (
    deep_merge,
    get_user_config_path,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from gitmeta.config._models import (
    CloneConfig,
    GitMetaConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ResolveConfig,
)
from gitmeta.exceptions import ConfigError, ConfigLoadError

__all__ = [
    "CloneConfig",
    "ConfigError",
    "ConfigLoadError",
    "GitMetaConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ResolveConfig",
    "deep_merge",
    "get_user_config_path",
    "load_config",
    "parse_env_vars",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
]
