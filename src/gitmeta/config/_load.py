"""Error-tolerant configuration loading."""

import os
from typing import TYPE_CHECKING

from gitmeta.config._models import GitMetaConfig
from gitmeta.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


def load_config(*, config_path: "Path | None" = None) -> GitMetaConfig:
    """Load configuration from all sources, raising on any failure.

    Args:
        config_path: Optional explicit TOML file.

    Returns:
        The merged configuration.

    Raises:
        ConfigError: If a source cannot be parsed or validated.
        FileNotFoundError: If config_path does not exist.
    """
    return GitMetaConfig.load(config_path=config_path)


def safe_load_config(
    *,
    config_path: "Path | None" = None,
) -> tuple[GitMetaConfig, str | None]:
    """Load configuration with error handling.

    Handles errors based on the GITMETA_STRICT_CONFIG environment variable:
    - If unset or "0": return the default config and the error message
    - If "1": re-raise the error

    Args:
        config_path: Optional explicit TOML file.

    Returns:
        Tuple of (config, error_message). On success, error_message is None.

    Raises:
        ConfigError: In strict mode, if loading fails.
        OSError: In strict mode, if a config file cannot be read.
    """
    strict_mode = os.environ.get("GITMETA_STRICT_CONFIG", "0") == "1"

    try:
        config = load_config(config_path=config_path)
    except (ConfigError, OSError) as e:
        if strict_mode:
            raise
        return GitMetaConfig(), str(e)
    else:
        return config, None
