"""Configuration models.

This module provides the Pydantic models for git-meta settings and the
classmethods that build them from dictionaries, TOML files and the
environment.
"""

from enum import StrEnum
from pathlib import Path  # noqa: TC003 - Used at runtime in method bodies
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitmeta.config._loader import (
    deep_merge,
    get_user_config_path,
    parse_env_vars,
    read_toml_file,
)
from gitmeta.exceptions import ConfigError


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold. None defers to GITMETA_LOG_LEVEL, then
            warning.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel | None = None
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class CloneConfig(BaseModel):
    """Clone configuration section.

    Attributes:
        git_executable: git CLI used for depth-limited clones.
        origin: Name given to the remote a clone is made from.
        timeout_seconds: Limit for a git CLI clone; None waits indefinitely.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    git_executable: str = "git"
    origin: str = Field(default="origin", min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0)


class ResolveConfig(BaseModel):
    """Commit resolution configuration section.

    Attributes:
        short_sha_length: Number of hex characters in a display hash.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    short_sha_length: int = Field(default=7, ge=4, le=40)


class GitMetaConfig(BaseModel):
    """Top-level git-meta configuration.

    Example:
        >>> config = GitMetaConfig.load()
        >>> config.resolve.short_sha_length
        7
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    clone: CloneConfig = Field(default_factory=CloneConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:  # pyright: ignore[reportExplicitAny]
        """Create configuration from a dictionary.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Configuration object from the dictionary.

        Raises:
            ConfigError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigError(msg) from e

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a specific file.

        Args:
            path: Path to the TOML config file.

        Returns:
            Configuration object from the specified file only.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigLoadError: If the file cannot be parsed.
            ConfigError: If validation fails.
        """
        return cls.from_dict(read_toml_file(path))

    @classmethod
    def load(
        cls,
        *,
        config_path: Path | None = None,
        include_env: bool = True,
    ) -> Self:
        """Load merged configuration from all sources.

        Sources merge in precedence order: defaults, user config file,
        explicit config file, environment.

        Args:
            config_path: Explicit TOML file to layer over the user config.
                It must exist.
            include_env: Include GITMETA_<SECTION>__<KEY> environment variables.

        Returns:
            Merged configuration object.

        Raises:
            FileNotFoundError: If config_path does not exist.
            ConfigLoadError: If a config file cannot be parsed.
            ConfigError: If the merged values fail validation.
        """
        data: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]

        user_path = get_user_config_path()
        if user_path.is_file():
            data = deep_merge(data, read_toml_file(user_path))

        if config_path is not None:
            data = deep_merge(data, read_toml_file(config_path))

        if include_env:
            data = deep_merge(data, parse_env_vars())

        return cls.from_dict(data)
