"""Standalone structlog loggers for git-meta.

Loggers built here never touch global structlog or stdlib logging
configuration, so an application embedding git-meta keeps control of its own
logging. Events are snake_case with key/value context; credentials are never
passed as context.
"""

import logging
import sys
from functools import cache
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from gitmeta.config import LoggingConfig

LogFormatType = Literal["json", "text"]


def _effective_level(level: str | None) -> int:
    """Pick the level: GITMETA_DEBUG, then ``level``, then GITMETA_LOG_LEVEL."""
    if getenv("GITMETA_DEBUG"):
        return logging.DEBUG
    name = level if level is not None else getenv("GITMETA_LOG_LEVEL", "warning")
    return logging.getLevelNamesMapping().get(name.upper(), logging.WARNING)


def _rotating_sink(log_path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Logger:
    # A private, non-propagating stdlib logger so rotation is handled by
    # RotatingFileHandler while structlog does the rendering.
    sink = logging.getLogger(f"gitmeta.{log_path.stem}.{id(log_path)}")
    sink.handlers.clear()
    sink.propagate = False
    sink.setLevel(level)
    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    sink.addHandler(handler)
    return sink


def create_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "text",
    log_file: str = "",
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> "FilteringBoundLogger":
    """Create a standalone structlog logger.

    The log level is determined by (in order of precedence):
    1. GITMETA_DEBUG environment variable (if set, enables DEBUG level)
    2. The `level` parameter (if provided)
    3. GITMETA_LOG_LEVEL environment variable
    4. Default: WARNING

    Args:
        level: Optional log level name (debug, info, warning, error).
        log_format: ``json`` for one JSON object per line, ``text`` for
            ``timestamp [level] event key=value`` lines.
        log_file: File to append to. Empty writes to stderr.
        max_bytes: Rotate the log file at this size. Only used together with
            backup_count and a log_file.
        backup_count: Number of rotated files to keep.

    Returns:
        A FilteringBoundLogger dropping events below the effective level.
    """
    effective_level = _effective_level(level)

    raw_logger: object
    if not log_file:
        raw_logger = structlog.WriteLoggerFactory(file=sys.stderr)()
    else:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if max_bytes is not None and backup_count is not None:
            raw_logger = _rotating_sink(log_path, effective_level, max_bytes, backup_count)
        else:
            raw_logger = structlog.WriteLoggerFactory(file=log_path.open("a"))()

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "json":
        processors.extend(
            [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )


def logger_from_config(config: "LoggingConfig") -> "FilteringBoundLogger":
    """Create a logger from the ``[logging]`` config section."""
    return create_logger(
        level=str(config.level) if config.level is not None else None,
        log_format=cast("LogFormatType", str(config.format)),
        log_file=config.file,
    )


@cache
def get_logger() -> "FilteringBoundLogger":
    """Get the shared git-meta logger.

    Built once from the discovered configuration. Call
    ``get_logger.cache_clear()`` to pick up configuration changes.
    """
    from gitmeta.config import safe_load_config  # noqa: PLC0415

    config, error = safe_load_config()
    logger = logger_from_config(config.logging)
    if error is not None:
        logger.warning("config_load_failed", error=error)
    return logger
