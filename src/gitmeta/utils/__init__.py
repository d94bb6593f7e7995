"""Utility helpers for git-meta.

Logger factories and small git helpers shared by the repository and clone
packages.
"""

from gitmeta.utils._git import (
    decode_bytes,
    decode_path,
    is_hex,
    local_branch_ref,
    parse_identity,
    remote_branch_ref,
    strip_refs_heads,
    timestamp_to_utc,
)
from gitmeta.utils._logging import (
    LogFormatType,
    create_logger,
    get_logger,
    logger_from_config,
)

__all__ = [
    "LogFormatType",
    "create_logger",
    "decode_bytes",
    "decode_path",
    "get_logger",
    "is_hex",
    "local_branch_ref",
    "logger_from_config",
    "parse_identity",
    "remote_branch_ref",
    "strip_refs_heads",
    "timestamp_to_utc",
]
