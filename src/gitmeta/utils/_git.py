"""Common git helper functions.

Shared byte/string conversion, ref-name handling and identity parsing used by
the repository resolvers.
"""

import re
from datetime import UTC, datetime
from typing import Final

_REFS_HEADS: Final = "refs/heads/"
_REFS_REMOTES: Final = "refs/remotes/"
_REFS_TAGS: Final = "refs/tags/"

_HEX_RE: Final = re.compile(r"[0-9a-f]+")


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def decode_path(value: bytes | str) -> str:
    """Decode a tree path without losing bytes.

    Paths are not guaranteed to be UTF-8. Undecodable bytes become lone
    surrogates, so two distinct byte paths never map to the same string and
    ``path.encode("utf-8", "surrogateescape")`` gives the original bytes back.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="surrogateescape")
    return value


def is_hex(value: str) -> bool:
    """Check that a string is non-empty lower-case hexadecimal."""
    return _HEX_RE.fullmatch(value) is not None


def strip_refs_heads(branch: bytes | str | None) -> str | None:
    """Strip refs/heads/ prefix from a branch reference.

    Args:
        branch: Branch reference (bytes or str), possibly with refs/heads/ prefix.

    Returns:
        Branch name without prefix, or None if input is None.
    """
    if branch is None:
        return None
    branch_str = decode_bytes(branch)
    if branch_str.startswith(_REFS_HEADS):
        return branch_str[len(_REFS_HEADS) :]
    return branch_str


def local_branch_ref(name: str) -> bytes:
    """Build the full ref name for a local branch."""
    return f"{_REFS_HEADS}{name}".encode()


def remote_branch_ref(remote: str, name: str) -> bytes:
    """Build the full ref name for a remote-tracking branch."""
    return f"{_REFS_REMOTES}{remote}/{name}".encode()


def parse_identity(identity: bytes) -> tuple[str, str]:
    """Split a git identity line into name and email.

    Args:
        identity: Identity bytes in "Name <email>" format.

    Returns:
        Tuple of (name, email). Email is empty when the line has none.
    """
    identity_str = decode_bytes(identity)
    if "<" in identity_str and identity_str.endswith(">"):
        name_part, email_part = identity_str.rsplit("<", 1)
        return name_part.strip(), email_part.rstrip(">")
    return identity_str.strip(), ""


def timestamp_to_utc(seconds: int) -> datetime:
    """Convert a git epoch timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=UTC)
