# ruff: noqa: TC003  # datetime needed at runtime for dataclass fields
"""Repository metadata models.

This module defines the immutable value objects produced by the resolvers.
None of them holds a reference to the repository that produced them.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import PurePosixPath
from typing import Self


@dataclass(frozen=True, slots=True)
class CommitMeta:
    """Metadata for a single commit.

    Attributes:
        sha: Full 40-character commit SHA hex string.
        short_sha: Abbreviated display SHA.
        author_name: Author name from commit.
        author_email: Author email from commit.
        committer_name: Committer name from commit.
        committer_email: Committer email from commit.
        timestamp: Commit timestamp as UTC datetime.
        message: Complete commit message (subject + body).
        parent_shas: SHA hex strings of parent commits, in recorded order
            (empty tuple for a root commit).
    """

    sha: str
    short_sha: str
    author_name: str
    author_email: str
    committer_name: str
    committer_email: str
    timestamp: datetime
    message: str
    parent_shas: tuple[str, ...] = ()

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        lines = self.message.splitlines()
        return lines[0] if lines else ""

    @property
    def body(self) -> str:
        """Commit message after the subject line, stripped."""
        _, _, rest = self.message.partition("\n")
        return rest.strip()

    @property
    def is_root(self) -> bool:
        """True if the commit records no parents."""
        return not self.parent_shas


class TrackingSource(StrEnum):
    """How a tracking branch was determined."""

    CONFIGURED = "configured"
    LOOSENED = "loosened"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class BranchInfo:
    """Branch and tracking state for a repository.

    Attributes:
        local_branch: Local branch name, or None when HEAD is detached.
        tracking_branch: Remote tracking branch (e.g. ``origin/main``), or None.
        is_shallow: Whether the repository is a shallow clone.
        remote: Remote name of the tracking branch, or None.
        head_sha: Tip of the local branch (HEAD when detached), or None for
            an unborn branch.
        tracking_source: Which lookup produced tracking_branch.
    """

    local_branch: str | None
    tracking_branch: str | None
    is_shallow: bool
    remote: str | None = None
    head_sha: str | None = None
    tracking_source: TrackingSource = TrackingSource.NONE


@dataclass(frozen=True, slots=True)
class ChangedFileSet:
    """Sorted set of repository-relative paths changed between two commits.

    Membership is all the set records; no add/modify/delete labels.

    Example:
        >>> changed = ChangedFileSet.from_paths(["src/b.py", "README.md", "src/b.py"])
        >>> changed.paths
        ('README.md', 'src/b.py')
        >>> changed.has_path("src")
        True
    """

    paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "paths", tuple(sorted(set(self.paths))))

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> Self:
        """Build a set from paths in any order, dropping duplicates."""
        return cls(paths=tuple(paths))

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def has_path(self, path: str) -> bool:
        """Check whether a file or directory is touched by the change set.

        Args:
            path: Repository-relative file or directory path.

        Returns:
            True if path is a changed file or a directory containing one.
        """
        target = PurePosixPath(path.strip("/"))
        if str(target) in {"", "."}:
            return bool(self.paths)
        return any(
            candidate == target or target in candidate.parents
            for candidate in map(PurePosixPath, self.paths)
        )


# =============================================================================
# Partial identifier resolution outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Resolved:
    """A partial identifier that resolved to exactly one commit."""

    commit: CommitMeta


@dataclass(frozen=True, slots=True)
class Ambiguous:
    """A partial identifier matching several objects.

    Attributes:
        query: The normalized identifier.
        candidates: Every matching full object id, sorted.
    """

    query: str
    candidates: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class NotFound:
    """A partial identifier matching no commit.

    Attributes:
        query: The normalized identifier.
        reason: Why nothing matched (malformed input, no object, not a commit).
    """

    query: str
    reason: str


type CommitResolution = Resolved | Ambiguous | NotFound
