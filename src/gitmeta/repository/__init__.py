"""Repository metadata access.

This package opens local git repositories and answers read-only questions
about them: which commit an identifier names, which branch is checked out and
what it tracks, and which files a commit changed.

Classes:
    RepoHandle: Owner of an opened repository's object store.

Models:
    CommitMeta: Metadata about a single commit.
    BranchInfo: Local branch, tracking branch and shallow state.
    ChangedFileSet: Sorted set of changed paths.
    Resolved, Ambiguous, NotFound: Outcomes of expanding a partial identifier.
    CommitResolution: Type alias for Resolved | Ambiguous | NotFound.

Example:
    >>> from gitmeta.repository import RepoHandle, changed_files_at, resolve_full
    >>> with RepoHandle.open("/path/to/repo") as handle:
    ...     commit = resolve_full(handle, "c097ad2")
    ...     print(changed_files_at(handle, commit).paths)
"""

from gitmeta.repository._branches import (
    is_shallow,
    new_commits_exist,
    remote_branch_heads,
    resolve_branch,
)
from gitmeta.repository._commits import (
    commit_to_meta,
    expand,
    read_commit,
    resolve_full,
    resolve_head,
    resolve_parent,
    resolve_ref,
)
from gitmeta.repository._diff import (
    changed_files_at,
    changed_files_between,
    has_path_changed,
    has_path_changed_between,
)
from gitmeta.repository._handle import RepoHandle
from gitmeta.repository._models import (
    Ambiguous,
    BranchInfo,
    ChangedFileSet,
    CommitMeta,
    CommitResolution,
    NotFound,
    Resolved,
    TrackingSource,
)

__all__ = [
    "Ambiguous",
    "BranchInfo",
    "ChangedFileSet",
    "CommitMeta",
    "CommitResolution",
    "NotFound",
    "RepoHandle",
    "Resolved",
    "TrackingSource",
    "changed_files_at",
    "changed_files_between",
    "commit_to_meta",
    "expand",
    "has_path_changed",
    "has_path_changed_between",
    "is_shallow",
    "new_commits_exist",
    "read_commit",
    "remote_branch_heads",
    "resolve_branch",
    "resolve_full",
    "resolve_head",
    "resolve_parent",
    "resolve_ref",
]
