"""git-meta: read-only git metadata for build and CI tooling.

Open or clone a repository, resolve commit identifiers and branches, and list
the files a commit changed.

Example:
    >>> from gitmeta import RepoHandle, changed_files_at, resolve_head
    >>> with RepoHandle.open(".") as handle:
    ...     head = resolve_head(handle)
    ...     print(head.short_sha, changed_files_at(handle, head).paths)
"""

from gitmeta.clone import (
    CredentialSpec,
    SshKeyCredential,
    UserPassCredential,
    clone_repository,
    resolve_credentials,
)
from gitmeta.exceptions import (
    AmbiguousCommitId,
    BranchNotFound,
    CloneAuthFailed,
    CloneError,
    CloneNetworkError,
    CommitNotFound,
    DestinationExists,
    DiffComputationError,
    GitMetaError,
    InvalidCredential,
    NotARepository,
    PathNotFound,
    RepositoryError,
    StoreAccessError,
)
from gitmeta.repository import (
    Ambiguous,
    BranchInfo,
    ChangedFileSet,
    CommitMeta,
    CommitResolution,
    NotFound,
    RepoHandle,
    Resolved,
    TrackingSource,
    changed_files_at,
    changed_files_between,
    expand,
    has_path_changed,
    has_path_changed_between,
    is_shallow,
    new_commits_exist,
    remote_branch_heads,
    resolve_branch,
    resolve_full,
    resolve_head,
    resolve_parent,
    resolve_ref,
)

__all__ = [
    "Ambiguous",
    "AmbiguousCommitId",
    "BranchInfo",
    "BranchNotFound",
    "ChangedFileSet",
    "CloneAuthFailed",
    "CloneError",
    "CloneNetworkError",
    "CommitMeta",
    "CommitNotFound",
    "CommitResolution",
    "CredentialSpec",
    "DestinationExists",
    "DiffComputationError",
    "GitMetaError",
    "InvalidCredential",
    "NotARepository",
    "NotFound",
    "PathNotFound",
    "RepoHandle",
    "RepositoryError",
    "Resolved",
    "SshKeyCredential",
    "StoreAccessError",
    "TrackingSource",
    "UserPassCredential",
    "changed_files_at",
    "changed_files_between",
    "clone_repository",
    "expand",
    "has_path_changed",
    "has_path_changed_between",
    "is_shallow",
    "new_commits_exist",
    "remote_branch_heads",
    "resolve_branch",
    "resolve_credentials",
    "resolve_full",
    "resolve_head",
    "resolve_parent",
    "resolve_ref",
]
