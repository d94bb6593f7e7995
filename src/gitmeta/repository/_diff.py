"""Changed-file computation between commits."""

from typing import TYPE_CHECKING

from dulwich.diff_tree import tree_changes
from dulwich.objects import Commit

from gitmeta.exceptions import CommitNotFound, DiffComputationError, StoreAccessError
from gitmeta.repository._commits import resolve_parent
from gitmeta.repository._models import ChangedFileSet, CommitMeta
from gitmeta.utils import decode_path, get_logger

if TYPE_CHECKING:
    from gitmeta.repository._handle import RepoHandle


def _tree_id(handle: "RepoHandle", commit: CommitMeta) -> bytes:
    try:
        obj = handle.repo.object_store[commit.sha.encode("ascii")]
    except KeyError as e:
        msg = f"Commit {commit.sha} is not in the object store"
        raise DiffComputationError(msg, sha=commit.sha) from e
    except OSError as e:
        msg = f"Cannot read commit {commit.sha}: {e}"
        raise StoreAccessError(msg, path=handle.root) from e
    if not isinstance(obj, Commit):
        msg = f"Object {commit.sha} is not a commit"
        raise DiffComputationError(msg, sha=commit.sha)
    return obj.tree


def _changed_paths(
    handle: "RepoHandle", old_tree: bytes | None, new_tree: bytes, *, sha: str
) -> ChangedFileSet:
    paths: set[str] = set()
    try:
        for change in tree_changes(handle.repo.object_store, old_tree, new_tree):
            for entry in (change.old, change.new):
                if entry is not None and entry.path is not None:
                    paths.add(decode_path(entry.path))
    except KeyError as e:
        msg = f"Cannot read tree while diffing {sha}: missing object {e}"
        raise DiffComputationError(msg, sha=sha) from e
    except OSError as e:
        msg = f"Cannot read trees while diffing {sha}: {e}"
        raise StoreAccessError(msg, path=handle.root) from e
    return ChangedFileSet.from_paths(paths)


def changed_files_between(
    handle: "RepoHandle", from_commit: CommitMeta, to_commit: CommitMeta
) -> ChangedFileSet:
    """Compute the paths that differ between two commits.

    Renames are not detected: a moved file contributes both its old and new
    path. The result is the same whichever commit is given first.

    Args:
        handle: The repository holding both commits.
        from_commit: Base commit.
        to_commit: Target commit.

    Returns:
        The set of added, removed and modified paths.

    Raises:
        DiffComputationError: If a commit or tree is missing from the store.
        StoreAccessError: If the store cannot be read.
    """
    if from_commit.sha == to_commit.sha:
        return ChangedFileSet()

    changed = _changed_paths(
        handle,
        _tree_id(handle, from_commit),
        _tree_id(handle, to_commit),
        sha=to_commit.sha,
    )
    get_logger().debug(
        "diff_computed",
        from_sha=from_commit.sha,
        to_sha=to_commit.sha,
        files_changed=len(changed),
    )
    return changed


def changed_files_at(handle: "RepoHandle", commit: CommitMeta) -> ChangedFileSet:
    """Compute the paths a commit changed relative to its first parent.

    Root commits and shallow-boundary commits are compared against the empty
    tree, so every path they contain is reported.

    Raises:
        DiffComputationError: If the parent or a tree is missing from the store.
    """
    try:
        parent = resolve_parent(handle, commit)
    except CommitNotFound as e:
        msg = f"Parent of {commit.sha} is missing from the object store"
        raise DiffComputationError(msg, sha=commit.sha) from e

    if parent is None:
        return _changed_paths(handle, None, _tree_id(handle, commit), sha=commit.sha)
    return changed_files_between(handle, parent, commit)


def has_path_changed_between(
    handle: "RepoHandle",
    path: str,
    from_commit: CommitMeta,
    to_commit: CommitMeta,
) -> bool:
    """Check whether a file or directory changed between two commits.

    Args:
        handle: The repository holding both commits.
        path: Repository-relative file or directory path.
        from_commit: Base commit.
        to_commit: Target commit.

    Returns:
        True if the path, or anything below it, changed.
    """
    return changed_files_between(handle, from_commit, to_commit).has_path(path)


def has_path_changed(handle: "RepoHandle", path: str, commit: CommitMeta) -> bool:
    """Check whether a commit touched a file or directory."""
    return changed_files_at(handle, commit).has_path(path)
