"""Branch and tracking-branch resolution.

A branch's tracking branch is looked up strictly from the repository config
first. Clones often lack ``branch.<name>`` sections (shallow clones of a
non-default branch, clones made by tools that skip the config step), so when
the strict lookup fails the remotes are searched for a same-named
remote-tracking ref.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from gitmeta.exceptions import BranchNotFound, CommitNotFound, StoreAccessError
from gitmeta.repository._commits import read_commit
from gitmeta.repository._models import BranchInfo, CommitMeta, TrackingSource
from gitmeta.utils import (
    decode_bytes,
    get_logger,
    local_branch_ref,
    remote_branch_ref,
    strip_refs_heads,
)

if TYPE_CHECKING:
    from dulwich.config import ConfigFile

    from gitmeta.repository._handle import RepoHandle

_LOCAL_REMOTE: Final = "."
_REMOTES_BASE: Final = b"refs/remotes/"


@dataclass(frozen=True, slots=True)
class _Upstream:
    remote: str
    name: str
    ref: bytes

    @property
    def display(self) -> str:
        if self.remote == _LOCAL_REMOTE:
            return self.name
        return f"{self.remote}/{self.name}"


def _read_config(handle: "RepoHandle") -> "ConfigFile":
    try:
        return handle.repo.get_config()
    except OSError as e:
        msg = f"Cannot read repository config: {e}"
        raise StoreAccessError(msg, path=handle.root) from e


def _ref_sha(handle: "RepoHandle", ref: bytes) -> str | None:
    try:
        return decode_bytes(handle.repo.refs[ref])
    except KeyError:
        return None
    except OSError as e:
        msg = f"Cannot read ref {decode_bytes(ref)}: {e}"
        raise StoreAccessError(msg, path=handle.root) from e


def _ref_exists(handle: "RepoHandle", ref: bytes) -> bool:
    return _ref_sha(handle, ref) is not None


def is_shallow(handle: "RepoHandle") -> bool:
    """Check whether the repository is a shallow clone.

    Raises:
        StoreAccessError: If the shallow marker cannot be read.
    """
    try:
        return bool(handle.repo.get_shallow())
    except OSError as e:
        msg = f"Cannot read shallow marker: {e}"
        raise StoreAccessError(msg, path=handle.root) from e


def _configured_upstream(handle: "RepoHandle", branch: str) -> _Upstream | None:
    config = _read_config(handle)
    section = (b"branch", branch.encode())
    try:
        remote = decode_bytes(config.get(section, b"remote"))
        merge = decode_bytes(config.get(section, b"merge"))
    except KeyError:
        return None

    name = strip_refs_heads(merge) or ""
    if not name:
        return None

    if remote == _LOCAL_REMOTE:
        ref = local_branch_ref(name)
    else:
        ref = remote_branch_ref(remote, name)

    if not _ref_exists(handle, ref):
        get_logger().debug(
            "configured_upstream_missing", branch=branch, ref=decode_bytes(ref)
        )
        return None
    return _Upstream(remote=remote, name=name, ref=ref)


def _candidate_remotes(handle: "RepoHandle") -> list[str]:
    """List remotes in config order, then remotes only present as refs."""
    config = _read_config(handle)
    configured: list[str] = []
    for section in config.sections():
        if len(section) == 2 and section[0] == b"remote":  # noqa: PLR2004
            name = decode_bytes(section[1])
            if name not in configured:
                configured.append(name)

    try:
        remote_refs = handle.repo.refs.keys(base=_REMOTES_BASE)
    except OSError as e:
        msg = f"Cannot read refs: {e}"
        raise StoreAccessError(msg, path=handle.root) from e

    seen = {decode_bytes(ref).split("/", 1)[0] for ref in remote_refs if b"/" in ref}
    return configured + sorted(seen - set(configured))


def _loosened_upstream(handle: "RepoHandle", branch: str) -> _Upstream | None:
    for remote in _candidate_remotes(handle):
        ref = remote_branch_ref(remote, branch)
        if _ref_exists(handle, ref):
            return _Upstream(remote=remote, name=branch, ref=ref)
    return None


def _find_upstream(
    handle: "RepoHandle", branch: str
) -> tuple[_Upstream | None, TrackingSource]:
    upstream = _configured_upstream(handle, branch)
    if upstream is not None:
        return upstream, TrackingSource.CONFIGURED

    upstream = _loosened_upstream(handle, branch)
    if upstream is not None:
        get_logger().debug(
            "tracking_branch_loosened", branch=branch, tracking=upstream.display
        )
        return upstream, TrackingSource.LOOSENED

    return None, TrackingSource.NONE


def _resolve(
    handle: "RepoHandle", branch_name: str | None
) -> tuple[BranchInfo, _Upstream | None]:
    shallow = is_shallow(handle)

    if branch_name is None:
        branch_name = handle.current_branch_name()
        if branch_name is None:
            info = BranchInfo(
                local_branch=None,
                tracking_branch=None,
                is_shallow=shallow,
                head_sha=handle.head_sha(),
            )
            return info, None
        head = _ref_sha(handle, local_branch_ref(branch_name))
    else:
        head = _ref_sha(handle, local_branch_ref(branch_name))
        if head is None:
            msg = f"Branch not found: {branch_name}"
            raise BranchNotFound(msg, branch=branch_name)

    upstream, source = _find_upstream(handle, branch_name)
    info = BranchInfo(
        local_branch=branch_name,
        tracking_branch=upstream.display if upstream is not None else None,
        is_shallow=shallow,
        remote=upstream.remote if upstream is not None else None,
        head_sha=head,
        tracking_source=source,
    )
    return info, upstream


def resolve_branch(handle: "RepoHandle", branch_name: str | None = None) -> BranchInfo:
    """Resolve a local branch and its tracking branch.

    Args:
        handle: The repository to inspect.
        branch_name: Local branch name. Defaults to the checked-out branch.

    Returns:
        BranchInfo for the branch. When HEAD is detached and no name is given,
        ``local_branch`` and ``tracking_branch`` are None.

    Raises:
        BranchNotFound: If an explicitly named branch does not exist.
        StoreAccessError: If refs or config cannot be read.
    """
    info, _ = _resolve(handle, branch_name)
    return info


def remote_branch_heads(
    handle: "RepoHandle", remote: str | None = None
) -> dict[str, CommitMeta]:
    """Get the tip commit of every remote-tracking branch of a remote.

    Args:
        handle: The repository to inspect.
        remote: Remote name. Defaults to ``handle.default_remote()``.

    Returns:
        Mapping of branch name (without the remote prefix) to tip commit.
        Symbolic ``HEAD`` entries and refs not pointing at commits are skipped.
    """
    name = remote if remote is not None else handle.default_remote()
    base = _REMOTES_BASE + name.encode() + b"/"
    try:
        refs = sorted(handle.repo.refs.keys(base=base))
    except OSError as e:
        msg = f"Cannot read refs: {e}"
        raise StoreAccessError(msg, path=handle.root) from e

    heads: dict[str, CommitMeta] = {}
    for ref in refs:
        if ref == b"HEAD":
            continue
        sha = _ref_sha(handle, base + ref)
        if sha is None:
            continue
        try:
            heads[decode_bytes(ref)] = read_commit(handle, sha)
        except CommitNotFound:
            continue
    return heads


def new_commits_exist(handle: "RepoHandle", branch_name: str | None = None) -> bool:
    """Check whether a branch and its tracking branch point at different commits.

    Only local refs are compared; nothing is fetched.

    Args:
        handle: The repository to inspect.
        branch_name: Local branch name. Defaults to the checked-out branch.

    Returns:
        True if the tips differ, False if they match or there is no tracking
        branch.
    """
    info, upstream = _resolve(handle, branch_name)
    if upstream is None:
        return False
    return _ref_sha(handle, upstream.ref) != info.head_sha
