"""Commit resolution.

Turns full or abbreviated identifiers, refs and parent links into CommitMeta
values read from the object store.

Partial identifiers are expanded in a fixed order: the input shape is
validated before the store is touched, an exact lookup runs before any prefix
enumeration, and a prefix matching several objects is reported with every
candidate instead of picking one.
"""

from typing import TYPE_CHECKING, Final

from dulwich.objects import Commit, ShaFile, Tag

from gitmeta.exceptions import AmbiguousCommitId, CommitNotFound, StoreAccessError
from gitmeta.repository._models import (
    Ambiguous,
    CommitMeta,
    CommitResolution,
    NotFound,
    Resolved,
)
from gitmeta.utils import (
    decode_bytes,
    get_logger,
    is_hex,
    parse_identity,
    timestamp_to_utc,
)

if TYPE_CHECKING:
    from gitmeta.repository._handle import RepoHandle

MIN_PREFIX_LENGTH: Final = 4
FULL_SHA_LENGTH: Final = 40

_REF_SEARCH_PREFIXES: Final = ("refs/heads/", "refs/remotes/", "refs/tags/")


def _normalize(id_or_partial: str) -> str:
    return id_or_partial.strip().lower()


def _lookup(handle: "RepoHandle", sha: str) -> ShaFile | None:
    """Read an object by full hex id, or None if the store lacks it."""
    try:
        return handle.repo.object_store[sha.encode("ascii")]
    except KeyError:
        return None
    except OSError as e:
        msg = f"Cannot read object {sha}: {e}"
        raise StoreAccessError(msg, path=handle.root) from e


def commit_to_meta(commit: Commit, *, short_sha_length: int = 7) -> CommitMeta:
    """Convert a dulwich Commit to CommitMeta.

    Args:
        commit: A commit object read from the store.
        short_sha_length: Length of the display hash.

    Returns:
        CommitMeta populated from the commit data.
    """
    sha = decode_bytes(commit.id)
    author_name, author_email = parse_identity(commit.author)
    committer_name, committer_email = parse_identity(commit.committer)

    return CommitMeta(
        sha=sha,
        short_sha=sha[:short_sha_length],
        author_name=author_name,
        author_email=author_email,
        committer_name=committer_name,
        committer_email=committer_email,
        timestamp=timestamp_to_utc(commit.commit_time),
        message=decode_bytes(commit.message),
        parent_shas=tuple(decode_bytes(p) for p in commit.parents),
    )


def read_commit(handle: "RepoHandle", sha: str) -> CommitMeta:
    """Read a commit by its full identifier.

    Args:
        handle: The repository to read from.
        sha: Full 40-character hex identifier.

    Returns:
        The commit's metadata.

    Raises:
        CommitNotFound: If no commit with that id is in the store.
        StoreAccessError: If the store cannot be read.
    """
    obj = _lookup(handle, sha)
    if not isinstance(obj, Commit):
        msg = f"Commit not found: {sha}"
        raise CommitNotFound(msg, query=sha)
    return commit_to_meta(obj, short_sha_length=handle.config.resolve.short_sha_length)


def expand(handle: "RepoHandle", id_or_partial: str) -> CommitResolution:
    """Expand a full or partial commit identifier.

    Args:
        handle: The repository to search.
        id_or_partial: Full identifier or a prefix of at least 4 hex digits.

    Returns:
        Resolved with the commit, Ambiguous with every matching object id, or
        NotFound with the reason nothing matched.

    Raises:
        StoreAccessError: If the store cannot be read.

    Example:
        >>> result = expand(handle, "c097ad2")
        >>> if isinstance(result, Ambiguous):
        ...     print(result.candidates)
    """
    query = _normalize(id_or_partial)
    log = get_logger()

    if not MIN_PREFIX_LENGTH <= len(query) <= FULL_SHA_LENGTH or not is_hex(query):
        log.debug("commit_id_malformed", query=query)
        return NotFound(
            query=query,
            reason=(
                f"malformed identifier: expected {MIN_PREFIX_LENGTH} to "
                f"{FULL_SHA_LENGTH} hex digits"
            ),
        )

    if len(query) == FULL_SHA_LENGTH:
        obj = _lookup(handle, query)
        if obj is None:
            return NotFound(query=query, reason="no such object")
        if not isinstance(obj, Commit):
            return NotFound(query=query, reason=f"object is a {obj.type_name.decode()}")
        return Resolved(
            commit=commit_to_meta(obj, short_sha_length=handle.config.resolve.short_sha_length)
        )

    try:
        matches = {
            decode_bytes(sha)
            for sha in handle.repo.object_store.iter_prefix(query.encode("ascii"))
        }
    except OSError as e:
        msg = f"Cannot enumerate objects with prefix {query}: {e}"
        raise StoreAccessError(msg, path=handle.root) from e

    # iter_prefix drops the trailing nibble of odd-length prefixes on packs
    candidates = tuple(sorted(sha for sha in matches if sha.startswith(query)))

    if len(candidates) > 1:
        log.debug("commit_id_ambiguous", query=query, candidates=len(candidates))
        return Ambiguous(query=query, candidates=candidates)
    if not candidates:
        return NotFound(query=query, reason="no object with this prefix")

    obj = _lookup(handle, candidates[0])
    if not isinstance(obj, Commit):
        kind = obj.type_name.decode() if obj is not None else "missing object"
        return NotFound(query=query, reason=f"prefix matches a {kind}, not a commit")

    log.debug("commit_id_expanded", query=query, sha=candidates[0])
    return Resolved(
        commit=commit_to_meta(obj, short_sha_length=handle.config.resolve.short_sha_length)
    )


def resolve_full(handle: "RepoHandle", id_or_partial: str) -> CommitMeta:
    """Resolve a full or partial commit identifier to commit metadata.

    Args:
        handle: The repository to search.
        id_or_partial: Full identifier or a prefix of at least 4 hex digits.

    Returns:
        The matching commit's metadata.

    Raises:
        CommitNotFound: If the identifier is malformed or matches no commit.
        AmbiguousCommitId: If the prefix matches several objects. The
            exception's ``candidates`` lists all of them.
        StoreAccessError: If the store cannot be read.
    """
    result = expand(handle, id_or_partial)

    if isinstance(result, Resolved):
        return result.commit

    if isinstance(result, Ambiguous):
        msg = (
            f"Commit id {result.query!r} is ambiguous; candidates: "
            f"{', '.join(result.candidates)}"
        )
        raise AmbiguousCommitId(msg, query=result.query, candidates=result.candidates)

    msg = f"Commit not found: {result.query!r} ({result.reason})"
    raise CommitNotFound(msg, query=result.query)


def resolve_parent(handle: "RepoHandle", commit: CommitMeta) -> CommitMeta | None:
    """Get the first parent of a commit.

    Shallow-boundary commits have their parents cut off from the store; like
    git's grafted view, they are treated as having no parent.

    Args:
        handle: The repository to read from.
        commit: The child commit.

    Returns:
        The first parent's metadata, or None for a root or shallow-boundary
        commit.

    Raises:
        CommitNotFound: If the parent is missing from a non-shallow store.
        StoreAccessError: If the store cannot be read.
    """
    if commit.is_root:
        return None

    parent_sha = commit.parent_shas[0]
    try:
        return read_commit(handle, parent_sha)
    except CommitNotFound:
        try:
            shallow = handle.repo.get_shallow()
        except OSError as e:
            msg = f"Cannot read shallow marker: {e}"
            raise StoreAccessError(msg, path=handle.root) from e
        if commit.sha.encode("ascii") in shallow:
            get_logger().debug("shallow_boundary_reached", sha=commit.sha)
            return None
        raise


def resolve_head(handle: "RepoHandle") -> CommitMeta:
    """Get the commit HEAD points at.

    Raises:
        CommitNotFound: If HEAD is an unborn branch.
    """
    head = handle.head_sha()
    if head is None:
        msg = "HEAD does not point at a commit"
        raise CommitNotFound(msg, query="HEAD")
    return read_commit(handle, head)


def resolve_ref(handle: "RepoHandle", ref: str) -> CommitMeta:
    """Resolve a ref name or commit identifier to commit metadata.

    Tries, in order: ``HEAD``, the ref as a full name, then local branches,
    remote-tracking branches and tags; annotated tags are peeled. Anything
    else is treated as a full or partial commit identifier.

    Args:
        handle: The repository to search.
        ref: Ref name (``main``, ``origin/main``, ``v1.0``, ``refs/...``) or
            commit identifier.

    Returns:
        The commit the ref points at.

    Raises:
        CommitNotFound: If nothing resolves to a commit.
        AmbiguousCommitId: If ``ref`` is an ambiguous partial identifier.
    """
    if ref == "HEAD":
        return resolve_head(handle)

    refs = handle.repo.refs
    names = [ref] if ref.startswith("refs/") else [f"{p}{ref}" for p in _REF_SEARCH_PREFIXES]
    for name in names:
        try:
            sha = refs[name.encode()]
        except KeyError:
            continue
        obj = _lookup(handle, decode_bytes(sha))
        while isinstance(obj, Tag):
            _, target = obj.object
            obj = _lookup(handle, decode_bytes(target))
        if isinstance(obj, Commit):
            return commit_to_meta(obj, short_sha_length=handle.config.resolve.short_sha_length)
        msg = f"Ref {name} does not point at a commit"
        raise CommitNotFound(msg, query=ref)

    return resolve_full(handle, ref)
