"""Repository handle owning the object-store connection.

A RepoHandle is the single owner of a dulwich Repo. The resolvers borrow it
read-only through the ``repo`` property; nothing else opens the store.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from gitmeta.config import GitMetaConfig, safe_load_config
from gitmeta.exceptions import NotARepository, PathNotFound, StoreAccessError
from gitmeta.utils import decode_bytes, get_logger, strip_refs_heads

if TYPE_CHECKING:
    from types import TracebackType


class RepoHandle:
    """An opened git repository rooted at a filesystem path.

    The class implements the context manager protocol. When used as a context
    manager, the underlying dulwich Repo is closed when exiting the context,
    including on error paths.

    Not safe for concurrent use from several threads without external
    locking; open one handle per sequence of operations instead.

    Attributes:
        root: The resolved path to the repository root directory.
        config: The configuration the handle was opened with.

    Example:
        >>> with RepoHandle.open("/path/to/repo") as handle:
        ...     print(handle.current_branch_name())
    """

    __slots__: Final = ("_closed", "_config", "_repo", "_root")
    _root: Path
    _repo: Repo
    _config: GitMetaConfig
    _closed: bool

    def __init__(self, repo: Repo, root: Path, *, config: GitMetaConfig) -> None:
        """Wrap an already opened dulwich Repo.

        Prefer ``RepoHandle.open``; the handle takes ownership of ``repo``.

        Args:
            repo: The opened dulwich repository.
            root: Resolved repository root path.
            config: Configuration for resolvers using this handle.
        """
        self._repo = repo
        self._root = root
        self._config = config
        self._closed = False

    @classmethod
    def open(cls, path: Path | str, *, config: GitMetaConfig | None = None) -> Self:
        """Open the repository rooted at ``path``.

        Args:
            path: Repository root (working tree root, or the repository
                directory of a bare repository).
            config: Configuration to use. Loaded from the environment and
                config files when None.

        Returns:
            A handle owning the opened repository.

        Raises:
            PathNotFound: If ``path`` does not exist.
            NotARepository: If ``path`` holds no repository metadata.
            StoreAccessError: If the repository cannot be read.
        """
        root = Path(path).expanduser()
        if not root.exists():
            msg = f"Path does not exist: {root}"
            raise PathNotFound(msg, path=root)

        try:
            repo = Repo(str(root))
        except NotGitRepository as e:
            msg = f"Not a git repository: {root}"
            raise NotARepository(msg, path=root) from e
        except OSError as e:
            msg = f"Cannot read repository at {root}: {e}"
            raise StoreAccessError(msg, path=root) from e

        if config is None:
            config, _ = safe_load_config()

        get_logger().debug("repository_opened", path=str(root.resolve()))
        return cls(repo, root.resolve(), config=config)

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        """Enter the context manager.

        Returns:
            The handle.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: "TracebackType | None",
    ) -> None:
        """Exit the context manager and close the repository."""
        self.close()

    def close(self) -> None:
        """Release the underlying dulwich Repo.

        Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        self._repo.close()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def root(self) -> Path:
        """Resolved repository root path."""
        return self._root

    @property
    def config(self) -> GitMetaConfig:
        """Configuration the handle was opened with."""
        return self._config

    @property
    def closed(self) -> bool:
        """Whether the handle has been closed."""
        return self._closed

    @property
    def repo(self) -> Repo:
        """The underlying dulwich Repo, for read-only use.

        Raises:
            StoreAccessError: If the handle is closed.
        """
        if self._closed:
            msg = f"Repository handle is closed: {self._root}"
            raise StoreAccessError(msg, path=self._root)
        return self._repo

    # =========================================================================
    # HEAD and remotes
    # =========================================================================

    def current_branch_name(self) -> str | None:
        """Get the checked-out branch name.

        Returns:
            Branch name without refs/heads/ prefix, or None if HEAD is detached.
        """
        try:
            symrefs = self.repo.refs.get_symrefs()
        except OSError as e:
            msg = f"Cannot read refs: {e}"
            raise StoreAccessError(msg, path=self._root) from e

        head_ref = symrefs.get(b"HEAD")
        if head_ref is None or not head_ref.startswith(b"refs/heads/"):
            return None
        return strip_refs_heads(head_ref)

    def head_sha(self) -> str | None:
        """Get the commit HEAD points at.

        Returns:
            Hex string of the HEAD commit SHA, or None on an unborn branch.
        """
        try:
            return decode_bytes(self.repo.head())
        except KeyError:
            return None
        except OSError as e:
            msg = f"Cannot read HEAD: {e}"
            raise StoreAccessError(msg, path=self._root) from e

    def default_remote(self) -> str:
        """Name the remote used when none is given.

        The current branch's configured remote if there is one, otherwise
        the configured clone origin (``origin`` by default).
        """
        branch = self.current_branch_name()
        if branch is not None:
            try:
                remote = self.repo.get_config().get((b"branch", branch.encode()), b"remote")
            except KeyError:
                pass
            except OSError as e:
                msg = f"Cannot read repository config: {e}"
                raise StoreAccessError(msg, path=self._root) from e
            else:
                remote_name = decode_bytes(remote)
                if remote_name != ".":
                    return remote_name
        return self._config.clone.origin

    def remote_url(self, remote: str | None = None) -> str | None:
        """Get the configured URL of a remote.

        Args:
            remote: Remote name. Defaults to ``default_remote()``.

        Returns:
            The remote URL, or None if the remote has no URL configured.
        """
        name = remote if remote is not None else self.default_remote()
        try:
            url = self.repo.get_config().get((b"remote", name.encode()), b"url")
        except KeyError:
            return None
        except OSError as e:
            msg = f"Cannot read repository config: {e}"
            raise StoreAccessError(msg, path=self._root) from e
        return decode_bytes(url)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"RepoHandle(root={str(self._root)!r}, {state})"
