"""git-meta exceptions."""

from pathlib import Path


class GitMetaError(Exception):
    """Base exception for git-meta errors."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(GitMetaError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(GitMetaError):
    """Base exception for repository access errors.

    Attributes:
        path: Repository path involved in the error, if known.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and path context.

        Args:
            message: Human-readable error message.
            path: Repository path involved in the error.
        """
        super().__init__(message)
        self.path: Path | None = path


class PathNotFound(RepositoryError):  # noqa: N818
    """Raised when a repository path does not exist."""


class NotARepository(RepositoryError):  # noqa: N818
    """Raised when a path exists but holds no git repository metadata."""


class StoreAccessError(RepositoryError):
    """Raised when the object store or its metadata cannot be read."""


# =============================================================================
# Resolution Exceptions
# =============================================================================


class CommitNotFound(GitMetaError):  # noqa: N818
    """Raised when a commit identifier does not resolve to a commit.

    Attributes:
        query: The identifier that was looked up.
    """

    def __init__(self, message: str, *, query: str) -> None:
        """Initialize with error message and lookup context."""
        super().__init__(message)
        self.query: str = query


class AmbiguousCommitId(GitMetaError):  # noqa: N818
    """Raised when a partial identifier matches more than one object.

    Attributes:
        query: The partial identifier that was looked up.
        candidates: Every full object id starting with the prefix, sorted.
    """

    def __init__(self, message: str, *, query: str, candidates: tuple[str, ...]) -> None:
        """Initialize with error message and the matching candidates.

        Args:
            message: Human-readable error message.
            query: The partial identifier that was looked up.
            candidates: Full object ids matching the prefix.
        """
        super().__init__(message)
        self.query: str = query
        self.candidates: tuple[str, ...] = candidates


class BranchNotFound(GitMetaError):  # noqa: N818
    """Raised when an explicitly named local branch does not exist.

    Attributes:
        branch: The branch name that was looked up.
    """

    def __init__(self, message: str, *, branch: str) -> None:
        """Initialize with error message and branch context."""
        super().__init__(message)
        self.branch: str = branch


class DiffComputationError(GitMetaError):
    """Raised when a commit tree cannot be read for diffing.

    Attributes:
        sha: The commit whose tree could not be read, if known.
    """

    def __init__(self, message: str, *, sha: str | None = None) -> None:
        """Initialize with error message and commit context."""
        super().__init__(message)
        self.sha: str | None = sha


# =============================================================================
# Clone Exceptions
# =============================================================================


class InvalidCredential(GitMetaError):  # noqa: N818
    """Raised when credential material fails validation.

    Attributes:
        field: The credential field that failed validation, if applicable.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        """Initialize with error message and field context."""
        super().__init__(message)
        self.field: str | None = field


class CloneError(GitMetaError):
    """Base exception for clone failures.

    Attributes:
        url: The remote URL being cloned (userinfo stripped).
        destination: The clone destination path.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        destination: Path | None = None,
    ) -> None:
        """Initialize with error message and clone context."""
        super().__init__(message)
        self.url: str | None = url
        self.destination: Path | None = destination


class CloneAuthFailed(CloneError):  # noqa: N818
    """Raised when the remote rejects the supplied credentials."""


class CloneNetworkError(CloneError):
    """Raised on transport-level clone failures."""


class DestinationExists(CloneError):  # noqa: N818
    """Raised when the clone destination already holds a repository or files."""
