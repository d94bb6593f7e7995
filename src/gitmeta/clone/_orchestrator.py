"""Clone orchestration.

Full clones run in-process through dulwich. Shallow clones shell out to the
git command line, which records the shallow boundary for every transport
including local ``file://`` sources.

Whatever the outcome, a failed or interrupted clone leaves nothing behind: a
destination the orchestrator created is removed, and a pre-existing empty
destination is emptied again.
"""

import io
import os
import shutil
import subprocess
from pathlib import Path
from typing import Final

from dulwich import porcelain
from dulwich.client import HTTPProxyUnauthorized, HTTPUnauthorized
from dulwich.errors import GitProtocolError, HangupException, NotGitRepository
from dulwich.repo import Repo
from urllib3.exceptions import HTTPError

from gitmeta.clone._credentials import (
    CredentialSpec,
    TransportAuth,
    resolve_credentials,
)
from gitmeta.clone._urls import (
    is_local_source,
    redact_userinfo,
    strip_userinfo,
    to_file_url,
)
from gitmeta.config import GitMetaConfig, safe_load_config
from gitmeta.exceptions import (
    CloneAuthFailed,
    CloneError,
    CloneNetworkError,
    DestinationExists,
)
from gitmeta.repository import RepoHandle
from gitmeta.utils import get_logger

_AUTH_FAILURE_MARKERS: Final = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "invalid username or password",
    "returned error: 401",
    "returned error: 403",
    "host key verification failed",
)


def _decode_lines(lines: list[bytes]) -> list[str]:
    return [line.decode("utf-8", errors="replace").rstrip() for line in lines]


def _looks_like_auth_failure(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _AUTH_FAILURE_MARKERS)


# =============================================================================
# Destination handling
# =============================================================================


def _prepare_destination(destination: Path, *, url: str) -> Path | None:
    """Validate the destination and create it if missing.

    Returns:
        The topmost directory created, or None if the destination already
        existed.

    Raises:
        DestinationExists: If the destination is a file, or a non-empty
            directory (which includes an existing repository).
    """
    if destination.exists():
        if not destination.is_dir():
            msg = f"Clone destination is not a directory: {destination}"
            raise DestinationExists(msg, url=url, destination=destination)
        if any(destination.iterdir()):
            what = "a repository" if (destination / ".git").exists() else "files"
            msg = f"Clone destination already contains {what}: {destination}"
            raise DestinationExists(msg, url=url, destination=destination)
        return None

    created_root = destination
    while not created_root.parent.exists():
        created_root = created_root.parent
    destination.mkdir(parents=True)
    return created_root


def _discard_destination(destination: Path, created_root: Path | None) -> None:
    """Remove everything a failed clone left behind."""
    log = get_logger()
    try:
        if created_root is not None:
            if created_root.exists():
                shutil.rmtree(created_root)
            return
        for child in destination.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
    except OSError as e:
        log.warning("clone_cleanup_failed", destination=str(destination), error=str(e))
    else:
        log.debug("clone_cleaned_up", destination=str(destination))


def _store_sanitized_remote(destination: Path, origin: str, url: str) -> None:
    """Rewrite the origin URL in the clone's config without credentials.

    Raises:
        CloneError: If the clone's config cannot be read or written. The
            clone is then unusable, since it would keep the credentials.
    """
    sanitized = strip_userinfo(url)
    if sanitized == url:
        return
    try:
        repo = Repo(str(destination))
        try:
            repo_config = repo.get_config()
            repo_config.set((b"remote", origin.encode()), b"url", sanitized.encode())
            repo_config.write_to_path()
        finally:
            repo.close()
    except (OSError, NotGitRepository) as e:
        msg = f"Cannot remove credentials from the remote URL in {destination}: {e}"
        raise CloneError(msg, url=sanitized, destination=destination) from e


# =============================================================================
# Transports
# =============================================================================


def _clone_in_process(
    source: str,
    destination: Path,
    *,
    auth: TransportAuth,
    branch: str | None,
    config: GitMetaConfig,
) -> None:
    safe_url = strip_userinfo(source)
    errstream = io.BytesIO()
    try:
        repo = porcelain.clone(
            source,
            str(destination),
            checkout=True,
            errstream=errstream,
            origin=config.clone.origin,
            branch=branch,
            **auth.transport_kwargs(source),
        )
    except (HTTPUnauthorized, HTTPProxyUnauthorized) as e:
        msg = f"Remote rejected credentials for {safe_url}"
        raise CloneAuthFailed(msg, url=safe_url, destination=destination) from e
    except HangupException as e:
        detail = "\n".join(_decode_lines(e.stderr_lines)) if e.stderr_lines else str(e)
        if _looks_like_auth_failure(detail):
            msg = f"Authentication failed for {safe_url}: {detail}"
            raise CloneAuthFailed(msg, url=safe_url, destination=destination) from e
        msg = f"Remote hung up while cloning {safe_url}: {detail}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    except GitProtocolError as e:
        if _looks_like_auth_failure(str(e)):
            msg = f"Authentication failed for {safe_url}: {e}"
            raise CloneAuthFailed(msg, url=safe_url, destination=destination) from e
        msg = f"Protocol error while cloning {safe_url}: {e}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    except NotGitRepository as e:
        msg = f"Clone source is not a git repository: {safe_url}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    except KeyError as e:
        msg = f"Remote {safe_url} has no ref {e}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    except (OSError, HTTPError) as e:
        msg = f"Cannot reach {safe_url}: {e}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    repo.close()
    _store_sanitized_remote(destination, config.clone.origin, source)


def _clone_with_cli(
    source: str,
    destination: Path,
    *,
    depth: int,
    auth: TransportAuth,
    branch: str | None,
    config: GitMetaConfig,
) -> None:
    safe_url = strip_userinfo(source)
    file_url = to_file_url(source)
    cli_url = auth.cli_url(file_url)
    origin = config.clone.origin

    cmd = [
        config.clone.git_executable,
        "clone",
        f"--depth={depth}",
        "--no-single-branch",
        f"--origin={origin}",
    ]
    if branch is not None:
        cmd.extend(["--branch", branch])
    cmd.extend(["--", cli_url, str(destination)])

    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            capture_output=True,
            text=True,
            check=False,
            env={**os.environ, **auth.cli_env(file_url)},
            timeout=config.clone.timeout_seconds,
        )
    except FileNotFoundError as e:
        msg = f"git executable not found: {config.clone.git_executable}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e
    except subprocess.TimeoutExpired as e:
        msg = f"Clone of {safe_url} timed out after {config.clone.timeout_seconds}s"
        raise CloneNetworkError(msg, url=safe_url, destination=destination) from e

    if result.returncode != 0:
        stderr = redact_userinfo(result.stderr).strip()
        if _looks_like_auth_failure(stderr):
            msg = f"Authentication failed for {safe_url}: {stderr}"
            raise CloneAuthFailed(msg, url=safe_url, destination=destination)
        msg = f"git clone of {safe_url} failed: {stderr}"
        raise CloneNetworkError(msg, url=safe_url, destination=destination)


# =============================================================================
# Public API
# =============================================================================


def clone_repository(  # noqa: PLR0913
    remote_url: str,
    destination: Path | str,
    credential: CredentialSpec | None = None,
    shallow_depth: int | None = None,
    *,
    branch: str | None = None,
    config: GitMetaConfig | None = None,
) -> RepoHandle:
    """Clone a remote repository and open the result.

    Args:
        remote_url: URL (https, ssh, scp-like, file) or local path to clone.
        destination: Directory to clone into. Must be missing or empty.
        credential: Credential for the remote, or None for anonymous access.
            Ignored for local sources.
        shallow_depth: Number of commits to fetch per branch, or None for a
            full clone.
        branch: Branch to check out. Defaults to the remote's HEAD.
        config: Configuration to use. Loaded from the environment and config
            files when None.

    Returns:
        A handle on the new clone. The caller owns it and must close it.

    Raises:
        ValueError: If shallow_depth is less than 1.
        InvalidCredential: If the credential fails validation.
        DestinationExists: If the destination is not an empty directory.
        CloneAuthFailed: If the remote rejects the credential.
        CloneNetworkError: If the remote cannot be reached or read.

    Example:
        >>> with clone_repository("https://example.com/repo.git", "/tmp/repo", shallow_depth=1) as handle:
        ...     print(handle.head_sha())
    """
    if shallow_depth is not None and shallow_depth < 1:
        msg = f"shallow_depth must be at least 1, got {shallow_depth}"
        raise ValueError(msg)

    if config is None:
        config, _ = safe_load_config()

    log = get_logger()
    safe_url = strip_userinfo(remote_url)
    auth = resolve_credentials(credential)
    if is_local_source(remote_url) and not auth.is_anonymous:
        log.debug("clone_credentials_ignored", url=safe_url)
        auth = TransportAuth()

    dest = Path(destination).expanduser().absolute()
    created_root = _prepare_destination(dest, url=safe_url)

    log.info(
        "clone_started",
        url=safe_url,
        destination=str(dest),
        shallow_depth=shallow_depth,
        branch=branch,
    )

    try:
        if shallow_depth is None:
            _clone_in_process(remote_url, dest, auth=auth, branch=branch, config=config)
        else:
            _clone_with_cli(
                remote_url,
                dest,
                depth=shallow_depth,
                auth=auth,
                branch=branch,
                config=config,
            )
        handle = RepoHandle.open(dest, config=config)
    except CloneError as e:
        log.warning("clone_failed", url=safe_url, error=str(e))
        _discard_destination(dest, created_root)
        raise
    except BaseException:
        # KeyboardInterrupt included
        _discard_destination(dest, created_root)
        raise

    log.info("clone_completed", url=safe_url, destination=str(dest))
    return handle
