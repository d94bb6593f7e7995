"""Repository cloning.

Clone remote repositories, fully or shallowly, with optional SSH key or
username/password credentials.

Example:
    >>> from pathlib import Path
    >>> from gitmeta.clone import SshKeyCredential, clone_repository
    >>> credential = SshKeyCredential(private_key=Path("~/.ssh/id_ed25519"))
    >>> with clone_repository(
    ...     "git@example.com:team/repo.git", "/tmp/repo", credential, shallow_depth=1
    ... ) as handle:
    ...     print(handle.head_sha())
"""

from gitmeta.clone._credentials import (
    CredentialSpec,
    SshKeyCredential,
    TransportAuth,
    UserPassCredential,
    resolve_credentials,
    validate_credentials,
)
from gitmeta.clone._orchestrator import clone_repository
from gitmeta.clone._urls import (
    is_http_url,
    is_local_source,
    is_ssh_url,
    redact_userinfo,
    strip_userinfo,
    to_file_url,
    with_userinfo,
)

__all__ = [
    "CredentialSpec",
    "SshKeyCredential",
    "TransportAuth",
    "UserPassCredential",
    "clone_repository",
    "is_http_url",
    "is_local_source",
    "is_ssh_url",
    "redact_userinfo",
    "resolve_credentials",
    "strip_userinfo",
    "to_file_url",
    "validate_credentials",
    "with_userinfo",
]
