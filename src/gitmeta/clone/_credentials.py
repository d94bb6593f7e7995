"""Credential models and their translation into transport settings.

Callers describe credentials with one of two immutable value types. The
clone orchestrator never inspects them directly: ``resolve_credentials``
validates the material and returns a TransportAuth that knows how to hand it
to the dulwich transport and to the git command line.
"""

import base64
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final
from urllib.parse import unquote, urlsplit

from gitmeta.clone._urls import is_http_url, is_ssh_url, strip_userinfo
from gitmeta.exceptions import InvalidCredential
from gitmeta.utils import get_logger

_SSH_OPTIONS: Final = ("-o", "IdentitiesOnly=yes", "-o", "BatchMode=yes")


@dataclass(frozen=True, slots=True)
class SshKeyCredential:
    """SSH key-pair authentication.

    Attributes:
        private_key: Path to the private key file.
        public_key: Optional path to the matching public key file.
        passphrase: Passphrase protecting the private key, if any. The key
            must also be unlocked in ssh-agent; see ``resolve_credentials``.
        username: SSH login name.
    """

    private_key: Path
    public_key: Path | None = None
    passphrase: str | None = field(default=None, repr=False)
    username: str = "git"


@dataclass(frozen=True, slots=True)
class UserPassCredential:
    """Username and password (or token) authentication for HTTP remotes."""

    username: str
    password: str = field(repr=False)


type CredentialSpec = SshKeyCredential | UserPassCredential


@dataclass(frozen=True, slots=True)
class TransportAuth:
    """Validated credential material ready for a transport.

    An instance with every field None is anonymous access.
    """

    username: str | None = None
    password: str | None = field(default=None, repr=False)
    key_filename: str | None = None

    @property
    def is_anonymous(self) -> bool:
        """True when no credential material is present."""
        return self.username is None and self.password is None and self.key_filename is None

    def transport_kwargs(self, url: str) -> dict[str, str]:
        """Keyword arguments for the dulwich client handling ``url``.

        Only the kinds of material the URL's transport accepts are included,
        and only those that are set.
        """
        if is_ssh_url(url):
            candidates = {"username": self.username, "key_filename": self.key_filename}
        elif is_http_url(url):
            candidates = {"username": self.username, "password": self.password}
        else:
            return {}
        return {k: v for k, v in candidates.items() if v is not None}

    def _basic_auth(self, url: str) -> tuple[str, str] | None:
        """Username and password for HTTP basic auth against ``url``.

        Explicit credentials win over userinfo embedded in the URL.
        """
        if not is_http_url(url):
            return None
        if self.username is not None and self.password is not None:
            return self.username, self.password
        parts = urlsplit(url)
        if parts.username is None or parts.password is None:
            return None
        return unquote(parts.username), unquote(parts.password)

    def cli_env(self, url: str) -> dict[str, str]:
        """Environment overrides for a git command-line clone of ``url``.

        Prompts are always disabled so a rejected credential fails instead of
        blocking on a terminal. HTTP credentials travel as an
        ``http.<remote>.extraHeader`` entry appended to any ``GIT_CONFIG_*``
        entries already in the environment; they never appear in the command
        line or in the URL git stores.
        """
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if self.key_filename is not None:
            ssh_command = ["ssh", "-i", self.key_filename, *_SSH_OPTIONS]
            env["GIT_SSH_COMMAND"] = shlex.join(ssh_command)

        basic = self._basic_auth(url)
        if basic is not None:
            parts = urlsplit(strip_userinfo(url))
            scope = f"{parts.scheme}://{parts.netloc}/"
            token = base64.b64encode(":".join(basic).encode()).decode("ascii")
            count = os.environ.get("GIT_CONFIG_COUNT", "")
            index = int(count) if count.isdigit() else 0
            env["GIT_CONFIG_COUNT"] = str(index + 1)
            env[f"GIT_CONFIG_KEY_{index}"] = f"http.{scope}.extraHeader"
            env[f"GIT_CONFIG_VALUE_{index}"] = f"Authorization: Basic {token}"
        return env

    def cli_url(self, url: str) -> str:
        """Rewrite ``url`` for the git command line.

        Passwords are removed (``cli_env`` carries HTTP credentials) and
        scheme-qualified SSH URLs get the login name. Other URLs are returned
        unchanged.
        """
        url = strip_userinfo(url)
        if self.username is None or is_http_url(url):
            return url
        if url.startswith("ssh://") and "@" not in url.split("://", 1)[1].split("/", 1)[0]:
            return f"ssh://{self.username}@{url[len('ssh://') :]}"
        return url


def _check_readable_file(path: Path, *, field_name: str) -> None:
    if not path.is_file():
        msg = f"{field_name.replace('_', ' ').capitalize()} not found: {path}"
        raise InvalidCredential(msg, field=field_name)
    if not os.access(path, os.R_OK):
        msg = f"{field_name.replace('_', ' ').capitalize()} is not readable: {path}"
        raise InvalidCredential(msg, field=field_name)


def validate_credentials(spec: CredentialSpec) -> None:
    """Check credential material without contacting any remote.

    Args:
        spec: The credential to check.

    Raises:
        InvalidCredential: If a key file is missing or unreadable, or a
            required field is empty.
    """
    if isinstance(spec, SshKeyCredential):
        _check_readable_file(Path(spec.private_key).expanduser(), field_name="private_key")
        if spec.public_key is not None:
            _check_readable_file(Path(spec.public_key).expanduser(), field_name="public_key")
        if not spec.username:
            msg = "SSH username must not be empty"
            raise InvalidCredential(msg, field="username")
        if spec.passphrase is not None and not spec.passphrase:
            msg = "SSH key passphrase must not be empty when given"
            raise InvalidCredential(msg, field="passphrase")
        return

    if not spec.username:
        msg = "Username must not be empty"
        raise InvalidCredential(msg, field="username")
    if not spec.password:
        msg = "Password must not be empty"
        raise InvalidCredential(msg, field="password")


def resolve_credentials(spec: CredentialSpec | None) -> TransportAuth:
    """Validate a credential and translate it into transport settings.

    Passphrase-protected keys cannot be unlocked non-interactively by the
    OpenSSH client the transports use. The passphrase is validated, and a
    warning is logged; the key must already be loaded into ssh-agent.

    Args:
        spec: The credential, or None for anonymous access.

    Returns:
        The transport settings.

    Raises:
        InvalidCredential: If the credential fails validation.
    """
    if spec is None:
        return TransportAuth()

    validate_credentials(spec)

    if isinstance(spec, SshKeyCredential):
        key = Path(spec.private_key).expanduser()
        if spec.passphrase is not None:
            get_logger().warning("ssh_key_passphrase_requires_agent", key=str(key))
        return TransportAuth(username=spec.username, key_filename=str(key))

    return TransportAuth(username=spec.username, password=spec.password)
