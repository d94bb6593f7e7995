"""Shared test fixtures for git-meta tests."""

import os
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest

from gitmeta.config import GitMetaConfig
from gitmeta.repository import RepoHandle
from gitmeta.utils import get_logger

_GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
    "GIT_TERMINAL_PROMPT": "0",
}


def run_git(cwd: Path, *args: str, date: int | None = None) -> str:
    """Run a git command and return its stripped stdout."""
    env = {**os.environ, **_GIT_ENV}
    if date is not None:
        env["GIT_AUTHOR_DATE"] = f"{date} +0000"
        env["GIT_COMMITTER_DATE"] = f"{date} +0000"
    result = subprocess.run(  # noqa: S603
        ["git", *args],  # noqa: S607
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
        env=env,
    )
    return result.stdout.strip()


def init_git_repo(path: Path, *, branch: str = "main") -> None:
    """Initialize a git repository with a fixed initial branch and identity."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", f"--initial-branch={branch}")
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "user.name", "Test User")
    run_git(path, "config", "commit.gpgsign", "false")


def commit_files(
    repo: Path,
    files: dict[str, str | None],
    message: str,
    *,
    date: int = 1_700_000_000,
) -> str:
    """Write (or delete, for None content) files and commit them.

    Returns:
        The new commit's full SHA.
    """
    for relpath, content in files.items():
        target = repo / relpath
        if content is None:
            run_git(repo, "rm", "-q", "--", relpath)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        run_git(repo, "add", "--", relpath)
    run_git(repo, "commit", "-q", "-m", message, date=date)
    return run_git(repo, "rev-parse", "HEAD")


@dataclass(frozen=True, slots=True)
class GitRepoFixture:
    """A repository built for a test, with its commits oldest first."""

    root: Path
    shas: tuple[str, ...]

    @property
    def head(self) -> str:
        return self.shas[-1]


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep user config files and GITMETA_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith("GITMETA_"):
            monkeypatch.delenv(key)
    config_home = tmp_path_factory.mktemp("config-home")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("HOME", str(config_home))
    get_logger.cache_clear()
    yield
    get_logger.cache_clear()


@pytest.fixture
def config() -> GitMetaConfig:
    return GitMetaConfig()


@pytest.fixture
def three_commit_repo(tmp_path: Path) -> GitRepoFixture:
    """A repository with three commits on main.

    1. adds README.md and src/app.py
    2. adds docs/guide.md
    3. modifies src/app.py and deletes README.md
    """
    root = tmp_path / "three"
    init_git_repo(root)
    first = commit_files(
        root,
        {"README.md": "# demo\n", "src/app.py": "print('v1')\n"},
        "Initial commit",
        date=1_700_000_000,
    )
    second = commit_files(
        root, {"docs/guide.md": "guide\n"}, "Add guide", date=1_700_000_100
    )
    third = commit_files(
        root,
        {"src/app.py": "print('v2')\n", "README.md": None},
        "Update app\n\nDrop the readme.",
        date=1_700_000_200,
    )
    return GitRepoFixture(root=root, shas=(first, second, third))


@pytest.fixture
def linear_repo(tmp_path: Path) -> GitRepoFixture:
    """A repository with six commits, each touching its own file."""
    root = tmp_path / "linear"
    init_git_repo(root)
    shas = tuple(
        commit_files(
            root,
            {f"file{i}.txt": f"content {i}\n"},
            f"Commit {i}",
            date=1_700_000_000 + i * 60,
        )
        for i in range(6)
    )
    return GitRepoFixture(root=root, shas=shas)


@pytest.fixture
def three_commit_handle(
    three_commit_repo: GitRepoFixture, config: GitMetaConfig
) -> Iterator[RepoHandle]:
    with RepoHandle.open(three_commit_repo.root, config=config) as handle:
        yield handle
