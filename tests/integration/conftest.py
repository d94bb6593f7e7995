from pathlib import Path

import pytest

from tests.conftest import run_git


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


def add_remote(repo: Path, name: str, url: str = "https://example.com/repo.git") -> None:
    """Configure a remote without fetching from it."""
    run_git(repo, "remote", "add", name, url)


def set_remote_ref(repo: Path, remote: str, branch: str, sha: str) -> None:
    """Point refs/remotes/<remote>/<branch> at a commit, as a fetch would."""
    run_git(repo, "update-ref", f"refs/remotes/{remote}/{branch}", sha)


def set_upstream(repo: Path, branch: str, remote: str, merge: str | None = None) -> None:
    """Write branch.<branch>.remote and branch.<branch>.merge."""
    run_git(repo, "config", f"branch.{branch}.remote", remote)
    run_git(repo, "config", f"branch.{branch}.merge", f"refs/heads/{merge or branch}")
