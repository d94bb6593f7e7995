from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dulwich.objects import Blob, Commit, Tree

from gitmeta.config import GitMetaConfig


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


def make_commit(
    message: str = "Test commit",
    *,
    parents: list[bytes] | None = None,
    author: bytes = b"Alice Example <alice@example.com>",
    commit_time: int = 1_700_000_000,
) -> Commit:
    """Build an in-memory dulwich Commit over an empty tree."""
    commit = Commit()
    commit.tree = Tree().id
    commit.author = author
    commit.committer = b"Bob Example <bob@example.com>"
    commit.author_time = commit.commit_time = commit_time
    commit.author_timezone = commit.commit_timezone = 0
    commit.encoding = b"UTF-8"
    commit.message = message.encode()
    commit.parents = parents or []
    return commit


def make_blob(data: bytes) -> Blob:
    return Blob.from_string(data)


@pytest.fixture
def object_store() -> dict[bytes, object]:
    """Backing dict for the mocked object store, keyed by hex SHA."""
    return {}


@pytest.fixture
def mock_handle(tmp_path: Path, object_store: dict[bytes, object]) -> MagicMock:
    """A RepoHandle stand-in whose object store is a plain dict.

    ``iter_prefix`` enumerates the dict keys, matching dulwich semantics.
    """
    handle = MagicMock()
    handle.root = tmp_path
    handle.config = GitMetaConfig()
    store = handle.repo.object_store
    store.__getitem__.side_effect = lambda sha: object_store[sha]
    store.iter_prefix.side_effect = lambda prefix: iter(
        [sha for sha in object_store if sha.startswith(prefix)]
    )
    handle.repo.get_shallow.return_value = set()
    return handle
