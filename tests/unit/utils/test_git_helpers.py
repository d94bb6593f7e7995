from datetime import UTC, datetime

import pytest

from gitmeta.utils import (
    decode_bytes,
    decode_path,
    is_hex,
    local_branch_ref,
    parse_identity,
    remote_branch_ref,
    strip_refs_heads,
    timestamp_to_utc,
)


class TestDecodeBytes:
    def test_decodes_bytes(self) -> None:
        assert decode_bytes(b"main") == "main"

    def test_passes_str_through(self) -> None:
        assert decode_bytes("main") == "main"

    def test_invalid_utf8_is_replaced(self) -> None:
        assert decode_bytes(b"caf\xe9") == "caf�"


class TestDecodePath:
    def test_utf8_path(self) -> None:
        assert decode_path("docs/caf\u00e9.md".encode()) == "docs/caf\u00e9.md"

    def test_distinct_invalid_paths_stay_distinct(self) -> None:
        first = decode_path(b"caf\xe9")
        second = decode_path(b"caf\xe8")

        assert first != second
        assert first.encode("utf-8", "surrogateescape") == b"caf\xe9"


class TestIsHex:
    @pytest.mark.parametrize("value", ["0", "abcdef0123456789", "a" * 40])
    def test_accepts_lowercase_hex(self, value: str) -> None:
        assert is_hex(value)

    @pytest.mark.parametrize("value", ["", "ABCD", "abcg", "ab cd", "0x12"])
    def test_rejects_other_input(self, value: str) -> None:
        assert not is_hex(value)


class TestRefNames:
    def test_strip_refs_heads(self) -> None:
        assert strip_refs_heads(b"refs/heads/feature/x") == "feature/x"
        assert strip_refs_heads("main") == "main"
        assert strip_refs_heads(None) is None

    def test_local_branch_ref(self) -> None:
        assert local_branch_ref("main") == b"refs/heads/main"

    def test_remote_branch_ref(self) -> None:
        assert remote_branch_ref("origin", "release/1.0") == b"refs/remotes/origin/release/1.0"


class TestParseIdentity:
    def test_name_and_email(self) -> None:
        assert parse_identity(b"Ada Lovelace <ada@example.com>") == (
            "Ada Lovelace",
            "ada@example.com",
        )

    def test_missing_email(self) -> None:
        assert parse_identity(b"ci-bot") == ("ci-bot", "")

    def test_angle_bracket_in_name(self) -> None:
        assert parse_identity(b"A <b> C <c@example.com>") == ("A <b> C", "c@example.com")


def test_timestamp_to_utc() -> None:
    assert timestamp_to_utc(0) == datetime(1970, 1, 1, tzinfo=UTC)
