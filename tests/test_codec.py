from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from webnote.codec import (
    DocumentDecodeError,
    DocumentEncodeError,
    UnsupportedEncodingError,
    decode_text,
    encode_text,
    read_document,
    resolve_encoding,
    write_document,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("utf-8", "utf-8"),
        ("UTF8", "utf-8"),
        ("gbk", "gbk"),
        ("cp936", "gbk"),
        ("Shift-JIS", "shift_jis"),
        ("euc-jp", "euc_jp"),
    ],
)
def test_resolve_encoding_accepts_aliases(name: str, expected: str) -> None:
    assert resolve_encoding(name) == expected


def test_resolve_encoding_rejects_unknown_and_unsupported() -> None:
    with pytest.raises(UnsupportedEncodingError):
        resolve_encoding("klingon")
    with pytest.raises(UnsupportedEncodingError) as excinfo:
        resolve_encoding("latin-1")
    assert "not supported" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_decode_text_is_strict() -> None:
    with pytest.raises(DocumentDecodeError) as excinfo:
        decode_text(b"ok\xff\xfe", "utf-8")
    assert excinfo.value.offset == 2
    assert excinfo.value.encoding == "utf-8"


def test_decode_text_strips_utf8_bom() -> None:
    assert decode_text(b"\xef\xbb\xbfhello", "utf-8") == "hello"


def test_encode_text_reports_first_unencodable_character() -> None:
    with pytest.raises(DocumentEncodeError) as excinfo:
        encode_text("中文 ok 😀", "gbk")
    assert excinfo.value.character == "😀"
    assert excinfo.value.position == 6
    assert "gbk" in str(excinfo.value)


def test_write_document_replaces_file_and_leaves_no_temp(tmp_path: Path) -> None:
    target = tmp_path / "note.txt"
    target.write_bytes(b"old contents that are longer")

    written = write_document(target, "你好", "gbk")

    assert written == len("你好".encode("gbk"))
    assert target.read_bytes() == "你好".encode("gbk")
    assert read_document(target, "gbk") == "你好"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["note.txt"]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_write_document_keeps_existing_permissions(tmp_path: Path) -> None:
    target = tmp_path / "script.txt"
    target.write_text("old", encoding="utf-8")
    target.chmod(0o640)

    write_document(target, "new")

    assert target.read_text(encoding="utf-8") == "new"
    assert stat.S_IMODE(target.stat().st_mode) == 0o640


def test_write_document_unencodable_keeps_original(tmp_path: Path) -> None:
    target = tmp_path / "note.txt"
    original = "原文".encode("gbk")
    target.write_bytes(original)

    with pytest.raises(DocumentEncodeError):
        write_document(target, "原文 😀", "gbk")

    assert target.read_bytes() == original
    assert sorted(p.name for p in tmp_path.iterdir()) == ["note.txt"]


def test_write_document_missing_directory_raises_oserror(tmp_path: Path) -> None:
    target = tmp_path / "missing" / "note.txt"
    with pytest.raises(OSError):
        write_document(target, "text")
    assert not (tmp_path / "missing").exists()
