from __future__ import annotations

import codecs
import shutil
from pathlib import Path

DEFAULT_ENCODING = "utf-8"
# Canonical codec names as reported by codecs.lookup().
SUPPORTED_ENCODINGS = ("utf-8", "gbk", "gb18030", "big5", "shift_jis", "euc_jp")

_UTF8_BOM = codecs.BOM_UTF8


class CodecError(ValueError):
    """Base class for text <-> bytes conversion failures."""


class UnsupportedEncodingError(CodecError):
    """Raised when an encoding name is unknown or not offered by webnote."""


class DocumentDecodeError(CodecError):
    """Raised when file bytes are not valid for the configured encoding."""

    def __init__(self, encoding: str, offset: int, reason: str) -> None:
        self.encoding = encoding
        self.offset = offset
        self.reason = reason
        super().__init__(
            f"File is not valid {encoding} (byte {offset}: {reason})"
        )


class DocumentEncodeError(CodecError):
    """Raised when text holds characters the configured encoding cannot store."""

    def __init__(self, encoding: str, character: str, position: int) -> None:
        self.encoding = encoding
        self.character = character
        self.position = position
        super().__init__(
            f"Content contains characters that cannot be encoded in {encoding} "
            f"({character!r} at position {position})"
        )


def resolve_encoding(name: str) -> str:
    try:
        canonical = codecs.lookup(name.strip()).name
    except (LookupError, AttributeError) as exc:
        raise UnsupportedEncodingError(f"Unknown encoding: {name!r}") from exc
    if canonical not in SUPPORTED_ENCODINGS:
        supported = ", ".join(SUPPORTED_ENCODINGS)
        raise UnsupportedEncodingError(
            f"Encoding {name!r} is not supported (choose one of: {supported})"
        )
    return canonical


def decode_text(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    """Decode file bytes strictly; invalid input raises instead of being replaced."""
    if encoding == "utf-8" and data.startswith(_UTF8_BOM):
        data = data[len(_UTF8_BOM):]
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise DocumentDecodeError(encoding, exc.start, exc.reason) from exc


def encode_text(text: str, encoding: str = DEFAULT_ENCODING) -> bytes:
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        raise DocumentEncodeError(encoding, exc.object[exc.start], exc.start) from exc


def read_document(path: Path, encoding: str = DEFAULT_ENCODING) -> str:
    return decode_text(path.read_bytes(), encoding)


def _temp_path_for(path: Path) -> Path:
    return path.with_name(f".{path.name}.webnote.tmp")


def write_document(path: Path, text: str, encoding: str = DEFAULT_ENCODING) -> int:
    """
    Encode ``text`` and replace ``path`` with it.

    Encoding happens before anything touches the disk, so an unencodable
    character leaves the existing file as it was. The bytes are written to a
    sibling temp file which is then renamed over the target; an existing
    file keeps its permission bits. Returns the number of bytes written.
    """
    payload = encode_text(text, encoding)
    tmp_path = _temp_path_for(path)
    try:
        tmp_path.write_bytes(payload)
        if path.exists():
            shutil.copymode(path, tmp_path)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    return len(payload)


__all__ = [
    "DEFAULT_ENCODING",
    "SUPPORTED_ENCODINGS",
    "CodecError",
    "UnsupportedEncodingError",
    "DocumentDecodeError",
    "DocumentEncodeError",
    "resolve_encoding",
    "decode_text",
    "encode_text",
    "read_document",
    "write_document",
]
