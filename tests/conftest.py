"""Shared fixtures for building PNG chunk streams in tests."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import Callable, Iterable, Tuple

import pytest

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def build_chunk(chunk_type: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(chunk_type + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + chunk_type + payload + struct.pack(">I", crc)


def build_png(chunks: Iterable[Tuple[bytes, bytes]], *, signature: bytes = PNG_SIGNATURE) -> bytes:
    return signature + b"".join(build_chunk(kind, payload) for kind, payload in chunks)


def text_chunk(keyword: str, text: str) -> Tuple[bytes, bytes]:
    return b"tEXt", keyword.encode("latin-1") + b"\x00" + text.encode("latin-1")


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Build a PNG byte string from ``(type, payload)`` pairs."""
    return build_png


@pytest.fixture
def text_record() -> Callable[[str, str], Tuple[bytes, bytes]]:
    return text_chunk


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    """Write a PNG with the given text records into ``tmp_path``."""

    def _write(name: str, records: Iterable[Tuple[str, str]] = (), folder: Path | None = None) -> Path:
        target = (folder or tmp_path) / name
        chunks = [(b"IHDR", b"\x00" * 13)]
        chunks.extend(text_chunk(keyword, text) for keyword, text in records)
        chunks.append((b"IEND", b""))
        target.write_bytes(build_png(chunks))
        return target

    return _write
