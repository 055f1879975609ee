"""PNG chunk walking and tEXt metadata extraction.

A PNG file is an 8-byte signature followed by chunks laid out as::

    length (4, big-endian) | type (4) | payload (length) | crc (4)

Only ``tEXt`` chunks carry data we care about; everything else is skipped
without looking at the payload or validating the CRC.
"""

from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator

from pngsift.config import MAX_TEXT_RECORD
from pngsift.models import TextRecord

LOGGER = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
TEXT_CHUNK_TYPE = 0x74455874  # b"tEXt"
CRC_SIZE = 4

_HEADER = struct.Struct(">I")


def _read_u32(stream: BinaryIO) -> int | None:
    data = stream.read(_HEADER.size)
    if data is None or len(data) < _HEADER.size:
        return None
    return _HEADER.unpack(data)[0]


def _skip(stream: BinaryIO, count: int) -> None:
    if count <= 0:
        return
    if stream.seekable():
        stream.seek(count, io.SEEK_CUR)
        return
    # Unseekable streams (pipes, sockets) have to be drained.
    remaining = count
    while remaining > 0:
        data = stream.read(min(remaining, 1 << 16))
        if not data:
            return
        remaining -= len(data)


def split_text_payload(payload: bytes) -> TextRecord:
    """Split a tEXt payload at its first zero byte.

    A payload without a terminator is taken whole as the keyword.
    """
    keyword, sep, text = bytes(payload).partition(b"\x00")
    if not sep:
        text = b""
    return TextRecord(keyword.decode("latin-1"), text.decode("latin-1"))


class PngTextReader:
    """Walk a PNG chunk stream and collect its tEXt records.

    The reader owns a fixed buffer of ``max_record_size`` bytes, so one
    instance must not be shared between threads.
    """

    def __init__(self, max_record_size: int = MAX_TEXT_RECORD) -> None:
        # A negative limit behaves like zero: every non-empty tEXt record is skipped.
        self.max_record_size = max(int(max_record_size), 0)
        self._buffer = bytearray(self.max_record_size)

    def iter_records(self, stream: BinaryIO) -> Iterator[TextRecord]:
        signature = stream.read(len(PNG_SIGNATURE))
        if signature != PNG_SIGNATURE:
            LOGGER.debug("Stream does not start with the PNG signature")

        view = memoryview(self._buffer)
        while True:
            length = _read_u32(stream)
            if length is None:
                return
            chunk_type = _read_u32(stream)
            if chunk_type is None:
                return

            if chunk_type != TEXT_CHUNK_TYPE:
                _skip(stream, length + CRC_SIZE)
                continue

            if length > self.max_record_size:
                LOGGER.debug(
                    "Skipping tEXt record of %d bytes (limit %d)", length, self.max_record_size
                )
                _skip(stream, length + CRC_SIZE)
                continue

            target = view[:length]
            read = stream.readinto(target) if length else 0
            if read is None or read < length:
                LOGGER.debug("Truncated tEXt record: expected %d bytes, got %s", length, read)
                return
            yield split_text_payload(target)
            _skip(stream, CRC_SIZE)

    def read(self, stream: BinaryIO) -> str:
        """Return the rendered text of every tEXt record, in stream order."""
        parts = []
        try:
            for record in self.iter_records(stream):
                parts.append(record.render())
        except (OSError, ValueError) as exc:
            LOGGER.warning("Stopped reading chunk stream: %s", exc)
        return "".join(parts)


def parse_text_chunks(stream: BinaryIO, *, max_record_size: int = MAX_TEXT_RECORD) -> str:
    """Extract tEXt metadata from an open binary stream. Never raises."""
    return PngTextReader(max_record_size).read(stream)


def read_png_metadata(path: Path, *, max_record_size: int = MAX_TEXT_RECORD) -> str:
    """Extract tEXt metadata from a PNG file, or ``""`` if it cannot be read."""
    try:
        handle = Path(path).open("rb")
    except OSError as exc:
        LOGGER.error("Failed to open PNG %s: %s", path, exc)
        return ""
    with handle:
        return parse_text_chunks(handle, max_record_size=max_record_size)
