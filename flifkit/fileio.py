"""Byte-oriented readers and writers over files and memory blocks."""

from __future__ import annotations

import io
import os
from typing import BinaryIO

EOS = -1


def _as_bytes(text: str | bytes) -> bytes:
    return text.encode("utf-8") if isinstance(text, str) else bytes(text)


def _resolve_position(offset: int, whence: int, current: int, end: int) -> int:
    if whence == os.SEEK_SET:
        position = offset
    elif whence == os.SEEK_CUR:
        position = current + offset
    elif whence == os.SEEK_END:
        position = end + offset
    else:
        raise ValueError(f"invalid whence: {whence}")
    if position < 0:
        raise ValueError(f"negative seek position: {position}")
    return position


class FileIO:
    """Byte access to an open binary stream; closes the stream when done."""

    EOS = EOS

    def __init__(self, stream: BinaryIO, name: str) -> None:
        self._stream: BinaryIO | None = stream
        self.name = name
        self._eof = False

    def __enter__(self) -> FileIO:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def _open_stream(self) -> BinaryIO:
        if self._stream is None:
            raise ValueError(f"I/O operation on closed stream {self.name}")
        return self._stream

    @property
    def eof(self) -> bool:
        """True once a read has run into the end of the stream."""
        return self._eof

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def flush(self) -> None:
        self._open_stream.flush()

    def tell(self) -> int:
        return self._open_stream.tell()

    def getc(self) -> int:
        """Return the next byte, or EOS at the end of the stream."""
        chunk = self._open_stream.read(1)
        if not chunk:
            self._eof = True
            return EOS
        return chunk[0]

    def gets(self, n: int) -> bytes | None:
        """Read a line of at most n-1 bytes; None if nothing could be read."""
        if n < 1:
            raise ValueError("buffer size must be at least 1")
        limit = n - 1
        if limit == 0:
            return b""
        data = self._open_stream.readline(limit)
        if len(data) < limit and not data.endswith(b"\n"):
            self._eof = True
        return data or None

    def puts(self, text: str | bytes) -> int:
        data = _as_bytes(text)
        self._open_stream.write(data)
        return len(data)

    def putc(self, c: int) -> int:
        byte = c & 0xFF
        self._open_stream.write(bytes((byte,)))
        return byte

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        self._open_stream.seek(offset, whence)
        self._eof = False


class BlobReader:
    """Read-only byte access to a constant memory block."""

    EOS = EOS
    name = "BlobReader"

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def eof(self) -> bool:
        return self._pos >= len(self._data)

    def tell(self) -> int:
        return self._pos

    def getc(self) -> int:
        if self._pos >= len(self._data):
            return EOS
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    def gets(self, n: int) -> bytes | None:
        """Consume up to n-1 bytes; return them only if that many were available."""
        if n < 1:
            raise ValueError("buffer size must be at least 1")
        chunk = self._data[self._pos:self._pos + n - 1]
        self._pos += len(chunk)
        return chunk if len(chunk) == n - 1 else None

    def putc(self, c: int) -> int:
        """Writing is refused: the block is constant memory."""
        raise io.UnsupportedOperation(
            f"{self.name} is read-only; cannot write byte {c & 0xFF}"
        )

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        self._pos = _resolve_position(offset, whence, self._pos, len(self._data))


class BlobIO:
    """Read/write byte access to a growable memory block."""

    EOS = EOS
    name = "BlobIO"

    def __init__(self) -> None:
        self._data = bytearray()
        self._pos = 0

    def release(self) -> bytes:
        """Hand over the written bytes and reset to an empty block."""
        data = bytes(self._data)
        self._data = bytearray()
        self._pos = 0
        return data

    def flush(self) -> int:
        """Nothing is buffered; return the number of bytes the block holds."""
        return len(self._data)

    @property
    def eof(self) -> bool:
        return self._pos >= len(self._data)

    def tell(self) -> int:
        return self._pos

    def getc(self) -> int:
        if self._pos >= len(self._data):
            return EOS
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    def gets(self, n: int) -> bytes | None:
        """Consume up to n-1 bytes; return them only if that many were available."""
        if n < 1:
            raise ValueError("buffer size must be at least 1")
        chunk = bytes(self._data[self._pos:self._pos + n - 1])
        self._pos += len(chunk)
        return chunk if len(chunk) == n - 1 else None

    def _write(self, chunk: bytes) -> None:
        if self._pos > len(self._data):
            # the position was moved past the written bytes: fill the gap with zeroes
            self._data.extend(bytes(self._pos - len(self._data)))
        self._data[self._pos:self._pos + len(chunk)] = chunk
        self._pos += len(chunk)

    def puts(self, text: str | bytes) -> int:
        data = _as_bytes(text)
        self._write(data)
        return len(data)

    def putc(self, c: int) -> int:
        byte = c & 0xFF
        self._write(bytes((byte,)))
        return byte

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> None:
        self._pos = _resolve_position(offset, whence, self._pos, len(self._data))