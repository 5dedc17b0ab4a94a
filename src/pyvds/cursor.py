"""
This module provides a bounds-checked sequential reader over an immutable
byte buffer.
"""
from .exceptions import BufferUnderrun


class ByteCursor:
    """
    Reads bytes from a buffer front to back.

    The offset always stays within ``0 <= offset <= len(buffer)``. Any read that
    would pass the end raises BufferUnderrun instead of returning short data.
    """

    def __init__(self, buffer: bytes, offset: int = 0):
        """
        Initializes the cursor.

        Args:
            buffer: The bytes to read. A copy is taken if a mutable buffer is given.
            offset: The starting position.
        """
        self._buffer = bytes(buffer)
        if not 0 <= offset <= len(self._buffer):
            raise ValueError(f"Offset {offset} is outside the buffer")
        self._offset = offset

    @property
    def buffer(self) -> bytes:
        return self._buffer

    @property
    def offset(self) -> int:
        return self._offset

    def remaining(self) -> int:
        """
        Returns the number of unread bytes.
        """
        return len(self._buffer) - self._offset

    def _require(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        if n > self.remaining():
            raise BufferUnderrun(self._offset, n, self.remaining())

    def peek(self, offset: int = 0) -> int:
        """
        Returns the byte ``offset`` positions ahead without consuming it.

        Raises:
            BufferUnderrun: If the position is past the end of the buffer.
        """
        self._require(offset + 1)
        return self._buffer[self._offset + offset]

    def read_byte(self) -> int:
        self._require(1)
        value = self._buffer[self._offset]
        self._offset += 1
        return value

    def read_bytes(self, n: int) -> bytes:
        """
        Reads exactly ``n`` bytes and advances past them.

        Raises:
            BufferUnderrun: If fewer than ``n`` bytes remain.
            ValueError: If ``n`` is negative.
        """
        self._require(n)
        value = self._buffer[self._offset:self._offset + n]
        self._offset += n
        return value

    def rewind(self, n: int = 1) -> None:
        """
        Moves the offset back by ``n`` bytes.
        """
        if n < 0 or n > self._offset:
            raise ValueError(f"Cannot rewind {n} bytes from offset {self._offset}")
        self._offset -= n

    def __repr__(self) -> str:
        return f"ByteCursor(offset={self._offset}, length={len(self._buffer)})"
