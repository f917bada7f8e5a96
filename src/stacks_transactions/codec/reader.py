"""
Binary Reader

Decodes the big-endian primitives written by BinaryWriter with an explicit
cursor. Every read is bounds-checked; reading past the end raises
TruncatedInputError carrying the offending offset.
"""

import builtins
import struct

from ..runtime.errors import TruncatedInputError, TrailingDataError


class BinaryReader:
    """
    Binary reader over an immutable byte buffer.

    The cursor only moves forward. Callers that decode a complete structure
    finish with ``expect_eof()`` so that trailing bytes are rejected.
    """

    def __init__(self, buf: builtins.bytes, offset: int = 0):
        """
        Initialize reader with byte buffer.

        Args:
            buf: Byte buffer to read from
            offset: Starting cursor position
        """
        self._buf = builtins.bytes(buf)
        self._off = offset

    @property
    def offset(self) -> int:
        """Current cursor position."""
        return self._off

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._buf) - self._off

    @property
    def eof(self) -> bool:
        """
        Check if at end of buffer.

        Returns:
            True if at end of buffer
        """
        return self._off >= len(self._buf)

    def _need(self, n: int, what: str) -> None:
        if n > self.remaining:
            raise TruncatedInputError(
                f"Attempting to read {what} beyond end of input",
                offset=self._off, needed=n, available=self.remaining,
            )

    def peek_u8(self) -> int:
        """Return the next byte without consuming it."""
        self._need(1, "u8")
        return self._buf[self._off]

    def u8(self) -> int:
        """
        Read unsigned 8-bit integer.

        Returns:
            Unsigned 8-bit integer value
        """
        self._need(1, "u8")
        val = self._buf[self._off]
        self._off += 1
        return val

    def u16be(self) -> int:
        """Read unsigned 16-bit big-endian integer."""
        self._need(2, "u16")
        val = struct.unpack(">H", self._buf[self._off : self._off + 2])[0]
        self._off += 2
        return val

    def u32be(self) -> int:
        """
        Read unsigned 32-bit integer in big-endian format.

        Returns:
            Unsigned 32-bit integer value
        """
        self._need(4, "u32")
        val = struct.unpack(">I", self._buf[self._off : self._off + 4])[0]
        self._off += 4
        return val

    def u64be(self) -> int:
        """
        Read unsigned 64-bit integer in big-endian format.

        Returns:
            Unsigned 64-bit integer value
        """
        self._need(8, "u64")
        val = struct.unpack(">Q", self._buf[self._off : self._off + 8])[0]
        self._off += 8
        return val

    def u128be(self) -> int:
        """Read unsigned 128-bit big-endian integer."""
        return int.from_bytes(self.bytes(16), "big")

    def i128be(self) -> int:
        """Read signed 128-bit big-endian two's complement integer."""
        return int.from_bytes(self.bytes(16), "big", signed=True)

    def bytes(self, n: int) -> builtins.bytes:
        """
        Read n bytes from buffer.

        Args:
            n: Number of bytes to read

        Returns:
            Bytes of specified length
        """
        self._need(n, f"{n} bytes")
        out = self._buf[self._off : self._off + n]
        self._off += n
        return out

    def u8_prefixed_bytes(self) -> builtins.bytes:
        """Read bytes with a 1-byte length prefix."""
        n = self.u8()
        return self.bytes(n)

    def u32_prefixed_bytes(self) -> builtins.bytes:
        """Read bytes with a 4-byte big-endian length prefix."""
        n = self.u32be()
        return self.bytes(n)

    def expect_eof(self) -> None:
        """
        Assert that the whole buffer was consumed.

        Raises:
            TrailingDataError: If unread bytes remain
        """
        if not self.eof:
            raise TrailingDataError(self._off, self.remaining)
