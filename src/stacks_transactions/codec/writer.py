"""
Binary Writer

Accumulates the canonical big-endian encoding used by every Stacks wire
structure: fixed-width unsigned integers, raw bytes and length-prefixed
byte strings with 1-byte or 4-byte prefixes.
"""

import struct
from typing import List

from ..runtime.errors import ValueOutOfRangeError


class BinaryWriter:
    """
    Binary writer for Stacks wire structures.

    All multi-byte integers are written big-endian. Out-of-range values are
    rejected rather than masked, since a silently truncated nonce or amount
    would still produce a well-formed but wrong transaction.
    """

    def __init__(self):
        """Initialize writer with empty byte buffer."""
        self._bb: List[int] = []

    def _check(self, v: int, bits: int, field: str) -> None:
        if v < 0 or v >= 1 << bits:
            raise ValueOutOfRangeError(
                f"{field} value {v} does not fit in {bits} bits",
                details={"field": field, "value": v, "bits": bits},
            )

    def u8(self, v: int) -> None:
        """
        Write unsigned 8-bit integer.

        Args:
            v: Integer value to write (0-255)
        """
        self._check(v, 8, "u8")
        self._bb.append(v)

    def u16be(self, v: int) -> None:
        """Write unsigned 16-bit integer in big-endian format."""
        self._check(v, 16, "u16")
        self._bb.extend(struct.pack('>H', v))

    def u32be(self, v: int) -> None:
        """
        Write unsigned 32-bit integer in big-endian format.

        Args:
            v: Integer value to write as 32-bit big-endian
        """
        self._check(v, 32, "u32")
        self._bb.extend(struct.pack('>I', v))

    def u64be(self, v: int) -> None:
        """
        Write unsigned 64-bit integer in big-endian format.

        Args:
            v: Integer value to write as 64-bit big-endian
        """
        self._check(v, 64, "u64")
        self._bb.extend(struct.pack('>Q', v))

    def u128be(self, v: int) -> None:
        """Write unsigned 128-bit integer in big-endian format."""
        self._check(v, 128, "u128")
        self._bb.extend(v.to_bytes(16, 'big'))

    def i128be(self, v: int) -> None:
        """Write signed 128-bit integer, big-endian two's complement."""
        if v < -(1 << 127) or v >= 1 << 127:
            raise ValueOutOfRangeError(
                f"i128 value {v} does not fit in 128 bits",
                details={"field": "i128", "value": v, "bits": 128},
            )
        self._bb.extend(v.to_bytes(16, 'big', signed=True))

    def bytes(self, v: bytes) -> None:
        """
        Write raw bytes without length prefix.

        Args:
            v: Bytes to write directly
        """
        self._bb.extend(v)

    def u8_prefixed_bytes(self, v: bytes) -> None:
        """Write bytes with a 1-byte length prefix."""
        self._check(len(v), 8, "length")
        self.u8(len(v))
        self.bytes(v)

    def u32_prefixed_bytes(self, v: bytes) -> None:
        """Write bytes with a 4-byte big-endian length prefix."""
        self._check(len(v), 32, "length")
        self.u32be(len(v))
        self.bytes(v)

    def __len__(self) -> int:
        return len(self._bb)

    def to_bytes(self) -> bytes:
        """
        Return accumulated bytes as immutable bytes object.

        Returns:
            Bytes containing all written data
        """
        return bytes(self._bb)
