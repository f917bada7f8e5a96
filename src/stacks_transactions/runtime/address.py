"""
Stacks addresses and c32check encoding.

An address is a 1-byte version plus a 20-byte HASH160. Its string form is
``"S" + c32(version) + c32(hash160 || checksum)`` where the checksum is the
first four bytes of SHA-256(SHA-256(version || hash160)).

Address doubles as a Pydantic custom type so option models can accept
either an Address instance or its string form.
"""

from __future__ import annotations
from typing import Any, Tuple

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from ..codec.hashes import sha256_bytes
from ..enums import HASH160_LENGTH_BYTES
from .errors import InvalidAddressError

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def _c32_normalize(text: str) -> str:
    return text.upper().replace("O", "0").replace("L", "1").replace("I", "1")


def c32_encode(data: bytes) -> str:
    """
    Encode bytes as a c32 string.

    Each leading zero byte becomes one leading ``0`` character; the rest is
    the base-32 expansion of the remaining big-endian integer.
    """
    leading = len(data) - len(data.lstrip(b"\x00"))
    num = int.from_bytes(data, "big")
    digits = []
    while num > 0:
        num, rem = divmod(num, 32)
        digits.append(C32_ALPHABET[rem])
    return C32_ALPHABET[0] * leading + "".join(reversed(digits))


def c32_decode(text: str) -> bytes:
    """Inverse of c32_encode."""
    text = _c32_normalize(text)
    leading = len(text) - len(text.lstrip(C32_ALPHABET[0]))
    num = 0
    for ch in text:
        idx = C32_ALPHABET.find(ch)
        if idx < 0:
            raise InvalidAddressError(f"Invalid c32 character {ch!r}", details={"input": text})
        num = num * 32 + idx
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading + body


def _c32_checksum(version: int, data: bytes) -> bytes:
    return sha256_bytes(sha256_bytes(bytes([version]) + data))[:4]


def c32_address(version: int, hash_bytes: bytes) -> str:
    """
    Encode a c32check address.

    Args:
        version: Address version (0-31)
        hash_bytes: 20-byte HASH160

    Returns:
        Address string such as ``SP...`` or ``ST...``
    """
    if not 0 <= version < 32:
        raise InvalidAddressError(f"Address version {version} out of range", details={"version": version})
    if len(hash_bytes) != HASH160_LENGTH_BYTES:
        raise InvalidAddressError(
            f"Address hash must be {HASH160_LENGTH_BYTES} bytes, got {len(hash_bytes)}",
            details={"length": len(hash_bytes)},
        )
    checksum = _c32_checksum(version, hash_bytes)
    return "S" + C32_ALPHABET[version] + c32_encode(hash_bytes + checksum)


def c32_address_decode(text: str) -> Tuple[int, bytes]:
    """
    Decode a c32check address into (version, hash160).

    Raises:
        InvalidAddressError: On bad prefix, characters, length or checksum
    """
    if not isinstance(text, str) or len(text) < 5 or text[0] not in "sS":
        raise InvalidAddressError(f"Invalid Stacks address: {text!r}", details={"address": text})
    version = C32_ALPHABET.find(_c32_normalize(text[1]))
    if version < 0:
        raise InvalidAddressError(f"Invalid address version character in {text!r}", details={"address": text})
    decoded = c32_decode(text[2:])
    if len(decoded) != HASH160_LENGTH_BYTES + 4:
        raise InvalidAddressError(f"Invalid Stacks address length: {text!r}", details={"address": text})
    hash_bytes, checksum = decoded[:-4], decoded[-4:]
    if checksum != _c32_checksum(version, hash_bytes):
        raise InvalidAddressError(f"Invalid Stacks address checksum: {text!r}", details={"address": text})
    return version, hash_bytes


class Address:
    """Version byte plus 20-byte HASH160."""

    __slots__ = ("version", "hash_bytes")

    def __init__(self, version: int, hash_bytes: bytes):
        if not 0 <= version < 32:
            raise InvalidAddressError(f"Address version {version} out of range", details={"version": version})
        if len(hash_bytes) != HASH160_LENGTH_BYTES:
            raise InvalidAddressError(
                f"Address hash must be {HASH160_LENGTH_BYTES} bytes, got {len(hash_bytes)}",
                details={"length": len(hash_bytes)},
            )
        self.version = int(version)
        self.hash_bytes = bytes(hash_bytes)

    @classmethod
    def from_string(cls, text: str) -> Address:
        """Parse a c32check address string."""
        version, hash_bytes = c32_address_decode(text)
        return cls(version, hash_bytes)

    @classmethod
    def from_hex(cls, version: int, hash_hex: str) -> Address:
        return cls(version, bytes.fromhex(hash_hex))

    def to_string(self) -> str:
        return c32_address(self.version, self.hash_bytes)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Address('{self.to_string()}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Address):
            return self.version == other.version and self.hash_bytes == other.hash_bytes
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.version, self.hash_bytes))

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        """Accept Address instances or c32check strings."""
        return core_schema.no_info_before_validator_function(
            cls._validate,
            core_schema.is_instance_schema(cls),
        )

    @classmethod
    def _validate(cls, value: Any) -> Address:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        raise ValueError(f"Invalid Address: {value!r}")


def parse_address(value: Any) -> Address:
    """Coerce an Address or a c32check string into an Address."""
    return Address._validate(value)


__all__ = [
    "Address",
    "C32_ALPHABET",
    "c32_encode",
    "c32_decode",
    "c32_address",
    "c32_address_decode",
    "parse_address",
]
