"""
Canonical binary encoding of Clarity values.

Every value is a one-byte type tag followed by a type-specific body:

    int/uint          16 bytes big-endian (two's complement for int)
    buffer            u32 length + bytes
    true/false/none   tag only
    some/ok/err       encoded inner value
    standard princ.   address version + 20-byte hash
    contract princ.   address version + hash + u8 name length + name
    list              u32 count + encoded elements
    tuple             u32 count + (u8 name length + name + encoded value)*

Decoding uses an explicit cursor and a depth counter bounded by
CodecLimits.max_depth.
"""

from __future__ import annotations
from typing import Optional, Tuple

from ..codec.reader import BinaryReader
from ..codec.writer import BinaryWriter
from ..config import CodecLimits, DEFAULT_LIMITS
from ..enums import ClarityType, HASH160_LENGTH_BYTES, MAX_STRING_LENGTH_BYTES
from ..runtime.address import Address
from ..runtime.errors import (
    DepthExceededError,
    InvalidAddressError,
    MalformedValueError,
    UnsupportedVariantError,
)
from .values import (
    BufferCV,
    ClarityValue,
    ContractPrincipalCV,
    FalseCV,
    IntCV,
    ListCV,
    NoneCV,
    ResponseErrorCV,
    ResponseOkCV,
    SomeCV,
    StandardPrincipalCV,
    TrueCV,
    TupleCV,
    UIntCV,
)


# =============================================================================
# Shared field helpers (also used by payloads and post-conditions)
# =============================================================================

def write_address(writer: BinaryWriter, address: Address) -> None:
    writer.u8(address.version)
    writer.bytes(address.hash_bytes)


def read_address(reader: BinaryReader) -> Address:
    version = reader.u8()
    hash_bytes = reader.bytes(HASH160_LENGTH_BYTES)
    try:
        return Address(version, hash_bytes)
    except InvalidAddressError as e:
        raise MalformedValueError(f"Invalid address at offset {reader.offset - 21}",
                                  details={"offset": reader.offset - 21}, cause=e)


def write_name(writer: BinaryWriter, name: str) -> None:
    """Write a 1-byte length-prefixed name (contract, function, tuple key)."""
    writer.u8_prefixed_bytes(name.encode("utf-8"))


def read_name(reader: BinaryReader) -> str:
    start = reader.offset
    raw = reader.u8_prefixed_bytes()
    if not raw or len(raw) > MAX_STRING_LENGTH_BYTES:
        raise MalformedValueError(
            f"Name of {len(raw)} bytes is outside 1-{MAX_STRING_LENGTH_BYTES}",
            details={"offset": start, "length": len(raw)},
        )
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedValueError("Name is not valid UTF-8", details={"offset": start}, cause=e)


# =============================================================================
# Encoding
# =============================================================================

def write_cv(writer: BinaryWriter, value: ClarityValue) -> None:
    """Append the encoding of ``value`` to ``writer``."""
    t = value.type
    writer.u8(int(t))
    if t in (ClarityType.BOOL_TRUE, ClarityType.BOOL_FALSE, ClarityType.OPTIONAL_NONE):
        return
    if t == ClarityType.INT:
        writer.i128be(value.value)
    elif t == ClarityType.UINT:
        writer.u128be(value.value)
    elif t == ClarityType.BUFFER:
        writer.u32_prefixed_bytes(value.buffer)
    elif t in (ClarityType.OPTIONAL_SOME, ClarityType.RESPONSE_OK, ClarityType.RESPONSE_ERR):
        write_cv(writer, value.value)
    elif t == ClarityType.PRINCIPAL_STANDARD:
        write_address(writer, value.address)
    elif t == ClarityType.PRINCIPAL_CONTRACT:
        write_address(writer, value.address)
        write_name(writer, value.contract_name)
    elif t == ClarityType.LIST:
        writer.u32be(len(value.values))
        for item in value.values:
            write_cv(writer, item)
    elif t == ClarityType.TUPLE:
        writer.u32be(len(value.fields))
        for name, item in value.fields:
            write_name(writer, name)
            write_cv(writer, item)
    else:
        raise UnsupportedVariantError("Clarity type", int(t))


def serialize_cv(value: ClarityValue) -> bytes:
    """
    Encode a Clarity value.

    Args:
        value: Any ClarityValue

    Returns:
        Canonical encoding
    """
    writer = BinaryWriter()
    write_cv(writer, value)
    return writer.to_bytes()


# =============================================================================
# Decoding
# =============================================================================

def _read_count(reader: BinaryReader, limits: CodecLimits, what: str) -> int:
    start = reader.offset
    count = reader.u32be()
    if count > limits.max_collection_length:
        raise MalformedValueError(
            f"{what} length {count} exceeds maximum {limits.max_collection_length}",
            details={"offset": start, "length": count, "max": limits.max_collection_length},
        )
    # every element takes at least one byte
    if count > reader.remaining:
        raise MalformedValueError(
            f"{what} declares {count} elements but only {reader.remaining} bytes remain",
            details={"offset": start, "length": count, "available": reader.remaining},
        )
    return count


def read_cv(reader: BinaryReader, limits: CodecLimits = DEFAULT_LIMITS, depth: int = 0) -> ClarityValue:
    """
    Decode one Clarity value at the reader's cursor.

    Raises:
        TruncatedInputError: A declared length runs past the input
        UnsupportedVariantError: Unknown type tag
        DepthExceededError: Nesting deeper than limits.max_depth
        MalformedValueError: Any other structural problem
    """
    start = reader.offset
    if depth > limits.max_depth:
        raise DepthExceededError(limits.max_depth, offset=start)
    tag = reader.u8()
    try:
        t = ClarityType(tag)
    except ValueError:
        raise UnsupportedVariantError("Clarity type", tag, offset=start) from None

    if t == ClarityType.INT:
        return IntCV(reader.i128be())
    if t == ClarityType.UINT:
        return UIntCV(reader.u128be())
    if t == ClarityType.BUFFER:
        return BufferCV(reader.u32_prefixed_bytes())
    if t == ClarityType.BOOL_TRUE:
        return TrueCV()
    if t == ClarityType.BOOL_FALSE:
        return FalseCV()
    if t == ClarityType.OPTIONAL_NONE:
        return NoneCV()
    if t == ClarityType.OPTIONAL_SOME:
        return SomeCV(read_cv(reader, limits, depth + 1))
    if t == ClarityType.RESPONSE_OK:
        return ResponseOkCV(read_cv(reader, limits, depth + 1))
    if t == ClarityType.RESPONSE_ERR:
        return ResponseErrorCV(read_cv(reader, limits, depth + 1))
    if t == ClarityType.PRINCIPAL_STANDARD:
        return StandardPrincipalCV(read_address(reader))
    if t == ClarityType.PRINCIPAL_CONTRACT:
        address = read_address(reader)
        return ContractPrincipalCV(address, read_name(reader))
    if t == ClarityType.LIST:
        count = _read_count(reader, limits, "List")
        return ListCV(tuple(read_cv(reader, limits, depth + 1) for _ in range(count)))
    # ClarityType.TUPLE
    count = _read_count(reader, limits, "Tuple")
    fields = []
    for _ in range(count):
        name = read_name(reader)
        fields.append((name, read_cv(reader, limits, depth + 1)))
    return TupleCV(tuple(fields))


def deserialize_cv(data: bytes, offset: int = 0,
                   limits: Optional[CodecLimits] = None) -> Tuple[ClarityValue, int]:
    """
    Decode a Clarity value starting at ``offset``.

    Args:
        data: Input bytes
        offset: Cursor position to start from
        limits: Decode bounds (defaults to CodecLimits())

    Returns:
        (value, new_offset)
    """
    reader = BinaryReader(data, offset)
    value = read_cv(reader, limits or DEFAULT_LIMITS)
    return value, reader.offset


def deserialize_cv_exact(data: bytes, limits: Optional[CodecLimits] = None) -> ClarityValue:
    """Decode exactly one value; trailing bytes raise TrailingDataError."""
    reader = BinaryReader(data)
    value = read_cv(reader, limits or DEFAULT_LIMITS)
    reader.expect_eof()
    return value


def cv_to_hex(value: ClarityValue) -> str:
    """Hex form of the encoding, ``0x``-prefixed as node APIs expect."""
    return "0x" + serialize_cv(value).hex()


def hex_to_cv(text: str, limits: Optional[CodecLimits] = None) -> ClarityValue:
    if text.startswith("0x"):
        text = text[2:]
    try:
        data = bytes.fromhex(text)
    except ValueError as e:
        raise MalformedValueError("Invalid hex string", cause=e)
    return deserialize_cv_exact(data, limits)


__all__ = [
    "serialize_cv",
    "deserialize_cv",
    "deserialize_cv_exact",
    "write_cv",
    "read_cv",
    "cv_to_hex",
    "hex_to_cv",
    "write_address",
    "read_address",
    "write_name",
    "read_name",
]
