"""
Spending conditions and transaction authorization.

A spending condition proves the right to spend from one account: it names
the account by hash mode plus signer hash and carries the nonce, the fee
and the signature material.

Single-sig layout:

    hash mode, 20-byte signer, u64 nonce, u64 fee, key encoding, 65-byte signature

Multi-sig layout:

    hash mode, 20-byte signer, u64 nonce, u64 fee, u32 field count,
    fields (type byte + 33/65-byte key or 65-byte signature),
    u16 signatures required

Multi-sig fields are append-only and their order is the signing order; the
signer hash is derived from the public keys in that same order.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar, List, Sequence, Union

from ..codec.hashes import hash160, sha256_bytes
from ..codec.reader import BinaryReader
from ..codec.writer import BinaryWriter
from ..crypto.secp256k1 import MessageSignature, StacksPublicKey, parse_public_key
from ..enums import (
    AddressHashMode,
    AuthFieldType,
    AuthType,
    COMPRESSED_PUBKEY_LENGTH_BYTES,
    HASH160_LENGTH_BYTES,
    MAX_U64,
    PubKeyEncoding,
    RECOVERABLE_ECDSA_SIG_LENGTH_BYTES,
    UNCOMPRESSED_PUBKEY_LENGTH_BYTES,
)
from ..runtime.errors import (
    AuthorizationError,
    InvalidKeyError,
    MalformedValueError,
    UnsupportedVariantError,
    ValueOutOfRangeError,
)

# Largest multisig script a P2SH redeem script can express
MAX_MULTISIG_KEYS = 15

_OP_CHECKMULTISIG = 0xAE
_OP_1_BASE = 0x50


# =============================================================================
# Signer hash derivation
# =============================================================================

def _multisig_script(signatures_required: int, public_keys: Sequence[StacksPublicKey]) -> bytes:
    if signatures_required > MAX_MULTISIG_KEYS or len(public_keys) > MAX_MULTISIG_KEYS:
        raise AuthorizationError(f"Multisig script can hold at most {MAX_MULTISIG_KEYS} public keys")
    script = bytearray([_OP_1_BASE + signatures_required])
    for key in public_keys:
        script.append(len(key.public_key_bytes))
        script += key.public_key_bytes
    script.append(_OP_1_BASE + len(public_keys))
    script.append(_OP_CHECKMULTISIG)
    return bytes(script)


def address_hash_from_public_keys(hash_mode: AddressHashMode, signatures_required: int,
                                  public_keys: Sequence[StacksPublicKey]) -> bytes:
    """
    Derive the 20-byte signer hash of a set of public keys.

    Args:
        hash_mode: Spending condition hash mode
        signatures_required: Threshold (1 for single-sig modes)
        public_keys: Keys in field order

    Returns:
        HASH160 identifying the signer

    Raises:
        AuthorizationError: Wrong key count for a single-sig mode
        InvalidKeyError: Uncompressed key used with a segwit mode
    """
    if not public_keys:
        raise AuthorizationError("At least one public key is required")
    hash_mode = AddressHashMode(hash_mode)
    if hash_mode.is_single_sig and (len(public_keys) != 1 or signatures_required != 1):
        raise AuthorizationError("Single-sig hash modes take exactly one public key",
                                 details={"keys": len(public_keys), "required": signatures_required})
    if hash_mode in (AddressHashMode.SERIALIZE_P2WPKH, AddressHashMode.SERIALIZE_P2WSH):
        if not all(key.compressed for key in public_keys):
            raise InvalidKeyError("Segwit hash modes require compressed public keys")

    if hash_mode == AddressHashMode.SERIALIZE_P2PKH:
        return public_keys[0].hash160()
    if hash_mode == AddressHashMode.SERIALIZE_P2WPKH:
        return hash160(b"\x00\x14" + public_keys[0].hash160())
    script = _multisig_script(signatures_required, public_keys)
    if hash_mode == AddressHashMode.SERIALIZE_P2SH:
        return hash160(script)
    return hash160(b"\x00\x20" + sha256_bytes(script))


# =============================================================================
# Spending conditions
# =============================================================================

@dataclass
class SingleSigSpendingCondition:
    hash_mode: AddressHashMode
    signer: bytes
    nonce: int
    fee: int
    key_encoding: PubKeyEncoding
    signature: MessageSignature = field(default_factory=MessageSignature.empty)

    def __post_init__(self):
        if not AddressHashMode(self.hash_mode).is_single_sig:
            raise AuthorizationError(f"Hash mode {self.hash_mode!r} is not a single-sig mode")
        _check_common(self)

    @property
    def is_signed(self) -> bool:
        return not self.signature.is_empty

    def cleared(self) -> SingleSigSpendingCondition:
        """Copy with the signature zeroed; nonce, fee and signer kept."""
        return SingleSigSpendingCondition(self.hash_mode, self.signer, self.nonce, self.fee,
                                          self.key_encoding)


@dataclass
class TransactionAuthField:
    """One multi-sig field: a public key or a signature, tagged with its key encoding."""

    field_type: AuthFieldType
    data: bytes

    def __post_init__(self):
        self.field_type = AuthFieldType(self.field_type)
        if self.field_type.is_signature:
            expected = (RECOVERABLE_ECDSA_SIG_LENGTH_BYTES,)
        elif self.field_type == AuthFieldType.PUBLIC_KEY_COMPRESSED:
            expected = (COMPRESSED_PUBKEY_LENGTH_BYTES,)
        else:
            expected = (UNCOMPRESSED_PUBKEY_LENGTH_BYTES,)
        if len(self.data) not in expected:
            raise MalformedValueError(
                f"Auth field {self.field_type.name} must be {expected[0]} bytes, got {len(self.data)}",
                details={"field_type": int(self.field_type), "length": len(self.data)},
            )

    @property
    def is_signature(self) -> bool:
        return self.field_type.is_signature

    @property
    def encoding(self) -> PubKeyEncoding:
        return self.field_type.encoding

    @classmethod
    def from_public_key(cls, public_key: StacksPublicKey) -> TransactionAuthField:
        field_type = (AuthFieldType.PUBLIC_KEY_COMPRESSED if public_key.compressed
                      else AuthFieldType.PUBLIC_KEY_UNCOMPRESSED)
        return cls(field_type, public_key.public_key_bytes)

    @classmethod
    def from_signature(cls, encoding: PubKeyEncoding, signature: MessageSignature) -> TransactionAuthField:
        field_type = (AuthFieldType.SIGNATURE_COMPRESSED if encoding == PubKeyEncoding.COMPRESSED
                      else AuthFieldType.SIGNATURE_UNCOMPRESSED)
        return cls(field_type, signature.data)

    def signature(self) -> MessageSignature:
        return MessageSignature(self.data)

    def public_key(self) -> StacksPublicKey:
        return StacksPublicKey(self.data)


@dataclass
class MultiSigSpendingCondition:
    hash_mode: AddressHashMode
    signer: bytes
    nonce: int
    fee: int
    fields: List[TransactionAuthField]
    signatures_required: int

    def __post_init__(self):
        if AddressHashMode(self.hash_mode).is_single_sig:
            raise AuthorizationError(f"Hash mode {self.hash_mode!r} is not a multi-sig mode")
        _check_common(self)
        if not 0 <= self.signatures_required <= 0xFFFF:
            raise ValueOutOfRangeError(f"Signatures required {self.signatures_required} is not a u16",
                                       details={"signatures_required": self.signatures_required})

    @property
    def signature_count(self) -> int:
        return sum(1 for f in self.fields if f.is_signature)

    @property
    def is_signed(self) -> bool:
        return self.signature_count > 0

    @property
    def is_complete(self) -> bool:
        return self.signature_count == self.signatures_required

    def cleared(self) -> MultiSigSpendingCondition:
        """Copy with all fields removed; nonce, fee, signer and threshold kept."""
        return MultiSigSpendingCondition(self.hash_mode, self.signer, self.nonce, self.fee, [],
                                         self.signatures_required)


SpendingCondition = Union[SingleSigSpendingCondition, MultiSigSpendingCondition]


def _check_common(condition) -> None:
    condition.hash_mode = AddressHashMode(condition.hash_mode)
    if len(condition.signer) != HASH160_LENGTH_BYTES:
        raise ValueOutOfRangeError(
            f"Signer hash must be {HASH160_LENGTH_BYTES} bytes, got {len(condition.signer)}",
            details={"length": len(condition.signer)},
        )
    for name in ("nonce", "fee"):
        value = getattr(condition, name)
        if not 0 <= value <= MAX_U64:
            raise ValueOutOfRangeError(f"{name} {value} is not a u64", details={name: value})


def create_single_sig_spending_condition(hash_mode: AddressHashMode,
                                         public_key: Union[str, bytes, StacksPublicKey],
                                         nonce: int = 0, fee: int = 0) -> SingleSigSpendingCondition:
    """
    Unsigned single-sig condition for one public key.

    Args:
        hash_mode: P2PKH or P2WPKH
        public_key: Signer public key (its encoding is recorded)
        nonce: Account nonce
        fee: Fee in micro-STX
    """
    key = parse_public_key(public_key)
    signer = address_hash_from_public_keys(hash_mode, 1, [key])
    return SingleSigSpendingCondition(AddressHashMode(hash_mode), signer, nonce, fee, key.encoding)


def create_multi_sig_spending_condition(hash_mode: AddressHashMode, signatures_required: int,
                                        public_keys: Sequence[Union[str, bytes, StacksPublicKey]],
                                        nonce: int = 0, fee: int = 0) -> MultiSigSpendingCondition:
    """
    Unsigned multi-sig condition for an ordered key set.

    The signer hash commits to the key order, so signatures and appended
    public keys must later follow the same order.
    """
    keys = [parse_public_key(k) for k in public_keys]
    if not 1 <= signatures_required <= len(keys):
        raise AuthorizationError(
            f"Signatures required must be between 1 and {len(keys)}, got {signatures_required}",
            details={"required": signatures_required, "keys": len(keys)},
        )
    signer = address_hash_from_public_keys(hash_mode, signatures_required, keys)
    return MultiSigSpendingCondition(AddressHashMode(hash_mode), signer, nonce, fee, [], signatures_required)


def create_sponsored_placeholder() -> SingleSigSpendingCondition:
    """Blank condition standing in for the sponsor until one is set."""
    return SingleSigSpendingCondition(AddressHashMode.SERIALIZE_P2PKH, bytes(HASH160_LENGTH_BYTES), 0, 0,
                                      PubKeyEncoding.COMPRESSED)


def write_spending_condition(writer: BinaryWriter, condition: SpendingCondition) -> None:
    writer.u8(int(condition.hash_mode))
    writer.bytes(condition.signer)
    writer.u64be(condition.nonce)
    writer.u64be(condition.fee)
    if isinstance(condition, SingleSigSpendingCondition):
        writer.u8(int(condition.key_encoding))
        writer.bytes(condition.signature.data)
        return
    writer.u32be(len(condition.fields))
    for f in condition.fields:
        writer.u8(int(f.field_type))
        writer.bytes(f.data)
    writer.u16be(condition.signatures_required)


def read_spending_condition(reader: BinaryReader) -> SpendingCondition:
    start = reader.offset
    mode = reader.u8()
    try:
        hash_mode = AddressHashMode(mode)
    except ValueError:
        raise UnsupportedVariantError("hash mode", mode, offset=start) from None
    signer = reader.bytes(HASH160_LENGTH_BYTES)
    nonce = reader.u64be()
    fee = reader.u64be()

    if hash_mode.is_single_sig:
        enc_offset = reader.offset
        enc = reader.u8()
        try:
            key_encoding = PubKeyEncoding(enc)
        except ValueError:
            raise UnsupportedVariantError("public key encoding", enc, offset=enc_offset) from None
        signature = MessageSignature(reader.bytes(RECOVERABLE_ECDSA_SIG_LENGTH_BYTES))
        return SingleSigSpendingCondition(hash_mode, signer, nonce, fee, key_encoding, signature)

    count_offset = reader.offset
    count = reader.u32be()
    if count > reader.remaining:
        raise MalformedValueError(f"Spending condition declares {count} fields",
                                  details={"offset": count_offset, "length": count})
    fields = []
    for _ in range(count):
        type_offset = reader.offset
        tag = reader.u8()
        try:
            field_type = AuthFieldType(tag)
        except ValueError:
            raise UnsupportedVariantError("auth field type", tag, offset=type_offset) from None
        if field_type.is_signature:
            size = RECOVERABLE_ECDSA_SIG_LENGTH_BYTES
        elif field_type == AuthFieldType.PUBLIC_KEY_COMPRESSED:
            size = COMPRESSED_PUBKEY_LENGTH_BYTES
        else:
            size = UNCOMPRESSED_PUBKEY_LENGTH_BYTES
        fields.append(TransactionAuthField(field_type, reader.bytes(size)))
    signatures_required = reader.u16be()
    return MultiSigSpendingCondition(hash_mode, signer, nonce, fee, fields, signatures_required)


# =============================================================================
# Authorization
# =============================================================================

@dataclass
class StandardAuthorization:
    spending_condition: SpendingCondition
    auth_type: ClassVar[AuthType] = AuthType.STANDARD

    def into_initial_sighash_auth(self) -> StandardAuthorization:
        return StandardAuthorization(self.spending_condition.cleared())


@dataclass
class SponsoredAuthorization:
    """Origin condition plus a sponsor condition that pays the fee."""

    spending_condition: SpendingCondition
    sponsor_spending_condition: SpendingCondition = field(default_factory=create_sponsored_placeholder)
    auth_type: ClassVar[AuthType] = AuthType.SPONSORED

    def into_initial_sighash_auth(self) -> SponsoredAuthorization:
        return SponsoredAuthorization(self.spending_condition.cleared(), create_sponsored_placeholder())


Authorization = Union[StandardAuthorization, SponsoredAuthorization]


def create_standard_auth(spending_condition: SpendingCondition) -> StandardAuthorization:
    return StandardAuthorization(spending_condition)


def create_sponsored_auth(spending_condition: SpendingCondition,
                          sponsor_spending_condition: SpendingCondition = None) -> SponsoredAuthorization:
    if sponsor_spending_condition is None:
        sponsor_spending_condition = create_sponsored_placeholder()
    return SponsoredAuthorization(spending_condition, sponsor_spending_condition)


def write_authorization(writer: BinaryWriter, auth: Authorization) -> None:
    writer.u8(int(auth.auth_type))
    write_spending_condition(writer, auth.spending_condition)
    if auth.auth_type == AuthType.SPONSORED:
        write_spending_condition(writer, auth.sponsor_spending_condition)


def read_authorization(reader: BinaryReader) -> Authorization:
    start = reader.offset
    tag = reader.u8()
    if tag == AuthType.STANDARD:
        return StandardAuthorization(read_spending_condition(reader))
    if tag == AuthType.SPONSORED:
        origin = read_spending_condition(reader)
        return SponsoredAuthorization(origin, read_spending_condition(reader))
    raise UnsupportedVariantError("authorization type", tag, offset=start)


__all__ = [
    "MAX_MULTISIG_KEYS",
    "address_hash_from_public_keys",
    "SingleSigSpendingCondition",
    "TransactionAuthField",
    "MultiSigSpendingCondition",
    "SpendingCondition",
    "create_single_sig_spending_condition",
    "create_multi_sig_spending_condition",
    "create_sponsored_placeholder",
    "write_spending_condition",
    "read_spending_condition",
    "StandardAuthorization",
    "SponsoredAuthorization",
    "Authorization",
    "create_standard_auth",
    "create_sponsored_auth",
    "write_authorization",
    "read_authorization",
]
