"""
Stacks transaction envelope.

Serialized field order:

    version (u8), chain id (u32), authorization, anchor mode (u8),
    post-condition mode (u8), post-condition count (u32), post-conditions,
    payload

The envelope also owns the per-condition steps of the sighash chain: the
initial sighash, one sign-and-append step per signature, and verification
by public key recovery. TransactionSigner drives these steps in order.

Changing the fee or nonce of a signed condition does not clear its
signature. The old signature no longer verifies; re-signing is the
caller's job.
"""

from __future__ import annotations
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from ..codec.hashes import sha512_256, sighash_postsign, sighash_presign, txid_from_bytes
from ..codec.reader import BinaryReader
from ..codec.writer import BinaryWriter
from ..config import CodecLimits, DEFAULT_LIMITS
from ..crypto.secp256k1 import (
    StacksPrivateKey,
    StacksPublicKey,
    parse_private_key,
    parse_public_key,
    recover_public_key,
    sign_with_key,
)
from ..enums import (
    AnchorMode,
    AuthType,
    ChainID,
    DEFAULT_CHAIN_ID,
    MAX_U64,
    PostConditionMode,
    TransactionVersion,
)
from ..runtime.errors import (
    AuthorizationError,
    AuthorizationKindMismatchError,
    MalformedValueError,
    NoSlotAvailableError,
    SigningKeyMismatchError,
    ThresholdNotMetError,
    UnsupportedVariantError,
    ValueOutOfRangeError,
)
from .authorization import (
    Authorization,
    MultiSigSpendingCondition,
    SingleSigSpendingCondition,
    SpendingCondition,
    SponsoredAuthorization,
    TransactionAuthField,
    address_hash_from_public_keys,
    read_authorization,
    write_authorization,
)
from .payload import Payload, read_payload, write_payload
from .postconditions import PostCondition, read_post_condition, write_post_condition

logger = logging.getLogger(__name__)


def _read_enum(reader: BinaryReader, enum_cls, kind: str):
    start = reader.offset
    tag = reader.u8()
    try:
        return enum_cls(tag)
    except ValueError:
        raise UnsupportedVariantError(kind, tag, offset=start) from None


@dataclass
class StacksTransaction:
    """
    Transaction envelope.

    Mutated in place by its owner (fee, nonce, sponsor) and by a
    TransactionSigner (signatures); not safe for concurrent mutation.
    """

    version: TransactionVersion
    auth: Authorization
    payload: Payload
    chain_id: int = DEFAULT_CHAIN_ID
    anchor_mode: AnchorMode = AnchorMode.ANY
    post_condition_mode: PostConditionMode = PostConditionMode.DENY
    post_conditions: List[PostCondition] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def serialize(self) -> bytes:
        """
        Canonical wire encoding.

        Returns:
            Transaction bytes as accepted by a node
        """
        writer = BinaryWriter()
        writer.u8(int(self.version))
        writer.u32be(int(self.chain_id))
        write_authorization(writer, self.auth)
        writer.u8(int(self.anchor_mode))
        writer.u8(int(self.post_condition_mode))
        writer.u32be(len(self.post_conditions))
        for condition in self.post_conditions:
            write_post_condition(writer, condition)
        write_payload(writer, self.payload)
        return writer.to_bytes()

    def to_hex(self) -> str:
        return self.serialize().hex()

    @classmethod
    def deserialize(cls, data: Union[bytes, str], limits: Optional[CodecLimits] = None) -> StacksTransaction:
        """
        Decode a complete transaction.

        Args:
            data: Transaction bytes or hex string
            limits: Bounds for embedded Clarity values

        Raises:
            UnsupportedVariantError: Unknown version, mode, or payload tag
            TrailingDataError: Bytes left after the payload
            MalformedValueError: Any other structural problem
        """
        if isinstance(data, str):
            try:
                data = bytes.fromhex(data[2:] if data.startswith("0x") else data)
            except ValueError as e:
                raise MalformedValueError("Invalid hex string", cause=e)
        limits = limits or DEFAULT_LIMITS
        reader = BinaryReader(data)

        version = _read_enum(reader, TransactionVersion, "transaction version")
        chain_id = reader.u32be()
        if chain_id in ChainID._value2member_map_:
            chain_id = ChainID(chain_id)
        auth = read_authorization(reader)
        anchor_mode = _read_enum(reader, AnchorMode, "anchor mode")
        post_condition_mode = _read_enum(reader, PostConditionMode, "post-condition mode")

        count_offset = reader.offset
        count = reader.u32be()
        if count > reader.remaining:
            raise MalformedValueError(f"Transaction declares {count} post-conditions",
                                      details={"offset": count_offset, "length": count})
        post_conditions = [read_post_condition(reader, limits) for _ in range(count)]
        payload = read_payload(reader, limits)
        reader.expect_eof()

        return cls(version, auth, payload, chain_id, anchor_mode, post_condition_mode, post_conditions)

    def txid_bytes(self) -> bytes:
        return txid_from_bytes(self.serialize())

    def txid(self) -> str:
        """Transaction id: hex SHA-512/256 of the serialization."""
        return self.txid_bytes().hex()

    # -------------------------------------------------------------------------
    # Caller mutation
    # -------------------------------------------------------------------------

    @property
    def is_sponsored(self) -> bool:
        return self.auth.auth_type == AuthType.SPONSORED

    def _require_sponsored(self, operation: str) -> SponsoredAuthorization:
        if not self.is_sponsored:
            raise AuthorizationKindMismatchError(f"Cannot {operation} on a standard authorization")
        return self.auth

    def _warn_if_signed(self, condition: SpendingCondition, what: str) -> None:
        if condition.is_signed:
            logger.warning(f"Changing {what} of a signed spending condition; existing signatures no longer verify")

    def set_fee(self, amount: int) -> None:
        """
        Set the fee paid by the transaction.

        The fee belongs to the sponsor condition of a sponsored transaction
        and to the origin condition otherwise.
        """
        condition = self.auth.sponsor_spending_condition if self.is_sponsored else self.auth.spending_condition
        self._warn_if_signed(condition, "fee")
        _set_u64(condition, "fee", amount)
        logger.debug(f"Set fee to {amount}")

    def set_nonce(self, nonce: int) -> None:
        """Set the origin nonce."""
        self._warn_if_signed(self.auth.spending_condition, "nonce")
        _set_u64(self.auth.spending_condition, "nonce", nonce)
        logger.debug(f"Set origin nonce to {nonce}")

    def set_sponsor_nonce(self, nonce: int) -> None:
        auth = self._require_sponsored("set sponsor nonce")
        self._warn_if_signed(auth.sponsor_spending_condition, "nonce")
        _set_u64(auth.sponsor_spending_condition, "nonce", nonce)
        logger.debug(f"Set sponsor nonce to {nonce}")

    def set_sponsor(self, sponsor_spending_condition: SpendingCondition) -> None:
        """
        Replace the sponsor condition of a sponsored transaction.

        Raises:
            AuthorizationKindMismatchError: If the authorization is standard
        """
        auth = self._require_sponsored("set sponsor")
        auth.sponsor_spending_condition = sponsor_spending_condition
        logger.debug(f"Set sponsor {sponsor_spending_condition.signer.hex()}")

    # -------------------------------------------------------------------------
    # Sighash chain
    # -------------------------------------------------------------------------

    def sign_begin(self) -> bytes:
        """
        Initial sighash.

        Hash of the transaction with origin signature material cleared
        (nonce, fee, hash mode and signer kept) and, when sponsored, the
        sponsor replaced by a blank placeholder.
        """
        cleared = dataclasses.replace(self, auth=self.auth.into_initial_sighash_auth())
        return sha512_256(cleared.serialize())

    verify_begin = sign_begin

    def sign_next_origin(self, cur_sighash: bytes, private_key: Union[str, StacksPrivateKey]) -> bytes:
        """Sign the origin and return the next sighash."""
        return self._sign_and_append(self.auth.spending_condition, cur_sighash, AuthType.STANDARD,
                                     parse_private_key(private_key))

    def sign_next_sponsor(self, cur_sighash: bytes, private_key: Union[str, StacksPrivateKey]) -> bytes:
        """Sign the sponsor and return the next sighash."""
        auth = self._require_sponsored("sign sponsor")
        return self._sign_and_append(auth.sponsor_spending_condition, cur_sighash, AuthType.SPONSORED,
                                     parse_private_key(private_key))

    def _sign_and_append(self, condition: SpendingCondition, cur_sighash: bytes,
                         auth_type: AuthType, private_key: StacksPrivateKey) -> bytes:
        public_key = private_key.public_key()
        if isinstance(condition, SingleSigSpendingCondition):
            if condition.is_signed:
                raise NoSlotAvailableError("Single-sig spending condition is already signed")
            actual = address_hash_from_public_keys(condition.hash_mode, 1, [public_key])
            if actual != condition.signer:
                raise SigningKeyMismatchError(condition.signer.hex(), actual.hex())
        elif condition.signature_count >= condition.signatures_required:
            raise NoSlotAvailableError(
                f"Multi-sig spending condition already has {condition.signature_count} "
                f"of {condition.signatures_required} signatures",
                details={"filled": condition.signature_count, "threshold": condition.signatures_required},
            )

        presign = sighash_presign(cur_sighash, auth_type, condition.fee, condition.nonce)
        signature = sign_with_key(private_key, presign)
        next_sighash = sighash_postsign(presign, public_key.encoding, signature.data)

        if isinstance(condition, SingleSigSpendingCondition):
            condition.signature = signature
            logger.debug(f"Signed {auth_type.name.lower()} single-sig condition, sighash {next_sighash.hex()[:16]}")
        else:
            condition.fields.append(TransactionAuthField.from_signature(public_key.encoding, signature))
            logger.debug(
                f"Signed {auth_type.name.lower()} multi-sig condition "
                f"({condition.signature_count}/{condition.signatures_required}), sighash {next_sighash.hex()[:16]}"
            )
        return next_sighash

    def append_pub_key(self, public_key: Union[str, bytes, StacksPublicKey]) -> None:
        """Append a non-signing public key to the origin multi-sig condition."""
        _append_pub_key(self.auth.spending_condition, parse_public_key(public_key))

    def append_sponsor_pub_key(self, public_key: Union[str, bytes, StacksPublicKey]) -> None:
        auth = self._require_sponsored("append sponsor public key")
        _append_pub_key(auth.sponsor_spending_condition, parse_public_key(public_key))

    def verify_origin(self) -> bytes:
        """
        Verify the origin signatures.

        Returns:
            Sighash after the origin's last signature

        Raises:
            ThresholdNotMetError: Missing signatures
            SigningKeyMismatchError: Recovered keys do not hash to the signer
        """
        return _verify_condition(self.auth.spending_condition, self.verify_begin(), AuthType.STANDARD)

    def verify_sponsor(self, origin_sighash: Optional[bytes] = None) -> bytes:
        auth = self._require_sponsored("verify sponsor")
        if origin_sighash is None:
            origin_sighash = self.verify_origin()
        return _verify_condition(auth.sponsor_spending_condition, origin_sighash, AuthType.SPONSORED)

    def verify(self) -> bytes:
        """Verify every spending condition and return the final sighash."""
        sighash = self.verify_origin()
        if self.is_sponsored:
            sighash = self.verify_sponsor(sighash)
        return sighash


def _set_u64(condition: SpendingCondition, name: str, value: int) -> None:
    if not 0 <= value <= MAX_U64:
        raise ValueOutOfRangeError(f"{name} {value} is not a u64", details={name: value})
    setattr(condition, name, value)


def _append_pub_key(condition: SpendingCondition, public_key: StacksPublicKey) -> None:
    if not isinstance(condition, MultiSigSpendingCondition):
        raise AuthorizationError("Public keys can only be appended to a multi-sig spending condition")
    condition.fields.append(TransactionAuthField.from_public_key(public_key))
    logger.debug(f"Appended public key {public_key.to_hex()[:16]} to multi-sig condition")


def _verify_condition(condition: SpendingCondition, initial_sighash: bytes, auth_type: AuthType) -> bytes:
    if isinstance(condition, SingleSigSpendingCondition):
        if not condition.is_signed:
            raise ThresholdNotMetError(0, 1)
        presign = sighash_presign(initial_sighash, auth_type, condition.fee, condition.nonce)
        public_key = recover_public_key(presign, condition.signature, condition.key_encoding)
        actual = address_hash_from_public_keys(condition.hash_mode, 1, [public_key])
        if actual != condition.signer:
            raise SigningKeyMismatchError(condition.signer.hex(), actual.hex())
        return sighash_postsign(presign, condition.key_encoding, condition.signature.data)

    cur_sighash = initial_sighash
    public_keys = []
    for auth_field in condition.fields:
        if auth_field.is_signature:
            presign = sighash_presign(cur_sighash, auth_type, condition.fee, condition.nonce)
            public_keys.append(recover_public_key(presign, auth_field.signature(), auth_field.encoding))
            cur_sighash = sighash_postsign(presign, auth_field.encoding, auth_field.data)
        else:
            public_keys.append(auth_field.public_key())
    if condition.signature_count != condition.signatures_required:
        raise ThresholdNotMetError(condition.signature_count, condition.signatures_required)
    actual = address_hash_from_public_keys(condition.hash_mode, condition.signatures_required, public_keys)
    if actual != condition.signer:
        raise SigningKeyMismatchError(condition.signer.hex(), actual.hex())
    return cur_sighash


__all__ = ["StacksTransaction"]
