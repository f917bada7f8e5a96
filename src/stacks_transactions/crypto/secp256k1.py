"""
SECP256K1 keys and recoverable signatures for Stacks transactions.

Signatures are RFC 6979 deterministic, low-s normalized, and carried in the
65-byte recoverable layout used on the wire: one recovery id byte followed
by the 32-byte r and 32-byte s scalars.

A private key in hex form is 64 characters, or 66 characters ending in
``01`` when its public key is used in compressed form.
"""

from __future__ import annotations
import hashlib
from dataclasses import dataclass
from typing import Union

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError, SigningKey, VerifyingKey
from ecdsa.numbertheory import SquareRootError
from ecdsa.util import sigdecode_string, sigencode_string_canonize

from ..codec.hashes import hash160
from ..enums import (
    COMPRESSED_PUBKEY_LENGTH_BYTES,
    PubKeyEncoding,
    RECOVERABLE_ECDSA_SIG_LENGTH_BYTES,
    UNCOMPRESSED_PUBKEY_LENGTH_BYTES,
)
from ..runtime.errors import InvalidKeyError, InvalidSignatureError

PRIVATE_KEY_LENGTH_BYTES = 32


@dataclass(frozen=True)
class MessageSignature:
    """65-byte recoverable signature (recovery id || r || s)."""

    data: bytes

    def __post_init__(self):
        if len(self.data) != RECOVERABLE_ECDSA_SIG_LENGTH_BYTES:
            raise InvalidSignatureError(
                f"Signature must be {RECOVERABLE_ECDSA_SIG_LENGTH_BYTES} bytes, got {len(self.data)}",
                details={"length": len(self.data)},
            )

    @classmethod
    def empty(cls) -> MessageSignature:
        """All-zero signature of an unsigned spending condition."""
        return cls(bytes(RECOVERABLE_ECDSA_SIG_LENGTH_BYTES))

    @classmethod
    def from_hex(cls, signature_hex: str) -> MessageSignature:
        try:
            return cls(bytes.fromhex(signature_hex))
        except ValueError as e:
            raise InvalidSignatureError(f"Invalid hex string: {e}", cause=e)

    @property
    def is_empty(self) -> bool:
        return not any(self.data)

    @property
    def recovery_id(self) -> int:
        return self.data[0]

    def to_hex(self) -> str:
        return self.data.hex()

    def __str__(self) -> str:
        return f"MessageSignature({self.to_hex()[:16]}...)"


class StacksPublicKey:
    """SECP256K1 public key in compressed (33-byte) or uncompressed (65-byte) form."""

    def __init__(self, public_key_bytes: bytes):
        """
        Initialize public key.

        Args:
            public_key_bytes: SEC1 encoded point (33 or 65 bytes)

        Raises:
            InvalidKeyError: If the bytes are not a point on the curve
        """
        if len(public_key_bytes) not in (COMPRESSED_PUBKEY_LENGTH_BYTES, UNCOMPRESSED_PUBKEY_LENGTH_BYTES):
            raise InvalidKeyError(
                f"Public key must be 33 or 65 bytes, got {len(public_key_bytes)}",
                details={"length": len(public_key_bytes)},
            )
        try:
            self._verifying_key = VerifyingKey.from_string(public_key_bytes, curve=SECP256k1)
        except (MalformedPointError, ValueError) as e:
            raise InvalidKeyError(f"Invalid public key: {e}", cause=e)
        self.public_key_bytes = bytes(public_key_bytes)

    @classmethod
    def from_hex(cls, public_key_hex: str) -> StacksPublicKey:
        try:
            return cls(bytes.fromhex(public_key_hex))
        except ValueError as e:
            raise InvalidKeyError(f"Invalid hex string: {e}", cause=e)

    @property
    def encoding(self) -> PubKeyEncoding:
        if len(self.public_key_bytes) == COMPRESSED_PUBKEY_LENGTH_BYTES:
            return PubKeyEncoding.COMPRESSED
        return PubKeyEncoding.UNCOMPRESSED

    @property
    def compressed(self) -> bool:
        return self.encoding == PubKeyEncoding.COMPRESSED

    def to_bytes(self) -> bytes:
        return self.public_key_bytes

    def to_hex(self) -> str:
        return self.public_key_bytes.hex()

    def hash160(self) -> bytes:
        """HASH160 of the encoded key."""
        return hash160(self.public_key_bytes)

    def verify(self, digest: bytes, signature: MessageSignature) -> bool:
        """
        Verify a recoverable signature over a 32-byte digest.

        The recovery id is ignored; r and s are checked against this key.
        """
        try:
            return self._verifying_key.verify_digest(signature.data[1:], digest, sigdecode=sigdecode_string)
        except BadSignatureError:
            return False

    def __eq__(self, other) -> bool:
        if isinstance(other, StacksPublicKey):
            return self.public_key_bytes == other.public_key_bytes
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.public_key_bytes)

    def __str__(self) -> str:
        return f"StacksPublicKey({self.to_hex()[:16]}...)"

    def __repr__(self) -> str:
        return f"StacksPublicKey('{self.to_hex()}')"


class StacksPrivateKey:
    """
    SECP256K1 private key plus the encoding of its public key.

    The compressed flag decides both the public key bytes that are hashed
    into the signer address and the key encoding byte chained into the
    sighash after each signature.
    """

    def __init__(self, private_key_bytes: bytes, compressed: bool = True):
        """
        Initialize private key.

        Args:
            private_key_bytes: 32-byte secret scalar
            compressed: Use the 33-byte public key form

        Raises:
            InvalidKeyError: If the scalar is not a valid secp256k1 key
        """
        if len(private_key_bytes) != PRIVATE_KEY_LENGTH_BYTES:
            raise InvalidKeyError(
                f"Private key must be {PRIVATE_KEY_LENGTH_BYTES} bytes, got {len(private_key_bytes)}",
                details={"length": len(private_key_bytes)},
            )
        secexp = int.from_bytes(private_key_bytes, "big")
        if not 1 <= secexp < SECP256k1.order:
            raise InvalidKeyError("Private key scalar is outside the curve order")
        self._private_key_bytes = bytes(private_key_bytes)
        self.compressed = compressed
        self._signing_key = SigningKey.from_string(self._private_key_bytes, curve=SECP256k1)

    @classmethod
    def generate(cls, compressed: bool = True) -> StacksPrivateKey:
        """Generate a new random private key."""
        return cls(SigningKey.generate(curve=SECP256k1).to_string(), compressed)

    @classmethod
    def from_hex(cls, private_key_hex: str) -> StacksPrivateKey:
        """
        Create a private key from hex.

        A 66-character string must end in ``01`` and yields a compressed key;
        a 64-character string yields an uncompressed key.
        """
        if len(private_key_hex) == 66:
            if not private_key_hex.endswith("01"):
                raise InvalidKeyError("66-character private key must end in 01")
            compressed = True
            private_key_hex = private_key_hex[:64]
        elif len(private_key_hex) == 64:
            compressed = False
        else:
            raise InvalidKeyError(
                f"Private key hex must be 64 or 66 characters, got {len(private_key_hex)}",
                details={"length": len(private_key_hex)},
            )
        try:
            private_key_bytes = bytes.fromhex(private_key_hex)
        except ValueError as e:
            raise InvalidKeyError(f"Invalid hex string: {e}", cause=e)
        return cls(private_key_bytes, compressed)

    def public_key(self) -> StacksPublicKey:
        """
        Get the public key.

        Returns:
            StacksPublicKey in this key's encoding
        """
        vk = self._signing_key.get_verifying_key()
        return StacksPublicKey(vk.to_string("compressed" if self.compressed else "uncompressed"))

    def sign(self, digest: bytes) -> MessageSignature:
        return sign_with_key(self, digest)

    def to_hex(self) -> str:
        """Private key hex, ``01``-suffixed when compressed."""
        return self._private_key_bytes.hex() + ("01" if self.compressed else "")

    def to_bytes(self) -> bytes:
        return self._private_key_bytes

    def __str__(self) -> str:
        return f"StacksPrivateKey(public={self.public_key().to_hex()[:16]}...)"


def parse_private_key(value: Union[str, bytes, StacksPrivateKey]) -> StacksPrivateKey:
    """Coerce hex, raw 32 bytes (compressed) or a key object into a StacksPrivateKey."""
    if isinstance(value, StacksPrivateKey):
        return value
    if isinstance(value, str):
        return StacksPrivateKey.from_hex(value)
    return StacksPrivateKey(bytes(value))


def parse_public_key(value: Union[str, bytes, StacksPublicKey]) -> StacksPublicKey:
    if isinstance(value, StacksPublicKey):
        return value
    if isinstance(value, str):
        return StacksPublicKey.from_hex(value)
    return StacksPublicKey(bytes(value))


def get_public_key(private_key: Union[str, bytes, StacksPrivateKey]) -> StacksPublicKey:
    return parse_private_key(private_key).public_key()


def sign_with_key(private_key: StacksPrivateKey, digest: bytes) -> MessageSignature:
    """
    Sign a 32-byte digest.

    Args:
        private_key: Signing key
        digest: Message digest (already hashed)

    Returns:
        Recoverable signature whose first byte is the recovery id
    """
    rs = private_key._signing_key.sign_digest_deterministic(
        digest, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize,
    )
    own = private_key._signing_key.get_verifying_key().to_string("uncompressed")
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        rs, digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string,
    )
    for recovery_id, candidate in enumerate(candidates):
        if candidate.to_string("uncompressed") == own:
            return MessageSignature(bytes([recovery_id]) + rs)
    raise InvalidSignatureError("Could not determine recovery id for signature")


def recover_public_key(digest: bytes, signature: MessageSignature,
                       encoding: PubKeyEncoding = PubKeyEncoding.COMPRESSED) -> StacksPublicKey:
    """
    Recover the signing public key from a recoverable signature.

    Args:
        digest: Digest that was signed
        signature: 65-byte recoverable signature
        encoding: Form of the returned public key

    Raises:
        InvalidSignatureError: If the signature is empty or not recoverable
    """
    if signature.is_empty:
        raise InvalidSignatureError("Cannot recover a public key from an empty signature")
    recovery_id = signature.recovery_id
    if recovery_id > 1:
        raise InvalidSignatureError(f"Unsupported recovery id {recovery_id}",
                                    details={"recovery_id": recovery_id})
    try:
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            signature.data[1:], digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string,
        )
    except (MalformedPointError, SquareRootError, ValueError) as e:
        raise InvalidSignatureError(f"Signature is not recoverable: {e}", cause=e)
    vk = candidates[recovery_id]
    return StacksPublicKey(vk.to_string("compressed" if encoding == PubKeyEncoding.COMPRESSED else "uncompressed"))


__all__ = [
    "MessageSignature",
    "StacksPublicKey",
    "StacksPrivateKey",
    "parse_private_key",
    "parse_public_key",
    "get_public_key",
    "sign_with_key",
    "recover_public_key",
    "PRIVATE_KEY_LENGTH_BYTES",
]
