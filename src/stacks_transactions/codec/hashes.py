"""
Hash Functions

Digest helpers used by the transaction id, the chained signature hash and
the address hash derivation.

- SHA-512/256 (transaction id, sighash chain) via cryptography
- HASH160 = RIPEMD-160(SHA-256(x)) (signer hashes) via pycryptodome
"""

import hashlib

from Crypto.Hash import RIPEMD160
from cryptography.hazmat.primitives import hashes

from ..enums import AuthType, PubKeyEncoding


def sha256_bytes(input_bytes: bytes) -> bytes:
    """
    Compute SHA-256 hash of input bytes.

    Args:
        input_bytes: Input bytes to hash

    Returns:
        SHA-256 hash as bytes (32 bytes)
    """
    return hashlib.sha256(input_bytes).digest()


def sha512_256(input_bytes: bytes) -> bytes:
    """
    Compute SHA-512/256 of input bytes.

    This is the truncated SHA-512 variant with its own initial values, not
    the first half of a plain SHA-512 digest.

    Args:
        input_bytes: Input bytes to hash

    Returns:
        32-byte digest
    """
    digest = hashes.Hash(hashes.SHA512_256())
    digest.update(input_bytes)
    return digest.finalize()


def hash160(input_bytes: bytes) -> bytes:
    """
    Compute RIPEMD-160(SHA-256(input)).

    Args:
        input_bytes: Input bytes, usually a public key or redeem script

    Returns:
        20-byte hash
    """
    return RIPEMD160.new(sha256_bytes(input_bytes)).digest()


def txid_from_bytes(serialized_tx: bytes) -> bytes:
    """Transaction id of a serialized transaction."""
    return sha512_256(serialized_tx)


def sighash_presign(cur_sighash: bytes, auth_type: AuthType, fee: int, nonce: int) -> bytes:
    """
    Digest signed by one signing round.

    presign = H(cur_sighash || auth type || fee (u64 BE) || nonce (u64 BE))

    Args:
        cur_sighash: Initial sighash or the previous round's postsign hash
        auth_type: Authorization type byte of the signer's role
        fee: Fee of the spending condition being signed
        nonce: Nonce of the spending condition being signed

    Returns:
        32-byte presign hash
    """
    data = (
        cur_sighash
        + bytes([int(auth_type)])
        + fee.to_bytes(8, "big")
        + nonce.to_bytes(8, "big")
    )
    return sha512_256(data)


def sighash_postsign(presign: bytes, key_encoding: PubKeyEncoding, signature: bytes) -> bytes:
    """
    Chain a signature into the sighash.

    postsign = H(presign || key encoding || 65-byte signature)
    """
    return sha512_256(presign + bytes([int(key_encoding)]) + signature)
