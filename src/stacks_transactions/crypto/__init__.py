"""
Cryptographic primitives for Stacks transactions.

SECP256K1 keys with recoverable, deterministic signatures.
"""

from .secp256k1 import (
    MessageSignature,
    StacksPrivateKey,
    StacksPublicKey,
    get_public_key,
    parse_private_key,
    parse_public_key,
    recover_public_key,
    sign_with_key,
)
from ..codec.hashes import hash160

__all__ = [
    "MessageSignature",
    "StacksPrivateKey",
    "StacksPublicKey",
    "get_public_key",
    "parse_private_key",
    "parse_public_key",
    "recover_public_key",
    "sign_with_key",
    "hash160",
]
