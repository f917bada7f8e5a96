"""
Stacks Binary Codec Module

Provides the canonical big-endian primitives and digests that every wire
structure in this package is built from.

Key components:
- writer.py: Binary writer with fixed-width and length-prefixed encoding
- reader.py: Bounds-checked binary reader with an explicit cursor
- hashes.py: SHA-512/256, HASH160 and the sighash chaining helpers
"""

from .hashes import hash160, sha256_bytes, sha512_256, sighash_postsign, sighash_presign, txid_from_bytes
from .reader import BinaryReader
from .writer import BinaryWriter

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "hash160",
    "sha256_bytes",
    "sha512_256",
    "sighash_presign",
    "sighash_postsign",
    "txid_from_bytes",
]
