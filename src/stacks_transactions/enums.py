"""
Wire-level enumerations and constants for Stacks transactions.

Every value here is a byte (or word) that appears verbatim in the
serialized transaction, so the numeric values must never change.
"""

from enum import IntEnum


MAX_STRING_LENGTH_BYTES = 128
RECOVERABLE_ECDSA_SIG_LENGTH_BYTES = 65
COMPRESSED_PUBKEY_LENGTH_BYTES = 33
UNCOMPRESSED_PUBKEY_LENGTH_BYTES = 65
MEMO_MAX_LENGTH_BYTES = 34
HASH160_LENGTH_BYTES = 20
TXID_LENGTH_BYTES = 32

MAX_U64 = 2 ** 64 - 1
MAX_U128 = 2 ** 128 - 1
MIN_I128 = -(2 ** 127)
MAX_I128 = 2 ** 127 - 1
MAX_U32 = 2 ** 32 - 1


class ClarityType(IntEnum):
    """Clarity value type tags."""

    INT = 0x00
    UINT = 0x01
    BUFFER = 0x02
    BOOL_TRUE = 0x03
    BOOL_FALSE = 0x04
    PRINCIPAL_STANDARD = 0x05
    PRINCIPAL_CONTRACT = 0x06
    RESPONSE_OK = 0x07
    RESPONSE_ERR = 0x08
    OPTIONAL_NONE = 0x09
    OPTIONAL_SOME = 0x0A
    LIST = 0x0B
    TUPLE = 0x0C


class TransactionVersion(IntEnum):
    MAINNET = 0x00
    TESTNET = 0x80


class ChainID(IntEnum):
    MAINNET = 0x00000001
    TESTNET = 0x80000000


class PayloadType(IntEnum):
    TOKEN_TRANSFER = 0x00
    SMART_CONTRACT = 0x01
    CONTRACT_CALL = 0x02


class AnchorMode(IntEnum):
    """How a transaction may be included in blocks."""

    ON_CHAIN_ONLY = 0x01
    OFF_CHAIN_ONLY = 0x02
    ANY = 0x03


class PostConditionMode(IntEnum):
    ALLOW = 0x01
    DENY = 0x02


class PostConditionType(IntEnum):
    STX = 0x00
    FUNGIBLE = 0x01
    NON_FUNGIBLE = 0x02


class PostConditionPrincipalID(IntEnum):
    ORIGIN = 0x01
    STANDARD = 0x02
    CONTRACT = 0x03


class AuthType(IntEnum):
    STANDARD = 0x04
    SPONSORED = 0x05


class AddressHashMode(IntEnum):
    """Hash mode of a spending condition; odd modes are multi-sig."""

    SERIALIZE_P2PKH = 0x00
    SERIALIZE_P2SH = 0x01
    SERIALIZE_P2WPKH = 0x02
    SERIALIZE_P2WSH = 0x03

    @property
    def is_single_sig(self) -> bool:
        return self in (AddressHashMode.SERIALIZE_P2PKH, AddressHashMode.SERIALIZE_P2WPKH)


class AddressVersion(IntEnum):
    MAINNET_SINGLE_SIG = 22
    MAINNET_MULTI_SIG = 20
    TESTNET_SINGLE_SIG = 26
    TESTNET_MULTI_SIG = 21


class PubKeyEncoding(IntEnum):
    COMPRESSED = 0x00
    UNCOMPRESSED = 0x01


class AuthFieldType(IntEnum):
    """Multi-sig spending condition field discriminators."""

    PUBLIC_KEY_COMPRESSED = 0x00
    PUBLIC_KEY_UNCOMPRESSED = 0x01
    SIGNATURE_COMPRESSED = 0x02
    SIGNATURE_UNCOMPRESSED = 0x03

    @property
    def is_signature(self) -> bool:
        return self in (AuthFieldType.SIGNATURE_COMPRESSED, AuthFieldType.SIGNATURE_UNCOMPRESSED)

    @property
    def encoding(self) -> PubKeyEncoding:
        if self in (AuthFieldType.PUBLIC_KEY_COMPRESSED, AuthFieldType.SIGNATURE_COMPRESSED):
            return PubKeyEncoding.COMPRESSED
        return PubKeyEncoding.UNCOMPRESSED


class FungibleConditionCode(IntEnum):
    EQUAL = 0x01
    GREATER = 0x02
    GREATER_EQUAL = 0x03
    LESS = 0x04
    LESS_EQUAL = 0x05


class NonFungibleConditionCode(IntEnum):
    """Ownership predicates; DOES_NOT_OWN/OWNS are the older names."""

    SENDS = 0x10
    DOES_NOT_SEND = 0x11
    DOES_NOT_OWN = 0x10
    OWNS = 0x11


DEFAULT_TRANSACTION_VERSION = TransactionVersion.MAINNET
DEFAULT_CHAIN_ID = ChainID.MAINNET


__all__ = [
    "ClarityType",
    "TransactionVersion",
    "ChainID",
    "PayloadType",
    "AnchorMode",
    "PostConditionMode",
    "PostConditionType",
    "PostConditionPrincipalID",
    "AuthType",
    "AddressHashMode",
    "AddressVersion",
    "PubKeyEncoding",
    "AuthFieldType",
    "FungibleConditionCode",
    "NonFungibleConditionCode",
    "DEFAULT_TRANSACTION_VERSION",
    "DEFAULT_CHAIN_ID",
    "MAX_STRING_LENGTH_BYTES",
    "MEMO_MAX_LENGTH_BYTES",
    "RECOVERABLE_ECDSA_SIG_LENGTH_BYTES",
    "COMPRESSED_PUBKEY_LENGTH_BYTES",
    "UNCOMPRESSED_PUBKEY_LENGTH_BYTES",
    "HASH160_LENGTH_BYTES",
    "TXID_LENGTH_BYTES",
    "MAX_U64",
    "MAX_U128",
    "MIN_I128",
    "MAX_I128",
    "MAX_U32",
]
