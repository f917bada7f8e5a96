"""
Stacks Transactions Error Model

This module provides the error handling framework for the transaction codec
and authorization engine. Every error carries a stable code plus structured
details (byte offset, argument index, expected/actual type strings) so that
callers can log or surface it verbatim.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes grouped by component."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2

    # Codec errors (100-199)
    ENCODING_ERROR = 100
    MALFORMED_VALUE = 101
    TRUNCATED_INPUT = 102
    DEPTH_EXCEEDED = 103
    UNSUPPORTED_VARIANT = 104
    TRAILING_DATA = 105
    VALUE_OUT_OF_RANGE = 106
    INVALID_ADDRESS = 107

    # Key errors (200-299)
    INVALID_KEY = 200
    INVALID_SIGNATURE = 201

    # Authorization errors (300-399)
    AUTHORIZATION_ERROR = 300
    NO_SLOT_AVAILABLE = 301
    THRESHOLD_NOT_MET = 302
    AUTHORIZATION_KIND_MISMATCH = 303
    SIGNING_KEY_MISMATCH = 304

    # Post-condition errors (400-499)
    POST_CONDITION_ERROR = 400
    AMOUNT_OUT_OF_RANGE = 401
    INVALID_CONDITION_CODE = 402

    # ABI errors (500-599)
    ABI_ERROR = 500
    ARGUMENT_COUNT_MISMATCH = 501
    ARGUMENT_TYPE_MISMATCH = 502
    FUNCTION_NOT_FOUND = 503
    AMBIGUOUS_ABI = 504
    UNSUPPORTED_ABI_ENCODING = 505
    INVALID_ABI_TYPE = 506


class StacksError(Exception):
    """
    Base class for all stacks_transactions errors.

    Provides structured error information: a code, a message, a details
    mapping and an optional underlying cause.
    """

    default_code = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: Optional[ErrorCode] = None,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an error.

        Args:
            message: Error message
            code: Error code (defaults to the class code)
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StacksError':
        """Create error from dictionary representation."""
        try:
            code = ErrorCode(data.get("code", ErrorCode.UNKNOWN))
        except ValueError:
            code = ErrorCode.UNKNOWN
        message = data.get("message", "Unknown error")
        details = data.get("details")
        return cls(message, code, details)


# =============================================================================
# Codec errors
# =============================================================================

class EncodingError(StacksError):
    """Data encoding/decoding errors."""

    default_code = ErrorCode.ENCODING_ERROR


class MalformedValueError(EncodingError):
    """Input bytes do not describe a well-formed value."""

    default_code = ErrorCode.MALFORMED_VALUE


class TruncatedInputError(MalformedValueError):
    """A declared length runs past the end of the input."""

    default_code = ErrorCode.TRUNCATED_INPUT

    def __init__(self, message: str = "Truncated input", offset: Optional[int] = None,
                 needed: Optional[int] = None, available: Optional[int] = None):
        details = {}
        if offset is not None:
            details["offset"] = offset
        if needed is not None:
            details["needed"] = needed
        if available is not None:
            details["available"] = available
        super().__init__(message, details=details)
        self.offset = offset


class DepthExceededError(MalformedValueError):
    """Nested value exceeds the configured decode depth."""

    default_code = ErrorCode.DEPTH_EXCEEDED

    def __init__(self, max_depth: int, offset: Optional[int] = None):
        details: Dict[str, Any] = {"max_depth": max_depth}
        if offset is not None:
            details["offset"] = offset
        super().__init__(f"Value nesting exceeds maximum depth of {max_depth}", details=details)
        self.max_depth = max_depth


class UnsupportedVariantError(MalformedValueError):
    """Unknown type tag, version, or payload discriminator."""

    default_code = ErrorCode.UNSUPPORTED_VARIANT

    def __init__(self, kind: str, tag: int, offset: Optional[int] = None):
        details: Dict[str, Any] = {"kind": kind, "tag": tag}
        if offset is not None:
            details["offset"] = offset
        super().__init__(f"Unsupported {kind}: 0x{tag:02x}", details=details)
        self.kind = kind
        self.tag = tag


class TrailingDataError(MalformedValueError):
    """Bytes remain after a complete structure was read."""

    default_code = ErrorCode.TRAILING_DATA

    def __init__(self, offset: int, remaining: int):
        super().__init__(
            f"{remaining} trailing byte(s) after offset {offset}",
            details={"offset": offset, "remaining": remaining},
        )
        self.offset = offset
        self.remaining = remaining


class ValueOutOfRangeError(EncodingError):
    """A value cannot be represented in its wire field."""

    default_code = ErrorCode.VALUE_OUT_OF_RANGE


class InvalidAddressError(EncodingError, ValueError):
    """Address string or hash bytes are not a valid Stacks address."""

    default_code = ErrorCode.INVALID_ADDRESS


# =============================================================================
# Key errors
# =============================================================================

class InvalidKeyError(StacksError):
    """Invalid private or public key material."""

    default_code = ErrorCode.INVALID_KEY


class InvalidSignatureError(StacksError):
    """Signature bytes cannot be parsed or recovered."""

    default_code = ErrorCode.INVALID_SIGNATURE


# =============================================================================
# Authorization errors
# =============================================================================

class AuthorizationError(StacksError):
    """Spending condition and signing errors."""

    default_code = ErrorCode.AUTHORIZATION_ERROR


class NoSlotAvailableError(AuthorizationError):
    """Spending condition has no empty signature slot left."""

    default_code = ErrorCode.NO_SLOT_AVAILABLE


class ThresholdNotMetError(AuthorizationError):
    """Multi-sig condition has fewer signatures than required."""

    default_code = ErrorCode.THRESHOLD_NOT_MET

    def __init__(self, filled: int, threshold: int):
        super().__init__(
            f"Multi-sig condition has {filled} of {threshold} required signatures",
            details={"filled": filled, "threshold": threshold},
        )
        self.filled = filled
        self.threshold = threshold


class AuthorizationKindMismatchError(AuthorizationError):
    """Operation requires a different authorization type."""

    default_code = ErrorCode.AUTHORIZATION_KIND_MISMATCH


class SigningKeyMismatchError(AuthorizationError):
    """Public key does not hash to the condition's signer."""

    default_code = ErrorCode.SIGNING_KEY_MISMATCH

    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"Public key hash {actual} does not match signer {expected}",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


# =============================================================================
# Post-condition errors
# =============================================================================

class PostConditionError(StacksError):
    """Post-condition construction errors."""

    default_code = ErrorCode.POST_CONDITION_ERROR


class AmountOutOfRangeError(PostConditionError):
    """Amount does not fit in an unsigned 64-bit field."""

    default_code = ErrorCode.AMOUNT_OUT_OF_RANGE

    def __init__(self, amount: int):
        super().__init__(f"Amount {amount} is not a u64", details={"amount": amount})
        self.amount = amount


class InvalidConditionCodeForAssetKindError(PostConditionError):
    """Fungible code used for a non-fungible asset or the reverse."""

    default_code = ErrorCode.INVALID_CONDITION_CODE

    def __init__(self, asset_kind: str, condition_code: Any):
        super().__init__(
            f"Condition code {condition_code!r} is not valid for {asset_kind} post-conditions",
            details={"asset_kind": asset_kind, "condition_code": condition_code},
        )


# =============================================================================
# ABI errors
# =============================================================================

class AbiError(StacksError):
    """Contract ABI validation errors."""

    default_code = ErrorCode.ABI_ERROR


class ArgumentCountMismatchError(AbiError):
    """Wrong number of arguments for a contract function."""

    default_code = ErrorCode.ARGUMENT_COUNT_MISMATCH

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Clarity function expects {expected} argument(s) but received {actual}",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class ArgumentTypeMismatchError(AbiError):
    """An argument does not match its declared ABI type."""

    default_code = ErrorCode.ARGUMENT_TYPE_MISMATCH

    def __init__(self, index: int, expected: str, actual: str, function_name: str = ""):
        super().__init__(
            f"Clarity function `{function_name}` expects argument {index + 1} "
            f"to be of type {expected}, not {actual}",
            details={"index": index, "expected": expected, "actual": actual},
        )
        self.index = index
        self.expected = expected
        self.actual = actual


class FunctionNotFoundError(AbiError):
    """ABI has no function with the requested name."""

    default_code = ErrorCode.FUNCTION_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"ABI doesn't contain a function with the name {name}",
                         details={"function": name})


class AmbiguousAbiError(AbiError):
    """ABI declares more than one function with the same name."""

    default_code = ErrorCode.AMBIGUOUS_ABI

    def __init__(self, name: str, count: int):
        super().__init__(
            f"Malformed ABI. Contains multiple functions with the name {name}",
            details={"function": name, "count": count},
        )


class UnsupportedAbiEncodingError(AbiError):
    """String-to-value coercion is not available for this ABI type."""

    default_code = ErrorCode.UNSUPPORTED_ABI_ENCODING


class InvalidAbiTypeError(AbiError):
    """ABI type description has an unknown shape."""

    default_code = ErrorCode.INVALID_ABI_TYPE


__all__ = [
    "ErrorCode",
    "StacksError",
    "EncodingError",
    "MalformedValueError",
    "TruncatedInputError",
    "DepthExceededError",
    "UnsupportedVariantError",
    "TrailingDataError",
    "ValueOutOfRangeError",
    "InvalidAddressError",
    "InvalidKeyError",
    "InvalidSignatureError",
    "AuthorizationError",
    "NoSlotAvailableError",
    "ThresholdNotMetError",
    "AuthorizationKindMismatchError",
    "SigningKeyMismatchError",
    "PostConditionError",
    "AmountOutOfRangeError",
    "InvalidConditionCodeForAssetKindError",
    "AbiError",
    "ArgumentCountMismatchError",
    "ArgumentTypeMismatchError",
    "FunctionNotFoundError",
    "AmbiguousAbiError",
    "UnsupportedAbiEncodingError",
    "InvalidAbiTypeError",
]
