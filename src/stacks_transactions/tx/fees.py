"""
Transaction fee computation.

Nodes quote a fee rate in micro-STX per byte as a decimal string; the fee
of a transaction is that rate times its serialized length, rounded up.
Fetching the rate is left to the caller.
"""

from __future__ import annotations
from decimal import ROUND_CEILING, Decimal, InvalidOperation
from typing import Union

from ..enums import MAX_U64
from ..runtime.errors import ValueOutOfRangeError

FeeRate = Union[Decimal, int, str]


def parse_fee_rate(fee_rate: FeeRate) -> Decimal:
    """
    Parse a fee rate.

    Args:
        fee_rate: Decimal, int or decimal string such as ``"1.5"``

    Raises:
        ValueOutOfRangeError: Negative or non-numeric rate
    """
    try:
        rate = Decimal(str(fee_rate)) if not isinstance(fee_rate, Decimal) else fee_rate
    except InvalidOperation as e:
        raise ValueOutOfRangeError(f"Invalid fee rate {fee_rate!r}", cause=e)
    if not rate.is_finite() or rate < 0:
        raise ValueOutOfRangeError(f"Invalid fee rate {fee_rate!r}", details={"fee_rate": str(fee_rate)})
    return rate


def fee_for_length(byte_length: int, fee_rate: FeeRate) -> int:
    fee = int((parse_fee_rate(fee_rate) * byte_length).to_integral_value(rounding=ROUND_CEILING))
    if fee > MAX_U64:
        raise ValueOutOfRangeError(f"Fee {fee} is not a u64", details={"fee": fee})
    return fee


def estimate_fee(transaction, fee_rate: FeeRate) -> int:
    """
    Fee for a transaction at the given rate.

    Args:
        transaction: StacksTransaction (its current serialization is measured)
        fee_rate: Micro-STX per byte

    Returns:
        Fee in micro-STX
    """
    return fee_for_length(len(transaction.serialize()), fee_rate)


__all__ = ["FeeRate", "parse_fee_rate", "fee_for_length", "estimate_fee"]
