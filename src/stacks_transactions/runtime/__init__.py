"""Runtime helpers for stacks_transactions"""

from .errors import StacksError, ErrorCode
from .address import Address, c32_address, c32_address_decode

__all__ = [
    "Address",
    "StacksError",
    "ErrorCode",
    "c32_address",
    "c32_address_decode",
]
