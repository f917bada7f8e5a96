"""
Stacks Transactions

Builds, canonically encodes and authorizes Stacks blockchain transactions:
Clarity values and their binary codec, the transaction envelope, single-sig
and multi-sig authorization with the chained sighash, post-conditions, and
contract ABI validation. No network I/O is performed.
"""

from .enums import *
from .runtime.errors import *
from .runtime.address import Address, c32_address, c32_address_decode
from .config import CodecLimits
from .clarity import *
from .crypto import *
from .abi import *
from .tx import *

__version__ = "0.1.0"
