from .factories import (
    mk_private_key,
    mk_address,
    mk_token_transfer_tx,
    mk_multisig_tx,
    mk_sponsored_tx,
)
from .parity import assert_hex_equal

__all__ = [
    "mk_private_key",
    "mk_address",
    "mk_token_transfer_tx",
    "mk_multisig_tx",
    "mk_sponsored_tx",
    "assert_hex_equal",
]
