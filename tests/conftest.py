"""
Test bootstrap:
- Deterministic signing keys shared across modules
- Helper package importable as ``helpers``
"""

import logging

import pytest

from stacks_transactions import StacksPrivateKey

from helpers import mk_private_key

# Compressed key in the 66-character ``01``-suffixed hex form
SENDER_KEY_HEX = "edf9aee84d9b7abc145504dde6726c64f369d37ee34ded868fabd876c26570bc01"


@pytest.fixture
def sender_key() -> StacksPrivateKey:
    return StacksPrivateKey.from_hex(SENDER_KEY_HEX)


@pytest.fixture
def sponsor_key() -> StacksPrivateKey:
    return mk_private_key(b"sponsor")


@pytest.fixture
def multisig_keys():
    """Three ordered keys for 2-of-3 multi-sig tests."""
    return [mk_private_key(seed) for seed in (b"k1", b"k2", b"k3")]


@pytest.fixture
def debug_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="stacks_transactions")
    return caplog
