"""
Transaction envelope tests.

Field order, round trips of signed and unsigned transactions, txid,
decode errors and caller mutation of fee, nonce, sponsor and post-conditions.
"""

import dataclasses
import logging

import pytest

from stacks_transactions import (
    AddressHashMode,
    AnchorMode,
    AuthorizationKindMismatchError,
    ChainID,
    FungibleConditionCode,
    InvalidSignatureError,
    MalformedValueError,
    OriginPrincipal,
    PostConditionMode,
    PubKeyEncoding,
    SigningKeyMismatchError,
    SingleSigSpendingCondition,
    StacksTransaction,
    TrailingDataError,
    TransactionSigner,
    TransactionVersion,
    UnsupportedVariantError,
    ValueOutOfRangeError,
    create_single_sig_spending_condition,
    create_standard_auth,
    create_stx_post_condition,
    create_token_transfer_payload,
)
from stacks_transactions.codec.hashes import sha512_256

from helpers import assert_hex_equal, mk_multisig_tx, mk_sponsored_tx, mk_token_transfer_tx

RECIPIENT = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
RECIPIENT_HASH = "a46ff88886c2ef9762d970b4d2c63678835bd39d"

# Unsigned mainnet STX transfer of 2500 to RECIPIENT, memo "hello", with an
# origin LESS_EQUAL 12345 post-condition.
GOLDEN_TOKEN_TRANSFER = (
    "00" "00000001"                                   # version, chain id
    "04" "00" + RECIPIENT_HASH +                      # standard auth, p2pkh, signer
    "0000000000000001" "00000000000000b4"             # nonce 1, fee 180
    "00" + "00" * 65 +                                # compressed key, empty signature
    "03" "02"                                         # anchor any, post-condition deny
    "00000001" "00" "01" "05" "0000000000003039"      # one stx post-condition
    "00" "05" "16" + RECIPIENT_HASH +                 # token transfer to standard principal
    "00000000000009c4" "68656c6c6f" + "00" * 29       # amount, padded memo
)


class TestEncoding:

    def test_header_field_order(self):
        tx = mk_token_transfer_tx(nonce=1, fee=200)
        tx.anchor_mode = AnchorMode.ON_CHAIN_ONLY
        tx.post_condition_mode = PostConditionMode.ALLOW
        data = tx.serialize()
        assert data[0] == TransactionVersion.MAINNET
        assert data[1:5] == b"\x00\x00\x00\x01"
        assert data[5] == 0x04
        assert data[6] == AddressHashMode.SERIALIZE_P2PKH
        assert data[27:35] == (1).to_bytes(8, "big")
        assert data[35:43] == (200).to_bytes(8, "big")
        # key encoding + 65-byte signature, then anchor and post-condition modes
        assert data[109] == 0x01
        assert data[110] == 0x01
        assert data[111:115] == b"\x00\x00\x00\x00"
        assert data[115] == 0x00

    def test_unsigned_round_trip(self):
        tx = mk_token_transfer_tx(nonce=3, fee=180)
        tx.post_conditions.append(create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.LESS_EQUAL, 10))
        decoded = StacksTransaction.deserialize(tx.serialize())
        assert decoded == tx
        assert decoded.serialize() == tx.serialize()

    def test_signed_round_trip(self, sender_key):
        tx = mk_token_transfer_tx(sender_key)
        TransactionSigner(tx).sign_origin(sender_key)
        decoded = StacksTransaction.deserialize(tx.to_hex())
        assert decoded == tx
        decoded.verify()

    def test_sponsored_round_trip(self):
        tx = mk_sponsored_tx()
        decoded = StacksTransaction.deserialize("0x" + tx.to_hex())
        assert decoded.is_sponsored
        assert decoded == tx

    def test_multisig_round_trip(self):
        tx, keys = mk_multisig_tx()
        signer = TransactionSigner(tx)
        signer.sign_origin(keys[0])
        signer.append_origin(keys[1].public_key())
        decoded = StacksTransaction.deserialize(tx.serialize())
        assert decoded == tx

    def test_testnet_chain_id(self):
        tx = mk_token_transfer_tx()
        tx.version = TransactionVersion.TESTNET
        tx.chain_id = ChainID.TESTNET
        decoded = StacksTransaction.deserialize(tx.serialize())
        assert decoded.chain_id == ChainID.TESTNET
        assert decoded.version == TransactionVersion.TESTNET

    def test_txid(self):
        tx = mk_token_transfer_tx()
        assert tx.txid() == sha512_256(tx.serialize()).hex()
        assert len(tx.txid()) == 64

    def test_golden_unsigned_token_transfer(self):
        condition = SingleSigSpendingCondition(
            AddressHashMode.SERIALIZE_P2PKH, bytes.fromhex(RECIPIENT_HASH), 1, 180, PubKeyEncoding.COMPRESSED,
        )
        tx = StacksTransaction(
            TransactionVersion.MAINNET,
            create_standard_auth(condition),
            create_token_transfer_payload(RECIPIENT, 2500, "hello"),
            post_conditions=[create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.LESS_EQUAL, 12345)],
        )
        assert_hex_equal(tx.serialize(), GOLDEN_TOKEN_TRANSFER, "unsigned token transfer")

        decoded = StacksTransaction.deserialize(GOLDEN_TOKEN_TRANSFER)
        assert decoded == tx
        assert decoded.payload.amount == 2500
        assert decoded.payload.memo_text == "hello"
        assert decoded.post_conditions[0].amount == 12345


class TestDecodeErrors:

    def test_unknown_version(self):
        data = bytearray(mk_token_transfer_tx().serialize())
        data[0] = 0x01
        with pytest.raises(UnsupportedVariantError):
            StacksTransaction.deserialize(bytes(data))

    def test_unknown_auth_type(self):
        data = bytearray(mk_token_transfer_tx().serialize())
        data[5] = 0x06
        with pytest.raises(UnsupportedVariantError):
            StacksTransaction.deserialize(bytes(data))

    def test_unknown_anchor_mode(self):
        data = bytearray(mk_token_transfer_tx().serialize())
        data[109] = 0x07
        with pytest.raises(UnsupportedVariantError):
            StacksTransaction.deserialize(bytes(data))

    def test_trailing_bytes(self):
        with pytest.raises(TrailingDataError):
            StacksTransaction.deserialize(mk_token_transfer_tx().serialize() + b"\x00")

    def test_truncated(self):
        data = mk_token_transfer_tx().serialize()
        with pytest.raises(MalformedValueError):
            StacksTransaction.deserialize(data[:-5])

    def test_bad_hex(self):
        with pytest.raises(MalformedValueError):
            StacksTransaction.deserialize("not hex")


class TestMutation:

    def test_fee_and_nonce_change_initial_sighash(self):
        tx = mk_token_transfer_tx()
        initial = tx.sign_begin()
        tx.set_fee(1000)
        after_fee = tx.sign_begin()
        tx.set_nonce(9)
        after_nonce = tx.sign_begin()
        assert len({initial, after_fee, after_nonce}) == 3

    def test_signature_does_not_change_initial_sighash(self, sender_key):
        tx = mk_token_transfer_tx(sender_key)
        before = tx.sign_begin()
        TransactionSigner(tx).sign_origin(sender_key)
        assert tx.sign_begin() == before
        assert tx.verify_begin() == before

    def test_fee_on_sponsored_goes_to_sponsor(self):
        tx = mk_sponsored_tx()
        tx.set_fee(777)
        assert tx.auth.sponsor_spending_condition.fee == 777
        assert tx.auth.spending_condition.fee == 0

    def test_sponsor_nonce(self):
        tx = mk_sponsored_tx()
        tx.set_sponsor_nonce(4)
        assert tx.auth.sponsor_spending_condition.nonce == 4

    def test_sponsor_only_on_sponsored(self, sponsor_key):
        tx = mk_token_transfer_tx()
        condition = create_single_sig_spending_condition(AddressHashMode.SERIALIZE_P2PKH, sponsor_key.public_key())
        with pytest.raises(AuthorizationKindMismatchError):
            tx.set_sponsor(condition)
        with pytest.raises(AuthorizationKindMismatchError):
            tx.set_sponsor_nonce(1)

    def test_u64_range(self):
        tx = mk_token_transfer_tx()
        with pytest.raises(ValueOutOfRangeError):
            tx.set_fee(2 ** 64)
        with pytest.raises(ValueOutOfRangeError):
            tx.set_nonce(-1)

    def test_mutating_signed_condition_warns(self, sender_key, caplog):
        tx = mk_token_transfer_tx(sender_key)
        TransactionSigner(tx).sign_origin(sender_key)
        with caplog.at_level(logging.WARNING, logger="stacks_transactions"):
            tx.set_fee(5)
        assert "signed spending condition" in caplog.text
        assert tx.auth.spending_condition.is_signed

    def test_stale_signature_fails_verification(self, sender_key):
        tx = mk_token_transfer_tx(sender_key)
        TransactionSigner(tx).sign_origin(sender_key)
        tx.set_nonce(1)
        with pytest.raises((SigningKeyMismatchError, InvalidSignatureError)):
            tx.verify()

    def test_post_condition_change_invalidates_signature(self, sender_key):
        tx = mk_token_transfer_tx(sender_key)
        tx.post_conditions.append(create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.LESS_EQUAL, 100))
        TransactionSigner(tx).sign_origin(sender_key)
        signed_initial = tx.sign_begin()
        tx.verify()

        # one byte of the amount
        tx.post_conditions[0] = dataclasses.replace(tx.post_conditions[0], amount=101)
        assert tx.sign_begin() != signed_initial
        with pytest.raises((SigningKeyMismatchError, InvalidSignatureError)):
            tx.verify()

    def test_added_post_condition_invalidates_signature(self, sender_key):
        tx = mk_token_transfer_tx(sender_key)
        TransactionSigner(tx).sign_origin(sender_key)
        signed_initial = tx.sign_begin()

        tx.post_conditions.append(create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.EQUAL, 1))
        assert tx.sign_begin() != signed_initial
        with pytest.raises((SigningKeyMismatchError, InvalidSignatureError)):
            tx.verify()
