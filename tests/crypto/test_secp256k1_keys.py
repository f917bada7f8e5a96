"""
SECP256K1 key and recoverable signature tests.

Deterministic signing, recovery id correctness, key encodings and
rejection of malformed keys and signatures.
"""

import hashlib

import pytest

from stacks_transactions import (
    InvalidKeyError,
    InvalidSignatureError,
    MessageSignature,
    PubKeyEncoding,
    StacksPrivateKey,
    StacksPublicKey,
    get_public_key,
    hash160,
    parse_private_key,
    recover_public_key,
    sign_with_key,
)

from helpers import mk_private_key

DIGEST = hashlib.sha256(b"stacks transaction").digest()


class TestPrivateKey:

    def test_from_hex_compressed(self, sender_key):
        assert sender_key.compressed
        assert sender_key.to_hex() == "edf9aee84d9b7abc145504dde6726c64f369d37ee34ded868fabd876c26570bc01"
        assert len(sender_key.public_key().to_bytes()) == 33

    def test_from_hex_uncompressed(self):
        key = StacksPrivateKey.from_hex("ab" * 32)
        assert not key.compressed
        assert key.public_key().encoding == PubKeyEncoding.UNCOMPRESSED
        assert len(key.public_key().to_bytes()) == 65

    @pytest.mark.parametrize("text", ["ab" * 31, "ab" * 32 + "02", "zz" * 32])
    def test_from_hex_invalid(self, text):
        with pytest.raises(InvalidKeyError):
            StacksPrivateKey.from_hex(text)

    def test_zero_scalar_rejected(self):
        with pytest.raises(InvalidKeyError):
            StacksPrivateKey(bytes(32))

    def test_parse_raw_bytes_is_compressed(self):
        key = parse_private_key(b"\x01" * 32)
        assert key.compressed

    def test_generate(self):
        key = StacksPrivateKey.generate()
        assert key.public_key().compressed
        assert len(key.to_bytes()) == 32

    def test_get_public_key(self, sender_key):
        assert get_public_key(sender_key.to_hex()) == sender_key.public_key()


class TestPublicKey:

    def test_hash160(self, sender_key):
        pk = sender_key.public_key()
        assert pk.hash160() == hash160(pk.to_bytes())

    def test_hex_round_trip(self, sender_key):
        pk = sender_key.public_key()
        assert StacksPublicKey.from_hex(pk.to_hex()) == pk

    def test_invalid_length(self):
        with pytest.raises(InvalidKeyError):
            StacksPublicKey(b"\x02" * 32)

    def test_not_on_curve(self):
        with pytest.raises(InvalidKeyError):
            StacksPublicKey(b"\x05" + b"\x01" * 32)


class TestSignatures:

    def test_signing_is_deterministic(self, sender_key):
        assert sign_with_key(sender_key, DIGEST) == sign_with_key(sender_key, DIGEST)

    def test_signature_layout(self, sender_key):
        signature = sender_key.sign(DIGEST)
        assert len(signature.data) == 65
        assert signature.recovery_id in (0, 1)
        assert not signature.is_empty

    def test_low_s(self, sender_key):
        order = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
        s = int.from_bytes(sender_key.sign(DIGEST).data[33:], "big")
        assert s <= order // 2

    @pytest.mark.parametrize("seed", [1, 2, 3, b"a", b"b", b"c", b"d"])
    def test_recovery_returns_signer(self, seed):
        key = mk_private_key(seed)
        signature = key.sign(DIGEST)
        assert recover_public_key(DIGEST, signature) == key.public_key()

    def test_recovery_uncompressed(self):
        key = mk_private_key(5, compressed=False)
        signature = key.sign(DIGEST)
        recovered = recover_public_key(DIGEST, signature, PubKeyEncoding.UNCOMPRESSED)
        assert recovered == key.public_key()

    def test_verify(self, sender_key):
        signature = sender_key.sign(DIGEST)
        pk = sender_key.public_key()
        assert pk.verify(DIGEST, signature)
        assert not pk.verify(hashlib.sha256(b"other").digest(), signature)

    def test_recovery_of_other_digest_differs(self, sender_key):
        signature = sender_key.sign(DIGEST)
        other = hashlib.sha256(b"other").digest()
        assert recover_public_key(other, signature) != sender_key.public_key()

    def test_empty_signature_not_recoverable(self):
        with pytest.raises(InvalidSignatureError):
            recover_public_key(DIGEST, MessageSignature.empty())

    def test_bad_recovery_id(self, sender_key):
        data = bytearray(sender_key.sign(DIGEST).data)
        data[0] = 4
        with pytest.raises(InvalidSignatureError):
            recover_public_key(DIGEST, MessageSignature(bytes(data)))

    def test_signature_length(self):
        with pytest.raises(InvalidSignatureError):
            MessageSignature(b"\x00" * 64)
        assert MessageSignature.from_hex("00" * 65).is_empty
