"""
Post-condition tests.

Reference encoding, round trips of each variant and principal form, and
the construction checks on amounts and condition codes.
"""

import pytest

from stacks_transactions import (
    AmountOutOfRangeError,
    FungibleConditionCode,
    InvalidConditionCodeForAssetKindError,
    NonFungibleConditionCode,
    OriginPrincipal,
    STXPostCondition,
    TrailingDataError,
    UnsupportedVariantError,
    buffer_cv,
    create_asset_info,
    create_stx_post_condition,
    deserialize_post_condition,
    make_contract_fungible_post_condition,
    make_contract_non_fungible_post_condition,
    make_contract_stx_post_condition,
    make_standard_fungible_post_condition,
    make_standard_non_fungible_post_condition,
    make_standard_stx_post_condition,
    serialize_post_condition,
    tuple_cv,
    uint_cv,
)
from stacks_transactions.runtime.address import Address
from stacks_transactions.tx.postconditions import ContractPrincipal, parse_principal

from helpers import assert_hex_equal, mk_address

FIXTURE_ADDRESS = Address(22, bytes.fromhex("a5180cc1ff6050df53f0ab766d76b630e14feb0c"))


def test_stx_reference_encoding():
    condition = make_standard_stx_post_condition(FIXTURE_ADDRESS, FungibleConditionCode.GREATER_EQUAL, 12345)
    assert_hex_equal(
        serialize_post_condition(condition),
        "00 02 16 a5180cc1ff6050df53f0ab766d76b630e14feb0c 03 0000000000003039",
    )


def test_stx_reference_decoding():
    data = bytes.fromhex("0002" "16" "a5180cc1ff6050df53f0ab766d76b630e14feb0c" "03" "0000000000003039")
    condition = deserialize_post_condition(data)
    assert isinstance(condition, STXPostCondition)
    assert condition.principal.address == FIXTURE_ADDRESS
    assert condition.condition_code == FungibleConditionCode.GREATER_EQUAL
    assert condition.amount == 12345


class TestRoundTrip:

    def setup_method(self):
        self.address = mk_address(1)
        self.asset = create_asset_info(mk_address(2), "my-token", "token")

    @pytest.mark.parametrize("condition_factory", [
        lambda s: make_standard_stx_post_condition(s.address, FungibleConditionCode.EQUAL, 0),
        lambda s: make_contract_stx_post_condition(s.address, "vault", FungibleConditionCode.LESS, 2 ** 64 - 1),
        lambda s: make_standard_fungible_post_condition(s.address, FungibleConditionCode.GREATER, 10, s.asset),
        lambda s: make_contract_fungible_post_condition(s.address, "pool", FungibleConditionCode.LESS_EQUAL,
                                                        99, s.asset),
        lambda s: make_standard_non_fungible_post_condition(s.address, NonFungibleConditionCode.SENDS,
                                                            s.asset, uint_cv(1)),
        lambda s: make_contract_non_fungible_post_condition(s.address, "market",
                                                            NonFungibleConditionCode.DOES_NOT_SEND, s.asset,
                                                            tuple_cv({"id": buffer_cv(b"\x01")})),
        lambda s: create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.EQUAL, 5),
    ])
    def test_round_trip(self, condition_factory):
        condition = condition_factory(self)
        assert deserialize_post_condition(serialize_post_condition(condition)) == condition

    def test_non_fungible_layout(self):
        condition = make_standard_non_fungible_post_condition(
            self.address, NonFungibleConditionCode.SENDS, self.asset, uint_cv(1),
        )
        data = serialize_post_condition(condition)
        assert data[0] == 0x02
        assert data[1] == 0x02
        assert data[-1] == 0x10


class TestValidation:

    def test_amount_must_be_u64(self):
        with pytest.raises(AmountOutOfRangeError):
            make_standard_stx_post_condition(mk_address(1), FungibleConditionCode.EQUAL, 2 ** 64)
        with pytest.raises(AmountOutOfRangeError):
            make_standard_stx_post_condition(mk_address(1), FungibleConditionCode.EQUAL, -1)

    def test_non_fungible_code_rejected_for_stx(self):
        with pytest.raises(InvalidConditionCodeForAssetKindError):
            make_standard_stx_post_condition(mk_address(1), NonFungibleConditionCode.SENDS, 1)

    def test_fungible_code_rejected_for_nft(self):
        asset = create_asset_info(mk_address(2), "nft", "item")
        with pytest.raises(InvalidConditionCodeForAssetKindError):
            make_standard_non_fungible_post_condition(mk_address(1), FungibleConditionCode.EQUAL,
                                                      asset, uint_cv(1))

    def test_unknown_code_on_decode(self):
        data = bytes.fromhex("0001" "07" "0000000000000001")
        with pytest.raises(UnsupportedVariantError):
            deserialize_post_condition(data)

    def test_unknown_type_on_decode(self):
        with pytest.raises(UnsupportedVariantError):
            deserialize_post_condition(b"\x03\x01")

    def test_trailing_bytes(self):
        data = serialize_post_condition(
            create_stx_post_condition(OriginPrincipal(), FungibleConditionCode.EQUAL, 1),
        )
        with pytest.raises(TrailingDataError):
            deserialize_post_condition(data + b"\x00")

    def test_old_code_aliases(self):
        assert NonFungibleConditionCode.DOES_NOT_OWN == NonFungibleConditionCode.SENDS
        assert NonFungibleConditionCode.OWNS == NonFungibleConditionCode.DOES_NOT_SEND


def test_parse_principal_contract():
    principal = parse_principal(f"{mk_address(3)}.contract-a")
    assert isinstance(principal, ContractPrincipal)
    assert principal.contract_name == "contract-a"
