"""
Post-conditions.

A post-condition asserts how much of an asset a principal may send while
the transaction executes. Three closed variants exist:

- STXPostCondition: native token, fungible condition code and amount
- FungiblePostCondition: a fungible token identified by AssetInfo
- NonFungiblePostCondition: one token of a non-fungible asset, identified
  by AssetInfo plus its asset-name Clarity value

Wire layout:

    type byte, principal, [asset info], [asset name value], code, [u64 amount]

Construction validates shape only. Whether a condition holds is decided by
the node.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Union

from ..clarity.codec import read_address, read_cv, read_name, write_address, write_cv, write_name
from ..clarity.values import ClarityValue, check_name
from ..codec.reader import BinaryReader
from ..codec.writer import BinaryWriter
from ..config import CodecLimits, DEFAULT_LIMITS
from ..enums import (
    FungibleConditionCode,
    MAX_U64,
    NonFungibleConditionCode,
    PostConditionPrincipalID,
    PostConditionType,
)
from ..runtime.address import Address, parse_address
from ..runtime.errors import (
    AmountOutOfRangeError,
    InvalidConditionCodeForAssetKindError,
    UnsupportedVariantError,
)


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or not 0 <= amount <= MAX_U64:
        raise AmountOutOfRangeError(amount)


def _fungible_code(code) -> FungibleConditionCode:
    if isinstance(code, NonFungibleConditionCode):
        raise InvalidConditionCodeForAssetKindError("fungible", code)
    try:
        return FungibleConditionCode(int(code))
    except (TypeError, ValueError):
        raise InvalidConditionCodeForAssetKindError("fungible", code) from None


def _non_fungible_code(code) -> NonFungibleConditionCode:
    if isinstance(code, FungibleConditionCode):
        raise InvalidConditionCodeForAssetKindError("non-fungible", code)
    try:
        return NonFungibleConditionCode(int(code))
    except (TypeError, ValueError):
        raise InvalidConditionCodeForAssetKindError("non-fungible", code) from None


# =============================================================================
# Principals and asset info
# =============================================================================

@dataclass(frozen=True)
class OriginPrincipal:
    """The transaction origin, whatever its address."""

    principal_id: ClassVar[PostConditionPrincipalID] = PostConditionPrincipalID.ORIGIN


@dataclass(frozen=True)
class StandardPrincipal:
    address: Address
    principal_id: ClassVar[PostConditionPrincipalID] = PostConditionPrincipalID.STANDARD


@dataclass(frozen=True)
class ContractPrincipal:
    address: Address
    contract_name: str
    principal_id: ClassVar[PostConditionPrincipalID] = PostConditionPrincipalID.CONTRACT

    def __post_init__(self):
        check_name(self.contract_name, "Contract name")


PostConditionPrincipal = Union[OriginPrincipal, StandardPrincipal, ContractPrincipal]


@dataclass(frozen=True)
class AssetInfo:
    """Asset defined by ``contract_name`` at ``address`` under ``asset_name``."""

    address: Address
    contract_name: str
    asset_name: str

    def __post_init__(self):
        check_name(self.contract_name, "Contract name")
        check_name(self.asset_name, "Asset name")


def create_standard_principal(address: Union[str, Address]) -> StandardPrincipal:
    return StandardPrincipal(parse_address(address))


def create_contract_principal(address: Union[str, Address], contract_name: str) -> ContractPrincipal:
    return ContractPrincipal(parse_address(address), contract_name)


def parse_principal(principal: Union[str, PostConditionPrincipal]) -> PostConditionPrincipal:
    """Accept a principal object, ``ADDRESS`` or ``ADDRESS.contract-name``."""
    if isinstance(principal, (OriginPrincipal, StandardPrincipal, ContractPrincipal)):
        return principal
    if "." in principal:
        address, name = principal.split(".", 1)
        return create_contract_principal(address, name)
    return create_standard_principal(principal)


def create_asset_info(address: Union[str, Address], contract_name: str, asset_name: str) -> AssetInfo:
    return AssetInfo(parse_address(address), contract_name, asset_name)


def write_principal(writer: BinaryWriter, principal: PostConditionPrincipal) -> None:
    writer.u8(int(principal.principal_id))
    if principal.principal_id == PostConditionPrincipalID.ORIGIN:
        return
    write_address(writer, principal.address)
    if principal.principal_id == PostConditionPrincipalID.CONTRACT:
        write_name(writer, principal.contract_name)


def read_principal(reader: BinaryReader) -> PostConditionPrincipal:
    start = reader.offset
    tag = reader.u8()
    if tag == PostConditionPrincipalID.ORIGIN:
        return OriginPrincipal()
    if tag == PostConditionPrincipalID.STANDARD:
        return StandardPrincipal(read_address(reader))
    if tag == PostConditionPrincipalID.CONTRACT:
        address = read_address(reader)
        return ContractPrincipal(address, read_name(reader))
    raise UnsupportedVariantError("post-condition principal", tag, offset=start)


def write_asset_info(writer: BinaryWriter, info: AssetInfo) -> None:
    write_address(writer, info.address)
    write_name(writer, info.contract_name)
    write_name(writer, info.asset_name)


def read_asset_info(reader: BinaryReader) -> AssetInfo:
    address = read_address(reader)
    contract_name = read_name(reader)
    return AssetInfo(address, contract_name, read_name(reader))


# =============================================================================
# Post-condition variants
# =============================================================================

@dataclass(frozen=True)
class STXPostCondition:
    principal: PostConditionPrincipal
    condition_code: FungibleConditionCode
    amount: int
    condition_type: ClassVar[PostConditionType] = PostConditionType.STX

    def __post_init__(self):
        object.__setattr__(self, "condition_code", _fungible_code(self.condition_code))
        _check_amount(self.amount)


@dataclass(frozen=True)
class FungiblePostCondition:
    principal: PostConditionPrincipal
    condition_code: FungibleConditionCode
    amount: int
    asset_info: AssetInfo
    condition_type: ClassVar[PostConditionType] = PostConditionType.FUNGIBLE

    def __post_init__(self):
        object.__setattr__(self, "condition_code", _fungible_code(self.condition_code))
        _check_amount(self.amount)


@dataclass(frozen=True)
class NonFungiblePostCondition:
    principal: PostConditionPrincipal
    condition_code: NonFungibleConditionCode
    asset_info: AssetInfo
    asset_name: ClarityValue
    condition_type: ClassVar[PostConditionType] = PostConditionType.NON_FUNGIBLE

    def __post_init__(self):
        object.__setattr__(self, "condition_code", _non_fungible_code(self.condition_code))


PostCondition = Union[STXPostCondition, FungiblePostCondition, NonFungiblePostCondition]


def write_post_condition(writer: BinaryWriter, condition: PostCondition) -> None:
    """Append one post-condition in wire order."""
    t = condition.condition_type
    writer.u8(int(t))
    write_principal(writer, condition.principal)
    if t in (PostConditionType.FUNGIBLE, PostConditionType.NON_FUNGIBLE):
        write_asset_info(writer, condition.asset_info)
    if t == PostConditionType.NON_FUNGIBLE:
        write_cv(writer, condition.asset_name)
    writer.u8(int(condition.condition_code))
    if t in (PostConditionType.STX, PostConditionType.FUNGIBLE):
        writer.u64be(condition.amount)


def read_post_condition(reader: BinaryReader, limits: CodecLimits = DEFAULT_LIMITS) -> PostCondition:
    start = reader.offset
    tag = reader.u8()
    try:
        t = PostConditionType(tag)
    except ValueError:
        raise UnsupportedVariantError("post-condition type", tag, offset=start) from None

    principal = read_principal(reader)
    asset_info = None
    if t in (PostConditionType.FUNGIBLE, PostConditionType.NON_FUNGIBLE):
        asset_info = read_asset_info(reader)

    if t == PostConditionType.NON_FUNGIBLE:
        asset_name = read_cv(reader, limits)
        code_offset = reader.offset
        code = reader.u8()
        if code not in NonFungibleConditionCode._value2member_map_:
            raise UnsupportedVariantError("non-fungible condition code", code, offset=code_offset)
        return NonFungiblePostCondition(principal, NonFungibleConditionCode(code), asset_info, asset_name)

    code_offset = reader.offset
    code = reader.u8()
    if code not in FungibleConditionCode._value2member_map_:
        raise UnsupportedVariantError("fungible condition code", code, offset=code_offset)
    amount = reader.u64be()
    if t == PostConditionType.STX:
        return STXPostCondition(principal, FungibleConditionCode(code), amount)
    return FungiblePostCondition(principal, FungibleConditionCode(code), amount, asset_info)


def serialize_post_condition(condition: PostCondition) -> bytes:
    writer = BinaryWriter()
    write_post_condition(writer, condition)
    return writer.to_bytes()


def deserialize_post_condition(data: bytes) -> PostCondition:
    """Decode exactly one post-condition."""
    reader = BinaryReader(data)
    condition = read_post_condition(reader)
    reader.expect_eof()
    return condition


# =============================================================================
# Constructors
# =============================================================================

def create_stx_post_condition(principal: Union[str, PostConditionPrincipal],
                              condition_code: FungibleConditionCode, amount: int) -> STXPostCondition:
    return STXPostCondition(parse_principal(principal), condition_code, amount)


def create_fungible_post_condition(principal: Union[str, PostConditionPrincipal],
                                   condition_code: FungibleConditionCode, amount: int,
                                   asset_info: AssetInfo) -> FungiblePostCondition:
    return FungiblePostCondition(parse_principal(principal), condition_code, amount, asset_info)


def create_non_fungible_post_condition(principal: Union[str, PostConditionPrincipal],
                                       condition_code: NonFungibleConditionCode,
                                       asset_info: AssetInfo,
                                       asset_name: ClarityValue) -> NonFungiblePostCondition:
    return NonFungiblePostCondition(parse_principal(principal), condition_code, asset_info, asset_name)


def make_standard_stx_post_condition(address: Union[str, Address], condition_code: FungibleConditionCode,
                                     amount: int) -> STXPostCondition:
    """
    Limit the STX a standard principal may send.

    Args:
        address: Sender address
        condition_code: Comparison applied to the amount sent
        amount: Amount in micro-STX

    Returns:
        STXPostCondition
    """
    return STXPostCondition(create_standard_principal(address), condition_code, amount)


def make_contract_stx_post_condition(address: Union[str, Address], contract_name: str,
                                     condition_code: FungibleConditionCode, amount: int) -> STXPostCondition:
    return STXPostCondition(create_contract_principal(address, contract_name), condition_code, amount)


def make_standard_fungible_post_condition(address: Union[str, Address], condition_code: FungibleConditionCode,
                                          amount: int, asset_info: AssetInfo) -> FungiblePostCondition:
    return FungiblePostCondition(create_standard_principal(address), condition_code, amount, asset_info)


def make_contract_fungible_post_condition(address: Union[str, Address], contract_name: str,
                                          condition_code: FungibleConditionCode, amount: int,
                                          asset_info: AssetInfo) -> FungiblePostCondition:
    return FungiblePostCondition(create_contract_principal(address, contract_name), condition_code,
                                 amount, asset_info)


def make_standard_non_fungible_post_condition(address: Union[str, Address],
                                              condition_code: NonFungibleConditionCode,
                                              asset_info: AssetInfo,
                                              asset_name: ClarityValue) -> NonFungiblePostCondition:
    """
    Assert whether a standard principal sends one non-fungible token.

    Args:
        address: Owner address
        condition_code: SENDS or DOES_NOT_SEND
        asset_info: Asset class
        asset_name: Clarity value naming the token instance
    """
    return NonFungiblePostCondition(create_standard_principal(address), condition_code, asset_info, asset_name)


def make_contract_non_fungible_post_condition(address: Union[str, Address], contract_name: str,
                                              condition_code: NonFungibleConditionCode,
                                              asset_info: AssetInfo,
                                              asset_name: ClarityValue) -> NonFungiblePostCondition:
    return NonFungiblePostCondition(create_contract_principal(address, contract_name), condition_code,
                                    asset_info, asset_name)


__all__ = [
    "OriginPrincipal",
    "StandardPrincipal",
    "ContractPrincipal",
    "PostConditionPrincipal",
    "AssetInfo",
    "STXPostCondition",
    "FungiblePostCondition",
    "NonFungiblePostCondition",
    "PostCondition",
    "create_standard_principal",
    "create_contract_principal",
    "parse_principal",
    "create_asset_info",
    "write_principal",
    "read_principal",
    "write_asset_info",
    "read_asset_info",
    "write_post_condition",
    "read_post_condition",
    "serialize_post_condition",
    "deserialize_post_condition",
    "create_stx_post_condition",
    "create_fungible_post_condition",
    "create_non_fungible_post_condition",
    "make_standard_stx_post_condition",
    "make_contract_stx_post_condition",
    "make_standard_fungible_post_condition",
    "make_contract_fungible_post_condition",
    "make_standard_non_fungible_post_condition",
    "make_contract_non_fungible_post_condition",
]
