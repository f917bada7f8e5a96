"""
Transaction builder options.

Explicit option models with documented defaults. Unknown keys are
rejected so that a misspelled option fails instead of being ignored.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..abi.contract_abi import ClarityAbi
from ..enums import (
    AddressHashMode,
    AnchorMode,
    ChainID,
    MAX_U64,
    MEMO_MAX_LENGTH_BYTES,
    PostConditionMode,
    TransactionVersion,
)
from .postconditions import FungiblePostCondition, NonFungiblePostCondition, STXPostCondition

_POST_CONDITION_TYPES = (STXPostCondition, FungiblePostCondition, NonFungiblePostCondition)


class TransactionOptions(BaseModel):
    """
    Options shared by every builder.

    Defaults: mainnet version and chain id, anchor mode ANY, post-condition
    mode DENY, nonce 0. With neither ``fee`` nor ``fee_rate`` set the fee
    is 0; ``fee`` wins when both are given.
    """
    fee: Optional[int] = Field(default=None, ge=0, le=MAX_U64, description="Fee in micro-STX")
    fee_rate: Optional[Decimal] = Field(
        default=None, ge=0, alias="feeRate",
        description="Micro-STX per serialized byte, used when fee is not set",
    )
    nonce: int = Field(default=0, ge=0, le=MAX_U64, description="Origin account nonce")
    version: TransactionVersion = Field(default=TransactionVersion.MAINNET, description="Transaction version")
    chain_id: Optional[int] = Field(
        default=None, ge=0, le=0xFFFFFFFF, alias="chainId",
        description="Chain id; derived from version when not set",
    )
    anchor_mode: AnchorMode = Field(default=AnchorMode.ANY, alias="anchorMode")
    post_condition_mode: PostConditionMode = Field(default=PostConditionMode.DENY, alias="postConditionMode")
    post_conditions: List[Any] = Field(default_factory=list, alias="postConditions")
    sponsored: bool = Field(default=False, description="Build with a sponsor placeholder")
    hash_mode: AddressHashMode = Field(default=AddressHashMode.SERIALIZE_P2PKH, alias="hashMode")

    model_config = {"populate_by_name": True, "extra": "forbid"}

    @field_validator("post_conditions")
    @classmethod
    def validate_post_conditions(cls, v: List[Any]) -> List[Any]:
        for index, condition in enumerate(v):
            if not isinstance(condition, _POST_CONDITION_TYPES):
                raise ValueError(f"Post-condition {index} is a {type(condition).__name__}, not a post-condition")
        return v

    @field_validator("hash_mode")
    @classmethod
    def validate_hash_mode(cls, v: AddressHashMode) -> AddressHashMode:
        if not v.is_single_sig:
            raise ValueError("Builders sign with a single key; use a single-sig hash mode")
        return v

    def resolved_chain_id(self) -> int:
        if self.chain_id is not None:
            return self.chain_id
        return ChainID.TESTNET if self.version == TransactionVersion.TESTNET else ChainID.MAINNET


class TokenTransferOptions(TransactionOptions):
    memo: str = Field(default="", description="UTF-8 memo, at most 34 bytes")

    @field_validator("memo")
    @classmethod
    def validate_memo(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MEMO_MAX_LENGTH_BYTES:
            raise ValueError(f"Memo exceeds {MEMO_MAX_LENGTH_BYTES} bytes")
        return v


class ContractCallOptions(TransactionOptions):
    abi: Optional[ClarityAbi] = Field(default=None, description="Validate arguments against this ABI")


class ContractDeployOptions(TransactionOptions):
    pass


__all__ = ["TransactionOptions", "TokenTransferOptions", "ContractCallOptions", "ContractDeployOptions"]
