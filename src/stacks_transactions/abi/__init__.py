"""
Contract ABI validation.

Checks contract-call arguments against a published contract interface and
coerces plain strings into Clarity values for primitive ABI types.
"""

from .contract_abi import (
    AbiTypeId,
    AbiPrimitive,
    AbiBuffer,
    AbiResponse,
    AbiOptional,
    AbiTuple,
    AbiList,
    AbiType,
    parse_abi_type,
    get_type_string,
    ClarityAbiFunctionArg,
    ClarityAbiFunctionOutput,
    ClarityAbiFunction,
    ClarityAbiVariable,
    ClarityAbiMap,
    ClarityAbiFungibleToken,
    ClarityAbiNonFungibleToken,
    ClarityAbi,
    abi_function_to_string,
    match_type,
    resolve_function,
    validate_call,
    validate_contract_call,
    encode_clarity_value,
)

__all__ = [
    "AbiTypeId",
    "AbiPrimitive",
    "AbiBuffer",
    "AbiResponse",
    "AbiOptional",
    "AbiTuple",
    "AbiList",
    "AbiType",
    "parse_abi_type",
    "get_type_string",
    "ClarityAbiFunctionArg",
    "ClarityAbiFunctionOutput",
    "ClarityAbiFunction",
    "ClarityAbiVariable",
    "ClarityAbiMap",
    "ClarityAbiFungibleToken",
    "ClarityAbiNonFungibleToken",
    "ClarityAbi",
    "abi_function_to_string",
    "match_type",
    "resolve_function",
    "validate_call",
    "validate_contract_call",
    "encode_clarity_value",
]
