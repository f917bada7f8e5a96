"""
Contract ABI types and call validation.

A published ABI describes each function's argument types either as a
primitive string (``uint128``, ``int128``, ``bool``, ``principal``,
``none``) or as an object keyed by ``buffer``, ``response``, ``optional``,
``tuple`` or ``list``. ``parse_abi_type`` turns that JSON form into typed
AbiType values, and the Pydantic models accept a fetched ABI document as is.

Matching is structural and recursive. Tuples are matched one way only:
every declared field must be present and match, while extra fields in the
value are ignored.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, Dict, List, Literal, Sequence, Tuple, Union

from pydantic import BaseModel, Field, field_validator

from ..clarity.values import (
    ClarityValue,
    buffer_cv_from_string,
    contract_principal_cv,
    false_cv,
    get_cv_type_string,
    int_cv,
    none_cv,
    standard_principal_cv,
    true_cv,
    uint_cv,
)
from ..enums import ClarityType
from ..runtime.errors import (
    AmbiguousAbiError,
    ArgumentCountMismatchError,
    ArgumentTypeMismatchError,
    EncodingError,
    FunctionNotFoundError,
    InvalidAbiTypeError,
    UnsupportedAbiEncodingError,
)

logger = logging.getLogger(__name__)


class AbiTypeId(IntEnum):
    UINT128 = 1
    INT128 = 2
    BOOL = 3
    PRINCIPAL = 4
    NONE = 5
    BUFFER = 6
    RESPONSE = 7
    OPTIONAL = 8
    TUPLE = 9
    LIST = 10


_PRIMITIVES = {
    "uint128": AbiTypeId.UINT128,
    "int128": AbiTypeId.INT128,
    "bool": AbiTypeId.BOOL,
    "principal": AbiTypeId.PRINCIPAL,
    "none": AbiTypeId.NONE,
}


# =============================================================================
# ABI type model
# =============================================================================

@dataclass(frozen=True)
class AbiPrimitive:
    name: str
    id: AbiTypeId


@dataclass(frozen=True)
class AbiBuffer:
    length: int
    id: ClassVar[AbiTypeId] = AbiTypeId.BUFFER


@dataclass(frozen=True)
class AbiResponse:
    ok: "AbiType"
    error: "AbiType"
    id: ClassVar[AbiTypeId] = AbiTypeId.RESPONSE


@dataclass(frozen=True)
class AbiOptional:
    inner: "AbiType"
    id: ClassVar[AbiTypeId] = AbiTypeId.OPTIONAL


@dataclass(frozen=True)
class AbiTuple:
    fields: Tuple[Tuple[str, "AbiType"], ...]
    id: ClassVar[AbiTypeId] = AbiTypeId.TUPLE


@dataclass(frozen=True)
class AbiList:
    element: "AbiType"
    length: int
    id: ClassVar[AbiTypeId] = AbiTypeId.LIST


AbiType = Union[AbiPrimitive, AbiBuffer, AbiResponse, AbiOptional, AbiTuple, AbiList]
_ABI_TYPES = (AbiPrimitive, AbiBuffer, AbiResponse, AbiOptional, AbiTuple, AbiList)


def parse_abi_type(raw: Any) -> AbiType:
    """
    Parse the JSON form of an ABI type.

    Args:
        raw: Primitive string, or a dict keyed by buffer/response/optional/tuple/list

    Returns:
        AbiType

    Raises:
        InvalidAbiTypeError: Unknown primitive or object shape
    """
    if isinstance(raw, _ABI_TYPES):
        return raw
    if isinstance(raw, str):
        if raw not in _PRIMITIVES:
            raise InvalidAbiTypeError(f"Unexpected Clarity ABI type primitive: {raw!r}", details={"type": raw})
        return AbiPrimitive(raw, _PRIMITIVES[raw])
    if not isinstance(raw, dict):
        raise InvalidAbiTypeError(f"Unexpected Clarity ABI type: {raw!r}")
    try:
        if "buffer" in raw:
            return AbiBuffer(int(raw["buffer"]["length"]))
        if "response" in raw:
            return AbiResponse(parse_abi_type(raw["response"]["ok"]), parse_abi_type(raw["response"]["error"]))
        if "optional" in raw:
            return AbiOptional(parse_abi_type(raw["optional"]))
        if "tuple" in raw:
            return AbiTuple(tuple((entry["name"], parse_abi_type(entry["type"])) for entry in raw["tuple"]))
        if "list" in raw:
            return AbiList(parse_abi_type(raw["list"]["type"]), int(raw["list"]["length"]))
    except (KeyError, TypeError) as e:
        raise InvalidAbiTypeError(f"Malformed Clarity ABI type: {raw!r}", cause=e)
    raise InvalidAbiTypeError(f"Unexpected Clarity ABI type: {raw!r}")


def get_type_string(abi_type: Any) -> str:
    """Clarity source form of an ABI type, e.g. ``(list 3 (buff 20))``."""
    t = parse_abi_type(abi_type)
    if isinstance(t, AbiPrimitive):
        if t.id == AbiTypeId.INT128:
            return "int"
        if t.id == AbiTypeId.UINT128:
            return "uint"
        return t.name
    if isinstance(t, AbiBuffer):
        return f"(buff {t.length})"
    if isinstance(t, AbiResponse):
        return f"(response {get_type_string(t.ok)} {get_type_string(t.error)})"
    if isinstance(t, AbiOptional):
        return f"(optional {get_type_string(t.inner)})"
    if isinstance(t, AbiTuple):
        return "(tuple " + " ".join(f"({name} {get_type_string(ft)})" for name, ft in t.fields) + ")"
    return f"(list {t.length} {get_type_string(t.element)})"


# =============================================================================
# ABI document
# =============================================================================

class _TypedEntry(BaseModel):
    type: Any

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> AbiType:
        return parse_abi_type(v)


class ClarityAbiFunctionArg(_TypedEntry):
    name: str


class ClarityAbiFunctionOutput(_TypedEntry):
    pass


class ClarityAbiFunction(BaseModel):
    """One callable function of a contract."""
    name: str
    access: Literal["private", "public", "read_only"]
    args: List[ClarityAbiFunctionArg] = Field(default_factory=list)
    outputs: ClarityAbiFunctionOutput


class ClarityAbiVariable(_TypedEntry):
    name: str
    access: Literal["variable", "constant"]


class ClarityAbiMap(BaseModel):
    name: str
    key: Any = Field(description="Key type as published")
    value: Any = Field(description="Value type as published")


class ClarityAbiFungibleToken(BaseModel):
    name: str


class ClarityAbiNonFungibleToken(_TypedEntry):
    name: str


class ClarityAbi(BaseModel):
    """
    Contract interface as returned by a node.

    Unknown top-level keys are ignored so newer node responses still load.
    """
    functions: List[ClarityAbiFunction] = Field(default_factory=list)
    variables: List[ClarityAbiVariable] = Field(default_factory=list)
    maps: List[ClarityAbiMap] = Field(default_factory=list)
    fungible_tokens: List[ClarityAbiFungibleToken] = Field(default_factory=list)
    non_fungible_tokens: List[ClarityAbiNonFungibleToken] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "extra": "ignore"}


def _as_abi(abi: Union[ClarityAbi, Dict[str, Any]]) -> ClarityAbi:
    if isinstance(abi, ClarityAbi):
        return abi
    return ClarityAbi.model_validate(abi)


def abi_function_to_string(func: ClarityAbiFunction) -> str:
    """Render a function signature, e.g. ``(define-read-only (get (id uint)))``."""
    access = "read-only" if func.access == "read_only" else func.access
    args = " ".join(f"({arg.name} {get_type_string(arg.type)})" for arg in func.args)
    return f"(define-{access} ({func.name} {args}))"


# =============================================================================
# Matching and validation
# =============================================================================

def match_type(value: ClarityValue, abi_type: Any) -> bool:
    """
    Check a value against a declared ABI type.

    Buffers and lists must have exactly the declared length. A none value
    matches both ``none`` and any optional type. Tuples match when every
    declared field is present and matches; extra fields are ignored.
    """
    t = parse_abi_type(abi_type)
    vt = value.type
    if vt in (ClarityType.BOOL_TRUE, ClarityType.BOOL_FALSE):
        return t.id == AbiTypeId.BOOL
    if vt == ClarityType.INT:
        return t.id == AbiTypeId.INT128
    if vt == ClarityType.UINT:
        return t.id == AbiTypeId.UINT128
    if vt == ClarityType.BUFFER:
        return t.id == AbiTypeId.BUFFER and t.length == len(value.buffer)
    if vt == ClarityType.OPTIONAL_NONE:
        return t.id in (AbiTypeId.NONE, AbiTypeId.OPTIONAL)
    if vt == ClarityType.OPTIONAL_SOME:
        return t.id == AbiTypeId.OPTIONAL and match_type(value.value, t.inner)
    if vt == ClarityType.RESPONSE_OK:
        return t.id == AbiTypeId.RESPONSE and match_type(value.value, t.ok)
    if vt == ClarityType.RESPONSE_ERR:
        return t.id == AbiTypeId.RESPONSE and match_type(value.value, t.error)
    if vt in (ClarityType.PRINCIPAL_STANDARD, ClarityType.PRINCIPAL_CONTRACT):
        return t.id == AbiTypeId.PRINCIPAL
    if vt == ClarityType.LIST:
        return (t.id == AbiTypeId.LIST
                and t.length == len(value.values)
                and all(match_type(item, t.element) for item in value.values))
    if vt == ClarityType.TUPLE:
        if t.id != AbiTypeId.TUPLE:
            return False
        data = value.data
        for name, field_type in t.fields:
            if name not in data or not match_type(data[name], field_type):
                return False
        return True
    return False


def resolve_function(abi: Union[ClarityAbi, Dict[str, Any]], name: str) -> ClarityAbiFunction:
    """
    Find the single ABI function called ``name``.

    Raises:
        FunctionNotFoundError: No function has that name
        AmbiguousAbiError: More than one function has that name
    """
    matches = [fn for fn in _as_abi(abi).functions if fn.name == name]
    if not matches:
        raise FunctionNotFoundError(name)
    if len(matches) > 1:
        raise AmbiguousAbiError(name, len(matches))
    return matches[0]


def validate_call(args: Sequence[ClarityValue], abi_function: ClarityAbiFunction) -> bool:
    """
    Check positional arguments against a function's declared types.

    Fails on the first mismatching argument.

    Raises:
        ArgumentCountMismatchError: Wrong number of arguments
        ArgumentTypeMismatchError: First argument whose type does not match
    """
    expected = abi_function.args
    if len(args) != len(expected):
        raise ArgumentCountMismatchError(len(expected), len(args))
    for index, (arg, abi_arg) in enumerate(zip(args, expected)):
        if not match_type(arg, abi_arg.type):
            raise ArgumentTypeMismatchError(
                index, get_type_string(abi_arg.type), get_cv_type_string(arg), abi_function.name,
            )
    logger.debug(f"Arguments of {abi_function.name} match {abi_function_to_string(abi_function)}")
    return True


def validate_contract_call(payload, abi: Union[ClarityAbi, Dict[str, Any]]) -> bool:
    """
    Validate a contract-call payload's arguments against a contract ABI.

    Args:
        payload: ContractCallPayload
        abi: ClarityAbi or its JSON form

    Returns:
        True when every argument matches
    """
    abi_function = resolve_function(abi, payload.function_name)
    return validate_call(payload.function_args, abi_function)


def encode_clarity_value(abi_type: Any, value: str) -> ClarityValue:
    """
    Coerce a string into a Clarity value of the given ABI type.

    Supported: uint128/int128 (decimal), bool (``true``/``false``/``1``/``0``),
    principal (``ADDRESS`` or ``ADDRESS.contract``), none, and buffer
    (UTF-8 bytes of the string).

    Raises:
        UnsupportedAbiEncodingError: Response, optional, tuple and list types
        InvalidAbiTypeError: The string cannot be read as the requested type
    """
    t = parse_abi_type(abi_type)
    try:
        return _encode_value(t, value)
    except EncodingError as e:
        raise InvalidAbiTypeError(f"Cannot encode {value!r} as {get_type_string(t)}: {e.message}",
                                  details={"value": value}, cause=e)


def _encode_value(t: AbiType, value: str) -> ClarityValue:
    if t.id == AbiTypeId.UINT128:
        return uint_cv(_parse_int(value, t))
    if t.id == AbiTypeId.INT128:
        return int_cv(_parse_int(value, t))
    if t.id == AbiTypeId.BOOL:
        if value in ("false", "0"):
            return false_cv()
        if value in ("true", "1"):
            return true_cv()
        raise InvalidAbiTypeError(f"Unexpected Clarity bool value: {value!r}", details={"value": value})
    if t.id == AbiTypeId.PRINCIPAL:
        if "." in value:
            address, name = value.split(".", 1)
            return contract_principal_cv(address, name)
        return standard_principal_cv(value)
    if t.id == AbiTypeId.NONE:
        return none_cv()
    if t.id == AbiTypeId.BUFFER:
        return buffer_cv_from_string(value)
    raise UnsupportedAbiEncodingError(
        f"Unsupported encoding for Clarity type: {get_type_string(t)}",
        details={"type_id": int(t.id)},
    )


def _parse_int(value: str, t: AbiType) -> int:
    try:
        return int(value, 10)
    except (TypeError, ValueError) as e:
        raise InvalidAbiTypeError(f"Cannot read {value!r} as {get_type_string(t)}", cause=e)


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
