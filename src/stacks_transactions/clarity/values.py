"""
Clarity value types.

Each variant of the value language is a frozen dataclass whose ``type``
class attribute is its wire tag. Consumers dispatch on ``value.type``;
``ClarityValue`` is the closed union of all variants.

Values are immutable and own their children. Range checks run in
``__post_init__`` so decoded and hand-built values obey the same bounds;
list homogeneity is checked only by ``list_cv`` since the wire format does
not carry it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterable, Mapping, Tuple, Union

from ..enums import (
    ClarityType,
    MAX_I128,
    MAX_STRING_LENGTH_BYTES,
    MAX_U128,
    MAX_U32,
    MIN_I128,
)
from ..runtime.address import Address, parse_address
from ..runtime.errors import MalformedValueError, ValueOutOfRangeError


def check_name(name: str, what: str) -> None:
    """Reject names that are empty or longer than 128 UTF-8 bytes."""
    encoded = name.encode("utf-8")
    if not encoded or len(encoded) > MAX_STRING_LENGTH_BYTES:
        raise ValueOutOfRangeError(
            f"{what} must be 1-{MAX_STRING_LENGTH_BYTES} bytes, got {len(encoded)}",
            details={"name": name},
        )


@dataclass(frozen=True)
class IntCV:
    value: int
    type: ClassVar[ClarityType] = ClarityType.INT

    def __post_init__(self):
        if not MIN_I128 <= self.value <= MAX_I128:
            raise ValueOutOfRangeError(f"Int {self.value} is outside the i128 range",
                                       details={"value": self.value})


@dataclass(frozen=True)
class UIntCV:
    value: int
    type: ClassVar[ClarityType] = ClarityType.UINT

    def __post_init__(self):
        if not 0 <= self.value <= MAX_U128:
            raise ValueOutOfRangeError(f"UInt {self.value} is outside the u128 range",
                                       details={"value": self.value})


@dataclass(frozen=True)
class BufferCV:
    buffer: bytes
    type: ClassVar[ClarityType] = ClarityType.BUFFER

    def __post_init__(self):
        if len(self.buffer) > MAX_U32:
            raise ValueOutOfRangeError("Buffer exceeds 2^32-1 bytes", details={"length": len(self.buffer)})


@dataclass(frozen=True)
class TrueCV:
    type: ClassVar[ClarityType] = ClarityType.BOOL_TRUE


@dataclass(frozen=True)
class FalseCV:
    type: ClassVar[ClarityType] = ClarityType.BOOL_FALSE


@dataclass(frozen=True)
class NoneCV:
    type: ClassVar[ClarityType] = ClarityType.OPTIONAL_NONE


@dataclass(frozen=True)
class SomeCV:
    value: "ClarityValue"
    type: ClassVar[ClarityType] = ClarityType.OPTIONAL_SOME


@dataclass(frozen=True)
class ResponseOkCV:
    value: "ClarityValue"
    type: ClassVar[ClarityType] = ClarityType.RESPONSE_OK


@dataclass(frozen=True)
class ResponseErrorCV:
    value: "ClarityValue"
    type: ClassVar[ClarityType] = ClarityType.RESPONSE_ERR


@dataclass(frozen=True)
class StandardPrincipalCV:
    address: Address
    type: ClassVar[ClarityType] = ClarityType.PRINCIPAL_STANDARD


@dataclass(frozen=True)
class ContractPrincipalCV:
    address: Address
    contract_name: str
    type: ClassVar[ClarityType] = ClarityType.PRINCIPAL_CONTRACT

    def __post_init__(self):
        check_name(self.contract_name, "Contract name")


@dataclass(frozen=True)
class ListCV:
    values: Tuple["ClarityValue", ...]
    type: ClassVar[ClarityType] = ClarityType.LIST

    def __post_init__(self):
        if len(self.values) > MAX_U32:
            raise ValueOutOfRangeError("List exceeds 2^32-1 elements", details={"length": len(self.values)})


@dataclass(frozen=True)
class TupleCV:
    """Ordered name/value pairs; serialization keeps construction order."""

    fields: Tuple[Tuple[str, "ClarityValue"], ...]
    type: ClassVar[ClarityType] = ClarityType.TUPLE

    def __post_init__(self):
        seen = set()
        for name, _ in self.fields:
            check_name(name, "Tuple key")
            if name in seen:
                raise MalformedValueError(f"Duplicate tuple key {name!r}", details={"name": name})
            seen.add(name)

    @property
    def data(self) -> Dict[str, "ClarityValue"]:
        return dict(self.fields)


ClarityValue = Union[
    IntCV,
    UIntCV,
    BufferCV,
    TrueCV,
    FalseCV,
    NoneCV,
    SomeCV,
    ResponseOkCV,
    ResponseErrorCV,
    StandardPrincipalCV,
    ContractPrincipalCV,
    ListCV,
    TupleCV,
]

PrincipalCV = Union[StandardPrincipalCV, ContractPrincipalCV]
BooleanCV = Union[TrueCV, FalseCV]
OptionalCV = Union[NoneCV, SomeCV]
ResponseCV = Union[ResponseOkCV, ResponseErrorCV]


# =============================================================================
# Constructors
# =============================================================================

def true_cv() -> TrueCV:
    return TrueCV()


def false_cv() -> FalseCV:
    return FalseCV()


def bool_cv(value: bool) -> BooleanCV:
    return TrueCV() if value else FalseCV()


def int_cv(value: Union[int, str]) -> IntCV:
    return IntCV(int(value))


def uint_cv(value: Union[int, str]) -> UIntCV:
    return UIntCV(int(value))


def buffer_cv(buffer: bytes) -> BufferCV:
    return BufferCV(bytes(buffer))


def buffer_cv_from_string(text: str) -> BufferCV:
    return BufferCV(text.encode("utf-8"))


def none_cv() -> NoneCV:
    return NoneCV()


def some_cv(value: ClarityValue) -> SomeCV:
    return SomeCV(value)


def optional_cv(value: ClarityValue = None) -> OptionalCV:
    return NoneCV() if value is None else SomeCV(value)


def response_ok_cv(value: ClarityValue) -> ResponseOkCV:
    return ResponseOkCV(value)


def response_error_cv(value: ClarityValue) -> ResponseErrorCV:
    return ResponseErrorCV(value)


def standard_principal_cv(address: Union[str, Address]) -> StandardPrincipalCV:
    return StandardPrincipalCV(parse_address(address))


def contract_principal_cv(address: Union[str, Address], contract_name: str) -> ContractPrincipalCV:
    return ContractPrincipalCV(parse_address(address), contract_name)


def principal_cv(principal: str) -> PrincipalCV:
    """Parse ``ADDRESS`` or ``ADDRESS.contract-name``."""
    if "." in principal:
        address, name = principal.split(".", 1)
        return contract_principal_cv(address, name)
    return standard_principal_cv(principal)


_FAMILIES = {
    ClarityType.BOOL_TRUE: "bool",
    ClarityType.BOOL_FALSE: "bool",
    ClarityType.INT: "int",
    ClarityType.UINT: "uint",
    ClarityType.BUFFER: "buffer",
    ClarityType.OPTIONAL_NONE: "optional",
    ClarityType.OPTIONAL_SOME: "optional",
    ClarityType.RESPONSE_OK: "response",
    ClarityType.RESPONSE_ERR: "response",
    ClarityType.PRINCIPAL_STANDARD: "principal",
    ClarityType.PRINCIPAL_CONTRACT: "principal",
    ClarityType.LIST: "list",
    ClarityType.TUPLE: "tuple",
}


def type_family(value: ClarityValue) -> str:
    """Type family used for list homogeneity (true/false are both bool, ...)."""
    return _FAMILIES[value.type]


def list_cv(values: Iterable[ClarityValue]) -> ListCV:
    """
    Build a list, rejecting elements of different type families.

    Raises:
        MalformedValueError: If the elements are not homogeneous
    """
    items = tuple(values)
    if items:
        family = type_family(items[0])
        for index, item in enumerate(items[1:], start=1):
            if type_family(item) != family:
                raise MalformedValueError(
                    f"List elements must share one type; element {index} is "
                    f"{type_family(item)}, expected {family}",
                    details={"index": index, "expected": family, "actual": type_family(item)},
                )
    return ListCV(items)


def tuple_cv(data: Union[Mapping[str, ClarityValue], Iterable[Tuple[str, ClarityValue]]]) -> TupleCV:
    """Build a tuple from a mapping (insertion order) or from pairs."""
    if isinstance(data, Mapping):
        pairs = tuple(data.items())
    else:
        pairs = tuple((name, value) for name, value in data)
    return TupleCV(pairs)


# =============================================================================
# Type strings
# =============================================================================

def get_cv_type_string(value: ClarityValue) -> str:
    """
    Render the Clarity type of a value, e.g. ``(list 2 (optional uint))``.

    Types a value cannot determine on its own (the other branch of a
    response, the element of an empty list) render as ``UnknownType``.
    """
    t = value.type
    if t in (ClarityType.BOOL_TRUE, ClarityType.BOOL_FALSE):
        return "bool"
    if t == ClarityType.INT:
        return "int"
    if t == ClarityType.UINT:
        return "uint"
    if t == ClarityType.BUFFER:
        return f"(buff {len(value.buffer)})"
    if t == ClarityType.OPTIONAL_NONE:
        return "(optional none)"
    if t == ClarityType.OPTIONAL_SOME:
        return f"(optional {get_cv_type_string(value.value)})"
    if t == ClarityType.RESPONSE_OK:
        return f"(response {get_cv_type_string(value.value)} UnknownType)"
    if t == ClarityType.RESPONSE_ERR:
        return f"(response UnknownType {get_cv_type_string(value.value)})"
    if t in (ClarityType.PRINCIPAL_STANDARD, ClarityType.PRINCIPAL_CONTRACT):
        return "principal"
    if t == ClarityType.LIST:
        inner = get_cv_type_string(value.values[0]) if value.values else "UnknownType"
        return f"(list {len(value.values)} {inner})"
    if t == ClarityType.TUPLE:
        inner = " ".join(f"({name} {get_cv_type_string(v)})" for name, v in value.fields)
        return f"(tuple {inner})"
    raise MalformedValueError(f"Unknown Clarity value type {t!r}")


__all__ = [
    "check_name",
    "ClarityValue",
    "PrincipalCV",
    "BooleanCV",
    "OptionalCV",
    "ResponseCV",
    "IntCV",
    "UIntCV",
    "BufferCV",
    "TrueCV",
    "FalseCV",
    "NoneCV",
    "SomeCV",
    "ResponseOkCV",
    "ResponseErrorCV",
    "StandardPrincipalCV",
    "ContractPrincipalCV",
    "ListCV",
    "TupleCV",
    "true_cv",
    "false_cv",
    "bool_cv",
    "int_cv",
    "uint_cv",
    "buffer_cv",
    "buffer_cv_from_string",
    "none_cv",
    "some_cv",
    "optional_cv",
    "response_ok_cv",
    "response_error_cv",
    "standard_principal_cv",
    "contract_principal_cv",
    "principal_cv",
    "list_cv",
    "tuple_cv",
    "type_family",
    "get_cv_type_string",
]
