"""
Clarity value system.

Typed values used as contract-call arguments and their canonical binary
encoding.

Key components:
- values.py: Value variants, constructors and type strings
- codec.py: serialize_cv / deserialize_cv with bounded decode depth
"""

from .values import (
    ClarityValue,
    PrincipalCV,
    BooleanCV,
    OptionalCV,
    ResponseCV,
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
    true_cv,
    false_cv,
    bool_cv,
    int_cv,
    uint_cv,
    buffer_cv,
    buffer_cv_from_string,
    none_cv,
    some_cv,
    optional_cv,
    response_ok_cv,
    response_error_cv,
    standard_principal_cv,
    contract_principal_cv,
    principal_cv,
    list_cv,
    tuple_cv,
    type_family,
    get_cv_type_string,
)
from .codec import (
    serialize_cv,
    deserialize_cv,
    deserialize_cv_exact,
    write_cv,
    read_cv,
    cv_to_hex,
    hex_to_cv,
)

__all__ = [
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
    "serialize_cv",
    "deserialize_cv",
    "deserialize_cv_exact",
    "write_cv",
    "read_cv",
    "cv_to_hex",
    "hex_to_cv",
]
