"""
Contract ABI tests.

ABI type parsing and rendering, value/type matching, function
resolution, call validation and string-to-value encoding.
"""

import pytest

from stacks_transactions import (
    AbiError,
    AmbiguousAbiError,
    ArgumentCountMismatchError,
    ArgumentTypeMismatchError,
    ClarityAbi,
    FunctionNotFoundError,
    InvalidAbiTypeError,
    UnsupportedAbiEncodingError,
    ValueOutOfRangeError,
    abi_function_to_string,
    buffer_cv,
    contract_principal_cv,
    create_contract_call_payload,
    encode_clarity_value,
    false_cv,
    get_type_string,
    int_cv,
    list_cv,
    match_type,
    none_cv,
    parse_abi_type,
    resolve_function,
    response_error_cv,
    response_ok_cv,
    some_cv,
    standard_principal_cv,
    true_cv,
    tuple_cv,
    uint_cv,
    validate_call,
    validate_contract_call,
)
from stacks_transactions.abi.contract_abi import AbiBuffer, AbiTypeId

ADDRESS = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"


def _fn(name, args, access="public", output="bool"):
    return {
        "name": name,
        "access": access,
        "args": [{"name": f"a{i}", "type": t} for i, t in enumerate(args)],
        "outputs": {"type": output},
    }


ABI = ClarityAbi.model_validate({
    "functions": [
        _fn("transfer", ["uint128", "bool"]),
        _fn("get-owner", [{"buffer": {"length": 2}}], access="read_only", output="principal"),
        _fn("dup", []),
        _fn("dup", ["int128"]),
    ],
    "maps": [{"name": "balances", "key": "principal", "value": "uint128"}],
    "fungible_tokens": [{"name": "token"}],
    "non_fungible_tokens": [{"name": "nft", "type": "uint128"}],
    "variables": [{"name": "owner", "type": "principal", "access": "constant"}],
})


class TestTypes:

    def test_parse_primitives(self):
        assert parse_abi_type("uint128").id == AbiTypeId.UINT128
        assert parse_abi_type("none").id == AbiTypeId.NONE

    def test_parse_composite(self):
        t = parse_abi_type({"list": {"type": {"optional": {"buffer": {"length": 4}}}, "length": 3}})
        assert t.id == AbiTypeId.LIST
        assert t.length == 3
        assert t.element.inner == AbiBuffer(4)

    @pytest.mark.parametrize("raw", ["string-ascii", {"unknown": 1}, {"buffer": {}}, 7])
    def test_parse_invalid(self, raw):
        with pytest.raises(InvalidAbiTypeError):
            parse_abi_type(raw)

    @pytest.mark.parametrize("raw,expected", [
        ("uint128", "uint"),
        ("int128", "int"),
        ("bool", "bool"),
        ("principal", "principal"),
        ({"buffer": {"length": 20}}, "(buff 20)"),
        ({"optional": "uint128"}, "(optional uint)"),
        ({"response": {"ok": "bool", "error": "int128"}}, "(response bool int)"),
        ({"list": {"type": "principal", "length": 5}}, "(list 5 principal)"),
        ({"tuple": [{"name": "a", "type": "uint128"}, {"name": "b", "type": "bool"}]},
         "(tuple (a uint) (b bool))"),
    ])
    def test_type_strings(self, raw, expected):
        assert get_type_string(raw) == expected

    def test_function_signature(self):
        fn = resolve_function(ABI, "get-owner")
        assert abi_function_to_string(fn) == "(define-read-only (get-owner (a0 (buff 2))))"


class TestMatching:

    @pytest.mark.parametrize("value,abi_type", [
        (true_cv(), "bool"),
        (int_cv(-1), "int128"),
        (uint_cv(1), "uint128"),
        (buffer_cv(b"ab"), {"buffer": {"length": 2}}),
        (none_cv(), "none"),
        (none_cv(), {"optional": "uint128"}),
        (some_cv(uint_cv(1)), {"optional": "uint128"}),
        (response_ok_cv(true_cv()), {"response": {"ok": "bool", "error": "uint128"}}),
        (response_error_cv(uint_cv(1)), {"response": {"ok": "bool", "error": "uint128"}}),
        (standard_principal_cv(ADDRESS), "principal"),
        (contract_principal_cv(ADDRESS, "c"), "principal"),
        (list_cv([uint_cv(1), uint_cv(2)]), {"list": {"type": "uint128", "length": 2}}),
    ])
    def test_matches(self, value, abi_type):
        assert match_type(value, abi_type)

    @pytest.mark.parametrize("value,abi_type", [
        (int_cv(1), "uint128"),
        (uint_cv(1), "int128"),
        (false_cv(), "uint128"),
        (buffer_cv(b"abc"), {"buffer": {"length": 2}}),
        (some_cv(int_cv(1)), {"optional": "uint128"}),
        (response_ok_cv(uint_cv(1)), {"response": {"ok": "bool", "error": "uint128"}}),
        (list_cv([uint_cv(1)]), {"list": {"type": "uint128", "length": 2}}),
        (tuple_cv({"a": uint_cv(1)}), "uint128"),
    ])
    def test_mismatches(self, value, abi_type):
        assert not match_type(value, abi_type)

    def test_tuple_declared_fields_must_match(self):
        abi_type = {"tuple": [{"name": "a", "type": "uint128"}, {"name": "b", "type": "bool"}]}
        assert match_type(tuple_cv({"a": uint_cv(1), "b": true_cv()}), abi_type)
        assert not match_type(tuple_cv({"a": uint_cv(1)}), abi_type)
        assert not match_type(tuple_cv({"a": int_cv(1), "b": true_cv()}), abi_type)

    def test_tuple_extra_fields_ignored(self):
        abi_type = {"tuple": [{"name": "a", "type": "uint128"}]}
        assert match_type(tuple_cv({"a": uint_cv(1), "extra": none_cv()}), abi_type)


class TestValidation:

    def test_exact_match(self):
        assert validate_call([uint_cv(10), true_cv()], resolve_function(ABI, "transfer"))

    def test_type_mismatch_reports_first_argument(self):
        with pytest.raises(ArgumentTypeMismatchError) as exc_info:
            validate_call([int_cv(10), int_cv(1)], resolve_function(ABI, "transfer"))
        error = exc_info.value
        assert error.index == 0
        assert error.expected == "uint"
        assert error.actual == "int"
        assert "argument 1" in error.message

    def test_second_argument_mismatch(self):
        with pytest.raises(ArgumentTypeMismatchError) as exc_info:
            validate_call([uint_cv(10), uint_cv(1)], resolve_function(ABI, "transfer"))
        assert exc_info.value.index == 1

    def test_buffer_length_mismatch(self):
        with pytest.raises(ArgumentTypeMismatchError) as exc_info:
            validate_call([buffer_cv(b"abc")], resolve_function(ABI, "get-owner"))
        assert exc_info.value.expected == "(buff 2)"
        assert exc_info.value.actual == "(buff 3)"

    def test_count_mismatch(self):
        with pytest.raises(ArgumentCountMismatchError) as exc_info:
            validate_call([uint_cv(1)], resolve_function(ABI, "transfer"))
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1

    def test_function_not_found(self):
        with pytest.raises(FunctionNotFoundError):
            resolve_function(ABI, "missing")

    def test_ambiguous(self):
        with pytest.raises(AmbiguousAbiError):
            resolve_function(ABI, "dup")

    def test_validate_contract_call_payload(self):
        payload = create_contract_call_payload(ADDRESS, "token", "transfer", [uint_cv(1), false_cv()])
        assert validate_contract_call(payload, ABI)
        raw = {"functions": [_fn("transfer", ["uint128", "bool"])]}
        assert validate_contract_call(payload, raw)

    def test_abi_document_sections(self):
        assert ABI.maps[0].name == "balances"
        assert ABI.non_fungible_tokens[0].type.id == AbiTypeId.UINT128
        assert ABI.variables[0].access == "constant"


class TestEncoding:

    def test_integers(self):
        assert encode_clarity_value("uint128", "42") == uint_cv(42)
        assert encode_clarity_value("int128", "-42") == int_cv(-42)

    @pytest.mark.parametrize("text,expected", [("true", true_cv()), ("1", true_cv()),
                                               ("false", false_cv()), ("0", false_cv())])
    def test_bool(self, text, expected):
        assert encode_clarity_value("bool", text) == expected

    def test_principals(self):
        assert encode_clarity_value("principal", ADDRESS) == standard_principal_cv(ADDRESS)
        assert encode_clarity_value("principal", f"{ADDRESS}.pool") == contract_principal_cv(ADDRESS, "pool")

    def test_none_and_buffer(self):
        assert encode_clarity_value("none", "") == none_cv()
        assert encode_clarity_value({"buffer": {"length": 5}}, "hello") == buffer_cv(b"hello")

    @pytest.mark.parametrize("abi_type", [
        {"optional": "uint128"},
        {"response": {"ok": "bool", "error": "bool"}},
        {"tuple": [{"name": "a", "type": "bool"}]},
        {"list": {"type": "bool", "length": 1}},
    ])
    def test_unsupported(self, abi_type):
        with pytest.raises(UnsupportedAbiEncodingError):
            encode_clarity_value(abi_type, "x")

    def test_bad_bool(self):
        with pytest.raises(InvalidAbiTypeError):
            encode_clarity_value("bool", "yes")

    def test_bad_int(self):
        with pytest.raises(InvalidAbiTypeError):
            encode_clarity_value("uint128", "ten")

    @pytest.mark.parametrize("abi_type,text", [
        ("uint128", "-1"),
        ("uint128", str(2 ** 128)),
        ("int128", str(2 ** 127)),
    ])
    def test_out_of_range_int(self, abi_type, text):
        with pytest.raises(AbiError) as exc_info:
            encode_clarity_value(abi_type, text)
        assert isinstance(exc_info.value, InvalidAbiTypeError)
        assert isinstance(exc_info.value.cause, ValueOutOfRangeError)
        assert exc_info.value.details == {"value": text}
