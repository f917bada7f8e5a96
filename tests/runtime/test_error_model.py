"""
Error model tests: codes, structured details and serialization.
"""

from stacks_transactions import (
    ArgumentTypeMismatchError,
    DepthExceededError,
    EncodingError,
    ErrorCode,
    MalformedValueError,
    StacksError,
    ThresholdNotMetError,
    TruncatedInputError,
    UnsupportedVariantError,
)


def test_codec_error_hierarchy():
    assert issubclass(TruncatedInputError, MalformedValueError)
    assert issubclass(DepthExceededError, MalformedValueError)
    assert issubclass(MalformedValueError, EncodingError)
    assert issubclass(EncodingError, StacksError)


def test_default_codes():
    assert TruncatedInputError(offset=3).code == ErrorCode.TRUNCATED_INPUT
    assert UnsupportedVariantError("payload type", 9).code == ErrorCode.UNSUPPORTED_VARIANT
    assert ThresholdNotMetError(1, 2).code == ErrorCode.THRESHOLD_NOT_MET


def test_truncated_details():
    error = TruncatedInputError("short", offset=4, needed=8, available=2)
    assert error.details == {"offset": 4, "needed": 8, "available": 2}
    assert error.offset == 4


def test_argument_mismatch_message_is_one_based():
    error = ArgumentTypeMismatchError(0, "uint", "int", "transfer")
    assert error.index == 0
    assert error.expected == "uint"
    assert error.actual == "int"
    assert "argument 1" in error.message


def test_str_includes_code_and_details():
    text = str(UnsupportedVariantError("Clarity type", 0x0D, offset=0))
    assert "UNSUPPORTED_VARIANT" in text
    assert "0x0d" in text


def test_to_dict_from_dict():
    cause = ValueError("boom")
    error = StacksError("failed", ErrorCode.INTERNAL, {"k": 1}, cause)
    data = error.to_dict()
    assert data == {"code": 2, "message": "failed", "details": {"k": 1}, "cause": "boom"}
    restored = StacksError.from_dict(data)
    assert restored.code == ErrorCode.INTERNAL
    assert restored.details == {"k": 1}


def test_from_dict_unknown_code():
    assert StacksError.from_dict({"code": 9999}).code == ErrorCode.UNKNOWN
