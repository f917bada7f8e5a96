"""
Transaction payloads.

    token transfer   recipient principal (Clarity encoding), u64 amount, 34-byte memo
    smart contract   u8-prefixed name, u32-prefixed code body
    contract call    address, u8-prefixed contract name, u8-prefixed function
                     name, u32 argument count, encoded arguments
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Iterable, Tuple, Union

from ..clarity.codec import read_address, read_cv, read_name, write_address, write_cv, write_name
from ..clarity.values import ClarityValue, PrincipalCV, check_name, principal_cv
from ..codec.reader import BinaryReader
from ..codec.writer import BinaryWriter
from ..config import CodecLimits, DEFAULT_LIMITS
from ..enums import ClarityType, MAX_U64, MEMO_MAX_LENGTH_BYTES, PayloadType
from ..runtime.address import Address, parse_address
from ..runtime.errors import MalformedValueError, UnsupportedVariantError, ValueOutOfRangeError

_PRINCIPAL_TYPES = (ClarityType.PRINCIPAL_STANDARD, ClarityType.PRINCIPAL_CONTRACT)


@dataclass(frozen=True)
class TokenTransferPayload:
    """
    STX transfer.

    The memo is always held in its padded 34-byte wire form; ``memo_text``
    strips the padding.
    """

    recipient: PrincipalCV
    amount: int
    memo: bytes = b""
    payload_type: ClassVar[PayloadType] = PayloadType.TOKEN_TRANSFER

    def __post_init__(self):
        if self.recipient.type not in _PRINCIPAL_TYPES:
            raise ValueOutOfRangeError("Token transfer recipient must be a principal",
                                       details={"type": int(self.recipient.type)})
        if not 0 <= self.amount <= MAX_U64:
            raise ValueOutOfRangeError(f"Amount {self.amount} is not a u64", details={"amount": self.amount})
        memo = self.memo.encode("utf-8") if isinstance(self.memo, str) else bytes(self.memo)
        if len(memo) > MEMO_MAX_LENGTH_BYTES:
            raise ValueOutOfRangeError(
                f"Memo exceeds {MEMO_MAX_LENGTH_BYTES} bytes", details={"length": len(memo)},
            )
        object.__setattr__(self, "memo", memo.ljust(MEMO_MAX_LENGTH_BYTES, b"\x00"))

    @property
    def memo_text(self) -> str:
        return self.memo.rstrip(b"\x00").decode("utf-8", errors="replace")


@dataclass(frozen=True)
class SmartContractPayload:
    contract_name: str
    code_body: str
    payload_type: ClassVar[PayloadType] = PayloadType.SMART_CONTRACT

    def __post_init__(self):
        check_name(self.contract_name, "Contract name")


@dataclass(frozen=True)
class ContractCallPayload:
    contract_address: Address
    contract_name: str
    function_name: str
    function_args: Tuple[ClarityValue, ...] = ()
    payload_type: ClassVar[PayloadType] = PayloadType.CONTRACT_CALL

    def __post_init__(self):
        check_name(self.contract_name, "Contract name")
        check_name(self.function_name, "Function name")
        object.__setattr__(self, "function_args", tuple(self.function_args))


Payload = Union[TokenTransferPayload, SmartContractPayload, ContractCallPayload]


def create_token_transfer_payload(recipient: Union[str, PrincipalCV], amount: int,
                                  memo: Union[str, bytes] = b"") -> TokenTransferPayload:
    """
    Build a token transfer payload.

    Args:
        recipient: Principal value or ``ADDRESS[.contract]`` string
        amount: Amount in micro-STX
        memo: Up to 34 bytes of memo (str is UTF-8 encoded)
    """
    if isinstance(recipient, str):
        recipient = principal_cv(recipient)
    return TokenTransferPayload(recipient, amount, memo)


def create_smart_contract_payload(contract_name: str, code_body: str) -> SmartContractPayload:
    return SmartContractPayload(contract_name, code_body)


def create_contract_call_payload(contract_address: Union[str, Address], contract_name: str,
                                 function_name: str,
                                 function_args: Iterable[ClarityValue] = ()) -> ContractCallPayload:
    return ContractCallPayload(parse_address(contract_address), contract_name, function_name,
                               tuple(function_args))


def write_payload(writer: BinaryWriter, payload: Payload) -> None:
    t = payload.payload_type
    writer.u8(int(t))
    if t == PayloadType.TOKEN_TRANSFER:
        write_cv(writer, payload.recipient)
        writer.u64be(payload.amount)
        writer.bytes(payload.memo)
    elif t == PayloadType.SMART_CONTRACT:
        write_name(writer, payload.contract_name)
        writer.u32_prefixed_bytes(payload.code_body.encode("utf-8"))
    elif t == PayloadType.CONTRACT_CALL:
        write_address(writer, payload.contract_address)
        write_name(writer, payload.contract_name)
        write_name(writer, payload.function_name)
        writer.u32be(len(payload.function_args))
        for arg in payload.function_args:
            write_cv(writer, arg)
    else:
        raise UnsupportedVariantError("payload type", int(t))


def read_payload(reader: BinaryReader, limits: CodecLimits = DEFAULT_LIMITS) -> Payload:
    """
    Decode a payload at the reader's cursor.

    Raises:
        UnsupportedVariantError: Unknown payload tag
        MalformedValueError: Structurally invalid body
    """
    start = reader.offset
    tag = reader.u8()
    if tag == PayloadType.TOKEN_TRANSFER:
        recipient_offset = reader.offset
        recipient = read_cv(reader, limits)
        if recipient.type not in _PRINCIPAL_TYPES:
            raise MalformedValueError("Token transfer recipient is not a principal",
                                      details={"offset": recipient_offset})
        amount = reader.u64be()
        memo = reader.bytes(MEMO_MAX_LENGTH_BYTES)
        return TokenTransferPayload(recipient, amount, memo)

    if tag == PayloadType.SMART_CONTRACT:
        name = read_name(reader)
        body_offset = reader.offset
        body = reader.u32_prefixed_bytes()
        try:
            return SmartContractPayload(name, body.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise MalformedValueError("Contract code body is not valid UTF-8",
                                      details={"offset": body_offset}, cause=e)

    if tag == PayloadType.CONTRACT_CALL:
        address = read_address(reader)
        contract_name = read_name(reader)
        function_name = read_name(reader)
        count_offset = reader.offset
        count = reader.u32be()
        if count > reader.remaining:
            raise MalformedValueError(
                f"Contract call declares {count} arguments but only {reader.remaining} bytes remain",
                details={"offset": count_offset, "length": count},
            )
        args = tuple(read_cv(reader, limits) for _ in range(count))
        return ContractCallPayload(address, contract_name, function_name, args)

    raise UnsupportedVariantError("payload type", tag, offset=start)


def serialize_payload(payload: Payload) -> bytes:
    writer = BinaryWriter()
    write_payload(writer, payload)
    return writer.to_bytes()


__all__ = [
    "TokenTransferPayload",
    "SmartContractPayload",
    "ContractCallPayload",
    "Payload",
    "create_token_transfer_payload",
    "create_smart_contract_payload",
    "create_contract_call_payload",
    "write_payload",
    "read_payload",
    "serialize_payload",
]
