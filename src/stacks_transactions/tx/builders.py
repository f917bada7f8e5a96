"""
Transaction builders.

Compose a payload, a single-sig spending condition and the options into a
StacksTransaction, then optionally sign it. Builders do no network I/O:
fee rates and ABIs are passed in through the options.
"""

from __future__ import annotations
import copy
import logging
from typing import Iterable, Optional, Union

from ..abi.contract_abi import validate_contract_call
from ..clarity.values import ClarityValue, PrincipalCV
from ..crypto.secp256k1 import StacksPrivateKey, StacksPublicKey, parse_private_key
from ..enums import AddressHashMode
from ..runtime.address import Address
from .authorization import (
    create_single_sig_spending_condition,
    create_sponsored_auth,
    create_standard_auth,
)
from .fees import FeeRate, estimate_fee
from .options import ContractCallOptions, ContractDeployOptions, TokenTransferOptions, TransactionOptions
from .payload import (
    Payload,
    create_contract_call_payload,
    create_smart_contract_payload,
    create_token_transfer_payload,
)
from .signer import TransactionSigner
from .transaction import StacksTransaction

logger = logging.getLogger(__name__)


def _build(payload: Payload, public_key: Union[str, bytes, StacksPublicKey],
           options: TransactionOptions) -> StacksTransaction:
    condition = create_single_sig_spending_condition(
        options.hash_mode, public_key, options.nonce, options.fee or 0,
    )
    auth = create_sponsored_auth(condition) if options.sponsored else create_standard_auth(condition)
    transaction = StacksTransaction(
        version=options.version,
        auth=auth,
        payload=payload,
        chain_id=options.resolved_chain_id(),
        anchor_mode=options.anchor_mode,
        post_condition_mode=options.post_condition_mode,
        post_conditions=list(options.post_conditions),
    )
    if options.fee is None and options.fee_rate is not None:
        transaction.set_fee(estimate_fee(transaction, options.fee_rate))
    logger.debug(
        f"Built {payload.payload_type.name.lower()} transaction "
        f"(sponsored={options.sponsored}, nonce={options.nonce})"
    )
    return transaction


def _sign(transaction: StacksTransaction, sender_key: Union[str, StacksPrivateKey]) -> StacksTransaction:
    signer = TransactionSigner(transaction)
    signer.sign_origin(sender_key)
    return transaction


def make_unsigned_stx_token_transfer(recipient: Union[str, PrincipalCV], amount: int,
                                     public_key: Union[str, bytes, StacksPublicKey],
                                     options: Optional[TokenTransferOptions] = None) -> StacksTransaction:
    """
    Unsigned STX transfer.

    Args:
        recipient: Principal value or ``ADDRESS[.contract]`` string
        amount: Amount in micro-STX
        public_key: Sender public key
        options: Transfer options (memo, fee, nonce, network...)
    """
    options = options or TokenTransferOptions()
    payload = create_token_transfer_payload(recipient, amount, options.memo)
    return _build(payload, public_key, options)


def make_stx_token_transfer(recipient: Union[str, PrincipalCV], amount: int,
                            sender_key: Union[str, StacksPrivateKey],
                            options: Optional[TokenTransferOptions] = None) -> StacksTransaction:
    """Signed STX transfer. See make_unsigned_stx_token_transfer."""
    key = parse_private_key(sender_key)
    transaction = make_unsigned_stx_token_transfer(recipient, amount, key.public_key(), options)
    return _sign(transaction, key)


def make_unsigned_smart_contract_deploy(contract_name: str, code_body: str,
                                        public_key: Union[str, bytes, StacksPublicKey],
                                        options: Optional[ContractDeployOptions] = None) -> StacksTransaction:
    options = options or ContractDeployOptions()
    return _build(create_smart_contract_payload(contract_name, code_body), public_key, options)


def make_smart_contract_deploy(contract_name: str, code_body: str,
                               sender_key: Union[str, StacksPrivateKey],
                               options: Optional[ContractDeployOptions] = None) -> StacksTransaction:
    """
    Signed contract deployment.

    Args:
        contract_name: Name the contract is deployed under
        code_body: Clarity source
        sender_key: Deployer private key
        options: Deploy options
    """
    key = parse_private_key(sender_key)
    transaction = make_unsigned_smart_contract_deploy(contract_name, code_body, key.public_key(), options)
    return _sign(transaction, key)


def make_unsigned_contract_call(contract_address: Union[str, Address], contract_name: str,
                                function_name: str, function_args: Iterable[ClarityValue],
                                public_key: Union[str, bytes, StacksPublicKey],
                                options: Optional[ContractCallOptions] = None) -> StacksTransaction:
    """
    Unsigned contract call.

    When ``options.abi`` is set the arguments are validated against it
    before the transaction is built.

    Raises:
        FunctionNotFoundError, AmbiguousAbiError, ArgumentCountMismatchError,
        ArgumentTypeMismatchError: From ABI validation
    """
    options = options or ContractCallOptions()
    payload = create_contract_call_payload(contract_address, contract_name, function_name, function_args)
    if options.abi is not None:
        validate_contract_call(payload, options.abi)
    return _build(payload, public_key, options)


def make_contract_call(contract_address: Union[str, Address], contract_name: str,
                       function_name: str, function_args: Iterable[ClarityValue],
                       sender_key: Union[str, StacksPrivateKey],
                       options: Optional[ContractCallOptions] = None) -> StacksTransaction:
    key = parse_private_key(sender_key)
    transaction = make_unsigned_contract_call(contract_address, contract_name, function_name,
                                              function_args, key.public_key(), options)
    return _sign(transaction, key)


def sponsor_transaction(transaction: StacksTransaction, sponsor_key: Union[str, StacksPrivateKey],
                        fee: Optional[int] = None, sponsor_nonce: int = 0,
                        fee_rate: Optional[FeeRate] = None,
                        hash_mode: AddressHashMode = AddressHashMode.SERIALIZE_P2PKH) -> StacksTransaction:
    """
    Sponsor a transaction whose origin is fully signed.

    Args:
        transaction: Sponsored transaction with a signed origin
        sponsor_key: Sponsor private key
        fee: Fee paid by the sponsor; computed from fee_rate when omitted
        sponsor_nonce: Sponsor account nonce
        fee_rate: Micro-STX per byte, used when fee is omitted
        hash_mode: Sponsor single-sig hash mode

    Returns:
        New transaction signed by origin and sponsor; the input is not modified

    Raises:
        AuthorizationKindMismatchError: The transaction is not sponsored
    """
    key = parse_private_key(sponsor_key)
    condition = create_single_sig_spending_condition(hash_mode, key.public_key(), sponsor_nonce, 0)
    if fee is None and fee_rate is not None:
        sized = copy.deepcopy(transaction)
        sized.set_sponsor(condition)
        fee = estimate_fee(sized, fee_rate)
    condition.fee = fee or 0

    signer = TransactionSigner.create_sponsor_signer(transaction, condition)
    signer.sign_sponsor(key)
    logger.debug(f"Sponsored transaction {signer.transaction.txid()[:16]} with fee {condition.fee}")
    return signer.transaction


__all__ = [
    "make_unsigned_stx_token_transfer",
    "make_stx_token_transfer",
    "make_unsigned_smart_contract_deploy",
    "make_smart_contract_deploy",
    "make_unsigned_contract_call",
    "make_contract_call",
    "sponsor_transaction",
]
