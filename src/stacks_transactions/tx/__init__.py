"""
Transaction envelope, authorization and signing.

Key components:
- payload.py: Token transfer, contract deploy and contract call payloads
- postconditions.py: STX, fungible and non-fungible post-conditions
- authorization.py: Single-sig and multi-sig spending conditions
- transaction.py: StacksTransaction encoding and the sighash chain steps
- signer.py: TransactionSigner driving origin and sponsor signing
- fees.py, options.py, builders.py: Fee computation and builder helpers
"""

from .payload import (
    TokenTransferPayload,
    SmartContractPayload,
    ContractCallPayload,
    Payload,
    create_token_transfer_payload,
    create_smart_contract_payload,
    create_contract_call_payload,
)
from .postconditions import (
    OriginPrincipal,
    StandardPrincipal,
    ContractPrincipal,
    AssetInfo,
    STXPostCondition,
    FungiblePostCondition,
    NonFungiblePostCondition,
    PostCondition,
    create_asset_info,
    create_stx_post_condition,
    create_fungible_post_condition,
    create_non_fungible_post_condition,
    make_standard_stx_post_condition,
    make_contract_stx_post_condition,
    make_standard_fungible_post_condition,
    make_contract_fungible_post_condition,
    make_standard_non_fungible_post_condition,
    make_contract_non_fungible_post_condition,
    serialize_post_condition,
    deserialize_post_condition,
)
from .authorization import (
    SingleSigSpendingCondition,
    MultiSigSpendingCondition,
    TransactionAuthField,
    SpendingCondition,
    StandardAuthorization,
    SponsoredAuthorization,
    Authorization,
    address_hash_from_public_keys,
    create_single_sig_spending_condition,
    create_multi_sig_spending_condition,
    create_sponsored_placeholder,
    create_standard_auth,
    create_sponsored_auth,
)
from .transaction import StacksTransaction
from .signer import TransactionSigner
from .fees import estimate_fee, fee_for_length
from .options import TransactionOptions, TokenTransferOptions, ContractCallOptions, ContractDeployOptions
from .builders import (
    make_unsigned_stx_token_transfer,
    make_stx_token_transfer,
    make_unsigned_smart_contract_deploy,
    make_smart_contract_deploy,
    make_unsigned_contract_call,
    make_contract_call,
    sponsor_transaction,
)

__all__ = [
    "TokenTransferPayload",
    "SmartContractPayload",
    "ContractCallPayload",
    "Payload",
    "create_token_transfer_payload",
    "create_smart_contract_payload",
    "create_contract_call_payload",
    "OriginPrincipal",
    "StandardPrincipal",
    "ContractPrincipal",
    "AssetInfo",
    "STXPostCondition",
    "FungiblePostCondition",
    "NonFungiblePostCondition",
    "PostCondition",
    "create_asset_info",
    "create_stx_post_condition",
    "create_fungible_post_condition",
    "create_non_fungible_post_condition",
    "make_standard_stx_post_condition",
    "make_contract_stx_post_condition",
    "make_standard_fungible_post_condition",
    "make_contract_fungible_post_condition",
    "make_standard_non_fungible_post_condition",
    "make_contract_non_fungible_post_condition",
    "serialize_post_condition",
    "deserialize_post_condition",
    "SingleSigSpendingCondition",
    "MultiSigSpendingCondition",
    "TransactionAuthField",
    "SpendingCondition",
    "StandardAuthorization",
    "SponsoredAuthorization",
    "Authorization",
    "address_hash_from_public_keys",
    "create_single_sig_spending_condition",
    "create_multi_sig_spending_condition",
    "create_sponsored_placeholder",
    "create_standard_auth",
    "create_sponsored_auth",
    "StacksTransaction",
    "TransactionSigner",
    "estimate_fee",
    "fee_for_length",
    "TransactionOptions",
    "TokenTransferOptions",
    "ContractCallOptions",
    "ContractDeployOptions",
    "make_unsigned_stx_token_transfer",
    "make_stx_token_transfer",
    "make_unsigned_smart_contract_deploy",
    "make_smart_contract_deploy",
    "make_unsigned_contract_call",
    "make_contract_call",
    "sponsor_transaction",
]
