"""
Transaction signer.

Drives the chained sighash protocol over one transaction:

    sighash_0 = initial sighash (signatures cleared)
    presign_i = H(sighash_i || auth type || fee || nonce)
    sig_i     = sign(presign_i)
    sighash_i+1 = H(presign_i || key encoding || sig_i)

The origin signs first, one round per signature; the sponsor, if any,
continues from the origin's final sighash. Every signature therefore
commits to all earlier signatures and their order.
"""

from __future__ import annotations
import copy
import logging
from typing import Union

from ..codec.hashes import sighash_postsign, sighash_presign
from ..crypto.secp256k1 import StacksPrivateKey, StacksPublicKey
from ..enums import AuthType
from ..runtime.errors import AuthorizationError, AuthorizationKindMismatchError, ThresholdNotMetError
from .authorization import MultiSigSpendingCondition, SpendingCondition
from .transaction import StacksTransaction

logger = logging.getLogger(__name__)


def _check_complete(condition: SpendingCondition, role: str) -> None:
    if isinstance(condition, MultiSigSpendingCondition):
        if condition.signature_count != condition.signatures_required:
            logger.debug(f"{role} multi-sig incomplete: {condition.signature_count}/{condition.signatures_required}")
            raise ThresholdNotMetError(condition.signature_count, condition.signatures_required)
    elif not condition.is_signed:
        raise ThresholdNotMetError(0, 1)


class TransactionSigner:
    """
    Stateful signer bound to one transaction.

    The signer mutates the transaction it was given. An origin that
    already carries signatures can be resumed: the constructor replays them
    to rebuild the current sighash.
    """

    def __init__(self, transaction: StacksTransaction):
        """
        Initialize signer.

        Args:
            transaction: Transaction to sign in place
        """
        self.transaction = transaction
        self.sighash = transaction.sign_begin()
        self.origin_done = False
        self.check_overlap = True

        condition = transaction.auth.spending_condition
        if isinstance(condition, MultiSigSpendingCondition):
            for auth_field in condition.fields:
                if auth_field.is_signature:
                    presign = sighash_presign(self.sighash, AuthType.STANDARD, condition.fee, condition.nonce)
                    self.sighash = sighash_postsign(presign, auth_field.encoding, auth_field.data)
            if condition.signature_count:
                logger.debug(f"Resumed multi-sig signing at {condition.signature_count}/"
                             f"{condition.signatures_required}")
        elif condition.is_signed:
            presign = sighash_presign(self.sighash, AuthType.STANDARD, condition.fee, condition.nonce)
            self.sighash = sighash_postsign(presign, condition.key_encoding, condition.signature.data)
            logger.debug("Resumed after signed single-sig origin")

    @classmethod
    def create_sponsor_signer(cls, transaction: StacksTransaction,
                              sponsor_spending_condition: SpendingCondition) -> TransactionSigner:
        """
        Signer for the sponsor of a fully signed sponsored transaction.

        Works on a copy with the sponsor condition installed. The origin
        signatures are verified and the chain continues from their final
        sighash.

        Raises:
            AuthorizationKindMismatchError: If the transaction is not sponsored
        """
        if not transaction.is_sponsored:
            raise AuthorizationKindMismatchError("Cannot add sponsor to non-sponsored transaction")
        tx = copy.deepcopy(transaction)
        tx.set_sponsor(sponsor_spending_condition)
        origin_sighash = tx.verify_origin()
        signer = cls(tx)
        signer.origin_done = True
        signer.sighash = origin_sighash
        return signer

    def sign_origin(self, private_key: Union[str, StacksPrivateKey]) -> None:
        """
        Sign the origin spending condition.

        Raises:
            NoSlotAvailableError: The condition has no empty signature slot
            SigningKeyMismatchError: Key does not hash to a single-sig signer
        """
        if self.check_overlap and self.origin_done:
            raise AuthorizationError("Cannot sign origin after sponsor key")
        self.sighash = self.transaction.sign_next_origin(self.sighash, private_key)

    def append_origin(self, public_key: Union[str, bytes, StacksPublicKey]) -> None:
        """Add a non-signing public key to the origin multi-sig condition."""
        if self.check_overlap and self.origin_done:
            raise AuthorizationError("Cannot append public key to origin after sponsor key")
        self.transaction.append_pub_key(public_key)

    def sign_sponsor(self, private_key: Union[str, StacksPrivateKey]) -> None:
        """
        Sign the sponsor spending condition.

        Raises:
            AuthorizationKindMismatchError: If the transaction is not sponsored
            ThresholdNotMetError: The origin is not fully signed yet
        """
        if not self.transaction.is_sponsored:
            raise AuthorizationKindMismatchError("Cannot sign sponsor of a non-sponsored transaction")
        if not self.origin_done:
            _check_complete(self.transaction.auth.spending_condition, "origin")
        self.sighash = self.transaction.sign_next_sponsor(self.sighash, private_key)
        self.origin_done = True

    def append_sponsor(self, public_key: Union[str, bytes, StacksPublicKey]) -> None:
        if not self.origin_done:
            _check_complete(self.transaction.auth.spending_condition, "origin")
        self.transaction.append_sponsor_pub_key(public_key)
        self.origin_done = True

    def verify_origin(self) -> bytes:
        return self.transaction.verify_origin()

    def verify_sponsor(self) -> bytes:
        return self.transaction.verify_sponsor()

    def get_tx_incomplete(self) -> StacksTransaction:
        return copy.deepcopy(self.transaction)

    def get_tx_complete(self) -> StacksTransaction:
        """
        Copy of the transaction once every required signature is present.

        The sponsor condition is checked only after sponsor signing started.

        Raises:
            ThresholdNotMetError: Fewer signatures than required
        """
        _check_complete(self.transaction.auth.spending_condition, "origin")
        if self.transaction.is_sponsored and self.origin_done:
            _check_complete(self.transaction.auth.sponsor_spending_condition, "sponsor")
        return copy.deepcopy(self.transaction)


__all__ = ["TransactionSigner"]
