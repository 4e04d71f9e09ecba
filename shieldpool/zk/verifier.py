"""
Transaction Verification
========================

Accept/reject checks for transfers and withdrawals against a given root.

Two interchangeable backends sit behind the ProofBackend protocol:

- TransactionVerifier recomputes commitments, nullifiers and membership
  from the witness carried in the request.
- SuccinctProofVerifier checks the public statement and hands the opaque
  proof to an external verify_proof(proof_bytes, public_inputs) function.

Verifiers never mutate pool state and are safe to call speculatively.
The reason for a rejection is logged at DEBUG and never returned.

Version: 0.1.0
"""

from collections.abc import Callable
from typing import Protocol

from shieldpool.config.settings import PoolSettings
from shieldpool.crypto.commitment import CommitmentScheme
from shieldpool.logging import get_logger
from shieldpool.state.merkle import ZERO_LEAF, MerkleAccumulator
from shieldpool.zk.models import (
    PublicInputs,
    SpendInput,
    TransferRequest,
    WithdrawalRequest,
)

logger = get_logger(__name__)


ProofVerifyFn = Callable[[bytes, PublicInputs], bool]


class ProofBackend(Protocol):
    """Protocol for transaction proof verification."""

    def verify_transfer(self, request: TransferRequest, root: int) -> bool:
        """Check a transfer against root."""
        ...

    def verify_withdrawal(self, request: WithdrawalRequest, root: int) -> bool:
        """Check a withdrawal against root."""
        ...


def _has_duplicates(values: list[int]) -> bool:
    return len(set(values)) != len(values)


class TransactionVerifier:
    """
    Witness-based transaction verifier.

    Checks run cheap to expensive and stop at the first failure:
    structural limits, amount ranges and conservation, commitment and
    nullifier recomputation, then Merkle membership.

    Usage:
        verifier = TransactionVerifier(scheme, accumulator, pool_settings)
        if verifier.verify_transfer(request, accumulator.root):
            ...
    """

    def __init__(
        self,
        scheme: CommitmentScheme,
        accumulator: MerkleAccumulator,
        pool_settings: PoolSettings | None = None,
    ) -> None:
        self.scheme = scheme
        self.accumulator = accumulator
        self.settings = pool_settings or PoolSettings()

    def _amount_in_range(self, amount: int) -> bool:
        return 0 < amount <= self.settings.max_amount

    def _spend_failure(self, spend: SpendInput, root: int) -> str | None:
        """Recompute one input; return a reason code on failure."""
        if spend.index >= self.accumulator.capacity:
            return "index_range"

        derived = self.scheme.derive_nullifier(spend.secret, spend.index)
        if derived != spend.nullifier:
            return "nullifier_mismatch"

        commitment = self.scheme.commit(spend.amount, spend.secret, spend.nullifier)
        if not self.accumulator.verify_membership(
            commitment,
            spend.index,
            spend.membership_proof,
            root,
        ):
            return "membership_failed"

        return None

    def transfer_failure(self, request: TransferRequest, root: int) -> str | None:
        """
        Find the first failing check of a transfer.

        Returns:
            Reason code, or None if the transfer is valid
        """
        num_inputs = len(request.inputs)
        num_outputs = len(request.outputs)
        if not 0 < num_inputs <= self.settings.max_inputs:
            return "input_count"
        if not 0 < num_outputs <= self.settings.max_outputs:
            return "output_count"
        if request.merkle_root != root:
            return "root_mismatch"
        if ZERO_LEAF in request.output_commitments:
            return "zero_commitment"
        if not all(spend.has_witness for spend in request.inputs):
            return "missing_witness"
        if not all(note.has_witness for note in request.outputs):
            return "missing_witness"
        if _has_duplicates(request.nullifiers):
            return "duplicate_nullifier"

        if not all(self._amount_in_range(spend.amount) for spend in request.inputs):
            return "input_amount_range"
        if not all(self._amount_in_range(note.amount) for note in request.outputs):
            return "output_amount_range"

        total_in = sum(spend.amount for spend in request.inputs)
        total_out = sum(note.amount for note in request.outputs)
        if total_in != total_out:
            return "conservation"

        for note in request.outputs:
            if self.scheme.commit(note.amount, note.secret, note.nullifier) != note.commitment:
                return "output_commitment_mismatch"

        for spend in request.inputs:
            reason = self._spend_failure(spend, root)
            if reason:
                return reason

        return None

    def withdrawal_failure(self, request: WithdrawalRequest, root: int) -> str | None:
        """
        Find the first failing check of a withdrawal.

        Returns:
            Reason code, or None if the withdrawal is valid
        """
        spend = request.input
        if request.merkle_root != root:
            return "root_mismatch"
        if not spend.has_witness:
            return "missing_witness"
        if request.recipient_hash == 0:
            return "zero_recipient"
        if not self._amount_in_range(spend.amount):
            return "input_amount_range"
        if request.withdrawal_amount != spend.amount:
            return "withdrawal_amount_mismatch"

        return self._spend_failure(spend, root)

    def verify_transfer(self, request: TransferRequest, root: int) -> bool:
        """
        Verify a transfer against root.

        Args:
            request: Transfer carrying its full witness
            root: Accumulator root the inputs must be members of

        Returns:
            True only if every check passes
        """
        reason = self.transfer_failure(request, root)
        if reason:
            logger.debug("transfer_rejected", reason=reason)
            return False
        return True

    def verify_withdrawal(self, request: WithdrawalRequest, root: int) -> bool:
        """
        Verify a withdrawal against root.

        Args:
            request: Withdrawal carrying its full witness
            root: Accumulator root the input must be a member of

        Returns:
            True only if every check passes
        """
        reason = self.withdrawal_failure(request, root)
        if reason:
            logger.debug("withdrawal_rejected", reason=reason)
            return False
        return True


class SuccinctProofVerifier:
    """
    Proof-system backend.

    Checks the public statement of a request and delegates soundness to
    an external verify_proof(proof_bytes, public_inputs) function, such as
    a SNARK/STARK verifier binding. Requests without proof bytes are
    rejected. There is no permissive default.
    """

    def __init__(
        self,
        verify_proof: ProofVerifyFn,
        pool_settings: PoolSettings | None = None,
    ) -> None:
        self.verify_proof = verify_proof
        self.settings = pool_settings or PoolSettings()

    def _statement_failure(
        self,
        request: TransferRequest | WithdrawalRequest,
        root: int,
    ) -> str | None:
        if not request.proof:
            return "missing_proof"
        if request.merkle_root != root:
            return "root_mismatch"
        if _has_duplicates(request.nullifiers):
            return "duplicate_nullifier"
        return None

    def verify_transfer(self, request: TransferRequest, root: int) -> bool:
        """Verify a transfer's public statement and proof."""
        reason = self._statement_failure(request, root)
        if reason is None and not 0 < len(request.inputs) <= self.settings.max_inputs:
            reason = "input_count"
        if reason is None and not 0 < len(request.outputs) <= self.settings.max_outputs:
            reason = "output_count"
        if reason is None and ZERO_LEAF in request.output_commitments:
            reason = "zero_commitment"
        if reason is None and not self.verify_proof(request.proof, request.public_inputs()):
            reason = "proof_rejected"

        if reason:
            logger.debug("transfer_rejected", reason=reason, backend="succinct")
            return False
        return True

    def verify_withdrawal(self, request: WithdrawalRequest, root: int) -> bool:
        """Verify a withdrawal's public statement and proof."""
        reason = self._statement_failure(request, root)
        if reason is None and request.recipient_hash == 0:
            reason = "zero_recipient"
        if reason is None and not 0 < request.withdrawal_amount <= self.settings.max_amount:
            reason = "withdrawal_amount_range"
        if reason is None and not self.verify_proof(request.proof, request.public_inputs()):
            reason = "proof_rejected"

        if reason:
            logger.debug("withdrawal_rejected", reason=reason, backend="succinct")
            return False
        return True
