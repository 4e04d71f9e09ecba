"""
Privacy Pool Engine
===================

State-transition engine owning one Merkle accumulator and one nullifier
registry. Deposits, withdrawals and transfers are atomic read-verify-write
steps serialized by a single lock; read-only queries do not take it.

Every check runs before any mutation, so a rejected operation leaves the
pool exactly as it was.

Version: 0.1.0
"""

import threading
from collections.abc import Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any

from shieldpool.config import get_settings
from shieldpool.config.settings import PoolSettings
from shieldpool.crypto.commitment import CommitmentScheme
from shieldpool.crypto.field import is_field_element
from shieldpool.errors import (
    CapacityExceeded,
    InvalidCommitment,
    InvalidProof,
    MalformedProofLength,
    NullifierReused,
    PoolError,
    StaleRoot,
)
from shieldpool.logging import get_logger, operation_context
from shieldpool.pool.events import (
    EventSink,
    InMemoryEventLog,
    InsertedLeaf,
    OperationKind,
    StateChangeRecord,
)
from shieldpool.state.merkle import ZERO_LEAF, MerkleAccumulator
from shieldpool.state.nullifiers import NullifierRegistry
from shieldpool.zk.models import SpendInput, TransferRequest, WithdrawalRequest
from shieldpool.zk.verifier import ProofBackend, TransactionVerifier

logger = get_logger(__name__)


@dataclass
class DepositResult:
    """Result of a deposit."""

    index: int
    root: int


@dataclass
class WithdrawalResult:
    """Result of a withdrawal, including the payout instruction for the bridge."""

    nullifier: int
    withdrawal_amount: int
    recipient_hash: int
    root: int


@dataclass
class TransferResult:
    """Result of a transfer."""

    root: int
    indices: list[int] = field(default_factory=list)
    nullifiers: list[int] = field(default_factory=list)


class PrivacyPool:
    """
    Shielded value pool.

    Usage:
        pool = PrivacyPool()
        deposit = pool.deposit(note.commitment)

        request = build_withdrawal_request(note, pool.accumulator, recipient)
        result = pool.withdraw(request)
    """

    def __init__(
        self,
        settings: PoolSettings | None = None,
        backend: ProofBackend | None = None,
        event_log: EventSink | None = None,
    ) -> None:
        self.settings = settings or get_settings().pool
        self.scheme = CommitmentScheme.from_settings(self.settings)

        self._accumulator = MerkleAccumulator(self.settings.tree_depth)
        self._nullifiers = NullifierRegistry()
        self.backend: ProofBackend = backend or TransactionVerifier(
            self.scheme,
            self._accumulator,
            self.settings,
        )
        self.events: EventSink = event_log if event_log is not None else InMemoryEventLog()

        self._lock = threading.RLock()
        self._sequence = 0
        self._total_withdrawn = 0

        logger.debug("privacy_pool_initialized", **self._accumulator.snapshot())

    # =========================================================================
    # Read-only queries
    # =========================================================================

    @property
    def accumulator(self) -> MerkleAccumulator:
        """The pool's accumulator. Callers must treat it as read-only."""
        return self._accumulator

    @property
    def total_withdrawn(self) -> int:
        """Sum of all amounts paid out through withdrawals."""
        return self._total_withdrawn

    def current_root(self) -> int:
        return self._accumulator.root

    def is_nullifier_used(self, nullifier: int) -> bool:
        return nullifier in self._nullifiers

    def leaf_at(self, index: int) -> int | None:
        return self._accumulator.leaf_at(index)

    def leaf_count(self) -> int:
        return self._accumulator.count

    def membership_proof(self, index: int) -> list[int]:
        """Authentication path of a leaf against the current root."""
        return self._accumulator.prove(index)

    def health_check(self) -> dict[str, Any]:
        """Summarize pool state."""
        return {
            "status": "full" if self._accumulator.is_full else "healthy",
            **self._accumulator.snapshot(),
            "nullifiers": len(self._nullifiers),
            "total_withdrawn": self._total_withdrawn,
            "events": self._sequence,
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def _operation(self, kind: OperationKind) -> AbstractContextManager[None]:
        return operation_context(pool=self.settings.name, operation=kind.value)

    def _rejected(self, error: PoolError) -> PoolError:
        logger.warning("pool_operation_rejected", code=error.code, root=self._accumulator.root)
        return error

    def _check_fresh(self, nullifiers: Sequence[int]) -> None:
        for nullifier in nullifiers:
            if nullifier in self._nullifiers:
                raise self._rejected(NullifierReused(f"Nullifier {nullifier:#x} already spent"))

    def _check_root(self, claimed_root: int) -> None:
        if claimed_root != self._accumulator.root:
            raise self._rejected(
                StaleRoot("Request was proved against a root that is no longer current")
            )

    def _check_proof_lengths(self, inputs: Sequence[SpendInput]) -> None:
        depth = self._accumulator.depth
        for spend in inputs:
            if spend.membership_proof is not None and len(spend.membership_proof) != depth:
                raise self._rejected(
                    MalformedProofLength(f"Membership proof must have {depth} elements")
                )

    def _emit(
        self,
        kind: OperationKind,
        root: int,
        nullifiers: list[int] | None = None,
        commitments: list[InsertedLeaf] | None = None,
        **payout: int,
    ) -> StateChangeRecord:
        """
        Hand the record of a committed operation to the event sink.

        State is already mutated when this runs, so a failing sink is logged
        and the operation still succeeds. The sequence only advances once
        the sink has accepted the record.
        """
        record = StateChangeRecord(
            sequence=self._sequence,
            kind=kind,
            nullifiers=nullifiers or [],
            commitments=commitments or [],
            root=root,
            **payout,
        )
        try:
            self.events.append(record)
        except Exception:
            logger.exception("event_sink_failed", sequence=record.sequence, root=root)
            return record

        self._sequence += 1
        logger.info(
            "pool_state_changed",
            sequence=record.sequence,
            nullifiers=len(record.nullifiers),
            leaves=[leaf.index for leaf in record.commitments],
            root=root,
        )
        return record

    # =========================================================================
    # State transitions
    # =========================================================================

    def deposit(self, commitment: int) -> DepositResult:
        """
        Record a new commitment.

        Value enters from the bridge under its own authorization, so no
        spend is verified here.

        Raises:
            InvalidCommitment: If commitment is zero or not a field element
            CapacityExceeded: If the accumulator is full
        """
        with self._lock, self._operation(OperationKind.DEPOSIT):
            if not is_field_element(commitment) or commitment == ZERO_LEAF:
                raise self._rejected(
                    InvalidCommitment("Commitment must be a non-zero field element"),
                )
            if self._accumulator.is_full:
                raise self._rejected(CapacityExceeded("Pool accumulator is full"))

            index, root = self._accumulator.insert(commitment)
            self._emit(
                OperationKind.DEPOSIT,
                root,
                commitments=[InsertedLeaf(index=index, commitment=commitment)],
            )

            return DepositResult(index=index, root=root)

    def withdraw(self, request: WithdrawalRequest) -> WithdrawalResult:
        """
        Spend one note to the external settlement layer.

        Raises:
            NullifierReused: If the note was already spent
            StaleRoot: If the request's root is no longer current
            InvalidProof: If verification fails
        """
        with self._lock, self._operation(OperationKind.WITHDRAW):
            self._check_fresh(request.nullifiers)
            self._check_root(request.merkle_root)
            self._check_proof_lengths([request.input])

            if not self.backend.verify_withdrawal(request, self._accumulator.root):
                raise self._rejected(InvalidProof("Withdrawal verification failed"))

            self._nullifiers.add(request.nullifier)
            self._total_withdrawn += request.withdrawal_amount

            root = self._accumulator.root
            self._emit(
                OperationKind.WITHDRAW,
                root,
                nullifiers=[request.nullifier],
                withdrawal_amount=request.withdrawal_amount,
                recipient_hash=request.recipient_hash,
            )

            return WithdrawalResult(
                nullifier=request.nullifier,
                withdrawal_amount=request.withdrawal_amount,
                recipient_hash=request.recipient_hash,
                root=root,
            )

    def transfer(self, request: TransferRequest) -> TransferResult:
        """
        Spend notes into new notes inside the pool.

        All inputs are proved against the pre-transfer root; outputs are
        then appended in order, each advancing the root.

        Raises:
            NullifierReused: If any input was already spent
            StaleRoot: If the request's root is no longer current
            InvalidProof: If verification fails
            CapacityExceeded: If the outputs do not fit in the accumulator
        """
        with self._lock, self._operation(OperationKind.TRANSFER):
            self._check_fresh(request.nullifiers)
            self._check_root(request.merkle_root)
            self._check_proof_lengths(request.inputs)

            if not self.backend.verify_transfer(request, self._accumulator.root):
                raise self._rejected(InvalidProof("Transfer verification failed"))

            if self._accumulator.count + len(request.outputs) > self._accumulator.capacity:
                raise self._rejected(
                    CapacityExceeded("Outputs do not fit in the accumulator"),
                )

            nullifiers = request.nullifiers
            self._nullifiers.add_all(nullifiers)

            inserted: list[InsertedLeaf] = []
            root = self._accumulator.root
            for commitment in request.output_commitments:
                index, root = self._accumulator.insert(commitment)
                inserted.append(InsertedLeaf(index=index, commitment=commitment))

            self._emit(
                OperationKind.TRANSFER,
                root,
                nullifiers=nullifiers,
                commitments=inserted,
            )

            return TransferResult(
                root=root,
                indices=[leaf.index for leaf in inserted],
                nullifiers=nullifiers,
            )
