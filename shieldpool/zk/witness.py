"""
Notes and Witness Construction
==============================

Client-side helpers: create notes, check them, and assemble transfer and
withdrawal requests with membership proofs against an accumulator.

Output nullifiers depend on the leaf index the output will receive, which
is the accumulator count at admission plus the output's position. A
deposit landing in between changes the root, so such a request is
rejected as stale rather than admitted with mismatched indices.

Version: 0.1.0
"""

import hashlib
import secrets
from collections.abc import Sequence
from dataclasses import dataclass

from shieldpool.crypto.commitment import CommitmentScheme
from shieldpool.crypto.field import FIELD_MODULUS
from shieldpool.state.merkle import MerkleAccumulator
from shieldpool.zk.models import (
    OutputNote,
    SpendInput,
    TransferRequest,
    WithdrawalRequest,
)


def random_secret() -> int:
    """Generate a random secret as a field element."""
    # 31 bytes stays under the field order
    return int.from_bytes(secrets.token_bytes(31), "big")


def hash_recipient(address: str) -> int:
    """
    Hash a payout address to a field element.

    Uses SHA-256 and reduces mod field order.
    """
    digest = hashlib.sha256(address.encode()).digest()
    return int.from_bytes(digest, "big") % FIELD_MODULUS


@dataclass
class Note:
    """A private note, known only to its owner."""

    amount: int
    secret: int
    index: int
    nullifier: int
    commitment: int

    @classmethod
    def create(
        cls,
        amount: int,
        index: int,
        scheme: CommitmentScheme,
        secret: int | None = None,
    ) -> "Note":
        """Derive nullifier and commitment for a note placed at index."""
        secret = random_secret() if secret is None else secret
        nullifier = scheme.derive_nullifier(secret, index)
        return cls(
            amount=amount,
            secret=secret,
            index=index,
            nullifier=nullifier,
            commitment=scheme.commit(amount, secret, nullifier),
        )

    def is_valid(self, scheme: CommitmentScheme) -> bool:
        """Check that nullifier and commitment recompute from the other fields."""
        nullifier = scheme.derive_nullifier(self.secret, self.index)
        return (
            nullifier == self.nullifier
            and scheme.commit(self.amount, self.secret, self.nullifier) == self.commitment
        )

    def spend(self, accumulator: MerkleAccumulator) -> SpendInput:
        """Build a spend input proved against the accumulator's current root."""
        return SpendInput(
            nullifier=self.nullifier,
            amount=self.amount,
            secret=self.secret,
            index=self.index,
            membership_proof=accumulator.prove(self.index),
        )

    def as_output(self) -> OutputNote:
        return OutputNote(
            commitment=self.commitment,
            amount=self.amount,
            secret=self.secret,
            nullifier=self.nullifier,
        )


def plan_outputs(
    amounts: Sequence[int],
    accumulator: MerkleAccumulator,
    scheme: CommitmentScheme,
    output_secrets: Sequence[int] | None = None,
) -> list[Note]:
    """Create output notes at the indices a transfer admitted now would assign."""
    start = accumulator.count
    return [
        Note.create(
            amount,
            start + offset,
            scheme,
            secret=output_secrets[offset] if output_secrets else None,
        )
        for offset, amount in enumerate(amounts)
    ]


def build_transfer_request(
    spent: Sequence[Note],
    outputs: Sequence[Note],
    accumulator: MerkleAccumulator,
) -> TransferRequest:
    """Assemble a witness-carrying transfer against the current root."""
    return TransferRequest(
        merkle_root=accumulator.root,
        inputs=[note.spend(accumulator) for note in spent],
        outputs=[note.as_output() for note in outputs],
    )


def build_withdrawal_request(
    note: Note,
    accumulator: MerkleAccumulator,
    recipient_hash: int,
    withdrawal_amount: int | None = None,
) -> WithdrawalRequest:
    """Assemble a witness-carrying withdrawal of a whole note."""
    return WithdrawalRequest(
        merkle_root=accumulator.root,
        input=note.spend(accumulator),
        withdrawal_amount=note.amount if withdrawal_amount is None else withdrawal_amount,
        recipient_hash=recipient_hash,
    )
