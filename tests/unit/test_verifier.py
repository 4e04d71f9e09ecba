"""
Unit tests for transaction verification.
"""

from collections.abc import Callable

import pytest

from shieldpool.config import PoolSettings
from shieldpool.crypto import CommitmentScheme
from shieldpool.state import MerkleAccumulator
from shieldpool.zk import (
    Note,
    OutputNote,
    PublicInputs,
    SpendInput,
    SuccinctProofVerifier,
    TransactionVerifier,
    TransferRequest,
    WithdrawalRequest,
    build_transfer_request,
    build_withdrawal_request,
    plan_outputs,
)

ONE_BTC = 100_000_000


@pytest.fixture
def verifier(scheme: CommitmentScheme, tree: MerkleAccumulator) -> TransactionVerifier:
    return TransactionVerifier(scheme, tree, PoolSettings(tree_depth=tree.depth))


class TestVerifyTransfer:
    """Tests for TransactionVerifier.verify_transfer."""

    def test_valid_split(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that a balanced 1-in/2-out transfer is accepted."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([60_000_000, 40_000_000], tree, scheme)
        request = build_transfer_request([note], outputs, tree)

        assert verifier.verify_transfer(request, tree.root)

    def test_balanced_two_inputs(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test 0.8 + 0.3 BTC in against 0.5 + 0.6 BTC out."""
        first = insert_note(tree, 80_000_000)
        second = insert_note(tree, 30_000_000)
        outputs = plan_outputs([50_000_000, 60_000_000], tree, scheme)
        request = build_transfer_request([first, second], outputs, tree)

        assert verifier.verify_transfer(request, tree.root)

    def test_verification_is_repeatable(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that verifying twice gives the same answer and leaves the tree alone."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([ONE_BTC], tree, scheme)
        request = build_transfer_request([note], outputs, tree)
        root, count = tree.root, tree.count

        assert verifier.verify_transfer(request, root)
        assert verifier.verify_transfer(request, root)
        assert (tree.root, tree.count) == (root, count)

    def test_unbalanced_rejected(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test 1 BTC in against 1.1 BTC out."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([60_000_000, 50_000_000], tree, scheme)
        request = build_transfer_request([note], outputs, tree)

        assert verifier.transfer_failure(request, tree.root) == "conservation"
        assert not verifier.verify_transfer(request, tree.root)

    def test_value_burn_rejected(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that outputs below the inputs are rejected too."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([90_000_000], tree, scheme)
        request = build_transfer_request([note], outputs, tree)

        assert not verifier.verify_transfer(request, tree.root)

    def test_input_count_limits(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that zero or more than two inputs are rejected."""
        notes = [insert_note(tree, 10_000_000) for _ in range(3)]

        too_many = build_transfer_request(notes, plan_outputs([30_000_000], tree, scheme), tree)
        assert verifier.transfer_failure(too_many, tree.root) == "input_count"

        none = build_transfer_request([], plan_outputs([30_000_000], tree, scheme), tree)
        assert verifier.transfer_failure(none, tree.root) == "input_count"

    def test_output_count_limits(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that zero or more than two outputs are rejected."""
        note = insert_note(tree, 30_000_000)

        too_many = build_transfer_request(
            [note],
            plan_outputs([10_000_000] * 3, tree, scheme),
            tree,
        )
        assert verifier.transfer_failure(too_many, tree.root) == "output_count"

        none = build_transfer_request([note], [], tree)
        assert verifier.transfer_failure(none, tree.root) == "output_count"

    def test_output_over_max_amount(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that a balanced transfer with an output above 1 BTC is rejected."""
        first = insert_note(tree, ONE_BTC)
        second = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([150_000_000, 50_000_000], tree, scheme)
        request = build_transfer_request([first, second], outputs, tree)

        assert verifier.transfer_failure(request, tree.root) == "output_amount_range"

    def test_zero_amount_output_rejected(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that outputs must carry value."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([ONE_BTC, 0], tree, scheme)
        request = build_transfer_request([note], outputs, tree)

        assert not verifier.verify_transfer(request, tree.root)

    def test_output_commitment_mismatch(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that claimed output commitments must recompute."""
        note = insert_note(tree, ONE_BTC)
        outputs = plan_outputs([ONE_BTC], tree, scheme)
        outputs[0].commitment += 1
        request = build_transfer_request([note], outputs, tree)

        assert verifier.transfer_failure(request, tree.root) == "output_commitment_mismatch"

    def test_nullifier_mismatch(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that the claimed nullifier must derive from secret and index."""
        note = insert_note(tree, ONE_BTC)
        request = build_transfer_request([note], plan_outputs([ONE_BTC], tree, scheme), tree)
        request.inputs[0].nullifier = scheme.derive_nullifier(note.secret, note.index + 1)

        assert verifier.transfer_failure(request, tree.root) == "nullifier_mismatch"

    def test_non_member_rejected(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that an input whose commitment is not in the tree is rejected."""
        real = insert_note(tree, ONE_BTC)
        forged = Note.create(ONE_BTC, real.index, scheme, secret=real.secret + 1)
        spend = SpendInput(
            nullifier=forged.nullifier,
            amount=forged.amount,
            secret=forged.secret,
            index=forged.index,
            membership_proof=tree.prove(real.index),
        )
        request = TransferRequest(
            merkle_root=tree.root,
            inputs=[spend],
            outputs=[o.as_output() for o in plan_outputs([ONE_BTC], tree, scheme)],
        )

        assert verifier.transfer_failure(request, tree.root) == "membership_failed"

    def test_duplicate_input_nullifiers(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that one note cannot be spent twice within a request."""
        note = insert_note(tree, 50_000_000)
        outputs = plan_outputs([ONE_BTC], tree, scheme)
        request = build_transfer_request([note, note], outputs, tree)

        assert verifier.transfer_failure(request, tree.root) == "duplicate_nullifier"

    def test_root_mismatch(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        scheme: CommitmentScheme,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that the request's claimed root must be the verification root."""
        note = insert_note(tree, ONE_BTC)
        request = build_transfer_request([note], plan_outputs([ONE_BTC], tree, scheme), tree)
        old_root = tree.root
        tree.insert(12345)

        assert not verifier.verify_transfer(request, tree.root)
        assert verifier.verify_transfer(request, old_root)

    def test_missing_witness(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that the witness backend needs the full witness."""
        note = insert_note(tree, ONE_BTC)
        request = TransferRequest(
            merkle_root=tree.root,
            inputs=[SpendInput(nullifier=note.nullifier)],
            outputs=[OutputNote(commitment=123)],
        )

        assert verifier.transfer_failure(request, tree.root) == "missing_witness"


class TestVerifyWithdrawal:
    """Tests for TransactionVerifier.verify_withdrawal."""

    def test_valid_withdrawal(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        recipient: int,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that a matching withdrawal is accepted."""
        note = insert_note(tree, 10_000_000)
        request = build_withdrawal_request(note, tree, recipient)

        assert verifier.verify_withdrawal(request, tree.root)

    def test_amount_mismatch(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        recipient: int,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that the withdrawal amount must equal the note amount."""
        note = insert_note(tree, 10_000_000)
        request = build_withdrawal_request(note, tree, recipient, withdrawal_amount=10_000_001)

        assert verifier.withdrawal_failure(request, tree.root) == "withdrawal_amount_mismatch"

    def test_zero_recipient(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that a payout address hash is required."""
        note = insert_note(tree, 10_000_000)
        request = build_withdrawal_request(note, tree, recipient_hash=0)

        assert verifier.withdrawal_failure(request, tree.root) == "zero_recipient"

    def test_over_max_amount(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        recipient: int,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that notes above MAX_AMOUNT cannot be withdrawn."""
        note = insert_note(tree, ONE_BTC + 1)
        request = build_withdrawal_request(note, tree, recipient)

        assert verifier.withdrawal_failure(request, tree.root) == "input_amount_range"

    def test_tampered_amount_fails_membership(
        self,
        verifier: TransactionVerifier,
        tree: MerkleAccumulator,
        recipient: int,
        insert_note: Callable[..., Note],
    ) -> None:
        """Test that claiming a larger amount breaks the commitment."""
        note = insert_note(tree, 10_000_000)
        request = build_withdrawal_request(note, tree, recipient)
        request.input.amount = 20_000_000
        request.withdrawal_amount = 20_000_000

        assert verifier.withdrawal_failure(request, tree.root) == "membership_failed"


class RecordingProofVerifier:
    """Fake external proof verifier that records its calls."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple[bytes, PublicInputs]] = []

    def __call__(self, proof: bytes, public_inputs: PublicInputs) -> bool:
        self.calls.append((proof, public_inputs))
        return self.result


class TestSuccinctProofVerifier:
    """Tests for SuccinctProofVerifier."""

    ROOT = 987654321

    def _transfer(self, proof: bytes | None = b"\x01proof") -> TransferRequest:
        return TransferRequest(
            merkle_root=self.ROOT,
            inputs=[SpendInput(nullifier=11), SpendInput(nullifier=12)],
            outputs=[OutputNote(commitment=21), OutputNote(commitment=22)],
            proof=proof,
        )

    def _withdrawal(self, proof: bytes | None = b"\x01proof") -> WithdrawalRequest:
        return WithdrawalRequest(
            merkle_root=self.ROOT,
            input=SpendInput(nullifier=11),
            withdrawal_amount=5_000,
            recipient_hash=77,
            proof=proof,
        )

    def test_transfer_delegates_public_inputs(self) -> None:
        """Test that the proof and public statement reach the external verifier."""
        backend = RecordingProofVerifier()
        verifier = SuccinctProofVerifier(backend)

        assert verifier.verify_transfer(self._transfer(), self.ROOT)

        proof, public = backend.calls[0]
        assert proof == b"\x01proof"
        assert public.merkle_root == self.ROOT
        assert public.nullifiers == [11, 12]
        assert public.output_commitments == [21, 22]
        assert public.withdrawal_amount is None

    def test_withdrawal_delegates_public_inputs(self) -> None:
        """Test withdrawal public fields."""
        backend = RecordingProofVerifier()
        verifier = SuccinctProofVerifier(backend)

        assert verifier.verify_withdrawal(self._withdrawal(), self.ROOT)

        _, public = backend.calls[0]
        assert public.withdrawal_amount == 5_000
        assert public.recipient_hash == 77
        assert public.to_signals() == [str(self.ROOT), "11", "5000", "77"]

    def test_rejected_proof(self) -> None:
        """Test that the external verdict is honoured."""
        verifier = SuccinctProofVerifier(RecordingProofVerifier(result=False))

        assert not verifier.verify_transfer(self._transfer(), self.ROOT)
        assert not verifier.verify_withdrawal(self._withdrawal(), self.ROOT)

    def test_missing_proof_never_reaches_backend(self) -> None:
        """Test that requests without proof bytes are rejected outright."""
        backend = RecordingProofVerifier()
        verifier = SuccinctProofVerifier(backend)

        assert not verifier.verify_transfer(self._transfer(proof=None), self.ROOT)
        assert not verifier.verify_withdrawal(self._withdrawal(proof=b""), self.ROOT)
        assert backend.calls == []

    def test_public_structure_checked(self) -> None:
        """Test root, count and recipient checks before delegation."""
        backend = RecordingProofVerifier()
        verifier = SuccinctProofVerifier(backend)

        assert not verifier.verify_transfer(self._transfer(), self.ROOT + 1)

        duplicate = self._transfer()
        duplicate.inputs[1].nullifier = 11
        assert not verifier.verify_transfer(duplicate, self.ROOT)

        crowded = self._transfer()
        crowded.outputs.append(OutputNote(commitment=23))
        assert not verifier.verify_transfer(crowded, self.ROOT)

        nobody = self._withdrawal()
        nobody.recipient_hash = 0
        assert not verifier.verify_withdrawal(nobody, self.ROOT)

        assert backend.calls == []
