"""
Transaction Proof Module
========================

Request models, client-side witness helpers and the verifiers that check
transfers and withdrawals against an accumulator root.

Usage:
    from shieldpool.zk import Note, TransactionVerifier, build_withdrawal_request

    note = Note.create(10_000_000, index=0, scheme=scheme)
    request = build_withdrawal_request(note, accumulator, recipient_hash)
    ok = verifier.verify_withdrawal(request, accumulator.root)

Version: 0.1.0
"""

from shieldpool.zk.models import (
    OutputNote,
    PublicInputs,
    SpendInput,
    TransferRequest,
    WithdrawalRequest,
)
from shieldpool.zk.verifier import (
    ProofBackend,
    SuccinctProofVerifier,
    TransactionVerifier,
)
from shieldpool.zk.witness import (
    Note,
    build_transfer_request,
    build_withdrawal_request,
    hash_recipient,
    plan_outputs,
    random_secret,
)


__all__ = [
    # Models
    "SpendInput",
    "OutputNote",
    "PublicInputs",
    "TransferRequest",
    "WithdrawalRequest",
    # Verifiers
    "ProofBackend",
    "TransactionVerifier",
    "SuccinctProofVerifier",
    # Witness
    "Note",
    "build_transfer_request",
    "build_withdrawal_request",
    "hash_recipient",
    "plan_outputs",
    "random_secret",
]
