"""
Transaction Data Models
=======================

Pydantic models for transfer and withdrawal requests.

Models validate shape only (field elements in range, amounts inside the
unsigned 64-bit domain). Protocol limits are the verifier's job, so a
request that breaks them is rejected rather than failing to parse.

Witness fields (amounts, secrets, indices, membership proofs) are optional:
a request checked by a succinct proof backend carries only its public
fields and an opaque proof.

Version: 0.1.0
"""

from typing import Annotated

from pydantic import BaseModel, Field

from shieldpool.crypto.field import FIELD_MODULUS


FieldElement = Annotated[int, Field(ge=0, lt=FIELD_MODULUS)]
Amount = Annotated[int, Field(ge=0, lt=2**64)]
LeafIndex = Annotated[int, Field(ge=0)]


class SpendInput(BaseModel):
    """A note being spent."""

    nullifier: FieldElement = Field(..., description="Nullifier claimed for the note")

    # Witness
    amount: Amount | None = None
    secret: FieldElement | None = None
    index: LeafIndex | None = None
    membership_proof: list[FieldElement] | None = Field(
        default=None,
        description="Sibling hashes ordered leaf-to-root",
    )

    @property
    def has_witness(self) -> bool:
        return (
            self.amount is not None
            and self.secret is not None
            and self.index is not None
            and self.membership_proof is not None
        )


class OutputNote(BaseModel):
    """A note created by a transfer."""

    commitment: FieldElement = Field(..., description="Commitment inserted as a new leaf")

    # Witness
    amount: Amount | None = None
    secret: FieldElement | None = None
    nullifier: FieldElement | None = None

    @property
    def has_witness(self) -> bool:
        return self.amount is not None and self.secret is not None and self.nullifier is not None


class PublicInputs(BaseModel):
    """The public statement a transaction proof is checked against."""

    merkle_root: FieldElement
    nullifiers: list[FieldElement] = Field(default_factory=list)
    output_commitments: list[FieldElement] = Field(default_factory=list)
    withdrawal_amount: Amount | None = None
    recipient_hash: FieldElement | None = None

    def to_signals(self) -> list[str]:
        """Flatten to decimal strings in circuit order."""
        signals = [str(self.merkle_root)]
        signals.extend(str(n) for n in self.nullifiers)
        signals.extend(str(c) for c in self.output_commitments)
        if self.withdrawal_amount is not None:
            signals.append(str(self.withdrawal_amount))
        if self.recipient_hash is not None:
            signals.append(str(self.recipient_hash))
        return signals


class TransferRequest(BaseModel):
    """Spend up to MAX_INPUTS notes into up to MAX_OUTPUTS new notes."""

    merkle_root: FieldElement = Field(..., description="Root the inputs are proved against")
    inputs: list[SpendInput]
    outputs: list[OutputNote]
    proof: bytes | None = Field(default=None, description="Opaque succinct proof")

    @property
    def nullifiers(self) -> list[int]:
        return [spend.nullifier for spend in self.inputs]

    @property
    def output_commitments(self) -> list[int]:
        return [note.commitment for note in self.outputs]

    def public_inputs(self) -> PublicInputs:
        return PublicInputs(
            merkle_root=self.merkle_root,
            nullifiers=self.nullifiers,
            output_commitments=self.output_commitments,
        )


class WithdrawalRequest(BaseModel):
    """Spend one note to the external settlement layer."""

    merkle_root: FieldElement = Field(..., description="Root the input is proved against")
    input: SpendInput
    withdrawal_amount: Amount
    recipient_hash: FieldElement = Field(..., description="Hash of the payout address")
    proof: bytes | None = Field(default=None, description="Opaque succinct proof")

    @property
    def nullifier(self) -> int:
        return self.input.nullifier

    @property
    def nullifiers(self) -> list[int]:
        return [self.input.nullifier]

    def public_inputs(self) -> PublicInputs:
        return PublicInputs(
            merkle_root=self.merkle_root,
            nullifiers=self.nullifiers,
            withdrawal_amount=self.withdrawal_amount,
            recipient_hash=self.recipient_hash,
        )
