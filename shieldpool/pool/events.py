"""
State Change Records
====================

Append-only log of successful pool operations, for indexers and wallets
to scan. Persisting the log is the consumer's concern.

Version: 0.1.0
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field


class OperationKind(str, Enum):
    """Kinds of state-changing pool operations."""

    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"


class InsertedLeaf(BaseModel):
    """A commitment and the leaf index it was assigned."""

    index: int
    commitment: int


class StateChangeRecord(BaseModel):
    """One successful deposit, withdrawal or transfer."""

    sequence: int = Field(..., ge=0, description="Position in the pool's log")
    kind: OperationKind
    nullifiers: list[int] = Field(default_factory=list)
    commitments: list[InsertedLeaf] = Field(default_factory=list)
    root: int = Field(..., description="Accumulator root after the operation")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Payout instruction for the bridge (withdrawals only)
    withdrawal_amount: int | None = None
    recipient_hash: int | None = None


class EventSink(Protocol):
    """Protocol for consumers of state change records."""

    def append(self, record: StateChangeRecord) -> None:
        """Receive a record. Called once per successful operation, in order."""
        ...


class InMemoryEventLog:
    """
    In-memory append-only record log.

    Data is stored in memory and lost on restart.
    """

    def __init__(self) -> None:
        self._records: list[StateChangeRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: StateChangeRecord) -> None:
        self._records.append(record)

    def records(self) -> list[StateChangeRecord]:
        """Get all records, oldest first."""
        return list(self._records)

    def since(self, sequence: int) -> list[StateChangeRecord]:
        """Get records with sequence >= the given one."""
        return [record for record in self._records if record.sequence >= sequence]

    def last(self) -> StateChangeRecord | None:
        return self._records[-1] if self._records else None
