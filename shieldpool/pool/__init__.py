"""
Pool Module
===========

The PrivacyPool state-transition engine and its append-only log of
state change records.

Usage:
    from shieldpool.pool import PrivacyPool

    pool = PrivacyPool()
    result = pool.deposit(commitment)
    for record in pool.events.records():
        print(record.kind, record.root)
"""

from shieldpool.pool.engine import (
    DepositResult,
    PrivacyPool,
    TransferResult,
    WithdrawalResult,
)
from shieldpool.pool.events import (
    EventSink,
    InMemoryEventLog,
    InsertedLeaf,
    OperationKind,
    StateChangeRecord,
)


__all__ = [
    # Engine
    "PrivacyPool",
    "DepositResult",
    "WithdrawalResult",
    "TransferResult",
    # Events
    "EventSink",
    "InMemoryEventLog",
    "InsertedLeaf",
    "OperationKind",
    "StateChangeRecord",
]
