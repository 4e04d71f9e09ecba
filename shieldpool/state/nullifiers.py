"""
Nullifier Registry
==================

Set of spent nullifiers with at-most-once insertion.

Version: 0.1.0
"""

from collections.abc import Iterable, Iterator

from shieldpool.errors import NullifierReused


class NullifierRegistry:
    """
    Monotonically growing set of consumed nullifiers.

    A nullifier, once added, stays spent for the life of the pool.
    """

    def __init__(self) -> None:
        self._spent: set[int] = set()

    def __contains__(self, nullifier: object) -> bool:
        return nullifier in self._spent

    def __len__(self) -> int:
        return len(self._spent)

    def __iter__(self) -> Iterator[int]:
        return iter(self._spent)

    def contains(self, nullifier: int) -> bool:
        """Check whether a nullifier has been spent."""
        return nullifier in self._spent

    def add(self, nullifier: int) -> None:
        """
        Mark a nullifier as spent.

        Raises:
            NullifierReused: If it was already spent
        """
        if nullifier in self._spent:
            raise NullifierReused(f"Nullifier {nullifier:#x} already spent")
        self._spent.add(nullifier)

    def add_all(self, nullifiers: Iterable[int]) -> None:
        """
        Mark a batch of nullifiers as spent, all or nothing.

        Raises:
            NullifierReused: If any is already spent or repeated in the batch
        """
        batch = list(nullifiers)
        if len(set(batch)) != len(batch):
            raise NullifierReused("Nullifier repeated within batch")
        for nullifier in batch:
            if nullifier in self._spent:
                raise NullifierReused(f"Nullifier {nullifier:#x} already spent")
        self._spent.update(batch)
