"""
Incremental Merkle Accumulator
==============================

Fixed-depth, append-only Merkle tree over note commitments.

Insertion keeps one "filled subtree" hash per level, so appending a leaf
costs O(depth) hashes and never recomputes the tree. Empty positions are
represented by the precomputed zero-subtree hash of their level.

Path convention (shared by insertion and verification): at each level,
least-significant bit of the index first, an even bit means the current
node is the left child, H(current, sibling); an odd bit means it is the
right child, H(sibling, current).

Version: 0.1.0
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from shieldpool.config.settings import MAX_TREE_DEPTH
from shieldpool.crypto.field import field_hash, is_field_element
from shieldpool.errors import CapacityExceeded
from shieldpool.logging import get_logger

logger = get_logger(__name__)


ZERO_LEAF = 0


def _build_zero_hashes(depth: int) -> tuple[int, ...]:
    """Generate zero_hash(0..depth) from the field hash."""
    hashes = [ZERO_LEAF]
    for _ in range(depth):
        hashes.append(field_hash(hashes[-1], hashes[-1]))
    return tuple(hashes)


ZERO_HASHES = _build_zero_hashes(MAX_TREE_DEPTH)


def zero_hash(level: int) -> int:
    """
    Root of an all-empty subtree of the given height.

    Raises:
        ValueError: If level is outside [0, MAX_TREE_DEPTH]
    """
    if not 0 <= level <= MAX_TREE_DEPTH:
        raise ValueError(f"Level {level} outside [0, {MAX_TREE_DEPTH}]")
    return ZERO_HASHES[level]


class MerkleAccumulator:
    """
    Append-only incremental Merkle accumulator.

    Invariant: `root` equals the Merkle root of leaves[0..count) padded to
    2**depth positions with zero subtrees.

    Usage:
        tree = MerkleAccumulator(depth=15)
        index, root = tree.insert(commitment)
        proof = tree.prove(index)
        assert tree.verify_membership(commitment, index, proof, root)
    """

    def __init__(self, depth: int = 15) -> None:
        if not 1 <= depth <= MAX_TREE_DEPTH:
            raise ValueError(f"Tree depth {depth} outside [1, {MAX_TREE_DEPTH}]")

        self._depth = depth
        self._capacity = 2**depth
        self._leaves: dict[int, int] = {}
        self._filled_subtrees: list[int] = [ZERO_HASHES[level] for level in range(depth)]
        self._root = ZERO_HASHES[depth]
        self._count = 0

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        """Number of leaves inserted so far."""
        return self._count

    @property
    def root(self) -> int:
        return self._root

    @property
    def is_full(self) -> bool:
        return self._count >= self._capacity

    def leaf_at(self, index: int) -> int | None:
        """Get the leaf at index, or None if nothing was inserted there."""
        return self._leaves.get(index)

    def insert(self, leaf: int) -> tuple[int, int]:
        """
        Append a leaf.

        Args:
            leaf: Commitment to record

        Returns:
            Tuple of (assigned index, new root)

        Raises:
            CapacityExceeded: If 2**depth leaves are already present
            ValueError: If leaf is not a field element
        """
        if self.is_full:
            raise CapacityExceeded(f"Accumulator of depth {self._depth} is full")
        if not is_field_element(leaf):
            raise ValueError(f"Leaf is not a field element: {leaf!r}")

        index = self._count
        current = leaf
        position = index

        for level in range(self._depth):
            if position % 2 == 0:
                self._filled_subtrees[level] = current
                current = field_hash(current, ZERO_HASHES[level])
            else:
                current = field_hash(self._filled_subtrees[level], current)
            position //= 2

        self._leaves[index] = leaf
        self._root = current
        self._count += 1

        logger.debug("merkle_leaf_inserted", index=index, root=current)

        return index, current

    def verify_membership(
        self,
        leaf: int,
        index: int,
        proof: Sequence[int],
        root: int,
    ) -> bool:
        """
        Check a membership proof against a root.

        Fails closed: malformed input of any kind returns False.

        Args:
            leaf: Claimed leaf value
            index: Claimed leaf position
            proof: Sibling hashes ordered leaf-to-root, exactly `depth` long
            root: Root to verify against

        Returns:
            True if the proof recomputes `root`
        """
        if not isinstance(proof, Sequence) or len(proof) != self._depth:
            return False
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        if not 0 <= index < self._capacity:
            return False
        if not is_field_element(leaf) or not is_field_element(root):
            return False
        if not all(is_field_element(sibling) for sibling in proof):
            return False

        current = leaf
        position = index
        for sibling in proof:
            if position % 2 == 0:
                current = field_hash(current, sibling)
            else:
                current = field_hash(sibling, current)
            position //= 2

        return current == root

    def prove(self, index: int) -> list[int]:
        """
        Build the authentication path of an inserted leaf against the current root.

        Recomputes the populated part of the tree from stored leaves, so it
        costs O(count) hashes. Intended for wallets and tests.

        Raises:
            IndexError: If no leaf has been inserted at index
        """
        if not 0 <= index < self._count:
            raise IndexError(f"No leaf at index {index} (count={self._count})")

        nodes = [self._leaves[i] for i in range(self._count)]
        path: list[int] = []
        position = index

        for level in range(self._depth):
            sibling_position = position ^ 1
            if sibling_position < len(nodes):
                path.append(nodes[sibling_position])
            else:
                path.append(ZERO_HASHES[level])

            if len(nodes) % 2 == 1:
                nodes.append(ZERO_HASHES[level])
            nodes = [field_hash(nodes[i], nodes[i + 1]) for i in range(0, len(nodes), 2)]
            position //= 2

        return path

    def snapshot(self) -> dict[str, Any]:
        """Summarize accumulator state for logs and health checks."""
        return {
            "depth": self._depth,
            "count": self._count,
            "capacity": self._capacity,
            "root": hex(self._root),
        }
