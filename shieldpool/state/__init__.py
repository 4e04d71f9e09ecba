"""
State Module
============

The two pieces of shared pool state: the incremental Merkle accumulator of
note commitments and the registry of spent nullifiers.

Usage:
    from shieldpool.state import MerkleAccumulator, NullifierRegistry

    tree = MerkleAccumulator(depth=15)
    index, root = tree.insert(commitment)
"""

from shieldpool.state.merkle import (
    ZERO_HASHES,
    ZERO_LEAF,
    MerkleAccumulator,
    zero_hash,
)
from shieldpool.state.nullifiers import NullifierRegistry


__all__ = [
    "MerkleAccumulator",
    "NullifierRegistry",
    "ZERO_HASHES",
    "ZERO_LEAF",
    "zero_hash",
]
