"""
Test Configuration
==================

Pytest fixtures for Shieldpool tests.
"""

import os
from collections.abc import Callable

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "testing"

from shieldpool.config import PoolSettings  # noqa: E402
from shieldpool.crypto import CommitmentScheme  # noqa: E402
from shieldpool.logging import setup_logging  # noqa: E402
from shieldpool.pool import PrivacyPool  # noqa: E402
from shieldpool.state import MerkleAccumulator  # noqa: E402
from shieldpool.zk import Note, hash_recipient  # noqa: E402

setup_logging(log_level="WARNING")


ONE_BTC = 100_000_000


@pytest.fixture
def scheme() -> CommitmentScheme:
    """Commitment scheme without domain separation."""
    return CommitmentScheme()


@pytest.fixture
def tree() -> MerkleAccumulator:
    """Small accumulator (16 leaves) for fast tests."""
    return MerkleAccumulator(depth=4)


@pytest.fixture
def pool() -> PrivacyPool:
    """Pool at the default protocol depth."""
    return PrivacyPool(settings=PoolSettings())


@pytest.fixture
def small_pool() -> PrivacyPool:
    """Pool with capacity 8."""
    return PrivacyPool(settings=PoolSettings(tree_depth=3))


@pytest.fixture
def recipient() -> int:
    """Hashed payout address."""
    return hash_recipient("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq")


@pytest.fixture
def deposit_note() -> Callable[..., Note]:
    """Create a note at the pool's next index and deposit it."""

    def _deposit(pool: PrivacyPool, amount: int, secret: int | None = None) -> Note:
        note = Note.create(amount, pool.leaf_count(), pool.scheme, secret=secret)
        result = pool.deposit(note.commitment)
        assert result.index == note.index
        return note

    return _deposit


@pytest.fixture
def insert_note(scheme: CommitmentScheme) -> Callable[..., Note]:
    """Create a note at the accumulator's next index and insert it."""

    def _insert(tree: MerkleAccumulator, amount: int, secret: int | None = None) -> Note:
        note = Note.create(amount, tree.count, scheme, secret=secret)
        tree.insert(note.commitment)
        return note

    return _insert
