"""
Commitment Scheme
=================

Hiding/binding note commitments and value-independent nullifiers.

    commit(amount, secret, nullifier) = H(H(a, secret), nullifier)
        where a = amount, or H(domain_tag, amount) with domain separation

    derive_nullifier(secret, index) = H(H(secret, low), high)
        where (low, high) are the 128-bit limbs of index

Version: 0.1.0
"""

from shieldpool.config.settings import PoolSettings
from shieldpool.crypto.field import field_hash, split_limbs


class CommitmentScheme:
    """
    Commitment and nullifier derivation.

    Pure functions bound to an optional domain tag. Two schemes with
    different tags produce unrelated commitments for the same note, so the
    tag must come from configuration and never change for a live pool.

    Usage:
        scheme = CommitmentScheme()
        nullifier = scheme.derive_nullifier(secret, index)
        commitment = scheme.commit(amount, secret, nullifier)
    """

    def __init__(self, domain_tag: int | None = None) -> None:
        self.domain_tag = domain_tag

    @property
    def domain_separated(self) -> bool:
        return self.domain_tag is not None

    def commit(self, amount: int, secret: int, nullifier: int) -> int:
        """
        Commit to a note.

        Callers range-check amount before committing.

        Args:
            amount: Note value in satoshi
            secret: Owner-chosen field element
            nullifier: Nullifier derived for the note

        Returns:
            Commitment field element
        """
        value = amount
        if self.domain_tag is not None:
            value = field_hash(self.domain_tag, amount)
        return field_hash(field_hash(value, secret), nullifier)

    def derive_nullifier(self, secret: int, index: int) -> int:
        """
        Derive the nullifier of the note at a leaf index.

        Both index limbs are hashed so indices sharing low bits never collide.
        """
        low, high = split_limbs(index)
        return field_hash(field_hash(secret, low), high)

    @classmethod
    def from_settings(cls, pool_settings: PoolSettings) -> "CommitmentScheme":
        """Build the scheme described by PoolSettings."""
        if pool_settings.domain_separation:
            return cls(domain_tag=pool_settings.domain_tag)
        return cls()
