"""
Pool Errors
===========

Rejections raised by the privacy pool. Every error is raised before any
state mutation, so a caught error means the pool is unchanged.

Version: 0.1.0
"""


class PoolError(Exception):
    """Base class for all pool rejections."""

    code = "pool_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class InvalidCommitment(PoolError):
    """Zero or out-of-field commitment offered to deposit."""

    code = "invalid_commitment"


class CapacityExceeded(PoolError):
    """The accumulator holds 2**depth leaves and accepts no more."""

    code = "capacity_exceeded"


class NullifierReused(PoolError):
    """A nullifier that is already spent was presented again."""

    code = "nullifier_reused"


class InvalidProof(PoolError):
    """
    The transaction verifier rejected the request.

    Covers count limits, commitment and nullifier mismatches, failed
    membership, conservation and range violations. The failing check is
    only logged at DEBUG.
    """

    code = "invalid_proof"


class MalformedProofLength(InvalidProof):
    """A membership proof does not have exactly one sibling per level."""

    code = "malformed_proof_length"


class StaleRoot(PoolError):
    """The request was proved against a root that is no longer current."""

    code = "stale_root"


__all__ = [
    "PoolError",
    "InvalidCommitment",
    "CapacityExceeded",
    "NullifierReused",
    "InvalidProof",
    "MalformedProofLength",
    "StaleRoot",
]
