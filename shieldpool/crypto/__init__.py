"""
Crypto Module
=============

Field hash and the commitment/nullifier scheme built on it.

Usage:
    from shieldpool.crypto import CommitmentScheme, field_hash

    scheme = CommitmentScheme()
    nullifier = scheme.derive_nullifier(secret, 0)
    commitment = scheme.commit(10_000_000, secret, nullifier)
"""

from shieldpool.crypto.commitment import CommitmentScheme
from shieldpool.crypto.field import (
    FIELD_MODULUS,
    field_hash,
    is_field_element,
    split_limbs,
    to_field,
)


__all__ = [
    "CommitmentScheme",
    "FIELD_MODULUS",
    "field_hash",
    "is_field_element",
    "split_limbs",
    "to_field",
]
