"""
Field Hash
==========

Two-input compression function over the STARK prime field.

Operands are encoded as fixed-width 32-byte big-endian integers, hashed
with SHA-256 and the digest is reduced mod the field order.

Version: 0.1.0
"""

import hashlib


# STARK prime: 2**251 + 17 * 2**192 + 1
FIELD_MODULUS = 2**251 + 17 * 2**192 + 1

FIELD_BYTES = 32
LIMB_BITS = 128
LIMB_MASK = (1 << LIMB_BITS) - 1


def is_field_element(value: object) -> bool:
    """Check that value is an int in [0, FIELD_MODULUS)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < FIELD_MODULUS


def to_field(value: int) -> int:
    """Reduce an integer into the field."""
    return value % FIELD_MODULUS


def field_hash(left: int, right: int) -> int:
    """
    Hash two field elements into one.

    Args:
        left: Left operand (reduced into the field first)
        right: Right operand (reduced into the field first)

    Returns:
        Field element in [0, FIELD_MODULUS)
    """
    h = hashlib.sha256()
    h.update(to_field(left).to_bytes(FIELD_BYTES, "big"))
    h.update(to_field(right).to_bytes(FIELD_BYTES, "big"))
    return int.from_bytes(h.digest(), "big") % FIELD_MODULUS


def split_limbs(value: int) -> tuple[int, int]:
    """
    Split a 256-bit unsigned value into (low, high) 128-bit limbs.

    Raises:
        ValueError: If value is negative or wider than 256 bits
    """
    if value < 0 or value >> (2 * LIMB_BITS):
        raise ValueError(f"Value {value} does not fit in 256 bits")
    return value & LIMB_MASK, value >> LIMB_BITS
