"""
SHIELDPOOL
==========

Verification core of a shielded-payment pool: hidden value commitments
recorded in an incremental Merkle accumulator, spent through single-use
nullifiers.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - crypto: Field hash and the commitment/nullifier scheme
    - state: Merkle accumulator and nullifier registry
    - zk: Request models, witness helpers and the transaction verifier
    - pool: The PrivacyPool state-transition engine and its event log

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Shieldpool Team"

from shieldpool.config import settings
from shieldpool.logging import get_logger, setup_logging
from shieldpool.pool import PrivacyPool

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "PrivacyPool",
    "__version__",
]
