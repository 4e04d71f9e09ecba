"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from shieldpool.logging import get_logger, operation_context, setup_logging

    setup_logging()
    logger = get_logger(__name__)

    with operation_context(pool="main", operation="deposit"):
        logger.info("pool_state_changed", kind="deposit", leaves=[0])
"""

from shieldpool.logging.logger import (
    get_logger,
    operation_context,
    setup_logging,
)


__all__ = [
    "get_logger",
    "setup_logging",
    "operation_context",
]
