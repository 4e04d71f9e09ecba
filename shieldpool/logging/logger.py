"""
Logger Implementation
=====================

structlog configuration for the pool:
- JSON lines in production, colored console output in development
- Note secrets and witness material are redacted before rendering
- Field elements (roots, nullifiers, commitments) render as hex
- Each state transition runs inside a bound operation context

Version: 0.1.0
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


REDACTED = "***REDACTED***"

# Substring match, so "output_secrets" and "witness_path" are covered too
SENSITIVE_KEYS = frozenset({
    "secret",
    "witness",
    "private_key",
    "api_key",
    "password",
    "token",
})

# Integers at or above this are field elements rather than amounts or indices
HEX_THRESHOLD = 2**64


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_sensitive(key) else _redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return type(value)(_redact(item) for item in value)
    return value


def _is_sensitive(key: object) -> bool:
    return isinstance(key, str) and any(s in key.lower() for s in SENSITIVE_KEYS)


def redact_note_material(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace values under secret-bearing keys, at any nesting depth."""
    return _redact(event_dict)


def _hexify(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value >= HEX_THRESHOLD:
        return hex(value)
    if isinstance(value, list):
        return [_hexify(item) for item in value]
    return value


def hex_field_elements(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Render 252-bit field elements as hex so log lines stay readable."""
    return {key: _hexify(value) for key, value in event_dict.items()}


def _service_processor(service_name: str) -> Processor:
    def add_service(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service


def _build_processors(service_name: str, json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_processor(service_name),
        redact_note_material,
        hex_field_elements,
        structlog.processors.StackInfoRenderer(),
    ]
    processors.append(
        structlog.processors.format_exc_info if json_logs else structlog.dev.set_exc_info
    )
    return processors


def _build_renderer(json_logs: bool) -> Processor:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(
            show_locals=False,
            max_frames=10,
        ),
    )


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "shieldpool",
) -> None:
    """
    Configure structlog and route it through the stdlib root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Emit JSON lines instead of console output
        service_name: Value of the `service` key on every entry
    """
    level = getattr(logging, log_level.upper())
    processors = _build_processors(service_name, json_logs)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _build_renderer(json_logs),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str | None = None) -> "BoundLogger":
    """
    Get a structured logger.

    Example:
        logger = get_logger(__name__)
        logger.info("pool_state_changed", kind="deposit", leaves=[3])
    """
    return structlog.stdlib.get_logger(name)


@contextmanager
def operation_context(**kwargs: Any) -> Iterator[None]:
    """
    Bind context to every log entry emitted inside the block.

    Bindings are restored on exit, including when the block raises.

    Example:
        with operation_context(pool="main", operation="withdraw"):
            logger.warning("pool_operation_rejected", code="stale_root")
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
