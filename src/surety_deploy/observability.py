"""Structured logging and OpenTelemetry spans for surety-deploy.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for deployment and publish operations
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

# Tracer name for OpenTelemetry
TRACER_NAME = "surety.deploy"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("deployment_confirmed", contract="FlightSuretyData")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for surety-deploy.

    Returns:
        OpenTelemetry Tracer instance.
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for surety-deploy.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=True)
    """
    import logging

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Log lines go to stderr so stdout stays free for command output
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        force=True,
    )


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "deploy", "stage", "commit").
        kind: Span kind (INTERNAL, CLIENT, SERVER, PRODUCER, CONSUMER).
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with span("deploy", attributes={"surety.contract": "FlightSuretyData"}):
        ...     ledger.deploy(artifact, ())
    """
    tracer = get_tracer()
    logger = get_logger()
    attrs = attributes or {}
    log_attrs = {key.rsplit(".", 1)[-1]: value for key, value in attrs.items()}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **log_attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **log_attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{name}_failed", error=str(exc), **log_attrs)
            raise


@contextmanager
def deploy_operation(
    stage: str,
    *,
    contract: str,
    rpc_endpoint: str | None = None,
) -> Iterator[Span]:
    """Create a span for a single contract deployment.

    Args:
        stage: Pipeline stage ("data" or "app").
        contract: Contract name.
        rpc_endpoint: Ledger RPC endpoint, if known.

    Yields:
        OpenTelemetry Span instance.
    """
    attrs: dict[str, Any] = {"surety.stage": stage, "surety.contract": contract}
    if rpc_endpoint:
        attrs["surety.rpc_endpoint"] = rpc_endpoint

    with span(f"deploy.{stage}", kind=SpanKind.CLIENT, attributes=attrs) as s:
        yield s


@contextmanager
def publish_operation(phase: str, *, targets: list[str]) -> Iterator[Span]:
    """Create a span for a publish phase ("stage" or "commit")."""
    attrs: dict[str, Any] = {
        "surety.phase": phase,
        "surety.targets": ",".join(targets),
    }
    with span(f"publish.{phase}", attributes=attrs) as s:
        yield s
