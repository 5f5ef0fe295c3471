"""
Contextual logging utilities for SIS_POLICY.

While a policy request is evaluated, every record logged through
``get_logger`` carries the request's correlation ID plus who asked for what
(resource type, action, user ID, role and any secondary context).
"""

import contextvars
import logging
import uuid
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "sis_policy_correlation_id", default=None
)
_request_fields: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "sis_policy_request_fields", default={}
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Start tracing a policy request.

    Args:
        correlation_id: ID supplied by the caller; a random one is used if None

    Returns:
        The correlation ID now in effect
    """
    correlation_id = correlation_id or uuid.uuid4().hex
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


def set_request_context(resource_type: str | None = None, **fields: Any) -> None:
    """
    Record what the current policy request is about.

    Fields set to None are left out of log records.
    """
    fields["resource_type"] = resource_type
    _request_fields.set({k: v for k, v in fields.items() if v is not None})


def clear_request_context() -> None:
    _request_fields.set({})


def get_logging_context() -> dict[str, Any]:
    """Return the fields attached to log records for the current request."""
    context = dict(_request_fields.get())
    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges the request context into ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    """
    Get a logger that tags records with the current policy request.

    Args:
        name: Logger name (typically __name__)
    """
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_decision(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    *,
    success: bool,
    allowed: bool | None = None,
    duration_ms: float | None = None,
) -> None:
    """
    Log the outcome of one policy decision.

    Allowed requests log at INFO, denials at DEBUG (a denial is an ordinary
    answer, not a fault) and failed evaluations at WARNING.

    Args:
        logger: Logger to write to
        operation: ``<resource_type>.<action>``
        success: False when the decision could not be computed
        allowed: Decision outcome, None for filter decisions
        duration_ms: Evaluation time in milliseconds
    """
    if not success:
        level, outcome = logging.WARNING, "failed"
    elif allowed is False:
        level, outcome = logging.DEBUG, "denied"
    else:
        level, outcome = logging.INFO, "allowed" if allowed else "filtered"

    extra: dict[str, Any] = {"operation": operation, "outcome": outcome}
    message = f"{operation} {outcome}"
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
        message += f" in {duration_ms:.2f}ms"

    logger.log(level, message, extra={**get_logging_context(), **extra})
