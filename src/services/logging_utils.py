"""Service layer logging utilities.

Provides structured logging functions for service and engine operations,
enabling consistent log format and context across order planning, booking
amendments, and catalog loading.

Usage:
    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="amend_event",
        outcome="success",
        event_id=12,
        changed_lines=2,
    )

    log_operation(
        logger,
        operation="amend_event",
        outcome="event_locked",
        level=logging.WARNING,
        event_id=12,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'cocktail_order.services' prefix.

    Example:
        >>> logger = get_service_logger("src.services.ordering.procurement")
        >>> logger.name
        'cocktail_order.services.procurement'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"cocktail_order.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "plan_requirement", "amend_event")
        outcome: Outcome description (e.g., "success", "tier_fallback")
        level: Log level (default: INFO). Use DEBUG for per-ingredient logs.
        **context: Additional context fields (entity IDs, counts, etc.)
            Common fields:
            - event_id: Event being processed
            - ingredient_key: Normalization key of the requirement
            - pricing_tier: Tier used for pack filtering
            - error: Error message if outcome is "error"
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
