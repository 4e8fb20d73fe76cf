"""
Centralized logging configuration for the token vesting system.

This module provides standardized logging configuration using structlog
for all components. Pure schedule code does not log; instruction
processing and the devesting state machine log through the helpers here so
that every state change leaves an audit record.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_instruction_logger(name: str) -> FilteringBoundLogger:
    """Logger bound for instruction processing."""
    return get_logger(name).bind(subsystem="processor")


def get_quorum_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger specifically configured for devesting quorum decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for quorum state transitions
    """
    return get_logger(name).bind(
        subsystem="devesting",
        audit_trail=True
    )


def log_state_transition(
    logger: FilteringBoundLogger,
    record_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        record_id: Identifier of the record transitioning
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        record_id=record_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("state_transition")


def log_instruction_failure(
    logger: FilteringBoundLogger,
    instruction: str,
    error: Exception,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a rejected instruction with its error code.

    Args:
        logger: Structlog logger instance
        instruction: Name of the rejected instruction
        error: The error that aborted it
        context: Additional context data
    """
    bound_logger = logger.bind(
        instruction=instruction,
        error_type=type(error).__name__,
        error_code=getattr(error, "code", None),
        reason=str(error),
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.warning("instruction_rejected")
