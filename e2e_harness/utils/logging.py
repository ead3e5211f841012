"""Structured logging configuration for the E2E test harness.

Provides:
- Structured logging with structlog
- Scenario-scoped logging context
- A logger specialized for scenario step tracking
"""

import logging
import sys
from typing import Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """Configure structured logging for the harness.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Output logs as JSON
        include_timestamp: Include timestamps in logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso") if include_timestamp else structlog.processors.TimeStamper(fmt=None),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Get a configured logger with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


class LogContext:
    """Context manager for scoped logging context.

    Usage:
        with LogContext(scenario="Login Flow"):
            logger.info("Filling credentials")
            # Every log line in this block carries scenario="Login Flow"
    """

    def __init__(self, **context):
        self.context = context
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token:
            structlog.contextvars.unbind_contextvars(*self.context.keys())


class ScenarioLogger:
    """Logger for a single scenario run.

    Tracks step and assertion counts so the completion line summarizes
    what the scenario actually did.
    """

    def __init__(self, scenario_name: str, **context):
        self.log = get_logger().bind(scenario=scenario_name, **context)
        self.step_count = 0
        self.assertion_count = 0

    def scenario_started(self, metadata: Optional[dict] = None) -> None:
        self.log.info("Scenario started", **(metadata or {}))

    def scenario_completed(self, status: str, duration_ms: int) -> None:
        self.log.info(
            "Scenario completed",
            status=status,
            duration_ms=duration_ms,
            steps_executed=self.step_count,
            assertions_checked=self.assertion_count,
        )

    def step_started(self, action: str, target: Optional[str] = None) -> None:
        self.step_count += 1
        self.log.debug("Step started", step_index=self.step_count, action=action, target=target)

    def step_failed(self, action: str, error: str) -> None:
        self.log.error("Step failed", step_index=self.step_count, action=action, error=error)

    def assertion_checked(self, assertion_type: str, passed: bool, details: Optional[dict] = None) -> None:
        self.assertion_count += 1
        level = self.log.debug if passed else self.log.warning
        level(
            "Assertion checked",
            assertion_type=assertion_type,
            passed=passed,
            **(details or {}),
        )

    def artifact_attached(self, media_type: str, path: Optional[str] = None) -> None:
        self.log.debug("Artifact attached", media_type=media_type, path=path)
