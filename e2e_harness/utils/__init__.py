"""Utility modules for the E2E test harness.

Provides:
- Structured logging configuration
"""

from .logging import (
    LogContext,
    ScenarioLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "ScenarioLogger",
]
