"""Exceptions raised by the E2E test harness."""

from typing import Optional, Sequence


class HarnessError(Exception):
    """Base exception for harness errors."""
    pass


class HarnessTimeoutError(HarnessError):
    """An awaited page or element condition was not reached in time."""
    pass


class ElementWaitError(HarnessError):
    """An element never reached the awaited DOM state."""
    pass


class ElementTimeoutError(ElementWaitError, HarnessTimeoutError):
    """Timeout while waiting for an element state.

    Carries the original selector, the awaited state and every concrete
    candidate that was tried, so a failing step says exactly what it was
    waiting for.
    """

    def __init__(
        self,
        selector: str,
        state: str,
        timeout_ms: int,
        candidates: Optional[Sequence[str]] = None,
    ):
        self.selector = selector
        self.state = state
        self.timeout_ms = timeout_ms
        self.candidates = list(candidates or [])
        message = f"Timed out after {timeout_ms}ms waiting for '{selector}' to be {state}"
        if len(self.candidates) > 1:
            message += f" (tried: {', '.join(self.candidates)})"
        super().__init__(message)


class InvalidSelectorError(ElementWaitError):
    """The browser rejected every candidate selector as malformed."""

    def __init__(
        self,
        selector: str,
        state: str,
        candidates: Optional[Sequence[str]] = None,
        reason: str = "",
    ):
        self.selector = selector
        self.state = state
        self.candidates = list(candidates or [])
        self.reason = reason
        message = f"Invalid selector '{selector}' while waiting for it to be {state}"
        if self.candidates:
            message += f" (tried: {', '.join(self.candidates)})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UrlTimeoutError(HarnessTimeoutError):
    """The page never reached the expected URL."""

    def __init__(self, expected_url: str, actual_url: str, timeout_ms: int):
        self.expected_url = expected_url
        self.actual_url = actual_url
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for URL '{expected_url}' (current: '{actual_url}')"
        )


class RecordingError(HarnessError):
    """Base exception for screen recording errors."""
    pass


class UnsupportedPlatformError(RecordingError):
    """No capture command is known for this platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Unsupported platform for screen recording: {platform}")


class ProcessSpawnError(RecordingError):
    """The capture process could not be started."""

    def __init__(self, scenario_name: str, reason: str):
        self.scenario_name = scenario_name
        self.reason = reason
        super().__init__(f"Failed to start capture process for '{scenario_name}': {reason}")


class CleanupError(HarnessError):
    """A browser teardown step failed."""

    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"Failed to close {resource}: {reason}")
