"""Element state waits.

Every interaction goes through `wait_for` first: the selector is resolved
to its candidates, each candidate gets a full timeout window, and the
first one that reaches the desired state is returned for the caller to
act on.
"""

from enum import Enum
from typing import Union

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..exceptions import ElementTimeoutError, InvalidSelectorError
from .selectors import DEFAULT_STRATEGY, ResolutionStrategy, Selector

logger = structlog.get_logger()

DEFAULT_TIMEOUT_MS = 10000
HIDDEN_TIMEOUT_MS = 10000
CHECK_TIMEOUT_MS = 5000

# Driver messages for a selector the browser cannot parse
INVALID_SELECTOR_MARKERS = ("is not a valid selector", "Unexpected token", "SyntaxError")


class ElementState(str, Enum):
    """DOM states an element can be awaited in."""
    VISIBLE = "visible"     # Rendered and not hidden, required before interacting
    ATTACHED = "attached"   # Present in the DOM, visible or not
    HIDDEN = "hidden"       # Not visible or not in the DOM


def check_timeout(timeout_ms: int) -> int:
    """Reject non-positive timeouts; Playwright reads 0 as 'wait forever'."""
    if timeout_ms is None or timeout_ms <= 0:
        raise ValueError(f"timeout_ms must be positive, got {timeout_ms!r}")
    return timeout_ms


def is_invalid_selector_error(error: Exception) -> bool:
    message = str(error)
    return any(marker in message for marker in INVALID_SELECTOR_MARKERS)


async def wait_for(
    page,
    selector: Union[str, Selector],
    state: Union[ElementState, str] = ElementState.VISIBLE,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
    fallback: bool = True,
) -> str:
    """
    Wait until the element reaches `state` and return the concrete selector.

    Args:
        page: Playwright page
        selector: Prefixed selector string ('id:x', 'input:x', 'css:...')
        state: Desired element state
        timeout_ms: Timeout per candidate
        strategy: Candidate templates per prefix
        fallback: Try fallback candidates when the primary times out

    Returns:
        The candidate selector that reached the state

    Raises:
        ValueError: timeout_ms is not positive
        ElementTimeoutError: No candidate reached the state in time
        InvalidSelectorError: Every candidate was rejected as malformed
    """
    check_timeout(timeout_ms)
    state = ElementState(state)
    candidates = strategy.candidates(selector)
    if not fallback:
        candidates = candidates[:1]

    last_error = None
    timed_out = False
    for index, candidate in enumerate(candidates):
        try:
            await page.wait_for_selector(candidate, state=state.value, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            last_error = e
            timed_out = True
            logger.debug(
                "Selector candidate timed out",
                selector=str(selector),
                candidate=candidate,
                state=state.value,
                timeout_ms=timeout_ms,
            )
            continue
        except PlaywrightError as e:
            if not is_invalid_selector_error(e):
                raise
            last_error = e
            logger.debug("Selector candidate rejected", selector=str(selector), candidate=candidate, error=str(e))
            continue
        if index > 0:
            logger.debug("Selector resolved via fallback", selector=str(selector), candidate=candidate)
        return candidate

    if not timed_out:
        raise InvalidSelectorError(
            selector=str(selector),
            state=state.value,
            candidates=candidates,
            reason=str(last_error).splitlines()[0] if last_error else "",
        ) from last_error

    raise ElementTimeoutError(
        selector=str(selector),
        state=state.value,
        timeout_ms=timeout_ms,
        candidates=candidates,
    ) from last_error


async def wait_until_visible(
    page,
    selector: Union[str, Selector],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
) -> str:
    """Wait for the element to be visible, with fallback candidates."""
    return await wait_for(page, selector, ElementState.VISIBLE, timeout_ms, strategy)


async def wait_for_element(
    page,
    selector: Union[str, Selector],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
) -> str:
    """Wait for the element to be attached to the DOM (may not be visible)."""
    return await wait_for(page, selector, ElementState.ATTACHED, timeout_ms, strategy, fallback=False)


async def wait_until_hidden(
    page,
    selector: Union[str, Selector],
    timeout_ms: int = HIDDEN_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
) -> None:
    """Wait for the element to stop being visible, e.g. a loading spinner."""
    await wait_for(page, selector, ElementState.HIDDEN, timeout_ms, strategy, fallback=False)


async def is_visible(
    page,
    selector: Union[str, Selector],
    timeout_ms: int = CHECK_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
) -> bool:
    """True if the element becomes visible within the check timeout."""
    try:
        await wait_for(page, selector, ElementState.VISIBLE, timeout_ms, strategy, fallback=False)
        return True
    except ElementTimeoutError:
        return False


async def is_element_present(
    page,
    selector: Union[str, Selector],
    timeout_ms: int = CHECK_TIMEOUT_MS,
    strategy: ResolutionStrategy = DEFAULT_STRATEGY,
) -> bool:
    """True if the element is attached to the DOM within the check timeout."""
    try:
        await wait_for(page, selector, ElementState.ATTACHED, timeout_ms, strategy, fallback=False)
        return True
    except ElementTimeoutError:
        return False
