"""Browser tools for E2E scenarios - selectors, waits, sessions, interactions.

Usage:
    from e2e_harness.tools import BrowserManager, PlaywrightTools

    async with BrowserManager() as session:
        tools = PlaywrightTools(session)
        await tools.goto("https://www.saucedemo.com/")
        await tools.fill("id:user-name", "standard_user")
        await tools.click("id:login-button")
"""

from .playwright_tools import (
    KEY_MAP,
    BrowserManager,
    BrowserSession,
    PlaywrightTools,
    close_browser,
    create_browser_session,
    open_browser,
)
from .selectors import (
    DEFAULT_STRATEGY,
    ResolutionStrategy,
    Selector,
    parse_selector,
    resolve,
)
from .waiter import (
    CHECK_TIMEOUT_MS,
    DEFAULT_TIMEOUT_MS,
    ElementState,
    is_element_present,
    is_visible,
    wait_for,
    wait_for_element,
    wait_until_hidden,
    wait_until_visible,
)

__all__ = [
    # Selectors
    "Selector",
    "ResolutionStrategy",
    "DEFAULT_STRATEGY",
    "parse_selector",
    "resolve",
    # Waits
    "ElementState",
    "DEFAULT_TIMEOUT_MS",
    "CHECK_TIMEOUT_MS",
    "wait_for",
    "wait_until_visible",
    "wait_for_element",
    "wait_until_hidden",
    "is_visible",
    "is_element_present",
    # Sessions
    "BrowserSession",
    "BrowserManager",
    "open_browser",
    "close_browser",
    "create_browser_session",
    # Interactions
    "PlaywrightTools",
    "KEY_MAP",
]
