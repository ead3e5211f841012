"""Playwright browser session and interaction tools for E2E scenarios."""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..config import BrowserEngine, Settings, get_settings
from ..exceptions import CleanupError, UrlTimeoutError
from ..utils.logging import ScenarioLogger
from .selectors import DEFAULT_STRATEGY, ResolutionStrategy, Selector
from . import waiter

logger = structlog.get_logger()

# Selenium-style key names used by older step definitions
KEY_MAP = {
    "ENTER": "Enter",
    "TAB": "Tab",
    "BACK_SPACE": "Backspace",
    "ESCAPE": "Escape",
    "ARROW_LEFT": "ArrowLeft",
    "ARROW_RIGHT": "ArrowRight",
    "ARROW_UP": "ArrowUp",
    "ARROW_DOWN": "ArrowDown",
}


@dataclass
class BrowserSession:
    """One browser, one isolated context, one page.

    Ownership is nested: the page belongs to the context, the context to
    the browser, the browser to the Playwright driver.
    """
    engine: BrowserEngine
    headless: bool
    playwright: Any = None
    browser: Any = None
    context: Any = None
    page: Any = None

    @property
    def is_open(self) -> bool:
        return self.page is not None


async def open_browser(settings: Optional[Settings] = None) -> BrowserSession:
    """
    Launch a browser and create one context and one page.

    The engine comes from E2E_BROWSER / PW_BROWSER / PLAYWRIGHT_BROWSER
    (default chromium), headless unless HEADLESS=false. A failure to set
    the default viewport does not fail the session.

    Returns:
        The open BrowserSession
    """
    settings = settings or get_settings()
    session = BrowserSession(engine=settings.browser_engine, headless=settings.headless)
    log = logger.bind(component="browser", engine=session.engine.value)
    log.info("Starting browser", headless=session.headless)

    try:
        session.playwright = await async_playwright().start()
        launcher = getattr(session.playwright, session.engine.value)
        session.browser = await launcher.launch(headless=session.headless)
        session.context = await session.browser.new_context()
        session.page = await session.context.new_page()
    except Exception:
        await close_browser(session)
        raise

    try:
        await session.page.set_viewport_size(
            {"width": settings.viewport_width, "height": settings.viewport_height}
        )
    except Exception as e:
        log.debug("Could not set default viewport", error=str(e))

    log.info("Browser started")
    return session


async def _close_quietly(resource: str, close) -> Optional[CleanupError]:
    try:
        await close()
    except Exception as e:
        error = CleanupError(resource, str(e))
        logger.debug("Cleanup step failed", resource=resource, error=str(error))
        return error
    return None


async def close_browser(session: BrowserSession) -> list[CleanupError]:
    """
    Close page, context, browser and driver, innermost first.

    Each step is attempted regardless of earlier failures. Nothing is
    raised; the failed steps are returned for diagnostics.
    """
    errors = []
    steps = [
        ("page", session.page, "close"),
        ("context", session.context, "close"),
        ("browser", session.browser, "close"),
        ("playwright", session.playwright, "stop"),
    ]
    for resource, handle, method in steps:
        if handle is None:
            continue
        error = await _close_quietly(resource, getattr(handle, method))
        if error:
            errors.append(error)

    session.page = None
    session.context = None
    session.browser = None
    session.playwright = None
    logger.info("Browser stopped", engine=session.engine.value, cleanup_errors=len(errors))
    return errors


class BrowserManager:
    """
    Holds the single live browser session of a test run.

    Usage:
        async with BrowserManager() as session:
            tools = PlaywrightTools(session)
            await tools.goto("https://example.com")
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._session: Optional[BrowserSession] = None
        self.log = logger.bind(component="browser_manager")

    @property
    def session(self) -> Optional[BrowserSession]:
        return self._session

    @property
    def page(self):
        """Get the current page."""
        return self._session.page if self._session else None

    async def start(self) -> BrowserSession:
        """Open the session."""
        if self._session is not None and self._session.is_open:
            raise RuntimeError("Browser session already open")
        self._session = await open_browser(self.settings)
        return self._session

    async def stop(self) -> None:
        """Close the session. Safe to call more than once."""
        if self._session is None:
            return
        session, self._session = self._session, None
        await close_browser(session)

    async def __aenter__(self) -> BrowserSession:
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()


@asynccontextmanager
async def create_browser_session(settings: Optional[Settings] = None):
    """
    Context manager for browser sessions.

    Usage:
        async with create_browser_session() as session:
            await session.page.goto("https://example.com")
    """
    session = await open_browser(settings)
    try:
        yield session
    finally:
        await close_browser(session)


class PlaywrightTools:
    """
    Interaction helpers for a browser session.

    Every element interaction waits for the element to be visible first and
    then acts on the concrete selector the wait resolved. Selectors use the
    prefix notation from `selectors` ('id:', 'name:', 'input:', 'css:').
    """

    def __init__(
        self,
        session: BrowserSession,
        settings: Optional[Settings] = None,
        strategy: ResolutionStrategy = DEFAULT_STRATEGY,
        scenario_log: Optional[ScenarioLogger] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.strategy = strategy
        self.scenario_log = scenario_log
        self.log = logger.bind(component="playwright_tools")

    @property
    def page(self):
        return self.session.page

    def _step(self, action: str, target: Optional[str] = None) -> None:
        if self.scenario_log is not None:
            self.scenario_log.step_started(action, target)

    def _check(self, assertion_type: str, passed: bool, message: str, **details) -> None:
        if self.scenario_log is not None:
            self.scenario_log.assertion_checked(assertion_type, passed, details)
        if not passed:
            raise AssertionError(message)

    @staticmethod
    def _timeout(timeout_ms: Optional[int], default: int) -> int:
        return default if timeout_ms is None else timeout_ms

    async def _visible(self, selector: Union[str, Selector], timeout_ms: Optional[int] = None) -> str:
        return await waiter.wait_until_visible(
            self.page,
            selector,
            self._timeout(timeout_ms, self.settings.visible_timeout_ms),
            self.strategy,
        )

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def goto(self, url: str, wait_until: str = "load") -> str:
        """Navigate to URL and wait for the load event. Returns the final URL."""
        self._step("goto", url)
        self.log.info("Navigating", url=url)
        await self.page.goto(url, wait_until=wait_until, timeout=self.settings.navigation_timeout_ms)
        return self.page.url

    async def reload(self) -> None:
        await self.page.reload()

    async def go_back(self) -> None:
        await self.page.go_back()

    async def go_forward(self) -> None:
        await self.page.go_forward()

    async def wait(self, ms: int) -> None:
        """Fixed delay. Prefer the explicit waits."""
        await asyncio.sleep(ms / 1000)

    async def wait_until_url(self, url: str, timeout_ms: Optional[int] = None) -> None:
        """
        Wait until the page URL matches `url`.

        Raises:
            UrlTimeoutError: URL not reached within the timeout
        """
        timeout_ms = waiter.check_timeout(self._timeout(timeout_ms, self.settings.url_timeout_ms))
        try:
            await self.page.wait_for_url(url, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise UrlTimeoutError(url, self.page.url, timeout_ms) from e

    async def get_title(self) -> str:
        return await self.page.title()

    async def get_url(self) -> str:
        return self.page.url

    async def end_url(self, base_url: str) -> str:
        """
        Current URL relative to `base_url`.

        Example:
            # current URL https://example.com/dashboard/users
            await tools.end_url("https://example.com")  # '/dashboard/users'
        """
        current = (await self.get_url()).rstrip("/")
        base = base_url.rstrip("/")
        relative = current[len(base):] if current.startswith(base) else current
        return relative if relative.startswith("/") else "/" + relative

    async def get_page_text(self) -> str:
        """All text on the page body."""
        return await self.page.evaluate("() => document.body.innerText ?? ''")

    async def execute_script(self, script: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript expression or function in the page."""
        return await self.page.evaluate(script, arg)

    # ==========================================================================
    # Element Interaction
    # ==========================================================================

    async def click(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        self._step("click", selector)
        sel = await self._visible(selector, timeout_ms)
        self.log.debug("Clicking", selector=selector, resolved=sel)
        await self.page.click(sel)

    async def double_click(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        self._step("double_click", selector)
        sel = await self._visible(selector, timeout_ms)
        await self.page.dblclick(sel)

    async def right_click(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        self._step("right_click", selector)
        sel = await self._visible(selector, timeout_ms)
        await self.page.click(sel, button="right")

    async def hover(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        self._step("hover", selector)
        sel = await self._visible(selector, timeout_ms)
        await self.page.hover(sel)

    async def focus(self, selector: str, clear: bool = False) -> None:
        """Focus an element, optionally clearing it."""
        self._step("focus", selector)
        sel = await self._visible(selector)
        await self.page.focus(sel)
        if clear:
            await self.page.fill(sel, "")

    async def fill(self, selector: str, value: str, clear: bool = True) -> None:
        """
        Type into an element.

        Args:
            selector: Input selector
            value: Text to enter
            clear: Replace the current value; when False, keys are typed
                after the existing content
        """
        self._step("fill", selector)
        sel = await self._visible(selector)
        self.log.debug("Filling", selector=selector, resolved=sel, value_length=len(value))
        if clear:
            await self.page.fill(sel, value)
        else:
            await self.page.locator(sel).press_sequentially(value)

    async def send_input(self, selector: str, value: str) -> None:
        """Type without clearing."""
        await self.fill(selector, value, clear=False)

    async def clear_input(self, selector: str) -> None:
        self._step("clear_input", selector)
        sel = await self._visible(selector)
        await self.page.fill(sel, "")

    async def submit_input(self, selector: str) -> None:
        """Submit via Enter on the element."""
        self._step("submit_input", selector)
        sel = await self._visible(selector)
        await self.page.press(sel, "Enter")

    async def press_key(self, selector: str, key: str) -> None:
        """Press a key on an element. Accepts Playwright or Selenium-style key names."""
        self._step("press_key", selector)
        sel = await self._visible(selector)
        await self.page.press(sel, KEY_MAP.get(key, key))

    async def select_option(self, selector: str, value: str) -> list[str]:
        self._step("select_option", selector)
        sel = await self._visible(selector)
        return await self.page.select_option(sel, value)

    async def check(self, selector: str) -> None:
        self._step("check", selector)
        sel = await self._visible(selector)
        await self.page.check(sel)

    async def uncheck(self, selector: str) -> None:
        self._step("uncheck", selector)
        sel = await self._visible(selector)
        await self.page.uncheck(sel)

    async def upload_file(self, selector: str, file_path: Union[str, Path]) -> None:
        self._step("upload_file", selector)
        sel = await self._visible(selector)
        await self.page.set_input_files(sel, str(file_path))

    async def drag_and_drop(self, source: str, target: str) -> None:
        """Drag `source` onto `target`; both must be visible."""
        self._step("drag_and_drop", source)
        source_sel = await self._visible(source)
        target_sel = await self._visible(target)
        await self.page.drag_and_drop(source_sel, target_sel)

    async def scroll_to_element(self, selector: str) -> None:
        self._step("scroll_to_element", selector)
        sel = await self._visible(selector)
        await self.page.locator(sel).scroll_into_view_if_needed()

    async def scroll_by(self, x: int, y: int) -> None:
        """Scroll the page by an offset in pixels."""
        await self.page.evaluate("([x, y]) => window.scrollBy(x, y)", [x, y])

    async def switch_to_frame(self, selector: str):
        """Frame locator for an iframe, once the iframe is visible."""
        sel = await self._visible(selector)
        return self.page.frame_locator(sel)

    # ==========================================================================
    # Waiting
    # ==========================================================================

    async def wait_until_visible(self, selector: str, timeout_ms: Optional[int] = None) -> str:
        return await self._visible(selector, timeout_ms)

    async def wait_for_element(self, selector: str, timeout_ms: Optional[int] = None) -> str:
        return await waiter.wait_for_element(
            self.page, selector, self._timeout(timeout_ms, self.settings.visible_timeout_ms), self.strategy
        )

    async def wait_until_hidden(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        await waiter.wait_until_hidden(
            self.page, selector, self._timeout(timeout_ms, self.settings.hidden_timeout_ms), self.strategy
        )

    # ==========================================================================
    # Element Queries
    # ==========================================================================

    async def get_text(self, selector: str) -> str:
        sel = await self._visible(selector)
        return await self.page.inner_text(sel)

    async def get_attribute(self, selector: str, name: str) -> Optional[str]:
        sel = await self._visible(selector)
        return await self.page.get_attribute(sel, name)

    async def get_html(self, selector: str) -> str:
        sel = await self._visible(selector)
        return await self.page.inner_html(sel)

    async def get_input_value(self, selector: str) -> str:
        sel = await self._visible(selector)
        return await self.page.input_value(sel)

    async def get_css_value(self, selector: str, prop: str) -> str:
        """Computed CSS property value of an element."""
        sel = await self._visible(selector)
        return await self.page.eval_on_selector(
            sel,
            "(el, prop) => window.getComputedStyle(el).getPropertyValue(prop)",
            prop,
        )

    async def get_element_bounds(self, selector: str) -> dict:
        """Bounding box with x, y, width and height."""
        sel = await self._visible(selector)
        box = await self.page.locator(sel).bounding_box()
        return box or {"x": 0, "y": 0, "width": 0, "height": 0}

    async def get_element_count(self, selector: str) -> int:
        """Count matches of the primary selector without waiting."""
        return await self.page.locator(self.strategy.resolve(selector)).count()

    async def is_visible(self, selector: str) -> bool:
        return await waiter.is_visible(self.page, selector, self.settings.check_timeout_ms, self.strategy)

    async def is_element_present(self, selector: str) -> bool:
        return await waiter.is_element_present(self.page, selector, self.settings.check_timeout_ms, self.strategy)

    async def is_enabled(self, selector: str) -> bool:
        sel = await self._visible(selector, self.settings.check_timeout_ms)
        return not await self.page.is_disabled(sel)

    async def is_checked(self, selector: str) -> bool:
        sel = await self._visible(selector)
        return await self.page.is_checked(sel)

    # ==========================================================================
    # Screenshots
    # ==========================================================================

    async def take_screenshot(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """
        Full-page screenshot saved under the screenshots directory.

        Returns:
            Path of the saved file, e.g. screenshots/screenshot-2025-01-15T10-30-45-123456+00-00.png
        """
        directory = Path(directory or self.settings.screenshots_dir)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
        path = directory / f"screenshot-{timestamp}.png"
        await self.page.screenshot(path=str(path), full_page=True)
        self.log.info("Screenshot saved", path=str(path))
        return path

    async def screenshot_element(self, selector: str, path: Optional[Union[str, Path]] = None) -> bytes:
        """Screenshot a single element once it is visible."""
        sel = await self._visible(selector)
        kwargs = {"type": "png"}
        if path:
            kwargs["path"] = str(path)
        return await self.page.locator(sel).screenshot(**kwargs)

    # ==========================================================================
    # Assertions
    # ==========================================================================

    async def assert_title(self, expected: str) -> None:
        """Assert page title contains expected string."""
        title = await self.get_title()
        self._check(
            "title",
            expected in title,
            f"Title mismatch: expected '{expected}' in '{title}'",
            expected=expected,
            actual=title,
        )

    async def assert_text(self, selector: str, expected: str) -> None:
        """Assert element contains expected text."""
        text = await self.get_text(selector)
        self._check(
            "text",
            expected in (text or ""),
            f"Text mismatch: expected '{expected}' in '{text}'",
            selector=selector,
            expected=expected,
        )

    async def assert_visible(self, selector: str) -> None:
        visible = await self.is_visible(selector)
        self._check("visible", visible, f"Element not visible: {selector}", selector=selector)
