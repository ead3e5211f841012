"""Shared fixtures for E2E harness tests."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

BROWSER_ENV_VARS = ("E2E_BROWSER", "PW_BROWSER", "PLAYWRIGHT_BROWSER", "HEADLESS")


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path - included in CI)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end test driving a real browser"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live browser tests unless E2E_LIVE=1."""
    if os.environ.get("E2E_LIVE") == "1":
        return

    skip_e2e = pytest.mark.skip(
        reason="live browser test. Run with E2E_LIVE=1 after 'playwright install'"
    )

    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Clear browser selection variables so defaults apply."""
    for name in BROWSER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def harness_settings(mock_env_vars, tmp_path):
    """Settings writing every artifact under tmp_path."""
    from e2e_harness.config import Settings

    return Settings(
        recordings_dir=str(tmp_path / "recordings"),
        screenshots_dir=str(tmp_path / "screenshots"),
        report_path=str(tmp_path / "report.json"),
        recording_grace_period_ms=200,
    )


@pytest.fixture(autouse=True)
def reset_default_recorder():
    """Give every test a fresh process-wide recorder."""
    from e2e_harness.recording import reset_recorder

    reset_recorder()
    yield
    reset_recorder()


@pytest.fixture
def mock_page():
    """Create a mock Playwright page."""
    page = MagicMock()
    page.url = "https://example.com/"

    for name in (
        "wait_for_selector", "click", "dblclick", "hover", "focus", "fill", "press",
        "check", "uncheck", "select_option", "set_input_files", "drag_and_drop",
        "inner_text", "inner_html", "get_attribute", "input_value", "is_disabled",
        "is_checked", "goto", "reload", "go_back", "go_forward", "wait_for_url",
        "title", "evaluate", "eval_on_selector", "screenshot", "set_viewport_size", "close",
    ):
        setattr(page, name, AsyncMock())

    page.screenshot.return_value = b"fake_png"
    page.title.return_value = "Swag Labs"

    locator = MagicMock()
    locator.count = AsyncMock(return_value=3)
    locator.press_sequentially = AsyncMock()
    locator.scroll_into_view_if_needed = AsyncMock()
    locator.bounding_box = AsyncMock(return_value={"x": 1, "y": 2, "width": 30, "height": 40})
    locator.screenshot = AsyncMock(return_value=b"element_png")
    page.locator = MagicMock(return_value=locator)
    page.frame_locator = MagicMock(return_value=MagicMock(name="frame_locator"))
    return page


@pytest.fixture
def mock_session(mock_page):
    """Create an open BrowserSession backed by mocks."""
    from e2e_harness.config import BrowserEngine
    from e2e_harness.tools.playwright_tools import BrowserSession

    context = MagicMock()
    context.close = AsyncMock()
    browser = MagicMock()
    browser.close = AsyncMock()
    playwright = MagicMock()
    playwright.stop = AsyncMock()

    return BrowserSession(
        engine=BrowserEngine.CHROMIUM,
        headless=True,
        playwright=playwright,
        browser=browser,
        context=context,
        page=mock_page,
    )


@pytest.fixture
def tools(mock_session, harness_settings):
    """PlaywrightTools over the mock session."""
    from e2e_harness.tools.playwright_tools import PlaywrightTools

    return PlaywrightTools(mock_session, harness_settings)


@pytest.fixture
def mock_playwright():
    """Mock async_playwright() entry point with launchable engines.

    Returns (async_playwright_fn, playwright, browser, context, page).
    """
    page = MagicMock()
    page.set_viewport_size = AsyncMock()
    page.close = AsyncMock()

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    for engine in ("chromium", "firefox", "webkit"):
        getattr(playwright, engine).launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    async_playwright_fn = MagicMock()
    async_playwright_fn.return_value.start = AsyncMock(return_value=playwright)
    return async_playwright_fn, playwright, browser, context, page
