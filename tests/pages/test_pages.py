"""Tests for page objects."""

from unittest.mock import AsyncMock, MagicMock, call

import pytest

from e2e_harness.exceptions import UrlTimeoutError
from e2e_harness.pages import GoogleSearchPage, SauceDemoPage
from e2e_harness.pages.saucedemo import INVENTORY_URL
from e2e_harness.tools.playwright_tools import PlaywrightTools


@pytest.fixture
def mock_tools():
    tools = MagicMock(spec=PlaywrightTools)
    for name in ("goto", "fill", "click", "press_key", "wait_until_url", "get_title", "wait"):
        setattr(tools, name, AsyncMock())
    return tools


class TestSauceDemoPage:
    """Tests for SauceDemoPage."""

    @pytest.mark.asyncio
    async def test_open(self, mock_tools):
        await SauceDemoPage(mock_tools).open()
        mock_tools.goto.assert_awaited_once_with("https://www.saucedemo.com/")

    @pytest.mark.asyncio
    async def test_login(self, mock_tools):
        await SauceDemoPage(mock_tools).login("standard_user", "secret_sauce")

        assert mock_tools.fill.await_args_list == [
            call("id:user-name", "standard_user"),
            call("id:password", "secret_sauce"),
        ]
        mock_tools.click.assert_awaited_once_with("id:login-button")

    @pytest.mark.asyncio
    async def test_verify_inventory_page(self, mock_tools):
        await SauceDemoPage(mock_tools).verify_inventory_page()
        mock_tools.wait_until_url.assert_awaited_once_with(INVENTORY_URL, timeout_ms=5000)

    @pytest.mark.asyncio
    async def test_verify_inventory_page_timeout(self, mock_tools):
        mock_tools.wait_until_url.side_effect = UrlTimeoutError(INVENTORY_URL, "https://www.saucedemo.com/", 5000)

        with pytest.raises(UrlTimeoutError):
            await SauceDemoPage(mock_tools).verify_inventory_page()


class TestGoogleSearchPage:
    """Tests for GoogleSearchPage."""

    @pytest.mark.asyncio
    async def test_open_domain(self, mock_tools):
        await GoogleSearchPage(mock_tools).open("google.co.uk")
        mock_tools.goto.assert_awaited_once_with("https://www.google.co.uk")

    @pytest.mark.asyncio
    async def test_search(self, mock_tools):
        await GoogleSearchPage(mock_tools).search("playwright")

        mock_tools.fill.assert_awaited_once_with("name:q", "playwright")
        mock_tools.press_key.assert_awaited_once_with("name:q", "Enter")

    @pytest.mark.asyncio
    async def test_wait_for_title_polls(self, mock_tools):
        mock_tools.get_title.side_effect = ["Google", "Google", "playwright - Google Search"]

        title = await GoogleSearchPage(mock_tools).wait_for_title("playwright", poll_ms=10)

        assert title == "playwright - Google Search"
        assert mock_tools.wait.await_count == 2

    @pytest.mark.asyncio
    async def test_wait_for_title_returns_last_title(self, mock_tools):
        mock_tools.get_title.return_value = "Google"

        title = await GoogleSearchPage(mock_tools).wait_for_title("playwright", timeout_ms=0)

        assert title == "Google"
