"""Page object for the SauceDemo storefront."""

from ..tools.playwright_tools import PlaywrightTools

BASE_URL = "https://www.saucedemo.com/"
INVENTORY_URL = "https://www.saucedemo.com/inventory.html"


class SauceDemoPage:
    """Login flow of saucedemo.com."""

    def __init__(self, tools: PlaywrightTools, base_url: str = BASE_URL):
        self.tools = tools
        self.base_url = base_url

    async def open(self) -> None:
        await self.tools.goto(self.base_url)

    async def login(self, user: str, password: str) -> None:
        await self.tools.fill("id:user-name", user)
        await self.tools.fill("id:password", password)
        await self.tools.click("id:login-button")

    async def verify_inventory_page(self, timeout_ms: int = 5000) -> None:
        """Raises UrlTimeoutError when the inventory page never loads."""
        await self.tools.wait_until_url(INVENTORY_URL, timeout_ms=timeout_ms)
