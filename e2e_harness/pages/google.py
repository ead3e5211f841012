"""Page object for Google search."""

import asyncio

from ..tools.playwright_tools import PlaywrightTools


class GoogleSearchPage:
    """Search box and result title of google.com."""

    SEARCH_INPUT = "name:q"

    def __init__(self, tools: PlaywrightTools):
        self.tools = tools

    async def open(self, domain: str = "google.com") -> None:
        await self.tools.goto(f"https://www.{domain}")

    async def search(self, keyword: str) -> None:
        await self.tools.fill(self.SEARCH_INPUT, keyword)
        await self.tools.press_key(self.SEARCH_INPUT, "Enter")

    async def wait_for_title(self, expected_term: str, timeout_ms: int = 10000, poll_ms: int = 500) -> str:
        """
        Poll the title until it contains `expected_term`.

        Returns the last title seen, whether or not the term showed up, so
        the caller's assertion reports the actual title.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000
        while loop.time() < deadline:
            title = await self.tools.get_title()
            if expected_term in title:
                return title
            await self.tools.wait(poll_ms)
        return await self.tools.get_title()
