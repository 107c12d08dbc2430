"""
Navigation - drives the single active page to a URL, an in-page link or a section.
"""

from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .diagnostics import get_logger
from .exceptions import LinkNotFoundError, NavigationError, WaitTimeoutError

logger = get_logger(__name__)

ANCHOR_SELECTOR = 'a, [role="link"]'


def normalize_link_text(text: Optional[str]) -> str:
    return (text or "").strip().lower()


class NavigationController:
    """
    Navigation operations on a caller-owned page.

    Every operation is attempted once; retry policy belongs to the caller.
    """

    def __init__(
        self,
        page,
        nav_timeout_ms: int = 10000,
        ready_timeout_ms: int = 10000,
        link_wait_ms: int = 5000,
        run_logger=None,
    ):
        self.page = page
        self.nav_timeout_ms = nav_timeout_ms
        self.ready_timeout_ms = ready_timeout_ms
        self.link_wait_ms = link_wait_ms
        self.run_logger = run_logger

    async def goto(self, url: str) -> None:
        """Navigate to url; NavigationError on network error or timeout."""
        logger.info(f"Navigating to {url}")
        try:
            await self.page.goto(url, timeout=self.nav_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationError(url, f"timed out after {self.nav_timeout_ms}ms") from e
        except PlaywrightError as e:
            raise NavigationError(url, str(e)) from e
        if self.run_logger:
            self.run_logger.log_kv("navigated", url)

    async def wait_for_ready(self, selector: str, timeout_ms: Optional[int] = None) -> None:
        """Suspend until an element matching selector attaches to the page."""
        timeout = self.ready_timeout_ms if timeout_ms is None else timeout_ms
        try:
            await self.page.wait_for_selector(selector, state="attached", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(selector, timeout) from e
        logger.debug(f"Ready signal attached: {selector}")

    async def follow_link(self, visible_text: str) -> str:
        """
        Click the first anchor whose trimmed, lower-cased text equals visible_text.

        Single pass over the anchors attached right now, no polling. Waits for
        DOMContentLoaded after the click.

        Returns:
            The matched anchor's own text
        """
        wanted = normalize_link_text(visible_text)
        try:
            await self.page.wait_for_selector(ANCHOR_SELECTOR, state="attached", timeout=self.link_wait_ms)
        except PlaywrightTimeoutError as e:
            raise LinkNotFoundError(visible_text) from e

        for anchor in await self.page.query_selector_all(ANCHOR_SELECTOR):
            text = await anchor.inner_text()
            if normalize_link_text(text) == wanted:
                logger.info(f"Clicking link with text: {text.strip()!r}")
                await anchor.click(timeout=self.link_wait_ms)
                await self.page.wait_for_load_state("domcontentloaded")
                if self.run_logger:
                    self.run_logger.log_kv("followed_link", text.strip())
                return text

        raise LinkNotFoundError(visible_text)

    async def scroll_into_view(self, selector: str) -> bool:
        """Best-effort scroll to the last match. Absence is a no-op success."""
        try:
            locator = self.page.locator(selector)
            if await locator.count() == 0:
                logger.debug(f"Nothing to scroll to for {selector}")
                return False
            await locator.last.scroll_into_view_if_needed(timeout=self.ready_timeout_ms)
            return True
        except PlaywrightError as e:
            logger.debug(f"Scroll to {selector} skipped: {e}")
            return False
