#!/usr/bin/env python3
"""Browser launch and teardown for a single automation run"""
import subprocess
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .config import Config, config as default_config
from .diagnostics import get_logger

logger = get_logger(__name__)


@dataclass
class BrowserSession:
    """Playwright objects of one run. The page is the run's PageHandle."""
    playwright: Any
    browser: Any
    context: Any
    page: Any
    closed: bool = False

    async def close(self) -> None:
        """Close context, browser and driver. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        for closer in (self.context.close, self.browser.close, self.playwright.stop):
            try:
                await closer()
            except PlaywrightError as e:
                logger.debug(f"Ignoring error during browser cleanup: {e}")


def _install_chromium() -> None:
    logger.info("Playwright browser missing, installing chromium...")
    result = subprocess.run(
        [sys.executable, "-m", "playwright", "install", "chromium"],
        capture_output=True,
        text=True,
        timeout=300,
    )
    if result.returncode != 0:
        logger.warning(f"Playwright install warning: {result.stderr[:200]}")


def launch_options(cfg: Config) -> dict:
    options = {
        "headless": bool(cfg.headless),
        "args": ["--start-maximized"],
    }
    if cfg.slow_mo_ms:
        options["slow_mo"] = cfg.slow_mo_ms
    return options


async def start_browser(cfg: Optional[Config] = None) -> BrowserSession:
    cfg = cfg or default_config
    playwright = await async_playwright().start()
    options = launch_options(cfg)
    try:
        try:
            browser = await playwright.chromium.launch(**options)
        except PlaywrightError as e:
            if "Executable doesn't exist" not in str(e):
                raise
            _install_chromium()
            browser = await playwright.chromium.launch(**options)
        # viewport=None lets the page follow the maximized window size
        context = await browser.new_context(viewport=None)
        page = await context.new_page()
    except BaseException:
        await playwright.stop()
        raise
    return BrowserSession(playwright=playwright, browser=browser, context=context, page=page)


@asynccontextmanager
async def launch_browser(cfg: Optional[Config] = None) -> AsyncIterator[BrowserSession]:
    """Launch Chromium and always close it, whatever happened inside the block."""
    session = await start_browser(cfg)
    try:
        yield session
    finally:
        await session.close()
