"""Tests for browser setup, diagnostics, the run log and AutomationSession."""

import logging
from dataclasses import replace
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import Error as PlaywrightError

from formbot_core.browser_setup import BrowserSession, launch_options
from formbot_core.confirmation import ReaderState
from formbot_core.diagnostics import get_logger, mask, set_level
from formbot_core.run_logger import RunLogger
from formbot_core.session import AutomationSession


class TestLaunchOptions:

    def test_maximized_window(self, fast_config):
        options = launch_options(fast_config)
        assert options["args"] == ["--start-maximized"]
        assert options["headless"] is True
        assert "slow_mo" not in options

    def test_slow_mo(self, fast_config):
        assert launch_options(replace(fast_config, slow_mo_ms=250))["slow_mo"] == 250


@pytest.mark.asyncio
class TestBrowserSession:

    async def test_close_order_and_idempotent(self):
        order = []
        context, browser, playwright = AsyncMock(), AsyncMock(), AsyncMock()
        context.close.side_effect = lambda: order.append("context")
        browser.close.side_effect = lambda: order.append("browser")
        playwright.stop.side_effect = lambda: order.append("playwright")
        session = BrowserSession(playwright=playwright, browser=browser, context=context, page=None)

        await session.close()
        await session.close()

        assert order == ["context", "browser", "playwright"]

    async def test_close_ignores_driver_errors(self):
        context = AsyncMock()
        context.close.side_effect = PlaywrightError("Target closed")
        playwright = AsyncMock()
        session = BrowserSession(playwright=playwright, browser=AsyncMock(), context=context, page=None)

        await session.close()

        assert session.closed
        playwright.stop.assert_awaited_once()


class TestDiagnostics:

    def test_logger_cached_without_duplicate_handlers(self):
        first = get_logger("formbot_core.tests.example")
        second = get_logger("formbot_core.tests.example")
        assert first is second
        assert len(first.handlers) == 1
        assert first.propagate is False

    def test_set_level(self):
        lg = get_logger("formbot_core.tests.levels")
        set_level("DEBUG")
        try:
            assert lg.level == logging.DEBUG
            assert lg.handlers[0].level == logging.DEBUG
        finally:
            set_level("INFO")

    def test_mask(self):
        assert mask("sde00918#$", True) == "********"
        assert mask("abc", True) == "***"
        assert mask("Santosh", False) == "Santosh"


class TestRunLogger:

    def test_writes_markdown(self, tmp_path):
        run_logger = RunLogger(
            target="chaicode-signup",
            url="https://ui.chaicode.com/auth/signup",
            command_line="formbot run chaicode-signup",
            log_dir=str(tmp_path),
            session_id="test",
        )
        run_logger.log_step("Navigation")
        run_logger.log_kv("navigated", "https://ui.chaicode.com/auth/signup")
        run_logger.log_table(["Field", "Status"], [["firstName", "FILLED"]], "Fields")
        run_logger.log_json({"success": True}, "Result")
        run_logger.finalize(False, 1200, "boom")

        text = (tmp_path / "run-test.md").read_text(encoding="utf-8")
        assert text.startswith("# formbot Run Log (test)")
        assert "```bash\nformbot run chaicode-signup\n```" in text
        assert "## Step 1: Navigation" in text
        assert "**Steps:** 1" in text
        assert "| firstName | FILLED |" in text
        assert '"success": true' in text
        assert "**Status:** FAILED" in text
        assert "**Error:** boom" in text

    def test_image_path_relative_to_log(self, tmp_path):
        run_logger = RunLogger(target="t", url=None, log_dir=str(tmp_path / "logs"), session_id="img")
        image = tmp_path / "screenshots" / "step_1_x.png"
        run_logger.log_image(str(image), "Landing page")

        text = run_logger.path.read_text(encoding="utf-8")
        assert "![Landing page](../screenshots/step_1_x.png)" in text


@pytest.mark.asyncio
class TestAutomationSession:

    async def test_start_arms_reader(self, page, contact_target, fast_config):
        session = AutomationSession(page, contact_target, fast_config)
        await session.start()
        assert session.reader.state is ReaderState.ARMED

    async def test_confirm_arms_on_demand(self, page, contact_target, fast_config):
        session = AutomationSession(page, contact_target, fast_config)
        page.alert_available = False

        payload = await session.confirm({"Name": "Santosh"})

        assert payload.channel == "toast"
        assert payload.fields == {"Name": "Santosh"}

    async def test_confirm_rearms_after_dismissal(self, page, contact_target, fast_config):
        session = AutomationSession(page, contact_target, fast_config)
        await session.start()
        first_reader = session.reader
        await session.confirm({"Name": "Santosh"})

        await session.confirm({"Name": "Asha"})

        assert session.reader is not first_reader
        assert len(page.handlers["dialog"]) == 1

    async def test_close_with_browser(self, page, contact_target, fast_config):
        browser = BrowserSession(playwright=AsyncMock(), browser=AsyncMock(), context=AsyncMock(), page=page)
        session = AutomationSession(page, contact_target, fast_config, browser=browser)

        await session.close()
        await session.close()

        assert browser.closed
        browser.context.close.assert_awaited_once()
