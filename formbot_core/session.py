"""
AutomationSession - the engine's components bound to one page and one target.

Used by the tool layer, where an external planner decides the order of
operations instead of the runner.
"""

from typing import Mapping, Optional

from .browser_setup import BrowserSession, start_browser
from .config import Config, config as default_config
from .confirmation import ConfirmationReader, ReaderState
from .diagnostics import get_logger
from .form_fill import FormFiller
from .models import ConfirmationPayload, FillReport
from .navigation import NavigationController
from .screenshots import ScreenshotRecorder
from .targets import TargetSpec

logger = get_logger(__name__)


class AutomationSession:
    def __init__(
        self,
        page,
        target: TargetSpec,
        cfg: Optional[Config] = None,
        browser: Optional[BrowserSession] = None,
        recorder: Optional[ScreenshotRecorder] = None,
        run_logger=None,
    ):
        self.page = page
        self.target = target
        self.cfg = cfg or default_config
        self.browser = browser
        self.run_logger = run_logger
        self.nav = NavigationController(
            page,
            nav_timeout_ms=self.cfg.nav_timeout_ms,
            ready_timeout_ms=self.cfg.ready_timeout_ms,
            link_wait_ms=self.cfg.link_wait_ms,
            run_logger=run_logger,
        )
        self.filler = FormFiller(
            page,
            action_timeout_ms=self.cfg.action_timeout_ms,
            run_logger=run_logger,
            dialog_grace_s=self.cfg.grace_period_s,
        )
        self.recorder = recorder or ScreenshotRecorder.for_url(
            page, target.url, base_dir=self.cfg.screenshot_dir, run_logger=run_logger
        )
        self.reader: Optional[ConfirmationReader] = None
        self.last_report: Optional[FillReport] = None
        self.closed = False

    @classmethod
    async def launch(cls, target: TargetSpec, cfg: Optional[Config] = None, run_logger=None) -> "AutomationSession":
        """Start a browser and return an armed session"""
        browser = await start_browser(cfg or default_config)
        session = cls(browser.page, target, cfg, browser=browser, run_logger=run_logger)
        try:
            await session.start()
        except BaseException:
            await browser.close()
            raise
        return session

    def _new_reader(self) -> ConfirmationReader:
        return ConfirmationReader(
            self.page,
            grace_period_s=self.cfg.grace_period_s,
            dialog_wait_s=self.cfg.dialog_wait_s,
            ack_timeout_s=self.cfg.ack_timeout_s,
            toast_duration_ms=self.cfg.toast_duration_ms,
            run_logger=self.run_logger,
        )

    async def start(self) -> None:
        """Arm the confirmation reader; must happen before the first navigation."""
        self.reader = self._new_reader()
        await self.reader.arm()

    async def confirm(self, values: Optional[Mapping[str, str]]) -> ConfirmationPayload:
        """Read back the acknowledgment, re-arming if the previous reader finished."""
        if self.reader is None or self.reader.state is not ReaderState.ARMED:
            if self.reader is not None:
                self.reader.disarm()
            await self.start()
        return await self.reader.read(values)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.browser is not None:
            await self.browser.close()
        else:
            await self.page.close()
        logger.info("Browser closed")
