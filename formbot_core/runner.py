"""
Runner - the orchestrating caller for one form automation run.

    navigate -> follow links -> wait for form -> fill + submit
             -> read back confirmation -> screenshot each step

The runner owns the browser: it imposes the overall run timeout and always
closes the browser, whatever the outcome.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .browser_setup import BrowserSession, launch_browser
from .config import Config, config as default_config
from .confirmation import ConfirmationReader
from .diagnostics import get_logger
from .exceptions import AckTimeoutError, FormAutomationError
from .form_fill import FormFiller
from .models import ConfirmationPayload, FillReport
from .navigation import NavigationController
from .screenshots import ScreenshotRecorder
from .targets import TargetSpec

logger = get_logger(__name__)


@dataclass
class RunResult:
    target: str
    fill_report: Optional[FillReport] = None
    payload: ConfirmationPayload = field(default_factory=ConfirmationPayload)
    screenshots: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None
    ack_error: Optional[AckTimeoutError] = None
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.error is None and self.fill_report is not None and self.fill_report.submitted

    def to_dict(self) -> dict:
        report = self.fill_report
        return {
            "target": self.target,
            "success": self.success,
            "filled": sorted(report.filled) if report else [],
            "skipped": sorted(report.skipped) if report else [],
            "confirmation": dict(self.payload.fields),
            "confirmation_channel": self.payload.channel,
            "acknowledged": self.ack_error is None and not self.payload.is_empty,
            "screenshots": list(self.screenshots),
            "error": str(self.error) if self.error else None,
            "duration_ms": self.duration_ms,
        }


async def execute_target(
    page,
    target: TargetSpec,
    cfg: Config,
    result: RunResult,
    values: Optional[Mapping[str, str]] = None,
    run_logger=None,
    recorder: Optional[ScreenshotRecorder] = None,
) -> RunResult:
    """Run the steps against an already-open page. Fills result in place."""
    submission = target.submission.with_values(values)
    recorder = recorder or ScreenshotRecorder.for_url(page, target.url, base_dir=cfg.screenshot_dir, run_logger=run_logger)

    async def shot(label: str) -> None:
        result.screenshots.append(await recorder.capture(label))

    reader = ConfirmationReader(
        page,
        grace_period_s=cfg.grace_period_s,
        dialog_wait_s=cfg.dialog_wait_s,
        ack_timeout_s=cfg.ack_timeout_s,
        toast_duration_ms=cfg.toast_duration_ms,
        run_logger=run_logger,
    )
    await reader.arm()

    nav = NavigationController(
        page,
        nav_timeout_ms=cfg.nav_timeout_ms,
        ready_timeout_ms=cfg.ready_timeout_ms,
        link_wait_ms=cfg.link_wait_ms,
        run_logger=run_logger,
    )

    if run_logger:
        run_logger.log_step("Navigation")
    await nav.goto(target.url)
    await shot("Landing page")

    for link_text in target.links:
        await nav.follow_link(link_text)
        await shot(f"After clicking {link_text}")

    if target.ready_selector:
        await nav.wait_for_ready(target.ready_selector)
    if target.scroll_selector:
        await nav.scroll_into_view(target.scroll_selector)
        await shot("Form section")

    if run_logger:
        run_logger.log_step("Form Fill")
    filler = FormFiller(
        page,
        action_timeout_ms=cfg.action_timeout_ms,
        run_logger=run_logger,
        dialog_grace_s=cfg.grace_period_s,
    )
    result.fill_report = await filler.fill(submission)
    if result.fill_report.skipped:
        logger.info(f"Skipped fields: {', '.join(sorted(result.fill_report.skipped))}")
    await shot("After submit")

    if run_logger:
        run_logger.log_step("Confirmation")
    try:
        result.payload = await reader.read(submission.labelled_values(result.fill_report.filled))
    except AckTimeoutError as e:
        logger.warning(f"Continuing without acknowledgment: {e}")
        result.ack_error = e
        result.payload = e.payload
        if run_logger:
            run_logger.log_warning(str(e))
    await shot("Confirmation")
    return result


async def run_target(
    target: TargetSpec,
    cfg: Optional[Config] = None,
    values: Optional[Mapping[str, str]] = None,
    run_logger=None,
    session: Optional[BrowserSession] = None,
    raise_errors: bool = False,
) -> RunResult:
    """
    Execute one run for target in a fresh browser.

    Errors are recorded on result.error after the browser is closed, or
    re-raised when raise_errors is set. An AckTimeoutError never fails the
    run; it is recorded on result.ack_error.

    Args:
        target: What to navigate to and fill
        cfg: Configuration (defaults to environment config)
        values: Field value overrides keyed by field key
        run_logger: Optional RunLogger
        session: Already-launched browser session to use; it is still closed here
        raise_errors: Re-raise the run's error instead of only recording it
    """
    cfg = cfg or default_config
    result = RunResult(target=target.name)
    started = time.monotonic()

    async def _run(browser_session: BrowserSession) -> None:
        await execute_target(browser_session.page, target, cfg, result, values, run_logger)

    try:
        if session is None:
            async with launch_browser(cfg) as browser_session:
                await asyncio.wait_for(_run(browser_session), timeout=cfg.run_timeout_s)
        else:
            try:
                await asyncio.wait_for(_run(session), timeout=cfg.run_timeout_s)
            finally:
                await session.close()
    except Exception as e:
        result.error = e
        if isinstance(e, asyncio.TimeoutError) and not isinstance(e, FormAutomationError):
            logger.error(f"Run for {target.name} exceeded {cfg.run_timeout_s}s")
        else:
            logger.error(f"Run for {target.name} failed: {e}")
        if raise_errors:
            raise
    finally:
        result.duration_ms = int((time.monotonic() - started) * 1000)
        if run_logger:
            run_logger.log_json(result.to_dict(), "Result")
            run_logger.finalize(result.success, result.duration_ms, str(result.error) if result.error else None)

    logger.info(f"Run for {target.name} finished in {result.duration_ms}ms")
    return result
