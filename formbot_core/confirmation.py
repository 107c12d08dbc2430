"""
Confirmation reader - captures the page's acknowledgment of a submission.

Channels, in precedence order:
    1. A native dialog raised by the page itself after submit.
    2. An injected message: the alert preserved at arm() time, else the live
       window.alert, else (or when the page swallows alerts) a fixed-position
       toast that removes itself.

Lifecycle of one reader:
    IDLE -> ARMED -> TRIGGERED -> DISPLAYED -> DISMISSED

arm() must run before navigation and before the submit click: dialog events
are not replayable. Each run constructs a fresh reader.
"""

import asyncio
from enum import Enum
from typing import Mapping, Optional

from playwright.async_api import Error as PlaywrightError

from .diagnostics import get_logger
from .exceptions import AckTimeoutError, ConfirmationStateError
from .form_fill.parser import format_confirmation, parse_confirmation
from .js_scripts import PRESERVE_NATIVE_ALERT_JS, SHOW_ALERT_JS, SHOW_TOAST_JS, TOAST_ATTRIBUTE, TOAST_SELECTOR
from .models import ConfirmationPayload

logger = get_logger(__name__)


class ReaderState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    TRIGGERED = "triggered"
    DISPLAYED = "displayed"
    DISMISSED = "dismissed"


_NEXT_STATE = {
    ReaderState.IDLE: ReaderState.ARMED,
    ReaderState.ARMED: ReaderState.TRIGGERED,
    ReaderState.TRIGGERED: ReaderState.DISPLAYED,
    ReaderState.DISPLAYED: ReaderState.DISMISSED,
}


class ConfirmationReader:
    def __init__(
        self,
        page,
        grace_period_s: float = 5.0,
        dialog_wait_s: float = 2.0,
        ack_timeout_s: float = 15.0,
        toast_duration_ms: int = 4000,
        run_logger=None,
    ):
        self.page = page
        self.grace_period_s = grace_period_s
        self.dialog_wait_s = dialog_wait_s
        self.ack_timeout_s = ack_timeout_s
        self.toast_duration_ms = toast_duration_ms
        self.run_logger = run_logger

        self.state = ReaderState.IDLE
        self.channel: Optional[str] = None
        self.message: Optional[str] = None
        self.dismiss_count = 0
        self._pending_channel: Optional[str] = None
        self._displayed = asyncio.Event()
        self._dismissed = asyncio.Event()

    def _advance(self, to: ReaderState) -> None:
        if _NEXT_STATE.get(self.state) is not to:
            raise ConfirmationStateError(f"Cannot move from {self.state.value} to {to.value}")
        logger.debug(f"Confirmation reader: {self.state.value} -> {to.value}")
        self.state = to
        if to is ReaderState.DISPLAYED:
            self._displayed.set()
        elif to is ReaderState.DISMISSED:
            self.dismiss_count += 1
            self._dismissed.set()

    async def arm(self) -> None:
        """Subscribe to dialogs and preserve the native alert on every document."""
        if self.state is not ReaderState.IDLE:
            raise ConfirmationStateError("Reader already armed; construct a new reader per run")
        self._advance(ReaderState.ARMED)
        self.page.on("dialog", self._on_dialog)
        await self.page.add_init_script(script=PRESERVE_NATIVE_ALERT_JS)

    def disarm(self) -> None:
        self.page.remove_listener("dialog", self._on_dialog)

    async def _on_dialog(self, dialog) -> None:
        if self.state is not ReaderState.ARMED:
            # Single-shot: later dialogs must not block the page
            logger.debug(f"Accepting extra {dialog.type} dialog: {dialog.message!r}")
            await dialog.accept()
            return

        self._advance(ReaderState.TRIGGERED)
        self.channel = self._pending_channel or "page-dialog"
        self.message = dialog.message
        self._advance(ReaderState.DISPLAYED)
        logger.info(f"Dialog message: {self.message!r}")

        await asyncio.sleep(self.grace_period_s)
        try:
            await dialog.accept()
        except PlaywrightError as e:
            # Already closed by the page or the driver
            logger.warning(f"Dialog was gone before it could be accepted: {e}")
        self._advance(ReaderState.DISMISSED)

    async def read(self, values: Optional[Mapping[str, str]] = None) -> ConfirmationPayload:
        """
        Wait for the acknowledgment and return it as a payload.

        Args:
            values: {label: value} to show through the injected channel when
                the page raises no dialog of its own. Without values only the
                page's own dialog is awaited.

        Raises:
            AckTimeoutError: nothing acknowledged within ack_timeout_s; carries
                an empty payload and is recoverable.
        """
        if self.state is ReaderState.IDLE:
            raise ConfirmationStateError("arm() must run before read()")
        try:
            await asyncio.wait_for(self._acknowledge(values), timeout=self.ack_timeout_s)
        except asyncio.TimeoutError as e:
            logger.warning(f"No acknowledgment within {self.ack_timeout_s}s (state: {self.state.value})")
            raise AckTimeoutError(self.ack_timeout_s) from e

        payload = ConfirmationPayload(
            fields=parse_confirmation(self.message),
            channel=self.channel,
            raw_message=self.message,
        )
        if self.run_logger:
            self.run_logger.log_kv("confirmation_channel", str(self.channel))
            self.run_logger.log_code("text", self.message or "")
        return payload

    async def _acknowledge(self, values: Optional[Mapping[str, str]]) -> None:
        if not await self._wait(self._displayed, self.dialog_wait_s):
            if values is None:
                await self._displayed.wait()
            else:
                await self._inject(format_confirmation(values))
        await self._await_dismissal()

    async def _inject(self, message: str) -> None:
        channel = await self.page.evaluate(SHOW_ALERT_JS, message)
        if channel:
            self._pending_channel = channel
            if await self._wait(self._displayed, self.dialog_wait_s):
                return
            logger.warning(f"{channel} raised no dialog, falling back to on-page toast")
        if self.state is ReaderState.ARMED:
            await self._show_toast(message)

    async def _show_toast(self, message: str) -> None:
        self._advance(ReaderState.TRIGGERED)
        await self.page.evaluate(
            SHOW_TOAST_JS,
            {"message": message, "duration": self.toast_duration_ms, "marker": TOAST_ATTRIBUTE},
        )
        self.channel = "toast"
        self.message = message
        self._advance(ReaderState.DISPLAYED)
        logger.info("Confirmation shown as on-page toast")

    async def _await_dismissal(self) -> None:
        if self.channel == "toast":
            # timeout=0 disables the driver timeout; read() bounds the wait
            await self.page.wait_for_selector(TOAST_SELECTOR, state="detached", timeout=0)
            self._advance(ReaderState.DISMISSED)
        else:
            await self._dismissed.wait()

    @staticmethod
    async def _wait(event: asyncio.Event, timeout: float) -> bool:
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
