"""Tests for ConfirmationReader channels and its state machine."""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from formbot_core.confirmation import ConfirmationReader, ReaderState
from formbot_core.exceptions import AckTimeoutError, ConfirmationStateError
from formbot_core.js_scripts import PRESERVE_NATIVE_ALERT_JS, TOAST_SELECTOR

pytestmark = pytest.mark.asyncio

VALUES = {"Name": "Santosh", "MobileNo": "9988776655"}


def make_reader(page, **overrides):
    options = dict(grace_period_s=0.01, dialog_wait_s=0.05, ack_timeout_s=1.0, toast_duration_ms=50)
    options.update(overrides)
    return ConfirmationReader(page, **options)


async def armed_reader(page, **overrides):
    reader = make_reader(page, **overrides)
    await reader.arm()
    await page.goto("https://forms.test/")
    return reader


class TestArming:

    async def test_arm_subscribes_and_installs_script(self, page):
        reader = make_reader(page)
        await reader.arm()
        assert reader.state is ReaderState.ARMED
        assert len(page.handlers["dialog"]) == 1
        assert PRESERVE_NATIVE_ALERT_JS in page.init_scripts

    async def test_arm_twice_rejected(self, page):
        reader = make_reader(page)
        await reader.arm()
        with pytest.raises(ConfirmationStateError):
            await reader.arm()

    async def test_read_before_arm_rejected(self, page):
        with pytest.raises(ConfirmationStateError):
            await make_reader(page).read(VALUES)

    async def test_disarm(self, page):
        reader = make_reader(page)
        await reader.arm()
        reader.disarm()
        assert page.handlers["dialog"] == []


class TestPageDialog:

    async def test_page_dialog_wins(self, page):
        reader = await armed_reader(page)
        dialog = page.raise_dialog("Name: Santosh\nMobileNo: 9988776655")

        payload = await reader.read({"Name": "ignored"})

        assert payload.channel == "page-dialog"
        assert payload.fields == VALUES
        assert dialog.accepted
        assert reader.state is ReaderState.DISMISSED
        assert reader.dismiss_count == 1
        assert page.toast_messages == []
        assert len(page.dialogs) == 1

    async def test_signup_dialog_parsed(self, page):
        reader = await armed_reader(page)
        page.raise_dialog("FirstName: Santosh\nLastName: Vishwakarma")

        payload = await reader.read()

        assert payload.fields == {"FirstName": "Santosh", "LastName": "Vishwakarma"}
        assert reader.dismiss_count == 1

    async def test_waits_for_page_dialog_without_values(self, page):
        reader = await armed_reader(page)
        asyncio.get_running_loop().call_later(0.1, page.raise_dialog, "Thanks!")

        payload = await reader.read()

        assert payload.channel == "page-dialog"
        assert payload.raw_message == "Thanks!"
        assert payload.fields == {}

    async def test_dismissed_only_after_grace_period(self, page):
        reader = await armed_reader(page, grace_period_s=0.2)
        loop = asyncio.get_running_loop()
        started = loop.time()
        page.raise_dialog("Name: Santosh")

        await reader.read()

        assert loop.time() - started >= 0.15

    async def test_single_shot(self, page):
        reader = await armed_reader(page)
        page.raise_dialog("Name: Santosh")
        await reader.read()

        extra = page.raise_dialog("Second alert")
        await asyncio.gather(*page.tasks)

        assert extra.accepted
        assert reader.dismiss_count == 1
        assert reader.message == "Name: Santosh"

    async def test_dialog_closed_elsewhere_still_returns_payload(self, page):
        reader = await armed_reader(page, ack_timeout_s=0.3)
        dialog = page.raise_dialog("Name: Santosh", accept_error=PlaywrightError("Target closed"))

        payload = await reader.read()

        assert payload.fields == {"Name": "Santosh"}
        assert payload.channel == "page-dialog"
        assert not dialog.accepted
        assert reader.state is ReaderState.DISMISSED
        assert reader.dismiss_count == 1


class TestInjectedChannel:

    async def test_preserved_native_alert(self, page):
        reader = await armed_reader(page)

        payload = await reader.read(VALUES)

        assert payload.channel == "native-alert"
        assert payload.fields == VALUES
        assert page.dialogs[0].message == "Name: Santosh\nMobileNo: 9988776655"
        assert page.dialogs[0].accepted
        assert reader.state is ReaderState.DISMISSED

    async def test_live_alert_when_not_preserved(self, page):
        page.native_alert_available = False
        reader = await armed_reader(page)

        payload = await reader.read(VALUES)

        assert payload.channel == "alert"
        assert payload.fields == VALUES

    async def test_toast_when_no_alert(self, page):
        page.native_alert_available = False
        page.alert_available = False
        reader = await armed_reader(page)

        payload = await reader.read(VALUES)

        assert payload.channel == "toast"
        assert payload.fields == VALUES
        assert page.toast_messages == ["Name: Santosh\nMobileNo: 9988776655"]
        assert TOAST_SELECTOR not in page.elements
        assert reader.state is ReaderState.DISMISSED

    async def test_toast_when_alert_suppressed(self, page):
        page.alert_suppressed = True
        reader = await armed_reader(page)

        payload = await reader.read(VALUES)

        assert payload.channel == "toast"
        assert page.dialogs == []

    async def test_toast_outliving_timeout(self, page):
        page.native_alert_available = False
        page.alert_available = False
        reader = await armed_reader(page, toast_duration_ms=5000, ack_timeout_s=0.3)

        with pytest.raises(AckTimeoutError) as exc:
            await reader.read(VALUES)
        assert exc.value.payload.is_empty


async def test_no_acknowledgment_times_out(page):
    reader = await armed_reader(page, ack_timeout_s=0.1)

    with pytest.raises(AckTimeoutError) as exc:
        await reader.read()

    assert exc.value.timeout_s == 0.1
    assert exc.value.payload.is_empty
    assert reader.state is ReaderState.ARMED
