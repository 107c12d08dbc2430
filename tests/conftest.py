"""Shared fixtures built on the fake page from tests/fakes.py"""

from dataclasses import replace

import pytest

from formbot_core.config import config
from formbot_core.models import FieldSpec, FormSubmission
from formbot_core.targets import TargetSpec

from fakes import FakePage


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def fast_config(tmp_path):
    """Config with timings scaled down for tests"""
    return replace(
        config,
        headless=True,
        screenshot_dir=tmp_path / "screenshots",
        log_dir=tmp_path / "logs",
        nav_timeout_ms=200,
        ready_timeout_ms=200,
        link_wait_ms=100,
        action_timeout_ms=200,
        grace_period_s=0.01,
        dialog_wait_s=0.05,
        ack_timeout_s=1.0,
        toast_duration_ms=50,
        run_timeout_s=5.0,
    )


@pytest.fixture
def signup_submission():
    return FormSubmission((
        FieldSpec("firstName", "#firstName", "Santosh", label="FirstName"),
        FieldSpec("email", "#email", "santosh@gmail.com", label="Email"),
        FieldSpec("password", "#password", "sde00918#$", label="Password", secret=True),
        FieldSpec("confirmPassword", "#confirmPassword", "sde00918#$", label="ConfirmPassword", secret=True),
    ))


@pytest.fixture
def contact_target():
    submission = FormSubmission((
        FieldSpec("name", '[name="name"]', "Santosh", label="Name"),
        FieldSpec("mobileNo", '[name="mobileNo"]', "9988776655", label="MobileNo"),
        FieldSpec("description", 'textarea[name="description"]', "Hello", label="Message"),
    ))
    return TargetSpec(
        name="contact",
        url="https://forms.test/",
        submission=submission,
        links=("Contact",),
        ready_selector="div.mil-section-title",
        scroll_selector="div.mil-section-title",
        description="contact form",
    )


def add_contact_form(page: FakePage) -> None:
    """Elements the contact page attaches once its link is followed"""
    page.add("div.mil-section-title")
    page.add('[name="name"]')
    page.add('[name="mobileNo"]')
    page.add('textarea[name="description"]')
    page.add('button[type="submit"]')


@pytest.fixture
def contact_page(page):
    """Landing page whose Contact link reveals the contact form"""
    page.add_link("Home")
    page.add_link(" Contact ", on_click=lambda: add_contact_form(page))
    return page
