"""
Unit tests for screenshot organization.

Tests per-run directories, step file naming and cleanup.
"""

import os
import re
import time
from pathlib import Path

import pytest

from formbot_core.config import config
from formbot_core.screenshots import (
    ScreenshotRecorder,
    cleanup_old_screenshots,
    get_run_screenshot_dir,
    step_filename,
)


@pytest.fixture
def temp_screenshot_dir(monkeypatch, tmp_path):
    """Point the configured screenshot directory at a temp dir."""
    monkeypatch.setattr(config, "screenshot_dir", tmp_path)
    return tmp_path


def test_get_run_screenshot_dir(temp_screenshot_dir):
    run_dir = get_run_screenshot_dir("ui.chaicode.com", "20251125-081436")

    assert run_dir.is_dir()
    assert run_dir.name == "run-20251125-081436"
    assert run_dir.parent.name == "ui.chaicode.com"
    assert run_dir.parent.parent == temp_screenshot_dir


def test_run_dir_with_explicit_base(tmp_path):
    run_dir = get_run_screenshot_dir("nextbuild.in", "1", base_dir=tmp_path / "shots")
    assert run_dir == tmp_path / "shots" / "nextbuild.in" / "run-1"


def test_step_filename_is_unique():
    first, second = step_filename(1), step_filename(1)
    assert first != second
    assert re.fullmatch(r"step_1_[0-9a-f\-]{36}\.png", first)


@pytest.mark.asyncio
async def test_recorder_numbers_steps(page, tmp_path):
    recorder = ScreenshotRecorder.for_url(page, "https://ui.chaicode.com/auth/signup", run_id="r1", base_dir=tmp_path)

    first = await recorder.capture("Landing page")
    second = await recorder.capture("After submit")

    assert Path(first).name.startswith("step_1_")
    assert Path(second).name.startswith("step_2_")
    assert Path(first).parent == tmp_path / "ui.chaicode.com" / "run-r1"
    assert recorder.paths == [first, second]
    assert page.screenshots == [first, second]


@pytest.mark.asyncio
async def test_recorder_explicit_filename(page, tmp_path):
    recorder = ScreenshotRecorder(page, tmp_path)
    path = await recorder.capture(filename="final.png")
    assert path == str(tmp_path / "final.png")
    assert recorder.step == 1


def test_cleanup_old_screenshots(temp_screenshot_dir):
    old_dir = get_run_screenshot_dir("example.com", "old")
    new_dir = get_run_screenshot_dir("example.com", "new")
    ten_days_ago = time.time() - 10 * 86400
    os.utime(old_dir, (ten_days_ago, ten_days_ago))

    removed = cleanup_old_screenshots(max_age_days=7)

    assert removed == 1
    assert not old_dir.exists()
    assert new_dir.exists()


def test_cleanup_missing_base(tmp_path):
    assert cleanup_old_screenshots(base_dir=tmp_path / "nothing") == 0
