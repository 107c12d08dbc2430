"""
Per-run screenshot evidence.

Layout::

    <FORMBOT_SCREENSHOT_DIR>/<domain>/run-<run_id>/step_<n>_<uuid4>.png

The step number orders the files of one run; the uuid keeps names unique
when a step is captured twice.
"""
import shutil
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from .config import config
from .diagnostics import get_logger

logger = get_logger(__name__)


def _base(base_dir: Optional[Path]) -> Path:
    return Path(base_dir if base_dir else config.screenshot_dir)


def get_run_screenshot_dir(domain: str, run_id: str, base_dir: Optional[Path] = None) -> Path:
    """Create (if needed) and return the directory for one run on one domain."""
    run_dir = _base(base_dir) / (domain or "unknown") / f"run-{run_id}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def step_filename(step: int) -> str:
    return f"step_{step}_{uuid.uuid4()}.png"


class ScreenshotRecorder:
    """Numbers and stores the screenshots of a single run."""

    def __init__(self, page, directory: Path, full_page: bool = False, run_logger=None):
        self.page = page
        self.directory = Path(directory)
        self.full_page = full_page
        self.run_logger = run_logger
        self.step = 0
        self.paths: List[str] = []

    @classmethod
    def for_url(cls, page, url: str, run_id: Optional[str] = None, base_dir: Optional[Path] = None, **kwargs):
        """Recorder whose directory is derived from the url's host and a timestamp run id."""
        host = urlparse(url).hostname or "unknown"
        run_dir = get_run_screenshot_dir(host, run_id or datetime.now().strftime("%Y%m%d-%H%M%S"), base_dir)
        return cls(page, run_dir, **kwargs)

    async def capture(self, label: str = "", filename: Optional[str] = None) -> str:
        self.step += 1
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / (filename or step_filename(self.step))

        await self.page.screenshot(path=str(target), full_page=self.full_page)
        self.paths.append(str(target))
        logger.debug(f"Step {self.step} screenshot: {target}")
        if self.run_logger:
            self.run_logger.log_image(str(target), alt=label or target.name)
        return str(target)


def cleanup_old_screenshots(max_age_days: int = 7, base_dir: Optional[Path] = None) -> int:
    """Delete run-* directories not modified for max_age_days; returns how many went."""
    base = _base(base_dir)
    if not base.is_dir():
        return 0

    cutoff = time.time() - max_age_days * 86400
    stale = [d for d in base.glob("*/run-*") if d.is_dir() and d.stat().st_mtime < cutoff]

    removed = 0
    for run_dir in stale:
        try:
            shutil.rmtree(run_dir)
        except OSError as e:
            logger.warning(f"Could not remove {run_dir}: {e}")
            continue
        removed += 1
        logger.info(f"Removed old screenshots: {run_dir}")
    return removed
