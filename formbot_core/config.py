#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Config:
    """Application configuration"""
    headless: bool = os.getenv("FORMBOT_HEADLESS", "false").lower() in ["true", "1", "yes"]
    slow_mo_ms: int = int(os.getenv("FORMBOT_SLOW_MO_MS", "0"))
    screenshot_dir: Path = Path(os.getenv("FORMBOT_SCREENSHOT_DIR", "./screenshots"))
    log_dir: Path = Path(os.getenv("FORMBOT_LOG_DIR", "./logs"))
    enable_debug: bool = os.getenv("FORMBOT_DEBUG", "false").lower() == "true"

    # Navigation
    nav_timeout_ms: int = int(os.getenv("FORMBOT_NAV_TIMEOUT_MS", "10000"))
    ready_timeout_ms: int = int(os.getenv("FORMBOT_READY_TIMEOUT_MS", "10000"))
    link_wait_ms: int = int(os.getenv("FORMBOT_LINK_WAIT_MS", "5000"))
    action_timeout_ms: int = int(os.getenv("FORMBOT_ACTION_TIMEOUT_MS", "5000"))

    # Confirmation reader
    grace_period_s: float = float(os.getenv("FORMBOT_GRACE_PERIOD_S", "5.0"))
    dialog_wait_s: float = float(os.getenv("FORMBOT_DIALOG_WAIT_S", "2.0"))
    ack_timeout_s: float = float(os.getenv("FORMBOT_ACK_TIMEOUT_S", "15.0"))
    toast_duration_ms: int = int(os.getenv("FORMBOT_TOAST_DURATION_MS", "4000"))

    # Whole run, imposed by the runner
    run_timeout_s: float = float(os.getenv("FORMBOT_RUN_TIMEOUT_S", "120"))

    # Agent variant
    max_steps: int = int(os.getenv("FORMBOT_MAX_STEPS", "20"))
    llm_provider: str = os.getenv("FORMBOT_LLM_PROVIDER", "openai/gpt-4o-mini")

config = Config()
