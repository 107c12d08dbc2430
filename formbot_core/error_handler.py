"""
Error messages for people, not stack traces.

Maps engine exceptions (by class) and driver/LLM errors (by message text)
to a short message, a suggestion, a severity and whether a retry can help.
"""

import asyncio
import traceback
from typing import Dict, Optional

from .diagnostics import get_logger
from .exceptions import (
    AckTimeoutError,
    ConfirmationStateError,
    FieldFillError,
    LinkNotFoundError,
    NavigationError,
    SubmitNotFoundError,
    TargetConfigError,
    WaitTimeoutError,
)

logger = get_logger(__name__)


def _info(message: str, suggestion: str, severity: str = "error", can_retry: bool = False) -> Dict:
    return {"message": message, "suggestion": suggestion, "severity": severity, "can_retry": can_retry}


# Checked in order; WaitTimeoutError must come before asyncio.TimeoutError
ERROR_CLASSES = [
    (NavigationError, _info(
        "Could not load the target page",
        "Check that the URL is correct and the site is reachable",
        can_retry=True)),
    (WaitTimeoutError, _info(
        "The page never showed the expected form",
        "Check the ready selector or raise FORMBOT_READY_TIMEOUT_MS",
        "warning", can_retry=True)),
    (LinkNotFoundError, _info(
        "No link with the requested text on the page",
        "Check the link text in the target definition")),
    (SubmitNotFoundError, _info(
        "The form's submit button was not found",
        "Check submit_selector in the target definition")),
    (FieldFillError, _info(
        "A form field could not be filled",
        "The field may have been re-rendered or its selector matches several elements",
        can_retry=True)),
    (AckTimeoutError, _info(
        "The form was submitted but no confirmation was observed",
        "Raise FORMBOT_ACK_TIMEOUT_S or check the page's confirmation behaviour",
        "warning")),
    (ConfirmationStateError, _info(
        "Confirmation reader used out of order",
        "Arm a fresh reader before navigating",
        "critical")),
    (TargetConfigError, _info(
        "Invalid target definition",
        "Run 'formbot targets' or check the YAML file",
        "critical")),
    (asyncio.TimeoutError, _info(
        "The run exceeded its overall timeout",
        "Raise FORMBOT_RUN_TIMEOUT_S or check that the site is responsive",
        can_retry=True)),
]

# Lowercase substrings of driver and litellm messages
MESSAGE_PATTERNS = [
    ("executable doesn't exist", _info(
        "Browser is not installed",
        "Install it with: playwright install chromium",
        "critical")),
    ("target closed", _info(
        "The browser was closed during the operation",
        "Run the task again",
        can_retry=True)),
    ("strict mode violation", _info(
        "A selector matches more than one element",
        "Make the selector more specific")),
    ("api key", _info(
        "Language model credentials are missing or invalid",
        "Set the provider's API key (e.g. OPENAI_API_KEY) or FORMBOT_LLM_API_TOKEN",
        "critical")),
    ("timeout", _info(
        "The page took too long to respond",
        "Check your connection and that the site is reachable, then retry",
        "warning", can_retry=True)),
]

UNKNOWN = _info(
    "An unexpected error occurred while running the task",
    "Check the technical details or run again with FORMBOT_DEBUG=true",
    can_retry=True,
)


def _lookup(error: BaseException, text: str) -> Dict:
    for error_class, info in ERROR_CLASSES:
        if isinstance(error, error_class):
            return info
    lowered = text.lower()
    for pattern, info in MESSAGE_PATTERNS:
        if pattern in lowered:
            logger.debug(f"'{pattern}' matched: {info['message']}")
            return info
    return UNKNOWN


def format_user_friendly_error(
    error: BaseException,
    context: str = "general",
    technical_details: Optional[str] = None,
) -> Dict:
    """
    Describe error for a person.

    Returns a new dict with message, suggestion, technical, severity and can_retry.
    """
    text = str(error) or type(error).__name__
    return {**_lookup(error, text), "technical": technical_details or text}


def format_error_for_logging(error: BaseException, context: str = "") -> str:
    friendly = format_user_friendly_error(error, context)
    lines = [f"Context: {context}"] if context else []
    lines += [
        f"Error: {friendly['message']}",
        f"Suggestion: {friendly['suggestion']}",
        f"Technical: {friendly['technical']}",
    ]
    return "\n".join(lines)


def create_error_response(error: BaseException, context: str = "", include_stacktrace: bool = False) -> Dict:
    """JSON-ready failure document, as printed by `formbot agent` when a run crashes."""
    friendly = format_user_friendly_error(error, context)
    details = {"type": type(error).__name__}
    details.update((k, friendly[k]) for k in ("message", "suggestion", "severity", "can_retry"))
    if include_stacktrace:
        details["stacktrace"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        details["technical_details"] = friendly["technical"]
    return {"success": False, "error": details}
