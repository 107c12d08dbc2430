"""
Form automation exceptions

Each error is raised by the component that detects the condition and
propagates unchanged to the caller.
"""

from typing import Optional

from .models import ConfirmationPayload


class FormAutomationError(Exception):
    """Base exception for formbot"""
    pass


class NavigationError(FormAutomationError):
    """Navigation request errored or timed out"""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Navigation failed for {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class WaitTimeoutError(FormAutomationError, TimeoutError):
    """Readiness signal did not attach within the timeout"""

    def __init__(self, selector: str, timeout_ms: int):
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(f"Timeout {timeout_ms}ms exceeded waiting for selector {selector!r}")


class LinkNotFoundError(FormAutomationError):
    """No anchor with the requested visible text"""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Could not find link with text: {text}")


class SubmitNotFoundError(FormAutomationError):
    """Submit control did not resolve"""

    def __init__(self, selector: str):
        self.selector = selector
        super().__init__(f"Submit control not found: {selector}")


class FieldFillError(FormAutomationError):
    """A resolved field threw while being filled"""

    def __init__(self, key: str, reason: str = ""):
        self.key = key
        self.reason = reason
        message = f"Failed to fill field {key!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AckTimeoutError(FormAutomationError):
    """No acknowledgment observed in time. Recoverable: carries an empty payload."""

    def __init__(self, timeout_s: float, payload: Optional[ConfirmationPayload] = None):
        self.timeout_s = timeout_s
        self.payload = payload if payload is not None else ConfirmationPayload()
        super().__init__(f"No acknowledgment observed within {timeout_s}s")


class ConfirmationStateError(FormAutomationError):
    """Illegal transition of the confirmation reader state machine"""
    pass


class TargetConfigError(FormAutomationError):
    """Invalid or missing target definition"""
    pass
