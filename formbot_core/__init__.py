"""
formbot_core package: declarative form automation on top of Playwright

    target = load_target("chaicode-signup")
    result = await run_target(target)

Components:
    NavigationController - goto, wait_for_ready, follow_link, scroll_into_view
    FormFiller           - fill a FormSubmission and click submit
    ConfirmationReader   - observe and dismiss the post-submit acknowledgment
    tools / FormAgent    - the same operations as typed tools for a language model
"""
from .config import Config, config
from .confirmation import ConfirmationReader, ReaderState
from .exceptions import (
    AckTimeoutError,
    ConfirmationStateError,
    FieldFillError,
    FormAutomationError,
    LinkNotFoundError,
    NavigationError,
    SubmitNotFoundError,
    TargetConfigError,
    WaitTimeoutError,
)
from .form_fill import FormFiller
from .models import ConfirmationPayload, FieldSpec, FillReport, FormSubmission
from .navigation import NavigationController
from .runner import RunResult, execute_target, run_target
from .targets import TargetSpec, list_targets, load_target

__all__ = [
    "Config",
    "config",
    "ConfirmationReader",
    "ReaderState",
    "FormFiller",
    "NavigationController",
    "FieldSpec",
    "FormSubmission",
    "FillReport",
    "ConfirmationPayload",
    "TargetSpec",
    "load_target",
    "list_targets",
    "RunResult",
    "run_target",
    "execute_target",
    "FormAutomationError",
    "NavigationError",
    "WaitTimeoutError",
    "LinkNotFoundError",
    "SubmitNotFoundError",
    "FieldFillError",
    "AckTimeoutError",
    "ConfirmationStateError",
    "TargetConfigError",
]
