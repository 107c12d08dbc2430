"""Form filling - maps a FormSubmission onto page elements and submits"""

from typing import Dict, List

from playwright.async_api import Error as PlaywrightError

from ..diagnostics import get_logger, mask
from ..exceptions import FieldFillError, SubmitNotFoundError
from ..models import FillReport, FormSubmission
from .field_filler import fill_field

logger = get_logger(__name__)


class FormFiller:
    """
    Fills the fields of one FormSubmission in order, then clicks submit.

    A field whose selector matches nothing is skipped and reported, so
    optional fields (e.g. a confirm-password box missing on one form variant)
    never block submission. A field that resolves but throws while being
    filled aborts the whole call with FieldFillError.

    The submit click may raise a dialog of the page's own; the driver holds
    the click until that dialog is accepted, so its timeout also covers
    dialog_grace_s.
    """

    def __init__(
        self,
        page,
        action_timeout_ms: int = 5000,
        trigger_events: bool = True,
        run_logger=None,
        dialog_grace_s: float = 0.0,
    ):
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.dialog_grace_s = dialog_grace_s
        self.trigger_events = trigger_events
        self.run_logger = run_logger

    async def fill(self, submission: FormSubmission) -> FillReport:
        filled: List[str] = []
        skipped: List[str] = []
        values: Dict[str, str] = {}

        for spec in submission.fields:
            locator = self.page.locator(spec.selector)
            try:
                count = await locator.count()
            except PlaywrightError as e:
                # Malformed selector: resolves to nothing
                logger.warning(f"Selector for {spec.key} did not resolve: {e}")
                count = 0

            if count == 0:
                logger.info(f"Field not found: {spec.key} ({spec.selector}), skipping")
                skipped.append(spec.key)
                continue

            logger.info(f"Filling {spec.key}: {mask(spec.value, spec.secret)!r}")
            try:
                await fill_field(locator, spec.value, self.action_timeout_ms, self.trigger_events)
            except PlaywrightError as e:
                raise FieldFillError(spec.key, str(e)) from e
            filled.append(spec.key)
            values[spec.key] = spec.value

        await self._submit(submission.submit_selector)

        report = FillReport(
            filled=frozenset(filled),
            skipped=frozenset(skipped),
            values=values,
            submitted=True,
        )
        if self.run_logger:
            self._log_summary(submission, report)
        return report

    async def _submit(self, selector: str) -> None:
        submit = self.page.locator(selector)
        try:
            count = await submit.count()
        except PlaywrightError as e:
            raise SubmitNotFoundError(selector) from e
        if count == 0:
            raise SubmitNotFoundError(selector)
        logger.info(f"Clicking submit: {selector}")
        await submit.first.click(timeout=self.submit_timeout_ms)

    @property
    def submit_timeout_ms(self) -> int:
        return self.action_timeout_ms + int(self.dialog_grace_s * 1000)

    def _log_summary(self, submission: FormSubmission, report: FillReport) -> None:
        rows = []
        for spec in submission.fields:
            status = "FILLED" if spec.key in report.filled else "SKIPPED"
            rows.append([spec.key, mask(spec.value, spec.secret)[:30], spec.selector[:40], status])
        self.run_logger.log_table(["Field", "Value", "Selector", "Status"], rows, "Form Fields Summary")
