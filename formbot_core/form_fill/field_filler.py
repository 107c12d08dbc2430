"""Single-field filling on a resolved Playwright locator"""


async def fill_field(locator, value: str, timeout_ms: int = 5000, trigger_events: bool = True) -> None:
    """Fill a resolved field and fire the events client-side validation listens for.

    The locator is strict: a selector matching several elements makes the
    driver raise, which the caller reports as a fill failure.
    """
    await locator.fill(value, timeout=timeout_ms)
    if trigger_events:
        await _trigger_field_events(locator)


async def _trigger_field_events(locator) -> None:
    """Trigger change/blur events on a field to activate client-side validation."""
    await locator.dispatch_event("change")
    await locator.dispatch_event("blur")
