"""
Tool Registry - exposes the engine's operations as typed tools for an LLM planner.

Schemas are generated from the real function signatures; the first
parameter (the AutomationSession) is internal and never exposed. Tools that
take `values` get one string property per field of the session's target.
"""
import inspect
from pathlib import Path
from typing import Any, Callable, Dict, List, get_type_hints

from playwright.async_api import Error as PlaywrightError

from .diagnostics import get_logger, mask
from .error_handler import format_user_friendly_error
from .exceptions import FormAutomationError, LinkNotFoundError
from .session import AutomationSession

logger = get_logger(__name__)


async def take_screenshot(session: AutomationSession, filename: str = "") -> str:
    """Take a screenshot of the current page, saved like step_1_<uuid>.png"""
    name = Path(filename).name if filename else None
    path = await session.recorder.capture(label=name or "", filename=name)
    return f"Screenshot saved as {path}"


async def open_browser(session: AutomationSession, url: str) -> str:
    """Open the given URL in the browser tab"""
    await session.nav.goto(url)
    return f"Opened {url}"


async def open_url(session: AutomationSession, link_text: str) -> str:
    """Navigate by clicking the link with the given visible text"""
    try:
        await session.nav.follow_link(link_text)
    except LinkNotFoundError:
        return f"Could not find link with text: {link_text}"
    return f"Clicked link with text: {link_text}"


async def scroll_to(session: AutomationSession, selector: str) -> str:
    """Scroll the element matching the CSS selector into view"""
    if await session.nav.scroll_into_view(selector):
        return f"Scrolled to {selector}"
    return f"Nothing to scroll to for {selector}"


async def fill_form(session: AutomationSession, values: Dict[str, str]) -> str:
    """Find the form fields, fill them with the given values and click submit"""
    target = session.target
    if target.ready_selector:
        await session.nav.wait_for_ready(target.ready_selector)
    if target.scroll_selector:
        await session.nav.scroll_into_view(target.scroll_selector)
    submission = target.submission.with_values(values)
    report = await session.filler.fill(submission)
    session.last_report = report
    if report.skipped:
        return f"Submitted (fields not found: {', '.join(sorted(report.skipped))})"
    return "Submitted"


async def show_form_values(session: AutomationSession, values: Dict[str, str]) -> str:
    """Show an alert with the values that were filled in the form"""
    submission = session.target.submission.with_values(values)
    keys = session.last_report.filled if session.last_report else None
    payload = await session.confirm(submission.labelled_values(keys))
    return ", ".join(f"{label}: {value}" for label, value in payload.fields.items())


async def click_screen(session: AutomationSession, x: float, y: float) -> str:
    """Click on the screen at the given coordinates"""
    await session.page.mouse.click(x, y)
    return f"Clicked at ({x}, {y})"


async def send_keys(session: AutomationSession, text: str) -> str:
    """Send keystrokes to the currently focused element"""
    await session.page.keyboard.type(text)
    return f"Typed text is {text}"


async def close_browser(session: AutomationSession) -> str:
    """Close the browser"""
    await session.close()
    return "Browser closed"


TOOL_FUNCTIONS: Dict[str, Callable] = {
    "take_screenshot": take_screenshot,
    "open_browser": open_browser,
    "open_url": open_url,
    "scroll_to": scroll_to,
    "fill_form": fill_form,
    "show_form_values": show_form_values,
    "click_screen": click_screen,
    "send_keys": send_keys,
    "close_browser": close_browser,
}

PARAM_DESCRIPTIONS = {
    "x": "x axis on the screen where we need to click",
    "y": "y axis on the screen where we need to click",
    "text": "Text sent as keystrokes",
    "link_text": "Visible text of the link",
    "filename": "File name for the screenshot",
}

JSON_TYPES = {str: "string", int: "number", float: "number", bool: "boolean"}


def get_function_schema(name: str, func: Callable, session: AutomationSession) -> Dict[str, Any]:
    """OpenAI-style function tool definition built from the signature."""
    sig = inspect.signature(func)
    hints = get_type_hints(func)
    doc = inspect.getdoc(func) or ""
    description = doc.split("\n")[0] if doc else name

    properties: Dict[str, Any] = {}
    required: List[str] = []
    for param_name, param in sig.parameters.items():
        if param_name == "session":
            continue
        if param_name == "values":
            for spec in session.target.submission.fields:
                properties[spec.key] = {"type": "string", "description": f"Value for {spec.display_label}"}
                required.append(spec.key)
            continue

        prop = {"type": JSON_TYPES.get(hints.get(param_name, str), "string")}
        if param_name in PARAM_DESCRIPTIONS:
            prop["description"] = PARAM_DESCRIPTIONS[param_name]
        properties[param_name] = prop
        if param.default is inspect.Parameter.empty:
            required.append(param_name)

    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def tool_schemas(session: AutomationSession) -> List[Dict[str, Any]]:
    return [get_function_schema(name, func, session) for name, func in TOOL_FUNCTIONS.items()]


def _secret_keys(session: AutomationSession) -> set:
    return {spec.key for spec in session.target.submission.fields if spec.secret}


async def execute_tool(session: AutomationSession, tool_name: str, args: Dict[str, Any]) -> str:
    """
    Execute one tool call and return its result as text for the model.

    Engine and driver errors come back as "Error: ..." strings so the
    planner can decide what to do next.
    """
    func = TOOL_FUNCTIONS.get(tool_name)
    if not func:
        return f"Error: unknown tool {tool_name}"

    args = args or {}
    params = inspect.signature(func).parameters
    if "values" in params:
        kwargs = {"values": {str(k): str(v) for k, v in args.items()}}
    else:
        kwargs = {k: v for k, v in args.items() if k in params and k != "session"}

    secrets = _secret_keys(session)
    shown = {k: mask(str(v), k in secrets) for k, v in args.items()}
    logger.info(f"[{tool_name}] Executing with args: {shown}")

    try:
        result = await func(session, **kwargs)
    except (FormAutomationError, PlaywrightError, ValueError, TypeError) as e:
        friendly = format_user_friendly_error(e, context=tool_name)
        logger.warning(f"[{tool_name}] failed: {e}")
        return f"Error: {friendly['message']} ({friendly['technical']})"

    logger.info(f"[{tool_name}] {result}")
    return str(result)
