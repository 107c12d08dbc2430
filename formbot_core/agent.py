"""
FormAgent - lets a language model drive the engine through the tool registry.

Loop:
    1. Send instructions + task + tool schemas to the model (litellm)
    2. Execute every requested tool call against the AutomationSession
    3. Feed the tool outputs back as "tool" messages
    4. Stop when the model answers without tool calls or max_steps is reached
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import litellm

from .diagnostics import get_logger
from .llm_config import LLMConfig
from .session import AutomationSession
from .tools import execute_tool, tool_schemas

logger = get_logger(__name__)


INSTRUCTIONS_TEMPLATE = """You are a web automation agent. You can open pages, follow links, scroll, fill forms and take screenshots.

The target page is {url}.
{navigation}
Rules:
- After every tool call, take a screenshot with take_screenshot.
- Find the {description} and fill it with this data:
{field_lines}
- fill_form fills the fields and clicks the submit button.
- After submitting, call show_form_values with the same values, then close the browser.
"""


@dataclass
class ToolCallRecord:
    name: str
    arguments: Dict[str, Any]
    output: str


@dataclass
class AgentResult:
    final_output: str = ""
    steps: int = 0
    tool_calls: List[ToolCallRecord] = field(default_factory=list)
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "final_output": self.final_output,
            "steps": self.steps,
            "completed": self.completed,
            "tool_calls": [
                {"name": c.name, "arguments": c.arguments, "output": c.output}
                for c in self.tool_calls
            ],
        }


def build_instructions(session: AutomationSession) -> str:
    target = session.target
    submission = target.submission
    field_lines = "\n".join(
        f"  {spec.key} ({spec.display_label}): {spec.value}" for spec in submission.fields
    )
    navigation = ""
    if target.links:
        navigation = "Reach the form by clicking: " + " -> ".join(target.links) + "\n"
    return INSTRUCTIONS_TEMPLATE.format(
        url=target.url,
        navigation=navigation,
        description=target.description or "form",
        field_lines=field_lines,
    )


def _parse_arguments(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Could not parse tool arguments: {raw!r}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _assistant_message(message) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"role": "assistant", "content": message.content}
    tool_calls = getattr(message, "tool_calls", None) or []
    if tool_calls:
        entry["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in tool_calls
        ]
    return entry


class FormAgent:
    def __init__(
        self,
        session: AutomationSession,
        llm_config: Optional[LLMConfig] = None,
        instructions: Optional[str] = None,
        max_steps: int = 20,
    ):
        self.session = session
        self.llm_config = llm_config or LLMConfig.from_env()
        self.instructions = instructions or build_instructions(session)
        self.max_steps = max_steps

    async def run(self, task: str) -> AgentResult:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": task},
        ]
        tools = tool_schemas(self.session)
        result = AgentResult()

        for step in range(1, self.max_steps + 1):
            result.steps = step
            response = await litellm.acompletion(
                messages=messages,
                tools=tools,
                tool_choice="auto",
                **self.llm_config.completion_kwargs(),
            )
            message = response.choices[0].message
            messages.append(_assistant_message(message))

            tool_calls = getattr(message, "tool_calls", None) or []
            if not tool_calls:
                result.final_output = message.content or ""
                result.completed = True
                logger.info(f"Agent finished after {step} step(s)")
                return result

            for call in tool_calls:
                name = call.function.name
                arguments = _parse_arguments(call.function.arguments)
                output = await execute_tool(self.session, name, arguments)
                result.tool_calls.append(ToolCallRecord(name, arguments, output))
                messages.append({"role": "tool", "tool_call_id": call.id, "content": output})

        logger.warning(f"Agent stopped after reaching max_steps={self.max_steps}")
        return result
