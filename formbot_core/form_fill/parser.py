"""Parsers for field overrides and confirmation messages"""

import json
import re
from typing import Dict, Mapping


def parse_form_pairs(instruction: str | None) -> Dict[str, str]:
    """Parse key=value pairs from an instruction string.

    Supports formats like:
    - firstName=Santosh, email=santosh@gmail.com
    - firstName=Santosh; email=santosh@gmail.com
    - JSON object of pairs, or a JSON wrapper with an instruction field

    Keys keep their case; FormSubmission.with_values matches them
    case-insensitively.
    """
    pairs: Dict[str, str] = {}
    text = instruction or ""

    try:
        obj = json.loads(text)
    except ValueError:
        obj = None
    if isinstance(obj, dict):
        if isinstance(obj.get("instruction"), str):
            text = obj["instruction"]
        else:
            return {str(k): str(v) for k, v in obj.items()}

    # Extract key=value pairs separated by commas/semicolons/newlines
    for m in re.finditer(r"([A-Za-z_][\w\- ]*)\s*=\s*([^,;\n]+)", text):
        k = (m.group(1) or "").strip()
        v = (m.group(2) or "").strip()
        if k and v:
            pairs[k] = v

    return pairs


def format_confirmation(values: Mapping[str, str]) -> str:
    """Render {label: value} as one 'Label: value' line per field."""
    return "\n".join(f"{label}: {value}" for label, value in values.items())


def parse_confirmation(message: str | None) -> Dict[str, str]:
    """Split a confirmation message back into {label: value}.

    Each line is split on its first colon; lines without one are ignored.
    """
    payload: Dict[str, str] = {}
    for line in (message or "").splitlines():
        key, sep, value = line.partition(":")
        key = key.strip()
        if sep and key:
            payload[key] = value.strip()
    return payload
