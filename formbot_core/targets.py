"""
Target definitions - per-site selectors, links and values as YAML data.

YAML Format:
    name: "nextbuild-contact"
    description: "Contact form"
    url: "https://nextbuild.in/"
    links: ["Contact"]                 # visible link texts to follow, in order
    ready_selector: "div.mil-section-title"
    scroll_selector: "div.mil-section-title"
    submit_selector: 'button[type="submit"]'
    fields:
      - key: "email"
        label: "Email"
        selector: '[name="email"]'
        value: "${FORMBOT_EMAIL:-santosh@gmail.com}"
        secret: false

${VAR} and ${VAR:-default} placeholders are resolved from the environment
(plus explicit variables) inside string values after the YAML is parsed,
so substituted text is never read as YAML syntax.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from .exceptions import TargetConfigError
from .models import FieldSpec, FormSubmission

PRESETS_DIR = Path(__file__).parent / "presets"

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


@dataclass(frozen=True)
class TargetSpec:
    name: str
    url: str
    submission: FormSubmission
    links: Tuple[str, ...] = ()
    ready_selector: Optional[str] = None
    scroll_selector: Optional[str] = None
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


def replace_variables(content: str, variables: Optional[Mapping[str, str]] = None) -> str:
    """Replace ${VAR} / ${VAR:-default} placeholders"""
    scope = dict(os.environ)
    scope.update(variables or {})

    def _sub(match):
        name, default = match.group(1), match.group(2)
        if name in scope:
            return str(scope[name])
        if default is not None:
            return default
        raise TargetConfigError(f"Undefined variable in target definition: {name}")

    return _PLACEHOLDER.sub(_sub, content)


def substitute_variables(data: Any, variables: Optional[Mapping[str, str]] = None) -> Any:
    """Apply replace_variables to every string in parsed YAML data"""
    if isinstance(data, str):
        return replace_variables(data, variables)
    if isinstance(data, dict):
        return {key: substitute_variables(value, variables) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_variables(item, variables) for item in data]
    return data


def target_from_dict(data: Dict[str, Any]) -> TargetSpec:
    """Build a TargetSpec from parsed YAML"""
    if not isinstance(data, dict):
        raise TargetConfigError("Target definition must be a mapping")
    for required in ("name", "url", "fields"):
        if not data.get(required):
            raise TargetConfigError(f"Target definition must contain '{required}'")

    fields: List[FieldSpec] = []
    for raw in data["fields"]:
        try:
            fields.append(FieldSpec(
                key=str(raw["key"]),
                selector=str(raw["selector"]),
                value=str(raw.get("value", "")),
                label=raw.get("label"),
                secret=bool(raw.get("secret", False)),
            ))
        except (KeyError, TypeError) as e:
            raise TargetConfigError(f"Invalid field definition {raw!r}: missing {e}") from e

    try:
        submission = FormSubmission(
            tuple(fields),
            submit_selector=data.get("submit_selector") or 'button[type="submit"]',
        )
    except ValueError as e:
        raise TargetConfigError(str(e)) from e

    known = {"name", "url", "fields", "links", "ready_selector", "scroll_selector", "submit_selector", "description"}
    return TargetSpec(
        name=str(data["name"]),
        url=str(data["url"]),
        submission=submission,
        links=tuple(str(link) for link in data.get("links") or ()),
        ready_selector=data.get("ready_selector"),
        scroll_selector=data.get("scroll_selector"),
        description=str(data.get("description") or ""),
        extra={k: v for k, v in data.items() if k not in known},
    )


def resolve_target_path(name_or_path: str) -> Path:
    """A preset name (e.g. 'chaicode-signup') or a path to a YAML file"""
    path = Path(name_or_path)
    if path.suffix in (".yaml", ".yml"):
        if not path.exists():
            raise TargetConfigError(f"YAML file not found: {name_or_path}")
        return path
    preset = PRESETS_DIR / f"{name_or_path}.yaml"
    if not preset.exists():
        raise TargetConfigError(
            f"Unknown target: {name_or_path} (available: {', '.join(list_targets())})"
        )
    return preset


def load_target(name_or_path: str, variables: Optional[Mapping[str, str]] = None) -> TargetSpec:
    path = resolve_target_path(name_or_path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise TargetConfigError(f"Invalid YAML format in {path}: {e}") from e
    return target_from_dict(substitute_variables(data, variables))


def list_targets() -> List[str]:
    return sorted(p.stem for p in PRESETS_DIR.glob("*.yaml"))
