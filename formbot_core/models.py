"""
Data model for one form automation run.

FieldSpec/FormSubmission describe what to fill, FillReport records what
happened, ConfirmationPayload holds what the page acknowledged.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """A single logical form field mapped to a page element and a value."""
    key: str
    selector: str
    value: str
    label: Optional[str] = None
    secret: bool = False

    @property
    def display_label(self) -> str:
        return self.label or self.key


@dataclass(frozen=True)
class FormSubmission:
    """
    Ordered fields plus the submit trigger.

    Immutable once constructed; keys must be unique and selectors non-empty.
    """
    fields: Tuple[FieldSpec, ...]
    submit_selector: str = 'button[type="submit"]'

    def __post_init__(self):
        # Accept any iterable (lists from YAML) but store a tuple
        object.__setattr__(self, "fields", tuple(self.fields))
        seen = set()
        for spec in self.fields:
            if not spec.selector:
                raise ValueError(f"Field {spec.key!r} has an empty selector")
            if spec.key in seen:
                raise ValueError(f"Duplicate field key: {spec.key!r}")
            seen.add(spec.key)
        if not self.submit_selector:
            raise ValueError("Submit selector must not be empty")

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(spec.key for spec in self.fields)

    def get(self, key: str) -> Optional[FieldSpec]:
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    def with_values(self, values: Optional[Mapping[str, str]]) -> "FormSubmission":
        """Return a copy with values overridden. Keys match case-insensitively."""
        if not values:
            return self
        lowered = {str(k).strip().lower(): str(v) for k, v in values.items()}
        unknown = set(lowered) - {spec.key.lower() for spec in self.fields}
        if unknown:
            raise ValueError(f"Unknown field keys: {', '.join(sorted(unknown))}")
        fields = []
        for spec in self.fields:
            new_value = lowered.get(spec.key.lower())
            if new_value is None:
                fields.append(spec)
            else:
                fields.append(FieldSpec(spec.key, spec.selector, new_value, spec.label, spec.secret))
        return FormSubmission(tuple(fields), self.submit_selector)

    def labelled_values(self, keys: Optional[Iterable[str]] = None) -> Dict[str, str]:
        """{label: value} in field order, restricted to keys when given."""
        wanted = set(keys) if keys is not None else None
        return {
            spec.display_label: spec.value
            for spec in self.fields
            if wanted is None or spec.key in wanted
        }


@dataclass(frozen=True)
class FillReport:
    filled: frozenset = frozenset()
    skipped: frozenset = frozenset()
    values: Dict[str, str] = field(default_factory=dict)
    submitted: bool = False


@dataclass
class ConfirmationPayload:
    """Field label -> submitted value, reconstructed from the acknowledgment."""
    fields: Dict[str, str] = field(default_factory=dict)
    channel: Optional[str] = None
    raw_message: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.fields
