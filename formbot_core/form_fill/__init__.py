"""
Form Fill module - fills a declarative FormSubmission and submits it

    report = await FormFiller(page).fill(submission)
    report.filled, report.skipped
"""

from .parser import parse_form_pairs, format_confirmation, parse_confirmation
from .field_filler import fill_field
from .filler import FormFiller

__all__ = [
    'FormFiller',
    'fill_field',
    'parse_form_pairs',
    'format_confirmation',
    'parse_confirmation',
]
