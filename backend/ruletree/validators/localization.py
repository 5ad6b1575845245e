"""Message localization: turns translate args into human-readable messages.

An instance is injected into rule trees at construction; there is no
process-wide message table. Templates use ``str.format`` placeholders named
after the validator parameters, e.g. ``{max_length}`` or ``{attempted_value}``.
"""

from typing import Any, Mapping, Optional

from ruletree.config import get_settings
from ruletree.validators.models import ErrorTranslateArgs

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "This field is required.",
    "remote": "Please fix the field.",
    "email": "Please enter a valid email address.",
    "url": "Please enter a valid URL.",
    "date": "Please enter a valid date.",
    "dateISO": "Please enter a valid date ( ISO ).",
    "number": "Please enter a valid number.",
    "digits": "Please enter only digits.",
    "signedDigits": "Please enter only signed digits.",
    "creditcard": "Please enter a valid credit card number.",
    "equalTo": "Please enter the same value again.",
    "maxlength": "Please enter no more than {max_length} characters.",
    "minlength": "Please enter at least {min_length} characters.",
    "rangelength": "Please enter a value between {min_length} and {max_length} characters long.",
    "range": "Please enter a value between {min} and {max}.",
    "max": "Please enter a value less than or equal to {max}.",
    "min": "Please enter a value greater than or equal to {min}.",
    "step": "Please enter a value with step {step}.",
    "contains": "Please enter a value from list of values. Attempted value '{attempted_value}'.",
    "mask": "Please enter a value corresponding with {mask}.",
}


class _KeepMissing(dict):
    """Leaves unknown placeholders in the message untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class MessageLocalization:
    """Message lookup keyed by validator tag, with a generic fallback."""

    def __init__(
        self,
        messages: Optional[Mapping[str, str]] = None,
        default_message: Optional[str] = None,
    ):
        self.messages: dict[str, str] = dict(DEFAULT_MESSAGES)
        if messages:
            self.messages.update(messages)
        self.default_message = default_message or get_settings().DEFAULT_MESSAGE

    def template_for(self, tag: str) -> str:
        template = self.messages.get(tag)
        if not template or not isinstance(template, str):
            return self.default_message
        return template

    def get_message(self, args: ErrorTranslateArgs) -> str:
        return self.format(self.template_for(args.tag), args.params)

    @staticmethod
    def format(template: str, params: Mapping[str, Any]) -> str:
        try:
            return template.format_map(_KeepMissing(params))
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            # Positional, malformed or type-mismatched placeholders: show the raw template.
            return template
