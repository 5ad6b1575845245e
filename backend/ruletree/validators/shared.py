"""Shared validator: wraps a cross-field validation function as a result node."""

from typing import Any

import structlog

from ruletree.validators.base import ValidateFce
from ruletree.validators.models import ErrorTranslateArgs, ValidationError
from ruletree.validators.results import ValidationResult

logger = structlog.get_logger()


class Validator(ValidationResult):
    """One pass/fail slot driven by ``fn(data, error)``.

    The function sees the whole data object, so it can compare fields with
    each other. It reports a failure by setting ``error.has_error`` and
    ``error.message``.
    """

    def __init__(self, name: str, validate_fce: ValidateFce):
        super().__init__(name)
        self.validate_fce = validate_fce
        self.error = ValidationError()

    def validate(self, data: Any) -> bool:
        """Run the function against ``data``; returns the current ``has_errors``."""
        self.error.reset()
        try:
            self.validate_fce(data, self.error)
        except Exception as e:
            logger.error("shared_validation_failed", validation=self.name, error=str(e))
            raise

        if self.error.has_error and self.error.translate_args is None:
            self.error.translate_args = ErrorTranslateArgs(tag=self.name)
        return self.has_errors

    @property
    def has_errors(self) -> bool:
        if self.is_suppressed:
            return False
        return self.error.has_error

    @property
    def error_message(self) -> str:
        if not self.has_errors:
            return ""
        return self.error.message

    @property
    def translate_args(self) -> list[ErrorTranslateArgs]:
        if not self.has_errors or self.error.translate_args is None:
            return []
        return [self.error.translate_args]
