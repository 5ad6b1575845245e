"""Property validation rule: all validators registered for one property.

Synchronous and asynchronous validators are evaluated in two separate
passes. Both write into the same tag -> failure mapping, so ``has_errors``
sees the merged outcome once both passes have run.
"""

import asyncio
from typing import Any, Iterable, Optional

import structlog

from ruletree.validators.base import (
    REQUIRED_TAG,
    AsyncPropertyValidator,
    PropertyValidator,
    RuleDeclarationError,
    get_value,
)
from ruletree.validators.localization import MessageLocalization
from ruletree.validators.models import ErrorTranslateArgs, ValidationError, ValidationFailure
from ruletree.validators.results import ValidationResult

logger = structlog.get_logger()


class ValidationContext:
    """View of one property of a data object: ``key``, ``data`` and ``value``."""

    def __init__(self, key: str, data: Any):
        self.key = key
        self.data = data

    @property
    def value(self) -> Any:
        return get_value(self.data, self.key)


class PropertyValidationRule(ValidationResult):
    """Leaf rule node. Reports whether the property failed, not how many validators did."""

    def __init__(
        self,
        name: str,
        validators: Optional[Iterable[PropertyValidator]] = None,
        localization: Optional[MessageLocalization] = None,
    ):
        super().__init__(name)
        self.localization = localization or MessageLocalization()
        self.validators: dict[str, PropertyValidator] = {}
        self.failures: dict[str, ValidationFailure] = {}
        for validator in validators or []:
            self.add_validator(validator)

    def add_validator(self, validator: PropertyValidator) -> None:
        """Register a validator; an existing slot with the same tag is replaced."""
        if not isinstance(validator, PropertyValidator):
            raise RuleDeclarationError(
                f"{validator!r} on '{self.name}' does not implement PropertyValidator"
            )
        if not validator.tag:
            raise RuleDeclarationError(f"Validator {validator!r} on '{self.name}' has no tag")

        self.validators[validator.tag] = validator
        self.failures[validator.tag] = ValidationFailure(
            validator=validator,
            is_async=isinstance(validator, AsyncPropertyValidator),
        )

    @property
    def has_async_validators(self) -> bool:
        return any(failure.is_async for failure in self.failures.values())

    # ── Read API ──

    @property
    def errors(self) -> list[ValidationError]:
        return [failure.error for failure in self.failures.values()]

    @property
    def has_errors(self) -> bool:
        if self.is_suppressed:
            return False
        return any(error.has_error for error in self.errors)

    @property
    def error_message(self) -> str:
        if not self.has_errors:
            return ""
        return " ".join(error.message for error in self.errors if error.has_error and error.message)

    @property
    def translate_args(self) -> list[ErrorTranslateArgs]:
        if not self.has_errors:
            return []
        return [error.translate_args for error in self.errors if error.has_error and error.translate_args]

    # ── Evaluation ──

    def validate(self, context: ValidationContext) -> list[ValidationFailure]:
        """Run the synchronous validators against ``context.value``."""
        return self.validate_value(context.value)

    def validate_value(self, value: Any) -> list[ValidationFailure]:
        sync_failures = [f for f in self.failures.values() if not f.is_async]

        # Stable sort: equal priorities keep declaration order.
        failed_priority: Optional[int] = None
        for failure in sorted(sync_failures, key=lambda f: f.validator.priority):
            validator = failure.validator
            if failed_priority is not None and validator.priority > failed_priority:
                failure.error.reset()
                continue

            try:
                accepted = self._skips(validator, value) or bool(validator.is_acceptable(value))
            except Exception as e:
                logger.error("validator_failed", property=self.name, tag=failure.tag, error=str(e))
                raise

            self._record(failure, value, accepted)
            if not accepted and failed_priority is None:
                failed_priority = validator.priority

        return sync_failures

    async def validate_async(self, context: ValidationContext) -> list[ValidationFailure]:
        """Run the asynchronous validators against ``context.value``."""
        return await self.validate_value_async(context.value)

    async def validate_value_async(self, value: Any) -> list[ValidationFailure]:
        async_failures = [f for f in self.failures.values() if f.is_async]
        outcomes = await asyncio.gather(
            *(self._check_async(failure, value) for failure in async_failures),
            return_exceptions=True,
        )

        # Every check has settled; surface the first fault, if any.
        for failure, outcome in zip(async_failures, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("validator_failed", property=self.name, tag=failure.tag, error=str(outcome))
                raise outcome

        return async_failures

    async def _check_async(self, failure: ValidationFailure, value: Any) -> None:
        validator = failure.validator
        accepted = self._skips(validator, value) or bool(await validator.is_acceptable(value))
        self._record(failure, value, accepted)

    @staticmethod
    def _skips(validator: PropertyValidator, value: Any) -> bool:
        """Absent values pass every check except ``required``."""
        return value is None and validator.tag != REQUIRED_TAG

    def _record(self, failure: ValidationFailure, value: Any, accepted: bool) -> None:
        error = failure.error
        error.has_error = not accepted
        error.translate_args = ErrorTranslateArgs(
            tag=failure.tag,
            params={**failure.validator.params, "attempted_value": value},
        )
        error.message = self.localization.get_message(error.translate_args) if error.has_error else ""
