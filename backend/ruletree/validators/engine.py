"""Validation Engine: timed, logged entry points over rule trees.

The engine owns the MessageLocalization that every rule tree it creates
receives, so message tables are injected rather than global.

Usage:
    engine = ValidationEngine()
    rule = engine.create_rule(person_declaration, "Person")
    result = engine.validate(rule, data)
    result = await engine.validate_async(rule, data)
    if result.has_errors:
        print(result.error_message)
"""

import time
from typing import Any, Optional

import structlog

from ruletree.validators.declaration import AbstractValidator
from ruletree.validators.localization import MessageLocalization
from ruletree.validators.results import CompositeValidationResult
from ruletree.validators.rules import AbstractValidationRule

logger = structlog.get_logger()


class ValidationEngine:
    """Creates rule trees and runs them with timing and fault logging.

    Validator faults are logged and re-raised; validation failures are
    reported through the returned result.
    """

    def __init__(self, localization: Optional[MessageLocalization] = None):
        self.localization = localization or MessageLocalization()

    def create_rule(self, declaration: AbstractValidator, name: str) -> AbstractValidationRule:
        """Instantiate a rule tree bound to this engine's localization.

        Args:
            declaration: Declaration to build the tree from; it is frozen afterwards
            name: Name of the root node

        Returns:
            AbstractValidationRule sharing this engine's MessageLocalization
        """
        return declaration.create_rule(name, localization=self.localization)

    def validate(self, rule: AbstractValidationRule, data: Any) -> CompositeValidationResult:
        """Run the synchronous pass of ``rule`` against ``data``.

        Args:
            rule: Rule tree created by this or any other engine
            data: Mapping or attribute object to validate

        Returns:
            The rule's CompositeValidationResult, updated in place
        """
        start_time = time.perf_counter()
        try:
            result = rule.validate(data)
        except Exception as e:
            logger.error("validation_failed", rule=rule.name, mode="sync", error=str(e))
            raise

        self._log_complete(rule, result, "sync", start_time)
        return result

    async def validate_async(self, rule: AbstractValidationRule, data: Any) -> CompositeValidationResult:
        """Run the asynchronous pass of ``rule`` and wait until every check settles.

        Args:
            rule: Rule tree to evaluate
            data: Mapping or attribute object to validate

        Returns:
            The rule's CompositeValidationResult once all async validators have settled
        """
        start_time = time.perf_counter()
        try:
            result = await rule.validate_async(data)
        except Exception as e:
            logger.error("validation_failed", rule=rule.name, mode="async", error=str(e))
            raise

        self._log_complete(rule, result, "async", start_time)
        return result

    async def validate_full(self, rule: AbstractValidationRule, data: Any) -> CompositeValidationResult:
        """Synchronous pass followed by the awaited asynchronous pass.

        Args:
            rule: Rule tree to evaluate
            data: Mapping or attribute object to validate

        Returns:
            The rule's CompositeValidationResult holding both passes' outcomes
        """
        self.validate(rule, data)
        return await self.validate_async(rule, data)

    @staticmethod
    def _log_complete(
        rule: AbstractValidationRule,
        result: CompositeValidationResult,
        mode: str,
        start_time: float,
    ) -> None:
        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            "validation_complete",
            rule=rule.name,
            mode=mode,
            has_errors=result.has_errors,
            error_count=result.error_count,
            duration_ms=round(duration, 2),
        )


# Module-level default instance
validation_engine = ValidationEngine()
