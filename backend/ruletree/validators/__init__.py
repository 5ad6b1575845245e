"""Rule composition and evaluation engine.

Usage:
    from ruletree.validators import AbstractValidator, validation_engine

    rule = validation_engine.create_rule(person_declaration, "Person")
    result = validation_engine.validate(rule, data)
    if result.has_errors:
        # Render result.error_message / result.translate_args
"""

from ruletree.validators.base import (
    REQUIRED_TAG,
    AsyncPropertyValidator,
    PropertyValidator,
    RuleDeclarationError,
    ValidationFunction,
)
from ruletree.validators.declaration import AbstractValidator, NestedDeclaration
from ruletree.validators.engine import ValidationEngine, validation_engine
from ruletree.validators.localization import DEFAULT_MESSAGES, MessageLocalization
from ruletree.validators.models import ErrorTranslateArgs, ResultSummary, ValidationError, ValidationFailure
from ruletree.validators.property_rule import PropertyValidationRule, ValidationContext
from ruletree.validators.results import CompositeValidationResult, ValidationResult
from ruletree.validators.rules import AbstractListValidationRule, AbstractValidationRule
from ruletree.validators.shared import Validator

__all__ = [
    "REQUIRED_TAG",
    "AsyncPropertyValidator",
    "PropertyValidator",
    "RuleDeclarationError",
    "ValidationFunction",
    "AbstractValidator",
    "NestedDeclaration",
    "ValidationEngine",
    "validation_engine",
    "DEFAULT_MESSAGES",
    "MessageLocalization",
    "ErrorTranslateArgs",
    "ResultSummary",
    "ValidationError",
    "ValidationFailure",
    "PropertyValidationRule",
    "ValidationContext",
    "CompositeValidationResult",
    "ValidationResult",
    "AbstractListValidationRule",
    "AbstractValidationRule",
    "Validator",
]
