"""ruletree: composable validation rule trees for nested data."""

from ruletree.log import configure_logging
from ruletree.validators import (
    AbstractValidator,
    AsyncPropertyValidator,
    PropertyValidator,
    ValidationEngine,
    ValidationFunction,
    validation_engine,
)

__version__ = "1.0.0"

__all__ = [
    "configure_logging",
    "AbstractValidator",
    "AsyncPropertyValidator",
    "PropertyValidator",
    "ValidationEngine",
    "ValidationFunction",
    "validation_engine",
]
