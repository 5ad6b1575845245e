"""Validation models: error primitives, failure slots and result summaries.

Errors are mutable on purpose: a rule tree keeps one error object per
validator slot and overwrites it on every evaluation pass.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ErrorTranslateArgs(BaseModel):
    """Localization key plus the parameters substituted into its template."""

    tag: str
    params: dict[str, Any] = Field(default_factory=dict)


class ValidationError(BaseModel):
    """Outcome of one validator (or one shared validation function)."""

    model_config = ConfigDict(validate_assignment=True)

    has_error: bool = False
    message: str = ""
    translate_args: Optional[ErrorTranslateArgs] = None

    def reset(self) -> None:
        self.has_error = False
        self.message = ""
        self.translate_args = None


class ValidationFailure(BaseModel):
    """One (validator, error) pair inside a property rule."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    validator: Any
    error: ValidationError = Field(default_factory=ValidationError)
    is_async: bool = False

    @property
    def tag(self) -> str:
        return self.validator.tag


class ResultSummary(BaseModel):
    """Snapshot of a result tree, for reporting and logging."""

    name: str
    has_errors: bool
    error_count: int
    error_message: str = ""
    translate_args: list[ErrorTranslateArgs] = Field(default_factory=list)
    children: dict[str, "ResultSummary"] = Field(default_factory=dict)

    def failing_paths(self, prefix: str = "") -> list[str]:
        """Dotted paths of failing leaves below this node."""
        if not self.has_errors:
            return []
        path = f"{prefix}.{self.name}" if prefix else self.name
        if not self.children:
            return [path]
        paths = []
        for child in self.children.values():
            paths.extend(child.failing_paths(path))
        return paths


ResultSummary.model_rebuild()
