"""Result nodes: leaf results and their composite aggregation.

Every node answers the same read API:

    has_errors, error_count, error_message, translate_args

Aggregates are recomputed on every read. An optional-suppression predicate
set on a node is evaluated at read time as well, so it may depend on
mutable state of the validated data.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ruletree.validators.base import RuleDeclarationError
from ruletree.validators.models import ErrorTranslateArgs, ResultSummary

OptionalPredicate = Callable[[], bool]


class ValidationResult(ABC):
    """Base for every node of a result tree."""

    def __init__(self, name: str):
        self.name = name
        self.optional: Optional[OptionalPredicate] = None

    @property
    def is_suppressed(self) -> bool:
        return self.optional is not None and bool(self.optional())

    @property
    @abstractmethod
    def has_errors(self) -> bool:
        ...

    @property
    def error_count(self) -> int:
        return 1 if self.has_errors else 0

    @property
    @abstractmethod
    def error_message(self) -> str:
        ...

    @property
    @abstractmethod
    def translate_args(self) -> list[ErrorTranslateArgs]:
        ...

    def summarize(self) -> ResultSummary:
        return ResultSummary(
            name=self.name,
            has_errors=self.has_errors,
            error_count=self.error_count,
            error_message=self.error_message,
            translate_args=self.translate_args,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, has_errors={self.has_errors})"


class CompositeValidationResult(ValidationResult):
    """Named container of result nodes (leaves and nested composites)."""

    def __init__(self, name: str):
        super().__init__(name)
        self.children: list[ValidationResult] = []

    def add(self, child: ValidationResult) -> None:
        self.children.append(child)

    def remove(self, child: ValidationResult) -> None:
        self.children.remove(child)

    def _active(self) -> list[ValidationResult]:
        return [] if self.is_suppressed else self.children

    @property
    def has_errors(self) -> bool:
        return any(child.has_errors for child in self._active())

    @property
    def error_count(self) -> int:
        return sum(child.error_count for child in self._active())

    @property
    def error_message(self) -> str:
        messages = [child.error_message for child in self._active()]
        return " ".join(m for m in messages if m)

    @property
    def translate_args(self) -> list[ErrorTranslateArgs]:
        args = []
        for child in self._active():
            args.extend(child.translate_args)
        return args

    def __getitem__(self, name: str) -> ValidationResult:
        for child in self.children:
            if child.name == name:
                return child
        raise KeyError(name)

    def find(self, path: str) -> ValidationResult:
        """Navigate by dotted child names, e.g. ``"Person1.Contact.Email"``."""
        node: ValidationResult = self
        for part in path.split("."):
            if not isinstance(node, CompositeValidationResult):
                raise RuleDeclarationError(f"'{node.name}' has no children (path '{path}')")
            try:
                node = node[part]
            except KeyError:
                raise RuleDeclarationError(f"Unknown result '{part}' in path '{path}'") from None
        return node

    def summarize(self) -> ResultSummary:
        summary = super().summarize()
        summary.children = {child.name: child.summarize() for child in self.children}
        return summary
