"""Validator capability contract: the interface the rule engine consumes.

Concrete validators (required, email, length, range, contains, ...) live
outside the engine. They only have to implement one of the two variants below:

    - PropertyValidator: synchronous ``is_acceptable(value) -> bool``
    - AsyncPropertyValidator: ``async is_acceptable(value) -> bool``

The engine dispatches on the variant with ``isinstance``, never by probing
attributes.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from typing import Any, Callable

from ruletree.validators.models import ValidationError

# The only tag evaluated against an absent value.
REQUIRED_TAG = "required"


class RuleDeclarationError(ValueError):
    """Raised when a declaration or rule tree is used incorrectly."""


class PropertyValidator(ABC):
    """Synchronous property validator.

    Contract:
        - ``tag`` is unique among the validators of one property
        - ``is_acceptable()`` returns True when the value passes
        - public instance attributes are message parameters (e.g. ``max_length``)
        - ``priority`` is opt-in; lower numbers run first, equal numbers keep
          declaration order
    """

    priority: int = 0

    @property
    @abstractmethod
    def tag(self) -> str:
        """Validator tag, also the localization key."""
        ...

    @abstractmethod
    def is_acceptable(self, value: Any) -> bool:
        ...

    @property
    def params(self) -> dict[str, Any]:
        """Extra parameters used for message formatting."""
        return {k: v for k, v in vars(self).items() if not k.startswith("_")}


class AsyncPropertyValidator(PropertyValidator):
    """Asynchronous property validator: ``is_acceptable`` is awaited."""

    @abstractmethod
    async def is_acceptable(self, value: Any) -> bool:
        ...


# fn(data, error): populates error.has_error / error.message on failure.
ValidateFce = Callable[[Any, ValidationError], None]


class ValidationFunction:
    """Named shared (cross-field) validation function."""

    def __init__(self, name: str, fn: ValidateFce):
        if not name:
            raise RuleDeclarationError("Shared validation function needs a name")
        if not callable(fn):
            raise RuleDeclarationError(f"Shared validation '{name}' is not callable")
        self.name = name
        self.fn = fn

    def __repr__(self) -> str:
        return f"ValidationFunction(name={self.name!r})"


# ── Data access helpers ──
# Data may be a mapping or a plain object with attributes.

def get_value(data: Any, key: str) -> Any:
    """Read ``key`` from ``data``; absent keys and ``None`` data give None."""
    if data is None:
        return None
    if isinstance(data, Mapping):
        return data.get(key)
    return getattr(data, key, None)


def set_value(data: Any, key: str, value: Any) -> None:
    if isinstance(data, MutableMapping):
        data[key] = value
    else:
        setattr(data, key, value)
