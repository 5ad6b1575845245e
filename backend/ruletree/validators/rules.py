"""Rule trees: composite validation rules bound to one declaration.

A rule tree mirrors the shape of the data it validates:

    AbstractValidationRule("Main")
    ├── rules:      PropertyValidationRule per declared property
    ├── validators: shared Validator per declared shared-validation name
    └── children:   nested AbstractValidationRule / AbstractListValidationRule

The tree is built once and evaluated many times. Every evaluation updates
the node states in place and hands back the same CompositeValidationResult.

Calls on one tree must be serialized: a second ``validate_async`` started
before the first one settles writes into the same failure slots.
"""

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Iterable, Optional, Union

import structlog

from ruletree.config import get_settings
from ruletree.validators.base import RuleDeclarationError, ValidationFunction, get_value, set_value
from ruletree.validators.localization import MessageLocalization
from ruletree.validators.models import ResultSummary
from ruletree.validators.property_rule import PropertyValidationRule, ValidationContext
from ruletree.validators.results import CompositeValidationResult, OptionalPredicate
from ruletree.validators.shared import Validator

if TYPE_CHECKING:
    from ruletree.validators.declaration import AbstractValidator

logger = structlog.get_logger()

RuleNode = Union["AbstractValidationRule", PropertyValidationRule, Validator]


async def _join(awaitables: Iterable[Awaitable[Any]]) -> None:
    """Wait for every awaitable to settle, then re-raise the first fault."""
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome


class AbstractValidationRule:
    """Validation rule for one object shape, built from an AbstractValidator."""

    def __init__(
        self,
        name: str,
        declaration: "AbstractValidator",
        for_list: bool = False,
        localization: Optional[MessageLocalization] = None,
    ):
        self.name = name
        self.declaration = declaration
        self.for_list = for_list
        self.localization = localization or MessageLocalization()

        self.validation_result = CompositeValidationResult(name)
        self.rules: dict[str, PropertyValidationRule] = {}
        self.validators: dict[str, Validator] = {}
        self.children: dict[str, AbstractValidationRule] = {}

        self._in_flight = 0
        self._background: set[asyncio.Task] = set()

        if not for_list:
            for prop, validators in declaration.validators.items():
                self._create_rule_for(prop, validators)
            self._add_children()

    def _create_rule_for(self, prop: str, validators: Iterable[Any]) -> None:
        rule = PropertyValidationRule(prop, validators, localization=self.localization)
        self.rules[prop] = rule
        self.validation_result.add(rule)

    def _add_children(self) -> None:
        for prop, nested in self.declaration.abstract_validators.items():
            if nested.for_list:
                child = nested.declaration.create_abstract_list_rule(prop, localization=self.localization)
            else:
                child = nested.declaration.create_abstract_rule(prop, localization=self.localization)
            self._add_child(prop, child)

    def _add_child(self, key: str, child: "AbstractValidationRule") -> None:
        self.children[key] = child
        self.validation_result.add(child.validation_result)

    def _shared_validator(self, fce: ValidationFunction) -> Validator:
        """Stable shared validator per name, created on first use."""
        validator = self.validators.get(fce.name)
        if validator is None:
            validator = Validator(fce.name, fce.fn)
            self.validators[fce.name] = validator
            self.validation_result.add(validator)
        return validator

    @staticmethod
    def _child_data(context: Any, key: str, child: "AbstractValidationRule") -> Any:
        # Missing nested containers validate as empty; the caller's data is left alone.
        value = get_value(context, key)
        if value is None:
            return [] if child.for_list else {}
        return value

    # ── Optional suppression ──

    def set_optional(self, predicate: Optional[OptionalPredicate]) -> None:
        """Suppress errors of this node while ``predicate()`` is true.

        Applies to this node's composite result only; children and property
        rules keep reporting their own state.
        """
        self.validation_result.optional = predicate

    # ── Evaluation ──

    def validate(self, context: Any) -> CompositeValidationResult:
        """Synchronous pass over children, property rules and shared validators.

        Args:
            context: Mapping or attribute object holding this node's properties.
                Missing nested containers validate as empty.

        Returns:
            This node's CompositeValidationResult, the same instance on every call
        """
        for key, child in self.children.items():
            child.validate(self._child_data(context, key, child))

        for key, rule in self.rules.items():
            rule.validate(ValidationContext(key, context))

        for fces in self.declaration.validation_functions.values():
            for fce in fces:
                self._shared_validator(fce).validate(context)

        return self.validation_result

    async def validate_async(self, context: Any) -> CompositeValidationResult:
        """Asynchronous pass; resolves once every nested async check has settled.

        Args:
            context: Mapping or attribute object holding this node's properties

        Returns:
            This node's CompositeValidationResult

        Raises:
            Exception: The first validator fault, after every check has settled
        """
        self._enter()
        try:
            pending = [
                child.validate_async(self._child_data(context, key, child))
                for key, child in self.children.items()
            ]
            pending.extend(
                rule.validate_async(ValidationContext(key, context))
                for key, rule in self.rules.items()
            )
            await _join(pending)
        finally:
            self._in_flight -= 1

        return self.validation_result

    def validate_all(self, context: Any) -> Optional[asyncio.Task]:
        """Synchronous pass, then trigger the asynchronous pass without awaiting it.

        Inside a running event loop the async pass is scheduled and its task
        returned. Without a loop it is run to completion and None is returned.

        Args:
            context: Mapping or attribute object holding this node's properties

        Returns:
            The scheduled asyncio.Task, or None when no loop was running
        """
        self.validate(context)
        return self._spawn(self.validate_async(context))

    def validate_field(self, context: Any, property_name: str) -> Optional[asyncio.Task]:
        """Re-evaluate one property without touching its siblings.

        Args:
            context: Mapping or attribute object holding this node's properties
            property_name: Property whose nested child, own rule and shared
                validations are re-run

        Returns:
            Task for the property's async pass when it has async validators and
            a loop is running, otherwise None
        """
        child = self.children.get(property_name)
        if child is not None:
            child.validate(self._child_data(context, property_name, child))

        task = None
        rule = self.rules.get(property_name)
        if rule is not None:
            field_context = ValidationContext(property_name, context)
            rule.validate(field_context)
            if rule.has_async_validators:
                task = self._spawn(rule.validate_async(field_context))

        for fce in self.declaration.validation_functions.get(property_name, []):
            self._shared_validator(fce).validate(context)

        return task

    def materialize_defaults(self, context: Any) -> Any:
        """Write empty containers for missing nested properties into ``context``."""
        for key, child in self.children.items():
            value = get_value(context, key)
            if value is None:
                value = [] if child.for_list else {}
                set_value(context, key, value)
            child.materialize_defaults(value)
        return context

    def _enter(self) -> None:
        if self._in_flight:
            logger.warning("overlapping_validation", rule=self.name, in_flight=self._in_flight)
        self._in_flight += 1

    def _spawn(self, coro: Awaitable[Any]) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return None

        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("async_validation_failed", rule=self.name, error=str(task.exception()))

    # ── Inspection ──

    @property
    def has_errors(self) -> bool:
        return self.validation_result.has_errors

    def find(self, path: str) -> RuleNode:
        """Navigate the tree by dotted names, e.g. ``"Person1.Contact.Email"``."""
        head, _, rest = path.partition(".")
        child = self.children.get(head)
        if child is not None:
            return child.find(rest) if rest else child

        leaf = self.rules.get(head) or self.validators.get(head)
        if leaf is None or rest:
            raise RuleDeclarationError(f"Unknown rule '{path}' under '{self.name}'")
        return leaf

    def summarize(self) -> ResultSummary:
        return self.validation_result.summarize()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class AbstractListValidationRule(AbstractValidationRule):
    """Validation rule for a list; one child rule per index, created on demand.

    Children are keyed ``name + index``. They are added as the list grows
    and, unless pruning is enabled, kept when it shrinks.
    """

    def __init__(
        self,
        name: str,
        declaration: "AbstractValidator",
        localization: Optional[MessageLocalization] = None,
        prune_stale: Optional[bool] = None,
    ):
        super().__init__(name, declaration, for_list=True, localization=localization)
        self.prune_stale = get_settings().PRUNE_STALE_LIST_ITEMS if prune_stale is None else prune_stale

    @staticmethod
    def _items(context: Any) -> list:
        return [] if context is None else list(context)

    def _indexed_key(self, index: int) -> str:
        return f"{self.name}{index}"

    def rule_at(self, index: int) -> Optional[AbstractValidationRule]:
        return self.children.get(self._indexed_key(index))

    def notify_list_changed(self, items: list) -> None:
        """Reconcile children against the current list length."""
        created = 0
        for index in range(len(items)):
            key = self._indexed_key(index)
            if key not in self.children:
                rule = self.declaration.create_abstract_rule(key, localization=self.localization)
                self._add_child(key, rule)
                created += 1

        if created:
            logger.debug("list_rule_grown", rule=self.name, created=created, size=len(self.children))

        if self.prune_stale:
            self._prune(len(items))

    def _prune(self, length: int) -> None:
        index = length
        while (rule := self.rule_at(index)) is not None:
            del self.children[self._indexed_key(index)]
            self.validation_result.remove(rule.validation_result)
            index += 1
        if index > length:
            logger.debug("list_rule_pruned", rule=self.name, removed=index - length, size=len(self.children))

    @staticmethod
    def _item_data(item: Any) -> Any:
        return {} if item is None else item

    def validate(self, context: Any) -> CompositeValidationResult:
        items = self._items(context)
        self.notify_list_changed(items)
        for index, item in enumerate(items):
            self.rule_at(index).validate(self._item_data(item))
        return self.validation_result

    async def validate_async(self, context: Any) -> CompositeValidationResult:
        items = self._items(context)
        self.notify_list_changed(items)
        self._enter()
        try:
            await _join(
                self.rule_at(index).validate_async(self._item_data(item))
                for index, item in enumerate(items)
            )
        finally:
            self._in_flight -= 1
        return self.validation_result

    def validate_field(self, context: Any, property_name: str) -> Optional[asyncio.Task]:
        """Re-evaluate one list item; ``property_name`` is its index.

        Raises:
            RuleDeclarationError: The index is not an integer or is out of range
        """
        items = self._items(context)
        try:
            index = int(property_name)
        except (TypeError, ValueError):
            raise RuleDeclarationError(f"List rule '{self.name}' expects an item index, got {property_name!r}") from None
        if not 0 <= index < len(items):
            raise RuleDeclarationError(f"Index {index} is out of range for list rule '{self.name}'")

        self.notify_list_changed(items)
        rule = self.rule_at(index)
        item = self._item_data(items[index])
        rule.validate(item)
        return self._spawn(rule.validate_async(item))

    def materialize_defaults(self, context: Any) -> Any:
        items = self._items(context)
        self.notify_list_changed(items)
        for index, item in enumerate(items):
            if item is not None:
                self.rule_at(index).materialize_defaults(item)
        return context
