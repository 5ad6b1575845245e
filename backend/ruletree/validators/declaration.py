"""Rule declarations: which validators apply to which properties.

A declaration is pure configuration: no validation runs here. It is built
once per entity type and then instantiated into any number of rule trees:

    contact = AbstractValidator()
    contact.rule_for("Email", RequiredValidator())
    contact.rule_for("Email", EmailValidator())

    person = AbstractValidator()
    person.rule_for("FirstName", RequiredValidator())
    person.validator_for("Contact", contact)
    person.validator_for("Phones", phone, for_list=True)
    person.validation_for("Name", ValidationFunction("NameMatch", check_names))

    rule = person.create_rule("Person")

Once a rule tree has been created from it, the declaration is frozen.
"""

from typing import NamedTuple, Optional, Union

from ruletree.validators.base import PropertyValidator, RuleDeclarationError, ValidateFce, ValidationFunction
from ruletree.validators.localization import MessageLocalization
from ruletree.validators.rules import AbstractListValidationRule, AbstractValidationRule


class NestedDeclaration(NamedTuple):
    declaration: "AbstractValidator"
    for_list: bool = False


class AbstractValidator:
    """Builder for property rules, shared validations and nested validators."""

    def __init__(self):
        self.validators: dict[str, list[PropertyValidator]] = {}
        self.validation_functions: dict[str, list[ValidationFunction]] = {}
        self.abstract_validators: dict[str, NestedDeclaration] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RuleDeclarationError("Declaration is frozen once a rule tree has been created from it")

    def rule_for(self, prop: str, validator: PropertyValidator) -> "AbstractValidator":
        """Append a property validator to ``prop``."""
        self._ensure_mutable()
        if not isinstance(validator, PropertyValidator):
            raise RuleDeclarationError(f"{validator!r} on '{prop}' does not implement PropertyValidator")
        self.validators.setdefault(prop, []).append(validator)
        return self

    def validation_for(
        self,
        prop: str,
        fce: Union[ValidationFunction, ValidateFce],
        name: Optional[str] = None,
    ) -> "AbstractValidator":
        """Append a shared validation to ``prop``.

        Accepts a ValidationFunction, or a plain function named by ``name``
        (default: the function's ``__name__``).
        """
        self._ensure_mutable()
        if not isinstance(fce, ValidationFunction):
            fce = ValidationFunction(name or getattr(fce, "__name__", ""), fce)
        self.validation_functions.setdefault(prop, []).append(fce)
        return self

    def validator_for(self, prop: str, validator: "AbstractValidator", for_list: bool = False) -> "AbstractValidator":
        """Attach a nested declaration for an object (or, with ``for_list``, a list of objects)."""
        self._ensure_mutable()
        if not isinstance(validator, AbstractValidator):
            raise RuleDeclarationError(f"Nested validator for '{prop}' must be an AbstractValidator")
        self.abstract_validators[prop] = NestedDeclaration(validator, for_list)
        return self

    # ── Rule tree factories ──

    def create_rule(self, name: str, localization: Optional[MessageLocalization] = None) -> AbstractValidationRule:
        """Instantiate a root rule tree and freeze this declaration.

        Args:
            name: Name of the root node, used in messages and ``find`` paths
            localization: Message service shared by the whole tree. If None,
                a default MessageLocalization is created.

        Returns:
            AbstractValidationRule mirroring this declaration
        """
        return self.create_abstract_rule(name, localization=localization)

    def create_abstract_rule(
        self, name: str, localization: Optional[MessageLocalization] = None
    ) -> AbstractValidationRule:
        """Instantiate a rule for one nested object and freeze this declaration.

        Args:
            name: Property name the rule is attached under
            localization: Message service inherited from the parent tree

        Returns:
            AbstractValidationRule with one child per nested declaration
        """
        self._frozen = True
        return AbstractValidationRule(name, self, localization=localization)

    def create_abstract_list_rule(
        self, name: str, localization: Optional[MessageLocalization] = None
    ) -> AbstractListValidationRule:
        """Instantiate a rule for a list of objects and freeze this declaration.

        Args:
            name: Property name of the list; item children are keyed ``name + index``
            localization: Message service inherited from the parent tree

        Returns:
            AbstractListValidationRule with no children until the first pass
        """
        self._frozen = True
        return AbstractListValidationRule(name, self, localization=localization)
