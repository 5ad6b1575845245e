import asyncio

import pytest

from ruletree.validators import AbstractValidator, RuleDeclarationError, ValidationFunction
from tests.fixtures.validators import (
    CountingValidator,
    EmailValidator,
    ExplodingValidator,
    MaxLengthValidator,
    RequiredValidator,
)


def build_email_tree():
    contact = AbstractValidator()
    contact.rule_for("email", RequiredValidator())
    contact.rule_for("email", MaxLengthValidator(100))
    contact.rule_for("email", EmailValidator())

    person = AbstractValidator()
    person.validator_for("contact", contact)
    return person.create_rule("person")


def test_empty_nested_email_fails_with_required_message() -> None:
    rule = build_email_tree()

    result = rule.validate({"contact": {"email": ""}})

    assert result.has_errors is True
    email = rule.find("contact.email")
    assert "This field is required." in email.error_message


def test_valid_nested_email_passes() -> None:
    rule = build_email_tree()

    result = rule.validate({"contact": {"email": "a@b.com"}})

    assert result.has_errors is False


def test_validate_returns_the_same_result_instance() -> None:
    rule = build_email_tree()

    first = rule.validate({"contact": {"email": ""}})
    second = rule.validate({"contact": {"email": "a@b.com"}})

    assert first is second is rule.validation_result
    assert second.has_errors is False


def test_missing_nested_object_is_not_written_into_caller_data() -> None:
    rule = build_email_tree()
    data: dict = {}

    result = rule.validate(data)

    assert data == {}
    assert result.has_errors is True
    assert rule.find("contact.email").failures["required"].error.has_error is True


def test_materialize_defaults_fills_missing_containers() -> None:
    contact = AbstractValidator()
    contact.rule_for("email", RequiredValidator())
    phone = AbstractValidator()
    phone.rule_for("number", RequiredValidator())
    person = AbstractValidator()
    person.validator_for("contact", contact)
    person.validator_for("phones", phone, for_list=True)
    rule = person.create_rule("person")

    data: dict = {}
    rule.materialize_defaults(data)

    assert data == {"contact": {}, "phones": []}


def test_attribute_objects_are_supported() -> None:
    class Contact:
        def __init__(self, email):
            self.email = email

    class Person:
        def __init__(self, contact):
            self.contact = contact

    rule = build_email_tree()

    assert rule.validate(Person(Contact("a@b.com"))).has_errors is False
    assert rule.validate(Person(Contact(""))).has_errors is True


def test_nested_people_with_correct_data_pass(main_rule, people_data) -> None:
    result = main_rule.validate(people_data)

    assert result.has_errors is False


def test_nested_error_surfaces_on_root_and_leaf(main_rule, people_data) -> None:
    people_data["Person1"]["Contact"]["Email"] = ""

    result = main_rule.validate(people_data)

    assert result.has_errors is True
    assert main_rule.find("Person1.Contact.Email").has_errors is True
    assert main_rule.find("Person2.Contact.Email").has_errors is False
    assert result.find("Person1.Contact.Email").has_errors is True


def test_optional_predicate_reads_live_data(main_rule, people_data) -> None:
    people_data["Person1"]["Contact"]["Email"] = ""
    person1 = main_rule.children["Person1"]
    person1.set_optional(lambda: not people_data["Person1"]["Checked"])

    main_rule.validate(people_data)
    assert main_rule.has_errors is True

    people_data["Person1"]["Checked"] = False
    assert main_rule.has_errors is False
    # Only the node carrying the predicate is suppressed.
    assert main_rule.find("Person1.Contact.Email").has_errors is True


def test_validate_field_leaves_siblings_untouched() -> None:
    first = CountingValidator(tag="first", accept=False)
    last = CountingValidator(tag="last", accept=False)
    declaration = AbstractValidator()
    declaration.rule_for("FirstName", first)
    declaration.rule_for("LastName", last)
    rule = declaration.create_rule("Person")

    rule.validate({"FirstName": "a", "LastName": "b"})
    last_state = rule.rules["LastName"].failures["last"].error.model_copy()

    rule.validate_field({"FirstName": "c", "LastName": "d"}, "FirstName")

    assert first.calls == ["a", "c"]
    assert last.calls == ["b"]
    assert rule.rules["LastName"].failures["last"].error == last_state
    assert rule.rules["LastName"].failures["last"].error.translate_args.params["attempted_value"] == "b"


def test_validate_field_runs_nested_child_and_shared_validations() -> None:
    def must_match(data, error) -> None:
        if data.get("Password") != data.get("Confirm"):
            error.has_error = True
            error.message = "Passwords do not match."

    contact = AbstractValidator()
    contact.rule_for("email", RequiredValidator())
    declaration = AbstractValidator()
    declaration.rule_for("Password", RequiredValidator())
    declaration.validation_for("Confirm", ValidationFunction("PasswordsMatch", must_match))
    declaration.validator_for("contact", contact)
    rule = declaration.create_rule("Account")

    rule.validate_field({"Password": "x", "Confirm": "y"}, "Confirm")
    assert rule.find("PasswordsMatch").has_errors is True
    assert rule.find("Password").has_errors is False

    rule.validate_field({"contact": {"email": ""}}, "contact")
    assert rule.find("contact.email").has_errors is True


def test_validator_fault_propagates_to_caller() -> None:
    declaration = AbstractValidator()
    declaration.rule_for("Name", ExplodingValidator())
    outer = AbstractValidator()
    outer.validator_for("inner", declaration)
    rule = outer.create_rule("outer")

    with pytest.raises(RuntimeError):
        rule.validate({"inner": {"Name": "x"}})


def test_find_rejects_unknown_paths() -> None:
    rule = build_email_tree()

    with pytest.raises(RuleDeclarationError):
        rule.find("contact.phone")


def test_validate_all_without_loop_completes_async_pass(main_rule, people_data) -> None:
    people_data["Person1"]["Contact"]["Mobile"]["CountryCode"] = "BLA"

    assert main_rule.validate_all(people_data) is None

    assert main_rule.find("Person1.Contact.Mobile.CountryCode").has_errors is True


@pytest.mark.asyncio
async def test_validate_all_schedules_async_pass_inside_loop(main_rule, people_data) -> None:
    people_data["Person1"]["Contact"]["Mobile"]["CountryCode"] = "BLA"

    task = main_rule.validate_all(people_data)

    assert isinstance(task, asyncio.Task)
    country = main_rule.find("Person1.Contact.Mobile.CountryCode")
    assert country.failures["contains"].error.has_error is False

    await task
    assert country.failures["contains"].error.has_error is True
    assert main_rule.has_errors is True
