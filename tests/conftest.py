from typing import Any

import pytest

from ruletree.validators import AbstractValidator, MessageLocalization
from tests.fixtures.validators import (
    ContainsValidator,
    EmailValidator,
    MaxLengthValidator,
    RequiredValidator,
    delayed_options,
)


def build_phone_validator() -> AbstractValidator:
    validator = AbstractValidator()
    validator.rule_for("CountryCode", RequiredValidator())
    validator.rule_for("CountryCode", MaxLengthValidator(3))
    validator.rule_for("CountryCode", ContainsValidator(delayed_options(["FRA", "CZE", "USA", "GER"])))
    validator.rule_for("Number", RequiredValidator())
    validator.rule_for("Number", MaxLengthValidator(9))
    return validator


def build_contact_validator() -> AbstractValidator:
    validator = AbstractValidator()
    validator.rule_for("Email", RequiredValidator())
    validator.rule_for("Email", MaxLengthValidator(100))
    validator.rule_for("Email", EmailValidator())

    phone = build_phone_validator()
    validator.validator_for("Mobile", phone)
    validator.validator_for("FixedLine", phone)
    return validator


def build_person_validator() -> AbstractValidator:
    validator = AbstractValidator()
    validator.rule_for("FirstName", RequiredValidator())
    validator.rule_for("FirstName", MaxLengthValidator(15))
    validator.rule_for("LastName", RequiredValidator())
    validator.rule_for("LastName", MaxLengthValidator(15))
    validator.validator_for("Contact", build_contact_validator())
    return validator


def build_main_validator() -> AbstractValidator:
    validator = AbstractValidator()
    person = build_person_validator()
    validator.validator_for("Person1", person)
    validator.validator_for("Person2", person)
    return validator


def build_people_data() -> dict[str, Any]:
    def contact() -> dict[str, Any]:
        return {
            "Email": "mail@gmail.com",
            "Mobile": {"CountryCode": "CZE", "Number": "736483690"},
            "FixedLine": {"CountryCode": "USA", "Number": "736483690"},
        }

    return {
        "Person1": {"Checked": True, "FirstName": "John", "LastName": "Smith", "Contact": contact()},
        "Person2": {"Checked": True, "FirstName": "Adam", "LastName": "Novak", "Contact": contact()},
    }


@pytest.fixture
def localization() -> MessageLocalization:
    return MessageLocalization()


@pytest.fixture
def main_rule(localization):
    return build_main_validator().create_rule("Main", localization=localization)


@pytest.fixture
def people_data() -> dict[str, Any]:
    return build_people_data()
