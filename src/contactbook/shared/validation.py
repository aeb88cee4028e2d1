"""
Declarative validation rules for commands and queries.

A validator is a class listing ``Rule`` objects. Each rule reads one
attribute from the request, applies a check, and records a message under
the attribute's camelCase name when the check fails. Every rule runs, so a
single pass reports all problems at once.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar, Generic, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic.alias_generators import to_camel

T = TypeVar("T")

Check = Callable[[Any], bool]


@dataclass
class ValidationResult:
    """Mutable validation result.

    - default is_valid=True
    - add_error() flips is_valid=False and appends {"field": ..., "message": ...}
    - errors property returns a COPY
    """

    is_valid: bool = True
    _errors: list[dict[str, str]] = field(default_factory=list, repr=False)

    def add_error(self, field: str, message: str) -> None:
        self.is_valid = False
        self._errors.append({"field": field, "message": message})

    def merge(self, other: ValidationResult) -> None:
        for error in other.errors:
            self.add_error(error["field"], error["message"])

    @property
    def errors(self) -> list[dict[str, str]]:
        return list(self._errors)

    def by_field(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for error in self._errors:
            grouped.setdefault(error["field"], []).append(error["message"])
        return grouped


@dataclass(frozen=True)
class Rule:
    """One check against one request attribute.

    ``when`` receives the whole request and can switch the rule off.
    """

    field: str
    check: Check
    message: str
    when: Callable[[Any], bool] | None = None


class Validator(Generic[T]):
    """Runs a fixed list of rules against a request object."""

    rules: ClassVar[Sequence[Rule]] = ()

    def validate(self, request: T) -> ValidationResult:
        result = ValidationResult()
        for rule in self.rules:
            if rule.when is not None and not rule.when(request):
                continue
            if not rule.check(getattr(request, rule.field)):
                result.add_error(to_camel(rule.field), rule.message)
        return result


# ---------------------------------------------------------------------------
# Checks. Length/format checks pass on None; pair them with not_blank when
# the value is required.
# ---------------------------------------------------------------------------


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def not_blank(value: Any) -> bool:
    return not is_blank(value)


def present(value: Any) -> bool:
    return value is not None


def length(min_length: int, max_length: int) -> Check:
    def check(value: str | None) -> bool:
        return value is None or min_length <= len(value) <= max_length

    return check


def min_length(limit: int) -> Check:
    def check(value: str | None) -> bool:
        return value is None or len(value) >= limit

    return check


def max_length(limit: int) -> Check:
    return length(0, limit)


def matches(pattern: str) -> Check:
    compiled = re.compile(pattern)

    def check(value: str | None) -> bool:
        return value is None or compiled.search(value) is not None

    return check


def greater_than(bound: int) -> Check:
    def check(value: int | None) -> bool:
        return value is None or value > bound

    return check


def greater_or_equal(bound: int) -> Check:
    def check(value: int | None) -> bool:
        return value is None or value >= bound

    return check


def one_of(allowed: Collection[Any]) -> Check:
    def check(value: Any) -> bool:
        return value is None or value in allowed

    return check


def email_address(value: str | None) -> bool:
    if value is None:
        return True
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def years_ago(years: int, today: date | None = None) -> date:
    """Same calendar day ``years`` back; Feb 29 falls back to Feb 28."""
    today = today or date.today()
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


def before_today(value: date | None) -> bool:
    return value is None or value < date.today()


def within_years(years: int) -> Check:
    def check(value: date | None) -> bool:
        return value is None or value > years_ago(years)

    return check
