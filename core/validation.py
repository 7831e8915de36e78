"""
core/validation.py -- Declarative validation rules and per-screen form schemas.

A rule is a pure callable mapping a raw field value to a ValidationResult.
Rules compose per field (first failure wins) and a FormSchema is the ordered
set of fields, defaults, and rules for one screen.

Two password rules exist on purpose: sign-up enforces a minimum length, while
sign-in only requires a non-empty value so any previously chosen password is
accepted.

Layer rule: core/ is the kernel. No imports from api/, auth/, or cache/.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from core.config import Settings, get_settings
from core.models import ErrorCode, FieldError, FieldValue, Screen, ValidationResult

ValidationRule = Callable[[FieldValue], ValidationResult]

# local-part@domain.tld -- the domain needs at least one dot and no empty labels.
EMAIL_PATTERN = r"^[^\s@]+@[^\s@.]+(?:\.[^\s@.]+)+$"
_EMAIL_RE = re.compile(EMAIL_PATTERN)

EMAIL_MESSAGE = "Please enter a valid email address"
PASSWORD_REQUIRED_MESSAGE = "Password is required"
CHECKBOX_MESSAGE = "Expected true or false"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _text(raw: FieldValue) -> str:
    # bool is a subclass of int, never of str, so checkbox values fall through.
    return raw if isinstance(raw, str) else ""


def email_rule(raw: FieldValue) -> ValidationResult:
    value = _text(raw)
    if not _EMAIL_RE.fullmatch(value):
        return ValidationResult.invalid(ErrorCode.invalid_format, EMAIL_MESSAGE)
    return ValidationResult.valid(value)


def required(message: str) -> ValidationRule:
    def rule(raw: FieldValue) -> ValidationResult:
        value = _text(raw)
        if not value:
            return ValidationResult.invalid(ErrorCode.required, message)
        return ValidationResult.valid(value)

    return rule


def min_length(length: int, message: str) -> ValidationRule:
    def rule(raw: FieldValue) -> ValidationResult:
        value = _text(raw)
        if len(value) < length:
            return ValidationResult.invalid(ErrorCode.too_short, message)
        return ValidationResult.valid(value)

    return rule


def boolean_rule(raw: FieldValue) -> ValidationResult:
    # Checkbox state must arrive as a real bool; "false" is truthy.
    if not isinstance(raw, bool):
        return ValidationResult.invalid(ErrorCode.invalid_format, CHECKBOX_MESSAGE)
    return ValidationResult.valid(raw)


def compose(*rules: ValidationRule) -> ValidationRule:
    """Chain rules left to right; the first failing rule's result is returned."""

    def rule(raw: FieldValue) -> ValidationResult:
        result = ValidationResult.valid(raw)
        for r in rules:
            result = r(raw)
            if not result.ok:
                return result
        return result

    return rule


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    name: str
    rule: ValidationRule
    default: FieldValue = ""
    required: bool = True


@dataclass(frozen=True)
class FormSchema:
    """Ordered fields, defaults, and rules for one screen.

    scores_password marks the schema whose password field drives the
    strength meter (sign-up only).
    """

    screen: Screen
    fields: tuple[FieldSpec, ...]
    scores_password: bool = False

    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise ValueError(f"Unknown field {name!r} for screen {self.screen.value!r}")

    def has_field(self, name: str) -> bool:
        return any(spec.name == name for spec in self.fields)

    def defaults(self) -> dict[str, FieldValue]:
        return {f.name: f.default for f in self.fields}

    def validate(self, name: str, value: FieldValue) -> ValidationResult:
        return self.field(name).rule(value)

    def validate_all(self, values: dict[str, FieldValue]) -> dict[str, FieldError]:
        """Run every rule and return the errors keyed by field, in schema order."""
        errors: dict[str, FieldError] = {}
        for spec in self.fields:
            value = values.get(spec.name, spec.default)
            result = spec.rule(value)
            if not result.ok:
                errors[spec.name] = FieldError(spec.name, result.code, result.message)
        return errors

    def is_valid(self, values: dict[str, FieldValue]) -> bool:
        return not self.validate_all(values)


def build_schema(screen: Screen, settings: Optional[Settings] = None) -> FormSchema:
    """Build the schema for a screen using the configured minimum lengths."""
    cfg = settings or get_settings()
    email = FieldSpec("email", email_rule)

    if screen is Screen.login:
        return FormSchema(
            screen=screen,
            fields=(
                email,
                FieldSpec("password", required(PASSWORD_REQUIRED_MESSAGE)),
                FieldSpec("remember_me", boolean_rule, default=False, required=False),
            ),
        )
    if screen is Screen.signup:
        return FormSchema(
            screen=screen,
            fields=(
                FieldSpec(
                    "full_name",
                    min_length(
                        cfg.min_full_name_length,
                        f"Name must be at least {cfg.min_full_name_length} characters",
                    ),
                ),
                email,
                FieldSpec(
                    "password",
                    min_length(
                        cfg.min_password_length,
                        f"Password must be at least {cfg.min_password_length} characters",
                    ),
                ),
            ),
            scores_password=True,
        )
    if screen is Screen.forgot_password:
        return FormSchema(screen=screen, fields=(email,))
    raise ValueError(f"Unknown screen: {screen!r}")


@lru_cache
def get_schema(screen: Screen) -> FormSchema:
    """Return the schema for a screen built from the settings singleton."""
    return build_schema(screen)


def validate(field_name: str, raw_value: FieldValue, schema: Optional[FormSchema] = None) -> ValidationResult:
    """Validate one field value.

    Without a schema the sign-up rules apply (the strict password rule);
    remember_me resolves through the sign-in schema, the only one carrying it.
    Raises ValueError for a field no screen defines.
    """
    if schema is not None:
        return schema.validate(field_name, raw_value)
    for screen in (Screen.signup, Screen.login):
        candidate = get_schema(screen)
        if candidate.has_field(field_name):
            return candidate.validate(field_name, raw_value)
    raise ValueError(f"Unknown field: {field_name!r}")
