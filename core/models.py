from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# ---------------------------------------------------------------------------
# Domain types
# ---------------------------------------------------------------------------

# A form field holds either text or a checkbox state.
FieldValue = Union[str, bool]


class Screen(str, Enum):
    login = "login"
    signup = "signup"
    forgot_password = "forgot-password"


class SubmissionPhase(str, Enum):
    idle = "idle"
    validating = "validating"
    submitting = "submitting"
    succeeded = "succeeded"
    failed = "failed"


class ErrorCode(str, Enum):
    required = "required"
    invalid_format = "invalid_format"
    too_short = "too_short"


class StrengthLabel(str, Enum):
    weak = "Weak"
    fair = "Fair"
    good = "Good"
    strong = "Strong"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    value: Optional[FieldValue] = None
    code: Optional[ErrorCode] = None
    message: Optional[str] = None

    @classmethod
    def valid(cls, value: FieldValue) -> "ValidationResult":
        return cls(ok=True, value=value)

    @classmethod
    def invalid(cls, code: ErrorCode, message: str) -> "ValidationResult":
        return cls(ok=False, code=code, message=message)


@dataclass(frozen=True)
class FieldError:
    """An active validation error on one field. Blocks submit until cleared."""

    field: str
    code: ErrorCode
    message: str


@dataclass(frozen=True)
class StrengthScore:
    value: int  # 0..100 in steps of 25
    label: StrengthLabel
    unmet: tuple[str, ...] = ()  # hints for missing criteria


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of one Auth Backend call."""

    ok: bool
    message: Optional[str] = None

    @classmethod
    def success(cls, message: Optional[str] = None) -> "SubmitResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "SubmitResult":
        return cls(ok=False, message=message)
