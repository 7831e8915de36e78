"""
auth/models.py -- Credential payloads handed to the Auth Backend.

Pattern: immutable Pydantic models, one per submit path. They are built by
the screen controllers from an already-validated value snapshot, so they
carry no validation rules of their own beyond types.

Passwords are SecretStr: str() and repr() print '**********', so a payload
that ends up in a log line or a traceback never exposes the plaintext.
Backends call .get_secret_value() at the point of use.

Layer rule: no imports from api/ or cache/.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, SecretStr

from core.models import Screen


class LoginCredentials(BaseModel):
    """Primary sign-in submit: email + password + remember-me."""

    model_config = ConfigDict(frozen=True)

    email: str
    password: SecretStr
    remember_me: bool = False


class SignupCredentials(BaseModel):
    """Account registration submit."""

    model_config = ConfigDict(frozen=True)

    full_name: str
    email: str
    password: SecretStr


class ResetRequest(BaseModel):
    """Password reset link request."""

    model_config = ConfigDict(frozen=True)

    email: str


class ProviderSignIn(BaseModel):
    """External identity submit ("continue with Google/Microsoft").

    Opaque to the form engine: no typed fields travel with it, only which
    provider was chosen and from which screen.
    """

    model_config = ConfigDict(frozen=True)

    provider: str
    screen: Screen


Credentials = Union[LoginCredentials, SignupCredentials, ResetRequest, ProviderSignIn]
