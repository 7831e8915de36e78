"""
API request and response models for AuthForms REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: core/ models = domain truth; api/ models = API contract.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from auth.screens import ScreenController
from core.models import Screen, StrengthScore

# bool first: JSON true/false must not be coerced to "True"/"False" strings.
_FieldValue = Union[bool, str]

_MASK_CHAR = "*"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class FieldUpdate(BaseModel):
    """Request body for PUT /api/v1/forms/sessions/{id}/fields/{field}."""

    value: _FieldValue


class ValidateRequest(BaseModel):
    """Request body for POST /api/v1/forms/validate.

    screen is optional: without it the sign-up rules apply, which is what a
    caller checking a single email or name wants.
    """

    field: str = Field(min_length=1, max_length=50)
    value: _FieldValue
    screen: Optional[Screen] = None


class StrengthRequest(BaseModel):
    """Request body for POST /api/v1/forms/password-strength."""

    password: str = Field(max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class FieldErrorOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    message: str


class StrengthResponse(BaseModel):
    """Advisory strength meter state. Also embedded in sign-up form states."""

    model_config = ConfigDict(frozen=True)

    value: int
    label: str
    unmet: list[str] = Field(default_factory=list)

    @classmethod
    def from_score(cls, result: StrengthScore) -> "StrengthResponse":
        return cls(value=result.value, label=result.label.value, unmet=list(result.unmet))


class ValidateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool
    code: Optional[str] = None
    message: Optional[str] = None


class LinkOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    screen: str
    label: str
    href: str


class ProviderInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str


class FormStateResponse(BaseModel):
    """Everything a client needs to render one screen.

    values.password is masked with one '*' per character unless the user
    turned password visibility on.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    screen: Screen
    phase: str
    values: dict[str, _FieldValue]
    errors: dict[str, FieldErrorOut]
    submission_error: Optional[str]
    can_submit: bool
    password_visible: bool
    strength: Optional[StrengthResponse] = None
    confirmation_shown: bool = False
    confirmed_email: Optional[str] = None
    links: list[LinkOut] = Field(default_factory=list)
    providers: list[ProviderInfo] = Field(default_factory=list)

    @classmethod
    def from_controller(cls, controller: ScreenController) -> "FormStateResponse":
        """Build the response from a live controller (Factory Method)."""
        state = controller.state()
        values = dict(state["values"])
        password = values.get("password")
        if isinstance(password, str) and not state["password_visible"]:
            values["password"] = _MASK_CHAR * len(password)
        return cls(
            session_id=state["session_id"],
            screen=state["screen"],
            phase=state["phase"],
            values=values,
            errors=state["errors"],
            submission_error=state["submission_error"],
            can_submit=state["can_submit"],
            password_visible=state["password_visible"],
            strength=state["strength"],
            confirmation_shown=state["confirmation_shown"],
            confirmed_email=state["confirmed_email"],
            links=state["links"],
            providers=state["providers"],
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    active_sessions: int = 0
