"""
api/routes/v1/forms.py -- Form session endpoints for the auth screens.

A front end mounts a screen by creating a session, streams field edits and
blur events into it, and submits. Every mutating call returns the full
FormStateResponse so the client renders from server truth.

Route registration order matters here. FastAPI resolves routes in the order
they are added to the router. The literal paths /forms/password-strength and
/forms/validate must be registered before /forms/{screen} or FastAPI will
match "validate" as a screen name and answer 422 instead of routing to the
correct handler.

Routes:
  POST   /forms/password-strength                      -- score a password
  POST   /forms/validate                               -- validate one field value
  POST   /forms/{screen}                               -- mount a screen (201)
  GET    /forms/sessions/{session_id}                  -- current state
  PUT    /forms/sessions/{session_id}/fields/{field}   -- change a value
  POST   /forms/sessions/{session_id}/fields/{field}/blur
  POST   /forms/sessions/{session_id}/password-visibility
  POST   /forms/sessions/{session_id}/submit           -- rate limited
  POST   /forms/sessions/{session_id}/providers/{provider} -- rate limited
  POST   /forms/sessions/{session_id}/reset            -- "try another email"
  DELETE /forms/sessions/{session_id}                  -- unmount (204)

Blocked and failed submits are not HTTP errors: the response is 200 and the
phase, errors, and submission_error fields describe what happened.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from api.limiter import limiter, submit_limit
from api.models import (
    ErrorDetail,
    FieldUpdate,
    FormStateResponse,
    StrengthRequest,
    StrengthResponse,
    ValidateRequest,
    ValidateResponse,
)
from auth.screens import ForgotPasswordController, ScreenController, build_controller
from cache.store import SessionRegistry
from core.config import get_settings
from core.models import Screen
from core.strength import score
from core.validation import get_schema, validate

logger = logging.getLogger("authforms.api.forms")

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _not_found(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=404, detail=ErrorDetail(code=code, message=message).model_dump())


def _conflict(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=409, detail=ErrorDetail(code=code, message=message).model_dump())


def _get_controller(request: Request, session_id: str) -> ScreenController:
    registry: SessionRegistry = request.app.state.sessions
    controller = registry.get(session_id)
    if controller is None:
        raise _not_found("session_not_found", "Form session not found or expired.")
    return controller


def _require_field(controller: ScreenController, field: str) -> None:
    if not controller.session.schema.has_field(field):
        raise _not_found("unknown_field", f"Screen {controller.screen.value!r} has no field {field[:50]!r}.")


# ---------------------------------------------------------------------------
# Stateless helpers -- registered FIRST to avoid /forms/{screen} capture
# ---------------------------------------------------------------------------


@router.post("/forms/password-strength", response_model=StrengthResponse)
async def password_strength(body: StrengthRequest) -> StrengthResponse:
    """Return the advisory 0-100 strength score and label for a password."""
    return StrengthResponse.from_score(score(body.password))


@router.post("/forms/validate", response_model=ValidateResponse)
async def validate_field(body: ValidateRequest) -> ValidateResponse:
    """Validate one value against a screen's rule (sign-up rules when no screen given)."""
    schema = get_schema(body.screen) if body.screen is not None else None
    try:
        result = validate(body.field, body.value, schema)
    except ValueError:
        raise _not_found("unknown_field", f"No rule for field {body.field[:50]!r}.") from None
    return ValidateResponse(
        ok=result.ok,
        code=result.code.value if result.code else None,
        message=result.message,
    )


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


@router.post("/forms/{screen}", response_model=FormStateResponse, status_code=201)
async def create_session(request: Request, screen: Screen) -> FormStateResponse:
    """Mount a screen: create its controller and a fresh idle session."""
    registry: SessionRegistry = request.app.state.sessions
    controller = build_controller(screen, request.app.state.backend, get_settings())
    registry.put(controller)
    logger.debug("Mounted %r", controller)
    return FormStateResponse.from_controller(controller)


@router.get("/forms/sessions/{session_id}", response_model=FormStateResponse)
async def get_session(request: Request, session_id: str) -> FormStateResponse:
    return FormStateResponse.from_controller(_get_controller(request, session_id))


@router.delete("/forms/sessions/{session_id}", status_code=204)
async def discard_session(request: Request, session_id: str) -> Response:
    """Unmount a screen. Its values and errors are gone for good."""
    registry: SessionRegistry = request.app.state.sessions
    if not registry.discard(session_id):
        raise _not_found("session_not_found", "Form session not found or expired.")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Field events
# ---------------------------------------------------------------------------


@router.put("/forms/sessions/{session_id}/fields/{field}", response_model=FormStateResponse)
async def update_field(request: Request, session_id: str, field: str, body: FieldUpdate) -> FormStateResponse:
    """Change one value; the field is re-validated immediately."""
    controller = _get_controller(request, session_id)
    _require_field(controller, field)
    controller.set_value(field, body.value)
    return FormStateResponse.from_controller(controller)


@router.post("/forms/sessions/{session_id}/fields/{field}/blur", response_model=FormStateResponse)
async def blur_field(request: Request, session_id: str, field: str) -> FormStateResponse:
    controller = _get_controller(request, session_id)
    _require_field(controller, field)
    controller.blur(field)
    return FormStateResponse.from_controller(controller)


@router.post("/forms/sessions/{session_id}/password-visibility", response_model=FormStateResponse)
async def toggle_password_visibility(request: Request, session_id: str) -> FormStateResponse:
    controller = _get_controller(request, session_id)
    try:
        controller.toggle_password_visibility()
    except ValueError:
        raise _conflict("no_password_field", "This screen has no password field.") from None
    return FormStateResponse.from_controller(controller)


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@limiter.limit(submit_limit)
@router.post("/forms/sessions/{session_id}/submit", response_model=FormStateResponse)
async def submit(request: Request, session_id: str) -> FormStateResponse:
    """Submit the screen's credentials.

    Returns after the backend call resolves. A concurrent submit on the same
    session returns immediately with phase "submitting" and no second call.
    """
    controller = _get_controller(request, session_id)
    await controller.submit()
    return FormStateResponse.from_controller(controller)


@limiter.limit(submit_limit)
@router.post("/forms/sessions/{session_id}/providers/{provider}", response_model=FormStateResponse)
async def submit_with_provider(request: Request, session_id: str, provider: str) -> FormStateResponse:
    """Continue with an external identity provider (sign-in and sign-up only)."""
    controller = _get_controller(request, session_id)
    try:
        await controller.submit_with_provider(provider)
    except ValueError:
        raise _not_found("unknown_provider", f"Provider {provider[:50]!r} is not available here.") from None
    return FormStateResponse.from_controller(controller)


@router.post("/forms/sessions/{session_id}/reset", response_model=FormStateResponse)
async def reset_session(request: Request, session_id: str) -> FormStateResponse:
    """Start over from the password reset confirmation view ("try another email")."""
    controller = _get_controller(request, session_id)
    if not isinstance(controller, ForgotPasswordController):
        raise _conflict("reset_not_supported", "Only the password reset screen can be reset.")
    if not controller.try_another_email():
        raise _conflict("submission_in_flight", "Wait for the pending request to finish.")
    return FormStateResponse.from_controller(controller)
