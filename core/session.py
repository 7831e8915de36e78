"""
core/session.py -- Per-screen form session state machine.

A FormSession is the live instance of one FormSchema: current field values,
active field errors, the submission phase, and the screen's auxiliary flags.
One session exists per mounted screen and nothing is shared between
sessions.

Phase transitions:

    idle --submit--> validating --errors--> idle
                                --ok------> submitting --ok-----> succeeded
                                                       --fail---> failed
    failed --submit--> validating --> ...   (same session, not a new one)

Rules the machine enforces:
  - submit is a no-op while submitting (one in-flight call per session) and
    after success (terminal until reset()).
  - an invalid form never reaches the backend action.
  - the backend outcome changes only the phase and submission_error; field
    values are left exactly as the user typed them.
  - every failure mode (refusal, SubmissionError, timeout, unexpected
    exception) lands in failed, which stays editable.

Password visibility is orthogonal to all of the above.

Layer rule: core/ is the kernel. No imports from api/, auth/, or cache/.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from core.errors import SubmissionError
from core.models import FieldError, FieldValue, StrengthScore, SubmissionPhase, SubmitResult, ValidationResult
from core.strength import score
from core.validation import FormSchema

logger = logging.getLogger("authforms.session")

SubmitAction = Callable[[dict[str, FieldValue]], Awaitable[SubmitResult]]

TIMEOUT_MESSAGE = "The request timed out. Please try again."
CANCELLED_MESSAGE = "The request was interrupted. Please try again."
GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."


class FormSession:
    def __init__(self, schema: FormSchema, submit_timeout: Optional[float] = None) -> None:
        self.id = uuid.uuid4().hex
        self.schema = schema
        self.submit_timeout = submit_timeout
        self.values: dict[str, FieldValue] = schema.defaults()
        self.errors: dict[str, FieldError] = {}
        self.phase = SubmissionPhase.idle
        self.submission_error: Optional[str] = None
        self.password_visible = False
        # ForgotPassword confirmation view; unused by the other screens.
        self.confirmation_shown = False
        self.confirmed_email: Optional[str] = None

    def __repr__(self) -> str:
        return f"FormSession(id={self.id!r}, screen={self.schema.screen.value!r}, phase={self.phase.value!r})"

    # ------------------------------------------------------------------
    # Field editing
    # ------------------------------------------------------------------

    def set_value(self, name: str, value: FieldValue) -> ValidationResult:
        """Store a new value and re-validate that field (on-change validation)."""
        self.schema.field(name)  # raises ValueError for unknown fields
        self.values[name] = value
        return self._check(name)

    def blur(self, name: str) -> ValidationResult:
        """Validate the field's current value when it loses focus."""
        self.schema.field(name)
        return self._check(name)

    def validate_all(self) -> bool:
        """Validate every field and surface all errors. Returns True if none."""
        self.errors = self.schema.validate_all(self.values)
        return not self.errors

    def _check(self, name: str) -> ValidationResult:
        result = self.schema.validate(name, self.values[name])
        if result.ok:
            self.errors.pop(name, None)
        else:
            self.errors[name] = FieldError(name, result.code, result.message)
        return result

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.schema.is_valid(self.values)

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return self.phase in (SubmissionPhase.idle, SubmissionPhase.failed) and self.is_valid

    @property
    def strength(self) -> Optional[StrengthScore]:
        """Strength of the current password, recomputed on every access."""
        if not self.schema.scores_password:
            return None
        password = self.values.get("password", "")
        return score(password if isinstance(password, str) else "")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(
        self,
        action: SubmitAction,
        *,
        validate: bool = True,
        on_success: Optional[Callable[[dict[str, FieldValue]], None]] = None,
    ) -> SubmissionPhase:
        """Run one submission through the phase machine and return the new phase.

        Args:
            action:     Awaitable backend call receiving a snapshot of the values.
            validate:   False for opaque submit paths (external identity
                        providers) that do not depend on the typed fields.
            on_success: Called with the submitted snapshot after the
                        transition to succeeded.
        """
        if self.phase is SubmissionPhase.submitting:
            logger.debug("%r: submit ignored, a submission is already in flight", self)
            return self.phase
        if self.phase is SubmissionPhase.succeeded:
            logger.debug("%r: submit ignored, session already succeeded", self)
            return self.phase

        if validate:
            self._transition(SubmissionPhase.validating)
            if not self.validate_all():
                self.submission_error = None
                self._transition(SubmissionPhase.idle)
                logger.info("%r: submit blocked by %d field error(s)", self, len(self.errors))
                return self.phase

        snapshot = dict(self.values)
        self.submission_error = None
        self._transition(SubmissionPhase.submitting)
        try:
            if self.submit_timeout:
                result = await asyncio.wait_for(action(snapshot), self.submit_timeout)
            else:
                result = await action(snapshot)
        except asyncio.TimeoutError:
            logger.warning("%r: backend did not answer within %.1fs", self, self.submit_timeout)
            return self._fail(TIMEOUT_MESSAGE)
        except asyncio.CancelledError:
            self._fail(CANCELLED_MESSAGE)
            raise
        except SubmissionError as exc:
            return self._fail(exc.message)
        except Exception:
            logger.exception("%r: backend raised during submission", self)
            return self._fail(GENERIC_FAILURE_MESSAGE)

        if not result.ok:
            return self._fail(result.message or GENERIC_FAILURE_MESSAGE)

        self._transition(SubmissionPhase.succeeded)
        if on_success is not None:
            on_success(snapshot)
        return self.phase

    def _fail(self, message: str) -> SubmissionPhase:
        self.submission_error = message
        self._transition(SubmissionPhase.failed)
        return self.phase

    def _transition(self, phase: SubmissionPhase) -> None:
        logger.debug("%r -> %s", self, phase.value)
        self.phase = phase

    # ------------------------------------------------------------------
    # Auxiliary state
    # ------------------------------------------------------------------

    def toggle_password_visibility(self) -> bool:
        """Flip masked/plain rendering of the password. Allowed in any phase."""
        self.password_visible = not self.password_visible
        return self.password_visible

    def reset(self) -> bool:
        """Return to idle with default values and no errors.

        Refused (returns False) while a submission is in flight, since the
        pending outcome would land on the fresh form.
        """
        if self.phase is SubmissionPhase.submitting:
            logger.debug("%r: reset ignored while submitting", self)
            return False
        self.values = self.schema.defaults()
        self.errors = {}
        self.submission_error = None
        self.confirmation_shown = False
        self.confirmed_email = None
        self._transition(SubmissionPhase.idle)
        return True

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the session for callers that render it."""
        strength = self.strength
        return {
            "session_id": self.id,
            "screen": self.schema.screen.value,
            "phase": self.phase.value,
            "values": dict(self.values),
            "errors": {name: {"code": e.code.value, "message": e.message} for name, e in self.errors.items()},
            "submission_error": self.submission_error,
            "can_submit": self.can_submit,
            "password_visible": self.password_visible,
            "strength": (
                None
                if strength is None
                else {"value": strength.value, "label": strength.label.value, "unmet": list(strength.unmet)}
            ),
            "confirmation_shown": self.confirmation_shown,
            "confirmed_email": self.confirmed_email,
        }
