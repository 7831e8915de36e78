"""
auth/backend.py -- The Auth Backend capability and its simulated stand-in.

The form engine never talks to an authentication server directly. Screen
controllers receive an object satisfying AuthBackend and call submit() once
per submission. Real transports live outside this repository; anything with
an async submit(credentials) -> SubmitResult method plugs in.

Contract for implementations:
  - return SubmitResult.success() when the request was accepted;
  - return SubmitResult.failure(message) or raise SubmissionError(message)
    when it was refused -- the message is shown to the user verbatim;
  - any other exception is logged by the session and shown as a generic
    failure.

SimulatedAuthBackend reproduces the placeholder behavior the screens shipped
with (a fixed delay, then success) so the UI and the CLI can run end-to-end
without a server.

Layer rule: no imports from api/ or cache/.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Optional, Protocol

from auth.models import Credentials, LoginCredentials, ProviderSignIn, ResetRequest, SignupCredentials
from core.config import Settings, get_settings
from core.models import SubmitResult

logger = logging.getLogger("authforms.backend")


class AuthBackend(Protocol):
    async def submit(self, credentials: Credentials) -> SubmitResult: ...


def mask_email(email: str) -> str:
    """Return 'j***@example.com' for logging. Keeps the domain for triage."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def describe(credentials: Credentials) -> str:
    """Short, log-safe description of a credentials payload."""
    if isinstance(credentials, LoginCredentials):
        return f"login for {mask_email(credentials.email)} (remember_me={credentials.remember_me})"
    if isinstance(credentials, SignupCredentials):
        return f"signup for {mask_email(credentials.email)}"
    if isinstance(credentials, ResetRequest):
        return f"password reset for {mask_email(credentials.email)}"
    if isinstance(credentials, ProviderSignIn):
        return f"{credentials.provider} sign-in from {credentials.screen.value}"
    return type(credentials).__name__


class SimulatedAuthBackend:
    """Accepts every submission after a fixed delay, except refused emails.

    Args:
        latency:         Seconds to wait before answering (the placeholder
                         round trip). 0 answers on the next loop iteration.
        rejected_emails: Addresses answered with a failure, so the failed
                         phase can be exercised without a real server.
    """

    def __init__(self, latency: float = 2.0, rejected_emails: Iterable[str] = ()) -> None:
        self.latency = latency
        self.rejected_emails = {e.strip().lower() for e in rejected_emails}
        self.calls = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SimulatedAuthBackend":
        cfg = settings or get_settings()
        return cls(latency=cfg.simulated_latency_seconds, rejected_emails=cfg.simulated_rejected_emails)

    async def submit(self, credentials: Credentials) -> SubmitResult:
        self.calls += 1
        await asyncio.sleep(self.latency)
        email = getattr(credentials, "email", "")
        if email and email.strip().lower() in self.rejected_emails:
            logger.info("Simulated backend refused %s", describe(credentials))
            if isinstance(credentials, LoginCredentials):
                return SubmitResult.failure("Invalid email or password.")
            if isinstance(credentials, SignupCredentials):
                return SubmitResult.failure("An account with this email already exists.")
            return SubmitResult.failure("We could not process this request. Please try again.")
        logger.info("Simulated backend accepted %s", describe(credentials))
        return SubmitResult.success()
