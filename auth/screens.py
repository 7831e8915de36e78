"""
auth/screens.py -- Screen controllers for sign-in, sign-up, and password reset.

Each controller binds one FormSchema to one FormSession and supplies the
Auth Backend call made on submit. Controllers own no validation or scoring
logic: rules live in core/validation.py, scoring in core/strength.py, and
phase handling in core/session.py. What a controller adds is the mapping from
a value snapshot to the screen's credentials payload, plus the screen's
extras:

  LoginController          -- external identity submit paths
  SignupController         -- external identity submit paths, strength meter
  ForgotPasswordController -- confirmation view and "try another email"

Layer rule: no imports from api/ or cache/.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from auth.backend import AuthBackend, describe
from auth.models import Credentials, LoginCredentials, ProviderSignIn, ResetRequest, SignupCredentials
from auth.providers import get_enabled_providers, is_enabled
from core.config import Settings, get_settings
from core.models import FieldValue, Screen, SubmissionPhase, SubmitResult, ValidationResult
from core.session import FormSession
from core.validation import build_schema

logger = logging.getLogger("authforms.screens")

# Sibling screens reachable from each screen. Navigation carries no state.
SCREEN_LINKS: dict[Screen, list[dict[str, str]]] = {
    Screen.login: [
        {"screen": Screen.forgot_password.value, "label": "Forgot password?", "href": "/auth/forgot-password"},
        {"screen": Screen.signup.value, "label": "Sign up", "href": "/auth/signup"},
    ],
    Screen.signup: [
        {"screen": Screen.login.value, "label": "Sign in", "href": "/auth/login"},
    ],
    Screen.forgot_password: [
        {"screen": Screen.login.value, "label": "Back to login", "href": "/auth/login"},
    ],
}


class ScreenController:
    """Base controller. Subclasses set `screen` and implement build_credentials()."""

    screen: Screen
    offers_providers = False

    def __init__(self, backend: AuthBackend, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.backend = backend
        self.session = FormSession(
            build_schema(self.screen, self.settings),
            submit_timeout=self.settings.submit_timeout,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(session={self.session!r})"

    # ------------------------------------------------------------------
    # Pass-throughs
    # ------------------------------------------------------------------

    def set_value(self, name: str, value: FieldValue) -> ValidationResult:
        return self.session.set_value(name, value)

    def blur(self, name: str) -> ValidationResult:
        return self.session.blur(name)

    def toggle_password_visibility(self) -> bool:
        if not self.session.schema.has_field("password"):
            raise ValueError(f"Screen {self.screen.value!r} has no password field")
        return self.session.toggle_password_visibility()

    @property
    def links(self) -> list[dict[str, str]]:
        return SCREEN_LINKS[self.screen]

    @property
    def providers(self) -> list[dict]:
        if not self.offers_providers:
            return []
        return get_enabled_providers(self.settings)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_credentials(self, values: dict[str, FieldValue]) -> Credentials:
        raise NotImplementedError

    async def submit(self) -> SubmissionPhase:
        """Primary credential submit."""
        return await self.session.submit(self._send, on_success=self._on_success)

    async def submit_with_provider(self, provider: str) -> SubmissionPhase:
        """Alternate submit through an external identity provider.

        Skips field validation (nothing typed is sent) but follows the same
        submitting/succeeded/failed contract as submit().

        Raises:
            ValueError: If the screen offers no providers or the provider is
                        not enabled.
        """
        if not self.offers_providers or not is_enabled(provider, self.settings):
            raise ValueError(f"Provider {provider!r} is not available on {self.screen.value!r}")
        payload = ProviderSignIn(provider=provider, screen=self.screen)

        async def send(_values: dict[str, FieldValue]) -> SubmitResult:
            return await self.backend.submit(payload)

        return await self.session.submit(send, validate=False, on_success=self._on_success)

    async def _send(self, values: dict[str, FieldValue]) -> SubmitResult:
        return await self.backend.submit(self.build_credentials(values))

    def _on_success(self, values: dict[str, FieldValue]) -> None:
        # Login/Signup success hands over to the router/session layer outside this package.
        logger.info("%s submission succeeded", self.screen.value)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def state(self) -> dict[str, Any]:
        """Session snapshot plus the screen's navigation links and providers."""
        data = self.session.snapshot()
        data["links"] = self.links
        data["providers"] = self.providers
        return data


class LoginController(ScreenController):
    screen = Screen.login
    offers_providers = True

    def build_credentials(self, values: dict[str, FieldValue]) -> LoginCredentials:
        return LoginCredentials(
            email=values["email"],
            password=values["password"],
            remember_me=values["remember_me"] is True,
        )


class SignupController(ScreenController):
    screen = Screen.signup
    offers_providers = True

    def build_credentials(self, values: dict[str, FieldValue]) -> SignupCredentials:
        return SignupCredentials(
            full_name=values["full_name"],
            email=values["email"],
            password=values["password"],
        )


class ForgotPasswordController(ScreenController):
    screen = Screen.forgot_password

    def build_credentials(self, values: dict[str, FieldValue]) -> ResetRequest:
        return ResetRequest(email=values["email"])

    def _on_success(self, values: dict[str, FieldValue]) -> None:
        # Freeze the address shown in "we sent a link to ...": later edits
        # to the field must not change the confirmation text.
        self.session.confirmation_shown = True
        self.session.confirmed_email = values["email"]
        logger.info("Reset link requested: %s", describe(ResetRequest(email=values["email"])))

    @property
    def confirmation_shown(self) -> bool:
        return self.session.confirmation_shown

    @property
    def confirmed_email(self) -> Optional[str]:
        return self.session.confirmed_email

    def try_another_email(self) -> bool:
        """Leave the confirmation view and start over with an empty email."""
        return self.session.reset()


_CONTROLLERS: dict[Screen, type[ScreenController]] = {
    Screen.login: LoginController,
    Screen.signup: SignupController,
    Screen.forgot_password: ForgotPasswordController,
}


def build_controller(screen: Screen, backend: AuthBackend, settings: Optional[Settings] = None) -> ScreenController:
    """Create the controller (and its fresh session) for a screen."""
    try:
        cls = _CONTROLLERS[Screen(screen)]
    except ValueError:
        raise ValueError(f"Unknown screen: {screen!r}") from None
    return cls(backend, settings)
