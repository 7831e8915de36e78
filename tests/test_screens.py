"""Unit tests for auth/screens.py and auth/backend.py -- screen controllers.

Covers:
- Credentials payload built per screen (SecretStr password, remember-me)
- Sign-in accepts any non-empty password, sign-up enforces length
- ForgotPassword confirmation freeze and "try another email"
- External identity submit paths and provider gating
- Navigation links and the controller factory
- SimulatedAuthBackend acceptance and refusal
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from auth.backend import SimulatedAuthBackend, mask_email
from auth.models import LoginCredentials, ProviderSignIn, ResetRequest, SignupCredentials
from auth.screens import (
    ForgotPasswordController,
    LoginController,
    SignupController,
    build_controller,
)
from core.config import Settings
from core.models import Screen, SubmissionPhase, SubmitResult

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_backend(result: SubmitResult = SubmitResult.success()) -> AsyncMock:
    backend = AsyncMock()
    backend.submit.return_value = result
    return backend


def _sent(backend: AsyncMock):
    """Return the single credentials payload the backend received."""
    backend.submit.assert_awaited_once()
    return backend.submit.await_args.args[0]


# ---------------------------------------------------------------------------
# TestLoginController
# ---------------------------------------------------------------------------


class TestLoginController:
    def test_submit_sends_login_credentials(self):
        backend = _mock_backend()
        login = LoginController(backend)
        login.set_value("email", "jane@example.com")
        login.set_value("password", "hunter2")
        login.set_value("remember_me", True)

        assert asyncio.run(login.submit()) is SubmissionPhase.succeeded

        sent = _sent(backend)
        assert isinstance(sent, LoginCredentials)
        assert sent.email == "jane@example.com"
        assert sent.password.get_secret_value() == "hunter2"
        assert sent.remember_me is True

    def test_password_never_in_repr(self):
        creds = LoginCredentials(email="a@b.co", password="hunter2")
        assert "hunter2" not in repr(creds)
        assert "hunter2" not in str(creds)

    def test_empty_password_blocks_submit(self):
        backend = _mock_backend()
        login = LoginController(backend)
        login.set_value("email", "jane@example.com")

        assert asyncio.run(login.submit()) is SubmissionPhase.idle
        backend.submit.assert_not_awaited()
        assert login.session.errors["password"].message == "Password is required"

    def test_short_password_accepted_on_sign_in(self):
        backend = _mock_backend()
        login = LoginController(backend)
        login.set_value("email", "jane@example.com")
        login.set_value("password", "abc")

        assert asyncio.run(login.submit()) is SubmissionPhase.succeeded

    def test_provider_submit_skips_field_validation(self):
        backend = _mock_backend()
        login = LoginController(backend)

        assert asyncio.run(login.submit_with_provider("google")) is SubmissionPhase.succeeded
        assert _sent(backend) == ProviderSignIn(provider="google", screen=Screen.login)

    def test_provider_failure_follows_same_contract(self):
        backend = _mock_backend(SubmitResult.failure("Microsoft sign-in was cancelled."))
        login = LoginController(backend)

        assert asyncio.run(login.submit_with_provider("microsoft")) is SubmissionPhase.failed
        assert login.session.submission_error == "Microsoft sign-in was cancelled."

    def test_unknown_provider_rejected(self):
        backend = _mock_backend()
        with pytest.raises(ValueError):
            asyncio.run(LoginController(backend).submit_with_provider("github"))
        backend.submit.assert_not_awaited()

    def test_disabled_provider_rejected(self):
        settings = Settings(google_sign_in_enabled=False)
        login = LoginController(_mock_backend(), settings)
        assert [p["name"] for p in login.providers] == ["microsoft"]
        with pytest.raises(ValueError):
            asyncio.run(login.submit_with_provider("google"))

    def test_links(self):
        screens = [link["screen"] for link in LoginController(_mock_backend()).links]
        assert screens == ["forgot-password", "signup"]


# ---------------------------------------------------------------------------
# TestSignupController
# ---------------------------------------------------------------------------


class TestSignupController:
    def test_submit_sends_signup_credentials(self):
        backend = _mock_backend()
        signup = SignupController(backend)
        signup.set_value("full_name", "Jane Doe")
        signup.set_value("email", "jane@example.com")
        signup.set_value("password", "Abcdefg1!")

        assert asyncio.run(signup.submit()) is SubmissionPhase.succeeded
        sent = _sent(backend)
        assert isinstance(sent, SignupCredentials)
        assert sent.full_name == "Jane Doe"
        assert sent.password.get_secret_value() == "Abcdefg1!"

    def test_short_password_blocks_submit(self):
        backend = _mock_backend()
        signup = SignupController(backend)
        signup.set_value("full_name", "Jane Doe")
        signup.set_value("email", "jane@example.com")
        signup.set_value("password", "Abc1!")

        assert asyncio.run(signup.submit()) is SubmissionPhase.idle
        backend.submit.assert_not_awaited()

    def test_strength_in_state(self):
        signup = SignupController(_mock_backend())
        signup.set_value("password", "Abcdefgh")
        assert signup.state()["strength"]["label"] == "Fair"

    def test_offers_providers(self):
        names = [p["name"] for p in SignupController(_mock_backend()).providers]
        assert names == ["google", "microsoft"]


# ---------------------------------------------------------------------------
# TestForgotPasswordController
# ---------------------------------------------------------------------------


class TestForgotPasswordController:
    def test_success_shows_confirmation_with_frozen_email(self):
        backend = _mock_backend()
        forgot = ForgotPasswordController(backend)
        forgot.set_value("email", "jane@example.com")

        assert asyncio.run(forgot.submit()) is SubmissionPhase.succeeded
        assert _sent(backend) == ResetRequest(email="jane@example.com")
        assert forgot.confirmation_shown
        assert forgot.confirmed_email == "jane@example.com"

        forgot.set_value("email", "someone.else@example.com")
        assert forgot.confirmed_email == "jane@example.com"

    def test_try_another_email_resets_to_empty_idle(self):
        forgot = ForgotPasswordController(_mock_backend())
        forgot.set_value("email", "jane@example.com")
        asyncio.run(forgot.submit())

        assert forgot.try_another_email() is True
        assert forgot.session.phase is SubmissionPhase.idle
        assert forgot.session.values == {"email": ""}
        assert not forgot.confirmation_shown
        assert forgot.confirmed_email is None

    def test_failure_shows_no_confirmation(self):
        forgot = ForgotPasswordController(_mock_backend(SubmitResult.failure("Try later.")))
        forgot.set_value("email", "jane@example.com")

        assert asyncio.run(forgot.submit()) is SubmissionPhase.failed
        assert not forgot.confirmation_shown

    def test_invalid_email_never_reaches_backend(self):
        backend = _mock_backend()
        forgot = ForgotPasswordController(backend)
        forgot.set_value("email", "a@b")

        assert asyncio.run(forgot.submit()) is SubmissionPhase.idle
        assert backend.submit.await_count == 0

    def test_no_providers_and_no_password_toggle(self):
        forgot = ForgotPasswordController(_mock_backend())
        assert forgot.providers == []
        with pytest.raises(ValueError):
            asyncio.run(forgot.submit_with_provider("google"))
        with pytest.raises(ValueError):
            forgot.toggle_password_visibility()


# ---------------------------------------------------------------------------
# TestFactory
# ---------------------------------------------------------------------------


class TestFactory:
    @pytest.mark.parametrize(
        "screen, cls",
        [
            (Screen.login, LoginController),
            (Screen.signup, SignupController),
            (Screen.forgot_password, ForgotPasswordController),
            ("forgot-password", ForgotPasswordController),
        ],
    )
    def test_build_controller(self, screen, cls):
        assert isinstance(build_controller(screen, _mock_backend()), cls)

    def test_unknown_screen(self):
        with pytest.raises(ValueError, match="Unknown screen"):
            build_controller("settings", _mock_backend())

    def test_sessions_are_independent(self):
        a = build_controller(Screen.login, _mock_backend())
        b = build_controller(Screen.login, _mock_backend())
        a.set_value("email", "a@b.co")
        assert b.session.values["email"] == ""
        assert a.session.id != b.session.id


# ---------------------------------------------------------------------------
# TestSimulatedBackend
# ---------------------------------------------------------------------------


class TestSimulatedBackend:
    def test_accepts_by_default(self, instant_backend):
        forgot = ForgotPasswordController(instant_backend)
        forgot.set_value("email", "jane@example.com")
        assert asyncio.run(forgot.submit()) is SubmissionPhase.succeeded
        assert instant_backend.calls == 1

    def test_refuses_listed_email_case_insensitively(self, instant_backend):
        login = LoginController(instant_backend)
        login.set_value("email", "Rejected@Example.com")
        login.set_value("password", "whatever")

        assert asyncio.run(login.submit()) is SubmissionPhase.failed
        assert login.session.submission_error == "Invalid email or password."
        assert login.session.values["email"] == "Rejected@Example.com"

    def test_slower_than_timeout_fails(self):
        backend = SimulatedAuthBackend(latency=1.0)
        forgot = ForgotPasswordController(backend)
        forgot.session.submit_timeout = 0.01
        forgot.set_value("email", "jane@example.com")

        assert asyncio.run(forgot.submit()) is SubmissionPhase.failed

    def test_mask_email(self):
        assert mask_email("jane@example.com") == "j***@example.com"
        assert mask_email("not-an-email") == "***"
