"""
core/errors.py -- Exception types raised across AuthForms.

Field-level problems are not exceptions: they are FieldError records held by
the form session (core/models.py) and cleared when the field becomes valid.
Only screen-level submission failures travel as exceptions, and the session
catches them so no error ever leaves the session in a non-interactive state.
"""


class FormError(Exception):
    """Base class for AuthForms exceptions."""


class SubmissionError(FormError):
    """Raised by an Auth Backend when a submission is refused.

    The message is shown to the user as-is, so it must be human-readable and
    must not leak internal detail.
    """

    def __init__(self, message: str = "Something went wrong. Please try again.") -> None:
        super().__init__(message)
        self.message = message
