"""Exception hierarchy shared by the gateway, store and generator adapters."""

from __future__ import annotations


class JournalError(Exception):
    """Base error for everything raised by mindful_journal."""


class ConfigError(JournalError):
    """Required configuration is missing or invalid."""


class ValidationError(JournalError):
    """A required field is empty. Raised locally, never by the backend."""


class AuthError(JournalError):
    """Authentication or registration was refused."""


class InvalidCredentials(AuthError):
    """Email/password pair was rejected."""


class DuplicateAccount(AuthError):
    """An account already exists for this email."""


class ConfirmationRequired(JournalError):
    """Registration succeeded but the account must be confirmed by email.

    Not an ``AuthError``; callers present it as a success notice.
    """

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            "Account created! Please check your email to confirm your "
            "registration before logging in."
        )


class GatewayError(JournalError):
    """The identity gateway failed (sign-out, session lookup)."""


class BackendError(JournalError):
    """Any entry store read or write failure."""


class ReflectionError(JournalError):
    """Base error for reflection generation."""


class ReflectionUnavailable(ReflectionError):
    """The reflection generator is not configured."""


class GenerationError(ReflectionError):
    """The reflection generator was reachable but the call failed."""
