"""Identity gateway contract and its Supabase Auth implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from supabase import AuthError as SupabaseAuthError
from supabase import Client

from mindful_journal.errors import (
    AuthError,
    ConfirmationRequired,
    DuplicateAccount,
    GatewayError,
    InvalidCredentials,
)
from mindful_journal.models import DEFAULT_USER_NAME, User

logger = logging.getLogger(__name__)

_INVALID_CREDENTIAL_CODES = {"invalid_credentials", "invalid_grant"}
_DUPLICATE_CODES = {"user_already_exists", "email_exists"}


class IdentityGateway(ABC):
    """Authenticates users and reports the current session."""

    @abstractmethod
    def register(self, email: str, password: str, name: str) -> User:
        """Create an account and sign it in.

        Raises:
            DuplicateAccount: An account already exists for ``email``.
            ConfirmationRequired: The account must be confirmed before login.
            AuthError: Any other refusal.
        """

    @abstractmethod
    def login(self, email: str, password: str) -> User:
        """Sign in with email and password.

        Raises:
            InvalidCredentials: The pair was rejected.
            AuthError: Any other refusal.
        """

    @abstractmethod
    def logout(self) -> None:
        """End the current session.

        Raises:
            GatewayError: Sign-out failed; the session is still active.
        """

    @abstractmethod
    def get_current_session(self) -> User | None:
        """Return the signed-in user, or None when there is no session."""


def user_from_auth(auth_user: Any) -> User:
    """Map a Supabase auth user object to a User."""
    metadata = getattr(auth_user, "user_metadata", None) or {}
    return User(
        id=str(auth_user.id),
        email=getattr(auth_user, "email", None) or "",
        name=metadata.get("name") or DEFAULT_USER_NAME,
        created_at=getattr(auth_user, "created_at", None),
    )


def _translate_auth_error(exc: SupabaseAuthError) -> AuthError:
    code = getattr(exc, "code", None) or ""
    message = getattr(exc, "message", None) or str(exc)
    lowered = message.lower()
    if code in _INVALID_CREDENTIAL_CODES or "invalid login credentials" in lowered:
        return InvalidCredentials(message)
    if code in _DUPLICATE_CODES or "already registered" in lowered:
        return DuplicateAccount(message)
    return AuthError(message)


class SupabaseIdentityGateway(IdentityGateway):
    """Identity gateway backed by Supabase Auth."""

    def __init__(self, client: Client) -> None:
        self._auth = client.auth

    def register(self, email: str, password: str, name: str) -> User:
        try:
            response = self._auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"name": name}},
                }
            )
        except SupabaseAuthError as exc:
            raise _translate_auth_error(exc) from exc
        except Exception as exc:
            raise GatewayError(f"Registration request failed: {exc}") from exc

        if response.user is None:
            raise AuthError("Registration failed")
        # Supabase hides existing accounts behind a user with no identities.
        if getattr(response.user, "identities", None) == []:
            raise DuplicateAccount(f"An account already exists for {email}")
        if response.session is None:
            logger.info("Registration for %s awaits email confirmation", email)
            raise ConfirmationRequired(email)

        return user_from_auth(response.user)

    def login(self, email: str, password: str) -> User:
        try:
            response = self._auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as exc:
            raise _translate_auth_error(exc) from exc
        except Exception as exc:
            raise GatewayError(f"Login request failed: {exc}") from exc

        if response.user is None:
            raise AuthError("Login failed")
        return user_from_auth(response.user)

    def logout(self) -> None:
        try:
            self._auth.sign_out()
        except Exception as exc:
            raise GatewayError(f"Sign-out failed: {exc}") from exc

    def get_current_session(self) -> User | None:
        try:
            session = self._auth.get_session()
        except Exception as exc:
            raise GatewayError(f"Session lookup failed: {exc}") from exc
        if session is None or session.user is None:
            return None
        return user_from_auth(session.user)
