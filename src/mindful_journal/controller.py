"""Session controller: current user, active view, and the entry list.

The controller owns all session state.  Views read ``controller.state``
and call the operations below; they never mutate ``entries`` directly.
Backend failures are caught here, logged, and reported as one-line
notices so the user stays in the current view and can retry.
"""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from mindful_journal.browser import filter_entries
from mindful_journal.errors import GatewayError, JournalError, ValidationError
from mindful_journal.identity import IdentityGateway
from mindful_journal.models import EntryDraft, JournalEntry, Mood, User, View
from mindful_journal.repository import EntryRepository

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this memory?"


class NoticeLevel(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A one-line message for the user."""

    level: NoticeLevel
    message: str


Notifier = Callable[[Notice], None]
Confirmer = Callable[[str], bool]


def _log_notice(notice: Notice) -> None:
    logger.info("[%s] %s", notice.level, notice.message)


def _deny(_prompt: str) -> bool:
    return False


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def new_entry_id() -> str:
    """Return a random 128-bit (UUID4) identifier for a new entry."""
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.warning("os.urandom unavailable, using fallback id generator")
        return str(uuid.UUID(int=random.getrandbits(128), version=4))


@dataclass
class SessionState:
    """Everything the views need to render."""

    current_user: User | None = None
    view: View = View.AUTHENTICATING
    entries: list[JournalEntry] = field(default_factory=list)
    entry_being_edited: JournalEntry | None = None
    active_entry_id: str | None = None
    is_loading_entries: bool = False
    is_deleting: bool = False


class SessionController:
    """Drives login/logout, view transitions, and entry persistence.

    Args:
        gateway: Identity gateway used for all auth calls.
        repository: Entry repository used for all entry I/O.
        notify: Receives user-facing notices. Defaults to logging them.
        confirm: Blocking yes/no prompt used before deletes. Defaults to
            refusing.
        clock: Returns the current aware datetime.
        id_factory: Returns a fresh entry identifier.
    """

    def __init__(
        self,
        gateway: IdentityGateway,
        repository: EntryRepository,
        *,
        notify: Notifier | None = None,
        confirm: Confirmer | None = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = new_entry_id,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._notify = notify or _log_notice
        self._confirm = confirm or _deny
        self._clock = clock
        self._id_factory = id_factory
        self.state = SessionState()

    # ── Helpers ──────────────────────────────────────────────────

    def _report(self, message: str, level: NoticeLevel = NoticeLevel.ERROR) -> None:
        self._notify(Notice(level=level, message=message))

    def _enter_session(self, user: User) -> None:
        self.state.current_user = user
        self.load_entries(user.id)
        self.state.view = View.BROWSING

    def _clear_editing(self) -> None:
        self.state.entry_being_edited = None
        self.state.active_entry_id = None

    # ── Authentication ───────────────────────────────────────────

    def boot(self) -> None:
        """Resume an existing session if the gateway has one.

        Any failure is logged and treated exactly like "no session".
        """
        try:
            user = self._gateway.get_current_session()
        except Exception:
            logger.warning("Failed to initialize session", exc_info=True)
            user = None

        if user is None:
            self.state.view = View.AUTHENTICATING
            return

        logger.info("Resumed session for %s", user.email)
        self._enter_session(user)

    def login(self, email: str, password: str) -> User:
        """Sign in and switch to the dashboard.

        Raises:
            AuthError: Credentials were refused. State is unchanged.
        """
        user = self._gateway.login(email.strip(), password)
        logger.info("Logged in as %s", user.email)
        self._enter_session(user)
        return user

    def register(self, email: str, password: str, name: str) -> User:
        """Create an account and, when no confirmation is needed, sign in.

        Raises:
            ValidationError: ``name`` is empty.
            ConfirmationRequired: The account must be confirmed by email first.
            AuthError: Registration was refused.
        """
        if not name.strip():
            raise ValidationError("Name is required")
        user = self._gateway.register(email.strip(), password, name.strip())
        logger.info("Registered %s", user.email)
        self._enter_session(user)
        return user

    def logout(self) -> bool:
        """Sign out and return to the authentication view.

        On failure nothing changes and the error is reported.
        """
        try:
            self._gateway.logout()
        except GatewayError as exc:
            logger.warning("Logout failed: %s", exc, exc_info=True)
            self._report("Logout failed. Please try again.")
            return False

        self.state.current_user = None
        self.state.entries = []
        self._clear_editing()
        self.state.view = View.AUTHENTICATING
        return True

    # ── Entries ──────────────────────────────────────────────────

    def load_entries(self, user_id: str) -> bool:
        """Replace ``entries`` with the user's entries, newest first.

        On failure the previous list is kept and the error is reported.
        """
        if self.state.is_loading_entries:
            logger.debug("Entry load already in progress, ignoring")
            return False

        self.state.is_loading_entries = True
        try:
            entries = self._repository.list(user_id)
        except JournalError:
            logger.warning("Failed to load entries", exc_info=True)
            self._report("Failed to load your journal entries.")
            return False
        finally:
            self.state.is_loading_entries = False

        self.state.entries = entries
        return True

    def begin_new_entry(self) -> str:
        """Open the editor on a blank draft with a freshly generated id."""
        self.state.entry_being_edited = None
        self.state.active_entry_id = self._id_factory()
        self.state.view = View.EDITING
        return self.state.active_entry_id

    def begin_edit_entry(self, entry: JournalEntry) -> str:
        """Open the editor on an existing entry, keeping its id."""
        self.state.entry_being_edited = entry
        self.state.active_entry_id = entry.id
        self.state.view = View.EDITING
        return entry.id

    def cancel_edit(self) -> None:
        """Leave the editor without saving."""
        self._clear_editing()
        self.state.view = View.BROWSING

    def commit_entry(self, draft: EntryDraft) -> bool:
        """Persist a draft from the editor and return to the dashboard.

        Carries ``created_at`` forward when editing, stamps ``updated_at``
        on every save. On failure the editor stays open and ``entries``
        is left untouched.
        """
        user = self.state.current_user
        entry_id = self.state.active_entry_id
        if user is None or entry_id is None:
            logger.warning("Commit without an active user or entry id, ignoring")
            return False
        if not draft.title.strip() or not draft.content.strip():
            logger.debug("Commit with blank title or content, ignoring")
            return False

        now = self._clock()
        original = self.state.entry_being_edited
        if original is not None:
            created_at = original.created_at
            updated_at = max(now, original.updated_at)
        else:
            created_at = now
            updated_at = now

        entry = JournalEntry(
            id=entry_id,
            owner_id=user.id,
            title=draft.title,
            content=draft.content,
            mood=draft.mood,
            tags=draft.tags,
            created_at=created_at,
            updated_at=updated_at,
            reflection=draft.reflection,
        )

        try:
            stored = self._repository.upsert(entry)
        except JournalError:
            logger.warning("Failed to save entry %s", entry_id, exc_info=True)
            self._report("Failed to save your journal entry. Please try again.")
            return False

        logger.info("Saved entry %s", stored.id)
        self.load_entries(user.id)
        self._clear_editing()
        self.state.view = View.BROWSING
        return True

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry after explicit confirmation, then reload."""
        user = self.state.current_user
        if user is None or self.state.is_deleting:
            return False
        if not self._confirm(DELETE_PROMPT):
            logger.debug("Delete of %s cancelled", entry_id)
            return False

        self.state.is_deleting = True
        try:
            self._repository.delete(entry_id)
            self.load_entries(user.id)
            return True
        except JournalError:
            logger.warning("Failed to delete entry %s", entry_id, exc_info=True)
            self._report("Could not delete the entry.")
            return False
        finally:
            self.state.is_deleting = False

    def visible_entries(self, mood: Mood | str) -> list[JournalEntry]:
        """Entries as the dashboard shows them under a mood filter."""
        return filter_entries(self.state.entries, mood)
