"""Shared fixtures: in-memory gateway and store, a fixed clock."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from mindful_journal.controller import Notice, SessionController
from mindful_journal.errors import (
    BackendError,
    ConfirmationRequired,
    GatewayError,
    InvalidCredentials,
)
from mindful_journal.identity import IdentityGateway
from mindful_journal.models import JournalEntry, Mood, User
from mindful_journal.repository import EntryRepository, entry_to_record
from mindful_journal.store import EntryStore, Record

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
NOW = datetime(2026, 3, 5, 18, 30, tzinfo=UTC)

ALICE = User(id="user-1", email="alice@example.com", name="Alice", created_at=T0)


class FakeGateway(IdentityGateway):
    """Accepts one email/password pair and records every call."""

    def __init__(self, session_user: User | None = None) -> None:
        self.session_user = session_user
        self.accounts = {ALICE.email: ("s3cret", ALICE)}
        self.calls: list[str] = []
        self.fail_logout = False
        self.fail_session = False
        self.require_confirmation = False

    def register(self, email: str, password: str, name: str) -> User:
        self.calls.append("register")
        if self.require_confirmation:
            raise ConfirmationRequired(email)
        user = User(id=f"user-{len(self.accounts) + 1}", email=email, name=name)
        self.accounts[email] = (password, user)
        self.session_user = user
        return user

    def login(self, email: str, password: str) -> User:
        self.calls.append("login")
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise InvalidCredentials("Invalid login credentials")
        self.session_user = account[1]
        return account[1]

    def logout(self) -> None:
        self.calls.append("logout")
        if self.fail_logout:
            raise GatewayError("network down")
        self.session_user = None

    def get_current_session(self) -> User | None:
        self.calls.append("session")
        if self.fail_session:
            raise GatewayError("session lookup failed")
        return self.session_user


class InMemoryEntryStore(EntryStore):
    """Dict-backed store keyed by id, recording every call."""

    def __init__(self) -> None:
        self.rows: dict[str, Record] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_on: set[str] = set()

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise BackendError(f"{op} failed")

    def select_by_owner(self, owner_id: str) -> list[Record]:
        self.calls.append(("select", owner_id))
        self._maybe_fail("select")
        rows = [dict(r) for r in self.rows.values() if r["user_id"] == owner_id]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def upsert(self, record: Record) -> Record:
        self.calls.append(("upsert", dict(record)))
        self._maybe_fail("upsert")
        self.rows[record["id"]] = dict(record)
        return dict(record)

    def delete(self, entry_id: str) -> None:
        self.calls.append(("delete", entry_id))
        self._maybe_fail("delete")
        self.rows.pop(entry_id, None)

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]


def make_entry(
    entry_id: str = "E1",
    owner_id: str = ALICE.id,
    title: str = "Morning",
    content: str = "Felt good",
    mood: Mood = Mood.NEUTRAL,
    created_at: datetime = T0,
    updated_at: datetime | None = None,
    **kwargs: object,
) -> JournalEntry:
    """Helper to build a JournalEntry with sensible defaults."""
    return JournalEntry(
        id=entry_id,
        owner_id=owner_id,
        title=title,
        content=content,
        mood=mood,
        created_at=created_at,
        updated_at=updated_at or created_at,
        **kwargs,  # type: ignore[arg-type]
    )


def seed(store: InMemoryEntryStore, *entries: JournalEntry) -> None:
    for entry in entries:
        store.rows[entry.id] = entry_to_record(entry)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store() -> InMemoryEntryStore:
    return InMemoryEntryStore()


@pytest.fixture
def notices() -> list[Notice]:
    return []


@pytest.fixture
def confirm_answers() -> list[bool]:
    """Answers handed out by the controller's confirm prompt, in order."""
    return []


@pytest.fixture
def controller(
    gateway: FakeGateway,
    store: InMemoryEntryStore,
    notices: list[Notice],
    confirm_answers: list[bool],
) -> SessionController:
    ids = iter(f"E{n}" for n in range(1, 100))
    return SessionController(
        gateway,
        EntryRepository(store),
        notify=notices.append,
        confirm=lambda _prompt: confirm_answers.pop(0),
        clock=lambda: NOW,
        id_factory=lambda: next(ids),
    )


@pytest.fixture
def signed_in(controller: SessionController, gateway: FakeGateway) -> SessionController:
    controller.login(ALICE.email, "s3cret")
    gateway.calls.clear()
    return controller

