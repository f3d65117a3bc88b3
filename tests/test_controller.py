"""Tests for SessionController: view transitions and entry lifecycle."""

from datetime import timedelta

import pytest
from conftest import ALICE, NOW, T0, FakeGateway, InMemoryEntryStore, make_entry, seed

from mindful_journal.controller import DELETE_PROMPT, NoticeLevel, SessionController, new_entry_id
from mindful_journal.errors import ConfirmationRequired, InvalidCredentials, ValidationError
from mindful_journal.models import EntryDraft, Mood, View
from mindful_journal.repository import EntryRepository


class TestBoot:
    def test_no_session_goes_to_authentication(self, controller, store):
        controller.boot()

        assert controller.state.view == View.AUTHENTICATING
        assert controller.state.current_user is None
        assert store.calls == []

    def test_existing_session_loads_entries(self, controller, gateway, store):
        gateway.session_user = ALICE
        seed(store, make_entry("E1"))

        controller.boot()

        assert controller.state.view == View.BROWSING
        assert controller.state.current_user == ALICE
        assert [e.id for e in controller.state.entries] == ["E1"]

    def test_session_failure_is_swallowed(self, controller, gateway, notices):
        gateway.fail_session = True

        controller.boot()

        assert controller.state.view == View.AUTHENTICATING
        assert controller.state.current_user is None
        assert notices == []


class TestLogin:
    def test_valid_credentials_browse_with_entries(self, controller, store):
        seed(store, make_entry("E1"), make_entry("E2", owner_id="someone-else"))

        user = controller.login(ALICE.email, "s3cret")

        assert user == ALICE
        assert controller.state.view == View.BROWSING
        assert [e.id for e in controller.state.entries] == ["E1"]
        assert ("select", ALICE.id) in store.calls

    def test_invalid_credentials_leave_state_unchanged(self, controller, store):
        with pytest.raises(InvalidCredentials):
            controller.login(ALICE.email, "wrong")

        assert controller.state.view == View.AUTHENTICATING
        assert controller.state.current_user is None
        assert store.calls == []

    def test_load_failure_still_enters_dashboard(self, controller, store, notices):
        store.fail_on.add("select")

        controller.login(ALICE.email, "s3cret")

        assert controller.state.view == View.BROWSING
        assert controller.state.entries == []
        assert notices[-1].level == NoticeLevel.ERROR


class TestRegister:
    def test_requires_name(self, controller, gateway):
        with pytest.raises(ValidationError, match="Name is required"):
            controller.register("bob@example.com", "pw", "   ")
        assert "register" not in gateway.calls

    def test_successful_registration_signs_in(self, controller):
        user = controller.register("bob@example.com", "pw", "Bob")

        assert user.name == "Bob"
        assert controller.state.current_user == user
        assert controller.state.view == View.BROWSING

    def test_confirmation_required_leaves_state_unchanged(self, controller, gateway, store):
        gateway.require_confirmation = True

        with pytest.raises(ConfirmationRequired) as excinfo:
            controller.register("bob@example.com", "pw", "Bob")

        assert excinfo.value.email == "bob@example.com"
        assert controller.state.current_user is None
        assert controller.state.view == View.AUTHENTICATING
        assert store.calls == []


class TestLogout:
    def test_clears_user_and_entries(self, signed_in, store):
        seed(store, make_entry("E1"))
        signed_in.load_entries(ALICE.id)

        assert signed_in.logout() is True

        assert signed_in.state.current_user is None
        assert signed_in.state.entries == []
        assert signed_in.state.view == View.AUTHENTICATING

    def test_failure_keeps_session(self, signed_in, gateway, notices):
        gateway.fail_logout = True

        assert signed_in.logout() is False

        assert signed_in.state.current_user == ALICE
        assert signed_in.state.view == View.BROWSING
        assert notices[-1].message == "Logout failed. Please try again."


class TestLoadEntries:
    def test_newest_created_first(self, signed_in, store):
        seed(
            store,
            make_entry("old", created_at=T0),
            make_entry("new", created_at=T0 + timedelta(days=2)),
            make_entry("mid", created_at=T0 + timedelta(days=1)),
        )

        assert signed_in.load_entries(ALICE.id) is True

        assert [e.id for e in signed_in.state.entries] == ["new", "mid", "old"]

    def test_failure_keeps_previous_entries(self, signed_in, store, notices):
        seed(store, make_entry("E1"))
        signed_in.load_entries(ALICE.id)
        previous = signed_in.state.entries
        store.fail_on.add("select")

        assert signed_in.load_entries(ALICE.id) is False

        assert signed_in.state.entries is previous
        assert signed_in.state.is_loading_entries is False
        assert notices[-1].message == "Failed to load your journal entries."

    def test_bad_stored_timestamp_is_reported(self, signed_in, store, notices):
        seed(store, make_entry("E1"))
        store.rows["E1"]["created_at"] = "yesterday"

        assert signed_in.load_entries(ALICE.id) is False

        assert signed_in.state.entries == []
        assert notices[-1].message == "Failed to load your journal entries."


class TestBeginEditing:
    def test_new_entry_gets_fresh_id(self, signed_in):
        entry_id = signed_in.begin_new_entry()

        assert entry_id == "E1"
        assert signed_in.state.active_entry_id == "E1"
        assert signed_in.state.entry_being_edited is None
        assert signed_in.state.view == View.EDITING

    def test_edit_reuses_existing_id(self, signed_in):
        entry = make_entry("existing")

        signed_in.begin_edit_entry(entry)

        assert signed_in.state.active_entry_id == "existing"
        assert signed_in.state.entry_being_edited == entry
        assert signed_in.state.view == View.EDITING

    def test_cancel_returns_to_dashboard(self, signed_in, store):
        signed_in.begin_new_entry()

        signed_in.cancel_edit()

        assert signed_in.state.view == View.BROWSING
        assert signed_in.state.active_entry_id is None
        assert "upsert" not in store.ops()


class TestCommitEntry:
    def test_new_entry_scenario(self, signed_in, store):
        signed_in.begin_new_entry()
        draft = EntryDraft(title="Morning", content="Felt good", mood=Mood.HAPPY)

        assert signed_in.commit_entry(draft) is True

        upserts = [payload for op, payload in store.calls if op == "upsert"]
        assert upserts == [
            {
                "id": "E1",
                "user_id": ALICE.id,
                "title": "Morning",
                "content": "Felt good",
                "mood": "happy",
                "tags": [],
                "created_at": NOW.isoformat(),
                "updated_at": NOW.isoformat(),
                "ai_reflection": None,
            }
        ]
        assert signed_in.state.view == View.BROWSING
        assert [e.id for e in signed_in.state.entries] == ["E1"]
        assert signed_in.state.active_entry_id is None

    def test_edit_preserves_created_at(self, signed_in, store):
        original = make_entry("E2", title="Before", created_at=T0)
        seed(store, original)
        signed_in.begin_edit_entry(original)

        signed_in.commit_entry(EntryDraft(title="After", content="Felt good"))

        stored = store.rows["E2"]
        assert stored["title"] == "After"
        assert stored["created_at"] == T0.isoformat()
        assert stored["updated_at"] == NOW.isoformat()
        assert NOW > T0

    def test_updated_at_never_moves_backwards(self, signed_in, store):
        future = NOW + timedelta(hours=1)
        original = make_entry("E2", created_at=T0, updated_at=future)
        signed_in.begin_edit_entry(original)

        signed_in.commit_entry(EntryDraft(title="t", content="c"))

        assert store.rows["E2"]["updated_at"] == future.isoformat()

    def test_failed_save_stays_in_editor(self, signed_in, store, notices):
        seed(store, make_entry("keep"))
        signed_in.load_entries(ALICE.id)
        before = signed_in.state.entries
        signed_in.begin_new_entry()
        store.fail_on.add("upsert")

        assert signed_in.commit_entry(EntryDraft(title="t", content="c")) is False

        assert signed_in.state.view == View.EDITING
        assert signed_in.state.entries is before
        assert signed_in.state.active_entry_id == "E1"
        assert notices[-1].message == "Failed to save your journal entry. Please try again."

    def test_retry_after_failure_reuses_id(self, signed_in, store):
        signed_in.begin_new_entry()
        store.fail_on.add("upsert")
        signed_in.commit_entry(EntryDraft(title="t", content="c"))
        store.fail_on.clear()

        signed_in.commit_entry(EntryDraft(title="t", content="c"))

        ids = [payload["id"] for op, payload in store.calls if op == "upsert"]
        assert ids == ["E1", "E1"]

    def test_requires_signed_in_user(self, controller, store):
        controller.begin_new_entry()

        assert controller.commit_entry(EntryDraft(title="t", content="c")) is False
        assert store.calls == []

    @pytest.mark.parametrize(("title", "content"), [("", "   "), ("t", ""), (" ", "c")])
    def test_blank_draft_is_not_saved(self, signed_in, store, title, content):
        signed_in.begin_new_entry()

        assert signed_in.commit_entry(EntryDraft(title=title, content=content)) is False

        assert "upsert" not in store.ops()
        assert store.rows == {}
        assert signed_in.state.view == View.EDITING
        assert signed_in.state.active_entry_id == "E1"

    def test_requires_active_entry_id(self, signed_in, store):
        assert signed_in.commit_entry(EntryDraft(title="t", content="c")) is False
        assert "upsert" not in store.ops()


class TestDeleteEntry:
    def test_confirmed_delete_reloads(self, signed_in, store, confirm_answers):
        seed(store, make_entry("E3"), make_entry("E4"))
        signed_in.load_entries(ALICE.id)
        confirm_answers.append(True)

        assert signed_in.delete_entry("E3") is True

        assert [e.id for e in signed_in.state.entries] == ["E4"]
        assert signed_in.state.is_deleting is False

    def test_declined_delete_does_nothing(self, signed_in, store, confirm_answers):
        seed(store, make_entry("E3"))
        signed_in.load_entries(ALICE.id)
        entries = signed_in.state.entries
        store.calls.clear()
        confirm_answers.append(False)

        assert signed_in.delete_entry("E3") is False

        assert store.calls == []
        assert signed_in.state.entries is entries

    def test_failure_reports_and_clears_flag(self, signed_in, store, confirm_answers, notices):
        store.fail_on.add("delete")
        confirm_answers.append(True)

        assert signed_in.delete_entry("E3") is False

        assert signed_in.state.is_deleting is False
        assert notices[-1].message == "Could not delete the entry."

    def test_ignored_while_delete_in_progress(self, signed_in, store):
        signed_in.state.is_deleting = True

        assert signed_in.delete_entry("E3") is False
        assert "delete" not in store.ops()

    def test_prompt_text(self, gateway: FakeGateway, store: InMemoryEntryStore):
        prompts: list[str] = []

        def confirm(prompt: str) -> bool:
            prompts.append(prompt)
            return False

        controller = SessionController(gateway, EntryRepository(store), confirm=confirm)
        controller.login(ALICE.email, "s3cret")
        controller.delete_entry("E3")

        assert prompts == [DELETE_PROMPT]

    def test_default_confirm_refuses(self, gateway: FakeGateway, store: InMemoryEntryStore):
        seed(store, make_entry("E3"))
        controller = SessionController(gateway, EntryRepository(store))
        controller.login(ALICE.email, "s3cret")

        assert controller.delete_entry("E3") is False
        assert "E3" in store.rows


class TestVisibleEntries:
    def test_filters_by_mood(self, signed_in, store):
        seed(
            store,
            make_entry("a", mood=Mood.HAPPY, created_at=T0 + timedelta(days=1)),
            make_entry("b", mood=Mood.SAD, created_at=T0),
        )
        signed_in.load_entries(ALICE.id)

        assert [e.id for e in signed_in.visible_entries("happy")] == ["a"]
        assert [e.id for e in signed_in.visible_entries("all")] == ["a", "b"]


class TestNewEntryId:
    def test_is_uuid4(self):
        import uuid

        value = uuid.UUID(new_entry_id())
        assert value.version == 4

    def test_unique(self):
        assert len({new_entry_id() for _ in range(100)}) == 100

    def test_fallback_when_urandom_missing(self, monkeypatch):
        import uuid

        def broken() -> uuid.UUID:
            raise NotImplementedError

        monkeypatch.setattr("mindful_journal.controller.uuid.uuid4", broken)

        assert uuid.UUID(new_entry_id()).version == 4
