"""Entry repository: schema translation plus delegation to an EntryStore.

This is the only module that knows the store's column names.  The
mapping is total in both directions: every JournalEntry field has a
column, and an absent optional column maps back to ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from mindful_journal.errors import BackendError
from mindful_journal.models import JournalEntry, Mood
from mindful_journal.store import EntryStore, Record

logger = logging.getLogger(__name__)

# Alias to avoid shadowing by EntryRepository.list method
_list = list

# JournalEntry field -> store column
FIELD_TO_COLUMN: dict[str, str] = {
    "id": "id",
    "owner_id": "user_id",
    "title": "title",
    "content": "content",
    "mood": "mood",
    "tags": "tags",
    "created_at": "created_at",
    "updated_at": "updated_at",
    "reflection": "ai_reflection",
}


def _read(record: Any, column: str) -> Any:
    """Read a column from a dict-like or attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(column)
    return getattr(record, column, None)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise BackendError(f"Record has an invalid timestamp: {value!r}") from exc
    else:
        raise BackendError(f"Record has an invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_mood(value: Any) -> Mood:
    try:
        return Mood(value)
    except ValueError:
        logger.warning("Unknown mood %r in stored entry, using neutral", value)
        return Mood.NEUTRAL


def entry_to_record(entry: JournalEntry) -> Record:
    """Map a JournalEntry to the store's column layout."""
    return {
        FIELD_TO_COLUMN["id"]: entry.id,
        FIELD_TO_COLUMN["owner_id"]: entry.owner_id,
        FIELD_TO_COLUMN["title"]: entry.title,
        FIELD_TO_COLUMN["content"]: entry.content,
        FIELD_TO_COLUMN["mood"]: entry.mood.value,
        FIELD_TO_COLUMN["tags"]: _list(entry.tags),
        FIELD_TO_COLUMN["created_at"]: entry.created_at.isoformat(),
        FIELD_TO_COLUMN["updated_at"]: entry.updated_at.isoformat(),
        FIELD_TO_COLUMN["reflection"]: entry.reflection,
    }


def entry_from_record(record: Any) -> JournalEntry:
    """Map a raw store record (dict or attribute object) to a JournalEntry.

    Raises:
        BackendError: If the record is missing its id or timestamps.
    """
    entry_id = _read(record, FIELD_TO_COLUMN["id"])
    if not entry_id:
        raise BackendError("Record is missing its id")

    return JournalEntry(
        id=str(entry_id),
        owner_id=str(_read(record, FIELD_TO_COLUMN["owner_id"]) or ""),
        title=_read(record, FIELD_TO_COLUMN["title"]) or "",
        content=_read(record, FIELD_TO_COLUMN["content"]) or "",
        mood=_parse_mood(_read(record, FIELD_TO_COLUMN["mood"])),
        tags=_list(_read(record, FIELD_TO_COLUMN["tags"]) or []),
        created_at=_parse_timestamp(_read(record, FIELD_TO_COLUMN["created_at"])),
        updated_at=_parse_timestamp(_read(record, FIELD_TO_COLUMN["updated_at"])),
        reflection=_read(record, FIELD_TO_COLUMN["reflection"]),
    )


class EntryRepository:
    """Reads and writes JournalEntry objects through an EntryStore."""

    def __init__(self, store: EntryStore) -> None:
        self._store = store

    def list(self, user_id: str) -> _list[JournalEntry]:
        """Return the user's entries, newest created first.

        Raises:
            BackendError: On any store failure.
        """
        rows = self._store.select_by_owner(user_id)
        entries = [entry_from_record(row) for row in rows]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        logger.debug("Loaded %d entries for user %s", len(entries), user_id)
        return entries

    def upsert(self, entry: JournalEntry) -> JournalEntry:
        """Create or replace an entry, returning the stored form.

        Raises:
            BackendError: On any store failure.
        """
        stored = self._store.upsert(entry_to_record(entry))
        return entry_from_record(stored)

    def delete(self, entry_id: str) -> None:
        """Delete an entry. Missing ids are not distinguished from deleted ones.

        Raises:
            BackendError: If the store reports an error.
        """
        self._store.delete(entry_id)
