"""Entry store contract and its Supabase table implementation.

Stores speak in raw records (the backend's column names and JSON
types).  ``EntryRepository`` is the only caller and owns translation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from supabase import Client

from mindful_journal.errors import BackendError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class EntryStore(ABC):
    """Base class for backends that persist raw entry records."""

    @abstractmethod
    def select_by_owner(self, owner_id: str) -> list[Record]:
        """Return every record whose ``user_id`` matches, newest first."""

    @abstractmethod
    def upsert(self, record: Record) -> Record:
        """Create or replace the record keyed by ``id`` and return the stored row."""

    @abstractmethod
    def delete(self, entry_id: str) -> None:
        """Delete the record keyed by ``id``. Deleting a missing id is not an error."""


class SupabaseEntryStore(EntryStore):
    """Entry store backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Client, table: str = "entries") -> None:
        self._client = client
        self._table = table

    def select_by_owner(self, owner_id: str) -> list[Record]:
        try:
            response = (
                self._client.table(self._table)
                .select("*")
                .eq("user_id", owner_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise BackendError(f"Failed to list entries: {exc}") from exc
        return list(response.data or [])

    def upsert(self, record: Record) -> Record:
        try:
            response = self._client.table(self._table).upsert(record).execute()
        except Exception as exc:
            raise BackendError(f"Failed to save entry {record.get('id')}: {exc}") from exc
        rows = response.data or []
        if not rows:
            raise BackendError(f"Store returned no row for entry {record.get('id')}")
        return rows[0]

    def delete(self, entry_id: str) -> None:
        try:
            self._client.table(self._table).delete().eq("id", entry_id).execute()
        except Exception as exc:
            raise BackendError(f"Failed to delete entry {entry_id}: {exc}") from exc
        logger.debug("Deleted entry %s", entry_id)
