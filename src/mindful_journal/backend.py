"""Supabase client construction and on-disk auth session storage.

The auth client persists its session through a small key/value storage
object.  ``FileSessionStorage`` keeps those keys in a JSON file so a
login survives between runs and ``SessionController.boot`` can find it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from supabase import Client, ClientOptions, create_client

from mindful_journal.config import JournalAppConfig

logger = logging.getLogger(__name__)

SESSION_FILENAME = "session.json"


class FileSessionStorage:
    """JSON-backed key/value storage for the Supabase auth session.

    Implements the ``get_item`` / ``set_item`` / ``remove_item`` protocol
    the auth client expects. Loads on init and saves after every write.
    """

    def __init__(self, directory: Path) -> None:
        self._path = directory / SESSION_FILENAME
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Corrupt session file at %s, starting fresh", self._path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        self._path.chmod(0o600)

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()


def create_supabase(config: JournalAppConfig) -> Client:
    """Build a Supabase client with a persistent auth session.

    Raises:
        ConfigError: If the Supabase URL or anon key is missing.
    """
    config.supabase.require()
    storage = FileSessionStorage(Path(config.session.storage_dir).expanduser())
    options = ClientOptions(storage=storage, persist_session=True)
    logger.debug("Creating Supabase client for %s", config.supabase.url)
    return create_client(config.supabase.url, config.supabase.anon_key, options=options)
