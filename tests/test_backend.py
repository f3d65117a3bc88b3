"""Tests for session storage and Supabase client construction."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from mindful_journal.backend import SESSION_FILENAME, FileSessionStorage, create_supabase
from mindful_journal.config import JournalAppConfig, SessionConfig, SupabaseConfig
from mindful_journal.errors import ConfigError


class TestFileSessionStorage:
    def test_round_trip_across_instances(self, tmp_path):
        FileSessionStorage(tmp_path).set_item("token", "abc")

        assert FileSessionStorage(tmp_path).get_item("token") == "abc"

    def test_missing_key(self, tmp_path):
        assert FileSessionStorage(tmp_path).get_item("token") is None

    def test_remove_item(self, tmp_path):
        storage = FileSessionStorage(tmp_path)
        storage.set_item("token", "abc")

        storage.remove_item("token")

        assert FileSessionStorage(tmp_path).get_item("token") is None

    def test_remove_missing_key_writes_nothing(self, tmp_path):
        FileSessionStorage(tmp_path).remove_item("token")

        assert not (tmp_path / SESSION_FILENAME).exists()

    def test_creates_directory_and_restricts_mode(self, tmp_path):
        directory = tmp_path / "nested" / "dir"

        FileSessionStorage(directory).set_item("token", "abc")

        path = directory / SESSION_FILENAME
        assert json.loads(path.read_text()) == {"token": "abc"}
        assert path.stat().st_mode & 0o777 == 0o600

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_bad_file_starts_fresh(self, tmp_path, content):
        (tmp_path / SESSION_FILENAME).write_text(content)

        assert FileSessionStorage(tmp_path).get_item("token") is None


class TestCreateSupabase:
    def test_requires_settings(self):
        with (
            patch("mindful_journal.backend.create_client") as mock_create,
            pytest.raises(ConfigError),
        ):
            create_supabase(JournalAppConfig())

        mock_create.assert_not_called()

    def test_builds_client_with_file_storage(self, tmp_path):
        config = JournalAppConfig(
            supabase=SupabaseConfig(url="https://x.supabase.co", anon_key="anon"),
            session=SessionConfig(storage_dir=str(tmp_path)),
        )

        with patch("mindful_journal.backend.create_client") as mock_create:
            client = create_supabase(config)

        assert client is mock_create.return_value
        args, kwargs = mock_create.call_args
        assert args == ("https://x.supabase.co", "anon")
        assert isinstance(kwargs["options"].storage, FileSessionStorage)
        assert kwargs["options"].persist_session is True
