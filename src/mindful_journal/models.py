"""Journal domain models: pure Pydantic v2 data types.

These models are the application's own view of users and entries.  They
never carry backend column names; translation to and from the store's
schema lives in ``mindful_journal.repository``.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class Mood(StrEnum):
    """Emotional tag attached to every entry."""

    HAPPY = "happy"
    CALM = "calm"
    NEUTRAL = "neutral"
    SAD = "sad"
    STRESSED = "stressed"
    EXCITED = "excited"


class View(StrEnum):
    """Top-level view the session controller is showing."""

    AUTHENTICATING = "authenticating"
    BROWSING = "browsing"
    EDITING = "editing"


DEFAULT_USER_NAME = "Friend"


class User(BaseModel):
    """An authenticated identity as reported by the identity gateway."""

    id: str
    email: str = ""
    name: str = DEFAULT_USER_NAME
    created_at: datetime | None = None


def clean_tags(tags: list[str]) -> list[str]:
    """Trim every tag and drop the empty ones, keeping order and duplicates."""
    return [t.strip() for t in tags if t and t.strip()]


def split_tags(text: str) -> list[str]:
    """Split a comma-separated tag string into clean tags."""
    return clean_tags(text.split(","))


class EntryDraft(BaseModel):
    """The user-editable part of an entry, handed from editor to controller."""

    title: str
    content: str
    mood: Mood = Mood.NEUTRAL
    tags: list[str] = Field(default_factory=list)
    reflection: str | None = None

    @field_validator("tags")
    @classmethod
    def _clean(cls, value: list[str]) -> list[str]:
        return clean_tags(value)


class JournalEntry(BaseModel):
    """A persisted journal entry owned by a single user."""

    id: str
    owner_id: str
    title: str
    content: str
    mood: Mood = Mood.NEUTRAL
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    reflection: str | None = None

    @field_validator("tags")
    @classmethod
    def _clean(cls, value: list[str]) -> list[str]:
        return clean_tags(value)

    @property
    def tags_text(self) -> str:
        """Tags rendered the way the editor shows them."""
        return ", ".join(self.tags)
