"""Mindful Journal: mood-tagged diary entries with optional AI reflections.

Authentication and storage go through Supabase; reflections come from
Google Gemini.  The session controller drives three views (auth,
dashboard, editor) and is usable without the terminal front end.
"""

from mindful_journal.controller import Notice, NoticeLevel, SessionController, SessionState
from mindful_journal.editor import EntryEditingSession
from mindful_journal.models import EntryDraft, JournalEntry, Mood, User, View
from mindful_journal.repository import EntryRepository

__version__ = "0.1.0"

__all__ = [
    "EntryDraft",
    "EntryEditingSession",
    "EntryRepository",
    "JournalEntry",
    "Mood",
    "Notice",
    "NoticeLevel",
    "SessionController",
    "SessionState",
    "User",
    "View",
    "__version__",
]
