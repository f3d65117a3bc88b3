"""Draft state for the entry currently open in the editor."""

from __future__ import annotations

import logging
from collections.abc import Callable

from mindful_journal.controller import Notice, NoticeLevel, Notifier, SessionController
from mindful_journal.errors import ReflectionError
from mindful_journal.models import EntryDraft, JournalEntry, Mood, split_tags
from mindful_journal.reflection import ReflectionGenerator

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "content", "mood", "tags_text", "reflection")

REFLECTION_FAILED = "Could not generate reflection. Check your API key or try again later."


class EntryEditingSession:
    """Holds an editable draft and hands it to the controller on save.

    Args:
        initial: Entry being edited, or None for a new entry.
        on_save: Receives the assembled draft; returns True if it was persisted.
        generator: Reflection generator, or None when reflections are off.
        notify: Receives user-facing notices.
    """

    def __init__(
        self,
        initial: JournalEntry | None,
        on_save: Callable[[EntryDraft], bool],
        generator: ReflectionGenerator | None = None,
        notify: Notifier | None = None,
    ) -> None:
        self.title = initial.title if initial else ""
        self.content = initial.content if initial else ""
        self.mood = initial.mood if initial else Mood.NEUTRAL
        self.tags_text = initial.tags_text if initial else ""
        self.reflection: str | None = initial.reflection if initial else None
        self.is_saving = False
        self.is_reflecting = False
        self.last_error: str | None = None
        self._on_save = on_save
        self._generator = generator
        self._notify = notify

    @classmethod
    def for_controller(
        cls,
        controller: SessionController,
        generator: ReflectionGenerator | None = None,
        notify: Notifier | None = None,
    ) -> EntryEditingSession:
        """Open a session on whatever the controller is currently editing."""
        return cls(
            controller.state.entry_being_edited,
            on_save=controller.commit_entry,
            generator=generator,
            notify=notify,
        )

    @property
    def can_save(self) -> bool:
        return bool(self.title.strip() and self.content.strip()) and not self.is_saving

    @property
    def can_reflect(self) -> bool:
        return (
            bool(self.content.strip())
            and self._generator is not None
            and self._generator.is_configured()
            and not self.is_reflecting
        )

    def update_field(self, name: str, value: str | Mood | None) -> None:
        """Set one draft field. No side effects beyond the draft itself."""
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown entry field: {name!r}")
        if name == "mood":
            value = Mood(value)
        elif name == "reflection":
            value = value or None
        else:
            value = value or ""
        setattr(self, name, value)

    def clear_reflection(self) -> None:
        self.reflection = None

    def request_reflection(self) -> bool:
        """Ask the generator for a reflection on the current draft.

        Does nothing when the content is blank or the generator is not
        configured. Never blocks saving.
        """
        if not self.can_reflect:
            return False

        self.is_reflecting = True
        self.last_error = None
        try:
            self.reflection = self._generator.generate(  # type: ignore[union-attr]
                self.title, self.content, self.mood
            )
            return True
        except ReflectionError:
            logger.warning("AI analysis failed", exc_info=True)
            self.last_error = REFLECTION_FAILED
            if self._notify is not None:
                self._notify(Notice(level=NoticeLevel.ERROR, message=REFLECTION_FAILED))
            return False
        finally:
            self.is_reflecting = False

    def to_draft(self) -> EntryDraft:
        return EntryDraft(
            title=self.title,
            content=self.content,
            mood=self.mood,
            tags=split_tags(self.tags_text),
            reflection=self.reflection,
        )

    def save(self) -> bool:
        """Validate locally and hand the draft to the controller.

        A blank title or content is a silent no-op.
        """
        if not self.can_save:
            return False

        self.is_saving = True
        try:
            return self._on_save(self.to_draft())
        finally:
            self.is_saving = False
