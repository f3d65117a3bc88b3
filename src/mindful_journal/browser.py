"""Entry browsing: the mood filter and small display helpers."""

from __future__ import annotations

from collections.abc import Sequence

from mindful_journal.models import JournalEntry, Mood

ALL_MOODS = "all"

MOOD_FILTERS: list[str] = [ALL_MOODS, *(m.value for m in Mood)]

MOOD_EMOJI: dict[Mood, str] = {
    Mood.HAPPY: "😊",
    Mood.CALM: "😌",
    Mood.NEUTRAL: "😐",
    Mood.SAD: "😢",
    Mood.STRESSED: "😫",
    Mood.EXCITED: "🤩",
}


def mood_emoji(mood: Mood | str) -> str:
    return MOOD_EMOJI.get(Mood(mood), MOOD_EMOJI[Mood.NEUTRAL])


def parse_mood_filter(value: str) -> str:
    """Normalise a user-typed filter to ``"all"`` or a Mood value.

    Raises:
        ValueError: If ``value`` is neither ``"all"`` nor a known mood.
    """
    cleaned = value.strip().lower()
    if cleaned not in MOOD_FILTERS:
        raise ValueError(f"Unknown mood filter: {value!r}")
    return cleaned


def filter_entries(entries: Sequence[JournalEntry], mood: Mood | str) -> list[JournalEntry]:
    """Return the entries matching ``mood``, preserving order.

    ``"all"`` returns every entry.
    """
    if mood == ALL_MOODS:
        return list(entries)
    selected = Mood(mood)
    return [e for e in entries if e.mood == selected]
