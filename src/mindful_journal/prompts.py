"""Prompt template for entry reflections."""

from mindful_journal.models import Mood

REFLECTION_WORD_LIMIT = 100

REFLECTION_PROMPT = """\
Act as a supportive, mindful therapist and life coach.
Read the following journal entry and provide a brief, warm, and insightful \
reflection (max {word_limit} words).
Validate the user's feelings (Mood: {mood}) and offer a gentle perspective \
or a question for self-discovery.

Journal Title: {title}
Content: {content}"""


def build_reflection_prompt(title: str, content: str, mood: Mood | str) -> str:
    """Render the reflection prompt for one entry."""
    return REFLECTION_PROMPT.format(
        word_limit=REFLECTION_WORD_LIMIT,
        mood=Mood(mood).value,
        title=title.strip(),
        content=content.strip(),
    )
