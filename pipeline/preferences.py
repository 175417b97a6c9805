"""
Journal Storybook - Preference Extraction

Recognize art style, character, mood, color and lighting keywords in the
free-text instructions a user sends alongside a journal photo, and pull out
character hints such as "girl with red rain boots".

Usage:
    from pipeline.preferences import parse_preferences, extract_character_hints

    parsed = parse_preferences("Make it anime style with golden hour light")
    parsed.art_styles   # ("anime",)
    parsed.lighting     # ("golden hour",)

    extract_character_hints("A boy with curly hair.")  # "boy curly hair"
"""

import re

from core.constants import (
    DEFAULT_STYLE_INFO,
    HINT_ROLE_NOUNS,
    PREFERENCE_VOCABULARY,
    PreferenceCategoryEnum,
)
from core.logging import get_logger
from core.models import ParsedPreferences

logger = get_logger(__name__)


def _term_pattern(term: str) -> re.Pattern:
    # Phrases ("golden hour", "sci-fi") match literally, bounded at their outer edges
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


_TERM_PATTERNS: dict[PreferenceCategoryEnum, tuple[tuple[str, re.Pattern], ...]] = {
    category: tuple((term, _term_pattern(term)) for term in terms)
    for category, terms in PREFERENCE_VOCABULARY.items()
}

# "<role> with " / "<role> who has " / "<role> who is "
_HINT_HEAD = re.compile(
    rf"({'|'.join(HINT_ROLE_NOUNS)}) (?:with |who (?:has|is) )",
    re.IGNORECASE,
)
_HINT_STOP = re.compile(r"[.,\n]")


def parse_preferences(text: str) -> ParsedPreferences:
    """
    Match instruction text against the fixed preference vocabularies.

    Each vocabulary term is tested once, as a case-insensitive whole word.
    Matched terms are reported in vocabulary order, not in order of
    appearance in the text.

    Args:
        text: Free-text instructions (may be empty)

    Returns:
        ParsedPreferences with the raw text echoed back
    """
    text = text or ""

    matches = {
        category.value: tuple(term for term, pattern in patterns if pattern.search(text))
        for category, patterns in _TERM_PATTERNS.items()
    }

    parsed = ParsedPreferences(raw_text=text, **matches)
    logger.debug(f"Parsed preferences: {parsed.model_dump(exclude={'raw_text'})}")
    return parsed


def empty_preferences() -> ParsedPreferences:
    """Preferences used when the user sends no instructions."""
    return ParsedPreferences()


def extract_character_hints(text: str) -> str:
    """
    Extract character hints like "boy with curly hair" from free text.

    Every "<role> with ..." / "<role> who has ..." / "<role> who is ..."
    phrase contributes "<role> <details>", where the details run up to the
    next period, comma or line break, the end of the text, or the role noun
    of the next hint phrase.

    Args:
        text: Free-text instructions

    Returns:
        Hints joined with ", " (empty string when none found)
    """
    if not text:
        return ""

    heads = list(_HINT_HEAD.finditer(text))
    hints = []

    for i, head in enumerate(heads):
        end = len(text)

        stop = _HINT_STOP.search(text, head.end())
        if stop:
            end = stop.start()

        # "a boy with a kite and a girl who has ..." -> "boy a kite and a girl"
        if i + 1 < len(heads):
            end = min(end, heads[i + 1].end(1))

        details = text[head.end():end].strip()
        if details:
            hints.append(f"{head.group(1)} {details}")

    return ", ".join(hints)


def describe_style(parsed: ParsedPreferences) -> str:
    """
    Summarize recognized styles for display, e.g. "anime, pastel with happy mood".

    Args:
        parsed: Parsed preferences

    Returns:
        Human-readable style summary
    """
    if not parsed.art_styles:
        return DEFAULT_STYLE_INFO

    summary = ", ".join(parsed.art_styles)
    if parsed.moods:
        summary += f" with {', '.join(parsed.moods)} mood"
    return summary
