"""
Tests for pipeline.preferences module.
"""

import pytest

from core.constants import (
    ART_STYLES,
    CHARACTER_TYPES,
    COLOR_PALETTES,
    LIGHTING_TERMS,
    MOODS,
)
from core.models import ParsedPreferences
from pipeline.preferences import (
    describe_style,
    empty_preferences,
    extract_character_hints,
    parse_preferences,
)


class TestParsePreferences:
    """Tests for parse_preferences function."""

    def test_empty_input(self):
        """Empty text yields empty categories and echoes the empty string."""
        parsed = parse_preferences("")

        assert parsed.art_styles == ()
        assert parsed.characters == ()
        assert parsed.moods == ()
        assert parsed.colors == ()
        assert parsed.lighting == ()
        assert parsed.raw_text == ""

    def test_raw_text_echoed(self):
        """The original text is kept verbatim."""
        text = "Make it ANIME style, please!"
        assert parse_preferences(text).raw_text == text

    def test_case_insensitive(self):
        """Terms match regardless of case, reported in canonical form."""
        parsed = parse_preferences("WaterColor with a KNIGHT")

        assert parsed.art_styles == ("watercolor",)
        assert parsed.characters == ("knight",)

    def test_vocabulary_order_not_input_order(self):
        """Matches follow vocabulary order, not order of appearance."""
        parsed = parse_preferences("pixar meets watercolor meets anime")

        assert parsed.art_styles == ("anime", "watercolor", "pixar")

    def test_whole_word_only(self):
        """Terms inside longer words do not match."""
        parsed = parse_preferences("a sadness in the woodmanship, boyish charm, boldly")

        assert "sad" not in parsed.moods
        assert "man" not in parsed.characters
        assert "boy" not in parsed.characters
        assert "bold" not in parsed.colors

    def test_multi_word_phrases(self):
        """Phrases and hyphenated terms match as a whole."""
        parsed = parse_preferences("A sci-fi comic book at golden hour in black and white")

        assert parsed.art_styles == ("comic book", "sci-fi")
        assert parsed.lighting == ("golden hour",)
        assert "black and white" in parsed.colors

    def test_partial_phrase_does_not_match(self):
        """Half of a phrase is not enough."""
        parsed = parse_preferences("golden light, comic strip")

        assert parsed.lighting == ()
        assert "comic book" not in parsed.art_styles

    def test_term_in_several_categories(self):
        """A term shared between vocabularies is reported in each."""
        parsed = parse_preferences("dark and neon")

        assert "dark" in parsed.moods
        assert "dark" in parsed.colors
        assert "neon" in parsed.colors
        assert "neon" in parsed.lighting

    def test_no_duplicates_for_repeated_terms(self):
        """A term mentioned twice is reported once."""
        parsed = parse_preferences("happy happy happy")
        assert parsed.moods == ("happy",)

    def test_3d_term(self):
        """Digit-leading terms use word boundaries too."""
        assert parse_preferences("make it 3d").art_styles == ("3d",)
        assert parse_preferences("make it 3dx").art_styles == ()

    def test_non_matching_input(self):
        """Text with no vocabulary terms yields empty categories."""
        parsed = parse_preferences("Please just do your best with it.")

        assert parsed.art_styles == ()
        assert parsed.moods == ()
        assert parsed.colors == ()
        assert parsed.lighting == ()

    def test_idempotent(self):
        """Parsing the same text twice gives equal results."""
        text = "whimsical watercolor princess with soft lighting"
        assert parse_preferences(text) == parse_preferences(text)

    @pytest.mark.parametrize(
        "field,vocabulary",
        [
            ("art_styles", ART_STYLES),
            ("characters", CHARACTER_TYPES),
            ("moods", MOODS),
            ("colors", COLOR_PALETTES),
            ("lighting", LIGHTING_TERMS),
        ],
    )
    def test_every_term_detected_standalone(self, field, vocabulary):
        """Every vocabulary term is found when used as a standalone word."""
        for term in vocabulary:
            parsed = parse_preferences(f"I would like {term} please")
            assert term in getattr(parsed, field), term

    def test_result_is_immutable(self):
        """Parsed preferences cannot be modified."""
        parsed = parse_preferences("anime")
        with pytest.raises(Exception):
            parsed.art_styles = ("watercolor",)


class TestExtractCharacterHints:
    """Tests for extract_character_hints function."""

    def test_two_characters(self):
        """All hints are captured, in order."""
        hints = extract_character_hints("A boy with curly hair and a girl who has blue eyes.")
        assert hints == "boy curly hair and a girl, girl blue eyes"

    def test_single_hint_stops_at_comma(self):
        """Details end at a comma."""
        hints = extract_character_hints("Anime style, a kid with a red cape, very happy")
        assert hints == "kid a red cape"

    def test_hint_to_end_of_string(self):
        """Details may run to the end of the text."""
        assert extract_character_hints("a woman who is a brave pilot") == "woman a brave pilot"

    def test_case_insensitive(self):
        """Role nouns and connectors match case-insensitively."""
        assert extract_character_hints("GIRL WITH PIGTAILS.") == "GIRL PIGTAILS"

    def test_separate_sentences(self):
        """Hints in separate sentences are both found."""
        hints = extract_character_hints("A boy with a kite. A man who has a beard.")
        assert hints == "boy a kite, man a beard"

    def test_hint_stops_at_line_break(self):
        """Details do not run onto the next line of instructions."""
        assert extract_character_hints("a girl with red boots\nwatercolor style") == "girl red boots"

    def test_no_hints(self):
        """Text without hint phrases gives an empty string."""
        assert extract_character_hints("watercolor, dreamy and soft") == ""

    def test_empty_input(self):
        """Empty text gives an empty string."""
        assert extract_character_hints("") == ""

    def test_role_without_connector(self):
        """A role noun alone is not a hint."""
        assert extract_character_hints("a happy boy running") == ""


class TestDescribeStyle:
    """Tests for describe_style function."""

    def test_default_style(self):
        """No art style gives the classic storybook summary."""
        assert describe_style(empty_preferences()) == "Classic children's storybook style"

    def test_styles_and_moods(self):
        """Styles are listed with moods appended."""
        parsed = parse_preferences("anime watercolor, happy and calm")
        assert describe_style(parsed) == "anime, watercolor with happy, calm mood"

    def test_mood_without_style(self):
        """Moods alone do not replace the default summary."""
        parsed = parse_preferences("happy")
        assert describe_style(parsed) == "Classic children's storybook style"


class TestEmptyPreferences:
    """Tests for empty_preferences function."""

    def test_all_empty(self):
        parsed = empty_preferences()

        assert isinstance(parsed, ParsedPreferences)
        assert parsed.raw_text == ""
        assert not parsed.has_style_hints
