"""
Journal Storybook - Illustration Prompt Builder

Assemble the image-generation prompt for one story sentence from the user's
parsed style preferences and the generated character description.

The prompt is an ordered list of segments joined with ". ":

    1. Character block   (only with a character description)
    2. Art style         (always; classic storybook by default)
    3. Scene             (always; the sentence verbatim)
    4. Mood              (first recognized mood)
    5. Lighting          (first recognized lighting term)
    6. Color palette     (first recognized color)
    7. Closing reminder  (always)

Character features (hair, eyes, clothing, ...) are pulled out of the free-text
description with keyword rules and repeated as explicit MUST clauses, since
image models tend to drift between generations.

Usage:
    from pipeline.preferences import parse_preferences
    from pipeline.prompt_builder import build_prompt

    prompt = build_prompt(
        "Mia found a shiny shell on the beach.",
        parse_preferences("watercolor, golden hour"),
        "A 6 year old girl with wavy red hair, wearing a yellow raincoat.",
    )
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from core.logging import get_logger
from core.models import ParsedPreferences

logger = get_logger(__name__)


# ============================================================================
# Feature Extractors
# ============================================================================


@dataclass(frozen=True)
class FeatureExtractor:
    """
    Keyword rule for one character feature.

    Matches any of `words` as a whole word, optionally followed by one of
    `suffixes` ("brown hair", "light-skinned"). With `suffix_required` the
    suffix must be present. Returns the matched words in order of appearance,
    lowercased and without repeats; `multiple=False` keeps only the first.
    """

    label: str
    words: tuple[str, ...]
    suffixes: tuple[str, ...] = ()
    suffix_required: bool = False
    multiple: bool = True
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        words = "|".join(re.escape(w) for w in sorted(self.words, key=len, reverse=True))
        suffix = ""
        if self.suffixes:
            options = "|".join(re.escape(s) for s in sorted(self.suffixes, key=len, reverse=True))
            suffix = rf"(?:[\s-]+(?:{options}))"
            if not self.suffix_required:
                suffix += "?"
        object.__setattr__(
            self,
            "pattern",
            re.compile(rf"\b(?P<term>{words}){suffix}\b", re.IGNORECASE),
        )

    def extract(self, text: str) -> list[str]:
        found: list[str] = []
        for match in self.pattern.finditer(text or ""):
            term = match.group("term").lower()
            if term not in found:
                found.append(term)
            if not self.multiple:
                break
        return found


SKIN_TONE = FeatureExtractor(
    label="skin tone",
    words=(
        "light", "dark", "pale", "tan", "brown", "fair", "olive", "bronze",
        "beige", "peachy", "warm", "cool",
    ),
    suffixes=("skinned", "skin", "complexion", "tone"),
    suffix_required=True,
    multiple=False,
)

HAIR_COLOR = FeatureExtractor(
    label="hair color",
    words=(
        "blonde", "brown", "black", "red", "auburn", "chestnut", "dark",
        "light", "golden", "sandy",
    ),
    suffixes=("hair",),
)

HAIR_STYLE = FeatureExtractor(
    label="hair style",
    words=(
        "curly", "straight", "wavy", "short", "long", "afro", "braided",
        "tousled", "messy", "neat", "spiky", "fluffy", "bouncy",
    ),
    suffixes=("hair",),
)

EYE_COLOR = FeatureExtractor(
    label="eye color",
    words=("blue", "brown", "green", "hazel", "amber", "gray", "dark"),
    suffixes=("eyes",),
)

EYE_DESCRIPTOR = FeatureExtractor(
    label="eye descriptor",
    words=(
        "bright", "curious", "wide", "large", "round", "expressive",
        "sparkly", "shining",
    ),
    suffixes=("eyes",),
)

AGE_WORD = FeatureExtractor(
    label="age",
    words=("child", "toddler", "kid", "boy", "girl"),
    multiple=False,
)

FACIAL_FEATURES = FeatureExtractor(
    label="facial features",
    words=(
        "freckles", "dimples", "round face", "cheeks", "smile", "grin",
        "tooth", "teeth", "button nose", "small nose",
    ),
)

GARMENTS: tuple[str, ...] = (
    "t-shirt", "shirt", "shorts", "pants", "dress", "jacket", "sweater",
    "hoodie", "overalls", "skirt", "hat", "boots", "sneakers",
)

_NUMERIC_AGE = re.compile(r"\b\d+[\s-]?years?[\s-]?old\b", re.IGNORECASE)

# Text after "wearing" / "dressed in", or starting at a garment noun
_CLOTHING = re.compile(
    r"\b(?:(?:wearing|dressed in)\s+|(?=(?:"
    + "|".join(re.escape(g) for g in GARMENTS)
    + r")\b))(?P<span>[\w\s'-]+)",
    re.IGNORECASE,
)


def extract_age(text: str) -> str:
    """Return "7 year old" style ages, else "a <role>" from role words, else ""."""
    match = _NUMERIC_AGE.search(text or "")
    if match:
        return match.group(0)

    words = AGE_WORD.extract(text)
    return f"a {words[0]}" if words else ""


def extract_clothing(text: str) -> list[str]:
    """Return every clothing span in order of appearance."""
    spans = []
    for match in _CLOTHING.finditer(text or ""):
        span = match.group("span").strip()
        if span:
            spans.append(span)
    return spans


@dataclass
class CharacterFeatures:
    """Features pulled out of one character description."""

    skin_tone: list[str] = field(default_factory=list)
    hair_colors: list[str] = field(default_factory=list)
    hair_styles: list[str] = field(default_factory=list)
    eye_colors: list[str] = field(default_factory=list)
    eye_descriptors: list[str] = field(default_factory=list)
    age: str = ""
    clothing: list[str] = field(default_factory=list)
    facial_features: list[str] = field(default_factory=list)

    @classmethod
    def from_description(cls, description: str) -> "CharacterFeatures":
        return cls(
            skin_tone=SKIN_TONE.extract(description),
            hair_colors=HAIR_COLOR.extract(description),
            hair_styles=HAIR_STYLE.extract(description),
            eye_colors=EYE_COLOR.extract(description),
            eye_descriptors=EYE_DESCRIPTOR.extract(description),
            age=extract_age(description),
            clothing=extract_clothing(description),
            facial_features=FACIAL_FEATURES.extract(description),
        )

    def clauses(self) -> list[str]:
        """One MUST clause per feature that was found."""
        clauses = []
        if self.skin_tone:
            clauses.append(f"MUST have {self.skin_tone[0]} skin tone")
        if self.hair_colors:
            clauses.append(f"hair color MUST be {', '.join(self.hair_colors)}")
        if self.hair_styles:
            clauses.append(f"hair style MUST be {', '.join(self.hair_styles)}")
        if self.eye_colors:
            clauses.append(f"eye color MUST be {', '.join(self.eye_colors)}")
        if self.eye_descriptors:
            clauses.append(f"eyes MUST look {', '.join(self.eye_descriptors)}")
        if self.age:
            clauses.append(f"MUST be {self.age}")
        if self.clothing:
            clauses.append(f"MUST wear {', '.join(self.clothing)}")
        if self.facial_features:
            clauses.append(f"MUST have {', '.join(self.facial_features)}")
        return clauses


# ============================================================================
# Prompt Segments
# ============================================================================

CHARACTER_PREFIX = "IMPORTANT - DEPICT EXACTLY THIS CHARACTER IN EVERY IMAGE"
CONSISTENCY_PREFIX = "CHARACTER CONSISTENCY CRITICAL"
CHARACTER_PROHIBITION = (
    "DO NOT change the character's skin tone, hair, eyes, clothing, age, "
    "or facial features between images"
)

# (keywords contained in the style, descriptive phrase)
STYLE_PHRASES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("anime", "manga"),
        "Vibrant anime style illustration, Studio Ghibli inspired, soft pastel colors, "
        "expressive character design, whimsical and warm atmosphere",
    ),
    (
        ("watercolor",),
        "Soft watercolor painting, gentle brushstrokes, pastel colors, "
        "dreamy children's book illustration, flowing and ethereal",
    ),
    (
        ("3d", "pixar"),
        "Cute 3D illustration, Pixar-style, rounded features, volumetric lighting, "
        "glossy cartoon rendering",
    ),
)

DEFAULT_STYLE_PHRASE = (
    "Classic children's storybook illustration, warm inviting colors, "
    "detailed but not cluttered, traditional book art"
)

CLOSING_DIRECTIVE = (
    "Child-friendly, engaging composition, suitable for a children's storybook. "
    "CRITICAL: Keep the SAME character with identical physical features in every image, "
    "use the same art style and technique throughout, keep lighting and colors consistent, "
    "so all illustrations read as one cohesive series"
)


def character_segments(character_description: Optional[str]) -> list[str]:
    """
    Character restatement, feature directive and prohibition.

    The description is restated exactly as given. Nothing is returned when
    it is None or the empty string.
    """
    if not character_description:
        return []

    segments = [f"{CHARACTER_PREFIX}: {character_description}"]

    clauses = CharacterFeatures.from_description(character_description).clauses()
    if clauses:
        segments.append(f"{CONSISTENCY_PREFIX}: {'. '.join(clauses)}")

    segments.append(CHARACTER_PROHIBITION)
    return segments


def style_segment(parsed: ParsedPreferences) -> str:
    if not parsed.art_styles:
        return DEFAULT_STYLE_PHRASE

    style = parsed.art_styles[0]
    for keywords, phrase in STYLE_PHRASES:
        if any(keyword in style for keyword in keywords):
            return phrase
    return f"{style} style illustration"


def scene_segment(sentence: str) -> str:
    return f"Scene: {sentence}"


def mood_segment(parsed: ParsedPreferences) -> Optional[str]:
    return f"{parsed.moods[0]} atmosphere" if parsed.moods else None


def lighting_segment(parsed: ParsedPreferences) -> Optional[str]:
    return parsed.lighting[0] if parsed.lighting else None


def color_segment(parsed: ParsedPreferences) -> Optional[str]:
    return f"{parsed.colors[0]} color palette" if parsed.colors else None


def closing_segment() -> str:
    return CLOSING_DIRECTIVE


def build_prompt(
    sentence: str,
    parsed: ParsedPreferences,
    character_description: Optional[str] = None,
) -> str:
    """
    Build the image-generation prompt for one story sentence.

    Args:
        sentence: Story sentence to illustrate (used verbatim)
        parsed: Preferences parsed from the user's instructions
        character_description: Generated description of the main character

    Returns:
        Prompt string; never empty
    """
    segments = [
        *character_segments(character_description),
        style_segment(parsed),
        scene_segment(sentence),
        mood_segment(parsed),
        lighting_segment(parsed),
        color_segment(parsed),
        closing_segment(),
    ]

    prompt = ". ".join(segment for segment in segments if segment)
    logger.debug(f"Built prompt ({len(prompt)} chars) for: {sentence[:60]}")
    return prompt
