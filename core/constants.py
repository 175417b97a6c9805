"""
Journal Storybook - Constants

Enums, keyword vocabularies, and fixed defaults used throughout the pipeline.
"""

from enum import Enum


class PreferenceCategoryEnum(str, Enum):
    """Categories recognized in free-text style instructions."""

    ART_STYLES = "art_styles"
    CHARACTERS = "characters"
    MOODS = "moods"
    COLORS = "colors"
    LIGHTING = "lighting"


class MessageRoleEnum(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageTypeEnum(str, Enum):
    """Kinds of chat messages rendered in the transcript."""

    TEXT = "text"
    IMAGE = "image"
    STORY = "story"
    STORYBOOK = "storybook"
    CONFIRMATION = "confirmation"


class ConfirmationTypeEnum(str, Enum):
    """Confirmation cards shown before illustrations are generated."""

    CHARACTER = "character"
    STYLE = "style"


# ============================================================================
# Preference Vocabularies
# ============================================================================

# Order matters: matched terms are reported in declaration order.
ART_STYLES: tuple[str, ...] = (
    "anime", "manga", "watercolor", "oil painting", "sketch", "digital art",
    "photorealistic", "cartoon", "comic book", "pixel art", "abstract",
    "minimalist", "impressionist", "surreal", "cyberpunk", "steampunk",
    "fantasy", "sci-fi", "vintage", "retro", "modern", "studio ghibli",
    "pixar", "3d", "storybook", "pastel",
)

CHARACTER_TYPES: tuple[str, ...] = (
    "boy", "girl", "man", "woman", "child", "person", "character",
    "hero", "warrior", "wizard", "knight", "princess", "prince",
    "kid", "baby", "toddler", "teenager", "adult",
)

MOODS: tuple[str, ...] = (
    "happy", "sad", "angry", "peaceful", "dramatic", "mysterious",
    "whimsical", "dark", "bright", "melancholic", "energetic", "calm",
    "intense", "serene", "chaotic", "ethereal", "playful", "serious",
    "magical", "realistic",
)

COLOR_PALETTES: tuple[str, ...] = (
    "vibrant", "muted", "pastel", "dark", "bright", "warm", "cool",
    "monochrome", "colorful", "black and white", "sepia", "neon",
    "soft", "bold", "subtle",
)

LIGHTING_TERMS: tuple[str, ...] = (
    "dramatic lighting", "soft lighting", "golden hour", "sunset",
    "sunrise", "moonlight", "neon", "backlit", "rim lighting",
    "natural light", "studio lighting", "candlelight",
)

PREFERENCE_VOCABULARY: dict[PreferenceCategoryEnum, tuple[str, ...]] = {
    PreferenceCategoryEnum.ART_STYLES: ART_STYLES,
    PreferenceCategoryEnum.CHARACTERS: CHARACTER_TYPES,
    PreferenceCategoryEnum.MOODS: MOODS,
    PreferenceCategoryEnum.COLORS: COLOR_PALETTES,
    PreferenceCategoryEnum.LIGHTING: LIGHTING_TERMS,
}

# Role nouns that introduce a character hint ("a girl with red boots")
HINT_ROLE_NOUNS: tuple[str, ...] = ("boy", "girl", "man", "woman", "child", "kid")


# ============================================================================
# Model Defaults
# ============================================================================

DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TEXT_MODEL = "gpt-4o-mini"
DEFAULT_VISION_MODEL = "gpt-4o-mini"

DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_IMAGE_QUALITY = "standard"
DEFAULT_IMAGE_STYLE = "vivid"

# Pause between consecutive image requests (provider rate limits)
DEFAULT_IMAGE_DELAY_SECONDS = 2.0

# One illustration per sentence, four sentences per story
MAX_STORY_PAGES = 4

OCR_MAX_TOKENS = 1000
STORY_MAX_TOKENS = 300
CHARACTER_MAX_TOKENS = 150

STORY_TEMPERATURE = 0.7
REGENERATE_TEMPERATURE = 0.9
CHARACTER_TEMPERATURE = 0.3


# ============================================================================
# Chat Copy
# ============================================================================

WELCOME_MESSAGE = (
    "Hi! Upload a photo of your handwritten journal entry, and I'll transform it "
    "into a beautiful storybook. You can also tell me what style you'd like - "
    "anime, watercolor, 3D, or describe your character!"
)

IMAGE_ATTACHED_TEXT = "📎 Image attached"

DEFAULT_STYLE_INFO = "Classic children's storybook style"
DEFAULT_ART_STYLE = "storybook"

IMAGE_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
}
