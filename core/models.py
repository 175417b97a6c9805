"""
Journal Storybook - Pydantic Models

Data models for configuration, parsed preferences, storybooks and chat messages.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from core.constants import (
    DEFAULT_IMAGE_DELAY_SECONDS,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_IMAGE_SIZE,
    DEFAULT_IMAGE_STYLE,
    DEFAULT_LLM_BASE_URL,
    DEFAULT_TEXT_MODEL,
    DEFAULT_VISION_MODEL,
    MAX_STORY_PAGES,
    ConfirmationTypeEnum,
    MessageRoleEnum,
    MessageTypeEnum,
)


# ============================================================================
# Configuration
# ============================================================================


class LLMConfig(BaseModel):
    """Configuration for the OpenAI-compatible chat API."""

    base_url: str = DEFAULT_LLM_BASE_URL
    api_key: str = ""
    model: str = DEFAULT_TEXT_MODEL
    vision_model: str = DEFAULT_VISION_MODEL
    temperature: float = 0.7
    max_tokens: int = 1000
    timeout: int = 60


class ImageConfig(BaseModel):
    """Configuration for illustration requests."""

    model: str = DEFAULT_IMAGE_MODEL
    size: str = DEFAULT_IMAGE_SIZE
    quality: str = DEFAULT_IMAGE_QUALITY
    style: str = DEFAULT_IMAGE_STYLE
    delay_seconds: float = DEFAULT_IMAGE_DELAY_SECONDS
    max_pages: int = MAX_STORY_PAGES


# ============================================================================
# Parsed Preferences
# ============================================================================


class ParsedPreferences(BaseModel):
    """Style and character terms found in one instruction string."""

    model_config = ConfigDict(frozen=True)

    art_styles: tuple[str, ...] = ()
    characters: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    lighting: tuple[str, ...] = ()
    raw_text: str = ""

    @property
    def has_style_hints(self) -> bool:
        """True when any style, mood or color term was recognized."""
        return bool(self.art_styles or self.moods or self.colors)


# ============================================================================
# Storybook
# ============================================================================


class StoryPage(BaseModel):
    """One illustrated page: a story sentence and its image."""

    index: int
    sentence: str
    image_url: str = ""
    prompt: str = ""
    error: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


class Storybook(BaseModel):
    """A finished (or partially finished) storybook."""

    transcription: str
    story: str
    character_description: str = ""
    style_info: str = ""
    instructions: str = ""
    pages: list[StoryPage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def failed_pages(self) -> list[StoryPage]:
        return [page for page in self.pages if page.error]


# ============================================================================
# Chat Transcript
# ============================================================================


class ChatMessage(BaseModel):
    """A message in the chat transcript."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: MessageRoleEnum = MessageRoleEnum.ASSISTANT
    text: str = ""
    type: MessageTypeEnum = MessageTypeEnum.TEXT
    timestamp: str = Field(default_factory=lambda: datetime.now().strftime("%I:%M %p"))

    # Uploaded journal photo (user image messages)
    image_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None

    # Story text (story and storybook messages)
    story: Optional[str] = None
    transcription: Optional[str] = None
    storybook: Optional[Storybook] = None

    confirmation_type: Optional[ConfirmationTypeEnum] = None
    confirmation_data: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_user(self) -> bool:
        return self.role == MessageRoleEnum.USER
