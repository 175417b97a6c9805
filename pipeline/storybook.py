"""
Journal Storybook - Storybook Pipeline

Orchestrate one storybook run:

    photo -> transcription -> preferences -> story -> character
          -> one illustration per sentence (spaced by a fixed delay)

Each step reports chat messages, progress and status text through callbacks
so the chat UI and the CLI can follow along. Messages already emitted stay in
the transcript when a later step fails.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from openai import OpenAIError

from core.config import get_image_config, load_config
from core.constants import (
    DEFAULT_ART_STYLE,
    ConfirmationTypeEnum,
    MessageTypeEnum,
)
from core.llm import LLMClient
from core.logging import get_logger
from core.models import ChatMessage, ImageConfig, ParsedPreferences, Storybook, StoryPage
from pipeline.illustrate import OpenAIImageProvider
from pipeline.preferences import (
    describe_style,
    empty_preferences,
    extract_character_hints,
    parse_preferences,
)
from pipeline.prompt_builder import build_prompt
from pipeline.story import (
    describe_character,
    generate_story,
    regenerate_story,
    split_sentences,
)
from pipeline.transcribe import transcribe_journal

logger = get_logger(__name__)

MessageCallback = Callable[[ChatMessage], None]
ProgressCallback = Callable[[float], None]
StatusCallback = Callable[[str], None]


class StorybookError(Exception):
    """Raised when a storybook step fails. The message is shown to the user."""
    pass


@dataclass
class StorySession:
    """Context carried between uploads in one conversation."""

    last_character_description: str = ""
    last_art_style: str = ""

    def reset(self) -> None:
        self.last_character_description = ""
        self.last_art_style = ""


def _ignore(*args: Any) -> None:
    return None


class StorybookPipeline:
    """Run the journal-to-storybook steps against the external APIs."""

    def __init__(
        self,
        llm: LLMClient,
        images: OpenAIImageProvider,
        image_config: Optional[ImageConfig] = None,
        session: Optional[StorySession] = None,
        on_message: Optional[MessageCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.llm = llm
        self.images = images
        self.image_config = image_config or images.config
        self.session = session or StorySession()
        self.on_message = on_message or _ignore
        self.on_progress = on_progress or _ignore
        self.on_status = on_status or _ignore

    @classmethod
    def from_config(cls, config: Optional[dict] = None, **kwargs: Any) -> "StorybookPipeline":
        """Build a pipeline with clients from configuration (loads from file if None)."""
        if config is None:
            config = load_config()

        return cls(
            llm=LLMClient.from_config(config),
            images=OpenAIImageProvider.from_config(config),
            image_config=get_image_config(config),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _emit(self, text: str = "", **fields: Any) -> ChatMessage:
        message = ChatMessage(text=text, **fields)
        self.on_message(message)
        return message

    def _progress(self, value: float, status: Optional[str] = None) -> None:
        self.on_progress(min(max(value, 0.0), 1.0))
        if status is not None:
            self.on_status(status)

    async def _step(self, label: str, call: Awaitable[str]) -> str:
        try:
            return await call
        except OpenAIError as e:
            logger.error(f"{label} failed: {e}")
            raise StorybookError(f"{label} failed: {e}") from e

    def _ensure_configured(self) -> None:
        if not self.llm.is_configured():
            raise StorybookError(
                "OpenAI API key is not configured. "
                "Set STORYBOOK_LLM_API_KEY or OPENAI_API_KEY and try again."
            )

    def _character_hints(self, instructions: Optional[str]) -> str:
        if instructions:
            return extract_character_hints(instructions)
        return self.session.last_character_description

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def create_storybook(
        self,
        image_bytes: bytes,
        mime_type: str = "image/jpeg",
        instructions: Optional[str] = None,
    ) -> Storybook:
        """
        Turn a journal photo into an illustrated storybook.

        Args:
            image_bytes: Uploaded photo
            mime_type: Photo MIME type
            instructions: Optional style / character instructions

        Returns:
            Storybook (pages whose illustration failed carry an error)

        Raises:
            StorybookError: When transcription, story or character steps fail
        """
        self._ensure_configured()

        self._progress(0.05, "Reading your handwriting")
        transcription = await self._step(
            "Reading the journal photo",
            transcribe_journal(self.llm, image_bytes, mime_type),
        )
        if not transcription:
            raise StorybookError("I couldn't find any handwriting in that photo. Try a clearer picture.")

        self._progress(0.25)
        self._emit(f'I read: "{transcription}"', transcription=transcription)

        return await self.build_from_transcription(transcription, instructions)

    async def build_from_transcription(
        self,
        transcription: str,
        instructions: Optional[str] = None,
        story: Optional[str] = None,
    ) -> Storybook:
        """
        Write (or reuse) the story, design the character and illustrate it.

        Args:
            transcription: Journal text
            instructions: Optional style / character instructions
            story: Existing story to illustrate instead of writing a new one

        Returns:
            Storybook
        """
        self._ensure_configured()

        parsed = parse_preferences(instructions) if instructions else empty_preferences()
        hints = self._character_hints(instructions)

        if parsed.has_style_hints:
            art_style = parsed.art_styles[0] if parsed.art_styles else (self.session.last_art_style or DEFAULT_ART_STYLE)
            self.session.last_art_style = art_style
            self._emit(
                type=MessageTypeEnum.CONFIRMATION,
                confirmation_type=ConfirmationTypeEnum.STYLE,
                confirmation_data={
                    "art_style": art_style,
                    "mood": parsed.moods[0] if parsed.moods else None,
                    "colors": list(parsed.colors),
                },
            )

        if story is None:
            self._progress(0.35, "Creating your story")
            story = await self._step("Writing the story", generate_story(self.llm, transcription, hints))
            if not story:
                raise StorybookError("The story came back empty. Please try again.")

            self._progress(0.45)
            self._emit(story, type=MessageTypeEnum.STORY, story=story, transcription=transcription)

        self._progress(0.50, "Designing the character")
        character_description = await self._step(
            "Designing the character",
            describe_character(self.llm, story, hints),
        )
        self.session.last_character_description = character_description

        self._emit(
            type=MessageTypeEnum.CONFIRMATION,
            confirmation_type=ConfirmationTypeEnum.CHARACTER,
            confirmation_data={"character_description": character_description},
        )
        self._progress(0.55, "Generating illustrations")
        self._emit("Generating your storybook illustrations...")

        sentences = split_sentences(story, limit=self.image_config.max_pages)
        pages = await self.illustrate(sentences, parsed, character_description)

        storybook = Storybook(
            transcription=transcription,
            story=story,
            character_description=character_description,
            style_info=describe_style(parsed),
            instructions=instructions or "",
            pages=pages,
        )

        self._progress(1.0, "Done")
        failed = len(storybook.failed_pages)
        if failed:
            text = f"Your storybook is ready, but {failed} illustration(s) could not be generated."
        else:
            text = "Your storybook is ready! ✨"
        self._emit(text, type=MessageTypeEnum.STORYBOOK, story=story, storybook=storybook)

        logger.info(f"Storybook finished: {len(pages)} page(s), {failed} failed")
        return storybook

    async def illustrate(
        self,
        sentences: list[str],
        parsed: ParsedPreferences,
        character_description: str = "",
    ) -> list[StoryPage]:
        """
        Request one illustration per sentence, strictly in order.

        Consecutive requests are spaced by the configured delay. A failed
        request marks its page and the remaining pages are still attempted.
        """
        pages: list[StoryPage] = []
        total = len(sentences)

        for i, sentence in enumerate(sentences):
            self._progress(0.55 + i / total * 0.45, f"Generating illustration {i + 1} of {total}")

            prompt = build_prompt(sentence, parsed, character_description)
            result = await self.images.generate_image(prompt)

            page = StoryPage(index=i, sentence=sentence, prompt=prompt, image_url=result.url)
            if not result.success:
                page.error = result.error or "Image generation failed"
                logger.warning(f"Page {i + 1} has no illustration: {page.error}")
            pages.append(page)

            if i < total - 1:
                await asyncio.sleep(self.image_config.delay_seconds)

        return pages

    async def regenerate_story(self, transcription: str, instructions: Optional[str] = None) -> str:
        """
        Write a different story for the same journal text (no illustrations).

        Returns:
            The new story
        """
        self._ensure_configured()

        self._progress(0.30, "Regenerating story")
        self._emit("Regenerating story with a fresh take...")

        story = await self._step(
            "Regenerating the story",
            regenerate_story(self.llm, transcription, self._character_hints(instructions)),
        )
        if not story:
            raise StorybookError("The story came back empty. Please try again.")

        self._progress(0.60)
        self._emit(story, type=MessageTypeEnum.STORY, story=story, transcription=transcription)
        self._progress(1.0, "Done")
        self._emit("Story regenerated! Use \"Illustrate this story\" when you're ready for pictures.")
        return story

    async def close(self) -> None:
        await self.llm.close()
        await self.images.close()
