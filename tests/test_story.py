"""
Tests for pipeline.story and pipeline.transcribe modules.
"""

import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.constants import (
    CHARACTER_TEMPERATURE,
    OCR_MAX_TOKENS,
    REGENERATE_TEMPERATURE,
    STORY_TEMPERATURE,
)
from pipeline.story import (
    build_story_system_prompt,
    describe_character,
    generate_story,
    regenerate_story,
    split_sentences,
)
from pipeline.transcribe import (
    encode_image_data_url,
    guess_mime_type,
    transcribe_journal,
)


@pytest.fixture
def mock_llm() -> MagicMock:
    """LLM client whose chat call returns canned text."""
    llm = MagicMock()
    llm.vision_model = "vision-model"
    llm.chat = AsyncMock(return_value="  Some text.  ")
    return llm


class TestSplitSentences:
    """Tests for split_sentences function."""

    def test_four_sentences(self):
        story = "Mia woke up. She saw snow! Was it magic? She ran outside."
        assert split_sentences(story) == [
            "Mia woke up.",
            "She saw snow!",
            "Was it magic?",
            "She ran outside.",
        ]

    def test_limit(self):
        story = "One. Two. Three. Four. Five. Six."
        assert split_sentences(story) == ["One.", "Two.", "Three.", "Four."]
        assert split_sentences(story, limit=2) == ["One.", "Two."]

    def test_newlines_and_blanks(self):
        story = "First line.\n\nSecond line.   \n"
        assert split_sentences(story) == ["First line.", "Second line."]

    def test_no_terminal_punctuation(self):
        assert split_sentences("just one fragment") == ["just one fragment"]

    def test_empty(self):
        assert split_sentences("") == []


class TestStoryPrompts:
    """Tests for story prompt construction."""

    def test_base_rules(self):
        prompt = build_story_system_prompt()

        assert "4-sentence stories" in prompt
        assert "- Expand into exactly 4 complete sentences" in prompt
        assert "Feature this character" not in prompt
        assert "DIFFERENT" not in prompt

    def test_character_hints(self):
        prompt = build_story_system_prompt("girl red boots")
        assert prompt.endswith("- Feature this character: girl red boots")

    def test_regenerate_rule(self):
        assert "Make this version DIFFERENT" in build_story_system_prompt(regenerate=True)


class TestStoryCalls:
    """Tests for the story, regeneration and character calls."""

    @pytest.mark.asyncio
    async def test_generate_story(self, mock_llm):
        story = await generate_story(mock_llm, "Went to the zoo", "boy a hat")

        assert story == "Some text."
        messages = mock_llm.chat.call_args.args[0]
        assert messages[0]["role"] == "system"
        assert "Feature this character: boy a hat" in messages[0]["content"]
        assert messages[1]["content"].endswith("Went to the zoo")
        assert mock_llm.chat.call_args.kwargs["temperature"] == STORY_TEMPERATURE

    @pytest.mark.asyncio
    async def test_regenerate_story(self, mock_llm):
        await regenerate_story(mock_llm, "Went to the zoo")

        messages = mock_llm.chat.call_args.args[0]
        assert "DIFFERENT" in messages[0]["content"]
        assert mock_llm.chat.call_args.kwargs["temperature"] == REGENERATE_TEMPERATURE

    @pytest.mark.asyncio
    async def test_describe_character(self, mock_llm):
        await describe_character(mock_llm, "A story.", "girl pigtails")

        messages = mock_llm.chat.call_args.args[0]
        assert "Incorporate these details: girl pigtails" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "A story."}
        assert mock_llm.chat.call_args.kwargs["temperature"] == CHARACTER_TEMPERATURE

    @pytest.mark.asyncio
    async def test_describe_character_without_hints(self, mock_llm):
        await describe_character(mock_llm, "A story.")

        messages = mock_llm.chat.call_args.args[0]
        assert "Incorporate" not in messages[0]["content"]


class TestTranscribe:
    """Tests for journal transcription."""

    def test_guess_mime_type(self):
        assert guess_mime_type("page.PNG") == "image/png"
        assert guess_mime_type("page.jpeg") == "image/jpeg"
        assert guess_mime_type("page.unknown") == "image/jpeg"

    def test_encode_image_data_url(self):
        url = encode_image_data_url(b"abc", "image/png")

        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == b"abc"

    @pytest.mark.asyncio
    async def test_transcribe_journal(self, mock_llm):
        text = await transcribe_journal(mock_llm, b"\x89PNG", "image/png")

        assert text == "Some text."
        call = mock_llm.chat.call_args
        content = call.args[0][0]["content"]
        assert content[0]["type"] == "text"
        assert "Transcribe all handwritten text" in content[0]["text"]
        assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")
        assert content[1]["image_url"]["detail"] == "high"
        assert call.kwargs["model"] == "vision-model"
        assert call.kwargs["max_tokens"] == OCR_MAX_TOKENS
