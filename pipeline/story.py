"""
Journal Storybook - Story Writing

Turn a journal transcription into a four-sentence children's story and
describe the story's main character for the illustrator.
"""

import re

from core.constants import (
    CHARACTER_MAX_TOKENS,
    CHARACTER_TEMPERATURE,
    MAX_STORY_PAGES,
    REGENERATE_TEMPERATURE,
    STORY_MAX_TOKENS,
    STORY_TEMPERATURE,
)
from core.llm import LLMClient
from core.logging import get_logger

logger = get_logger(__name__)

STORY_RULES = [
    "Expand into exactly 4 complete sentences",
    "Add vivid descriptions and emotions",
    "Make it age-appropriate and imaginative",
    "Include sensory details (colors, sounds, feelings)",
    "Create a clear beginning, middle, and end",
    "Use simple, engaging language",
    "Each sentence should be suitable for its own illustration",
]

REGENERATE_RULE = "Make this version DIFFERENT from previous versions"

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")


def build_story_system_prompt(character_hints: str = "", regenerate: bool = False) -> str:
    """System prompt for the story writer."""
    rules = list(STORY_RULES)
    if regenerate:
        rules.append(REGENERATE_RULE)
    if character_hints:
        rules.append(f"Feature this character: {character_hints}")

    rule_lines = "\n".join(f"- {rule}" for rule in rules)
    return (
        "You are a creative children's story writer. Transform short journal entries "
        "into engaging 4-sentence stories suitable for children aged 4-8.\n\n"
        f"Rules:\n{rule_lines}"
    )


def build_story_messages(
    transcription: str,
    character_hints: str = "",
    regenerate: bool = False,
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": build_story_system_prompt(character_hints, regenerate)},
        {
            "role": "user",
            "content": f"Transform this journal entry into a 4-sentence children's story:\n\n{transcription}",
        },
    ]


async def generate_story(llm: LLMClient, transcription: str, character_hints: str = "") -> str:
    """
    Write a 4-sentence children's story from a journal transcription.

    Args:
        llm: LLM client
        transcription: Text read from the journal photo
        character_hints: Optional character details from the user

    Returns:
        Story text
    """
    logger.info("Writing story")
    story = await llm.chat(
        build_story_messages(transcription, character_hints),
        temperature=STORY_TEMPERATURE,
        max_tokens=STORY_MAX_TOKENS,
    )
    return story.strip()


async def regenerate_story(llm: LLMClient, transcription: str, character_hints: str = "") -> str:
    """Write a fresh take on the story with more sampling variety."""
    logger.info("Regenerating story")
    story = await llm.chat(
        build_story_messages(transcription, character_hints, regenerate=True),
        temperature=REGENERATE_TEMPERATURE,
        max_tokens=STORY_MAX_TOKENS,
    )
    return story.strip()


def build_character_messages(story: str, character_hints: str = "") -> list[dict[str, str]]:
    system = (
        "Extract and create a detailed visual description of the main character from "
        "this story. Include age, physical features, clothing, and distinctive "
        "characteristics. Keep it under 100 words."
    )
    if character_hints:
        system += f" Incorporate these details: {character_hints}"

    return [
        {"role": "system", "content": system},
        {"role": "user", "content": story},
    ]


async def describe_character(llm: LLMClient, story: str, character_hints: str = "") -> str:
    """
    Describe the story's main character so every illustration can reuse it.

    Args:
        llm: LLM client
        story: Story text
        character_hints: Optional character details to incorporate

    Returns:
        Visual character description
    """
    logger.info("Designing character")
    description = await llm.chat(
        build_character_messages(story, character_hints),
        temperature=CHARACTER_TEMPERATURE,
        max_tokens=CHARACTER_MAX_TOKENS,
    )
    return description.strip()


def split_sentences(story: str, limit: int = MAX_STORY_PAGES) -> list[str]:
    """
    Split a story into sentences, one per illustrated page.

    Args:
        story: Story text
        limit: Maximum number of sentences to keep

    Returns:
        Up to `limit` non-blank sentences
    """
    sentences = [s.strip() for s in _SENTENCE_BREAK.split(story or "") if s.strip()]
    return sentences[:limit]
