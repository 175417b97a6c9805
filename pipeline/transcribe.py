"""
Journal Storybook - Handwriting Transcription

Read the handwritten text from a journal photo using a vision-capable chat model.
"""

import base64
from pathlib import Path

from core.constants import IMAGE_MIME_TYPES, OCR_MAX_TOKENS
from core.llm import LLMClient
from core.logging import get_logger

logger = get_logger(__name__)

TRANSCRIBE_INSTRUCTION = (
    "Transcribe all handwritten text from this journal entry. "
    "Output only the transcribed text, no commentary."
)


def guess_mime_type(filename: str, default: str = "image/jpeg") -> str:
    """Map an image file name to its MIME type."""
    return IMAGE_MIME_TYPES.get(Path(filename).suffix.lower(), default)


def encode_image_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a base64 data: URL."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_transcription_messages(image_bytes: bytes, mime_type: str) -> list[dict]:
    """Chat messages asking the model to transcribe the attached image."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": TRANSCRIBE_INSTRUCTION},
                {
                    "type": "image_url",
                    "image_url": {
                        "url": encode_image_data_url(image_bytes, mime_type),
                        "detail": "high",
                    },
                },
            ],
        }
    ]


async def transcribe_journal(
    llm: LLMClient,
    image_bytes: bytes,
    mime_type: str = "image/jpeg",
) -> str:
    """
    Transcribe the handwriting in a journal photo.

    Args:
        llm: LLM client
        image_bytes: Raw image file contents
        mime_type: Image MIME type

    Returns:
        Transcribed text (stripped; empty if nothing was read)
    """
    logger.info(f"Transcribing journal photo ({len(image_bytes) // 1024} KB, {mime_type})")

    text = await llm.chat(
        build_transcription_messages(image_bytes, mime_type),
        max_tokens=OCR_MAX_TOKENS,
        model=llm.vision_model,
    )
    return text.strip()
