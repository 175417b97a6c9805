"""
Journal Storybook - Illustration Provider

Generate storybook illustrations with the OpenAI images API (DALL-E 3).

Environment Variables:
- STORYBOOK_LLM_API_KEY / OPENAI_API_KEY
- STORYBOOK_IMAGE_MODEL (default: dall-e-3)
"""

import time
from dataclasses import dataclass
from typing import Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    AsyncOpenAI,
    InternalServerError,
    OpenAIError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import get_image_config, get_llm_config, load_config
from core.logging import get_logger
from core.models import ImageConfig

logger = get_logger(__name__)

# Errors worth another attempt; content-policy rejections are not retried
TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)


@dataclass
class ImageGenerationResult:
    """Result of image generation."""
    success: bool = False
    url: str = ""
    prompt: str = ""
    revised_prompt: str = ""
    error: Optional[str] = None
    latency_ms: int = 0
    attempts: int = 0
    source: str = "openai"


class OpenAIImageProvider:
    """
    OpenAI image generation provider.

    Requests one image per prompt and returns the hosted image URL.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.openai.com/v1",
        image_config: Optional[ImageConfig] = None,
        timeout: int = 120,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.config = image_config or ImageConfig()
        self.timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

        if self.api_key:
            logger.debug(f"Image provider configured: model={self.config.model}")
        else:
            logger.debug("Image provider not configured (no API key)")

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "OpenAIImageProvider":
        """Create provider from configuration (loads from file if None)."""
        if config is None:
            config = load_config()

        llm_config = get_llm_config(config)
        return cls(
            api_key=llm_config.api_key,
            base_url=llm_config.base_url,
            image_config=get_image_config(config),
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
            )
        return self._client

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _request_image(self, prompt: str, result: ImageGenerationResult):
        result.attempts += 1
        return await self.client.images.generate(
            model=self.config.model,
            prompt=prompt,
            size=self.config.size,
            quality=self.config.quality,
            style=self.config.style,
            n=1,
        )

    async def generate_image(self, prompt: str) -> ImageGenerationResult:
        """
        Generate one illustration.

        Args:
            prompt: Image generation prompt

        Returns:
            ImageGenerationResult (errors are recorded, not raised)
        """
        result = ImageGenerationResult(prompt=prompt)

        if not self.api_key:
            result.error = "API key not set"
            return result

        start_time = time.time()

        try:
            response = await self._request_image(prompt, result)
        except OpenAIError as e:
            logger.error(f"Image generation error: {e}")
            result.error = str(e)
            return result

        result.latency_ms = int((time.time() - start_time) * 1000)

        data = response.data or []
        if not data or not data[0].url:
            result.error = "No image data returned"
            logger.warning(result.error)
            return result

        result.success = True
        result.url = data[0].url
        result.revised_prompt = data[0].revised_prompt or ""
        if result.revised_prompt:
            logger.debug(f"Revised prompt: {result.revised_prompt[:100]}...")

        logger.info(f"Illustration generated ({result.latency_ms}ms, {result.attempts} attempt(s))")
        return result

    async def close(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None
