"""
Journal Storybook - LLM Client

OpenAI-compatible chat client with retry logic.
"""

from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import get_llm_config, load_config
from core.logging import get_logger
from core.models import LLMConfig

logger = get_logger(__name__)


class LLMClient:
    """
    OpenAI-compatible LLM client.

    Supports any OpenAI-compatible API by configuring base_url.
    Includes retry logic with exponential backoff.
    """

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        api_key: str = "",
        model: str = "gpt-4o-mini",
        vision_model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: int = 60,
    ):
        """
        Initialize LLM client.

        Args:
            base_url: API base URL (OpenAI-compatible)
            api_key: API key
            model: Model used for text generation
            vision_model: Model used for image input (transcription)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.vision_model = vision_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

        self._client: Optional[AsyncOpenAI] = None

    @classmethod
    def from_llm_config(cls, llm_config: LLMConfig) -> "LLMClient":
        """Create client from an LLMConfig record."""
        return cls(
            base_url=llm_config.base_url,
            api_key=llm_config.api_key,
            model=llm_config.model,
            vision_model=llm_config.vision_model,
            temperature=llm_config.temperature,
            max_tokens=llm_config.max_tokens,
            timeout=llm_config.timeout,
        )

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "LLMClient":
        """
        Create client from configuration.

        Args:
            config: Config dict (loads from file if None)

        Returns:
            LLMClient instance
        """
        if config is None:
            config = load_config()

        return cls.from_llm_config(get_llm_config(config))

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create async OpenAI client."""
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
            )
        return self._client

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key and self.api_key != "YOUR_API_KEY")

    @retry(
        retry=retry_if_exception_type(OpenAIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def chat(
        self,
        messages: list[dict[str, Any]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> str:
        """
        Send chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'.
                Content may be a string or a list of content parts (text / image_url).
            temperature: Override default temperature
            max_tokens: Override default max_tokens
            model: Override default model

        Returns:
            Response content string
        """
        if not self.is_configured():
            logger.warning("LLM not configured, returning empty response")
            return ""

        try:
            response = await self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self.max_tokens,
            )

            content = response.choices[0].message.content or ""
            logger.debug(f"LLM response: {content[:100]}...")
            return content

        except OpenAIError as e:
            logger.error(f"LLM API error: {e}")
            raise

    async def close(self) -> None:
        """Close the client."""
        if self._client:
            await self._client.close()
            self._client = None
