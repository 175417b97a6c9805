"""
Journal Storybook - Configuration

Load configuration from YAML files and environment variables.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

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
)
from core.logging import get_logger
from core.models import ImageConfig, LLMConfig

logger = get_logger(__name__)

# Default paths
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
OUTPUT_DIR = PROJECT_ROOT / "outputs"
LOGS_DIR = PROJECT_ROOT / "logs"

# Default config file
DEFAULT_CONFIG_FILE = CONFIG_DIR / "storybook.yaml"


def load_config(config_path: Optional[Path] = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (default: config/storybook.yaml)

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return _default_config()

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    logger.debug(f"Loaded config from {config_path}")
    return config


def _default_config() -> dict[str, Any]:
    """Return default configuration."""
    return {
        "llm": {
            "base_url": DEFAULT_LLM_BASE_URL,
            "api_key": "",
            "model": DEFAULT_TEXT_MODEL,
            "vision_model": DEFAULT_VISION_MODEL,
        },
        "images": {
            "model": DEFAULT_IMAGE_MODEL,
            "size": DEFAULT_IMAGE_SIZE,
            "quality": DEFAULT_IMAGE_QUALITY,
            "style": DEFAULT_IMAGE_STYLE,
            "delay_seconds": DEFAULT_IMAGE_DELAY_SECONDS,
            "max_pages": MAX_STORY_PAGES,
        },
        "output": {
            "path": str(OUTPUT_DIR / "storybooks"),
        },
    }


def get_llm_config(config: Optional[dict[str, Any]] = None) -> LLMConfig:
    """
    Get LLM configuration from config dict and environment variables.
    Environment variables take precedence.

    Env vars:
        STORYBOOK_LLM_BASE_URL
        STORYBOOK_LLM_API_KEY (falls back to OPENAI_API_KEY)
        STORYBOOK_LLM_MODEL
        STORYBOOK_VISION_MODEL

    Args:
        config: Configuration dictionary (loads from file if None)

    Returns:
        LLMConfig instance
    """
    if config is None:
        config = load_config()

    llm_config = config.get("llm", {}) or {}

    api_key = (
        os.environ.get("STORYBOOK_LLM_API_KEY")
        or os.environ.get("OPENAI_API_KEY")
        or llm_config.get("api_key", "")
    )

    return LLMConfig(
        base_url=os.environ.get("STORYBOOK_LLM_BASE_URL", llm_config.get("base_url", DEFAULT_LLM_BASE_URL)),
        api_key=api_key or "",
        model=os.environ.get("STORYBOOK_LLM_MODEL", llm_config.get("model", DEFAULT_TEXT_MODEL)),
        vision_model=os.environ.get("STORYBOOK_VISION_MODEL", llm_config.get("vision_model", DEFAULT_VISION_MODEL)),
        temperature=float(llm_config.get("temperature", 0.7)),
        max_tokens=int(llm_config.get("max_tokens", 1000)),
        timeout=int(llm_config.get("timeout", 60)),
    )


def get_image_config(config: Optional[dict[str, Any]] = None) -> ImageConfig:
    """
    Get illustration settings from config dict and environment variables.

    Env vars:
        STORYBOOK_IMAGE_MODEL
        STORYBOOK_IMAGE_DELAY

    Args:
        config: Configuration dictionary (loads from file if None)

    Returns:
        ImageConfig instance
    """
    if config is None:
        config = load_config()

    image_config = config.get("images", {}) or {}

    delay = os.environ.get("STORYBOOK_IMAGE_DELAY", image_config.get("delay_seconds", DEFAULT_IMAGE_DELAY_SECONDS))

    return ImageConfig(
        model=os.environ.get("STORYBOOK_IMAGE_MODEL", image_config.get("model", DEFAULT_IMAGE_MODEL)),
        size=image_config.get("size", DEFAULT_IMAGE_SIZE),
        quality=image_config.get("quality", DEFAULT_IMAGE_QUALITY),
        style=image_config.get("style", DEFAULT_IMAGE_STYLE),
        delay_seconds=float(delay),
        max_pages=int(image_config.get("max_pages", MAX_STORY_PAGES)),
    )


def get_output_path(config: Optional[dict[str, Any]] = None) -> Path:
    """
    Get storybook export directory path.

    Args:
        config: Configuration dictionary (loads from file if None)

    Returns:
        Path to output directory
    """
    if config is None:
        config = load_config()

    output_config = config.get("output", {}) or {}
    output_path = output_config.get("path", str(OUTPUT_DIR / "storybooks"))
    return Path(output_path)


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    for directory in [CONFIG_DIR, OUTPUT_DIR, LOGS_DIR, OUTPUT_DIR / "storybooks"]:
        directory.mkdir(parents=True, exist_ok=True)
