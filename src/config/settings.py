"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use POSTDOWN_ prefix (e.g., POSTDOWN_EMOJI_BASE_URL=/static/emoji).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use POSTDOWN_ prefix. List values are given as JSON.

    Examples:
        POSTDOWN_RAW_FENCE_OPEN=```__html
        POSTDOWN_EMOJI_BASE_URL=https://cdn.example.org/emoji
        POSTDOWN_EMOJI_CATEGORIES='["smileys", "animals"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="POSTDOWN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Segmenter configuration
    raw_fence_open: str = Field(
        default="```__html",
        description="Marker opening a raw markup block (must be followed by a newline)",
    )

    raw_fence_close: str = Field(
        default="```",
        description="Marker closing a raw markup block",
    )

    placeholder_prefix: str = Field(
        default="\x00RAW_",
        description="Prefix for raw block placeholders (uses null byte to avoid collisions)",
    )

    placeholder_suffix: str = Field(
        default="\x00",
        description="Suffix for raw block placeholders (uses null byte to avoid collisions)",
    )

    # Emoji configuration
    emoji_base_url: str = Field(
        default="/emoji",
        description="Base locator for emoji images: <base>/<category>/<name>.<format>",
    )

    emoji_default_format: str = Field(
        default="png",
        description="Image format used when an emoji shortcode is first resolved",
    )

    emoji_fallback_formats: List[str] = Field(
        default=["png", "webp", "gif"],
        description="Ordered formats tried when an emoji image fails to load",
    )

    emoji_categories: List[str] = Field(
        default=[
            "smileys",
            "people",
            "animals",
            "food",
            "travel",
            "activities",
            "objects",
            "symbols",
            "flags",
        ],
        description="Known emoji categories; shortcodes in other categories stay literal",
    )

    emoji_catalog: Optional[str] = Field(
        default=None,
        description="Optional YAML emoji catalog overriding the emoji settings above",
    )

    # Rendering configuration
    markdown_preset: str = Field(
        default="commonmark",
        description="markdown-it-py preset used for lightweight markup",
    )

    pygments_style: str = Field(
        default="default",
        description="Pygments style for fenced code blocks",
    )

    def placeHolder_make(self, index: int, prefix: str | None = None) -> str:
        """
        Generate a placeholder string for a protected raw block at given index.

        Args:
            index: Zero-based index of the raw block
            prefix: Prefix to use instead of placeholder_prefix

        Returns:
            Placeholder string (e.g., "\\x00RAW_0\\x00")

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make(0)
            '\\x00RAW_0\\x00'
        """
        return f"{prefix or self.placeholder_prefix}{index}{self.placeholder_suffix}"

    def blockIndex_extract(self, placeholder: str, prefix: str | None = None) -> int | None:
        """
        Extract the raw block index from a placeholder string.

        Args:
            placeholder: Placeholder string to parse
            prefix: Prefix to use instead of placeholder_prefix

        Returns:
            Block index if valid placeholder, None otherwise

        Example:
            >>> settings = AppSettings()
            >>> settings.blockIndex_extract('\\x00RAW_3\\x00')
            3
        """
        prefix = prefix or self.placeholder_prefix
        if not placeholder.startswith(prefix):
            return None
        if not placeholder.endswith(self.placeholder_suffix):
            return None

        content = placeholder[len(prefix) : -len(self.placeholder_suffix)]

        try:
            return int(content)
        except ValueError:
            return None


# Singleton instance - import this in your code
appsettings = AppSettings()
