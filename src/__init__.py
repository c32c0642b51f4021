"""
postdown - Post content renderer

Turns short-form post text with hashtags, spoilers, raw HTML blocks and
emoji shortcodes into HTML.
"""

__version__ = "1.0.0"

from .lib import (
    Segmenter,
    content_parse,
    Assembler,
    render,
    Compiler,
    MarkupRenderer,
    EmojiResolver,
    OverrideRegistry,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Segmenter",
    "content_parse",
    "Assembler",
    "render",
    "Compiler",
    "MarkupRenderer",
    "EmojiResolver",
    "OverrideRegistry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
