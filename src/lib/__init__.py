"""
postdown - Post content renderer

Turns short-form post text with hashtags, spoilers, raw HTML blocks and
emoji shortcodes into HTML.
"""

__version__ = "1.0.0"

from .segmenter import Segmenter, content_parse
from .assembler import Assembler, render
from .markup import MarkupRenderer
from .emoji import EmojiResolver, EmojiCatalogError
from .compiler import Compiler
from .overrides import OverrideRegistry
from .log import LOG, state_connectToLogger

__all__ = [
    "Segmenter",
    "content_parse",
    "Assembler",
    "render",
    "MarkupRenderer",
    "EmojiResolver",
    "EmojiCatalogError",
    "Compiler",
    "OverrideRegistry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
