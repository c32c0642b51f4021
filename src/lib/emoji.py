"""
Emoji shortcodes

Resolves :category_name: shortcodes to image nodes in a parsed document.

Pieces:
  - EmojiResolver: which categories exist and where their images live,
    from settings or from a YAML catalog file
  - EmojiFallback: format fallback for images that fail to load
  - emojiShortcodes_transform: document tree transform replacing known
    shortcodes with image nodes

A catalog file looks like:

    base_url: https://cdn.example.org/emoji
    default_format: png
    fallback_formats: [png, webp, gif]
    categories:
      - smileys
      - animals
"""

import re
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

import yaml

from ..config import appsettings, AppSettings
from ..models.document import DocNode
from ..models.segments import EmojiToken
from .log import LOG


EMOJI_PATTERN = re.compile(r':([a-z0-9]+)_([a-z0-9_\-]+):', re.IGNORECASE)
EMOJI_ALT_PATTERN = re.compile(r'^emoji:([a-z0-9]+)_([a-z0-9_\-]+)', re.IGNORECASE)
URL_FORMAT_PATTERN = re.compile(r'\.(\w+)(?:\?|#|$)')

# Shortcodes are literal inside these nodes
SKIP_TYPES = frozenset({'code', 'inlineCode', 'link', 'image'})


class EmojiCatalogError(Exception):
    """Raised when an emoji catalog cannot be loaded or is malformed"""
    pass


class EmojiResolver:
    """
    Category lookup and image locator builder for emoji shortcodes

    Deterministic: the same category/name/format always gives the same
    locator.
    """

    def __init__(
        self,
        categories: List[str],
        base_url: str = "/emoji",
        default_format: str = "png",
        fallback_formats: Optional[List[str]] = None,
    ) -> None:
        """
        Args:
            categories: Known categories; anything else stays literal text
            base_url: Locator prefix, images live at <base_url>/<category>/<name>.<format>
            default_format: Format of the first locator handed out
            fallback_formats: Ordered formats to try when an image fails to load
        """
        self.categories = {category.lower() for category in categories}
        self.base_url = base_url.rstrip('/')
        self.default_format = default_format
        self.fallback_formats = list(fallback_formats or [default_format])

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "EmojiResolver":
        """Build a resolver from application settings, honouring emoji_catalog"""
        settings = settings or appsettings
        if settings.emoji_catalog:
            return cls.from_yaml(settings.emoji_catalog, settings)
        return cls(
            categories=settings.emoji_categories,
            base_url=settings.emoji_base_url,
            default_format=settings.emoji_default_format,
            fallback_formats=settings.emoji_fallback_formats,
        )

    @classmethod
    def from_yaml(
        cls, path: Union[str, Path], settings: Optional[AppSettings] = None
    ) -> "EmojiResolver":
        """
        Load a resolver from a YAML catalog

        Keys missing from the catalog fall back to the settings values.

        Raises:
            EmojiCatalogError: If the file is missing, unparsable or malformed
        """
        settings = settings or appsettings
        catalog_path = Path(path)
        if not catalog_path.exists():
            raise EmojiCatalogError(f"Emoji catalog not found: {catalog_path}")

        try:
            with open(catalog_path, 'r', encoding='utf-8') as f:
                config: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise EmojiCatalogError(f"Failed to parse {catalog_path.name}: {e}")
        except OSError as e:
            raise EmojiCatalogError(f"Failed to read {catalog_path.name}: {e}")

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise EmojiCatalogError(f"{catalog_path.name}: expected a mapping at top level")

        categories = config.get('categories', settings.emoji_categories)
        if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
            raise EmojiCatalogError(f"{catalog_path.name}: 'categories' must be a list of names")

        fallback_formats = config.get('fallback_formats', settings.emoji_fallback_formats)
        if not isinstance(fallback_formats, list):
            raise EmojiCatalogError(f"{catalog_path.name}: 'fallback_formats' must be a list")

        LOG(f"Loaded emoji catalog {catalog_path} ({len(categories)} categories)", level=2)
        return cls(
            categories=categories,
            base_url=str(config.get('base_url', settings.emoji_base_url)),
            default_format=str(config.get('default_format', settings.emoji_default_format)),
            fallback_formats=[str(fmt) for fmt in fallback_formats],
        )

    def category_has(self, category: str) -> bool:
        """True if shortcodes of this category resolve to images"""
        return category.lower() in self.categories

    def url_build(self, category: str, name: str, fmt: Optional[str] = None) -> str:
        """Image locator for an emoji in the given format (default format if omitted)"""
        return f"{self.base_url}/{category}/{name}.{fmt or self.default_format}"

    def token_resolve(self, token: EmojiToken) -> Optional[DocNode]:
        """Image node for a token, or None when its category is unknown"""
        if not self.category_has(token.category):
            return None
        return DocNode(
            'image',
            attrs={
                'url': self.url_build(token.category, token.name),
                'alt': token.alt,
                'title': None,
            },
        )

    def fallback_start(self, url: str, category: str, name: str) -> "EmojiFallback":
        """Fallback state machine positioned at the format of url"""
        return EmojiFallback(self, category, name, url_format(url))

    def fallback_next(self, url: str, category: str, name: str) -> Optional[str]:
        """
        Next locator to try after url failed to load

        Returns:
            The locator for the next format in fallback order, or None once
            the formats are exhausted
        """
        return self.fallback_start(url, category, name).advance()


def url_format(url: str) -> str:
    """File extension of a locator, ignoring query and fragment ('' if none)"""
    match = URL_FORMAT_PATTERN.search(url)
    return match.group(1) if match else ''


def emojiAlt_parse(alt: str) -> Optional[EmojiToken]:
    """Recover the emoji token from an image alt text ('emoji:cat_name')"""
    match = EMOJI_ALT_PATTERN.match(alt or '')
    if not match:
        return None
    return EmojiToken(category=match.group(1), name=match.group(2))


class EmojiFallback:
    """
    Format fallback for one emoji image

    States are the positions in the resolver's fallback format list, plus
    an exhausted state. Each load failure advances strictly past the
    current format, so no format is tried twice.

    Example:
        >>> fallback = EmojiFallback(resolver, 'smileys', 'grin', 'png')
        >>> fallback.advance()
        '/emoji/smileys/grin.webp'
        >>> fallback.advance()
        '/emoji/smileys/grin.gif'
        >>> fallback.advance() is None
        True
    """

    def __init__(self, resolver: EmojiResolver, category: str, name: str, current: str) -> None:
        self.resolver = resolver
        self.category = category
        self.name = name
        formats = resolver.fallback_formats
        # A format outside the list starts the machine before its first entry
        self.position = formats.index(current) if current in formats else -1

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.resolver.fallback_formats) - 1

    def remaining(self) -> List[str]:
        """Locators still to be tried, in order"""
        formats = self.resolver.fallback_formats[self.position + 1:]
        return [self.resolver.url_build(self.category, self.name, fmt) for fmt in formats]

    def advance(self) -> Optional[str]:
        """Move to the next format; returns its locator, or None when exhausted"""
        if self.exhausted:
            self.position = len(self.resolver.fallback_formats)
            return None
        self.position += 1
        fmt = self.resolver.fallback_formats[self.position]
        return self.resolver.url_build(self.category, self.name, fmt)


def shortcodes_expand(text: str, resolver: EmojiResolver) -> Tuple[DocNode, ...]:
    """
    Split one text value into text and image nodes

    Known shortcodes become image nodes; unknown ones stay inside the
    surrounding text. Text before, between and after images is kept as
    sibling text nodes, in order.
    """
    nodes: List[DocNode] = []
    buffer = ''
    last_index = 0

    for match in EMOJI_PATTERN.finditer(text):
        buffer += text[last_index:match.start()]
        token = EmojiToken(category=match.group(1).lower(), name=match.group(2).lower())
        image = resolver.token_resolve(token)
        if image is None:
            buffer += match.group(0)
        else:
            if buffer:
                nodes.append(DocNode('text', value=buffer))
                buffer = ''
            nodes.append(image)
        last_index = match.end()

    buffer += text[last_index:]
    if buffer:
        nodes.append(DocNode('text', value=buffer))
    return tuple(nodes)


def emojiShortcodes_transform(node: DocNode, resolver: EmojiResolver) -> DocNode:
    """
    Replace known emoji shortcodes in a document tree with image nodes

    Pure: returns a new tree. Nodes of a SKIP_TYPES type are returned
    untouched together with their whole subtree.

    Args:
        node: Document (sub)tree
        resolver: Emoji category lookup and locator builder

    Returns:
        Transformed tree
    """
    if node.type in SKIP_TYPES or not node.children:
        return node

    children: List[DocNode] = []
    for child in node.children:
        if child.type == 'text':
            children.extend(shortcodes_expand(child.value, resolver))
        else:
            children.append(emojiShortcodes_transform(child, resolver))
    return node.children_replace(tuple(children))


def emojiTransform_make(resolver: EmojiResolver) -> Callable[[DocNode], DocNode]:
    """Tree transform hook for MarkupRenderer bound to a resolver"""
    def transform(tree: DocNode) -> DocNode:
        return emojiShortcodes_transform(tree, resolver)
    return transform
