"""
Presentation overrides for document nodes

Each override turns one document node type into HTML. The Compiler hands
every handler the node, the compiled HTML of its children and itself.
Uses OverrideSpec for metadata.
"""

import html
from typing import Any, Callable, Dict, Optional

from pygments import highlight
from pygments.lexers import get_lexer_by_name, TextLexer
from pygments.lexer import Lexer
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from ..models.document import DocNode
from ..models.overrides import OverrideSpec, NodeCategory
from .emoji import emojiAlt_parse
from .lexer import PostLexer


# Emoji images walk their data-fallback list on load failure, then give up
EMOJI_ONERROR = (
    "var f=(this.dataset.fallback||'').split(' ').filter(Boolean);"
    "if(f.length){this.src=f.shift();this.dataset.fallback=f.join(' ');}"
    "else{this.onerror=null;}"
)
EMOJI_STYLE = (
    "height: 1em; width: auto; vertical-align: -0.2em; "
    "display: inline-block; margin: 0 0.1em;"
)

HEADING_CLASSES = {
    1: "text-xl font-bold my-2",
    2: "text-lg font-bold my-2",
    3: "text-md font-bold my-2",
}


def attr_escape(value: Any) -> str:
    return html.escape(str(value), quote=True)


class OverrideRegistry:
    """
    Registry of presentation overrides

    Maps document node types to OverrideSpec objects containing metadata
    and compilation handlers.
    """

    def __init__(self) -> None:
        """Initialize the registry and register all built-in overrides"""
        self.specs: Dict[str, OverrideSpec] = {}
        self.blockOverrides_register()
        self.inlineOverrides_register()
        self.leafOverrides_register()
        self.mediaOverrides_register()

    def register(self, spec: OverrideSpec) -> None:
        """Register an override specification (replacing any earlier one)"""
        self.specs[spec.node_type] = spec
        for alias in spec.aliases:
            self.specs[alias] = spec

    def get(self, node_type: str) -> Optional[Callable[[DocNode, str, Any], str]]:
        """
        Get override handler by node type

        Returns:
            Handler function or None if the type has no override
        """
        spec = self.spec_get(node_type)
        return spec.handler if spec else None

    def spec_get(self, node_type: str) -> Optional[OverrideSpec]:
        """Get full override specification by node type"""
        return self.specs.get(node_type)

    def overrides_listByCategory(self, category: NodeCategory) -> list[OverrideSpec]:
        """Get all overrides in a category (aliases listed once)"""
        seen = []
        for spec in self.specs.values():
            if spec.category == category and spec not in seen:
                seen.append(spec)
        return seen

    def blockOverrides_register(self) -> None:
        """Register block-level overrides"""

        def root_handler(node: DocNode, content: str, compiler: Any) -> str:
            return content

        def paragraph_handler(node: DocNode, content: str, compiler: Any) -> str:
            """Paragraphs render inline so markup blocks flow around spoilers and tags"""
            return f'<span class="whitespace-pre-wrap">{content}</span>'

        def heading_handler(node: DocNode, content: str, compiler: Any) -> str:
            depth = node.attr('depth', 1)
            css_class = HEADING_CLASSES.get(depth)
            class_attr = f' class="{css_class}"' if css_class else ''
            return f'<h{depth}{class_attr}>{content}</h{depth}>'

        def list_handler(node: DocNode, content: str, compiler: Any) -> str:
            if node.attr('ordered'):
                start = node.attr('start', 1)
                start_attr = f' start="{start}"' if start != 1 else ''
                return f'<ol class="list-decimal pl-5 my-2"{start_attr}>{content}</ol>'
            return f'<ul class="list-disc pl-5 my-2">{content}</ul>'

        def list_item_handler(node: DocNode, content: str, compiler: Any) -> str:
            return f'<li class="my-1">{content}</li>'

        def blockquote_handler(node: DocNode, content: str, compiler: Any) -> str:
            return f'<blockquote>{content}</blockquote>'

        def thematic_break_handler(node: DocNode, content: str, compiler: Any) -> str:
            return '<hr>'

        block_specs = [
            ('root', root_handler, 'Document root, children only'),
            ('paragraph', paragraph_handler, 'Paragraph as inline pre-wrap span'),
            ('heading', heading_handler, 'Heading with per-level classes'),
            ('list', list_handler, 'Bullet or ordered list'),
            ('listItem', list_item_handler, 'List item'),
            ('blockquote', blockquote_handler, 'Block quote'),
            ('thematicBreak', thematic_break_handler, 'Horizontal rule'),
        ]

        for node_type, handler, desc in block_specs:
            self.register(OverrideSpec(
                node_type=node_type,
                category=NodeCategory.BLOCK,
                description=desc,
                handler=handler,
            ))

    def inlineOverrides_register(self) -> None:
        """Register inline formatting overrides"""

        def make_html_wrapper(tag: str, css_class: str = '') -> Callable[[DocNode, str, Any], str]:
            """Factory for simple HTML tag wrappers"""
            def handler(node: DocNode, content: str, compiler: Any) -> str:
                class_attr = f' class="{css_class}"' if css_class else ''
                return f'<{tag}{class_attr}>{content}</{tag}>'
            return handler

        inline_specs = [
            ('strong', 'strong', 'font-bold', 'Strong emphasis'),
            ('emphasis', 'em', 'italic', 'Emphasis'),
            ('delete', 'del', '', 'Strikethrough'),
        ]

        for node_type, tag, css_class, desc in inline_specs:
            self.register(OverrideSpec(
                node_type=node_type,
                category=NodeCategory.INLINE,
                description=desc,
                handler=make_html_wrapper(tag, css_class),
            ))

        def link_handler(node: DocNode, content: str, compiler: Any) -> str:
            title = node.attr('title')
            title_attr = f' title="{attr_escape(title)}"' if title else ''
            return f'<a href="{attr_escape(node.attr("url", ""))}"{title_attr}>{content}</a>'

        def break_handler(node: DocNode, content: str, compiler: Any) -> str:
            return '<br>'

        self.register(OverrideSpec(
            node_type='link',
            category=NodeCategory.INLINE,
            description='Hyperlink',
            handler=link_handler,
        ))

        self.register(OverrideSpec(
            node_type='break',
            category=NodeCategory.INLINE,
            description='Hard line break',
            handler=break_handler,
        ))

    def leafOverrides_register(self) -> None:
        """Register leaf overrides (literal payloads)"""

        def text_handler(node: DocNode, content: str, compiler: Any) -> str:
            return html.escape(node.value, quote=False)

        def inline_code_handler(node: DocNode, content: str, compiler: Any) -> str:
            return f'<code>{html.escape(node.value, quote=False)}</code>'

        def code_handler(node: DocNode, content: str, compiler: Any) -> str:
            """Fenced code highlighted with Pygments; 'post' uses PostLexer"""
            language = node.attr('lang') or 'text'

            lexer: Lexer
            try:
                if language.lower() in ['post', 'postdown']:
                    lexer = PostLexer()
                else:
                    lexer = get_lexer_by_name(language)
            except ClassNotFound:
                lexer = TextLexer()

            formatter = HtmlFormatter(style=compiler.settings.pygments_style, noclasses=True)
            return highlight(node.value, lexer, formatter)

        self.register(OverrideSpec(
            node_type='text',
            category=NodeCategory.LEAF,
            description='Plain text (escaped)',
            handler=text_handler,
            aliases=['html'],
        ))

        self.register(OverrideSpec(
            node_type='inlineCode',
            category=NodeCategory.LEAF,
            description='Inline code (escaped)',
            handler=inline_code_handler,
        ))

        self.register(OverrideSpec(
            node_type='code',
            category=NodeCategory.LEAF,
            description='Syntax highlighted code block',
            handler=code_handler,
        ))

    def mediaOverrides_register(self) -> None:
        """Register image override (emoji aware)"""

        def image_handler(node: DocNode, content: str, compiler: Any) -> str:
            """
            Render an image

            Emoji images (alt 'emoji:<category>_<name>' or a locator under
            /emoji/) are sized to the text and carry the remaining fallback
            locators in data-fallback, consumed one by one on load failure.
            """
            url = node.attr('url', '')
            alt = node.attr('alt', '') or ''
            title = node.attr('title')
            title_attr = f' title="{attr_escape(title)}"' if title else ''

            token = emojiAlt_parse(alt)
            if token is None and '/emoji/' not in url:
                return f'<img src="{attr_escape(url)}" alt="{attr_escape(alt)}"{title_attr}>'

            fallback_attr = ''
            if token is not None:
                fallback = compiler.resolver.fallback_start(url, token.category, token.name)
                remaining = ' '.join(fallback.remaining())
                fallback_attr = (
                    f' data-fallback="{attr_escape(remaining)}"'
                    f' onerror="{attr_escape(EMOJI_ONERROR)}"'
                )

            return (
                f'<img class="emoji" src="{attr_escape(url)}" alt="{attr_escape(alt)}"'
                f'{title_attr} style="{EMOJI_STYLE}"{fallback_attr}>'
            )

        self.register(OverrideSpec(
            node_type='image',
            category=NodeCategory.MEDIA,
            description='Image; emoji images get inline sizing and format fallback',
            handler=image_handler,
        ))
