"""
Lightweight markup renderer

Parses normalized markup with markdown-it-py and converts the resulting
SyntaxTreeNode into an immutable DocNode tree, then runs the registered
tree transforms (emoji shortcodes by default) over it.

Raw HTML inside ordinary text is disabled: only fenced raw markup blocks
pass markup through to the output.
"""

from typing import Callable, List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from ..config import appsettings, AppSettings
from ..models.document import DocNode
from .emoji import EmojiResolver, emojiTransform_make
from .log import LOG

TreeTransform = Callable[[DocNode], DocNode]

# markdown-it node type -> document node type
NODE_TYPES = {
    'root': 'root',
    'paragraph': 'paragraph',
    'heading': 'heading',
    'bullet_list': 'list',
    'ordered_list': 'list',
    'list_item': 'listItem',
    'blockquote': 'blockquote',
    'em': 'emphasis',
    'strong': 'strong',
    's': 'delete',
    'link': 'link',
    'image': 'image',
    'code_inline': 'inlineCode',
    'fence': 'code',
    'code_block': 'code',
    'text': 'text',
    'hardbreak': 'break',
    'html_block': 'html',
    'html_inline': 'html',
    'hr': 'thematicBreak',
}


def syntaxTree_convert(node: SyntaxTreeNode) -> List[DocNode]:
    """
    Convert a markdown-it syntax tree node into document nodes

    Returns a list because 'inline' containers are dissolved into their
    parent and soft breaks become plain newline text.
    """
    if node.type == 'inline':
        return [converted for child in node.children for converted in syntaxTree_convert(child)]

    if node.type == 'softbreak':
        return [DocNode('text', value='\n')]

    doc_type = NODE_TYPES.get(node.type, node.type)

    if doc_type in ('text', 'inlineCode', 'html'):
        return [DocNode(doc_type, value=node.content)]

    if doc_type == 'code':
        return [DocNode('code', value=node.content, attrs={'lang': (node.info or '').strip() or None})]

    if doc_type == 'image':
        return [DocNode('image', attrs={
            'url': node.attrs.get('src', ''),
            'alt': node.content,
            'title': node.attrs.get('title'),
        })]

    attrs = {}
    if doc_type == 'heading':
        attrs['depth'] = int(node.tag[1:])
    elif doc_type == 'list':
        attrs['ordered'] = node.type == 'ordered_list'
        if attrs['ordered']:
            attrs['start'] = int(node.attrs.get('start', 1))
    elif doc_type == 'link':
        attrs['url'] = node.attrs.get('href', '')
        attrs['title'] = node.attrs.get('title')

    children = tuple(
        converted for child in node.children for converted in syntaxTree_convert(child)
    )
    return [DocNode(doc_type, children=children, attrs=attrs)]


class MarkupRenderer:
    """
    Markup string -> transformed document tree

    Attributes:
        md: markdown-it-py parser
        transforms: Tree transforms applied in order after parsing
    """

    def __init__(
        self,
        transforms: Optional[Sequence[TreeTransform]] = None,
        resolver: Optional[EmojiResolver] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Args:
            transforms: Tree transforms; defaults to the emoji shortcode
                        transform bound to resolver
            resolver: Emoji resolver for the default transform (built from
                      settings if omitted)
            settings: Configuration (defaults to appsettings)
        """
        settings = settings or appsettings
        self.md = MarkdownIt(settings.markdown_preset, {'html': False})
        if transforms is None:
            resolver = resolver or EmojiResolver.from_settings(settings)
            transforms = [emojiTransform_make(resolver)]
        self.transforms: List[TreeTransform] = list(transforms)

    def parse(self, markup: str) -> DocNode:
        """
        Parse markup into a document tree and apply the transforms

        Args:
            markup: Normalized markup text

        Returns:
            Root DocNode
        """
        tokens = self.md.parse(markup)
        root = syntaxTree_convert(SyntaxTreeNode(tokens))[0]
        for transform in self.transforms:
            root = transform(root)
        LOG(f"Parsed markup into {len(root.children)} blocks", level=3)
        return root
