"""
Document tree model

Immutable mdast-style tree built from the markdown-it-py syntax tree.
Tree transforms (emoji shortcodes) return new trees instead of mutating.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Tuple


@dataclass(frozen=True)
class DocNode:
    """
    Node of a parsed lightweight markup document

    Attributes:
        type: Node type (root, paragraph, heading, list, listItem, blockquote,
              emphasis, strong, delete, link, image, inlineCode, code, text,
              break, html, thematicBreak)
        value: Literal payload of leaf nodes (text, inlineCode, code, html)
        children: Child nodes, in document order
        attrs: Type-specific attributes (depth, ordered, start, url, alt,
               title, lang)

    Example:
        DocNode("paragraph", children=(DocNode("text", value="Hi"),))
    """
    type: str
    value: str = ""
    children: Tuple['DocNode', ...] = ()
    attrs: Dict[str, Any] = field(default_factory=dict, compare=True, hash=False)

    def attr(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    def children_replace(self, children: Tuple['DocNode', ...]) -> 'DocNode':
        """Return a copy of this node with new children"""
        return replace(self, children=tuple(children))

    def walk(self) -> Iterator['DocNode']:
        """Depth-first pre-order iteration over this node and its descendants"""
        yield self
        for child in self.children:
            yield from child.walk()

    def leaves(self) -> Tuple['DocNode', ...]:
        """All descendants without children, in document order"""
        return tuple(node for node in self.walk() if not node.children and node is not self)

    def text(self) -> str:
        """Concatenated text of all text leaves"""
        return ''.join(node.value for node in self.walk() if node.type == 'text')
