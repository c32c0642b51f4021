"""
Presentation override specification models

Defines the structure and categories of node-type overrides used by the
Compiler to turn document nodes into HTML.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List


class NodeCategory(Enum):
    """
    Categories of document nodes

    Used for organization and for listing overrides by kind.
    """
    BLOCK = "block"      # paragraph, heading, list, listItem, blockquote
    INLINE = "inline"    # strong, emphasis, delete, link, break
    LEAF = "leaf"        # text, inlineCode, code, html
    MEDIA = "media"      # image (emoji aware)


@dataclass
class OverrideSpec:
    """
    Presentation override for one document node type

    Attributes:
        node_type: Document node type handled (e.g. "heading", "image")
        category: Category for organization
        description: Human-readable description
        handler: Compilation function (node, content, compiler) -> str where
                 content is the already compiled HTML of the node's children
        aliases: Additional node types handled by the same function
    """
    node_type: str
    category: NodeCategory
    description: str
    handler: Callable
    aliases: List[str] = field(default_factory=list)
