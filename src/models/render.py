"""
Render node models

Output of the Assembler: a flat, ordered list of nodes that the Compiler
(or any other presentation layer) turns into visible output.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .document import DocNode
from .segments import SpoilerStyle


@dataclass
class TagChip:
    """
    Interactive tag chip

    Attributes:
        tag_name: Tag without '#', used as the click payload
        content: Tag as written (with '#'), used as the chip title
        parent: First tag level
        child: Second tag level, or None for single-level tags
        active: True when tag_name equals the currently active tag
    """
    tag_name: str
    content: str
    parent: str
    child: Optional[str] = None
    active: bool = False

    @property
    def is_nested(self) -> bool:
        return self.child is not None


@dataclass
class MarkupBlock:
    """
    Lightweight markup rendered as one block

    Attributes:
        source: Normalized markup text handed to the markup renderer
        document: Parsed (and transformed) document tree
    """
    source: str
    document: DocNode


@dataclass
class RawBlock:
    """Raw markup passed through verbatim"""
    value: str


@dataclass
class SpoilerBlock:
    """Masked text revealed on interaction"""
    text: str
    style_type: SpoilerStyle = SpoilerStyle.BLUR
    color: Optional[str] = None


@dataclass
class LineBreak:
    """Explicit line break between assembled nodes"""


@dataclass
class Separator:
    """Inline separator keeping a spoiler from running into the next word"""
    text: str = " "


RenderNode = Union[TagChip, MarkupBlock, RawBlock, SpoilerBlock, LineBreak, Separator]
