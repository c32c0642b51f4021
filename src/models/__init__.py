"""
Models package for postdown

Data structures for the segmentation, assembly and compilation pipeline.
"""

from .state import ProgramState, pipeline
from .segments import (
    Segment,
    TextSegment,
    TagSegment,
    SpoilerSegment,
    RawMarkupSegment,
    SpoilerStyle,
    EmojiToken,
    LineBreakState,
)
from .document import DocNode
from .render import (
    RenderNode,
    TagChip,
    MarkupBlock,
    RawBlock,
    SpoilerBlock,
    LineBreak,
    Separator,
)
from .overrides import OverrideSpec, NodeCategory

__all__ = [
    "ProgramState",
    "pipeline",
    "Segment",
    "TextSegment",
    "TagSegment",
    "SpoilerSegment",
    "RawMarkupSegment",
    "SpoilerStyle",
    "EmojiToken",
    "LineBreakState",
    "DocNode",
    "RenderNode",
    "TagChip",
    "MarkupBlock",
    "RawBlock",
    "SpoilerBlock",
    "LineBreak",
    "Separator",
    "OverrideSpec",
    "NodeCategory",
]
