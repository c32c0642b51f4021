"""
Segment data models

Type-safe structures produced by the segmentation stages. A parsed post is
an ordered list of segments; text segments may carry their own finer
decomposition in ``children`` (raw blocks / spoilers found inside them).
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


class SpoilerStyle(Enum):
    """
    Visual style of a spoiler block

    BOX masks the text behind a solid box, BLUR blurs it until revealed.
    """
    BOX = "box"
    BLUR = "blur"


@dataclass
class TextSegment:
    """
    Literal text run

    Attributes:
        content: The literal text, exactly as it appears in the source
        children: Finer decomposition of ``content`` filled in by
                  ``content_parse()``. A top-level text segment holds
                  RawMarkupSegment / TextSegment children; each of those
                  text children holds SpoilerSegment / TextSegment children.
                  Empty for leaf runs.

    Example:
        TextSegment(content="hello ")
    """
    content: str
    children: List['Segment'] = field(default_factory=list)


@dataclass
class TagSegment:
    """
    Inline hashtag

    Attributes:
        content: Tag as written, including the leading '#' (e.g. "#world/foo")
        tag_name: Tag without the '#' (e.g. "world/foo")

    A tag_name containing '/' is a two-level tag (parent/child).
    """
    content: str
    tag_name: str

    @property
    def is_nested(self) -> bool:
        """True for two-level tags like 'parent/child'"""
        return '/' in self.tag_name

    @property
    def levels(self) -> Tuple[str, Optional[str]]:
        """
        Split tag_name into (parent, child).

        Only the first two levels are significant; deeper levels are
        dropped, so "a/b/c" gives ("a", "b").
        """
        if not self.is_nested:
            return self.tag_name, None
        parent, child = self.tag_name.split('/')[:2]
        return parent, child

    @property
    def parent(self) -> str:
        return self.levels[0]

    @property
    def child(self) -> Optional[str]:
        return self.levels[1]


@dataclass
class SpoilerSegment:
    """
    Spoiler block parsed from {% spoiler [style:box|blur] [color:X] text %}

    Attributes:
        value: Spoiler text (parameters removed)
        style_type: Box or blur (default blur)
        color: Optional color override, verbatim from the source
        source: Exact source span of the block, delimiters included
    """
    value: str
    style_type: SpoilerStyle = SpoilerStyle.BLUR
    color: Optional[str] = None
    source: str = ""


@dataclass
class RawMarkupSegment:
    """
    Fenced raw markup block, passed through to the output unparsed

    Attributes:
        value: Block content with surrounding whitespace trimmed
        source: Exact source span of the block, fences included
    """
    value: str
    source: str = ""


Segment = Union[TextSegment, TagSegment, SpoilerSegment, RawMarkupSegment]


@dataclass
class EmojiToken:
    """
    Emoji shortcode :category_name:

    Only meaningful when the category is known to the EmojiResolver;
    otherwise the shortcode is rendered as literal text.
    """
    category: str
    name: str

    @property
    def alt(self) -> str:
        """Alt text identifying the image as an emoji for the presentation layer"""
        return f"emoji:{self.category}_{self.name}"


@dataclass
class LineBreakState:
    """
    Break bookkeeping for assembling one spoiler-bearing text run

    Attributes:
        pending_breaks: Line breaks deferred from the previous text run's
                        trailing newlines
        last_was_spoiler: Whether the previous sub-segment was a spoiler
    """
    pending_breaks: int = 0
    last_was_spoiler: bool = False
