"""
Segment assembler

Turns parsed segments into the flat list of render nodes handed to the
presentation layer, keeping line breaks exactly where the author put them.

Spoilers are rendered inline, between markup blocks, so the newlines around
a spoiler cannot be left to the markup renderer: a text run's leading
newlines are emitted as LineBreak nodes right away, its trailing newlines
are held back as pending breaks and only emitted if something follows.
"""

import re
from typing import List, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.segments import (
    Segment,
    TextSegment,
    TagSegment,
    SpoilerSegment,
    RawMarkupSegment,
    LineBreakState,
)
from ..models.render import (
    RenderNode,
    TagChip,
    MarkupBlock,
    RawBlock,
    SpoilerBlock,
    LineBreak,
    Separator,
)
from .markup import MarkupRenderer
from .normalizer import markup_normalize
from .segmenter import content_parse, rawMarkup_split, spoilers_split
from .log import LOG

LEADING_BREAKS_PATTERN = re.compile(r'^[ \t]*\n+')
TRAILING_BREAKS_PATTERN = re.compile(r'\n+[ \t]*\Z')


def breaks_strip(text: str) -> Tuple[int, str, int]:
    """
    Cut the leading and trailing newline runs off a text run

    Spaces and tabs on the outer side of a run belong to it.

    Returns:
        (leading newline count, inner text, trailing newline count)

    Example:
        >>> breaks_strip("\\n\\nword\\n ")
        (2, 'word', 1)
    """
    leading = LEADING_BREAKS_PATTERN.match(text)
    leading_breaks = leading.group(0).count('\n') if leading else 0
    inner = text[leading.end():] if leading else text

    trailing = TRAILING_BREAKS_PATTERN.search(inner)
    trailing_breaks = trailing.group(0).count('\n') if trailing else 0
    if trailing:
        inner = inner[:trailing.start()]

    return leading_breaks, inner, trailing_breaks


class Assembler:
    """
    Segments -> render nodes

    Attributes:
        active_tag: Currently selected tag name, or None
        renderer: Markup renderer producing document trees
    """

    def __init__(
        self,
        active_tag: Optional[str] = None,
        renderer: Optional[MarkupRenderer] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.active_tag = active_tag
        self.settings = settings or appsettings
        self.renderer = renderer or MarkupRenderer(settings=self.settings)

    def assemble(self, parts: List[Segment]) -> List[RenderNode]:
        """
        Assemble the output of content_parse()

        Args:
            parts: Top-level TagSegment / TextSegment list

        Returns:
            Ordered render nodes
        """
        nodes: List[RenderNode] = []
        for part in parts:
            if isinstance(part, TagSegment):
                nodes.append(self.tag_assemble(part))
                continue
            if isinstance(part, TextSegment):
                for child in part.children or rawMarkup_split(part.content, self.settings):
                    if isinstance(child, RawMarkupSegment):
                        nodes.append(RawBlock(child.value))
                    elif isinstance(child, TextSegment):
                        nodes.extend(self.run_assemble(child))

        LOG(f"Assembled {len(nodes)} render nodes from {len(parts)} parts", level=2)
        return nodes

    def tag_assemble(self, tag: TagSegment) -> TagChip:
        return TagChip(
            tag_name=tag.tag_name,
            content=tag.content,
            parent=tag.parent,
            child=tag.child,
            active=tag.tag_name == self.active_tag,
        )

    def markup_block(self, text: str) -> Optional[MarkupBlock]:
        """Normalize and parse a text run; None for blank runs (nothing to show)"""
        if not text.strip():
            return None
        source = markup_normalize(text)
        return MarkupBlock(source=source, document=self.renderer.parse(source))

    def run_assemble(self, run: TextSegment) -> List[RenderNode]:
        """
        Assemble one text run that holds no raw markup

        A run without spoilers becomes a single markup block. A run with
        spoilers is walked sub-segment by sub-segment with a LineBreakState:

        - before a spoiler, pending breaks are flushed
        - before text, pending breaks are flushed; a text right after a
          spoiler that does not start on a new line gets a Separator
        - a text's leading newlines become LineBreaks immediately, its
          trailing newlines become the new pending breaks (dropped if
          nothing follows)
        """
        segments = run.children or spoilers_split(run.content)

        if len(segments) == 1 and isinstance(segments[0], TextSegment):
            block = self.markup_block(segments[0].content)
            return [block] if block else []

        nodes: List[RenderNode] = []
        state = LineBreakState()

        for segment in segments:
            if isinstance(segment, SpoilerSegment):
                nodes.extend(self.breaks_flush(state))
                nodes.append(SpoilerBlock(
                    text=segment.value,
                    style_type=segment.style_type,
                    color=segment.color,
                ))
                state.last_was_spoiler = True
                continue

            nodes.extend(self.breaks_flush(state))
            leading_breaks, inner, trailing_breaks = breaks_strip(segment.content)
            if leading_breaks:
                nodes.extend(LineBreak() for _ in range(leading_breaks))
            elif state.last_was_spoiler:
                nodes.append(Separator())

            block = self.markup_block(inner)
            if block:
                nodes.append(block)

            LOG(
                f"Text run: {leading_breaks} leading, {trailing_breaks} deferred breaks",
                level=3,
            )
            state.pending_breaks = trailing_breaks
            state.last_was_spoiler = False

        return nodes

    def breaks_flush(self, state: LineBreakState) -> List[RenderNode]:
        """Emit and clear the pending breaks"""
        breaks: List[RenderNode] = [LineBreak() for _ in range(state.pending_breaks)]
        state.pending_breaks = 0
        return breaks


def render(
    content: str,
    active_tag: Optional[str] = None,
    renderer: Optional[MarkupRenderer] = None,
    settings: Optional[AppSettings] = None,
) -> List[RenderNode]:
    """
    Full pipeline: post content -> render nodes

    Args:
        content: Raw post content
        active_tag: Currently selected tag name, or None
        renderer: Markup renderer (default: markdown-it with emoji transform)
        settings: Configuration (defaults to appsettings)

    Returns:
        Ordered render nodes
    """
    parts = content_parse(content, settings)
    return Assembler(active_tag=active_tag, renderer=renderer, settings=settings).assemble(parts)
