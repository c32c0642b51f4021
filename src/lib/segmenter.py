"""
Segmenter for post content

Splits a raw post string into typed segments.

The segmenter operates in three layers, each on the text left over by the
previous one:
1. Raw markup blocks (```__html ... ```) are protected behind placeholders
   so nothing inside them is ever scanned
2. Tags (#name, #parent/child) split the text into text and tag segments
3. Each text run is split around raw blocks and then around
   {% spoiler ... %} blocks

Every layer is lossless: restoring the segments with their delimiters
reproduces the source exactly.

Example:
    >>> parts = content_parse("hi #news {% spoiler style:box boo %}")
    >>> [type(p).__name__ for p in parts]
    ['TextSegment', 'TextSegment', 'TagSegment', 'TextSegment']
    >>> parts[3].children[0].children[1].style_type
    <SpoilerStyle.BOX: 'box'>
"""

import re
from typing import Dict, List, Optional, Union

from ..config import appsettings, AppSettings
from ..models.segments import (
    Segment,
    TextSegment,
    TagSegment,
    SpoilerSegment,
    SpoilerStyle,
    RawMarkupSegment,
)
from .log import LOG


# Han ideographs, ASCII letters, digits, underscore and the level separator
TAG_CHARS = r'\u4e00-\u9fa5a-zA-Z0-9_/'
TAG_PATTERN = re.compile(r'(?:^|\s)(#[' + TAG_CHARS + r']+)')
SPOILER_PATTERN = re.compile(r'\{%\s*spoiler\b(.*?)%\}', re.DOTALL)


def tags_split(text: str) -> List[Union[TextSegment, TagSegment]]:
    """
    Split text into literal runs and hashtags

    A tag is '#' followed by tag characters, at the start of the text or
    right after whitespace. The whitespace in front of a tag becomes its
    own TextSegment. A '#' glued to a preceding word is plain text.

    Args:
        text: Text to scan

    Returns:
        Ordered TextSegment / TagSegment list covering the whole input

    Example:
        >>> tags_split("hello #world/foo end")
        [TextSegment(content='hello', children=[]),
         TextSegment(content=' ', children=[]),
         TagSegment(content='#world/foo', tag_name='world/foo'),
         TextSegment(content=' end', children=[])]
    """
    parts: List[Union[TextSegment, TagSegment]] = []
    last_index = 0

    for match in TAG_PATTERN.finditer(text):
        if match.start() > last_index:
            parts.append(TextSegment(text[last_index:match.start()]))

        whitespace = text[match.start():match.start(1)]
        if whitespace:
            parts.append(TextSegment(whitespace))

        tag = match.group(1)
        parts.append(TagSegment(content=tag, tag_name=tag[1:]))
        last_index = match.end()

    if last_index < len(text):
        parts.append(TextSegment(text[last_index:]))

    return parts


def rawMarkup_split(
    text: str, settings: Optional[AppSettings] = None
) -> List[Union[TextSegment, RawMarkupSegment]]:
    """
    Split text around fenced raw markup blocks

    A block is the open fence, optional whitespace, a newline, any content
    (lazy) and the first close fence after it. Unterminated fences stay
    literal text.

    Args:
        text: Text to scan
        settings: Fence configuration (defaults to appsettings)

    Returns:
        Ordered TextSegment / RawMarkupSegment list covering the whole input

    Example:
        >>> rawMarkup_split("a\\n```__html\\n<b>x</b>\\n```")
        [TextSegment(content='a\\n', children=[]),
         RawMarkupSegment(value='<b>x</b>', source='```__html\\n<b>x</b>\\n```')]
    """
    settings = settings or appsettings
    pattern = (
        re.escape(settings.raw_fence_open)
        + r'\s*\n(.*?)'
        + re.escape(settings.raw_fence_close)
    )

    parts: List[Union[TextSegment, RawMarkupSegment]] = []
    last_index = 0

    for match in re.finditer(pattern, text, re.DOTALL):
        if match.start() > last_index:
            parts.append(TextSegment(text[last_index:match.start()]))
        parts.append(RawMarkupSegment(value=match.group(1).strip(), source=match.group(0)))
        last_index = match.end()

    if last_index < len(text):
        parts.append(TextSegment(text[last_index:]))

    return parts


def spoilerParams_parse(inner: str, source: str = "") -> SpoilerSegment:
    """
    Parse the inside of a {% spoiler ... %} block

    Leading whitespace-separated tokens of the form style:<box|blur> and
    color:<value> are options, in any order. Option scanning stops at the
    first other token; that token and everything after it is the spoiler
    text. Keys are matched by prefix, case-insensitively, so a text word that
    starts with 'style:' or 'color:' is taken as an option.

    Text is kept verbatim when no option was given. When options were given
    the remaining tokens are joined with single spaces.

    Args:
        inner: Content between 'spoiler' and '%}'
        source: Full source span of the block, kept for restoration

    Returns:
        SpoilerSegment with style, color and text

    Example:
        >>> spoilerParams_parse(" style:box color:red secret text ")
        SpoilerSegment(value='secret text', style_type=<SpoilerStyle.BOX: 'box'>,
                       color='red', source='')
    """
    inner = inner.strip()
    style_type = SpoilerStyle.BLUR
    color: Optional[str] = None

    tokens = re.split(r'\s+', inner)
    consumed = 0
    for i, token in enumerate(tokens):
        key = token.lower()
        if key.startswith('style:'):
            style_value = token.split(':')[1].lower()
            if style_value in ('box', 'blur'):
                style_type = SpoilerStyle(style_value)
            consumed = i + 1
            continue
        if key.startswith('color:'):
            color = token[token.index(':') + 1:] or None
            consumed = i + 1
            continue
        break

    if consumed == len(tokens):
        value = ''
    elif consumed > 0:
        value = ' '.join(tokens[consumed:])
    else:
        value = inner

    return SpoilerSegment(value=value, style_type=style_type, color=color, source=source)


def spoilers_split(text: str) -> List[Union[TextSegment, SpoilerSegment]]:
    """
    Split text around {% spoiler ... %} blocks

    Matching is lazy: a block ends at the first '%}'. Nested spoilers are
    not supported. An unterminated block stays literal text.

    Args:
        text: Text run without raw markup blocks

    Returns:
        Ordered TextSegment / SpoilerSegment list covering the whole input
    """
    parts: List[Union[TextSegment, SpoilerSegment]] = []
    last_index = 0

    for match in SPOILER_PATTERN.finditer(text):
        before = text[last_index:match.start()]
        if before:
            parts.append(TextSegment(before))
        parts.append(spoilerParams_parse(match.group(1) or '', source=match.group(0)))
        last_index = match.end()

    rest = text[last_index:]
    if rest:
        parts.append(TextSegment(rest))

    return parts


def segment_markup(segment: Segment, settings: Optional[AppSettings] = None) -> str:
    """
    Source text of a single segment, delimiters included

    Uses the recorded source span when there is one, otherwise rebuilds the
    canonical syntax from the segment's fields.
    """
    settings = settings or appsettings

    if isinstance(segment, TextSegment):
        if segment.children:
            return segments_restore(segment.children, settings)
        return segment.content

    if isinstance(segment, TagSegment):
        return segment.content

    if isinstance(segment, RawMarkupSegment):
        if segment.source:
            return segment.source
        return f"{settings.raw_fence_open}\n{segment.value}\n{settings.raw_fence_close}"

    if segment.source:
        return segment.source
    options = []
    if segment.style_type is not SpoilerStyle.BLUR:
        options.append(f"style:{segment.style_type.value}")
    if segment.color:
        options.append(f"color:{segment.color}")
    inner = ' '.join(options + [segment.value]).strip()
    return f"{{% spoiler {inner} %}}"


def segments_restore(segments: List[Segment], settings: Optional[AppSettings] = None) -> str:
    """
    Rebuild the source text of a segment list

    Inverse of content_parse(): segments_restore(content_parse(s)) == s.
    Text segments with children are restored from their children so the
    nested decomposition is checked too.
    """
    return ''.join(segment_markup(segment, settings) for segment in segments)


class Segmenter:
    r"""
    Segmenter for post content

    Handles:
    - Raw markup protection (placeholders \x00RAW_N\x00)
    - Tag extraction on the protected text
    - Raw block and spoiler decomposition of every text segment
    """

    def __init__(self, source: str, settings: Optional[AppSettings] = None):
        """
        Initialize segmenter with source text

        Args:
            source: Raw post content
            settings: Configuration (defaults to appsettings)

        Attributes:
            source: Source text being segmented
            settings: Fence and placeholder configuration
            raw_blocks: Dict mapping placeholder indices to extracted raw blocks
            placeholder_prefix: Placeholder prefix that does not occur in source
        """
        self.source = source
        self.settings = settings or appsettings
        self.raw_blocks: Dict[int, RawMarkupSegment] = {}
        self.placeholder_prefix = self.settings.placeholder_prefix
        while self.placeholder_prefix in source:
            self.placeholder_prefix += '_'
        self.placeholder_pattern = re.compile(
            '('
            + re.escape(self.placeholder_prefix)
            + r'\d+'
            + re.escape(self.settings.placeholder_suffix)
            + ')'
        )

    def rawBlocks_protect(self) -> str:
        """
        Replace raw markup blocks with placeholders

        Content of a raw block must never be seen by the tag or spoiler
        scanners, so blocks are swapped out before tag scanning. The blocks
        are stored in self.raw_blocks for textSegment_build().

        Returns:
            Source with every raw block replaced by its placeholder

        Example:
            Input:  "see\\n```__html\\n<i>#no</i>\\n```"
            Output: "see\\n\\x00RAW_0\\x00"
            Stores: raw_blocks[0] = RawMarkupSegment(value="<i>#no</i>", ...)
        """
        result = []
        for piece in rawMarkup_split(self.source, self.settings):
            if isinstance(piece, RawMarkupSegment):
                index = len(self.raw_blocks)
                self.raw_blocks[index] = piece
                result.append(self.settings.placeHolder_make(index, self.placeholder_prefix))
            else:
                result.append(piece.content)
        return ''.join(result)

    def parse(self) -> List[Segment]:
        """
        Segment the source

        Returns:
            Ordered list of TagSegment and TextSegment; text segments carry
            their RawMarkupSegment / TextSegment children, and those text
            children carry their SpoilerSegment / TextSegment children.
            Empty source gives an empty list.
        """
        protected = self.rawBlocks_protect()

        parts: List[Segment] = []
        for part in tags_split(protected):
            if isinstance(part, TagSegment):
                parts.append(part)
            else:
                parts.append(self.textSegment_build(part.content))

        LOG(
            f"Segmented {len(self.source)} chars into {len(parts)} parts, "
            f"{len(self.raw_blocks)} raw blocks",
            level=3,
        )
        return parts

    def textSegment_build(self, protected: str) -> TextSegment:
        """
        Expand placeholders in a text run and decompose it

        Args:
            protected: Text segment content as produced by tags_split() on
                       the protected source

        Returns:
            TextSegment with the unprotected content and children made of
            RawMarkupSegment and spoiler-split TextSegment runs
        """
        children: List[Segment] = []
        buffer = ''

        for position, piece in enumerate(self.placeholder_pattern.split(protected)):
            if position % 2 == 0:
                buffer += piece
                continue

            index = self.settings.blockIndex_extract(piece, self.placeholder_prefix)
            block = self.raw_blocks.get(index) if index is not None else None
            if block is None:
                # not one of ours: keep literally
                buffer += piece
                continue

            if buffer:
                children.append(TextSegment(buffer, children=list(spoilers_split(buffer))))
                buffer = ''
            children.append(block)

        if buffer:
            children.append(TextSegment(buffer, children=list(spoilers_split(buffer))))

        return TextSegment(segments_restore(children, self.settings), children=children)


def content_parse(content: str, settings: Optional[AppSettings] = None) -> List[Segment]:
    """
    Segment a post

    Convenience wrapper around Segmenter(content).parse().
    """
    return Segmenter(content, settings).parse()
