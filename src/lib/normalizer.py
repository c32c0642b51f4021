"""
Markup normalizer

Prepares a text run for the lightweight markup renderer:

- every newline becomes a hard line break ("  \\n"), so single newlines in
  a post stay visible instead of being folded into one paragraph line
- '#word' left over after tag extraction is turned into a real heading
  ('# word') unless it still looks like a tag
"""

import re

from .segmenter import TAG_CHARS

HEADING_PATTERN = re.compile(r'(^|\s)#([^\s#][^\n]*)')
TAG_LIKE_PATTERN = re.compile(r'[' + TAG_CHARS + r']+')


def lineBreaks_harden(text: str) -> str:
    """Make every newline a markdown hard break"""
    return text.replace('\n', '  \n')


def heading_rewrite(match: re.Match[str]) -> str:
    """
    Rewrite one '#text' match into a heading marker

    The remainder of the line is tested as a whole: if it is made only of
    tag characters it is a tag the tag scanner did not pick up (e.g. glued
    to a previous tag, as in '#a#b') and is left alone. Hardened line
    breaks pad the line with trailing spaces, so this only holds on the
    last line of a run.
    """
    whitespace, remainder = match.group(1), match.group(2)
    if TAG_LIKE_PATTERN.fullmatch(remainder):
        return match.group(0)
    return f"{whitespace}# {remainder}"


def markup_normalize(text: str) -> str:
    """
    Normalize a text run before markup parsing

    Args:
        text: Literal text run (no tags, raw blocks or spoilers)

    Returns:
        Markup string with hard line breaks and disambiguated headings

    Example:
        >>> markup_normalize("intro\\n#!Important")
        'intro  \\n# !Important'
        >>> markup_normalize("#b")  # left over from '#a#b'
        '#b'
    """
    return HEADING_PATTERN.sub(heading_rewrite, lineBreaks_harden(text))
