"""
Custom Pygments lexer for post syntax highlighting

Highlights post source (e.g. a fenced ```post code block inside a post
that explains the syntax).

Token types:
- Comment.Preproc: Raw markup fences
- Keyword: Spoiler delimiters ({% spoiler ... %})
- Name.Attribute / Name.Constant: Spoiler options (style:box, color:red)
- Name.Tag: Hashtags (#name, #parent/child)
- Name.Entity: Emoji shortcodes (:smileys_grin:)
- Generic.Heading / Generic.Strong / Generic.Emph: Lightweight markup
"""

from pygments.lexer import RegexLexer, bygroups, default
from pygments.token import (
    Text,
    Whitespace,
    Punctuation,
    Name,
    String,
    Keyword,
    Comment,
    Generic,
)


class PostLexer(RegexLexer):
    """
    Lexer for post content markup

    Example:
        #news {% spoiler style:box the end %} :smileys_grin:

    Tokens:
        #news → Name.Tag
        {% spoiler → Keyword
        style → Name.Attribute, : → Punctuation, box → Name.Constant
        the end → String
        %} → Keyword
        :smileys_grin: → Name.Entity
    """

    name = 'Post'
    aliases = ['post', 'postdown']
    filenames = ['*.post']

    tokens = {
        'root': [
            # Raw markup fence: everything up to the closing fence
            (r'(```__html)([ \t]*\n)((?:.|\n)*?)(```)',
             bygroups(Comment.Preproc, Whitespace, String.Other, Comment.Preproc)),

            # Spoiler block opening
            (r'\{%\s*spoiler\b', Keyword, 'spoiler'),

            # Headings at line start
            (r'^#{1,6}[ \t].*$', Generic.Heading),

            # Hashtags at start or after whitespace
            (r'(?<!\S)#[\u4e00-\u9fa5a-zA-Z0-9_/]+', Name.Tag),

            # Emoji shortcodes
            (r':[a-zA-Z0-9]+_[a-zA-Z0-9_\-]+:', Name.Entity),

            # Emphasis
            (r'\*\*[^*\n]+\*\*', Generic.Strong),
            (r'\*[^*\n]+\*', Generic.Emph),

            (r'\s+', Whitespace),
            (r'[^\s#:{*`]+', Text),
            (r'.', Text),
        ],

        'spoiler': [
            (r'%\}', Keyword, '#pop'),
            (r'\s+', Whitespace),
            (r'(?i)(style|color)(:)([^\s%]+)',
             bygroups(Name.Attribute, Punctuation, Name.Constant)),
            # First non-option token: the rest of the block is spoiler text
            (r'[^\s%]', String, 'spoiler-text'),
            (r'%', String),
        ],

        'spoiler-text': [
            (r'[^%]+', String),
            (r'%(?!\})', String),
            default('#pop'),
        ],
    }


def get_lexer() -> PostLexer:
    """
    Get the PostLexer instance

    Returns:
        PostLexer instance ready for use with Pygments
    """
    return PostLexer()
