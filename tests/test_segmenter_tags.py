"""
Tag segmenter tests

Tests hashtag extraction: positions where a '#' starts a tag, tag
characters, two-level tags and the full content_parse() top level.
"""

import pytest

from postdown.lib.segmenter import tags_split, content_parse, segments_restore
from postdown.models.segments import TextSegment, TagSegment


class TestTagSplit:
    """Test tags_split on plain strings"""

    def test_empty_string(self):
        """Empty input gives no segments"""
        assert tags_split("") == []

    def test_no_tags(self):
        """Text without '#' is one text segment"""
        assert tags_split("just words") == [TextSegment("just words")]

    def test_tag_in_the_middle(self):
        """Whitespace before a tag becomes its own text segment"""
        parts = tags_split("hello #world/foo end")
        assert parts == [
            TextSegment("hello"),
            TextSegment(" "),
            TagSegment(content="#world/foo", tag_name="world/foo"),
            TextSegment(" end"),
        ]

    def test_tag_at_start(self):
        """A tag at position 0 needs no preceding whitespace"""
        parts = tags_split("#news today")
        assert parts == [
            TagSegment(content="#news", tag_name="news"),
            TextSegment(" today"),
        ]

    def test_tag_at_end(self):
        """A trailing tag leaves no trailing text segment"""
        parts = tags_split("read #later")
        assert isinstance(parts[-1], TagSegment)
        assert parts[-1].tag_name == "later"

    def test_hash_glued_to_word_is_text(self):
        """'#' directly after a word character is literal"""
        assert tags_split("issue#42") == [TextSegment("issue#42")]

    def test_newline_before_tag(self):
        """A newline counts as whitespace"""
        parts = tags_split("line\n#tag")
        assert parts == [
            TextSegment("line"),
            TextSegment("\n"),
            TagSegment(content="#tag", tag_name="tag"),
        ]

    def test_han_characters(self):
        """Han ideographs are tag characters"""
        parts = tags_split("去 #旅行/日本")
        assert parts[-1] == TagSegment(content="#旅行/日本", tag_name="旅行/日本")

    def test_tag_stops_at_punctuation(self):
        """Punctuation ends the tag name"""
        parts = tags_split("#done! yes")
        assert parts[0] == TagSegment(content="#done", tag_name="done")
        assert parts[1] == TextSegment("! yes")

    def test_lone_hash_is_text(self):
        """'#' followed by whitespace is not a tag"""
        assert tags_split("# heading") == [TextSegment("# heading")]

    def test_adjacent_tags(self):
        """'#a#b': only the first tag is extracted, the rest stays text"""
        parts = tags_split("#a#b")
        assert parts == [
            TagSegment(content="#a", tag_name="a"),
            TextSegment("#b"),
        ]

    def test_adjacent_tags_before_newline(self):
        """The leftover '#b' keeps the following line in its text run"""
        parts = tags_split("#a#b\nmore")
        assert parts == [
            TagSegment(content="#a", tag_name="a"),
            TextSegment("#b\nmore"),
        ]

    def test_consecutive_tags_with_spaces(self):
        """Each space-separated tag is extracted"""
        parts = tags_split("#a #b")
        tags = [p.tag_name for p in parts if isinstance(p, TagSegment)]
        assert tags == ["a", "b"]


class TestTagLevels:
    """Test two-level tag properties"""

    def test_single_level(self):
        """Plain tag has no child"""
        tag = TagSegment(content="#news", tag_name="news")
        assert not tag.is_nested
        assert tag.parent == "news"
        assert tag.child is None

    def test_two_levels(self):
        """parent/child tag splits into both levels"""
        tag = TagSegment(content="#travel/japan", tag_name="travel/japan")
        assert tag.is_nested
        assert tag.levels == ("travel", "japan")

    def test_deeper_levels_are_dropped(self):
        """Only the first two levels are kept"""
        tag = TagSegment(content="#a/b/c", tag_name="a/b/c")
        assert tag.levels == ("a", "b")


class TestContentParseTopLevel:
    """Test the top level of content_parse()"""

    def test_empty_content(self):
        """Empty post parses to an empty list"""
        assert content_parse("") == []

    def test_text_segments_carry_children(self):
        """Top-level text segments hold their finer decomposition"""
        parts = content_parse("hello #world end")
        assert [type(p).__name__ for p in parts] == [
            "TextSegment", "TextSegment", "TagSegment", "TextSegment",
        ]
        assert parts[0].children == [TextSegment("hello", children=[TextSegment("hello")])]

    def test_tag_inside_spoiler_is_extracted_first(self):
        """Tags are split before spoilers, so a tag inside a spoiler breaks it apart"""
        parts = content_parse("{% spoiler see #secret %}")
        tags = [p for p in parts if isinstance(p, TagSegment)]
        assert [t.tag_name for t in tags] == ["secret"]

    @pytest.mark.parametrize("source", [
        "",
        "plain",
        "hello #world/foo end",
        "#a#b and #c",
        "  \n#lead\n\ntrail  ",
        "issue#42 #旅行",
    ])
    def test_lossless(self, source):
        """Restoring the segments reproduces the source"""
        assert segments_restore(content_parse(source)) == source
