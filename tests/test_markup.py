"""
Markup renderer tests

Tests conversion of markdown-it-py syntax trees into document trees and
the transform hook.
"""

from postdown.lib.markup import MarkupRenderer
from postdown.lib.emoji import EmojiResolver
from postdown.models.document import DocNode


def renderer(**kwargs):
    resolver = EmojiResolver(categories=["smileys"])
    return MarkupRenderer(resolver=resolver, **kwargs)


class TestDocumentTree:
    """Test the converted tree shape"""

    def test_paragraph_text(self):
        """A line of text is a root with one paragraph"""
        root = renderer().parse("hello world")
        assert root.type == 'root'
        assert root.children == (
            DocNode('paragraph', children=(DocNode('text', value="hello world"),)),
        )

    def test_heading_depth(self):
        """Headings carry their level"""
        root = renderer().parse("## Title")
        heading = root.children[0]
        assert heading.type == 'heading'
        assert heading.attr('depth') == 2
        assert heading.text() == "Title"

    def test_hard_break(self):
        """Two trailing spaces give a break node"""
        root = renderer().parse("a  \nb")
        types = [node.type for node in root.children[0].children]
        assert types == ['text', 'break', 'text']

    def test_soft_break_is_newline_text(self):
        """A bare newline stays as newline text"""
        root = renderer().parse("a\nb")
        assert root.children[0].text() == "a\nb"

    def test_emphasis_and_strong(self):
        """Inline formatting maps to emphasis / strong"""
        root = renderer().parse("*a* **b**")
        types = [node.type for node in root.children[0].children]
        assert types == ['emphasis', 'text', 'strong']

    def test_lists(self):
        """Bullet and ordered lists with start number"""
        bullet = renderer().parse("- x\n- y").children[0]
        assert bullet.type == 'list'
        assert bullet.attr('ordered') is False
        assert [item.type for item in bullet.children] == ['listItem', 'listItem']

        ordered = renderer().parse("3. a\n4. b").children[0]
        assert ordered.attr('ordered') is True
        assert ordered.attr('start') == 3

    def test_fenced_code(self):
        """Fenced code keeps its language and literal content"""
        code = renderer().parse("```python\nprint(1)\n```").children[0]
        assert code.type == 'code'
        assert code.attr('lang') == "python"
        assert code.value == "print(1)\n"

    def test_inline_code_and_link(self):
        """Inline code and links are converted with their payloads"""
        paragraph = renderer().parse("`x` [site](https://example.org \"T\")").children[0]
        code, _, link = paragraph.children
        assert code == DocNode('inlineCode', value="x")
        assert link.type == 'link'
        assert link.attr('url') == "https://example.org"
        assert link.attr('title') == "T"
        assert link.text() == "site"

    def test_image(self):
        """Images carry locator and alt text"""
        image = renderer().parse("![a cat](/cat.png)").children[0].children[0]
        assert image.type == 'image'
        assert image.attr('url') == "/cat.png"
        assert image.attr('alt') == "a cat"

    def test_inline_html_is_text(self):
        """Raw HTML in ordinary text is not passed through"""
        root = renderer().parse("<b>x</b>")
        assert not any(node.type == 'html' for node in root.walk())
        assert root.text() == "<b>x</b>"


class TestTransforms:
    """Test the transform hook"""

    def test_default_emoji_transform(self):
        """Shortcodes are replaced by default"""
        paragraph = renderer().parse("great :smileys_grin: job").children[0]
        assert [node.type for node in paragraph.children] == ['text', 'image', 'text']
        assert paragraph.children[1].attr('url') == "/emoji/smileys/grin.png"

    def test_shortcode_in_inline_code(self):
        """Shortcodes in inline code stay literal"""
        paragraph = renderer().parse("`:smileys_grin:`").children[0]
        assert paragraph.children == (DocNode('inlineCode', value=":smileys_grin:"),)

    def test_custom_transforms(self):
        """Explicit transforms replace the default and run in order"""
        calls = []

        def first(tree):
            calls.append('first')
            return tree

        def second(tree):
            calls.append('second')
            return tree.children_replace(())

        root = MarkupRenderer(transforms=[first, second]).parse("text :smileys_grin:")
        assert calls == ['first', 'second']
        assert root.children == ()

    def test_no_transforms(self):
        """An empty transform list leaves shortcodes as text"""
        root = MarkupRenderer(transforms=[]).parse(":smileys_grin:")
        assert root.text() == ":smileys_grin:"
