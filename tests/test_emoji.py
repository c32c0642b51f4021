"""
Emoji shortcode tests

Tests the resolver (settings and YAML catalog), shortcode expansion, the
document tree transform and the image format fallback.
"""

import pytest

from postdown.config import AppSettings
from postdown.lib.emoji import (
    EmojiResolver,
    EmojiFallback,
    EmojiCatalogError,
    shortcodes_expand,
    emojiShortcodes_transform,
    emojiAlt_parse,
    url_format,
)
from postdown.models.document import DocNode
from postdown.models.segments import EmojiToken


@pytest.fixture
def resolver():
    return EmojiResolver(
        categories=["smileys", "animals"],
        base_url="/emoji",
        default_format="png",
        fallback_formats=["png", "webp", "gif"],
    )


def grin_image(fmt="png"):
    return DocNode('image', attrs={
        'url': f"/emoji/smileys/grin.{fmt}",
        'alt': "emoji:smileys_grin",
        'title': None,
    })


class TestResolver:
    """Test EmojiResolver lookups and locators"""

    def test_known_category(self, resolver):
        """Configured categories are known, case-insensitively"""
        assert resolver.category_has("smileys")
        assert resolver.category_has("Animals")
        assert not resolver.category_has("weather")

    def test_url_build(self, resolver):
        """Locators are <base>/<category>/<name>.<format>"""
        assert resolver.url_build("animals", "cat") == "/emoji/animals/cat.png"
        assert resolver.url_build("animals", "cat", "gif") == "/emoji/animals/cat.gif"

    def test_base_url_trailing_slash(self):
        """A trailing slash on the base locator is not doubled"""
        resolver = EmojiResolver(categories=["a"], base_url="/static/emoji/")
        assert resolver.url_build("a", "b") == "/static/emoji/a/b.png"

    def test_token_resolve(self, resolver):
        """Known tokens resolve to image nodes, unknown to None"""
        assert resolver.token_resolve(EmojiToken("smileys", "grin")) == grin_image()
        assert resolver.token_resolve(EmojiToken("weather", "sun")) is None

    def test_from_settings(self):
        """Settings provide categories, locator base and formats"""
        settings = AppSettings(emoji_base_url="/e", emoji_categories=["food"])
        resolver = EmojiResolver.from_settings(settings)
        assert resolver.category_has("food")
        assert not resolver.category_has("smileys")
        assert resolver.url_build("food", "pizza") == "/e/food/pizza.png"


class TestCatalog:
    """Test loading a resolver from a YAML catalog"""

    def test_full_catalog(self, tmp_path):
        """All catalog keys are honoured"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text(
            "base_url: https://cdn.example.org/emoji\n"
            "default_format: webp\n"
            "fallback_formats: [webp, png]\n"
            "categories:\n"
            "  - custom\n"
        )
        resolver = EmojiResolver.from_yaml(catalog)
        assert resolver.category_has("custom")
        assert resolver.url_build("custom", "x") == "https://cdn.example.org/emoji/custom/x.webp"
        assert resolver.fallback_formats == ["webp", "png"]

    def test_partial_catalog_uses_settings(self, tmp_path):
        """Missing keys fall back to the settings values"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("categories: [custom]\n")
        settings = AppSettings(emoji_base_url="/e")
        resolver = EmojiResolver.from_yaml(catalog, settings)
        assert resolver.url_build("custom", "x") == "/e/custom/x.png"

    def test_empty_catalog(self, tmp_path):
        """An empty file behaves like the settings"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("")
        resolver = EmojiResolver.from_yaml(catalog)
        assert resolver.category_has("smileys")

    def test_from_settings_uses_catalog(self, tmp_path):
        """emoji_catalog in settings makes from_settings read the file"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("categories: [only]\n")
        resolver = EmojiResolver.from_settings(AppSettings(emoji_catalog=str(catalog)))
        assert resolver.category_has("only")
        assert not resolver.category_has("smileys")

    def test_missing_file(self, tmp_path):
        """A missing catalog raises EmojiCatalogError"""
        with pytest.raises(EmojiCatalogError, match="not found"):
            EmojiResolver.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Unparsable YAML raises EmojiCatalogError"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("categories: [unclosed\n")
        with pytest.raises(EmojiCatalogError, match="Failed to parse"):
            EmojiResolver.from_yaml(catalog)

    def test_top_level_not_mapping(self, tmp_path):
        """A list at top level is rejected"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("- smileys\n")
        with pytest.raises(EmojiCatalogError, match="mapping"):
            EmojiResolver.from_yaml(catalog)

    def test_bad_categories(self, tmp_path):
        """categories must be a list of names"""
        catalog = tmp_path / "emoji.yaml"
        catalog.write_text("categories: smileys\n")
        with pytest.raises(EmojiCatalogError, match="categories"):
            EmojiResolver.from_yaml(catalog)


class TestShortcodesExpand:
    """Test shortcode expansion of a single text value"""

    def test_known_shortcode(self, resolver):
        """Text around the image is kept as sibling text nodes"""
        nodes = shortcodes_expand("great :smileys_grin: job", resolver)
        assert nodes == (
            DocNode('text', value="great "),
            grin_image(),
            DocNode('text', value=" job"),
        )

    def test_unknown_category_stays_text(self, resolver):
        """Unknown shortcodes stay inside the surrounding text"""
        nodes = shortcodes_expand("a :weather_sun: b", resolver)
        assert nodes == (DocNode('text', value="a :weather_sun: b"),)

    def test_case_insensitive(self, resolver):
        """Category and name are lowercased"""
        nodes = shortcodes_expand(":Smileys_Grin:", resolver)
        assert nodes == (grin_image(),)

    def test_name_with_underscores_and_dashes(self, resolver):
        """The name may contain '_' and '-'; the category may not"""
        (image,) = shortcodes_expand(":animals_black_cat-2:", resolver)
        assert image.attr('url') == "/emoji/animals/black_cat-2.png"
        assert image.attr('alt') == "emoji:animals_black_cat-2"

    def test_adjacent_shortcodes(self, resolver):
        """Back to back shortcodes give back to back images"""
        nodes = shortcodes_expand(":smileys_grin::animals_cat:", resolver)
        assert [n.type for n in nodes] == ['image', 'image']

    def test_no_shortcode(self, resolver):
        """Plain text is one text node"""
        assert shortcodes_expand("no emoji: here", resolver) == (DocNode('text', value="no emoji: here"),)

    def test_empty_text(self, resolver):
        """Empty text gives no nodes"""
        assert shortcodes_expand("", resolver) == ()


class TestTreeTransform:
    """Test emojiShortcodes_transform on document trees"""

    def test_paragraph(self, resolver):
        """Shortcodes in paragraph text become images"""
        tree = DocNode('root', children=(
            DocNode('paragraph', children=(DocNode('text', value="hi :smileys_grin:"),)),
        ))
        result = emojiShortcodes_transform(tree, resolver)
        paragraph = result.children[0]
        assert paragraph.children == (DocNode('text', value="hi "), grin_image())

    def test_input_tree_untouched(self, resolver):
        """The transform builds a new tree"""
        text = DocNode('text', value=":smileys_grin:")
        tree = DocNode('root', children=(DocNode('paragraph', children=(text,)),))
        emojiShortcodes_transform(tree, resolver)
        assert tree.children[0].children == (text,)

    def test_nested_emphasis(self, resolver):
        """Shortcodes inside inline formatting are found"""
        tree = DocNode('root', children=(
            DocNode('paragraph', children=(
                DocNode('strong', children=(DocNode('text', value=":smileys_grin:"),)),
            )),
        ))
        result = emojiShortcodes_transform(tree, resolver)
        assert result.children[0].children[0].children == (grin_image(),)

    @pytest.mark.parametrize("skipped", [
        DocNode('inlineCode', value=":smileys_grin:"),
        DocNode('code', value=":smileys_grin:"),
        DocNode('link', children=(DocNode('text', value=":smileys_grin:"),), attrs={'url': "/x"}),
    ])
    def test_skipped_nodes(self, resolver, skipped):
        """Code and links keep shortcodes literal, whole subtree included"""
        tree = DocNode('root', children=(DocNode('paragraph', children=(skipped,)),))
        result = emojiShortcodes_transform(tree, resolver)
        assert result == tree


class TestFallback:
    """Test image format fallback"""

    def test_walks_formats_in_order(self, resolver):
        """Each failure moves to the next format, then exhausts"""
        fallback = EmojiFallback(resolver, "smileys", "grin", "png")
        assert fallback.advance() == "/emoji/smileys/grin.webp"
        assert fallback.advance() == "/emoji/smileys/grin.gif"
        assert fallback.advance() is None
        assert fallback.exhausted

    def test_remaining(self, resolver):
        """remaining() lists the locators still to try"""
        fallback = resolver.fallback_start("/emoji/smileys/grin.png", "smileys", "grin")
        assert fallback.remaining() == [
            "/emoji/smileys/grin.webp",
            "/emoji/smileys/grin.gif",
        ]

    def test_fallback_next(self, resolver):
        """fallback_next picks the format after the failed one"""
        assert resolver.fallback_next("/emoji/smileys/grin.webp", "smileys", "grin") == \
            "/emoji/smileys/grin.gif"
        assert resolver.fallback_next("/emoji/smileys/grin.gif", "smileys", "grin") is None

    def test_unknown_format_starts_at_first(self, resolver):
        """A locator in an unlisted format falls back to the first format"""
        assert resolver.fallback_next("/emoji/smileys/grin.svg", "smileys", "grin") == \
            "/emoji/smileys/grin.png"

    def test_never_revisits_format(self, resolver):
        """No locator is handed out twice"""
        fallback = EmojiFallback(resolver, "smileys", "grin", "svg")
        seen = [fallback.advance() for _ in range(4)]
        assert seen[-1] is None
        assert len(set(seen[:-1])) == 3

    def test_url_format(self):
        """Format is the extension, ignoring queries"""
        assert url_format("/emoji/a/b.webp?v=1") == "webp"
        assert url_format("https://cdn.example.org/emoji/a/b.png") == "png"
        assert url_format("/emoji/a/b") == ""

    def test_alt_parse(self):
        """Alt text identifies emoji images"""
        assert emojiAlt_parse("emoji:smileys_grin") == EmojiToken("smileys", "grin")
        assert emojiAlt_parse("a photo") is None
