"""End-to-end tests for the public conversion functions."""

from __future__ import annotations

import pytest

import md2xhtml
from md2xhtml import config as config_module
from md2xhtml.convert import parse_markdown, to_xhtml, to_xhtml_document, to_xml
from md2xhtml.schemas import DashStyle, MarkdownConfig
from md2xhtml.tree import Element, Tag, flatten_text


class TestPublicApi:
    """Tests for the package exports."""

    def test_exports(self) -> None:
        """The main entry points are importable from the package."""
        for name in md2xhtml.__all__:
            assert hasattr(md2xhtml, name)

    def test_to_xml_dumps_tree(self) -> None:
        """to_xml serializes the internal tree."""
        xml = to_xml("# Title\n\nHello *world*.", MarkdownConfig())

        assert xml == (
            '<markdown><body><sect depth="1"><h1 id="title">Title</h1>'
            "<p>Hello <em>world</em>.</p></sect></body></markdown>"
        )

    def test_to_xml_header_region(self) -> None:
        """Side tables appear in a header before the body."""
        xml = to_xml(
            'Title: Doc\n\nSee [x][1][^a].\n\n[1]: http://x.com "T"\n\n[^a]: Note.',
            MarkdownConfig(),
        )

        assert xml.index("<header>") < xml.index("<body>")
        assert '<notes><note id="a"><p>Note.</p></note></notes>' in xml
        assert '<link id="1" url="http://x.com" title="T">x</link>' in xml
        assert '<metadata><item id="Title">Doc</item></metadata>' in xml

    def test_no_header_without_side_tables(self) -> None:
        """A document without links, notes or metadata has no header."""
        assert "<header>" not in to_xml("just text", MarkdownConfig())

    def test_to_xhtml_document(self) -> None:
        """Full documents take their title from metadata."""
        html = to_xhtml_document("Title: Doc\n\nBody.", MarkdownConfig())

        assert "<title>Doc</title>" in html

    def test_default_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a config the MD2XHTML_* values apply."""
        monkeypatch.setattr(config_module, "MD2XHTML_USE_SMARTYPANTS", True)

        assert "&#8220;" in to_xhtml('"hi"')

    def test_from_env_dash_style(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Dash style strings are validated into the enumeration."""
        monkeypatch.setattr(config_module, "MD2XHTML_DASHES_STYLE", "double_emdash_no_endash")

        assert MarkdownConfig.from_env().dashes_style is DashStyle.DOUBLE_EMDASH_NO_ENDASH

    def test_diagnostics(self) -> None:
        """Bad metadata values are reported on the document."""
        document = parse_markdown("Date: someday\n\nText", MarkdownConfig())

        assert "Date" not in document.metadata
        assert len(document.diagnostics) == 1


class TestProperties:
    """Properties that hold across inputs."""

    @pytest.mark.parametrize(
        "text",
        [
            "# A\n\nSome *text* here.\n\n- one\n- two",
            '"Quotes" -- and... dashes. Next one.',
            "Link [x](http://x.com) and [y][z].\n\n[z]: http://z.com",
            "> quote\n\n    indented\n\nText[^1].\n\n[^1]: Note.",
        ],
    )
    def test_conversion_is_deterministic(self, text: str) -> None:
        """Converting the same text twice gives the same output."""
        config = MarkdownConfig(use_smartypants=True)

        assert to_xhtml(text, config) == to_xhtml(text, config)
        assert to_xml(text, config) == to_xml(text, config)

    def test_plain_text_is_reconstructed(self) -> None:
        """Markup-free text survives unchanged, up to block breaks."""
        text = "First line\nsecond line\n\nAnother paragraph with words"
        document = parse_markdown(text, MarkdownConfig())

        paragraphs = [flatten_text(block) for block in document.body.children]
        assert "\n\n".join(paragraphs) == text

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_tight_list_law(self, count: int) -> None:
        """Tight lists have one li per item and no p inside."""
        text = "\n".join(f"- item {index}" for index in range(count))
        listing = parse_markdown(text, MarkdownConfig()).body.children[0]

        assert len(listing.children) == count
        for item in listing.children:
            assert all(
                not (isinstance(child, Element) and child.tag is Tag.P)
                for child in item.children
            )

    def test_link_resolution_is_order_independent(self) -> None:
        """Definitions before or after use give the same output."""
        before = '[id]: http://a.com "A"\n\nSee [x][id].'
        after = 'See [x][id].\n\n[id]: http://a.com "A"'

        assert to_xhtml(before, MarkdownConfig()) == to_xhtml(after, MarkdownConfig())

    def test_quotes_and_apostrophes(self) -> None:
        """Quote resolution in a sentence with an apostrophe."""
        body = parse_markdown(
            "\"Don't,\" she said.", MarkdownConfig(use_smartypants=True)
        ).body

        paragraph = body.children[0]
        assert paragraph.children == [
            Element(Tag.LDQ),
            "Don't,",
            Element(Tag.RDQ),
            " she said.",
        ]

    def test_caller_config_untouched(self) -> None:
        """Metadata never leaks into the caller's configuration."""
        config = MarkdownConfig()
        parse_markdown("Use WikiLinks: true\n\nSee FrontPage.", config)

        assert config.use_wikilinks is False
        assert config.use_smartypants is False

    def test_wikilink_metadata(self) -> None:
        """Use WikiLinks enables CamelCase links for the rest of the document."""
        html = to_xhtml(
            "Use WikiLinks: true\nBase Url: /w/{0}\n\nSee FrontPage.", MarkdownConfig()
        )

        assert '<a class="wikilink" href="/w/FrontPage">FrontPage</a>' in html
