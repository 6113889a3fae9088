"""Tests for the inline parser."""

from __future__ import annotations

from lxml import etree

from md2xhtml.document import ParseSession
from md2xhtml.inline_parser import InlineParser, read_markup
from md2xhtml.schemas import MarkdownConfig
from md2xhtml.tree import Element, EntityRef, Tag, Verbatim, flatten_text


def _parse(text: str, **options: object) -> Element:
    session = ParseSession(config=MarkdownConfig(**options))
    return InlineParser(session).parse(text, Element(Tag.P))


def _tags(element: Element) -> list[object]:
    return [
        child.tag if isinstance(child, Element) else child for child in element.children
    ]


class TestText:
    """Tests for plain text, escapes, tabs and entities."""

    def test_plain_text_is_one_leaf(self) -> None:
        """Text without markup stays a single leaf, newlines included."""
        paragraph = _parse("Hello world\nsecond line")

        assert paragraph.children == ["Hello world\nsecond line"]

    def test_escape_removes_backslash(self) -> None:
        """Escaped markup characters are literal."""
        paragraph = _parse(r"\*not em\*")

        assert paragraph.children == ["*not em*"]

    def test_escape_kept_for_smartypants(self) -> None:
        """With the typographic pass on, the backslash survives the scan."""
        session = ParseSession(config=MarkdownConfig(use_smartypants=True))
        paragraph = InlineParser(session).parse(
            r"\*x\*", Element(Tag.P), transform=False
        )

        assert paragraph.children == [r"\*x\*"]

    def test_trailing_backslash_is_literal(self) -> None:
        """A backslash at the end of the text is kept."""
        assert _parse("end\\").children == ["end\\"]

    def test_tab_expands_to_column_stop(self) -> None:
        """Tabs advance to the next four-column stop."""
        assert _parse("ab\tc").children == ["ab  c"]

    def test_entity_reference(self) -> None:
        """&name; becomes an entity node, a bare & stays text."""
        paragraph = _parse("AT&amp;T & co")

        assert paragraph.children == ["AT", EntityRef("amp"), "T & co"]

    def test_numeric_entity(self) -> None:
        """Numeric references are recognised."""
        assert _parse("&#169;").children == [EntityRef("#169")]


class TestHardBreak:
    """Tests for two-space line breaks."""

    def test_break_marks_verse(self) -> None:
        """Two trailing spaces insert br and mark the paragraph as verse."""
        paragraph = _parse("line one  \nline two")

        assert _tags(paragraph) == ["line one", Tag.BR, "line two"]
        assert paragraph.get("verse") == "true"

    def test_leading_spaces_become_space_elements(self) -> None:
        """Indentation after a break is kept as non-breaking spaces."""
        paragraph = _parse("one  \n  two")

        assert _tags(paragraph) == ["one", Tag.BR, Tag.SPACE, Tag.SPACE, "two"]

    def test_break_at_end_has_no_br(self) -> None:
        """Trailing double space at the end still marks verse but adds no br."""
        paragraph = _parse("last  ")

        assert paragraph.children == ["last"]
        assert paragraph.get("verse") == "true"


class TestEmphasis:
    """Tests for emphasis runs."""

    def test_em_strong_emstrong(self) -> None:
        """Runs of one, two and three markers."""
        paragraph = _parse("**bold** and _em_ and ***both***")

        assert _tags(paragraph) == [Tag.STRONG, " and ", Tag.EM, " and ", Tag.EMSTRONG]
        assert flatten_text(paragraph) == "bold and em and both"

    def test_nested_emphasis(self) -> None:
        """Emphasis frames nest."""
        paragraph = _parse("*a **b** c*")

        em = paragraph.children[0]
        assert em.tag is Tag.EM
        assert _tags(em) == ["a ", Tag.STRONG, " c"]

    def test_intraword_underscore_is_literal(self) -> None:
        """Markers inside words do not open emphasis."""
        assert _parse("snake_case_name").children == ["snake_case_name"]

    def test_unclosed_emphasis_closes_at_end(self) -> None:
        """An unmatched opener wraps the rest of the text."""
        paragraph = _parse("an *open text")

        assert _tags(paragraph) == ["an ", Tag.EM]
        assert flatten_text(paragraph) == "an open text"

    def test_long_run_is_literal(self) -> None:
        """Four or more markers are plain text."""
        assert _parse("a **** b").children == ["a **** b"]

    def test_spaced_marker_is_literal(self) -> None:
        """A marker followed by whitespace does not open emphasis."""
        assert _parse("2 * 3").children == ["2 * 3"]


class TestCodeSpans:
    """Tests for backtick code spans."""

    def test_single_backtick(self) -> None:
        """A lone backtick pair makes a code span."""
        paragraph = _parse("Use `x = 1` here")

        assert _tags(paragraph) == ["Use ", Tag.CODE, " here"]
        assert paragraph.children[1].children == ["x = 1"]

    def test_markup_inside_code_is_literal(self) -> None:
        """Emphasis markers and brackets are not parsed inside code."""
        paragraph = _parse("`*a* [b](c)`")

        assert paragraph.children[0].children == ["*a* [b](c)"]

    def test_double_backtick_trims_one_space(self) -> None:
        """A doubled backtick span may contain a lone backtick."""
        paragraph = _parse("a `` x ` y `` b")

        assert paragraph.children[1].tag is Tag.CODE
        assert paragraph.children[1].children == ["x ` y"]

    def test_backtick_inside_word_is_literal(self) -> None:
        """A lone backtick after a letter does not open a span."""
        assert _parse("don`t").children == ["don`t"]

    def test_double_quote_idiom_dissolves_span(self) -> None:
        """``quoted'' turns back into text."""
        paragraph = _parse("``quoted''")

        assert paragraph.children == ["``quoted''"]


class TestLinks:
    """Tests for links, images, footnote references and wikilinks."""

    def test_inline_link(self) -> None:
        """[text](url "title") creates a defined anonymous record."""
        session = ParseSession(config=MarkdownConfig())
        paragraph = InlineParser(session).parse(
            'see [the *docs*](http://a.com "Docs")', Element(Tag.P)
        )

        link = paragraph.children[1]
        assert link.tag is Tag.LINKREF
        assert link.get("key") == "#0"
        assert _tags(link) == ["the ", Tag.EM]
        record = session.links["#0"]
        assert (record.url, record.title, record.is_defined) == (
            "http://a.com",
            "Docs",
            True,
        )

    def test_reference_link(self) -> None:
        """[text][id] creates an undefined record until defined."""
        session = ParseSession(config=MarkdownConfig())
        paragraph = InlineParser(session).parse("[Text][Some Id]", Element(Tag.P))

        assert paragraph.children[0].get("key") == "someid"
        record = session.links["someid"]
        assert record.text == "Text"
        assert not record.is_defined

    def test_implicit_reference(self) -> None:
        """[text][] uses the text as identifier."""
        session = ParseSession(config=MarkdownConfig())
        InlineParser(session).parse("[Home][]", Element(Tag.P))

        assert session.links["home"].ident == "Home"

    def test_image(self) -> None:
        """![alt](src) marks the record as an image."""
        session = ParseSession(config=MarkdownConfig())
        InlineParser(session).parse("![a cat](/cat.png)", Element(Tag.P))

        record = session.links["#0"]
        assert record.is_image
        assert record.url == "/cat.png"

    def test_failed_image_keeps_marker(self) -> None:
        """An unparsable image marker stays literal text."""
        assert _parse("Hi ![ there").children == ["Hi ![ there"]

    def test_bare_brackets_are_literal(self) -> None:
        """Brackets without a target are text."""
        assert _parse("a [note] b").children == ["a [note] b"]

    def test_footnote_reference(self) -> None:
        """[^key] becomes fnref."""
        paragraph = _parse("Text[^1].")

        assert _tags(paragraph) == ["Text", Tag.FNREF, "."]
        assert paragraph.children[1].get("key") == "1"

    def test_footnote_reference_plain_mode(self) -> None:
        """Plain mode leaves [^key] alone."""
        assert _parse("Text[^1].", plain_markdown=True).children == ["Text[^1]."]

    def test_wikilink(self) -> None:
        """[[Page]] becomes a wikilink when enabled."""
        paragraph = _parse("See [[Front Page]].", use_wikilinks=True)

        assert _tags(paragraph) == ["See ", Tag.WIKILINK, "."]
        assert paragraph.children[1].children == ["Front Page"]

    def test_image_wikilink(self) -> None:
        """![[Pic]] is an image wikilink."""
        paragraph = _parse("![[Pic]]", use_wikilinks=True)

        assert paragraph.children[0].tag is Tag.WIKILINK
        assert paragraph.children[0].get("image") == "true"


class TestAngleBrackets:
    """Tests for raw markup and autolinks."""

    def test_raw_element(self) -> None:
        """A well-formed element is kept verbatim."""
        paragraph = _parse("Some <b>bold</b> text")

        assert _tags(paragraph)[0] == "Some "
        verbatim = paragraph.children[1]
        assert isinstance(verbatim, Verbatim)
        assert etree.tostring(verbatim.markup, encoding="unicode") == "<b>bold</b>"
        assert paragraph.children[2] == " text"

    def test_comment(self) -> None:
        """Comments are kept verbatim."""
        paragraph = _parse("x <!-- note --> y")

        assert isinstance(paragraph.children[1], Verbatim)
        assert paragraph.children[1].markup.text == " note "

    def test_malformed_markup_degrades_to_text(self) -> None:
        """An unclosed tag is kept as literal text."""
        paragraph = _parse("a <b>unclosed text")

        assert paragraph.children == ["a ", "<b>", "unclosed text"]

    def test_url_autolink(self) -> None:
        """<scheme://...> becomes hlink."""
        paragraph = _parse("Visit <http://x.com> now")

        assert _tags(paragraph) == ["Visit ", Tag.HLINK, " now"]
        assert paragraph.children[1].children == ["http://x.com"]

    def test_email_autolink(self) -> None:
        """<user@host> becomes email."""
        paragraph = _parse("Mail <me@x.org> now")

        assert paragraph.children[1].tag is Tag.EMAIL

    def test_less_than_is_text(self) -> None:
        """A comparison is not markup."""
        assert _parse("1 < 2").children == ["1 < 2"]


class TestReadMarkup:
    """Tests for read_markup function."""

    def test_shortest_element(self) -> None:
        """The first closing > that completes an element wins."""
        node, length = read_markup("<i>a</i> and <i>b</i>")

        assert node.tag == "i"
        assert length == len("<i>a</i>")

    def test_closing_tag_fails(self) -> None:
        """A stray closing tag is not markup."""
        assert read_markup("</p> rest") is None

    def test_unterminated_comment_fails(self) -> None:
        """A comment without --> is not markup."""
        assert read_markup("<!-- open") is None
