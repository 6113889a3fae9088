"""XHTML rendering of a parsed markup tree."""

from __future__ import annotations

import copy
from typing import Callable

from lxml import etree

from md2xhtml.config import XHTML_DOCTYPE, XHTML_NAMESPACE
from md2xhtml.document import MarkdownDocument
from md2xhtml.exceptions import TreeInvariantError
from md2xhtml.tree import Element, EntityRef, Node, Tag, Verbatim, flatten_text
from md2xhtml.xml_utils import append_text, serialize_fragment


# Entity sequences emitted for the typographic elements.
SPECIAL_ENTITIES: dict[Tag, tuple[str, ...]] = {
    Tag.SPACE: ("nbsp",),
    Tag.EOS: ("nbsp", "nbsp"),
    Tag.HYPHEN: (),
    Tag.LDQ: ("#8220",),
    Tag.RDQ: ("#8221",),
    Tag.LSQ: ("#8216",),
    Tag.RSQ: ("#8217",),
    Tag.ELLIPSIS: ("#8230",),
    Tag.EMDASH: ("nbsp", "#8212", "nbsp"),
    Tag.ENDASH: ("#8211",),
}

# Elements written out under their own name with their attributes.
COPIED_TAGS = frozenset(
    {
        Tag.BLOCKQUOTE,
        Tag.HR,
        Tag.PRE,
        Tag.LI,
        Tag.OL,
        Tag.UL,
        Tag.DL,
        Tag.DT,
        Tag.DD,
        Tag.H1,
        Tag.H2,
        Tag.H3,
        Tag.H4,
        Tag.H5,
        Tag.H6,
        Tag.EM,
        Tag.STRONG,
        Tag.CODE,
        Tag.TT,
        Tag.U,
        Tag.BR,
    }
)

# Side-table elements; they never belong in the body.
HEADER_TAGS = frozenset(
    {Tag.HEADER, Tag.METADATA, Tag.ITEM, Tag.LINKS, Tag.LINK, Tag.NOTES, Tag.NOTE}
)

_Handler = Callable[["XhtmlWriter", etree._Element, Element, bool], None]


class XhtmlWriter:
    """Renders a :class:`MarkdownDocument` as XHTML.

    The writer only reads the document, so the same instance can render it
    any number of times with identical results.
    """

    def __init__(self, document: MarkdownDocument, *, use_classes: bool = True) -> None:
        self.document = document
        self.use_classes = use_classes
        self._namespace = ""

    def write_fragment(self, *, pretty: bool = False) -> str:
        """Render the body and footnotes as a markup fragment."""
        self._namespace = ""
        container = etree.Element("div")
        self._write_content(container)
        return serialize_fragment(container, pretty=pretty)

    def write_document(self, *, pretty: bool = True) -> str:
        """Render a complete XHTML 1.1 document."""
        self._namespace = f"{{{XHTML_NAMESPACE}}}"
        html = etree.Element(self._name("html"), nsmap={None: XHTML_NAMESPACE})
        head = etree.SubElement(html, self._name("head"))
        title = etree.SubElement(head, self._name("title"))
        title.text = self.document.title or ""
        etree.SubElement(
            head,
            self._name("meta"),
            {"http-equiv": "Content-Type", "content": "text/html; charset=utf-8"},
        )
        body = etree.SubElement(html, self._name("body"))
        self._write_content(body)
        return etree.tostring(
            html, encoding="unicode", pretty_print=pretty, doctype=XHTML_DOCTYPE
        )

    def _name(self, tag: str) -> str:
        return f"{self._namespace}{tag}"

    def _element(
        self,
        parent: etree._Element,
        tag: str,
        attrs: dict[str, str] | None = None,
        css_class: str | None = None,
    ) -> etree._Element:
        attrib: dict[str, str] = {}
        if css_class and self.use_classes:
            attrib["class"] = css_class
        attrib.update(attrs or {})
        return etree.SubElement(parent, self._name(tag), attrib)

    def _write_content(self, parent: etree._Element) -> None:
        self._write_children(parent, self.document.body)
        self._write_footnotes(parent)

    def _write_footnotes(self, parent: etree._Element) -> None:
        if not self.document.footnotes:
            return
        self._element(parent, "hr")
        notes = self._element(parent, "dl", css_class="notelist")
        for note in self.document.footnotes:
            key = note.get("id", "")
            term = self._element(notes, "dt", css_class="notekey")
            anchor = self._element(term, "a", {"name": f"fn.{key}"}, "notedef")
            anchor.text = key
            body = self._element(notes, "dd", css_class="notebody")
            self._write_children(body, note)

    def _write_children(self, parent: etree._Element, element: Element) -> None:
        first = True
        for child in element.children:
            self._write_node(parent, child, first)
            first = isinstance(child, Element) and child.is_heading

    def _write_node(self, parent: etree._Element, node: Node, first: bool) -> None:
        if isinstance(node, str):
            append_text(parent, node)
        elif isinstance(node, EntityRef):
            parent.append(etree.Entity(node.name))
        elif isinstance(node, Verbatim):
            parent.append(self._copy_markup(node.markup))
        elif isinstance(node, Element):
            handler = _HANDLERS.get(node.tag)
            if handler is None:
                raise TreeInvariantError(f"No renderer for <{node.tag.value}>")
            handler(self, parent, node, first)
        else:
            raise TreeInvariantError(f"Unexpected node in tree: {node!r}")

    def _copy_markup(self, markup: etree._Element) -> etree._Element:
        markup = copy.deepcopy(markup)
        if self._namespace:
            # Raw markup joins the XHTML namespace of the document.
            for element in markup.iter(tag=etree.Element):
                if not element.tag.startswith("{"):
                    element.tag = self._name(element.tag)
        return markup

    def _write_paragraph(self, parent: etree._Element, node: Element, first: bool) -> None:
        attrs = {name: value for name, value in node.attrs.items() if name != "verse"}
        if node.get("verse") is not None:
            css_class = "verse"
        elif first:
            css_class = "first"
        else:
            css_class = None
        paragraph = self._element(parent, "p", attrs, css_class)
        self._write_children(paragraph, node)

    def _write_copy(self, parent: etree._Element, node: Element, first: bool) -> None:
        element = self._element(parent, node.tag.value, node.attrs)
        self._write_children(element, node)

    def _write_transparent(self, parent: etree._Element, node: Element, first: bool) -> None:
        if node.tag is Tag.SECT:
            depth = node.get("depth", "")
            if not depth.isdigit() or not 1 <= int(depth) <= 6:
                raise TreeInvariantError(f"Section depth out of range: {depth!r}")
        self._write_children(parent, node)

    def _write_emstrong(self, parent: etree._Element, node: Element, first: bool) -> None:
        strong = self._element(parent, "strong", node.attrs)
        self._write_children(self._element(strong, "em"), node)

    def _write_wikilink(self, parent: etree._Element, node: Element, first: bool) -> None:
        text = flatten_text(node)
        href = self.document.config.wikilink_format.replace("{0}", text)
        if node.get("image") == "true":
            self._element(parent, "img", {"src": href, "alt": text}, "wikilink")
            return
        anchor = self._element(parent, "a", {"href": href}, "wikilink")
        self._write_children(anchor, node)

    def _write_email(self, parent: etree._Element, node: Element, first: bool) -> None:
        address = flatten_text(node)
        anchor = self._element(parent, "a", {"href": f"mailto:{address}"}, "email")
        anchor.text = address

    def _write_hlink(self, parent: etree._Element, node: Element, first: bool) -> None:
        url = flatten_text(node)
        anchor = self._element(parent, "a", {"href": url}, "hlink")
        anchor.text = url

    def _write_linkref(self, parent: etree._Element, node: Element, first: bool) -> None:
        key = node.get("key", "")
        record = self.document.links.get(key)

        # Inline links carry synthetic keys that never name a section.
        heading = None
        if record is None or not record.is_anonymous:
            heading = self.document.headers.get(key)
        if heading is not None:
            anchor = self._element(parent, "a", {"href": f"#{key}", "title": heading}, "xref")
            self._write_children(anchor, node)

        if record is None:
            if heading is not None:
                return
            raise TreeInvariantError(f"Link reference to unknown key {key!r}")

        if not record.is_defined:
            if heading is not None:
                return
            text = record.text or ""
            ident = record.ident if record.ident != text else ""
            append_text(parent, f"[{text}][{ident}]")
            return

        attrs: dict[str, str] = {}
        if record.is_image:
            attrs["src"] = record.url or ""
            if record.title:
                attrs["title"] = record.title
            attrs["alt"] = flatten_text(node)
            self._element(parent, "img", attrs, "image")
            return

        attrs["href"] = record.url or ""
        if record.title:
            attrs["title"] = record.title
        anchor = self._element(parent, "a", attrs, "link")
        self._write_children(anchor, node)

    def _write_fnref(self, parent: etree._Element, node: Element, first: bool) -> None:
        key = node.get("key", "")
        anchor = self._element(parent, "a", {"href": f"#fn.{key}"}, "fnref")
        anchor.text = f"[{key}]"

    def _write_special(self, parent: etree._Element, node: Element, first: bool) -> None:
        for name in SPECIAL_ENTITIES[node.tag]:
            parent.append(etree.Entity(name))

    def _reject(self, parent: etree._Element, node: Element, first: bool) -> None:
        raise TreeInvariantError(f"<{node.tag.value}> is not allowed in the body")


_HANDLERS: dict[Tag, _Handler] = {
    Tag.P: XhtmlWriter._write_paragraph,
    Tag.BODY: XhtmlWriter._write_transparent,
    Tag.SECT: XhtmlWriter._write_transparent,
    Tag.EMSTRONG: XhtmlWriter._write_emstrong,
    Tag.WIKILINK: XhtmlWriter._write_wikilink,
    Tag.EMAIL: XhtmlWriter._write_email,
    Tag.HLINK: XhtmlWriter._write_hlink,
    Tag.LINKREF: XhtmlWriter._write_linkref,
    Tag.FNREF: XhtmlWriter._write_fnref,
}
_HANDLERS.update((tag, XhtmlWriter._write_copy) for tag in COPIED_TAGS)
_HANDLERS.update((tag, XhtmlWriter._write_special) for tag in SPECIAL_ENTITIES)
_HANDLERS.update((tag, XhtmlWriter._reject) for tag in HEADER_TAGS)
