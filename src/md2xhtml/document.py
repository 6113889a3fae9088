"""Parse session state and the finished document it produces."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from datetime import date

from lxml import etree

from md2xhtml.links import LinkTable
from md2xhtml.schemas import MarkdownConfig
from md2xhtml.tree import Element, EntityRef, Node, Tag, Verbatim
from md2xhtml.xml_utils import append_text

logger = logging.getLogger(__name__)


@dataclass
class ParseSession:
    """Mutable state threaded through one parse.

    Every side table lives here so that independent parses never share
    anything, the configuration included.
    """

    config: MarkdownConfig
    links: LinkTable = field(default_factory=LinkTable)
    footnotes: list[Element] = field(default_factory=list)
    metadata: dict[str, object] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    diagnostics: list[str] = field(default_factory=list)
    first_block: bool = True

    def report(self, message: str) -> None:
        """Record a non-fatal problem with the input."""
        logger.warning(message)
        self.diagnostics.append(message)

    def finish(self, body: Element) -> MarkdownDocument:
        """Splice the side tables into a header and freeze the result."""
        header = self._build_header()
        logger.debug(
            "Parsed document: %d blocks, %d links, %d footnotes",
            len(body.children),
            len(self.links),
            len(self.footnotes),
        )
        return MarkdownDocument(
            body=body,
            header=header,
            config=self.config,
            links=self.links,
            footnotes=list(self.footnotes),
            metadata=dict(self.metadata),
            headers=dict(self.headers),
            diagnostics=list(self.diagnostics),
        )

    def _build_header(self) -> Element | None:
        parts: list[Node] = []
        if self.footnotes:
            parts.append(Element(Tag.NOTES, children=list(self.footnotes)))
        if len(self.links):
            links = Element(Tag.LINKS)
            for record in self.links:
                attrs = {"id": record.ident}
                if record.url is not None:
                    attrs["url"] = record.url
                if record.title is not None:
                    attrs["title"] = record.title
                if record.is_image:
                    attrs["image"] = "true"
                link = Element(Tag.LINK, attrs)
                if record.text is not None:
                    link.append(record.text)
                links.append(link)
            parts.append(links)
        if self.metadata:
            metadata = Element(Tag.METADATA)
            for key, value in self.metadata.items():
                metadata.append(
                    Element(Tag.ITEM, {"id": key}, [metadata_text(value)])
                )
            parts.append(metadata)
        if not parts:
            return None
        return Element(Tag.HEADER, children=parts)


def metadata_text(value: object) -> str:
    """Render a metadata value as text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


@dataclass
class MarkdownDocument:
    """A fully parsed document: the markup tree plus its side tables."""

    body: Element
    header: Element | None
    config: MarkdownConfig
    links: LinkTable
    footnotes: list[Element]
    metadata: dict[str, object]
    headers: dict[str, str]
    diagnostics: list[str]

    @property
    def title(self) -> str | None:
        value = self.metadata.get("Title")
        return metadata_text(value) if value is not None else None

    def to_xml(self, *, pretty: bool = False) -> str:
        """Serialize the markup tree itself, header first, under ``markdown``."""
        root = etree.Element("markdown")
        if self.header is not None:
            _append_node(root, self.header)
        _append_node(root, self.body)
        return etree.tostring(root, encoding="unicode", pretty_print=pretty)


def _append_node(parent: etree._Element, node: Node) -> None:
    if isinstance(node, str):
        append_text(parent, node)
    elif isinstance(node, EntityRef):
        parent.append(etree.Entity(node.name))
    elif isinstance(node, Verbatim):
        parent.append(copy.deepcopy(node.markup))
    else:
        element = etree.SubElement(parent, node.tag.value, dict(node.attrs))
        for child in node.children:
            _append_node(element, child)
