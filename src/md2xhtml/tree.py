"""Markup tree nodes produced by the parsers and consumed by the writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Union

from lxml import etree


class Tag(str, Enum):
    """Closed vocabulary of element tags."""

    # Blocks
    P = "p"
    BLOCKQUOTE = "blockquote"
    NOTE = "note"
    HR = "hr"
    PRE = "pre"
    LI = "li"
    OL = "ol"
    UL = "ul"
    DL = "dl"
    DT = "dt"
    DD = "dd"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    SECT = "sect"

    # Inline spans
    EM = "em"
    STRONG = "strong"
    EMSTRONG = "emstrong"
    CODE = "code"
    TT = "tt"
    U = "u"
    WIKILINK = "wikilink"
    EMAIL = "email"
    HLINK = "hlink"
    LINKREF = "linkref"
    FNREF = "fnref"

    # Typographic specials
    SPACE = "space"
    EOS = "eos"
    HYPHEN = "hyphen"
    LDQ = "ldq"
    RDQ = "rdq"
    LSQ = "lsq"
    RSQ = "rsq"
    ELLIPSIS = "ellipsis"
    EMDASH = "emdash"
    ENDASH = "endash"
    BR = "br"

    # Document structure
    BODY = "body"
    HEADER = "header"
    METADATA = "metadata"
    ITEM = "item"
    LINKS = "links"
    LINK = "link"
    NOTES = "notes"


HEADING_TAGS = (Tag.H1, Tag.H2, Tag.H3, Tag.H4, Tag.H5, Tag.H6)
EMPHASIS_TAGS = frozenset({Tag.EM, Tag.STRONG, Tag.EMSTRONG})


def heading_tag(depth: int) -> Tag:
    """Return the heading tag for a section depth in 1..6."""
    if not 1 <= depth <= 6:
        raise ValueError(f"Heading depth out of range: {depth}")
    return HEADING_TAGS[depth - 1]


@dataclass
class Element:
    """A tagged node with attributes and ordered children."""

    tag: Tag
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Coercing through the enum rejects tags outside the vocabulary.
        self.tag = Tag(self.tag)

    def append(self, child: Node) -> None:
        self.children.append(child)

    def extend(self, children: Iterable[Node]) -> None:
        self.children.extend(children)

    def replace_children(self, children: Iterable[Node]) -> None:
        """Swap in a complete new child list in one step."""
        self.children = list(children)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.attrs[name] = value

    def iter(self) -> Iterator[Element]:
        """Yield this element and every descendant element, depth-first."""
        yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter()

    @property
    def is_heading(self) -> bool:
        return self.tag in HEADING_TAGS


@dataclass(frozen=True)
class EntityRef:
    """An ``&name;`` reference copied from the source text."""

    name: str


@dataclass
class Verbatim:
    """Raw markup spliced from the source, kept as a parsed lxml node."""

    markup: etree._Element


Node = Union[Element, EntityRef, Verbatim, str]


def flatten_text(node: Node) -> str:
    """Concatenate the text leaves below ``node``."""
    if isinstance(node, str):
        return node
    if isinstance(node, Element):
        return "".join(flatten_text(child) for child in node.children)
    return ""
