"""Single-pass parser for span-level markup inside a block."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lxml import etree

from md2xhtml import smartypants
from md2xhtml.config import TAB_WIDTH
from md2xhtml.tree import EMPHASIS_TAGS, Element, EntityRef, Tag, Verbatim

if TYPE_CHECKING:
    from md2xhtml.document import ParseSession

logger = logging.getLogger(__name__)

# Patterns are matched at an offset with ``pattern.match(text, pos)``.
HTML_TAG_RE = re.compile(r"<(?:!--|/?[a-z0-9]+(?:\s+[a-z0-9]+=|(?: ?/)?>))")
EMAIL_RE = re.compile(r"<([a-z_0-9.-]+@[^>]+)>")
URL_RE = re.compile(r"<([a-z]+://[^>]+)>")
ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z][A-Za-z0-9]*);")
FREE_LINK_RE = re.compile(r"\[\[(.+?)\]\]")
FNREF_RE = re.compile(r"\[\^([^\]]+)\]")
LINK_RE = re.compile(r'\[(.+?)\](\(([^ \t")]+)?(\s*"(.+?)")?\)|\s*\[([^\]]*)\])')

_EMPHASIS_STYLES = {1: Tag.EM, 2: Tag.STRONG, 3: Tag.EMSTRONG}
_MARKUP_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def read_markup(text: str) -> tuple[etree._Element, int] | None:
    """Read one well-formed comment or element from the start of ``text``.

    Returns the parsed node and the number of characters it spans, or
    ``None`` when no prefix of ``text`` is well-formed markup.
    """
    if text.startswith("<!--"):
        end = text.find("-->", 4)
        if end < 0:
            return None
        try:
            return etree.Comment(text[4:end]), end + 3
        except ValueError:
            return None

    if text.startswith("</"):
        return None

    end = text.find(">")
    while end >= 0:
        try:
            return etree.fromstring(text[: end + 1], _MARKUP_PARSER), end + 1
        except etree.XMLSyntaxError:
            end = text.find(">", end + 1)
    return None


def _literal_tag_end(text: str, start: int) -> int:
    """Index of the ``>`` closing a malformed tag, ignoring quoted ``>``."""
    quoted = False
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 1
        elif char == '"':
            quoted = not quoted
        elif not quoted and char == ">":
            return index
        index += 1
    return len(text) - 1


@dataclass
class _Frame:
    element: Element
    marker: str = ""


class InlineParser:
    """Parses the text of one block into inline nodes."""

    def __init__(self, session: ParseSession) -> None:
        self.session = session

    def parse(
        self,
        text: str,
        context: Element,
        *,
        block: Element | None = None,
        transform: bool = True,
    ) -> Element:
        """Append the inline nodes for ``text`` to ``context``.

        Args:
            text: Raw block text, lines joined with ``\\n``.
            context: Element receiving the nodes.
            block: Block marked as verse on hard line breaks; defaults to
                ``context``.
            transform: Run the typographic pass afterwards (when enabled).
                Nested parses of link text leave it to the enclosing parse.
        """
        _Scanner(self, text, context, block or context).run()
        if transform and self.session.config.use_smartypants:
            smartypants.transform(context, self.session.config)
        return context


class _Scanner:
    """State of one left-to-right scan."""

    def __init__(
        self, parser: InlineParser, text: str, context: Element, block: Element
    ) -> None:
        self.parser = parser
        self.config = parser.session.config
        self.links = parser.session.links
        self.text = text
        self.block = block
        self.stack = [_Frame(context)]
        self.buffer: list[str] = []
        self.pos = 0
        self.column = 0

    @property
    def top(self) -> Element:
        return self.stack[-1].element

    @property
    def in_code(self) -> bool:
        return self.stack[-1].element.tag is Tag.CODE

    def peek(self, offset: int = 1) -> str:
        index = self.pos + offset
        return self.text[index] if 0 <= index < len(self.text) else ""

    def flush(self) -> None:
        if self.buffer:
            self.top.append("".join(self.buffer))
            self.buffer = []

    def emit(self, node: Element | EntityRef | Verbatim | str) -> None:
        self.flush()
        self.top.append(node)

    def run(self) -> None:
        handlers = {
            "\t": self._tab,
            "\n": self._newline,
            " ": self._space,
            "\\": self._backslash,
            "<": self._angle,
            "&": self._ampersand,
            "!": self._bang,
            "[": self._bracket,
            "'": self._apostrophe,
            "`": self._backtick,
            "*": self._emphasis,
            "_": self._emphasis,
        }
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if self.in_code and char not in "`'\t":
                self.buffer.append(char)
            else:
                handler = handlers.get(char)
                if handler is None:
                    self.buffer.append(char)
                else:
                    handler(char)
            self.pos += 1
            self.column += 1

        self.flush()
        # Unclosed spans (an unmatched ` or *) are closed at the end.
        while len(self.stack) > 1:
            frame = self.stack.pop()
            self.top.append(frame.element)

    def _tab(self, char: str) -> None:
        pad = TAB_WIDTH - self.column % TAB_WIDTH
        self.buffer.append(" " * pad)
        self.column += pad - 1

    def _newline(self, char: str) -> None:
        self.buffer.append(char)
        self.column = -1

    def _space(self, char: str) -> None:
        text = self.text
        end = self.pos + 2
        if self.peek() != " " or not (end == len(text) or text[end] == "\n"):
            self.buffer.append(char)
            return

        self.pos = end
        self.column = -1
        self.flush()
        if self.block.tag is Tag.P:
            self.block.set("verse", "true")
        if self.pos == len(text):
            return

        self.top.append(Element(Tag.BR))
        while self.peek() in (" ", "\t"):
            count = 1 if self.peek() == " " else TAB_WIDTH
            for _ in range(count):
                self.top.append(Element(Tag.SPACE))
            self.column += count
            self.pos += 1

    def _backslash(self, char: str) -> None:
        following = self.peek()
        if not following:
            self.buffer.append(char)
            return
        if self.config.use_smartypants:
            # Kept so the typographic pass leaves the escaped character alone.
            self.buffer.append(char)
        self.buffer.append(following)
        self.pos += 1

    def _angle(self, char: str) -> None:
        text = self.text
        if HTML_TAG_RE.match(text, self.pos):
            result = read_markup(text[self.pos:])
            if result is not None:
                node, length = result
                self.emit(Verbatim(node))
                self.pos += length - 1
                return
            end = _literal_tag_end(text, self.pos)
            logger.debug("Malformed markup kept as text: %r", text[self.pos : end + 1])
            self.emit(text[self.pos : end + 1])
            self.pos = end
            return

        match = EMAIL_RE.match(text, self.pos)
        if match:
            self.emit(Element(Tag.EMAIL, children=[match.group(1)]))
            self.pos = match.end() - 1
            return

        match = URL_RE.match(text, self.pos)
        if match:
            self.emit(Element(Tag.HLINK, children=[match.group(1)]))
            self.pos = match.end() - 1
            return

        self.buffer.append(char)

    def _ampersand(self, char: str) -> None:
        match = ENTITY_RE.match(self.text, self.pos)
        if match is None:
            self.buffer.append(char)
            return
        self.emit(EntityRef(match.group(1)))
        self.pos = match.end() - 1

    def _bang(self, char: str) -> None:
        if self.peek() != "[":
            self.buffer.append(char)
            return

        start = self.pos + 1
        if self.config.use_wikilinks:
            match = FREE_LINK_RE.match(self.text, start)
            if match:
                self.emit(
                    Element(Tag.WIKILINK, {"image": "true"}, [match.group(1)])
                )
                self.pos = match.end() - 1
                return

        if self._link(start, is_image=True):
            return
        self.buffer.append("![")
        self.pos = start

    def _bracket(self, char: str) -> None:
        text = self.text
        if self.config.use_wikilinks and self.peek() == "[":
            match = FREE_LINK_RE.match(text, self.pos)
            if match:
                self.emit(Element(Tag.WIKILINK, children=[match.group(1)]))
                self.pos = match.end() - 1
                return

        if not self.config.plain_markdown:
            match = FNREF_RE.match(text, self.pos)
            if match:
                self.emit(Element(Tag.FNREF, {"key": match.group(1)}))
                self.pos = match.end() - 1
                return

        if not self._link(self.pos, is_image=False):
            self.buffer.append(char)

    def _link(self, start: int, *, is_image: bool) -> bool:
        match = LINK_RE.match(self.text, start)
        if match is None:
            return False

        desc = match.group(1)
        inline_target = match.group(2).startswith("(")
        ident = None if inline_target else (match.group(6) or desc)
        if not self.config.plain_markdown and desc.startswith("^"):
            desc = desc[1:]

        record = self.links.define(
            match.group(3),
            match.group(5),
            ident,
            definition=inline_target,
            image=is_image,
        )
        record.text = desc

        link = Element(Tag.LINKREF, {"key": record.id})
        self.emit(link)
        # Link text may carry emphasis and the like.
        self.parser.parse(desc, link, block=self.block, transform=False)
        self.pos = match.end() - 1
        return True

    def _apostrophe(self, char: str) -> None:
        frame = self.stack[-1]
        if frame.element.tag is Tag.CODE and frame.marker == "``" and self.peek() == "'":
            # ``text'' is a quotation, not code: dissolve the span.
            self.stack.pop()
            self.buffer = ["``", *frame.element.children, *self.buffer]
        self.buffer.append(char)

    def _backtick(self, char: str) -> None:
        marker = "``" if self.peek() == "`" else "`"
        frame = self.stack[-1]

        if frame.element.tag is Tag.CODE:
            self.pos += len(marker) - 1
            if frame.marker != marker:
                self.buffer.append(marker)
                return
            self.flush()
            self.stack.pop()
            if marker == "``":
                _trim_code_span(frame.element)
            self.top.append(frame.element)
            return

        if marker == "`" and self.pos > 0 and not self.text[self.pos - 1].isspace():
            self.buffer.append(char)
            return

        self.flush()
        self.stack.append(_Frame(Element(Tag.CODE), marker))
        self.pos += len(marker) - 1

    def _emphasis(self, char: str) -> None:
        text = self.text
        length = 1
        while self.peek(length) == char:
            length += 1
        run = char * length
        style = _EMPHASIS_STYLES.get(length)

        before = text[self.pos - 1] if self.pos > 0 else ""
        after = self.peek(length)
        self.pos += length - 1

        if style is None:
            self.buffer.append(run)
            return

        if before and not before.isspace():
            for index in range(len(self.stack) - 1, 0, -1):
                frame = self.stack[index]
                if frame.marker == run and frame.element.tag in EMPHASIS_TAGS:
                    self.flush()
                    while len(self.stack) > index:
                        closed = self.stack.pop()
                        self.top.append(closed.element)
                    return

        if (not before or before.isspace()) and after and not after.isspace():
            self.flush()
            self.stack.append(_Frame(Element(style), run))
            return

        self.buffer.append(run)


def _trim_code_span(code: Element) -> None:
    """Drop one leading and one trailing space inside a ````...```` span."""
    children = code.children
    if children and isinstance(children[0], str) and children[0].startswith(" "):
        children[0] = children[0][1:]
    if children and isinstance(children[-1], str) and children[-1].endswith(" "):
        children[-1] = children[-1][:-1]
    code.replace_children(child for child in children if child != "")
