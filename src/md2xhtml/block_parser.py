"""Recursive-descent parser for block structure."""

from __future__ import annotations

import logging
import re

from md2xhtml.document import ParseSession
from md2xhtml.inline_parser import InlineParser
from md2xhtml.line_stream import LineStream, expand_tabs, is_blank
from md2xhtml.links import reduce_identifier
from md2xhtml.metadata import harvest_metadata, is_metadata_line
from md2xhtml.schemas import MarkdownConfig
from md2xhtml.tree import Element, Tag, heading_tag

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
SETEXT_RE = re.compile(r"^[=-]+\s*$")
RULER_RE = re.compile(
    r"^ {0,3}(?:-\s*-\s*-(?:\s*-)*|\*\s*\*\s*\*(?:\s*\*)*|_\s*_\s*_(?:\s*_)*)\s*$"
)
LIST_ITEM_RE = re.compile(r"^ {0,3}([*+-]|[1-9][0-9]*\.)\s+")
QUOTE_RE = re.compile(r"^ {0,3}>(?: |$)")
QUOTE_MARKER_RE = re.compile(r"^ {0,3}> ?")
INDENT_RE = re.compile(r"^(?:    |\t)")
LINK_DEF_RE = re.compile(r'^( {0,3}\[([^\]]+)\]:\s*)(?:(\S+)(\s+"([^"]+)")?)?')


def strip_indent(line: str) -> str:
    """Remove one level of indentation (four spaces or a tab), if present."""
    match = INDENT_RE.match(line)
    return line[match.end():] if match else line


def is_indented(line: str) -> bool:
    return INDENT_RE.match(line) is not None


def _unwrap_leading_paragraph(item: Element) -> None:
    if item.children and isinstance(item.children[0], Element):
        first = item.children[0]
        if first.tag is Tag.P:
            item.replace_children(first.children + item.children[1:])


class BlockParser:
    """Turns the lines of a stream into block elements.

    Each call to :meth:`read_block` consumes exactly one block (skipping
    definitions and metadata, which only feed the session tables). Nested
    structures such as quotations, list items and footnotes are parsed by
    re-feeding their de-marked lines through a scoped stream.
    """

    def __init__(self, session: ParseSession, stream: LineStream) -> None:
        self.session = session
        self.stream = stream
        self.inline = InlineParser(session)

    @property
    def config(self) -> MarkdownConfig:
        return self.session.config

    def parse(self, context: Element) -> Element:
        """Append every remaining block of the current scope to ``context``."""
        while True:
            block = self.stream.next_block(lambda: self.read_block(context))
            if block is None:
                return context
            context.append(block)

    def read_block(self, context: Element) -> Element | None:
        """Read the next block, or return ``None`` at the end of the scope."""
        while True:
            line = self.stream.next_block_line()
            if line is None:
                return None

            match = LINK_DEF_RE.match(line)
            if match:
                self._read_definition(line, match)
                continue

            first_block = self.session.first_block and self.stream.depth == 0
            if self.stream.depth == 0:
                self.session.first_block = False

            if QUOTE_RE.match(line):
                self.stream.push_line(line)
                return self._parse_scoped(Element(Tag.BLOCKQUOTE), self._read_quotation())

            if is_indented(line):
                self.stream.push_line(line)
                if self.config.technical_style:
                    return self._read_literal_block()
                return self._parse_scoped(Element(Tag.BLOCKQUOTE), self._read_indented())

            if RULER_RE.match(line):
                return Element(Tag.HR)

            match = LIST_ITEM_RE.match(line)
            if match:
                return self._read_list(line, match)

            match = HEADING_RE.match(line)
            if match:
                return self._read_section(match.group(2), len(match.group(1)))

            following = self.stream.next_line()
            if following is not None:
                if SETEXT_RE.match(following):
                    return self._read_section(line.strip(), 1 if following[0] == "=" else 2)
                self.stream.push_line(following)

            if first_block and not self.config.plain_markdown and is_metadata_line(line):
                self.stream.push_line(line)
                harvest_metadata(self._read_paragraph(), self.session)
                continue

            line = line.lstrip(" ")
            self.stream.push_line(line)
            text = self._read_paragraph()
            if line.startswith("<"):
                # Raw markup goes straight into the container, unwrapped.
                scratch = Element(Tag.P)
                self.inline.parse(text, scratch)
                context.extend(scratch.children)
                continue

            paragraph = Element(Tag.P)
            self.inline.parse(text, paragraph)
            return paragraph

    def _parse_scoped(self, container: Element, lines: list[str]) -> Element:
        with self.stream.scoped(lines):
            self.parse(container)
        return container

    def _read_definition(self, line: str, match: re.Match[str]) -> None:
        label = match.group(2)
        if not self.config.plain_markdown and label.startswith("^"):
            self.stream.push_line(line)
            note = Element(Tag.NOTE, {"id": label[1:]})
            self._parse_scoped(note, self._read_footnote())
            self.session.footnotes.append(note)
            logger.debug("Footnote %r collected", label[1:])
            return
        self.session.links.define(
            match.group(3), match.group(5), label, definition=True
        )

    def _read_section(self, title: str, depth: int) -> Element:
        section = Element(Tag.SECT, {"depth": str(depth)})
        simple_title = reduce_identifier(title)
        heading = Element(heading_tag(depth), {"id": simple_title})
        self.session.headers[simple_title] = title
        self.inline.parse(title, heading)
        section.append(heading)

        while True:
            block = self.stream.next_block(lambda: self.read_block(section))
            if block is None:
                break
            if block.tag is Tag.SECT and int(block.get("depth")) <= depth:
                self.stream.push_block(block)
                break
            section.append(block)
        return section

    def _read_list(self, line: str, match: re.Match[str]) -> Element:
        leader = match.group(1)
        numeric = leader[0].isdigit()
        listing = Element(Tag.OL if numeric else Tag.UL)
        tight: bool | None = None

        while True:
            self.stream.push_line(line)
            item = self._parse_scoped(Element(Tag.LI), self._read_list_item())
            listing.append(item)

            line, immediate = self._next_list_item_line(item)
            if line is None:
                break
            if tight is None:
                tight = immediate

            next_leader = LIST_ITEM_RE.match(line).group(1)
            same_kind = numeric == next_leader[0].isdigit() and (
                numeric or next_leader == leader
            )
            if not same_kind or immediate != tight:
                self.stream.push_line(line)
                break

        if tight or len(listing.children) == 1:
            for item in listing.children:
                _unwrap_leading_paragraph(item)
        return listing

    def _next_list_item_line(self, item: Element) -> tuple[str | None, bool]:
        """Find the line starting the next sibling item, if any.

        Indented items met on the way are nested lists and are parsed into
        ``item``. The flag tells whether the sibling followed without a
        blank line.
        """
        blanks = 0
        line = self.stream.next_line()
        while line is not None and is_blank(line):
            blanks += 1
            line = self.stream.next_line()
        if line is None:
            return None, False

        # A ruler can look like a list item.
        if RULER_RE.match(line):
            self.stream.push_line(line)
            return None, False

        original = line
        line = strip_indent(line)
        if not LIST_ITEM_RE.match(line):
            self.stream.push_line(original)
            return None, False

        if line != original:
            self.stream.push_line(original)
            self._parse_scoped(item, self._read_indented())
            return self._next_list_item_line(item)

        return line, blanks == 0

    def _resume_after_blanks(self, blank: str) -> str | None:
        """Skip a run of blank lines inside an indented construct.

        Returns the next line if it is indented, so the construct goes on.
        Otherwise the blank run and the line are pushed back and ``None`` is
        returned.
        """
        saved = [blank]
        line = self.stream.next_line()
        while line is not None and is_blank(line):
            saved.append(line)
            line = self.stream.next_line()
        if line is None:
            return None
        if not is_indented(line):
            saved.append(line)
            for pending in reversed(saved):
                self.stream.push_line(pending)
            return None
        return line

    def _read_list_item(self) -> list[str]:
        line = self.stream.next_line()
        match = LIST_ITEM_RE.match(line)
        lines = [line[match.end():]]

        line = self.stream.next_line()
        while line is not None:
            if is_blank(line):
                line = self._resume_after_blanks(line)
                if line is None:
                    break
                lines.append("")

            original = line
            line = strip_indent(line)
            # Another list item ends this one, indented or not.
            if LIST_ITEM_RE.match(line):
                self.stream.push_line(original)
                break
            lines.append(line)
            line = self.stream.next_line()
        return lines

    def _read_footnote(self) -> list[str]:
        line = self.stream.next_line()
        match = LINK_DEF_RE.match(line)
        lines = [line[match.end(1):]]

        line = self.stream.next_line()
        while line is not None:
            if is_blank(line):
                line = self._resume_after_blanks(line)
                if line is None:
                    break
                lines.append("")

            if LINK_DEF_RE.match(line):
                self.stream.push_line(line)
                break
            lines.append(strip_indent(line))
            line = self.stream.next_line()
        return lines

    def _read_quotation(self) -> list[str]:
        lines: list[str] = []
        line = self.stream.next_line()
        while line is not None:
            if is_blank(line):
                self.stream.push_line(line)
                break
            match = QUOTE_MARKER_RE.match(line)
            lines.append(line[match.end():] if match else line)
            line = self.stream.next_line()
        return lines

    def _read_indented(self) -> list[str]:
        lines: list[str] = []
        line = self.stream.next_line()
        while line is not None:
            if is_blank(line) or not is_indented(line):
                self.stream.push_line(line)
                break
            lines.append(strip_indent(line))
            line = self.stream.next_line()
        return lines

    def _read_literal_block(self) -> Element:
        lines: list[str] = []
        line = self.stream.next_line()
        while line is not None:
            if is_blank(line):
                line = self._resume_after_blanks(line)
                if line is None:
                    break
                lines.append("")
            elif not is_indented(line):
                self.stream.push_line(line)
                break
            lines.append(expand_tabs(strip_indent(line)))
            line = self.stream.next_line()

        code = Element(Tag.CODE, children=["".join(f"{text}\n" for text in lines)])
        return Element(Tag.PRE, children=[code])

    def _read_paragraph(self) -> str:
        lines: list[str] = []
        line = self.stream.next_line()
        while line is not None:
            if is_blank(line):
                self.stream.push_line(line)
                break
            lines.append(line)
            line = self.stream.next_line()
        return "\n".join(lines)
