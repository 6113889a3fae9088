"""Buffered line source with pushback and scoped sub-streams."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from md2xhtml.config import TAB_WIDTH
from md2xhtml.tree import Element


def expand_tabs(text: str, tab_width: int = TAB_WIDTH) -> str:
    """Expand tabs to the next ``tab_width`` column stop."""
    out: list[str] = []
    column = 0
    for char in text:
        if char == "\t":
            pad = tab_width - column % tab_width
            out.append(" " * pad)
            column += pad
        elif char == "\n":
            out.append(char)
            column = 0
        else:
            out.append(char)
            column += 1
    return "".join(out)


def is_blank(line: str) -> bool:
    return not line.strip()


class LineStream:
    """Line reader for the block parser.

    Lines come from a stack of buffers. The bottom buffer is backed by the
    input document; every nested buffer is finite, and its end reads as the
    end of input until the scope that created it is left.
    """

    def __init__(self, text: str) -> None:
        self._source: Iterator[str] = iter(text.splitlines())
        self._buffers: list[list[str]] = [[]]
        self._blocks: list[Element] = []

    @property
    def depth(self) -> int:
        """Number of nested scopes currently open."""
        return len(self._buffers) - 1

    def next_line(self) -> str | None:
        buffer = self._buffers[-1]
        if buffer:
            return buffer.pop()
        if len(self._buffers) > 1:
            return None
        return next(self._source, None)

    def push_line(self, line: str) -> None:
        self._buffers[-1].append(line)

    def next_block_line(self) -> str | None:
        line = self.next_line()
        while line is not None and is_blank(line):
            line = self.next_line()
        return line

    @contextmanager
    def scoped(self, lines: Iterable[str]) -> Iterator[LineStream]:
        """Restrict reading to ``lines`` for the duration of the block."""
        self._buffers.append(list(reversed(list(lines))))
        try:
            yield self
        finally:
            self._buffers.pop()

    def next_block(self, read: Callable[[], Element | None]) -> Element | None:
        """Return a pushed-back block, or read a fresh one with ``read``."""
        if self._blocks:
            return self._blocks.pop()
        return read()

    def push_block(self, block: Element) -> None:
        self._blocks.append(block)
