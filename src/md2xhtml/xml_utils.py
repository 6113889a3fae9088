"""Shared lxml helpers for building and serializing mixed content."""

from __future__ import annotations

from html import escape

from lxml import etree


def append_text(parent: etree._Element, text: str) -> None:
    """Append character data after the last child of ``parent``."""
    if not text:
        return
    if len(parent):
        last = parent[-1]
        last.tail = (last.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def serialize_fragment(container: etree._Element, *, pretty: bool = False) -> str:
    """Serialize the content of ``container`` without the container itself."""
    parts = [escape(container.text or "", quote=False)]
    for child in container:
        parts.append(
            etree.tostring(child, encoding="unicode", pretty_print=pretty, with_tail=True)
        )
    return "".join(parts)
