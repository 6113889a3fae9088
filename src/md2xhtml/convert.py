"""Public conversion entry points."""

from __future__ import annotations

from md2xhtml.block_parser import BlockParser
from md2xhtml.config import MD2XHTML_USE_CLASSES
from md2xhtml.document import MarkdownDocument, ParseSession
from md2xhtml.line_stream import LineStream
from md2xhtml.schemas import MarkdownConfig
from md2xhtml.tree import Element, Tag
from md2xhtml.xhtml_writer import XhtmlWriter


def parse_markdown(text: str, config: MarkdownConfig | None = None) -> MarkdownDocument:
    """Parse ``text`` into a markup tree with its side tables.

    Args:
        text: Source document. ``\\r\\n`` and ``\\n`` line endings are accepted.
        config: Parser options. Defaults to :meth:`MarkdownConfig.from_env`.
            The caller's object is never modified; metadata such as
            ``Style: technical`` only affects this parse.

    Returns:
        The parsed document.
    """
    base = config if config is not None else MarkdownConfig.from_env()
    session = ParseSession(config=base.model_copy(deep=True))
    stream = LineStream(text)
    body = BlockParser(session, stream).parse(Element(Tag.BODY))
    return session.finish(body)


def to_xml(text: str, config: MarkdownConfig | None = None, *, pretty: bool = False) -> str:
    """Parse ``text`` and dump the internal markup tree as XML."""
    return parse_markdown(text, config).to_xml(pretty=pretty)


def to_xhtml(
    text: str,
    config: MarkdownConfig | None = None,
    *,
    pretty: bool = False,
    use_classes: bool = MD2XHTML_USE_CLASSES,
) -> str:
    """Convert ``text`` to an XHTML fragment (body content and footnotes)."""
    document = parse_markdown(text, config)
    return XhtmlWriter(document, use_classes=use_classes).write_fragment(pretty=pretty)


def to_xhtml_document(
    text: str,
    config: MarkdownConfig | None = None,
    *,
    pretty: bool = True,
    use_classes: bool = MD2XHTML_USE_CLASSES,
) -> str:
    """Convert ``text`` to a complete XHTML 1.1 document.

    The page title comes from the ``Title`` metadata field, when present.
    """
    document = parse_markdown(text, config)
    return XhtmlWriter(document, use_classes=use_classes).write_document(pretty=pretty)
