"""md2xhtml: convert Markdown-style text to XHTML."""

from md2xhtml.convert import parse_markdown, to_xhtml, to_xhtml_document, to_xml
from md2xhtml.document import MarkdownDocument
from md2xhtml.exceptions import Md2xhtmlError, MetadataValueError, TreeInvariantError
from md2xhtml.schemas import DashStyle, MarkdownConfig
from md2xhtml.xhtml_writer import XhtmlWriter

__all__ = [
    "DashStyle",
    "MarkdownConfig",
    "MarkdownDocument",
    "Md2xhtmlError",
    "MetadataValueError",
    "TreeInvariantError",
    "XhtmlWriter",
    "parse_markdown",
    "to_xhtml",
    "to_xhtml_document",
    "to_xml",
]
