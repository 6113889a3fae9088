"""Shared schemas for md2xhtml."""

from md2xhtml.schemas.config import DashStyle, MarkdownConfig
from md2xhtml.schemas.links import LinkRecord

__all__ = ["DashStyle", "LinkRecord", "MarkdownConfig"]
