"""Local configuration for md2xhtml."""

from __future__ import annotations

import os


DEFAULT_USE_SMARTYPANTS = False
DEFAULT_TECHNICAL_STYLE = False
DEFAULT_USE_WIKILINKS = False
DEFAULT_WIKILINK_FORMAT = "{0}"
DEFAULT_DASHES_STYLE = "double_emdash_triple_endash"
DEFAULT_SPACES_AROUND_DASHES = True
DEFAULT_USE_CLASSES = True

TAB_WIDTH = 4

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
XHTML_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" '
    '"http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">'
)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


MD2XHTML_USE_SMARTYPANTS = _env_flag("MD2XHTML_USE_SMARTYPANTS", DEFAULT_USE_SMARTYPANTS)
MD2XHTML_TECHNICAL_STYLE = _env_flag("MD2XHTML_TECHNICAL_STYLE", DEFAULT_TECHNICAL_STYLE)
MD2XHTML_USE_WIKILINKS = _env_flag("MD2XHTML_USE_WIKILINKS", DEFAULT_USE_WIKILINKS)
MD2XHTML_WIKILINK_FORMAT = os.getenv("MD2XHTML_WIKILINK_FORMAT", DEFAULT_WIKILINK_FORMAT)
MD2XHTML_DASHES_STYLE = os.getenv("MD2XHTML_DASHES_STYLE", DEFAULT_DASHES_STYLE)
MD2XHTML_SPACES_AROUND_DASHES = _env_flag(
    "MD2XHTML_SPACES_AROUND_DASHES", DEFAULT_SPACES_AROUND_DASHES
)
MD2XHTML_USE_CLASSES = _env_flag("MD2XHTML_USE_CLASSES", DEFAULT_USE_CLASSES)
