"""Document metadata harvested from the first block."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import TYPE_CHECKING

from md2xhtml.exceptions import MetadataValueError

if TYPE_CHECKING:
    from md2xhtml.document import ParseSession

logger = logging.getLogger(__name__)

METADATA_RE = re.compile(r"^([A-Za-z0-9 _/-]+):\s+")

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def parse_bool(value: str) -> bool:
    """Interpret a metadata flag such as ``true`` or ``no``."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise MetadataValueError(f"Not a boolean value: {value!r}")


def parse_date(value: str) -> date:
    """Parse a metadata date in one of the accepted formats."""
    text = value.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise MetadataValueError(f"Unrecognized date: {value!r}")


def is_metadata_line(line: str) -> bool:
    return METADATA_RE.match(line) is not None


def harvest_metadata(text: str, session: ParseSession) -> None:
    """Register every ``Key: value`` entry of a metadata block.

    Lines that do not start a new key continue the value of the current
    key, joined with a newline.
    """
    current_key: str | None = None
    current_value: list[str] = []
    for raw in text.split("\n"):
        line = raw.rstrip()
        match = METADATA_RE.match(line)
        if match:
            if current_key is not None:
                set_metadata(session, current_key, "".join(current_value))
            current_key = match.group(1)
            current_value = [line[match.end():]]
        else:
            current_value.append("\n" + line)
    if current_key is not None:
        set_metadata(session, current_key, "".join(current_value))


def set_metadata(session: ParseSession, key: str, value: str) -> None:
    """Store one metadata entry and apply its configuration side effects.

    A value that cannot be interpreted is reported to the session
    diagnostics and the entry is left out.
    """
    config = session.config
    try:
        if key == "Date":
            session.metadata[key] = parse_date(value)
            return
        if key == "Use WikiLinks":
            enabled = parse_bool(value)
            session.metadata[key] = enabled
            # CamelCase detection happens in the typographic pass.
            config.use_smartypants = True
            config.use_wikilinks = enabled
            return
    except MetadataValueError as exc:
        session.report(f"Ignoring metadata field {key!r}: {exc}")
        return

    session.metadata[key] = value
    if key == "Style":
        if value.strip() == "technical":
            config.technical_style = True
    elif key == "Base Url":
        config.wikilink_format = value.strip()
    logger.debug("Metadata %r registered", key)
