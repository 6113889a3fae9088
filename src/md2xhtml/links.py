"""Link table shared by link definitions and link references."""

from __future__ import annotations

import logging
from typing import Iterator

from md2xhtml.schemas import LinkRecord

logger = logging.getLogger(__name__)


def reduce_identifier(text: str) -> str:
    """Normalize a link label or heading title into a lookup key.

    Keeps letters, digits and ``: _ - #``, lower-cased; everything else is
    dropped.
    """
    return "".join(
        char.lower()
        for char in text
        if char.isalpha() or char.isdigit() or char in ":_-#"
    )


class LinkTable:
    """Link records keyed by reduced identifier, in first-seen order."""

    def __init__(self) -> None:
        self._records: dict[str, LinkRecord] = {}
        self._anonymous = 0

    def define(
        self,
        url: str | None = None,
        title: str | None = None,
        ident: str | None = None,
        *,
        definition: bool,
        image: bool = False,
    ) -> LinkRecord:
        """Create or update the record for ``ident``.

        Args:
            url: Target URL; surrounding angle brackets are removed.
            title: Optional link title.
            ident: Identifier as written. Inline links pass ``None`` and get a
                synthetic ``#N`` identifier.
            definition: True when this call carries a URL for the record
                (a definition line or an inline link).
            image: True when referenced through ``![...]``.

        Returns:
            The record, shared by every reference to the same identifier.
        """
        if url and url.startswith("<") and url.endswith(">"):
            url = url[1:-1]

        anonymous = not ident
        if anonymous:
            ident = key = f"#{self._anonymous}"
            self._anonymous += 1
        else:
            key = reduce_identifier(ident)

        record = self._records.get(key)
        if record is None:
            record = LinkRecord(id=key, ident=ident, is_anonymous=anonymous)
            self._records[key] = record
        elif definition or not record.is_defined:
            record.ident = ident

        if url:
            record.url = url
        if title:
            record.title = title
        if image:
            record.is_image = True
        if definition:
            record.is_defined = True
            logger.debug("Link %r defined as %s", key, record.url)
        return record

    def get(self, key: str) -> LinkRecord | None:
        return self._records.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __getitem__(self, key: str) -> LinkRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[LinkRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)
