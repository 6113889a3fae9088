"""Link table record model."""

from __future__ import annotations

from pydantic import BaseModel


class LinkRecord(BaseModel):
    """One entry of the link table.

    ``id`` is the reduced lookup key; ``ident`` is the identifier as last
    written in the source. A record only becomes ``is_defined`` once a
    definition or an inline URL has been seen for it. Inline links get an
    ``is_anonymous`` record under a synthetic ``#N`` key.
    """

    id: str
    ident: str
    url: str | None = None
    title: str | None = None
    text: str | None = None
    is_image: bool = False
    is_defined: bool = False
    is_anonymous: bool = False
