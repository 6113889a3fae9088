"""Parser configuration model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from md2xhtml import config as defaults


class DashStyle(str, Enum):
    """How runs of two and three hyphens are typeset."""

    DOUBLE_EMDASH_NO_ENDASH = "double_emdash_no_endash"
    TRIPLE_EMDASH_DOUBLE_ENDASH = "triple_emdash_double_endash"
    DOUBLE_EMDASH_TRIPLE_ENDASH = "double_emdash_triple_endash"


class MarkdownConfig(BaseModel):
    """Options for one parse session.

    Attributes:
        plain_markdown: Disable footnotes, metadata and caret-label handling.
        use_smartypants: Apply the typographic transform to inline text.
        use_wikilinks: Recognise ``[[Page]]`` and CamelCase wikilinks.
        wikilink_format: URL template for wikilinks; ``{0}`` is replaced by
            the link text.
        technical_style: Indented blocks are code rather than quotations.
        dashes_style: Dash typesetting policy.
        spaces_around_dashes: Absorb one space on each side of a dash.
    """

    model_config = ConfigDict(validate_assignment=True)

    plain_markdown: bool = False
    use_smartypants: bool = defaults.DEFAULT_USE_SMARTYPANTS
    use_wikilinks: bool = defaults.DEFAULT_USE_WIKILINKS
    wikilink_format: str = Field(default=defaults.DEFAULT_WIKILINK_FORMAT)
    technical_style: bool = defaults.DEFAULT_TECHNICAL_STYLE
    dashes_style: DashStyle = DashStyle(defaults.DEFAULT_DASHES_STYLE)
    spaces_around_dashes: bool = defaults.DEFAULT_SPACES_AROUND_DASHES

    @classmethod
    def from_env(cls) -> MarkdownConfig:
        """Build a configuration from the ``MD2XHTML_*`` environment values."""
        return cls(
            use_smartypants=defaults.MD2XHTML_USE_SMARTYPANTS,
            use_wikilinks=defaults.MD2XHTML_USE_WIKILINKS,
            wikilink_format=defaults.MD2XHTML_WIKILINK_FORMAT,
            technical_style=defaults.MD2XHTML_TECHNICAL_STYLE,
            dashes_style=defaults.MD2XHTML_DASHES_STYLE,
            spaces_around_dashes=defaults.MD2XHTML_SPACES_AROUND_DASHES,
        )
