"""Custom exceptions for md2xhtml."""


class Md2xhtmlError(Exception):
    """Base exception for md2xhtml operations."""


class MetadataValueError(Md2xhtmlError):
    """A document metadata value could not be interpreted."""


class TreeInvariantError(Md2xhtmlError):
    """The markup tree violates a structural invariant.

    Raised by the renderer when it meets a node the parser should never have
    produced. This signals a parser defect, not a problem with the input.
    """
