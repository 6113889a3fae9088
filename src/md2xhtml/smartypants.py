"""Typographic punctuation for inline fragments.

Straight quotes become curly ones, runs of hyphens become dashes, three
dots become an ellipsis, and sentence ends get a wider space. The pass
tokenizes the text leaves of a fragment, keeps element children as opaque
referral tokens, and rebuilds the child list in one step.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from md2xhtml.schemas import DashStyle, MarkdownConfig
from md2xhtml.tree import Element, Node, Tag

# Content of these elements is never rewritten.
OPAQUE_TAGS = frozenset(
    {Tag.CODE, Tag.PRE, Tag.WIKILINK, Tag.EMAIL, Tag.HLINK, Tag.FNREF}
)

CAMEL_CASE_RE = re.compile(r"^[A-Z][a-z]+[A-Z][a-z]+$")
SENTENCE_START_RE = re.compile(r"^[A-Z0-9]")
ABBREVIATION_RE = re.compile(r"(^|\s)(pp?|Drs?|Mrs?|Ms)\.$")


class TokenKind(Enum):
    BACKSLASH = auto()
    SINGLE_DASH = auto()
    DOUBLE_DASH = auto()
    TRIPLE_DASH = auto()
    ELLIPSIS = auto()
    WHITESPACE = auto()
    DOUBLE_QUOTE = auto()
    SINGLE_QUOTE = auto()
    OPEN_DOUBLE_QUOTE = auto()
    CLOSE_DOUBLE_QUOTE = auto()
    BACKQUOTE = auto()
    QUESTION = auto()
    EXCLAMATION = auto()
    COMMA = auto()
    PERIOD = auto()
    SEMICOLON = auto()
    COLON = auto()
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()
    TEXT = auto()
    REFERRAL = auto()


_PUNCTUATION = {
    "?": TokenKind.QUESTION,
    "!": TokenKind.EXCLAMATION,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    ":": TokenKind.COLON,
    "(": TokenKind.OPEN_PAREN,
    ")": TokenKind.CLOSE_PAREN,
}
_DASHES = {1: TokenKind.SINGLE_DASH, 2: TokenKind.DOUBLE_DASH, 3: TokenKind.TRIPLE_DASH}
_SPECIAL_CHARS = frozenset("\\-.\"'`") | frozenset(_PUNCTUATION)

_SENTENCE_TERMINATORS = frozenset(
    {TokenKind.QUESTION, TokenKind.EXCLAMATION, TokenKind.CLOSE_PAREN, TokenKind.PERIOD}
)
_PLAIN_PUNCTUATION = frozenset(
    {
        TokenKind.SINGLE_DASH,
        TokenKind.COMMA,
        TokenKind.SEMICOLON,
        TokenKind.COLON,
        TokenKind.OPEN_PAREN,
        TokenKind.BACKQUOTE,
    }
)
_OPENING_QUOTES = frozenset(
    {TokenKind.DOUBLE_QUOTE, TokenKind.SINGLE_QUOTE, TokenKind.OPEN_DOUBLE_QUOTE}
)
_LONG_DASHES = frozenset({TokenKind.DOUBLE_DASH, TokenKind.TRIPLE_DASH})
_CLOSES_SINGLE_QUOTE = frozenset(
    {
        TokenKind.QUESTION,
        TokenKind.EXCLAMATION,
        TokenKind.COMMA,
        TokenKind.PERIOD,
        TokenKind.SEMICOLON,
        TokenKind.COLON,
        TokenKind.CLOSE_PAREN,
        TokenKind.WHITESPACE,
    }
)
_CLOSES_DOUBLE_QUOTE = _CLOSES_SINGLE_QUOTE | {
    TokenKind.SINGLE_QUOTE,
    TokenKind.SINGLE_DASH,
    TokenKind.DOUBLE_DASH,
    TokenKind.TRIPLE_DASH,
    TokenKind.ELLIPSIS,
    TokenKind.REFERRAL,
}
_ENDS_QUOTED_SENTENCE = frozenset(
    {TokenKind.QUESTION, TokenKind.EXCLAMATION, TokenKind.ELLIPSIS, TokenKind.PERIOD}
)


@dataclass
class Token:
    kind: TokenKind
    text: str = ""
    node: Node | None = None


def tokenize_text(text: str) -> list[Token]:
    """Split a text leaf into typographic tokens."""
    tokens: list[Token] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        start = index
        if char == "\\":
            kind = TokenKind.BACKSLASH
            index += 1
        elif char == "-":
            while index < length and text[index] == "-" and index - start < 3:
                index += 1
            kind = _DASHES[index - start]
        elif char == ".":
            if text.startswith("...", index):
                kind = TokenKind.ELLIPSIS
                index += 3
            elif text.startswith(". . .", index):
                kind = TokenKind.ELLIPSIS
                index += 5
            else:
                kind = TokenKind.PERIOD
                index += 1
        elif char == '"':
            kind = TokenKind.DOUBLE_QUOTE
            index += 1
        elif char == "'":
            if text.startswith("''", index):
                kind = TokenKind.CLOSE_DOUBLE_QUOTE
                index += 2
            else:
                kind = TokenKind.SINGLE_QUOTE
                index += 1
        elif char == "`":
            if text.startswith("``", index):
                kind = TokenKind.OPEN_DOUBLE_QUOTE
                index += 2
            else:
                kind = TokenKind.BACKQUOTE
                index += 1
        elif char in _PUNCTUATION:
            kind = _PUNCTUATION[char]
            index += 1
        elif char.isspace():
            kind = TokenKind.WHITESPACE
            while index < length and text[index].isspace():
                index += 1
        else:
            kind = TokenKind.TEXT
            while (
                index < length
                and text[index] not in _SPECIAL_CHARS
                and not text[index].isspace()
            ):
                index += 1
        tokens.append(Token(kind, text[start:index]))
    return tokens


def tokenize(children: list[Node]) -> list[Token]:
    """Tokenize a child list; non-text children become referral tokens."""
    tokens: list[Token] = []
    for child in children:
        if isinstance(child, str):
            tokens.extend(tokenize_text(child))
        else:
            tokens.append(Token(TokenKind.REFERRAL, node=child))
    return tokens


def dash_tag(kind: TokenKind, style: DashStyle) -> Tag:
    """Return the dash element for a double or triple hyphen run."""
    if style is DashStyle.DOUBLE_EMDASH_NO_ENDASH:
        return Tag.EMDASH
    if style is DashStyle.TRIPLE_EMDASH_DOUBLE_ENDASH:
        return Tag.EMDASH if kind is TokenKind.TRIPLE_DASH else Tag.ENDASH
    return Tag.EMDASH if kind is TokenKind.DOUBLE_DASH else Tag.ENDASH


def transform(element: Element, config: MarkdownConfig) -> Element:
    """Rewrite the punctuation below ``element`` in place.

    Args:
        element: Inline fragment, typically a paragraph or heading.
        config: Supplies the dash policy and wikilink mode.

    Returns:
        The same element, for chaining.
    """
    for child in element.children:
        if isinstance(child, Element) and child.tag not in OPAQUE_TAGS:
            transform(child, config)
    tokens = tokenize(element.children)
    element.replace_children(_Rebuilder(tokens, config).run())
    return element


class _Rebuilder:
    """Turns a token list back into children, applying the rules."""

    def __init__(self, tokens: list[Token], config: MarkdownConfig) -> None:
        self.tokens = tokens
        self.config = config
        self.children: list[Node] = []
        self.text: list[str] = []
        self.index = 0
        self.last: Token | None = None

    def peek(self, offset: int = 1) -> Token | None:
        index = self.index + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def flush(self) -> None:
        if self.text:
            self.children.append("".join(self.text))
            self.text = []

    def emit(self, node: Node) -> None:
        self.flush()
        self.children.append(node)

    def emit_tag(self, tag: Tag) -> None:
        self.emit(Element(tag))

    def run(self) -> list[Node]:
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.last = self.step(token)
            self.index += 1
        self.flush()
        return self.children

    def step(self, token: Token) -> Token:
        """Handle ``token`` and return what counts as the previous token."""
        kind = token.kind
        following = self.peek()

        if kind is TokenKind.BACKSLASH:
            if following is None:
                self.text.append(token.text)
                return token
            self.index += 1
            if following.kind is TokenKind.REFERRAL:
                self.emit(following.node)
            else:
                self.text.append(following.text)
            return following

        if kind in _LONG_DASHES:
            self.emit_tag(dash_tag(kind, self.config.dashes_style))
            if (
                self.config.spaces_around_dashes
                and following is not None
                and following.kind is TokenKind.WHITESPACE
            ):
                self.index += 1
                return following
            return token

        if kind is TokenKind.WHITESPACE:
            if (
                self.config.spaces_around_dashes
                and following is not None
                and following.kind in _LONG_DASHES
            ):
                return token
            self.text.append(token.text)
            return token

        if kind is TokenKind.ELLIPSIS:
            self.emit_tag(Tag.ELLIPSIS)
            return self.sentence_end(token)

        if kind in _SENTENCE_TERMINATORS:
            self.text.append(token.text)
            return self.sentence_end(token)

        if kind in _PLAIN_PUNCTUATION:
            self.text.append(token.text)
            return token

        if kind is TokenKind.OPEN_DOUBLE_QUOTE:
            self.emit_tag(Tag.LDQ)
            return token

        if kind is TokenKind.CLOSE_DOUBLE_QUOTE:
            self.emit_tag(Tag.RDQ)
            return self.sentence_end(token)

        if kind is TokenKind.DOUBLE_QUOTE:
            return self.double_quote(token, following)

        if kind is TokenKind.SINGLE_QUOTE:
            return self.single_quote(token, following)

        if kind is TokenKind.REFERRAL:
            self.emit(token.node)
            return token

        if self.config.use_wikilinks and CAMEL_CASE_RE.match(token.text):
            self.emit(Element(Tag.WIKILINK, children=[token.text]))
        else:
            self.text.append(token.text)
        return token

    def opens_quote(self) -> bool:
        return self.last is None or self.last.kind is TokenKind.WHITESPACE

    def double_quote(self, token: Token, following: Token | None) -> Token:
        if self.opens_quote():
            self.emit_tag(Tag.LDQ)
            return token
        if (
            self.last.kind in _ENDS_QUOTED_SENTENCE
            or following is None
            or following.kind in _CLOSES_DOUBLE_QUOTE
        ):
            self.emit_tag(Tag.RDQ)
            return self.sentence_end(token)
        self.text.append(token.text)
        return token

    def single_quote(self, token: Token, following: Token | None) -> Token:
        if self.opens_quote():
            self.emit_tag(Tag.LSQ)
            return token
        if following is None or following.kind in _CLOSES_SINGLE_QUOTE:
            self.emit_tag(Tag.RSQ)
            return self.sentence_end(token)
        # Apostrophe inside a word.
        self.text.append(token.text)
        return token

    def sentence_end(self, token: Token) -> Token:
        """Widen the space after a sentence terminator.

        Returns the token the next step should see as its predecessor.
        """
        space = self.peek()
        if space is None or space.kind is not TokenKind.WHITESPACE:
            return token

        start = self.peek(2)
        if start is None:
            # Trailing whitespace at the end of the fragment.
            self.index += 1
            return space

        abbreviated = ABBREVIATION_RE.search("".join(self.text)) is not None
        if start.kind in _OPENING_QUOTES or (
            start.kind is TokenKind.TEXT
            and SENTENCE_START_RE.match(start.text)
            and not abbreviated
        ):
            self.emit_tag(Tag.EOS)
            self.index += 1
            return space
        return token
