"""
Tokenizer for the Azalea language.

Converts source text into a flat sequence of typed tokens. Comments are
stripped, keywords are recognised by exact (case-insensitive) membership in
the synonym table, and characters that fit no token class are dropped.
"""

from __future__ import annotations

import logging
import re
from enum import StrEnum, auto
from typing import NamedTuple

from azalea.core.errors import AzaleaLexError, make_context
from azalea.core.keywords import KEYWORDS

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    """Token classes produced by the tokenizer."""

    KEYWORD = auto()
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()
    SYMBOL = auto()
    END = auto()


class Position(NamedTuple):
    """Start of a token in the source."""

    offset: int
    line: int
    column: int


class Token:
    """A single token from the tokenizer."""

    __slots__ = ("kind", "lexeme", "pos", "end")

    def __init__(self, kind: TokenKind, lexeme: str, pos: Position, end: int) -> None:
        self.kind = kind
        self.lexeme = lexeme
        self.pos = pos
        self.end = end

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.lexeme!r}, line={self.pos.line}, col={self.pos.column})"

    @property
    def line(self) -> int:
        return self.pos.line

    @property
    def column(self) -> int:
        return self.pos.column


# Number: digit run with at most one decimal point
_NUMBER_RE = re.compile(r"\d+(\.\d+)?")
# Identifier or keyword: letter or underscore, then alphanumerics/underscores
_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_TWO_CHAR_SYMBOLS = frozenset({"==", "!=", "<=", ">=", "&&", "||"})
_SINGLE_CHAR_SYMBOLS = frozenset("(){}[],;:.=+-*/%<>!")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


class _Cursor:
    """Tracks offset, line and column while scanning."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.offset = 0
        self.line = 1
        self.column = 1

    def position(self) -> Position:
        return Position(self.offset, self.line, self.column)

    def advance_to(self, offset: int) -> None:
        """Move forward to ``offset``, counting newlines on the way."""
        chunk = self.source[self.offset : offset]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += len(chunk)
        self.offset = offset


def tokenize(source: str, *, strict: bool = False) -> list[Token]:
    """Tokenize Azalea source into a list of tokens ending with an END token.

    Args:
        source: Program text.
        strict: Raise AzaleaLexError on unrecognised characters instead of
            discarding them.

    Returns:
        Tokens in source order.
    """
    tokens: list[Token] = []
    cur = _Cursor(source)
    n = len(source)

    while cur.offset < n:
        i = cur.offset
        c = source[i]

        if c.isspace():
            cur.advance_to(i + 1)
            continue

        # Comments
        if source.startswith("//", i):
            newline = source.find("\n", i)
            cur.advance_to(n if newline == -1 else newline)
            continue
        if source.startswith("/*", i):
            close = source.find("*/", i + 2)
            cur.advance_to(n if close == -1 else close + 2)
            continue

        start = cur.position()

        if c.isascii() and c.isdigit():
            m = _NUMBER_RE.match(source, i)
            assert m is not None
            tokens.append(Token(TokenKind.NUMBER, m.group(0), start, m.end()))
            cur.advance_to(m.end())
            continue

        if c in ('"', "'"):
            end, text = _read_string(source, i)
            tokens.append(Token(TokenKind.STRING, text, start, end))
            cur.advance_to(end)
            continue

        m = _WORD_RE.match(source, i)
        if m is not None:
            word = m.group(0)
            kind = TokenKind.KEYWORD if word.lower() in KEYWORDS else TokenKind.IDENTIFIER
            tokens.append(Token(kind, word, start, m.end()))
            cur.advance_to(m.end())
            continue

        two = source[i : i + 2]
        if two in _TWO_CHAR_SYMBOLS:
            tokens.append(Token(TokenKind.SYMBOL, two, start, i + 2))
            cur.advance_to(i + 2)
            continue

        if c in _SINGLE_CHAR_SYMBOLS:
            tokens.append(Token(TokenKind.SYMBOL, c, start, i + 1))
            cur.advance_to(i + 1)
            continue

        if strict:
            raise AzaleaLexError(
                f"Unexpected character: {c!r}",
                make_context(start.line, start.column, source),
            )
        logger.debug("Discarding character %r at %d:%d", c, start.line, start.column)
        cur.advance_to(i + 1)

    tokens.append(Token(TokenKind.END, "", cur.position(), n))
    return tokens


def _read_string(source: str, start: int) -> tuple[int, str]:
    """Read a quoted string literal; an unterminated one runs to end of input."""
    quote = source[start]
    i = start + 1
    n = len(source)
    chars: list[str] = []

    while i < n:
        c = source[i]
        if c == "\\" and i + 1 < n:
            escaped = source[i + 1]
            chars.append(_ESCAPES.get(escaped, escaped))
            i += 2
            continue
        if c == quote:
            return i + 1, "".join(chars)
        chars.append(c)
        i += 1

    return n, "".join(chars)
