"""
Block parsing for Azalea.

A block body is located by a depth-counted scan: after the opener the depth
is 1, every block opener increments it, every block closer decrements it,
and the body ends where the depth returns to 0. A word opener directly
followed by ``{`` (``then {``, ``do {``) counts as one opener. The body
tokens are then handed to a fresh sub-parser. In the shared-close
conditional form (``if c then A else B end``) an ``else``/``elif`` at depth 1
also ends the body.
"""

from enum import StrEnum
from typing import TYPE_CHECKING, Any, NamedTuple

from .. import ir
from ..keywords import Canonical
from ..tokenizer import Token, TokenKind
from .base import RecoveryKind


class BlockCloser(StrEnum):
    """What ended a block body."""

    CLOSE = "close"
    ELSE = "else"
    EOF = "eof"


class BlockExtent(NamedTuple):
    """Index of the token that ended a body, and its kind."""

    end: int
    closer: BlockCloser


class BlockParserMixin:
    """
    Mixin providing block parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        tokens: list[Token]
        pos: int
        capabilities: Any
        strict: bool
        source: str | None
        source_name: str | None
        recoveries: list[Any]
        advance: Any
        canonical: Any
        at_symbol: Any
        recover: Any

    def scan_block(self, start: int, *, stop_at_else: bool = False) -> BlockExtent:
        """Find the end of a block body that starts at token index ``start``."""
        depth = 1
        for index in range(start, len(self.tokens)):
            token = self.tokens[index]
            if token.kind == TokenKind.END:
                return BlockExtent(index, BlockCloser.EOF)
            canon = self.canonical(token)
            if canon == Canonical.BLOCK_OPEN:
                if not (index > start and self._follows_word_opener(index)):
                    depth += 1
            elif canon == Canonical.BLOCK_CLOSE:
                depth -= 1
                if depth == 0:
                    return BlockExtent(index, BlockCloser.CLOSE)
            elif stop_at_else and depth == 1 and canon in (Canonical.ELSE, Canonical.ELIF):
                return BlockExtent(index, BlockCloser.ELSE)
        return BlockExtent(len(self.tokens) - 1, BlockCloser.EOF)

    def _follows_word_opener(self, index: int) -> bool:
        """A ``{`` right after a word opener (``then {``) belongs to that opener."""
        token, previous = self.tokens[index], self.tokens[index - 1]
        return (
            token.kind == TokenKind.SYMBOL
            and token.lexeme == "{"
            and previous.kind == TokenKind.KEYWORD
            and self.canonical(previous) == Canonical.BLOCK_OPEN
        )

    def parse_block(self, *, stop_at_else: bool = False) -> tuple[ir.Node, BlockCloser]:
        """
        Parse ``opener body closer`` starting at a block opener.

        A word opener directly followed by ``{`` (``then {``) counts once.

        Returns:
            The block node and what ended it
        """
        opener = self.advance()
        if opener.kind == TokenKind.KEYWORD and self.at_symbol("{"):
            self.advance()
        return self.parse_block_body(opener, stop_at_else=stop_at_else)

    def parse_block_body(
        self, opener: Token, *, stop_at_else: bool = False
    ) -> tuple[ir.Node, BlockCloser]:
        """Parse a body whose opener has already been consumed."""
        start = self.pos
        extent = self.scan_block(start, stop_at_else=stop_at_else)
        statements = self.sub_parse(start, extent.end)

        match extent.closer:
            case BlockCloser.CLOSE:
                self.pos = extent.end + 1
            case BlockCloser.ELSE:
                self.pos = extent.end
            case BlockCloser.EOF:
                self.pos = extent.end
                self.recover(RecoveryKind.UNCLOSED_BLOCK, "Block not closed before end of input")

        return ir.block(statements, opener.line, opener.column), extent.closer

    def sub_parse(self, start: int, end: int) -> list[ir.Node]:
        """Parse ``tokens[start:end]`` as statements with a fresh parser."""
        boundary = self.tokens[end]
        tail = Token(TokenKind.END, "", boundary.pos, boundary.pos.offset)
        parser = type(self)(  # type: ignore[call-arg]
            [*self.tokens[start:end], tail],
            self.capabilities,
            strict=self.strict,
            source=self.source,
            source_name=self.source_name,
        )
        statements: list[ir.Node] = parser.parse_statements()  # type: ignore[attr-defined]
        self.recoveries.extend(parser.recoveries)  # type: ignore[attr-defined]
        return statements
