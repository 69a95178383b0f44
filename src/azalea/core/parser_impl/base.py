"""
Base parser class for Azalea.

Provides token navigation, canonical-keyword matching and the named
recovery paths shared by all parser mixins.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..capabilities import Capabilities
from ..errors import AzaleaSyntaxError, make_context
from ..keywords import STATEMENT_KEYWORDS, Canonical, normalize
from ..tokenizer import Position, Token, TokenKind

if TYPE_CHECKING:
    from ..ir import Node

logger = logging.getLogger(__name__)


class RecoveryKind(StrEnum):
    """Lenient recovery paths the parser may take on malformed input."""

    MISSING_BLOCK_OPEN = "missing_block_open"
    MISSING_ASSIGN_OP = "missing_assign_op"
    UNCLOSED_BLOCK = "unclosed_block"
    UNEXPECTED_TOKEN = "unexpected_token"
    STRAY_DELIMITER = "stray_delimiter"
    MISSING_NAME = "missing_name"
    MISSING_CLOSE_PAREN = "missing_close_paren"


@dataclass(frozen=True)
class Recovery:
    """A recovery path taken while parsing."""

    kind: RecoveryKind
    message: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column} {self.kind}: {self.message}"


# Symbols that always end an expression or an argument list
_BOUNDARY_SYMBOLS = frozenset({";", ",", ")", "]", "}", ":"})

# Canonical forms that end an expression besides the statement keywords
_BOUNDARY_KEYWORDS = STATEMENT_KEYWORDS | {
    Canonical.BLOCK_OPEN,
    Canonical.BLOCK_CLOSE,
    Canonical.ELSE,
    Canonical.ELIF,
    Canonical.IN,
    Canonical.ASSIGN_OP,
    Canonical.BIND,
}

# Keyword tokens that may still begin an expression
_EXPRESSION_KEYWORDS = frozenset(
    {
        Canonical.TRUE,
        Canonical.FALSE,
        Canonical.VOID,
        Canonical.NOT,
        Canonical.SUB,
        Canonical.CALL,
        Canonical.TYPE,
    }
)

_EXPRESSION_SYMBOLS = frozenset({"(", "[", "-", "!"})

# Keywords usable as a name (e.g. a variable called "list")
NAMEABLE_KEYWORDS = frozenset({Canonical.TYPE})


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    Lets mypy see BaseParser and cross-mixin methods from inside each mixin.
    """

    tokens: list[Token]
    pos: int
    capabilities: Capabilities
    strict: bool
    recoveries: list[Recovery]

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def previous_token(self) -> Token: ...
    def advance(self) -> Token: ...
    def canonical(self, token: Token | None = None) -> Canonical | None: ...
    def at(self, *canonicals: Canonical) -> bool: ...
    def match(self, *canonicals: Canonical) -> bool: ...
    def at_symbol(self, *symbols: str) -> bool: ...
    def match_symbol(self, *symbols: str) -> bool: ...
    def at_end(self) -> bool: ...
    def at_boundary(self, token: Token | None = None) -> bool: ...
    def can_start_expression(self, token: Token | None = None) -> bool: ...
    def is_name_token(self, token: Token | None = None) -> bool: ...
    def recover(self, kind: RecoveryKind, message: str, token: Token | None = None) -> None: ...

    # Methods from other mixins that may be called cross-mixin
    def parse_expression(self, min_precedence: int = 1) -> "Node": ...
    def parse_statement(self) -> "Node | None": ...
    def parse_statements(self) -> "list[Node]": ...
    def parse_block(self, *, stop_at_else: bool = False) -> "tuple[Node, str]": ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    Branching is always done on the canonical form of a keyword or symbol
    token, never on its spelling.
    """

    def __init__(
        self,
        tokens: list[Token],
        capabilities: Capabilities | None = None,
        *,
        strict: bool = False,
        source: str | None = None,
        source_name: str | None = None,
    ):
        """
        Initialize parser.

        Args:
            tokens: Tokens from the tokenizer
            capabilities: Module/element whitelist for implicit calls
            strict: Raise AzaleaSyntaxError instead of recovering
            source: Original text, used for error snippets
            source_name: File name for error messages
        """
        if not tokens or tokens[-1].kind != TokenKind.END:
            end = tokens[-1].end if tokens else 0
            last = tokens[-1].pos if tokens else Position(0, 1, 1)
            tokens = [*tokens, Token(TokenKind.END, "", last, end)]
        self.tokens = tokens
        self.pos = 0
        self.capabilities = capabilities or Capabilities()
        self.strict = strict
        self.source = source
        self.source_name = source_name
        self.recoveries: list[Recovery] = []

    # -- Navigation --

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def previous_token(self) -> Token:
        return self.tokens[max(self.pos - 1, 0)]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.kind != TokenKind.END:
            self.pos += 1
        return token

    # -- Matching --

    def canonical(self, token: Token | None = None) -> Canonical | None:
        """Canonical form of a keyword or symbol token (None for others)."""
        token = token or self.current_token()
        if token.kind in (TokenKind.KEYWORD, TokenKind.SYMBOL):
            return normalize(token.lexeme)
        return None

    def at(self, *canonicals: Canonical) -> bool:
        return self.canonical() in canonicals

    def match(self, *canonicals: Canonical) -> bool:
        """Consume the current token if its canonical form is one of ``canonicals``."""
        if self.at(*canonicals):
            self.advance()
            return True
        return False

    def at_symbol(self, *symbols: str) -> bool:
        token = self.current_token()
        return token.kind == TokenKind.SYMBOL and token.lexeme in symbols

    def match_symbol(self, *symbols: str) -> bool:
        if self.at_symbol(*symbols):
            self.advance()
            return True
        return False

    def at_end(self) -> bool:
        return self.current_token().kind == TokenKind.END

    def at_boundary(self, token: Token | None = None) -> bool:
        """True if ``token`` ends an expression or a space-separated argument list."""
        token = token or self.current_token()
        if token.kind == TokenKind.END:
            return True
        if token.kind == TokenKind.SYMBOL and token.lexeme in _BOUNDARY_SYMBOLS:
            return True
        return self.canonical(token) in _BOUNDARY_KEYWORDS

    def can_start_expression(self, token: Token | None = None) -> bool:
        """True if ``token`` can begin an expression (``{`` excluded)."""
        token = token or self.current_token()
        match token.kind:
            case TokenKind.NUMBER | TokenKind.STRING | TokenKind.IDENTIFIER:
                return True
            case TokenKind.SYMBOL:
                return token.lexeme in _EXPRESSION_SYMBOLS
            case TokenKind.KEYWORD:
                return self.canonical(token) in _EXPRESSION_KEYWORDS
        return False

    def is_name_token(self, token: Token | None = None) -> bool:
        """Identifiers, plus keywords that double as names."""
        token = token or self.current_token()
        if token.kind == TokenKind.IDENTIFIER:
            return True
        return token.kind == TokenKind.KEYWORD and self.canonical(token) in NAMEABLE_KEYWORDS

    # -- Recovery --

    def recover(self, kind: RecoveryKind, message: str, token: Token | None = None) -> None:
        """
        Take a named recovery path.

        Records the recovery and logs it; in strict mode raises instead.

        Raises:
            AzaleaSyntaxError: In strict mode
        """
        token = token or self.current_token()
        if self.strict:
            raise AzaleaSyntaxError(
                message,
                make_context(token.line, token.column, self.source, self.source_name),
            )
        recovery = Recovery(kind, message, token.line, token.column)
        logger.debug("Parser recovery %s", recovery)
        self.recoveries.append(recovery)
