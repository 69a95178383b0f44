"""
Azalea Parser Package.

The parser is built from mixins that separate parsing logic by construct
type. It never raises on malformed input unless strict mode is on; every
lenient path is recorded in ``Parser.recoveries``.

Usage:
    from azalea.core.parser_impl import parse_program

    program = parse_program(tokenize(source))
"""

from .. import ir
from ..capabilities import Capabilities
from ..tokenizer import Token
from .base import BaseParser, ParserProtocol, Recovery, RecoveryKind
from .blocks import BlockCloser, BlockParserMixin
from .expressions import ExpressionParserMixin
from .statements import StatementParserMixin


class Parser(
    BaseParser,
    BlockParserMixin,
    StatementParserMixin,
    ExpressionParserMixin,
):
    """
    Complete Azalea parser.

    - BlockParserMixin: depth-counted block bodies and sub-parsing
    - StatementParserMixin: statement dispatch on canonical keywords
    - ExpressionParserMixin: precedence climbing, calls, collections
    """

    def parse(self) -> ir.Node:
        """Parse the whole token sequence into a program node."""
        statements = self.parse_statements()
        return ir.Node(kind=ir.NodeKind.PROGRAM, children=statements, line=1, column=1)


def parse_program(
    tokens: list[Token],
    capabilities: Capabilities | None = None,
    *,
    strict: bool = False,
    source: str | None = None,
    source_name: str | None = None,
) -> ir.Node:
    """
    Parse tokens into a program node.

    Args:
        tokens: Tokens from ``tokenize``
        capabilities: Module/element whitelist for implicit calls
        strict: Raise AzaleaSyntaxError instead of recovering
        source: Original text, for error snippets
        source_name: File name for error messages

    Returns:
        A ``program`` node whose children are the top-level statements
    """
    parser = Parser(
        tokens, capabilities, strict=strict, source=source, source_name=source_name
    )
    return parser.parse()


__all__ = [
    "BaseParser",
    "BlockCloser",
    "Parser",
    "ParserProtocol",
    "Recovery",
    "RecoveryKind",
    "parse_program",
]
