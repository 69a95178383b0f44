"""
Expression parsing for Azalea.

Binary operators use precedence climbing over the keyword module's
precedence table. Unary ``not``/``-`` bind tighter than any binary
operator, and ``[index]`` binds tighter still when it touches its operand.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..keywords import PRECEDENCE, Canonical, number_word
from ..tokenizer import Token, TokenKind
from ..values import format_number
from .base import RecoveryKind


# Structural words that never serve as a module method name
_NON_METHOD_WORDS = frozenset(
    {Canonical.BLOCK_OPEN, Canonical.BLOCK_CLOSE, Canonical.ELSE, Canonical.ELIF}
)

_MAP_KEY_KINDS = frozenset(
    {TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.STRING, TokenKind.NUMBER}
)


class ExpressionParserMixin:
    """
    Mixin providing expression parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        tokens: list[Token]
        pos: int
        capabilities: Any
        current_token: Any
        peek_token: Any
        previous_token: Any
        advance: Any
        canonical: Any
        at: Any
        match: Any
        at_symbol: Any
        match_symbol: Any
        at_end: Any
        at_boundary: Any
        can_start_expression: Any
        is_name_token: Any
        recover: Any

    def parse_expression(self, min_precedence: int = 1) -> ir.Node:
        """
        Parse a binary expression by precedence climbing.

        An operator is only consumed when the token after it can start an
        expression, so ``loop 5 times do`` leaves ``times`` for the loop.
        """
        left = self.parse_unary()

        while True:
            op = self.canonical()
            precedence = PRECEDENCE.get(op) if op is not None else None
            if precedence is None or precedence < min_precedence:
                break
            if not self.can_start_expression(self.peek_token()):
                break
            op_token = self.advance()
            right = self.parse_expression(precedence + 1)
            left = ir.Node(
                kind=ir.NodeKind.BINARY_OP,
                value=op.value,
                children=[left, right],
                line=op_token.line,
                column=op_token.column,
            )

        return left

    def parse_unary(self) -> ir.Node:
        """Parse prefix ``not`` / ``-`` operators."""
        if self.at(Canonical.NOT, Canonical.SUB) and self.can_start_expression(self.peek_token()):
            op_token = self.advance()
            operand = self.parse_unary()
            return ir.Node(
                kind=ir.NodeKind.UNARY_OP,
                value=self.canonical(op_token).value,
                children=[operand],
                line=op_token.line,
                column=op_token.column,
            )
        return self.parse_postfix()

    def parse_postfix(self) -> ir.Node:
        """Parse ``operand[index]``; the bracket must touch the operand."""
        node = self.parse_primary()

        while self.at_symbol("[") and self.previous_token().end == self.current_token().pos.offset:
            bracket = self.advance()
            index = self.parse_expression()
            if not self.match_symbol("]"):
                self.recover(RecoveryKind.MISSING_CLOSE_PAREN, "Expected ']' after index")
            node = ir.Node(
                kind=ir.NodeKind.INDEX,
                children=[node, index],
                line=bracket.line,
                column=bracket.column,
            )

        return node

    def parse_primary(self) -> ir.Node:
        """Parse a literal, name, call, group, list or map."""
        token = self.current_token()

        match token.kind:
            case TokenKind.NUMBER:
                self.advance()
                return ir.literal(float(token.lexeme), token.line, token.column)
            case TokenKind.STRING:
                self.advance()
                return ir.literal(token.lexeme, token.line, token.column)
            case TokenKind.IDENTIFIER:
                return self._parse_name()

        match self.canonical(token):
            case Canonical.TRUE:
                self.advance()
                return ir.literal(True, token.line, token.column)
            case Canonical.FALSE:
                self.advance()
                return ir.literal(False, token.line, token.column)
            case Canonical.VOID:
                self.advance()
                return ir.literal(None, token.line, token.column)
            case Canonical.CALL:
                self.advance()
                return self.parse_call()
            case Canonical.TYPE:
                return self._parse_name()

        if self.at_symbol("("):
            return self._parse_group()
        if self.at_symbol("["):
            return self._parse_list_literal()
        if self.at_symbol("{"):
            return self._parse_map_literal()

        self.recover(RecoveryKind.UNEXPECTED_TOKEN, f"Expected an expression, got {token.lexeme!r}")
        if not self.at_boundary():
            self.advance()
        return ir.literal(None, token.line, token.column)

    def _parse_name(self) -> ir.Node:
        """Parse an identifier, a number word, or an implicit call."""
        token = self.advance()

        if self._starts_implicit_call(token):
            return self.parse_call(token)

        value = number_word(token.lexeme)
        if value is not None:
            return ir.literal(value, token.line, token.column)

        return ir.Node(
            kind=ir.NodeKind.IDENTIFIER, value=token.lexeme, line=token.line, column=token.column
        )

    def _starts_implicit_call(self, name: Token) -> bool:
        """A whitelisted name followed by an argument, a ``.`` or a method word."""
        if not self.capabilities.allows_implicit_call(name.lexeme):
            return False
        nxt = self.current_token()
        if nxt.line != name.line:
            return False
        if self.at_symbol("."):
            return True
        if self.capabilities.is_module(name.lexeme) and self._is_method_word(nxt):
            return True
        return self.can_start_expression(nxt)

    def _is_method_word(self, token: Token) -> bool:
        if token.kind == TokenKind.IDENTIFIER:
            return True
        return token.kind == TokenKind.KEYWORD and self.canonical(token) not in _NON_METHOD_WORDS

    # -- Calls --

    def parse_call(self, name_token: Token | None = None) -> ir.Node:
        """
        Parse the rest of a call.

        Called after ``call`` (explicit) or after a whitelisted name
        (implicit, ``name_token`` given). Accepts ``name.method``,
        ``module method`` for modules, then ``(args)`` or space-separated
        arguments up to the end of the line.
        """
        if name_token is None:
            name_token = self.current_token()
            if not self.is_name_token(name_token):
                self.recover(RecoveryKind.MISSING_NAME, "Expected a name after 'call'")
                return ir.literal(None, name_token.line, name_token.column)
            self.advance()

        method: str | None = None
        if self.at_symbol(".") and self._is_method_word(self.peek_token()):
            self.advance()
            method = self.advance().lexeme
        elif (
            self.capabilities.is_module(name_token.lexeme)
            and self._is_method_word(self.current_token())
            and self.current_token().line == name_token.line
        ):
            method = self.advance().lexeme

        args = self._parse_call_arguments(name_token.line)
        return ir.Node(
            kind=ir.NodeKind.CALL,
            value=name_token.lexeme,
            bound_name=method,
            children=args,
            line=name_token.line,
            column=name_token.column,
        )

    def _parse_call_arguments(self, line: int) -> list[ir.Node]:
        if self.at_symbol("("):
            return self.parse_paren_arguments()
        args: list[ir.Node] = []
        while (
            self.can_start_expression() or self.at_map_literal()
        ) and self.current_token().line == line:
            args.append(self.parse_expression())
        return args

    def at_map_literal(self) -> bool:
        """A ``{`` opening ``key: ...``; outside brackets any other ``{`` is a block."""
        if not self.at_symbol("{"):
            return False
        key, colon = self.peek_token(), self.peek_token(2)
        return (
            key.kind in _MAP_KEY_KINDS
            and self.canonical(key) != Canonical.BLOCK_CLOSE
            and colon.kind == TokenKind.SYMBOL
            and colon.lexeme == ":"
        )

    def can_start_argument(self, token: Token | None = None) -> bool:
        """Inside brackets a ``{`` starts a map literal."""
        token = token or self.current_token()
        return self.can_start_expression(token) or (
            token.kind == TokenKind.SYMBOL and token.lexeme == "{"
        )

    def parse_paren_arguments(self) -> list[ir.Node]:
        """Parse ``( a, b ... )``; commas are optional separators."""
        self.advance()
        args: list[ir.Node] = []
        while True:
            if self.match_symbol(")"):
                break
            if self.match_symbol(","):
                continue
            if self.can_start_argument():
                args.append(self.parse_expression())
                continue
            if self.at_end() or self.at_boundary():
                self.recover(RecoveryKind.MISSING_CLOSE_PAREN, "Expected ')' to close arguments")
                break
            self.recover(
                RecoveryKind.UNEXPECTED_TOKEN,
                f"Unexpected {self.current_token().lexeme!r} in arguments",
            )
            self.advance()
        return args

    def find_matching_paren(self, index: int) -> int | None:
        """Index of the ``)`` matching the ``(`` at ``index``, if any."""
        depth = 0
        for i in range(index, len(self.tokens)):
            token = self.tokens[i]
            if token.kind != TokenKind.SYMBOL:
                continue
            if token.lexeme == "(":
                depth += 1
            elif token.lexeme == ")":
                depth -= 1
                if depth == 0:
                    return i
        return None

    # -- Groups and collections --

    def _parse_group(self) -> ir.Node:
        self.advance()
        expr = self.parse_expression()
        if not self.match_symbol(")"):
            self.recover(RecoveryKind.MISSING_CLOSE_PAREN, "Expected ')'")
        return expr

    def _parse_list_literal(self) -> ir.Node:
        bracket = self.advance()
        items: list[ir.Node] = []
        while not self.match_symbol("]"):
            if self.match_symbol(","):
                continue
            if self.can_start_argument():
                items.append(self.parse_expression())
                continue
            if self.at_end() or self.at_boundary():
                self.recover(RecoveryKind.MISSING_CLOSE_PAREN, "Expected ']' to close list")
                break
            self.recover(
                RecoveryKind.UNEXPECTED_TOKEN, f"Unexpected {self.current_token().lexeme!r} in list"
            )
            self.advance()
        return ir.Node(
            kind=ir.NodeKind.LIST_LITERAL, children=items, line=bracket.line, column=bracket.column
        )

    def _parse_map_literal(self) -> ir.Node:
        """Parse ``{key: value, ...}``; keys are words, strings or numbers."""
        brace = self.advance()
        children: list[ir.Node] = []
        while not self.match_symbol("}"):
            if self.match_symbol(","):
                continue
            key = self.current_token()
            if self.at_end():
                self.recover(RecoveryKind.MISSING_CLOSE_PAREN, "Expected '}' to close map")
                break
            if key.kind not in _MAP_KEY_KINDS or self.at(Canonical.BLOCK_CLOSE):
                self.recover(RecoveryKind.UNEXPECTED_TOKEN, f"Unexpected {key.lexeme!r} in map")
                self.advance()
                continue
            self.advance()
            if not (self.match_symbol(":") or self.match(Canonical.ASSIGN_OP)):
                self.recover(
                    RecoveryKind.UNEXPECTED_TOKEN, f"Expected ':' after map key {key.lexeme!r}"
                )
            if self.can_start_argument():
                value = self.parse_expression()
            else:
                value = ir.literal(None, key.line, key.column)
            text = key.lexeme
            if key.kind == TokenKind.NUMBER:
                text = format_number(float(key.lexeme))
            children.extend([ir.literal(text, key.line, key.column), value])
        return ir.Node(
            kind=ir.NodeKind.MAP_LITERAL, children=children, line=brace.line, column=brace.column
        )
