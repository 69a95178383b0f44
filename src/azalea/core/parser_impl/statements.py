"""
Statement parsing for Azalea.

Statement dispatch is chosen by the canonical form of the current token:
declaration, function definition, conditional, loop, return, output and
assignment. Anything else that can start an expression is an expression
statement; calls arrive that way.
"""

from typing import TYPE_CHECKING, Any

from .. import ir
from ..keywords import Canonical
from ..tokenizer import Token, TokenKind
from .base import RecoveryKind
from .blocks import BlockCloser


class StatementParserMixin:
    """
    Mixin providing statement parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        tokens: list[Token]
        pos: int
        current_token: Any
        peek_token: Any
        advance: Any
        canonical: Any
        at: Any
        match: Any
        at_symbol: Any
        match_symbol: Any
        at_end: Any
        at_boundary: Any
        can_start_expression: Any
        at_map_literal: Any
        is_name_token: Any
        recover: Any
        parse_expression: Any
        parse_block: Any
        parse_block_body: Any
        parse_paren_arguments: Any
        find_matching_paren: Any

    def parse_statements(self) -> list[ir.Node]:
        """Parse statements until end of input."""
        statements: list[ir.Node] = []
        while not self.at_end():
            start = self.pos
            node = self.parse_statement()
            if node is not None:
                statements.append(node)
            if self.pos == start:
                self.recover(
                    RecoveryKind.UNEXPECTED_TOKEN,
                    f"Skipping {self.current_token().lexeme!r}",
                )
                self.advance()
        return statements

    def parse_statement(self) -> ir.Node | None:
        """Parse one statement; None when only separators or junk were consumed."""
        token = self.current_token()

        match self.canonical(token):
            case Canonical.DECLARE:
                return self.parse_declaration()
            case Canonical.FUNCTION:
                return self.parse_function_definition()
            case Canonical.IF:
                return self.parse_conditional()
            case Canonical.LOOP:
                return self.parse_loop()
            case Canonical.WHILE:
                return self.parse_while()
            case Canonical.EACH:
                return self.parse_each()
            case Canonical.RETURN:
                return self.parse_return()
            case Canonical.OUTPUT:
                return self.parse_output()
            case Canonical.ASSIGN:
                return self.parse_assignment()
            case Canonical.BLOCK_OPEN:
                body, _ = self.parse_block()
                return body
            case Canonical.BLOCK_CLOSE:
                self.recover(RecoveryKind.STRAY_DELIMITER, f"Stray {token.lexeme!r}")
                self.advance()
                return None
            case Canonical.ELSE | Canonical.ELIF:
                self.recover(RecoveryKind.UNEXPECTED_TOKEN, f"{token.lexeme!r} without 'if'")
                self.advance()
                return None

        if self.match_symbol(";", ","):
            return None

        if (
            token.kind == TokenKind.IDENTIFIER
            and self.canonical(self.peek_token()) == Canonical.ASSIGN_OP
        ):
            return self._parse_bare_assignment()

        if self.can_start_expression(token):
            return self.parse_expression()

        self.recover(RecoveryKind.UNEXPECTED_TOKEN, f"Unexpected {token.lexeme!r}")
        self.advance()
        return None

    def _take_name(self, what: str) -> Token | None:
        if self.is_name_token():
            return self.advance()
        self.recover(RecoveryKind.MISSING_NAME, f"Expected a name for {what}")
        return None

    def _optional_block(self, head: Token, what: str) -> ir.Node:
        """A block if one opens here; otherwise an empty body and a recovery."""
        if self.at(Canonical.BLOCK_OPEN):
            body, _ = self.parse_block()
            return body
        self.recover(RecoveryKind.MISSING_BLOCK_OPEN, f"Expected a block after {what}")
        return ir.block([], head.line, head.column)

    # -- Declarations and assignment --

    def parse_declaration(self) -> ir.Node | None:
        """
        Parse ``declare [type] name [= expr]``.

        Without an assignment operator the declaration binds void; if an
        expression follows anyway it is left to parse as its own statement.
        """
        head = self.advance()

        # Optional type word, unless it is itself the name ("let list = ...")
        if self.at(Canonical.TYPE) and self.is_name_token(self.peek_token()):
            self.advance()

        name = self._take_name("declaration")
        if name is None:
            return None

        children: list[ir.Node] = []
        if self.match(Canonical.ASSIGN_OP):
            children.append(self.parse_expression())
        elif self.can_start_expression() and self.current_token().line == name.line:
            self.recover(
                RecoveryKind.MISSING_ASSIGN_OP,
                f"Expected an assignment operator after {name.lexeme!r}",
            )

        return ir.Node(
            kind=ir.NodeKind.DECLARATION,
            value=name.lexeme,
            children=children,
            line=head.line,
            column=head.column,
        )

    def parse_assignment(self) -> ir.Node | None:
        """
        Parse ``set name = expr`` or ``put expr into name``.

        Any ``assign`` synonym may lead; only ``put`` takes the value first.
        """
        head = self.advance()

        if head.lexeme.lower() == "put":
            value = self.parse_expression()
            if not self.match(Canonical.ASSIGN_OP):
                self.recover(RecoveryKind.MISSING_ASSIGN_OP, "Expected 'into' after value")
                return None
            name = self._take_name("assignment")
            if name is None:
                return None
            return self._assignment(head, name.lexeme, value)

        name = self._take_name("assignment")
        if name is None:
            return None
        if not self.match(Canonical.ASSIGN_OP):
            self.recover(
                RecoveryKind.MISSING_ASSIGN_OP,
                f"Expected an assignment operator after {name.lexeme!r}",
            )
            return None
        return self._assignment(head, name.lexeme, self.parse_expression())

    def _parse_bare_assignment(self) -> ir.Node:
        name = self.advance()
        self.advance()
        return self._assignment(name, name.lexeme, self.parse_expression())

    def _assignment(self, head: Token, name: str, value: ir.Node) -> ir.Node:
        return ir.Node(
            kind=ir.NodeKind.ASSIGNMENT,
            value=name,
            children=[value],
            line=head.line,
            column=head.column,
        )

    # -- Functions --

    def parse_function_definition(self) -> ir.Node:
        """Parse ``function name (p1, p2) [as alias] block`` (params may be bare)."""
        head = self.advance()
        name = self._take_name("function")

        params: list[ir.Node] = []
        if self.at_symbol("("):
            for arg in self.parse_paren_arguments():
                if arg.kind == ir.NodeKind.IDENTIFIER:
                    params.append(arg)
                else:
                    self.recover(
                        RecoveryKind.UNEXPECTED_TOKEN,
                        f"Parameter must be a name, got {arg}",
                    )
        else:
            while self.is_name_token():
                token = self.advance()
                params.append(
                    ir.Node(
                        kind=ir.NodeKind.IDENTIFIER,
                        value=token.lexeme,
                        line=token.line,
                        column=token.column,
                    )
                )

        alias: str | None = None
        if self.match(Canonical.BIND):
            alias_token = self._take_name("alias")
            if alias_token is not None:
                alias = alias_token.lexeme

        body = self._optional_block(head, "function head")
        return ir.Node(
            kind=ir.NodeKind.FUNCTION_DEFINITION,
            value=name.lexeme if name else "",
            bound_name=alias,
            children=[*params, body],
            line=head.line,
            column=head.column,
        )

    def parse_return(self) -> ir.Node:
        head = self.advance()
        children = []
        if self.can_start_expression() and self.current_token().line == head.line:
            children.append(self.parse_expression())
        return ir.Node(
            kind=ir.NodeKind.RETURN, children=children, line=head.line, column=head.column
        )

    # -- Conditionals --

    def parse_conditional(self) -> ir.Node:
        """Parse ``if guard block [else block | else if ... | elif ...]``."""
        head = self.advance()
        return self._finish_conditional(head, self.parse_expression())

    def _finish_conditional(self, head: Token, guard: ir.Node) -> ir.Node:
        if not self.at(Canonical.BLOCK_OPEN):
            self.recover(RecoveryKind.MISSING_BLOCK_OPEN, "Expected a block after condition")
            return self._conditional(head, [guard, ir.block([], head.line, head.column)])

        then_block, closer = self.parse_block(stop_at_else=True)
        children = [guard, then_block]

        if closer == BlockCloser.ELSE:
            children.append(self._parse_shared_else())
        elif self.at(Canonical.ELSE, Canonical.ELIF):
            branch = self._parse_else()
            if branch is not None:
                children.append(branch)

        return self._conditional(head, children)

    def _parse_else(self) -> ir.Node | None:
        """Else branch after a closed then-block."""
        token = self.advance()
        if self.canonical(token) == Canonical.ELIF or self.at(Canonical.IF):
            head = token if self.canonical(token) == Canonical.ELIF else self.advance()
            return self._finish_conditional(head, self.parse_expression())
        if self.at(Canonical.BLOCK_OPEN):
            body, _ = self.parse_block()
            return body
        self.recover(RecoveryKind.MISSING_BLOCK_OPEN, "Expected a block after 'else'")
        return None

    def _parse_shared_else(self) -> ir.Node:
        """
        Else branch of ``if c then A else B end``.

        The final closer ends the whole chain, so ``else if c2 then`` does not
        open a new level.
        """
        token = self.advance()
        if self.canonical(token) == Canonical.ELIF or self.at(Canonical.IF):
            head = token if self.canonical(token) == Canonical.ELIF else self.advance()
            guard = self.parse_expression()
            self.match(Canonical.BLOCK_OPEN)
            body, closer = self.parse_block_body(head, stop_at_else=True)
            children = [guard, body]
            if closer == BlockCloser.ELSE:
                children.append(self._parse_shared_else())
            return self._conditional(head, children)

        body, _ = self.parse_block_body(token)
        return body

    def _conditional(self, head: Token, children: list[ir.Node]) -> ir.Node:
        return ir.Node(
            kind=ir.NodeKind.CONDITIONAL, children=children, line=head.line, column=head.column
        )

    # -- Loops --

    def parse_loop(self) -> ir.Node:
        """
        Parse a ``loop`` statement.

        ``loop N [times] block`` is the count form; ``loop while ...``,
        ``for each x in ...`` and ``for x in ...`` hand over to the while and
        each forms.
        """
        head = self.advance()

        if self.at(Canonical.WHILE):
            return self.parse_while()
        if self.at(Canonical.EACH):
            return self.parse_each()
        if self.is_name_token() and self.canonical(self.peek_token()) == Canonical.IN:
            return self._finish_each(head)

        count = self.parse_expression()
        self.match(Canonical.MUL)
        body = self._optional_block(head, "loop count")
        return self._loop(head, ir.LoopForm.COUNT, [count, body])

    def parse_while(self) -> ir.Node:
        head = self.advance()
        guard = self.parse_expression()
        body = self._optional_block(head, "while condition")
        return self._loop(head, ir.LoopForm.WHILE, [guard, body])

    def parse_each(self) -> ir.Node:
        head = self.advance()
        return self._finish_each(head)

    def _finish_each(self, head: Token) -> ir.Node:
        """Parse ``name in expr block`` of an each loop."""
        name = self._take_name("loop item")
        if not self.match(Canonical.IN):
            self.recover(RecoveryKind.UNEXPECTED_TOKEN, "Expected 'in' after loop item")
        iterable = self.parse_expression()
        body = self._optional_block(head, "each head")
        return self._loop(
            head,
            ir.LoopForm.EACH,
            [iterable, body],
            bound_name=name.lexeme if name else None,
        )

    def _loop(
        self,
        head: Token,
        form: ir.LoopForm,
        children: list[ir.Node],
        bound_name: str | None = None,
    ) -> ir.Node:
        return ir.Node(
            kind=ir.NodeKind.LOOP,
            value=form.value,
            bound_name=bound_name,
            children=children,
            line=head.line,
            column=head.column,
        )

    # -- Output --

    def parse_output(self) -> ir.Node:
        """
        Parse ``output [value] [count]`` or ``output(value[, count])``.

        The parenthesized form applies only when the matching ``)`` is
        followed by a boundary; ``output (a + b) * 2`` is an expression.
        Space-separated arguments end at the line break. With two arguments
        a leading numeric literal is the repeat count (``say 3 "hi"``).
        """
        head = self.advance()
        args: list[ir.Node] = []

        if self.at_symbol("(") and self._paren_form_applies():
            args = self.parse_paren_arguments()
        else:
            while (
                len(args) < 2
                and (self.can_start_expression() or self.at_map_literal())
                and self.current_token().line == head.line
            ):
                args.append(self.parse_expression())

        if len(args) >= 2 and _is_number_literal(args[0]) and not _is_number_literal(args[1]):
            args = [args[1], args[0]]

        return ir.Node(
            kind=ir.NodeKind.OUTPUT, children=args[:2], line=head.line, column=head.column
        )

    def _paren_form_applies(self) -> bool:
        close = self.find_matching_paren(self.pos)
        if close is None:
            return False
        after = self.tokens[min(close + 1, len(self.tokens) - 1)]
        return bool(self.at_boundary(after)) or after.line != self.tokens[close].line


def _is_number_literal(node: ir.Node) -> bool:
    return (
        node.kind == ir.NodeKind.LITERAL
        and isinstance(node.value, float)
        and not isinstance(node.value, bool)
    )
