"""
Abstract syntax tree for Azalea programs.

A single frozen node type carries a kind tag, a scalar payload, an optional
secondary bound name, and positionally meaningful children:

- program / block: children are statements
- declaration: value = name; children = [initializer]?
- function_definition: value = name; bound_name = alias;
  children = [identifier params..., block body]
- call: value = callee name; children = positional arguments
  (for module calls the first argument is the method name literal)
- conditional: children = [guard, then_block, else_branch?]
- loop: value = LoopForm; bound_name = item name (each form);
  children = [count | guard | iterable, block body]
- return: children = [value]?
- output: children = [value?, repeat count?]
- assignment: value = target name; children = [value]
- binary_op / unary_op: value = canonical operator; children = operands
- identifier: value = name
- literal: value = float | str | bool | None (void)
- list_literal: children = items
- map_literal: children = key, value, key, value, ...
- index: children = [target, index]
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NodeKind(StrEnum):
    """Kinds of AST node."""

    PROGRAM = "program"
    BLOCK = "block"
    DECLARATION = "declaration"
    FUNCTION_DEFINITION = "function_definition"
    CALL = "call"
    CONDITIONAL = "conditional"
    LOOP = "loop"
    RETURN = "return"
    OUTPUT = "output"
    ASSIGNMENT = "assignment"
    BINARY_OP = "binary_op"
    UNARY_OP = "unary_op"
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    LIST_LITERAL = "list_literal"
    MAP_LITERAL = "map_literal"
    INDEX = "index"


class LoopForm(StrEnum):
    """Loop flavours; stored as the value of a loop node."""

    COUNT = "count"
    WHILE = "while"
    EACH = "each"


STATEMENT_KINDS = frozenset(
    {
        NodeKind.PROGRAM,
        NodeKind.BLOCK,
        NodeKind.DECLARATION,
        NodeKind.FUNCTION_DEFINITION,
        NodeKind.CONDITIONAL,
        NodeKind.LOOP,
        NodeKind.RETURN,
        NodeKind.OUTPUT,
        NodeKind.ASSIGNMENT,
    }
)


class Node(BaseModel):
    """An immutable AST node."""

    kind: NodeKind
    value: bool | float | str | None = Field(default=None, description="Scalar payload")
    bound_name: str | None = Field(default=None, description="Secondary name from 'as'")
    children: list[Node] = Field(default_factory=list)
    line: int = 0
    column: int = 0

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.kind == NodeKind.LITERAL:
            if self.value is None:
                return "void"
            if isinstance(self.value, bool):
                return "true" if self.value else "false"
            if isinstance(self.value, str):
                return f'"{self.value}"'
            return f"{self.value:g}"
        if self.kind == NodeKind.IDENTIFIER:
            return str(self.value)
        if self.kind == NodeKind.BINARY_OP:
            return f"({self.children[0]} {self.value} {self.children[1]})"
        inner = " ".join(str(c) for c in self.children)
        head = self.kind.value if self.value is None else f"{self.kind.value} {self.value}"
        return f"({head} {inner})" if inner else f"({head})"

    @property
    def is_statement(self) -> bool:
        return self.kind in STATEMENT_KINDS

    @property
    def name(self) -> str:
        """The value payload as text; used for name-carrying nodes."""
        return "" if self.value is None else str(self.value)


Node.model_rebuild()


def literal(value: bool | float | str | None, line: int = 0, column: int = 0) -> Node:
    """Shorthand for a literal node."""
    return Node(kind=NodeKind.LITERAL, value=value, line=line, column=column)


def block(children: list[Node], line: int = 0, column: int = 0) -> Node:
    """Shorthand for a block node."""
    return Node(kind=NodeKind.BLOCK, children=children, line=line, column=column)
