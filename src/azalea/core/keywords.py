"""
Keyword normalizer for the Azalea language.

Every concept in the grammar (declaration, function definition, each
operator, block delimiters, ...) has one canonical form and any number of
surface spellings. The parser only ever branches on canonical forms, so
supporting a new spelling is a table edit here and nothing else.

All tables in this module are built once at import time and exposed as
read-only mappings; they are shared by every runtime in the process.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType


class Canonical(StrEnum):
    """Canonical keyword per grammar concept."""

    # Statements
    DECLARE = "declare"
    FUNCTION = "function"
    CALL = "call"
    IF = "if"
    ELSE = "else"
    ELIF = "elif"
    LOOP = "loop"
    WHILE = "while"
    EACH = "each"
    IN = "in"
    RETURN = "return"
    OUTPUT = "output"
    ASSIGN = "assign"

    # Structural
    ASSIGN_OP = "assign_op"
    BIND = "bind"
    BLOCK_OPEN = "block_open"
    BLOCK_CLOSE = "block_close"

    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"

    # Equality / comparison
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GE = "ge"
    LE = "le"

    # Logic
    AND = "and"
    OR = "or"
    NOT = "not"

    # Literal words
    TRUE = "true"
    FALSE = "false"
    VOID = "void"
    TYPE = "type"


_SYNONYMS: dict[Canonical, tuple[str, ...]] = {
    Canonical.DECLARE: (
        "form", "let", "var", "const", "create", "make",
        "declare", "define", "init", "new", "variable",
    ),
    Canonical.FUNCTION: ("act", "def", "fn", "func", "function", "method", "procedure", "routine"),
    Canonical.CALL: ("call", "invoke", "run", "perform"),
    Canonical.IF: ("if", "when", "whenever", "provided", "assuming", "given", "conditional"),
    Canonical.ELSE: ("else", "otherwise"),
    Canonical.ELIF: ("elif", "elseif", "elsif"),
    Canonical.LOOP: ("loop", "repeat", "for", "iterate"),
    Canonical.WHILE: ("while", "whilst"),
    Canonical.EACH: ("each", "foreach", "every"),
    Canonical.IN: ("in", "of"),
    Canonical.RETURN: ("give", "return", "yield", "produce"),
    Canonical.OUTPUT: ("say", "print", "output", "display", "log", "echo", "show", "write"),
    Canonical.ASSIGN: ("set", "put", "assign", "update", "change", "store"),
    Canonical.ASSIGN_OP: ("=", "from", "is", "be", "becomes", "to", "into", "gets"),
    Canonical.BIND: ("as", "aka", "alias"),
    Canonical.BLOCK_OPEN: ("{", "do", "then", "begin"),
    Canonical.BLOCK_CLOSE: ("}", "end", "finish", "done"),
    Canonical.ADD: ("+", "plus"),
    Canonical.SUB: ("-", "minus"),
    Canonical.MUL: ("*", "times", "mul"),
    Canonical.DIV: ("/", "div", "divided_by", "per"),
    Canonical.MOD: ("%", "mod", "modulo", "remainder"),
    Canonical.EQ: ("==", "same", "equals", "eq", "matches"),
    Canonical.NE: ("!=", "differs", "ne", "isnt", "not_same"),
    Canonical.GT: (">", "over", "above", "greater", "gt", "exceeds"),
    Canonical.LT: ("<", "under", "below", "less", "lt"),
    Canonical.GE: (">=", "atleast", "ge"),
    Canonical.LE: ("<=", "atmost", "le"),
    Canonical.AND: ("and", "&&"),
    Canonical.OR: ("or", "||"),
    Canonical.NOT: ("not", "!"),
    Canonical.TRUE: ("true", "yes"),
    Canonical.FALSE: ("false", "no"),
    Canonical.VOID: ("void", "null", "nothing", "none", "nil"),
    Canonical.TYPE: ("num", "number", "text", "string", "bool", "boolean", "list", "map"),
}


def _build_table() -> MappingProxyType[str, Canonical]:
    table: dict[str, Canonical] = {}
    for canonical, spellings in _SYNONYMS.items():
        for spelling in spellings:
            key = spelling.lower()
            if key in table:
                raise ValueError(
                    f"Synonym {spelling!r} maps to both {table[key]} and {canonical}"
                )
            table[key] = canonical
    return MappingProxyType(table)


SYNONYMS: MappingProxyType[str, Canonical] = _build_table()

# Word-shaped synonyms; the tokenizer classifies these as keywords.
KEYWORDS: frozenset[str] = frozenset(
    spelling for spelling in SYNONYMS if spelling[0].isalpha() or spelling[0] == "_"
)

# Concepts that begin a statement; an expression never runs past them.
STATEMENT_KEYWORDS: frozenset[Canonical] = frozenset(
    {
        Canonical.DECLARE,
        Canonical.FUNCTION,
        Canonical.CALL,
        Canonical.IF,
        Canonical.LOOP,
        Canonical.WHILE,
        Canonical.EACH,
        Canonical.RETURN,
        Canonical.OUTPUT,
        Canonical.ASSIGN,
    }
)

# Operator precedence, lowest to highest. Left-associative throughout.
PRECEDENCE: MappingProxyType[Canonical, int] = MappingProxyType(
    {
        Canonical.OR: 1,
        Canonical.AND: 2,
        Canonical.EQ: 3,
        Canonical.NE: 3,
        Canonical.GT: 4,
        Canonical.LT: 4,
        Canonical.GE: 4,
        Canonical.LE: 4,
        Canonical.ADD: 5,
        Canonical.SUB: 5,
        Canonical.MUL: 6,
        Canonical.DIV: 6,
        Canonical.MOD: 6,
    }
)

NUMBER_WORDS: MappingProxyType[str, float] = MappingProxyType(
    {
        "zero": 0.0,
        "one": 1.0,
        "two": 2.0,
        "three": 3.0,
        "four": 4.0,
        "five": 5.0,
        "six": 6.0,
        "seven": 7.0,
        "eight": 8.0,
        "nine": 9.0,
        "ten": 10.0,
        "eleven": 11.0,
        "twelve": 12.0,
        "thirteen": 13.0,
        "fourteen": 14.0,
        "fifteen": 15.0,
        "sixteen": 16.0,
        "seventeen": 17.0,
        "eighteen": 18.0,
        "nineteen": 19.0,
        "twenty": 20.0,
        "thirty": 30.0,
        "forty": 40.0,
        "fifty": 50.0,
        "sixty": 60.0,
        "seventy": 70.0,
        "eighty": 80.0,
        "ninety": 90.0,
        "hundred": 100.0,
        "thousand": 1000.0,
        "million": 1000000.0,
        "four_zero_zero_zero": 4000.0,
        "four_g": 4.0 * 1024 * 1024 * 1024,
    }
)


def normalize(lexeme: str) -> Canonical | None:
    """Return the canonical keyword for a spelling, or None if it has none."""
    return SYNONYMS.get(lexeme.lower())


def number_word(word: str) -> float | None:
    """Look up a whitelisted number word (case-insensitive)."""
    return NUMBER_WORDS.get(word.lower())


def synonyms_of(canonical: Canonical) -> tuple[str, ...]:
    """All registered spellings of a canonical keyword, in table order."""
    return _SYNONYMS[canonical]
