"""
Runtime value model for Azalea.

Every expression evaluates to a ``Value``: an immutable tagged union over
number, text, boolean, list, map, void and function. Values never change
their tag or payload after construction; every operation builds a new one.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from azalea.core.keywords import number_word

if TYPE_CHECKING:
    from azalea.core.ir import Node


class ValueKind(StrEnum):
    """Runtime type tags."""

    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    LIST = "list"
    MAP = "map"
    VOID = "void"
    FUNCTION = "function"


# Numeric literal accepted by to_number() on text
_NUMERIC_TEXT_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


@dataclass(frozen=True, slots=True)
class Closure:
    """A user-defined function.

    Attributes:
        name: Name the function was declared under.
        params: Parameter names in declaration order.
        body: Block node executed on call.
        scope: Arena id of the captured defining scope, or None when the
            function was defined at top level.
    """

    name: str
    params: tuple[str, ...]
    body: Node
    scope: int | None = None


@dataclass(frozen=True, slots=True)
class Value:
    """A tagged runtime value."""

    kind: ValueKind
    payload: Any = None

    # -- Construction --

    @classmethod
    def number(cls, n: float) -> Value:
        return cls(ValueKind.NUMBER, float(n))

    @classmethod
    def text(cls, s: str) -> Value:
        return cls(ValueKind.TEXT, s)

    @classmethod
    def boolean(cls, b: bool) -> Value:
        return TRUE if b else FALSE

    @classmethod
    def list_of(cls, items: Iterable[Value]) -> Value:
        return cls(ValueKind.LIST, tuple(items))

    @classmethod
    def map_of(cls, entries: Mapping[str, Value]) -> Value:
        return cls(ValueKind.MAP, MappingProxyType(dict(entries)))

    @classmethod
    def function(cls, closure: Closure) -> Value:
        return cls(ValueKind.FUNCTION, closure)

    @classmethod
    def from_python(cls, obj: Any) -> Value:
        """Convert a plain Python object (e.g. a module handler result)."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return VOID
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, (int, float)):
            return cls.number(obj)
        if isinstance(obj, str):
            return cls.text(obj)
        if isinstance(obj, Closure):
            return cls.function(obj)
        if isinstance(obj, Mapping):
            return cls.map_of({str(k): cls.from_python(v) for k, v in obj.items()})
        if isinstance(obj, (list, tuple)):
            return cls.list_of(cls.from_python(item) for item in obj)
        return cls.text(str(obj))

    # -- Predicates --

    @property
    def is_void(self) -> bool:
        return self.kind == ValueKind.VOID

    # -- Coercions --

    def to_text(self) -> str:
        """Canonical string form, used by output and text comparison."""
        match self.kind:
            case ValueKind.NUMBER:
                return format_number(self.payload)
            case ValueKind.TEXT:
                return self.payload
            case ValueKind.BOOLEAN:
                return "true" if self.payload else "false"
            case ValueKind.LIST:
                return "[" + ", ".join(item.to_text() for item in self.payload) + "]"
            case ValueKind.MAP:
                parts = (f"{key}: {self.payload[key].to_text()}" for key in sorted(self.payload))
                return "{" + ", ".join(parts) + "}"
            case ValueKind.VOID:
                return ""
            case ValueKind.FUNCTION:
                closure: Closure = self.payload
                return f"function {closure.name}({', '.join(closure.params)})"

    def to_number(self) -> float:
        """Numeric form; anything without one becomes 0."""
        match self.kind:
            case ValueKind.NUMBER:
                return self.payload
            case ValueKind.BOOLEAN:
                return 1.0 if self.payload else 0.0
            case ValueKind.TEXT:
                return parse_number(self.payload)
            case _:
                return 0.0

    def to_bool(self) -> bool:
        """Truthiness: nonzero numbers, non-empty text, true booleans."""
        match self.kind:
            case ValueKind.BOOLEAN:
                return self.payload
            case ValueKind.NUMBER:
                return self.payload != 0.0
            case ValueKind.TEXT:
                return self.payload != ""
            case _:
                return False

    def to_python(self) -> Any:
        """Plain Python form for host code; functions stay Closures."""
        match self.kind:
            case ValueKind.LIST:
                return [item.to_python() for item in self.payload]
            case ValueKind.MAP:
                return {key: item.to_python() for key, item in self.payload.items()}
            case ValueKind.NUMBER:
                n = self.payload
                return int(n) if n.is_integer() else n
            case _:
                return self.payload

    def __str__(self) -> str:
        return self.to_text()


VOID = Value(ValueKind.VOID)
TRUE = Value(ValueKind.BOOLEAN, True)
FALSE = Value(ValueKind.BOOLEAN, False)


def format_number(n: float) -> str:
    """Render a number: integral values without a fraction, others via repr."""
    if n.is_integer() and abs(n) < 1e16:
        return str(int(n))
    return repr(n)


def parse_number(text: str) -> float:
    """Parse numeric text, falling back to number words, then to 0."""
    stripped = text.strip()
    if _NUMERIC_TEXT_RE.fullmatch(stripped):
        value = float(stripped)
        return value if math.isfinite(value) else 0.0
    word = number_word(stripped)
    if word is not None:
        return word
    return 0.0
