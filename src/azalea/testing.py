"""
Test doubles for hosts embedding Azalea.

``RecordingModule`` stands in for a host capability and records every call;
``OutputCollector`` is an output sink that keeps emitted lines in memory.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from azalea.core.modules import DispatchContext
from azalea.core.values import Value


@dataclass(frozen=True)
class RecordedCall:
    """One observed module call, with arguments as plain Python values."""

    module: str
    method: str
    args: tuple[Any, ...]


@dataclass
class RecordingModule:
    """
    Module handler that records calls instead of performing them.

    Attributes:
        name: Module name reported in recorded calls
        result: Returned from every call; a callable is invoked with
            ``(method, args)`` to compute the result
        calls: Calls seen so far, in order
    """

    name: str = "module"
    result: Any = None
    calls: list[RecordedCall] = field(default_factory=list)

    def call(self, method: str, args: Sequence[Value], context: DispatchContext) -> Any:
        recorded = RecordedCall(
            module=context.module or self.name,
            method=method,
            args=tuple(arg.to_python() for arg in args),
        )
        self.calls.append(recorded)
        if callable(self.result):
            return self.result(method, recorded.args)
        return self.result

    @property
    def methods(self) -> list[str]:
        return [c.method for c in self.calls]

    def clear(self) -> None:
        self.calls.clear()


class OutputCollector:
    """Output sink that collects lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, line: str) -> None:
        self.lines.append(line)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def clear(self) -> None:
        self.lines.clear()
