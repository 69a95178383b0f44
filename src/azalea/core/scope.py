"""
Scope arena for the evaluator.

Scopes live in an arena and are addressed by integer ids. The scope stack is
a list of ids, innermost last; the global scope (id 0) sits outside the stack
and persists for the lifetime of the arena. Closures capture a scope by id
and pin it, so a scope holding a closure that references the same scope never
forms an object cycle.

A pinned scope lives only while some reachable closure captures it. When it
leaves the stack it is kept if a closure in another scope, or in the value
carried out of it, still captures it. ``collect()`` re-checks every pinned
scope from the global scope and the stack; the evaluator calls it between
top-level statements, where no value is held outside the arena.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType

from azalea.core.values import Value, ValueKind

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = 0


def captured_scopes(value: Value) -> Iterator[int]:
    """Ids of the scopes captured by closures in ``value``, nested ones included."""
    match value.kind:
        case ValueKind.FUNCTION:
            if value.payload.scope is not None:
                yield value.payload.scope
        case ValueKind.LIST:
            for item in value.payload:
                yield from captured_scopes(item)
        case ValueKind.MAP:
            for item in value.payload.values():
                yield from captured_scopes(item)


class ScopeArena:
    """Owns every scope of one execution context."""

    def __init__(self) -> None:
        self._scopes: dict[int, dict[str, Value]] = {GLOBAL_SCOPE: {}}
        self._pinned: set[int] = set()
        self._carried: dict[int, Value] = {}
        self._next_id = GLOBAL_SCOPE + 1
        self.stack: list[int] = []

    # -- Stack management --

    def push(self, scope_id: int | None = None) -> int:
        """Push an existing scope, or a fresh one when ``scope_id`` is None."""
        if scope_id is None:
            scope_id = self._next_id
            self._next_id += 1
            self._scopes[scope_id] = {}
        self.stack.append(scope_id)
        return scope_id

    def pop(self) -> None:
        """Pop the innermost scope, releasing it unless stacked or still captured."""
        scope_id = self.stack.pop()
        carried = self._carried.pop(scope_id, None)
        if scope_id in self.stack:
            return
        if scope_id in self._pinned and not self._is_captured(scope_id, carried):
            self._pinned.discard(scope_id)
        if scope_id not in self._pinned:
            del self._scopes[scope_id]

    @contextmanager
    def entered(self, scope_id: int | None = None) -> Iterator[int]:
        """Context manager around push/pop."""
        sid = self.push(scope_id)
        try:
            yield sid
        finally:
            self.pop()

    def unwind(self) -> None:
        """Pop every scope; used to restore an empty stack after an abort."""
        if self.stack:
            logger.debug("Unwinding %d scope(s)", len(self.stack))
        while self.stack:
            self.pop()
        self._carried.clear()

    def pin(self, scope_id: int) -> None:
        """Keep a scope alive after it leaves the stack (closure capture)."""
        if scope_id != GLOBAL_SCOPE:
            self._pinned.add(scope_id)

    def carry(self, value: Value) -> None:
        """Record ``value`` as leaving the innermost scope when it is popped."""
        if self.stack and next(captured_scopes(value), None) is not None:
            self._carried[self.stack[-1]] = value

    @property
    def innermost(self) -> int | None:
        return self.stack[-1] if self.stack else None

    @property
    def depth(self) -> int:
        return len(self.stack)

    # -- Pinned scope release --

    def _is_captured(self, scope_id: int, carried: Value | None) -> bool:
        values: list[Value] = [] if carried is None else [carried]
        for sid, bindings in self._scopes.items():
            if sid != scope_id:
                values.extend(bindings.values())
        values.extend(self._carried.values())
        return any(scope_id in captured_scopes(value) for value in values)

    def collect(self, roots: Iterable[Value] = ()) -> int:
        """
        Release pinned scopes that no closure reachable from the global scope,
        the stack or ``roots`` captures.

        Returns:
            Number of scopes released
        """
        if not self._pinned:
            return 0

        pending = [*roots, *self._carried.values()]
        for sid in (GLOBAL_SCOPE, *self.stack):
            pending.extend(self._scopes[sid].values())

        reachable: set[int] = set()
        while pending:
            for sid in captured_scopes(pending.pop()):
                if sid not in reachable and sid in self._scopes:
                    reachable.add(sid)
                    pending.extend(self._scopes[sid].values())

        released = self._pinned - reachable
        for sid in released:
            self._pinned.discard(sid)
            if sid not in self.stack:
                del self._scopes[sid]
        if released:
            logger.debug("Released %d captured scope(s)", len(released))
        return len(released)

    # -- Bindings --

    def resolve(self, name: str) -> Value | None:
        """Look a name up innermost to outermost, then in the global scope."""
        for scope_id in reversed(self.stack):
            bindings = self._scopes[scope_id]
            if name in bindings:
                return bindings[name]
        return self._scopes[GLOBAL_SCOPE].get(name)

    def declare(self, name: str, value: Value) -> None:
        """Bind in the innermost scope, or globally when the stack is empty."""
        target = self.stack[-1] if self.stack else GLOBAL_SCOPE
        self._scopes[target][name] = value

    def assign(self, name: str, value: Value) -> None:
        """Rebind the nearest existing binding; declare if there is none."""
        for scope_id in reversed(self.stack):
            bindings = self._scopes[scope_id]
            if name in bindings:
                bindings[name] = value
                return
        globals_ = self._scopes[GLOBAL_SCOPE]
        if name in globals_:
            globals_[name] = value
            return
        self.declare(name, value)

    @property
    def globals(self) -> Mapping[str, Value]:
        """Read-only view of the global scope."""
        return MappingProxyType(self._scopes[GLOBAL_SCOPE])

    def bindings(self, scope_id: int) -> Mapping[str, Value]:
        return MappingProxyType(self._scopes[scope_id])

    def __contains__(self, scope_id: object) -> bool:
        return scope_id in self._scopes

    def __len__(self) -> int:
        """Number of live scopes, the global scope included."""
        return len(self._scopes)

    def reset(self) -> None:
        """Drop every scope and binding, the global scope included."""
        self.stack.clear()
        self._scopes = {GLOBAL_SCOPE: {}}
        self._pinned.clear()
        self._carried.clear()
