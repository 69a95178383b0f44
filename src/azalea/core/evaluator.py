"""
Tree-walking evaluator for Azalea.

Walks one node at a time, depth-first and left to right. Statements return
an ``Outcome``; a ``return`` statement travels back through enclosing blocks
and loops as ``Outcome(value, returned=True)`` until a function call or the
program unwraps it. Expressions return a ``Value``.

Outside strict mode evaluation never raises for semantic anomalies: an
unresolved name is void and division by zero is 0.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from azalea.core.config import InterpreterConfig
from azalea.core.errors import (
    DivisionByZeroError,
    ErrorContext,
    UnresolvedNameError,
    make_context,
)
from azalea.core.ir import LoopForm, Node, NodeKind
from azalea.core.keywords import Canonical
from azalea.core.modules import DispatchContext, ModuleRegistry
from azalea.core.operators import DIVISIONS, LOGICAL, apply_binary, apply_unary, short_circuit
from azalea.core.scope import ScopeArena
from azalea.core.values import VOID, Closure, Value, ValueKind

logger = logging.getLogger(__name__)

Observer = Callable[[Node], None]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of executing a statement."""

    value: Value = VOID
    returned: bool = False


_NORMAL = Outcome()


def as_count(n: float) -> int:
    """Truncate to a non-negative iteration count; non-finite counts are 0."""
    if not math.isfinite(n) or n <= 0:
        return 0
    return int(n)


class Evaluator:
    """
    Executes one parsed program against a scope arena.

    Args:
        arena: Scope arena owned by the runtime
        modules: Registry for module and element calls
        emit: Output sink, called once per emitted line
        config: Interpreter switches and capability table
        observer: Called per evaluated node, loop iteration and repeated line
        source: Program text, for strict-mode error snippets
        source_name: File name for strict-mode errors
    """

    def __init__(
        self,
        arena: ScopeArena,
        modules: ModuleRegistry,
        emit: Callable[[str], None],
        config: InterpreterConfig | None = None,
        *,
        observer: Observer | None = None,
        source: str | None = None,
        source_name: str | None = None,
    ) -> None:
        self.arena = arena
        self.modules = modules
        self.emit = emit
        self.config = config or InterpreterConfig()
        self.observer = observer
        self.source = source
        self.source_name = source_name

    # -- Entry points --

    def run_program(self, program: Node) -> Value:
        """
        Execute top-level statements in the global scope.

        Returns:
            The returned value on a top-level return, otherwise the value of
            the last statement
        """
        outcome = _NORMAL
        for statement in program.children:
            outcome = self.execute(statement)
            self.arena.collect([outcome.value])
            if outcome.returned:
                break
        return outcome.value

    def call_function(self, function: Value, args: Sequence[Value]) -> Value:
        """
        Invoke a closure.

        The captured defining scope is pushed beneath a fresh parameter scope,
        on top of the caller's stack. Missing arguments are void and extra
        arguments are ignored.
        """
        if function.kind != ValueKind.FUNCTION:
            return VOID
        closure: Closure = function.payload

        captured = closure.scope is not None and closure.scope in self.arena
        if closure.scope is not None and not captured:
            logger.debug("Captured scope of %r was released; calling without it", closure.name)
        if captured:
            self.arena.push(closure.scope)
            self.arena.carry(function)
        try:
            with self.arena.entered():
                for i, param in enumerate(closure.params):
                    self.arena.declare(param, args[i] if i < len(args) else VOID)
                outcome = self._run_statements(closure.body.children)
                self.arena.carry(outcome.value)
        finally:
            if captured:
                self.arena.pop()
        return outcome.value

    # -- Statements --

    def execute(self, node: Node) -> Outcome:
        """Execute a statement node (expressions are evaluated for their value)."""
        if not node.is_statement:
            return Outcome(self.evaluate(node))

        self._observe(node)
        match node.kind:
            case NodeKind.PROGRAM:
                return self._run_statements(node.children)
            case NodeKind.BLOCK:
                with self.arena.entered():
                    outcome = self._run_statements(node.children)
                    self.arena.carry(outcome.value)
                return outcome
            case NodeKind.DECLARATION:
                value = self.evaluate(node.children[0]) if node.children else VOID
                self.arena.declare(node.name, value)
                return _NORMAL
            case NodeKind.ASSIGNMENT:
                self.arena.assign(node.name, self.evaluate(node.children[0]))
                return _NORMAL
            case NodeKind.FUNCTION_DEFINITION:
                return self._define_function(node)
            case NodeKind.CONDITIONAL:
                return self._execute_conditional(node)
            case NodeKind.LOOP:
                return self._execute_loop(node)
            case NodeKind.RETURN:
                value = self.evaluate(node.children[0]) if node.children else VOID
                return Outcome(value, returned=True)
            case NodeKind.OUTPUT:
                self._execute_output(node)
                return _NORMAL
        raise AssertionError(f"Unhandled statement kind: {node.kind}")

    def _run_statements(self, statements: Sequence[Node]) -> Outcome:
        outcome = _NORMAL
        for statement in statements:
            outcome = self.execute(statement)
            if outcome.returned:
                break
        return outcome

    def _define_function(self, node: Node) -> Outcome:
        *params, body = node.children
        scope = self.arena.innermost
        if scope is not None:
            self.arena.pin(scope)
        closure = Closure(
            name=node.name,
            params=tuple(param.name for param in params),
            body=body,
            scope=scope,
        )
        function = Value.function(closure)
        if node.name:
            self.arena.declare(node.name, function)
        if node.bound_name:
            self.arena.declare(node.bound_name, function)
        return _NORMAL

    def _execute_conditional(self, node: Node) -> Outcome:
        guard, then_branch, *rest = node.children
        if self.evaluate(guard).to_bool():
            return self.execute(then_branch)
        if rest:
            return self.execute(rest[0])
        return _NORMAL

    def _execute_loop(self, node: Node) -> Outcome:
        head, body = node.children
        form = LoopForm(node.value)

        match form:
            case LoopForm.COUNT:
                count = as_count(self.evaluate(head).to_number())
                items: Iterator[Value] = (Value.number(i) for i in range(count))
                item_name = None
            case LoopForm.EACH:
                items = self._iterate(self.evaluate(head))
                item_name = node.bound_name
            case LoopForm.WHILE:
                return self._execute_while(head, body)

        for index, item in enumerate(items):
            self._observe(body)
            with self.arena.entered():
                for name in self.config.loop_index_names:
                    self.arena.declare(name, Value.number(index))
                if item_name:
                    self.arena.declare(item_name, item)
                outcome = self._run_statements(body.children)
                self.arena.carry(outcome.value)
            if outcome.returned:
                return outcome
        return _NORMAL

    def _execute_while(self, guard: Node, body: Node) -> Outcome:
        index = 0
        while self.evaluate(guard).to_bool():
            with self.arena.entered():
                for name in self.config.loop_index_names:
                    self.arena.declare(name, Value.number(index))
                outcome = self._run_statements(body.children)
                self.arena.carry(outcome.value)
            if outcome.returned:
                return outcome
            index += 1
        return _NORMAL

    def _iterate(self, iterable: Value) -> Iterator[Value]:
        """Items of an each loop: list items, sorted map keys, characters, or 0..n-1."""
        match iterable.kind:
            case ValueKind.LIST:
                yield from iterable.payload
            case ValueKind.MAP:
                for key in sorted(iterable.payload):
                    yield Value.text(key)
            case ValueKind.TEXT:
                for char in iterable.payload:
                    yield Value.text(char)
            case ValueKind.NUMBER:
                for i in range(as_count(iterable.payload)):
                    yield Value.number(i)

    def _execute_output(self, node: Node) -> None:
        value = self.evaluate(node.children[0]) if node.children else VOID
        count = 1
        if len(node.children) > 1:
            count = as_count(self.evaluate(node.children[1]).to_number())
        text = value.to_text()
        for i in range(count):
            # Every repeated line is a step of its own
            if i > 0:
                self._observe(node)
            self.emit(text)

    # -- Expressions --

    def evaluate(self, node: Node) -> Value:
        """Evaluate an expression node to a Value."""
        self._observe(node)
        match node.kind:
            case NodeKind.LITERAL:
                return _literal_value(node.value)
            case NodeKind.IDENTIFIER:
                return self._resolve(node)
            case NodeKind.BINARY_OP:
                return self._evaluate_binary(node)
            case NodeKind.UNARY_OP:
                return apply_unary(Canonical(node.value), self.evaluate(node.children[0]))
            case NodeKind.CALL:
                return self._evaluate_call(node)
            case NodeKind.LIST_LITERAL:
                return Value.list_of(self.evaluate(child) for child in node.children)
            case NodeKind.MAP_LITERAL:
                entries: dict[str, Value] = {}
                children = node.children
                for key, value in zip(children[::2], children[1::2], strict=False):
                    entries[self.evaluate(key).to_text()] = self.evaluate(value)
                return Value.map_of(entries)
            case NodeKind.INDEX:
                return _index(self.evaluate(node.children[0]), self.evaluate(node.children[1]))
        # A statement in expression position yields its outcome value
        return self.execute(node).value

    def _resolve(self, node: Node) -> Value:
        value = self.arena.resolve(node.name)
        if value is not None:
            return value
        if self.config.strict:
            raise UnresolvedNameError(f"Unresolved name: {node.name!r}", self._context(node))
        logger.debug("Unresolved name %r at %d:%d; using void", node.name, node.line, node.column)
        return VOID

    def _evaluate_binary(self, node: Node) -> Value:
        op = Canonical(node.value)
        left = self.evaluate(node.children[0])

        if op in LOGICAL and self.config.short_circuit:
            decided = short_circuit(op, left)
            if decided is not None:
                return decided

        right = self.evaluate(node.children[1])

        if op in DIVISIONS and right.to_number() == 0.0:
            if self.config.strict:
                raise DivisionByZeroError(f"{op.value} by zero", self._context(node))
            logger.debug("%s by zero at %d:%d; using 0", op.value, node.line, node.column)

        return apply_binary(op, left, right)

    def _evaluate_call(self, node: Node) -> Value:
        """
        Resolve and perform a call.

        Order: registered module with a method, then a function bound to the
        name, then a whitelisted element (dispatched to the element module).
        """
        name = node.name
        method = node.bound_name
        args = [self.evaluate(child) for child in node.children]

        if method is not None and name in self.modules:
            return self._dispatch(name, method, args)

        bound = self.arena.resolve(name)
        if bound is not None and bound.kind == ValueKind.FUNCTION:
            return self.call_function(bound, args)

        capabilities = self.config.capabilities
        if capabilities.is_element(name) and capabilities.element_module in self.modules:
            return self._dispatch(capabilities.element_module, name.lower(), args)

        if self.config.strict:
            raise UnresolvedNameError(f"Unresolved callee: {name!r}", self._context(node))
        logger.debug("Unresolved callee %r at %d:%d; using void", name, node.line, node.column)
        return VOID

    def _dispatch(self, module: str, method: str, args: list[Value]) -> Value:
        context = DispatchContext(
            module=module,
            method=method,
            emit=self.emit,
            lookup=self.lookup,
            call_function=self.call_function,
        )
        return self.modules.dispatch(module, method, args, context)

    def lookup(self, name: str) -> Value:
        """Read-only variable lookup for module handlers."""
        value = self.arena.resolve(name)
        return VOID if value is None else value

    # -- Helpers --

    def _observe(self, node: Node) -> None:
        if self.observer is not None:
            self.observer(node)

    def _context(self, node: Node) -> ErrorContext:
        return make_context(node.line, node.column, self.source, self.source_name)


def _literal_value(payload: bool | float | str | None) -> Value:
    if payload is None:
        return VOID
    if isinstance(payload, bool):
        return Value.boolean(payload)
    if isinstance(payload, str):
        return Value.text(payload)
    return Value.number(payload)


def _index(target: Value, index: Value) -> Value:
    """``target[index]``; anything out of range or unindexable is void."""
    match target.kind:
        case ValueKind.MAP:
            return target.payload.get(index.to_text(), VOID)
        case ValueKind.LIST | ValueKind.TEXT:
            n = index.to_number()
            if not math.isfinite(n):
                return VOID
            i = int(n)
            size = len(target.payload)
            if i < 0:
                i += size
            if not 0 <= i < size:
                return VOID
            item = target.payload[i]
            return Value.text(item) if target.kind == ValueKind.TEXT else item
    return VOID
