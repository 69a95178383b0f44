"""
Module dispatch boundary.

The evaluator never implements host capabilities (networking, files, UI,
...). It looks the module name up in a registry of handlers supplied by the
host and forwards the method name, the evaluated arguments and a small
context object. Handlers can be swapped freely, which is how tests observe
module calls without touching real I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from azalea.core.errors import ModuleDispatchError, UnknownModuleError
from azalea.core.values import VOID, Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchContext:
    """What a handler may use from the running evaluator."""

    module: str
    method: str
    emit: Callable[[str], None]
    lookup: Callable[[str], Value]
    call_function: Callable[[Value, Sequence[Value]], Value]


@runtime_checkable
class ModuleHandler(Protocol):
    """Host capability handler.

    ``call`` may return a Value or any plain Python object convertible by
    ``Value.from_python``.
    """

    def call(self, method: str, args: Sequence[Value], context: DispatchContext) -> Any: ...


class FunctionModule:
    """Adapts a plain ``fn(method, args, context)`` callable to ModuleHandler."""

    def __init__(self, fn: Callable[[str, Sequence[Value], DispatchContext], Any]) -> None:
        self._fn = fn

    def call(self, method: str, args: Sequence[Value], context: DispatchContext) -> Any:
        return self._fn(method, args, context)


def canonical_module_name(name: str) -> str:
    return name.strip().lower()


class ModuleRegistry:
    """Name → handler table owned by one runtime."""

    def __init__(self) -> None:
        self._handlers: dict[str, ModuleHandler] = {}

    def register(self, name: str, handler: ModuleHandler | Callable[..., Any]) -> None:
        """Register (or replace) the handler for a module name."""
        key = canonical_module_name(name)
        if not key:
            raise ValueError("Module name must not be empty")
        if not isinstance(handler, ModuleHandler):
            if not callable(handler):
                raise TypeError(f"Handler for {name!r} is neither a ModuleHandler nor callable")
            handler = FunctionModule(handler)
        if key in self._handlers:
            logger.debug("Replacing handler for module %r", key)
        self._handlers[key] = handler

    def unregister(self, name: str) -> None:
        self._handlers.pop(canonical_module_name(name), None)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_module_name(name) in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def names(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def get(self, name: str) -> ModuleHandler | None:
        return self._handlers.get(canonical_module_name(name))

    def dispatch(
        self,
        module: str,
        method: str,
        args: Sequence[Value],
        context: DispatchContext,
    ) -> Value:
        """Forward a call to the module's handler and return its Value.

        Raises:
            UnknownModuleError: No handler is registered under ``module``.
            ModuleDispatchError: The handler raised.
        """
        handler = self.get(module)
        if handler is None:
            raise UnknownModuleError(f"Module not registered: {module!r}")

        logger.debug("Dispatching %s.%s with %d arg(s)", module, method, len(args))
        try:
            result = handler.call(method, tuple(args), context)
        except Exception as e:
            raise ModuleDispatchError(f"Module {module!r} failed in {method!r}: {e}") from e

        if result is None:
            return VOID
        return Value.from_python(result)
