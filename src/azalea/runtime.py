"""
Runtime facade for embedding Azalea.

A ``Runtime`` owns one global scope, one scope arena and one module
registry. Runtimes share nothing mutable, so independent programs run on
independent runtimes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from azalea.core.capabilities import Capabilities
from azalea.core.config import InterpreterConfig
from azalea.core.errors import StepLimitExceeded, make_context
from azalea.core.evaluator import Evaluator
from azalea.core.ir import Node
from azalea.core.modules import ModuleHandler, ModuleRegistry
from azalea.core.parser_impl import Parser, Recovery
from azalea.core.scope import ScopeArena
from azalea.core.tokenizer import tokenize
from azalea.core.values import Value

logger = logging.getLogger(__name__)

OutputSink = Callable[[str], None]


def _print_line(line: str) -> None:
    print(line)


class StepBudget:
    """Evaluator observer that aborts after ``limit`` steps."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.steps = 0

    def __call__(self, node: Node) -> None:
        self.steps += 1
        if self.steps > self.limit:
            raise StepLimitExceeded(
                f"Step limit of {self.limit} exceeded",
                make_context(node.line, node.column),
            )


class Runtime:
    """
    One Azalea execution context.

    Args:
        config: Interpreter configuration (defaults when omitted)
        output: Sink for emitted lines (stdout when omitted)
    """

    def __init__(
        self,
        config: InterpreterConfig | None = None,
        output: OutputSink | None = None,
    ) -> None:
        self.config = config or InterpreterConfig()
        self.output = output or _print_line
        self.modules = ModuleRegistry()
        self._arena = ScopeArena()
        self._recoveries: list[Recovery] = []

    def register_module(self, name: str, handler: ModuleHandler | Callable[..., Any]) -> None:
        """Register a host capability; the name also becomes implicitly callable."""
        self.modules.register(name, handler)
        logger.debug("Registered module %r", name)

    @property
    def capabilities(self) -> Capabilities:
        """Configured whitelist plus every registered module name."""
        return self.config.capabilities.with_modules(self.modules.names())

    @property
    def globals(self) -> Mapping[str, Value]:
        """Read-only view of the global scope."""
        return self._arena.globals

    @property
    def recoveries(self) -> list[Recovery]:
        """Parser recoveries of the most recent parse."""
        return list(self._recoveries)

    def parse(self, source: str, *, source_name: str | None = None) -> Node:
        """Tokenize and parse source into a program node."""
        tokens = tokenize(source, strict=self.config.strict)
        parser = Parser(
            tokens,
            self.capabilities,
            strict=self.config.strict,
            source=source,
            source_name=source_name,
        )
        program = parser.parse()
        self._recoveries = list(parser.recoveries)
        if parser.recoveries:
            logger.debug("Parsed with %d recovery path(s)", len(parser.recoveries))
        return program

    def run(
        self,
        program: Node,
        *,
        source: str | None = None,
        source_name: str | None = None,
    ) -> Value:
        """Execute an already-parsed program; the scope stack is empty afterwards."""
        observer = StepBudget(self.config.max_steps) if self.config.max_steps > 0 else None
        evaluator = Evaluator(
            self._arena,
            self.modules,
            self.output,
            self.config,
            observer=observer,
            source=source,
            source_name=source_name,
        )
        try:
            return evaluator.run_program(program)
        finally:
            self._arena.unwind()

    def execute(self, source: str, *, source_name: str | None = None) -> Value:
        """
        Parse and run source text.

        Returns:
            The value of a top-level return, otherwise of the last statement

        Raises:
            AzaleaError: Only in strict mode, or for host failures
                (module handler errors, step budget)
        """
        program = self.parse(source, source_name=source_name)
        return self.run(program, source=source, source_name=source_name)

    def reset(self) -> None:
        """Forget every global binding and captured scope."""
        self._arena.reset()
        self._recoveries = []


def execute(
    source: str,
    *,
    output: OutputSink | None = None,
    config: InterpreterConfig | None = None,
    modules: Mapping[str, ModuleHandler | Callable[..., Any]] | None = None,
) -> Value:
    """Run source on a fresh Runtime."""
    runtime = Runtime(config=config, output=output)
    for name, handler in (modules or {}).items():
        runtime.register_module(name, handler)
    return runtime.execute(source)
