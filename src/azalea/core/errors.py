"""
Error types for Azalea tokenizing, parsing, evaluation and module dispatch.

Outside strict mode the core never raises for lexical, syntactic or semantic
anomalies; the lexer, syntax and runtime errors below are only raised when a
host opts into strict mode.
"""

from dataclasses import dataclass


class AzaleaError(Exception):
    """Base exception for all Azalea errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class AzaleaLexError(AzaleaError):
    """
    Raised in strict mode when the tokenizer meets a character it would
    otherwise discard.
    """

    pass


class AzaleaSyntaxError(AzaleaError):
    """
    Raised in strict mode when the parser takes a recovery path.

    Examples:
    - Missing block opener after a conditional, loop or function head
    - Missing assignment operator in a declaration
    - Block left open at end of input
    """

    pass


class AzaleaRuntimeError(AzaleaError):
    """Raised while evaluating a program."""

    pass


class UnresolvedNameError(AzaleaRuntimeError):
    """Strict mode: an identifier or callee name is not bound anywhere."""

    pass


class DivisionByZeroError(AzaleaRuntimeError):
    """Strict mode: division or modulo by zero."""

    pass


class StepLimitExceeded(AzaleaRuntimeError):
    """The host step budget ran out before the program finished."""

    pass


class UnknownModuleError(AzaleaError):
    """A dispatch named a module that is not registered."""

    pass


class ModuleDispatchError(AzaleaError):
    """A module handler raised while serving a call."""

    pass


class ConfigError(AzaleaError):
    """Raised when azalea.toml cannot be loaded or has invalid values."""

    pass


@dataclass
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source text around the error
        source_name: Optional file name or "<eval>"
    """

    line: int
    column: int
    snippet: str | None = None
    source_name: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "hello.az:3:7" or "line 3, column 7"
        """
        if self.source_name:
            location = f"{self.source_name}:{self.line}:{self.column}"
        else:
            location = f"line {self.line}, column {self.column}"

        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format the offending line with a caret under the column."""
        if not self.snippet:
            return ""
        prefix = f"{self.line:4d} | "
        marker = " " * (len(prefix) + self.column - 1) + "^"
        return f"{prefix}{self.snippet}\n{marker}"


def make_context(
    line: int,
    column: int,
    source: str | None = None,
    source_name: str | None = None,
) -> ErrorContext:
    """
    Helper to build an ErrorContext, cutting the snippet out of the source.

    Args:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        source: Full source text, if available
        source_name: Optional file name

    Returns:
        ErrorContext with the offending line as snippet
    """
    snippet = None
    if source is not None and line > 0:
        lines = source.splitlines()
        if line <= len(lines):
            snippet = lines[line - 1]
    return ErrorContext(line=line, column=column, snippet=snippet, source_name=source_name)
