"""
Azalea - a small interpreted language with a permissive, synonym-rich grammar.

Source text is tokenized, parsed into an AST and evaluated; host
capabilities are delegated to registered module handlers.
"""

from __future__ import annotations

from ._version import __version__
from .core import ir
from .core.config import InterpreterConfig, load_config
from .core.errors import (
    AzaleaError,
    AzaleaLexError,
    AzaleaRuntimeError,
    AzaleaSyntaxError,
    ModuleDispatchError,
    UnknownModuleError,
)
from .core.values import VOID, Value, ValueKind
from .runtime import Runtime, execute

__all__ = [
    "__version__",
    "ir",
    "AzaleaError",
    "AzaleaLexError",
    "AzaleaRuntimeError",
    "AzaleaSyntaxError",
    "InterpreterConfig",
    "ModuleDispatchError",
    "Runtime",
    "UnknownModuleError",
    "VOID",
    "Value",
    "ValueKind",
    "execute",
    "load_config",
]
