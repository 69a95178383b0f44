"""
Capability table injected into the parser and evaluator.

The table names the host modules and UI elements a program may invoke
without the ``call`` keyword. Adding a module or element only changes this
table; the parser and evaluator never hard-code names.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

DEFAULT_MODULES: tuple[str, ...] = ("net", "file", "vm", "serve", "view", "play")

DEFAULT_ELEMENTS: tuple[str, ...] = (
    "page",
    "header",
    "footer",
    "section",
    "box",
    "big",
    "text",
    "button",
    "link",
    "textarea",
    "code",
    "emoji",
    "grid",
    "panel",
)


@dataclass(frozen=True)
class Capabilities:
    """Whitelists of module and element names (stored lower-case)."""

    modules: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_MODULES))
    elements: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_ELEMENTS))
    element_module: str = "view"

    def __post_init__(self) -> None:
        object.__setattr__(self, "modules", frozenset(m.lower() for m in self.modules))
        object.__setattr__(self, "elements", frozenset(e.lower() for e in self.elements))
        object.__setattr__(self, "element_module", self.element_module.lower())

    def is_module(self, name: str) -> bool:
        return name.lower() in self.modules

    def is_element(self, name: str) -> bool:
        return name.lower() in self.elements

    def allows_implicit_call(self, name: str) -> bool:
        return self.is_module(name) or self.is_element(name)

    def with_modules(self, names: Iterable[str]) -> Capabilities:
        """Copy with extra module names added (e.g. everything registered)."""
        return replace(self, modules=self.modules | frozenset(n.lower() for n in names))
