"""
Interpreter configuration loaded from ``azalea.toml``.

Example::

    [interpreter]
    strict = false
    short_circuit = false
    loop_index = ["step", "loop_index"]
    max_steps = 0

    [capabilities]
    modules = ["net", "file", "vm", "serve", "view", "play"]
    elements = ["page", "header", "text", "button"]
    element_module = "view"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .capabilities import DEFAULT_ELEMENTS, DEFAULT_MODULES, Capabilities
from .errors import ConfigError

CONFIG_FILENAME = "azalea.toml"

DEFAULT_LOOP_INDEX_NAMES: tuple[str, ...] = ("step", "loop_index")


@dataclass(frozen=True)
class InterpreterConfig:
    """Interpreter behavior switches."""

    strict: bool = False  # raise instead of silently recovering
    short_circuit: bool = False  # and/or skip the right operand when decided
    loop_index_names: tuple[str, ...] = DEFAULT_LOOP_INDEX_NAMES
    max_steps: int = 0  # 0 = unlimited
    capabilities: Capabilities = field(default_factory=Capabilities)


def _expect(value: Any, kind: type | tuple[type, ...], key: str) -> Any:
    # bool is an int subclass; keep "max_steps = true" out
    if isinstance(value, bool) and kind is int:
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"{key} has invalid type {type(value).__name__}")
    return value


def _string_list(value: Any, key: str) -> tuple[str, ...]:
    _expect(value, list, key)
    for item in value:
        _expect(item, str, key)
    return tuple(value)


def config_from_dict(data: dict[str, Any]) -> InterpreterConfig:
    """Build an InterpreterConfig from parsed TOML data."""
    interp = _expect(data.get("interpreter", {}), dict, "interpreter")
    caps = _expect(data.get("capabilities", {}), dict, "capabilities")

    max_steps = _expect(interp.get("max_steps", 0), int, "interpreter.max_steps")
    if max_steps < 0:
        raise ConfigError("interpreter.max_steps must be >= 0")

    loop_index = _string_list(
        interp.get("loop_index", list(DEFAULT_LOOP_INDEX_NAMES)), "interpreter.loop_index"
    )
    if not loop_index:
        raise ConfigError("interpreter.loop_index needs at least one name")

    capabilities = Capabilities(
        modules=frozenset(
            _string_list(caps.get("modules", list(DEFAULT_MODULES)), "capabilities.modules")
        ),
        elements=frozenset(
            _string_list(caps.get("elements", list(DEFAULT_ELEMENTS)), "capabilities.elements")
        ),
        element_module=_expect(
            caps.get("element_module", "view"), str, "capabilities.element_module"
        ),
    )

    return InterpreterConfig(
        strict=_expect(interp.get("strict", False), bool, "interpreter.strict"),
        short_circuit=_expect(
            interp.get("short_circuit", False), bool, "interpreter.short_circuit"
        ),
        loop_index_names=loop_index,
        max_steps=max_steps,
        capabilities=capabilities,
    )


def load_config(path: Path) -> InterpreterConfig:
    """Load ``azalea.toml`` from ``path``."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    return config_from_dict(data)


def find_config(start: Path) -> Path | None:
    """Walk from ``start`` up to the filesystem root looking for azalea.toml."""
    current = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
