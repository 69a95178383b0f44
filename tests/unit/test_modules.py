"""Tests for the module registry and the testing doubles."""

from collections.abc import Sequence

import pytest

from azalea.core.errors import ModuleDispatchError, UnknownModuleError
from azalea.core.modules import (
    DispatchContext,
    FunctionModule,
    ModuleHandler,
    ModuleRegistry,
    canonical_module_name,
)
from azalea.core.values import VOID, Value, ValueKind
from azalea.testing import OutputCollector, RecordedCall, RecordingModule


def make_context(module: str = "net", method: str = "get") -> DispatchContext:
    return DispatchContext(
        module=module,
        method=method,
        emit=lambda line: None,
        lookup=lambda name: VOID,
        call_function=lambda function, args: VOID,
    )


@pytest.fixture
def registry() -> ModuleRegistry:
    return ModuleRegistry()


class TestRegistration:
    def test_names_are_case_insensitive(self, registry: ModuleRegistry) -> None:
        registry.register(" Net ", RecordingModule("net"))
        assert "net" in registry
        assert "NET" in registry
        assert registry.names() == frozenset({"net"})

    def test_callable_is_wrapped(self, registry: ModuleRegistry) -> None:
        registry.register("vm", lambda method, args, context: method.upper())
        handler = registry.get("vm")
        assert isinstance(handler, FunctionModule)
        assert isinstance(handler, ModuleHandler)

    def test_handler_object_is_kept(self, registry: ModuleRegistry) -> None:
        module = RecordingModule("file")
        registry.register("file", module)
        assert registry.get("file") is module

    def test_replace_handler(self, registry: ModuleRegistry) -> None:
        first, second = RecordingModule("a"), RecordingModule("b")
        registry.register("net", first)
        registry.register("net", second)
        assert registry.get("net") is second
        assert len(registry) == 1

    def test_unregister(self, registry: ModuleRegistry) -> None:
        registry.register("net", RecordingModule())
        registry.unregister("NET")
        assert "net" not in registry
        registry.unregister("never-registered")

    def test_iteration(self, registry: ModuleRegistry) -> None:
        registry.register("net", RecordingModule())
        registry.register("file", RecordingModule())
        assert sorted(registry) == ["file", "net"]

    def test_empty_name_rejected(self, registry: ModuleRegistry) -> None:
        with pytest.raises(ValueError):
            registry.register("  ", RecordingModule())

    def test_non_callable_rejected(self, registry: ModuleRegistry) -> None:
        with pytest.raises(TypeError):
            registry.register("net", 42)  # type: ignore[arg-type]

    def test_non_string_membership(self, registry: ModuleRegistry) -> None:
        assert 1 not in registry

    def test_canonical_name(self) -> None:
        assert canonical_module_name("  View ") == "view"


class TestDispatch:
    def test_unknown_module(self, registry: ModuleRegistry) -> None:
        with pytest.raises(UnknownModuleError):
            registry.dispatch("net", "get", [], make_context())

    def test_none_becomes_void(self, registry: ModuleRegistry) -> None:
        registry.register("net", lambda method, args, context: None)
        assert registry.dispatch("net", "get", [], make_context()) is VOID

    def test_plain_results_are_converted(self, registry: ModuleRegistry) -> None:
        registry.register("net", lambda method, args, context: [1, "a"])
        result = registry.dispatch("net", "get", [], make_context())
        assert result.kind == ValueKind.LIST
        assert result.to_text() == "[1, a]"

    def test_value_results_pass_through(self, registry: ModuleRegistry) -> None:
        value = Value.text("ok")
        registry.register("net", lambda method, args, context: value)
        assert registry.dispatch("net", "get", [], make_context()) is value

    def test_handler_receives_arguments(self, registry: ModuleRegistry) -> None:
        seen: list[tuple[str, Sequence[Value]]] = []

        def handler(method: str, args: Sequence[Value], context: DispatchContext) -> None:
            seen.append((method, args))

        registry.register("net", handler)
        registry.dispatch("NET", "post", [Value.number(1)], make_context())
        assert seen == [("post", (Value.number(1),))]

    def test_handler_error_is_wrapped(self, registry: ModuleRegistry) -> None:
        def handler(method: str, args: Sequence[Value], context: DispatchContext) -> None:
            raise KeyError("missing")

        registry.register("net", handler)
        with pytest.raises(ModuleDispatchError, match="'net' failed in 'get'") as exc_info:
            registry.dispatch("net", "get", [], make_context())
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestRecordingModule:
    def test_records_plain_arguments(self) -> None:
        module = RecordingModule("net", result="ok")
        args = [Value.number(1), Value.list_of([Value.text("a")])]
        assert module.call("get", args, make_context()) == "ok"
        assert module.calls == [RecordedCall("net", "get", (1, ["a"]))]
        assert module.methods == ["get"]

    def test_module_name_comes_from_context(self) -> None:
        module = RecordingModule("fallback")
        module.call("button", [], make_context(module="view"))
        assert module.calls[0].module == "view"

    def test_callable_result(self) -> None:
        module = RecordingModule(result=lambda method, args: len(args))
        assert module.call("count", [VOID, VOID], make_context()) == 2

    def test_clear(self) -> None:
        module = RecordingModule()
        module.call("get", [], make_context())
        module.clear()
        assert module.calls == []


class TestOutputCollector:
    def test_collects_lines(self) -> None:
        collector = OutputCollector()
        collector("a")
        collector("b")
        assert collector.lines == ["a", "b"]
        assert collector.text == "a\nb"

    def test_clear(self) -> None:
        collector = OutputCollector()
        collector("a")
        collector.clear()
        assert collector.lines == []
        assert collector.text == ""
