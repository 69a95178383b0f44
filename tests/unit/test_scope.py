"""Tests for the scope arena."""

import pytest

from azalea.core import ir
from azalea.core.scope import GLOBAL_SCOPE, ScopeArena, captured_scopes
from azalea.core.values import Closure, Value


def closure_over(scope_id: int) -> Value:
    return Value.function(Closure(name="g", params=(), body=ir.block([]), scope=scope_id))


@pytest.fixture
def arena() -> ScopeArena:
    return ScopeArena()


class TestBindings:
    def test_empty_stack_declares_globally(self, arena: ScopeArena) -> None:
        arena.declare("x", Value.number(1))
        assert arena.globals["x"] == Value.number(1)

    def test_inner_shadows_outer(self, arena: ScopeArena) -> None:
        arena.declare("x", Value.number(1))
        with arena.entered():
            arena.declare("x", Value.number(2))
            assert arena.resolve("x") == Value.number(2)
        assert arena.resolve("x") == Value.number(1)

    def test_assign_updates_nearest_binding(self, arena: ScopeArena) -> None:
        arena.declare("x", Value.number(1))
        with arena.entered():
            with arena.entered():
                arena.assign("x", Value.number(5))
        assert arena.globals["x"] == Value.number(5)

    def test_assign_without_binding_declares_innermost(self, arena: ScopeArena) -> None:
        with arena.entered():
            arena.assign("y", Value.number(3))
            assert arena.resolve("y") == Value.number(3)
        assert arena.resolve("y") is None
        assert "y" not in arena.globals

    def test_unknown_name(self, arena: ScopeArena) -> None:
        assert arena.resolve("missing") is None

    def test_globals_view_is_read_only(self, arena: ScopeArena) -> None:
        with pytest.raises(TypeError):
            arena.globals["x"] = Value.number(1)  # type: ignore[index]


class TestLifetime:
    def test_pop_releases_scope(self, arena: ScopeArena) -> None:
        with arena.entered():
            assert len(arena) == 2
        assert len(arena) == 1
        assert arena.depth == 0

    def test_pinned_scope_survives(self, arena: ScopeArena) -> None:
        arena.declare("g", Value.number(0))
        with arena.entered() as sid:
            arena.declare("captured", Value.text("kept"))
            arena.pin(sid)
            arena.assign("g", closure_over(sid))
        assert arena.bindings(sid)["captured"] == Value.text("kept")
        with arena.entered(sid):
            assert arena.resolve("captured") == Value.text("kept")
        assert len(arena) == 2

    def test_global_scope_cannot_be_pushed_away(self, arena: ScopeArena) -> None:
        arena.pin(GLOBAL_SCOPE)
        with arena.entered():
            pass
        assert len(arena) == 1

    def test_scope_pushed_twice_survives_inner_pop(self, arena: ScopeArena) -> None:
        sid = arena.push()
        arena.declare("x", Value.number(1))
        arena.push(sid)
        arena.pop()
        assert arena.resolve("x") == Value.number(1)
        arena.pop()
        assert len(arena) == 1

    def test_unwind_empties_stack(self, arena: ScopeArena) -> None:
        arena.push()
        arena.push()
        arena.unwind()
        assert arena.depth == 0
        assert arena.innermost is None

    def test_entered_pops_on_error(self, arena: ScopeArena) -> None:
        with pytest.raises(RuntimeError):
            with arena.entered():
                raise RuntimeError("boom")
        assert arena.depth == 0

    def test_reset_drops_globals(self, arena: ScopeArena) -> None:
        arena.declare("x", Value.number(1))
        arena.reset()
        assert arena.resolve("x") is None


class TestCapturedScopes:
    def test_pin_without_closure_is_released(self, arena: ScopeArena) -> None:
        with arena.entered() as sid:
            arena.pin(sid)
        assert sid not in arena
        assert len(arena) == 1

    def test_closure_kept_only_in_popped_scope(self, arena: ScopeArena) -> None:
        with arena.entered() as sid:
            arena.pin(sid)
            arena.declare("g", closure_over(sid))
        assert sid not in arena

    def test_carried_closure_keeps_scope(self, arena: ScopeArena) -> None:
        with arena.entered() as sid:
            arena.pin(sid)
            arena.carry(closure_over(sid))
        assert sid in arena

    def test_carry_ignores_plain_values(self, arena: ScopeArena) -> None:
        with arena.entered() as sid:
            arena.pin(sid)
            arena.carry(Value.number(1))
        assert sid not in arena

    def test_collect_releases_unreachable(self, arena: ScopeArena) -> None:
        arena.declare("f", Value.number(0))
        with arena.entered() as sid:
            arena.pin(sid)
            arena.assign("f", closure_over(sid))
        assert arena.collect() == 0
        assert sid in arena

        arena.assign("f", Value.number(0))
        assert arena.collect() == 1
        assert len(arena) == 1

    def test_collect_follows_captured_bindings(self, arena: ScopeArena) -> None:
        arena.declare("outer_fn", Value.number(0))
        with arena.entered() as outer:
            arena.pin(outer)
            with arena.entered() as inner:
                arena.pin(inner)
                arena.carry(closure_over(inner))
            arena.declare("keep", Value.list_of([closure_over(inner)]))
            arena.assign("outer_fn", closure_over(outer))
        assert arena.collect() == 0
        assert outer in arena
        assert inner in arena

    def test_collect_roots(self, arena: ScopeArena) -> None:
        with arena.entered() as sid:
            arena.pin(sid)
            arena.carry(closure_over(sid))
        assert arena.collect([closure_over(sid)]) == 0
        assert arena.collect() == 1

    def test_captured_scopes_of_nested_values(self) -> None:
        value = Value.list_of([Value.map_of({"a": closure_over(3)}), closure_over(5)])
        assert sorted(captured_scopes(value)) == [3, 5]
        assert list(captured_scopes(Value.function(Closure("h", (), ir.block([]))))) == []
