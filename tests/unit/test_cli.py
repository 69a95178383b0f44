"""Tests for the azalea command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from azalea import __version__
from azalea.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every command from an empty directory so no azalea.toml is picked up."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def program(tmp_path: Path) -> Path:
    path = tmp_path / "prog.az"
    path.write_text('let name = "world"\nsay name\n', encoding="utf-8")
    return path


# =============================================================================
# eval / run
# =============================================================================


class TestEval:
    def test_output(self) -> None:
        result = runner.invoke(app, ["eval", 'say "hi"'])
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == "hi"

    def test_prints_result_value(self) -> None:
        result = runner.invoke(app, ["eval", "1 + 2"])
        assert result.exit_code == 0
        assert "=> 3" in result.output

    def test_void_result_is_not_printed(self) -> None:
        result = runner.invoke(app, ["eval", "let x = 1"])
        assert result.exit_code == 0
        assert "=>" not in result.output

    def test_lenient_by_default(self) -> None:
        result = runner.invoke(app, ["eval", "say missing\nsay 1 / 0"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["", "0"]

    def test_strict_failure(self) -> None:
        result = runner.invoke(app, ["eval", "--strict", "say missing"])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "missing" in result.output

    def test_record_modules(self) -> None:
        result = runner.invoke(app, ["eval", "--record-modules", "net get 'example.com'"])
        assert result.exit_code == 0
        assert "Module Calls" in result.output
        assert "get" in result.output

    def test_record_modules_without_calls(self) -> None:
        result = runner.invoke(app, ["eval", "--record-modules", "say 1"])
        assert result.exit_code == 0
        assert "No module calls recorded" in result.output

    def test_deep_recursion_is_reported(self) -> None:
        result = runner.invoke(app, ["eval", "function f() { call f() }\ncall f()"])
        assert result.exit_code == 1
        assert "recursion" in result.output


class TestRun:
    def test_run_file(self, program: Path) -> None:
        result = runner.invoke(app, ["run", str(program)])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["world"]

    def test_missing_file(self) -> None:
        result = runner.invoke(app, ["run", "nope.az"])
        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_strict_error_names_location(self, tmp_path: Path) -> None:
        (tmp_path / "bad.az").write_text("say 10 / 0\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "--strict", "bad.az"])
        assert result.exit_code == 1
        assert "bad.az:1:8" in result.output

    def test_config_file_next_to_program(self, tmp_path: Path) -> None:
        (tmp_path / "azalea.toml").write_text(
            '[interpreter]\nloop_index = ["i"]\n', encoding="utf-8"
        )
        (tmp_path / "count.az").write_text("loop 2 { say i }\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "count.az"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["0", "1"]

    def test_explicit_config(self, tmp_path: Path) -> None:
        config = tmp_path / "custom.toml"
        config.write_text("[interpreter]\nstrict = true\n", encoding="utf-8")
        (tmp_path / "bad.az").write_text("say nope\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "--config", str(config), "bad.az"])
        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path: Path, program: Path) -> None:
        config = tmp_path / "broken.toml"
        config.write_text("[interpreter]\nmax_steps = -1\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "-c", str(config), str(program)])
        assert result.exit_code == 1
        assert "max_steps" in result.output


# =============================================================================
# Inspection commands
# =============================================================================


class TestInspection:
    def test_tokens(self, program: Path) -> None:
        result = runner.invoke(app, ["tokens", str(program)])
        assert result.exit_code == 0
        assert "keyword" in result.output
        assert "identifier" in result.output

    def test_ast(self, program: Path) -> None:
        result = runner.invoke(app, ["ast", str(program)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["kind"] == "program"
        assert [child["kind"] for child in data["children"]] == ["declaration", "output"]

    def test_ast_strict_failure(self, tmp_path: Path) -> None:
        (tmp_path / "bad.az").write_text("let x 5\n", encoding="utf-8")
        result = runner.invoke(app, ["ast", "--strict", "bad.az"])
        assert result.exit_code == 1

    def test_keywords(self) -> None:
        result = runner.invoke(app, ["keywords"])
        assert result.exit_code == 0
        assert "declare" in result.output
        assert "assign_op" in result.output


# =============================================================================
# repl / version
# =============================================================================


class TestRepl:
    def test_state_carries_between_lines(self) -> None:
        result = runner.invoke(app, ["repl"], input="let x = 2\nsay x * 3\n:quit\n")
        assert result.exit_code == 0
        assert any(line.endswith("6") for line in result.output.splitlines())

    def test_errors_do_not_end_session(self) -> None:
        result = runner.invoke(app, ["repl", "--strict"], input="say nope\nsay 1\n")
        assert result.exit_code == 0
        assert "Error:" in result.output
        assert any(line.endswith("1") for line in result.output.splitlines())

    def test_eof_exits(self) -> None:
        result = runner.invoke(app, ["repl"], input="")
        assert result.exit_code == 0


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"Azalea version {__version__}" in result.output
