"""Shared pytest fixtures for Azalea tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from azalea.core.config import InterpreterConfig
from azalea.runtime import Runtime
from azalea.testing import OutputCollector


@pytest.fixture
def output() -> OutputCollector:
    """Return an empty output collector."""
    return OutputCollector()


@pytest.fixture
def runtime(output: OutputCollector) -> Runtime:
    """Return a default runtime writing to the ``output`` collector."""
    return Runtime(output=output)


@pytest.fixture
def run() -> Callable[..., list[str]]:
    """
    Return a helper that executes source on a fresh runtime.

    Keyword arguments are passed to InterpreterConfig; the helper returns the
    emitted lines.
    """

    def _run(source: str, **config: object) -> list[str]:
        collector = OutputCollector()
        config_ = InterpreterConfig(**config)  # type: ignore[arg-type]
        Runtime(config_, output=collector).execute(source)
        return collector.lines

    return _run


@pytest.fixture
def examples_dir() -> Path:
    """Return path to the sample programs directory."""
    return Path(__file__).parent.parent / "examples"
