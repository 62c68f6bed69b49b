import os
from collections.abc import Callable
from typing import Any

import pytest

from nad.nad_cli import run_source
from nad.nad_interpreter import Interpreter

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


RunResult = tuple[list[str], Interpreter]


@pytest.fixture  # type: ignore[misc]
def run(capsys: pytest.CaptureFixture[str]) -> Callable[..., RunResult]:
    """Runs a program on a fresh interpreter; returns stdout lines and the interpreter."""

    def _run(source: str, interactive: bool = False) -> RunResult:
        interpreter = Interpreter(interactive=interactive)
        run_source(source, interpreter)
        return capsys.readouterr().out.splitlines(), interpreter

    return _run
