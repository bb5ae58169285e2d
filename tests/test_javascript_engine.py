import shutil
import time
from pathlib import Path

import pytest

from codebox import ExecutorSettings
from codebox.execution.javascript_engine import JavaScriptEngine
from codebox.execution.types import NO_OUTPUT_SENTINEL

requires_node = pytest.mark.skipif(shutil.which("node") is None, reason="Node.js is not installed")


@pytest.fixture
def engine(tmp_path: Path) -> JavaScriptEngine:
    return JavaScriptEngine(ExecutorSettings(timeout_seconds=2, temp_dir=str(tmp_path)))


def test_missing_node_names_the_tool(tmp_path: Path) -> None:
    engine = JavaScriptEngine(ExecutorSettings(node_command="codebox-missing-node", temp_dir=str(tmp_path)))
    result = engine.execute("console.log(1)")

    assert result.output == ""
    assert "Make sure Node.js is installed." in (result.error or "")


@requires_node
def test_console_log_is_captured(engine: JavaScriptEngine) -> None:
    result = engine.execute('console.log("sum", 1 + 2, {a: [1, 2]});\nconsole.log("next");')

    assert result.output == 'sum 3 {"a":[1,2]}\nnext'
    assert result.error is None


@requires_node
def test_warn_and_error_are_prefixed(engine: JavaScriptEngine) -> None:
    result = engine.execute('console.warn("careful");\nconsole.error("broken", 7);')

    assert result.output == "Warning: careful\nError: broken 7"


@requires_node
def test_silent_program_yields_sentinel(engine: JavaScriptEngine) -> None:
    result = engine.execute("const x = 40 + 2;")

    assert result.output == NO_OUTPUT_SENTINEL
    assert result.error is None


@requires_node
def test_top_level_return_is_allowed(engine: JavaScriptEngine) -> None:
    result = engine.execute('console.log("first");\nreturn;\nconsole.log("never");')

    assert result.output == "first"


@requires_node
def test_thrown_error_reports_message_only(engine: JavaScriptEngine) -> None:
    result = engine.execute('console.log("lost");\nthrow new Error("boom");')

    assert result.output == ""
    assert result.error == "boom"


@requires_node
def test_thrown_error_with_empty_message_stays_empty(engine: JavaScriptEngine) -> None:
    result = engine.execute('throw new Error("");')

    assert result.output == ""
    assert result.error == ""
    assert not result.ok


@requires_node
@pytest.mark.parametrize("snippet", ['require("fs")', "process.exit(0)"])
def test_host_bindings_are_unreachable(engine: JavaScriptEngine, snippet: str) -> None:
    result = engine.execute(snippet)

    assert result.output == ""
    assert "is not defined" in (result.error or "")


@requires_node
def test_infinite_loop_times_out(engine: JavaScriptEngine) -> None:
    started = time.monotonic()
    result = engine.execute("while (true) {}")

    assert result.output == ""
    assert result.error == "Execution timed out after 2s"
    assert time.monotonic() - started < 10


@requires_node
def test_workspace_is_removed(engine: JavaScriptEngine, tmp_path: Path) -> None:
    engine.execute('console.log("ok")')

    assert list(tmp_path.iterdir()) == []
