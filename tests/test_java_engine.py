import shutil
import time
from pathlib import Path

import pytest

from codebox import ExecutorSettings
from codebox.execution.java_engine import JavaEngine, extract_class_name
from codebox.execution.types import NO_OUTPUT_SENTINEL

requires_jdk = pytest.mark.skipif(
    shutil.which("javac") is None or shutil.which("java") is None,
    reason="Java JDK is not installed",
)

ECHO_PROGRAM = """
import java.util.Scanner;

public class Echo {
    public static void main(String[] args) {
        Scanner in = new Scanner(System.in);
        while (in.hasNextLine()) {
            System.out.println(in.nextLine());
        }
    }
}
"""


@pytest.fixture
def engine(tmp_path: Path) -> JavaEngine:
    return JavaEngine(
        ExecutorSettings(timeout_seconds=2, compile_timeout_seconds=60, temp_dir=str(tmp_path))
    )


def test_extract_public_class_name() -> None:
    assert extract_class_name("public class Foo {\n}") == "Foo"
    assert extract_class_name("import x;\npublic   class\tSolution extends Base {}") == "Solution"


def test_extract_falls_back_to_main() -> None:
    assert extract_class_name("class Helper {}") == "Main"
    assert extract_class_name("") == "Main"


def test_missing_compiler_short_circuits(tmp_path: Path) -> None:
    engine = JavaEngine(
        ExecutorSettings(
            javac_command="codebox-missing-javac",
            java_command="codebox-missing-java",
            temp_dir=str(tmp_path),
        )
    )
    result = engine.execute("public class Main { public static void main(String[] a) {} }")

    assert result.output == ""
    assert (result.error or "").startswith("Java compilation error:")
    assert "Make sure Java JDK is installed." in (result.error or "")
    assert list(tmp_path.iterdir()) == []


@requires_jdk
def test_stdin_round_trip(engine: JavaEngine) -> None:
    result = engine.execute(ECHO_PROGRAM, stdin="hello")

    assert result.ok
    assert "hello" in result.output


@requires_jdk
def test_silent_program_yields_sentinel(engine: JavaEngine) -> None:
    result = engine.execute("public class Quiet { public static void main(String[] a) { int x = 1; } }")

    assert result.output == NO_OUTPUT_SENTINEL
    assert result.error is None


@requires_jdk
def test_compile_error_references_public_class_file(engine: JavaEngine, tmp_path: Path) -> None:
    code = "public class Foo {\n    public static void main(String[] a) {\n        int x = \n    }\n}\n"
    result = engine.execute(code)

    assert result.output == ""
    assert "Foo.java" in (result.error or "")
    assert list(tmp_path.iterdir()) == []


@requires_jdk
def test_program_without_public_class_runs_as_main(engine: JavaEngine) -> None:
    code = 'class Main { public static void main(String[] a) { System.out.println("fallback"); } }'
    result = engine.execute(code)

    assert result.output == "fallback"


@requires_jdk
def test_runtime_exception_reports_stderr(engine: JavaEngine) -> None:
    code = (
        "public class Boom { public static void main(String[] a) {"
        ' System.out.println("before"); throw new IllegalStateException("kaput"); } }'
    )
    result = engine.execute(code)

    assert result.output == "before"
    assert "IllegalStateException" in (result.error or "")


@requires_jdk
def test_infinite_loop_times_out(engine: JavaEngine, tmp_path: Path) -> None:
    code = "public class Spin { public static void main(String[] a) { while (true) { } } }"
    started = time.monotonic()
    result = engine.execute(code)

    assert result.error == "Execution timed out after 2s"
    assert result.output == ""
    assert time.monotonic() - started < 70
    assert list(tmp_path.iterdir()) == []
