from __future__ import annotations

import logging
import re

from ..settings import ExecutorSettings
from .engine import shape_outcome, timeout_message
from .process import run_process
from .types import ExecutionResult
from .workspace import workspace

logger = logging.getLogger(__name__)

_PUBLIC_CLASS_PATTERN = re.compile(r"public\s+class\s+(\w+)")
DEFAULT_CLASS_NAME = "Main"
COMPILE_SPAWN_HINT = "Java compilation error: {reason}. Make sure Java JDK is installed."
RUN_SPAWN_HINT = "Java execution error: {reason}. Make sure Java is installed."


def extract_class_name(code: str) -> str:
    """Return the declared public class name, or `Main` when there is none.

    javac requires the source file to be named after its public class.

    Example:
        ```python
        extract_class_name("public class Foo { }")  # "Foo"
        ```
    """
    match = _PUBLIC_CLASS_PATTERN.search(code)
    return match.group(1) if match else DEFAULT_CLASS_NAME


class JavaEngine:
    """Compile with javac, then run with java, each under its own deadline.

    Example:
        ```python
        engine = JavaEngine(ExecutorSettings())
        result = engine.execute(JAVA_SOURCE, stdin="42")
        ```
    """

    def __init__(self, settings: ExecutorSettings) -> None:
        self._settings = settings

    def execute(self, code: str, stdin: str = "") -> ExecutionResult:
        """Compile and run one submission; the run phase is skipped on compile failure.

        Example:
            ```python
            result = engine.execute("public class Main { public static void main(String[] a) {} }")
            ```
        """
        settings = self._settings
        class_name = extract_class_name(code)
        with workspace("java", base_dir=settings.temp_dir) as ws:
            source = ws.write(f"{class_name}.java", code)
            compiled = run_process(
                [settings.javac_command, source.name],
                timeout_seconds=settings.compile_timeout_seconds,
                cwd=ws.path,
                max_output_bytes=settings.max_output_bytes,
            )
            if compiled.spawn_error is not None:
                return ExecutionResult(
                    output="",
                    error=COMPILE_SPAWN_HINT.format(reason=compiled.spawn_error),
                )
            if compiled.timed_out:
                return ExecutionResult(
                    output="",
                    error=timeout_message(settings.compile_timeout_seconds),
                )
            if compiled.returncode != 0:
                logger.info("Compilation of %s failed", source.name)
                return ExecutionResult(
                    output="",
                    error=compiled.stderr.strip() or "Compilation failed",
                )

            outcome = run_process(
                [settings.java_command, "-cp", str(ws.path), class_name],
                stdin=stdin,
                timeout_seconds=settings.timeout_seconds,
                cwd=ws.path,
                max_output_bytes=settings.max_output_bytes,
            )
        return shape_outcome(
            outcome,
            timeout_seconds=settings.timeout_seconds,
            spawn_hint=RUN_SPAWN_HINT,
        )
