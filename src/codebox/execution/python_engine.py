from __future__ import annotations

from ..settings import ExecutorSettings
from .engine import shape_outcome
from .process import run_process
from .types import ExecutionResult
from .workspace import unique_token, workspace

SPAWN_HINT = "Python execution error: {reason}. Make sure Python is installed."


class PythonEngine:
    """Run Python submissions through the configured interpreter.

    Example:
        ```python
        engine = PythonEngine(ExecutorSettings())
        result = engine.execute("print(input())", stdin="hello")
        ```
    """

    def __init__(self, settings: ExecutorSettings) -> None:
        self._settings = settings

    def execute(self, code: str, stdin: str = "") -> ExecutionResult:
        """Write the source to a fresh workspace and run it under a deadline.

        Example:
            ```python
            result = engine.execute("print(1 + 1)")
            ```
        """
        settings = self._settings
        with workspace("python", base_dir=settings.temp_dir) as ws:
            source = ws.write(f"temp_{unique_token()}.py", code)
            outcome = run_process(
                [settings.python_command, str(source)],
                stdin=stdin,
                timeout_seconds=settings.timeout_seconds,
                cwd=ws.path,
                max_output_bytes=settings.max_output_bytes,
            )
        return shape_outcome(
            outcome,
            timeout_seconds=settings.timeout_seconds,
            spawn_hint=SPAWN_HINT,
        )
