from __future__ import annotations

from typing import Protocol

from .types import NO_OUTPUT_SENTINEL, ExecutionResult, ProcessOutcome


class LanguageEngine(Protocol):
    def execute(self, code: str, stdin: str = "") -> ExecutionResult:
        """Run one submission end to end and return its shaped result.

        Example:
            ```python
            result = engine.execute("print('hi')")
            ```
        """
        ...


def timeout_message(timeout_seconds: int) -> str:
    return f"Execution timed out after {timeout_seconds}s"


def shape_outcome(
    outcome: ProcessOutcome,
    *,
    timeout_seconds: int,
    spawn_hint: str,
) -> ExecutionResult:
    """Turn a run-phase process outcome into an `ExecutionResult`.

    `spawn_hint` is a template with a `{reason}` placeholder used when the
    interpreter could not be started.

    Example:
        ```python
        result = shape_outcome(outcome, timeout_seconds=10,
                               spawn_hint="Python execution error: {reason}.")
        ```
    """
    if outcome.spawn_error is not None:
        return ExecutionResult(output="", error=spawn_hint.format(reason=outcome.spawn_error))
    if outcome.timed_out:
        return ExecutionResult(output="", error=timeout_message(timeout_seconds))
    if outcome.returncode == 0:
        return ExecutionResult(output=outcome.stdout.strip() or NO_OUTPUT_SENTINEL)
    return ExecutionResult(
        output=outcome.stdout.strip(),
        error=outcome.stderr.strip() or f"Process exited with code {outcome.returncode}",
    )
