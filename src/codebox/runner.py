from __future__ import annotations

import logging
import time
from typing import Mapping

from .exceptions import ExecutionError
from .execution.engine import LanguageEngine
from .execution.java_engine import JavaEngine
from .execution.javascript_engine import JavaScriptEngine
from .execution.python_engine import PythonEngine
from .execution.types import (
    ExecutionRequest,
    ExecutionResult,
    Language,
    UnsupportedLanguage,
    parse_language,
)
from .settings import ExecutorSettings, load_settings

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Code and language are required"


def build_engines(settings: ExecutorSettings) -> dict[Language, LanguageEngine]:
    """Create one engine per supported language.

    Example:
        ```python
        engines = build_engines(ExecutorSettings())
        ```
    """
    return {
        Language.JAVASCRIPT: JavaScriptEngine(settings),
        Language.PYTHON: PythonEngine(settings),
        Language.JAVA: JavaEngine(settings),
    }


def build_request(code: str | None, language: str | None, stdin: str | None = None) -> ExecutionRequest:
    """Validate raw fields and build a request; nothing runs on failure.

    Example:
        ```python
        req = build_request("print(1)", "python")
        ```
    """
    if not code or not language:
        raise ValueError(MISSING_FIELDS_MESSAGE)
    return ExecutionRequest(code=code, language=parse_language(language), stdin=stdin or "")


class Dispatcher:
    """Route requests to the engine for their language and time the run.

    Example:
        ```python
        dispatcher = Dispatcher(ExecutorSettings(timeout_seconds=5))
        result = dispatcher.dispatch(build_request("print(1)", "python"))
        ```
    """

    def __init__(
        self,
        settings: ExecutorSettings | None = None,
        engines: Mapping[Language, LanguageEngine] | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._engines = dict(engines) if engines is not None else build_engines(self._settings)

    @property
    def settings(self) -> ExecutorSettings:
        return self._settings

    def dispatch(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute one validated request and stamp its wall-clock time.

        Unsupported languages resolve to an error result. Unexpected engine
        failures are re-raised as `ExecutionError`.

        Example:
            ```python
            result = dispatcher.dispatch(ExecutionRequest("print(1)", Language.PYTHON))
            ```
        """
        started = time.monotonic()
        language = request.language
        label = language.name if isinstance(language, UnsupportedLanguage) else language.value
        engine = None if isinstance(language, UnsupportedLanguage) else self._engines.get(language)
        if engine is None:
            result = ExecutionResult(output="", error=f"Execution for {label} is not supported yet")
        else:
            logger.debug("Dispatching %s submission (%d chars)", label, len(request.code))
            try:
                result = engine.execute(request.code, request.stdin)
            except Exception as exc:
                logger.exception("Unexpected failure executing %s code", label)
                raise ExecutionError(str(exc) or "Internal server error") from exc

        result.execution_time_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Executed %s submission in %dms (%s)",
            label,
            result.execution_time_ms,
            "ok" if result.ok else "error",
        )
        return result


def run_code(
    code: str,
    language: str,
    stdin: str = "",
    *,
    settings: ExecutorSettings | None = None,
    dispatcher: Dispatcher | None = None,
) -> ExecutionResult:
    """Validate, dispatch and execute one submission.

    Example:
        ```python
        from codebox import run_code
        result = run_code("print(input()[::-1])", "python", stdin="abc")
        ```
    """
    if dispatcher is not None and settings is not None:
        raise ValueError("Provide either 'settings' or 'dispatcher', not both")
    request = build_request(code, language, stdin)
    return (dispatcher or Dispatcher(settings)).dispatch(request)
