from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

NO_OUTPUT_SENTINEL = "Code executed successfully (no output)"


class Language(str, Enum):
    """Languages the service knows how to execute.

    Example:
        ```python
        lang = Language.PYTHON
        ```
    """

    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_LABELS = {
    Language.JAVASCRIPT: "JavaScript",
    Language.PYTHON: "Python",
    Language.JAVA: "Java",
}
_EXTENSIONS = {
    Language.JAVASCRIPT: "js",
    Language.PYTHON: "py",
    Language.JAVA: "java",
}
_ALIASES = {
    "js": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "py": Language.PYTHON,
    "python3": Language.PYTHON,
}


@dataclass(frozen=True, slots=True)
class UnsupportedLanguage:
    """A language identifier outside the supported set, kept verbatim.

    Example:
        ```python
        lang = UnsupportedLanguage(name="ruby")
        ```
    """

    name: str


def parse_language(raw: str) -> Language | UnsupportedLanguage:
    """Resolve a raw identifier to a `Language`, case-insensitively.

    Example:
        ```python
        parse_language("Python")   # Language.PYTHON
        parse_language("ruby")     # UnsupportedLanguage(name="ruby")
        ```
    """
    key = raw.strip().lower()
    try:
        return Language(key)
    except ValueError:
        pass
    if key in _ALIASES:
        return _ALIASES[key]
    return UnsupportedLanguage(name=raw)


@dataclass(slots=True)
class ExecutionRequest:
    """One submission: source, target language and optional stdin.

    Example:
        ```python
        req = ExecutionRequest(code="print(input())", language=Language.PYTHON, stdin="hi")
        ```
    """

    code: str
    language: Language | UnsupportedLanguage
    stdin: str = ""


@dataclass(slots=True)
class ExecutionResult:
    """Uniform outcome of one submission.

    `output` holds trimmed stdout, `error` is set on any failure and
    `execution_time_ms` is stamped by the dispatcher.

    Example:
        ```python
        res = ExecutionResult(output="42")
        ```
    """

    output: str
    error: str | None = None
    execution_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, object]:
        """Render the wire shape `{output, error?, executionTime}`.

        Example:
            ```python
            ExecutionResult(output="hi", execution_time_ms=3).to_payload()
            ```
        """
        payload: dict[str, object] = {"output": self.output}
        if self.error is not None:
            payload["error"] = self.error
        payload["executionTime"] = self.execution_time_ms
        return payload


@dataclass(slots=True)
class ProcessOutcome:
    """Normalized outcome of one spawned process.

    `spawn_error` is set when the binary could not be started at all;
    `timed_out` when the deadline elapsed and the process was killed.

    Example:
        ```python
        out = ProcessOutcome(stdout="hi\\n", stderr="", returncode=0)
        ```
    """

    stdout: str
    stderr: str
    returncode: int | None
    timed_out: bool = False
    spawn_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.spawn_error is None and not self.timed_out and self.returncode == 0
