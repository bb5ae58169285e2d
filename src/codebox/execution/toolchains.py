from __future__ import annotations

import shutil
from dataclasses import dataclass

from ..settings import ExecutorSettings
from .types import Language


@dataclass(frozen=True, slots=True)
class ToolchainInfo:
    """Availability of the host binaries one language needs.

    Example:
        ```python
        info = ToolchainInfo(Language.JAVA, ("javac", "java"), ("javac",), "java")
        ```
    """

    language: Language
    commands: tuple[str, ...]
    missing: tuple[str, ...]
    extension: str

    @property
    def available(self) -> bool:
        return not self.missing


def commands_for_language(language: Language, settings: ExecutorSettings) -> tuple[str, ...]:
    """Return the configured commands a language's pipeline spawns.

    Example:
        ```python
        commands_for_language(Language.JAVA, ExecutorSettings())  # ("javac", "java")
        ```
    """
    if language is Language.PYTHON:
        return (settings.python_command,)
    if language is Language.JAVA:
        return (settings.javac_command, settings.java_command)
    return (settings.node_command,)


def toolchain_report(settings: ExecutorSettings) -> list[ToolchainInfo]:
    """Check `PATH` for every supported language's toolchain.

    Example:
        ```python
        for info in toolchain_report(ExecutorSettings()):
            print(info.language.value, info.available)
        ```
    """
    report: list[ToolchainInfo] = []
    for language in Language:
        commands = commands_for_language(language, settings)
        missing = tuple(cmd for cmd in commands if shutil.which(cmd) is None)
        report.append(ToolchainInfo(language, commands, missing, language.extension))
    return report
