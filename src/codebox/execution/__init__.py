from .engine import LanguageEngine
from .types import ExecutionRequest, ExecutionResult, Language, ProcessOutcome, UnsupportedLanguage

__all__ = [
    "ExecutionRequest",
    "ExecutionResult",
    "Language",
    "LanguageEngine",
    "ProcessOutcome",
    "UnsupportedLanguage",
]
