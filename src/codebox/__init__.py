__version__ = "0.1.0"

from .exceptions import CodeboxError, ExecutionError, SettingsError, WorkspaceError
from .execution.types import ExecutionRequest, ExecutionResult, Language, UnsupportedLanguage, parse_language
from .runner import Dispatcher, run_code
from .settings import ExecutorSettings, load_settings

__all__ = [
    "CodeboxError",
    "Dispatcher",
    "ExecutionError",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutorSettings",
    "Language",
    "SettingsError",
    "UnsupportedLanguage",
    "WorkspaceError",
    "__version__",
    "load_settings",
    "parse_language",
    "run_code",
]
