from __future__ import annotations

import os
import sys
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import SettingsError

SETTINGS_ENV_VAR = "CODEBOX_SETTINGS"
DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_COMPILE_TIMEOUT_SECONDS = 10
DEFAULT_MAX_OUTPUT_KB = 1024
LOG_FORMATS = {"text", "json"}


def _read_settings_toml(path: Path) -> dict[str, Any]:
    """Read a settings TOML file, accepting an optional `[settings]` table.

    Example:
        ```python
        raw = _read_settings_toml(Path("/etc/codebox.toml"))
        ```
    """
    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Invalid settings TOML in {path}: {exc}") from exc
    settings_obj = raw.get("settings", raw)
    if not isinstance(settings_obj, dict):
        raise SettingsError("Settings config must be a TOML table")
    return settings_obj


def _positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SettingsError(f"'{field_name}' must be an integer")
    if value <= 0:
        raise SettingsError(f"'{field_name}' must be positive")
    return value


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SettingsError(f"'{field_name}' must be a non-empty string")
    return value


def _list_of_str(value: Any, field_name: str) -> list[str]:
    """Validate and normalize a list-of-strings settings field.

    Example:
        ```python
        tokens = _list_of_str(["abc"], "api_tokens")
        ```
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise SettingsError(f"'{field_name}' must be a list of strings")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise SettingsError(f"'{field_name}' must contain only strings")
        out.append(item)
    return out


def _default_python_command() -> str:
    return sys.executable or "python3"


@dataclass(slots=True)
class ExecutorSettings:
    """Runtime settings for the execution service.

    Example:
        ```python
        settings = ExecutorSettings(timeout_seconds=5, api_tokens=["secret"])
        ```
    """

    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    compile_timeout_seconds: int = DEFAULT_COMPILE_TIMEOUT_SECONDS
    python_command: str = field(default_factory=_default_python_command)
    node_command: str = "node"
    javac_command: str = "javac"
    java_command: str = "java"
    temp_dir: str = field(default_factory=tempfile.gettempdir)
    max_output_kb: int = DEFAULT_MAX_OUTPUT_KB
    log_level: str = "INFO"
    log_format: str = "text"
    api_tokens: list[str] = field(default_factory=list)
    api_prefix: str = "/api"
    config_path: str | None = None

    def __post_init__(self) -> None:
        """Validate fields after dataclass initialization.

        Example:
            ```python
            ExecutorSettings(log_format="json")
            ```
        """
        _positive_int(self.timeout_seconds, "timeout_seconds")
        _positive_int(self.compile_timeout_seconds, "compile_timeout_seconds")
        _positive_int(self.max_output_kb, "max_output_kb")
        for name in ("python_command", "node_command", "javac_command", "java_command", "temp_dir"):
            _str(getattr(self, name), name)
        if self.log_format not in LOG_FORMATS:
            raise SettingsError("log_format must be 'text' or 'json'")
        if not self.api_prefix.startswith("/"):
            raise SettingsError("api_prefix must start with '/'")
        self.api_prefix = self.api_prefix.rstrip("/")

    @property
    def max_output_bytes(self) -> int:
        return self.max_output_kb * 1024

    @classmethod
    def from_file(cls, config_path: str) -> "ExecutorSettings":
        """Create settings from a TOML file; missing keys keep their defaults.

        Example:
            ```python
            settings = ExecutorSettings.from_file("/etc/codebox.toml")
            ```
        """
        path = Path(config_path)
        if not path.exists():
            raise SettingsError(f"Settings file not found: {config_path}")
        raw = _read_settings_toml(path)
        known = {f for f in cls.__dataclass_fields__ if f != "config_path"}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise SettingsError(f"Unknown settings: {', '.join(unknown)}")
        kwargs: dict[str, Any] = dict(raw)
        if "api_tokens" in kwargs:
            kwargs["api_tokens"] = _list_of_str(kwargs["api_tokens"], "api_tokens")
        for name in ("log_level", "log_format", "api_prefix"):
            if name in kwargs:
                kwargs[name] = _str(kwargs[name], name)
        return cls(**kwargs, config_path=config_path)


def load_settings(config_path: str | None = None) -> ExecutorSettings:
    """Resolve settings from an explicit path, `$CODEBOX_SETTINGS`, or defaults.

    Example:
        ```python
        settings = load_settings()
        ```
    """
    path = config_path or os.environ.get(SETTINGS_ENV_VAR)
    if path:
        return ExecutorSettings.from_file(path)
    return ExecutorSettings()
