from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..exceptions import WorkspaceError

logger = logging.getLogger(__name__)


def unique_token() -> str:
    """Return an opaque token for invocation-unique file names.

    Example:
        ```python
        name = f"temp_{unique_token()}.py"
        ```
    """
    return uuid.uuid4().hex


class Workspace:
    """Scratch directory owned by exactly one invocation.

    Every allocation gets its own `mkdtemp` directory under `base_dir`,
    so even fixed file names (such as a Java class file) never collide
    across concurrent invocations.

    Example:
        ```python
        ws = Workspace.allocate("python")
        path = ws.write(f"temp_{unique_token()}.py", "print(1)")
        ws.release()
        ```
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._released = False

    @classmethod
    def allocate(cls, language: str, *, base_dir: str | None = None) -> "Workspace":
        """Create a fresh, uniquely named directory for one run.

        Example:
            ```python
            ws = Workspace.allocate("java", base_dir="/tmp")
            ```
        """
        try:
            created = tempfile.mkdtemp(prefix=f"codebox-{language}-", dir=base_dir)
        except OSError as exc:
            raise WorkspaceError(f"Failed to allocate workspace: {exc}") from exc
        logger.debug("Allocated workspace %s", created)
        return cls(Path(created))

    @property
    def path(self) -> Path:
        return self._path

    def write(self, name: str, content: str) -> Path:
        """Write one file into the workspace and return its path.

        Example:
            ```python
            src = ws.write("Main.java", code)
            ```
        """
        target = self._path / name
        if target.parent != self._path:
            raise WorkspaceError(f"Refusing to write outside workspace: {name}")
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise WorkspaceError(f"Failed to write {name}: {exc}") from exc
        return target

    def release(self) -> None:
        """Delete everything the invocation created; failures are only logged.

        Example:
            ```python
            ws.release()
            ```
        """
        if self._released:
            return
        self._released = True

        try:
            shutil.rmtree(self._path)
        except OSError as exc:
            logger.warning("Cleanup error for %s: %s", self._path, exc)


@contextmanager
def workspace(language: str, *, base_dir: str | None = None) -> Iterator[Workspace]:
    """Allocate a workspace and release it on every exit path.

    Example:
        ```python
        with workspace("python") as ws:
            ws.write("temp.py", "print(1)")
        ```
    """
    ws = Workspace.allocate(language, base_dir=base_dir)
    try:
        yield ws
    finally:
        ws.release()
