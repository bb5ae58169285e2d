from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from pathlib import Path
from typing import IO, Sequence

from .types import ProcessOutcome

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_DRAIN_TIMEOUT_SECONDS = 2.0


class _PipeReader(threading.Thread):
    """Drain one pipe as the child writes, keeping at most `limit` bytes.

    Bytes past the limit are read and discarded so the child never blocks
    on a full pipe.

    Example:
        ```python
        reader = _PipeReader(proc.stdout, limit=1024)
        reader.start()
        ```
    """

    def __init__(self, stream: IO[bytes], limit: int | None) -> None:
        super().__init__(daemon=True)
        self._stream = stream
        self._limit = limit
        self._chunks: list[bytes] = []
        self._size = 0

    def run(self) -> None:
        try:
            while chunk := self._stream.read1(_CHUNK_SIZE):  # type: ignore[attr-defined]
                if self._limit is None:
                    self._chunks.append(chunk)
                    continue
                room = self._limit - self._size
                if room > 0:
                    kept = chunk[:room]
                    self._chunks.append(kept)
                    self._size += len(kept)
        except (OSError, ValueError):
            # pipe closed underneath us
            return

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


def _feed_stdin(stream: IO[bytes], data: bytes) -> None:
    try:
        if data:
            stream.write(data)
    except OSError:
        # child exited without reading its input
        pass
    finally:
        try:
            stream.close()
        except OSError:
            pass


def _kill_process_group(proc: subprocess.Popen) -> None:
    """SIGKILL the child and everything it spawned into its session.

    Example:
        ```python
        _kill_process_group(proc)
        ```
    """
    try:
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        pass


def run_process(
    command: Sequence[str],
    *,
    stdin: str = "",
    timeout_seconds: int,
    cwd: str | Path | None = None,
    max_output_bytes: int | None = None,
) -> ProcessOutcome:
    """Run one external program to completion or deadline, capturing its I/O.

    `stdin` is written to the child and the stream is closed so the child
    sees end-of-input. stdout and stderr are drained incrementally and each
    capped at `max_output_bytes`. The child runs in its own session; its
    whole process group is killed once it exits or times out, so leftover
    grandchildren can neither outlive the call nor hold the pipes open.
    The three failure modes (spawn failure, non-zero exit, timeout) are
    reported through the returned outcome, never raised.

    Example:
        ```python
        out = run_process(["python3", "main.py"], stdin="hello", timeout_seconds=10)
        ```
    """
    try:
        proc = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=str(cwd) if cwd is not None else None,
            start_new_session=True,
        )
    except OSError as exc:
        logger.warning("Failed to spawn %s: %s", command[0], exc)
        return ProcessOutcome(
            stdout="",
            stderr="",
            returncode=None,
            spawn_error=f"{command[0]}: {exc.strerror or exc}",
        )

    assert proc.stdin is not None and proc.stdout is not None and proc.stderr is not None
    stdout_reader = _PipeReader(proc.stdout, max_output_bytes)
    stderr_reader = _PipeReader(proc.stderr, max_output_bytes)
    writer = threading.Thread(
        target=_feed_stdin,
        args=(proc.stdin, stdin.encode("utf-8")),
        daemon=True,
    )
    for thread in (stdout_reader, stderr_reader, writer):
        thread.start()

    timed_out = False
    try:
        proc.wait(timeout=timeout_seconds)
    except subprocess.TimeoutExpired:
        timed_out = True
        logger.warning("Killed %s after %ss timeout", command[0], timeout_seconds)
    _kill_process_group(proc)
    proc.wait()

    for reader in (stdout_reader, stderr_reader):
        reader.join(_DRAIN_TIMEOUT_SECONDS)
        if reader.is_alive():
            logger.warning("Output pipe of %s still open after exit; returning partial output", command[0])

    return ProcessOutcome(
        stdout=stdout_reader.text(),
        stderr=stderr_reader.text(),
        returncode=proc.returncode,
        timed_out=timed_out,
    )
