from __future__ import annotations

from ..settings import ExecutorSettings
from .engine import shape_outcome
from .process import run_process
from .types import ExecutionResult, ProcessOutcome
from .workspace import unique_token, workspace

SPAWN_HINT = "JavaScript execution error: {reason}. Make sure Node.js is installed."
HARNESS_TIMEOUT_EXIT = 124
HARNESS_THROWN_EXIT = 3

# The submission runs as a function body inside a fresh vm context whose only
# binding is the console shim; require/process/fs are unreachable from it.
HARNESS_SOURCE = r"""
"use strict";
const fs = require("fs");
const vm = require("vm");

const source = fs.readFileSync(process.argv[2], "utf8");
const timeoutMs = Number(process.argv[3]) || 10000;
const logs = [];
const render = (arg) => (typeof arg === "object" ? JSON.stringify(arg) : String(arg));
const shim = Object.freeze({
  log: (...args) => { logs.push(args.map(render).join(" ")); },
  error: (...args) => { logs.push("Error: " + args.join(" ")); },
  warn: (...args) => { logs.push("Warning: " + args.join(" ")); },
});

try {
  vm.runInNewContext(
    "(function (console) {\n" + source + "\n})(console);",
    { console: shim },
    { filename: "submission.js", timeout: timeoutMs },
  );
} catch (err) {
  if (err && err.code === "ERR_SCRIPT_EXECUTION_TIMEOUT") {
    process.exitCode = 124;
  } else {
    process.stderr.write(err && err.message !== undefined ? String(err.message) : "Unknown error");
    process.exitCode = 3;
  }
}
if (!process.exitCode) {
  process.stdout.write(logs.join("\n"));
}
"""


class JavaScriptEngine:
    """Run JavaScript submissions in a separate Node process.

    Example:
        ```python
        engine = JavaScriptEngine(ExecutorSettings())
        result = engine.execute("console.log(1 + 1)")
        ```
    """

    def __init__(self, settings: ExecutorSettings) -> None:
        self._settings = settings

    def execute(self, code: str, stdin: str = "") -> ExecutionResult:
        """Run the submission under the vm timeout and the process deadline.

        Example:
            ```python
            result = engine.execute("console.log('hi')")
            ```
        """
        settings = self._settings
        with workspace("javascript", base_dir=settings.temp_dir) as ws:
            harness = ws.write(f"harness_{unique_token()}.js", HARNESS_SOURCE)
            source = ws.write(f"temp_{unique_token()}.js", code)
            outcome = run_process(
                [
                    settings.node_command,
                    "--disallow-code-generation-from-strings",
                    str(harness),
                    str(source),
                    str(settings.timeout_seconds * 1000),
                ],
                stdin=stdin,
                timeout_seconds=settings.timeout_seconds + 1,
                cwd=ws.path,
                max_output_bytes=settings.max_output_bytes,
            )
        # A thrown value reports its message verbatim, even when it is empty.
        if outcome.returncode == HARNESS_THROWN_EXIT and not outcome.timed_out:
            return ExecutionResult(output="", error=outcome.stderr.strip())
        if outcome.returncode == HARNESS_TIMEOUT_EXIT:
            outcome = ProcessOutcome(
                stdout=outcome.stdout,
                stderr=outcome.stderr,
                returncode=outcome.returncode,
                timed_out=True,
            )
        return shape_outcome(
            outcome,
            timeout_seconds=settings.timeout_seconds,
            spawn_hint=SPAWN_HINT,
        )
