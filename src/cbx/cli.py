from __future__ import annotations

import argparse
import json
import sys
from functools import partial
from pathlib import Path
from typing import Any, Never, Sequence

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich_argparse import RawTextRichHelpFormatter

from codebox import CodeboxError, Dispatcher, ExecutionResult, Language, load_settings, run_code
from codebox.api import create_app
from codebox.execution.toolchains import toolchain_report
from codebox.log import setup_logging

_CONSOLE = Console(no_color=False)
_EXTENSION_LANGUAGES = {language.extension: language for language in Language}


class _CLIHelpFormatter(RawTextRichHelpFormatter):
    """Rich formatter with explicit high-contrast CLI styles.

    Example:
        ```python
        parser = argparse.ArgumentParser(formatter_class=_CLIHelpFormatter)
        ```
    """

    styles = {
        "argparse.args": "bold cyan",
        "argparse.groups": "bold magenta",
        "argparse.help": "white",
        "argparse.metavar": "bold yellow",
        "argparse.prog": "bold bright_blue",
        "argparse.syntax": "bold bright_white",
        "argparse.text": "bright_white",
    }


_HELP_FORMATTER = partial(
    _CLIHelpFormatter,
    max_help_position=34,
    width=120,
)


class _RichArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that renders errors via Rich.

    Example:
        ```python
        parser = _RichArgumentParser(prog="python -m cbx")
        ```
    """

    def error(self, message: str) -> Never:
        _CONSOLE.print(Panel.fit(f"[bold red]Error:[/bold red] {message}", border_style="red"))
        self.print_help()
        raise SystemExit(2)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser for running submissions and serving the API.

    Example:
        ```python
        parser = build_parser()
        ```
    """
    parser = _RichArgumentParser(
        prog="python -m cbx",
        description=(
            "codebox CLI\n"
            "Run JavaScript, Python and Java submissions in isolated, time-bounded processes."
        ),
        epilog=(
            "Quick Examples:\n"
            "  python -m cbx run solution.py --input 'hello'\n"
            "  python -m cbx run Main.java --input-file cases/1.txt\n"
            "  cat snippet.js | python -m cbx run - --language javascript\n"
            "  python -m cbx languages\n"
            "  python -m cbx serve --port 8000"
        ),
        formatter_class=_HELP_FORMATTER,
    )
    settings_help = (
        "Path to a settings TOML file.\n"
        "Defaults to $CODEBOX_SETTINGS, then built-in defaults."
    )
    parser.add_argument("--settings", help=settings_help)
    # also accepted after the subcommand
    settings_parent = argparse.ArgumentParser(add_help=False)
    settings_parent.add_argument("--settings", default=argparse.SUPPRESS, help=settings_help)

    sub = parser.add_subparsers(
        dest="command",
        required=True,
        parser_class=_RichArgumentParser,
    )

    run_cmd = sub.add_parser(
        "run",
        parents=[settings_parent],
        help="Execute one source file and print its output.",
        description=(
            "Execute one submission.\n"
            "The language is inferred from the file extension unless --language is given."
        ),
        formatter_class=_HELP_FORMATTER,
    )
    run_cmd.add_argument("source", help="Source file path, or '-' to read code from stdin.")
    run_cmd.add_argument(
        "--language",
        "-l",
        help="Language identifier: javascript, python or java (case-insensitive).",
    )
    stdin_group = run_cmd.add_mutually_exclusive_group()
    stdin_group.add_argument("--input", help="Text piped to the program's standard input.")
    stdin_group.add_argument("--input-file", help="File whose contents are piped to standard input.")
    run_cmd.add_argument(
        "--json",
        action="store_true",
        help="Print the raw {output, error, executionTime} payload instead of panels.",
    )

    sub.add_parser(
        "languages",
        parents=[settings_parent],
        help="Show supported languages and toolchain availability.",
        description="List supported languages and whether their interpreters/compilers are on PATH.",
        formatter_class=_HELP_FORMATTER,
    )

    serve_cmd = sub.add_parser(
        "serve",
        parents=[settings_parent],
        help="Serve the HTTP execution API with uvicorn.",
        description="Run the FastAPI execution service.",
        formatter_class=_HELP_FORMATTER,
    )
    serve_cmd.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1).")
    serve_cmd.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000).")

    return parser


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _infer_language(source: str) -> str | None:
    suffix = Path(source).suffix.lstrip(".").lower()
    language = _EXTENSION_LANGUAGES.get(suffix)
    return language.value if language else None


def _print_result(result: ExecutionResult) -> None:
    """Render one execution result as rich panels.

    Example:
        ```python
        _print_result(ExecutionResult(output="hi", execution_time_ms=12))
        ```
    """
    if result.output:
        _CONSOLE.print(Panel(Text(result.output), title="Output", border_style="green"))
    if result.error is not None:
        _CONSOLE.print(Panel(Text(result.error), title="Error", border_style="red"))
    _CONSOLE.print(f"[dim]Finished in {result.execution_time_ms}ms[/dim]")


def _print_languages(rows: list[dict[str, Any]]) -> None:
    table = Table(title="Supported Languages")
    table.add_column("Language", style="cyan")
    table.add_column("Extension")
    table.add_column("Commands", style="magenta")
    table.add_column("Status")
    for row in rows:
        status = (
            "[green]available[/green]"
            if not row["missing"]
            else f"[red]missing: {', '.join(row['missing'])}[/red]"
        )
        table.add_row(row["label"], row["extension"], " ".join(row["commands"]), status)
    _CONSOLE.print(table)


def _run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    language = args.language or _infer_language(args.source)
    if not language:
        parser.error("Cannot infer language from source; pass --language")
    try:
        code = _read_source(args.source)
        stdin = Path(args.input_file).read_text(encoding="utf-8") if args.input_file else args.input or ""
    except OSError as exc:
        _CONSOLE.print(Panel.fit(f"Cannot read input: {exc}", style="bold red"))
        return 2

    try:
        dispatcher = Dispatcher(load_settings(args.settings))
        result = run_code(code, language, stdin, dispatcher=dispatcher)
    except (CodeboxError, ValueError) as exc:
        _CONSOLE.print(Panel.fit(f"Error: {exc}", style="bold red"))
        return 2

    if args.json:
        print(json.dumps(result.to_payload()))
    else:
        _print_result(result)
    return 0 if result.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Run the `cbx` CLI command handler.

    Example:
        ```python
        code = main(["run", "hello.py"])
        ```
    """
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.command == "run":
        return _run(args, parser)
    if args.command == "languages":
        settings = load_settings(args.settings)
        rows = [
            {
                "label": info.language.label,
                "extension": info.extension,
                "commands": list(info.commands),
                "missing": list(info.missing),
            }
            for info in toolchain_report(settings)
        ]
        _print_languages(rows)
        return 0
    if args.command == "serve":
        settings = load_settings(args.settings)
        setup_logging(settings.log_level, settings.log_format)
        uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)
        return 0

    parser.error("Unhandled command")
    return 2
