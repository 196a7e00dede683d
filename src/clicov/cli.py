"""Command line interface for clicov.

Reports go to stdout; logs, errors and remediation hints go to stderr.
Exit status is 0 whenever an analysis completes, whatever the coverage.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import AnalyzerConfig
from .engine import CoverageEngine
from .errors import CoverageAnalysisError
from .schemas import Priority, ReportFormat

app = typer.Typer(
    help='Static test-coverage analysis for citty-style command line interfaces.',
    no_args_is_help=True,
    add_completion=False,
)

err_console = Console(stderr=True)


CLI_PATH_OPTION = typer.Option(None, '--cli-path', help='CLI entry file to analyze [default: src/cli.mjs].')
TEST_DIR_OPTION = typer.Option(None, '--test-dir', help='Directory containing test files [default: test].')
INCLUDE_OPTION = typer.Option(
    None,
    '--include-patterns',
    help='Comma-separated test file suffixes or globs to include.',
)
EXCLUDE_OPTION = typer.Option(
    None,
    '--exclude-patterns',
    help='Comma-separated path components to skip.',
)
FORMAT_OPTION = typer.Option(ReportFormat.TEXT, '--format', '-f', help='Report format: text, json, markdown, html or yaml.')
OUTPUT_OPTION = typer.Option(None, '--output', '-o', help='Write the report to a file instead of stdout.')
VERBOSE_OPTION = typer.Option(False, '--verbose', help='Debug logging and analysis metadata in text reports.')
NO_CACHE_OPTION = typer.Option(False, '--no-cache', help='Disable the parse cache.')
FAIL_FAST_OPTION = typer.Option(False, '--fail-fast', help='Abort on the first unparseable test file.')
WORKERS_OPTION = typer.Option(None, '--workers', min=1, help='Parse test files in parallel.')
PRIORITY_OPTION = typer.Option('all', '--priority', help='Recommendation priority filter: high, medium, low or all.')


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
        force=True,
    )


def _build_engine(cli_path: Optional[str], test_dir: Optional[str], include_patterns: Optional[str],
                  exclude_patterns: Optional[str], no_cache: bool, fail_fast: bool,
                  workers: Optional[int]) -> CoverageEngine:
    config = AnalyzerConfig.from_env(
        cli_path=cli_path,
        test_dir=test_dir,
        include_patterns=include_patterns,
        exclude_patterns=exclude_patterns,
        cache_enabled=False if no_cache else None,
        test_parse_policy='fail_fast' if fail_fast else None,
        workers=workers,
    )
    return CoverageEngine(config)


def _run(action: Callable[[], Any]) -> Any:
    """Run an analysis step, turning failures into an error message and exit code."""
    try:
        return action()
    except CoverageAnalysisError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(e.message)}", highlight=False)
        if e.suggestions:
            err_console.print("\n[bold]Possible fixes:[/bold]")
            for i, suggestion in enumerate(e.suggestions, 1):
                err_console.print(f"  {i}. {suggestion}", highlight=False, markup=False)
        raise typer.Exit(code=e.exit_code)
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=2)
    except typer.Exit:
        raise
    except Exception as e:
        logging.getLogger("clicov").debug("Unexpected failure", exc_info=True)
        err_console.print(f"[bold red]Unexpected error:[/bold red] {type(e).__name__}: {escape(str(e))}", highlight=False)
        err_console.print("Run again with --verbose for the full traceback.")
        raise typer.Exit(code=1)


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
        return
    output.write_text(text if text.endswith('\n') else text + '\n', encoding='utf-8')
    err_console.print(f"Report saved to: {output}", highlight=False)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"clicov {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, '--version', callback=_version_callback, is_eager=True,
                                 help='Show the version and exit.'),
) -> None:
    """Measure how much of a CLI's surface its tests exercise."""


@app.command()
def analyze(
    cli_path: Optional[str] = CLI_PATH_OPTION,
    test_dir: Optional[str] = TEST_DIR_OPTION,
    include_patterns: Optional[str] = INCLUDE_OPTION,
    exclude_patterns: Optional[str] = EXCLUDE_OPTION,
    fmt: ReportFormat = FORMAT_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    fail_fast: bool = FAIL_FAST_OPTION,
    workers: Optional[int] = WORKERS_OPTION,
) -> None:
    """Full coverage report: per-command breakdown and recommendations."""
    _setup_logging(verbose)

    def action() -> str:
        engine = _build_engine(cli_path, test_dir, include_patterns, exclude_patterns,
                               no_cache, fail_fast, workers)
        result = engine.analyze()
        return engine.render(result, fmt, verbose)

    _emit(_run(action), output)


@app.command()
def discover(
    cli_path: Optional[str] = CLI_PATH_OPTION,
    test_dir: Optional[str] = TEST_DIR_OPTION,
    include_patterns: Optional[str] = INCLUDE_OPTION,
    exclude_patterns: Optional[str] = EXCLUDE_OPTION,
    fmt: ReportFormat = FORMAT_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    fail_fast: bool = FAIL_FAST_OPTION,
    workers: Optional[int] = WORKERS_OPTION,
) -> None:
    """Show the command tree discovered from the CLI sources."""
    _setup_logging(verbose)

    def action() -> str:
        engine = _build_engine(cli_path, test_dir, include_patterns, exclude_patterns,
                               no_cache, fail_fast, workers)
        root = engine.discover()
        return engine.reporter.render_structure(root, engine.config.cli_path, fmt, engine.structure.warnings)

    _emit(_run(action), output)


@app.command()
def stats(
    cli_path: Optional[str] = CLI_PATH_OPTION,
    test_dir: Optional[str] = TEST_DIR_OPTION,
    include_patterns: Optional[str] = INCLUDE_OPTION,
    exclude_patterns: Optional[str] = EXCLUDE_OPTION,
    fmt: ReportFormat = FORMAT_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    fail_fast: bool = FAIL_FAST_OPTION,
    workers: Optional[int] = WORKERS_OPTION,
) -> None:
    """Coverage statistics summary with the top recommendations."""
    _setup_logging(verbose)

    def action() -> str:
        engine = _build_engine(cli_path, test_dir, include_patterns, exclude_patterns,
                               no_cache, fail_fast, workers)
        result = engine.analyze()
        return engine.reporter.render_stats(result.report, fmt)

    _emit(_run(action), output)


@app.command()
def recommend(
    cli_path: Optional[str] = CLI_PATH_OPTION,
    test_dir: Optional[str] = TEST_DIR_OPTION,
    include_patterns: Optional[str] = INCLUDE_OPTION,
    exclude_patterns: Optional[str] = EXCLUDE_OPTION,
    fmt: ReportFormat = FORMAT_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
    no_cache: bool = NO_CACHE_OPTION,
    fail_fast: bool = FAIL_FAST_OPTION,
    workers: Optional[int] = WORKERS_OPTION,
    priority: str = PRIORITY_OPTION,
) -> None:
    """Prioritized list of untested commands, flags and options."""
    _setup_logging(verbose)
    if priority != 'all' and priority not in {p.value for p in Priority}:
        err_console.print(f"[bold red]Error:[/bold red] unknown priority '{escape(priority)}'", highlight=False)
        err_console.print("Use one of: high, medium, low, all")
        raise typer.Exit(code=2)

    def action() -> str:
        engine = _build_engine(cli_path, test_dir, include_patterns, exclude_patterns,
                               no_cache, fail_fast, workers)
        recs = engine.recommend(priority)
        return engine.reporter.render_recommendations(recs, priority, fmt, verbose)

    _emit(_run(action), output)


if __name__ == "__main__":
    app()
