"""
Error types raised by the coverage engine.

Operational failures (unreadable files, unparseable entry point, missing
test directory) abort a run. Recoverable anomalies are collected as
AnalysisWarning values and end up in the report instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class CoverageAnalysisError(Exception):
    """Base class for every operational failure of an analysis run."""

    exit_code = 1

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        self.message = message
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        if not self.suggestions:
            return self.message
        fixes = "\n".join(f"  {i}. {s}" for i, s in enumerate(self.suggestions, 1))
        return f"{self.message}\n\nPossible fixes:\n{fixes}"


class SourceReadError(CoverageAnalysisError):
    """A source file could not be read (missing, not a file, too large, unreadable)."""

    exit_code = 4

    def __init__(self, path: str, reason: str, suggestions: Optional[List[str]] = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}", suggestions)


class ParseError(CoverageAnalysisError):
    """Source text could not be turned into a syntax tree."""

    exit_code = 2

    def __init__(self, file_path: str, line: int, column: int,
                 line_text: str = "", detail: str = "syntax error"):
        self.file_path = file_path
        self.line = line
        self.column = column
        self.line_text = line_text
        self.detail = detail
        message = (
            f"Failed to parse {file_path}\n"
            f"Parse error: {detail} at line {line}, column {column}"
        )
        if line_text.strip():
            message += f"\nProblematic line:\n  {line_text.rstrip()}"
        super().__init__(message, [
            "Check the file for missing or extra brackets, parentheses or braces",
            f"Run a linter on the file, e.g. npx eslint {file_path}",
            "Make sure the file is JavaScript/TypeScript and not a build artifact",
        ])


class StructureError(CoverageAnalysisError):
    """A required structural pattern (root command, exported definition) was not found."""

    exit_code = 3

    def __init__(self, file_path: str, reason: str, details: Optional[str] = None):
        self.file_path = file_path
        self.reason = reason
        self.details = details
        message = f"Failed to discover CLI structure: {file_path}\nReason: {reason}"
        if details:
            message += f"\nDetails: {details}"
        super().__init__(message, [
            "Ensure the file defines its command with defineCommand({ meta: { name } })",
            "Point --cli-path at the CLI entry file rather than a helper module",
            "Run with --verbose to see which definitions were considered",
        ])


class DiscoveryError(CoverageAnalysisError):
    """Filesystem failure while enumerating or reading test files."""

    exit_code = 4

    def __init__(self, test_dir: str, reason: str, failed_files: Optional[List[str]] = None):
        self.test_dir = test_dir
        self.reason = reason
        self.failed_files = list(failed_files or [])
        message = f"Failed to discover test files in {test_dir}\nReason: {reason}"
        if self.failed_files:
            message += "\nFailed files:\n  - " + "\n  - ".join(self.failed_files)
        super().__init__(message, [
            "Check that the test directory exists and is readable",
            "Pass the right directory with --test-dir",
            f"Check permissions: ls -la {test_dir}",
        ])


@dataclass(frozen=True)
class AnalysisWarning:
    """A recoverable anomaly reported alongside the coverage results"""
    kind: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "file": self.file, "line": self.line}

    def __str__(self) -> str:
        where = ""
        if self.file:
            where = f" ({self.file}:{self.line})" if self.line else f" ({self.file})"
        return f"[{self.kind}] {self.message}{where}"


__all__ = [
    'CoverageAnalysisError',
    'SourceReadError',
    'ParseError',
    'StructureError',
    'DiscoveryError',
    'AnalysisWarning',
]
