"""
Filesystem helpers for the analyzers.
Provides size-bounded, read-only file access and deterministic directory walks.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence

from ..errors import DiscoveryError, SourceReadError


GLOB_CHARS = set("*?[")


@dataclass
class FileResult:
    """Result from file reading operations"""
    path: str
    content: str
    size: int
    lines: int
    encoding: str = "utf-8"


def _is_glob(pattern: str) -> bool:
    return any(ch in GLOB_CHARS for ch in pattern)


def matches_include(name: str, patterns: Sequence[str]) -> bool:
    """File name matches an include pattern (suffix, or glob when it has wildcards)."""
    for pattern in patterns:
        if _is_glob(pattern):
            if fnmatch.fnmatch(name, pattern):
                return True
        elif name.endswith(pattern):
            return True
    return False


def matches_exclude(component: str, patterns: Sequence[str]) -> bool:
    """Path component matches an exclude pattern (substring, or glob when it has wildcards)."""
    for pattern in patterns:
        if _is_glob(pattern):
            if fnmatch.fnmatch(component, pattern):
                return True
        elif pattern in component:
            return True
    return False


class SourceReader:
    """
    Reads source files for parsing, enforcing existence, permission and size checks.
    """

    def __init__(self, max_file_size: int = 10 * 1024 * 1024):
        self.max_file_size = max_file_size
        self.logger = logging.getLogger("SourceReader")

    def read(self, path: str) -> FileResult:
        full_path = Path(path)
        if not full_path.exists():
            raise SourceReadError(path, "file not found", [
                "Check that the path is correct relative to the working directory",
                "Run from the project root or pass an absolute path",
            ])
        if not full_path.is_file():
            raise SourceReadError(path, "path is not a regular file", [
                "Pass a JavaScript/TypeScript file, not a directory",
            ])

        try:
            size = full_path.stat().st_size
        except PermissionError:
            raise SourceReadError(path, "permission denied", [f"Check permissions: ls -la {path}"])
        if size > self.max_file_size:
            raise SourceReadError(
                path,
                f"file too large ({size} bytes > {self.max_file_size} bytes)",
                [
                    "Check that this is the file you meant to analyze",
                    "Raise the limit with CLICOV_MAX_FILE_SIZE",
                ],
            )

        try:
            with open(full_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except PermissionError:
            raise SourceReadError(path, "permission denied", [f"Check permissions: ls -la {path}"])
        except UnicodeDecodeError as e:
            raise SourceReadError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})", [
                "Save the file as UTF-8",
            ])
        except OSError as e:
            raise SourceReadError(path, f"error reading file: {e.strerror or e}")

        self.logger.debug(f"Read {path} ({size} bytes)")
        return FileResult(path=path, content=content, size=size, lines=content.count('\n') + 1)

    def walk(self, root: str, include_patterns: Sequence[str],
             exclude_patterns: Sequence[str] = ()) -> Iterator[str]:
        """Yield matching files under root in sorted, depth-first order."""
        root_path = Path(root)
        if not root_path.exists():
            raise DiscoveryError(root, "test directory not found", [])
        if not root_path.is_dir():
            raise DiscoveryError(root, "test path is not a directory", [])

        def _on_error(error: OSError) -> None:
            raise DiscoveryError(root, f"cannot read directory: {error.strerror or error}",
                                 [str(error.filename)] if error.filename else [])

        for current, dirs, files in os.walk(root, onerror=_on_error, followlinks=False):
            dirs[:] = sorted(d for d in dirs if not matches_exclude(d, exclude_patterns))
            for name in sorted(files):
                if matches_exclude(name, exclude_patterns):
                    continue
                if matches_include(name, include_patterns):
                    yield os.path.join(current, name)

    def list_files(self, root: str, include_patterns: Sequence[str],
                   exclude_patterns: Sequence[str] = ()) -> List[str]:
        files = list(self.walk(root, include_patterns, exclude_patterns))
        self.logger.info(f"Found {len(files)} test files under {root}")
        return files


__all__ = [
    'FileResult',
    'SourceReader',
    'matches_include',
    'matches_exclude',
]
