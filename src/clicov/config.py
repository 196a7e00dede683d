"""Analyzer configuration.

Values come from explicit arguments first, then CLICOV_* environment
variables (a .env file is loaded at package import), then defaults.
"""

import os
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field, field_validator


DEFAULT_INCLUDE_PATTERNS = [".test.mjs", ".test.js", ".spec.mjs", ".spec.js"]
DEFAULT_EXCLUDE_PATTERNS = ["node_modules", ".git", "coverage"]
DEFAULT_RUNNER_NAMES = ["runLocalCitty", "runCitty", "runLocalCittySafe", "runCittySafe"]

ENV_PREFIX = "CLICOV_"


def split_patterns(value: Any) -> List[str]:
    """Accept 'a,b , c' as well as a list; drop empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(',')
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item).strip()]


class AnalyzerConfig(BaseModel):
    """Settings shared by every component of an analysis run"""
    cli_path: str = "src/cli.mjs"
    test_dir: str = "test"
    include_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_PATTERNS))
    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0, description="Per-file size ceiling in bytes")
    cache_enabled: bool = True
    cache_ttl: float = Field(default=3600.0, gt=0, description="Cache entry lifetime in seconds")
    cache_max_size: int = Field(default=100, ge=1)
    runner_names: List[str] = Field(default_factory=lambda: list(DEFAULT_RUNNER_NAMES))
    test_parse_policy: Literal["continue", "fail_fast"] = "continue"
    workers: int = Field(default=1, ge=1)
    coverage_target: float = Field(default=90.0, ge=0, le=100)

    @field_validator("include_patterns", "exclude_patterns", "runner_names", mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> List[str]:
        return split_patterns(value)

    @field_validator("include_patterns", "runner_names")
    @classmethod
    def _not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one pattern is required")
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "AnalyzerConfig":
        """Build a config from CLICOV_* variables, with overrides taking precedence."""
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            env_value = os.getenv(ENV_PREFIX + name.upper())
            if env_value is not None and env_value != "":
                values[name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = [
    'AnalyzerConfig',
    'split_patterns',
    'DEFAULT_INCLUDE_PATTERNS',
    'DEFAULT_EXCLUDE_PATTERNS',
    'DEFAULT_RUNNER_NAMES',
]
