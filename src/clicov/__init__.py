"""clicov package initializer.

This module ensures environment variables are loaded once at package import time
so CLICOV_* settings in a .env file reach every entry point.
"""

from typing import Any

__version__ = "0.1.0"


_CLICOV_ENV_LOADED: bool = False


def _load_env_once() -> None:
    """Load environment variables once at package import time."""
    global _CLICOV_ENV_LOADED
    if _CLICOV_ENV_LOADED:
        return
    from dotenv import load_dotenv
    from pathlib import Path as _Path

    # Candidate locations: current working directory first, then the checkout root
    repo_root = _Path(__file__).resolve().parents[2]
    candidates = [
        _Path.cwd() / ".env.development",
        _Path.cwd() / ".env",
        repo_root / ".env",
    ]
    for _p in candidates:
        if _p.exists():
            load_dotenv(_p)
            break
    _CLICOV_ENV_LOADED = True


_load_env_once()

# Main Engine - Primary interface for coverage analysis
from .engine import CoverageEngine, CoverageAnalysisResult
from .config import AnalyzerConfig


def analyze_cli_coverage(cli_path: str, test_dir: str, **kwargs: Any) -> CoverageAnalysisResult:
    """Convenience function for a one-off analysis"""
    engine = CoverageEngine(AnalyzerConfig.from_env(cli_path=cli_path, test_dir=test_dir, **kwargs))
    return engine.analyze()


# Analyzers
from .analyzers import (
    CLIStructureDiscoverer,
    TestPatternDiscoverer,
    CoverageMapper,
    CoverageResult,
    ReportGenerator,
)

# Tools
from .tools import ASTCache, JavaScriptParser, SourceReader, FileResult

# Models, schemas and errors
from .models import CommandNode, InvocationPattern, ArgSpec
from .schemas import CoverageRecord, CoverageReport, Recommendation, Priority, ReportFormat
from .errors import (
    CoverageAnalysisError,
    SourceReadError,
    ParseError,
    StructureError,
    DiscoveryError,
    AnalysisWarning,
)


__all__ = [
    # Main Engine
    'CoverageEngine',
    'CoverageAnalysisResult',
    'AnalyzerConfig',
    'analyze_cli_coverage',

    # Analyzers
    'CLIStructureDiscoverer',
    'TestPatternDiscoverer',
    'CoverageMapper',
    'CoverageResult',
    'ReportGenerator',

    # Tools
    'ASTCache',
    'JavaScriptParser',
    'SourceReader',
    'FileResult',

    # Models and schemas
    'CommandNode',
    'InvocationPattern',
    'ArgSpec',
    'CoverageRecord',
    'CoverageReport',
    'Recommendation',
    'Priority',
    'ReportFormat',

    # Errors
    'CoverageAnalysisError',
    'SourceReadError',
    'ParseError',
    'StructureError',
    'DiscoveryError',
    'AnalysisWarning',
]
