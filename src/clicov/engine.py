"""
CoverageEngine - Main interface for CLI coverage analysis

The CoverageEngine wires the source reader, parse cache, syntax parser,
both discoverers, the coverage mapper and the report generator together.
The cache is passed in explicitly, so several engines can share one cache
or run with independent ones.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .analyzers.cli_structure import CLIStructureDiscoverer
from .analyzers.coverage import CoverageMapper, CoverageResult
from .analyzers.reporting import ReportGenerator
from .analyzers.test_patterns import TestDiscoveryResult, TestPatternDiscoverer
from .config import AnalyzerConfig
from .errors import AnalysisWarning
from .models import CommandNode, InvocationPattern
from .schemas import CoverageReport, Priority, Recommendation, ReportFormat
from .tools.ast_cache import ASTCache
from .tools.ast_parsing import JavaScriptParser
from .tools.source_reader import SourceReader


@dataclass
class CoverageAnalysisResult:
    """Result from CoverageEngine analysis"""
    report: CoverageReport
    coverage: CoverageResult
    root: CommandNode
    analysis_time: float

    patterns: List[InvocationPattern] = field(default_factory=list)
    test_files: List[str] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)

    @property
    def summary(self) -> Dict[str, Dict[str, Any]]:
        return self.report.summary


class CoverageEngine:
    def __init__(self, config: Optional[AnalyzerConfig] = None, cache: Optional[ASTCache] = None,
                 parser: Optional[JavaScriptParser] = None):
        """
        Initialize CoverageEngine

        Args:
            config: Analyzer settings (defaults to AnalyzerConfig.from_env())
            cache: Parse cache to use; one is created from config when omitted
            parser: Syntax parser; one bound to the cache is created when omitted
        """
        self.config = config or AnalyzerConfig.from_env()
        self.logger = logging.getLogger("CoverageEngine")

        if cache is None:
            cache = ASTCache(
                ttl=self.config.cache_ttl,
                max_size=self.config.cache_max_size,
                enabled=self.config.cache_enabled,
            )
        self.cache = cache
        self.reader = SourceReader(max_file_size=self.config.max_file_size)
        self.parser = parser or JavaScriptParser(cache=self.cache)

        self.structure = CLIStructureDiscoverer(self.reader, self.parser)
        self.tests = TestPatternDiscoverer(
            self.reader,
            self.parser,
            runner_names=self.config.runner_names,
            parse_policy=self.config.test_parse_policy,
            workers=self.config.workers,
        )
        self.mapper = CoverageMapper()
        self.reporter = ReportGenerator(
            coverage_target=self.config.coverage_target,
            runner_name=self.config.runner_names[0],
        )

    def discover(self) -> CommandNode:
        """Discover the CLI command tree only"""
        return self.structure.discover(self.config.cli_path)

    def discover_tests(self, root: CommandNode) -> TestDiscoveryResult:
        return self.tests.discover(
            self.config.test_dir,
            self.config.include_patterns,
            self.config.exclude_patterns,
            root,
        )

    def analyze(self) -> CoverageAnalysisResult:
        """
        Run the full pipeline: structure discovery, test discovery, mapping, report

        Returns:
            CoverageAnalysisResult with the report and every intermediate result

        Raises:
            CoverageAnalysisError subclasses on operational failures; no partial
            report is produced in that case
        """
        start_time = time.time()
        self.logger.info(f"Analyzing {self.config.cli_path} against tests in {self.config.test_dir}")

        root = self.discover()
        discovery = self.discover_tests(root)
        coverage = self.mapper.compute(root, discovery.patterns)

        warnings = list(self.structure.warnings) + list(discovery.warnings)
        report = self.reporter.build_report(
            coverage,
            cli_path=self.config.cli_path,
            test_dir=self.config.test_dir,
            total_test_files=len(discovery.files),
            total_patterns=len(discovery.patterns),
            warnings=warnings,
        )

        analysis_time = time.time() - start_time
        self.logger.info(f"Analysis completed in {analysis_time:.2f}s (cache: {self.cache.stats()['hitRate']} hits)")
        return CoverageAnalysisResult(
            report=report,
            coverage=coverage,
            root=root,
            analysis_time=analysis_time,
            patterns=list(discovery.patterns),
            test_files=list(discovery.files),
            warnings=warnings + list(coverage.warnings),
        )

    def stats(self) -> Dict[str, Any]:
        """Coverage summary plus the top recommendations"""
        result = self.analyze()
        return {
            "summary": result.report.summary,
            "topRecommendations": [r.model_dump(mode="json") for r in result.report.recommendations[:3]],
            "totalTestFiles": len(result.test_files),
            "totalPatterns": len(result.patterns),
            "cache": self.cache_stats(),
        }

    def recommend(self, priority: Optional[Union[Priority, str]] = None) -> List[Recommendation]:
        """Recommendations for untested items, optionally filtered by priority"""
        result = self.analyze()
        return self.reporter.recommendations(result.coverage, priority)

    def render(self, result: CoverageAnalysisResult, fmt: Union[ReportFormat, str] = ReportFormat.TEXT,
               verbose: bool = False) -> str:
        return self.reporter.render(result.report, fmt, verbose)

    def clear_cache(self):
        """Clear the parse cache"""
        self.cache.clear()
        self.logger.info("Parse cache cleared")

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()


__all__ = ['CoverageEngine', 'CoverageAnalysisResult']
