"""
Coverage analyzers

This module provides the passes of a coverage analysis:
- CLIStructureDiscoverer - Builds the command tree from the CLI sources
- TestPatternDiscoverer - Finds CLI invocations in the test suite
- CoverageMapper - Joins the two and computes coverage
- ReportGenerator - Renders reports and recommendations
"""

from .cli_structure import CLIStructureDiscoverer
from .test_patterns import TestPatternDiscoverer, TestDiscoveryResult
from .coverage import CoverageMapper, CoverageResult

# Reporting
from .reporting import ReportGenerator

__all__ = [
    'CLIStructureDiscoverer',
    'TestPatternDiscoverer',
    'TestDiscoveryResult',
    'CoverageMapper',
    'CoverageResult',
    'ReportGenerator',
]
