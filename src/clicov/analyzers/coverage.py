"""
Coverage Mapper - joins the command tree with the discovered invocation patterns

The mapper works on a deep copy of the discovered tree, so the discoverer's
output stays untouched and every compute() call is independent.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from ..errors import AnalysisWarning
from ..models import ArgSpec, CommandNode, InvocationPattern
from ..schemas import CATEGORIES, CoverageRecord


@dataclass
class UntestedItem:
    """A command, subcommand, flag or option no test exercises"""
    type: str
    node: CommandNode
    arg: Optional[ArgSpec] = None

    @property
    def target(self) -> str:
        if self.arg is None:
            return self.node.full_name
        return f"{self.node.full_name} --{self.arg.name}"


@dataclass
class CoverageResult:
    """Annotated tree plus per-category statistics"""
    tree: CommandNode
    records: Dict[str, CoverageRecord]
    orphans: List[InvocationPattern] = field(default_factory=list)
    warnings: List[AnalysisWarning] = field(default_factory=list)

    @property
    def overall(self) -> CoverageRecord:
        return self.records["overall"]

    def untested(self) -> List[UntestedItem]:
        """Untested items in tree order: each node, then its flags, then its options."""
        return list(iter_untested(self.tree))


def calculate_coverage(tree: CommandNode) -> Dict[str, CoverageRecord]:
    """
    Count tested vs total per category. The root is the single `commands`
    entry; every deeper node is a `subcommand`. `overall` pools all four.
    """
    records = {category: CoverageRecord() for category in CATEGORIES}
    for node, depth in tree.iter_nodes():
        records["commands" if depth == 1 else "subcommands"].add(node.tested)
        for spec in node.flags.values():
            records["flags"].add(spec.tested)
        for spec in node.options.values():
            records["options"].add(spec.tested)

    overall = records["overall"]
    for category in CATEGORIES[:-1]:
        overall.total += records[category].total
        overall.tested += records[category].tested
    return records


def iter_untested(tree: CommandNode) -> Iterator[UntestedItem]:
    for node, depth in tree.iter_nodes():
        if not node.tested:
            yield UntestedItem("command" if depth == 1 else "subcommand", node)
        for spec in node.flags.values():
            if not spec.tested:
                yield UntestedItem("flag", node, spec)
        for spec in node.options.values():
            if not spec.tested:
                yield UntestedItem("option", node, spec)


class CoverageMapper:
    """Marks the command tree with what the tests exercise and computes coverage."""

    def __init__(self):
        self.logger = logging.getLogger("CoverageMapper")

    def compute(self, root: CommandNode, patterns: Sequence[InvocationPattern]) -> CoverageResult:
        """
        Apply patterns to a copy of root and compute per-category coverage

        Args:
            root: Command tree from the structure discoverer (not modified)
            patterns: Invocation patterns from the test discoverer

        Returns:
            CoverageResult with the annotated tree, records, orphans and warnings
        """
        tree = copy.deepcopy(root)
        orphans: List[InvocationPattern] = []
        warnings: List[AnalysisWarning] = []

        for pattern in patterns:
            node = tree.resolve(list(pattern.command_path))
            if node is None:
                orphans.append(pattern)
                warnings.append(AnalysisWarning(
                    kind='orphan_pattern',
                    message=f"test invokes '{pattern.display}', which is not a command of '{tree.name}'",
                    file=pattern.source_file,
                    line=pattern.source_line,
                ))
                continue

            node.tested = True
            if pattern.source_file not in node.test_files:
                node.test_files.append(pattern.source_file)

            for name in sorted(pattern.flags_used | pattern.options_used):
                _, spec = node.lookup_arg(name)
                if spec is not None:
                    spec.tested = True
                    continue
                warnings.append(AnalysisWarning(
                    kind='unknown_flag',
                    message=f"'--{name}' is not declared by '{pattern.display}' or its parents",
                    file=pattern.source_file,
                    line=pattern.source_line,
                ))

        for warning in warnings:
            self.logger.warning(str(warning))

        records = calculate_coverage(tree)
        overall = records["overall"]
        self.logger.info(
            f"Coverage: {overall.tested}/{overall.total} ({overall.percentage:.1f}%), "
            f"{len(orphans)} orphan patterns"
        )
        return CoverageResult(tree=tree, records=records, orphans=orphans, warnings=warnings)


__all__ = [
    'CoverageMapper',
    'CoverageResult',
    'UntestedItem',
    'calculate_coverage',
    'iter_untested',
]
