"""
Report Generator - renders coverage results as text, JSON, YAML, Markdown or HTML

Two runs over identical inputs produce identical output; the only
time-dependent value is metadata.analyzedAt, which the text, Markdown and HTML
renderers show only when asked to.
"""

import html
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import yaml

from ..errors import AnalysisWarning
from ..models import ArgSpec, CommandNode
from ..schemas import (
    ArgDetail,
    CATEGORIES,
    CommandDetail,
    CoverageReport,
    PRIORITY_ORDER,
    Priority,
    Recommendation,
    ReportFormat,
    ReportMetadata,
    WarningEntry,
)
from .coverage import CoverageResult, UntestedItem


ITEM_PRIORITY = {
    "command": Priority.HIGH,
    "subcommand": Priority.HIGH,
    "flag": Priority.MEDIUM,
    "option": Priority.MEDIUM,
}

CATEGORY_LABELS = {
    "commands": "Commands",
    "subcommands": "Subcommands",
    "flags": "Flags",
    "options": "Options",
    "overall": "Overall",
}


def _example(item: UntestedItem, runner: str) -> str:
    tokens = list(item.node.path)
    if item.arg is None:
        tokens.append("--help")
        title = f"{item.target} works"
    elif item.arg.is_flag:
        tokens.append(f"--{item.arg.name}")
        title = f"{item.target} flag"
    else:
        value = item.arg.default if isinstance(item.arg.default, (str, int, float)) \
            and not isinstance(item.arg.default, bool) else "value"
        tokens.extend([f"--{item.arg.name}", str(value)])
        title = f"{item.target} option"
    args = ", ".join(f"'{t}'" for t in tokens)
    return (
        f"test('{title}', async () => {{\n"
        f"  const result = await {runner}([{args}])\n"
        f"  result.expectSuccess()\n"
        f"}})"
    )


def _dump(data: Dict[str, Any], fmt: ReportFormat) -> str:
    """Serialize a report dictionary as JSON or YAML."""
    if fmt == ReportFormat.YAML:
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2)


def _html_page(title: str, body: List[str]) -> str:
    return "\n".join([
        "<!DOCTYPE html>",
        "<html lang=\"en\">",
        "<head>",
        "<meta charset=\"utf-8\">",
        f"<title>{html.escape(title)}</title>",
        "<style>",
        "body { font-family: sans-serif; margin: 2rem; }",
        "table { border-collapse: collapse; }",
        "th, td { border: 1px solid #ccc; padding: 0.3rem 0.8rem; text-align: left; }",
        ".tested { color: #1a7f37; } .untested { color: #cf222e; }",
        "</style>",
        "</head>",
        "<body>",
        f"<h1>{html.escape(title)}</h1>",
        *body,
        "</body>",
        "</html>",
        "",
    ])


def _html_pre(title: str, text: str) -> str:
    return _html_page(title, [f"<pre>{html.escape(text)}</pre>"])


def _arg_details(specs: Iterable[ArgSpec]) -> List[ArgDetail]:
    return [
        ArgDetail(name=s.name, type=s.type, description=s.description, tested=s.tested, aliases=list(s.aliases))
        for s in specs
    ]


class ReportGenerator:
    """
    Builds CoverageReport objects and renders them.
    """

    def __init__(self, coverage_target: float = 90.0, runner_name: str = "runLocalCitty"):
        self.coverage_target = coverage_target
        self.runner_name = runner_name
        self.logger = logging.getLogger("ReportGenerator")

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------
    def recommendations(self, result: CoverageResult,
                        priority: Optional[Union[Priority, str]] = None) -> List[Recommendation]:
        """Untested items as recommendations, high priority first, tree order within a priority."""
        recs: List[Recommendation] = []
        for item in result.untested():
            noun = item.type
            if item.arg is not None:
                message = f"No test exercises --{item.arg.name} of '{item.node.full_name}'"
            else:
                message = f"The {noun} '{item.target}' has no test coverage"
            recs.append(Recommendation(
                type=noun,
                priority=ITEM_PRIORITY[noun],
                target=item.target,
                message=message,
                example=_example(item, self.runner_name),
            ))

        overall = result.overall
        if overall.percentage < self.coverage_target:
            recs.append(Recommendation(
                type="coverage",
                priority=Priority.LOW,
                target="overall",
                message=(
                    f"Overall coverage is {overall.percentage:.1f}%, below the "
                    f"{self.coverage_target:g}% target; start with the high-priority items"
                ),
            ))

        recs.sort(key=lambda r: PRIORITY_ORDER[r.priority])
        if priority is not None and str(getattr(priority, 'value', priority)) != "all":
            wanted = Priority(getattr(priority, 'value', priority))
            recs = [r for r in recs if r.priority == wanted]
        return recs

    def build_report(self, result: CoverageResult, cli_path: str, test_dir: str,
                     total_test_files: int = 0, total_patterns: int = 0,
                     warnings: Sequence[AnalysisWarning] = (),
                     analyzed_at: Optional[str] = None) -> CoverageReport:
        """
        Assemble the machine-readable report

        Args:
            result: Output of CoverageMapper.compute
            cli_path: CLI entry file that was analyzed
            test_dir: Test directory that was searched
            total_test_files: Number of test files examined
            total_patterns: Number of invocation patterns found
            warnings: Discovery warnings to report besides the mapper's own
            analyzed_at: ISO timestamp; defaults to now (UTC)

        Returns:
            CoverageReport
        """
        commands = {}
        for node, _ in result.tree.iter_nodes():
            commands[node.full_name] = self._command_detail(node)

        all_warnings = list(warnings) + list(result.warnings)
        recommendations = self.recommendations(result)
        self.logger.debug(f"Report: {len(commands)} commands, {len(recommendations)} recommendations, "
                          f"{len(all_warnings)} warnings")
        return CoverageReport(
            summary={category: result.records[category].to_dict() for category in CATEGORIES},
            commands=commands,
            recommendations=recommendations,
            warnings=[WarningEntry(**w.to_dict()) for w in all_warnings],
            metadata=ReportMetadata(
                analyzed_at=analyzed_at or datetime.now(timezone.utc).isoformat(),
                cli_path=cli_path,
                test_dir=test_dir,
                total_test_files=total_test_files,
                total_patterns=total_patterns,
            ),
        )

    def _command_detail(self, node: CommandNode) -> CommandDetail:
        return CommandDetail(
            name=node.name,
            path=node.full_name,
            description=node.description,
            tested=node.tested,
            test_files=list(node.test_files),
            flags=_arg_details(node.flags.values()),
            options=_arg_details(node.options.values()),
            source_file=node.source_file,
            source_line=node.source_line,
            imported_from=node.imported_from,
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, report: CoverageReport, fmt: Union[ReportFormat, str] = ReportFormat.TEXT,
               verbose: bool = False) -> str:
        fmt = ReportFormat(getattr(fmt, 'value', fmt))
        if fmt in (ReportFormat.JSON, ReportFormat.YAML):
            return _dump(report.to_json_dict(), fmt)
        if fmt == ReportFormat.MARKDOWN:
            return self.render_markdown(report, verbose)
        if fmt == ReportFormat.HTML:
            return self.render_html(report, verbose)
        return self.render_text(report, verbose)

    def render_json(self, report: CoverageReport) -> str:
        return _dump(report.to_json_dict(), ReportFormat.JSON)

    def render_html(self, report: CoverageReport, verbose: bool = False) -> str:
        meta = report.metadata
        esc = html.escape
        body = [
            "<ul>",
            f"<li><strong>CLI Path:</strong> <code>{esc(meta.cli_path)}</code></li>",
            f"<li><strong>Test Directory:</strong> <code>{esc(meta.test_dir)}</code></li>",
            f"<li><strong>Analysis Method:</strong> {esc(meta.analysis_method)}</li>",
            f"<li><strong>Test Files:</strong> {meta.total_test_files}</li>",
        ]
        if verbose:
            body.append(f"<li><strong>Analyzed At:</strong> {esc(meta.analyzed_at)}</li>")
        body.extend([
            "</ul>",
            "<h2>Coverage</h2>",
            "<table>",
            "<tr><th>Category</th><th>Tested</th><th>Total</th><th>Coverage</th></tr>",
        ])
        for category in CATEGORIES:
            record = report.summary[category]
            body.append(
                f"<tr><td>{CATEGORY_LABELS[category]}</td><td>{record['tested']}</td>"
                f"<td>{record['total']}</td><td>{record['percentage']:.1f}%</td></tr>"
            )
        body.extend(["</table>", "<h2>Commands</h2>", "<ul>"])
        for detail in report.commands.values():
            status = "tested" if detail.tested else "untested"
            body.append(f"<li class=\"{status}\"><code>{esc(detail.path)}</code> {esc(detail.description)}")
            args = detail.flags + detail.options
            if args:
                body.append("<ul>")
                for arg in args:
                    arg_status = "tested" if arg.tested else "untested"
                    body.append(f"<li class=\"{arg_status}\"><code>--{esc(arg.name)}</code> ({esc(arg.type)})</li>")
                body.append("</ul>")
            body.append("</li>")
        body.append("</ul>")

        if report.recommendations:
            body.extend(["<h2>Recommendations</h2>", "<ol>"])
            for rec in report.recommendations:
                example = f"<pre>{esc(rec.example)}</pre>" if rec.example else ""
                body.append(f"<li><strong>{rec.priority.value}</strong> {esc(rec.message)}{example}</li>")
            body.append("</ol>")

        if report.warnings:
            body.extend(["<h2>Warnings</h2>", "<ul>"])
            for warning in report.warnings:
                body.append(f"<li><code>{esc(warning.kind)}</code> {esc(warning.message)}</li>")
            body.append("</ul>")
        return _html_page("Test Coverage Analysis Report", body)

    def render_text(self, report: CoverageReport, verbose: bool = False) -> str:
        meta = report.metadata
        lines = [
            "Test Coverage Analysis Report",
            "=" * 40,
            "",
            "Coverage Summary:",
            f"  CLI Path: {meta.cli_path}",
            f"  Test Directory: {meta.test_dir}",
            f"  Analysis Method: {meta.analysis_method}",
            f"  Test Files: {meta.total_test_files}",
            f"  Invocation Patterns: {meta.total_patterns}",
            "",
            "Coverage Statistics:",
        ]
        for category in CATEGORIES:
            record = report.summary[category]
            lines.append(
                f"  {CATEGORY_LABELS[category] + ':':<13} {record['tested']}/{record['total']} "
                f"({record['percentage']:.1f}%)"
            )
        lines.append("")

        lines.append("Command Coverage Details:")
        for detail in report.commands.values():
            depth = detail.path.count(" ")
            indent = "  " * (depth + 1)
            mark = "[x]" if detail.tested else "[ ]"
            imported = f" (from {detail.imported_from})" if detail.imported_from else ""
            lines.append(f"{indent}{mark} {detail.path}: {detail.description or 'No description'}{imported}")
            for arg in detail.flags + detail.options:
                arg_mark = "[x]" if arg.tested else "[ ]"
                lines.append(f"{indent}    {arg_mark} --{arg.name} ({arg.type}): {arg.description or 'No description'}")
        lines.append("")

        if report.recommendations:
            lines.append("Recommendations:")
            for priority in Priority:
                group = [r for r in report.recommendations if r.priority == priority]
                if not group:
                    continue
                lines.append(f"  {priority.value.capitalize()} priority:")
                for rec in group:
                    lines.append(f"    - {rec.message}")
            lines.append("")

        if report.warnings:
            lines.append("Warnings:")
            for warning in report.warnings:
                where = f" ({warning.file}:{warning.line})" if warning.file and warning.line else \
                    (f" ({warning.file})" if warning.file else "")
                lines.append(f"  [{warning.kind}] {warning.message}{where}")
            lines.append("")

        if verbose:
            lines.append("Analysis Metadata:")
            lines.append(f"  Analyzed At: {meta.analyzed_at}")
            lines.append("")
        return "\n".join(lines)

    def render_markdown(self, report: CoverageReport, verbose: bool = False) -> str:
        meta = report.metadata
        lines = [
            "# Test Coverage Analysis Report",
            "",
            f"- **CLI Path:** `{meta.cli_path}`",
            f"- **Test Directory:** `{meta.test_dir}`",
            f"- **Analysis Method:** {meta.analysis_method}",
            f"- **Test Files:** {meta.total_test_files}",
        ]
        if verbose:
            lines.append(f"- **Analyzed At:** {meta.analyzed_at}")
        lines.extend([
            "",
            "## Coverage",
            "",
            "| Category | Tested | Total | Coverage |",
            "|----------|--------|-------|----------|",
        ])
        for category in CATEGORIES:
            record = report.summary[category]
            lines.append(
                f"| {CATEGORY_LABELS[category]} | {record['tested']} | {record['total']} "
                f"| {record['percentage']:.1f}% |"
            )
        lines.extend(["", "## Commands", ""])
        for detail in report.commands.values():
            mark = "x" if detail.tested else " "
            lines.append(f"- [{mark}] `{detail.path}` {detail.description}".rstrip())
            for arg in detail.flags + detail.options:
                arg_mark = "x" if arg.tested else " "
                lines.append(f"  - [{arg_mark}] `--{arg.name}` ({arg.type})")

        if report.recommendations:
            lines.extend(["", "## Recommendations", ""])
            for rec in report.recommendations:
                lines.append(f"- **{rec.priority.value}** {rec.message}")
                if rec.example:
                    lines.extend(["", "  ```js"] + [f"  {line}" for line in rec.example.split("\n")] + ["  ```", ""])

        if report.warnings:
            lines.extend(["", "## Warnings", ""])
            for warning in report.warnings:
                lines.append(f"- `{warning.kind}` {warning.message}")
        lines.append("")
        return "\n".join(lines)

    def render_stats(self, report: CoverageReport, fmt: Union[ReportFormat, str] = ReportFormat.TEXT,
                     top: int = 3) -> str:
        """Coverage summary with the top recommendations."""
        fmt = ReportFormat(getattr(fmt, 'value', fmt))
        if fmt in (ReportFormat.JSON, ReportFormat.YAML):
            meta = report.metadata.model_dump(mode="json", by_alias=True)
            return _dump({
                "summary": report.summary,
                "topRecommendations": [r.model_dump(mode="json") for r in report.recommendations[:top]],
                "metadata": meta,
            }, fmt)

        meta = report.metadata
        lines = [
            "CLI Coverage Statistics",
            "=" * 24,
            f"CLI: {meta.cli_path}",
            f"Test Directory: {meta.test_dir}",
            f"Total Test Files: {meta.total_test_files}",
            "",
            "Coverage Summary:",
        ]
        for category in CATEGORIES:
            record = report.summary[category]
            lines.append(f"  {CATEGORY_LABELS[category]}: {record['tested']}/{record['total']} "
                         f"({record['percentage']:.1f}%)")
        if report.recommendations:
            lines.extend(["", "Top Recommendations:"])
            for index, rec in enumerate(report.recommendations[:top], 1):
                lines.append(f"  {index}. {rec.message}")
        lines.append("")
        text = "\n".join(lines)
        return _html_pre("CLI Coverage Statistics", text) if fmt == ReportFormat.HTML else text

    def render_recommendations(self, recs: Sequence[Recommendation], priority: str = "all",
                               fmt: Union[ReportFormat, str] = ReportFormat.TEXT,
                               verbose: bool = False) -> str:
        """Prioritized recommendation list; examples are shown in markdown/html or with verbose."""
        fmt = ReportFormat(getattr(fmt, 'value', fmt))
        if fmt in (ReportFormat.JSON, ReportFormat.YAML):
            return _dump({
                "priority": priority,
                "recommendations": [r.model_dump(mode="json") for r in recs],
            }, fmt)
        if not recs:
            text = "No recommendations: every command, flag and option is exercised by a test."
            return _html_pre("Recommendations", text) if fmt == ReportFormat.HTML else text
        if fmt == ReportFormat.HTML:
            items = []
            for rec in recs:
                example = f"<pre>{html.escape(rec.example)}</pre>" if rec.example else ""
                items.append(f"<li><strong>{rec.priority.value}</strong> {html.escape(rec.message)}{example}</li>")
            return _html_page(f"Recommendations (priority: {priority})", ["<ol>", *items, "</ol>"])

        lines = [f"Recommendations (priority: {priority})", "=" * 40, ""]
        for index, rec in enumerate(recs, 1):
            lines.append(f"{index}. [{rec.priority.value}] {rec.message}")
            if rec.example and fmt == ReportFormat.MARKDOWN:
                lines.extend(["", "```js", rec.example, "```", ""])
            elif rec.example and verbose:
                lines.extend(f"     {line}" for line in rec.example.split('\n'))
        return "\n".join(lines)

    def render_structure(self, root: CommandNode, cli_path: str,
                         fmt: Union[ReportFormat, str] = ReportFormat.TEXT,
                         warnings: Sequence[AnalysisWarning] = ()) -> str:
        """Discovered command tree, without any coverage information."""
        fmt = ReportFormat(getattr(fmt, 'value', fmt))
        nodes = list(root.iter_nodes())
        if fmt in (ReportFormat.JSON, ReportFormat.YAML):
            return _dump({
                "cliPath": cli_path,
                "root": root.name,
                "commands": {
                    node.full_name: self._command_detail(node).model_dump(
                        mode="json", by_alias=True, exclude={"tested", "test_files"})
                    for node, _ in nodes
                },
                "warnings": [w.to_dict() for w in warnings],
            }, fmt)

        lines = [
            "CLI Structure Discovery Report",
            "=" * 40,
            "",
            "Discovery Summary:",
            f"  CLI Path: {cli_path}",
            f"  Commands: {len(nodes)}",
            f"  Flags: {sum(len(n.flags) for n, _ in nodes)}",
            f"  Options: {sum(len(n.options) for n, _ in nodes)}",
            "",
            "Discovered Commands:",
        ]
        for node, depth in nodes:
            indent = "  " * depth
            imported = f" (from {node.imported_from})" if node.imported_from else ""
            lines.append(f"{indent}{node.full_name}: {node.description or 'No description'}{imported}")
            for spec in list(node.flags.values()) + list(node.options.values()):
                alias = f", -{', -'.join(spec.aliases)}" if spec.aliases else ""
                lines.append(f"{indent}    --{spec.name}{alias} ({spec.type}): {spec.description or 'No description'}")
            for spec in node.positionals.values():
                lines.append(f"{indent}    <{spec.name}>: {spec.description or 'No description'}")
        if warnings:
            lines.extend(["", "Warnings:"])
            lines.extend(f"  {w}" for w in warnings)
        lines.append("")
        text = "\n".join(lines)
        return _html_pre("CLI Structure Discovery Report", text) if fmt == ReportFormat.HTML else text


__all__ = ['ReportGenerator']
