import json

import yaml
from typer.testing import CliRunner

from clicov import __version__
from clicov.cli import app

from conftest import APP_CLI


runner = CliRunner()


def paths(root):
    return ["--cli-path", str(root / "src" / "cli.mjs"), "--test-dir", str(root / "test")]


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_analyze_text(app_project):
    result = runner.invoke(app, ["analyze", *paths(app_project)])
    assert result.exit_code == 0, result.output
    assert "Test Coverage Analysis Report" in result.output
    assert "Subcommands:  1/2 (50.0%)" in result.output


def test_analyze_json(app_project):
    result = runner.invoke(app, ["analyze", *paths(app_project), "--format", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["summary"]["options"]["percentage"] == 100.0
    assert "app build" in data["commands"]


def test_analyze_writes_output_file(app_project, tmp_path):
    target = tmp_path / "report.md"
    result = runner.invoke(app, ["analyze", *paths(app_project), "-f", "markdown", "-o", str(target)])
    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8").startswith("# Test Coverage Analysis Report")


def test_low_coverage_still_exits_zero(make_project):
    root = make_project({"src/cli.mjs": APP_CLI})
    result = runner.invoke(app, ["analyze", *paths(root)])
    assert result.exit_code == 0
    assert "Overall:      0/5 (0.0%)" in result.output


def test_malformed_entry_exits_with_parse_status(make_project):
    root = make_project({"src/cli.mjs": "const main = defineCommand({\n"})
    result = runner.invoke(app, ["analyze", *paths(root)])
    assert result.exit_code == 2
    assert "Test Coverage Analysis Report" not in result.output


def test_missing_root_definition_exit_status(make_project):
    root = make_project({"src/cli.mjs": "export const x = 1\n"})
    result = runner.invoke(app, ["analyze", *paths(root)])
    assert result.exit_code == 3


def test_missing_test_dir_exit_status(app_project):
    args = ["--cli-path", str(app_project / "src" / "cli.mjs"), "--test-dir", str(app_project / "nope")]
    result = runner.invoke(app, ["analyze", *args])
    assert result.exit_code == 4


def test_missing_cli_file_exit_status(tmp_path):
    result = runner.invoke(app, ["discover", "--cli-path", str(tmp_path / "cli.mjs")])
    assert result.exit_code == 4


def test_discover(app_project):
    result = runner.invoke(app, ["discover", *paths(app_project)])
    assert result.exit_code == 0, result.output
    assert "CLI Structure Discovery Report" in result.output
    assert "app build: Build the project" in result.output

    result = runner.invoke(app, ["discover", *paths(app_project), "-f", "json"])
    assert json.loads(result.stdout)["root"] == "app"


def test_stats(app_project):
    result = runner.invoke(app, ["stats", *paths(app_project)])
    assert result.exit_code == 0, result.output
    assert "CLI Coverage Statistics" in result.output
    assert "Top Recommendations:" in result.output


def test_recommend_priority_filter(app_project):
    result = runner.invoke(app, ["recommend", *paths(app_project), "--priority", "high", "-f", "json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["priority"] == "high"
    assert [r["target"] for r in data["recommendations"]] == ["app", "app test"]

    result = runner.invoke(app, ["recommend", *paths(app_project), "--priority", "medium"])
    assert "Recommendations (priority: medium)" in result.output
    assert "[medium] No test exercises --verbose of 'app build'" in result.output


def test_recommend_rejects_unknown_priority(app_project):
    result = runner.invoke(app, ["recommend", *paths(app_project), "--priority", "urgent"])
    assert result.exit_code == 2


def test_invalid_workers_is_a_usage_error(app_project):
    result = runner.invoke(app, ["analyze", *paths(app_project), "--workers", "0"])
    assert result.exit_code == 2


def test_yaml_and_html_formats(app_project):
    result = runner.invoke(app, ["recommend", *paths(app_project), "--priority", "high", "-f", "yaml"])
    assert result.exit_code == 0, result.output
    data = yaml.safe_load(result.stdout)
    assert [r["target"] for r in data["recommendations"]] == ["app", "app test"]

    result = runner.invoke(app, ["analyze", *paths(app_project), "-f", "html"])
    assert result.exit_code == 0, result.output
    assert "<h1>Test Coverage Analysis Report</h1>" in result.stdout
