import textwrap
from pathlib import Path
from typing import Callable, Dict

import pytest

from clicov.config import AnalyzerConfig
from clicov.engine import CoverageEngine
from clicov.models import ArgSpec, CommandNode


APP_CLI = """
import { defineCommand, runMain } from 'citty'

const build = defineCommand({
  meta: { name: 'build', description: 'Build the project' },
  args: {
    verbose: { type: 'boolean', description: 'Verbose output' },
    out: { type: 'string', description: 'Output directory' },
  },
  run() {},
})

const test = defineCommand({
  meta: { name: 'test', description: 'Run the tests' },
  run() {},
})

const main = defineCommand({
  meta: { name: 'app', description: 'Demo application' },
  subCommands: { build, test },
})

runMain(main)
"""

BUILD_TEST = """
import { describe, it } from 'vitest'
import { runLocalCitty } from '../src/runner.mjs'

describe('build', () => {
  it('writes to dist', async () => {
    await runLocalCitty(['build', '--out', 'dist'])
  })
})
"""


def write_files(root: Path, files: Dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a small citty project into tmp_path; returns the project root."""
    def _make(files: Dict[str, str]) -> Path:
        (tmp_path / "test").mkdir(exist_ok=True)
        return write_files(tmp_path, files)
    return _make


@pytest.fixture
def app_project(make_project) -> Path:
    return make_project({"src/cli.mjs": APP_CLI, "test/build.test.mjs": BUILD_TEST})


def config_for(root: Path, **overrides) -> AnalyzerConfig:
    return AnalyzerConfig(cli_path=str(root / "src" / "cli.mjs"), test_dir=str(root / "test"), **overrides)


@pytest.fixture
def engine_for() -> Callable[..., CoverageEngine]:
    def _engine(root: Path, **overrides) -> CoverageEngine:
        return CoverageEngine(config_for(root, **overrides))
    return _engine


@pytest.fixture
def app_tree() -> CommandNode:
    """app { build (--verbose flag, --out option), test }, built without parsing."""
    root = CommandNode(name="app", description="Demo application")
    build = CommandNode(name="build", description="Build the project")
    build.add_arg(ArgSpec(name="verbose", type="boolean", aliases=["V"]))
    build.add_arg(ArgSpec(name="out", type="string", aliases=["o"]))
    root.add_subcommand(build)
    root.add_subcommand(CommandNode(name="test", description="Run the tests"))
    return root
