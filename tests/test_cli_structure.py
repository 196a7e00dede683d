import pytest

from clicov.analyzers.cli_structure import CLIStructureDiscoverer
from clicov.errors import ParseError, StructureError
from clicov.tools.ast_cache import ASTCache
from clicov.tools.ast_parsing import JavaScriptParser
from clicov.tools.source_reader import SourceReader


def discover(root, entry="src/cli.mjs"):
    discoverer = CLIStructureDiscoverer(SourceReader(), JavaScriptParser(ASTCache()))
    tree = discoverer.discover(str(root / entry))
    return tree, discoverer


def warning_kinds(discoverer):
    return [w.kind for w in discoverer.warnings]


def test_inline_definitions(app_project):
    tree, discoverer = discover(app_project)

    assert tree.name == "app"
    assert tree.description == "Demo application"
    assert list(tree.subcommands) == ["build", "test"]

    build = tree.subcommands["build"]
    assert build.description == "Build the project"
    assert list(build.flags) == ["verbose"]
    assert list(build.options) == ["out"]
    assert build.flags["verbose"].description == "Verbose output"
    assert build.source_file.endswith("cli.mjs")
    assert build.source_line == 3
    assert build.parent is tree
    assert build.path == ["build"]
    assert build.full_name == "app build"
    assert discoverer.warnings == []


def test_imported_subcommands(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            import { deployCommand } from './commands/deploy.mjs'
            import status from './commands/status'
            import { listCommand as list } from './commands/index.mjs'

            const main = defineCommand({
              meta: { name: 'ops' },
              subCommands: {
                deploy: deployCommand,
                status,
                list,
                lint: () => import('./commands/lint.mjs').then((m) => m.lintCommand),
                clean: () => import('./commands/clean.mjs'),
              },
            })

            runMain(main)
        """,
        "src/commands/deploy.mjs": """
            import { defineCommand } from 'citty'

            export const deployCommand = defineCommand({
              meta: { name: 'deploy', description: 'Deploy the app' },
              args: {
                env: { type: 'string', alias: 'e', required: true },
                force: { type: 'boolean', alias: ['f'] },
              },
            })
        """,
        "src/commands/status.mjs": """
            import { defineCommand } from 'citty'
            export default defineCommand({ meta: { name: 'status' }, run() {} })
        """,
        "src/commands/index.mjs": """
            export { listCommand } from './list.mjs'
        """,
        "src/commands/list.mjs": """
            import { defineCommand } from 'citty'
            const listCommand = defineCommand({
              meta: { name: 'list' },
              args: { json: { type: 'boolean' } },
            })
            export { listCommand }
        """,
        "src/commands/lint.mjs": """
            import { defineCommand } from 'citty'
            export const lintCommand = defineCommand({ meta: { name: 'lint' }, run() {} })
        """,
        "src/commands/clean.mjs": """
            import { defineCommand } from 'citty'
            export default defineCommand({ meta: { name: 'clean' }, run() {} })
        """,
    })

    tree, discoverer = discover(root)

    assert sorted(tree.subcommands) == ["clean", "deploy", "lint", "list", "status"]
    deploy = tree.subcommands["deploy"]
    assert deploy.description == "Deploy the app"
    assert deploy.options["env"].aliases == ["e"]
    assert deploy.options["env"].required is True
    assert deploy.flags["force"].aliases == ["f"]
    assert deploy.imported_from.endswith("deploy.mjs")
    assert tree.subcommands["status"].imported_from.endswith("status.mjs")
    assert "json" in tree.subcommands["list"].flags
    assert tree.subcommands["list"].imported_from.endswith("list.mjs")
    assert tree.subcommands["lint"].source_file.endswith("lint.mjs")
    assert tree.subcommands["clean"].source_file.endswith("clean.mjs")
    assert discoverer.warnings == []


def test_unresolved_imports_become_warnings(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            import { ghost } from './commands/ghost.mjs'
            import { remote } from 'some-package'

            runMain(defineCommand({
              meta: { name: 'app' },
              subCommands: { ghost, remote, build: defineCommand({ meta: { name: 'build' } , run() {} }) },
            }))
        """,
    })

    tree, discoverer = discover(root)

    assert sorted(tree.subcommands) == ["build", "ghost", "remote"]
    ghost = tree.subcommands["ghost"]
    assert [w.kind for w in ghost.warnings] == ["unresolved_import"]
    assert "ghost.mjs" in ghost.warnings[0].message
    assert [w.kind for w in tree.subcommands["remote"].warnings] == ["unresolved_import"]
    assert warning_kinds(discoverer) == ["unresolved_import", "unresolved_import"]


def test_missing_export_is_a_warning(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            import { nothing } from './other.mjs'
            const main = defineCommand({ meta: { name: 'app' }, subCommands: { nothing } })
            runMain(main)
        """,
        "src/other.mjs": "export const somethingElse = 1\n",
    })

    tree, discoverer = discover(root)
    assert "nothing" in tree.subcommands
    assert "no export named 'nothing'" in discoverer.warnings[0].message


def test_duplicate_subcommand_last_wins(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            const first = defineCommand({ meta: { name: 'build', description: 'first' } })
            const second = defineCommand({ meta: { name: 'build', description: 'second' } })
            const main = defineCommand({
              meta: { name: 'app' },
              subCommands: { build: first, build: second },
            })
            runMain(main)
        """,
    })

    tree, discoverer = discover(root)

    assert list(tree.subcommands) == ["build"]
    assert tree.subcommands["build"].description == "second"
    assert warning_kinds(discoverer) == ["duplicate_subcommand"]


def test_default_export_root_without_run_main(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand } from 'citty'
            const sub = defineCommand({ meta: { name: 'sub' }, run() {} })
            export default defineCommand({ meta: { name: 'tool' }, subCommands: { sub } })
        """,
    })
    tree, _ = discover(root)
    assert tree.name == "tool"
    assert list(tree.subcommands) == ["sub"]


def test_unreferenced_definition_is_root(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand } from 'citty'
            const sub = defineCommand({ meta: { name: 'sub' }, run() {} })
            const main = defineCommand({ meta: { name: 'tool' }, subCommands: { sub } })
        """,
    })
    tree, _ = discover(root)
    assert tree.name == "tool"


def test_root_imported_by_bin_file(make_project):
    root = make_project({
        "bin/cli.mjs": """
            #!/usr/bin/env node
            import { runMain } from 'citty'
            import { main } from '../src/main.mjs'
            runMain(main)
        """,
        "src/main.mjs": """
            import { defineCommand } from 'citty'
            export const main = defineCommand({ meta: { name: 'tool' }, args: { debug: { type: 'boolean' } } })
        """,
    })
    tree, _ = discover(root, "bin/cli.mjs")
    assert tree.name == "tool"
    assert "debug" in tree.flags
    assert tree.imported_from.endswith("main.mjs")


def test_run_main_root_without_static_name_is_an_error(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            const pkg = { name: 'tool', version: '1.0.0' }
            const build = defineCommand({ meta: { name: 'build' }, args: { out: { type: 'string' } } })
            const main = defineCommand({ meta: { name: pkg.name }, subCommands: { build } })
            runMain(main)
        """,
    })
    with pytest.raises(StructureError) as exc:
        discover(root)
    assert exc.value.exit_code == 3
    assert "cli.mjs" in exc.value.message
    assert "meta.name" in exc.value.reason
    assert "cli.mjs:4" in exc.value.details


def test_default_export_root_without_static_name_is_an_error(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand } from 'citty'
            const name = readPackageName()
            const sub = defineCommand({ meta: { name: 'sub' }, run() {} })
            export default defineCommand({ meta: { name }, subCommands: { sub } })
        """,
    })
    with pytest.raises(StructureError) as exc:
        discover(root)
    assert "meta.name" in exc.value.reason


def test_nameless_outer_definition_is_not_replaced_by_a_subcommand(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand } from 'citty'
            const build = defineCommand({ meta: { name: 'build' }, run() {} })
            const main = defineCommand({ meta: { name: process.env.CLI_NAME }, subCommands: { build } })
        """,
    })
    with pytest.raises(StructureError) as exc:
        discover(root)
    assert "meta.name" in exc.value.reason


def test_imported_args_spread(make_project):
    root = make_project({
        "src/_shared.mjs": """
            export const sharedArgs = {
              verbose: { type: 'boolean', alias: 'v' },
              out: { type: 'string' },
            }
            export const extraArgs = { ...sharedArgs, dry: { type: 'boolean' } }
        """,
        "src/args/index.mjs": """
            export { extraArgs as reexported } from '../_shared.mjs'
        """,
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            import { sharedArgs } from './_shared.mjs'
            import { reexported } from './args/index.mjs'

            const serve = defineCommand({
              meta: { name: 'serve' },
              args: { ...sharedArgs, port: { type: 'number' } },
            })
            const deploy = defineCommand({
              meta: { name: 'deploy' },
              args: { ...reexported, ...loadArgs() },
            })

            runMain(defineCommand({ meta: { name: 'app' }, subCommands: { serve, deploy } }))
        """,
    })

    tree, discoverer = discover(root)

    serve = tree.subcommands["serve"]
    assert sorted(serve.flags) == ["verbose"]
    assert sorted(serve.options) == ["out", "port"]
    assert serve.flags["verbose"].aliases == ["v"]

    deploy = tree.subcommands["deploy"]
    assert sorted(deploy.flags) == ["dry", "verbose"]
    assert sorted(deploy.options) == ["out"]
    # only the call result stays unresolved
    assert warning_kinds(discoverer) == ["dynamic_args"]


def test_args_shapes(make_project):
    root = make_project({
        "src/cli.ts": """
            import { defineCommand, runMain } from 'citty'

            const meta = { name: 'app', description: 'typed' } as const
            const common = {
              verbose: { type: 'boolean', alias: 'v' },
            }

            const main = defineCommand({
              meta,
              args: {
                ...common,
                name: { type: 'positional', description: 'Project name' },
                port: { type: 'number', default: 3000 },
                mode: { type: 'enum', options: ['dev', 'prod'] },
                color: { default: true },
                ...dynamicArgs(),
              },
              run() {},
            })

            runMain(main)
        """,
    })

    tree, discoverer = discover(root, "src/cli.ts")

    assert tree.description == "typed"
    assert sorted(tree.flags) == ["color", "verbose"]
    assert sorted(tree.options) == ["mode", "port"]
    assert list(tree.positionals) == ["name"]
    assert tree.options["port"].default == 3000
    assert tree.flags["verbose"].aliases == ["v"]
    assert warning_kinds(discoverer) == ["dynamic_args"]


def test_import_cycle_is_reported(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand, runMain } from 'citty'
            import a from './a.mjs'
            runMain(defineCommand({ meta: { name: 'app' }, subCommands: { a } }))
        """,
        "src/a.mjs": """
            import { defineCommand } from 'citty'
            import b from './b.mjs'
            export default defineCommand({ meta: { name: 'a' }, subCommands: { b } })
        """,
        "src/b.mjs": """
            import { defineCommand } from 'citty'
            import a from './a.mjs'
            export default defineCommand({ meta: { name: 'b' }, subCommands: { a } })
        """,
    })

    tree, discoverer = discover(root)

    b = tree.subcommands["a"].subcommands["b"]
    assert "a" in b.subcommands
    assert b.subcommands["a"].subcommands == {}
    assert warning_kinds(discoverer) == ["import_cycle"]


def test_sibling_names_are_unique(app_project):
    tree, _ = discover(app_project)
    for node, _ in tree.iter_nodes():
        names = [child.name for child in node.subcommands.values()]
        assert len(names) == len(set(names))
        assert all(key == child.name for key, child in node.subcommands.items())


def test_missing_root_definition(make_project):
    root = make_project({"src/cli.mjs": "export const helper = () => 42\n"})
    with pytest.raises(StructureError) as exc:
        discover(root)
    assert exc.value.exit_code == 3
    assert "cli.mjs" in exc.value.message
    assert "defineCommand" in str(exc.value)


def test_malformed_entry_file(make_project):
    root = make_project({
        "src/cli.mjs": """
            import { defineCommand } from 'citty'
            const main = defineCommand({
              meta: { name: 'app' },
              args: { verbose: { type: 'boolean' }
            })
        """,
    })
    with pytest.raises(ParseError) as exc:
        discover(root)
    assert exc.value.file_path.endswith("cli.mjs")
    assert exc.value.line >= 1
