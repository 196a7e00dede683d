"""
CLI Structure Discoverer - builds the command tree of a citty-style CLI

Reads the entry file, locates the root `defineCommand({...})` definition and
walks its `args` and `subCommands`, following imports into other modules.
Subcommand values are first classified into a CommandSource (inline, local
identifier, imported) and then resolved to a definition object, so the tree
builder never has to care where a definition came from.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from ..errors import AnalysisWarning, CoverageAnalysisError, StructureError
from ..models import (
    ArgSpec,
    CommandNode,
    CommandSource,
    ImportedSource,
    InlineSource,
    LocalSource,
    UnresolvedSource,
)
from ..tools.ast_parsing import (
    JavaScriptParser,
    call_arguments,
    callee_name,
    line_of,
    literal_value,
    node_text,
    object_get,
    object_members,
    string_value,
    unwrap,
    walk,
)
from ..tools.source_reader import SourceReader


MODULE_EXTENSIONS = ['.js', '.mjs', '.cjs', '.ts', '.mts', '.cts']
MAIN_RUNNERS = {'runMain', 'runCommand', 'createMain'}
COMMAND_KEYS = {'meta', 'args', 'subCommands', 'run', 'setup', 'cleanup'}


@dataclass
class ExportTarget:
    """What an exported name points at"""
    kind: str  # "local", "node" or "reexport"
    name: Optional[str] = None
    node: Optional[Node] = None
    module: Optional[str] = None


@dataclass
class ModuleInfo:
    """Top-level bindings, imports and exports of one parsed file"""
    path: str
    root: Node
    bindings: Dict[str, Node] = field(default_factory=dict)
    imports: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    exports: Dict[str, ExportTarget] = field(default_factory=dict)
    star_exports: List[str] = field(default_factory=list)


class UnresolvedDefinition(Exception):
    """Internal signal: a command source could not be resolved to a definition"""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class CLIStructureDiscoverer:
    """
    Builds a CommandNode tree from a CLI entry file.

    The root definition must be found (StructureError otherwise); problems
    below the root become warnings attached to the affected subcommand.
    """

    def __init__(self, reader: SourceReader, parser: JavaScriptParser):
        self.reader = reader
        self.parser = parser
        self.logger = logging.getLogger("CLIStructureDiscoverer")
        self.warnings: List[AnalysisWarning] = []
        self._modules: Dict[str, ModuleInfo] = {}

    def discover(self, entry_file: str) -> CommandNode:
        """
        Discover the command hierarchy defined by entry_file

        Args:
            entry_file: Path to the CLI entry point

        Returns:
            The fully populated root CommandNode
        """
        self.warnings = []
        self._modules = {}
        self.logger.info(f"Discovering CLI structure: {entry_file}")

        # Read and parse failures of the entry file are fatal
        module = self._load_module(entry_file)
        found = self._find_root_definition(module)
        if found is None:
            raise StructureError(
                entry_file,
                "Could not identify the main command",
                "No defineCommand({ meta: { name } }) call with args/subCommands/run was found",
            )

        root_obj, owner = found
        if not self._meta_name(root_obj, owner):
            raise StructureError(
                entry_file,
                "Main command has no static meta.name",
                f"The definition at {owner.path}:{line_of(root_obj)} sets meta.name to a value "
                "that is not a string literal",
            )
        root = self._build_node(None, root_obj, owner, set())
        if owner is not module:
            root.imported_from = owner.path

        total = sum(1 for _ in root.iter_nodes()) - 1
        self.logger.info(f"Discovered {total} subcommands under '{root.name}'")
        return root

    # ------------------------------------------------------------------
    # Module loading
    # ------------------------------------------------------------------
    def _load_module(self, path: str) -> ModuleInfo:
        key = os.path.normpath(os.path.abspath(path))
        if key in self._modules:
            return self._modules[key]
        file_result = self.reader.read(path)
        tree = self.parser.parse(file_result.content, path)
        module = index_module(path, tree.root_node)
        self._modules[key] = module
        return module

    def _resolve_module_path(self, specifier: str, from_file: str) -> Optional[str]:
        if not specifier.startswith(('.', '/')):
            return None
        base = specifier if specifier.startswith('/') else os.path.join(os.path.dirname(from_file), specifier)
        base = os.path.normpath(base)
        candidates = [base]
        stem, ext = os.path.splitext(base)
        if ext in ('.js', '.mjs', '.cjs'):
            # TypeScript sources are imported with their compiled extension
            candidates.extend(stem + e for e in ('.ts', '.mts', '.cts'))
        candidates.extend(base + e for e in MODULE_EXTENSIONS)
        candidates.extend(os.path.join(base, 'index' + e) for e in MODULE_EXTENSIONS)
        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        return None

    # ------------------------------------------------------------------
    # Root detection
    # ------------------------------------------------------------------
    def _find_root_definition(self, module: ModuleInfo) -> Optional[Tuple[Node, ModuleInfo]]:
        for call in walk(module.root):
            if call.type == 'call_expression' and callee_name(call) in MAIN_RUNNERS:
                args = call_arguments(call)
                if not args:
                    continue
                found = self._try_resolve(self._classify(args[0], module), module)
                if found is not None:
                    self.logger.debug(f"Root command passed to {callee_name(call)}()")
                    return found

        if 'default' in module.exports:
            found = self._try_resolve(None, module)
            if found is not None:
                self.logger.debug("Root command is the default export")
                return found

        candidates = self._command_calls(module)
        # Outermost definitions only; nested ones are subcommands
        outer = [
            obj for obj in candidates
            if not any(o is not obj and o.start_byte <= obj.start_byte and obj.end_byte <= o.end_byte
                       for o in candidates)
        ]
        if not outer:
            return None
        referenced = self._referenced_definitions(outer, module)
        for obj in outer:
            if obj.start_byte not in referenced:
                return obj, module
        return outer[0], module

    def _try_resolve(self, source: Optional[CommandSource],
                     module: ModuleInfo) -> Optional[Tuple[Node, ModuleInfo]]:
        """Resolve a root candidate (None means the default export); unresolvable ones are skipped."""
        try:
            if source is None:
                return self._resolve_export(module, 'default', set())
            return self._resolve(source, module, set())
        except UnresolvedDefinition as e:
            self.logger.debug(f"Skipping root candidate: {e.message}")
            return None

    def _command_calls(self, module: ModuleInfo) -> List[Node]:
        found = []
        for node in walk(module.root):
            if node.type != 'call_expression':
                continue
            args = call_arguments(node)
            if args and unwrap(args[0]).type == 'object' and looks_like_command(unwrap(args[0])):
                found.append(unwrap(args[0]))
        return found

    def _referenced_definitions(self, definitions: List[Node], module: ModuleInfo) -> Set[int]:
        """start_byte of every definition registered as another definition's subcommand."""
        referenced: Set[int] = set()
        for obj in definitions:
            subs = self._resolve_object(object_get(obj, 'subCommands'), module)
            if subs is None:
                continue
            for kind, _, value in object_members(subs):
                if kind not in ('pair', 'shorthand') or value is None:
                    continue
                target = self._try_resolve_local(value, module)
                if target is not None:
                    referenced.add(target.start_byte)
        return referenced

    def _try_resolve_local(self, node: Optional[Node], module: ModuleInfo) -> Optional[Node]:
        try:
            obj, _ = self._resolve(self._classify(node, module), module, set(), local_only=True)
        except UnresolvedDefinition:
            return None
        return obj

    # ------------------------------------------------------------------
    # Source classification and resolution
    # ------------------------------------------------------------------
    def _classify(self, node: Optional[Node], module: ModuleInfo) -> CommandSource:
        node = unwrap(node)
        if node is None:
            return UnresolvedSource("missing value", module.path)
        line = line_of(node)

        if node.type == 'object':
            return InlineSource(node, module.path)
        if node.type == 'identifier' or node.type == 'shorthand_property_identifier':
            name = node_text(node)
            if name in module.imports:
                specifier, imported = module.imports[name]
                return ImportedSource(specifier, imported, module.path)
            return LocalSource(name, module.path)
        if node.type == 'member_expression':
            obj = unwrap(node.child_by_field_name('object'))
            prop = node.child_by_field_name('property')
            if obj is not None and obj.type == 'identifier' and prop is not None:
                imported = module.imports.get(node_text(obj))
                if imported and imported[1] == '*':
                    return ImportedSource(imported[0], node_text(prop), module.path)
            return UnresolvedSource(f"cannot resolve '{node_text(node)}'", module.path, line)
        if node.type in ('arrow_function', 'function_expression', 'function', 'method_definition'):
            return self._classify(returned_expression(node), module)
        if node.type == 'call_expression':
            function = unwrap(node.child_by_field_name('function'))
            args = call_arguments(node)
            if function is not None and function.type == 'import':
                specifier = string_value(args[0]) if args else None
                if specifier is None:
                    return UnresolvedSource("dynamic import with a computed path", module.path, line)
                return ImportedSource(specifier, 'default', module.path)
            if function is not None and function.type == 'member_expression':
                target = unwrap(function.child_by_field_name('object'))
                prop = function.child_by_field_name('property')
                if prop is not None and node_text(prop) == 'then' and target is not None:
                    inner = self._classify(target, module)
                    if isinstance(inner, ImportedSource) and args:
                        export_name = picked_export(args[0])
                        if export_name is not None:
                            return ImportedSource(inner.module, export_name, inner.from_file)
                    return inner
            if args and unwrap(args[0]) is not None and unwrap(args[0]).type == 'object':
                return InlineSource(unwrap(args[0]), module.path)
            return UnresolvedSource(f"call to '{callee_name(node) or '?'}' is not a command definition",
                                    module.path, line)
        return UnresolvedSource(f"unsupported value '{node_text(node)[:40]}'", module.path, line)

    def _resolve(self, source: CommandSource, module: ModuleInfo,
                 visiting: Set[Tuple[str, str]], local_only: bool = False) -> Tuple[Node, ModuleInfo]:
        """
        Turn a CommandSource into the definition object it denotes.

        Args:
            source: Classified subcommand (or root) value
            module: Module the source appears in
            visiting: (file, name) markers already on the resolution path
            local_only: Refuse to follow imports into other files

        Returns:
            (definition object node, module owning it)
        """
        if isinstance(source, UnresolvedSource):
            raise UnresolvedDefinition('unresolved_import', source.reason)

        if isinstance(source, InlineSource):
            if not looks_like_command(source.node):
                raise UnresolvedDefinition('unresolved_import', "object is not a command definition")
            return source.node, module

        if isinstance(source, LocalSource):
            if source.identifier in module.imports:
                specifier, imported = module.imports[source.identifier]
                return self._resolve(ImportedSource(specifier, imported, module.path), module,
                                     visiting, local_only)
            marker = (module.path, 'local:' + source.identifier)
            if marker in visiting:
                raise UnresolvedDefinition('import_cycle', f"'{source.identifier}' refers to itself")
            value = module.bindings.get(source.identifier)
            if value is None:
                raise UnresolvedDefinition(
                    'unresolved_import', f"'{source.identifier}' is not defined in {module.path}")
            return self._resolve(self._classify(value, module), module, visiting | {marker}, local_only)

        if local_only:
            raise UnresolvedDefinition('unresolved_import', f"'{source.module}' is in another file")
        path = self._resolve_module_path(source.module, source.from_file)
        if path is None:
            raise UnresolvedDefinition(
                'unresolved_import', f"cannot resolve module '{source.module}' from {source.from_file}")
        marker = (os.path.normpath(os.path.abspath(path)), source.export_name)
        if marker in visiting:
            raise UnresolvedDefinition('import_cycle', f"import cycle through {path} ({source.export_name})")
        try:
            target = self._load_module(path)
        except CoverageAnalysisError as e:
            raise UnresolvedDefinition('unresolved_import', e.message.split('\n')[0])
        return self._resolve_export(target, source.export_name, visiting | {marker})

    def _resolve_export(self, target: ModuleInfo, export_name: str,
                        visiting: Set[Tuple[str, str]]) -> Tuple[Node, ModuleInfo]:
        export = target.exports.get(export_name)
        if export is None:
            for star in target.star_exports:
                try:
                    return self._resolve(ImportedSource(star, export_name, target.path), target, visiting)
                except UnresolvedDefinition:
                    continue
            raise UnresolvedDefinition(
                'unresolved_import', f"{target.path} has no export named '{export_name}'")
        if export.kind == 'reexport':
            return self._resolve(ImportedSource(export.module or '', export.name or 'default', target.path),
                                 target, visiting)
        if export.kind == 'local':
            return self._resolve(LocalSource(export.name or '', target.path), target, visiting)
        return self._resolve(self._classify(export.node, target), target, visiting)

    # ------------------------------------------------------------------
    # Tree construction
    # ------------------------------------------------------------------
    def _build_node(self, name: Optional[str], obj: Node, module: ModuleInfo,
                    ancestors: Set[Tuple[str, int]]) -> CommandNode:
        identity = (module.path, obj.start_byte)
        ancestors = ancestors | {identity}

        meta = self._resolve_object(object_get(obj, 'meta'), module)
        meta_name = string_value(object_get(meta, 'name')) if meta is not None else None
        description = string_value(object_get(meta, 'description')) if meta is not None else None

        node = CommandNode(
            name=name or meta_name or "",
            description=description or "",
            source_file=module.path,
            source_line=line_of(obj),
        )
        self._collect_args(node, obj, module)
        self._collect_subcommands(node, obj, module, ancestors)
        return node

    def _collect_args(self, node: CommandNode, obj: Node, module: ModuleInfo) -> None:
        args_value = object_get(obj, 'args')
        if args_value is None:
            return
        args = self._resolve_object(args_value, module)
        if args is None:
            self._warn(node, 'dynamic_args', f"args of '{node.name}' are not a static object",
                       module.path, line_of(args_value))
            return
        self._collect_arg_members(node, args, module, set())

    def _collect_arg_members(self, node: CommandNode, args: Node, module: ModuleInfo,
                             seen: Set[Tuple[str, int]]) -> None:
        seen = seen | {(module.path, args.start_byte)}
        for kind, key, value in object_members(args):
            if kind == 'spread':
                found = self._resolve_spread(value, module)
                if found is not None and (found[1].path, found[0].start_byte) not in seen:
                    self._collect_arg_members(node, found[0], found[1], seen)
                else:
                    self._warn(node, 'dynamic_args',
                               f"cannot expand '...{node_text(value)}' in args of '{node.name}'",
                               module.path, line_of(value))
                continue
            if key is None:
                self._warn(node, 'dynamic_args', f"computed arg name in '{node.name}'",
                           module.path, line_of(value) if value is not None else None)
                continue
            spec_obj = self._resolve_object(value, module)
            node.add_arg(arg_spec(key, spec_obj))

    def _collect_subcommands(self, node: CommandNode, obj: Node, module: ModuleInfo,
                             ancestors: Set[Tuple[str, int]]) -> None:
        subs_value = object_get(obj, 'subCommands')
        if subs_value is None:
            return
        subs = self._resolve_object(subs_value, module)
        if subs is None:
            self._warn(node, 'unresolved_import', f"subCommands of '{node.name}' are not a static object",
                       module.path, line_of(subs_value))
            return

        for kind, key, value in object_members(subs):
            if kind == 'spread' or key is None:
                self._warn(node, 'unresolved_import',
                           f"cannot expand dynamic subCommands entry in '{node.name}'",
                           module.path, line_of(value) if value is not None else None)
                continue
            child = self._build_subcommand(key, value, module, ancestors)
            previous = node.add_subcommand(child)
            if previous is not None:
                self._warn(child, 'duplicate_subcommand',
                           f"subcommand '{key}' of '{node.name or '<root>'}' registered twice; last registration wins",
                           module.path, line_of(value))

    def _build_subcommand(self, key: str, value: Node, module: ModuleInfo,
                          ancestors: Set[Tuple[str, int]]) -> CommandNode:
        source = self._classify(value, module)
        try:
            obj, owner = self._resolve(source, module, set())
        except UnresolvedDefinition as e:
            placeholder = CommandNode(name=key, source_file=module.path, source_line=line_of(value))
            if isinstance(source, ImportedSource):
                placeholder.imported_from = source.module
            self._warn(placeholder, e.kind, f"subcommand '{key}': {e.message}", module.path, line_of(value))
            return placeholder

        if (owner.path, obj.start_byte) in ancestors:
            placeholder = CommandNode(name=key, source_file=owner.path, source_line=line_of(obj))
            self._warn(placeholder, 'import_cycle', f"subcommand '{key}' contains itself",
                       module.path, line_of(value))
            return placeholder

        child = self._build_node(key, obj, owner, ancestors)
        if owner is not module:
            child.imported_from = owner.path
        return child

    def _resolve_object(self, node: Optional[Node], module: ModuleInfo,
                        depth: int = 0) -> Optional[Node]:
        """Follow same-file identifiers and thunks to an object literal."""
        node = unwrap(node)
        if node is None or depth > 8:
            return None
        if node.type == 'object':
            return node
        if node.type in ('identifier', 'shorthand_property_identifier'):
            return self._resolve_object(module.bindings.get(node_text(node)), module, depth + 1)
        if node.type in ('arrow_function', 'function_expression', 'function', 'method_definition'):
            return self._resolve_object(returned_expression(node), module, depth + 1)
        return None

    def _resolve_spread(self, value: Optional[Node], module: ModuleInfo,
                        depth: int = 0) -> Optional[Tuple[Node, ModuleInfo]]:
        """Object literal behind a spread value, following same-file bindings and imports."""
        obj = self._resolve_object(value, module)
        if obj is not None:
            return obj, module
        if value is None or depth > 8:
            return None
        source = self._classify(value, module)
        if not isinstance(source, ImportedSource):
            return None
        return self._imported_object(source, depth + 1)

    def _imported_object(self, source: ImportedSource, depth: int) -> Optional[Tuple[Node, ModuleInfo]]:
        path = self._resolve_module_path(source.module, source.from_file)
        if path is None or depth > 8:
            return None
        try:
            target = self._load_module(path)
        except CoverageAnalysisError as e:
            self.logger.debug(f"Cannot follow spread into {path}: {e.message}")
            return None

        export = target.exports.get(source.export_name)
        if export is None:
            for star in target.star_exports:
                found = self._imported_object(ImportedSource(star, source.export_name, target.path), depth + 1)
                if found is not None:
                    return found
            return None
        if export.kind == 'reexport':
            return self._imported_object(
                ImportedSource(export.module or '', export.name or 'default', target.path), depth + 1)
        if export.kind == 'local':
            name = export.name or ''
            if name in target.imports:
                specifier, imported = target.imports[name]
                return self._imported_object(ImportedSource(specifier, imported, target.path), depth + 1)
            return self._resolve_spread(target.bindings.get(name), target, depth + 1)
        return self._resolve_spread(export.node, target, depth + 1)

    def _meta_name(self, obj: Node, module: ModuleInfo) -> Optional[str]:
        meta = self._resolve_object(object_get(obj, 'meta'), module)
        return string_value(object_get(meta, 'name')) if meta is not None else None

    def _warn(self, node: CommandNode, kind: str, message: str,
              file: Optional[str] = None, line: Optional[int] = None) -> None:
        warning = AnalysisWarning(kind=kind, message=message, file=file, line=line)
        node.warnings.append(warning)
        self.warnings.append(warning)
        self.logger.warning(str(warning))


# ---------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------
def looks_like_command(obj: Node) -> bool:
    return any(key in COMMAND_KEYS for kind, key, _ in object_members(obj) if key)


def returned_expression(fn: Node) -> Optional[Node]:
    """Expression returned by an arrow/function body (`() => x` or `{ return x }`)."""
    body = fn.child_by_field_name('body')
    if body is None:
        return None
    if body.type != 'statement_block':
        return body
    returns = [c for c in body.named_children if c.type == 'return_statement']
    if len(returns) != 1 or not returns[0].named_children:
        return None
    return returns[0].named_children[0]


def picked_export(callback: Node) -> Optional[str]:
    """Export picked by a `.then((m) => m.name)` callback."""
    callback = unwrap(callback)
    if callback is None or callback.type not in ('arrow_function', 'function_expression', 'function'):
        return None
    body = unwrap(returned_expression(callback))
    if body is not None and body.type == 'member_expression':
        prop = body.child_by_field_name('property')
        return node_text(prop) if prop is not None else None
    if body is not None and body.type == 'subscript_expression':
        return string_value(body.child_by_field_name('index'))
    return None


def arg_spec(name: str, spec_obj: Optional[Node]) -> ArgSpec:
    """Build an ArgSpec from an args entry such as `{ type: 'boolean', alias: 'v' }`."""
    if spec_obj is None:
        return ArgSpec(name=name, type="string")
    arg_type = string_value(object_get(spec_obj, 'type'))
    has_default, default = literal_value(object_get(spec_obj, 'default'))
    if not arg_type:
        arg_type = "boolean" if has_default and isinstance(default, bool) else "string"
    _, required = literal_value(object_get(spec_obj, 'required'))
    _, alias = literal_value(object_get(spec_obj, 'alias'))
    if isinstance(alias, str):
        aliases = [alias]
    elif isinstance(alias, list):
        aliases = [a for a in alias if isinstance(a, str)]
    else:
        aliases = []
    return ArgSpec(
        name=name,
        type=arg_type,
        description=string_value(object_get(spec_obj, 'description')) or "",
        default=default if has_default else None,
        required=required is True,
        aliases=aliases,
    )


def index_module(path: str, root: Node) -> ModuleInfo:
    """Collect top-level bindings, imports and exports of a program node."""
    module = ModuleInfo(path=path, root=root)
    for stmt in root.named_children:
        if stmt.type == 'import_statement':
            _index_import(module, stmt)
        elif stmt.type in ('lexical_declaration', 'variable_declaration'):
            _index_declaration(module, stmt)
        elif stmt.type == 'export_statement':
            _index_export(module, stmt)
    return module


def _index_import(module: ModuleInfo, stmt: Node) -> None:
    specifier = string_value(stmt.child_by_field_name('source'))
    if specifier is None:
        return
    for clause in stmt.named_children:
        if clause.type != 'import_clause':
            continue
        for part in clause.named_children:
            if part.type == 'identifier':
                module.imports[node_text(part)] = (specifier, 'default')
            elif part.type == 'namespace_import':
                for ident in part.named_children:
                    if ident.type == 'identifier':
                        module.imports[node_text(ident)] = (specifier, '*')
            elif part.type == 'named_imports':
                for spec in part.named_children:
                    if spec.type != 'import_specifier':
                        continue
                    name = spec.child_by_field_name('name')
                    alias = spec.child_by_field_name('alias')
                    if name is None:
                        continue
                    imported = string_value(name) if name.type == 'string' else node_text(name)
                    local = node_text(alias) if alias is not None else imported
                    module.imports[local] = (specifier, imported)


def _index_declaration(module: ModuleInfo, stmt: Node) -> List[str]:
    names = []
    for declarator in stmt.named_children:
        if declarator.type != 'variable_declarator':
            continue
        name = declarator.child_by_field_name('name')
        value = declarator.child_by_field_name('value')
        if name is not None and name.type == 'identifier' and value is not None:
            module.bindings[node_text(name)] = value
            names.append(node_text(name))
    return names


def _index_export(module: ModuleInfo, stmt: Node) -> None:
    declaration = stmt.child_by_field_name('declaration')
    if declaration is not None:
        if declaration.type in ('lexical_declaration', 'variable_declaration'):
            for name in _index_declaration(module, declaration):
                module.exports[name] = ExportTarget(kind='local', name=name)
        return

    source = string_value(stmt.child_by_field_name('source'))
    value = stmt.child_by_field_name('value')
    if value is not None:
        inner = unwrap(value)
        if inner is not None and inner.type == 'identifier':
            module.exports['default'] = ExportTarget(kind='local', name=node_text(inner))
        else:
            module.exports['default'] = ExportTarget(kind='node', node=value)
        return

    clause = next((c for c in stmt.named_children if c.type == 'export_clause'), None)
    if clause is None:
        if source is not None:
            module.star_exports.append(source)
        return
    for spec in clause.named_children:
        if spec.type != 'export_specifier':
            continue
        name = spec.child_by_field_name('name')
        alias = spec.child_by_field_name('alias')
        if name is None:
            continue
        local = node_text(name)
        exported = node_text(alias) if alias is not None else local
        if source is not None:
            module.exports[exported] = ExportTarget(kind='reexport', name=local, module=source)
        else:
            module.exports[exported] = ExportTarget(kind='local', name=local)


__all__ = [
    'CLIStructureDiscoverer',
    'ModuleInfo',
    'ExportTarget',
    'index_module',
    'looks_like_command',
    'arg_spec',
]
