"""Core data model: the discovered command tree and the invocation patterns found in tests."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .errors import AnalysisWarning


BOOLEAN_TYPES = {"boolean"}
VALUE_TYPES = {"string", "number", "enum"}


@dataclass
class ArgSpec:
    """A declared argument of a command (flag, option or positional)"""
    name: str
    type: str = "string"
    description: str = ""
    default: Any = None
    required: bool = False
    aliases: List[str] = field(default_factory=list)
    tested: bool = False

    @property
    def is_flag(self) -> bool:
        return self.type in BOOLEAN_TYPES

    @property
    def is_positional(self) -> bool:
        return self.type == "positional"


# Flags are boolean switches, options take a value
FlagSpec = ArgSpec
OptionSpec = ArgSpec


@dataclass
class CommandNode:
    """One CLI command or subcommand; children are owned exclusively by their parent."""
    name: str
    description: str = ""
    flags: Dict[str, ArgSpec] = field(default_factory=dict)
    options: Dict[str, ArgSpec] = field(default_factory=dict)
    positionals: Dict[str, ArgSpec] = field(default_factory=dict)
    subcommands: Dict[str, "CommandNode"] = field(default_factory=dict)
    source_file: Optional[str] = None
    source_line: Optional[int] = None
    imported_from: Optional[str] = None
    warnings: List[AnalysisWarning] = field(default_factory=list)
    tested: bool = False
    test_files: List[str] = field(default_factory=list)
    # Non-owning lookup pointer, excluded from equality and repr
    parent: Optional["CommandNode"] = field(default=None, repr=False, compare=False)

    def add_subcommand(self, child: "CommandNode") -> Optional["CommandNode"]:
        """Register child; returns the node it replaced, if any (last registration wins)."""
        previous = self.subcommands.get(child.name)
        child.parent = self
        self.subcommands[child.name] = child
        return previous

    def add_arg(self, spec: ArgSpec) -> None:
        self.flags.pop(spec.name, None)
        self.options.pop(spec.name, None)
        self.positionals.pop(spec.name, None)
        if spec.is_positional:
            self.positionals[spec.name] = spec
        elif spec.is_flag:
            self.flags[spec.name] = spec
        else:
            self.options[spec.name] = spec

    def find_arg(self, name: str) -> Optional[ArgSpec]:
        """Declared flag/option by name or alias on this node only."""
        for table in (self.flags, self.options):
            if name in table:
                return table[name]
        for table in (self.flags, self.options):
            for spec in table.values():
                if name in spec.aliases:
                    return spec
        return None

    def lookup_arg(self, name: str) -> Tuple[Optional["CommandNode"], Optional[ArgSpec]]:
        """Find a flag/option on this node or the nearest ancestor declaring it."""
        node: Optional[CommandNode] = self
        while node is not None:
            spec = node.find_arg(name)
            if spec is not None:
                return node, spec
            node = node.parent
        return None, None

    def child(self, name: str) -> Optional["CommandNode"]:
        return self.subcommands.get(name)

    def resolve(self, path: List[str]) -> Optional["CommandNode"]:
        node: Optional[CommandNode] = self
        for part in path:
            node = node.child(part) if node is not None else None
            if node is None:
                return None
        return node

    @property
    def path(self) -> List[str]:
        parts: List[str] = []
        node: Optional[CommandNode] = self
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        return list(reversed(parts))

    @property
    def full_name(self) -> str:
        """Root name followed by the command path, e.g. "app build"."""
        node: CommandNode = self
        while node.parent is not None:
            node = node.parent
        return " ".join([node.name] + self.path)

    def iter_nodes(self, depth: int = 1) -> Iterator[Tuple["CommandNode", int]]:
        """Pre-order walk yielding (node, depth); the node itself is depth 1."""
        yield self, depth
        for child in self.subcommands.values():
            yield from child.iter_nodes(depth + 1)


@dataclass(frozen=True)
class InvocationPattern:
    """One CLI call discovered in a test file; immutable once created"""
    command_path: Tuple[str, ...]
    flags_used: frozenset = frozenset()
    options_used: frozenset = frozenset()
    source_file: str = ""
    source_line: int = 0
    arguments: Tuple[str, ...] = ()

    @property
    def display(self) -> str:
        return " ".join(self.command_path) or "<root>"


# ---------------------------------------------------------------------
# Command sources: where a command definition comes from
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class InlineSource:
    """A definition written directly in place (defineCommand call or object literal)"""
    node: Any
    file_path: str


@dataclass(frozen=True)
class ImportedSource:
    """A definition exported by another module"""
    module: str
    export_name: str
    from_file: str


@dataclass(frozen=True)
class LocalSource:
    """An identifier bound somewhere in the same file"""
    identifier: str
    file_path: str


@dataclass(frozen=True)
class UnresolvedSource:
    """A value that cannot be statically turned into a definition"""
    reason: str
    file_path: str
    line: int = 0


CommandSource = Union[InlineSource, ImportedSource, LocalSource, UnresolvedSource]


__all__ = [
    'ArgSpec',
    'FlagSpec',
    'OptionSpec',
    'CommandNode',
    'InvocationPattern',
    'InlineSource',
    'ImportedSource',
    'LocalSource',
    'UnresolvedSource',
    'CommandSource',
]
