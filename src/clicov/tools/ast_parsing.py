"""
Syntax parsing for JavaScript/TypeScript sources, backed by tree-sitter.
Also holds the small node helpers shared by the discoverers.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..errors import ParseError
from .ast_cache import ASTCache


LANGUAGES: Dict[str, Language] = {
    'javascript': Language(tree_sitter_javascript.language()),
    'typescript': Language(tree_sitter_typescript.language_typescript()),
    'tsx': Language(tree_sitter_typescript.language_tsx()),
}

LANGUAGE_BY_EXTENSION = {
    '.js': 'javascript', '.mjs': 'javascript', '.cjs': 'javascript', '.jsx': 'javascript',
    '.ts': 'typescript', '.mts': 'typescript', '.cts': 'typescript',
    '.tsx': 'tsx',
}

# Wrappers that do not change the value of the wrapped expression
TRANSPARENT_TYPES = {
    'parenthesized_expression', 'await_expression', 'as_expression',
    'satisfies_expression', 'non_null_expression', 'type_assertion',
}

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', 'b': '\b', 'f': '\f', 'v': '\v'}
ESCAPE_RE = re.compile(
    r'\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})|(\r\n|[\s\S]))'
)


def language_for_path(path: str) -> str:
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower(), 'javascript')


def strip_shebang(content: str) -> str:
    """Blank a leading '#!' line, keeping line numbers intact."""
    if not content.startswith('#!'):
        return content
    newline = content.find('\n')
    if newline == -1:
        return ''
    return content[newline:]


class JavaScriptParser:
    """Turns source text into tree-sitter trees, optionally through an ASTCache."""

    def __init__(self, cache: Optional[ASTCache] = None) -> None:
        self.cache = cache
        self.logger = logging.getLogger("JavaScriptParser")
        self._local = threading.local()

    def _parser(self, language: str) -> Parser:
        parsers = getattr(self._local, 'parsers', None)
        if parsers is None:
            parsers = self._local.parsers = {}
        if language not in parsers:
            parsers[language] = Parser(LANGUAGES[language])
        return parsers[language]

    def parse(self, content: str, file_path: str) -> Tree:
        """Parse content; raises ParseError when the tree contains syntax errors."""
        if self.cache is not None:
            cached = self.cache.get(file_path, content)
            if cached is not None:
                return cached

        source = strip_shebang(content)
        language = language_for_path(file_path)
        tree = self._parser(language).parse(source.encode('utf-8'))
        if tree.root_node.has_error:
            raise self._parse_error(tree, source, file_path)

        self.logger.debug(f"Parsed {file_path} as {language}")
        if self.cache is not None:
            self.cache.set(file_path, content, tree)
        return tree

    def _parse_error(self, tree: Tree, source: str, file_path: str) -> ParseError:
        bad = first_error_node(tree.root_node)
        lines = source.split('\n')
        if bad is None:
            return ParseError(file_path, 1, 1, lines[0] if lines else "")
        row, column = bad.start_point
        if bad.is_missing:
            detail = f"missing '{bad.type}'"
        else:
            snippet = node_text(bad).strip().split('\n')[0][:40]
            detail = f"unexpected '{snippet}'" if snippet else "unexpected token"
        line_text = lines[row] if row < len(lines) else ""
        return ParseError(file_path, row + 1, column + 1, line_text, detail)


# ---------------------------------------------------------------------
# Node helpers
# ---------------------------------------------------------------------
def first_error_node(root: Node) -> Optional[Node]:
    """Earliest ERROR or MISSING node in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def walk(root: Node) -> Iterator[Node]:
    """Pre-order traversal; children are visited in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Node) -> str:
    return node.text.decode('utf-8') if node.text is not None else ""


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def unwrap(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type in TRANSPARENT_TYPES:
        inner = [c for c in node.named_children if c.type != 'comment']
        if not inner:
            break
        node = inner[0]
    return node


def _unescape(match: 're.Match[str]') -> str:
    braced, unicode, hexa, simple = match.groups()
    code = braced or unicode or hexa
    if code is not None:
        value = int(code, 16)
        return chr(value) if value <= 0x10FFFF else match.group(0)
    # Line continuation
    if simple in ('\n', '\r\n', '\r', '\u2028', '\u2029'):
        return ''
    return ESCAPES.get(simple, simple)


def _decode_string(raw: str) -> str:
    text = ESCAPE_RE.sub(_unescape, raw)
    if any('\ud800' <= ch <= '\udfff' for ch in text):
        # Join \uXXXX surrogate pairs; lone halves become U+FFFD
        text = text.encode('utf-16', 'surrogatepass').decode('utf-16', 'replace')
    return text


def string_value(node: Optional[Node]) -> Optional[str]:
    """Value of a string literal or a substitution-free template string."""
    node = unwrap(node)
    if node is None:
        return None
    if node.type == 'string':
        return _decode_string(node_text(node)[1:-1])
    if node.type == 'template_string':
        if any(c.type == 'template_substitution' for c in node.named_children):
            return None
        return _decode_string(node_text(node)[1:-1])
    return None


def literal_value(node: Optional[Node]) -> Tuple[bool, Any]:
    """(True, value) for literal nodes, (False, None) otherwise."""
    node = unwrap(node)
    if node is None:
        return False, None
    text = string_value(node)
    if text is not None:
        return True, text
    if node.type == 'true':
        return True, True
    if node.type == 'false':
        return True, False
    if node.type == 'null':
        return True, None
    if node.type == 'number':
        raw = node_text(node).replace('_', '')
        try:
            return True, int(raw, 0)
        except ValueError:
            try:
                return True, float(raw)
            except ValueError:
                return False, None
    if node.type == 'unary_expression' and node_text(node).startswith('-'):
        ok, value = literal_value(node.named_children[0] if node.named_children else None)
        if ok and isinstance(value, (int, float)):
            return True, -value
    if node.type == 'array':
        values = []
        for child in node.named_children:
            if child.type == 'comment':
                continue
            ok, value = literal_value(child)
            if not ok:
                return False, None
            values.append(value)
        return True, values
    return False, None


def property_key(pair: Node) -> Optional[str]:
    """Static name of an object pair's key, None for computed keys."""
    key = pair.child_by_field_name('key')
    if key is None:
        return None
    if key.type in ('property_identifier', 'identifier', 'private_property_identifier'):
        return node_text(key)
    if key.type in ('string', 'template_string'):
        return string_value(key)
    if key.type == 'number':
        return node_text(key)
    return None


def object_members(obj: Node) -> Iterator[Tuple[str, Optional[str], Node]]:
    """
    Yield (kind, name, node) for every member of an object literal:
    ('pair', key, value), ('shorthand', name, identifier), ('spread', None, argument),
    ('method', name, method_definition).
    """
    for child in obj.named_children:
        if child.type == 'pair':
            value = child.child_by_field_name('value')
            yield 'pair', property_key(child), value
        elif child.type == 'shorthand_property_identifier':
            yield 'shorthand', node_text(child), child
        elif child.type == 'spread_element':
            argument = child.named_children[0] if child.named_children else child
            yield 'spread', None, argument
        elif child.type == 'method_definition':
            name = child.child_by_field_name('name')
            yield 'method', node_text(name) if name is not None else None, child


def object_get(obj: Node, name: str) -> Optional[Node]:
    """Last value bound to `name` in an object literal (later keys win)."""
    found: Optional[Node] = None
    for kind, key, value in object_members(obj):
        if key == name and kind in ('pair', 'shorthand', 'method'):
            found = value
    return found


def call_arguments(call: Node) -> List[Node]:
    args = call.child_by_field_name('arguments')
    if args is None:
        return []
    return [c for c in args.named_children if c.type != 'comment']


def callee_name(call: Node) -> Optional[str]:
    """Simple name of a call's callee: `foo(...)` and `a.b.foo(...)` both give 'foo'."""
    function = unwrap(call.child_by_field_name('function'))
    if function is None:
        return None
    if function.type == 'identifier':
        return node_text(function)
    if function.type == 'member_expression':
        prop = function.child_by_field_name('property')
        return node_text(prop) if prop is not None else None
    return None


__all__ = [
    'JavaScriptParser',
    'language_for_path',
    'strip_shebang',
    'walk',
    'node_text',
    'line_of',
    'unwrap',
    'string_value',
    'literal_value',
    'property_key',
    'object_members',
    'object_get',
    'call_arguments',
    'callee_name',
    'first_error_node',
]
