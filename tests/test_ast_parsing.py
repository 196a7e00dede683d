import pytest

from clicov.errors import ParseError
from clicov.tools.ast_cache import ASTCache
from clicov.tools.ast_parsing import (
    JavaScriptParser,
    language_for_path,
    line_of,
    literal_value,
    object_get,
    object_members,
    string_value,
    strip_shebang,
    walk,
)


def _declared_value(source: str, path: str = "snippet.mjs"):
    """Value node of the first variable declarator in source."""
    tree = JavaScriptParser().parse(source, path)
    for node in walk(tree.root_node):
        if node.type == "variable_declarator":
            return node.child_by_field_name("value")
    raise AssertionError("no declarator")


def test_parse_returns_program():
    tree = JavaScriptParser().parse("const a = 1\n", "a.mjs")
    assert tree.root_node.type == "program"
    assert not tree.root_node.has_error


def test_language_by_extension():
    assert language_for_path("cli.mjs") == "javascript"
    assert language_for_path("cli.cjs") == "javascript"
    assert language_for_path("cli.ts") == "typescript"
    assert language_for_path("cli.mts") == "typescript"
    assert language_for_path("cli.tsx") == "tsx"


def test_typescript_source():
    tree = JavaScriptParser().parse("const port: number = 8080 as number\n", "cli.ts")
    assert not tree.root_node.has_error


def test_shebang_keeps_line_numbers():
    source = "#!/usr/bin/env node\nconst main = 1\n"
    assert strip_shebang(source) == "\nconst main = 1\n"

    tree = JavaScriptParser().parse(source, "cli.mjs")
    declaration = next(n for n in walk(tree.root_node) if n.type == "lexical_declaration")
    assert line_of(declaration) == 2


def test_top_level_await_is_accepted():
    tree = JavaScriptParser().parse("const mod = await import('./x.mjs')\n", "cli.mjs")
    assert not tree.root_node.has_error


def test_syntax_error_raises_parse_error():
    source = "const a = 1\nconst b = ;\n"
    with pytest.raises(ParseError) as exc:
        JavaScriptParser().parse(source, "broken.mjs")

    err = exc.value
    assert err.file_path == "broken.mjs"
    assert err.line == 2
    assert err.column >= 1
    assert "const b" in err.line_text
    assert err.exit_code == 2
    assert "broken.mjs" in str(err)
    assert "Possible fixes" in str(err)


def test_unbalanced_braces_raise_parse_error():
    source = "const main = defineCommand({\n  meta: { name: 'app' },\n"
    with pytest.raises(ParseError):
        JavaScriptParser().parse(source, "cli.mjs")


def test_parse_goes_through_cache():
    cache = ASTCache()
    parser = JavaScriptParser(cache=cache)
    first = parser.parse("const a = 1\n", "a.mjs")
    second = parser.parse("const a = 1\n", "a.mjs")
    assert first is second
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_failed_parse_is_not_cached():
    cache = ASTCache()
    parser = JavaScriptParser(cache=cache)
    with pytest.raises(ParseError):
        parser.parse("const = \n", "a.mjs")
    assert len(cache) == 0


def test_string_values():
    assert string_value(_declared_value("const s = 'a\\'b'\n")) == "a'b"
    assert string_value(_declared_value('const s = "tab\\there"\n')) == "tab\there"
    assert string_value(_declared_value("const s = `plain`\n")) == "plain"
    assert string_value(_declared_value("const s = `x${y}`\n")) is None
    assert string_value(_declared_value("const s = 42\n")) is None


def test_string_escape_sequences():
    assert string_value(_declared_value("const s = '\\x41\\u0042\\u{43}'\n")) == "ABC"
    assert string_value(_declared_value("const s = '\\u{1F600}'\n")) == "\U0001F600"
    assert string_value(_declared_value("const s = '\\uD83D\\uDE00'\n")) == "\U0001F600"
    assert string_value(_declared_value("const s = 'a\\\nb'\n")) == "ab"
    assert string_value(_declared_value("const s = `a\\\nb`\n")) == "ab"
    assert string_value(_declared_value("const s = 'back\\\\slash'\n")) == "back\\slash"
    assert string_value(_declared_value("const s = '\\q'\n")) == "q"


def test_literal_values():
    ok, value = literal_value(_declared_value("const v = ['a', 1, -2, 1.5, true, false, null]\n"))
    assert ok
    assert value == ["a", 1, -2, 1.5, True, False, None]

    ok, value = literal_value(_declared_value("const v = (('wrapped'))\n"))
    assert ok and value == "wrapped"

    ok, _ = literal_value(_declared_value("const v = ['a', other]\n"))
    assert not ok


def test_object_helpers():
    obj = _declared_value(
        "const o = { name: 'x', 'quoted-key': 1, name: 'last', short, ...rest, run() {} }\n"
    )
    kinds = [(kind, key) for kind, key, _ in object_members(obj)]
    assert kinds == [
        ("pair", "name"),
        ("pair", "quoted-key"),
        ("pair", "name"),
        ("shorthand", "short"),
        ("spread", None),
        ("method", "run"),
    ]
    assert string_value(object_get(obj, "name")) == "last"
    assert object_get(obj, "missing") is None
