import unittest

from ast_parser import parse_js_source
from ast_walker import walk_ast
from fixer import apply_fixes
from node_kinds import NodeKind
from rule_engine import RuleEngine
from semi_rule import (
    MAX_OFFSET,
    SemiMode,
    SemiRule,
    classify,
    find_semicolon_span,
    next_statement,
    resolve_mode,
)
from source_text import SourceText, Span


def parse_nodes(code):
    data = code.encode("utf-8")
    tree = parse_js_source(data)
    nodes = []
    walk_ast(tree.root_node, nodes)
    return nodes, SourceText(data)


def lint(code, options=None):
    nodes, source = parse_nodes(code)
    engine = RuleEngine([SemiRule.from_configuration(options)])
    return engine.run(nodes, source)


def fix(code, options=None):
    fixed, _applied = apply_fixes(code.encode("utf-8"), lint(code, options))
    return fixed.decode("utf-8")


def first(nodes, kind):
    return next(n for n in nodes if n["kind"] == kind)


def make_node(kind, start, end, parent=None):
    node = {
        "kind": kind,
        "span": Span(start, end),
        "children": [],
        "parent": parent,
        "field": None,
        "index": 0,
    }
    if parent is not None:
        node["index"] = len(parent["children"])
        parent["children"].append(node)
    return node


def statement_tree(code, kinds):
    """
    Builds a program whose statements are the lines of `code`, one per
    kind. Used where a real parse would merge two lines into one
    statement.
    """
    program = make_node(NodeKind.PROGRAM, 0, len(code))
    nodes = [program]
    offset = 0
    for line, kind in zip(code.split("\n"), kinds):
        nodes.append(make_node(kind, offset, offset + len(line), program))
        offset += len(line) + 1
    return nodes, SourceText(code)


def run_rule(nodes, source, options=None):
    return RuleEngine([SemiRule.from_configuration(options)]).run(nodes, source)


class NeverModeTest(unittest.TestCase):
    def test_statement_without_semicolon_passes(self):
        self.assertEqual(lint("var a = b"), [])
        self.assertEqual(lint("var a = b\nvar c = d"), [])
        self.assertEqual(lint("const message = 'Hello'\nconsole.log(message)"), [])

    def test_unnecessary_semicolon_is_reported_and_removed(self):
        diagnostics = lint("var a = b;")
        self.assertEqual(len(diagnostics), 1)
        diag = diagnostics[0]
        self.assertEqual(diag["message"], "Unnecessary semicolon")
        self.assertEqual(diag["help"], "JavaScript Standard Style: avoid unnecessary semicolons")
        self.assertEqual(diag["span"], Span(9, 10))
        self.assertEqual(diag["fix"], {"kind": "delete", "span": Span(9, 10), "text": ""})
        self.assertEqual(fix("var a = b;"), "var a = b")

    def test_every_unnecessary_semicolon_gets_one_diagnostic(self):
        code = "const message = 'Hello';\nconsole.log(message);"
        diagnostics = lint(code)
        self.assertEqual(len(diagnostics), 2)
        self.assertEqual(fix(code), "const message = 'Hello'\nconsole.log(message)")

    def test_return_inside_function_body(self):
        code = "function foo() { return 'bar'; }"
        diagnostics = lint(code)
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0]["span"].start, code.index(";"))
        self.assertEqual(fix(code), "function foo() { return 'bar' }")

    def test_load_bearing_semicolon_after_expression_is_kept(self):
        self.assertEqual(lint("foo()\n;[1, 2, 3].forEach(fn)"), [])
        self.assertEqual(lint("foo();\n(bar)()"), [])
        self.assertEqual(lint("foo();\n[1].map(f)"), [])

    def test_missing_semicolon_before_prefix_increment(self):
        diagnostics = lint("i\n++j")
        self.assertEqual(len(diagnostics), 1)
        diag = diagnostics[0]
        self.assertEqual(diag["message"], "Missing semicolon to avoid ASI issues")
        self.assertEqual(diag["span"], Span(1, 1))
        self.assertEqual(diag["fix"], {"kind": "insert_after", "span": Span(0, 1), "text": ";"})
        self.assertEqual(fix("i\n++j"), "i;\n++j")

    def test_declaration_ending_in_identifier_is_hazardous(self):
        self.assertEqual(len(lint("let x = y\n++z")), 1)

    def test_load_bearing_semicolon_after_declaration_is_kept(self):
        self.assertEqual(lint("let x = y;\n++z"), [])
        self.assertEqual(len(lint("let s = 'x';\n++z")), 1)

    def test_declaration_ending_in_string_is_not_hazardous(self):
        self.assertEqual(lint("let s = 'x'\n++z"), [])

    def test_missing_semicolon_before_parenthesized_line(self):
        code = "var a = b\n(function() {})()"
        nodes, source = statement_tree(
            code, [NodeKind.VARIABLE_DECLARATION, NodeKind.EXPRESSION_STATEMENT]
        )
        diagnostics = run_rule(nodes, source)
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0]["span"], Span(9, 9))
        fixed, applied = apply_fixes(code, diagnostics)
        self.assertEqual(applied, 1)
        self.assertEqual(fixed.decode("utf-8"), "var a = b;\n(function() {})()")

    def test_declaration_semicolon_before_parenthesized_line_is_kept(self):
        code = "var a = b;\n(function() {})()"
        nodes, source = statement_tree(
            code, [NodeKind.VARIABLE_DECLARATION, NodeKind.EXPRESSION_STATEMENT]
        )
        self.assertEqual(run_rule(nodes, source), [])

    def test_missing_semicolon_before_array_line(self):
        code = "var a = b\n[1, 2, 3].forEach(fn)"
        nodes, source = statement_tree(
            code, [NodeKind.VARIABLE_DECLARATION, NodeKind.EXPRESSION_STATEMENT]
        )
        fixed, _ = apply_fixes(code, run_rule(nodes, source))
        self.assertEqual(fixed.decode("utf-8"), "var a = b;\n[1, 2, 3].forEach(fn)")

    def test_expression_statement_is_always_vulnerable(self):
        code = "'done'\n`template`"
        nodes, source = statement_tree(
            code, [NodeKind.EXPRESSION_STATEMENT, NodeKind.EXPRESSION_STATEMENT]
        )
        self.assertEqual(len(run_rule(nodes, source)), 1)

        nodes, source = statement_tree(
            code, [NodeKind.VARIABLE_DECLARATION, NodeKind.EXPRESSION_STATEMENT]
        )
        self.assertEqual(run_rule(nodes, source), [])

    def test_block_end_is_not_hazardous_against_outer_statement(self):
        code = "{\n  foo()\n}\n(bar)()"
        program = make_node(NodeKind.PROGRAM, 0, len(code))
        block = make_node(NodeKind.BLOCK_STATEMENT, 0, code.index("}") + 1, program)
        call_start = code.index("foo")
        inner = make_node(NodeKind.EXPRESSION_STATEMENT, call_start, call_start + 5, block)
        outer_start = code.index("(bar)")
        outer = make_node(NodeKind.EXPRESSION_STATEMENT, outer_start, len(code), program)

        nodes = [program, block, inner, outer]
        self.assertIsNone(next_statement(inner))
        self.assertEqual(run_rule(nodes, SourceText(code)), [])

    def test_block_end_with_real_parse(self):
        self.assertEqual(lint("if (a) {\n  foo()\n}\n(bar)()"), [])


class AlwaysModeTest(unittest.TestCase):
    def test_semicolons_present_pass(self):
        self.assertEqual(lint("var a = b;", ["always"]), [])
        self.assertEqual(lint("var a = b;\nvar c = d;", ["always"]), [])
        self.assertEqual(lint("function foo() { return 'bar'; }", ["always"]), [])

    def test_missing_semicolon_is_reported_and_inserted(self):
        diagnostics = lint("var a = b", ["always"])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0]["message"], "Missing semicolon")
        self.assertEqual(diagnostics[0]["span"], Span(9, 9))
        self.assertEqual(fix("var a = b", ["always"]), "var a = b;")
        self.assertEqual(fix("const message = 'Hello'", ["always"]), "const message = 'Hello';")

    def test_function_declaration_and_one_line_body(self):
        self.assertEqual(lint("function foo() { return 'bar' }", ["always"]), [])

    def test_one_line_block_exemption_can_be_disabled(self):
        options = ["always", {"omitLastInOneLineBlock": False}]
        diagnostics = lint("function foo() { return 'bar' }", options)
        self.assertEqual(len(diagnostics), 1)

    def test_exemption_only_covers_direct_block_children(self):
        diagnostics = lint("function f() { if (x) a() }", ["always"])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(fix("function f() { if (x) a() }", ["always"]), "function f() { if (x) a(); }")
        self.assertEqual(len(lint("function f() { switch (x) { case 1: a() } }", ["always"])), 1)

    def test_multi_line_block_requires_semicolon(self):
        code = "function foo() {\n  return 'bar'\n}"
        self.assertEqual(fix(code, ["always"]), "function foo() {\n  return 'bar';\n}")

    def test_block_bodied_statements_are_not_flagged(self):
        code = "if (a) {\n  b();\n}\nwhile (c) {\n  d();\n}\nclass E {}\ntry {\n  f();\n} catch (e) {\n  g();\n}"
        self.assertEqual(lint(code, ["always"]), [])

    def test_for_header_clauses_are_not_statements(self):
        code = "for (let i = 0; i < 3; i++) {\n  foo(i)\n}"
        diagnostics = lint(code, ["always"])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0]["span"].start, code.index("foo(i)") + len("foo(i)"))

    def test_always_mode_never_removes_semicolons(self):
        self.assertEqual(lint("foo();\nbar();\nbaz()\n;(x)();", ["always"]), [])

    def test_break_and_continue(self):
        code = "while (a) {\n  if (b) continue\n  break\n}"
        self.assertEqual(len(lint(code, ["always"])), 2)
        self.assertEqual(lint(code), [])


class ModuleStatementTest(unittest.TestCase):
    def test_checkable_module_statements(self):
        for code in (
            "import a from 'a';",
            "export { a };",
            "export { a } from 'm';",
            "export * from 'm';",
            "export * as ns from 'm';",
            "export default foo;",
            "export const x = 1;",
        ):
            with self.subTest(code=code):
                self.assertEqual(len(lint(code)), 1)
                self.assertEqual(len(lint(code.rstrip(";"), ["always"])), 1)

    def test_exports_with_declaration_bodies_are_skipped(self):
        for code in (
            "export default function () {}",
            "export default class {}",
            "export function f() {}",
            "export class A {}",
        ):
            with self.subTest(code=code):
                self.assertEqual(lint(code, ["always"]), [])


class PropertiesTest(unittest.TestCase):
    FIXTURES = (
        ("var a = b;", None),
        ("foo();\nbar();", None),
        ("i\n++j", None),
        ("let x = y\n++z", None),
        ("var a = b", ["always"]),
        ("function foo() {\n  return 'bar'\n}", ["always"]),
        ("import a from 'a'\nexport { a }", ["always"]),
    )

    def test_fixes_are_idempotent(self):
        for code, options in self.FIXTURES:
            with self.subTest(code=code, options=options):
                self.assertTrue(lint(code, options))
                self.assertEqual(lint(fix(code, options), options), [])

    def test_mode_duality(self):
        for bare, terminated in (
            ("foo()\nbar()", "foo();\nbar();"),
            ("var a = 1\nlet b = 2", "var a = 1;\nlet b = 2;"),
        ):
            with self.subTest(code=bare):
                self.assertEqual(lint(bare), [])
                self.assertEqual(len(lint(terminated)), 2)
                self.assertEqual(len(lint(bare, ["always"])), 2)
                self.assertEqual(lint(terminated, ["always"]), [])


class HelperTest(unittest.TestCase):
    def test_resolve_mode(self):
        self.assertEqual(resolve_mode(["always"]), SemiMode.ALWAYS)
        self.assertEqual(resolve_mode("always"), SemiMode.ALWAYS)
        self.assertEqual(resolve_mode(["never"]), SemiMode.NEVER)
        self.assertEqual(resolve_mode(["ALWAYS"]), SemiMode.NEVER)
        self.assertEqual(resolve_mode([]), SemiMode.NEVER)
        self.assertEqual(resolve_mode(None), SemiMode.NEVER)

    def test_classify(self):
        nodes, _ = parse_nodes("a()\nlet b = 1\nif (c) {}\nfunction d() {}")
        self.assertIs(classify(first(nodes, NodeKind.EXPRESSION_STATEMENT)), True)
        self.assertIs(classify(first(nodes, NodeKind.VARIABLE_DECLARATION)), False)
        self.assertIsNone(classify(first(nodes, NodeKind.IF_STATEMENT)))
        self.assertIsNone(classify(first(nodes, NodeKind.FUNCTION_DECLARATION)))
        self.assertIsNone(classify(first(nodes, NodeKind.PROGRAM)))

    def test_next_statement(self):
        nodes, _ = parse_nodes("a()\nb()\nfoo(function () { x() })")
        statements = [n for n in nodes if n["kind"] == NodeKind.EXPRESSION_STATEMENT]
        a, b, outer, inner = statements
        self.assertIs(next_statement(a), b)
        self.assertIs(next_statement(b), outer)
        self.assertIsNone(next_statement(outer))
        self.assertIsNone(next_statement(inner))

    def test_next_statement_without_container(self):
        orphan = make_node(NodeKind.EXPRESSION_STATEMENT, 0, 3)
        self.assertIsNone(next_statement(orphan))

    def test_semicolon_offset_overflow_is_skipped(self):
        class _Source:
            def raw(self, span):
                return b"a;"

        self.assertEqual(find_semicolon_span(_Source(), Span(10, 12)), Span(11, 12))
        self.assertIsNone(find_semicolon_span(_Source(), Span(MAX_OFFSET - 1, MAX_OFFSET + 1)))


if __name__ == "__main__":
    unittest.main()
