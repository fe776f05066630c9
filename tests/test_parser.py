"""
Test suite for the ScopeLang parser.

Tests cover:
- Every scope form (for, struct, implement, function, named, unnamed)
- Every statement form
- Flat, left-associative expression folding
- Fail-fast error reporting
- Tree invariants of successful parses

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from scopelang.config import ScopeConfig
from scopelang.lexer import tokenize_string
from scopelang.parser import (
    Parser, ParseError, parse_string, ASTNodeType, ASTVisitor,
    KeywordScope, ForScope, StructScope, ImplementScope, NamedScope, UnnamedScope,
    Identifier, Parameters, Parameter, TypeRef, ReturnType, Member, Condition,
    VariableDeclaration, Assignment, ReturnStatement, FunctionCall,
    OperatorStatement, BinaryOp, Literal, Reference,
)


class ParserTestCase(unittest.TestCase):

    def _parse(self, source, config=None):
        return parse_string(source, config=config)

    def _parse_one(self, source, config=None):
        nodes = self._parse(source, config)
        self.assertEqual(len(nodes), 1, f"expected one top-level node, got {nodes}")
        return nodes[0]

    def _parse_error(self, source, config=None) -> ParseError:
        with self.assertRaises(ParseError) as ctx:
            self._parse(source, config)
        return ctx.exception


class TestScopes(ParserTestCase):
    """Scope forms."""

    def test_for_loop(self):
        node = self._parse_one("for(3){ out(1); }")

        self.assertIsInstance(node, ForScope)
        self.assertEqual(node.node_type, ASTNodeType.SCOPE)
        self.assertEqual(node.value, "for")

        condition, statement = node.children()
        self.assertIsInstance(condition, Condition)
        self.assertEqual(condition.value, "3")
        self.assertEqual(condition.expression, Literal("3"))

        self.assertEqual(statement.node_type, ASTNodeType.OPERATOR)
        self.assertEqual(statement.value, "out")
        self.assertEqual(len(statement.children()), 1)
        self.assertEqual(statement.children()[0].node_type, ASTNodeType.EXPRESSION)
        self.assertEqual(statement.children()[0].value, "1")

    def test_for_condition_keeps_full_expression(self):
        node = self._parse_one("for(n - 1){}")
        self.assertEqual(node.condition.expression,
                         BinaryOp("-", Reference("n"), Literal("1")))
        self.assertEqual(node.condition.value, "n - 1")
        self.assertEqual(node.body, [])

    def test_condition_value_keeps_grouping(self):
        node = self._parse_one("for((a + b) * (c - 1)){}")
        self.assertEqual(node.condition.value, "a + b * (c - 1)")

    def test_named_scope(self):
        node = self._parse_one("foo{}")
        self.assertIsInstance(node, NamedScope)
        self.assertEqual(node.node_type, ASTNodeType.NAMED_SCOPE)
        self.assertEqual(node.value, "foo")
        self.assertEqual(node.children(), [])

    def test_named_scope_with_parameters(self):
        node = self._parse_one("foo(int i){ int a = i; }")

        self.assertIsInstance(node, NamedScope)
        self.assertEqual(node.name, "foo")
        self.assertEqual(node.parameters, Parameters([Parameter("i", TypeRef("int"))]))
        self.assertIsNone(node.return_type)
        self.assertEqual(node.body, [VariableDeclaration("a", TypeRef("int"), Reference("i"))])
        self.assertEqual([c.node_type for c in node.children()],
                         [ASTNodeType.PARAMETERS, ASTNodeType.VARIABLE_DECLARATION])

    def test_named_scope_with_empty_parameters_and_return_type(self):
        node = self._parse_one("get(): int { return 1; }")
        self.assertEqual(node.parameters, Parameters([]))
        self.assertEqual(node.return_type, ReturnType("int"))

        node = self._parse_one("get: int { return 1; }")
        self.assertIsNone(node.parameters)
        self.assertEqual(node.return_type, ReturnType("int"))

    def test_nested_named_scope_with_parameters(self):
        body = self._parse_one("{ helper(int n) { out(n); } helper(2); }").body
        scope, call = body
        self.assertIsInstance(scope, NamedScope)
        self.assertEqual(scope.parameters.params, [Parameter("n", TypeRef("int"))])
        self.assertEqual(call, FunctionCall("helper", [Literal("2")]))

    def test_unnamed_scope(self):
        node = self._parse_one("{}")
        self.assertIsInstance(node, UnnamedScope)
        self.assertEqual(node.node_type, ASTNodeType.UNNAMED_SCOPE)
        self.assertEqual(node.children(), [])

    def test_nested_unnamed_scopes(self):
        node = self._parse_one("{{}}")
        self.assertIsInstance(node, UnnamedScope)
        self.assertEqual(len(node.children()), 1)
        inner = node.children()[0]
        self.assertIsInstance(inner, UnnamedScope)
        self.assertEqual(inner.children(), [])

    def test_struct(self):
        node = self._parse_one("struct{ int a; }")

        self.assertIsInstance(node, StructScope)
        self.assertEqual(node.node_type, ASTNodeType.SCOPE)
        self.assertEqual(node.value, "struct")

        (member,) = node.children()
        self.assertIsInstance(member, Member)
        self.assertEqual(member.value, "a")
        self.assertEqual(member.children(), [TypeRef("int")])
        self.assertEqual(member.children()[0].node_type, ASTNodeType.TYPE)

    def test_struct_with_several_members(self):
        node = self._parse_one("struct { int x; int y; }")
        self.assertEqual([m.name for m in node.members], ["x", "y"])

    def test_empty_struct(self):
        self.assertEqual(self._parse_one("struct {}").members, [])

    def test_implement(self):
        node = self._parse_one(
            "implement { function get: int { return 1; } function set(int v) { x = v; } }"
        )

        self.assertIsInstance(node, ImplementScope)
        self.assertEqual(node.value, "implement")
        self.assertEqual([f.name.name for f in node.functions], ["get", "set"])
        self.assertTrue(all(f.keyword == "function" for f in node.functions))
        self.assertEqual(node.functions[0].return_type, ReturnType("int"))

    def test_function_children_order(self):
        node = self._parse_one("function add(int a, int b): int { return a + b; }")

        self.assertIsInstance(node, KeywordScope)
        self.assertEqual(node.value, "function")
        types = [child.node_type for child in node.children()]
        self.assertEqual(types, [
            ASTNodeType.IDENTIFIER,
            ASTNodeType.PARAMETERS,
            ASTNodeType.RETURN_TYPE,
            ASTNodeType.RETURN_STATEMENT,
        ])

        self.assertEqual(node.name, Identifier("add"))
        self.assertEqual(node.parameters.params, [
            Parameter("a", TypeRef("int")),
            Parameter("b", TypeRef("int")),
        ])
        self.assertEqual(node.body, [
            ReturnStatement(BinaryOp("+", Reference("a"), Reference("b"))),
        ])

    def test_function_without_parameters_or_return_type(self):
        node = self._parse_one("function main { out(1); }")
        self.assertIsNone(node.parameters)
        self.assertIsNone(node.return_type)
        self.assertEqual([c.node_type for c in node.children()],
                         [ASTNodeType.IDENTIFIER, ASTNodeType.OPERATOR])

    def test_function_with_empty_parameter_list(self):
        node = self._parse_one("function main() {}")
        self.assertEqual(node.parameters, Parameters([]))
        self.assertEqual(node.parameters.children(), [])

    def test_nested_scopes_in_body(self):
        node = self._parse_one("outer { inner { x = 1; } { } for(1) { } }")

        self.assertIsInstance(node, NamedScope)
        inner, unnamed, loop = node.body
        self.assertEqual(inner, NamedScope("inner", [Assignment("x", Literal("1"))]))
        self.assertIsInstance(unnamed, UnnamedScope)
        self.assertIsInstance(loop, ForScope)

    def test_multiple_top_level_nodes(self):
        nodes = self._parse("struct { int a; } foo {} {} function f {}")
        self.assertEqual([n.node_type for n in nodes], [
            ASTNodeType.SCOPE, ASTNodeType.NAMED_SCOPE,
            ASTNodeType.UNNAMED_SCOPE, ASTNodeType.SCOPE,
        ])

    def test_conditional_keywords_with_extended_config(self):
        config = ScopeConfig(extended_scope_keywords=True)
        nodes = self._parse("if ready { out(1); } else { out(0); } while (int i) {}", config)

        if_scope, else_scope, while_scope = nodes
        self.assertEqual(if_scope.keyword, "if")
        self.assertEqual(if_scope.name, Identifier("ready"))
        self.assertEqual(else_scope.keyword, "else")
        self.assertIsNone(else_scope.name)
        self.assertEqual(while_scope.parameters.params, [Parameter("i", TypeRef("int"))])

    def test_conditional_keywords_are_named_scopes_by_default(self):
        node = self._parse_one("else { out(0); }")
        self.assertIsInstance(node, NamedScope)
        self.assertEqual(node.name, "else")


class TestStatements(ParserTestCase):
    """Statement forms, both nested and at the top level."""

    def test_assignment(self):
        node = self._parse_one("{ x = 1; }").body[0]
        self.assertEqual(node, Assignment("x", Literal("1")))
        self.assertEqual(node.node_type, ASTNodeType.ASSIGNMENT)
        self.assertEqual(node.value, "x")

    def test_variable_declaration(self):
        node = self._parse_one("{ int a = 5; }").body[0]
        self.assertIsInstance(node, VariableDeclaration)
        self.assertEqual(node.value, "a")
        self.assertEqual(node.children(), [TypeRef("int"), Literal("5")])

    def test_return_without_value(self):
        node = self._parse_one("{ return; }").body[0]
        self.assertEqual(node, ReturnStatement())
        self.assertEqual(node.value, "return")
        self.assertEqual(node.children(), [])

    def test_return_with_value(self):
        node = self._parse_one("{ return x; }").body[0]
        self.assertEqual(node.children(), [Reference("x")])

    def test_function_call(self):
        node = self._parse_one("{ foo(1, x + 2); }").body[0]
        self.assertIsInstance(node, FunctionCall)
        self.assertEqual(node.value, "foo")
        self.assertEqual(node.arguments, [
            Literal("1"),
            BinaryOp("+", Reference("x"), Literal("2")),
        ])

    def test_function_call_without_arguments(self):
        node = self._parse_one("{ bar(); }").body[0]
        self.assertEqual(node, FunctionCall("bar", []))

    def test_operator_statements(self):
        body = self._parse_one("{ out(); inc(x); dec(x, 2); jump(1); }").body
        self.assertTrue(all(isinstance(s, OperatorStatement) for s in body))
        self.assertEqual([s.value for s in body], ["out", "inc", "dec", "jump"])
        self.assertEqual([len(s.children()) for s in body], [0, 1, 2, 1])

    def test_top_level_statements(self):
        nodes = self._parse("x = 1; out(x); int y = 2; foo(y); return;")
        self.assertEqual([type(n) for n in nodes], [
            Assignment, OperatorStatement, VariableDeclaration, FunctionCall, ReturnStatement,
        ])


class TestExpressions(ParserTestCase):
    """Expressions fold left to right with one precedence level."""

    def _expr(self, text):
        return self._parse_one(f"x = {text};").expression

    def test_flat_precedence(self):
        self.assertEqual(self._expr("1 + 2 * 3"),
                         BinaryOp("*", BinaryOp("+", Literal("1"), Literal("2")), Literal("3")))

    def test_left_associative(self):
        self.assertEqual(self._expr("a - b - c"),
                         BinaryOp("-", BinaryOp("-", Reference("a"), Reference("b")), Reference("c")))

    def test_parentheses_group(self):
        self.assertEqual(self._expr("1 + (2 * 3)"),
                         BinaryOp("+", Literal("1"), BinaryOp("*", Literal("2"), Literal("3"))))

    def test_parentheses_add_no_wrapper(self):
        self.assertEqual(self._expr("((5))"), Literal("5"))

    def test_operator_node_view(self):
        expr = self._expr("a / 2")
        self.assertEqual(expr.node_type, ASTNodeType.OPERATOR)
        self.assertEqual(expr.value, "/")
        self.assertEqual([c.value for c in expr.children()], ["a", "2"])

    def test_literal_number(self):
        self.assertEqual(self._expr("42").number, 42)


class TestParseErrors(ParserTestCase):
    """The first violation aborts the parse."""

    def test_unclosed_for_scope(self):
        error = self._parse_error("for(3){ out(1); ")
        self.assertEqual(error.code, "P010")
        self.assertTrue(error.at_end_of_input)
        self.assertIn("'}'", error.expected)

    def test_missing_semicolon(self):
        error = self._parse_error("{ return 1 }")
        self.assertEqual(error.code, "P002")
        self.assertTrue(error.token.is_symbol("}"))

    def test_missing_semicolon_at_end(self):
        self.assertEqual(self._parse_error("foo(1)").code, "P010")

    def test_missing_expression(self):
        self.assertEqual(self._parse_error("x = ;").code, "P005")
        self.assertEqual(self._parse_error("x = 1 +;").code, "P005")

    def test_keyword_is_not_an_expression(self):
        self.assertEqual(self._parse_error("x = int;").code, "P005")

    def test_identifier_without_statement(self):
        error = self._parse_error("x;")
        self.assertEqual(error.code, "P001")
        self.assertTrue(error.token.is_symbol(";"))

    def test_stray_symbol(self):
        self.assertEqual(self._parse_error(";").code, "P001")
        self.assertEqual(self._parse_error("}").code, "P001")

    def test_function_requires_name(self):
        error = self._parse_error("function (int i) {}")
        self.assertEqual(error.code, "P003")

    def test_for_requires_parentheses(self):
        self.assertEqual(self._parse_error("for 3 {}").code, "P002")
        self.assertEqual(self._parse_error("for(3 {}").code, "P002")

    def test_for_requires_body(self):
        self.assertEqual(self._parse_error("for(3);").code, "P002")

    def test_struct_requires_brace(self):
        self.assertEqual(self._parse_error("struct foo {}").code, "P002")

    def test_struct_member_needs_type(self):
        self.assertEqual(self._parse_error("struct { a; }").code, "P003")

    def test_struct_member_needs_semicolon(self):
        self.assertEqual(self._parse_error("struct { int a }").code, "P002")

    def test_implement_accepts_only_functions(self):
        error = self._parse_error("implement { foo {} }")
        self.assertEqual(error.code, "P001")
        self.assertEqual(error.token.lexeme, "foo")

    def test_parameter_list_errors(self):
        self.assertEqual(self._parse_error("function f(int a,) {}").code, "P003")
        self.assertEqual(self._parse_error("function f(, int a) {}").code, "P003")
        self.assertEqual(self._parse_error("function f(int a int b) {}").code, "P002")
        self.assertEqual(self._parse_error("function f(a) {}").code, "P003")

    def test_return_type_must_be_type_keyword(self):
        self.assertEqual(self._parse_error("function f: x {}").code, "P003")

    def test_variable_declaration_errors(self):
        self.assertEqual(self._parse_error("int = 5;").code, "P003")
        self.assertEqual(self._parse_error("int a 5;").code, "P002")

    def test_argument_list_errors(self):
        self.assertEqual(self._parse_error("out 1;").code, "P002")
        self.assertEqual(self._parse_error("out(1 2);").code, "P002")
        self.assertEqual(self._parse_error("out(1,);").code, "P005")

    def test_call_followed_by_body_is_an_error(self):
        error = self._parse_error("foo(1) {}")
        self.assertEqual(error.code, "P002")
        self.assertTrue(error.token.is_symbol("{"))

    def test_deeply_nested_scopes(self):
        depth = 5000
        error = self._parse_error("{" * depth + "}" * depth)
        self.assertEqual(error.code, "P030")
        self.assertEqual(error.title, "Nesting too deep")

    def test_deeply_nested_parentheses(self):
        depth = 5000
        error = self._parse_error("x = " + "(" * depth + "1" + ")" * depth + ";")
        self.assertEqual(error.code, "P030")
        self.assertTrue(error.token.is_symbol("("))

    def test_error_message_names_found_token(self):
        error = self._parse_error("struct { int a }")
        self.assertIn("found '}'", error.message)
        self.assertIn("<string>:1:16", str(error))


class TestParserMechanics(unittest.TestCase):
    """Cursor handling and tree invariants."""

    def test_token_list_without_eof(self):
        tokens = tokenize_string("foo{}")[:-1]
        nodes = Parser(tokens).parse()
        self.assertEqual(nodes, [NamedScope("foo")])

    def test_truncated_token_list_reports_end_of_input(self):
        tokens = tokenize_string("{")[:-1]
        with self.assertRaises(ParseError) as ctx:
            Parser(tokens).parse()
        self.assertTrue(ctx.exception.at_end_of_input)

    def test_empty_token_list(self):
        self.assertEqual(Parser([]).parse(), [])

    def test_parse_is_repeatable(self):
        tokens = tokenize_string("function f(int a) { out(a); }")
        parser = Parser(tokens)
        self.assertEqual(parser.parse(), parser.parse())

    def test_tree_invariants(self):
        source = """
        struct { int x; int y; }
        implement {
            function area(int w, int h): int { return w * h; }
        }
        function main {
            int a = 1;
            for (a) { inc(a); }
        }
        """
        nodes = parse_string(source)

        for top in nodes:
            self.assertNotIn(top.node_type, (ASTNodeType.PARAMETERS, ASTNodeType.PARAMETER))

        seen = set()
        for top in nodes:
            for node in top.walk():
                self.assertNotIn(id(node), seen, "child nodes must not be shared")
                seen.add(id(node))
                if node.node_type in (ASTNodeType.PARAMETER, ASTNodeType.MEMBER):
                    children = node.children()
                    self.assertEqual(len(children), 1)
                    self.assertEqual(children[0].node_type, ASTNodeType.TYPE)
                if node.node_type == ASTNodeType.PARAMETERS:
                    self.assertTrue(all(c.node_type == ASTNodeType.PARAMETER
                                        for c in node.children()))

    def test_generic_view(self):
        (node,) = parse_string("foo { x = 1; }")
        self.assertEqual(node.to_dict(), {
            "type": "NamedScope",
            "value": "foo",
            "children": [{
                "type": "Assignment",
                "value": "x",
                "children": [{"type": "Expression", "value": "1", "children": []}],
            }],
        })

    def test_pretty(self):
        (node,) = parse_string("struct { int a; }")
        self.assertEqual(node.pretty(), "Scope 'struct'\n  Member 'a'\n    Type 'int'")

    def test_visitor(self):
        class CountOperators(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_OperatorStatement(self, node):
                self.count += 1
                self.generic_visit(node)

        visitor = CountOperators()
        for node in parse_string("{ out(1); { inc(x); } } for(2) { dec(y); }"):
            node.accept(visitor)
        self.assertEqual(visitor.count, 3)

    def test_locations_recorded(self):
        (node,) = parse_string("\n  foo {}")
        self.assertEqual((node.location.line, node.location.column), (2, 3))


if __name__ == '__main__':
    unittest.main()
