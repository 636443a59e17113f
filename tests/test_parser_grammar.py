from __future__ import annotations

from decimal import Decimal
from textwrap import dedent

import pytest
from lark import Tree

from tests.support.harness import LexError, ParseError, parse_program, parse_rd, statement_labels
from naive_ref.ast import is_expr, is_stmt
from naive_ref.lexer_rd import Lexer
from naive_ref.parser_rd import Parser
from naive_ref.token_types import TT
from naive_ref.tree import tree_label

PARSER_GRAMMAR_CASES = [
    ("empty-0", ";", ["empty"]),
    ("empty-1", ";;", ["empty", "empty"]),
    ("let-0", "let x = 1;", ["let"]),
    ("let-1", "let x;", ["let"]),
    ("assign-0", "x = 1;", ["assign"]),
    ("expr-0", "x;", ["exprstmt"]),
    ("expr-1", "x + 1;", ["exprstmt"]),
    ("expr-2", "f(x);", ["exprstmt"]),
    ("expr-3", "(x);", ["exprstmt"]),
    ("expr-4", "1 == 2 /= true;", ["exprstmt"]),
    ("block-0", "{ }", ["block"]),
    ("block-1", "{ let a = 1; { a = 2; } }", ["block"]),
    ("if-0", "if x { }", ["if"]),
    ("if-1", "if x { } else { }", ["if"]),
    ("if-2", "if x { } else if y { } else { }", ["if"]),
    ("while-0", "while x < 10 { x = x + 1; }", ["while"]),
    ("fn-0", "fn f() { }", ["fndef"]),
    ("fn-1", "fn f(a, b) { return a + b; }", ["fndef"]),
    ("lambda-0", "fn (a) => a;", ["exprstmt"]),
    ("lambda-1", "fn () { return 1; };", ["exprstmt"]),
    ("lambda-2", "let inc = fn (x) => x + 1;", ["let"]),
    ("lambda-3", "apply(fn (x) => x * 2, 3);", ["exprstmt"]),
    ("lambda-4", "let add = fn (a) => fn (b) => a + b;", ["let"]),
    ("return-0", "return 1;", ["return"]),
    ("return-1", "return;", ["return"]),
    ("print-0", 'print("hi");', ["print"]),
    ("print-1", 'print("{} {}", 1, x + 2);', ["print"]),
    ("comment-0", "# only a comment", []),
    ("comment-1", "let a = 1; # trailing\nlet b = 2;", ["let", "let"]),
    ("comment-2", "{ # inside\n let a = 1; }", ["block"]),
    ("ident-suffix-0", "empty? = done!;", ["assign"]),
    ("unary-0", "- - x;", ["exprstmt"]),
    ("unary-1", "not not x;", ["exprstmt"]),
    ("literals-0", "let v = 'c'; let s = \"str\"; let n = nil; let t = true; let f = false;", ["let"] * 5),
    ("numbers-0", "0b1; 0o7; 0xff; 1.5; 2e3;", ["exprstmt"] * 5),
]

PARSER_ERROR_CASES = [
    pytest.param("let x = 1", "expected SEMI", id="missing-semi"),
    pytest.param("let = 1;", "expected IDENT", id="let-without-name"),
    pytest.param("1 +;", "unexpected SEMI", id="dangling-operator"),
    pytest.param("{ let x = 1;", "unexpected EOF", id="unclosed-block"),
    pytest.param("else { }", "dangling else", id="dangling-else"),
    pytest.param("if x { } else x;", "expected LBRACE", id="else-needs-block"),
    pytest.param("if x y;", "expected LBRACE", id="if-needs-block"),
    pytest.param("fn (a, a) => a;", "duplicate parameter", id="duplicate-param"),
    pytest.param("fn f(1) { }", "expected IDENT", id="param-not-ident"),
    pytest.param("@;", "invalid token", id="invalid-token"),
    pytest.param("print(x);", "format STRING", id="print-needs-string"),
    pytest.param('print("{}" 1);', "expected RPAR", id="print-missing-comma"),
    pytest.param(")", "unexpected RPAR", id="stray-rpar"),
    pytest.param("f(1, 2;", "expected RPAR", id="unclosed-call"),
    pytest.param("0x;", "malformed integer literal", id="radix-without-digits"),
    pytest.param("1e;", "malformed floating-point literal", id="bare-exponent"),
    pytest.param("1.;", "malformed floating-point literal", id="float-without-fraction"),
    pytest.param("1e+;", "malformed floating-point literal", id="signed-exponent-without-digits"),
    pytest.param("'';", "malformed char literal", id="empty-char"),
    pytest.param("x = fn;", "expected LPAR", id="fn-without-params"),
]


def _expr(source: str):
    stmt = parse_rd(source)[0]
    assert stmt.data == "exprstmt"
    return stmt.children[0]


def _op(node) -> str:
    return str(node.children[1])


@pytest.mark.parametrize(
    "source, labels", [pytest.param(src, labels, id=name) for name, src, labels in PARSER_GRAMMAR_CASES]
)
def test_parser_grammar(source: str, labels) -> None:
    stmts = parse_rd(source)
    if labels is not None:
        assert [stmt.data for stmt in stmts] == labels


@pytest.mark.parametrize("source, msg", PARSER_ERROR_CASES)
def test_parser_errors(source: str, msg: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_rd(source)
    assert msg in str(exc_info.value)


def test_multiplication_binds_tighter_than_addition() -> None:
    node = _expr("1 + 2 * 3;")

    assert node.data == "binary" and _op(node) == "+"
    rhs = node.children[2]
    assert rhs.data == "binary" and _op(rhs) == "*"


def test_subtraction_is_left_associative() -> None:
    node = _expr("1 - 2 - 3;")

    assert _op(node) == "-"
    assert node.children[0].data == "binary"
    assert node.children[2].data == "int"


def test_comparisons_chain_to_the_left() -> None:
    node = _expr("a < b < c;")

    assert _op(node) == "<"
    assert node.children[0].data == "binary"
    assert tree_label(node.children[2]) == "var"


def test_and_binds_tighter_than_or() -> None:
    node = _expr("a or b and c;")

    assert _op(node) == "or"
    assert _op(node.children[2]) == "and"


def test_relational_binds_tighter_than_and() -> None:
    node = _expr("a < 1 and b /= 2;")

    assert _op(node) == "and"
    assert _op(node.children[0]) == "<"
    assert _op(node.children[2]) == "/="
    assert node.children[2].children[1].type == TT.NEQ.name


def test_unary_binds_tighter_than_binary() -> None:
    node = _expr("not a and b;")

    assert _op(node) == "and"
    assert node.children[0].data == "unary"


def test_nested_unary_minus() -> None:
    node = _expr("- - x;")

    assert node.data == "unary"
    assert node.children[1].data == "unary"
    assert node.children[1].children[1].data == "var"


def test_grouping_overrides_precedence() -> None:
    node = _expr("(1 + 2) * 3;")

    assert _op(node) == "*"
    assert node.children[0].data == "group"


def test_call_arguments_in_order() -> None:
    node = _expr("f(1, g(2), x);")

    assert node.data == "call"
    assert str(node.children[0]) == "f"
    args = node.children[1].children
    assert [arg.data for arg in args] == ["int", "call", "var"]


def test_identifier_without_paren_is_variable() -> None:
    node = _expr("f;")
    assert node.data == "var"
    assert str(node.children[0]) == "f"


def test_assignment_versus_expression_backtrack() -> None:
    assign, expr = parse_rd("x = 1; x == 1;")

    assert assign.data == "assign"
    assert str(assign.children[0]) == "x"
    assert expr.data == "exprstmt"
    assert _op(expr.children[0]) == "=="


def test_named_function_versus_lambda_backtrack() -> None:
    fndef, lam_stmt = parse_rd("fn f(a) { return a; } fn (b) => b;")

    assert fndef.data == "fndef"
    assert str(fndef.children[0]) == "f"
    assert [str(p) for p in fndef.children[1].children] == ["a"]

    lam = lam_stmt.children[0]
    assert lam.data == "lambda"
    assert [str(p) for p in lam.children[0].children] == ["b"]


def test_arrow_body_is_single_return_block() -> None:
    lam = _expr("fn (x) => x + 1;")
    body = lam.children[1]

    assert body.data == "block"
    assert len(body.children) == 1
    assert body.children[0].data == "return"
    assert body.children[0].children[0].data == "binary"


def test_arrow_body_can_be_another_lambda() -> None:
    let = parse_rd("let add = fn (a) => fn (b) => a + b;")[0]
    outer = let.children[1]
    inner = outer.children[1].children[0].children[0]

    assert outer.data == "lambda"
    assert inner.data == "lambda"


def test_let_without_initializer_defaults_to_nil() -> None:
    let = parse_rd("let x;")[0]
    assert str(let.children[0]) == "x"
    assert let.children[1].data == "nil"


def test_if_without_else_gets_empty_branch() -> None:
    node = parse_rd("if x { }")[0]
    assert node.children[2].data == "empty"


def test_else_if_chains_nest() -> None:
    node = parse_rd("if a { } else if b { } else { }")[0]

    nested = node.children[2]
    assert nested.data == "if"
    assert nested.children[2].data == "block"


def test_print_statement_keeps_format_text() -> None:
    node = parse_rd('print("{} + {}", 1, 2);')[0]

    assert node.children[0] == "{} + {}"
    assert len(node.children[1].children) == 2


def test_bare_return_yields_nil() -> None:
    node = parse_rd("return;")[0]
    assert node.children[0].data == "nil"


def test_literal_values() -> None:
    stmts = parse_rd("0b101; 0o17; 0xFF; 42; 2.50; 1e3; 'q'; \"hi there\";")
    values = [stmt.children[0].children[0] for stmt in stmts]

    assert values[:4] == [5, 15, 255, 42]
    assert values[4] == Decimal("2.50")
    assert values[5] == Decimal("1e3")
    assert values[6:] == ["q", "hi there"]


def test_unterminated_string_parses_best_effort() -> None:
    node = _expr('"abc\n;')
    assert node.children[0] == "abc"


def test_comment_inside_block_is_skipped() -> None:
    source = dedent(
        """\
        {
            # leading
            let a = 1; # trailing
            # closing
        }
        """
    )
    block = parse_rd(source)[0]
    assert [stmt.data for stmt in block.children] == ["let"]


def test_parse_error_carries_location() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_rd("let a = 1;\nlet b = ;", "where.nv")

    err = exc_info.value
    assert (err.line, err.column) == (2, 9)
    assert str(err).startswith("where.nv:2:9: ")


def test_nodes_carry_positions() -> None:
    stmt = parse_rd("let a = 1;\n  b = a + 2;")[1]

    assert (stmt.meta.line, stmt.meta.column) == (2, 3)
    plus = stmt.children[1]
    assert (plus.meta.line, plus.meta.column) == (2, 9)


def test_go_back_without_history_fails() -> None:
    parser = Parser(Lexer(""))
    with pytest.raises(ParseError):
        parser.go_back()


def test_backtrack_restores_token_order() -> None:
    parser = Parser(Lexer("a b c"))

    first = parser.advance()
    parser.go_back()
    assert parser.current is first
    assert [parser.advance().value for _ in range(3)] == ["a", "b", "c"]
    assert parser.current.type == TT.EOF


def _walk(node):
    yield node
    for child in getattr(node, "children", []):
        if isinstance(child, Tree):
            yield from _walk(child)


def test_parser_only_builds_known_labels() -> None:
    source = dedent(
        """\
        let f = fn (a) => -a;
        fn g(x, y) { if not x { return (y); } else { while x { x = x - 1; } } }
        print("{}", g(1, 'c' == "s" or nil));
        { ; }
    """
    )
    for stmt in parse_rd(source):
        assert is_stmt(stmt)
        for node in _walk(stmt):
            assert is_expr(node) or is_stmt(node) or node.data in ("params", "args")


def test_statement_labels_helper() -> None:
    assert statement_labels("let a = 1; a = 2; a;") == ["let", "assign", "exprstmt"]


def test_lexical_errors_surface_after_successful_parse() -> None:
    with pytest.raises(LexError) as exc_info:
        parse_program(b"let x = 1; # \xff\n", "lex.nv")
    assert "illegal UTF-8" in str(exc_info.value)


def test_parse_error_wins_over_lexical_errors() -> None:
    with pytest.raises(ParseError):
        parse_program("let x = @;")
