import pytest
from hypothesis import given
from hypothesis import strategies as st

from nad.emitters.ast_printer import AstPrinter
from nad.nad_ast import (
    Assign,
    Block,
    Call,
    ClassDecl,
    ExpressionStmt,
    FuncDecl,
    Literal,
    Print,
    Set,
    Stmt,
    Var,
    While,
)
from nad.nad_errors import Reporter
from nad.nad_lexer import CharacterStream, Lexer, Token
from nad.nad_parser import Parser


def parse(source: str, reporter: Reporter | None = None) -> list[Stmt] | None:
    reporter = reporter if reporter is not None else Reporter()
    tokens = Lexer(CharacterStream(source), reporter).scan_tokens()
    return Parser(tokens, reporter).parse()


def sexpr(source: str) -> str:
    statements = parse(source)
    assert statements is not None
    return AstPrinter().print_program(statements)


def parse_errors(source: str, capsys: pytest.CaptureFixture[str]) -> list[str]:
    reporter = Reporter()
    parse(source, reporter)
    assert reporter.had_syntax_error
    return capsys.readouterr().out.splitlines()


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, expected",
    [
        ("1 + 2 * 3;", "(+ 1 (* 2 3))"),
        ("(1 + 2) * 3;", "(* (group (+ 1 2)) 3)"),
        ("1 - 2 - 3;", "(- (- 1 2) 3)"),
        ("8 / 4 % 3;", "(% (/ 8 4) 3)"),
        ("-!x;", "(- (! x))"),
        ("a < b == c >= d;", "(== (< a b) (>= c d))"),
        ("a || b && c;", "(|| a (&& b c))"),
        ("a == b || c;", "(== a (|| b c))"),
        ("a ? b : c ? d : e;", "(?: a b (?: c d e))"),
        ("x = y = 1;", "(= x (= y 1))"),
        ("x += 1;", "(+= x 1)"),
        ("a, b = 2;", "(, a (= b 2))"),
        ("f(1, 2)(3);", "(call (call f 1 2) 3)"),
        ("a.b.c();", "(call (. (. a b) c))"),
        ("a.b -= 1;", "(-= (. a b) 1)"),
        ('"s" + nil;', '(+ "s" nil)'),
        ("true != false;", "(!= true false)"),
        ("this.x;", "(. this x)"),
        ("super.m();", "(call (. super m))"),
        ("var f = func (a, b) { return a; };", "(var f (func (a b) (return a)))"),
    ],
)
def test_expression_precedence(source: str, expected: str) -> None:
    assert sexpr(source) == expected


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, expected",
    [
        ("print 1;", "(print 1)"),
        ("var x;", "(var x nil)"),
        ("var x = 2;", "(var x 2)"),
        ("{ var x = 1; print x; }", "(block (var x 1) (print x))"),
        ("if (a) print 1; else print 2;", "(if a (print 1) (print 2))"),
        ("if (a) print 1;", "(if a (print 1) nil)"),
        ("while (a) print 1;", "(while a (print 1) nil)"),
        ("func f(a, b) { return; }", "(func f (a b) (return nil))"),
        ("while (a) { break; continue; }", "(while a (block (break) (continue)) nil)"),
        ("class A < B { m() {} }", "(class A < B (func m ()))"),
        ("class A {}", "(class A)"),
    ],
)
def test_statements(source: str, expected: str) -> None:
    assert sexpr(source) == expected


def test_for_loop_desugars_to_block_with_while() -> None:
    statements = parse("for (var i = 0; i < 3; i = i + 1) print i;")
    assert statements is not None
    (block,) = statements
    assert isinstance(block, Block)
    init, loop = block.statements
    assert isinstance(init, Var)
    assert isinstance(loop, While)
    assert isinstance(loop.increment, Assign)
    assert isinstance(loop.body, Print)
    assert AstPrinter().emit(block) == (
        "(block (var i 0) (while (< i 3) (print i) (= i (+ i 1))))"
    )


def test_for_loop_with_empty_clauses() -> None:
    assert sexpr("for (;;) break;") == "(block (while true (break) nil))"
    assert sexpr("for (x = 0; ;) break;") == (
        "(block (= x 0) (while true (break) nil))"
    )


def test_stray_semicolons_are_skipped() -> None:
    statements = parse(";; print 1;;; { ; print 2; };")
    assert statements is not None
    assert AstPrinter().print_program(statements) == "(print 1)\n(block (print 2))"


def test_assignment_targets_become_assign_and_set() -> None:
    statements = parse("x = 1; o.f = 2;")
    assert statements is not None
    first, second = statements
    assert isinstance(first, ExpressionStmt) and isinstance(first.expression, Assign)
    assert isinstance(second, ExpressionStmt) and isinstance(second.expression, Set)
    assert second.expression.op.type == "ASSIGN"


def test_call_keeps_closing_paren() -> None:
    statements = parse("f(\n1\n);")
    assert statements is not None
    call = statements[0].expression  # type: ignore[attr-defined]
    assert isinstance(call, Call)
    assert call.paren.type == "RIGHT_PAREN"
    assert call.paren.line == 3


def test_class_declaration_collects_methods() -> None:
    statements = parse("class P { init(x) { this.x = x; } get() { return this.x; } }")
    assert statements is not None
    (klass,) = statements
    assert isinstance(klass, ClassDecl)
    assert klass.superclass is None
    assert [m.name.lexeme for m in klass.methods] == ["init", "get"]
    assert all(isinstance(m, FuncDecl) for m in klass.methods)


def test_structural_equality_of_parses() -> None:
    assert parse("print 1 + 2;") == parse("print 1 + 2;")
    assert parse("print 1 + 2;") != parse("print 1 - 2;")


def test_parser_appends_missing_eof() -> None:
    tokens = [Token("NUMBER", "1", 1.0, 1, 1), Token("SEMICOLON", ";", None, 1, 2)]
    statements = Parser(tokens).parse()
    assert statements == [ExpressionStmt(Literal(1.0))]


def test_error_at_token(capsys: pytest.CaptureFixture[str]) -> None:
    lines = parse_errors("var = 1;", capsys)
    assert lines == ["On line 1, at '=': Missing identifier after the keyword 'var'."]


def test_error_at_end(capsys: pytest.CaptureFixture[str]) -> None:
    lines = parse_errors("print 1", capsys)
    assert lines == ["On line 1, at end: Missing a ';' after the statement."]


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, message",
    [
        ("print;", "Expect an expression."),
        ("1 = 2;", "Invalid left-hand side in the assignment expression."),
        ("a ? b;", "Missing a ':' after the operand."),
        ("{ print 1;", "Unclosed block."),
        ("(1;", "Expect token ')'."),
        ("f(1;", "Expect ')' after expression arguments."),
        ("a.;", "Expect an identifier after '.'."),
        ("super;", "Expect '.' after 'super' keyword."),
        ("if 1) x;", "Expect a '(' after 'if' keyword."),
        ("while (1 x;", "Expect a ')' after the expression."),
        ("for (;; x", "Expect ')' after the loop initialization."),
        ("var f = func (a) x;", "Expect '{' after parameter declaration."),
        ("func f) {}", "Expect '(' after function's name."),
        ("func f(1) {}", "Expect an identifier."),
        ("class {}", "Expect class's name."),
        ("class A < {}", "Expect an identifier after '<'."),
        ("return 1", "Expect a ';' after the statement."),
        ("var static = 1;", "Missing identifier after the keyword 'var'."),
        ("print static;", "'static' is a reserved keyword."),
    ],
)
def test_syntax_error_messages(
    source: str, message: str, capsys: pytest.CaptureFixture[str]
) -> None:
    lines = parse_errors(source, capsys)
    assert any(line.endswith(message) for line in lines), lines


def test_too_many_parameters(capsys: pytest.CaptureFixture[str]) -> None:
    params = ", ".join(f"p{i}" for i in range(21))
    lines = parse_errors(f"func f({params}) {{}}", capsys)
    assert lines[0] == "On line 1, at 'p20': Cannot accept more than 20 arguments."


def test_too_many_arguments_is_reported_but_parsed(
    capsys: pytest.CaptureFixture[str],
) -> None:
    reporter = Reporter()
    args = ", ".join("1" for _ in range(21))
    statements = parse(f"f({args});", reporter)
    assert reporter.had_syntax_error
    assert statements is not None
    assert len(statements[0].expression.arguments) == 21  # type: ignore[attr-defined]
    assert "Function call can accept no more than 20 arguments." in capsys.readouterr().out


def test_recovery_reports_each_bad_statement(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = Reporter()
    statements = parse("print ; var 1; print 3;", reporter)
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert statements is not None
    assert AstPrinter().print_program(statements) == "(print 3)"


def test_deep_nesting_is_reported_not_raised(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = Reporter()
    statements = parse("(" * 5000 + "1" + ")" * 5000 + ";", reporter)
    assert statements is None
    assert reporter.had_syntax_error
    assert "Expression nests too deeply." in capsys.readouterr().out


@given(st.text(max_size=200))  # type: ignore[misc]
def test_parser_never_leaks_exceptions(source: str) -> None:
    result = parse(source)
    assert result is None or isinstance(result, list)


TOKENS = st.sampled_from(
    ["var", "x", "=", "1", ";", "(", ")", "{", "}", "print", "if", "else", "while",
     "for", "func", "class", "return", "break", "+", "?", ":", ",", ".", "this",
     "super", "<", "static", "nil"]
)


@given(st.lists(TOKENS, max_size=40))  # type: ignore[misc]
def test_parser_handles_token_soup(words: list[str]) -> None:
    result = parse(" ".join(words))
    assert result is None or all(stmt is not None for stmt in result)
