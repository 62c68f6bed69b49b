import sys

import pytest

from nad.nad_ast import (
    Binary,
    Block,
    ClassDecl,
    Expr,
    FuncDecl,
    Literal,
    Print,
    Stmt,
    Var,
    Variable,
)
from nad.nad_errors import Reporter
from nad.nad_interpreter import Interpreter
from nad.nad_lexer import CharacterStream, Lexer, Token
from nad.nad_parser import Parser
from nad.nad_resolver import ClassType, FunctionType, Resolver


def resolve(source: str) -> tuple[Interpreter, Resolver, list[Stmt]]:
    reporter = Reporter()
    interpreter = Interpreter(reporter)
    tokens = Lexer(CharacterStream(source), reporter).scan_tokens()
    statements = Parser(tokens, reporter).parse()
    assert statements is not None and not reporter.had_syntax_error
    resolver = Resolver(interpreter)
    resolver.resolve(statements)
    return interpreter, resolver, statements


def resolve_errors(source: str, capsys: pytest.CaptureFixture[str]) -> list[str]:
    interpreter, _, _ = resolve(source)
    assert interpreter.reporter.had_syntax_error
    return capsys.readouterr().out.splitlines()


def test_globals_get_no_depth() -> None:
    interpreter, _, statements = resolve("var a = 1; print a;")
    assert interpreter.locals == {}
    assert statements[1].expression.uid not in interpreter.locals  # type: ignore[attr-defined]


def test_local_depths() -> None:
    interpreter, _, statements = resolve("{ var a = 1; { print a; a = 2; } }")
    inner = statements[0].statements[1]  # type: ignore[attr-defined]
    read = inner.statements[0].expression
    write = inner.statements[1].expression
    assert interpreter.locals[read.uid] == 1
    assert interpreter.locals[write.uid] == 1


def test_parameters_and_closure_depths() -> None:
    interpreter, _, statements = resolve(
        "func outer(x) { func inner() { return x; } return inner; }"
    )
    outer = statements[0]
    inner = outer.body[0]  # type: ignore[attr-defined]
    returned = inner.body[0].value
    assert interpreter.locals[returned.uid] == 1
    inner_ref = outer.body[1].value  # type: ignore[attr-defined]
    assert interpreter.locals[inner_ref.uid] == 0


def test_this_and_super_depths() -> None:
    interpreter, _, statements = resolve(
        "class A { m() {} } class B < A { m() { super.m(); return this; } }"
    )
    method = statements[1].methods[0]  # type: ignore[attr-defined]
    super_expr = method.body[0].expression.callee
    this_expr = method.body[1].value
    assert interpreter.locals[super_expr.uid] == 2
    assert interpreter.locals[this_expr.uid] == 1


def test_local_superclass_is_resolved_outside_super_scope() -> None:
    interpreter, _, statements = resolve("{ class A {} class B < A {} }")
    superclass = statements[0].statements[1].superclass  # type: ignore[attr-defined]
    assert interpreter.locals[superclass.uid] == 0


def test_re_resolving_gives_same_depths() -> None:
    source = """
    var g = 0;
    func counter() {
      var n = 0;
      func inc() { n = n + 1; g = g + n; return n; }
      return inc;
    }
    class A { init(x) { this.x = x; } get() { return this.x; } }
    class B < A { get() { return super.get() + 1; } }
    for (var i = 0; i < 3; i = i + 1) { if (i == 1) continue; print i; }
    """
    interpreter, _, statements = resolve(source)
    first = dict(interpreter.locals)
    assert first
    Resolver(interpreter).resolve(statements)
    assert interpreter.locals == first
    assert not interpreter.reporter.had_syntax_error


def test_state_is_restored_after_resolving() -> None:
    _, resolver, _ = resolve(
        "class A < B { m() { while (true) { break; } } } func f() { return; }"
    )
    assert resolver.scopes == []
    assert resolver.current_function == FunctionType.NONE
    assert resolver.current_class == ClassType.NONE
    assert resolver.in_loop is False


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, expected",
    [
        ("return 1;", "On line 1, at 'return': 'return' statement outside function definition."),
        (
            "class A { init() { return 1; } }",
            "On line 1, at 'return': expect 'nil' as return value for the constructor.",
        ),
        ("break;", "On line 1, at 'break': 'break' outside loop."),
        ("continue;", "On line 1, at 'continue': 'continue' outside loop."),
        (
            "while (true) { func f() { break; } }",
            "On line 1, at 'break': 'break' outside loop.",
        ),
        ("print this;", "On line 1, at 'this': 'this' outside class declaration."),
        (
            "func f() { return this; }",
            "On line 1, at 'this': 'this' outside class declaration.",
        ),
        (
            "class A { m() { super.m(); } }",
            "On line 1, at 'super': Use of 'super' outside subclasses.",
        ),
        ("super.m();", "On line 1, at 'super': Use of 'super' outside subclasses."),
        (
            "class A < A {}",
            "On line 1, at 'A': A class is not allowed to inherit from itself.",
        ),
        ("{ var a = 1; var a = 2; }", "On line 1, at 'a': Redeclaration of variable."),
        ("func f(a, a) {}", "On line 1, at 'a': Redeclaration of variable."),
        (
            "{ var a = a; }",
            "On line 1, at 'a': Can't read local variable in its own initializer.",
        ),
    ],
)
def test_static_errors(
    source: str, expected: str, capsys: pytest.CaptureFixture[str]
) -> None:
    assert resolve_errors(source, capsys) == [expected]


@pytest.mark.parametrize(  # type: ignore[misc]
    "source",
    [
        "class A { init() { return; } }",
        "class A { init() { return nil; } }",
        "var a = 1; var a = 2;",
        "for (;;) { if (true) break; else continue; }",
        "while (true) { var f = func () { return 1; }; break; }",
        "class A {} class B < A { m() { return super.m; } }",
    ],
)
def test_admitted_programs(source: str) -> None:
    interpreter, _, _ = resolve(source)
    assert not interpreter.reporter.had_syntax_error


def test_self_inheritance_keeps_scopes_balanced(
    capsys: pytest.CaptureFixture[str],
) -> None:
    interpreter, resolver, _ = resolve("{ class A < A { m() { return super.m; } } var b = 1; }")
    assert interpreter.reporter.had_syntax_error
    assert resolver.scopes == []


def test_resolver_reports_every_error(capsys: pytest.CaptureFixture[str]) -> None:
    lines = resolve_errors("break; return; print this;", capsys)
    assert len(lines) == 3


def deep_sum(levels: int) -> Binary:
    """Builds `1 + 1 + ... + 1` as a left-nested chain without recursing."""
    one = Token("NUMBER", "1", 1.0, 1, 7)
    expr: Expr = Literal(1.0, one)
    for _ in range(levels):
        expr = Binary(expr, Token("PLUS", "+", None, 1, 8), Literal(1.0, one))
    return expr  # type: ignore[return-value]


def test_overly_deep_expression_is_a_syntax_error(
    capsys: pytest.CaptureFixture[str],
) -> None:
    interpreter = Interpreter()
    statements: list[Stmt] = [
        Print(Token("PRINT", "print", None, 1, 1), deep_sum(2 * sys.getrecursionlimit())),
        Block(
            [Var(Token("IDENT", "a", None, 2, 7), Literal(None))],
            Token("LEFT_BRACE", "{", None, 2, 1),
        ),
    ]
    Resolver(interpreter).resolve(statements)
    assert capsys.readouterr().out.splitlines() == [
        "On line 1, at 'print': Expression nests too deeply."
    ]
    assert interpreter.reporter.had_syntax_error


def test_deep_method_body_leaves_resolver_state_balanced(
    capsys: pytest.CaptureFixture[str],
) -> None:
    def ident(name: str) -> Token:
        return Token("IDENT", name, None, 1, 1)

    method = FuncDecl(
        ident("m"),
        [],
        [Print(Token("PRINT", "print", None, 1, 1), deep_sum(2 * sys.getrecursionlimit()))],
    )
    program: list[Stmt] = [
        ClassDecl(ident("A"), None, []),
        Block(
            [ClassDecl(ident("B"), Variable(ident("A")), [method])],
            Token("LEFT_BRACE", "{", None, 1, 1),
        ),
    ]
    interpreter = Interpreter()
    resolver = Resolver(interpreter)
    resolver.resolve(program)
    assert capsys.readouterr().out.splitlines() == [
        "On line 1, at '{': Expression nests too deeply."
    ]
    assert resolver.scopes == []
    assert resolver.current_class == ClassType.NONE
    assert resolver.current_function == FunctionType.NONE
    assert resolver.in_loop is False
