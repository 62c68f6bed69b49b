"""
Static scope resolution for nad programs.

The `Resolver` walks the statements produced by the parser once, before any
code runs, and computes for every Variable, Assign, This and Super expression
how many enclosing scopes the interpreter must hop over to reach the binding.
Depths are recorded on the interpreter (`Interpreter.resolve`); a reference that
is not found in any local scope gets no entry and is looked up as a global.

Static rules (each reported through the `Reporter` as a syntax error):
    - `return` outside a function
    - `return EXPR` with a value inside `init`
    - `this` outside a class, `super` outside a subclass
    - `break` / `continue` outside a loop
    - a class inheriting from itself
    - redeclaring a name in the same local scope
    - reading a local variable in its own initializer

Class layout:
    When a class has a superclass, a scope binding `super` encloses a scope
    binding `this`, which encloses every method body. The interpreter builds
    the same chain of environments at runtime.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from nad.nad_ast import (
    Assign,
    ASTNode,
    Binary,
    Block,
    Call,
    ClassDecl,
    Expr,
    ExpressionStmt,
    FuncDecl,
    Function,
    Get,
    Grouping,
    If,
    Jump,
    Literal,
    Print,
    Return,
    Set,
    Stmt,
    Super,
    Ternary,
    This,
    Unary,
    Var,
    Variable,
    While,
)
from nad.nad_lexer import Token

if TYPE_CHECKING:
    from nad.nad_interpreter import Interpreter


class FunctionType(Enum):
    NONE = "none"
    FUNCTION = "function"
    METHOD = "method"
    INIT = "init"


class ClassType(Enum):
    NONE = "none"
    CLASS = "class"
    SUBCLASS = "subclass"


class Resolver:
    """Computes binding depths and enforces the static rules.

    Attributes:
        interpreter (Interpreter): Receives the (expression, depth) side table entries.
        scopes (list[dict[str, bool]]): Local scopes, innermost last. A name maps to
            False while declared and to True once defined.
        current_function (FunctionType): Kind of the function body being resolved.
        current_class (ClassType): Kind of the class body being resolved.
        in_loop (bool): Whether `break` / `continue` are legal here.
    """

    def __init__(self, interpreter: Interpreter) -> None:
        self.interpreter = interpreter
        self.reporter = interpreter.reporter
        self.scopes: list[dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.in_loop = False

    def resolve(self, statements: list[Stmt]) -> None:
        """Resolves a program; each top-level statement is checked on its own."""
        for statement in statements:
            try:
                self._visit(statement)
            except RecursionError:
                self.reporter.error(statement.anchor(), "Expression nests too deeply.")

    def resolve_all(self, statements: list[Stmt]) -> None:
        for statement in statements:
            self._visit(statement)

    def _visit(self, node: ASTNode | None) -> None:
        if node is None:
            return
        getattr(self, f"visit_{node.kind}")(node)

    # ------------------------------------------------------------------
    # Scope bookkeeping
    # ------------------------------------------------------------------

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.error(name, "Redeclaration of variable.")
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token) -> None:
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return

    def resolve_function(
        self, params: list[Token], body: list[Stmt], kind: FunctionType
    ) -> None:
        enclosing_function = self.current_function
        enclosing_loop = self.in_loop
        self.current_function = kind
        self.in_loop = False

        self.begin_scope()
        try:
            for param in params:
                self.declare(param)
                self.define(param)
            self.resolve_all(body)
        finally:
            self.end_scope()
            self.current_function = enclosing_function
            self.in_loop = enclosing_loop

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def visit_block(self, stmt: Block) -> None:
        self.begin_scope()
        try:
            self.resolve_all(stmt.statements)
        finally:
            self.end_scope()

    def visit_var(self, stmt: Var) -> None:
        self.declare(stmt.name)
        self._visit(stmt.initializer)
        self.define(stmt.name)

    def visit_func(self, stmt: FuncDecl) -> None:
        # Defined before the body so the function can recurse.
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt.params, stmt.body, FunctionType.FUNCTION)

    def visit_class(self, stmt: ClassDecl) -> None:
        enclosing_class = self.current_class
        depth = len(self.scopes)
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        try:
            if stmt.superclass is not None:
                if stmt.superclass.name.lexeme == stmt.name.lexeme:
                    self.reporter.error(
                        stmt.superclass.name,
                        "A class is not allowed to inherit from itself.",
                    )
                # Evaluated in the enclosing scope, before `super` is bound.
                self._visit(stmt.superclass)
                self.current_class = ClassType.SUBCLASS
                self.begin_scope()
                self.scopes[-1]["super"] = True

            self.begin_scope()
            self.scopes[-1]["this"] = True
            for method in stmt.methods:
                kind = (
                    FunctionType.INIT if method.name.lexeme == "init" else FunctionType.METHOD
                )
                self.resolve_function(method.params, method.body, kind)
        finally:
            # Drops the `this` scope and the `super` scope, whichever were opened.
            del self.scopes[depth:]
            self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt: ExpressionStmt) -> None:
        self._visit(stmt.expression)

    def visit_print(self, stmt: Print) -> None:
        self._visit(stmt.expression)

    def visit_if(self, stmt: If) -> None:
        self._visit(stmt.condition)
        self._visit(stmt.then_branch)
        self._visit(stmt.else_branch)

    def visit_while(self, stmt: While) -> None:
        self._visit(stmt.condition)
        enclosing_loop = self.in_loop
        self.in_loop = True
        try:
            self._visit(stmt.body)
        finally:
            self.in_loop = enclosing_loop
        self._visit(stmt.increment)

    def visit_return(self, stmt: Return) -> None:
        if self.current_function == FunctionType.NONE:
            self.reporter.error(
                stmt.keyword, "'return' statement outside function definition."
            )
        elif self.current_function == FunctionType.INIT and not _is_nil(stmt.value):
            self.reporter.error(
                stmt.keyword, "expect 'nil' as return value for the constructor."
            )
        self._visit(stmt.value)

    def visit_jump(self, stmt: Jump) -> None:
        if not self.in_loop:
            self.reporter.error(stmt.keyword, f"'{stmt.keyword.lexeme}' outside loop.")

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def visit_variable(self, expr: Variable) -> None:
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.reporter.error(
                expr.name, "Can't read local variable in its own initializer."
            )
        self.resolve_local(expr, expr.name)

    def visit_assign(self, expr: Assign) -> None:
        self._visit(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary(self, expr: Binary) -> None:
        self._visit(expr.left)
        self._visit(expr.right)

    def visit_unary(self, expr: Unary) -> None:
        self._visit(expr.operand)

    def visit_grouping(self, expr: Grouping) -> None:
        self._visit(expr.expression)

    def visit_literal(self, expr: Literal) -> None:
        pass

    def visit_ternary(self, expr: Ternary) -> None:
        self._visit(expr.condition)
        self._visit(expr.then_branch)
        self._visit(expr.else_branch)

    def visit_call(self, expr: Call) -> None:
        self._visit(expr.callee)
        for argument in expr.arguments:
            self._visit(argument)

    def visit_get(self, expr: Get) -> None:
        self._visit(expr.obj)

    def visit_set(self, expr: Set) -> None:
        self._visit(expr.value)
        self._visit(expr.obj)

    def visit_this(self, expr: This) -> None:
        if self.current_class == ClassType.NONE:
            self.reporter.error(expr.keyword, "'this' outside class declaration.")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_super(self, expr: Super) -> None:
        if self.current_class != ClassType.SUBCLASS:
            self.reporter.error(expr.keyword, "Use of 'super' outside subclasses.")
            return
        self.resolve_local(expr, expr.keyword)

    def visit_function(self, expr: Function) -> None:
        self.resolve_function(expr.params, expr.body, FunctionType.FUNCTION)


def _is_nil(expr: Expr | None) -> bool:
    return expr is None or (isinstance(expr, Literal) and expr.value is None)


__all__ = ["ClassType", "FunctionType", "Resolver"]
