"""Interpreter.

This is a tree-walk interpreter for evaluating the statements produced by the
parser and annotated by the resolver.

1. Execution Model
Statements are executed via `execute()` and expressions evaluated via
`evaluate()`. Both dispatch on the node's `kind` to a `visit_<kind>` method.

2. Environment
`globals` is the outermost environment and lives as long as the interpreter, so
definitions persist across REPL inputs. `environment` points at the innermost
scope; blocks and calls swap it and always restore it in a `finally`.

3. Name Lookup
The resolver records a hop distance for each local reference in `locals`,
keyed by the expression's `uid`. A reference with no entry is a global.

4. Control Flow
`return`, `break` and `continue` unwind through `ReturnControlFlow` and
`LoopControlFlow`. For-loops are Whiles with an `increment`, which runs after a
normal iteration and after `continue`, but not after `break`.

5. Error Handling
Every runtime fault raises `NadRuntimeError`. `interpret()` catches it, reports
it through the `Reporter` and abandons the rest of the current input. Host
stack exhaustion becomes a `Stack overflow.` error, at the call's `(` inside a
call and at the top-level statement otherwise.
"""

from __future__ import annotations

import math
import time
from typing import Any

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
from nad.nad_errors import (
    LoopControlFlow,
    NadRuntimeError,
    Reporter,
    ReturnControlFlow,
)
from nad.nad_lexer import Token
from nad.nad_runtime import (
    Environment,
    NadClass,
    NadFunction,
    NadInstance,
    NativeFunction,
    is_callable,
    is_equal,
    is_truthy,
    stringify,
)


def _clock(interpreter: Interpreter, arguments: list[Any]) -> float:
    return time.time()


def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _modulo(left: float, right: float) -> float:
    try:
        return math.fmod(left, right)
    except ValueError:
        return math.nan


class Interpreter:
    """Tree-walk interpreter for nad.

    Attributes:
        reporter (Reporter): Receives runtime error diagnostics.
        interactive (bool): In interactive mode, top-level expression statements print.
        globals (Environment): The process-wide global scope.
        environment (Environment): The innermost active scope.
        locals (dict[int, int]): Resolution side table, node uid -> hop distance.
    """

    def __init__(self, reporter: Reporter | None = None, interactive: bool = False) -> None:
        self.reporter = reporter if reporter is not None else Reporter()
        self.interactive = interactive
        self.globals = Environment()
        self.environment = self.globals
        self.locals: dict[int, int] = {}

        self.globals.bind("clock", NativeFunction("clock", 0, _clock))

    def interpret(self, statements: list[Stmt]) -> None:
        try:
            for statement in statements:
                try:
                    self.execute(statement)
                except RecursionError:
                    raise NadRuntimeError(statement.anchor(), "Stack overflow.") from None
        except NadRuntimeError as error:
            self.reporter.runtime_error(error)

    def resolve(self, expr: Expr, depth: int) -> None:
        self.locals[expr.uid] = depth

    def execute(self, stmt: Stmt | None) -> None:
        if stmt is not None:
            getattr(self, f"visit_{stmt.kind}")(stmt)

    def evaluate(self, expr: Expr) -> Any:
        return getattr(self, f"visit_{expr.kind}")(expr)

    def execute_block(self, statements: list[Stmt], environment: Environment) -> None:
        previous = self.environment
        self.environment = environment
        try:
            for statement in statements:
                self.execute(statement)
        finally:
            self.environment = previous

    def look_up_variable(self, name: Token, expr: ASTNode) -> Any:
        depth = self.locals.get(expr.uid)
        if depth is None:
            return self.globals.get(name)
        return self.environment.get_at(depth, name.lexeme)

    # ------------------------------------------------------------------
    # Operand checks
    # ------------------------------------------------------------------

    @staticmethod
    def check_number_operand(op: Token, operand: Any) -> None:
        if isinstance(operand, float):
            return
        raise NadRuntimeError(op, "Missing a numeric operand.")

    @staticmethod
    def check_number_operands(op: Token, left: Any, right: Any) -> None:
        if isinstance(left, float) and isinstance(right, float):
            return
        raise NadRuntimeError(op, "Both operands must be numeric.")

    def combine(self, op: Token, current: Any, value: Any) -> Any:
        """Applies the arithmetic part of a compound assignment."""
        if op.type == "PLUS_ASSIGN":
            if isinstance(current, str) and isinstance(value, str):
                return current + value
            if isinstance(current, float) and isinstance(value, float):
                return current + value
            raise NadRuntimeError(op, "Both operands must be either strings or numerics.")
        if op.type == "MINUS_ASSIGN":
            self.check_number_operands(op, current, value)
            return current - value
        return value

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def visit_expression_stmt(self, stmt: ExpressionStmt) -> None:
        value = self.evaluate(stmt.expression)
        if self.interactive and self.environment is self.globals:
            print(stringify(value))

    def visit_print(self, stmt: Print) -> None:
        print(stringify(self.evaluate(stmt.expression)))

    def visit_var(self, stmt: Var) -> None:
        self.environment.define(stmt.name, self.evaluate(stmt.initializer))

    def visit_block(self, stmt: Block) -> None:
        self.execute_block(stmt.statements, Environment(self.environment))

    def visit_if(self, stmt: If) -> None:
        if is_truthy(self.evaluate(stmt.condition)):
            self.execute(stmt.then_branch)
        else:
            self.execute(stmt.else_branch)

    def visit_while(self, stmt: While) -> None:
        while is_truthy(self.evaluate(stmt.condition)):
            try:
                self.execute(stmt.body)
            except LoopControlFlow as jump:
                if jump.is_break:
                    break
            if stmt.increment is not None:
                self.evaluate(stmt.increment)

    def visit_func(self, stmt: FuncDecl) -> None:
        self.environment.define(stmt.name, NadFunction(stmt, self.environment))

    def visit_return(self, stmt: Return) -> None:
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        raise ReturnControlFlow(value)

    def visit_jump(self, stmt: Jump) -> None:
        raise LoopControlFlow(stmt.keyword)

    def visit_class(self, stmt: ClassDecl) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, NadClass):
                raise NadRuntimeError(
                    stmt.superclass.name,
                    f"'{stmt.superclass.name.lexeme}' is not a class.",
                )

        self.environment.define(stmt.name, None)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.bind("super", superclass)
        try:
            methods = {
                method.name.lexeme: NadFunction(
                    method, self.environment, method.name.lexeme == "init"
                )
                for method in stmt.methods
            }
        finally:
            self.environment = enclosing

        klass = NadClass(stmt.name.lexeme, methods, superclass)
        self.environment.assign(stmt.name, klass)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def visit_literal(self, expr: Literal) -> Any:
        return expr.value

    def visit_grouping(self, expr: Grouping) -> Any:
        return self.evaluate(expr.expression)

    def visit_variable(self, expr: Variable) -> Any:
        return self.look_up_variable(expr.name, expr)

    def visit_assign(self, expr: Assign) -> Any:
        value = self.evaluate(expr.value)
        depth = self.locals.get(expr.uid)

        if expr.op.type != "ASSIGN":
            if depth is None:
                current = self.globals.get(expr.name)
            else:
                current = self.environment.get_at(depth, expr.name.lexeme)
            value = self.combine(expr.op, current, value)

        if depth is None:
            self.globals.assign(expr.name, value)
        else:
            self.environment.assign_at(depth, expr.name, value)
        return value

    def visit_unary(self, expr: Unary) -> Any:
        operand = self.evaluate(expr.operand)
        if expr.op.type == "MINUS":
            self.check_number_operand(expr.op, operand)
            return -operand
        return not is_truthy(operand)

    def visit_binary(self, expr: Binary) -> Any:
        op = expr.op
        left = self.evaluate(expr.left)

        # Short-circuit: the deciding operand is the result.
        if op.type == "AND":
            return self.evaluate(expr.right) if is_truthy(left) else left
        if op.type == "OR":
            return left if is_truthy(left) else self.evaluate(expr.right)

        right = self.evaluate(expr.right)

        match op.type:
            case "COMMA":
                return right
            case "EQ":
                return is_equal(left, right)
            case "NOT_EQ":
                return not is_equal(left, right)
            case "PLUS":
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                raise NadRuntimeError(
                    op, "Both operands must be either strings or numerics."
                )

        self.check_number_operands(op, left, right)
        match op.type:
            case "MINUS":
                return left - right
            case "STAR":
                return left * right
            case "SLASH":
                return _divide(left, right)
            case "MOD":
                return _modulo(left, right)
            case "LT":
                return left < right
            case "GT":
                return left > right
            case "LT_EQ":
                return left <= right
            case "GT_EQ":
                return left >= right
        raise NadRuntimeError(op, f"Unknown operator '{op.lexeme}'.")

    def visit_ternary(self, expr: Ternary) -> Any:
        # Only the boolean true selects the first branch.
        if self.evaluate(expr.condition) is True:
            return self.evaluate(expr.then_branch)
        return self.evaluate(expr.else_branch)

    def visit_call(self, expr: Call) -> Any:
        callee = self.evaluate(expr.callee)
        if not is_callable(callee):
            raise NadRuntimeError(expr.paren, "The expression before '(' is not callable.")

        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if callee.arity() != len(arguments):
            raise NadRuntimeError(
                expr.paren,
                f"Expect {callee.arity()} arguments but found {len(arguments)} arguments.",
            )

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise NadRuntimeError(expr.paren, "Stack overflow.") from None

    def visit_get(self, expr: Get) -> Any:
        obj = self.evaluate(expr.obj)
        if not isinstance(obj, NadInstance):
            raise NadRuntimeError(expr.name, "Invalid field access.")
        return obj.get(expr.name)

    def visit_set(self, expr: Set) -> Any:
        obj = self.evaluate(expr.obj)
        if not isinstance(obj, NadInstance):
            raise NadRuntimeError(expr.name, "Only objects have properties.")
        value = self.evaluate(expr.value)
        if expr.op.type != "ASSIGN":
            value = self.combine(expr.op, obj.get(expr.name), value)
        obj.set(expr.name, value)
        return value

    def visit_this(self, expr: This) -> Any:
        return self.look_up_variable(expr.keyword, expr)

    def visit_super(self, expr: Super) -> Any:
        depth = self.locals[expr.uid]
        superclass: NadClass = self.environment.get_at(depth, "super")
        instance: NadInstance = self.environment.get_at(depth - 1, "this")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise NadRuntimeError(
                expr.method,
                f"The superclass does not own method '{expr.method.lexeme}'.",
            )
        return method.bind(instance)

    def visit_function(self, expr: Function) -> Any:
        return NadFunction(expr, self.environment)


__all__ = ["Interpreter"]
