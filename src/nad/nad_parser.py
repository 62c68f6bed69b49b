"""
nad Language Parser

Parses nad source tokens into structured abstract syntax trees (ASTs).

This module implements a recursive-descent parser that transforms a flat list of
lexer-generated `Token` objects into a list of statement nodes from `nad.nad_ast`.

Precedence (lowest to highest)
------------------------------
comma `,` (left) < assignment `= += -=` (right) < ternary `?:` (right)
< equality `== !=` < disjunction `||` < conjunction `&&`
< comparison `< > <= >=` < term `+ -` < factor `* / %`
< unary prefix `- !` (right) < call `()` / `.` (postfix chain) < primary

Statements
----------
- expression statements, `print EXPR;`, `var NAME (= EXPR)?;`, `{ ... }`
- `if (EXPR) stmt (else stmt)?`, `while (EXPR) stmt`
- `for (INIT; COND?; UPDATE) stmt`, desugared to a Block holding INIT and a While
  whose `increment` holds UPDATE
- `return EXPR?;`, `break;`, `continue;`
- `func NAME(params) { body }`, `class NAME (< SUPER)? { methods }`

Error recovery
--------------
Every syntax error is reported through the `Reporter`; the parser then
synchronizes to the next statement boundary (after a `;`, or before a token that
starts a statement) and keeps going, so several errors surface in one run.
Stray semicolons between statements are skipped.

Entry Points
------------
- `parse()`: Parse a full program into a list of top-level statements, or None
  if the token stream could not be parsed at all.
- `parse_expression()`: Parse a single expression (comma level).
"""

from __future__ import annotations

from collections.abc import Callable

from nad.nad_ast import (
    Assign,
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
from nad.nad_constants import MAX_ARGS, assignment_ops, statement_starts
from nad.nad_errors import ParseError, Reporter
from nad.nad_lexer import Token


class Parser:
    """
    nad Parser Class

    Attributes
    ----------
    tokens : list[Token]
        The input token stream; must end with an EOF token.
    position : int
        Current index into the token stream.
    reporter : Reporter
        Receives syntax diagnostics.
    """

    def __init__(self, tokens: list[Token], reporter: Reporter | None = None) -> None:
        if not tokens or tokens[-1].type != "EOF":
            line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token("EOF", "", None, line)]
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.reporter = reporter if reporter is not None else Reporter()

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def current(self) -> Token:
        return self.tokens[self.position]

    def previous(self) -> Token:
        return self.tokens[self.position - 1]

    def at_end(self) -> bool:
        return self.current().type == "EOF"

    def advance(self) -> Token:
        if not self.at_end():
            self.position += 1
        return self.previous()

    def check(self, type_: str) -> bool:
        return self.current().type == type_

    def match(self, *types: str) -> bool:
        if self.current().type in types and not self.at_end():
            self.advance()
            return True
        return False

    def consume(self, type_: str, message: str) -> Token:
        if self.check(type_):
            return self.advance()
        raise self.error(self.current(), message)

    def error(self, token: Token, message: str) -> ParseError:
        """Reports a syntax error and returns the signal to raise."""
        self.reporter.error(token, message)
        return ParseError(message)

    def synchronize(self) -> None:
        """Discards tokens until a likely statement boundary."""
        self.advance()
        while not self.at_end():
            if self.previous().type == "SEMICOLON":
                return
            if self.current().type in statement_starts:
                return
            self.advance()

    def skip_nop(self) -> None:
        """Skips empty statements such as the second `;` in `a;;b;`."""
        while self.match("SEMICOLON"):
            pass

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse(self) -> list[Stmt] | None:
        """Parse a full nad program and return its top-level statements."""
        statements: list[Stmt] = []
        try:
            while True:
                self.skip_nop()
                if self.at_end():
                    break
                stmt = self.declaration()
                if stmt is not None:
                    statements.append(stmt)
        except ParseError:
            return None
        except RecursionError:
            self.reporter.error(self.current(), "Expression nests too deeply.")
            return None
        return statements

    def declaration(self) -> Stmt | None:
        try:
            if self.match("VAR"):
                return self.var_declaration()
            if self.match("FUNC"):
                return self.func_declaration()
            if self.match("CLASS"):
                return self.class_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def statement(self) -> Stmt | None:
        if self.match("SEMICOLON"):
            return None
        if self.match("PRINT"):
            return self.print_statement()
        if self.match("IF"):
            return self.if_statement()
        if self.match("LEFT_BRACE"):
            return Block(self.block(), self.previous())
        if self.match("WHILE"):
            return self.while_statement()
        if self.match("FOR"):
            return self.for_statement()
        if self.match("RETURN"):
            return self.return_statement()
        if self.match("BREAK", "CONTINUE"):
            return self.jump_statement()
        return self.expression_statement()

    def block(self) -> list[Stmt]:
        """Parse statements up to the closing `}`; the `{` is already consumed."""
        statements: list[Stmt] = []
        while True:
            self.skip_nop()
            if self.check("RIGHT_BRACE") or self.at_end():
                break
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume("RIGHT_BRACE", "Unclosed block.")
        return statements

    def var_declaration(self) -> Var:
        name = self.consume("IDENT", "Missing identifier after the keyword 'var'.")
        initializer: Expr = Literal(None, name)
        if self.match("ASSIGN"):
            initializer = self.parse_expression()
        self.consume("SEMICOLON", "Missing a ';' after the operand.")
        return Var(name, initializer)

    def parameters(self) -> list[Token]:
        params: list[Token] = []
        if not self.check("RIGHT_PAREN"):
            while True:
                if len(params) >= MAX_ARGS:
                    raise self.error(
                        self.current(),
                        f"Cannot accept more than {MAX_ARGS} arguments.",
                    )
                params.append(self.consume("IDENT", "Expect an identifier."))
                if not self.match("COMMA"):
                    break
        self.consume("RIGHT_PAREN", "Expect ')' after parameter list.")
        return params

    def func_declaration(self) -> FuncDecl:
        name = self.consume("IDENT", "Expect function's name.")
        self.consume("LEFT_PAREN", "Expect '(' after function's name.")
        params = self.parameters()
        self.consume("LEFT_BRACE", "Expect a function definition.")
        body = self.block()
        return FuncDecl(name, params, body)

    def class_declaration(self) -> ClassDecl:
        name = self.consume("IDENT", "Expect class's name.")
        superclass = None
        if self.match("LT"):
            super_name = self.consume("IDENT", "Expect an identifier after '<'.")
            superclass = Variable(super_name)
        self.consume("LEFT_BRACE", "Expect '{' after class's name.")

        methods: list[FuncDecl] = []
        while not self.check("RIGHT_BRACE") and not self.at_end():
            methods.append(self.func_declaration())

        self.consume("RIGHT_BRACE", "Expect '}' after class's definition.")
        return ClassDecl(name, superclass, methods)

    def expression_statement(self) -> ExpressionStmt:
        expr = self.parse_expression()
        self.consume("SEMICOLON", "Missing a ';' after the statement.")
        return ExpressionStmt(expr)

    def print_statement(self) -> Print:
        keyword = self.previous()
        expr = self.parse_expression()
        self.consume("SEMICOLON", "Missing a ';' after the statement.")
        return Print(keyword, expr)

    def if_statement(self) -> If:
        keyword = self.previous()
        self.consume("LEFT_PAREN", "Expect a '(' after 'if' keyword.")
        condition = self.parse_expression()
        self.consume("RIGHT_PAREN", "Expect a ')' after the expression.")
        then_branch = self.statement()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.statement()
        return If(keyword, condition, then_branch, else_branch)

    def while_statement(self) -> While:
        keyword = self.previous()
        self.consume("LEFT_PAREN", "Expect a '(' after 'while' keyword.")
        condition = self.parse_expression()
        self.consume("RIGHT_PAREN", "Expect a ')' after the expression.")
        body = self.statement()
        return While(keyword, condition, body)

    def for_statement(self) -> Block:
        """Parse `for (init; cond; update) body` into `{ init; while (cond) body }`."""
        keyword = self.previous()
        self.consume("LEFT_PAREN", "Expect a '(' after 'for' keyword.")

        initializer: Stmt | None
        if self.match("SEMICOLON"):
            initializer = None
        elif self.match("VAR"):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition: Expr = Literal(True, keyword)
        if not self.check("SEMICOLON"):
            condition = self.parse_expression()
        self.consume("SEMICOLON", "Expect ';' after the loop condition.")

        increment = None
        if not self.check("RIGHT_PAREN"):
            increment = self.parse_expression()
        self.consume("RIGHT_PAREN", "Expect ')' after the loop initialization.")

        body = self.statement()
        loop = While(keyword, condition, body, increment)
        statements: list[Stmt] = [loop] if initializer is None else [initializer, loop]
        return Block(statements, keyword)

    def return_statement(self) -> Return:
        keyword = self.previous()
        value = None
        if not self.check("SEMICOLON"):
            value = self.parse_expression()
        self.consume("SEMICOLON", "Expect a ';' after the statement.")
        return Return(keyword, value)

    def jump_statement(self) -> Jump:
        keyword = self.previous()
        self.consume("SEMICOLON", "Expect ';' after the statement.")
        return Jump(keyword)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> Expr:
        return self.comma()

    def comma(self) -> Expr:
        expr = self.assignment()
        while self.match("COMMA"):
            op = self.previous()
            expr = Binary(expr, op, self.assignment())
        return expr

    def assignment(self) -> Expr:
        """Parse a right-associative `=`, `+=` or `-=` assignment."""
        left = self.ternary()

        if self.match(*assignment_ops):
            op = self.previous()
            if not isinstance(left, (Variable, Get)):
                raise self.error(op, "Invalid left-hand side in the assignment expression.")
            value = self.assignment()
            if isinstance(left, Variable):
                return Assign(left.name, op, value)
            return Set(left.obj, left.name, op, value)

        return left

    def ternary(self) -> Expr:
        condition = self.equality()
        if self.match("QUESTION"):
            question = self.previous()
            then_branch = self.ternary()
            self.consume("COLON", "Missing a ':' after the operand.")
            else_branch = self.ternary()
            return Ternary(condition, question, then_branch, else_branch)
        return condition

    def _binary_level(self, operand: Callable[[], Expr], *types: str) -> Expr:
        expr = operand()
        while self.match(*types):
            op = self.previous()
            expr = Binary(expr, op, operand())
        return expr

    def equality(self) -> Expr:
        return self._binary_level(self.disjunction, "EQ", "NOT_EQ")

    def disjunction(self) -> Expr:
        return self._binary_level(self.conjunction, "OR")

    def conjunction(self) -> Expr:
        return self._binary_level(self.comparison, "AND")

    def comparison(self) -> Expr:
        return self._binary_level(self.term, "LT", "GT", "LT_EQ", "GT_EQ")

    def term(self) -> Expr:
        return self._binary_level(self.factor, "PLUS", "MINUS")

    def factor(self) -> Expr:
        return self._binary_level(self.unary, "STAR", "SLASH", "MOD")

    def unary(self) -> Expr:
        if self.match("MINUS", "NOT"):
            op = self.previous()
            return Unary(op, self.unary())
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while True:
            if self.match("LEFT_PAREN"):
                args = self.arguments()
                paren = self.consume(
                    "RIGHT_PAREN", "Expect ')' after expression arguments."
                )
                expr = Call(expr, paren, args)
            elif self.match("DOT"):
                name = self.consume("IDENT", "Expect an identifier after '.'.")
                expr = Get(expr, name)
            else:
                return expr

    def arguments(self) -> list[Expr]:
        args: list[Expr] = []
        if self.check("RIGHT_PAREN"):
            return args
        while True:
            if len(args) >= MAX_ARGS:
                self.error(
                    self.current(),
                    f"Function call can accept no more than {MAX_ARGS} arguments.",
                )
            args.append(self.assignment())
            if not self.match("COMMA"):
                return args

    def primary(self) -> Expr:
        tok = self.current()
        if self.match("TRUE", "FALSE", "NUMBER", "STRING"):
            return Literal(tok.literal, tok)
        if self.match("NIL"):
            return Literal(None, tok)
        if self.match("LEFT_PAREN"):
            inner = self.parse_expression()
            self.consume("RIGHT_PAREN", "Expect token ')'.")
            return Grouping(inner, tok)
        if self.match("THIS"):
            return This(tok)
        if self.match("SUPER"):
            self.consume("DOT", "Expect '.' after 'super' keyword.")
            method = self.consume("IDENT", "Expect an identifier after '.'.")
            return Super(tok, method)
        if self.match("IDENT"):
            return Variable(tok)
        if self.match("FUNC"):
            return self.function_expression()
        if tok.type == "STATIC":
            raise self.error(tok, "'static' is a reserved keyword.")
        raise self.error(tok, "Expect an expression.")

    def function_expression(self) -> Function:
        keyword = self.previous()
        self.consume("LEFT_PAREN", "Expect '(' after 'func' keyword.")
        params = self.parameters()
        self.consume("LEFT_BRACE", "Expect '{' after parameter declaration.")
        body = self.block()
        return Function(keyword, params, body)


__all__ = ["Parser"]
