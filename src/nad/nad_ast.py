"""
Defines the abstract syntax tree (AST) node structure for the nad programming language.

Classes:
    ASTNode:
        Base class of every node. Tracks the node `kind` (used for visitor dispatch),
        the source position and a process-unique `uid`.

    Expression nodes:
        Binary, Unary, Grouping, Literal, Ternary, Variable, Assign, Call, Get, Set,
        This, Super, Function

    Statement nodes:
        ExpressionStmt, Print, Var, Block, If, While, FuncDecl, Return, Jump, ClassDecl

    ASTDict:
        TypedDict representation for serializing nodes to plain Python dictionaries,
        suitable for JSON output or debugging.

Node identity:
    Equality between nodes is structural (handy for tests), so nodes are not
    hashable. The resolver's side table is keyed by `uid` instead, which is
    assigned at construction and never reused within a process.

Usage:
    Consumers dispatch on `node.kind`, e.g. `getattr(self, f"visit_{node.kind}")(node)`.
"""

import itertools
from typing import Any, TypedDict

from nad.nad_lexer import Token

_uids = itertools.count(1)


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The type of AST node (e.g., "binary", "call", "if").
        line (int): Line number in the source code where the node originates.
        Other keys mirror the node's `fields`.
    """

    kind: str
    line: int


class ASTNode:
    """
    Represents a node in the abstract syntax tree (AST) for the nad language.

    Attributes:
        kind (str): Type of the AST node, used for visitor dispatch.
        fields (tuple[str, ...]): Names of the structural attributes of the node.
        line (int): Line number in the source file.
        col (int): Column number in the source file.
        uid (int): Identity of this node for the resolution side table.
        token (Token | None): The token the node was built from, if any.
    """

    kind = "node"
    fields: tuple[str, ...] = ()

    def __init__(self, token: Token | None = None) -> None:
        self.token = token
        self.line = token.line if token is not None else 0
        self.col = token.col if token is not None else 0
        self.uid = next(_uids)

    def anchor(self) -> Token:
        """Token used to position a diagnostic about the whole node."""
        if self.token is not None:
            return self.token
        return Token(self.kind.upper(), self.kind, None, self.line, self.col)

    def __repr__(self) -> str:
        parts = [f"{name}={getattr(self, name)!r}" for name in self.fields]
        return f"{type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return all(getattr(self, f) == getattr(other, f) for f in self.fields)

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"kind": self.kind, "line": self.line}
        for name in self.fields:
            data[name] = _serialize(getattr(self, name))
        return data  # type: ignore[return-value]


def _serialize(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, Token):
        return value.lexeme
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


# ----------------------------------------------------------------------
# Expressions
# ----------------------------------------------------------------------


class Expr(ASTNode):
    """Base class for expression nodes."""


class Binary(Expr):
    kind = "binary"
    fields = ("left", "op", "right")

    def __init__(self, left: Expr, op: Token, right: Expr) -> None:
        super().__init__(op)
        self.left = left
        self.op = op
        self.right = right


class Unary(Expr):
    kind = "unary"
    fields = ("op", "operand")

    def __init__(self, op: Token, operand: Expr) -> None:
        super().__init__(op)
        self.op = op
        self.operand = operand


class Grouping(Expr):
    kind = "grouping"
    fields = ("expression",)

    def __init__(self, expression: Expr, paren: Token | None = None) -> None:
        super().__init__(paren)
        self.expression = expression


class Literal(Expr):
    kind = "literal"
    fields = ("value",)

    def __init__(self, value: Any, token: Token | None = None) -> None:
        super().__init__(token)
        self.value = value


class Ternary(Expr):
    kind = "ternary"
    fields = ("condition", "then_branch", "else_branch")

    def __init__(
        self, condition: Expr, question: Token, then_branch: Expr, else_branch: Expr
    ) -> None:
        super().__init__(question)
        self.condition = condition
        self.question = question
        self.then_branch = then_branch
        self.else_branch = else_branch


class Variable(Expr):
    kind = "variable"
    fields = ("name",)

    def __init__(self, name: Token) -> None:
        super().__init__(name)
        self.name = name


class Assign(Expr):
    """Assignment to a name; `op` is one of `=`, `+=`, `-=`."""

    kind = "assign"
    fields = ("name", "op", "value")

    def __init__(self, name: Token, op: Token, value: Expr) -> None:
        super().__init__(name)
        self.name = name
        self.op = op
        self.value = value


class Call(Expr):
    kind = "call"
    fields = ("callee", "arguments")

    def __init__(self, callee: Expr, paren: Token, arguments: list[Expr]) -> None:
        super().__init__(paren)
        self.callee = callee
        self.paren = paren
        self.arguments = arguments


class Get(Expr):
    kind = "get"
    fields = ("obj", "name")

    def __init__(self, obj: Expr, name: Token) -> None:
        super().__init__(name)
        self.obj = obj
        self.name = name


class Set(Expr):
    kind = "set"
    fields = ("obj", "name", "op", "value")

    def __init__(self, obj: Expr, name: Token, op: Token, value: Expr) -> None:
        super().__init__(name)
        self.obj = obj
        self.name = name
        self.op = op
        self.value = value


class This(Expr):
    kind = "this"
    fields = ("keyword",)

    def __init__(self, keyword: Token) -> None:
        super().__init__(keyword)
        self.keyword = keyword


class Super(Expr):
    kind = "super"
    fields = ("keyword", "method")

    def __init__(self, keyword: Token, method: Token) -> None:
        super().__init__(keyword)
        self.keyword = keyword
        self.method = method


class Function(Expr):
    """Anonymous function literal: `func (params) { body }`."""

    kind = "function"
    fields = ("params", "body")

    def __init__(self, keyword: Token, params: list[Token], body: list["Stmt"]) -> None:
        super().__init__(keyword)
        self.keyword = keyword
        self.params = params
        self.body = body


# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------


class Stmt(ASTNode):
    """Base class for statement nodes."""


class ExpressionStmt(Stmt):
    kind = "expression_stmt"
    fields = ("expression",)

    def __init__(self, expression: Expr) -> None:
        super().__init__(expression.token)
        self.line = expression.line
        self.col = expression.col
        self.expression = expression


class Print(Stmt):
    kind = "print"
    fields = ("expression",)

    def __init__(self, keyword: Token, expression: Expr) -> None:
        super().__init__(keyword)
        self.expression = expression


class Var(Stmt):
    kind = "var"
    fields = ("name", "initializer")

    def __init__(self, name: Token, initializer: Expr) -> None:
        super().__init__(name)
        self.name = name
        self.initializer = initializer


class Block(Stmt):
    kind = "block"
    fields = ("statements",)

    def __init__(self, statements: list["Stmt"], brace: Token | None = None) -> None:
        super().__init__(brace)
        self.statements = statements


class If(Stmt):
    kind = "if"
    fields = ("condition", "then_branch", "else_branch")

    def __init__(
        self,
        keyword: Token,
        condition: Expr,
        then_branch: Stmt | None,
        else_branch: Stmt | None,
    ) -> None:
        super().__init__(keyword)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class While(Stmt):
    """A loop; `increment` is set when the loop was desugared from `for`."""

    kind = "while"
    fields = ("condition", "body", "increment")

    def __init__(
        self,
        keyword: Token,
        condition: Expr,
        body: Stmt | None,
        increment: Expr | None = None,
    ) -> None:
        super().__init__(keyword)
        self.condition = condition
        self.body = body
        self.increment = increment


class FuncDecl(Stmt):
    kind = "func"
    fields = ("name", "params", "body")

    def __init__(self, name: Token, params: list[Token], body: list[Stmt]) -> None:
        super().__init__(name)
        self.name = name
        self.params = params
        self.body = body


class Return(Stmt):
    kind = "return"
    fields = ("value",)

    def __init__(self, keyword: Token, value: Expr | None) -> None:
        super().__init__(keyword)
        self.keyword = keyword
        self.value = value


class Jump(Stmt):
    """`break` or `continue`; `keyword.type` tells which."""

    kind = "jump"
    fields = ("keyword",)

    def __init__(self, keyword: Token) -> None:
        super().__init__(keyword)
        self.keyword = keyword


class ClassDecl(Stmt):
    kind = "class"
    fields = ("name", "superclass", "methods")

    def __init__(
        self, name: Token, superclass: Variable | None, methods: list[FuncDecl]
    ) -> None:
        super().__init__(name)
        self.name = name
        self.superclass = superclass
        self.methods = methods


__all__ = [
    "ASTDict",
    "ASTNode",
    "Assign",
    "Binary",
    "Block",
    "Call",
    "ClassDecl",
    "Expr",
    "ExpressionStmt",
    "FuncDecl",
    "Function",
    "Get",
    "Grouping",
    "If",
    "Jump",
    "Literal",
    "Print",
    "Return",
    "Set",
    "Stmt",
    "Super",
    "Ternary",
    "This",
    "Unary",
    "Var",
    "Variable",
    "While",
]
