"""
Renders nad AST nodes as parenthesised prefix S-expressions.

This module defines the `AstPrinter` class, used by the REPL's verbose mode and
by tests to inspect parser output without comparing whole node trees.

Examples:
    1 + 2 * 3               -> (+ 1 (* 2 3))
    a ? b : c               -> (?: a b c)
    f(1, 2)                 -> (call f 1 2)
    obj.field = 1           -> (= (. obj field) 1)
    for (;;) { break; }     -> (block (while true (block (break)) nil))

Literals print the way the interpreter stringifies them (`nil`, `true`, `55`),
except that strings are quoted. Absent optional parts print as `nil`.
"""

from nad.nad_ast import ASTNode
from nad.nad_runtime import stringify


class AstPrinter:
    """Emits S-expression text from nad AST nodes.

    Methods:
        print_program(statements): One line per statement.
        emit(node): Dispatches to the appropriate emit_* method for a node.
    """

    def print_program(self, statements: list[ASTNode]) -> str:
        return "\n".join(self.emit(stmt) for stmt in statements)

    def emit(self, node: ASTNode | None) -> str:
        if node is None:
            return "nil"
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(f"No emitter for AST kind: {node.kind}")
        return method(node)

    def parenthesize(self, name: str, *parts: ASTNode | str | None) -> str:
        rendered = [name]
        for part in parts:
            rendered.append(part if isinstance(part, str) else self.emit(part))
        return f"({' '.join(rendered)})"

    # Expressions

    def emit_literal(self, node: ASTNode) -> str:
        if isinstance(node.value, str):
            return f'"{node.value}"'
        return stringify(node.value)

    def emit_grouping(self, node: ASTNode) -> str:
        return self.parenthesize("group", node.expression)

    def emit_unary(self, node: ASTNode) -> str:
        return self.parenthesize(node.op.lexeme, node.operand)

    def emit_binary(self, node: ASTNode) -> str:
        return self.parenthesize(node.op.lexeme, node.left, node.right)

    def emit_ternary(self, node: ASTNode) -> str:
        return self.parenthesize("?:", node.condition, node.then_branch, node.else_branch)

    def emit_variable(self, node: ASTNode) -> str:
        return node.name.lexeme

    def emit_assign(self, node: ASTNode) -> str:
        return self.parenthesize(node.op.lexeme, node.name.lexeme, node.value)

    def emit_call(self, node: ASTNode) -> str:
        return self.parenthesize("call", node.callee, *node.arguments)

    def emit_get(self, node: ASTNode) -> str:
        return self.parenthesize(".", node.obj, node.name.lexeme)

    def emit_set(self, node: ASTNode) -> str:
        target = self.parenthesize(".", node.obj, node.name.lexeme)
        return self.parenthesize(node.op.lexeme, target, node.value)

    def emit_this(self, node: ASTNode) -> str:
        return "this"

    def emit_super(self, node: ASTNode) -> str:
        return self.parenthesize(".", "super", node.method.lexeme)

    def emit_function(self, node: ASTNode) -> str:
        params = f"({' '.join(p.lexeme for p in node.params)})"
        return self.parenthesize("func", params, *node.body)

    # Statements

    def emit_expression_stmt(self, node: ASTNode) -> str:
        return self.emit(node.expression)

    def emit_print(self, node: ASTNode) -> str:
        return self.parenthesize("print", node.expression)

    def emit_var(self, node: ASTNode) -> str:
        return self.parenthesize("var", node.name.lexeme, node.initializer)

    def emit_block(self, node: ASTNode) -> str:
        return self.parenthesize("block", *node.statements)

    def emit_if(self, node: ASTNode) -> str:
        return self.parenthesize("if", node.condition, node.then_branch, node.else_branch)

    def emit_while(self, node: ASTNode) -> str:
        return self.parenthesize("while", node.condition, node.body, node.increment)

    def emit_func(self, node: ASTNode) -> str:
        params = f"({' '.join(p.lexeme for p in node.params)})"
        return self.parenthesize("func", node.name.lexeme, params, *node.body)

    def emit_return(self, node: ASTNode) -> str:
        return self.parenthesize("return", node.value)

    def emit_jump(self, node: ASTNode) -> str:
        return f"({node.keyword.lexeme})"

    def emit_class(self, node: ASTNode) -> str:
        header = node.name.lexeme
        if node.superclass is not None:
            header += f" < {node.superclass.name.lexeme}"
        return self.parenthesize("class", header, *node.methods)


__all__ = ["AstPrinter"]
