"""
Error types and the diagnostics facade for the nad interpreter.

Classes:
    ParseError: Internal signal used by the parser to unwind to a statement boundary.
    NadRuntimeError: Raised by the evaluator for every user-visible runtime fault.
    ReturnControlFlow: Carries a `return` value out of a function body.
    LoopControlFlow: Carries a `break` / `continue` out of a loop body.
    Reporter: Prints diagnostics and tracks the syntax / runtime error flags.

The control-flow classes do not derive from `NadRuntimeError`; the top-level
runtime error handler never intercepts a `return`, `break` or
`continue`.

Diagnostic formats:
    On line L, at end: MESSAGE          syntax error at end of input
    On line L, at 'LEXEME': MESSAGE     syntax error at a token
    On line L, token 'LEXEME': MESSAGE  runtime error
    On line L, CONTEXT: MESSAGE         scanner error (context may be empty)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nad.nad_lexer import Token


class ParseError(Exception):
    """Raised inside the parser after a syntax error has been reported."""


class NadRuntimeError(Exception):
    """A runtime error raised while evaluating a nad program.

    Attributes:
        token (Token): The token closest to the fault, used for the line number.
    """

    def __init__(self, token: Token, message: str):
        super().__init__(message)
        self.token = token
        self.message = message


class ReturnControlFlow(Exception):
    """
    Control flow handling for return statements.
    """

    def __init__(self, value: Any):
        super().__init__()
        self.value = value


class LoopControlFlow(Exception):
    """
    Control flow handling for break and continue statements.
    """

    def __init__(self, keyword: Token):
        super().__init__()
        self.keyword = keyword

    @property
    def is_break(self) -> bool:
        return self.keyword.type == "BREAK"


class Reporter:
    """Diagnostics facade shared by every stage of the pipeline.

    Attributes:
        had_syntax_error (bool): Set by the lexer, parser or resolver.
        had_runtime_error (bool): Set when a runtime error reaches the top level.
    """

    def __init__(self) -> None:
        self.had_syntax_error = False
        self.had_runtime_error = False

    def report(self, line: int, where: str, message: str) -> None:
        """Prints one diagnostic line and flags a syntax error."""
        print(f"On line {line}, {where}: {message}")
        self.had_syntax_error = True

    def error(self, token: Token, message: str) -> None:
        """Reports a syntax error positioned at `token`."""
        if token.type == "EOF":
            self.report(token.line, "at end", message)
        else:
            self.report(token.line, f"at '{token.lexeme}'", message)

    def runtime_error(self, error: NadRuntimeError) -> None:
        print(
            f"On line {error.token.line}, token '{error.token.lexeme}': {error.message}"
        )
        self.had_runtime_error = True

    def reset(self) -> None:
        self.had_syntax_error = False
        self.had_runtime_error = False

    @property
    def exit_code(self) -> int:
        """Process exit code for a file run: 10 syntax, 11 runtime, else 0."""
        if self.had_syntax_error:
            return 10
        if self.had_runtime_error:
            return 11
        return 0


__all__ = [
    "LoopControlFlow",
    "NadRuntimeError",
    "ParseError",
    "Reporter",
    "ReturnControlFlow",
]
