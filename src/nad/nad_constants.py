"""
Shared token tables for the nad language.

Exports:
    - token_hashmap: Maps punctuation and operator lexemes to their token kind.
    - keywords: Maps reserved words to their token kind.
    - statement_starts: Token kinds the parser synchronizes on after an error.
    - MAX_ARGS: Upper bound for parameter and argument lists.

Token kinds are plain upper-case strings, e.g. "IDENT", "NUMBER", "EOF".
"""

token_hashmap: dict[str, str] = {
    # Punctuation
    "(": "LEFT_PAREN",
    ")": "RIGHT_PAREN",
    "{": "LEFT_BRACE",
    "}": "RIGHT_BRACE",
    ",": "COMMA",
    ".": "DOT",
    ";": "SEMICOLON",
    ":": "COLON",
    "?": "QUESTION",
    # Arithmetic
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    "%": "MOD",
    # Compound assignment
    "+=": "PLUS_ASSIGN",
    "-=": "MINUS_ASSIGN",
    # Comparison
    "<": "LT",
    ">": "GT",
    "<=": "LT_EQ",
    ">=": "GT_EQ",
    "==": "EQ",
    "!=": "NOT_EQ",
    # Logical / unary
    "!": "NOT",
    "&&": "AND",
    "||": "OR",
    # Assignment
    "=": "ASSIGN",
}

keywords: dict[str, str] = {
    "var": "VAR",
    "func": "FUNC",
    "for": "FOR",
    "while": "WHILE",
    "class": "CLASS",
    "super": "SUPER",
    "return": "RETURN",
    "true": "TRUE",
    "false": "FALSE",
    "nil": "NIL",
    "if": "IF",
    "else": "ELSE",
    "this": "THIS",
    "print": "PRINT",
    "break": "BREAK",
    "continue": "CONTINUE",
    "static": "STATIC",
}

# The longest lexeme in token_hashmap; bounds the operator lookahead.
MAX_OPERATOR_LEN = max(len(k) for k in token_hashmap)

statement_starts: frozenset[str] = frozenset(
    {"CLASS", "WHILE", "FOR", "VAR", "IF", "RETURN", "PRINT", "FUNC"}
)

assignment_ops: frozenset[str] = frozenset({"ASSIGN", "PLUS_ASSIGN", "MINUS_ASSIGN"})

MAX_ARGS = 20

__all__ = [
    "MAX_ARGS",
    "MAX_OPERATOR_LEN",
    "assignment_ops",
    "keywords",
    "statement_starts",
    "token_hashmap",
]
