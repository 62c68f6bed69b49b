"""
Lexical analyzer for the nad programming language.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with kind, lexeme, literal payload and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace, `//` line comments and `/* ... */` block comments (not nested)
    - Longest-match recognition of operators such as `+=`, `<=`, `&&`
    - Recognizes:
        * Identifiers and keywords (`[A-Za-z_][A-Za-z0-9_]*`)
        * Numbers (decimal with optional fractional part, stored as float)
        * Strings (double-quoted, may span lines, no escape sequences)
        * Operators and punctuation

Errors (invalid character, unterminated string, unterminated block comment) are
reported through a `Reporter` and scanning continues, so one run surfaces as
many errors as possible. The token list always ends with a synthetic EOF token.

Example:
    >>> lexer = Lexer(CharacterStream("print 42;"))
    >>> lexer.scan_tokens()
    [Token(PRINT, print), Token(NUMBER, 42), Token(SEMICOLON, ;), Token(EOF, )]

Exports:
    - CharacterStream
    - Token
    - Lexer
    - token_hashmap
"""

from typing import Any

from nad.nad_constants import MAX_OPERATOR_LEN, keywords, token_hashmap
from nad.nad_errors import Reporter


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            Exception: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def match(self, expected: str) -> bool:
        """Consumes the next character only if it equals `expected`."""
        if self.peek() != expected:
            return False
        self.next()
        return True

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the nad language.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'NUMBER', 'EOF').
        lexeme (str): The exact source slice the token was scanned from.
        literal (Any): The payload for NUMBER (float) and STRING (str) tokens, else None.
        line (int): The 1-based line number where the token ends.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(
        self, type_: str, lexeme: str, literal: Any = None, line: int = 0, col: int = 0
    ):
        self.type = type_
        self.lexeme = lexeme
        self.literal = literal
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.lexeme})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.lexeme == other.lexeme
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.lexeme, self.line, self.col))


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9" if ch else False


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_" if ch else False


class Lexer:
    """Lexical analyzer for the nad language.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        reporter (Reporter): Receives scanning diagnostics.
    """

    def __init__(self, stream: CharacterStream, reporter: Reporter | None = None) -> None:
        self.stream = stream
        self.reporter = reporter if reporter is not None else Reporter()
        self._start = stream.position
        self._start_col = stream.column

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def scan_tokens(self) -> list[Token]:
        """Scans the whole stream and returns every token, ending with EOF."""
        tokens: list[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == "EOF":
                return tokens

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch in " \t\r\n":
                self.advance()
            elif ch == "/" and self.peek(1) == "/":
                self.skip_comment()
            elif ch == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances through the stream until the end of a comment line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Advances past a `/* ... */` comment; nesting is not supported."""
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == "/":
                self.advance()
                self.advance()
                return
            self.advance()
        self.reporter.report(self.stream.line, "at EOF", "Unterminated block comment.")

    def make_token(self, type_: str, literal: Any = None) -> Token:
        lexeme = self.stream.source[self._start : self.stream.position]
        return Token(type_, lexeme, literal, self.stream.line, self._start_col)

    def match_operator(self) -> Token | None:
        """Attempts to match the longest valid operator from the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        max_token = None
        candidate = ""

        for i in range(MAX_OPERATOR_LEN):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return self.make_token(token_hashmap[max_token])

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Malformed input is reported and skipped, so this always returns a
        usable token; at the end of the source it returns EOF.
        """
        while True:
            self.skip_whitespace()
            self._start = self.stream.position
            self._start_col = self.stream.column

            if self.stream.end_of_file():
                return Token("EOF", "", None, self.stream.line, self.stream.column)

            ch = self.peek()

            # 1. Identifier or keyword
            if _is_alpha(ch):
                while _is_alpha(self.peek()) or _is_digit(self.peek()):
                    self.advance()
                text = self.stream.source[self._start : self.stream.position]
                if text == "true":
                    return self.make_token("TRUE", True)
                if text == "false":
                    return self.make_token("FALSE", False)
                return self.make_token(keywords.get(text, "IDENT"))

            # 2. Number
            if _is_digit(ch):
                while _is_digit(self.peek()):
                    self.advance()
                if self.peek() == "." and _is_digit(self.peek(1)):
                    self.advance()
                    while _is_digit(self.peek()):
                        self.advance()
                text = self.stream.source[self._start : self.stream.position]
                return self.make_token("NUMBER", float(text))

            # 3. String
            if ch == '"':
                self.advance()
                while not self.stream.end_of_file() and self.peek() != '"':
                    self.advance()
                if self.stream.end_of_file():
                    self.reporter.report(self.stream.line, "", "Unterminated string.")
                    continue
                self.advance()
                value = self.stream.source[self._start + 1 : self.stream.position - 1]
                return self.make_token("STRING", value)

            # 4. Compound or symbolic operator
            token = self.match_operator()
            if token:
                return token

            # 5. Unknown character, including a lone '&' or '|'
            line = self.stream.line
            bad = self.advance()
            self.reporter.report(line, "", f"Invalid character '{bad}'.")


__all__ = ["CharacterStream", "Lexer", "Token", "token_hashmap"]
