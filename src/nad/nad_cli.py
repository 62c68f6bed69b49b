"""
nad CLI Entrypoint.

This module provides the command-line interface for running nad programs.
It supports running a source file, running inline source, dumping the parsed
AST and the interactive REPL.

Features:
    - Read source from a file or an inline string.
    - Lex, parse, resolve and interpret the program.
    - Dump the parsed program as JSON instead of running it.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    nad hello.nad
    nad -s "print 1 + 2;"
    nad --ast hello.nad
    nad --repl --verbose

Exit codes:
    0 on success, 10 after a syntax error, 11 after a runtime error,
    1 for misuse (too many arguments, unreadable source file).

Functions:
    run_source(source: str, interpreter: Interpreter, show_ast: bool = False,
               verbose: bool = False) -> None:
        Executes the full pipeline (lex → parse → resolve → interpret).

    run_file(path: str, show_ast: bool = False) -> int:
        Runs a source file on a fresh interpreter and returns the exit code.

    run_string(source: str, show_ast: bool = False) -> int:
        Same as `run_file` for inline program text.

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import sys

from nad.emitters.ast_printer import AstPrinter
from nad.nad_interpreter import Interpreter
from nad.nad_lexer import CharacterStream, Lexer
from nad.nad_parser import Parser
from nad.nad_resolver import Resolver

RECURSION_LIMIT = 10_000


def run_source(
    source: str,
    interpreter: Interpreter,
    show_ast: bool = False,
    verbose: bool = False,
) -> None:
    """
    Run the nad pipeline on one chunk of source code.

    Each stage reports its diagnostics through `interpreter.reporter`; once a
    syntax error has been flagged, the later stages are skipped.

    Args:
        source (str): The nad program text.
        interpreter (Interpreter): Executes the program; its globals persist between calls.
        show_ast (bool): If True, prints the parsed program as JSON instead of running it.
        verbose (bool): If True, echoes each parsed statement as an S-expression.
    """
    reporter = interpreter.reporter

    # 1. Lexing
    tokens = Lexer(CharacterStream(source, 0, 1, 1), reporter).scan_tokens()
    if reporter.had_syntax_error:
        return

    # 2. Parsing
    statements = Parser(tokens, reporter).parse()
    if statements is None or reporter.had_syntax_error:
        return

    if show_ast:
        print(json.dumps([stmt.to_dict() for stmt in statements], indent=2))
        return

    if verbose:
        printer = AstPrinter()
        for stmt in statements:
            print(f"[ast] >>> {printer.emit(stmt)}")

    # 3. Resolving
    Resolver(interpreter).resolve(statements)
    if reporter.had_syntax_error:
        return

    # 4. Interpreting
    interpreter.interpret(statements)


def run_file(path: str, show_ast: bool = False) -> int:
    """
    Run a nad source file and return the process exit code.

    Args:
        path (str): Path to the source file.
        show_ast (bool): If True, prints the parsed program as JSON instead of running it.

    Returns:
        int: 0, 10 (syntax error), 11 (runtime error) or 1 (unreadable file).
    """
    try:
        with open(path, encoding="utf-8") as f:
            source = f.read()
    except (OSError, UnicodeDecodeError):
        print("Cannot open the source code.")
        return 1

    interpreter = Interpreter()
    run_source(source, interpreter, show_ast=show_ast)
    return interpreter.reporter.exit_code


def run_string(source: str, show_ast: bool = False) -> int:
    """Like `run_file`, but `source` is the program text itself."""
    interpreter = Interpreter()
    run_source(source, interpreter, show_ast=show_ast)
    return interpreter.reporter.exit_code


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the nad CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no source is given or `--repl` is specified.
    - Otherwise, runs the source and exits with its exit code.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--ast`: Print the parsed program as JSON instead of running it.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable verbose REPL mode.
    """
    parser = argparse.ArgumentParser(prog="nad")
    parser.add_argument(
        "source", nargs="*", help="Filename, or raw source with -s (at most one)"
    )
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--ast", action="store_true", help="Print the parsed program as JSON"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Verbose REPL mode (if --repl)"
    )

    args = parser.parse_args(argv)

    if len(args.source) > 1:
        parser.print_usage()
        sys.exit(1)

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if args.repl or not args.source:
        from nad.nad_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    if args.string:
        code = run_string(args.source[0], show_ast=args.ast)
    else:
        code = run_file(args.source[0], show_ast=args.ast)
    sys.exit(code)


if __name__ == "__main__":
    main()
