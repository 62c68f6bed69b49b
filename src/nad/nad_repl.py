import io
import traceback

from nad.nad_cli import run_source
from nad.nad_interpreter import Interpreter


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def start_repl(verbose: bool = False, interpreter: Interpreter | None = None) -> None:
    """Reads one line at a time and runs it against a persistent interpreter.

    Globals defined on one line stay visible to later lines; the error flags
    are cleared after every line. Top-level expression statements echo their
    value. `verbose-mode` toggles echoing each parsed statement.
    """
    print("nad REPL. Type 'exit' or 'quit' to leave.")
    if interpreter is None:
        interpreter = Interpreter(interactive=True)
    reporter = interpreter.reporter

    while True:
        try:
            src = input(">> ").strip()
            if not src:
                continue
            if src in ("exit", "quit"):
                print("Exiting nad REPL.")
                return
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            try:
                run_source(src, interpreter, verbose=verbose)
            except Exception:
                print_traceback()
            finally:
                reporter.reset()

        except (KeyboardInterrupt, EOFError):
            print("\nExiting nad REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
