#!/usr/bin/env python3
"""
RADIX Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    radix                                   # Start REPL
    radix script.radix                      # Run script
    radix -e "* x x" -t simplify            # Evaluate expression
    radix -f program -e ". x; . 2; ^ 0 1"   # Evaluate a straight-line program
    echo "^ x 3" | radix -t d:x -t simplify # Filter mode

Script Format (.radix files):
    #!/usr/bin/env radix
    :format polish
    :transform d:x simplify

    ^ x 3
    * x + x 1

REPL Commands:
    :help              Show help
    :format NAME       Set input format (polish, program)
    :output NAME       Set output renderer (linear, tree)
    :transform SPEC... Add passes (simplify, expand, differentiate:VAR)
    :passes            List the active passes
    :clear             Remove all passes
    :trace on|off      Toggle tracing
    :reset             Forget the straight-line program
    :last              Show the last expression of the program
    :quit              Exit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .errors import RadixError
from .nodes import Node
from .parse import StraightLineParser, parse_polish
from .pipeline import BUILTIN_PASSES, Pipeline, build_pass
from .printers import format_linear, format_tree

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

logger = logging.getLogger("radix.cli")

FORMATS = {
    "polish": "Polish notation, one expression per line",
    "program": "straight-line program, one definition per line",
}

OUTPUTS = {
    "linear": format_linear,
    "tree": format_tree,
}


def setup_logging(level=logging.WARNING):
    """Send RADIX log records to stderr at the given level."""
    logger = logging.getLogger("radix")
    logger.setLevel(level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler.setLevel(level)
    logger.addHandler(handler)

    return logger


def is_error(result: Optional[str]) -> bool:
    return bool(result) and result.startswith("Error")


def emit(result: Optional[str]) -> None:
    """Print a result, sending errors to stderr."""
    if result:
        print(result, file=sys.stderr if is_error(result) else sys.stdout)


class RadixCompleter:
    """Tab completer for RADIX REPL."""

    # Commands that can be completed
    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":format", ":output",
        ":transform", ":passes", ":clear",
        ":trace", ":reset", ":last",
    ]

    TRACE_OPTIONS = ["on", "off"]

    def __init__(self, repl: 'RadixREPL'):
        self.repl = repl
        self.matches: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            # Build completion list on first call
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> List[str]:
        """Get list of matches for the current input."""
        line = line.lstrip()

        if line.startswith(":format "):
            return [f for f in FORMATS if f.startswith(text)]

        if line.startswith(":output "):
            return [o for o in OUTPUTS if o.startswith(text)]

        if line.startswith(":trace "):
            return [t for t in self.TRACE_OPTIONS if t.startswith(text)]

        # Pass names, with a trailing colon for those taking a variable
        if line.startswith(":transform "):
            names = [name for name in BUILTIN_PASSES if name not in ("differentiate", "d")]
            names += ["differentiate:", "d:"]
            return [n for n in names if n.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        return []


class RadixREPL:
    """Interactive REPL for radix."""

    def __init__(self, input_format: str = "polish", output: str = "linear"):
        self.format = input_format
        self.output = output
        self.pipeline = Pipeline()
        self.program = StraightLineParser()
        self.trace = False
        self.quiet = False
        self.running = True
        self.errors = 0
        self.history_file = Path.home() / ".radix_history"

    def setup_readline(self):
        """Load history and install tab completion."""
        if not HAS_READLINE:
            return
        try:
            readline.read_history_file(self.history_file)
        except OSError:
            pass
        readline.set_history_length(1000)

        self.completer = RadixCompleter(self)
        readline.set_completer(self.completer.complete)
        readline.parse_and_bind("tab: complete")

        # Don't break on colons, so "differentiate:x" completes as one word
        readline.set_completer_delims(" \t\n")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.debug("Could not save history to %s: %s", self.history_file, e)

    def add_passes(self, specs: List[str]) -> None:
        """
        Append passes to the pipeline.

        Raises:
            ValueError: If a spec names an unknown pass; nothing is added then
        """
        passes = [build_pass(spec) for spec in specs]
        self.pipeline = self.pipeline >> Pipeline(passes)

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd == "quit" or cmd == "exit" or cmd == "q":
            self.running = False
            return None

        elif cmd == "format":
            if arg.lower() not in FORMATS:
                return f"Unknown format. Options: {', '.join(FORMATS)}"
            self.format = arg.lower()
            return f"Format set to: {self.format}"

        elif cmd == "output":
            if arg.lower() not in OUTPUTS:
                return f"Unknown output. Options: {', '.join(OUTPUTS)}"
            self.output = arg.lower()
            return f"Output set to: {self.output}"

        elif cmd == "transform":
            if not arg:
                return "Usage: :transform PASS [PASS ...]"
            try:
                self.add_passes(arg.replace(',', ' ').split())
            except ValueError as e:
                self.errors += 1
                return f"Error: {e}"
            return f"Passes: {' -> '.join(self.pipeline.names())}"

        elif cmd == "passes":
            if not len(self.pipeline):
                return "No passes"
            return " -> ".join(self.pipeline.names())

        elif cmd == "clear":
            self.pipeline = Pipeline()
            return "Cleared all passes"

        elif cmd == "trace":
            if arg.lower() in ("on", "true", "1"):
                self.trace = True
                return "Tracing enabled"
            elif arg.lower() in ("off", "false", "0"):
                self.trace = False
                return "Tracing disabled"
            else:
                self.trace = not self.trace
                return f"Tracing {'enabled' if self.trace else 'disabled'}"

        elif cmd == "reset":
            self.program.reset()
            return "Program cleared"

        elif cmd == "last":
            try:
                return self.render(self.program.last())
            except IndexError:
                return "No expression defined"

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return """RADIX REPL Commands:
  :help              Show this help
  :format NAME       Set input format (polish, program)
  :output NAME       Set output renderer (linear, tree)
  :transform SPEC... Add passes (simplify, expand, differentiate:VAR, d:VAR)
  :passes            List the active passes
  :clear             Remove all passes
  :trace on|off      Toggle tracing
  :reset             Forget the straight-line program
  :last              Show the last expression of the program
  :quit              Exit

Syntax:
  polish:   + x * 2 y          Operators + - * / ^ take two operands
  program:  . x                Define a variable or integer leaf
            ^ 0 1              Apply an operator to earlier lines by index
"""

    def render(self, node: Node) -> str:
        return OUTPUTS[self.output](node).rstrip("\n")

    def evaluate(self, tree: Node) -> str:
        """
        Run the pipeline on tree and render the result.

        Raises:
            RadixError: If a pass fails
        """
        result, trace = self.pipeline(tree, trace=True)
        output = self.render(result)
        if self.trace and trace and not self.quiet:
            return f"{output}\n{trace.format('chain')}"
        return output

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None. Errors are returned as a
        message starting with "Error:" and leave the session usable.
        """
        line = line.strip()

        # Empty line or comment
        if not line or line.startswith("#"):
            return None

        # Command
        if line.startswith(":"):
            return self.handle_command(line)

        try:
            if self.format == "program":
                tree = self.program.parse(line)
                output = self.evaluate(tree)
                index = len(self.program) - 1
                separator = "\n" if self.output == "tree" else " "
                return f"[{index}]{separator}{output}"

            return self.evaluate(parse_polish(line))

        except RadixError as e:
            self.errors += 1
            return f"Error: {e}"

    def run(self):
        """Run the REPL loop."""
        self.setup_readline()

        if not self.quiet:
            print("RADIX - Rational Algebra: Differentiation, Identities and eXpansion")
            print("Type :help for help, :quit to exit")
            print()

        while self.running:
            try:
                prompt = "radix> " if self.format == "polish" else f"[{len(self.program)}] "
                line = input(prompt)
                emit(self.process_line(line))

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs radix scripts, one-shot expressions and filters."""

    def __init__(self, repl: Optional[RadixREPL] = None):
        self.repl = repl or RadixREPL()

    def run_script(self, path: Path, quiet: bool = False) -> int:
        """
        Run a script file.

        Every line is processed as in the REPL; a failing line is reported
        with its location and the script carries on.

        Args:
            path: Path to the script
            quiet: If True, don't print expression results

        Returns:
            Exit code (0 if every line succeeded)
        """
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

        logger.debug("Running script %s (%d lines)", path, len(lines))
        failed = False

        for lineno, line in enumerate(lines, 1):
            line = line.strip()

            # Skip empty lines, comments, and shebang
            if not line or line.startswith("#"):
                continue

            result = self.repl.process_line(line)
            if is_error(result) or (line.startswith(":") and result and result.startswith("Unknown")):
                print(f"{path}:{lineno}: {result}", file=sys.stderr)
                failed = True
                continue

            # Don't print command confirmations in script mode
            if result and not line.startswith(":") and not quiet:
                print(result)

            if not self.repl.running:
                break

        return 1 if failed else 0

    def run_lines(self, lines: List[str]) -> int:
        """
        Evaluate a batch of input lines.

        In polish format every expression is printed. In program format the
        lines build one program and only its last expression is printed.

        Returns:
            Exit code (0 if every line succeeded)
        """
        repl = self.repl
        failed = False

        if repl.format == "polish":
            for line in lines:
                result = repl.process_line(line)
                emit(result)
                failed = failed or is_error(result)
            return 1 if failed else 0

        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(":"):
                result = repl.handle_command(line)
                if is_error(result):
                    emit(result)
                    failed = True
                continue
            try:
                repl.program.parse(line)
            except RadixError as e:
                emit(f"Error: {e}")
                failed = True

        if not len(repl.program):
            return 1 if failed else 0

        try:
            emit(repl.evaluate(repl.program.last()))
        except RadixError as e:
            emit(f"Error: {e}")
            failed = True

        return 1 if failed else 0

    def run_expression(self, expr_str: str) -> int:
        """
        Evaluate a single expression.

        In program format, lines of the program are separated by ';'.

        Returns:
            Exit code (0 for success)
        """
        if self.repl.format == "program":
            return self.run_lines(expr_str.split(";"))
        return self.run_lines([expr_str])

    def run_stdin(self) -> int:
        """
        Read expressions from stdin and evaluate them.

        Returns:
            Exit code (0 for success)
        """
        return self.run_lines([line for line in sys.stdin])


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="radix",
        description="RADIX - Rational Algebra: Differentiation, Identities and eXpansion",
        epilog="Examples:\n"
               "  radix                                  Start REPL\n"
               "  radix script.radix                     Run script\n"
               "  radix -e '* x x' -t simplify           Evaluate expression\n"
               "  radix -f program -e '. x; . 2; ^ 0 1'  Evaluate a program\n"
               "  echo '^ x 3' | radix -t d:x -t simplify  Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run (.radix)"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Evaluate a single expression"
    )

    parser.add_argument(
        "-f", "--format",
        default="polish",
        choices=list(FORMATS),
        help="Input format"
    )

    parser.add_argument(
        "-o", "--output",
        default="linear",
        choices=list(OUTPUTS),
        help="Output renderer"
    )

    parser.add_argument(
        "-t", "--transform",
        action="append",
        default=[],
        metavar="PASS",
        help="Apply a pass: simplify, expand, differentiate:VAR (can be specified multiple times)"
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Show the expression after every pass"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debugging information to stderr"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (suppress non-essential output)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    repl = RadixREPL(input_format=args.format, output=args.output)
    repl.trace = args.trace
    repl.quiet = args.quiet

    try:
        repl.add_passes(args.transform)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    runner = ScriptRunner(repl)

    # Determine mode
    if args.script:
        logger.debug("Script mode: %s", args.script)
        sys.exit(runner.run_script(Path(args.script), quiet=args.quiet))

    elif args.expr is not None:
        logger.debug("Expression mode")
        sys.exit(runner.run_expression(args.expr))

    elif not sys.stdin.isatty():
        # Pipe/filter mode (stdin is not a terminal)
        logger.debug("Filter mode")
        sys.exit(runner.run_stdin())

    else:
        logger.debug("REPL mode")
        repl.run()
        sys.exit(1 if repl.errors else 0)


if __name__ == "__main__":
    main()
