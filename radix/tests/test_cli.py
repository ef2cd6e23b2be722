"""Tests for CLI module."""

import logging
import subprocess
import sys

from radix.cli import RadixREPL, RadixCompleter, ScriptRunner, FORMATS, OUTPUTS, setup_logging


class TestREPLCommands:
    """Tests for REPL command handling."""

    def test_help_command(self):
        """Help command returns help text."""
        repl = RadixREPL()
        result = repl.handle_command(":help")
        assert ":transform" in result
        assert "polish" in result

    def test_format_command(self):
        """Format command sets the input format."""
        repl = RadixREPL()
        result = repl.handle_command(":format program")
        assert repl.format == "program"
        assert "program" in result

    def test_unknown_format(self):
        repl = RadixREPL()
        result = repl.handle_command(":format infix")
        assert "Unknown" in result
        assert repl.format == "polish"

    def test_output_command(self):
        repl = RadixREPL()
        repl.handle_command(":output tree")
        assert repl.output == "tree"
        assert "Unknown" in repl.handle_command(":output latex")

    def test_transform_command(self):
        """Transform command appends passes."""
        repl = RadixREPL()
        result = repl.handle_command(":transform d:x simplify")
        assert result == "Passes: differentiate:x -> simplify"
        repl.handle_command(":transform expand")
        assert repl.handle_command(":passes") == "differentiate:x -> simplify -> expand"

    def test_transform_comma_separated(self):
        repl = RadixREPL()
        repl.handle_command(":transform expand,simplify")
        assert repl.pipeline.names() == ["expand", "simplify"]

    def test_unknown_pass(self):
        """A bad pass is reported and nothing is added."""
        repl = RadixREPL()
        result = repl.handle_command(":transform simplify integrate")
        assert result.startswith("Error:")
        assert len(repl.pipeline) == 0
        assert repl.errors == 1

    def test_transform_usage(self):
        assert "Usage" in RadixREPL().handle_command(":transform")

    def test_clear_command(self):
        """Clear command removes all passes."""
        repl = RadixREPL()
        repl.handle_command(":transform simplify")
        repl.handle_command(":clear")
        assert repl.handle_command(":passes") == "No passes"

    def test_trace_command(self):
        """Trace command toggles tracing."""
        repl = RadixREPL()
        assert repl.trace == False

        result = repl.handle_command(":trace on")
        assert repl.trace == True
        assert "enabled" in result.lower()

        result = repl.handle_command(":trace off")
        assert repl.trace == False
        assert "disabled" in result.lower()

    def test_trace_toggle(self):
        """Trace command without arg toggles."""
        repl = RadixREPL()
        repl.handle_command(":trace")
        assert repl.trace == True
        repl.handle_command(":trace")
        assert repl.trace == False

    def test_quit_command(self):
        """Quit command stops the REPL."""
        repl = RadixREPL()
        assert repl.handle_command(":quit") is None
        assert repl.running == False

    def test_unknown_command(self):
        repl = RadixREPL()
        assert "Unknown command" in repl.handle_command(":frobnicate")
        assert "Unknown command" in repl.handle_command(":")

    def test_last_and_reset(self):
        repl = RadixREPL(input_format="program")
        assert repl.handle_command(":last") == "No expression defined"
        repl.process_line(". x")
        repl.process_line(". 1")
        repl.process_line("+ 0 1")
        assert repl.handle_command(":last") == "+(1, x)"
        assert repl.handle_command(":reset") == "Program cleared"
        assert len(repl.program) == 0


class TestProcessLine:
    """Tests for evaluating input lines."""

    def test_empty_line(self):
        """Empty line returns None."""
        repl = RadixREPL()
        assert repl.process_line("") is None
        assert repl.process_line("   ") is None

    def test_comment_line(self):
        """Comment line returns None."""
        assert RadixREPL().process_line("# a comment") is None

    def test_expression_unchanged(self):
        """Without passes, the parsed tree is printed."""
        repl = RadixREPL()
        assert repl.process_line("+ x 1") == "+(1, x)"

    def test_expression_with_passes(self):
        repl = RadixREPL()
        repl.handle_command(":transform simplify")
        assert repl.process_line("* x x") == "^(x, 2)"

    def test_tree_output(self):
        repl = RadixREPL(output="tree")
        assert repl.process_line("^ x 2") == "^\n├── x\n╰── 2"

    def test_parse_error(self):
        """Errors are returned as messages and counted."""
        repl = RadixREPL()
        result = repl.process_line("+ x")
        assert result.startswith("Error:")
        assert "Not enough operands" in result
        assert repl.errors == 1
        # The session keeps working
        assert repl.process_line("x") == "x"

    def test_pass_error(self):
        repl = RadixREPL()
        repl.handle_command(":transform simplify")
        result = repl.process_line("^ 0 0")
        assert result.startswith("Error:")

    def test_program_lines_numbered(self):
        repl = RadixREPL(input_format="program")
        assert repl.process_line(". x") == "[0] x"
        assert repl.process_line(". 2") == "[1] 2"
        assert repl.process_line("^ 0 1") == "[2] ^(x, 2)"

    def test_program_tree_output(self):
        repl = RadixREPL(input_format="program", output="tree")
        repl.process_line(". x")
        assert repl.process_line("+ 0 0") == "[1]\n+\n├── x\n╰── x"

    def test_program_error_keeps_history(self):
        repl = RadixREPL(input_format="program")
        repl.process_line(". x")
        assert repl.process_line("+ 0 3").startswith("Error:")
        assert len(repl.program) == 1

    def test_trace_output(self):
        repl = RadixREPL()
        repl.handle_command(":transform simplify")
        repl.handle_command(":trace on")
        result = repl.process_line("* x x")
        assert result == "^(x, 2)\n*(x, x)\n  --(simplify)-->\n^(x, 2)"

    def test_quiet_hides_trace(self):
        repl = RadixREPL()
        repl.quiet = True
        repl.handle_command(":transform simplify")
        repl.handle_command(":trace on")
        assert repl.process_line("* x x") == "^(x, 2)"


class TestScriptRunner:
    """Tests for script execution."""

    def test_run_expression(self, capsys):
        """Run single expression."""
        runner = ScriptRunner()
        runner.repl.add_passes(["d:x", "simplify"])
        code = runner.run_expression("^ x 3")
        assert code == 0
        assert capsys.readouterr().out == "*(3, ^(x, 2))\n"

    def test_run_program_expression(self, capsys):
        """In program format only the last expression is printed."""
        runner = ScriptRunner(RadixREPL(input_format="program"))
        code = runner.run_expression(". x; . 2; ^ 0 1")
        assert code == 0
        assert capsys.readouterr().out == "^(x, 2)\n"

    def test_run_expression_error(self, capsys):
        code = ScriptRunner().run_expression("+ x")
        assert code == 1
        assert "Not enough operands" in capsys.readouterr().err

    def test_run_script(self, tmp_path, capsys):
        """Failing lines are reported with their location."""
        script = tmp_path / "demo.radix"
        script.write_text(
            "#!/usr/bin/env radix\n"
            ":transform simplify\n"
            "\n"
            "+ x x\n"
            "+ y\n"
            "* y y\n"
        )
        code = ScriptRunner().run_script(script)
        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == "*(2, x)\n^(y, 2)\n"
        assert f"{script}:5: Error:" in captured.err

    def test_run_script_quiet(self, tmp_path, capsys):
        script = tmp_path / "quiet.radix"
        script.write_text("+ x x\n")
        assert ScriptRunner().run_script(script, quiet=True) == 0
        assert capsys.readouterr().out == ""

    def test_missing_script(self, tmp_path, capsys):
        code = ScriptRunner().run_script(tmp_path / "missing.radix")
        assert code == 1
        assert "Error reading" in capsys.readouterr().err

    def test_script_quit(self, tmp_path, capsys):
        script = tmp_path / "quit.radix"
        script.write_text("x\n:quit\ny\n")
        assert ScriptRunner().run_script(script) == 0
        assert capsys.readouterr().out == "x\n"


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging_replaces_handlers(self):
        logger = setup_logging(logging.DEBUG)
        setup_logging(logging.DEBUG)
        assert logger.name == "radix"
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        setup_logging()


class TestCLIIntegration:
    """Integration tests using subprocess."""

    def run(self, *args, stdin=None):
        return subprocess.run(
            [sys.executable, "-m", "radix.cli", *args],
            input=stdin, capture_output=True, text=True
        )

    def test_help_flag(self):
        """--help flag works."""
        result = self.run("--help")
        assert result.returncode == 0
        assert "RADIX" in result.stdout

    def test_version_flag(self):
        """--version flag works."""
        result = self.run("--version")
        assert result.returncode == 0
        assert "0.1.0" in result.stdout

    def test_expression_mode(self):
        """Expression mode applies the passes."""
        result = self.run("-e", "* x x", "-t", "simplify")
        assert result.returncode == 0
        assert result.stdout == "^(x, 2)\n"

    def test_program_mode(self):
        result = self.run("-f", "program", "-e", ". x; . 2; ^ 0 1")
        assert result.returncode == 0
        assert result.stdout == "^(x, 2)\n"

    def test_tree_output(self):
        result = self.run("-o", "tree", "-e", "+ x 1")
        assert result.stdout == "+\n├── 1\n╰── x\n"

    def test_pipe_mode(self):
        """Pipe mode processes stdin."""
        result = self.run("-t", "d:x", "-t", "simplify", stdin="^ x 3\n* x x\n")
        assert result.returncode == 0
        assert result.stdout == "*(3, ^(x, 2))\n*(2, x)\n"

    def test_error_exit_code(self):
        result = self.run("-e", "+ x")
        assert result.returncode == 1
        assert "Not enough operands" in result.stderr

    def test_unknown_pass(self):
        result = self.run("-t", "integrate", "-e", "x")
        assert result.returncode == 1
        assert "Unknown pass" in result.stderr


class TestTabCompletion:
    """Tests for tab completion."""

    def test_completer_commands(self):
        """Completer suggests commands."""
        completer = RadixCompleter(RadixREPL())
        matches = completer._get_matches(":", ":")
        assert ":help" in matches
        assert ":quit" in matches
        assert ":transform" in matches

    def test_completer_partial_command(self):
        completer = RadixCompleter(RadixREPL())
        matches = completer._get_matches(":t", ":t")
        assert matches == [":transform", ":trace"]

    def test_completer_formats(self):
        completer = RadixCompleter(RadixREPL())
        assert completer._get_matches("p", ":format p") == ["polish", "program"]
        assert completer._get_matches("", ":output ") == list(OUTPUTS)
        assert set(FORMATS) == {"polish", "program"}

    def test_completer_trace_options(self):
        completer = RadixCompleter(RadixREPL())
        assert completer._get_matches("o", ":trace o") == ["on", "off"]

    def test_completer_passes(self):
        completer = RadixCompleter(RadixREPL())
        assert completer._get_matches("d", ":transform d") == ["differentiate:", "d:"]
        assert completer._get_matches("s", ":transform expand s") == ["simplify"]

    def test_completer_expression(self):
        """Nothing is offered inside an expression."""
        completer = RadixCompleter(RadixREPL())
        assert completer._get_matches("x", "+ x") == []
