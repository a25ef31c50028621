"""xaiflow CLI: interactive train / predict / explain loop."""

from xaiflow.cli.repl import handle_line, run_repl

__all__ = ["handle_line", "run_repl"]
