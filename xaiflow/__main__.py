"""
Entry point for `python -m xaiflow` or the `xaiflow` command.
Runs the interactive loop against XAIFLOW_API_URL using XAIFLOW_TOKEN.
"""

import os
import sys

from xaiflow.cli.repl import run_repl
from xaiflow.config import ClientConfig
from xaiflow.utils.logging import setup_logging


def main() -> None:
    if "--version" in sys.argv or "-v" in sys.argv:
        from xaiflow import __version__
        print(f"xaiflow {__version__}")
        return
    config = ClientConfig.from_env()
    setup_logging(
        level=os.environ.get("XAIFLOW_LOG_LEVEL", "WARNING"),
        log_file=os.environ.get("XAIFLOW_LOG_FILE") or None,
    )
    run_repl(config=config)


if __name__ == "__main__":
    main()
