"""
Entry point for ``maguro`` and ``python -m maguro``.

Errors that escape a command are rendered as a Rich panel here, so commands
only need to raise.
"""

import asyncio
import logging
import sys

from rich.console import Console

from maguro.cli.app import app
from maguro.cli.formatters import format_error_with_suggestions
from maguro.exceptions import MaguroError

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

log = logging.getLogger("maguro")


def _run(console: Console) -> int:
    try:
        app()
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]Interrupted. Partial output files are kept.[/yellow]")
        return EXIT_INTERRUPTED
    except MaguroError as e:
        console.print(format_error_with_suggestions(e))
        return EXIT_FAILURE
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        return EXIT_FAILURE
    return 0


def main() -> None:
    """Runs the CLI and exits with its status code."""
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    sys.exit(_run(Console(stderr=True)))


if __name__ == "__main__":
    main()
