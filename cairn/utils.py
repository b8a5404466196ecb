"""
Utility functions for the Cairn loader: terminal coloring and console
logging setup.
"""

import logging

from rich.logging import RichHandler


class TerminalColors:
    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    RESET = "\033[0m"


def setup_logging(verbose: bool = False) -> None:
    """Configures console logging for the command line. Safe to call more than once."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%H:%M:%S]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
