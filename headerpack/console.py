#!/usr/bin/env python3

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.markup import escape


class Console:
    """Simple console wrapper focused on output."""

    def __init__(self, verbose: bool = False, rich_console: RichConsole | None = None):
        self.verbose = verbose
        self._rich = rich_console or RichConsole(highlight=False, soft_wrap=True)

    def print(self, *args, **kwargs):
        """Print using Rich console."""
        return self._rich.print(*args, **kwargs)

    def detail(self, message: str):
        """Print only in verbose mode."""
        if self.verbose:
            self._rich.print(message, markup=False)

    def success(self, message: str):
        self._rich.print(f"[green]Success[/green] {escape(message)}")

    def error(self, message: str):
        self._rich.print(message, style="red", markup=False)

    def print_exception(self):
        """Print the exception currently being handled with its traceback."""
        self._rich.print_exception()

    def setup_logging(self):
        """Route library logging through Rich; DEBUG when verbose."""
        logging.basicConfig(
            level=logging.DEBUG if self.verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=self._rich, show_path=False)],
            force=True,
        )
