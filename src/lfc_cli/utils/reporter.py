"""Info-level aware reporting of pipeline actions."""

import shlex
import time
from typing import List, Optional

from ..config import InfoLevel
from .console import _rich_echo, _rich_error, _rich_info, _rich_warning, delimit


class Reporter:
    """Prints pipeline events filtered by the configured info level.

    Action lines are printed in two halves so that a running compiler shows
    up as ``::::::: Precompile...`` and is completed with the duration once
    the process exits.
    """

    def __init__(self, level: InfoLevel = InfoLevel.ACTIONS):
        self.level = level

    @property
    def shows_actions(self) -> bool:
        return self.level >= InfoLevel.ACTIONS

    @property
    def shows_errors(self) -> bool:
        return self.level >= InfoLevel.ERRORS

    @property
    def shows_log(self) -> bool:
        return self.level >= InfoLevel.ERRORS_AND_LOG

    @property
    def is_debug(self) -> bool:
        return self.level >= InfoLevel.DEBUG

    def action_started(self, description: str) -> float:
        """Announce a long running action and return its start time."""
        if self.shows_actions:
            _rich_echo(f"::::::: {description}...", end="")
        return time.monotonic()

    def action_finished(self, started: float, succeeded: bool) -> float:
        """Complete the action line with the elapsed time and return it."""
        elapsed = time.monotonic() - started
        if self.shows_actions:
            color = "green" if succeeded else "red"
            _rich_echo(f"done [{elapsed:.1f}s]", color=color)
        return elapsed

    def info(self, message: str):
        if self.shows_actions:
            _rich_echo(message)

    def status(self, message: str):
        """Highlighted state change, e.g. entering watch mode."""
        if self.shows_actions:
            _rich_info(message)

    def debug(self, message: str):
        if self.is_debug:
            _rich_echo(message, color="muted")

    def warning(self, message: str):
        if self.shows_errors:
            _rich_warning(f"Warning: {message}")

    def error(self, message: str, detail: Optional[str] = None):
        if self.shows_errors:
            _rich_error(f"Error: {message}")
            if detail:
                _rich_echo(detail)

    def command(self, argv: List[str]):
        """Show the exact command line in debug mode."""
        if self.is_debug:
            _rich_echo(delimit("command", "", shlex.join(argv)))

    def raw(self, text: str):
        """Print text verbatim (log excerpts, captured output)."""
        _rich_echo(text)
