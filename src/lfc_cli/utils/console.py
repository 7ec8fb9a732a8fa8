"""Console utility functions for formatting and output."""

from rich.console import Console
from rich.theme import Theme


DELIMITER_WIDTH = 77

_console = None


def _get_console() -> Console:
    """Get Rich console instance with lazy loading."""
    global _console
    if _console is None:
        custom_theme = Theme({
            "info": "cyan",
            "warning": "yellow",
            "error": "bold red",
            "success": "bold green",
            "muted": "dim white",
            "title": "bold cyan"
        })
        _console = Console(theme=custom_theme, highlight=False)
    return _console


def _rich_echo(message: str, color: str = "white", end: str = "\n"):
    """Echo a message with Rich styling.

    Markup is disabled: messages routinely contain TeX code and compiler
    output with square brackets.
    """
    _get_console().print(message, style=color, markup=False, end=end, soft_wrap=True)


def _rich_error(message: str):
    """Display error message with red color."""
    _rich_echo(message, color="red")


def _rich_warning(message: str):
    """Display warning message with yellow color."""
    _rich_echo(message, color="yellow")


def _rich_info(message: str):
    """Display info message with cyan color."""
    _rich_echo(message, color="cyan")


def delimit(what: str, end: str, msg: str) -> str:
    """Frame ``msg`` between two ruler lines.

    Used to set compiler commands and log excerpts apart from the
    rest of the output::

        ----------------------- what
        msg
        ----------------------- end
    """
    line = "-" * DELIMITER_WIDTH
    return f"{line} {what}\n{msg}\n{line} {end}"
