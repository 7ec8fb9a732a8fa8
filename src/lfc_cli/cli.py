"""Command-line interface for latex-fast-compile."""

import os
import signal
import sys

import click
from click.core import ParameterSource
from rich.panel import Panel
from rich.text import Text

from lfc_cli.config import (
    CLEAR_MODES,
    DEFAULT_AUX_EXTENSIONS,
    DEFAULT_LOG_SANITIZE,
    DEFAULT_SPLIT,
    CompileConfig,
)
from lfc_cli.core.engine import TexEngine
from lfc_cli.core.session import Session, resolve_source
from lfc_cli.errors import ConfigurationError, FastCompileError
from lfc_cli.utils.console import _get_console, _rich_error
from lfc_cli.version import get_version

USAGE_ERROR_STATUS_ENV = "LFC_USAGE_ERROR_STATUS"

INFO_LEVELS = ["no", "errors", "errors+log", "actions", "debug"]


def _print_version(xelatex: bool):
    """Print tool, distribution and engine versions."""
    engine = TexEngine.select(xelatex).detect(required=False)
    version_text = Text()
    version_text.append("latex-fast-compile", style="bold cyan")
    version_text.append(f" version {get_version()}\n", style="white")
    version_text.append(f"tex distribution: {engine.distro or 'unknown'}\n", style="white")
    version_text.append(f"{engine.compiler} version: {engine.version or 'not found'}", style="white")
    _get_console().print(Panel(version_text, border_style="cyan", padding=(0, 1)))


@click.command(
    help="Compile latex source using precompiled header.\n\n"
         "If FILENAME.fmt is missing it is built before the compilation.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument('filenames', nargs=-1, metavar="FILENAME[.tex]")
@click.option('--precompile', is_flag=True, help="Force to create .fmt file even if it exists.")
@click.option('--skip-fmt', is_flag=True, help="Skip .fmt file and compile all.")
@click.option('--no-synctex', is_flag=True, help="Do not build .synctex file.")
@click.option('--no-watch', is_flag=True, help="Do not watch for file changes in the .tex file.")
@click.option('--xelatex', '-x', is_flag=True, help="Use xelatex in place of pdflatex.")
@click.option('--compiles-at-start', type=int, default=1, show_default=True,
              help="Number of compiles before to start watching.")
@click.option('--info', type=click.Choice(INFO_LEVELS), default="actions", show_default=True,
              help="The info level.")
@click.option('--log-sanitize', default=DEFAULT_LOG_SANITIZE, show_default=True,
              help="Match the log against this regex before display, or display all if empty.")
@click.option('--split', default=DEFAULT_SPLIT, show_default=True,
              help="The regex that defines the end of the preamble.")
@click.option('--strict-split', is_flag=True,
              help="Fail if the end of preamble regex matches more than once.")
@click.option('--temp-folder', default="", help="Folder to store all temp files, .fmt included.")
@click.option('--clear', type=click.Choice(CLEAR_MODES), default="auto", show_default=True,
              help="Clear auxiliary files and .fmt at end. When watching auto=yes, else auto=no. "
                   "In debug mode clear is no.")
@click.option('--aux-extensions', default=DEFAULT_AUX_EXTENSIONS, show_default=True,
              help="Extensions to remove in clear at the end procedure.")
@click.option('--no-normalize', is_flag=True, help="Keep accents and spaces in intermediate file names.")
@click.option('--option', 'options', multiple=True,
              help="Additional option to pass to the compiler. Can be used multiple times.")
@click.option('--debounce', type=float, default=0.05, show_default=True,
              help="Seconds to wait after a change before recompiling.")
@click.option('--poll-interval', type=float, default=0.0, show_default=True,
              help="Poll the file every N seconds instead of using native notifications (0 = native).")
@click.option('--kill-on-exit', is_flag=True, help="Terminate a running compilation when exiting.")
@click.option('--version', '-v', 'show_version', is_flag=True, help="Print the version number.")
@click.pass_context
def cli(ctx, filenames, show_version, **options):
    """Main entry point for the latex-fast-compile CLI."""
    if show_version:
        _print_version(options['xelatex'])
        sys.exit(0)

    # Only values actually given on the command line override the project file.
    overrides = {}
    for name, value in options.items():
        if ctx.get_parameter_source(name) in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            overrides[name] = list(value) if name == 'options' else value

    sys.exit(run(filenames, overrides))


def run(filenames, overrides) -> int:
    """Compile, then watch; returns the process exit status."""
    try:
        if len(filenames) > 1:
            raise ConfigurationError("No more than one positional parameter (.tex filename) can be specified.")
        source = resolve_source(filenames[0] if filenames else None)
        config = CompileConfig.from_project_file(source.parent, source=source, **overrides)
        session = Session(config)
    except FastCompileError as e:
        _rich_error(f"Error: {e.message}")
        return 1

    try:
        return _compile_and_watch(session)
    finally:
        session.cleanup()


SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _install_signal_handlers(handler):
    """Route shutdown signals to ``handler``."""
    for signum in SHUTDOWN_SIGNALS:
        signal.signal(signum, handler)


def _compile_and_watch(session: Session) -> int:
    previous = {signum: signal.getsignal(signum) for signum in SHUTDOWN_SIGNALS}
    try:
        return _startup_and_watch(session)
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


def _startup_and_watch(session: Session) -> int:
    reporter = session.reporter

    def _interrupt(signum, frame):
        session.shutdown()
        raise KeyboardInterrupt

    # Until watching starts, a signal unwinds the startup compiles so that
    # cleanup still runs.
    _install_signal_handlers(_interrupt)
    try:
        result = session.startup()
    except KeyboardInterrupt:
        return 0
    if result.error is not None and result.error.fatal_before_watch:
        return 1

    if session.config.no_watch:
        return 0

    loop = session.watch_loop()
    try:
        loop.start()
    except FastCompileError as e:
        reporter.error(e.message)
        return 1
    except KeyboardInterrupt:
        loop.stop()
        return 0

    def _stop(signum, frame):
        session.shutdown()
        loop.stop()

    _install_signal_handlers(_stop)

    reporter.status("Watching for file changes...(to exit press Ctrl/Cmd-C).")
    loop.run()
    return 0


def main():
    """Console script entry point.

    Usage errors print the help text and exit with ``LFC_USAGE_ERROR_STATUS``
    (default 1).
    """
    try:
        status = cli.main(standalone_mode=False)
    except click.UsageError as e:
        if e.ctx is not None:
            click.echo(e.ctx.get_help())
            click.echo()
        _rich_error(f"Error: Problem parsing parameters. {e.format_message()}")
        sys.exit(_usage_error_status())
    except click.Abort:
        sys.exit(1)
    sys.exit(status or 0)


def _usage_error_status() -> int:
    value = os.environ.get(USAGE_ERROR_STATUS_ENV, "1")
    try:
        return int(value)
    except ValueError:
        return 1


if __name__ == "__main__":
    main()
