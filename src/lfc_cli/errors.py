"""Error types for latex-fast-compile.

Every failure raised by the pipeline carries an :class:`ErrorKind` and a
``fatal_before_watch`` flag. The caller decides whether to abort: before the
watch session starts any flagged error ends the process with status 1, once
watching the error is only reported.
"""

from enum import Enum


class ErrorKind(Enum):
    """Classification of pipeline errors."""
    CONFIGURATION = "configuration"
    SPLIT = "split"
    COMPILE = "compile"
    FILESYSTEM = "filesystem"


class SplitFailure(Enum):
    """Reasons a source file could not be split."""
    NO_MARKER = "no split marker found"
    AMBIGUOUS_MARKER = "more than one split marker found"
    EMPTY_OR_UNREADABLE = "source file is empty or unreadable"


class FastCompileError(Exception):
    """Base class for all latex-fast-compile errors."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, fatal_before_watch: bool = True):
        super().__init__(message)
        self.message = message
        self.fatal_before_watch = fatal_before_watch


class ConfigurationError(FastCompileError):
    """Invalid options, missing source file or missing compiler."""

    kind = ErrorKind.CONFIGURATION


class SplitError(FastCompileError):
    """The source could not be split into preamble and body."""

    kind = ErrorKind.SPLIT

    def __init__(self, message: str, reason: SplitFailure):
        super().__init__(message)
        self.reason = reason


class CompileError(FastCompileError):
    """The external compiler failed or could not be started."""

    kind = ErrorKind.COMPILE

    def __init__(self, message: str, returncode=None):
        super().__init__(message)
        self.returncode = returncode


class FilesystemError(FastCompileError):
    """A copy, move, rewrite or watch registration failed."""

    kind = ErrorKind.FILESYSTEM
