"""Precompiled preamble (format file) management."""

from pathlib import Path
from typing import Optional

from .engine import ArgumentBuilder
from .invoker import CompileOutcome, CompilerInvoker


class FormatCache:
    """Decides when ``<job>.fmt`` must be built and builds it.

    The cache key is the presence of the file: its content is never
    compared with the current preamble. A forced rebuild (``--precompile``)
    is honoured once per process.
    """

    def __init__(self, workdir: Path, invoker: CompilerInvoker, arguments: ArgumentBuilder,
                 force: bool = False, skip_all: bool = False):
        self.workdir = Path(workdir)
        self.invoker = invoker
        self.arguments = arguments
        self.skip_all = skip_all
        self._pending_force = force
        self._failed = False
        self.last_outcome: Optional[CompileOutcome] = None

    @property
    def format_path(self) -> Path:
        return self.workdir / self.arguments.names.format_file

    def is_fresh(self) -> bool:
        """True if the format exists and was not invalidated by a failed build."""
        return not self._failed and self.format_path.is_file()

    def ensure_format(self, force: bool = False, skip_all: Optional[bool] = None) -> bool:
        """Build the format file if needed.

        Args:
            force: Rebuild even if the format is fresh.
            skip_all: Full-document mode, the format is never used. Defaults
                to the mode given at construction.

        Returns:
            bool: True if a build ran and succeeded.
        """
        if skip_all is None:
            skip_all = self.skip_all
        if skip_all:
            return False

        force = force or self._pending_force
        if not force and self.is_fresh():
            return False

        try:
            outcome = self.invoker.run("Precompile", self.arguments.engine.compiler,
                                       self.arguments.precompile_args())
        finally:
            # Later cycles rebuild only if the format goes missing.
            self._pending_force = False
        self.last_outcome = outcome
        self._failed = not outcome.succeeded
        return outcome.succeeded
