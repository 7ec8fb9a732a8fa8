"""Sequencing of one recompilation cycle.

A cycle runs split, precompile (when the format is not fresh), one
compile pass and, for final passes, relocation. Only one cycle may run at
a time: the single-flight guard is claimed before the split and released
after relocation, whatever happened in between.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..errors import CompileError, FastCompileError
from .engine import ArgumentBuilder
from .format_cache import FormatCache
from .invoker import CompileOutcome, CompilerInvoker
from .relocator import ArtifactRelocator
from .splitter import SourceSplitter


class CycleState(Enum):
    """Where the coordinator is in the current cycle."""
    IDLE = "idle"
    SPLITTING = "splitting"
    PRECOMPILING = "precompiling"
    COMPILING = "compiling"
    RELOCATING = "relocating"


class SingleFlightGuard:
    """Non-blocking claim on the right to run a cycle."""

    def __init__(self):
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self):
        self._lock.release()

    @property
    def is_set(self) -> bool:
        return self._lock.locked()


@dataclass
class CycleResult:
    """Outcome of one coordinator cycle."""
    succeeded: bool
    skipped: bool = False
    error: Optional[FastCompileError] = None
    outcomes: List[CompileOutcome] = field(default_factory=list)


class RecompilationCoordinator:
    """Runs recompilation cycles one at a time."""

    def __init__(self, splitter: SourceSplitter, format_cache: FormatCache,
                 invoker: CompilerInvoker, arguments: ArgumentBuilder,
                 relocator: ArtifactRelocator, reporter, compile_all: bool = False):
        self.splitter = splitter
        self.format_cache = format_cache
        self.invoker = invoker
        self.arguments = arguments
        self.relocator = relocator
        self.reporter = reporter
        self.compile_all = compile_all
        self.guard = SingleFlightGuard()
        self.state = CycleState.IDLE
        self.watching = False
        self.cycles = 0

    @property
    def is_compiling(self) -> bool:
        return self.guard.is_set

    def try_begin(self) -> bool:
        """Claim the guard for a cycle that will be run with ``claimed=True``."""
        return self.guard.try_acquire()

    def abandon(self):
        """Release a claim whose cycle will never run."""
        self.guard.release()

    def startup(self, passes: int = 1) -> CycleResult:
        """Run the compiles done before watching.

        All passes but the last are draft passes. Stops at the first failure.
        """
        outcomes = []
        result = CycleResult(succeeded=True)
        for index in range(passes):
            result = self.recompile(draft=index < passes - 1)
            outcomes.extend(result.outcomes)
            if not result.succeeded:
                break
        result.outcomes = outcomes
        return result

    def recompile(self, draft: bool = False, claimed: bool = False) -> CycleResult:
        """Run one cycle.

        Args:
            draft: Compile in draft mode, without relocation.
            claimed: The caller already holds the guard (see ``try_begin``).

        Returns:
            CycleResult: Never raises for pipeline errors, they are returned.
        """
        if not claimed and not self.guard.try_acquire():
            self.reporter.debug("Compilation already running.")
            return CycleResult(succeeded=False, skipped=True)

        outcomes = []
        try:
            self.cycles += 1
            error = self._cycle(draft, outcomes)
            return CycleResult(succeeded=error is None, error=error, outcomes=outcomes)
        except FastCompileError as e:
            self.reporter.error(e.message)
            return CycleResult(succeeded=False, error=e, outcomes=outcomes)
        finally:
            self.state = CycleState.IDLE
            if self.watching:
                self.reporter.status("Wait for new changes...")
            self.guard.release()

    def _cycle(self, draft: bool, outcomes: List[CompileOutcome]) -> Optional[CompileError]:
        """Run the cycle steps. A failed compile pass is returned, other errors raise."""
        self.state = CycleState.SPLITTING
        if not self.compile_all:
            self.splitter.prepare()

            self.state = CycleState.PRECOMPILING
            previous = self.format_cache.last_outcome
            self.format_cache.ensure_format()
            if self.format_cache.last_outcome is not previous:
                outcomes.append(self.format_cache.last_outcome)

        full = self.compile_all or not self.format_cache.is_fresh()
        if full:
            if not self.compile_all:
                self.reporter.warning("The precompiled header is not available, compile the whole document.")
            self.splitter.prepare_full_source()

        self.state = CycleState.COMPILING
        outcome = self.invoker.run(self._description(draft, full), self.arguments.engine.compiler,
                                   self.arguments.compile_args(draft=draft, full=full))
        outcomes.append(outcome)
        if not outcome.succeeded:
            return CompileError("The compilation finished with errors.", outcome.returncode)

        if not draft:
            self.state = CycleState.RELOCATING
            self.relocator.relocate(outcome, full_compile=full)
        return None

    def _description(self, draft: bool, full: bool) -> str:
        description = "Compile "
        if draft:
            description += "draft "
        if full:
            description += "(skip precompile)"
        else:
            description += f"(use precompiled {self.arguments.names.format_file})"
        return description
