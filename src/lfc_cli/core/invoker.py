"""Run the external TeX compiler and report its outcome."""

import re
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import CompileError
from ..utils.console import delimit


@dataclass
class CompileOutcome:
    """Result of one compiler execution."""
    description: str
    succeeded: bool
    returncode: int
    log: bytes = b""
    output: bytes = b""
    duration: float = 0.0


class LogSanitizer:
    """Keeps only the interesting lines of a TeX log.

    With no pattern the whole log is shown.
    """

    def __init__(self, pattern: Optional[re.Pattern]):
        self.pattern = pattern

    def sanitize(self, log: bytes) -> str:
        if self.pattern is None:
            return delimit("raw log", "end log", log.decode('utf-8', errors='replace'))

        matches = [m.group(0) for m in self.pattern.finditer(log)]
        if not matches:
            return "Nothing interesting in the log."
        excerpt = b"\n".join(matches).decode('utf-8', errors='replace')
        return delimit("sanitized log", "end log", excerpt)


class CompilerInvoker:
    """Executes compiler passes without any possible interaction.

    stdin is the null device, so TeX never waits for input on an error;
    the batch mode options in the argument sets make it stop instead.
    """

    def __init__(self, workdir: Path, log_file: str, reporter, sanitizer: LogSanitizer,
                 popen=subprocess.Popen):
        self.workdir = Path(workdir)
        self.log_file = log_file
        self.reporter = reporter
        self.sanitizer = sanitizer
        self._popen = popen
        self._process = None
        self._lock = threading.Lock()

    def run(self, description: str, executable: str, args: List[str]) -> CompileOutcome:
        """Run ``executable`` with ``args`` and wait for it.

        Args:
            description: Human readable action name, e.g. "Precompile".
            executable: Compiler binary.
            args: Full argument vector (without the executable).

        Returns:
            CompileOutcome: Exit status, captured output and log content.

        Raises:
            CompileError: If the executable cannot be started.
        """
        argv = [executable] + list(args)
        self.reporter.command(argv)
        started = self.reporter.action_started(description)

        try:
            process = self._popen(argv, cwd=str(self.workdir), stdin=subprocess.DEVNULL,
                                  stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        except OSError as e:
            self.reporter.action_finished(started, False)
            raise CompileError(f"Cannot run {executable}: {e}") from e

        with self._lock:
            self._process = process
        try:
            output, _ = process.communicate()
        finally:
            with self._lock:
                self._process = None

        succeeded = process.returncode == 0
        duration = self.reporter.action_finished(started, succeeded)
        outcome = CompileOutcome(description, succeeded, process.returncode,
                                 log=self._read_log(), output=output or b"", duration=duration)
        self._report(outcome)
        return outcome

    def terminate(self) -> bool:
        """Terminate the running compiler, if any. Returns True if one was running."""
        with self._lock:
            process = self._process
        if process is None:
            return False
        process.terminate()
        return True

    def _read_log(self) -> bytes:
        path = self.workdir / self.log_file
        try:
            return path.read_bytes()
        except OSError:
            return b""

    def _report(self, outcome: CompileOutcome):
        reporter = self.reporter
        if reporter.is_debug and outcome.output:
            reporter.raw(delimit("output", "end output",
                                 outcome.output.decode('utf-8', errors='replace')))
        if reporter.is_debug or (reporter.shows_errors and not outcome.succeeded):
            if reporter.shows_log:
                if outcome.log:
                    reporter.raw(self.sanitizer.sanitize(outcome.log))
                else:
                    reporter.error(f"Problem reading {self.log_file}")
            if not outcome.succeeded:
                reporter.error("The compilation finished with errors.")
