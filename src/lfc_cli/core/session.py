"""Wiring of the pipeline components for one source file."""

import subprocess
from pathlib import Path
from typing import Optional

from ..config import CompileConfig
from ..errors import ConfigurationError, FilesystemError
from ..utils.reporter import Reporter
from .cleanup import clear_aux_files, clear_split_files
from .coordinator import CycleResult, RecompilationCoordinator
from .engine import ArgumentBuilder, TexEngine
from .format_cache import FormatCache
from .invoker import CompilerInvoker, LogSanitizer
from .naming import WorkingNames
from .preamble import PreambleAdapter
from .relocator import ArtifactRelocator
from .splitter import SourceSplitter
from .watcher import ChangeWatchLoop


def resolve_source(source) -> Path:
    """Return the path of the ``.tex`` file named on the command line.

    Raises:
        ConfigurationError: If no source is given or the file is missing.
    """
    if not source:
        raise ConfigurationError("You should provide a .tex file to compile.")
    path = Path(source)
    if path.suffix != ".tex":
        path = path.with_name(path.name + ".tex")
    if not path.is_file():
        raise ConfigurationError(f"File {path} is missing.")
    return path.resolve()


class Session:
    """All components of a run, built from one resolved configuration.

    Replaces process-wide state: every component receives what it needs
    from here and the coordinator owns the single-flight guard.
    """

    def __init__(self, config: CompileConfig, engine: Optional[TexEngine] = None,
                 popen=subprocess.Popen, runner=subprocess.run):
        self.config = config
        self.reporter = Reporter(config.info_level)
        self.source = resolve_source(config.source)
        self.workdir = self.source.parent

        if engine is None:
            engine = TexEngine.select(config.xelatex).detect(runner)
        self.engine = engine
        self._report_engine()

        self.names = WorkingNames.resolve(self.source.name, config.temp_folder,
                                          normalize=not config.no_normalize, distro=engine.distro)
        self._ensure_temp_folder()

        self.arguments = ArgumentBuilder(engine, self.names, synctex=not config.no_synctex,
                                         extra=list(config.options))
        self.invoker = CompilerInvoker(self.workdir, self.names.log_file, self.reporter,
                                       LogSanitizer(config.sanitize_pattern), popen=popen)
        self.splitter = SourceSplitter(self.workdir, self.names, config.split_pattern,
                                       adapter=PreambleAdapter.for_engine(engine, self.reporter),
                                       reporter=self.reporter, strict=config.strict_split)
        self.format_cache = FormatCache(self.workdir, self.invoker, self.arguments,
                                        force=config.precompile, skip_all=config.compile_all)
        self.relocator = ArtifactRelocator(self.workdir, self.names, self.reporter,
                                           synctex=not config.no_synctex)
        self.coordinator = RecompilationCoordinator(self.splitter, self.format_cache, self.invoker,
                                                    self.arguments, self.relocator, self.reporter,
                                                    compile_all=config.compile_all)

    def _report_engine(self):
        engine = self.engine
        if engine.version and not engine.distro:
            self.reporter.warning(f"Unknown {engine.compiler} version: {engine.version}")
        if self.reporter.is_debug:
            self.reporter.debug(f"tex distribution: {engine.distro}")
            self.reporter.debug(f"{engine.compiler} version: {engine.version}")
            self.reporter.debug(f"{engine.compiler} location: {engine.location()}")

    def _ensure_temp_folder(self):
        if not self.names.temp_folder:
            return
        try:
            (self.workdir / self.names.temp_folder).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create {self.names.temp_folder}: {e}") from e

    def startup(self) -> CycleResult:
        """Run the configured number of compiles before watching."""
        return self.coordinator.startup(self.config.compiles_at_start)

    def watch_loop(self, observer=None) -> ChangeWatchLoop:
        return ChangeWatchLoop(self.coordinator, self.source, self.reporter,
                               debounce=self.config.debounce,
                               poll_interval=self.config.poll_interval, observer=observer)

    def shutdown(self):
        """Handle a shutdown request while a compile may still be running."""
        if self.config.kill_on_exit and self.invoker.terminate():
            self.reporter.info("Terminated the running compilation.")

    def cleanup(self):
        """Remove intermediate files, as the last action of the run."""
        if self.config.must_clear:
            clear_aux_files(self.workdir, self.names, self.config.aux_extensions, self.reporter)
        if self.reporter.is_debug:
            self.reporter.debug(f"Do not clear {self.names.preamble_file} and {self.names.body_file}.")
            self.reporter.debug("End.")
        else:
            clear_split_files(self.workdir, self.names, self.reporter)
