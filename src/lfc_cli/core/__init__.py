"""Incremental recompilation pipeline."""

from .coordinator import CycleResult, CycleState, RecompilationCoordinator, SingleFlightGuard
from .engine import ArgumentBuilder, TexEngine
from .format_cache import FormatCache
from .invoker import CompileOutcome, CompilerInvoker, LogSanitizer
from .naming import WorkingNames, normalize_name
from .preamble import PreambleAdapter
from .relocator import ArtifactRelocator
from .session import Session
from .splitter import SourceSplitter, SplitArtifacts, split_source
from .watcher import ChangeWatchLoop

__all__ = [
    'ArgumentBuilder',
    'ArtifactRelocator',
    'ChangeWatchLoop',
    'CompileOutcome',
    'CompilerInvoker',
    'CycleResult',
    'CycleState',
    'FormatCache',
    'LogSanitizer',
    'PreambleAdapter',
    'RecompilationCoordinator',
    'Session',
    'SingleFlightGuard',
    'SourceSplitter',
    'SplitArtifacts',
    'TexEngine',
    'WorkingNames',
    'normalize_name',
    'split_source'
]
