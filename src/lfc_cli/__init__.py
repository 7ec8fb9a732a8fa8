"""latex-fast-compile: compile LaTeX documents using a precompiled preamble."""

from .version import __version__, get_version

__all__ = ['__version__', 'get_version']
