"""TeX engine selection, distribution detection and argument sets."""

import shutil
import subprocess
from dataclasses import dataclass, field
from typing import List

from ..errors import ConfigurationError
from .naming import WorkingNames


BATCH_OPTIONS = ["-interaction=batchmode", "-halt-on-error"]
SYNCTEX_OPTION = "--synctex=-1"
DRAFT_OPTION = "-draftmode"


@dataclass
class TexEngine:
    """The TeX binary and the LaTeX format it is driven with."""
    compiler: str = "pdftex"
    latex_format: str = "pdflatex"
    version: str = ""
    distro: str = ""

    @classmethod
    def select(cls, xelatex: bool = False) -> 'TexEngine':
        if xelatex:
            return cls("xetex", "xelatex")
        return cls()

    @property
    def is_xetex(self) -> bool:
        return self.compiler == "xetex"

    def detect(self, runner=subprocess.run, required: bool = True) -> 'TexEngine':
        """Fill ``version`` and ``distro`` from ``<compiler> --version``.

        Raises:
            ConfigurationError: If ``required`` and the compiler cannot be run at all.
        """
        self.version = get_tex_version(self.compiler, runner)
        if "MiKTeX" in self.version:
            self.distro = "miktex"
        elif "TeX Live" in self.version:
            self.distro = "texlive"
        if required and not self.version:
            raise ConfigurationError(f"Can't find {self.compiler} in the current path.")
        return self

    def location(self) -> str:
        return shutil.which(self.compiler) or ""


def get_tex_version(compiler: str, runner=subprocess.run) -> str:
    """Return the first line printed by ``<compiler> --version``, or ''."""
    try:
        result = runner([compiler, "--version"], stdin=subprocess.DEVNULL,
                        stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
    except OSError:
        return ""
    if result.returncode != 0 or not result.stdout:
        return ""
    lines = result.stdout.decode('utf-8', errors='replace').splitlines()
    return lines[0].strip() if lines else ""


@dataclass
class ArgumentBuilder:
    """Builds the argument vectors of the precompile and compile passes.

    Attributes:
        engine: Selected engine.
        names: Working names of the current source.
        synctex: Produce the synchronization file on final passes.
        extra: Additional user options, passed to every pass.
    """
    engine: TexEngine
    names: WorkingNames
    synctex: bool = True
    extra: List[str] = field(default_factory=list)

    def _directory_options(self) -> List[str]:
        if not self.names.temp_folder:
            return []
        if self.names.aux_directory:
            return [f"-aux-directory={self.names.temp_folder}"]
        return [f"-output-directory={self.names.temp_folder}"]

    def precompile_args(self) -> List[str]:
        """Arguments of the ``-ini`` pass that dumps the preamble format."""
        return (BATCH_OPTIONS + ["-ini"] + list(self.extra) + self._directory_options()
                + [f"-jobname={self.names.internal}",
                   f"&{self.engine.latex_format} {self.names.preamble_file}"])

    def compile_args(self, draft: bool = False, full: bool = False) -> List[str]:
        """Arguments of a document pass.

        Args:
            draft: Add ``-draftmode`` (no pdf is written).
            full: Compile the whole document with the stock LaTeX format
                instead of the body with the precompiled one.
        """
        args = list(BATCH_OPTIONS)
        if self.synctex:
            args.append(SYNCTEX_OPTION)
        args += list(self.extra) + self._directory_options()
        if draft:
            args.append(DRAFT_OPTION)
        if full:
            source = f"&{self.engine.latex_format} {self.names.full_file}"
        else:
            source = f"&{self.names.internal} {self.names.body_file}"
        return args + [f"-jobname={self.names.internal}", source]
