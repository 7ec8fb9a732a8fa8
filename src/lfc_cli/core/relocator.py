"""Bring compiler outputs back to the names the user expects."""

import os
import shutil
from pathlib import Path

from .invoker import CompileOutcome
from .naming import WorkingNames


class ArtifactRelocator:
    """Moves pdf and synctex files and fixes the source path in synctex.

    TeX writes its outputs under the job name, possibly inside the temp
    folder. Viewers and editors expect them next to the source, under the
    source's own name, and expect synctex to reference the real source
    instead of the body file.
    """

    def __init__(self, workdir: Path, names: WorkingNames, reporter, synctex: bool = True):
        self.workdir = Path(workdir)
        self.names = names
        self.reporter = reporter
        self.synctex = synctex

    def relocate(self, outcome: CompileOutcome, full_compile: bool = False) -> bool:
        """Relocate the artifacts of a successful final pass.

        Failures are reported and leave the internal file in place.

        Returns:
            bool: False if any copy, move or rewrite failed.
        """
        if not outcome.succeeded:
            return True

        ok = True
        if self.names.needs_relocation:
            ok = self._relocate_pdf() and ok
            if self.synctex:
                ok = self._relocate_synctex() and ok
        if self.synctex and (not full_compile or self.names.is_renamed):
            ok = self._rewrite_synctex(full_compile) and ok
        return ok

    def _path(self, name: str) -> Path:
        return self.workdir / name

    def _relocate_pdf(self) -> bool:
        source = self.names.output_base + ".pdf"
        target = self.names.original + ".pdf"
        if not self._path(source).is_file():
            return True
        self.reporter.info(f" copy {source} to {target}")
        try:
            shutil.copyfile(self._path(source), self._path(target))
        except OSError as e:
            self.reporter.error(f"Error while copy {source} to {target}: {e}")
            return False
        self.reporter.info(f" delete {source}")
        try:
            os.remove(self._path(source))
        except OSError as e:
            self.reporter.error(f"Error while deleting {source}: {e}")
            return False
        return True

    def _relocate_synctex(self) -> bool:
        source = self.names.output_base + ".synctex"
        target = self.names.original + ".synctex"
        if not self._path(source).is_file():
            return True
        self.reporter.info(f" move {source} to {target}")
        try:
            os.replace(self._path(source), self._path(target))
        except OSError as e:
            self.reporter.error(f"Error while moving {source} to {target}: {e}")
            return False
        return True

    def _rewrite_synctex(self, full_compile: bool) -> bool:
        """Point the synctex input record at the user's source file."""
        name = self.names.original + ".synctex"
        internal = self.names.full_file if full_compile else self.names.body_file
        if not self._path(name).is_file():
            return True
        self.reporter.info(f" modify {name}")
        try:
            data = self._path(name).read_bytes()
            data = data.replace(internal.encode('utf-8'),
                                self.names.source_file.encode('utf-8'), 1)
            self._path(name).write_bytes(data)
        except OSError as e:
            self.reporter.error(f"Problem modifying {name}: {e}")
            return False
        return True
