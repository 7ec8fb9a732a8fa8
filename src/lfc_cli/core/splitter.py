"""Split a LaTeX source into a precompilable preamble and a body.

The body file starts with ``%&<job>`` so that TeX loads the dumped
format, followed by enough blank lines to keep every body line at the
line number it has in the original source. Compiler diagnostics and
synctex data therefore point at the right lines of the user's file.
"""

import re
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..errors import FilesystemError, SplitError, SplitFailure
from .naming import WorkingNames
from .preamble import PreambleAdapter


DUMP_DIRECTIVE = b"\\dump"
EMPTY_READ_RETRY_DELAY = 0.1


@dataclass
class SplitArtifacts:
    """Contents of the preamble and body files for one source snapshot."""
    preamble: bytes
    body: bytes
    pad: int
    preamble_lines: int = 0
    extracted: List[bytes] = field(default_factory=list)


def split_source(source: bytes, pattern: re.Pattern, job_name: str,
                 adapter: Optional[PreambleAdapter] = None,
                 strict: bool = False) -> SplitArtifacts:
    """Split ``source`` at the first match of ``pattern``.

    Args:
        source: Raw bytes of the LaTeX file.
        pattern: Compiled bytes pattern marking the end of the preamble.
        job_name: Name of the format the body must load.
        adapter: Optional preamble transform.
        strict: Reject sources with more than one match.

    Returns:
        SplitArtifacts: Preamble terminated by ``\\dump`` and padded body.

    Raises:
        SplitError: If no marker is found, or several in strict mode.
    """
    match = pattern.search(source)
    if match is None:
        raise SplitError("Problem while splitting the source to preamble and body: "
                         "no end of preamble found.", SplitFailure.NO_MARKER)
    if strict and pattern.search(source, match.end()) is not None:
        raise SplitError("Problem while splitting the source to preamble and body: "
                         "the end of preamble marker appears more than once.",
                         SplitFailure.AMBIGUOUS_MARKER)

    preamble = source[:match.start()]
    body = source[match.start():]

    extracted = []
    dumped = preamble
    if adapter is not None:
        dumped, extracted = adapter.adapt(preamble)

    # Deferred lines are real body lines, the rest of the preamble is padding.
    pad = max(preamble.count(b"\n") - len(extracted), 1)
    header = b"%&" + job_name.encode('utf-8') + b"\n" * pad
    deferred = b"".join(line + b"\n" for line in extracted)

    return SplitArtifacts(
        preamble=dumped + DUMP_DIRECTIVE,
        body=header + deferred + body,
        pad=pad,
        preamble_lines=preamble.count(b"\n"),
        extracted=extracted
    )


class SourceSplitter:
    """Reads the source file and writes the split artifacts next to it."""

    def __init__(self, workdir: Path, names: WorkingNames, pattern: Optional[re.Pattern],
                 adapter: Optional[PreambleAdapter] = None, reporter=None,
                 strict: bool = False, retry_delay: float = EMPTY_READ_RETRY_DELAY):
        self.workdir = Path(workdir)
        self.names = names
        self.pattern = pattern
        self.adapter = adapter
        self.reporter = reporter
        self.strict = strict
        self.retry_delay = retry_delay

    @property
    def source_path(self) -> Path:
        return self.workdir / self.names.source_file

    def read_source(self) -> bytes:
        """Read the source, retrying once if it is observed empty.

        Editors may truncate the file before writing it, so a change event
        can arrive while the file is momentarily empty.

        Raises:
            SplitError: If the file cannot be read or stays empty.
        """
        for attempt in range(2):
            try:
                data = self.source_path.read_bytes()
            except OSError as e:
                raise SplitError(f"Problem reading {self.names.source_file} for splitting: {e}",
                                 SplitFailure.EMPTY_OR_UNREADABLE) from e
            if data:
                return data
            if attempt == 0:
                self._info(f"Problem reading {self.names.source_file} for splitting. Try one more time.")
                time.sleep(self.retry_delay)
        raise SplitError(f"Problem reading {self.names.source_file} for splitting: the file is empty.",
                         SplitFailure.EMPTY_OR_UNREADABLE)

    def split(self) -> SplitArtifacts:
        """Split the current on-disk content of the source."""
        artifacts = split_source(self.read_source(), self.pattern, self.names.internal,
                                 adapter=self.adapter, strict=self.strict)
        if artifacts.preamble_lines == 0:
            self._info("The preamble is empty.")
        return artifacts

    def prepare(self) -> SplitArtifacts:
        """Split the source and write ``.preamble.tex`` and ``.body.tex``."""
        artifacts = self.split()
        self._write(self.names.preamble_file, artifacts.preamble)
        self._write(self.names.body_file, artifacts.body)
        return artifacts

    def prepare_full_source(self):
        """Make the whole source available under the job name.

        Only needed when normalization renamed the file: TeX is then run on
        a copy named after the job.
        """
        if not self.names.is_renamed:
            return
        destination = self.workdir / self.names.full_file
        self._info(f" copy {self.names.source_file} to {self.names.full_file}")
        try:
            shutil.copyfile(self.source_path, destination)
        except OSError as e:
            raise FilesystemError(
                f"Error while copy {self.names.source_file} to {self.names.full_file}: {e}"
            ) from e

    def _write(self, name: str, data: bytes):
        self._info(f" create {name}")
        try:
            (self.workdir / name).write_bytes(data)
        except OSError as e:
            raise FilesystemError(f"Problem while writing {name}: {e}") from e

    def _info(self, message: str):
        if self.reporter is not None:
            self.reporter.info(message)
