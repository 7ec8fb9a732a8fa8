"""Preamble transform for engines that cannot dump every package."""

from typing import List, Optional, Sequence, Tuple

from .engine import TexEngine


# Dump the format with OT1 and switch every later job back to TU.
XETEX_ENCODING_PRELUDE = (
    b"\\def\\encodingdefault{OT1}\\normalfont\n"
    b"\\everyjob\\expandafter{\\the\\everyjob\\def\\encodingdefault{TU}\\normalfont}"
)
XETEX_DEFERRED_PACKAGES = (b"fontspec", b"polyglossia")


class PreambleAdapter:
    """Moves resource-binding package lines from the preamble to the body.

    xetex loads system fonts when ``fontspec`` or ``polyglossia`` are
    read; that state cannot be stored in a format file, so those lines
    are replayed at the top of the body instead.
    """

    def __init__(self, prelude: bytes = XETEX_ENCODING_PRELUDE,
                 deferred: Sequence[bytes] = XETEX_DEFERRED_PACKAGES, reporter=None):
        self.prelude = prelude
        self.deferred = tuple(deferred)
        self.reporter = reporter

    @classmethod
    def for_engine(cls, engine: TexEngine, reporter=None) -> Optional['PreambleAdapter']:
        """Return an adapter if ``engine`` needs one, else None."""
        if engine.is_xetex:
            return cls(reporter=reporter)
        return None

    def adapt(self, preamble: bytes) -> Tuple[bytes, List[bytes]]:
        """Split ``preamble`` into the part to dump and the lines to defer.

        Returns:
            Tuple of (adapted preamble starting with the encoding prelude,
            extracted lines in their original order, without newlines).
        """
        self._info("Adapt preamble to xelatex.")
        self._info("Switch to OT1 encoding in the preamble. And restore TU encoding later.")
        adapted = self.prelude
        extracted = []
        for line in preamble.split(b"\n"):
            if any(package in line for package in self.deferred):
                self._info(f"Move line from preamble to body: {line.decode('utf-8', errors='replace')}")
                extracted.append(line)
            else:
                adapted += b"\n" + line
        return adapted, extracted

    def _info(self, message: str):
        if self.reporter is not None:
            self.reporter.info(message)
