"""Mapping between user-facing file names and the names TeX works with."""

import os
import unicodedata
from dataclasses import dataclass


def normalize_name(name: str) -> str:
    """Remove accents and spaces from a file name.

    TeX job names cannot reliably contain either, so ``Thèse finale``
    becomes ``Thesefinale``.
    """
    decomposed = unicodedata.normalize('NFD', name)
    stripped = ''.join(c for c in decomposed if unicodedata.category(c) != 'Mn')
    return unicodedata.normalize('NFC', stripped).replace(' ', '')


@dataclass(frozen=True)
class WorkingNames:
    """User-facing and internal base names for one source file.

    All names are relative to the source file's directory, which is
    where the compiler runs.

    Attributes:
        original: Base name of the source as given by the user, without ``.tex``.
        internal: Job name passed to TeX (normalized unless disabled).
        temp_folder: Output directory for TeX, or empty.
        aux_directory: True when MiKTeX writes only auxiliary files to
            ``temp_folder`` and the pdf stays next to the source.
    """
    original: str
    internal: str
    temp_folder: str = ""
    aux_directory: bool = False

    @classmethod
    def resolve(cls, source_name: str, temp_folder: str = "", normalize: bool = True,
                distro: str = "") -> 'WorkingNames':
        """Compute the names for ``source_name`` (``.tex`` suffix optional)."""
        original = source_name[:-4] if source_name.endswith('.tex') else source_name
        internal = normalize_name(original) if normalize else original
        if normalize:
            temp_folder = normalize_name(temp_folder)
        aux_directory = bool(temp_folder) and internal == original and distro == "miktex"
        return cls(original, internal, temp_folder, aux_directory)

    @property
    def is_renamed(self) -> bool:
        return self.internal != self.original

    @property
    def out_base(self) -> str:
        """Base of the files TeX writes (log, fmt, aux...)."""
        if self.temp_folder:
            return os.path.join(self.temp_folder, self.internal)
        return self.internal

    @property
    def output_base(self) -> str:
        """Base of the pdf and synctex files as produced by TeX."""
        if self.aux_directory:
            return self.internal
        return self.out_base

    @property
    def needs_relocation(self) -> bool:
        return self.output_base != self.original

    @property
    def source_file(self) -> str:
        return self.original + ".tex"

    @property
    def preamble_file(self) -> str:
        return self.internal + ".preamble.tex"

    @property
    def body_file(self) -> str:
        return self.internal + ".body.tex"

    @property
    def full_file(self) -> str:
        """Input of a full compile: a normalized copy when renamed."""
        return self.internal + ".tex"

    @property
    def format_file(self) -> str:
        return self.out_base + ".fmt"

    @property
    def log_file(self) -> str:
        return self.out_base + ".log"
