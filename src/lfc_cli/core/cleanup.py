"""End-of-run removal of intermediate files."""

import os
from pathlib import Path
from typing import Iterable, List

from .naming import WorkingNames


def clear_files(workdir: Path, base: str, extensions: Iterable[str], reporter=None) -> List[str]:
    """Remove ``<base>.<ext>`` for every extension, skipping missing files.

    Returns:
        List[str]: Names of the removed files.
    """
    removed = []
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        name = f"{base}.{ext}"
        path = Path(workdir) / name
        if not path.is_file():
            continue
        if reporter is not None:
            reporter.info(f" remove {name}")
        try:
            os.remove(path)
        except OSError as e:
            if reporter is not None:
                reporter.error(f"Problem removing {name}: {e}")
            continue
        removed.append(name)
    return removed


def clear_split_files(workdir: Path, names: WorkingNames, reporter=None) -> List[str]:
    """Remove the preamble and body files written by the splitter."""
    return clear_files(workdir, names.internal, ["preamble.tex", "body.tex"], reporter)


def clear_aux_files(workdir: Path, names: WorkingNames, aux_extensions: str, reporter=None) -> List[str]:
    """Remove the auxiliary files TeX left under the job name."""
    return clear_files(workdir, names.out_base, aux_extensions.split(","), reporter)
