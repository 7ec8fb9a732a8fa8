from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from lfc_cli.config import CompileConfig
from lfc_cli.core.engine import TexEngine
from lfc_cli.core.session import Session
from tests._fixtures.fake_tex import FakeTex
from tests._fixtures.sources import SAMPLE_SOURCE


@pytest.fixture
def fake_tex() -> FakeTex:
    """A fresh fake TeX binary."""
    return FakeTex()


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[..., Path]:
    """Write a LaTeX source into tmp_path and return its path."""

    def _write(name: str = "doc.tex", content: str = SAMPLE_SOURCE) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def texlive() -> TexEngine:
    return TexEngine(version="pdfTeX 3.141592653-2.6-1.40.25 (TeX Live 2023)", distro="texlive")


@pytest.fixture
def make_session(write_source, fake_tex, texlive) -> Callable[..., Session]:
    """Build a Session on a sample source, driven by the fake TeX binary."""

    def _make(name: str = "doc.tex", content: str = SAMPLE_SOURCE, engine: TexEngine | None = None,
              **options) -> Session:
        source = write_source(name, content)
        options.setdefault("info", "no")
        options.setdefault("no_watch", True)
        config = CompileConfig(source=source, **options)
        return Session(config, engine=engine or texlive, popen=fake_tex)

    return _make
