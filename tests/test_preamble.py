"""Tests for the xetex preamble adapter."""

import re

from lfc_cli.config import DEFAULT_SPLIT
from lfc_cli.core.engine import TexEngine
from lfc_cli.core.preamble import XETEX_ENCODING_PRELUDE, PreambleAdapter
from lfc_cli.core.splitter import split_source
from tests._fixtures.sources import XETEX_SOURCE

PATTERN = re.compile(DEFAULT_SPLIT.encode())


def test_adapter_only_for_xetex():
    assert PreambleAdapter.for_engine(TexEngine.select(xelatex=False)) is None
    assert isinstance(PreambleAdapter.for_engine(TexEngine.select(xelatex=True)), PreambleAdapter)


def test_adapt_moves_font_packages_and_prepends_prelude():
    preamble = b"\\documentclass{article}\n\\usepackage{fontspec}\n\\usepackage{amsmath}\n"

    adapted, extracted = PreambleAdapter().adapt(preamble)

    assert extracted == [b"\\usepackage{fontspec}"]
    assert adapted.startswith(XETEX_ENCODING_PRELUDE)
    assert b"fontspec" not in adapted
    assert b"\\usepackage{amsmath}" in adapted


def test_xetex_split_keeps_body_lines_aligned():
    source = XETEX_SOURCE.encode()

    artifacts = split_source(source, PATTERN, "doc", adapter=PreambleAdapter())

    original = source.split(b"\n")
    body = artifacts.body.split(b"\n")
    marker = original.index(b"\\begin{document}")
    assert artifacts.pad == marker - 2
    assert body[0] == b"%&doc"
    assert body[artifacts.pad:marker] == [b"\\usepackage{fontspec}", b"\\usepackage{polyglossia}"]
    assert body[marker:] == original[marker:]
    assert artifacts.preamble.endswith(b"\\dump")
    assert b"polyglossia" not in artifacts.preamble


def test_xetex_split_with_every_line_extracted_pads_one_line():
    source = b"\\usepackage{fontspec}\n\\begin{document}\n\\end{document}\n"

    artifacts = split_source(source, PATTERN, "doc", adapter=PreambleAdapter())

    assert artifacts.pad == 1
    assert artifacts.body.startswith(b"%&doc\n\\usepackage{fontspec}\n\\begin{document}")
