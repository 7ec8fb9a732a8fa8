"""Tests for console output helpers."""

import lfc_cli.utils as utils
from lfc_cli.utils.console import _rich_echo, _rich_error, delimit


def test_messages_are_printed_verbatim(capsys):
    _rich_echo("[bold]\\section{x}[/bold]")
    _rich_error("Error: l.12 [oops]")

    out = capsys.readouterr().out
    assert "[bold]\\section{x}[/bold]" in out
    assert "Error: l.12 [oops]" in out


def test_delimit_frames_the_message():
    lines = delimit("command", "end", "pdftex -ini").split("\n")

    assert lines[0] == "-" * 77 + " command"
    assert lines[1] == "pdftex -ini"
    assert lines[2] == "-" * 77 + " end"


def test_utils_exports_only_the_helpers_in_use():
    assert sorted(utils.__all__) == sorted([
        '_rich_error', '_rich_warning', '_rich_info', '_rich_echo', '_get_console', 'delimit', 'Reporter',
    ])
