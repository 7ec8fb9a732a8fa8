"""Tests for the command-line interface."""

import os
import signal
import sys

import pytest
from click.testing import CliRunner

import lfc_cli.cli as cli_module
from lfc_cli.cli import cli, main
from lfc_cli.config import PROJECT_CONFIG_FILE
from lfc_cli.core.session import Session
from tests._fixtures.sources import NO_MARKER_SOURCE


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def fake_session(monkeypatch, fake_tex, texlive):
    """Run every CLI session against the fake TeX binary."""
    monkeypatch.setattr(cli_module, "Session",
                        lambda config: Session(config, engine=texlive, popen=fake_tex))


def test_compile_once(runner, write_source, fake_tex, tmp_path):
    source = write_source()

    result = runner.invoke(cli, [str(source), "--no-watch", "--info", "no"])

    assert result.exit_code == 0, result.output
    assert fake_tex.kinds == ["precompile", "final"]
    assert (tmp_path / "doc.pdf").is_file()
    assert not (tmp_path / "doc.body.tex").exists()


def test_extension_is_optional(runner, write_source, fake_tex, tmp_path):
    write_source()

    result = runner.invoke(cli, [str(tmp_path / "doc"), "--no-watch", "--info", "no"])

    assert result.exit_code == 0, result.output


def test_missing_source(runner, tmp_path):
    result = runner.invoke(cli, [str(tmp_path / "absent.tex"), "--no-watch"])

    assert result.exit_code == 1
    assert "is missing" in result.output


def test_no_source(runner):
    result = runner.invoke(cli, ["--no-watch"])

    assert result.exit_code == 1
    assert "You should provide a .tex file to compile." in result.output


def test_more_than_one_source(runner, write_source):
    result = runner.invoke(cli, [str(write_source("a.tex")), str(write_source("b.tex")), "--no-watch"])

    assert result.exit_code == 1
    assert "No more than one positional parameter" in result.output


def test_split_failure_at_start_exits_with_error(runner, write_source, fake_tex):
    source = write_source(content=NO_MARKER_SOURCE)

    result = runner.invoke(cli, [str(source), "--no-watch", "--info", "errors"])

    assert result.exit_code == 1
    assert "no end of preamble found" in result.output
    assert fake_tex.calls == []


def test_compile_failure_at_start_exits_with_error(runner, write_source, fake_tex):
    fake_tex.failing.add("final")

    result = runner.invoke(cli, [str(write_source()), "--no-watch", "--info", "no"])

    assert result.exit_code == 1


def test_options_reach_the_compiler(runner, write_source, fake_tex):
    source = write_source()

    result = runner.invoke(cli, [str(source), "--no-watch", "--info", "no", "--no-synctex",
                                 "--option=-shell-escape", "--option=-file-line-error",
                                 "--compiles-at-start", "2"])

    assert result.exit_code == 0, result.output
    assert fake_tex.kinds == ["precompile", "draft", "final"]
    final = fake_tex.calls[-1]
    assert "-shell-escape" in final and "-file-line-error" in final
    assert "--synctex=-1" not in final


def test_project_file_is_used_unless_overridden(runner, write_source, fake_tex, tmp_path):
    source = write_source()
    (tmp_path / PROJECT_CONFIG_FILE).write_text("compiles-at-start: 2\nskip-fmt: true\n", encoding="utf-8")

    result = runner.invoke(cli, [str(source), "--no-watch", "--info", "no"])
    assert result.exit_code == 0, result.output
    assert fake_tex.kinds == ["draft", "final"]

    fake_tex.calls.clear()
    result = runner.invoke(cli, [str(source), "--no-watch", "--info", "no", "--compiles-at-start", "1"])
    assert result.exit_code == 0, result.output
    assert fake_tex.kinds == ["final"]


def test_invalid_project_file(runner, write_source, tmp_path):
    source = write_source()
    (tmp_path / PROJECT_CONFIG_FILE).write_text("clear: sometimes\n", encoding="utf-8")

    result = runner.invoke(cli, [str(source), "--no-watch"])

    assert result.exit_code == 1
    assert "Invalid clear mode" in result.output


def test_version(runner, monkeypatch):
    monkeypatch.setattr("lfc_cli.core.engine.get_tex_version",
                        lambda compiler, runner=None: "pdfTeX 3.14 (TeX Live 2023)")

    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "latex-fast-compile" in result.output
    assert "tex distribution: texlive" in result.output
    assert "pdftex version: pdfTeX 3.14 (TeX Live 2023)" in result.output


def test_help(runner):
    result = runner.invoke(cli, ["-h"])

    assert result.exit_code == 0
    assert "--precompile" in result.output
    assert "--kill-on-exit" in result.output


@pytest.mark.parametrize("env,status", [(None, 1), ("2", 2), ("bogus", 1)])
def test_usage_error_status(monkeypatch, capsys, env, status):
    if env is None:
        monkeypatch.delenv("LFC_USAGE_ERROR_STATUS", raising=False)
    else:
        monkeypatch.setenv("LFC_USAGE_ERROR_STATUS", env)
    monkeypatch.setattr(sys, "argv", ["latex-fast-compile", "--info", "loud"])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == status
    assert "Problem parsing parameters" in capsys.readouterr().out


def test_main_runs_the_command(monkeypatch, write_source, fake_tex):
    monkeypatch.setattr(sys, "argv", ["latex-fast-compile", str(write_source()), "--no-watch", "--info", "no"])

    with pytest.raises(SystemExit) as excinfo:
        main()

    assert excinfo.value.code == 0
    assert fake_tex.kinds == ["precompile", "final"]


def test_project_value_with_wrong_type_is_reported(runner, write_source, tmp_path):
    source = write_source()
    (tmp_path / PROJECT_CONFIG_FILE).write_text("debounce: '0.5'\n", encoding="utf-8")

    result = runner.invoke(cli, [str(source), "--no-watch"])

    assert result.exit_code == 1
    assert "Error: Invalid value '0.5' for option 'debounce'" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def _signal_during(kind, signum):
    def before_run(process):
        if process.kind == kind:
            os.kill(os.getpid(), signum)
    return before_run


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
@pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGINT])
def test_signal_during_startup_still_cleans_up(runner, write_source, fake_tex, tmp_path, signum):
    source = write_source()
    fake_tex.before_run = _signal_during("draft", signum)
    previous = signal.getsignal(signum)

    result = runner.invoke(cli, [str(source), "--info", "no", "--compiles-at-start", "3"])

    assert result.exit_code == 0, result.output
    assert fake_tex.kinds == ["precompile", "draft"]
    assert not (tmp_path / "doc.preamble.tex").exists()
    assert not (tmp_path / "doc.body.tex").exists()
    assert not fake_tex.processes[-1].terminated
    assert signal.getsignal(signum) is previous


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_signal_during_startup_terminates_compiler_when_asked(runner, write_source, fake_tex):
    fake_tex.before_run = _signal_during("final", signal.SIGTERM)

    result = runner.invoke(cli, [str(write_source()), "--info", "no", "--kill-on-exit"])

    assert result.exit_code == 0, result.output
    assert fake_tex.processes[-1].terminated
