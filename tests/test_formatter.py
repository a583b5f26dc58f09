"""Unit tests for the external HTML formatter wrapper."""

from __future__ import annotations

import subprocess
import typing as typ

import pytest

from coursegen.config import TidyConfig
from coursegen.diagnostics import BuildReport
from coursegen.errors import FormatterError
from coursegen.generator import HtmlFormatter

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def page(tmp_path: Path) -> Path:
    """Return a written HTML page."""
    path = tmp_path / "step01.html"
    path.write_text("<html><body><p>x</body></html>", encoding="utf-8")
    return path


def test_disabled_formatter_does_nothing(page: Path, mocker: typ.Any) -> None:
    """No process should run while formatting is disabled."""
    run = mocker.patch("coursegen.generator.formatter.subprocess.run")
    HtmlFormatter(TidyConfig(), BuildReport()).format(page)
    run.assert_not_called()


def test_format_runs_tidy_in_place(page: Path, mocker: typ.Any) -> None:
    """The formatter should modify the page in place and keep a backup."""
    run = mocker.patch(
        "coursegen.generator.formatter.subprocess.run",
        return_value=subprocess.CompletedProcess([], 1, stdout="", stderr="line 1: warning"),
    )
    report = BuildReport()
    config = TidyConfig(enabled=True, command=str(page), args=["-q"], backup=True)
    HtmlFormatter(config, report).format(page)
    args = run.call_args.args[0]
    assert args == [str(page), "-q", "-m", str(page)]
    assert page.with_name("step01.html.orig").exists(), "Expected a backup copy"
    assert report.formatter_output, "Expected tidy diagnostics to be kept"
    assert report.ok, "Exit status 1 should only mean warnings"


def test_format_failure_is_reported(page: Path, mocker: typ.Any) -> None:
    """An exit status above 1 should become a build warning."""
    mocker.patch(
        "coursegen.generator.formatter.subprocess.run",
        return_value=subprocess.CompletedProcess([], 2, stdout="", stderr="error"),
    )
    report = BuildReport()
    HtmlFormatter(TidyConfig(enabled=True, command=str(page)), report).format(page)
    assert len(report.warnings) == 1
    assert "status 2" in report.warnings[0]


def test_missing_executable(page: Path, mocker: typ.Any) -> None:
    """A missing formatter command should abort when formatting is on."""
    mocker.patch("coursegen.generator.formatter.shutil.which", return_value=None)
    formatter = HtmlFormatter(
        TidyConfig(enabled=True, command="definitely-not-tidy"), BuildReport()
    )
    with pytest.raises(FormatterError, match="definitely-not-tidy"):
        formatter.format(page)
