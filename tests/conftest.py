from __future__ import annotations

from pathlib import Path

import pytest

from latexfix.config import Settings
from latexfix.core.compiler import CompileFailure, CompileSuccess
from latexfix.core.latex_log_parser import parse_log
from latexfix.exceptions import FixUnavailableError

UNDEFINED_LOG = """This is pdfTeX, Version 3.14159265-2.6-1.40.21
(./document.tex
LaTeX2e <2020-10-01>
! Undefined control sequence.
l.3 \\textbf{Hello \\unknowncommand
                                   World}
? 
! Emergency stop.
l.3 \\textbf{Hello \\unknowncommand
                                   World}
!  ==> Fatal error occurred, no output PDF file produced!"""

GOOD_LATEX = "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n"
BROKEN_LATEX = "\\documentclass{article}\n\\begin{document}\n\\unknowncommand\n\\end{document}\n"
PDF_BYTES = b"%PDF-1.5 fake"


def failure(log_text: str = UNDEFINED_LOG) -> CompileFailure:
    return CompileFailure(log_text=log_text, diagnosis=parse_log(log_text), returncode=1)


class FakeCompiler:
    """Succeeds unless the source still contains ``\\unknowncommand``."""

    engine = "pdflatex"

    def __init__(self, present: bool = True, always_fail: bool = False, error: Exception | None = None):
        self.present = present
        self.always_fail = always_fail
        self.error = error
        self.calls = []
        self.workdirs = []

    def available(self) -> bool:
        return self.present

    def compile(self, latex_code, workdir):
        self.calls.append(latex_code)
        self.workdirs.append(Path(workdir))
        assert Path(workdir).is_dir()
        if self.error is not None:
            raise self.error
        if self.always_fail or "\\unknowncommand" in latex_code:
            return failure()
        return CompileSuccess(pdf=PDF_BYTES)


class FakeFixer:
    """Removes the undefined command, or echoes the input when ``echo`` is set."""

    def __init__(self, available: bool = True, echo: bool = False, error: str | None = None):
        self._available = available
        self.echo = echo
        self.error = error
        self.calls = []

    @property
    def available(self) -> bool:
        return self._available

    def fix(self, latex, error):
        self.calls.append((latex, error))
        if self.error:
            raise FixUnavailableError(self.error)
        if self.echo:
            return latex
        return latex.replace("\\unknowncommand", "")


@pytest.fixture
def settings(tmp_path):
    return Settings(_env_file=None, work_root=tmp_path / "jobs", json_logs=False, anthropic_api_key=None)


@pytest.fixture
def work_root(settings):
    settings.work_root.mkdir(parents=True, exist_ok=True)
    return settings.work_root
