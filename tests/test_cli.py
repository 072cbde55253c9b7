import pytest

from latexfix import main as cli
from latexfix.pipeline import CompileLoop

from conftest import BROKEN_LATEX, GOOD_LATEX, PDF_BYTES, FakeCompiler, FakeFixer


@pytest.fixture
def wire(monkeypatch, settings):
    def _wire(compiler=None, fixer=None):
        compiler = compiler or FakeCompiler()
        fixer = fixer or FakeFixer()
        monkeypatch.setattr(cli, "get_settings", lambda: settings)
        monkeypatch.setattr(
            cli, "build_compile_loop", lambda s: CompileLoop(compiler, fixer, max_attempts=s.max_attempts)
        )
        return compiler, fixer

    return _wire


def test_compile_writes_pdf(tmp_path, wire, capsys):
    wire()
    source = tmp_path / "resume.tex"
    source.write_text(GOOD_LATEX, encoding="utf-8")

    assert cli.main(["compile", str(source)]) == 0
    assert (tmp_path / "resume.pdf").read_bytes() == PDF_BYTES
    assert "Attempts: 1" in capsys.readouterr().out


def test_compile_with_fix_saves_repaired_source(tmp_path, wire):
    wire()
    source = tmp_path / "doc.tex"
    source.write_text(BROKEN_LATEX, encoding="utf-8")
    out = tmp_path / "out.pdf"

    assert cli.main(["compile", str(source), "-o", str(out), "--save-source"]) == 0
    assert out.exists()
    assert "\\unknowncommand" not in (tmp_path / "doc.fixed.tex").read_text(encoding="utf-8")


def test_compile_failure_exits_nonzero(tmp_path, wire, capsys):
    _, fixer = wire()
    source = tmp_path / "doc.tex"
    source.write_text(BROKEN_LATEX, encoding="utf-8")

    assert cli.main(["compile", str(source), "--no-fix"]) == 1
    assert fixer.calls == []
    assert "Undefined LaTeX command" in capsys.readouterr().err
    assert not (tmp_path / "doc.pdf").exists()


def test_max_attempts_flag(tmp_path, wire):
    compiler, fixer = wire(compiler=FakeCompiler(always_fail=True))
    source = tmp_path / "doc.tex"
    source.write_text(BROKEN_LATEX, encoding="utf-8")

    assert cli.main(["compile", str(source), "--max-attempts", "2"]) == 1
    assert len(compiler.calls) == 2
    assert len(fixer.calls) == 1


def test_missing_input(tmp_path, wire):
    wire()
    assert cli.main(["compile", str(tmp_path / "nope.tex")]) == 1
