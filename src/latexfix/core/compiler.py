import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..exceptions import CompilerNotFoundError
from .latex_log_parser import LogDiagnosis, parse_log

LOGGER = logging.getLogger(__name__)

SOURCE_NAME = "document.tex"
OUTPUT_NAME = "document.pdf"
LOG_NAME = "document.log"


@dataclass(frozen=True)
class CompileSuccess:
    pdf: bytes
    log_text: str = ""

    ok = True


@dataclass(frozen=True)
class CompileFailure:
    log_text: str
    diagnosis: LogDiagnosis
    timed_out: bool = False
    returncode: Optional[int] = None

    ok = False

    @property
    def message(self) -> str:
        return self.diagnosis.message

    @property
    def excerpt(self) -> str:
        return self.diagnosis.excerpt


CompileOutcome = Union[CompileSuccess, CompileFailure]


class LatexCompiler:
    def __init__(self, engine: str = "pdflatex", timeout: float = 30.0):
        """
        Initialize the compiler.
        Args:
            engine: executable name or path of the LaTeX engine.
            timeout: wall-clock limit in seconds for a single run.
        """
        self.engine = engine
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.engine) is not None

    def command(self) -> list[str]:
        return [self.engine, "-interaction=nonstopmode", "-halt-on-error", SOURCE_NAME]

    def compile(self, latex_code: str, workdir: Path) -> CompileOutcome:
        """
        Compile LaTeX code inside ``workdir``.

        Success means the PDF exists afterwards; the exit status alone is not
        trusted. The log file, when present, is the diagnostic source.
        Raises:
            CompilerNotFoundError: the engine binary cannot be executed.
        """
        workdir = Path(workdir)
        tex_file = workdir / SOURCE_NAME
        pdf_file = workdir / OUTPUT_NAME
        log_file = workdir / LOG_NAME
        tex_file.write_text(latex_code, encoding="utf-8")
        for stale in (pdf_file, log_file):
            if stale.exists():
                stale.unlink()

        timed_out = False
        returncode: Optional[int] = None
        process_output = ""
        try:
            result = subprocess.run(
                self.command(),
                cwd=str(workdir),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout,
            )
            returncode = result.returncode
            process_output = "\n".join(part for part in (result.stdout, result.stderr) if part)
        except FileNotFoundError as exc:
            raise CompilerNotFoundError(self.engine) from exc
        except subprocess.TimeoutExpired:
            timed_out = True
            process_output = f"Compilation timed out after {self.timeout:g}s"
            LOGGER.warning("%s timed out in %s", self.engine, workdir)

        log_text = log_file.read_text(encoding="utf-8", errors="replace") if log_file.exists() else process_output

        if pdf_file.exists():
            if returncode not in (0, None):
                LOGGER.info("%s exited with %s but produced %s", self.engine, returncode, OUTPUT_NAME)
            return CompileSuccess(pdf=pdf_file.read_bytes(), log_text=log_text)

        diagnosis = parse_log(log_text)
        if timed_out and not diagnosis.found_marker:
            diagnosis = LogDiagnosis(
                category="timeout",
                message=process_output,
                excerpt=diagnosis.excerpt,
            )
        LOGGER.debug("Compilation failed (returncode=%s): %s", returncode, diagnosis.message)
        return CompileFailure(log_text=log_text, diagnosis=diagnosis, timed_out=timed_out, returncode=returncode)


__all__ = ["LatexCompiler", "CompileSuccess", "CompileFailure", "CompileOutcome"]
