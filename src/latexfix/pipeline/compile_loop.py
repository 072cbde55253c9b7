"""Compile/fix retry loop with an explicit transition function."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from ..config import Settings
from ..core.compiler import CompileFailure, CompileOutcome, CompileSuccess, LatexCompiler
from ..core.llm import ClaudeLatexFixer
from ..core.logging_setup import get_logger
from ..core.workspace import Job
from ..exceptions import FixUnavailableError

LOGGER = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class Compiler(Protocol):
    def compile(self, latex_code: str, workdir) -> CompileOutcome: ...


class Fixer(Protocol):
    @property
    def available(self) -> bool: ...

    def fix(self, latex: str, error: str) -> str: ...


class Decision(enum.Enum):
    SUCCEED = "succeed"
    FIX_AND_RETRY = "fix_and_retry"
    FAIL = "fail"


def decide(attempt: int, outcome: CompileOutcome, fix_enabled: bool, max_attempts: int) -> Decision:
    """Transition out of ``Attempting(attempt)``. Pure; no side effects."""
    if isinstance(outcome, CompileSuccess):
        return Decision.SUCCEED
    if fix_enabled and attempt < max_attempts:
        return Decision.FIX_AND_RETRY
    return Decision.FAIL


@dataclass
class LoopResult:
    status: str  # succeeded | failed
    attempts: int
    source: str
    pdf: Optional[bytes] = None
    failure: Optional[CompileFailure] = None
    fixes_requested: int = 0
    fixes_applied: int = 0
    fix_error: Optional[str] = None
    history: List[Dict[str, object]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def llm_fixed(self) -> bool:
        return self.fixes_applied > 0

    @property
    def fix_attempted(self) -> bool:
        return self.fixes_requested > 0


class CompileLoop:
    def __init__(self, compiler: Compiler, fixer: Optional[Fixer] = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.compiler = compiler
        self.fixer = fixer
        self.max_attempts = max(1, max_attempts)

    def fixing_enabled(self, auto_fix: bool) -> bool:
        return bool(auto_fix) and self.fixer is not None and self.fixer.available

    def run(self, job: Job, auto_fix: bool = True) -> LoopResult:
        """
        Drive ``job`` through Attempting(1..max) until Succeeded or FailedFinal.

        Working-directory cleanup belongs to the caller's ``job_workspace``
        block. ``CompilerNotFoundError`` and unexpected errors propagate.
        """
        fix_enabled = self.fixing_enabled(auto_fix)
        history: List[Dict[str, object]] = []
        fixes_requested = 0

        while True:
            attempt = job.record_attempt()
            LOGGER.info("compile_attempt", attempt=attempt, max_attempts=self.max_attempts)
            outcome = self.compiler.compile(job.source, job.workdir)
            decision = decide(attempt, outcome, fix_enabled, self.max_attempts)
            history.append({"attempt": attempt, "success": outcome.ok, "decision": decision.value})

            if decision is Decision.SUCCEED:
                LOGGER.info("compile_succeeded", attempts=attempt, fixes=job.fixes_applied)
                return LoopResult(
                    status="succeeded",
                    attempts=attempt,
                    source=job.source,
                    pdf=outcome.pdf,
                    fixes_requested=fixes_requested,
                    fixes_applied=job.fixes_applied,
                    history=history,
                )

            job.last_error = outcome.message
            LOGGER.warning("compile_failed", attempt=attempt, category=outcome.diagnosis.category, error=outcome.message)

            if decision is Decision.FAIL:
                return self._failed(job, outcome, fixes_requested, history)

            fixes_requested += 1
            try:
                job.source = self.fixer.fix(job.source, outcome.message)
            except FixUnavailableError as exc:
                LOGGER.warning("fix_unavailable", attempt=attempt, error=str(exc))
                return self._failed(job, outcome, fixes_requested, history, fix_error=str(exc))
            job.fixes_applied += 1

    def _failed(
        self,
        job: Job,
        failure: CompileFailure,
        fixes_requested: int,
        history: List[Dict[str, object]],
        fix_error: Optional[str] = None,
    ) -> LoopResult:
        LOGGER.info("compile_failed_final", attempts=job.attempts, fixes=job.fixes_applied)
        return LoopResult(
            status="failed",
            attempts=job.attempts,
            source=job.source,
            failure=failure,
            fixes_requested=fixes_requested,
            fixes_applied=job.fixes_applied,
            fix_error=fix_error,
            history=history,
        )


def build_compile_loop(settings: Settings, compiler: Optional[Compiler] = None, fixer: Optional[Fixer] = None) -> CompileLoop:
    """Wire the pdflatex invoker and the Claude fixer from ``settings``; explicit arguments win."""
    if compiler is None:
        compiler = LatexCompiler(engine=settings.compiler, timeout=settings.compile_timeout_seconds)
    if fixer is None:
        fixer = ClaudeLatexFixer(
            api_key=settings.anthropic_api_key,
            model=settings.llm_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            timeout=settings.llm_timeout_seconds,
            max_retries=settings.llm_max_retries,
        )
    return CompileLoop(compiler, fixer, max_attempts=settings.max_attempts)


__all__ = ["CompileLoop", "LoopResult", "Decision", "decide", "build_compile_loop", "DEFAULT_MAX_ATTEMPTS"]
