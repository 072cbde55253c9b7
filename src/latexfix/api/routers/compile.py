from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from ...config import Settings
from ...core.latex_log_parser import suggestion_for
from ...core.logging_setup import get_logger
from ...core.workspace import job_workspace, new_job_id
from ...exceptions import CompilerNotFoundError
from ...pipeline import CompileLoop, LoopResult
from ..deps import get_app_settings, get_compile_loop
from ..schemas import CompileErrorResponse, CompileRequest, RejectionResponse

router = APIRouter()
logger = get_logger(__name__)

PDF_RESPONSE = {
    200: {"content": {"application/pdf": {}}, "description": "Compiled PDF"},
    400: {"model": RejectionResponse},
    413: {"model": RejectionResponse},
    500: {"model": CompileErrorResponse},
    503: {"model": CompileErrorResponse},
}


def too_large_response(limit: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"error": "LaTeX content too large", "details": f"Limit is {limit} bytes"},
    )


def _failure_suggestion(result: LoopResult) -> Optional[str]:
    if not result.fix_attempted:
        return None
    hint = suggestion_for(result.failure.diagnosis)
    if result.fix_error:
        return f"Automatic fixing failed: {result.fix_error}. {hint}"
    return (
        f"Automatic fixing was applied {result.fixes_applied} time(s) "
        f"but the document still fails to compile. {hint}"
    )


def _pdf_response(result: LoopResult, job_id: str, settings: Settings) -> Response:
    return Response(
        content=result.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{settings.output_filename}"',
            "X-Job-Id": job_id,
            "X-Compilation-Attempts": str(result.attempts),
            "X-LLM-Fixed": "true" if result.llm_fixed else "false",
        },
    )


def _failure_response(result: LoopResult, job_id: str) -> JSONResponse:
    failure = result.failure
    body = {
        "error": "LaTeX compilation failed",
        "details": failure.message,
        "jobId": job_id,
        "attempts": result.attempts,
        "logExcerpt": failure.excerpt,
    }
    suggestion = _failure_suggestion(result)
    if suggestion:
        body["suggestion"] = suggestion
    return JSONResponse(status_code=500, content=body)


@router.post("/compile", responses=PDF_RESPONSE)
def compile_latex(
    payload: Optional[CompileRequest] = None,
    settings: Settings = Depends(get_app_settings),
    loop: CompileLoop = Depends(get_compile_loop),
):
    if payload is None or not payload.latex:
        return JSONResponse(status_code=400, content={"error": "No LaTeX content provided"})
    if len(payload.latex.encode("utf-8")) > settings.max_source_bytes:
        return too_large_response(settings.max_source_bytes)

    job_id = new_job_id()
    with structlog.contextvars.bound_contextvars(job_id=job_id):
        logger.info("compile_job_started", auto_fix=payload.auto_fix, source_bytes=len(payload.latex))
        try:
            with job_workspace(settings.work_root, payload.latex, job_id=job_id) as job:
                result = loop.run(job, auto_fix=payload.auto_fix)
        except CompilerNotFoundError as exc:
            logger.error("compiler_missing", compiler=exc.compiler)
            return JSONResponse(
                status_code=503,
                content={
                    "error": "LaTeX compiler unavailable",
                    "details": str(exc),
                    "jobId": job_id,
                    "suggestion": f"Ensure {exc.compiler} is installed on the server.",
                },
            )
        except Exception as exc:
            logger.exception("compile_job_crashed")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "details": str(exc), "jobId": job_id},
            )

        if result.succeeded:
            logger.info("compile_job_succeeded", attempts=result.attempts, llm_fixed=result.llm_fixed)
            return _pdf_response(result, job_id, settings)
        logger.warning("compile_job_failed", attempts=result.attempts, error=result.failure.message)
        return _failure_response(result, job_id)
