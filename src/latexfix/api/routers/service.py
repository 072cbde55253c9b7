from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ... import __version__
from ..deps import get_compiler
from ..schemas import ServiceInfo

router = APIRouter()


@router.get("/", response_model=ServiceInfo)
async def service_info():
    return {
        "message": "LaTeX Compilation Service",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "health": "GET /health",
            "compile": "POST /compile",
        },
    }


@router.get("/health", responses={503: {"description": "Compiler not found"}})
def health_check(compiler=Depends(get_compiler)):
    engine = getattr(compiler, "engine", "pdflatex")
    if not compiler.available():
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": f"{engine} not found"},
        )
    return {
        "status": "healthy",
        "service": "latex-compiler",
        engine: "available",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
