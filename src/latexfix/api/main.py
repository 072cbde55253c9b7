from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .. import __version__
from ..config import Settings, get_settings
from ..core.logging_setup import configure_logging, get_logger
from ..pipeline import build_compile_loop
from .routers.compile import router as compile_router, too_large_response
from .routers.service import router as service_router

logger = get_logger(__name__)

EXPOSED_HEADERS = ["X-Job-Id", "X-Compilation-Attempts", "X-LLM-Fixed", "Content-Disposition"]


def create_app(settings: Optional[Settings] = None, compiler=None, fixer=None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(title="LaTeX Compilation Service", version=__version__)
    app.state.settings = settings
    app.state.compile_loop = build_compile_loop(settings, compiler=compiler, fixer=fixer)

    @app.middleware("http")
    async def _limit_body_size(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Reject oversized bodies from their declared length, before they are read."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.max_source_bytes:
            logger.warning("request_body_too_large", content_length=int(content_length), path=request.url.path)
            return too_large_response(settings.max_source_bytes)
        return await call_next(request)

    # Registered after the size check so that rejections still carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": str(exc.errors())})

    app.include_router(service_router)
    app.include_router(compile_router)

    if not app.state.compile_loop.fixer.available:
        logger.warning("llm_fix_disabled", reason="ANTHROPIC_API_KEY not set")
    return app


app = create_app()
