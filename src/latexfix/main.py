import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import get_settings
from .core.logging_setup import configure_logging, get_logger
from .core.workspace import job_workspace
from .exceptions import LatexfixError
from .pipeline import build_compile_loop

logger = get_logger(__name__)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("service_starting", host=host, port=port)
    uvicorn.run("latexfix.api.main:app", host=host, port=port, reload=args.reload)
    return 0


def _compile(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.max_attempts:
        settings = settings.model_copy(update={"max_attempts": args.max_attempts})

    if not args.input.exists():
        logger.error("input_missing", path=str(args.input))
        return 1
    source = args.input.read_text(encoding="utf-8")
    output = args.output or args.input.with_suffix(".pdf")

    loop = build_compile_loop(settings)
    try:
        with job_workspace(settings.work_root, source) as job:
            result = loop.run(job, auto_fix=not args.no_fix)
    except LatexfixError as exc:
        logger.error("compile_aborted", error=str(exc))
        return 1

    print(f"Attempts: {result.attempts}  LLM fixed: {result.llm_fixed}")
    if args.save_source and result.llm_fixed:
        fixed_path = args.input.with_name(f"{args.input.stem}.fixed.tex")
        fixed_path.write_text(result.source, encoding="utf-8")
        print(f"Repaired source saved to {fixed_path}")
    if not result.succeeded:
        print(f"Compilation failed: {result.failure.message}", file=sys.stderr)
        if result.failure.excerpt:
            print(result.failure.excerpt, file=sys.stderr)
        if result.fix_error:
            print(f"Fixing unavailable: {result.fix_error}", file=sys.stderr)
        return 1

    output.write_bytes(result.pdf)
    print(f"PDF saved to {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="latexfix", description="LaTeX compilation service with LLM repair")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_serve)

    comp = sub.add_parser("compile", help="Compile a local .tex file")
    comp.add_argument("input", type=Path, help="Path to the LaTeX source")
    comp.add_argument("-o", "--output", type=Path, default=None, help="Where to write the PDF")
    comp.add_argument("--no-fix", action="store_true", help="Disable LLM repair")
    comp.add_argument("--max-attempts", type=int, default=None)
    comp.add_argument("--save-source", action="store_true", help="Write the repaired source next to the input")
    comp.set_defaults(func=_compile)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs if args.command == "serve" else False)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
