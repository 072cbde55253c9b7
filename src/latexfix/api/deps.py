from fastapi import Request

from ..config import Settings
from ..pipeline import CompileLoop


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_compile_loop(request: Request) -> CompileLoop:
    return request.app.state.compile_loop


def get_compiler(request: Request):
    return request.app.state.compile_loop.compiler
