from .compile_loop import DEFAULT_MAX_ATTEMPTS, CompileLoop, Decision, LoopResult, build_compile_loop, decide

__all__ = ["CompileLoop", "LoopResult", "Decision", "decide", "build_compile_loop", "DEFAULT_MAX_ATTEMPTS"]
