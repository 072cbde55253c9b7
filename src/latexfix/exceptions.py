class LatexfixError(Exception):
    """Base exception for all latexfix errors."""
    pass


class CompilerNotFoundError(LatexfixError):
    """Raised when the LaTeX compiler binary cannot be resolved on PATH."""

    def __init__(self, compiler: str):
        super().__init__(f"{compiler} not found")
        self.compiler = compiler


class FixUnavailableError(LatexfixError):
    """Raised when the completion service cannot produce a replacement document."""
    pass


class WorkspaceError(LatexfixError):
    """Raised when a job working directory cannot be prepared."""
    pass
