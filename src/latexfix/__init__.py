"""latexfix: compile LaTeX to PDF, repairing failures with an LLM."""

__version__ = "0.1.0"

__all__ = ["__version__"]
