from .claude_client import ClaudeLatexFixer, build_fix_prompt, strip_code_fences

__all__ = ["ClaudeLatexFixer", "build_fix_prompt", "strip_code_fences"]
