import types

import anthropic
import pytest

from latexfix.core.llm import claude_client
from latexfix.core.llm.claude_client import ClaudeLatexFixer, build_fix_prompt, strip_code_fences
from latexfix.exceptions import FixUnavailableError

from conftest import BROKEN_LATEX, GOOD_LATEX


class FakeMessages:
    def __init__(self, text=None, error=None, content=None):
        self.text = text
        self.error = error
        self.content = content
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return types.SimpleNamespace(content=self.content)
        return types.SimpleNamespace(content=[types.SimpleNamespace(type="text", text=self.text)])


def _fixer(messages, **kwargs):
    return ClaudeLatexFixer(client=types.SimpleNamespace(messages=messages), **kwargs)


def test_fix_strips_fences_and_sends_fixed_parameters():
    messages = FakeMessages(text=f"```latex\n{GOOD_LATEX}```\n")
    fixer = _fixer(messages)

    fixed = fixer.fix(BROKEN_LATEX, "Undefined LaTeX command.")

    assert fixed == GOOD_LATEX.strip()
    request = messages.requests[0]
    assert request["model"] == "claude-sonnet-4-20250514"
    assert request["max_tokens"] == 4000
    assert request["temperature"] == 0.3
    assert "ONLY the corrected LaTeX" in request["system"]
    prompt = request["messages"][0]["content"]
    assert request["messages"][0]["role"] == "user"
    assert "Error: Undefined LaTeX command." in prompt
    assert BROKEN_LATEX in prompt


def test_sdk_errors_surface_as_fix_unavailable():
    fixer = _fixer(FakeMessages(error=anthropic.AnthropicError("connection reset")))
    with pytest.raises(FixUnavailableError, match="connection reset"):
        fixer.fix(BROKEN_LATEX, "boom")


def test_response_without_text_block_is_rejected():
    fixer = _fixer(FakeMessages(content=[types.SimpleNamespace(type="tool_use")]))
    with pytest.raises(FixUnavailableError):
        fixer.fix(BROKEN_LATEX, "boom")


def test_empty_response_is_rejected():
    fixer = _fixer(FakeMessages(text="```latex\n```"))
    with pytest.raises(FixUnavailableError):
        fixer.fix(BROKEN_LATEX, "boom")


def test_without_key_fixer_is_unavailable():
    fixer = ClaudeLatexFixer(api_key=None)
    assert not fixer.available
    with pytest.raises(FixUnavailableError):
        fixer.fix(BROKEN_LATEX, "boom")


def test_client_built_with_timeout_and_retry_cap(monkeypatch):
    built = {}

    class RecordingAnthropic:
        def __init__(self, **kwargs):
            built.update(kwargs)
            self.messages = FakeMessages(text=GOOD_LATEX)

    monkeypatch.setattr(claude_client.anthropic, "Anthropic", RecordingAnthropic)
    fixer = ClaudeLatexFixer(api_key="sk-test", timeout=15.0, max_retries=1)

    assert fixer.available
    assert fixer.fix(BROKEN_LATEX, "boom") == GOOD_LATEX.strip()
    assert built == {"api_key": "sk-test", "timeout": 15.0, "max_retries": 1}


def test_strip_code_fences_variants():
    assert strip_code_fences("```tex\n\\relax\n```") == "\\relax"
    assert strip_code_fences("```\n\\relax\n```") == "\\relax"
    assert strip_code_fences("  \\relax  ") == "\\relax"


def test_prompt_keeps_braces_verbatim():
    prompt = build_fix_prompt("\\textbf{x}", "Missing {error}")
    assert "Error: Missing {error}" in prompt
    assert "\\textbf{x}" in prompt
    assert prompt.endswith("Return only the complete fixed LaTeX code:")
