"""
Anthropic client adapter.
Asks Claude to repair a LaTeX document given the classified compiler error.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Optional

import anthropic

from ...exceptions import FixUnavailableError

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

SYSTEM_PROMPT = (
    "You are a LaTeX expert. Fix LaTeX compilation errors and return ONLY the corrected "
    "LaTeX code. No explanations, no markdown, just the complete fixed LaTeX document."
)

FIX_PROMPT_HEADER = "Fix this LaTeX compilation error:"
FIX_PROMPT_FOOTER = "Return only the complete fixed LaTeX code:"

FENCE_RE = re.compile(r"```(?:latex|tex)?[ \t]*\n?", re.IGNORECASE)


def build_fix_prompt(latex: str, error: str) -> str:
    return f"{FIX_PROMPT_HEADER}\n\nError: {error}\n\nOriginal LaTeX:\n{latex}\n\n{FIX_PROMPT_FOOTER}"


def strip_code_fences(text: str) -> str:
    return FENCE_RE.sub("", text.strip()).strip()


class ClaudeLatexFixer:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4000,
        temperature: float = 0.3,
        timeout: float = 60.0,
        max_retries: int = 2,
        client: Any = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _ensure_client(self):
        if self._client is None:
            if not self.api_key:
                raise FixUnavailableError("No API key configured for the completion service")
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        return self._client

    def fix(self, latex: str, error: str) -> str:
        """
        Return a replacement document for ``latex``.
        Raises:
            FixUnavailableError: transport/auth failure or an unusable response.
        """
        client = self._ensure_client()
        LOGGER.info("Requesting LaTeX fix from %s", self.model)
        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_fix_prompt(latex, error)}],
            )
        except anthropic.AnthropicError as exc:
            LOGGER.error("Claude API error: %s", exc)
            raise FixUnavailableError(f"Completion service error: {exc}") from exc

        text = None
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "text":
                text = block.text
                break
        if text is None:
            raise FixUnavailableError("Completion service returned no text content")

        fixed = strip_code_fences(text)
        if not fixed:
            raise FixUnavailableError("Completion service returned an empty document")
        return fixed


__all__ = ["ClaudeLatexFixer", "build_fix_prompt", "strip_code_fences", "SYSTEM_PROMPT"]
