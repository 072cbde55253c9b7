"""
Compiler log interpretation.

Finds the first ``!`` error line in a pdflatex log and maps it onto a short
human-readable message. First match wins; this is a heuristic, not a grammar.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

ERROR_MARKER = "!"
EXCERPT_LINES = 5
TAIL_LINES = 10
LINE_NUMBER_LOOKAHEAD = 4

GENERIC_FAILURE = "LaTeX compilation failed"
UNDEFINED_COMMAND_MESSAGE = "Undefined LaTeX command. Check for typos in commands or missing packages."
MISSING_FILE_MESSAGE = "Missing file or package: {name}. Add \\usepackage{{}} for missing packages."
MISSING_DELIMITER_MESSAGE = "Missing delimiter or bracket. Check for unclosed braces, brackets, or math mode."
EMERGENCY_STOP_MESSAGE = "Critical LaTeX error. Check document structure and syntax."

FILE_NAME_RE = re.compile(r"File `([^']+)'")
LINE_NUMBER_RE = re.compile(r"l\.(\d+)")

SUGGESTIONS = {
    "undefined_control_sequence": "LaTeX syntax error: undefined command or package not included.",
    "missing_file": "Missing LaTeX package or file. Ensure all required packages are included.",
    "missing_delimiter": "LaTeX syntax error: missing bracket, brace, or $ delimiter.",
    "emergency_stop": "The compiler stopped early. Check document structure and syntax.",
}


@dataclass(frozen=True)
class LogDiagnosis:
    category: str  # undefined_control_sequence, missing_file, missing_delimiter, emergency_stop, other, unknown
    message: str
    excerpt: str
    error_line: Optional[str] = None
    line_number: Optional[int] = None

    @property
    def found_marker(self) -> bool:
        return self.error_line is not None


def _classify(line: str) -> tuple[str, str]:
    # Only the undefined-command check ignores case; "missing \item" style
    # prose must not read as a missing delimiter.
    if "undefined control sequence" in line.lower():
        return "undefined_control_sequence", UNDEFINED_COMMAND_MESSAGE
    if "File" in line and "not found" in line:
        match = FILE_NAME_RE.search(line)
        return "missing_file", MISSING_FILE_MESSAGE.format(name=match.group(1) if match else "unknown")
    if "Missing" in line:
        return "missing_delimiter", MISSING_DELIMITER_MESSAGE
    if "Emergency stop" in line:
        return "emergency_stop", EMERGENCY_STOP_MESSAGE
    return "other", line[len(ERROR_MARKER):].strip()


def _line_number(lines: List[str], start: int) -> Optional[int]:
    for offset in range(1, LINE_NUMBER_LOOKAHEAD + 1):
        if start + offset >= len(lines):
            break
        m = LINE_NUMBER_RE.match(lines[start + offset])
        if m:
            return int(m.group(1))
    return None


def parse_log(log_text: str) -> LogDiagnosis:
    """Classify raw compiler log text. Never raises on odd input."""
    lines = (log_text or "").splitlines()

    for i, line in enumerate(lines):
        if not line.startswith(ERROR_MARKER):
            continue
        category, message = _classify(line)
        excerpt = "\n".join(lines[i:i + EXCERPT_LINES])
        return LogDiagnosis(
            category=category,
            message=message,
            excerpt=excerpt,
            error_line=line,
            line_number=_line_number(lines, i),
        )

    tail = [line for line in lines if line.strip()][-TAIL_LINES:]
    return LogDiagnosis(category="unknown", message=GENERIC_FAILURE, excerpt="\n".join(tail))


def suggestion_for(diagnosis: LogDiagnosis) -> str:
    return SUGGESTIONS.get(diagnosis.category, "Check the LaTeX syntax near the reported error.")


__all__ = ["LogDiagnosis", "parse_log", "suggestion_for"]
