# ai/parsing.py
# ------------------------------------------------------------------------------
"""
Recovering a JSON object from free-text model output.

Extraction picks the most likely JSON payload out of the reply. Repair then
runs a short, fixed sequence of text fixups tuned against the ways Gemini
usually gets the format wrong (escaped quotes, literal \\n, loose `":` spacing,
missing outer braces, prose after the object). None of this is a general JSON
fixer: when it gives up the result is an empty object and the normalizer fills
in the rest.
"""

import json
import logging
import re
from typing import Callable, List

from core.errors import ParseError
from core.result import StageResult

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
# Extraction
# ──────────────────────────────────────────────────────────────────────────────
_EXTRACT_PATTERNS = [
    re.compile(r"```json\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE),  # tagged fence
    re.compile(r"```\s*(.*?)\s*```", re.DOTALL),                      # any fence
    re.compile(r"(\{.*\})", re.DOTALL),                               # widest braces
]


def extract_json_candidate(raw_text: str) -> str:
    """Return the first pattern match (trimmed), or the whole text."""
    text = raw_text if isinstance(raw_text, str) else str(raw_text)
    for pattern in _EXTRACT_PATTERNS:
        m = pattern.search(text)
        if m and m.group(1):
            logger.debug("Candidate found with pattern %s", pattern.pattern)
            return m.group(1).strip()
    logger.debug("No pattern matched, using entire text")
    return text.strip()


# ──────────────────────────────────────────────────────────────────────────────
# Repair rules – applied in this order
# ──────────────────────────────────────────────────────────────────────────────
def unescape_quotes(text: str) -> str:
    return text.replace('\\"', '"')


def flatten_escaped_whitespace(text: str) -> str:
    return text.replace("\\n", " ").replace("\\t", " ")


_SEPARATOR_FIXES = [
    (re.compile(r'\s*"\s*:\s*"'), '":"'),
    (re.compile(r'\s*"\s*:\s*\{'), '":{'),
    (re.compile(r'\s*"\s*:\s*\['), '":['),
    (re.compile(r'\s*"\s*:\s*([0-9])'), r'":\1'),
]


def tighten_separators(text: str) -> str:
    for pattern, replacement in _SEPARATOR_FIXES:
        text = pattern.sub(replacement, text)
    return text


def ensure_outer_braces(text: str) -> str:
    if not text.startswith("{"):
        text = "{" + text
    if not text.endswith("}"):
        text = text + "}"
    return text


REPAIR_RULES: List[Callable[[str], str]] = [
    unescape_quotes,
    flatten_escaped_whitespace,
    tighten_separators,
    ensure_outer_braces,
]


def apply_repairs(candidate: str) -> str:
    text = candidate.strip()
    for rule in REPAIR_RULES:
        text = rule(text)
    return text


def truncate_after_object(text: str) -> str:
    """
    Cut everything after the brace that closes the first top-level object.
    Quotes and escapes are tracked so braces inside strings don't count.
    """
    depth = 0
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[: i + 1]
    return text


# json.loads recurses on nesting depth
_PARSE_ERRORS = (ValueError, RecursionError, ParseError)


def _load_object(text: str) -> dict:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ParseError(f"Expected a JSON object, got {type(value).__name__}")
    return value


def repair_json(candidate: str) -> StageResult:
    """
    Parse `candidate` into a dict, repairing it if needed.

    Attempts, in order: the text as given, the text cut after its first
    complete object, the repaired text, the repaired text cut the same way.
    The unrepaired attempts come first because `unescape_quotes` breaks
    correctly escaped strings.
    Never raises: on total failure the result is not ok and its value is `{}`.
    """
    repaired = apply_repairs(candidate)
    attempts = (
        ("as given", candidate),
        ("after discarding trailing text", truncate_after_object(candidate)),
        ("after repair", repaired),
        ("after repair and discarding trailing text", truncate_after_object(repaired)),
    )

    error = None
    for label, text in attempts:
        try:
            data = _load_object(text)
        except _PARSE_ERRORS as e:
            error = e
            continue
        if label != "as given":
            logger.info("Parsed JSON %s", label)
        return StageResult.success(data)

    logger.warning("All parsing attempts failed, proceeding with empty data: %s", error)
    logger.debug("JSON text that failed parsing: %s", repaired[:500])
    return StageResult.failure(ParseError(str(error)), value={})


def parse_response(raw_text: str) -> StageResult:
    """Extraction followed by repair; the value is always a dict."""
    return repair_json(extract_json_candidate(raw_text))
