"""
Recovery of a result list from free-form model output.

The model is asked for a JSON array under a "results" key but may answer
with a bare array, wrap it in a code fence, prefix it with prose, emit a
single object, or say that nothing was found.
Each step below looks at the current text and either settles the outcome
(Ok / Fatal) or hands a possibly repaired text to the next step.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Union

from services.errors import ResponseFormatError

from .models import AnalysisResult, NOT_AVAILABLE

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_EMBEDDED_ARRAY_PATTERN = re.compile(r"(\[.*\])", re.DOTALL)
_NOTHING_FOUND_PATTERN = re.compile(r"\bno\s+(?:[\w-]+\s+)*?comments\s+(?:were\s+)?found\b|\bno relevant comments\b")
# Stray symbols between a closing quote and the following comma/brace, e.g. `"2:13" 🔥,`
_GARBAGE_PATTERN = re.compile(r"(\")\s*([^A-Za-z0-9\"'{}\[\]\s:,.-]+)\s*([,}])")

# JSON-object mode wraps the array: {"results": [...]}
RESULTS_KEY = "results"


@dataclass(frozen=True)
class Ok:
    results: List[AnalysisResult]


@dataclass(frozen=True)
class RecoverableMalformed:
    text: str


@dataclass(frozen=True)
class Fatal:
    reason: str


ParseOutcome = Union[Ok, RecoverableMalformed, Fatal]
RecoveryStep = Callable[[str], ParseOutcome]


def _trim(text: str) -> ParseOutcome:
    return RecoverableMalformed(text.strip())


def _strip_code_fence(text: str) -> ParseOutcome:
    match = _FENCE_PATTERN.match(text)
    if match and match.group(2):
        return RecoverableMalformed(match.group(2).strip())
    return RecoverableMalformed(text)


def _empty_means_none(text: str) -> ParseOutcome:
    if text == "":
        return Ok([])
    return RecoverableMalformed(text)


def _recover_non_json_prefix(text: str) -> ParseOutcome:
    if text.startswith("[") or text.startswith("{"):
        return RecoverableMalformed(text)

    logger.warning("AI response does not start with JSON: %s...", text[:100])

    if _NOTHING_FOUND_PATTERN.search(text.lower()):
        return Ok([])

    embedded = _EMBEDDED_ARRAY_PATTERN.search(text)
    if embedded:
        return RecoverableMalformed(embedded.group(1))

    cleaned = _GARBAGE_PATTERN.sub(r"\1\3", text)
    if cleaned != text:
        logger.info("Stripped stray characters from AI response: %s", cleaned[:100])
    if cleaned.startswith("["):
        return RecoverableMalformed(cleaned)

    return Fatal(
        "AI analysis response is not in the expected JSON array format after cleaning "
        "and recovery attempts. Response starts with: " + cleaned[:50]
    )


def _empty_array_means_none(text: str) -> ParseOutcome:
    if text == "[]":
        return Ok([])
    return RecoverableMalformed(text)


def _text_or_na(value: Any) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(value)


def _to_result(item: dict) -> AnalysisResult:
    return AnalysisResult(
        username=_text_or_na(item.get("username")),
        comment=item["comment"],
        timestamp=_text_or_na(item.get("timestamp")),
    )


def _decode_results(text: str) -> ParseOutcome:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.error("Failed to parse JSON from analysis response: %s", text[:200])
        return Fatal("Failed to parse the AI's analysis response as JSON.")

    if isinstance(parsed, dict):
        if isinstance(parsed.get("comment"), str) and parsed["comment"]:
            return Ok([_to_result(parsed)])
        if isinstance(parsed.get(RESULTS_KEY), list):
            parsed = parsed[RESULTS_KEY]
        elif not parsed:
            return Ok([])

    if not isinstance(parsed, list):
        logger.error("Parsed analysis data is not an array: %r", parsed)
        return Fatal("AI analysis response was not a JSON array as expected.")

    return Ok([
        _to_result(item)
        for item in parsed
        if isinstance(item, dict) and isinstance(item.get("comment"), str)
    ])


RECOVERY_STEPS: List[RecoveryStep] = [
    _trim,
    _strip_code_fence,
    _empty_means_none,
    _recover_non_json_prefix,
    _empty_array_means_none,
    _decode_results,
]


def recover_results(raw_text: str) -> ParseOutcome:
    """Run the recovery chain; never returns RecoverableMalformed."""
    outcome: ParseOutcome = RecoverableMalformed(raw_text or "")
    for step in RECOVERY_STEPS:
        outcome = step(outcome.text)
        if not isinstance(outcome, RecoverableMalformed):
            return outcome
    return Fatal("AI analysis response was not a JSON array as expected.")


def parse_analysis_response(raw_text: str) -> List[AnalysisResult]:
    """Parse model output into result candidates or raise ResponseFormatError."""
    outcome = recover_results(raw_text)
    if isinstance(outcome, Fatal):
        raise ResponseFormatError(outcome.reason)
    return outcome.results
