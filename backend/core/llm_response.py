"""
Generator output -> ScanResult.

The generator's text is untrusted. Extraction locates a JSON object in it; sanitization
coerces every field to its declared type/range and substitutes defaults on mismatch.
Sanitization never raises for a wrong shape; only a missing or unparseable JSON object
is an error. The allergy override (core.safety_override) runs afterwards as its own stage.
"""
import json
import logging
import re
from typing import Any, List, Optional
from urllib.parse import quote_plus

from core.config import (
    ALTERNATIVE_MIN_CONFIDENCE,
    NEUTRAL_SCORE,
    get_alternative_search_url,
)
from core.errors import MalformedResponseError, ResponseParseError
from core.models.verdict import (
    VERDICT_CATEGORIES,
    Alternative,
    ScanResult,
    Severity,
    Verdict,
    VerdictStatus,
)

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)

_SEVERITIES = {s.value for s in Severity}
_STATUSES = {s.value for s in VerdictStatus}


# --- Extraction ---

def _json_candidates(raw: str) -> List[str]:
    candidates = []
    m = _FENCED_JSON.search(raw)
    if m:
        candidates.append(m.group(1).strip())
    start, end = raw.find("{"), raw.rfind("}")
    if start != -1 and end > start:
        candidates.append(raw[start:end + 1])
    return candidates


def extract_json_object(raw_text: Any) -> dict:
    """
    Locate and parse the JSON object in generator output.
    Order: ```json fenced block interior, then first '{' to last '}'.
    Raises MalformedResponseError when nothing is located, ResponseParseError when
    a candidate was found but none parsed.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise MalformedResponseError("Empty response from text generator")

    candidates = _json_candidates(raw_text)
    if not candidates:
        logger.warning("LLM_MALFORMED no JSON object located raw=%s", raw_text[:500])
        raise MalformedResponseError("No JSON object found in generator response")

    last_error: Optional[str] = None
    parsed_other = None
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            last_error = str(e)
            continue
        if isinstance(parsed, dict):
            return parsed
        parsed_other = type(parsed).__name__

    if parsed_other is not None and last_error is None:
        logger.warning("LLM_MALFORMED json was %s, not an object raw=%s", parsed_other, raw_text[:500])
        raise MalformedResponseError(f"Generator response JSON was a {parsed_other}, not an object")
    logger.warning("LLM_PARSE_FAIL error=%s raw=%s", last_error, raw_text)
    raise ResponseParseError(f"Could not parse generator response: {last_error}", raw_text=raw_text)


# --- Field coercion ---

def _as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_score(value: Any, default: int = NEUTRAL_SCORE) -> int:
    """0..100 integer; non-numeric -> default."""
    if not _is_number(value) or value != value:  # NaN
        return default
    return int(round(min(100, max(0, value))))


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _as_enum(value: Any, allowed, fallback: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return fallback


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _sanitize_issues(value: Any) -> List[str]:
    return [s for s in (_as_str(v) for v in _as_list(value)) if s]


def _sanitize_verdicts(value: Any) -> List[Verdict]:
    verdicts = []
    for v in _as_list(value):
        if not isinstance(v, dict):
            continue
        verdicts.append(Verdict(
            category=_as_enum(v.get("category"), VERDICT_CATEGORIES, "diet"),
            name=_as_str(v.get("name")),
            status=VerdictStatus(_as_enum(v.get("status"), _STATUSES, VerdictStatus.WARNING.value)),
            reason=_as_str(v.get("reason")),
        ))
    return verdicts


def build_search_url(query: str) -> str:
    return get_alternative_search_url() + quote_plus(query)


def _sanitize_alternatives(value: Any, min_confidence: int) -> List[Alternative]:
    """
    Keep only entries with name, brand, searchQuery and numeric confidence >= min_confidence.
    Missing confidence fails the filter. Confidence is not carried into the output.
    """
    kept = []
    for a in _as_list(value):
        if not isinstance(a, dict):
            continue
        name = _as_str(a.get("name"))
        brand = _as_str(a.get("brand"))
        query = _as_str(a.get("searchQuery"))
        confidence = a.get("confidence")
        if not (name and brand and query and _is_number(confidence)):
            continue
        if confidence < min_confidence:
            continue
        kept.append(Alternative(
            name=name,
            brand=brand,
            reason=_as_str(a.get("reason")),
            search_url=build_search_url(query),
        ))
    return kept


def sanitize_result(data: Any, min_confidence: int = ALTERNATIVE_MIN_CONFIDENCE) -> ScanResult:
    """
    Coerce any JSON-like value into a fully populated ScanResult.
    Never raises for shape mismatches.
    """
    if not isinstance(data, dict):
        data = {}
    result = ScanResult(
        safe=_as_bool(data.get("safe")),
        severity=Severity(_as_enum(data.get("severity"), _SEVERITIES, Severity.LOW.value)),
        risk_score=_as_score(data.get("riskScore")),
        confidence=_as_score(data.get("confidence")),
        issues=_sanitize_issues(data.get("issues")),
        verdicts=_sanitize_verdicts(data.get("verdicts")),
        alternatives=_sanitize_alternatives(data.get("alternatives"), min_confidence),
        summary=_as_str(data.get("summary")),
        detailed_explanation=_as_str(data.get("detailedExplanation")),
    )
    return result.enforce_invariants()


def parse_generator_response(raw_text: Any, min_confidence: int = ALTERNATIVE_MIN_CONFIDENCE) -> ScanResult:
    """Extract then sanitize."""
    return sanitize_result(extract_json_object(raw_text), min_confidence=min_confidence)
