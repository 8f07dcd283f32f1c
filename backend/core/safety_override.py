"""
Deterministic allergy override. Runs after sanitization, on every result the
pipeline returns (fresh, cached or duplicate). A verbatim allergy match in the
submitted ingredient text always wins over the evaluator's conclusion.
"""
import logging
from typing import List

from core.models.verdict import (
    SEVERITY_RISK_SCORE,
    ScanResult,
    Severity,
    Verdict,
    VerdictStatus,
)

logger = logging.getLogger(__name__)


def find_allergy_matches(ingredients: List[str], allergies: List[str]) -> List[str]:
    """Allergy terms (lowercase) occurring verbatim in the joined, lowercased ingredient text."""
    text = ", ".join(i for i in ingredients if isinstance(i, str)).lower()
    matches = []
    for term in allergies:
        term = (term or "").strip().lower()
        if term and term in text and term not in matches:
            matches.append(term)
    return matches


def apply_safety_override(result: ScanResult, ingredients: List[str], allergies: List[str]) -> ScanResult:
    """
    For every matched allergen: safe=False, critical severity, riskScore 100, and a
    danger allergy verdict for it (replacing any verdict the evaluator gave that allergen).
    Mutates and returns result.
    """
    matches = find_allergy_matches(ingredients, allergies)
    if not matches:
        return result

    result.safe = False
    result.severity = Severity.CRITICAL
    result.risk_score = SEVERITY_RISK_SCORE[Severity.CRITICAL]
    for term in matches:
        reason = f"Ingredients contain {term}, which is listed in your allergies."
        result.verdicts = [
            v for v in result.verdicts
            if not (v.category == "allergy" and v.name.strip().lower() == term)
        ]
        result.verdicts.append(Verdict(
            category="allergy",
            name=term,
            status=VerdictStatus.DANGER,
            reason=reason,
        ))
        issue = f"Contains allergen: {term}"
        if issue not in result.issues:
            result.issues.append(issue)
    logger.info("SAFETY_OVERRIDE allergens=%s", matches)
    return result
