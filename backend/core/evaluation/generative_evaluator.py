"""
LLM-backed evaluator. Builds a structured prompt from the user's conditions and the
ingredients, calls the injected text generator, and turns its free text into a
sanitized ScanResult via core.llm_response.

The LLM output is untrusted: shape problems are defaulted away by the sanitizer, and
the allergy override is applied later by the pipeline.
"""
import json
import logging
from typing import List, Optional

from core.conditions import Condition, user_profile_to_conditions
from core.config import ALTERNATIVE_MIN_CONFIDENCE
from core.external_apis.base import TextGenerator
from core.llm_response import parse_generator_response
from core.models.user_profile import UserProfile
from core.models.verdict import ScanResult

logger = logging.getLogger(__name__)

_SCAN_PROMPT = """You are a food safety assistant. Evaluate the ingredients below ONLY against the user's listed conditions.

USER CONDITIONS (category: name):
{conditions}

INGREDIENTS:
{ingredients}

RULES:
1. Only report findings for the conditions listed above. Do not invent other concerns.
2. "safe" is true only if no ingredient conflicts with any listed condition.
3. Add one entry to "verdicts" per listed condition. category is one of: diet, allergy, health. status is one of: safe, warning, danger.
4. "severity" is one of: low, medium, high, critical. "riskScore" and "confidence" are integers 0-100.
5. Suggest up to 3 real, branded alternative products only when "safe" is false, and only if you are at least {min_confidence}% confident the product exists and avoids the conflict. Include your confidence for each.
6. If "safe" is true, "alternatives" MUST be an empty list.
7. Return ONLY a JSON object matching this schema. No prose, no markdown.

SCHEMA:
{schema}"""

_SCHEMA_EXAMPLE = {
    "safe": False,
    "severity": "low|medium|high|critical",
    "riskScore": 0,
    "confidence": 0,
    "issues": ["short finding"],
    "verdicts": [
        {"category": "diet|allergy|health", "name": "condition name", "status": "safe|warning|danger", "reason": "why"}
    ],
    "alternatives": [
        {"name": "product", "brand": "brand", "reason": "why it is better", "searchQuery": "brand product", "confidence": 0}
    ],
    "summary": "one sentence",
    "detailedExplanation": "a short paragraph",
}


def build_scan_prompt(
    ingredients: List[str],
    conditions: List[Condition],
    min_confidence: int = ALTERNATIVE_MIN_CONFIDENCE,
) -> str:
    if conditions:
        condition_lines = "\n".join(f"- {c.category.value}: {c.name}" for c in conditions)
    else:
        condition_lines = "- none (report the product as safe unless it is not food)"
    ingredient_lines = "\n".join(f"- {i}" for i in ingredients)
    return _SCAN_PROMPT.format(
        conditions=condition_lines,
        ingredients=ingredient_lines,
        min_confidence=min_confidence,
        schema=json.dumps(_SCHEMA_EXAMPLE, indent=2),
    )


class GenerativeEvaluator:
    def __init__(self, generator: TextGenerator, min_confidence: int = ALTERNATIVE_MIN_CONFIDENCE):
        self._generator = generator
        self._min_confidence = min_confidence

    def evaluate(
        self,
        ingredients: List[str],
        user: UserProfile,
        conditions: Optional[List[Condition]] = None,
    ) -> ScanResult:
        """
        Single generator call (the client owns timeout/retry). Raises AnalysisFailedError
        subclasses when the generator is unavailable or its text holds no usable JSON.
        """
        if conditions is None:
            conditions = user_profile_to_conditions(user)
        prompt = build_scan_prompt(ingredients, conditions, self._min_confidence)
        logger.info(
            "LLM_SCAN request user_id=%s conditions=%d ingredients=%d",
            user.user_id, len(conditions), len(ingredients),
        )
        raw = self._generator.generate(prompt)
        result = parse_generator_response(raw, min_confidence=self._min_confidence)
        logger.info(
            "LLM_SCAN parsed safe=%s severity=%s verdicts=%d alternatives=%d",
            result.safe, result.severity.value, len(result.verdicts), len(result.alternatives),
        )
        return result
