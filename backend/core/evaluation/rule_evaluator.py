"""
Deterministic rule evaluator. Looks up each ingredient in the reference table and
checks allergen, vegan and avoid-list membership against the user profile.
Unknown ingredient -> informational issue only; it does not make the scan unsafe.
"""
from typing import List, Optional
import logging

from core.conditions import Condition
from core.models.user_profile import UserProfile
from core.models.verdict import (
    SEVERITY_RISK_SCORE,
    ScanResult,
    Severity,
    Verdict,
    VerdictStatus,
)
from core.ontology.ingredient_registry import IngredientRegistry

logger = logging.getLogger(__name__)


class RuleBasedEvaluator:
    """
    Pipeline: resolve (reference table) -> allergen / vegan / avoid checks -> aggregate result.
    """

    def __init__(self, ingredient_registry: Optional[IngredientRegistry] = None):
        self._ingredients = ingredient_registry or IngredientRegistry()

    def evaluate(
        self,
        ingredients: List[str],
        user: UserProfile,
        conditions: Optional[List[Condition]] = None,
    ) -> ScanResult:
        issues: List[str] = []
        verdicts: List[Verdict] = []
        unknown: List[str] = []
        allergen_hits = 0
        other_hits = 0

        for raw in ingredients:
            item = (raw or "").strip().lower()
            if not item:
                continue
            ing = self._ingredients.resolve(item)
            if ing is None:
                unknown.append(item)
                issues.append(f"Unknown ingredient: {item}")
                continue

            for allergen in ing.allergens:
                if allergen in user.allergies:
                    allergen_hits += 1
                    issues.append(f"Contains allergen: {allergen}")
                    verdicts.append(Verdict(
                        category="allergy",
                        name=allergen,
                        status=VerdictStatus.DANGER,
                        reason=f"{ing.name} contains {allergen}",
                    ))

            if user.diet == "vegan" and not ing.vegan:
                other_hits += 1
                issues.append(f"Not vegan: {ing.name}")
                verdicts.append(Verdict(
                    category="diet",
                    name="vegan",
                    status=VerdictStatus.DANGER,
                    reason=f"{ing.name} is not vegan",
                ))

            if ing.name in user.avoid:
                other_hits += 1
                issues.append(f"Avoid ingredient: {ing.name}")

        if unknown:
            logger.info(
                "RULE_EVAL unknown_ingredients count=%d items=%s",
                len(unknown), unknown,
            )

        conflicts = allergen_hits + other_hits
        if allergen_hits:
            severity = Severity.HIGH
        elif other_hits:
            severity = Severity.MEDIUM
        else:
            severity = Severity.LOW

        if conflicts:
            summary = f"Found {conflicts} conflict(s) with your profile."
        elif unknown:
            summary = "No conflicts found, but some ingredients could not be verified."
        else:
            summary = "No conflicts found with your profile."

        logger.info(
            "RULE_EVAL safe=%s conflicts=%d unknown=%d severity=%s",
            conflicts == 0, conflicts, len(unknown), severity.value,
        )
        return ScanResult(
            safe=conflicts == 0,
            severity=severity,
            risk_score=SEVERITY_RISK_SCORE[severity],
            confidence=100 if not unknown else max(0, 100 - 100 * len(unknown) // max(1, len(ingredients))),
            issues=issues,
            verdicts=verdicts,
            summary=summary,
        ).enforce_invariants()
