"""
Evaluation strategies. Both produce the canonical ScanResult:
    evaluate(ingredients, user, conditions) -> ScanResult
"""
from typing import Optional

from core import config
from core.external_apis.base import TextGenerator
from core.ontology.ingredient_registry import IngredientRegistry
from .generative_evaluator import GenerativeEvaluator, build_scan_prompt
from .rule_evaluator import RuleBasedEvaluator


def build_evaluator(
    strategy: Optional[str] = None,
    generator: Optional[TextGenerator] = None,
    ingredient_registry: Optional[IngredientRegistry] = None,
):
    """Select the configured strategy ("generative" needs a generator)."""
    strategy = (strategy or config.EVALUATION_STRATEGY).lower()
    if strategy == "rule_based":
        return RuleBasedEvaluator(ingredient_registry)
    if strategy == "generative":
        if generator is None:
            raise ValueError("generative evaluation requires a text generator")
        return GenerativeEvaluator(generator)
    raise ValueError(f"Unknown evaluation strategy: {strategy}")


__all__ = [
    "GenerativeEvaluator",
    "RuleBasedEvaluator",
    "build_evaluator",
    "build_scan_prompt",
]
