"""
Unit tests for the rule-based evaluator and reference ingredient table.
Run from repo root: python -m pytest backend/tests/test_rule_evaluator.py -v
"""
import json

import pytest

from core.evaluation import RuleBasedEvaluator
from core.models.user_profile import UserProfile


def test_registry_resolve_known_and_unknown(registry):
    ing = registry.resolve("  Peanut Butter ")
    assert ing is not None
    assert ing.vegan is False
    assert ing.allergens == ["peanut"]
    assert registry.resolve("xyznonexistent123") is None


def test_registry_loads_from_file(tmp_path):
    from core.ontology.ingredient_registry import IngredientRegistry
    path = tmp_path / "ingredients.json"
    path.write_text(json.dumps({
        "version": "7",
        "ingredients": [{"name": "Whey", "vegan": False, "allergens": ["Milk"]}, {"name": "salt"}],
    }))
    reg = IngredientRegistry(path=path)
    assert len(reg) == 2
    assert reg.get_version() == "7"
    whey = reg.resolve("whey")
    assert whey.name == "whey"
    assert whey.allergens == ["milk"]
    assert reg.resolve("salt").vegan is True


def test_peanut_allergy_vegan_scenario(registry):
    """allergies=[peanut], diet=vegan, [peanut butter, sugar] -> unsafe with allergen + non-vegan issues."""
    user = UserProfile(user_id="u1", diet="vegan", allergies=["peanut"])
    result = RuleBasedEvaluator(registry).evaluate(["peanut butter", "sugar"], user)
    assert result.safe is False
    assert len(result.issues) >= 2
    assert "Contains allergen: peanut" in result.issues
    assert "Not vegan: peanut butter" in result.issues
    assert result.severity.value == "high"
    categories = {v.category for v in result.verdicts}
    assert categories == {"allergy", "diet"}


def test_safe_submission(registry):
    user = UserProfile(user_id="u1", diet="vegan", allergies=["peanut"], avoid=["palm oil"])
    result = RuleBasedEvaluator(registry).evaluate(["sugar", "salt"], user)
    assert result.safe is True
    assert result.issues == []
    assert result.alternatives == []
    assert result.severity.value == "low"


def test_avoid_list_issue(registry):
    user = UserProfile(user_id="u1", avoid=["Palm Oil"])
    result = RuleBasedEvaluator(registry).evaluate(["palm oil", "sugar"], user)
    assert result.safe is False
    assert result.issues == ["Avoid ingredient: palm oil"]
    assert result.severity.value == "medium"


def test_unknown_ingredient_is_informational(registry):
    """Unknown ingredients are reported but do not make the scan unsafe."""
    user = UserProfile(user_id="u1", allergies=["peanut"])
    result = RuleBasedEvaluator(registry).evaluate(["sugar", "mystery powder"], user)
    assert result.safe is True
    assert result.issues == ["Unknown ingredient: mystery powder"]
    assert result.confidence < 100


def test_non_vegan_ignored_without_vegan_diet(registry):
    user = UserProfile(user_id="u1", diet="vegetarian")
    result = RuleBasedEvaluator(registry).evaluate(["milk"], user)
    assert result.safe is True


def test_build_evaluator_selects_strategy(registry, fake_generator):
    from core.evaluation import GenerativeEvaluator, build_evaluator
    assert isinstance(build_evaluator("rule_based", ingredient_registry=registry), RuleBasedEvaluator)
    assert isinstance(build_evaluator("generative", generator=fake_generator), GenerativeEvaluator)
    with pytest.raises(ValueError):
        build_evaluator("generative")
    with pytest.raises(ValueError):
        build_evaluator("magic")
