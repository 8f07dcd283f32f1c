"""
Shared fixtures: temp-file stores and a call-counting fake text generator.
"""
import json

import pytest

from core.external_apis.base import TextGenerator
from core.ontology.ingredient_registry import IngredientRegistry
from core.ontology.ingredient_schema import Ingredient
from core.profile_storage import ProfileStore
from core.scan_storage import ScanStore


class FakeGenerator(TextGenerator):
    """Returns canned text and counts calls."""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = 0
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.calls += 1
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


UNSAFE_RESPONSE = json.dumps({
    "safe": False,
    "severity": "high",
    "riskScore": 85,
    "confidence": 90,
    "issues": ["Contains dairy"],
    "verdicts": [
        {"category": "diet", "name": "vegan", "status": "danger", "reason": "milk is animal-derived"}
    ],
    "alternatives": [
        {"name": "Oat Drink", "brand": "Oatly", "reason": "dairy-free", "searchQuery": "Oatly oat drink", "confidence": 92}
    ],
    "summary": "Not vegan.",
    "detailedExplanation": "Milk is an animal product.",
})

SAFE_RESPONSE = json.dumps({
    "safe": True,
    "severity": "low",
    "riskScore": 5,
    "confidence": 95,
    "issues": [],
    "verdicts": [],
    "alternatives": [],
    "summary": "Looks fine.",
})


@pytest.fixture
def fake_generator():
    return FakeGenerator(response=UNSAFE_RESPONSE)


@pytest.fixture
def profile_store(tmp_path):
    return ProfileStore(path=tmp_path / "profiles.json")


@pytest.fixture
def scan_store(tmp_path):
    return ScanStore(path=tmp_path / "scans.json")


@pytest.fixture
def registry():
    return IngredientRegistry(ingredients=[
        Ingredient(name="peanut butter", vegan=False, allergens=["peanut"]),
        Ingredient(name="sugar", vegan=True, allergens=[]),
        Ingredient(name="salt", vegan=True, allergens=[]),
        Ingredient(name="milk", vegan=False, allergens=["milk"]),
        Ingredient(name="palm oil", vegan=True, allergens=[]),
        Ingredient(name="wheat flour", vegan=True, allergens=["gluten"]),
    ])
