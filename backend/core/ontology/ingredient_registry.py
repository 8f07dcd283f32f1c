"""
Reference ingredient table. Loads from data/ingredients.json.
Lookup by exact normalized key only; no substring guessing.
"""
from pathlib import Path
from typing import Iterable, Optional
import json
import logging

from .ingredient_schema import Ingredient
from core.config import get_ingredients_path
from core.normalization.normalizer import normalize_ingredient_key

logger = logging.getLogger(__name__)


class IngredientRegistry:
    """
    O(1) lookup by normalized canonical name.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        ingredients: Optional[Iterable[Ingredient]] = None,
    ):
        self._path = path or get_ingredients_path()
        self._by_key: dict[str, Ingredient] = {}
        self._version: str = "0"
        if ingredients is not None:
            for ing in ingredients:
                self.add_ingredient(ing)
        else:
            self._load()

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning("Ingredient table not found at %s; registry empty.", self._path)
            return
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)
        self._version = str(data.get("version", "0"))
        for item in data.get("ingredients", []):
            self.add_ingredient(Ingredient.from_dict(item))
        logger.info("Loaded %d ingredients from %s", len(self._by_key), self._path)

    def add_ingredient(self, ingredient: Ingredient) -> None:
        key = normalize_ingredient_key(ingredient.name)
        if key:
            self._by_key[key] = ingredient

    def resolve(self, ingredient_str: str) -> Optional[Ingredient]:
        """Resolve a raw ingredient string to its reference entry, or None if unknown."""
        key = normalize_ingredient_key(ingredient_str)
        ing = self._by_key.get(key)
        if ing is None and key:
            logger.info("UNKNOWN_INGREDIENT raw=%s normalized_key=%s", ingredient_str, key)
        return ing

    def get_version(self) -> str:
        return self._version

    def __len__(self) -> int:
        return len(self._by_key)
