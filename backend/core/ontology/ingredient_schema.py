"""
Reference ingredient: canonical lowercase name, vegan flag, allergen tags.
Read-only from the scan pipeline's perspective.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Ingredient:
    name: str
    vegan: bool = True
    allergens: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> "Ingredient":
        return cls(
            name=d["name"].strip().lower(),
            vegan=d.get("vegan", True),
            allergens=[a.strip().lower() for a in d.get("allergens", []) or []],
        )
