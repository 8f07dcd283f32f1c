"""
Deterministic normalization only. No LLM, no substring guessing.
normalize_ingredients canonicalizes a submitted list for cache keys and storage;
normalize_ingredient_key produces a key for reference-table lookup.
"""
import re
import logging
from typing import Iterable, List

logger = logging.getLogger(__name__)

# Known spelling variants for reference lookup (normalized key -> canonical key)
KNOWN_VARIANTS: dict[str, str] = {
    "eggs": "egg",
    "peanuts": "peanut",
    "almonds": "almond",
    "walnuts": "walnut",
    "cashews": "cashew",
    "hazelnuts": "hazelnut",
    "prawns": "prawn",
    "shrimps": "shrimp",
    "oats": "oat",
    "soybeans": "soybean",
    "soya": "soy",
    "sesame seeds": "sesame seed",
    "gelatine": "gelatin",
    "e441": "gelatin",
    "e120": "carmine",
    "e901": "beeswax",
    "animal rennet": "rennet",
}


def normalize_ingredients(raw: Iterable[str]) -> List[str]:
    """
    Trim, lowercase and sort. Blank entries are dropped.
    Sorting makes the result (and the cache key) independent of submission order.
    """
    out = []
    for item in raw or []:
        key = item.strip().lower()
        if key:
            out.append(key)
    return sorted(out)


def normalize_ingredient_key(text: str) -> str:
    """
    Normalize a raw ingredient string for lookup.
    - Lowercase, strip, remove excess punctuation and whitespace.
    - Apply known variants (e.g. peanuts -> peanut).
    - No substring or fuzzy matching.
    """
    if not text or not isinstance(text, str):
        return ""
    t = text.lower().strip()
    t = t.replace("*", "").replace(".", "")
    t = re.sub(r"[,;:\u2013\u2014]+", " ", t)
    t = re.sub(r"\s+", " ", t)
    t = t.strip()
    if t in KNOWN_VARIANTS:
        canonical = KNOWN_VARIANTS[t]
        logger.debug("NORMALIZE variant applied raw=%s -> canonical=%s", t, canonical)
        return canonical
    return t
