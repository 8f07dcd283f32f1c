"""
Scan-evaluation pipeline:
    validate -> normalize -> cache key -> cache / duplicate lookup
    -> conditions -> evaluate -> safety override -> persist -> respond

Evaluation failures (AnalysisFailedError) are terminal for the request: nothing is
persisted and no partial result is returned.
"""
import logging
import math
from typing import Any, List

from core.cache import ResultCache, get_cache_key
from core.conditions import user_profile_to_conditions
from core.config import HISTORY_DEFAULT_LIMIT, HISTORY_DEFAULT_PAGE
from core.errors import ScanValidationError
from core.models.scan import Scan
from core.models.verdict import ScanResult
from core.normalization.normalizer import normalize_ingredients
from core.profile_storage import ProfileStore
from core.safety_override import apply_safety_override
from core.scan_storage import ScanStore

logger = logging.getLogger(__name__)


def validate_ingredients(ingredients: Any) -> List[str]:
    """Ingredients must be a non-empty list of strings with at least one non-blank entry."""
    if ingredients is None or not isinstance(ingredients, list):
        raise ScanValidationError("Ingredients must be an array")
    if not all(isinstance(i, str) for i in ingredients):
        raise ScanValidationError("Ingredients must be strings")
    if not any(i.strip() for i in ingredients):
        raise ScanValidationError("Ingredients must not be empty")
    return ingredients


def _positive_int(value: Any, name: str, default: int) -> int:
    """None -> default. Accepts ints or decimal strings (raw query values)."""
    if value is None:
        return default
    if isinstance(value, str) and value.strip().isdecimal():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ScanValidationError(f"{name} must be a positive integer")
    return value


class ScanService:
    """
    Owns one scan request end to end. The evaluator is injected (rule-based or
    generative); its generator client's lifecycle belongs to the caller.
    """

    def __init__(self, profiles: ProfileStore, scans: ScanStore, evaluator):
        self._profiles = profiles
        self._scans = scans
        self._cache = ResultCache(scans)
        self._evaluator = evaluator

    def scan(self, user_id: str, ingredients: Any) -> dict:
        ingredients = validate_ingredients(ingredients)
        profile = self._profiles.require_profile(user_id)

        normalized = normalize_ingredients(ingredients)
        content_hash = get_cache_key(normalized)

        hit = self._cache.lookup(user_id, content_hash, normalized)
        if hit is not None:
            # Stored result, re-checked against this user's allergies
            result = ScanResult.from_dict(hit.scan.result.to_dict())
            apply_safety_override(result, ingredients, profile.allergies)
            result.enforce_invariants()
            response = result.to_dict()
            if hit.is_global:
                response.update({"scanId": None, "isSaved": False, "cached": True})
            else:
                response.update({"scanId": hit.scan.id, "isSaved": hit.scan.is_saved, "duplicate": True})
            return response

        conditions = user_profile_to_conditions(profile)
        result = self._evaluator.evaluate(normalized, profile, conditions)
        apply_safety_override(result, ingredients, profile.allergies)
        result.enforce_invariants()

        scan = Scan(
            user_id=user_id,
            ingredients=normalized,
            content_hash=content_hash,
            result=result,
        )
        scan_id = self._scans.add(scan)
        logger.info(
            "SCAN_COMPLETE user_id=%s scan_id=%s safe=%s severity=%s",
            user_id, scan_id, result.safe, result.severity.value,
        )
        response = result.to_dict()
        response.update({"scanId": scan_id, "isSaved": False})
        return response

    def history(self, user_id: str, page: Any = None, limit: Any = None) -> dict:
        page = _positive_int(page, "page", HISTORY_DEFAULT_PAGE)
        limit = _positive_int(limit, "limit", HISTORY_DEFAULT_LIMIT)
        self._profiles.require_profile(user_id)
        scans, total = self._scans.page_for_user(user_id, page, limit)
        return {
            "scans": [s.to_public_dict() for s in scans],
            "page": page,
            "limit": limit,
            "totalItems": total,
            "totalPages": math.ceil(total / limit),
        }

    def toggle_saved(self, user_id: str, scan_id: str) -> dict:
        self._profiles.require_profile(user_id)
        scan = self._scans.toggle_saved(user_id, scan_id)
        return {"scanId": scan.id, "isSaved": scan.is_saved}

    def saved(self, user_id: str) -> List[dict]:
        self._profiles.require_profile(user_id)
        return [s.to_public_dict() for s in self._scans.list_for_user(user_id, saved_only=True)]

    def delete(self, user_id: str, scan_id: str) -> None:
        self._profiles.require_profile(user_id)
        self._scans.delete(user_id, scan_id)
