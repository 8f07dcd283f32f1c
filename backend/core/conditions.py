"""
Map a user profile to the evaluation conditions an evaluator must check.
"""
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from core import config
from core.models.user_profile import UserProfile
from core.models.verdict import ConditionCategory


@dataclass(frozen=True)
class Condition:
    category: ConditionCategory
    name: str


def user_profile_to_conditions(
    profile: UserProfile,
    include_avoid: Optional[bool] = None,
) -> List[Condition]:
    """
    Ordered conditions: diet (if set), then one per allergy, then one per health issue.
    Avoid-list entries are appended only when include_avoid (default: INCLUDE_AVOID_IN_CONDITIONS).
    """
    if include_avoid is None:
        include_avoid = config.INCLUDE_AVOID_IN_CONDITIONS

    conditions: List[Condition] = []
    seen: Set[Tuple[ConditionCategory, str]] = set()

    def _add(category: ConditionCategory, name: str) -> None:
        name = (name or "").strip().lower()
        if name and (category, name) not in seen:
            seen.add((category, name))
            conditions.append(Condition(category, name))

    _add(ConditionCategory.DIET, profile.diet)
    for a in profile.allergies:
        _add(ConditionCategory.ALLERGY, a)
    for h in profile.health_issues:
        _add(ConditionCategory.HEALTH, h)
    if include_avoid:
        for v in profile.avoid:
            _add(ConditionCategory.AVOID, v)
    return conditions
