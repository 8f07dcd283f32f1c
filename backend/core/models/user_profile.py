"""
Persistent user preference profile for ingredient scans.
allergies, avoid and health_issues are always stored lowercase; the condition
extractor and the safety override rely on that.
Updates merge without overwriting fields that were not provided.
"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional


def _lower_unique(values) -> List[str]:
    """Trim, lowercase and de-duplicate while keeping first-seen order."""
    out: List[str] = []
    for v in values or []:
        if not isinstance(v, str):
            continue
        key = v.strip().lower()
        if key and key not in out:
            out.append(key)
    return out


@dataclass
class UserProfile:
    """
    Single persistent profile per user.
    diet: free-text category ("" when unset, e.g. "vegan").
    allergies, avoid, health_issues: lowercase lists.
    """
    user_id: str
    email: Optional[str] = None
    diet: str = ""
    allergies: List[str] = field(default_factory=list)
    avoid: List[str] = field(default_factory=list)
    health_issues: List[str] = field(default_factory=list)
    likes: List[str] = field(default_factory=list)
    age: Optional[int] = None
    gender: Optional[str] = None
    profile_completed: bool = False

    def __post_init__(self):
        self.diet = (self.diet or "").strip().lower()
        self.allergies = _lower_unique(self.allergies)
        self.avoid = _lower_unique(self.avoid)
        self.health_issues = _lower_unique(self.health_issues)

    def update_merge(
        self,
        diet: Optional[str] = None,
        allergies: Optional[List[str]] = None,
        avoid: Optional[List[str]] = None,
        health_issues: Optional[List[str]] = None,
        likes: Optional[List[str]] = None,
        age: Optional[int] = None,
        gender: Optional[str] = None,
        profile_completed: Optional[bool] = None,
        **_kwargs,
    ) -> None:
        """
        Update only provided fields; never set existing fields to None.
        A provided list replaces that field; omit to leave unchanged.
        """
        if diet is not None:
            self.diet = diet.strip().lower()
        if allergies is not None:
            self.allergies = _lower_unique(allergies)
        if avoid is not None:
            self.avoid = _lower_unique(avoid)
        if health_issues is not None:
            self.health_issues = _lower_unique(health_issues)
        if likes is not None:
            self.likes = [x.strip() for x in likes if isinstance(x, str) and x.strip()]
        if age is not None:
            self.age = age
        if gender is not None:
            self.gender = gender
        if profile_completed is not None:
            self.profile_completed = profile_completed

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        """Load from dict; accepts camelCase keys (healthIssues, profileCompleted) as well."""
        health = data.get("health_issues")
        if health is None:
            health = data.get("healthIssues") or []
        completed = data.get("profile_completed")
        if completed is None:
            completed = data.get("profileCompleted", False)
        return cls(
            user_id=str(data.get("user_id", "")),
            email=data.get("email"),
            diet=data.get("diet") or "",
            allergies=data.get("allergies") or [],
            avoid=data.get("avoid") or [],
            health_issues=health,
            likes=data.get("likes") or [],
            age=data.get("age"),
            gender=data.get("gender"),
            profile_completed=bool(completed),
        )
