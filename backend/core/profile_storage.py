"""
Persistent user profile storage keyed by user_id.
- Backend: JSON file (data/profiles.json) for persistence across sessions.
- Merge-on-update: only provided fields are written; existing fields never reset to None.
- allergies/avoid/health_issues are lowercased by UserProfile before they are stored.
"""
import logging
import threading
from pathlib import Path
from typing import Any, Optional

from core.config import get_profiles_path
from core.errors import StorageCorruptedError, UserNotFoundError
from core.json_file import read_json, write_json_atomic
from core.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = (
    "email", "diet", "allergies", "avoid", "health_issues",
    "likes", "age", "gender", "profile_completed",
)


class ProfileStore:
    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_profiles_path()
        self._lock = threading.Lock()

    def _load_all(self, strict: bool = False) -> dict:
        """strict=True on write paths: an unreadable file raises instead of reading as empty."""
        data = read_json(self._path, default={}, strict=strict)
        if not isinstance(data, dict):
            if strict:
                raise StorageCorruptedError(f"Unexpected layout in {self._path}")
            return {}
        return data

    def _save_all(self, data: dict) -> None:
        write_json_atomic(self._path, data)

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Load profile by user_id. Returns None if not found."""
        raw = self._load_all().get(user_id)
        if raw is None:
            return None
        return UserProfile.from_dict({"user_id": user_id, **raw})

    def require_profile(self, user_id: str) -> UserProfile:
        profile = self.get_profile(user_id)
        if profile is None:
            raise UserNotFoundError(user_id)
        return profile

    def save_profile(self, profile: UserProfile) -> None:
        """Persist full profile. Overwrites only this user's record."""
        with self._lock:
            data = self._load_all(strict=True)
            record = profile.to_dict()
            record.pop("user_id", None)
            data[profile.user_id] = record
            self._save_all(data)
        logger.info(
            "PROFILE_SAVE user_id=%s diet=%s allergies=%s",
            profile.user_id, profile.diet, profile.allergies,
        )

    def update_profile_partial(self, user_id: str, **kwargs: Any) -> UserProfile:
        """
        Load profile (or start an empty one), update only provided fields, save.
        Never sets existing fields to None.
        """
        profile = self.get_profile(user_id) or UserProfile(user_id=user_id)
        updates = {k: v for k, v in kwargs.items() if v is not None and k in _PROFILE_FIELDS}
        updated_fields = list(updates.keys())
        if "email" in updates:
            profile.email = updates.pop("email")
        profile.update_merge(**updates)
        self.save_profile(profile)
        logger.info("PROFILE_UPDATE user_id=%s updated_fields=%s", user_id, updated_fields)
        return profile
