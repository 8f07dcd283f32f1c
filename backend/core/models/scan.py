"""
Persisted scan record. Immutable once created except for is_saved.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
import uuid

from core.models.verdict import ScanResult


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Scan:
    user_id: str
    ingredients: List[str]
    result: ScanResult
    content_hash: Optional[str] = None
    is_saved: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "ingredients": list(self.ingredients),
            "content_hash": self.content_hash,
            "result": self.result.to_dict(),
            "is_saved": self.is_saved,
            "created_at": self.created_at,
        }

    def to_public_dict(self) -> dict:
        """API shape for history and saved lists."""
        return {
            "scanId": self.id,
            "ingredients": list(self.ingredients),
            "result": self.result.to_dict(),
            "isSaved": self.is_saved,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Scan":
        return cls(
            id=d["id"],
            user_id=d["user_id"],
            ingredients=list(d.get("ingredients") or []),
            content_hash=d.get("content_hash"),
            result=ScanResult.from_dict(d.get("result") or {}),
            is_saved=bool(d.get("is_saved", False)),
            created_at=d.get("created_at") or _utc_now(),
        )
