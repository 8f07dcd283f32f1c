"""
Scan history storage.
- Backend: JSON file (data/scans.json), one record per newly evaluated scan.
- Records are never rewritten except for the is_saved flag; owners may delete them.
- No dedup here: cache/duplicate detection upstream prevents redundant writes.
"""
import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from core.config import get_scans_path
from core.errors import ScanNotFoundError, StorageCorruptedError
from core.json_file import read_json, write_json_atomic
from core.models.scan import Scan

logger = logging.getLogger(__name__)


class ScanStore:
    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_scans_path()
        self._lock = threading.Lock()

    def _load_all(self, strict: bool = False) -> List[dict]:
        """strict=True on write paths: an unreadable file raises instead of reading as empty."""
        data = read_json(self._path, default={}, strict=strict)
        scans = data.get("scans") if isinstance(data, dict) else None
        if not isinstance(scans, list):
            if strict and self._path.exists():
                raise StorageCorruptedError(f"Unexpected layout in {self._path}")
            return []
        return scans

    def _save_all(self, records: List[dict]) -> None:
        write_json_atomic(self._path, {"scans": records, "version": "1.0"})

    def _scans(self, predicate: Callable[[dict], bool]) -> List[Scan]:
        """Matching scans, newest first. Ties on created_at fall back to file order."""
        indexed = [(i, Scan.from_dict(r)) for i, r in enumerate(self._load_all()) if predicate(r)]
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [scan for _, scan in indexed]

    def add(self, scan: Scan) -> str:
        with self._lock:
            records = self._load_all(strict=True)
            records.append(scan.to_dict())
            self._save_all(records)
        logger.info(
            "SCAN_SAVE id=%s user_id=%s ingredients=%d hash=%s",
            scan.id, scan.user_id, len(scan.ingredients), (scan.content_hash or "")[:12],
        )
        return scan.id

    def get(self, scan_id: str) -> Optional[Scan]:
        found = self._scans(lambda r: r.get("id") == scan_id)
        return found[0] if found else None

    def find_by_hash(self, content_hash: str, exclude_user: Optional[str] = None) -> Optional[Scan]:
        """Most recent scan with this content hash, optionally ignoring one user's scans."""
        found = self._scans(
            lambda r: r.get("content_hash") == content_hash and r.get("user_id") != exclude_user
        )
        return found[0] if found else None

    def find_user_duplicate(
        self, user_id: str, content_hash: Optional[str], ingredients: List[str]
    ) -> Optional[Scan]:
        """Most recent scan of this user with the same hash, or the same list when no hash was stored."""
        def _same(r: dict) -> bool:
            if r.get("user_id") != user_id:
                return False
            if content_hash and r.get("content_hash"):
                return r["content_hash"] == content_hash
            return sorted(r.get("ingredients") or []) == ingredients
        found = self._scans(_same)
        return found[0] if found else None

    def list_for_user(self, user_id: str, saved_only: bool = False) -> List[Scan]:
        return self._scans(
            lambda r: r.get("user_id") == user_id and (not saved_only or r.get("is_saved"))
        )

    def page_for_user(self, user_id: str, page: int, limit: int) -> Tuple[List[Scan], int]:
        """Return (scans on this page, total scan count) for the user, newest first."""
        scans = self.list_for_user(user_id)
        start = (page - 1) * limit
        return scans[start:start + limit], len(scans)

    def toggle_saved(self, user_id: str, scan_id: str) -> Scan:
        """Flip is_saved on an owned scan. Repeated calls alternate the state."""
        with self._lock:
            records = self._load_all(strict=True)
            for r in records:
                if r.get("id") == scan_id and r.get("user_id") == user_id:
                    r["is_saved"] = not r.get("is_saved", False)
                    self._save_all(records)
                    logger.info("SCAN_SAVE_TOGGLE id=%s is_saved=%s", scan_id, r["is_saved"])
                    return Scan.from_dict(r)
        raise ScanNotFoundError(scan_id)

    def delete(self, user_id: str, scan_id: str) -> None:
        with self._lock:
            records = self._load_all(strict=True)
            kept = [r for r in records if not (r.get("id") == scan_id and r.get("user_id") == user_id)]
            if len(kept) == len(records):
                raise ScanNotFoundError(scan_id)
            self._save_all(kept)
        logger.info("SCAN_DELETE id=%s user_id=%s", scan_id, user_id)
