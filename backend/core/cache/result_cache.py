"""
Result reuse before evaluation. Lookup order:
1. global cache: a scan by another user with the same content hash
2. same-user duplicate: this user's scan with the same hash (or same list, for records without a hash)
"""
from dataclasses import dataclass
from typing import List, Optional
import logging

from core.models.scan import Scan
from core.scan_storage import ScanStore

logger = logging.getLogger(__name__)


@dataclass
class CacheHit:
    scan: Scan
    kind: str  # "cached" | "duplicate"

    @property
    def is_global(self) -> bool:
        return self.kind == "cached"


class ResultCache:
    def __init__(self, store: ScanStore):
        self._store = store

    def lookup(self, user_id: str, content_hash: str, ingredients: List[str]) -> Optional[CacheHit]:
        scan = self._store.find_by_hash(content_hash, exclude_user=user_id)
        if scan is not None:
            logger.info("SCAN_CACHE_HIT key=%s source_scan=%s", content_hash[:12], scan.id)
            return CacheHit(scan=scan, kind="cached")

        scan = self._store.find_user_duplicate(user_id, content_hash, ingredients)
        if scan is not None:
            logger.info("SCAN_DUPLICATE user_id=%s scan_id=%s", user_id, scan.id)
            return CacheHit(scan=scan, kind="duplicate")

        logger.info("SCAN_CACHE_MISS key=%s user_id=%s", content_hash[:12], user_id)
        return None
