import hashlib
from typing import List


def get_cache_key(normalized_ingredients: List[str]) -> str:
    """
    SHA-256 hex digest over the comma-joined normalized list.
    Does not include the user: identical lists share a key across users.
    """
    serialized = ",".join(normalized_ingredients)
    return hashlib.sha256(serialized.encode()).hexdigest()
