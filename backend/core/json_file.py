"""
JSON file helpers shared by the profile and scan stores.
Writes go to a temp file in the same directory and are swapped in with os.replace,
so readers see either the old file or the new one, never a partial write.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from core.errors import StorageCorruptedError

logger = logging.getLogger(__name__)


def read_json(path: Path, default: Any, strict: bool = False) -> Any:
    """
    Load JSON from path; missing file -> default.
    Undecodable file: strict raises StorageCorruptedError (write paths must not
    overwrite it), otherwise logs and returns default.
    """
    if not path.exists():
        return default
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        if strict:
            logger.error("STORE_CORRUPT path=%s error=%s", path, e)
            raise StorageCorruptedError(f"Unreadable store file {path}: {e}") from e
        logger.warning("Failed to load %s: %s", path, e)
        return default


def write_json_atomic(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
    ) as tmp:
        json.dump(data, tmp, indent=2)
        tmp.flush()
        os.fsync(tmp.fileno())
    try:
        os.replace(tmp.name, path)
    except OSError:
        os.unlink(tmp.name)
        raise
