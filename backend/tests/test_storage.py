"""
Unit tests for JSON-file profile and scan stores.
Run from backend: python -m pytest tests/test_storage.py -v
"""
import json

import pytest

from core.errors import ScanNotFoundError, StorageCorruptedError, UserNotFoundError
from core.models.scan import Scan
from core.models.user_profile import UserProfile
from core.models.verdict import ScanResult


def test_profile_partial_update_never_clears(profile_store):
    profile_store.update_profile_partial("u1", diet="Vegan", allergies=["Peanut", "peanut ", "Soy"])
    p = profile_store.update_profile_partial("u1", diet=None, health_issues=["Gout"])
    assert p.diet == "vegan"
    assert p.allergies == ["peanut", "soy"]
    assert p.health_issues == ["gout"]
    assert profile_store.get_profile("u1").to_dict() == p.to_dict()


def test_profile_require_missing(profile_store):
    assert profile_store.get_profile("nobody") is None
    with pytest.raises(UserNotFoundError):
        profile_store.require_profile("nobody")


def test_profile_from_camel_case_keys():
    p = UserProfile.from_dict({"user_id": "u", "healthIssues": ["Asthma"], "profileCompleted": True})
    assert p.health_issues == ["asthma"]
    assert p.profile_completed is True


def _scan(user_id, ingredients, content_hash="h1", **kwargs):
    return Scan(user_id=user_id, ingredients=ingredients, content_hash=content_hash,
                result=ScanResult(safe=False, summary=f"{user_id}:{ingredients}"), **kwargs)


def test_scan_store_file_format(scan_store, tmp_path):
    scan_id = scan_store.add(_scan("u1", ["milk"]))
    raw = json.loads((tmp_path / "scans.json").read_text())
    assert raw["version"] == "1.0"
    assert raw["scans"][0]["id"] == scan_id
    assert scan_store.get(scan_id).result.summary == "u1:['milk']"


def test_find_by_hash_excludes_user(scan_store):
    scan_store.add(_scan("u1", ["milk"]))
    assert scan_store.find_by_hash("h1", exclude_user="u1") is None
    assert scan_store.find_by_hash("h1", exclude_user="u2").user_id == "u1"


def test_user_duplicate_falls_back_to_list_without_hash(scan_store):
    scan_store.add(_scan("u1", ["milk", "sugar"], content_hash=None))
    assert scan_store.find_user_duplicate("u1", "h9", ["milk", "sugar"]) is not None
    assert scan_store.find_user_duplicate("u1", "h9", ["milk"]) is None
    assert scan_store.find_user_duplicate("u2", "h9", ["milk", "sugar"]) is None


def test_toggle_and_delete(scan_store):
    scan_id = scan_store.add(_scan("u1", ["milk"]))
    assert scan_store.toggle_saved("u1", scan_id).is_saved is True
    assert [s.id for s in scan_store.list_for_user("u1", saved_only=True)] == [scan_id]
    with pytest.raises(ScanNotFoundError):
        scan_store.toggle_saved("u2", scan_id)
    scan_store.delete("u1", scan_id)
    assert scan_store.get(scan_id) is None
    with pytest.raises(ScanNotFoundError):
        scan_store.delete("u1", scan_id)


def test_page_for_user(scan_store):
    ids = [scan_store.add(_scan("u1", [f"i{n}"], content_hash=f"h{n}")) for n in range(5)]
    scan_store.add(_scan("u2", ["x"]))
    page, total = scan_store.page_for_user("u1", 2, 2)
    assert total == 5
    assert [s.id for s in page] == [ids[2], ids[1]]
    page, _ = scan_store.page_for_user("u1", 4, 2)
    assert page == []


def test_corrupt_scan_file_is_not_overwritten(scan_store, tmp_path):
    """Truncated scans.json: writes refuse to proceed and the file is left intact."""
    scan_store.add(_scan("u", ["a"], content_hash="ha"))
    scan_store.add(_scan("u", ["b"], content_hash="hb"))
    path = tmp_path / "scans.json"
    text = path.read_text()
    path.write_text(text[: len(text) // 2])
    with pytest.raises(StorageCorruptedError):
        scan_store.add(_scan("u", ["c"], content_hash="hc"))
    assert path.read_text() == text[: len(text) // 2]


def test_corrupt_profile_file_is_not_overwritten(profile_store, tmp_path):
    profile_store.update_profile_partial("u1", diet="vegan")
    path = tmp_path / "profiles.json"
    path.write_text('{"u1": {"diet": "veg')
    with pytest.raises(StorageCorruptedError):
        profile_store.update_profile_partial("u2", diet="keto")
    assert path.read_text() == '{"u1": {"diet": "veg'


def test_store_writes_leave_no_temp_files(scan_store, tmp_path):
    scan_id = scan_store.add(_scan("u1", ["milk"]))
    scan_store.toggle_saved("u1", scan_id)
    scan_store.delete("u1", scan_id)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["scans.json"]
