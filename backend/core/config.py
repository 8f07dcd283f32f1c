"""
Feature flags, paths, and centralized configuration.
All resolution relative to the backend directory.
"""
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Repo root: backend/core/config.py -> parent=core, parent.parent=backend, parent.parent.parent=repo
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_REPO_ROOT = _BACKEND_DIR.parent


def _env_flag(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


# --- Evaluation ---
# "generative" (LLM) or "rule_based" (ingredient table lookup)
EVALUATION_STRATEGY = os.environ.get("EVALUATION_STRATEGY", "generative").strip().lower()
# Avoid-list entries are sent to the LLM only when this is on
INCLUDE_AVOID_IN_CONDITIONS = _env_flag("INCLUDE_AVOID_IN_CONDITIONS")

# Sanitizer defaults
NEUTRAL_SCORE = 50
ALTERNATIVE_MIN_CONFIDENCE = int(os.environ.get("ALTERNATIVE_MIN_CONFIDENCE", "80"))

# --- History ---
HISTORY_DEFAULT_PAGE = 1
HISTORY_DEFAULT_LIMIT = int(os.environ.get("HISTORY_DEFAULT_LIMIT", "10"))


# --- Data paths ---
def get_ingredients_path() -> Path:
    return _REPO_ROOT / "data" / "ingredients.json"

def get_scans_path() -> Path:
    return _REPO_ROOT / "data" / "scans.json"

def get_profiles_path() -> Path:
    return _REPO_ROOT / "data" / "profiles.json"


# --- LLM / Ollama ---
def get_ollama_url() -> str:
    return os.environ.get("OLLAMA_API_URL", "http://localhost:11434/api/generate")

def get_ollama_model() -> str:
    return os.environ.get("OLLAMA_MODEL", "llama3.2:3b")

def get_alternative_search_url() -> str:
    return os.environ.get("ALTERNATIVE_SEARCH_URL", "https://www.google.com/search?q=")

# LLM timeout (seconds) and retry policy for the scan call
LLM_SCAN_TIMEOUT = int(os.environ.get("LLM_SCAN_TIMEOUT", "30"))
LLM_MAX_RETRIES = int(os.environ.get("LLM_MAX_RETRIES", "2"))
LLM_INITIAL_BACKOFF = float(os.environ.get("LLM_INITIAL_BACKOFF", "1.0"))


# --- Startup logging ---
def log_config() -> None:
    logger.info(
        "CONFIG: strategy=%s include_avoid=%s ingredients=%s scans=%s profiles=%s "
        "ollama_model=%s llm_scan_timeout=%ds llm_max_retries=%d min_alt_confidence=%d",
        EVALUATION_STRATEGY, INCLUDE_AVOID_IN_CONDITIONS,
        get_ingredients_path().exists(), get_scans_path().exists(),
        get_profiles_path().exists(), get_ollama_model(),
        LLM_SCAN_TIMEOUT, LLM_MAX_RETRIES, ALTERNATIVE_MIN_CONFIDENCE,
    )
