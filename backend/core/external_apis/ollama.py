"""
Ollama-backed text generator. Constructed once by the process (app.py) and
injected into the generative evaluator.
"""
import logging
from typing import Optional

from core.config import (
    LLM_INITIAL_BACKOFF,
    LLM_MAX_RETRIES,
    LLM_SCAN_TIMEOUT,
    get_ollama_model,
    get_ollama_url,
)
from core.errors import GeneratorUnavailableError
from core.external_apis.base import TextGenerator
from core.external_apis.http_retry import post_with_retries

logger = logging.getLogger(__name__)


class OllamaGenerator(TextGenerator):
    def __init__(
        self,
        url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: int = LLM_SCAN_TIMEOUT,
        max_retries: int = LLM_MAX_RETRIES,
        initial_backoff: float = LLM_INITIAL_BACKOFF,
        temperature: float = 0.0,
    ):
        self.url = url or get_ollama_url()
        self.model = model or get_ollama_model()
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.temperature = temperature

    def generate(self, prompt: str) -> str:
        resp, err = post_with_retries(
            self.url,
            json_body={
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {"temperature": self.temperature},
            },
            timeout=self.timeout,
            max_retries=self.max_retries,
            initial_backoff=self.initial_backoff,
        )
        if resp is None:
            logger.warning("LLM_SCAN ollama unavailable model=%s error=%s", self.model, err)
            raise GeneratorUnavailableError(f"Text generator unavailable: {err}")
        if resp.status_code != 200:
            logger.warning("LLM_SCAN ollama status=%s body=%s", resp.status_code, resp.text[:200])
            raise GeneratorUnavailableError(f"Text generator returned HTTP {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as e:
            raise GeneratorUnavailableError(f"Text generator envelope was not JSON: {e}") from e
        if not isinstance(body, dict):
            logger.warning("LLM_SCAN ollama envelope type=%s", type(body).__name__)
            raise GeneratorUnavailableError("Text generator envelope was not a JSON object")
        text = body.get("response", "")
        if not isinstance(text, str):
            raise GeneratorUnavailableError("Text generator envelope had no text response")
        logger.info("LLM_SCAN ollama success model=%s len=%d", self.model, len(text))
        return text
