"""
External text generation service (Ollama) used by the generative evaluator.
"""
from .base import TextGenerator
from .http_retry import post_with_retries
from .ollama import OllamaGenerator

__all__ = [
    "TextGenerator",
    "post_with_retries",
    "OllamaGenerator",
]
