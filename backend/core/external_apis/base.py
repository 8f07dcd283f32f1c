"""
Contract for the external text generator used by the generative evaluator.
"""


class TextGenerator:
    """One prompt in, one free-text response out. No structure is guaranteed."""

    def generate(self, prompt: str) -> str:
        """Return the raw generated text or raise GeneratorUnavailableError."""
        raise NotImplementedError
