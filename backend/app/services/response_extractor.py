import re

from ..core.errors import EmptyGenerationError

CONTROL_TOKENS = re.compile(r"<s>|</s>|\[INST\]|\[/INST\]")


class ResponseExtractor:
    @staticmethod
    def clean(text: str) -> str:
        """Drop instruction delimiters echoed by the model and trim."""
        cleaned = text or ""
        # removing one token can splice the remains into another one
        while CONTROL_TOKENS.search(cleaned):
            cleaned = CONTROL_TOKENS.sub("", cleaned)
        cleaned = cleaned.strip()
        if not cleaned:
            raise EmptyGenerationError("No generated text in API response")
        return cleaned
