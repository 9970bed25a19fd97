"""
Mistral-style instruction prompt for recipe generation.
"""

from typing import Optional, Sequence

INST_OPEN = "<s>[INST]"
INST_CLOSE = "[/INST]"

USER_MESSAGE = """Generate a detailed recipe using these ingredients: {ingredients}.
Cuisine: {cuisine}
Difficulty: {difficulty}

Please provide:
1. Recipe Title
2. Cooking Time (in minutes)
3. Servings
4. Detailed Step-by-Step Instructions
5. Any additional ingredients needed

Format the response clearly with labeled sections."""


class PromptBuilder:
    @staticmethod
    def build(
        ingredients: Sequence[str],
        cuisine: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> str:
        message = USER_MESSAGE.format(
            ingredients=", ".join(ingredients),
            cuisine=cuisine or "any",
            difficulty=getattr(difficulty, "value", difficulty) or "medium",
        )
        return f"{INST_OPEN} {message} {INST_CLOSE}"
