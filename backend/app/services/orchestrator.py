"""
Recipe generation pipeline.

    PromptBuilder -> GenerationClient -> ResponseExtractor -> RecipeParser

Stages run strictly in sequence. Any RecipeError from the client or the
extractor aborts the request before anything is persisted; the parser never
fails.
"""

import logging
from typing import Any, List, Optional

from ..core.config import Settings, get_settings
from ..core.errors import ConfigurationError, InputValidationError, RecipeNotFoundError
from ..models.recipe import DEFAULT_CUISINE, Difficulty, ParsedFields, Recipe
from .generation_client import GenerationClient
from .prompt_builder import PromptBuilder
from .recipe_parser import RecipeParser
from .repository import RecipeRepository, new_recipe_id
from .response_extractor import ResponseExtractor

log = logging.getLogger(__name__)


def validate_ingredients(ingredients: Any) -> List[str]:
    if not ingredients or not isinstance(ingredients, (list, tuple)):
        raise InputValidationError("Please provide at least one ingredient as an array")

    valid = [i.strip() for i in ingredients if isinstance(i, str) and i.strip()]
    if not valid:
        raise InputValidationError("All ingredients must be non-empty strings")
    return valid


class RecipeOrchestrator:
    def __init__(
        self,
        repository: RecipeRepository,
        client: Optional[GenerationClient] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.client = client or GenerationClient(self.settings)

    def _check_configured(self) -> None:
        if not self.settings.hf_access_token:
            log.error("❌ HF_ACCESS_TOKEN not configured")
            raise ConfigurationError(
                "Hugging Face API token not configured. "
                "Please add HF_ACCESS_TOKEN to your environment variables."
            )

    async def _run(
        self,
        ingredients: List[str],
        cuisine: Optional[str],
        difficulty: Optional[Difficulty],
    ) -> tuple[str, ParsedFields]:
        prompt = PromptBuilder.build(ingredients, cuisine, difficulty)
        raw = await self.client.generate(prompt)
        text = ResponseExtractor.clean(raw)
        log.info(f"✅ Generated recipe text (length: {len(text)} chars)")

        fields = RecipeParser.parse(text)
        log.info(f"📊 Parsed recipe info: {fields.model_dump()}")
        return text, fields

    async def generate(
        self,
        user: str,
        ingredients: Any,
        cuisine: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        servings: Optional[int] = None,
    ) -> Recipe:
        valid = validate_ingredients(ingredients)
        self._check_configured()

        log.info(f"🍳 Starting recipe generation for user {user}: {valid[:5]}, {cuisine}, {difficulty}")
        text, fields = await self._run(valid, cuisine, difficulty)

        recipe = await self.repository.create(
            Recipe(
                id=new_recipe_id(),
                user=user,
                ingredients=valid,
                generated_recipe=text,
                title=fields.title,
                cuisine=cuisine or DEFAULT_CUISINE,
                difficulty=difficulty or Difficulty.MEDIUM,
                cooking_time=fields.cooking_time,
                servings=servings or fields.servings,
            )
        )
        log.info(f"✅ Recipe created successfully! ID: {recipe.id}")
        return recipe

    async def regenerate(
        self,
        recipe: Recipe,
        cuisine: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
    ) -> Recipe:
        """Regenerate text, title and cooking time in place. Servings are left as stored."""
        self._check_configured()

        log.info(f"🔄 Regenerating recipe {recipe.id}: {cuisine}, {difficulty}")
        text, fields = await self._run(
            recipe.ingredients,
            cuisine or recipe.cuisine,
            difficulty or recipe.difficulty,
        )

        update = {
            "generated_recipe": text,
            "title": fields.title,
            "cooking_time": fields.cooking_time,
        }
        if cuisine:
            update["cuisine"] = cuisine
        if difficulty:
            update["difficulty"] = difficulty

        try:
            saved = await self.repository.save(recipe.model_copy(update=update))
        except KeyError:
            log.warning(f"⚠️ Recipe {recipe.id} was deleted while regenerating")
            raise RecipeNotFoundError("Recipe not found. It was deleted while being regenerated.")
        log.info(f"✅ Recipe regenerated: {saved.id}")
        return saved
