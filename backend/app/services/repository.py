"""
Recipe persistence.

The document store is an external collaborator; this in-process
implementation keeps whole Recipe documents keyed by id. Updates replace the
stored document in one assignment so concurrent requests never observe a
half-written record.
"""

import logging
import math
import uuid
from typing import Dict, List, Optional, Tuple

from ..models.recipe import Difficulty, Recipe, utcnow

log = logging.getLogger(__name__)


def new_recipe_id() -> str:
    return uuid.uuid4().hex


def is_valid_recipe_id(recipe_id: str) -> bool:
    try:
        return uuid.UUID(hex=recipe_id).hex == recipe_id
    except ValueError:
        return False


class RecipeRepository:
    def __init__(self) -> None:
        self._docs: Dict[str, Recipe] = {}

    async def create(self, recipe: Recipe) -> Recipe:
        now = utcnow()
        stored = recipe.model_copy(update={"created_at": now, "updated_at": now})
        self._docs[stored.id] = stored
        return stored

    async def get(self, recipe_id: str) -> Optional[Recipe]:
        return self._docs.get(recipe_id)

    async def save(self, recipe: Recipe) -> Recipe:
        stored = recipe.model_copy(update={"updated_at": utcnow()})
        if stored.id not in self._docs:
            raise KeyError(stored.id)
        self._docs[stored.id] = stored
        return stored

    async def delete(self, recipe_id: str) -> bool:
        return self._docs.pop(recipe_id, None) is not None

    async def list_for_user(
        self,
        user: str,
        *,
        cuisine: Optional[str] = None,
        difficulty: Optional[Difficulty] = None,
        favorites_only: bool = False,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[Recipe], int]:
        """Return one page of the user's recipes, newest first, and the total match count."""
        # reversed insertion order so equal timestamps still come out newest first
        matches = [r for r in reversed(list(self._docs.values())) if r.user == user]
        if cuisine:
            matches = [r for r in matches if r.cuisine == cuisine]
        if difficulty:
            matches = [r for r in matches if r.difficulty == difficulty]
        if favorites_only:
            matches = [r for r in matches if r.is_favorite]
        if search:
            needle = search.lower()
            matches = [
                r
                for r in matches
                if needle in r.title.lower() or any(needle in i.lower() for i in r.ingredients)
            ]

        matches.sort(key=lambda r: r.created_at, reverse=True)
        start = (page - 1) * limit
        return matches[start:start + limit], len(matches)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
