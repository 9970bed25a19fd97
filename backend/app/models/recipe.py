from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, conint


DEFAULT_TITLE = "AI Generated Recipe"
DEFAULT_COOKING_TIME = "Not specified"
DEFAULT_SERVINGS = 2
DEFAULT_CUISINE = "General"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ParsedFields(BaseModel):
    title: str = Field(DEFAULT_TITLE, min_length=1, max_length=100)
    cooking_time: str = DEFAULT_COOKING_TIME
    servings: conint(ge=1, le=99) = DEFAULT_SERVINGS


class Recipe(BaseModel):
    id: str
    user: str
    ingredients: List[str]
    generated_recipe: str
    title: str
    cuisine: str = DEFAULT_CUISINE
    difficulty: Difficulty = Difficulty.MEDIUM
    cooking_time: str = "Unknown"
    servings: int = DEFAULT_SERVINGS
    is_favorite: bool = False
    tags: List[str] = []
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class GenerateRecipeRequest(BaseModel):
    # validated by RecipeOrchestrator
    ingredients: Any = None
    cuisine: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    servings: Optional[conint(ge=1, le=99)] = None


class RegenerateRecipeRequest(BaseModel):
    cuisine: Optional[str] = None
    difficulty: Optional[Difficulty] = None


class RecipeUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    ingredients: Optional[List[str]] = None
    generated_recipe: Optional[str] = Field(None, min_length=1)
    cuisine: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    cooking_time: Optional[str] = None
    servings: Optional[conint(ge=1, le=99)] = None
    is_favorite: Optional[bool] = None
    tags: Optional[List[str]] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class RecipePage(BaseModel):
    recipes: List[Recipe]
    pagination: Pagination
