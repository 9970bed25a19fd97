from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
import logging
from typing import Optional

from ..core.auth import get_current_user
from ..core.config import Settings, get_settings
from ..core.errors import ErrorKind, RecipeError
from ..models.recipe import (
    Difficulty,
    GenerateRecipeRequest,
    Pagination,
    Recipe,
    RecipePage,
    RecipeUpdate,
    RegenerateRecipeRequest,
)
from ..services.orchestrator import RecipeOrchestrator
from ..services.repository import RecipeRepository, is_valid_recipe_id, page_count

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/recipes", tags=["recipes"])

FAILURE_STATUS = {
    ErrorKind.INPUT_VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFIGURATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.REMOTE_RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.REMOTE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.REMOTE_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.RECIPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def get_repository(request: Request) -> RecipeRepository:
    return request.app.state.repository


def get_orchestrator(request: Request) -> RecipeOrchestrator:
    return request.app.state.orchestrator


def failure_response(error: RecipeError, message: str, settings: Settings) -> JSONResponse:
    """Turn a pipeline failure into a JSON response. Remote payloads stay out of it unless in development."""
    if error.kind == ErrorKind.INPUT_VALIDATION:
        body = {"message": error.message, "kind": error.kind.value}
    else:
        body = {"message": message, "kind": error.kind.value, "error": error.message}

    headers = {}
    if error.retry_after is not None:
        body["retry_after"] = error.retry_after
        headers["Retry-After"] = str(error.retry_after)
    if settings.diagnostics_enabled and error.detail is not None:
        body["diagnostics"] = error.detail

    code = FAILURE_STATUS.get(error.kind, status.HTTP_502_BAD_GATEWAY)
    return JSONResponse(status_code=code, content=body, headers=headers)


async def save_or_404(repository: RecipeRepository, recipe: Recipe) -> Recipe:
    try:
        return await repository.save(recipe)
    except KeyError:
        raise HTTPException(status_code=404, detail="Recipe not found")


async def get_owned_recipe(
    recipe_id: str,
    user: str = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_repository),
) -> Recipe:
    if not is_valid_recipe_id(recipe_id):
        raise HTTPException(status_code=400, detail="Invalid recipe ID format")

    recipe = await repository.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    if recipe.user != user:
        raise HTTPException(status_code=403, detail="Not authorized to access this recipe")
    return recipe


@router.post("/generate", response_model=Recipe, status_code=status.HTTP_201_CREATED)
async def generate_recipe(
    body: GenerateRecipeRequest,
    user: str = Depends(get_current_user),
    orchestrator: RecipeOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    try:
        return await orchestrator.generate(
            user,
            body.ingredients,
            cuisine=body.cuisine,
            difficulty=body.difficulty,
            servings=body.servings,
        )
    except RecipeError as e:
        log.error(f"❌ Generate Recipe Error: {e!r}")
        return failure_response(e, "Failed to generate recipe", settings)


@router.get("", response_model=RecipePage)
async def list_recipes(
    cuisine: Optional[str] = None,
    difficulty: Optional[Difficulty] = None,
    is_favorite: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    page: int = Query(1, ge=1),
    user: str = Depends(get_current_user),
    repository: RecipeRepository = Depends(get_repository),
):
    recipes, total = await repository.list_for_user(
        user,
        cuisine=cuisine,
        difficulty=difficulty,
        favorites_only=bool(is_favorite),
        search=search,
        page=page,
        limit=limit,
    )
    log.info(f"📚 Found {len(recipes)}/{total} recipes for user {user}")
    return RecipePage(
        recipes=recipes,
        pagination=Pagination(page=page, limit=limit, total=total, pages=page_count(total, limit)),
    )


@router.get("/{recipe_id}", response_model=Recipe)
async def get_recipe(recipe: Recipe = Depends(get_owned_recipe)):
    return recipe


@router.put("/{recipe_id}", response_model=Recipe)
async def update_recipe(
    body: RecipeUpdate,
    recipe: Recipe = Depends(get_owned_recipe),
    repository: RecipeRepository = Depends(get_repository),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    updated = await save_or_404(repository, recipe.model_copy(update=changes))
    log.info(f"✏️ Recipe updated: {updated.id}")
    return updated


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe: Recipe = Depends(get_owned_recipe),
    repository: RecipeRepository = Depends(get_repository),
):
    await repository.delete(recipe.id)
    log.info(f"🗑️ Recipe deleted: {recipe.id}")
    return {"message": "Recipe deleted successfully", "id": recipe.id}


@router.patch("/{recipe_id}/favorite", response_model=Recipe)
async def toggle_favorite(
    recipe: Recipe = Depends(get_owned_recipe),
    repository: RecipeRepository = Depends(get_repository),
):
    updated = await save_or_404(repository, recipe.model_copy(update={"is_favorite": not recipe.is_favorite}))
    log.info(f"{'⭐' if updated.is_favorite else '☆'} Recipe favorite toggled: {updated.id}")
    return updated


@router.post("/{recipe_id}/regenerate", response_model=Recipe)
async def regenerate_recipe(
    body: Optional[RegenerateRecipeRequest] = None,
    recipe: Recipe = Depends(get_owned_recipe),
    orchestrator: RecipeOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    body = body or RegenerateRecipeRequest()
    try:
        return await orchestrator.regenerate(recipe, cuisine=body.cuisine, difficulty=body.difficulty)
    except RecipeError as e:
        log.error(f"❌ Regenerate Recipe Error: {e!r}")
        return failure_response(e, "Failed to regenerate recipe", settings)
