from fastapi import APIRouter, Depends

from ..models.recipe import Recipe
from ..models.tag import Tag
from ..schemas.recipes import (
    NewRecipeRequest,
    NewRecipeTagsRequest,
    RecipeOut,
    RecipePreview,
    RecipeSearchParams,
    RecipeTagSearchParams,
    RecipeTags,
    UpdateRecipeRequest,
)
from ..schemas.tags import TagOut
from ..services import recipes as recipe_service
from ..services.entities import RECIPES, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/recipes", tags=["Recipes"])


def _recipe_tags(recipe: Recipe, tags: list[Tag]) -> RecipeTags:
    return RecipeTags(
        recipe_preview=RecipePreview.model_validate(recipe),
        tags=[TagOut.model_validate(tag) for tag in tags],
    )


@router.post("/tags", status_code=201, response_model=RecipeTags)
async def add_recipe_tags(request: NewRecipeTagsRequest, state: ToiState = Depends(get_state)):
    """Attach existing tags to the recipe that best matches the recipe fields."""
    return _recipe_tags(*await recipe_service.add_recipe_tags(state, request))


@router.post("/tags/search", response_model=RecipeTags)
async def search_recipe_tags(params: RecipeTagSearchParams, state: ToiState = Depends(get_state)):
    """Find a recipe and the tags attached to it."""
    return _recipe_tags(*await recipe_service.get_recipe_tags(state, params))


@router.post("/tags/delete", response_model=RecipeTags)
async def delete_recipe_tags(params: RecipeTagSearchParams, state: ToiState = Depends(get_state)):
    """Detach tags from a recipe. The tags themselves are kept."""
    return _recipe_tags(*await recipe_service.delete_recipe_tags(state, params))


@router.post("/previews/search", response_model=list[RecipePreview])
async def search_recipe_previews(params: RecipeSearchParams, state: ToiState = Depends(get_state)):
    """Search for recipes without returning their ingredients and instructions."""
    return [RecipePreview.model_validate(row) for row in await get_entities(state, RECIPES, params)]


@router.post("/previews/delete", response_model=list[RecipePreview])
async def delete_recipe_previews(params: RecipeSearchParams, state: ToiState = Depends(get_state)):
    return [RecipePreview.model_validate(row) for row in await delete_entities(state, RECIPES, params)]


@router.post("", status_code=201, response_model=RecipeOut)
async def add_recipe(request: NewRecipeRequest, state: ToiState = Depends(get_state)):
    """Add a recipe, attaching the named (existing) tags. Fails with 404 if a tag doesn't exist."""
    recipe, _ = await recipe_service.add_recipe(state, request)
    return RecipeOut.model_validate(recipe)


@router.put("", response_model=RecipeOut)
async def update_recipe(request: UpdateRecipeRequest, state: ToiState = Depends(get_state)):
    params = request.to_search_params(RecipeSearchParams, "recipe_updates")
    return RecipeOut.model_validate(await update_entity(state, RECIPES, params, request.recipe_updates))


@router.post("/search", response_model=list[RecipeOut])
async def search_recipes(params: RecipeSearchParams, state: ToiState = Depends(get_state)):
    return [RecipeOut.model_validate(row) for row in await get_entities(state, RECIPES, params)]


@router.post("/delete", response_model=list[RecipeOut])
async def delete_recipes(params: RecipeSearchParams, state: ToiState = Depends(get_state)):
    return [RecipeOut.model_validate(row) for row in await delete_entities(state, RECIPES, params)]
