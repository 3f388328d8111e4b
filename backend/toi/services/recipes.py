import logging

from sqlalchemy import delete, select

from ..models.recipe import Recipe, RecipeTag
from ..models.tag import Tag
from ..schemas.recipes import NewRecipeRequest, NewRecipeTagsRequest, RecipeSelector, RecipeTagSearchParams
from ..schemas.tags import TagSearchParams
from ..state import ToiState
from ..utils.error_handlers import NotFoundError
from .entities import RECIPES, TAGS
from .search import fetch_rows, search_ids

logger = logging.getLogger(__name__)


async def resolve_tag_ids(state: ToiState, names: list[str]) -> list[int]:
    """Map each tag name to the id of its closest existing tag."""
    tag_ids: list[int] = []
    for name in names:
        params = TagSearchParams(query=name, use_reranking_filter=True, limit=1)
        ids = await search_ids(state, TAGS, params)
        if not ids:
            raise NotFoundError(f"tag not found: {name}")
        if ids[0] not in tag_ids:
            tag_ids.append(ids[0])
    return tag_ids


async def add_recipe(state: ToiState, request: NewRecipeRequest) -> tuple[Recipe, list[Tag]]:
    tag_ids = await resolve_tag_ids(state, request.tags)
    embedding = await state.model_client.embed(request.description)

    with state.session_factory() as db:
        with db.begin():
            recipe = Recipe(
                description=request.description,
                ingredients=request.ingredients,
                instructions=request.instructions,
                embedding=embedding,
            )
            db.add(recipe)
            db.flush()
            db.add_all([RecipeTag(recipe_id=recipe.id, tag_id=tag_id) for tag_id in tag_ids])
        db.refresh(recipe)
        tags = fetch_rows(db, Tag, tag_ids)
    logger.info("added recipe id=%s tags=%s", recipe.id, tag_ids)
    return recipe, tags


async def find_recipe(state: ToiState, selector: RecipeSelector) -> Recipe:
    ids = await search_ids(state, RECIPES, selector.recipe_search())
    with state.session_factory() as db:
        rows = fetch_rows(db, Recipe, ids[:1])
    if not rows:
        raise NotFoundError("recipe not found")
    return rows[0]


def _recipe_tag_scope(recipe_id: int):
    return (Tag.id.in_(select(RecipeTag.tag_id).where(RecipeTag.recipe_id == recipe_id)),)


async def add_recipe_tags(state: ToiState, request: NewRecipeTagsRequest) -> tuple[Recipe, list[Tag]]:
    recipe = await find_recipe(state, request)
    tag_ids = await resolve_tag_ids(state, request.tags)
    with state.session_factory() as db:
        with db.begin():
            existing = set(db.scalars(select(RecipeTag.tag_id).where(RecipeTag.recipe_id == recipe.id)))
            db.add_all([RecipeTag(recipe_id=recipe.id, tag_id=t) for t in tag_ids if t not in existing])
        tags = fetch_rows(db, Tag, tag_ids)
    return recipe, tags


async def get_recipe_tags(state: ToiState, params: RecipeTagSearchParams) -> tuple[Recipe, list[Tag]]:
    recipe = await find_recipe(state, params)
    ids = await search_ids(state, TAGS, params.tag_search(), scope=_recipe_tag_scope(recipe.id))
    with state.session_factory() as db:
        return recipe, fetch_rows(db, Tag, ids)


async def delete_recipe_tags(state: ToiState, params: RecipeTagSearchParams) -> tuple[Recipe, list[Tag]]:
    """Unlink the matching tags from the recipe; the tags themselves are kept."""
    recipe = await find_recipe(state, params)
    ids = await search_ids(state, TAGS, params.tag_search(), scope=_recipe_tag_scope(recipe.id))
    if not ids:
        return recipe, []
    with state.session_factory() as db:
        with db.begin():
            removed = list(
                db.scalars(
                    delete(RecipeTag)
                    .where(RecipeTag.recipe_id == recipe.id, RecipeTag.tag_id.in_(ids))
                    .returning(RecipeTag.tag_id),
                    execution_options={"synchronize_session": False},
                )
            )
            removed_ids = set(removed)
            tags = fetch_rows(db, Tag, [i for i in ids if i in removed_ids])
    return recipe, tags
