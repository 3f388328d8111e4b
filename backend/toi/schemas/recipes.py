from pydantic import BaseModel, Field

from .common import EntityOut, OrderBy, SearchParams, UpdateRequest, UtcDatetime, sub_params
from .tags import TagOut, TagSearchParams


class RecipeOut(EntityOut):
    id: int
    description: str
    ingredients: str
    instructions: str
    created_at: UtcDatetime


class RecipePreview(EntityOut):
    """A recipe without its ingredients and instructions."""

    id: int
    description: str
    created_at: UtcDatetime


class RecipeTags(BaseModel):
    recipe_preview: RecipePreview
    tags: list[TagOut]


class NewRecipeRequest(BaseModel):
    description: str = Field(min_length=1, description="Short description of the dish")
    ingredients: str = Field(min_length=1)
    instructions: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list, description="Names of existing tags to attach")


class RecipeSearchParams(SearchParams):
    pass


class RecipeUpdates(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    ingredients: str | None = Field(default=None, min_length=1)
    instructions: str | None = Field(default=None, min_length=1)


class UpdateRecipeRequest(UpdateRequest):
    recipe_updates: RecipeUpdates


class RecipeSelector(BaseModel):
    recipe_id: int | None = Field(default=None, description="ID of the recipe")
    recipe_query: str | None = Field(default=None, description="Query used to find the recipe")
    recipe_use_reranking_filter: bool = False
    recipe_created_from: UtcDatetime | None = None
    recipe_created_to: UtcDatetime | None = None
    recipe_order_by: OrderBy | None = None

    def recipe_search(self) -> RecipeSearchParams:
        return sub_params(
            self, "recipe_", RecipeSearchParams, ids=[self.recipe_id] if self.recipe_id else None, limit=1
        )


class NewRecipeTagsRequest(RecipeSelector):
    tags: list[str] = Field(min_length=1, description="Names of existing tags to attach to the recipe")


class RecipeTagSearchParams(RecipeSelector):
    tag_ids: list[int] | None = Field(default=None, description="IDs of tags")
    tag_query: str | None = Field(default=None, description="Query used to find the recipe's tags")
    tag_use_reranking_filter: bool = False
    tag_use_edit_distance_filter: bool = False
    tag_limit: int | None = Field(default=None, ge=1)

    def tag_search(self) -> TagSearchParams:
        return sub_params(self, "tag_", TagSearchParams)
