"""Recipe schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from recipe_site.schemas.category import CategoryResponse, CategorySummary


class RecipeSummary(BaseModel):
    """Recipe card as shown in listings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    description: str | None
    featured_image: str | None
    servings: int
    cook_time: int | None
    difficulty: str
    published_at: datetime | None
    updated_at: datetime
    category: CategorySummary | None = Field(
        None, validation_alias=AliasChoices("primary_category", "category")
    )


class RecipeDetail(RecipeSummary):
    """Full recipe."""

    ingredients: list[str]
    instructions: list[str]
    nutrition: dict | None
    images: list[str]
    prep_time: int | None
    total_time: int | None
    wp_url: str | None


class RecipeDetailResponse(BaseModel):
    """Recipe with up to three similar recipes."""

    recipe: RecipeDetail
    similar_recipes: list[RecipeSummary]


class RecipeListResponse(BaseModel):
    """One page of the recipe listing."""

    model_config = ConfigDict(populate_by_name=True)

    recipes: list[RecipeSummary]
    has_more: bool = Field(..., alias="hasMore")
    total: int


class CategoryPageResponse(BaseModel):
    """One page of a category's recipes."""

    category: CategoryResponse
    recipes: list[RecipeSummary]
    total_recipes: int
    total_pages: int
    current_page: int
