"""Category schemas."""

from pydantic import BaseModel, ConfigDict


class CategorySummary(BaseModel):
    """Category as embedded in recipe responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    color: str


class CategoryResponse(CategorySummary):
    """Category response."""

    description: str | None


class CategoryWithCount(CategoryResponse):
    """Category with the number of published recipes in it."""

    recipe_count: int
