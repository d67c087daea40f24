"""Category and RecipeCategory models."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from recipe_site.database import Base
from recipe_site.models.mixins import TimestampMixin


class Category(Base, TimestampMixin):
    """Category model for grouping recipes on the site."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(7), nullable=False, default="#ec4899")  # Hex color like "#ec4899"

    # Relationships
    recipe_links = relationship(
        "RecipeCategory", back_populates="category", cascade="all, delete-orphan"
    )


class RecipeCategory(Base):
    """Join row between a recipe and a category.

    The schema allows several rows per recipe; the importer keeps exactly one.
    """

    __tablename__ = "recipe_categories"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    recipe = relationship("Recipe", back_populates="category_links")
    category = relationship("Category", back_populates="recipe_links")
