"""Recipe model."""

from sqlalchemy import JSON, Column, Integer, String, Text
from sqlalchemy.orm import relationship

from recipe_site.database import Base
from recipe_site.models.enums import Difficulty
from recipe_site.models.mixins import PublishableMixin, TimestampMixin


class Recipe(Base, TimestampMixin, PublishableMixin):
    """Recipe model."""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    ingredients = Column(JSON, nullable=False, default=list)
    instructions = Column(JSON, nullable=False, default=list)
    nutrition = Column(JSON, nullable=True)
    servings = Column(Integer, nullable=False, default=4)
    prep_time = Column(Integer, nullable=True)  # minutes
    cook_time = Column(Integer, nullable=True)
    total_time = Column(Integer, nullable=True)
    difficulty = Column(String(10), nullable=False, default=Difficulty.MEDIUM.value)

    # Images
    featured_image = Column(Text, nullable=True)
    images = Column(JSON, nullable=False, default=list)

    # WordPress origin
    wp_post_id = Column(Integer, nullable=True, index=True)
    wp_url = Column(Text, nullable=True)

    # Relationships
    category_links = relationship(
        "RecipeCategory", back_populates="recipe", cascade="all, delete-orphan"
    )

    @property
    def primary_category(self):
        """First associated category, or None."""
        for link in self.category_links:
            if link.category is not None:
                return link.category
        return None
