"""
Recipe models for cocktail recipes.

This module contains:
- Recipe: A cocktail on the menu
- RecipeIngredient: Junction table linking recipes to ingredients with a
  per-serving amount
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class Recipe(BaseModel):
    """
    Recipe model representing a cocktail.

    Attributes:
        name: Cocktail name (e.g., "Margarita")
        description: Menu description
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)

    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="[RecipeIngredient.position, RecipeIngredient.id]",
    )

    def __repr__(self) -> str:
        """String representation of recipe."""
        return f"Recipe(id={self.id}, name='{self.name}')"


class RecipeIngredient(BaseModel):
    """
    One component of a recipe.

    Attributes:
        recipe_id: Owning recipe
        ingredient_id: Ingredient used
        amount_per_serving: Amount per serving in the ingredient's unit
        position: Display order within the recipe
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=True
    )
    amount_per_serving = Column(Float, nullable=False, default=0.0)
    position = Column(Integer, nullable=False, default=0)

    recipe = relationship("Recipe", back_populates="recipe_ingredients")
    ingredient = relationship("Ingredient", lazy="joined")

    __table_args__ = (
        Index("idx_recipe_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_ingredient_ingredient", "ingredient_id"),
        CheckConstraint(
            "amount_per_serving >= 0", name="ck_recipe_ingredient_amount_non_negative"
        ),
    )

    def __repr__(self) -> str:
        """String representation of recipe ingredient."""
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id}, "
            f"amount_per_serving={self.amount_per_serving})"
        )
