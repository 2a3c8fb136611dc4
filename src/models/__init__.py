"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .ingredient import Ingredient, IngredientPack
from .recipe import Recipe, RecipeIngredient
from .event import Event, EventRecipe
from .enums import IngredientCategory, PricingTier, EventStatus

__all__ = [
    "Base",
    "BaseModel",
    # Catalog
    "Ingredient",
    "IngredientPack",
    "Recipe",
    "RecipeIngredient",
    # Bookings
    "Event",
    "EventRecipe",
    # Enums
    "IngredientCategory",
    "PricingTier",
    "EventStatus",
]
