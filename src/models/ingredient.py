"""
Ingredient models for the cocktail catalog.

This module contains:
- Ingredient: A catalog ingredient (spirit, mixer, garnish, glass, ...)
- IngredientPack: A purchasable pack offer for an ingredient
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from src.utils.constants import DEFAULT_UNIT, TIER_ECONOMY


class Ingredient(BaseModel):
    """
    Ingredient model representing a catalog ingredient.

    Attributes:
        name: Display name (e.g., "London Dry Gin")
        category: One of liquor, mixer, juice, syrup, garnish, ice, glassware
        unit: Canonical unit for amounts and pack sizes (e.g., "ml", "g", "pc")
        bottle_size: Reference pack size in the ingredient's unit
        purchase_url: Where staff usually buy it
        price: Legacy single price, kept for display only
    """

    __tablename__ = "ingredients"

    name = Column(String(200), nullable=False, index=True)
    category = Column(String(20), nullable=False, index=True)
    unit = Column(String(50), nullable=True, default=DEFAULT_UNIT)
    bottle_size = Column(Float, nullable=True)
    purchase_url = Column(String(1000), nullable=True)
    price = Column(Numeric(10, 2), nullable=True)

    packs = relationship(
        "IngredientPack",
        back_populates="ingredient",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="IngredientPack.id",
    )

    __table_args__ = (
        CheckConstraint(
            "category IN ('liquor', 'mixer', 'juice', 'syrup', 'garnish', 'ice', 'glassware')",
            name="ck_ingredient_category_valid",
        ),
        CheckConstraint(
            "bottle_size IS NULL OR bottle_size > 0", name="ck_ingredient_bottle_size_positive"
        ),
    )

    def __repr__(self) -> str:
        """String representation of ingredient."""
        return f"Ingredient(id={self.id}, name='{self.name}', category='{self.category}')"


class IngredientPack(BaseModel):
    """
    Purchasable pack offer for an ingredient.

    Attributes:
        ingredient_id: Owning ingredient
        pack_size: Pack size in the ingredient's unit (> 0)
        pack_price: Pack price (>= 0, currency-agnostic), None when unknown
        purchase_url: Direct product link
        search_url: Retailer search link
        search_query: Search terms used to find the pack
        retailer: Retailer name
        tier: Pricing tier tag (economy, business, first_class, budget, premium)
        is_active: Inactive offers are never considered
    """

    __tablename__ = "ingredient_packs"

    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False
    )
    pack_size = Column(Float, nullable=False)
    pack_price = Column(Numeric(10, 2), nullable=True)
    purchase_url = Column(String(1000), nullable=True)
    search_url = Column(String(1000), nullable=True)
    search_query = Column(String(200), nullable=True)
    retailer = Column(String(100), nullable=True)
    tier = Column(String(20), nullable=True, default=TIER_ECONOMY)
    is_active = Column(Boolean, nullable=False, default=True)

    ingredient = relationship("Ingredient", back_populates="packs")

    __table_args__ = (
        Index("idx_ingredient_pack_ingredient", "ingredient_id"),
        CheckConstraint("pack_size > 0", name="ck_ingredient_pack_size_positive"),
        CheckConstraint("pack_price >= 0", name="ck_ingredient_pack_price_non_negative"),
    )

    def __repr__(self) -> str:
        """String representation of pack offer."""
        return (
            f"IngredientPack(id={self.id}, ingredient_id={self.ingredient_id}, "
            f"pack_size={self.pack_size}, tier='{self.tier}')"
        )
