"""
Immutable catalog snapshots consumed by the order engine.

The engine never touches the database. Booking services load ORM rows and
convert them to these frozen value objects (see catalog_service), so every
computation runs against a fixed snapshot and can be repeated freely.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from src.utils.constants import DEFAULT_UNIT

# recipe identity -> servings
Selection = Mapping[str, int]

# Multipliers from liquor volume units to millilitres
LIQUOR_ML_FACTORS: Dict[str, float] = {
    "ml": 1.0,
    "cl": 10.0,
    "dl": 100.0,
    "l": 1000.0,
    "litre": 1000.0,
    "liter": 1000.0,
}


def normalize_unit(unit: Optional[str]) -> str:
    """Trim and lower-case a unit string; empty or missing becomes "ml".

    Examples:
        >>> normalize_unit(" ML ")
        'ml'
        >>> normalize_unit(None)
        'ml'
    """
    cleaned = (unit or "").strip().lower()
    return cleaned or DEFAULT_UNIT


def liquor_ml_factor(unit: Optional[str]) -> float:
    """Millilitres per unit of a liquor quantity.

    Unrecognised units are assumed to already be millilitres.
    """
    return LIQUOR_ML_FACTORS.get(normalize_unit(unit), 1.0)


@dataclass(frozen=True)
class PackOffer:
    """A purchasable pack of an ingredient.

    Attributes:
        offer_id: Stable identity used to deduplicate offers
        pack_size: Size in the ingredient's unit
        pack_price: Price per pack, None when unknown
        tier: Pricing tier tag, None when untagged
        is_active: Inactive offers are never considered
        purchase_url: Direct product link
        search_url: Retailer search link
        search_query: Search terms used to find the pack
        retailer: Retailer name
    """

    offer_id: Optional[str]
    pack_size: float
    pack_price: Optional[float] = None
    tier: Optional[str] = None
    is_active: bool = True
    purchase_url: Optional[str] = None
    search_url: Optional[str] = None
    search_query: Optional[str] = None
    retailer: Optional[str] = None

    @property
    def tier_tag(self) -> str:
        """Normalized tier tag ("" when untagged)."""
        return (self.tier or "").strip().lower()


@dataclass(frozen=True)
class IngredientSnapshot:
    """A catalog ingredient as seen by the engine.

    Attributes:
        ingredient_id: Catalog identity (None for unresolved references)
        name: Display name
        category: liquor, mixer, juice, syrup, garnish, ice or glassware
        unit: Canonical unit (normalized on construction)
        pack_size: Reference pack size in unit, None when unknown
        pack_offers: Purchasable pack offers
        purchase_url: Default purchase link
    """

    ingredient_id: Optional[str]
    name: str
    category: str
    unit: str = DEFAULT_UNIT
    pack_size: Optional[float] = None
    pack_offers: Tuple[PackOffer, ...] = ()
    purchase_url: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", normalize_unit(self.unit))
        object.__setattr__(self, "category", (self.category or "").strip().lower())
        object.__setattr__(self, "pack_offers", tuple(self.pack_offers or ()))


@dataclass(frozen=True)
class RecipeComponent:
    """One ingredient of a recipe with its per-serving amount."""

    ingredient: Optional[IngredientSnapshot]
    amount_per_serving: float


@dataclass(frozen=True)
class RecipeSnapshot:
    """A recipe with its ordered components."""

    recipe_id: str
    name: str
    components: Tuple[RecipeComponent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "components", tuple(self.components or ()))
