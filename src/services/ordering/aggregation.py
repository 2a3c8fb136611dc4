"""
Requirement aggregation for the order engine.

This module provides functions for:
- Flattening a selection of (recipe, servings) pairs into line items
- Building the normalization key that merges duplicate catalog entries
- Summing per-serving amounts into one requirement per normalization key

Transaction boundary: Pure computation (no database access).
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from src.utils.constants import CATEGORY_LIQUOR, DEFAULT_BOTTLE_SIZE_ML
from src.services.logging_utils import get_service_logger, log_operation

from .snapshots import PackOffer, RecipeSnapshot, Selection, liquor_ml_factor, normalize_unit

logger = get_service_logger(__name__)


@dataclass(frozen=True)
class LineItem:
    """One recipe component scaled by the servings chosen for its recipe.

    Attributes:
        ingredient_id: Catalog identity; items without one are dropped
        name: Ingredient display name
        category: Ingredient category
        unit: Ingredient unit
        amount_per_serving: Amount per serving in unit
        servings: Servings chosen for the recipe
        pack_size_hint: Reference pack size, if the catalog has one
        pack_offers: Pack offers attached to the ingredient
    """

    ingredient_id: Optional[str]
    name: str
    category: str
    unit: str
    amount_per_serving: float
    servings: float
    pack_size_hint: Optional[float] = None
    pack_offers: Tuple[PackOffer, ...] = ()


@dataclass(frozen=True)
class AggregatedRequirement:
    """Total raw quantity needed for one normalization key.

    Attributes:
        key: Normalization key (category:name:unit)
        name: Display name of the first contributor
        category: Ingredient category
        unit: Normalized unit
        raw_total: Sum of amount_per_serving * servings
        pack_size: Recorded pack-size hint (a 700 ml bottle, in the
            requirement's unit, for liquor when never given)
        pack_offers: Offers merged from all contributors, deduplicated
        ingredient_ids: Catalog identities that collapsed into this key
    """

    key: str
    name: str
    category: str
    unit: str
    raw_total: float
    pack_size: Optional[float] = None
    pack_offers: Tuple[PackOffer, ...] = ()
    ingredient_ids: Tuple[str, ...] = ()


@dataclass
class _Accumulator:
    name: str
    category: str
    unit: str
    contributions: List[float] = field(default_factory=list)
    pack_size: Optional[float] = None
    offers: Dict[object, PackOffer] = field(default_factory=dict)
    ingredient_ids: Dict[str, None] = field(default_factory=dict)


def normalization_key(category: Optional[str], name: Optional[str], unit: Optional[str]) -> str:
    """Build the key that merges duplicate ingredient records.

    Category stays part of the key, so a "garnish" and a "juice" with the
    same name and unit remain separate requirements.

    Examples:
        >>> normalization_key("juice", " Lime Juice ", "ML")
        'juice:lime juice:ml'
    """
    category_part = (category or "").strip().lower()
    name_part = (name or "").strip().lower()
    return f"{category_part}:{name_part}:{normalize_unit(unit)}"


def _as_finite(value) -> Optional[float]:
    """Return value as a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _offer_identity(offer: PackOffer) -> object:
    if offer.offer_id:
        return ("id", str(offer.offer_id))
    return ("value", offer)


def build_line_items(
    selection: Optional[Selection],
    recipes: Mapping[str, RecipeSnapshot],
) -> List[LineItem]:
    """Flatten a selection into line items.

    Args:
        selection: Mapping of recipe identity to servings
        recipes: Mapping of recipe identity to RecipeSnapshot

    Returns:
        Line items in selection order, then component order. Unknown
        recipes and components without an ingredient are skipped;
        servings are passed through unfiltered.
    """
    items: List[LineItem] = []
    if not selection:
        return items

    for recipe_id, servings in selection.items():
        recipe = recipes.get(recipe_id)
        if recipe is None:
            continue

        for component in recipe.components:
            ingredient = component.ingredient
            if ingredient is None:
                continue
            items.append(
                LineItem(
                    ingredient_id=ingredient.ingredient_id,
                    name=ingredient.name,
                    category=ingredient.category,
                    unit=ingredient.unit,
                    amount_per_serving=component.amount_per_serving,
                    servings=servings,
                    pack_size_hint=ingredient.pack_size,
                    pack_offers=ingredient.pack_offers,
                )
            )
    return items


def aggregate_requirements(line_items: Iterable[LineItem]) -> Dict[str, AggregatedRequirement]:
    """Merge line items into one requirement per normalization key.

    Items with no ingredient identity, non-positive or non-finite servings,
    or a negative or non-finite amount contribute nothing. Totals are summed
    with math.fsum, so the result does not depend on item order.

    Args:
        line_items: Line items from build_line_items()

    Returns:
        Dict keyed by normalization key with AggregatedRequirement values
        (no guaranteed order)
    """
    accumulators: Dict[str, _Accumulator] = {}
    dropped = 0

    for item in line_items:
        if item.ingredient_id is None or item.ingredient_id == "":
            dropped += 1
            continue

        servings = _as_finite(item.servings)
        amount = _as_finite(item.amount_per_serving)
        if servings is None or servings <= 0 or amount is None or amount < 0:
            dropped += 1
            continue

        key = normalization_key(item.category, item.name, item.unit)
        acc = accumulators.get(key)
        if acc is None:
            acc = _Accumulator(
                name=(item.name or "").strip(),
                category=(item.category or "").strip().lower(),
                unit=normalize_unit(item.unit),
            )
            accumulators[key] = acc

        acc.contributions.append(amount * servings)
        acc.ingredient_ids.setdefault(str(item.ingredient_id), None)

        hint = _as_finite(item.pack_size_hint)
        if acc.pack_size is None and hint is not None and hint > 0:
            acc.pack_size = hint

        for offer in item.pack_offers or ():
            acc.offers.setdefault(_offer_identity(offer), offer)

    result: Dict[str, AggregatedRequirement] = {}
    for key, acc in accumulators.items():
        pack_size = acc.pack_size
        if pack_size is None and acc.category == CATEGORY_LIQUOR:
            # Default bottle is in millilitres; keep it in the requirement's unit
            pack_size = DEFAULT_BOTTLE_SIZE_ML / liquor_ml_factor(acc.unit)

        result[key] = AggregatedRequirement(
            key=key,
            name=acc.name,
            category=acc.category,
            unit=acc.unit,
            raw_total=math.fsum(acc.contributions),
            pack_size=pack_size,
            pack_offers=tuple(acc.offers.values()),
            ingredient_ids=tuple(acc.ingredient_ids),
        )

    log_operation(
        logger,
        operation="aggregate_requirements",
        outcome="success",
        level=logging.DEBUG,
        requirement_count=len(result),
        dropped_items=dropped,
    )
    return result
