"""
Catalog Service - Ingredient and recipe catalog access for the order engine.

This service provides:
- Catalog writes used by staff tooling (ingredients, pack offers, recipes)
- Conversion of ORM rows into the engine's frozen snapshots
- Conversion of loosely shaped records (JSON exports, API payloads) into
  the same snapshots

Related rows in exported records may arrive either as a single object or
as a list holding one object. Both shapes are normalized here, so the
engine always sees exactly one ingredient per recipe component.

Session Management Pattern:
- All public functions that read the database accept session=None
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from src.models import Ingredient, IngredientPack, Recipe, RecipeIngredient
from src.models.enums import IngredientCategory
from src.services.database import session_scope
from src.services.exceptions import RecipeNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.ordering import (
    IngredientSnapshot,
    PackOffer,
    RecipeComponent,
    RecipeSnapshot,
    normalize_unit,
)
from src.utils.constants import DEFAULT_UNIT, MAX_NAME_LENGTH

logger = get_service_logger(__name__)


# ============================================================================
# Record helpers
# ============================================================================


def _single(value: Any) -> Optional[Mapping[str, Any]]:
    """Return the one related record from an object-or-list value."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    if isinstance(value, Mapping):
        return value
    return None


def _many(value: Any) -> List[Mapping[str, Any]]:
    """Return related records from an object-or-list value."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    return [item for item in value if isinstance(item, Mapping)]


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _identity(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


# ============================================================================
# ORM -> snapshot
# ============================================================================


def pack_to_offer(pack: IngredientPack) -> PackOffer:
    """Convert an IngredientPack row into a PackOffer."""
    return PackOffer(
        offer_id=f"pack:{pack.id}",
        pack_size=pack.pack_size,
        pack_price=_float_or_none(pack.pack_price),
        tier=pack.tier,
        is_active=bool(pack.is_active),
        purchase_url=pack.purchase_url,
        search_url=pack.search_url,
        search_query=pack.search_query,
        retailer=pack.retailer,
    )


def ingredient_to_snapshot(ingredient: Ingredient) -> IngredientSnapshot:
    """Convert an Ingredient row (with its packs) into a snapshot."""
    return IngredientSnapshot(
        ingredient_id=str(ingredient.id),
        name=ingredient.name,
        category=ingredient.category,
        unit=ingredient.unit,
        pack_size=ingredient.bottle_size,
        pack_offers=tuple(pack_to_offer(pack) for pack in ingredient.packs),
        purchase_url=ingredient.purchase_url,
    )


def recipe_to_snapshot(recipe: Recipe) -> RecipeSnapshot:
    """Convert a Recipe row into a snapshot with ordered components."""
    components = []
    for recipe_ingredient in recipe.recipe_ingredients:
        ingredient = recipe_ingredient.ingredient
        components.append(
            RecipeComponent(
                ingredient=ingredient_to_snapshot(ingredient) if ingredient is not None else None,
                amount_per_serving=recipe_ingredient.amount_per_serving,
            )
        )
    return RecipeSnapshot(recipe_id=str(recipe.id), name=recipe.name, components=tuple(components))


def _load_recipe_snapshots_impl(
    recipe_ids: Optional[Iterable[int]], session: Session
) -> Dict[str, RecipeSnapshot]:
    query = session.query(Recipe)
    if recipe_ids is not None:
        ids = [int(recipe_id) for recipe_id in recipe_ids]
        if not ids:
            return {}
        query = query.filter(Recipe.id.in_(ids))

    snapshots = {str(recipe.id): recipe_to_snapshot(recipe) for recipe in query.all()}
    log_operation(
        logger,
        operation="load_recipe_snapshots",
        outcome="success",
        level=logging.DEBUG,
        recipe_count=len(snapshots),
    )
    return snapshots


def load_recipe_snapshots(
    recipe_ids: Optional[Iterable[int]] = None,
    session: Optional[Session] = None,
) -> Dict[str, RecipeSnapshot]:
    """
    Load recipes as engine snapshots keyed by str(recipe.id).

    Args:
        recipe_ids: Restrict to these recipes (None loads the whole catalog)
        session: Optional session for transaction sharing

    Returns:
        Dict of recipe id string -> RecipeSnapshot. Unknown ids are simply
        absent.
    """
    if session is not None:
        return _load_recipe_snapshots_impl(recipe_ids, session)

    with session_scope() as session:
        return _load_recipe_snapshots_impl(recipe_ids, session)


# ============================================================================
# Loose records -> snapshot
# ============================================================================


def offer_from_record(record: Mapping[str, Any]) -> PackOffer:
    """Build a PackOffer from an exported ingredient_packs record."""
    is_active = record.get("is_active")
    return PackOffer(
        offer_id=_identity(record.get("id")),
        pack_size=_float_or_none(record.get("pack_size")) or 0.0,
        pack_price=_float_or_none(record.get("pack_price")),
        tier=record.get("tier"),
        is_active=True if is_active is None else bool(is_active),
        purchase_url=record.get("purchase_url"),
        search_url=record.get("search_url"),
        search_query=record.get("search_query"),
        retailer=record.get("retailer"),
    )


def ingredient_from_record(record: Mapping[str, Any]) -> IngredientSnapshot:
    """
    Build an IngredientSnapshot from an exported ingredient record.

    Accepts "category" or the older "type" key, and "bottle_size" or
    "bottle_size_ml" for the reference pack size. Offers may be given
    under "ingredient_packs" or "packs".
    """
    packs = record.get("ingredient_packs")
    if packs is None:
        packs = record.get("packs")
    pack_size = record.get("bottle_size")
    if pack_size is None:
        pack_size = record.get("bottle_size_ml")

    return IngredientSnapshot(
        ingredient_id=_identity(record.get("id")),
        name=str(record.get("name") or ""),
        category=str(record.get("category") or record.get("type") or ""),
        unit=record.get("unit") or DEFAULT_UNIT,
        pack_size=_float_or_none(pack_size),
        pack_offers=tuple(offer_from_record(pack) for pack in _many(packs)),
        purchase_url=record.get("purchase_url"),
    )


def recipe_from_record(record: Mapping[str, Any]) -> RecipeSnapshot:
    """
    Build a RecipeSnapshot from an exported recipe record.

    Example record:
        {
            "id": "r1",
            "name": "Margarita",
            "recipe_ingredients": [
                {"ml_per_serving": 50, "ingredients": {"id": "i1", "name": "Tequila",
                                                       "type": "liquor"}},
                {"ml_per_serving": 25, "ingredients": [{"id": "i2", ...}]},
            ],
        }

    Component amounts are read from "amount_per_serving" or
    "ml_per_serving"; the related ingredient from "ingredient" or
    "ingredients", as an object or a list of one.
    """
    components = []
    for row in _many(record.get("recipe_ingredients")):
        related = row.get("ingredient")
        if related is None:
            related = row.get("ingredients")
        ingredient_record = _single(related)

        amount = row.get("amount_per_serving")
        if amount is None:
            amount = row.get("ml_per_serving")
        amount_value = _float_or_none(amount)

        components.append(
            RecipeComponent(
                ingredient=(
                    ingredient_from_record(ingredient_record)
                    if ingredient_record is not None
                    else None
                ),
                amount_per_serving=amount_value if amount_value is not None else 0.0,
            )
        )

    return RecipeSnapshot(
        recipe_id=str(record.get("id")),
        name=str(record.get("name") or ""),
        components=tuple(components),
    )


def recipes_from_records(records: Iterable[Mapping[str, Any]]) -> Dict[str, RecipeSnapshot]:
    """Build recipe snapshots keyed by recipe id from exported records."""
    snapshots = {}
    for record in _many(records):
        snapshot = recipe_from_record(record)
        snapshots[snapshot.recipe_id] = snapshot
    return snapshots


def selection_from_record(value: Any) -> Dict[str, int]:
    """
    Build a selection from a mapping or a list of event_recipes rows.

    Accepts {"r1": 10, "r2": 5} or
    [{"recipe_id": "r1", "servings": 10}, {"recipe_id": "r2", "servings": 5}].
    Rows repeating a recipe add up; rows with zero or negative servings are
    dropped.

    Raises:
        ValidationError: If any servings value is not a whole number
    """
    selection: Dict[str, int] = {}
    if value is None:
        return selection
    if isinstance(value, Mapping):
        rows = [{"recipe_id": key, "servings": servings} for key, servings in value.items()]
    else:
        rows = _many(value)

    errors: List[str] = []
    for row in rows:
        recipe_id = _identity(row.get("recipe_id"))
        servings = _float_or_none(row.get("servings"))
        if recipe_id is None or servings is None:
            continue
        if servings != int(servings):
            errors.append(f"Servings for recipe {recipe_id} must be a whole number.")
            continue
        if servings <= 0:
            continue
        selection[recipe_id] = selection.get(recipe_id, 0) + int(servings)

    if errors:
        raise ValidationError(errors)
    return selection


# ============================================================================
# Catalog writes
# ============================================================================


def _validate_ingredient(name: str, category: str, packs: List[Mapping[str, Any]]) -> None:
    errors = []
    if not name or not name.strip():
        errors.append("Ingredient name is required")
    elif len(name.strip()) > MAX_NAME_LENGTH:
        errors.append(f"Ingredient name must be at most {MAX_NAME_LENGTH} characters")
    if category not in [c.value for c in IngredientCategory]:
        errors.append(f"Unknown ingredient category: {category}")
    for position, pack in enumerate(packs, start=1):
        size = _float_or_none(pack.get("pack_size"))
        if size is None or size <= 0:
            errors.append(f"Pack {position}: pack size must be a positive number")
        if pack.get("pack_price") is not None:
            price = _float_or_none(pack.get("pack_price"))
            if price is None or price < 0:
                errors.append(f"Pack {position}: pack price must be a non-negative number")
    if errors:
        raise ValidationError(errors)


def _create_ingredient_impl(data: Dict[str, Any], session: Session) -> Dict[str, Any]:
    name = (data.get("name") or "").strip()
    category = (data.get("category") or "").strip().lower()
    packs = _many(data.get("packs"))
    _validate_ingredient(name, category, packs)

    ingredient = Ingredient(
        name=name,
        category=category,
        unit=normalize_unit(data.get("unit")),
        bottle_size=data.get("bottle_size"),
        purchase_url=data.get("purchase_url"),
        price=data.get("price"),
    )
    for pack in packs:
        ingredient.packs.append(
            IngredientPack(
                pack_size=pack["pack_size"],
                pack_price=pack.get("pack_price"),
                purchase_url=pack.get("purchase_url"),
                search_url=pack.get("search_url"),
                search_query=pack.get("search_query"),
                retailer=pack.get("retailer"),
                tier=pack.get("tier"),
                is_active=pack.get("is_active", True),
            )
        )
    session.add(ingredient)
    session.flush()

    log_operation(
        logger,
        operation="create_ingredient",
        outcome="success",
        ingredient_id=ingredient.id,
        pack_count=len(ingredient.packs),
    )
    return ingredient.to_dict()


def create_ingredient(data: Dict[str, Any], session: Optional[Session] = None) -> Dict[str, Any]:
    """
    Create an ingredient with optional pack offers.

    Args:
        data: Dictionary with name, category, and optional unit,
              bottle_size, purchase_url, price and packs (a list of
              dicts with pack_size, pack_price, tier, is_active, ...;
              a pack without pack_price has an unknown price)
        session: Optional session for transaction sharing

    Returns:
        Created ingredient as a dictionary

    Raises:
        ValidationError: If the name is missing, the category unknown, or a
            pack has a non-positive size or a negative price
    """
    if session is not None:
        return _create_ingredient_impl(data, session)

    with session_scope() as session:
        return _create_ingredient_impl(data, session)


def _create_recipe_impl(
    name: str,
    components: List[Dict[str, Any]],
    description: Optional[str],
    session: Session,
) -> Dict[str, Any]:
    if not name or not name.strip():
        raise ValidationError(["Recipe name is required"])

    recipe = Recipe(name=name.strip(), description=description)
    for position, component in enumerate(components or []):
        ingredient_id = component.get("ingredient_id")
        if ingredient_id is not None and session.get(Ingredient, ingredient_id) is None:
            raise ValidationError([f"Ingredient {ingredient_id} not found"])
        recipe.recipe_ingredients.append(
            RecipeIngredient(
                ingredient_id=ingredient_id,
                amount_per_serving=component.get("amount_per_serving", 0.0),
                position=position,
            )
        )
    session.add(recipe)
    session.flush()

    log_operation(
        logger,
        operation="create_recipe",
        outcome="success",
        recipe_id=recipe.id,
        component_count=len(recipe.recipe_ingredients),
    )
    return recipe.to_dict()


def create_recipe(
    name: str,
    components: List[Dict[str, Any]],
    description: Optional[str] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Create a recipe from ordered components.

    Args:
        name: Recipe name
        components: List of {"ingredient_id": int, "amount_per_serving": float}
        description: Optional menu description
        session: Optional session for transaction sharing

    Returns:
        Created recipe as a dictionary

    Raises:
        ValidationError: If the name is missing or an ingredient is unknown
    """
    if session is not None:
        return _create_recipe_impl(name, components, description, session)

    with session_scope() as session:
        return _create_recipe_impl(name, components, description, session)


def get_recipe_snapshot(recipe_id: int, session: Optional[Session] = None) -> RecipeSnapshot:
    """
    Load one recipe as a snapshot.

    Raises:
        RecipeNotFound: If the recipe does not exist
    """
    snapshots = load_recipe_snapshots([recipe_id], session=session)
    snapshot = snapshots.get(str(recipe_id))
    if snapshot is None:
        raise RecipeNotFound(recipe_id)
    return snapshot
