"""
Procurement planning for aggregated ingredient requirements.

This module provides functions for:
- Applying the safety buffer to raw totals
- Rounding buffered totals with the category/unit rounding table
- Filtering pack offers by the event's pricing tier
- Resolving a purchase plan (reference pack count or multi-size packs)

Transaction boundary: Pure computation (no database access).
Plans are never persisted; callers recompute them from source data.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from src.utils.constants import (
    BUFFER_RATE,
    CATEGORY_GARNISH,
    CATEGORY_GLASSWARE,
    CATEGORY_LIQUOR,
    DEFAULT_BOTTLE_SIZE_ML,
    DEFAULT_UNIT,
    GARNISH_GRAM_INCREMENT,
    GLASSWARE_INCREMENT,
    GLASSWARE_MINIMUM,
    GRAM_UNITS,
    INGREDIENT_CATEGORIES,
    PIECE_UNITS,
    ROUNDING_EPSILON,
    TIER_ACCEPTED_TAGS,
    TIER_BUSINESS,
    TIER_ECONOMY,
    TIER_FIRST_CLASS,
    TIER_PREMIUM,
)
from src.services.logging_utils import get_service_logger, log_operation

from .aggregation import AggregatedRequirement, aggregate_requirements, build_line_items
from .pack_selection import PackLine, select_pack_combination
from .snapshots import PackOffer, RecipeSnapshot, Selection, liquor_ml_factor, normalize_unit

logger = get_service_logger(__name__)


class RoundingRule(str, Enum):
    """How a buffered total is turned into a purchasable quantity."""

    DOZEN_WITH_MINIMUM = "dozen_with_minimum"
    WHOLE_PIECE = "whole_piece"
    GARNISH_GRAMS = "garnish_grams"
    WHOLE_ML = "whole_ml"
    WHOLE_UNIT = "whole_unit"


class PackSource(str, Enum):
    """Where a plan's pack information came from."""

    HINT = "hint"
    UNIT = "unit"
    OFFERS = "offers"


@dataclass(frozen=True)
class PlannerSettings:
    """Buffer and rounding constants used by the planner.

    Defaults come from src.utils.constants; booking services always plan
    with the defaults.
    """

    buffer_rate: float = BUFFER_RATE
    glassware_increment: int = GLASSWARE_INCREMENT
    glassware_minimum: int = GLASSWARE_MINIMUM
    garnish_gram_increment: int = GARNISH_GRAM_INCREMENT
    default_bottle_size: float = DEFAULT_BOTTLE_SIZE_ML


@dataclass(frozen=True)
class ProcurementPlan:
    """Purchase plan for one aggregated requirement.

    Attributes:
        key: Normalization key of the requirement
        name: Display name
        category: Ingredient category
        unit: Reported unit ("ml" for liquor)
        raw_total: Unbuffered total in unit
        buffered_total: raw_total with the safety buffer applied
        rounded_total: Purchasable whole quantity
        rounding_rule: Rule applied to buffered_total
        pack_size: Reference pack size (None when planned from offers)
        pack_count: Total number of packs to buy
        pack_plan: (pack size, count) lines sorted by size descending
        total_price: Combined price when every pack line is priced
        pricing_tier: Normalized tier used to filter offers
        pack_source: Origin of the pack information
    """

    key: str
    name: str
    category: str
    unit: str
    raw_total: float
    buffered_total: float
    rounded_total: int
    rounding_rule: RoundingRule
    pack_size: Optional[float]
    pack_count: int
    pack_plan: Tuple[PackLine, ...] = field(default_factory=tuple)
    total_price: Optional[float] = None
    pricing_tier: str = TIER_ECONOMY
    pack_source: PackSource = PackSource.UNIT

    @property
    def purchase_url(self) -> Optional[str]:
        """First purchase link found on the chosen offers."""
        for line in self.pack_plan:
            if line.offer is not None and line.offer.purchase_url:
                return line.offer.purchase_url
        return None


_ROUNDING_TABLE: Sequence[Tuple[Callable[[str, str], bool], RoundingRule]] = (
    (lambda category, unit: category == CATEGORY_GLASSWARE, RoundingRule.DOZEN_WITH_MINIMUM),
    (lambda category, unit: unit in PIECE_UNITS, RoundingRule.WHOLE_PIECE),
    (
        lambda category, unit: category == CATEGORY_GARNISH and unit in GRAM_UNITS,
        RoundingRule.GARNISH_GRAMS,
    ),
    (lambda category, unit: category == CATEGORY_LIQUOR, RoundingRule.WHOLE_ML),
)


def classify_rounding(category: Optional[str], unit: Optional[str]) -> RoundingRule:
    """
    Pick the rounding rule for a category/unit pair.

    Rules are checked in table order and the first match wins.

    Example:
        >>> classify_rounding("garnish", "g")
        <RoundingRule.GARNISH_GRAMS: 'garnish_grams'>
        >>> classify_rounding("glassware", "pcs")
        <RoundingRule.DOZEN_WITH_MINIMUM: 'dozen_with_minimum'>
    """
    category_value = (category or "").strip().lower()
    unit_value = normalize_unit(unit)
    for matches, rule in _ROUNDING_TABLE:
        if matches(category_value, unit_value):
            return rule
    return RoundingRule.WHOLE_UNIT


def _snap(value: float) -> float:
    nearest = round(value)
    if abs(value - nearest) <= ROUNDING_EPSILON:
        return float(nearest)
    return value


def _ceil_to_increment(value: float, increment: int) -> int:
    if increment <= 0:
        return math.ceil(value)
    return int(_snap(math.ceil(_snap(value / increment)) * increment))


def apply_buffer(raw_total: float, buffer_rate: float = BUFFER_RATE) -> float:
    """Apply the safety buffer: raw_total * (1 + buffer_rate)."""
    return raw_total * (1 + buffer_rate)


def round_buffered_total(
    buffered_total: float,
    rule: RoundingRule,
    settings: Optional[PlannerSettings] = None,
) -> int:
    """
    Round a buffered total up according to rule.

    The value is snapped to the nearest integer when within
    ROUNDING_EPSILON so float noise never adds a whole unit. Zero,
    negative, and non-finite values round to 0.

    Example:
        >>> round_buffered_total(22.000000000000004, RoundingRule.GARNISH_GRAMS)
        30
        >>> round_buffered_total(6.6, RoundingRule.DOZEN_WITH_MINIMUM)
        24
    """
    settings = settings or PlannerSettings()
    if buffered_total is None or not math.isfinite(buffered_total) or buffered_total <= 0:
        return 0

    value = _snap(float(buffered_total))

    if rule == RoundingRule.DOZEN_WITH_MINIMUM:
        rounded = _ceil_to_increment(value, settings.glassware_increment)
        return max(settings.glassware_minimum, rounded)
    if rule == RoundingRule.GARNISH_GRAMS:
        return _ceil_to_increment(value, settings.garnish_gram_increment)
    return int(math.ceil(value))


def normalize_pricing_tier(value: Optional[str]) -> str:
    """
    Map a stored or requested tier onto economy, business, or first_class.

    Example:
        >>> normalize_pricing_tier("premium")
        'first_class'
        >>> normalize_pricing_tier("budget")
        'economy'
    """
    tier = (value or "").strip().lower()
    if tier in (TIER_FIRST_CLASS, TIER_PREMIUM):
        return TIER_FIRST_CLASS
    if tier == TIER_BUSINESS:
        return TIER_BUSINESS
    return TIER_ECONOMY


def offers_for_tier(offers: Iterable[PackOffer], pricing_tier: Optional[str]) -> List[PackOffer]:
    """Active offers whose tier tag the given pricing tier accepts."""
    accepted = TIER_ACCEPTED_TAGS[normalize_pricing_tier(pricing_tier)]
    return [offer for offer in offers if offer.is_active and offer.tier_tag in accepted]


def _scale_offer(offer: PackOffer, factor: float) -> PackOffer:
    if factor == 1.0:
        return offer
    return PackOffer(
        offer_id=offer.offer_id,
        pack_size=offer.pack_size * factor if offer.pack_size is not None else offer.pack_size,
        pack_price=offer.pack_price,
        tier=offer.tier,
        is_active=offer.is_active,
        purchase_url=offer.purchase_url,
        search_url=offer.search_url,
        search_query=offer.search_query,
        retailer=offer.retailer,
    )


def plan_procurement(
    requirement: AggregatedRequirement,
    pricing_tier: Optional[str] = TIER_ECONOMY,
    settings: Optional[PlannerSettings] = None,
) -> ProcurementPlan:
    """
    Buffer, round, and resolve packs for one aggregated requirement.

    Args:
        requirement: Output of aggregate_requirements()
        pricing_tier: Event pricing tier (normalized; default economy)
        settings: Buffer and rounding constants (defaults when None)

    Returns:
        ProcurementPlan. Never raises for missing or malformed pack data:
        unusable offers fall back to the reference pack size, and
        ingredients without any pack information use a pack size of 1.

    Example:
        A liquor requirement of 1800 ml buffers to 1980 ml and, with the
        default 700 ml bottle, plans 3 bottles.
    """
    settings = settings or PlannerSettings()
    tier = normalize_pricing_tier(pricing_tier)
    category = requirement.category
    unit = normalize_unit(requirement.unit)

    raw_total = requirement.raw_total
    if raw_total is None or not math.isfinite(raw_total) or raw_total < 0:
        raw_total = 0.0

    factor = 1.0
    reference_size = requirement.pack_size
    offers: Sequence[PackOffer] = requirement.pack_offers
    if category == CATEGORY_LIQUOR:
        factor = liquor_ml_factor(unit)
        raw_total = raw_total * factor
        unit = DEFAULT_UNIT
        if reference_size is not None:
            reference_size = reference_size * factor
        else:
            reference_size = settings.default_bottle_size
        offers = [_scale_offer(offer, factor) for offer in offers]

    buffered_total = apply_buffer(raw_total, settings.buffer_rate)
    rule = classify_rounding(category, requirement.unit)
    rounded_total = round_buffered_total(buffered_total, rule, settings)

    tier_offers = offers_for_tier(offers, tier)
    if offers and not tier_offers:
        log_operation(
            logger,
            operation="plan_procurement",
            outcome="tier_fallback",
            level=logging.DEBUG,
            ingredient_key=requirement.key,
            pricing_tier=tier,
            offer_count=len(offers),
        )

    selection = None
    if tier_offers:
        selection = select_pack_combination(tier_offers, rounded_total)

    if selection is not None:
        plan = ProcurementPlan(
            key=requirement.key,
            name=requirement.name,
            category=category,
            unit=unit,
            raw_total=raw_total,
            buffered_total=buffered_total,
            rounded_total=rounded_total,
            rounding_rule=rule,
            pack_size=None,
            pack_count=selection.pack_count,
            pack_plan=selection.lines,
            total_price=selection.total_price,
            pricing_tier=tier,
            pack_source=PackSource.OFFERS,
        )
    else:
        if reference_size is not None and math.isfinite(reference_size) and reference_size > 0:
            pack_size = float(reference_size)
            source = PackSource.HINT
        else:
            pack_size = 1.0
            source = PackSource.UNIT

        pack_count = math.ceil(_snap(rounded_total / pack_size)) if rounded_total > 0 else 0
        pack_plan = (PackLine(pack_size=pack_size, count=pack_count),) if pack_count else ()
        plan = ProcurementPlan(
            key=requirement.key,
            name=requirement.name,
            category=category,
            unit=unit,
            raw_total=raw_total,
            buffered_total=buffered_total,
            rounded_total=rounded_total,
            rounding_rule=rule,
            pack_size=pack_size,
            pack_count=pack_count,
            pack_plan=pack_plan,
            total_price=None,
            pricing_tier=tier,
            pack_source=source,
        )

    log_operation(
        logger,
        operation="plan_procurement",
        outcome="success",
        level=logging.DEBUG,
        ingredient_key=requirement.key,
        pricing_tier=tier,
        rounded_total=rounded_total,
        pack_count=plan.pack_count,
        pack_source=plan.pack_source.value,
    )
    return plan


def _category_rank(category: str) -> int:
    try:
        return INGREDIENT_CATEGORIES.index(category)
    except ValueError:
        return len(INGREDIENT_CATEGORIES)


def plan_requirements(
    requirements: Iterable[AggregatedRequirement],
    pricing_tier: Optional[str] = TIER_ECONOMY,
    settings: Optional[PlannerSettings] = None,
) -> List[ProcurementPlan]:
    """
    Plan every requirement and sort the plans for display.

    Plans are ordered by category (liquor first, glassware last), then by
    display name ignoring case, then by normalization key.

    Args:
        requirements: Aggregated requirements (a dict's values() works)
        pricing_tier: Event pricing tier
        settings: Planner settings

    Returns:
        List of ProcurementPlan
    """
    if isinstance(requirements, Mapping):
        requirements = requirements.values()

    plans = [plan_procurement(req, pricing_tier, settings) for req in requirements]
    plans.sort(key=lambda plan: (_category_rank(plan.category), plan.name.lower(), plan.key))
    return plans


def plan_selection(
    selection: Optional[Selection],
    recipes: Mapping[str, RecipeSnapshot],
    pricing_tier: Optional[str] = TIER_ECONOMY,
    settings: Optional[PlannerSettings] = None,
) -> List[ProcurementPlan]:
    """
    Run the whole pipeline: flatten, aggregate, and plan.

    Args:
        selection: Mapping of recipe identity to servings
        recipes: Mapping of recipe identity to RecipeSnapshot
        pricing_tier: Event pricing tier
        settings: Planner settings

    Returns:
        Sorted list of ProcurementPlan (empty for an empty selection)
    """
    line_items = build_line_items(selection, recipes)
    requirements = aggregate_requirements(line_items)
    return plan_requirements(requirements.values(), pricing_tier, settings)
