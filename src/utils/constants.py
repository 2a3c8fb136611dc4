"""
Constants and enumerations for the Cocktail Order Engine.

This module defines all system-wide constants including:
- Application metadata
- Ingredient categories and their display order
- Pricing tiers and the pack-offer tags each tier accepts
- Procurement buffer and rounding constants
- Event statuses
"""

from typing import Dict, FrozenSet, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Cocktail Order Engine"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"

# ============================================================================
# Ingredient Categories
# ============================================================================

CATEGORY_LIQUOR = "liquor"
CATEGORY_MIXER = "mixer"
CATEGORY_JUICE = "juice"
CATEGORY_SYRUP = "syrup"
CATEGORY_GARNISH = "garnish"
CATEGORY_ICE = "ice"
CATEGORY_GLASSWARE = "glassware"

# Display order for order lists (shopping list is printed in this order)
INGREDIENT_CATEGORIES: List[str] = [
    CATEGORY_LIQUOR,
    CATEGORY_MIXER,
    CATEGORY_JUICE,
    CATEGORY_SYRUP,
    CATEGORY_GARNISH,
    CATEGORY_ICE,
    CATEGORY_GLASSWARE,
]

# ============================================================================
# Units
# ============================================================================

DEFAULT_UNIT = "ml"

# Count-like units that are always bought whole
PIECE_UNITS: FrozenSet[str] = frozenset({"pc", "pcs", "piece", "pieces"})

# Weight units used for garnish rounding (mint, herbs)
GRAM_UNITS: FrozenSet[str] = frozenset({"g", "gram", "grams"})

# ============================================================================
# Procurement
# ============================================================================

BUFFER_RATE = 0.10
DEFAULT_BOTTLE_SIZE_ML = 700.0
GARNISH_GRAM_INCREMENT = 15
GLASSWARE_INCREMENT = 12
GLASSWARE_MINIMUM = 24

# Values within this distance of an integer are treated as that integer
# before ceiling (20 * 1.1 == 22.000000000000004)
ROUNDING_EPSILON = 1e-9


# ============================================================================
# Pricing Tiers
# ============================================================================

TIER_ECONOMY = "economy"
TIER_BUSINESS = "business"
TIER_FIRST_CLASS = "first_class"
TIER_BUDGET = "budget"
TIER_PREMIUM = "premium"

PRICING_TIERS: List[str] = [TIER_ECONOMY, TIER_BUSINESS, TIER_FIRST_CLASS]

# Pack-offer tier tags accepted by each event pricing tier ("" is untagged)
TIER_ACCEPTED_TAGS: Dict[str, FrozenSet[str]] = {
    TIER_ECONOMY: frozenset({TIER_ECONOMY, TIER_BUDGET, ""}),
    TIER_BUSINESS: frozenset({TIER_BUSINESS}),
    TIER_FIRST_CLASS: frozenset({TIER_FIRST_CLASS, TIER_PREMIUM}),
}

# ============================================================================
# Events
# ============================================================================

EVENT_STATUS_DRAFT = "draft"
EVENT_STATUS_SUBMITTED = "submitted"
EVENT_STATUS_CONFIRMED = "confirmed"

DEFAULT_EVENT_TITLE = "New Cocktail Event"

# ============================================================================
# Validation
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_UNIT_LENGTH = 50
MAX_PHONE_LENGTH = 50
MAX_URL_LENGTH = 1000

# ============================================================================
# Database
# ============================================================================

DATABASE_FILENAME = "cocktail_order.db"
