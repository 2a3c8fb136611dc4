"""
Enumerations for the cocktail order domain.

This module contains enums used across models and the order engine:
- IngredientCategory: What kind of ingredient a catalog entry is
- PricingTier: Cost category an event is priced at
- EventStatus: Booking lifecycle state
"""

from enum import Enum


class IngredientCategory(str, Enum):
    """
    Ingredient category.

    Drives the rounding rule applied to buffered totals and the order in
    which ingredients are listed on the order list.
    """

    LIQUOR = "liquor"
    MIXER = "mixer"
    JUICE = "juice"
    SYRUP = "syrup"
    GARNISH = "garnish"
    ICE = "ice"
    GLASSWARE = "glassware"


class PricingTier(str, Enum):
    """
    Pricing tier selected for an event.

    Filters which pack offers are eligible when resolving pack plans.

    Values:
        ECONOMY: Default tier; accepts economy, budget and untagged offers
        BUSINESS: Accepts business offers only
        FIRST_CLASS: Accepts first_class and premium offers
    """

    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST_CLASS = "first_class"


class EventStatus(str, Enum):
    """
    Booking status.

    Values:
        DRAFT: Saved but not yet sent to staff
        SUBMITTED: Sent to staff; client may still amend
        CONFIRMED: Locked by staff; no further amendments
    """

    DRAFT = "draft"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
