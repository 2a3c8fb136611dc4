"""Order computation engine.

Pure functions that turn a selection of recipes and servings into a
procurement plan, and compare two bookings into a change summary. Nothing
in this package touches the database; the booking services load catalog
snapshots and pass them in.

Usage:
    from src.services.ordering import (
        aggregate_requirements,
        build_line_items,
        plan_requirements,
        plan_selection,
        reconcile_changes,
        describe_changes,
        build_order_list,
    )
"""

from .snapshots import (
    IngredientSnapshot,
    PackOffer,
    RecipeComponent,
    RecipeSnapshot,
    Selection,
    normalize_unit,
)
from .aggregation import (
    AggregatedRequirement,
    LineItem,
    aggregate_requirements,
    build_line_items,
    normalization_key,
)
from .pack_selection import (
    PackLine,
    PackSelection,
    select_pack_combination,
)
from .procurement import (
    PackSource,
    PlannerSettings,
    ProcurementPlan,
    RoundingRule,
    apply_buffer,
    classify_rounding,
    normalize_pricing_tier,
    offers_for_tier,
    plan_procurement,
    plan_requirements,
    plan_selection,
    round_buffered_total,
)
from .reconciliation import (
    ChangeSummary,
    CountDelta,
    EventDetails,
    FieldChange,
    LineDelta,
    describe_changes,
    format_signed_delta,
    has_changes,
    reconcile_changes,
)
from .order_list import (
    OrderListLine,
    build_order_list,
    describe_quantity,
    render_order_list_text,
)

__all__ = [
    # Snapshots
    "IngredientSnapshot",
    "PackOffer",
    "RecipeComponent",
    "RecipeSnapshot",
    "Selection",
    "normalize_unit",
    # Aggregation
    "AggregatedRequirement",
    "LineItem",
    "aggregate_requirements",
    "build_line_items",
    "normalization_key",
    # Pack selection
    "PackLine",
    "PackSelection",
    "select_pack_combination",
    # Procurement
    "PackSource",
    "PlannerSettings",
    "ProcurementPlan",
    "RoundingRule",
    "apply_buffer",
    "classify_rounding",
    "normalize_pricing_tier",
    "offers_for_tier",
    "plan_procurement",
    "plan_requirements",
    "plan_selection",
    "round_buffered_total",
    # Reconciliation
    "ChangeSummary",
    "CountDelta",
    "EventDetails",
    "FieldChange",
    "LineDelta",
    "describe_changes",
    "format_signed_delta",
    "has_changes",
    "reconcile_changes",
    # Order list
    "OrderListLine",
    "build_order_list",
    "describe_quantity",
    "render_order_list_text",
]
