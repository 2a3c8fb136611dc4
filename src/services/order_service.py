"""
Order Service - Order lists and drink counts for booked events.

Loads an event's selection and the recipe catalog as snapshots, then runs
the order engine. Nothing computed here is stored; each call recomputes
the plan from the current catalog.

Session Management Pattern:
- All public functions accept session=None parameter
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from src.models import Event
from src.services.catalog_service import load_recipe_snapshots
from src.services.database import session_scope
from src.services.exceptions import EventNotFound
from src.services.logging_utils import get_service_logger, log_operation
from src.services.ordering import (
    OrderListLine,
    PlannerSettings,
    ProcurementPlan,
    build_order_list,
    normalize_pricing_tier,
    plan_selection,
    render_order_list_text,
)

logger = get_service_logger(__name__)


def planner_settings() -> PlannerSettings:
    """Planner settings used for every booking (fixed 10% buffer)."""
    return PlannerSettings()


def _get_order_plan_impl(
    event_id: int, pricing_tier: Optional[str], session: Session
) -> List[ProcurementPlan]:
    event = session.get(Event, event_id)
    if event is None:
        raise EventNotFound(event_id)

    selection = {str(row.recipe_id): row.servings for row in event.event_recipes}
    recipes = load_recipe_snapshots([row.recipe_id for row in event.event_recipes], session=session)
    tier = normalize_pricing_tier(pricing_tier if pricing_tier is not None else event.pricing_tier)

    plans = plan_selection(selection, recipes, tier, planner_settings())
    log_operation(
        logger,
        operation="get_order_plan",
        outcome="success",
        event_id=event_id,
        pricing_tier=tier,
        ingredient_count=len(plans),
    )
    return plans


def get_order_plan(
    event_id: int,
    pricing_tier: Optional[str] = None,
    session: Optional[Session] = None,
) -> List[ProcurementPlan]:
    """
    Compute the procurement plan for an event.

    Args:
        event_id: Event to plan
        pricing_tier: Override the event's stored pricing tier
        session: Optional session for transaction sharing

    Returns:
        Procurement plans sorted by category, then name

    Raises:
        EventNotFound: If the event does not exist
    """
    if session is not None:
        return _get_order_plan_impl(event_id, pricing_tier, session)

    with session_scope() as session:
        return _get_order_plan_impl(event_id, pricing_tier, session)


def get_order_list(
    event_id: int,
    pricing_tier: Optional[str] = None,
    session: Optional[Session] = None,
) -> List[OrderListLine]:
    """
    Compute an event's order list rows.

    Raises:
        EventNotFound: If the event does not exist
    """
    return build_order_list(get_order_plan(event_id, pricing_tier, session=session))


def get_order_list_text(
    event_id: int,
    pricing_tier: Optional[str] = None,
    session: Optional[Session] = None,
) -> str:
    """Render an event's order list as plain text for staff notifications."""
    return render_order_list_text(get_order_list(event_id, pricing_tier, session=session))


def _get_drinks_count_impl(event_id: int, session: Session) -> int:
    event = session.get(Event, event_id)
    if event is None:
        raise EventNotFound(event_id)
    return event.get_drinks_count()


def get_drinks_count(event_id: int, session: Optional[Session] = None) -> int:
    """
    Total servings selected for an event.

    Raises:
        EventNotFound: If the event does not exist
    """
    if session is not None:
        return _get_drinks_count_impl(event_id, session)

    with session_scope() as session:
        return _get_drinks_count_impl(event_id, session)
