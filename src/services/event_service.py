"""
Event Service - Booking lifecycle for cocktail events.

This service provides:
- Creating a booking with its cocktail selection
- Reading a booking and its selection
- Amending booking details and selection, returning what changed
- Submitting and confirming bookings

Confirmed events are locked: any amendment raises EventLocked. Every
amendment is reconciled against the previous state with the order
engine's change reconciler, so callers can compose the notification
without re-reading the database.

Session Management Pattern:
- All public functions accept session=None parameter
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

import logging
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from src.models import Event, EventRecipe, Recipe
from src.services.database import session_scope
from src.services.exceptions import EventLocked, EventNotFound, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.ordering import ChangeSummary, EventDetails, normalize_pricing_tier, reconcile_changes
from src.utils.constants import (
    DEFAULT_EVENT_TITLE,
    EVENT_STATUS_CONFIRMED,
    EVENT_STATUS_DRAFT,
    EVENT_STATUS_SUBMITTED,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    TIER_ECONOMY,
)
from src.utils.datetime_utils import is_today_or_future, parse_event_date

logger = get_service_logger(__name__)

# Fields that amend_event() accepts in its updates dictionary
AMENDABLE_FIELDS = (
    "title",
    "event_date",
    "guest_count",
    "notes",
    "client_email",
    "client_phone",
    "pricing_tier",
)

GUEST_COUNT_ERROR = "Number of guests must be a whole number."
EVENT_DATE_ERROR = "Date of Event must be today or in the future."
PHONE_REQUIRED_ERROR = "Telephone number is required."


# ============================================================================
# Input normalization
# ============================================================================


def _whole_number(value: Any) -> Optional[int]:
    """Return value as an int when it is a whole number, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number != int(number):
        return None
    return int(number)


def normalize_selection(selections: Any) -> Dict[int, int]:
    """
    Normalize a cocktail selection into {recipe_id: servings}.

    Accepts a mapping of recipe id to servings, or a list of
    {"recipe_id": ..., "servings": ...} rows. Rows without a recipe id and
    rows with zero or negative servings are dropped; repeated recipes add
    up.

    Args:
        selections: Mapping, list of dicts, or None

    Returns:
        Dict of recipe id -> servings (> 0)

    Raises:
        ValidationError: If servings are not whole numbers or a recipe id is
            not an integer
    """
    if not selections:
        return {}

    if isinstance(selections, Mapping):
        rows: Iterable[Mapping[str, Any]] = [
            {"recipe_id": recipe_id, "servings": servings}
            for recipe_id, servings in selections.items()
        ]
    else:
        rows = selections

    errors: List[str] = []
    result: Dict[int, int] = {}
    for row in rows:
        raw_recipe_id = row.get("recipe_id")
        if raw_recipe_id is None or raw_recipe_id == "":
            continue
        recipe_id = _whole_number(raw_recipe_id)
        if recipe_id is None:
            errors.append(f"Invalid recipe id: {raw_recipe_id}")
            continue

        raw_servings = row.get("servings")
        servings = _whole_number(raw_servings)
        if servings is None:
            if raw_servings is None or raw_servings == "":
                continue
            errors.append(f"Servings for recipe {recipe_id} must be a whole number.")
            continue
        if servings <= 0:
            continue
        result[recipe_id] = result.get(recipe_id, 0) + servings

    if errors:
        raise ValidationError(errors)
    return result


def _parse_guest_count(value: Any, clear_non_positive: bool) -> Optional[int]:
    """Validate a guest count.

    New bookings reject non-positive counts; amendments clear them.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    count = _whole_number(value)
    if count is None:
        raise ValidationError([GUEST_COUNT_ERROR])
    if count <= 0:
        if clear_non_positive:
            return None
        raise ValidationError([GUEST_COUNT_ERROR])
    return count


def _parse_date(value: Any, allow_past: bool = False) -> Optional[date]:
    try:
        parsed = parse_event_date(value)
    except (TypeError, ValueError):
        raise ValidationError([EVENT_DATE_ERROR])
    if parsed is not None and not allow_past and not is_today_or_future(parsed):
        raise ValidationError([EVENT_DATE_ERROR])
    return parsed


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _validate_contact(title: Optional[str], phone: Optional[str]) -> None:
    errors = []
    if title is not None and len(title) > MAX_NAME_LENGTH:
        errors.append(f"Title must be at most {MAX_NAME_LENGTH} characters")
    if phone is not None and len(phone) > MAX_PHONE_LENGTH:
        errors.append(f"Telephone number must be at most {MAX_PHONE_LENGTH} characters")
    if errors:
        raise ValidationError(errors)


def _require_submittable(event: Event) -> None:
    """Submitted bookings need a telephone number."""
    if not (event.client_phone or "").strip():
        raise ValidationError([PHONE_REQUIRED_ERROR])


# ============================================================================
# Helpers
# ============================================================================


def _get_event_or_raise(event_id: int, session: Session) -> Event:
    event = session.get(Event, event_id)
    if event is None:
        raise EventNotFound(event_id)
    return event


def _ensure_recipes_exist(recipe_ids: Iterable[int], session: Session) -> None:
    ids = set(recipe_ids)
    if not ids:
        return
    found = {row[0] for row in session.query(Recipe.id).filter(Recipe.id.in_(ids)).all()}
    missing = sorted(ids - found)
    if missing:
        raise ValidationError([f"Recipe {recipe_id} not found" for recipe_id in missing])


def _selection_of(event: Event) -> Dict[int, int]:
    return {row.recipe_id: row.servings for row in event.event_recipes}


def _details_of(event: Event) -> EventDetails:
    return EventDetails(
        title=event.title,
        event_date=event.event_date,
        phone=event.client_phone,
        guest_count=event.guest_count,
        notes=event.notes,
    )


def _replace_selection(event: Event, selection: Dict[int, int], session: Session) -> None:
    """Make the event's rows match selection, updating rows in place."""
    existing = {row.recipe_id: row for row in event.event_recipes}
    for recipe_id, row in existing.items():
        if recipe_id not in selection:
            event.event_recipes.remove(row)
            session.delete(row)
    for recipe_id, servings in selection.items():
        row = existing.get(recipe_id)
        if row is not None:
            row.servings = servings
        else:
            event.event_recipes.append(EventRecipe(recipe_id=recipe_id, servings=servings))
    session.flush()


def _event_to_dict(event: Event) -> Dict[str, Any]:
    result = event.to_dict()
    result["recipes"] = [
        {
            "recipe_id": row.recipe_id,
            "recipe_name": row.recipe.name if row.recipe is not None else None,
            "servings": row.servings,
        }
        for row in event.event_recipes
    ]
    result["drinks_count"] = event.get_drinks_count()
    return result


# ============================================================================
# Create / read
# ============================================================================


def _create_event_impl(
    title: Optional[str],
    event_date: Any,
    guest_count: Any,
    notes: Optional[str],
    client_email: Optional[str],
    client_phone: Optional[str],
    pricing_tier: Optional[str],
    selections: Any,
    submit: bool,
    session: Session,
) -> Dict[str, Any]:
    cleaned_title = _clean_text(title) or DEFAULT_EVENT_TITLE
    cleaned_phone = _clean_text(client_phone)
    _validate_contact(cleaned_title, cleaned_phone)
    if submit and cleaned_phone is None:
        raise ValidationError([PHONE_REQUIRED_ERROR])

    parsed_date = _parse_date(event_date)
    cleaned_guests = _parse_guest_count(guest_count, clear_non_positive=False)
    selection = normalize_selection(selections)
    _ensure_recipes_exist(selection.keys(), session)

    event = Event(
        title=cleaned_title,
        event_date=parsed_date,
        guest_count=cleaned_guests,
        notes=_clean_text(notes),
        status=EVENT_STATUS_SUBMITTED if submit else EVENT_STATUS_DRAFT,
        client_email=_clean_text(client_email),
        client_phone=cleaned_phone,
        pricing_tier=normalize_pricing_tier(pricing_tier),
    )
    for recipe_id, servings in selection.items():
        event.event_recipes.append(EventRecipe(recipe_id=recipe_id, servings=servings))
    session.add(event)
    session.flush()

    log_operation(
        logger,
        operation="create_event",
        outcome="success",
        event_id=event.id,
        status=event.status,
        recipe_count=len(selection),
        drinks_count=event.get_drinks_count(),
    )
    return _event_to_dict(event)


def create_event(
    title: Optional[str] = None,
    event_date: Any = None,
    guest_count: Any = None,
    notes: Optional[str] = None,
    client_email: Optional[str] = None,
    client_phone: Optional[str] = None,
    pricing_tier: Optional[str] = TIER_ECONOMY,
    selections: Any = None,
    submit: bool = False,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """
    Create a booking with its cocktail selection.

    Args:
        title: Event title (defaults to "New Cocktail Event")
        event_date: date or ISO string; must be today or later when given
        guest_count: Positive whole number, or None
        notes: Free-text notes
        client_email: Client email
        client_phone: Client telephone (required when submit is True)
        pricing_tier: economy, business or first_class (normalized)
        selections: {recipe_id: servings} or [{"recipe_id", "servings"}]
        submit: Create as submitted instead of draft
        session: Optional session for transaction sharing

    Returns:
        Event dictionary with "recipes" and "drinks_count"

    Raises:
        ValidationError: If any input is invalid or a recipe is unknown
    """
    args = (
        title,
        event_date,
        guest_count,
        notes,
        client_email,
        client_phone,
        pricing_tier,
        selections,
        submit,
    )
    if session is not None:
        return _create_event_impl(*args, session)

    with session_scope() as session:
        return _create_event_impl(*args, session)


def get_event(event_id: int, session: Optional[Session] = None) -> Dict[str, Any]:
    """
    Get a booking with its selection.

    Raises:
        EventNotFound: If the event does not exist
    """
    if session is not None:
        return _event_to_dict(_get_event_or_raise(event_id, session))

    with session_scope() as session:
        return _event_to_dict(_get_event_or_raise(event_id, session))


def get_event_selection(event_id: int, session: Optional[Session] = None) -> Dict[str, int]:
    """
    Get an event's selection keyed by recipe id string.

    The keys match the recipe snapshots returned by
    catalog_service.load_recipe_snapshots().

    Raises:
        EventNotFound: If the event does not exist
    """
    if session is not None:
        event = _get_event_or_raise(event_id, session)
        return {str(k): v for k, v in _selection_of(event).items()}

    with session_scope() as session:
        event = _get_event_or_raise(event_id, session)
        return {str(k): v for k, v in _selection_of(event).items()}


# ============================================================================
# Amend
# ============================================================================


def _apply_updates(event: Event, updates: Dict[str, Any]) -> None:
    unknown = sorted(set(updates) - set(AMENDABLE_FIELDS))
    if unknown:
        raise ValidationError([f"Unknown field: {name}" for name in unknown])

    if "title" in updates:
        event.title = _clean_text(updates["title"]) or event.title
    if "event_date" in updates:
        # An unchanged date is kept even once it has passed
        parsed = _parse_date(updates["event_date"], allow_past=True)
        if parsed != event.event_date:
            event.event_date = _parse_date(updates["event_date"])
    if "guest_count" in updates:
        event.guest_count = _parse_guest_count(updates["guest_count"], clear_non_positive=True)
    if "notes" in updates:
        event.notes = _clean_text(updates["notes"])
    if "client_email" in updates:
        event.client_email = _clean_text(updates["client_email"])
    if "client_phone" in updates:
        event.client_phone = _clean_text(updates["client_phone"])
    if "pricing_tier" in updates:
        event.pricing_tier = normalize_pricing_tier(updates["pricing_tier"])

    _validate_contact(event.title, event.client_phone)
    if event.status == EVENT_STATUS_SUBMITTED:
        _require_submittable(event)


def _amend_event_impl(
    event_id: int,
    updates: Optional[Dict[str, Any]],
    selections: Any,
    session: Session,
) -> ChangeSummary:
    event = _get_event_or_raise(event_id, session)
    if event.status == EVENT_STATUS_CONFIRMED:
        log_operation(
            logger,
            operation="amend_event",
            outcome="event_locked",
            level=logging.WARNING,
            event_id=event_id,
        )
        raise EventLocked(event_id)

    previous_selection = _selection_of(event)
    previous_details = _details_of(event)

    if updates:
        _apply_updates(event, updates)

    if selections is not None:
        selection = normalize_selection(selections)
        _ensure_recipes_exist(selection.keys(), session)
        _replace_selection(event, selection, session)

    session.flush()
    next_selection = _selection_of(event)

    recipe_ids = set(previous_selection) | set(next_selection)
    recipe_names = {}
    if recipe_ids:
        rows = session.query(Recipe.id, Recipe.name).filter(Recipe.id.in_(recipe_ids)).all()
        recipe_names = {str(recipe_id): name for recipe_id, name in rows}

    summary = reconcile_changes(
        {str(k): v for k, v in previous_selection.items()},
        {str(k): v for k, v in next_selection.items()},
        previous_details,
        _details_of(event),
        recipe_names=recipe_names,
    )

    log_operation(
        logger,
        operation="amend_event",
        outcome="success",
        event_id=event_id,
        changed_lines=len(summary.lines),
        changed_fields=len(summary.field_changes),
        drinks_delta=summary.total_servings.delta,
    )
    return summary


def amend_event(
    event_id: int,
    updates: Optional[Dict[str, Any]] = None,
    selections: Any = None,
    session: Optional[Session] = None,
) -> ChangeSummary:
    """
    Amend a booking and report what changed.

    Args:
        event_id: Event to amend
        updates: Field updates; keys from AMENDABLE_FIELDS. A guest count
            of zero or less clears the count.
        selections: Replacement selection (None keeps the current one)
        session: Optional session for transaction sharing

    Returns:
        ChangeSummary comparing the booking before and after

    Raises:
        EventNotFound: If the event does not exist
        EventLocked: If the event has been confirmed
        ValidationError: If an update is invalid or a recipe is unknown
    """
    if session is not None:
        return _amend_event_impl(event_id, updates, selections, session)

    with session_scope() as session:
        return _amend_event_impl(event_id, updates, selections, session)


# ============================================================================
# Status transitions
# ============================================================================


def _submit_event_impl(event_id: int, session: Session) -> Dict[str, Any]:
    event = _get_event_or_raise(event_id, session)
    if event.status == EVENT_STATUS_CONFIRMED:
        raise EventLocked(event_id)
    _require_submittable(event)
    if event.event_date is not None and not is_today_or_future(event.event_date):
        raise ValidationError([EVENT_DATE_ERROR])

    event.status = EVENT_STATUS_SUBMITTED
    session.flush()
    log_operation(logger, operation="submit_event", outcome="success", event_id=event_id)
    return _event_to_dict(event)


def submit_event(event_id: int, session: Optional[Session] = None) -> Dict[str, Any]:
    """
    Submit a draft booking to staff.

    Raises:
        EventNotFound: If the event does not exist
        EventLocked: If the event has been confirmed
        ValidationError: If the telephone number is missing or the date passed
    """
    if session is not None:
        return _submit_event_impl(event_id, session)

    with session_scope() as session:
        return _submit_event_impl(event_id, session)


def _confirm_event_impl(event_id: int, session: Session) -> Dict[str, Any]:
    event = _get_event_or_raise(event_id, session)
    event.status = EVENT_STATUS_CONFIRMED
    session.flush()
    log_operation(logger, operation="confirm_event", outcome="success", event_id=event_id)
    return _event_to_dict(event)


def confirm_event(event_id: int, session: Optional[Session] = None) -> Dict[str, Any]:
    """
    Confirm a booking; confirmed bookings can no longer be amended.

    Raises:
        EventNotFound: If the event does not exist
    """
    if session is not None:
        return _confirm_event_impl(event_id, session)

    with session_scope() as session:
        return _confirm_event_impl(event_id, session)
