"""
Change reconciliation between two booking snapshots.

Compares the previous and next selection (and event details) of a booking
and produces the sorted per-recipe deltas, field changes, and count triples
used to write the amendment notification.

Transaction boundary: Pure computation (no database access).
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from src.services.dto_utils import quantity_to_string

from .snapshots import Selection

Number = Union[int, float]


@dataclass(frozen=True)
class EventDetails:
    """Scalar event metadata compared by the reconciler."""

    title: Optional[str] = None
    event_date: Optional[Union[date, str]] = None
    phone: Optional[str] = None
    guest_count: Optional[int] = None
    notes: Optional[str] = None

    @property
    def has_notes(self) -> bool:
        return bool((self.notes or "").strip())


@dataclass(frozen=True)
class LineDelta:
    """Servings change for one recipe (only emitted when non-zero)."""

    recipe_id: str
    name: str
    before: Number
    after: Number
    delta: Number

    @property
    def label(self) -> str:
        return format_signed_delta(self.delta)


@dataclass(frozen=True)
class FieldChange:
    """A changed scalar field; both sides are non-empty."""

    field: str
    before: Any
    after: Any


@dataclass(frozen=True)
class CountDelta:
    """Before/after/delta triple with its signed label."""

    before: Number
    after: Number
    delta: Number
    label: str


@dataclass(frozen=True)
class ChangeSummary:
    """Everything that changed between two booking snapshots.

    Attributes:
        lines: Per-recipe deltas, largest change first
        field_changes: Title, date, and phone changes (in that order)
        total_servings: Triple for the total number of drinks
        guest_count: Triple for the guest count (missing counts as 0)
        notes_changed: True when the note text differs
    """

    lines: Tuple[LineDelta, ...] = ()
    field_changes: Tuple[FieldChange, ...] = ()
    total_servings: CountDelta = field(default_factory=lambda: CountDelta(0, 0, 0, "0"))
    guest_count: CountDelta = field(default_factory=lambda: CountDelta(0, 0, 0, "0"))
    notes_changed: bool = False


# Field name -> label used in the change narrative
FIELD_LABELS: Dict[str, str] = {
    "title": "Title",
    "event_date": "Date",
    "phone": "Phone",
}


def format_signed_delta(delta: Number) -> str:
    """
    Label a delta with its sign.

    Examples:
        >>> format_signed_delta(4)
        '+4'
        >>> format_signed_delta(-4)
        '-4'
        >>> format_signed_delta(0)
        '0'
    """
    if not delta:
        return "0"
    magnitude = quantity_to_string(abs(delta))
    return f"+{magnitude}" if delta > 0 else f"-{magnitude}"


def _servings(value: Any) -> Number:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    if number == int(number):
        return int(number)
    return number


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _comparable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value.strip()
    return value


def _count_delta(before: Number, after: Number) -> CountDelta:
    delta = after - before
    return CountDelta(before=before, after=after, delta=delta, label=format_signed_delta(delta))


def reconcile_changes(
    previous_selection: Optional[Selection],
    next_selection: Optional[Selection],
    previous_details: Optional[EventDetails] = None,
    next_details: Optional[EventDetails] = None,
    recipe_names: Optional[Mapping[str, str]] = None,
) -> ChangeSummary:
    """
    Compare two booking snapshots.

    A missing previous selection counts as all-zero servings. Non-finite
    or negative servings count as 0. Lines are sorted by absolute delta
    descending, then by display name (case-sensitive), then recipe id.

    Args:
        previous_selection: Servings before the amendment (or None)
        next_selection: Servings after the amendment
        previous_details: Event details before the amendment
        next_details: Event details after the amendment
        recipe_names: Optional recipe id -> display name

    Returns:
        ChangeSummary (never raises)

    Example:
        >>> summary = reconcile_changes(
        ...     {"margarita": 10, "mojito": 5},
        ...     {"margarita": 6, "mojito": 5, "daiquiri": 4},
        ...     recipe_names={"margarita": "Margarita", "daiquiri": "Daiquiri"},
        ... )
        >>> [(line.name, line.label) for line in summary.lines]
        [('Daiquiri', '+4'), ('Margarita', '-4')]
    """
    before_map = dict(previous_selection or {})
    after_map = dict(next_selection or {})
    names = recipe_names or {}
    previous_details = previous_details or EventDetails()
    next_details = next_details or EventDetails()

    recipe_ids = list(dict.fromkeys(list(before_map) + list(after_map)))

    lines: List[LineDelta] = []
    total_before: Number = 0
    total_after: Number = 0
    for recipe_id in recipe_ids:
        before = _servings(before_map.get(recipe_id))
        after = _servings(after_map.get(recipe_id))
        total_before += before
        total_after += after
        delta = after - before
        if delta == 0:
            continue
        name = (names.get(recipe_id) or "").strip() or str(recipe_id)
        lines.append(
            LineDelta(
                recipe_id=str(recipe_id),
                name=name,
                before=before,
                after=after,
                delta=delta,
            )
        )

    lines.sort(key=lambda line: (-abs(line.delta), line.name, line.recipe_id))

    field_changes: List[FieldChange] = []
    for field_name in FIELD_LABELS:
        before_value = getattr(previous_details, field_name)
        after_value = getattr(next_details, field_name)
        if _is_empty(before_value) or _is_empty(after_value):
            continue
        if _comparable(before_value) != _comparable(after_value):
            field_changes.append(
                FieldChange(field=field_name, before=before_value, after=after_value)
            )

    guests_before = _servings(previous_details.guest_count)
    guests_after = _servings(next_details.guest_count)

    notes_changed = (previous_details.notes or "").strip() != (next_details.notes or "").strip()

    return ChangeSummary(
        lines=tuple(lines),
        field_changes=tuple(field_changes),
        total_servings=_count_delta(total_before, total_after),
        guest_count=_count_delta(guests_before, guests_after),
        notes_changed=notes_changed,
    )


def has_changes(summary: ChangeSummary) -> bool:
    """True when any servings, field, guest count, or note changed."""
    return bool(
        summary.lines
        or summary.field_changes
        or summary.guest_count.delta
        or summary.notes_changed
    )


def _render(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def describe_changes(summary: ChangeSummary) -> List[str]:
    """
    Render a change summary as notification lines.

    Example output:
        Daiquiri: 0 -> 4 (+4)
        Margarita: 10 -> 6 (-4)
        Title: Summer Party -> Garden Party
        Total drinks: 15 -> 15 (0)
        Guests: 40 -> 45 (+5)
        Notes updated
    """
    lines = [
        f"{line.name}: {quantity_to_string(line.before)} -> "
        f"{quantity_to_string(line.after)} ({line.label})"
        for line in summary.lines
    ]
    for change in summary.field_changes:
        label = FIELD_LABELS.get(change.field, change.field)
        lines.append(f"{label}: {_render(change.before)} -> {_render(change.after)}")

    total = summary.total_servings
    lines.append(
        f"Total drinks: {quantity_to_string(total.before)} -> "
        f"{quantity_to_string(total.after)} ({total.label})"
    )
    guests = summary.guest_count
    if guests.before or guests.after:
        lines.append(
            f"Guests: {quantity_to_string(guests.before)} -> "
            f"{quantity_to_string(guests.after)} ({guests.label})"
        )
    if summary.notes_changed:
        lines.append("Notes updated")
    return lines
