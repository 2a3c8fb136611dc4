"""
Order list rendering for procurement plans.

Turns procurement plans into the (name, category, quantity description)
rows shown to the client and sent to staff.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from src.services.dto_utils import cost_to_string, quantity_to_string

from .procurement import PackSource, ProcurementPlan


@dataclass(frozen=True)
class OrderListLine:
    """One row of an order list."""

    name: str
    category: str
    quantity: int
    unit: str
    description: str
    total_price: Optional[str] = None
    purchase_url: Optional[str] = None


def describe_quantity(plan: ProcurementPlan) -> str:
    """
    Describe the purchasable quantity of a plan.

    Returns "<total> <unit>" when there is no pack information, otherwise
    "<total> <unit> · <count> × <size><unit> + ..." with the largest pack
    first.

    Example:
        1980 ml of gin in 700 ml bottles is described as
        "1980 ml · 3 × 700ml"
    """
    total = f"{plan.rounded_total} {plan.unit}"
    if plan.pack_source == PackSource.UNIT or not plan.pack_count:
        return total

    lines = sorted(
        (line for line in plan.pack_plan if line.count > 0),
        key=lambda line: -line.pack_size,
    )
    if not lines:
        return total

    packs = " + ".join(
        f"{line.count} × {quantity_to_string(line.pack_size)}{plan.unit}" for line in lines
    )
    return f"{total} · {packs}"


def build_order_list(plans: Iterable[ProcurementPlan]) -> List[OrderListLine]:
    """Convert plans to order list rows, keeping their order."""
    return [
        OrderListLine(
            name=plan.name,
            category=plan.category,
            quantity=plan.rounded_total,
            unit=plan.unit,
            description=describe_quantity(plan),
            total_price=cost_to_string(plan.total_price) if plan.total_price is not None else None,
            purchase_url=plan.purchase_url,
        )
        for plan in plans
    ]


def render_order_list_text(lines: Iterable[OrderListLine]) -> str:
    """
    Render order list rows as plain text.

    Each row is "<name> (<category>): <description>", followed by the price
    when known. An empty list renders as "No ingredients required."
    """
    rows = []
    for line in lines:
        row = f"{line.name} ({line.category}): {line.description}"
        if line.total_price is not None:
            row = f"{row} [{line.total_price}]"
        rows.append(row)
    if not rows:
        return "No ingredients required."
    return "\n".join(rows)
