"""
Multi-size pack combination search.

Given the tier-filtered pack offers for one ingredient and the rounded
quantity to buy, find the (pack size, count) combination whose capacity
covers the quantity, preferring in order:

1. lowest total price (skipped when any candidate has no price)
2. lowest overage (capacity beyond the target)
3. fewest distinct pack sizes
4. larger pack sizes first

The search is a dynamic program over reachable capacities, one pack size
at a time from the largest down, keeping the best partial combination per
capacity. Capacities past the target plus the largest size are never
explored.
"""

import heapq
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from src.utils.constants import ROUNDING_EPSILON

from .snapshots import PackOffer


@dataclass(frozen=True)
class PackLine:
    """One pack size in a purchase plan.

    Attributes:
        pack_size: Pack size in the ingredient's unit
        count: Number of packs to buy
        pack_price: Price per pack, None when unknown
        offer: Offer the line was taken from, None for reference sizes
    """

    pack_size: float
    count: int
    pack_price: Optional[float] = None
    offer: Optional[PackOffer] = None

    @property
    def capacity(self) -> float:
        return self.pack_size * self.count

    @property
    def line_price(self) -> Optional[float]:
        if self.pack_price is None:
            return None
        return self.pack_price * self.count


@dataclass(frozen=True)
class PackSelection:
    """Result of a pack combination search."""

    lines: Tuple[PackLine, ...]
    capacity: float
    overage: float
    total_price: Optional[float]

    @property
    def pack_count(self) -> int:
        return sum(line.count for line in self.lines)


def _usable_size(offer: PackOffer) -> Optional[float]:
    try:
        size = float(offer.pack_size)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(size) or size <= 0:
        return None
    return size


def _usable_price(offer: PackOffer) -> Optional[float]:
    if offer.pack_price is None:
        return None
    try:
        price = float(offer.pack_price)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def collapse_offers(offers: Sequence[PackOffer]) -> List[Tuple[float, Optional[float], PackOffer]]:
    """
    Reduce offers to one candidate per pack size.

    Offers with a non-positive or non-finite size are ignored. When several
    offers share a size the cheapest priced one wins; an unpriced offer is
    kept only if no priced offer of that size exists.

    Returns:
        List of (size, price, offer) sorted by size descending
    """
    by_size: Dict[float, Tuple[float, Optional[float], PackOffer]] = {}
    for offer in offers:
        size = _usable_size(offer)
        if size is None:
            continue
        price = _usable_price(offer)
        current = by_size.get(size)
        if current is None:
            by_size[size] = (size, price, offer)
            continue
        current_price = current[1]
        if price is not None and (current_price is None or price < current_price):
            by_size[size] = (size, price, offer)

    return sorted(by_size.values(), key=lambda candidate: -candidate[0])


# Capacities are compared on a micro-unit grid so float sums of the same
# packs land on the same state
_CAPACITY_DIGITS = 6

# (rounded price, distinct sizes, negated counts, raw price); smaller is better
_Partial = Tuple[float, int, Tuple[int, ...], float]


def _capacity_key(value: float) -> float:
    return round(value, _CAPACITY_DIGITS)


def _skip_size(state: _Partial) -> _Partial:
    rounded, distinct, neg_counts, spent = state
    return (rounded, distinct, neg_counts + (0,), spent)


def _add_pack(state: _Partial, price: float, opened: bool) -> _Partial:
    _, distinct, neg_counts, spent = state
    spent += price
    if opened:
        neg_counts = neg_counts + (-1,)
        distinct += 1
    else:
        neg_counts = neg_counts[:-1] + (neg_counts[-1] - 1,)
    return (round(spent, 9), distinct, neg_counts, spent)


def _extend_layer(
    layer: Dict[float, _Partial], size: float, price: float, ceiling: float
) -> Dict[float, _Partial]:
    """
    Add one pack size to every partial combination.

    Two partial combinations reaching the same capacity share every possible
    completion, so only the better one is kept per capacity. Combinations
    that already use this size are tracked apart from those that don't,
    since adding a pack changes their distinct-size count differently.
    """
    opened: Dict[float, _Partial] = {}
    pending: List[float] = []

    def offer(capacity: float, state: _Partial) -> None:
        current = opened.get(capacity)
        if current is None:
            opened[capacity] = state
            heapq.heappush(pending, capacity)
        elif state < current:
            opened[capacity] = state

    for capacity, state in layer.items():
        following = _capacity_key(capacity + size)
        if following <= ceiling:
            offer(following, _add_pack(state, price, opened=True))

    # Capacities pop in ascending order, so each one is final when popped
    while pending:
        capacity = heapq.heappop(pending)
        following = _capacity_key(capacity + size)
        if following <= ceiling:
            offer(following, _add_pack(opened[capacity], price, opened=False))

    merged = {capacity: _skip_size(state) for capacity, state in layer.items()}
    for capacity, state in opened.items():
        current = merged.get(capacity)
        if current is None or state < current:
            merged[capacity] = state
    return merged


def select_pack_combination(
    offers: Sequence[PackOffer],
    target: float,
) -> Optional[PackSelection]:
    """
    Choose the best pack combination covering target.

    Args:
        offers: Candidate offers (already filtered by tier and active flag)
        target: Quantity to cover, in the offers' unit

    Returns:
        PackSelection with lines sorted by size descending (zero counts
        omitted), or None when no offer has a usable size. A target of 0
        yields an empty selection.

    Example:
        >>> offers = [PackOffer("a", 700, 18.0), PackOffer("b", 1000, 22.0)]
        >>> selection = select_pack_combination(offers, 1980)
        >>> [(line.pack_size, line.count) for line in selection.lines]
        [(1000.0, 2)]
    """
    candidates = collapse_offers(offers)
    if not candidates:
        return None

    price_active = all(price is not None for _, price, _ in candidates)

    try:
        goal = float(target)
    except (TypeError, ValueError):
        goal = 0.0
    if not math.isfinite(goal) or goal <= 0:
        return PackSelection(
            lines=(),
            capacity=0.0,
            overage=0.0,
            total_price=0.0 if price_active else None,
        )

    # Dropping any pack from a combination at or past goal + largest size
    # still covers the goal for no more money, so no better plan lies beyond
    ceiling = _capacity_key(goal + candidates[0][0])

    layer: Dict[float, _Partial] = {0.0: (0.0, 0, (), 0.0)}
    for size, price, _ in candidates:
        layer = _extend_layer(layer, size, price if price_active else 0.0, ceiling)

    best_key = None
    for capacity, (rounded_price, distinct, neg_counts, _) in layer.items():
        if capacity + ROUNDING_EPSILON < goal:
            continue
        key = (rounded_price, round(capacity - goal, 9), distinct, neg_counts)
        if best_key is None or key < best_key:
            best_key = key

    if best_key is None:
        return None

    best_counts = tuple(-count for count in best_key[3])
    lines = tuple(
        PackLine(pack_size=size, count=count, pack_price=price, offer=offer)
        for (size, price, offer), count in zip(candidates, best_counts)
        if count > 0
    )
    capacity = math.fsum(line.capacity for line in lines)
    total_price = math.fsum(line.line_price for line in lines) if price_active else None
    return PackSelection(
        lines=lines,
        capacity=capacity,
        overage=max(0.0, capacity - goal),
        total_price=total_price,
    )
