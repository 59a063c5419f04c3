"""
allocators.py — Change allocation strategies

All three strategies share one greedy loop:

    for each denomination in some ordering:
        if the register still holds some and remaining >= face value:
            take min(remaining // face, available) units
            remaining -= face * units

and differ only in the ordering they feed it:

    maxLarge   ladder descending (default)
    maxSmall   ladder ascending
    preferred  the preferred set descending, then the rest of the ladder
               descending on whatever capacity is left

The result is feasible iff nothing remains after the loop. An allocator
returns None when it is not, never a partial bag.

NOTE: greedy large-first is optimal for the canonical 1-2-5 ladder, not for
an arbitrary one. With a custom ladder such as (1, 5, 11) it can return more
pieces than needed, or give up on an amount a different combination could
pay.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .core import Amount, Denomination, DenominationSet
from .errors import InvalidAmount, InvalidInventoryEntry, InvalidRequest
from .inventory import DenominationBag, Inventory
from .logging_config import get_logger


logger = get_logger("cash_register.allocators")


class Strategy(Enum):
    """Change allocation strategy, valued by its wire name."""
    MAX_LARGE = "maxLarge"
    MAX_SMALL = "maxSmall"
    PREFERRED = "preferred"

    @classmethod
    def parse(cls, value: Any) -> Strategy:
        """
        Resolve a wire name ("maxSmall") or member name ("MAX_SMALL").

        Missing or unrecognized values fall back to MAX_LARGE; an unknown
        name is logged, never rejected.
        """
        if isinstance(value, Strategy):
            return value
        if value is None or value == "":
            return cls.MAX_LARGE
        for strategy in cls:
            if value == strategy.value or value == strategy.name:
                return strategy
        logger.warning(
            "Unrecognized strategy, falling back to maxLarge",
            extra={"action": "strategy_fallback", "context": {"strategy": str(value)}},
        )
        return cls.MAX_LARGE


def resolve_preferred(values: Iterable[Any], ladder: DenominationSet) -> Tuple[Denomination, ...]:
    """
    Resolve preferred denominations against the ladder, largest first.

    Duplicates collapse. A well-formed denomination the ladder does not hold
    is skipped with a warning, the same leniency as an unknown strategy.

    Raises:
        InvalidRequest: if a value is not a denomination at all
    """
    resolved = set()
    for value in values:
        try:
            denomination = Denomination.parse(value)
        except InvalidInventoryEntry:
            raise InvalidRequest(f"Not a preferred denomination: {value!r}") from None
        if denomination not in ladder:
            logger.warning(
                "Preferred denomination not in ladder, skipping it",
                extra={"action": "preferred_skipped", "context": {"denomination": denomination.key}},
            )
            continue
        resolved.add(denomination)
    return tuple(sorted(resolved, reverse=True))


# ==============================================================================
# GREEDY CORE
# ==============================================================================

def _check_amount(amount: Amount) -> None:
    if not isinstance(amount, Amount):
        raise TypeError(f"Expected Amount, got {type(amount).__name__}")
    if not amount.is_positive():
        raise InvalidAmount(f"Amount to allocate must be positive, got {amount}")


def _greedy_pass(
    remaining: int,
    order: Iterable[Denomination],
    capacity: Callable[[Denomination], int],
    taken: Dict[Denomination, int],
) -> int:
    """Consume denominations in `order` into `taken`; return what is left."""
    for denomination in order:
        available = capacity(denomination)
        face = denomination.minor_units
        if available > 0 and remaining >= face:
            units = min(remaining // face, available)
            taken[denomination] = taken.get(denomination, 0) + units
            remaining -= face * units
    return remaining


def _result(
    remaining: int, taken: Dict[Denomination, int], inventory: Inventory
) -> Optional[DenominationBag]:
    if remaining != 0:
        return None
    return DenominationBag(taken, inventory.ladder)


# ==============================================================================
# STRATEGIES
# ==============================================================================

def allocate_largest_first(amount: Amount, inventory: Inventory) -> Optional[DenominationBag]:
    """Largest denominations first (standard greedy change-making)."""
    _check_amount(amount)
    taken: Dict[Denomination, int] = {}
    remaining = _greedy_pass(
        amount.minor_units, inventory.ladder.descending(), inventory.count, taken
    )
    return _result(remaining, taken, inventory)


def allocate_smallest_first(amount: Amount, inventory: Inventory) -> Optional[DenominationBag]:
    """Smallest denominations first, e.g. to get rid of coins."""
    _check_amount(amount)
    taken: Dict[Denomination, int] = {}
    remaining = _greedy_pass(
        amount.minor_units, inventory.ladder.ascending(), inventory.count, taken
    )
    return _result(remaining, taken, inventory)


def allocate_preferred(
    amount: Amount,
    inventory: Inventory,
    preferred: Iterable[Any],
) -> Optional[DenominationBag]:
    """
    Exhaust the preferred denominations before touching any other.

    Preferred denominations are tried largest first whatever order the
    caller gave them in. Denominations outside the ladder are skipped; an
    empty preference is plain largest-first.

    Raises:
        InvalidRequest: if a preferred value is not a denomination
    """
    _check_amount(amount)
    ladder = inventory.ladder
    ordered = resolve_preferred(preferred, ladder)
    if not ordered:
        return allocate_largest_first(amount, inventory)

    taken: Dict[Denomination, int] = {}
    remaining = _greedy_pass(
        amount.minor_units, ordered, inventory.count, taken
    )

    if remaining > 0:
        fallback = [d for d in ladder.descending() if d not in ordered]
        remaining = _greedy_pass(
            remaining,
            fallback,
            lambda d: inventory.count(d) - taken.get(d, 0),
            taken,
        )

    return _result(remaining, taken, inventory)


_ORDERED_ALLOCATORS = {
    Strategy.MAX_LARGE: allocate_largest_first,
    Strategy.MAX_SMALL: allocate_smallest_first,
}


def allocate(
    amount: Amount,
    inventory: Inventory,
    strategy: Any = Strategy.MAX_LARGE,
    preferred: Iterable[Any] = (),
) -> Optional[DenominationBag]:
    """Allocate `amount` from `inventory` with the named strategy."""
    strategy = Strategy.parse(strategy)
    if strategy is Strategy.PREFERRED:
        return allocate_preferred(amount, inventory, preferred)
    return _ORDERED_ALLOCATORS[strategy](amount, inventory)
