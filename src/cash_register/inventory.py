"""
inventory.py — Denomination count containers and the inventory transition

Two read-only mappings keyed by Denomination:

    Inventory        what the register holds. Every denomination of the
                     ladder is present, counts >= 0.
    DenominationBag  money handed over in one transaction (given or change).
                     Only counts > 0, zero entries are dropped.

Both validate their keys against a DenominationSet when built, so string
keys ("0.5", "20") only exist at the wire boundary.

The transition itself is a pure function: apply_transaction() never mutates
its inputs and returns the next Inventory.
"""

from __future__ import annotations
from typing import Any, Dict, Iterator, Mapping, Optional

from .core import DEFAULT_DENOMINATIONS, Amount, Denomination, DenominationSet, total
from .errors import InvalidInventoryEntry


# Starting stock of a freshly opened register.
DEFAULT_STOCK: Dict[str, int] = {
    "0.05": 20,
    "0.1": 30,
    "0.2": 20,
    "0.5": 15,
    "1": 25,
    "2": 10,
    "5": 8,
    "10": 5,
    "20": 4,
    "50": 2,
    "100": 3,
    "200": 3,
    "500": 0,
}


def _check_count(denomination: Denomination, count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInventoryEntry(
            f"Count for {denomination} must be an integer, got {count!r}"
        )
    return count


class _DenominationCounts(Mapping[Denomination, int]):
    """Immutable Denomination -> count mapping bound to a ladder."""

    __slots__ = ("_counts", "_ladder")

    # Whether denominations with a zero count stay listed
    KEEP_ZERO: bool = False

    def __init__(
        self,
        counts: Optional[Mapping[Any, int]] = None,
        ladder: DenominationSet = DEFAULT_DENOMINATIONS,
    ):
        if counts is None:
            counts = {}
        if not isinstance(counts, Mapping):
            raise InvalidInventoryEntry(
                f"Expected a denomination -> count mapping, got {type(counts).__name__}"
            )

        resolved: Dict[Denomination, int] = {}
        for key, count in counts.items():
            denomination = ladder.resolve(key)
            resolved[denomination] = resolved.get(denomination, 0) + _check_count(
                denomination, count
            )

        self._ladder = ladder
        self._counts = self._normalize(resolved, ladder)

    def _normalize(
        self, counts: Dict[Denomination, int], ladder: DenominationSet
    ) -> Dict[Denomination, int]:
        """Ladder order, no negative counts; zeros kept only if KEEP_ZERO."""
        normalized = {}
        for denomination in ladder.descending():
            count = counts.get(denomination, 0)
            if count < 0:
                raise InvalidInventoryEntry(
                    f"Negative count for {denomination}: {count}"
                )
            if count or self.KEEP_ZERO:
                normalized[denomination] = count
        return normalized

    @classmethod
    def from_dict(
        cls, data: Mapping[Any, int], ladder: DenominationSet = DEFAULT_DENOMINATIONS
    ):
        """Build from the wire format {"0.5": 3, "20": 1}."""
        return cls(data, ladder)

    @property
    def ladder(self) -> DenominationSet:
        return self._ladder

    def count(self, denomination: Denomination) -> int:
        """Count held for a denomination, 0 when absent."""
        return self._counts.get(denomination, 0)

    def total(self) -> Amount:
        return total(self)

    def to_dict(self) -> Dict[str, int]:
        """Serialize with wire keys, largest denomination first."""
        return {d.key: c for d, c in self._counts.items()}

    def __getitem__(self, denomination: Denomination) -> int:
        return self._counts[denomination]

    def __iter__(self) -> Iterator[Denomination]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"


class Inventory(_DenominationCounts):
    """
    What the register currently holds.

    INVARIANTS:
    1. every denomination of the ladder is a key (missing -> 0)
    2. every count is >= 0
    """

    __slots__ = ()

    KEEP_ZERO = True


class DenominationBag(_DenominationCounts):
    """Money given or returned in a single transaction. Counts are > 0."""

    __slots__ = ()

    KEEP_ZERO = False


# ==============================================================================
# CONSTRUCTION AND VALIDATION
# ==============================================================================

def empty_inventory(ladder: DenominationSet = DEFAULT_DENOMINATIONS) -> Inventory:
    """A register holding nothing: every denomination at 0."""
    return Inventory({}, ladder)


def default_inventory(
    stock: Optional[Mapping[Any, int]] = None,
    ladder: DenominationSet = DEFAULT_DENOMINATIONS,
) -> Inventory:
    """A register filled with the starting stock (DEFAULT_STOCK unless given)."""
    return Inventory(DEFAULT_STOCK if stock is None else stock, ladder)


def validate_inventory(
    state: Mapping[Any, int], ladder: DenominationSet = DEFAULT_DENOMINATIONS
) -> Inventory:
    """
    Validate a raw register state and return it as an Inventory.

    Raises:
        InvalidInventoryEntry: on a negative or non-integer count, or a
            denomination outside the ladder
    """
    return Inventory(state, ladder)


# ==============================================================================
# TRANSITION
# ==============================================================================

def apply_transaction(
    inventory: Inventory,
    given: Mapping[Denomination, int],
    change: Mapping[Denomination, int],
) -> Inventory:
    """
    Next inventory after absorbing `given` and paying out `change`.

        new[d] == inventory[d] + given[d] - change[d]

    The caller guarantees `change` is payable from `inventory`; should it not
    be, building the result raises InvalidInventoryEntry instead of returning
    a negative count.
    """
    counts = dict(inventory)
    for denomination, count in given.items():
        counts[denomination] = counts.get(denomination, 0) + count
    for denomination, count in change.items():
        counts[denomination] = counts.get(denomination, 0) - count
    return Inventory(counts, inventory.ladder)
