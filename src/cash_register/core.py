"""
core.py — Monetary primitives for the change engine

================================================================================
DESIGN PRINCIPLES
================================================================================

1. INTERNAL REPRESENTATION
   Integers in minor units (hundredths). Never floating point internally.
   A float or string coming from the outside is rounded ONCE, at parse time;
   every later step (totals, subtraction, allocation) is exact integer math.

2. TYPE SAFETY
   Amount only combines with Amount. Mixing with float/int raises TypeError,
   an explicit conversion through Amount.parse() is required.

3. IMMUTABILITY
   Frozen dataclasses. Every operation returns a new instance.

4. THE LADDER IS CONFIGURATION
   The set of denominations a register accepts is an immutable value
   (DenominationSet). Containers validate their keys against it, so an
   unknown denomination can never sneak into an inventory.

================================================================================
WHY NOT FLOAT
================================================================================

    >>> 200 - 123.15
    76.85000000000001

A register working in floats has to round after every subtraction to keep
such artifacts out of its comparisons. Working in hundredths removes the
whole class of bugs:

    >>> Amount.of(200) - Amount.parse("123.15")
    Amount('76.85')

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, Inexact, InvalidOperation, localcontext, ROUND_DOWN, ROUND_HALF_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from .errors import InvalidAmount, InvalidInventoryEntry


# Minor units per major unit: every amount is held in hundredths.
DECIMALS = 2
MINOR_PER_MAJOR = 10 ** DECIMALS


# ==============================================================================
# ROUNDING STRATEGIES
# ==============================================================================

class RoundingMode(Enum):
    """
    Rounding applied when an external value is converted to minor units.

    HALF_UP is the default: it matches what a cashier does by hand and what
    the register has always done (0.005 -> 0.01).
    """
    HALF_UP = "half_up"
    HALF_EVEN = "half_even"
    DOWN = "down"
    UP = "up"
    HALF_DOWN = "half_down"


_DECIMAL_ROUNDING = {
    RoundingMode.HALF_UP: ROUND_HALF_UP,
    RoundingMode.HALF_EVEN: ROUND_HALF_EVEN,
    RoundingMode.DOWN: ROUND_DOWN,
    RoundingMode.UP: ROUND_UP,
    RoundingMode.HALF_DOWN: ROUND_HALF_DOWN,
}


def _apply_rounding(value: Decimal, mode: RoundingMode) -> int:
    """Round a Decimal to an integer using the given strategy."""
    rounding = _DECIMAL_ROUNDING.get(mode)
    if rounding is None:
        raise ValueError(f"Unknown rounding mode: {mode}")
    return int(value.quantize(Decimal(1), rounding=rounding))


def _to_decimal(value: Any) -> Decimal:
    """
    Convert an external number to Decimal without binary float artifacts.

    Floats go through repr(), so 0.1 becomes Decimal('0.1') and not
    Decimal('0.1000000000000000055511151231257827...').
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"Not a monetary value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAmount(f"Not a monetary value: {value!r}") from None
    else:
        raise InvalidAmount(f"Not a monetary value: {value!r}")

    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return result


def _to_minor_decimal(value: Any) -> Decimal:
    """
    Scale an external number to minor units, exactly.

    A value with more significant digits than the decimal context holds
    would be silently rounded by the multiplication; it is rejected instead.
    """
    result = _to_decimal(value)
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            return result * MINOR_PER_MAJOR
        except (Inexact, InvalidOperation):
            raise InvalidAmount(f"Not a monetary value: {value!r}") from None


# ==============================================================================
# AMOUNT
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Amount:
    """
    A monetary amount in the register's single currency.

    INVARIANTS:
    1. _minor_units is always int (hundredths, no floating point)
    2. Arithmetic and ordering only accept other Amounts

    USAGE:
        due = Amount.parse(123)
        given = Amount.of(200)
        change = given - due        # Amount('77.00')
    """
    _minor_units: int

    def __post_init__(self):
        if isinstance(self._minor_units, bool) or not isinstance(self._minor_units, int):
            raise TypeError(
                f"Amount holds integer minor units, got {type(self._minor_units).__name__}. "
                f"Use Amount.parse() to convert."
            )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, major_units: int) -> Amount:
        """Whole major units only. For decimals use of_minor() or parse()."""
        return cls(_minor_units=major_units * MINOR_PER_MAJOR)

    @classmethod
    def of_minor(cls, minor_units: int) -> Amount:
        return cls(_minor_units=minor_units)

    @classmethod
    def parse(
        cls,
        value: Any,
        rounding: RoundingMode = RoundingMode.HALF_UP,
    ) -> Amount:
        """
        Build an Amount from an int, float, Decimal or numeric string.

        Rounding to hundredths happens HERE, exactly once.

        Raises:
            InvalidAmount: if value is not a finite number, or has more digits
                than the decimal context can hold
        """
        if isinstance(value, Amount):
            return value
        scaled = _to_minor_decimal(value)
        try:
            minor = _apply_rounding(scaled, rounding)
        except InvalidOperation:
            # quantize() cannot hold more digits than the context precision
            raise InvalidAmount(f"Not a monetary value: {value!r}") from None
        return cls(_minor_units=minor)

    @classmethod
    def zero(cls) -> Amount:
        return cls(_minor_units=0)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            raise TypeError(
                f"Operation not allowed: Amount + {type(other).__name__}. "
                f"Use Amount.parse() to convert."
            )
        return Amount.of_minor(self._minor_units + other._minor_units)

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            raise TypeError(
                f"Operation not allowed: Amount - {type(other).__name__}."
            )
        return Amount.of_minor(self._minor_units - other._minor_units)

    def __mul__(self, factor: int) -> Amount:
        """Multiplication by a count (e.g. face value * number of notes)."""
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(
                f"Amount can only be multiplied by int, not {type(factor).__name__}."
            )
        return Amount.of_minor(self._minor_units * factor)

    def __rmul__(self, factor: int) -> Amount:
        return self.__mul__(factor)

    # -------------------------------------------------------------------------
    # Comparison
    # -------------------------------------------------------------------------

    def __lt__(self, other: Amount) -> bool:
        self._check_type(other)
        return self._minor_units < other._minor_units

    def __le__(self, other: Amount) -> bool:
        self._check_type(other)
        return self._minor_units <= other._minor_units

    def __gt__(self, other: Amount) -> bool:
        self._check_type(other)
        return self._minor_units > other._minor_units

    def __ge__(self, other: Amount) -> bool:
        self._check_type(other)
        return self._minor_units >= other._minor_units

    def _check_type(self, other: Any) -> None:
        if not isinstance(other, Amount):
            raise TypeError(f"Cannot compare Amount with {type(other).__name__}")

    # -------------------------------------------------------------------------
    # Properties and output
    # -------------------------------------------------------------------------

    @property
    def minor_units(self) -> int:
        return self._minor_units

    @property
    def major_units(self) -> float:
        """
        Value in major units as float.

        WARNING: display and wire output only. Never compute with it.
        """
        return self._minor_units / MINOR_PER_MAJOR

    def to_decimal(self) -> Decimal:
        return Decimal(self._minor_units).scaleb(-DECIMALS)

    def is_positive(self) -> bool:
        return self._minor_units > 0

    def is_negative(self) -> bool:
        return self._minor_units < 0

    def is_zero(self) -> bool:
        return self._minor_units == 0

    def __str__(self) -> str:
        sign = "-" if self._minor_units < 0 else ""
        major, minor = divmod(abs(self._minor_units), MINOR_PER_MAJOR)
        return f"{sign}{major}.{minor:0{DECIMALS}d}"

    def __repr__(self) -> str:
        return f"Amount('{self}')"


# ==============================================================================
# DENOMINATIONS
# ==============================================================================

@dataclass(frozen=True, slots=True, order=True)
class Denomination:
    """
    Face value of a banknote or coin, in minor units.

    Ordering follows face value, so sorted(..., reverse=True) gives the
    large-first ladder.
    """
    minor_units: int

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise InvalidInventoryEntry(
                f"Denomination must be integer minor units, got {self.minor_units!r}"
            )
        if self.minor_units <= 0:
            raise InvalidInventoryEntry(
                f"Denomination must be positive, got {self.minor_units}"
            )

    @classmethod
    def parse(cls, value: Any) -> Denomination:
        """
        Build a Denomination from a face value ("0.5", 0.5, 20, Decimal("5")).

        Unlike Amount.parse() nothing is rounded: a face value finer than a
        hundredth is rejected.
        """
        if isinstance(value, Denomination):
            return value
        try:
            minor = _to_minor_decimal(value)
        except InvalidAmount:
            raise InvalidInventoryEntry(f"Not a denomination: {value!r}") from None
        if minor != minor.to_integral_value():
            raise InvalidInventoryEntry(
                f"Denomination {value!r} is finer than 1/{MINOR_PER_MAJOR}"
            )
        return cls(int(minor))

    @property
    def value(self) -> Amount:
        return Amount.of_minor(self.minor_units)

    @property
    def key(self) -> str:
        """Shortest decimal rendering, used as the wire key: "500", "0.5", "0.05"."""
        major, minor = divmod(self.minor_units, MINOR_PER_MAJOR)
        if minor == 0:
            return str(major)
        return f"{major}.{minor:0{DECIMALS}d}".rstrip("0")

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"Denomination('{self.key}')"


class DenominationSet:
    """
    The immutable ladder of denominations a register works with.

    Iteration yields denominations largest first.
    """

    __slots__ = ("_descending", "_members")

    def __init__(self, denominations: Iterable[Any]):
        members = frozenset(Denomination.parse(d) for d in denominations)
        if not members:
            raise ValueError("A denomination set needs at least one denomination")
        self._members = members
        self._descending = tuple(sorted(members, reverse=True))

    def descending(self) -> tuple[Denomination, ...]:
        return self._descending

    def ascending(self) -> tuple[Denomination, ...]:
        return self._descending[::-1]

    def resolve(self, value: Any) -> Denomination:
        """
        Parse a raw key or face value into a member of this set.

        Raises:
            InvalidInventoryEntry: if the value is not a denomination of this set
        """
        denomination = Denomination.parse(value)
        if denomination not in self._members:
            raise InvalidInventoryEntry(f"Unknown denomination: {denomination}")
        return denomination

    def keys(self) -> list[str]:
        return [d.key for d in self._descending]

    def __contains__(self, value: object) -> bool:
        return isinstance(value, Denomination) and value in self._members

    def __iter__(self) -> Iterator[Denomination]:
        return iter(self._descending)

    def __len__(self) -> int:
        return len(self._descending)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DenominationSet):
            return self._members == other._members
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"DenominationSet([{', '.join(self.keys())}])"


DEFAULT_DENOMINATIONS = DenominationSet(
    [500, 200, 100, 50, 20, 10, 5, 2, 1, "0.5", "0.2", "0.1", "0.05"]
)


# ==============================================================================
# TOTALS
# ==============================================================================

def total(counts: Mapping[Denomination, int]) -> Amount:
    """Sum face value * count over a denomination mapping. Empty -> zero."""
    return Amount.of_minor(
        sum(denomination.minor_units * count for denomination, count in counts.items())
    )
