"""
engine.py — Transaction orchestration

settle() is the single entry point of the change engine:

    1. amount due must be positive            -> InvalidAmount
    2. total given must cover it              -> InsufficientPayment
    3. change = given - due
    4. zero change: nothing to allocate, the given money is still absorbed
    5. allocate change with the chosen strategy -> ExactChangeUnavailable
    6. apply the inventory transition

The engine is stateless. It takes the current Inventory as an argument and
returns the next one inside the TransactionResult; persisting it is the
caller's job. On any error nothing is returned, so the caller's inventory is
untouched by construction.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .allocators import Strategy, allocate, resolve_preferred
from .core import DEFAULT_DENOMINATIONS, Amount, Denomination, DenominationSet, total
from .errors import (
    ExactChangeUnavailable,
    InsufficientPayment,
    InvalidAmount,
    InvalidRequest,
)
from .inventory import DenominationBag, Inventory, apply_transaction
from .logging_config import get_logger


logger = get_logger("cash_register.engine")


# ==============================================================================
# REQUEST / RESULT
# ==============================================================================

def _parse_amount_due(value: Any) -> Amount:
    if value is None:
        raise InvalidAmount("Amount due is required")
    amount = Amount.parse(value)
    if not amount.is_positive():
        raise InvalidAmount(f"Amount due must be positive, got {amount}")
    return amount


@dataclass(frozen=True)
class TransactionRequest:
    """A sale to settle: what is owed, what was handed over, how to pay back."""
    amount_due: Amount
    given: DenominationBag
    strategy: Strategy = Strategy.MAX_LARGE
    preferred: Tuple[Denomination, ...] = ()

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        ladder: DenominationSet = DEFAULT_DENOMINATIONS,
    ) -> TransactionRequest:
        """
        Parse the wire request.

        Format:
            {
                "amountDue": 123,
                "totalGiven": {"200": 1},
                "strategy": "maxLarge",            # optional
                "preferredDenominations": [20, 10]  # optional
            }

        Raises:
            InvalidAmount: amountDue missing, not a number, or <= 0
            InvalidRequest: totalGiven missing, the payload has the wrong shape,
                or a preferred value is not a denomination
            InvalidInventoryEntry: a denomination or count is invalid
        """
        if not isinstance(data, Mapping):
            raise InvalidRequest(
                f"Request must be an object, got {type(data).__name__}"
            )

        amount_due = _parse_amount_due(data.get("amountDue"))

        given = data.get("totalGiven")
        if given is None:
            raise InvalidRequest("Missing required field: totalGiven")
        if not isinstance(given, Mapping):
            raise InvalidRequest("totalGiven must map denominations to counts")

        preferred = data.get("preferredDenominations") or ()
        if isinstance(preferred, (str, Mapping)) or not isinstance(preferred, Iterable):
            raise InvalidRequest("preferredDenominations must be a list")

        return cls(
            amount_due=amount_due,
            given=DenominationBag(given, ladder),
            strategy=Strategy.parse(data.get("strategy")),
            preferred=resolve_preferred(preferred, ladder),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amountDue": self.amount_due.major_units,
            "totalGiven": self.given.to_dict(),
            "strategy": self.strategy.value,
            "preferredDenominations": [d.value.major_units for d in self.preferred],
        }


@dataclass(frozen=True)
class TransactionResult:
    """Change handed back and the inventory the register moves to."""
    change: DenominationBag
    change_amount: Amount
    inventory: Inventory

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as the wire response."""
        return {
            "success": True,
            "change": self.change.to_dict(),
            "changeAmount": self.change_amount.major_units,
            "updatedRegister": self.inventory.to_dict(),
        }


# ==============================================================================
# ORCHESTRATION
# ==============================================================================

def settle(
    amount_due: Amount,
    given: DenominationBag,
    inventory: Inventory,
    strategy: Any = Strategy.MAX_LARGE,
    preferred: Iterable[Any] = (),
) -> TransactionResult:
    """
    Compute the change for a sale and the inventory after it.

    Args:
        amount_due: what the customer owes (> 0)
        given: what the customer handed over
        inventory: what the register holds before the sale
        strategy: Strategy or wire name; unknown names fall back to maxLarge
        preferred: denominations to pay out first (preferred strategy only)

    Raises:
        InvalidAmount: amount_due is not positive
        InsufficientPayment: total(given) < amount_due
        ExactChangeUnavailable: the change cannot be composed from inventory
    """
    if not isinstance(amount_due, Amount):
        raise TypeError(f"amount_due must be Amount, got {type(amount_due).__name__}")
    if not amount_due.is_positive():
        raise InvalidAmount(f"Amount due must be positive, got {amount_due}")

    strategy = Strategy.parse(strategy)
    amount_given = total(given)

    if amount_given < amount_due:
        logger.info(
            "Settlement rejected: insufficient payment",
            extra={
                "action": "settle_rejected",
                "context": {"amount_due": str(amount_due), "amount_given": str(amount_given)},
            },
        )
        raise InsufficientPayment(amount_due, amount_given)

    change_amount = amount_given - amount_due

    if change_amount.is_zero():
        change: Optional[DenominationBag] = DenominationBag({}, inventory.ladder)
    else:
        change = allocate(change_amount, inventory, strategy, preferred)
        if change is None:
            logger.info(
                "Settlement rejected: exact change unavailable",
                extra={
                    "action": "settle_rejected",
                    "context": {"change_amount": str(change_amount), "strategy": strategy.value},
                },
            )
            raise ExactChangeUnavailable(change_amount, strategy)

    next_inventory = apply_transaction(inventory, given, change)

    logger.info(
        "Settlement computed",
        extra={
            "action": "settle",
            "context": {
                "amount_due": str(amount_due),
                "amount_given": str(amount_given),
                "change_amount": str(change_amount),
                "strategy": strategy.value,
                "change": change.to_dict(),
            },
        },
    )

    return TransactionResult(
        change=change,
        change_amount=change_amount,
        inventory=next_inventory,
    )


def settle_request(request: TransactionRequest, inventory: Inventory) -> TransactionResult:
    """settle() for a parsed TransactionRequest."""
    return settle(
        request.amount_due,
        request.given,
        inventory,
        request.strategy,
        request.preferred,
    )
