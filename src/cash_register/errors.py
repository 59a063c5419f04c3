"""
errors.py — Error taxonomy for the change engine

Every failure the engine can report is a deterministic consequence of its
inputs, so none of them is retried. Adapters map ``code`` to whatever their
transport uses (HTTP status, exit code, UI message).

    CashRegisterError (ValueError)
    ├── InvalidAmount
    ├── InsufficientPayment
    ├── ExactChangeUnavailable
    ├── InvalidInventoryEntry
    └── InvalidRequest
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class CashRegisterError(ValueError):
    """Base class for all recoverable engine failures."""

    code: str = "cash_register_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as the wire error payload."""
        payload: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = {
                k: str(v) for k, v in self.details.items() if v is not None
            }
        return payload


class InvalidAmount(CashRegisterError):
    """Amount due is missing, zero, negative or not a finite number."""

    code = "invalid_amount"


class InsufficientPayment(CashRegisterError):
    """Total given is below the amount due."""

    code = "insufficient_payment"

    def __init__(self, amount_due: Any, amount_given: Any):
        super().__init__(
            "Insufficient payment",
            amount_due=amount_due,
            amount_given=amount_given,
        )
        self.amount_due = amount_due
        self.amount_given = amount_given


class ExactChangeUnavailable(CashRegisterError):
    """The register cannot compose the change from what it holds."""

    code = "exact_change_unavailable"

    def __init__(self, change_amount: Any, strategy: Optional[Any] = None):
        super().__init__(
            "Unable to provide exact change",
            change_amount=change_amount,
            strategy=getattr(strategy, "value", strategy),
        )
        self.change_amount = change_amount
        self.strategy = strategy


class InvalidInventoryEntry(CashRegisterError):
    """A count is negative or not an integer, or a denomination is unknown."""

    code = "invalid_inventory_entry"


class InvalidRequest(CashRegisterError):
    """A wire request is missing fields or has the wrong shape."""

    code = "invalid_request"
