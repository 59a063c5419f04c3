"""
cash_register — Change engine for a physical cash register

Tracks the notes and coins a register holds, works out the change owed on a
sale under a selectable strategy, and moves the inventory accordingly.
Amounts are integer hundredths internally, never floats.

================================================================================
QUICK START
================================================================================

Service usage (one register, wire-format dicts):

    from cash_register import CashRegister

    register = CashRegister()
    result = register.settle({
        "amountDue": 123,
        "totalGiven": {"200": 1},
        "strategy": "maxLarge",
    })
    result.change_amount              # Amount('77.00')
    result.to_dict()["change"]        # {"50": 1, "20": 1, "5": 1, "2": 1}

Engine usage (pure, bring your own inventory):

    from cash_register import Amount, DenominationBag, default_inventory, settle

    inventory = default_inventory()
    result = settle(Amount.of(25), DenominationBag({"20": 1, "5": 1}), inventory)
    result.change                     # DenominationBag({})
    inventory = result.inventory      # the caller commits the new state

================================================================================
"""

# Monetary primitives
from .core import (
    Amount,
    RoundingMode,
    Denomination,
    DenominationSet,
    DEFAULT_DENOMINATIONS,
    total,
)

# Inventory
from .inventory import (
    DenominationBag,
    Inventory,
    DEFAULT_STOCK,
    apply_transaction,
    default_inventory,
    empty_inventory,
    validate_inventory,
)

# Allocation and orchestration
from .allocators import (
    Strategy,
    allocate,
    allocate_largest_first,
    allocate_smallest_first,
    allocate_preferred,
    resolve_preferred,
)
from .engine import (
    TransactionRequest,
    TransactionResult,
    settle,
    settle_request,
)

# Service, configuration, errors
from .register import CashRegister, JournalEntry
from .config import RegisterSettings, get_settings
from .errors import (
    CashRegisterError,
    InvalidAmount,
    InsufficientPayment,
    ExactChangeUnavailable,
    InvalidInventoryEntry,
    InvalidRequest,
)
from .logging_config import setup_logging, get_logger

__version__ = "1.0.0"

__all__ = [
    # Core
    "Amount",
    "RoundingMode",
    "Denomination",
    "DenominationSet",
    "DEFAULT_DENOMINATIONS",
    "total",
    # Inventory
    "DenominationBag",
    "Inventory",
    "DEFAULT_STOCK",
    "apply_transaction",
    "default_inventory",
    "empty_inventory",
    "validate_inventory",
    # Engine
    "Strategy",
    "allocate",
    "allocate_largest_first",
    "allocate_smallest_first",
    "allocate_preferred",
    "resolve_preferred",
    "TransactionRequest",
    "TransactionResult",
    "settle",
    "settle_request",
    # Service
    "CashRegister",
    "JournalEntry",
    "RegisterSettings",
    "get_settings",
    # Errors
    "CashRegisterError",
    "InvalidAmount",
    "InsufficientPayment",
    "ExactChangeUnavailable",
    "InvalidInventoryEntry",
    "InvalidRequest",
    # Logging
    "setup_logging",
    "get_logger",
]
