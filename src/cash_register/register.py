"""
register.py — The register service that owns the inventory

================================================================================
ROLE
================================================================================

The change engine is pure: it takes an Inventory and returns the next one.
Something has to hold the ONE inventory of a physical register and decide
when it moves. That is CashRegister.

    ┌──────────────────────────┐
    │  adapter (HTTP, UI, CLI) │   wire dicts in, wire dicts out
    └────────────┬─────────────┘
                 ▼
    ┌──────────────────────────┐
    │       CashRegister       │   lock, current inventory, journal
    └────────────┬─────────────┘
                 ▼
    ┌──────────────────────────┐
    │     engine.settle()      │   pure computation
    └──────────────────────────┘

PROPERTIES:
- Serialized: settle() and reset_inventory() read, compute and commit inside
  one critical section, so two sales never see the same starting inventory.
- All-or-nothing: the inventory is replaced only after settle() returned a
  result. Any error leaves it as it was.
- Journaled: every successful settlement is appended to a bounded,
  append-only journal (oldest entries are evicted first).

================================================================================
USAGE
================================================================================

    register = CashRegister()
    result = register.settle({"amountDue": 123, "totalGiven": {"200": 1}})
    result.to_dict()["change"]        # {"50": 1, "20": 1, "5": 1, "2": 1}
    register.get_inventory()          # already updated

================================================================================
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Mapping, Optional, Union
import threading

from .config import RegisterSettings, get_settings
from .core import DEFAULT_DENOMINATIONS, DenominationSet
from .engine import TransactionRequest, TransactionResult, settle_request
from .inventory import Inventory, default_inventory, validate_inventory
from .logging_config import get_logger, setup_logging


logger = get_logger("cash_register.register")


# ==============================================================================
# JOURNAL
# ==============================================================================

@dataclass(frozen=True)
class JournalEntry:
    """One settled sale."""
    sequence: int
    timestamp: datetime
    request: TransactionRequest
    result: TransactionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence": self.sequence,
            "timestamp": self.timestamp.isoformat(),
            "request": self.request.to_dict(),
            "result": self.result.to_dict(),
        }


# ==============================================================================
# REGISTER
# ==============================================================================

class CashRegister:
    """
    Owner of a register's inventory.

    The engine guarantees atomicity of a single computation; this class
    guarantees that computations over the shared inventory happen one at a
    time.
    """

    # Journal length when none is configured
    JOURNAL_SIZE: int = 1000

    def __init__(
        self,
        inventory: Optional[Inventory] = None,
        *,
        ladder: DenominationSet = DEFAULT_DENOMINATIONS,
        default_stock: Optional[Mapping[Any, int]] = None,
        default_strategy: Any = None,
        journal_size: Optional[int] = None,
    ):
        self._ladder = inventory.ladder if inventory is not None else ladder
        self._default_stock = default_stock
        self._default_strategy = default_strategy
        self._inventory = inventory if inventory is not None else self._starting_inventory()
        if journal_size is None:
            journal_size = self.JOURNAL_SIZE
        if journal_size < 1:
            raise ValueError(f"Journal size must be positive, got {journal_size}")
        self._journal: Deque[JournalEntry] = deque(maxlen=journal_size)
        self._sequence = 0
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[RegisterSettings] = None,
        configure_logging: bool = False,
    ) -> CashRegister:
        """Build a register from configuration (environment when omitted)."""
        settings = settings or get_settings()
        if configure_logging:
            setup_logging(settings.log_level, settings.log_format)
        return cls(
            settings.starting_inventory(),
            ladder=settings.ladder(),
            default_stock=settings.initial_stock,
            default_strategy=settings.default_strategy,
            journal_size=settings.journal_size,
        )

    def _starting_inventory(self) -> Inventory:
        return default_inventory(self._default_stock, self._ladder)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def settle(self, request: Union[TransactionRequest, Mapping[str, Any]]) -> TransactionResult:
        """
        Settle a sale and commit the new inventory.

        Accepts a TransactionRequest or the wire-format mapping. A wire
        request without a strategy uses the configured default strategy.

        Raises:
            CashRegisterError: any engine failure; the inventory is unchanged
        """
        if not isinstance(request, TransactionRequest):
            if (
                self._default_strategy is not None
                and isinstance(request, Mapping)
                and not request.get("strategy")
            ):
                request = {**request, "strategy": self._default_strategy}
            request = TransactionRequest.from_dict(request, self._ladder)

        with self._lock:
            result = settle_request(request, self._inventory)
            self._inventory = result.inventory
            self._sequence += 1
            self._journal.append(
                JournalEntry(
                    sequence=self._sequence,
                    timestamp=datetime.now(timezone.utc),
                    request=request,
                    result=result,
                )
            )
        return result

    def get_inventory(self) -> Inventory:
        """Snapshot of the current inventory (Inventory is immutable)."""
        with self._lock:
            return self._inventory

    def reset_inventory(self, state: Optional[Mapping[Any, int]] = None) -> Inventory:
        """
        Replace the inventory wholesale and clear the journal.

        Args:
            state: new counts; the configured starting stock when None

        Raises:
            InvalidInventoryEntry: if `state` is not a valid inventory
        """
        if state is None:
            inventory = self._starting_inventory()
        else:
            inventory = validate_inventory(state, self._ladder)

        with self._lock:
            self._inventory = inventory
            self._journal.clear()

        logger.info(
            "Inventory reset",
            extra={"action": "reset_inventory", "context": inventory.to_dict()},
        )
        return inventory

    # -------------------------------------------------------------------------
    # Journal
    # -------------------------------------------------------------------------

    @property
    def journal(self) -> List[JournalEntry]:
        """Settled sales, oldest first (read-only copy)."""
        with self._lock:
            return list(self._journal)

    @property
    def ladder(self) -> DenominationSet:
        return self._ladder

    def __repr__(self) -> str:
        return f"CashRegister(total={self._inventory.total()}, settled={self._sequence})"
