"""
test_register.py — Tests for the CashRegister service

Tests cover:
- settle() commits on success and never on failure
- get_inventory() / reset_inventory()
- the bounded settlement journal
- serialized access from many threads
- construction from RegisterSettings
"""

import threading

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cash_register import (
    Amount,
    CashRegister,
    DenominationBag,
    Inventory,
    JournalEntry,
    RegisterSettings,
    Strategy,
    TransactionRequest,
    ExactChangeUnavailable,
    InsufficientPayment,
    InvalidAmount,
    InvalidInventoryEntry,
    InvalidRequest,
    default_inventory,
)


SALE_77 = {"amountDue": 123, "totalGiven": {"200": 1}, "strategy": "maxLarge"}
EXACT_25 = {"amountDue": 25, "totalGiven": {"20": 1, "5": 1}}


# ==============================================================================
# settle
# ==============================================================================

class TestSettle:
    """Settling sales through the service."""

    def test_starts_with_default_stock(self):
        assert CashRegister().get_inventory() == default_inventory()

    def test_settle_commits_new_inventory(self):
        register = CashRegister()

        result = register.settle(SALE_77)

        assert result.change.to_dict() == {"50": 1, "20": 1, "5": 1, "2": 1}
        assert register.get_inventory() == result.inventory
        assert register.get_inventory().to_dict()["200"] == 4

    def test_settle_accepts_parsed_request(self):
        register = CashRegister()
        request = TransactionRequest(amount_due=Amount.of(25), given=DenominationBag({"20": 1, "5": 1}))

        result = register.settle(request)

        assert result.change_amount == Amount.zero()

    def test_insufficient_payment_leaves_inventory_unchanged(self):
        register = CashRegister()
        before = register.get_inventory()

        with pytest.raises(InsufficientPayment):
            register.settle({"amountDue": 123, "totalGiven": {"100": 1}})

        assert register.get_inventory() is before
        assert register.journal == []

    def test_exact_change_unavailable_leaves_inventory_unchanged(self):
        register = CashRegister(Inventory({"100": 5}))
        before = register.get_inventory().to_dict()

        with pytest.raises(ExactChangeUnavailable):
            register.settle(SALE_77)

        assert register.get_inventory().to_dict() == before

    def test_invalid_requests_leave_inventory_unchanged(self):
        register = CashRegister()
        before = register.get_inventory()

        with pytest.raises(InvalidAmount):
            register.settle({"amountDue": 0, "totalGiven": {"20": 1}})
        with pytest.raises(InvalidRequest):
            register.settle({"amountDue": 10})
        with pytest.raises(InvalidInventoryEntry):
            register.settle({"amountDue": 10, "totalGiven": {"20": -1}})
        with pytest.raises(InvalidAmount):
            register.settle({"amountDue": 1e30, "totalGiven": {"200": 1}})

        assert register.get_inventory() is before

    def test_consecutive_sales_draw_down_stock(self):
        register = CashRegister()

        register.settle(SALE_77)
        register.settle(SALE_77)

        # both 50s are gone and only two 20s are left
        third = register.settle(SALE_77)
        assert third.change.to_dict() == {"20": 2, "10": 3, "5": 1, "2": 1}
        assert register.get_inventory().total() == default_inventory().total() + Amount.of(3 * 123)

    def test_default_strategy_applies_when_request_has_none(self):
        register = CashRegister(default_strategy="maxSmall")

        result = register.settle({"amountDue": "98.5", "totalGiven": {"100": 1}})

        assert result.change.to_dict() == {"0.1": 5, "0.05": 20}

    def test_explicit_strategy_overrides_default(self):
        register = CashRegister(default_strategy="maxSmall")

        result = register.settle({**SALE_77, "strategy": "maxLarge"})

        assert result.change.to_dict() == {"50": 1, "20": 1, "5": 1, "2": 1}


# ==============================================================================
# reset
# ==============================================================================

class TestReset:
    """reset_inventory()."""

    def test_reset_to_supplied_state(self):
        register = CashRegister()

        inventory = register.reset_inventory({"100": 5})

        assert register.get_inventory() == inventory
        assert inventory.to_dict()["100"] == 5
        assert inventory.to_dict()["0.05"] == 0

    def test_reset_to_default(self):
        register = CashRegister(Inventory({}))
        register.settle(EXACT_25)

        register.reset_inventory()

        assert register.get_inventory() == default_inventory()

    def test_reset_to_configured_stock(self):
        register = CashRegister(default_stock={"1": 7})
        register.settle(EXACT_25)

        register.reset_inventory()

        assert register.get_inventory().to_dict()["1"] == 7
        assert register.get_inventory().total() == Amount.of(7)

    def test_invalid_reset_keeps_previous_inventory(self):
        register = CashRegister()
        before = register.get_inventory()

        with pytest.raises(InvalidInventoryEntry):
            register.reset_inventory({"50": -1})
        with pytest.raises(InvalidInventoryEntry):
            register.reset_inventory({"3": 1})

        assert register.get_inventory() is before

    def test_reset_clears_journal(self):
        register = CashRegister()
        register.settle(EXACT_25)

        register.reset_inventory()

        assert register.journal == []


# ==============================================================================
# journal
# ==============================================================================

class TestJournal:
    """Bounded append-only settlement history."""

    def test_successful_settlement_is_journaled(self):
        register = CashRegister()

        result = register.settle(SALE_77)

        (entry,) = register.journal
        assert isinstance(entry, JournalEntry)
        assert entry.sequence == 1
        assert entry.result is result
        assert entry.request.strategy is Strategy.MAX_LARGE

    def test_entry_to_dict(self):
        register = CashRegister()
        register.settle(SALE_77)

        payload = register.journal[0].to_dict()

        assert payload["sequence"] == 1
        assert payload["request"]["amountDue"] == 123.0
        assert payload["result"]["changeAmount"] == 77.0
        assert "timestamp" in payload

    def test_journal_is_bounded(self):
        register = CashRegister(journal_size=2)

        for _ in range(3):
            register.settle(EXACT_25)

        assert [e.sequence for e in register.journal] == [2, 3]

    def test_non_positive_journal_size_raises(self):
        with pytest.raises(ValueError):
            CashRegister(journal_size=0)
        with pytest.raises(ValueError):
            CashRegister(journal_size=-1)

    def test_journal_is_a_copy(self):
        register = CashRegister()
        register.settle(EXACT_25)

        register.journal.clear()

        assert len(register.journal) == 1


# ==============================================================================
# concurrency
# ==============================================================================

class TestConcurrency:
    """Concurrent callers are serialized around the inventory."""

    def test_parallel_sales_are_all_applied(self):
        register = CashRegister()
        errors = []

        def worker():
            try:
                for _ in range(10):
                    register.settle(EXACT_25)
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        inventory = register.get_inventory().to_dict()
        assert inventory["20"] == 4 + 80
        assert inventory["5"] == 8 + 80
        assert [e.sequence for e in register.journal] == list(range(1, 81))


# ==============================================================================
# settings
# ==============================================================================

class TestFromSettings:
    """CashRegister.from_settings()."""

    def test_custom_ladder_and_stock(self):
        settings = RegisterSettings(
            denominations=[10, 5, 1],
            initial_stock={"10": 1, "5": 2, "1": 5},
            journal_size=5,
        )

        register = CashRegister.from_settings(settings)

        assert register.ladder.keys() == ["10", "5", "1"]
        assert register.get_inventory().to_dict() == {"10": 1, "5": 2, "1": 5}
        result = register.settle({"amountDue": 7, "totalGiven": {"10": 1}})
        assert result.change.to_dict() == {"1": 3}

    def test_custom_ladder_rejects_foreign_denominations(self):
        settings = RegisterSettings(denominations=[10, 5, 1], initial_stock={"1": 5})
        register = CashRegister.from_settings(settings)

        with pytest.raises(InvalidInventoryEntry):
            register.settle({"amountDue": 7, "totalGiven": {"20": 1}})

    def test_starts_from_configured_inventory(self):
        settings = RegisterSettings(initial_stock={"1": 3})

        register = CashRegister.from_settings(settings)

        assert register.get_inventory() == settings.starting_inventory()
        assert register.get_inventory().total() == Amount.of(3)

    def test_stock_outside_ladder_fails_at_construction(self):
        settings = RegisterSettings(denominations=[10, 5], initial_stock={"1": 5})

        with pytest.raises(InvalidInventoryEntry):
            CashRegister.from_settings(settings)

    def test_configured_default_strategy(self):
        register = CashRegister.from_settings(RegisterSettings(default_strategy="maxSmall"))

        result = register.settle({"amountDue": "98.5", "totalGiven": {"100": 1}})

        assert result.change.to_dict() == {"0.1": 5, "0.05": 20}

    def test_repr(self):
        register = CashRegister(Inventory({"20": 1}))
        assert repr(register) == "CashRegister(total=20.00, settled=0)"
